from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from kubepair.exceptions import DeadlineExceededError, ValidationError

Condition = Callable[[], Awaitable[bool]]


async def poll(interval: float, timeout: float, condition: Condition) -> int:
    """Evaluate ``condition`` immediately, then every ``interval`` seconds.

    Returns the number of evaluations once the condition returns True.
    An exception raised by the condition propagates unchanged. When
    ``timeout`` elapses without success, a final evaluation is made at the
    deadline and then ``DeadlineExceededError`` is raised.
    """
    if interval <= 0:
        raise ValidationError("INVALID_POLL_INTERVAL", "poll interval must be > 0", {"interval": interval})
    if timeout < 0:
        raise ValidationError("INVALID_POLL_TIMEOUT", "poll timeout must be >= 0", {"timeout": timeout})

    deadline = time.monotonic() + timeout
    attempts = 0

    while True:
        attempts += 1
        if await condition():
            return attempts

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise DeadlineExceededError(timeout, attempts)
        await asyncio.sleep(min(interval, remaining))
