from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Timing:
    """Start/end capture for one phase of a resource.

    Wall-clock ``start``/``end`` are for reporting; ``duration`` is measured
    on the monotonic clock and is only set by ``finish()``, once per phase.
    """

    start: datetime | None = None
    end: datetime | None = None
    duration: float | None = None
    _started_monotonic: float | None = field(default=None, repr=False, compare=False)

    def begin(self) -> None:
        """Start a new phase, discarding any previous measurement."""
        self.start = _utcnow()
        self.end = None
        self.duration = None
        self._started_monotonic = time.perf_counter()

    def finish(self) -> float | None:
        """Stamp the end of the current phase.

        A second call within the same phase is a no-op and returns the
        duration recorded by the first.
        """
        if self.duration is not None:
            return self.duration
        if self._started_monotonic is None:
            # wait without a prior issue call: measure from now
            self.begin()
        assert self._started_monotonic is not None
        self.end = _utcnow()
        self.duration = max(time.perf_counter() - self._started_monotonic, 0.0)
        return self.duration

    @property
    def completed(self) -> bool:
        return self.duration is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "duration": self.duration,
        }
