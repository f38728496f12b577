"""Pytest configuration and fixtures

Provides shared fixtures for all tests: a quiet logger that writes into a
buffer, a fresh in-memory cluster backend and a RunConfig factory tuned for
fast polling.
"""

import io
import json
import sys
import uuid
from pathlib import Path

import pytest

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from kubepair.logger import StructuredLogger  # noqa: E402

from stress.fixtures.memory_backend import MemoryBackend  # noqa: E402
from stress.scenarios.lifecycle import build_run_config  # noqa: E402


class BufferedLogger(StructuredLogger):
    """StructuredLogger writing JSON lines into an in-memory buffer."""

    def __init__(self, level: str = "DEBUG") -> None:
        self.buffer = io.StringIO()
        # Unique name so tests never share stdlib logger handlers.
        super().__init__(f"kubepair.test.{uuid.uuid4().hex[:8]}", json_format=True, stream=self.buffer)
        self.set_level(level)

    def lines(self) -> list[str]:
        return [line for line in self.buffer.getvalue().splitlines() if line]

    def events(self) -> list[str]:
        return [json.loads(line)["message"] for line in self.lines()]


@pytest.fixture(scope="function")
def quiet_logger():
    """
    Provide a logger that captures JSON records instead of printing them.

    Usage:
        async def test_something(quiet_logger):
            ...
            assert "run.end" in quiet_logger.events()
    """
    return BufferedLogger()


@pytest.fixture(scope="function")
def memory_backend():
    """Fresh in-memory backend; claims bind and pods become ready on the first read."""
    return MemoryBackend()


@pytest.fixture(scope="function")
def make_config():
    """
    Factory for RunConfig objects with short poll intervals and no stagger.

    Usage:
        config = make_config(prefix="sp", count=2)
    """

    def _make(**overrides):
        overrides.setdefault("poll_interval_seconds", 0.01)
        overrides.setdefault("poll_timeout_seconds", 5.0)
        return build_run_config(**overrides)

    return _make
