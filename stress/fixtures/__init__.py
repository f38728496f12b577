"""In-process cluster backend for CI-safe runs."""

from __future__ import annotations

__all__ = ["MemoryBackend"]

from stress.fixtures.memory_backend import MemoryBackend
