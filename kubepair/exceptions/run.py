"""Run-level failure raised by the orchestrator."""

from __future__ import annotations

from typing import Any

from kubepair.exceptions.base import KubePairError


class FatalRunError(KubePairError):
    """An intolerable error was observed during a run.

    ``cause`` is the first fatal error observed, ``errors`` holds every fatal
    error in observation order and ``result`` the partial run result, so the
    caller can still report the timings that were collected.
    """

    def __init__(self, cause: BaseException, errors: list[BaseException], result: Any = None) -> None:
        self.cause = cause
        self.errors = list(errors)
        self.result = result
        super().__init__(
            "FATAL_RUN_ERROR",
            f"run failed: {cause}",
            {"fatal_error_count": len(self.errors), "cause_type": type(cause).__name__},
        )
