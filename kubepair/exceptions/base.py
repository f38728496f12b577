"""Base exception classes for kubepair.

Every error carries a machine-readable ``code``, a human ``message`` and an
optional ``details`` dict, so failures can be logged and reported without
parsing strings.
"""

from __future__ import annotations

from typing import Any


class KubePairError(Exception):
    """Base class for all kubepair errors."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        self.code = code
        self.message = message
        self.details: dict[str, Any] = dict(details) if details else {}
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"


class ValidationError(KubePairError):
    """Raised when caller-supplied input is invalid."""

    pass


class ConfigurationError(KubePairError):
    """Raised when the environment or backend configuration is unusable."""

    pass
