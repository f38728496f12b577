"""Structured logger on top of the standard ``logging`` module.

Every call takes a message plus arbitrary keyword fields. Fields are rendered
either as ``key=value`` pairs or, with ``json_format=True``, as one JSON
object per line. Secret-looking fields are redacted and oversized strings
are truncated before rendering.
"""

from __future__ import annotations

import json
import logging
import sys
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, TextIO

REDACTED = "[REDACTED]"
TRUNCATION_SUFFIX = "...[truncated]"
MAX_FIELD_LENGTH = 2048

_SECRET_MARKERS = (
    "token",
    "password",
    "secret",
    "api_key",
    "apikey",
    "authorization",
    "credential",
)


class Logger(ABC):
    """Interface every logger in the project implements."""

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None: ...

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None: ...

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None: ...

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None: ...

    @abstractmethod
    def critical(self, message: str, **kwargs: Any) -> None: ...


def _is_secret(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def sanitize_fields(fields: dict[str, Any], max_length: int = MAX_FIELD_LENGTH) -> dict[str, Any]:
    """Redact secret fields and truncate long string values."""
    clean: dict[str, Any] = {}
    for key, value in fields.items():
        if _is_secret(key) and value is not None:
            clean[key] = REDACTED
            continue
        if isinstance(value, str) and len(value) > max_length:
            value = value[:max_length] + TRUNCATION_SUFFIX
        clean[key] = value
    return clean


class StructuredLogger(Logger):
    """Logger writing structured records through a stdlib ``logging.Logger``."""

    def __init__(
        self,
        name: str = "kubepair",
        *,
        level: int = logging.INFO,
        json_format: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self.name = name
        self.json_format = json_format
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Re-creating a logger with the same name must not duplicate output.
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)

        handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        self._logger.addHandler(handler)

    def set_level(self, level: int | str) -> None:
        if isinstance(level, str):
            level = getattr(logging, level.upper(), logging.INFO)
        self._logger.setLevel(level)

    @property
    def level(self) -> int:
        return self._logger.level

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, fields: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, self._render(level, message, sanitize_fields(fields)))

    def _render(self, level: int, message: str, fields: dict[str, Any]) -> str:
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        level_name = logging.getLevelName(level)

        if self.json_format:
            record: dict[str, Any] = {
                "timestamp": timestamp,
                "level": level_name,
                "logger": self.name,
                "message": message,
            }
            record.update(fields)
            return json.dumps(record, default=str)

        parts = [f"{timestamp} [{level_name}] {self.name}: {message}"]
        parts.extend(f"{key}={_format_value(value)}" for key, value in fields.items())
        return " ".join(parts)


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value) if (" " in value or not value) else value
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)
