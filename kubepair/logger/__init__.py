"""Logger module for kubepair

Usage:
    from kubepair.logger import Logger, session_logger

    session_logger.info("run.start", event="run.start", count=3)

    # Or implement your own
    class MyCustomLogger(Logger):
        def info(self, message: str, **kwargs):
            # Your custom implementation
            pass
"""

import logging
import os
import sys

from .structured import Logger, StructuredLogger, sanitize_fields


class ConsoleLogger(StructuredLogger):
    """Human-readable key=value logger writing to stderr."""

    def __init__(self, name: str = "kubepair", level: int = logging.INFO) -> None:
        super().__init__(name, level=level, json_format=False, stream=sys.stderr)


class DefaultLogger(StructuredLogger):
    """JSON-lines logger writing to stdout, for log shippers."""

    def __init__(self, name: str = "kubepair", level: int = logging.INFO) -> None:
        super().__init__(name, level=level, json_format=True, stream=sys.stdout)


def _logger_from_env() -> Logger:
    level = getattr(logging, os.environ.get("KUBEPAIR_LOG_LEVEL", "INFO").upper(), logging.INFO)
    if os.environ.get("KUBEPAIR_LOG_JSON", "").lower() in ("1", "true", "yes"):
        return DefaultLogger(level=level)
    return ConsoleLogger(level=level)


# Shared logger instance for modules that just need basic console logging
session_logger: Logger = _logger_from_env()

__all__ = [
    "Logger",
    "StructuredLogger",
    "DefaultLogger",
    "ConsoleLogger",
    "sanitize_fields",
    "session_logger",
]
