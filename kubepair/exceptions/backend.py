"""Backend and polling exceptions.

``AlreadyExistsError`` and ``NotFoundError`` subclass ``BackendError`` so that
callers which do not care about the distinction can catch the base class,
while the orchestrator classifies on the subclasses.
"""

from __future__ import annotations

from typing import Any

from kubepair.exceptions.base import KubePairError


class BackendError(KubePairError):
    """Any non-success response from the cluster backend."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "BACKEND_ERROR",
        status: int | None = None,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged: dict[str, Any] = dict(details or {})
        if status is not None:
            merged["status"] = status
        if reason:
            merged["reason"] = reason
        self.status = status
        self.reason = reason
        super().__init__(code, message, merged)


class AlreadyExistsError(BackendError):
    """The object being created already exists."""

    def __init__(self, kind: str, namespace: str, name: str, **kwargs: Any) -> None:
        kwargs.setdefault("status", 409)
        kwargs.setdefault("reason", "AlreadyExists")
        details = {"kind": kind, "namespace": namespace, "name": name}
        details.update(kwargs.pop("details", None) or {})
        super().__init__(
            f"{kind} {namespace}/{name} already exists",
            code="ALREADY_EXISTS",
            details=details,
            **kwargs,
        )


class NotFoundError(BackendError):
    """The object being read or deleted does not exist."""

    def __init__(self, kind: str, namespace: str, name: str, **kwargs: Any) -> None:
        kwargs.setdefault("status", 404)
        kwargs.setdefault("reason", "NotFound")
        details = {"kind": kind, "namespace": namespace, "name": name}
        details.update(kwargs.pop("details", None) or {})
        super().__init__(
            f"{kind} {namespace}/{name} not found",
            code="NOT_FOUND",
            details=details,
            **kwargs,
        )


class DeadlineExceededError(KubePairError):
    """A poll did not reach its target condition before the timeout."""

    def __init__(self, timeout_seconds: float, attempts: int, details: dict[str, Any] | None = None) -> None:
        merged = {"timeout_seconds": timeout_seconds, "attempts": attempts}
        merged.update(details or {})
        self.timeout_seconds = timeout_seconds
        self.attempts = attempts
        super().__init__(
            "DEADLINE_EXCEEDED",
            f"condition not met within {timeout_seconds}s after {attempts} attempt(s)",
            merged,
        )
