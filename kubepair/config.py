"""Environment-driven defaults for the CLI.

Values resolve from ``<PREFIX>_*`` environment variables and fall back to the
built-in defaults below. Nothing here is mutated at runtime; the CLI turns a
``Settings`` plus its arguments into an immutable ``RunConfig``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from kubepair.exceptions import ConfigurationError

APP_NAME = "kubepair"
DEFAULT_NAMESPACE = "default"
DEFAULT_IMAGE = "docker.io/alpine:latest"
DEFAULT_CLAIM_SIZE = "100m"
DEFAULT_COUNT = 3
DEFAULT_RESULTS_FILE = f"{APP_NAME}.json"
DEFAULT_MOUNT_PATH = "/mnt/test"
DEFAULT_COMMAND = ("tail", "-f", "/dev/null")

DEFAULT_POLL_INTERVAL_SECONDS = 5.0
DEFAULT_POLL_TIMEOUT_SECONDS = 30 * 60.0
DEFAULT_MAX_STAGGER_SECONDS = 3.0


@dataclass(frozen=True)
class Settings:
    namespace: str = DEFAULT_NAMESPACE
    prefix: str = APP_NAME
    image: str = DEFAULT_IMAGE
    storage_class: str | None = None
    claim_size: str = DEFAULT_CLAIM_SIZE
    count: int = DEFAULT_COUNT
    kubeconfig: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, prefix: str = "KUBEPAIR", environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        def _get(key: str) -> str | None:
            value = env.get(f"{prefix}_{key}")
            if value is None:
                return None
            value = value.strip()
            return value or None

        raw_count = _get("COUNT")
        count = DEFAULT_COUNT
        if raw_count is not None:
            try:
                count = int(raw_count)
            except ValueError as exc:
                raise ConfigurationError(
                    "INVALID_ENV",
                    f"{prefix}_COUNT must be an integer",
                    {"value": raw_count},
                ) from exc

        return cls(
            namespace=_get("NAMESPACE") or DEFAULT_NAMESPACE,
            prefix=_get("PREFIX") or APP_NAME,
            image=_get("IMAGE") or DEFAULT_IMAGE,
            storage_class=_get("STORAGE_CLASS"),
            claim_size=_get("CLAIM_SIZE") or DEFAULT_CLAIM_SIZE,
            count=count,
            kubeconfig=(env.get("KUBECONFIG") or "").strip() or None,
            log_level=_get("LOG_LEVEL") or "INFO",
        )
