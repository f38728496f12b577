"""The two resource kinds a pair is made of.

Both expose the same four steps: issue a create, wait for readiness, issue a
delete, wait for disappearance. Errors are never filtered here; whether an
error is tolerable is decided by the orchestrator.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

from kubepair.backend.base import ClusterBackend
from kubepair.backend.manifests import DEFAULT_LABELS, build_compute_unit, build_storage_claim
from kubepair.config import (
    DEFAULT_COMMAND,
    DEFAULT_MOUNT_PATH,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_TIMEOUT_SECONDS,
)
from kubepair.exceptions import NotFoundError
from kubepair.logger import Logger, session_logger

from stress.core.poller import poll
from stress.core.timing import Timing


class Resource(ABC):
    kind: str = "resource"

    def __init__(
        self,
        name: str,
        namespace: str,
        backend: ClusterBackend,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT_SECONDS,
        logger: Logger | None = None,
    ) -> None:
        self.name = name
        self.namespace = namespace
        self.timing = Timing()
        self._backend = backend
        self._poll_interval = poll_interval
        self._poll_timeout = poll_timeout
        self._logger = logger or session_logger

    @property
    def ref(self) -> str:
        return f"{self.namespace}/{self.name}"

    async def create(self) -> None:
        self._log_step("resource.create_started")
        manifest = self.manifest()
        self.timing.begin()
        await asyncio.to_thread(self._backend_create, manifest)
        self._log_step("resource.create_issued")

    async def wait_create(self) -> None:
        async def _ready() -> bool:
            self._log_step("resource.waiting_ready", level="debug")
            return await asyncio.to_thread(self._backend_is_ready)

        attempts = await poll(self._poll_interval, self._poll_timeout, _ready)
        duration = self.timing.finish()
        self._log_step("resource.ready", attempts=attempts, duration_seconds=duration)

    async def delete(self) -> None:
        self._log_step("resource.delete_started")
        self.timing.begin()
        await asyncio.to_thread(self._backend_delete)
        self._log_step("resource.delete_issued")

    async def wait_delete(self) -> None:
        async def _gone() -> bool:
            self._log_step("resource.waiting_deleted", level="debug")
            try:
                await asyncio.to_thread(self._backend_is_ready)
            except NotFoundError:
                return True
            return False

        attempts = await poll(self._poll_interval, self._poll_timeout, _gone)
        duration = self.timing.finish()
        self._log_step("resource.deleted", attempts=attempts, duration_seconds=duration)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name}
        payload.update(self.timing.to_dict())
        return payload

    @abstractmethod
    def manifest(self) -> dict[str, Any]: ...

    @abstractmethod
    def _backend_create(self, manifest: dict[str, Any]) -> None: ...

    @abstractmethod
    def _backend_is_ready(self) -> bool: ...

    @abstractmethod
    def _backend_delete(self) -> None: ...

    def _log_step(self, event: str, *, level: str = "info", **fields: Any) -> None:
        getattr(self._logger, level)(
            event,
            event=event,
            kind=self.kind,
            namespace=self.namespace,
            name=self.name,
            **fields,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.ref!r})"


class StorageClaim(Resource):
    """A PersistentVolumeClaim; ready once its phase is Bound."""

    kind = "storage_claim"

    def __init__(
        self,
        name: str,
        namespace: str,
        backend: ClusterBackend,
        *,
        size: str,
        storage_class: str | None = None,
        labels: Mapping[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, namespace, backend, **kwargs)
        self.size = size
        self.storage_class = storage_class
        self.labels = dict(labels if labels is not None else DEFAULT_LABELS)

    def manifest(self) -> dict[str, Any]:
        return build_storage_claim(self.namespace, self.name, self.size, self.storage_class, self.labels)

    def _backend_create(self, manifest: dict[str, Any]) -> None:
        self._backend.create_storage_claim(manifest)

    def _backend_is_ready(self) -> bool:
        return self._backend.get_storage_claim(self.namespace, self.name).bound

    def _backend_delete(self) -> None:
        self._backend.delete_storage_claim(self.namespace, self.name)


class ComputeUnit(Resource):
    """A Pod mounting one storage claim; ready once its Ready condition is True."""

    kind = "compute_unit"

    def __init__(
        self,
        name: str,
        namespace: str,
        backend: ClusterBackend,
        *,
        image: str,
        claim_name: str,
        labels: Mapping[str, str] | None = None,
        command: Sequence[str] = DEFAULT_COMMAND,
        mount_path: str = DEFAULT_MOUNT_PATH,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, namespace, backend, **kwargs)
        self.image = image
        self._claim_name = claim_name
        self.labels = dict(labels if labels is not None else DEFAULT_LABELS)
        self.command = tuple(command)
        self.mount_path = mount_path

    @property
    def claim_name(self) -> str:
        return self._claim_name

    def manifest(self) -> dict[str, Any]:
        return build_compute_unit(
            self.namespace,
            self.name,
            self.image,
            self._claim_name,
            labels=self.labels,
            command=self.command,
            mount_path=self.mount_path,
        )

    def _backend_create(self, manifest: dict[str, Any]) -> None:
        self._backend.create_compute_unit(manifest)

    def _backend_is_ready(self) -> bool:
        return self._backend.get_compute_unit(self.namespace, self.name).ready

    def _backend_delete(self) -> None:
        self._backend.delete_compute_unit(self.namespace, self.name)
