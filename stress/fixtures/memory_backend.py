"""In-memory cluster backend for dry runs and tests.

Behaves like a small, well-behaved control plane:

- a storage claim reports ``Bound`` from its ``ready_after_polls``-th status
  read onwards;
- a compute unit reports ready from its ``ready_after_polls``-th read, but
  only once the claim it mounts exists and is bound (``require_bound_claim``);
- a delete marks the object terminating; it disappears on the
  ``delete_after_polls``-th read after that. A claim still mounted by an
  existing compute unit is held until the unit is gone (``hold_claims_in_use``).

Failures can be injected per operation and object name.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any

from kubepair.backend.base import (
    CLAIM_BOUND,
    CLAIM_PENDING,
    COMPUTE_UNIT_KIND,
    STORAGE_CLAIM_KIND,
    ClaimStatus,
    UnitStatus,
)
from kubepair.backend.manifests import claim_name_of, manifest_identity
from kubepair.exceptions import AlreadyExistsError, NotFoundError

OPERATIONS = frozenset(
    {
        "create_storage_claim",
        "get_storage_claim",
        "delete_storage_claim",
        "create_compute_unit",
        "get_compute_unit",
        "delete_compute_unit",
    }
)


@dataclass
class _StoredObject:
    kind: str
    manifest: dict[str, Any]
    reads: int = 0
    terminating: bool = False
    reads_since_delete: int = 0


@dataclass
class _Failure:
    operation: str
    name: str
    error: BaseException
    namespace: str | None
    remaining: int


class MemoryBackend:
    def __init__(
        self,
        *,
        ready_after_polls: int = 1,
        delete_after_polls: int = 1,
        require_bound_claim: bool = True,
        hold_claims_in_use: bool = True,
        latency_seconds: float = 0.0,
    ) -> None:
        if ready_after_polls < 1:
            raise ValueError("ready_after_polls must be >= 1")
        if delete_after_polls < 0:
            raise ValueError("delete_after_polls must be >= 0")
        self.ready_after_polls = ready_after_polls
        self.delete_after_polls = delete_after_polls
        self.require_bound_claim = require_bound_claim
        self.hold_claims_in_use = hold_claims_in_use
        self.latency_seconds = latency_seconds

        self._lock = threading.Lock()
        self._objects: dict[tuple[str, str, str], _StoredObject] = {}
        self._failures: list[_Failure] = []
        self.calls: list[tuple[str, str, str]] = []

    # -- test helpers -------------------------------------------------------

    def inject_failure(
        self,
        operation: str,
        name: str,
        error: BaseException,
        *,
        namespace: str | None = None,
        times: int = 1,
    ) -> None:
        """Make the next ``times`` calls of ``operation`` on ``name`` raise ``error``."""
        if operation not in OPERATIONS:
            raise ValueError(f"unknown operation: {operation}")
        with self._lock:
            self._failures.append(_Failure(operation, name, error, namespace, times))

    def exists(self, kind: str, namespace: str, name: str) -> bool:
        with self._lock:
            return (kind, namespace, name) in self._objects

    def names(self, kind: str, namespace: str | None = None) -> list[str]:
        with self._lock:
            return sorted(
                name for (k, ns, name) in self._objects if k == kind and (namespace is None or ns == namespace)
            )

    def call_count(self, operation: str, name: str | None = None) -> int:
        with self._lock:
            return sum(1 for op, _, n in self.calls if op == operation and (name is None or n == name))

    # -- ClusterBackend -----------------------------------------------------

    def create_storage_claim(self, manifest: dict[str, Any]) -> None:
        self._create("create_storage_claim", STORAGE_CLAIM_KIND, manifest)

    def get_storage_claim(self, namespace: str, name: str) -> ClaimStatus:
        with self._lock:
            obj = self._read("get_storage_claim", STORAGE_CLAIM_KIND, namespace, name)
            bound = obj.reads >= self.ready_after_polls
        self._delay()
        return ClaimStatus(phase=CLAIM_BOUND if bound else CLAIM_PENDING)

    def delete_storage_claim(self, namespace: str, name: str) -> None:
        self._delete("delete_storage_claim", STORAGE_CLAIM_KIND, namespace, name)

    def create_compute_unit(self, manifest: dict[str, Any]) -> None:
        self._create("create_compute_unit", COMPUTE_UNIT_KIND, manifest)

    def get_compute_unit(self, namespace: str, name: str) -> UnitStatus:
        with self._lock:
            obj = self._read("get_compute_unit", COMPUTE_UNIT_KIND, namespace, name)
            ready = obj.reads >= self.ready_after_polls
            if ready and self.require_bound_claim:
                ready = self._claim_bound(namespace, claim_name_of(obj.manifest))
        self._delay()
        return UnitStatus(ready=ready, phase="Running" if ready else "Pending")

    def delete_compute_unit(self, namespace: str, name: str) -> None:
        self._delete("delete_compute_unit", COMPUTE_UNIT_KIND, namespace, name)

    # -- internals (callers hold the lock unless noted) ---------------------

    def _create(self, operation: str, kind: str, manifest: dict[str, Any]) -> None:
        namespace, name = manifest_identity(manifest)
        with self._lock:
            self._record(operation, namespace, name)
            key = (kind, namespace, name)
            if key in self._objects:
                raise AlreadyExistsError(kind, namespace, name)
            self._objects[key] = _StoredObject(kind=kind, manifest=manifest)
        self._delay()

    def _read(self, operation: str, kind: str, namespace: str, name: str) -> _StoredObject:
        self._record(operation, namespace, name)
        key = (kind, namespace, name)
        obj = self._objects.get(key)
        if obj is None:
            raise NotFoundError(kind, namespace, name)

        if obj.terminating:
            obj.reads_since_delete += 1
            if obj.reads_since_delete >= self.delete_after_polls and self._may_remove(obj, namespace, name):
                del self._objects[key]
                raise NotFoundError(kind, namespace, name)
            return obj

        obj.reads += 1
        return obj

    def _delete(self, operation: str, kind: str, namespace: str, name: str) -> None:
        with self._lock:
            self._record(operation, namespace, name)
            key = (kind, namespace, name)
            obj = self._objects.get(key)
            if obj is None:
                raise NotFoundError(kind, namespace, name)
            obj.terminating = True
            if self.delete_after_polls == 0 and self._may_remove(obj, namespace, name):
                del self._objects[key]
        self._delay()

    def _may_remove(self, obj: _StoredObject, namespace: str, name: str) -> bool:
        if obj.kind != STORAGE_CLAIM_KIND or not self.hold_claims_in_use:
            return True
        for (kind, ns, _), other in self._objects.items():
            if kind == COMPUTE_UNIT_KIND and ns == namespace and claim_name_of(other.manifest) == name:
                return False
        return True

    def _claim_bound(self, namespace: str, claim_name: str | None) -> bool:
        if claim_name is None:
            return True
        claim = self._objects.get((STORAGE_CLAIM_KIND, namespace, claim_name))
        return claim is not None and not claim.terminating and claim.reads >= self.ready_after_polls

    def _record(self, operation: str, namespace: str, name: str) -> None:
        self.calls.append((operation, namespace, name))
        for failure in self._failures:
            if failure.operation != operation or failure.name != name:
                continue
            if failure.namespace is not None and failure.namespace != namespace:
                continue
            if failure.remaining <= 0:
                continue
            failure.remaining -= 1
            raise failure.error

    def _delay(self) -> None:
        # Runs outside the lock, on the caller's worker thread.
        if self.latency_seconds > 0:
            time.sleep(self.latency_seconds)
