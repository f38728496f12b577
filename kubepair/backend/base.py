"""The backend capability the harness consumes.

Implementations raise ``AlreadyExistsError`` / ``NotFoundError`` for those two
conditions and ``BackendError`` for anything else. All methods are blocking;
the harness calls them from worker threads, so implementations must tolerate
concurrent calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

CLAIM_BOUND = "Bound"
CLAIM_PENDING = "Pending"

STORAGE_CLAIM_KIND = "PersistentVolumeClaim"
COMPUTE_UNIT_KIND = "Pod"


@dataclass(frozen=True)
class ClaimStatus:
    phase: str

    @property
    def bound(self) -> bool:
        return self.phase == CLAIM_BOUND


@dataclass(frozen=True)
class UnitStatus:
    ready: bool
    phase: str | None = None


class ClusterBackend(Protocol):
    def create_storage_claim(self, manifest: dict[str, Any]) -> None: ...

    def get_storage_claim(self, namespace: str, name: str) -> ClaimStatus: ...

    def delete_storage_claim(self, namespace: str, name: str) -> None: ...

    def create_compute_unit(self, manifest: dict[str, Any]) -> None: ...

    def get_compute_unit(self, namespace: str, name: str) -> UnitStatus: ...

    def delete_compute_unit(self, namespace: str, name: str) -> None: ...
