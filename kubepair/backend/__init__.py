"""Cluster backend collaborators.

``KubernetesBackend`` is imported lazily by callers so that importing this
package does not require cluster credentials.
"""

from kubepair.backend.base import CLAIM_BOUND, CLAIM_PENDING, ClaimStatus, ClusterBackend, UnitStatus
from kubepair.backend.manifests import build_compute_unit, build_storage_claim

__all__ = [
    "CLAIM_BOUND",
    "CLAIM_PENDING",
    "ClaimStatus",
    "ClusterBackend",
    "UnitStatus",
    "build_compute_unit",
    "build_storage_claim",
]
