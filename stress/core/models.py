from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from kubepair.config import (
    APP_NAME,
    DEFAULT_CLAIM_SIZE,
    DEFAULT_COMMAND,
    DEFAULT_IMAGE,
    DEFAULT_MAX_STAGGER_SECONDS,
    DEFAULT_MOUNT_PATH,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_TIMEOUT_SECONDS,
)

from stress.core.resources import ComputeUnit, StorageClaim


class Mode(str, Enum):
    """What a run does to the fleet.

    provision: create each pair and wait until bound/ready
    decommission: delete each pair (foreground) and wait until gone
    """

    PROVISION = "provision"
    DECOMMISSION = "decommission"


def pair_name(prefix: str, index: int) -> str:
    return f"{prefix}-{index:04d}"


@dataclass(frozen=True)
class RunConfig:
    namespace: str
    prefix: str
    count: int
    mode: Mode
    image: str = DEFAULT_IMAGE
    storage_class: str | None = None
    claim_size: str = DEFAULT_CLAIM_SIZE
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    poll_timeout_seconds: float = DEFAULT_POLL_TIMEOUT_SECONDS
    max_stagger_seconds: float = DEFAULT_MAX_STAGGER_SECONDS
    labels: dict[str, str] = field(default_factory=lambda: {"app": APP_NAME})
    mount_path: str = DEFAULT_MOUNT_PATH
    command: tuple[str, ...] = DEFAULT_COMMAND
    seed: int | None = None


@dataclass(frozen=True)
class ResourcePair:
    name: str
    namespace: str
    claim: StorageClaim
    unit: ComputeUnit

    def resources(self) -> tuple[StorageClaim, ComputeUnit]:
        return self.claim, self.unit


class WorkflowState(str, Enum):
    PENDING = "pending"
    ISSUED = "issued"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class WorkflowOutcome:
    """What one resource's workflow ended with. Errors are in the order raised."""

    resource: StorageClaim | ComputeUnit
    state: WorkflowState
    errors: list[BaseException] = field(default_factory=list)


@dataclass
class RunResult:
    namespace: str
    mode: Mode
    claims: list[StorageClaim] = field(default_factory=list)
    units: list[ComputeUnit] = field(default_factory=list)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    duration_seconds: float = 0.0
    workflows_launched: int = 0
    workflows_completed: int = 0
    # Keyed by error code, tolerated and fatal alike.
    error_counts: dict[str, int] = field(default_factory=dict)

    @property
    def pair_count(self) -> int:
        return len(self.claims)

    def to_dict(self) -> dict[str, Any]:
        return {
            "namespace": self.namespace,
            "mode": self.mode.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_seconds": self.duration_seconds,
            "workflows_launched": self.workflows_launched,
            "workflows_completed": self.workflows_completed,
            "error_counts": dict(self.error_counts),
            "storage_claims": [claim.to_dict() for claim in self.claims],
            "compute_units": [unit.to_dict() for unit in self.units],
        }
