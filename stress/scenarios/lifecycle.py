"""Lifecycle scenario: provision a fleet of pairs, then tear it down again.

Usage as library::

    from stress.fixtures.memory_backend import MemoryBackend
    from stress.scenarios.lifecycle import run_round_trip

    provisioned, decommissioned = await run_round_trip(
        MemoryBackend(), namespace="bench", prefix="rt", count=5
    )

Both passes use the same names, so every pair created by the first pass is
removed by the second.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from kubepair.backend.base import ClusterBackend
from kubepair.config import APP_NAME, DEFAULT_NAMESPACE
from kubepair.logger import Logger

from stress.core.engine import Orchestrator
from stress.core.models import Mode, RunConfig, RunResult


def build_run_config(
    *,
    mode: Mode = Mode.PROVISION,
    namespace: str = DEFAULT_NAMESPACE,
    prefix: str = APP_NAME,
    count: int = 3,
    poll_interval_seconds: float = 0.05,
    poll_timeout_seconds: float = 30.0,
    max_stagger_seconds: float = 0.0,
    **overrides: Any,
) -> RunConfig:
    """Build a ``RunConfig`` tuned for fast runs against the memory backend.

    Pass real intervals for a run against a cluster.
    """
    return RunConfig(
        namespace=namespace,
        prefix=prefix,
        count=count,
        mode=mode,
        poll_interval_seconds=poll_interval_seconds,
        poll_timeout_seconds=poll_timeout_seconds,
        max_stagger_seconds=max_stagger_seconds,
        **overrides,
    )


async def run_round_trip(
    backend: ClusterBackend,
    *,
    logger: Logger | None = None,
    **config_kwargs: Any,
) -> tuple[RunResult, RunResult]:
    """Provision then decommission the same pairs; return both results."""
    config_kwargs.pop("mode", None)
    provision_config = build_run_config(mode=Mode.PROVISION, **config_kwargs)
    provisioned = await Orchestrator(provision_config, backend, logger=logger).run()

    decommission_config = dataclasses.replace(provision_config, mode=Mode.DECOMMISSION)
    decommissioned = await Orchestrator(decommission_config, backend, logger=logger).run()
    return provisioned, decommissioned
