from __future__ import annotations

import asyncio
import random
import re
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from kubepair.backend.base import ClusterBackend
from kubepair.errors import ErrorKind, classify_error, get_error_code, get_recovery_strategy
from kubepair.exceptions import DeadlineExceededError, FatalRunError, ValidationError
from kubepair.logger import Logger, session_logger

from stress.core.models import (
    Mode,
    ResourcePair,
    RunConfig,
    RunResult,
    WorkflowOutcome,
    WorkflowState,
    pair_name,
)
from stress.core.resources import ComputeUnit, Resource, StorageClaim

# Pod and container names are DNS-1123 labels; a pair name adds "-NNNN".
_PREFIX_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
_MAX_PREFIX_LENGTH = 63 - 5

_TOLERATED: dict[Mode, ErrorKind] = {
    Mode.PROVISION: ErrorKind.ALREADY_EXISTS,
    Mode.DECOMMISSION: ErrorKind.NOT_FOUND,
}


class Orchestrator:
    """Runs one provision or decommission pass over ``config.count`` pairs.

    Every pair gets two independent workflows (claim and unit). All launched
    workflows are joined before ``run`` returns, also when the run has
    already failed; a failed run raises ``FatalRunError``.
    """

    def __init__(
        self,
        config: RunConfig,
        backend: ClusterBackend,
        *,
        logger: Logger | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._backend = backend
        self._logger = logger or session_logger
        self._sleep = sleep
        self._rng = random.Random(config.seed)
        self._fatal_errors: list[BaseException] = []
        self._error_counts: dict[str, int] = {}

    @property
    def config(self) -> RunConfig:
        return self._config

    def build_pairs(self) -> list[ResourcePair]:
        cfg = self._config
        timing_opts = {
            "poll_interval": cfg.poll_interval_seconds,
            "poll_timeout": cfg.poll_timeout_seconds,
            "logger": self._logger,
        }
        pairs: list[ResourcePair] = []
        for index in range(1, cfg.count + 1):
            name = pair_name(cfg.prefix, index)
            claim = StorageClaim(
                name,
                cfg.namespace,
                self._backend,
                size=cfg.claim_size,
                storage_class=cfg.storage_class,
                labels=cfg.labels,
                **timing_opts,
            )
            unit = ComputeUnit(
                name,
                cfg.namespace,
                self._backend,
                image=cfg.image,
                claim_name=name,
                labels=cfg.labels,
                command=cfg.command,
                mount_path=cfg.mount_path,
                **timing_opts,
            )
            pairs.append(ResourcePair(name=name, namespace=cfg.namespace, claim=claim, unit=unit))
        return pairs

    async def run(self) -> RunResult:
        validate_config(self._config)
        cfg = self._config
        self._fatal_errors = []
        self._error_counts = {}

        pairs = self.build_pairs()
        result = RunResult(namespace=cfg.namespace, mode=cfg.mode)
        for pair in pairs:
            result.claims.append(pair.claim)
            result.units.append(pair.unit)

        result.started_at = datetime.now(timezone.utc)
        started = time.monotonic()
        self._logger.info(
            "run.start",
            event="run.start",
            mode=cfg.mode.value,
            namespace=cfg.namespace,
            prefix=cfg.prefix,
            count=cfg.count,
            poll_interval_seconds=cfg.poll_interval_seconds,
            poll_timeout_seconds=cfg.poll_timeout_seconds,
            max_stagger_seconds=cfg.max_stagger_seconds,
        )

        tasks: list[asyncio.Task[WorkflowOutcome]] = []
        for index, pair in enumerate(pairs):
            if self._fatal_errors:
                self._logger.warning(
                    "run.launch_halted",
                    event="run.launch_halted",
                    launched_pairs=index,
                    skipped_pairs=len(pairs) - index,
                )
                break
            for resource in pair.resources():
                tasks.append(
                    asyncio.create_task(
                        self._workflow(resource),
                        name=f"{cfg.mode.value}:{resource.kind}:{resource.name}",
                    )
                )
            if index < len(pairs) - 1:
                await self._stagger()

        result.workflows_launched = len(tasks)
        # Workflows never raise; every launched task is drained here.
        outcomes = await asyncio.gather(*tasks)

        result.workflows_completed = len(outcomes)
        result.error_counts = dict(self._error_counts)
        result.ended_at = datetime.now(timezone.utc)
        result.duration_seconds = time.monotonic() - started

        if self._fatal_errors:
            self._logger.error(
                "run.failed",
                event="run.failed",
                mode=cfg.mode.value,
                namespace=cfg.namespace,
                fatal_error_count=len(self._fatal_errors),
                workflows_completed=result.workflows_completed,
                duration_seconds=result.duration_seconds,
            )
            raise FatalRunError(self._fatal_errors[0], self._fatal_errors, result)

        self._logger.info(
            "run.end",
            event="run.end",
            mode=cfg.mode.value,
            namespace=cfg.namespace,
            pairs=result.pair_count,
            workflows_completed=result.workflows_completed,
            tolerated_errors=sum(result.error_counts.values()),
            duration_seconds=result.duration_seconds,
        )
        return result

    async def _workflow(self, resource: Resource) -> WorkflowOutcome:
        if self._config.mode is Mode.PROVISION:
            issue, wait = resource.create, resource.wait_create
        else:
            issue, wait = resource.delete, resource.wait_delete

        outcome = WorkflowOutcome(resource=resource, state=WorkflowState.PENDING)

        # An error from the issue step does not skip the wait step.
        try:
            await issue()
        except Exception as exc:
            outcome.errors.append(exc)
            self._observe_error(resource, "issue", exc)
        outcome.state = WorkflowState.ISSUED

        outcome.state = WorkflowState.WAITING
        try:
            await wait()
        except DeadlineExceededError as exc:
            outcome.errors.append(exc)
            outcome.state = WorkflowState.TIMED_OUT
            self._observe_error(resource, "wait", exc)
        except Exception as exc:
            outcome.errors.append(exc)
            outcome.state = WorkflowState.FAILED
            self._observe_error(resource, "wait", exc)
        else:
            outcome.state = WorkflowState.SUCCEEDED

        return outcome

    def _observe_error(self, resource: Resource, step: str, exc: BaseException) -> None:
        code = get_error_code(exc)
        self._error_counts[code] = self._error_counts.get(code, 0) + 1

        kind = classify_error(exc)
        if kind is _TOLERATED[self._config.mode]:
            self._logger.info(
                "run.error_tolerated",
                event="run.error_tolerated",
                kind=resource.kind,
                namespace=resource.namespace,
                name=resource.name,
                step=step,
                error_code=code,
            )
            return

        self._fatal_errors.append(exc)
        self._logger.error(
            "run.fatal_error",
            event="run.fatal_error",
            kind=resource.kind,
            namespace=resource.namespace,
            name=resource.name,
            step=step,
            error_code=code,
            error_type=type(exc).__name__,
            error=str(exc),
            first=len(self._fatal_errors) == 1,
            recovery=get_recovery_strategy(code, exc),
        )

    async def _stagger(self) -> None:
        if self._config.max_stagger_seconds <= 0:
            return
        await self._sleep(self._rng.uniform(0.0, self._config.max_stagger_seconds))


def validate_config(config: RunConfig) -> None:
    if not isinstance(config.mode, Mode):
        raise ValidationError("INVALID_MODE", "mode must be provision or decommission", {"mode": config.mode})
    if not isinstance(config.count, int) or isinstance(config.count, bool) or config.count < 0:
        raise ValidationError("INVALID_COUNT", "count must be a non-negative integer", {"count": config.count})
    if not config.namespace or not config.namespace.strip():
        raise ValidationError("INVALID_NAMESPACE", "namespace must be a non-empty string")
    if not config.prefix or not _PREFIX_RE.match(config.prefix) or len(config.prefix) > _MAX_PREFIX_LENGTH:
        raise ValidationError(
            "INVALID_PREFIX",
            f"prefix must be a lowercase DNS label of at most {_MAX_PREFIX_LENGTH} characters",
            {"prefix": config.prefix},
        )
    if config.poll_interval_seconds <= 0:
        raise ValidationError(
            "INVALID_POLL_INTERVAL", "poll interval must be > 0", {"interval": config.poll_interval_seconds}
        )
    if config.poll_timeout_seconds < 0:
        raise ValidationError(
            "INVALID_POLL_TIMEOUT", "poll timeout must be >= 0", {"timeout": config.poll_timeout_seconds}
        )
    if config.max_stagger_seconds < 0:
        raise ValidationError(
            "INVALID_STAGGER", "max stagger must be >= 0", {"max_stagger": config.max_stagger_seconds}
        )


async def run(
    namespace: str,
    prefix: str,
    count: int,
    mode: Mode | str,
    backend: ClusterBackend,
    *,
    logger: Logger | None = None,
    **options: Any,
) -> RunResult:
    """Build a ``RunConfig`` from arguments and run it."""
    try:
        resolved_mode = Mode(mode)
    except ValueError as exc:
        raise ValidationError("INVALID_MODE", "mode must be provision or decommission", {"mode": mode}) from exc
    config = RunConfig(namespace=namespace, prefix=prefix, count=count, mode=resolved_mode, **options)
    return await Orchestrator(config, backend, logger=logger).run()
