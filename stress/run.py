from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from kubepair import __version__
from kubepair.backend.base import ClusterBackend
from kubepair.build_info import BUILD_NUMBER
from kubepair.config import (
    DEFAULT_MAX_STAGGER_SECONDS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_TIMEOUT_SECONDS,
    DEFAULT_RESULTS_FILE,
    Settings,
)
from kubepair.exceptions import ConfigurationError, FatalRunError, ValidationError
from kubepair.logger import StructuredLogger
from kubepair.logger import session_logger as logger

from stress.api.report import build_run_report
from stress.core.engine import Orchestrator
from stress.core.models import Mode, RunConfig
from stress.core.timeparse import parse_duration_to_seconds


def _build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubepair",
        description="Provision or decommission storage claim + pod pairs and time each one",
    )
    parser.add_argument(
        "mode",
        choices=[m.value for m in Mode],
        help="provision: create pairs and wait until bound/ready; decommission: delete them and wait until gone",
    )
    parser.add_argument(
        "--prefix",
        default=settings.prefix,
        help="Name prefix for pods and claims; pairs are named <prefix>-0001, <prefix>-0002, ...",
    )
    parser.add_argument("--namespace", default=settings.namespace, help="Namespace for the pairs")
    parser.add_argument("--count", type=int, default=settings.count, help="Number of pairs")
    parser.add_argument("--image", default=settings.image, help="Pod image")
    parser.add_argument(
        "--storage-class",
        default=settings.storage_class,
        help="Storage class of the claims (required with --backend kubernetes)",
    )
    parser.add_argument("--claim-size", default=settings.claim_size, help="Requested size of each claim")
    parser.add_argument(
        "--kubeconfig",
        default=settings.kubeconfig,
        help="Path to the kubeconfig file (defaults to $KUBECONFIG, then in-cluster config)",
    )
    parser.add_argument(
        "--backend",
        choices=["kubernetes", "memory"],
        default="kubernetes",
        help="kubernetes: a real cluster; memory: an in-process fake cluster for dry runs",
    )
    parser.add_argument(
        "--poll-interval",
        type=str,
        default=f"{DEFAULT_POLL_INTERVAL_SECONDS:g}s",
        help="Interval between status reads (e.g. 500ms, 5s)",
    )
    parser.add_argument(
        "--poll-timeout",
        type=str,
        default=f"{DEFAULT_POLL_TIMEOUT_SECONDS / 60:g}m",
        help="Per-resource wait deadline (e.g. 30m)",
    )
    parser.add_argument(
        "--max-stagger",
        type=str,
        default=f"{DEFAULT_MAX_STAGGER_SECONDS:g}s",
        help="Upper bound of the random pause between launching two pairs",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the stagger RNG")
    parser.add_argument(
        "--output",
        type=str,
        default=DEFAULT_RESULTS_FILE,
        help="Write the JSON report to this path",
    )
    parser.add_argument("--no-output", action="store_true", help="Do not write the JSON report file")
    parser.add_argument("--stdout", action="store_true", help="Also print the JSON report to stdout")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__} (build {BUILD_NUMBER})",
    )
    return parser


def _parse_durations(args) -> dict[str, float]:
    parsed: dict[str, float] = {}
    for option, key in (
        ("poll_interval", "poll_interval_seconds"),
        ("poll_timeout", "poll_timeout_seconds"),
        ("max_stagger", "max_stagger_seconds"),
    ):
        raw = getattr(args, option)
        try:
            parsed[key] = parse_duration_to_seconds(raw)
        except ValueError as exc:
            raise ValidationError(
                "INVALID_DURATION",
                f"--{option.replace('_', '-')}: {exc}",
                {"provided": raw},
            ) from exc
    return parsed


def _build_backend(args) -> ClusterBackend:
    if args.backend == "memory":
        from stress.fixtures.memory_backend import MemoryBackend

        return MemoryBackend(ready_after_polls=2, delete_after_polls=1)

    if not args.storage_class:
        raise ConfigurationError(
            "MISSING_STORAGE_CLASS",
            "a storage class is required for the kubernetes backend",
            {"recovery": "Provide --storage-class or set KUBEPAIR_STORAGE_CLASS"},
        )

    from kubepair.backend.kubernetes import KubernetesBackend

    return KubernetesBackend.from_kubeconfig(args.kubeconfig, logger=logger)


def _write_report(args, payload: dict) -> None:
    rendered = json.dumps(payload, indent=2, sort_keys=True)

    if not args.no_output and args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered, encoding="utf-8")
        logger.info("run.report_written", event="run.report_written", path=str(output_path))

    if args.stdout:
        print(rendered)


def main(argv: list[str] | None = None) -> int:
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        logger.error("cli.invalid_environment", event="cli.invalid_environment", error=str(exc))
        return 2

    parser = _build_parser(settings)
    args = parser.parse_args(argv)

    if isinstance(logger, StructuredLogger):
        logger.set_level(args.log_level)

    if args.count < 1:
        logger.error(
            "cli.invalid_count",
            event="cli.invalid_count",
            provided=args.count,
            recovery="Provide --count >= 1",
        )
        return 2

    try:
        durations = _parse_durations(args)
        config = RunConfig(
            namespace=args.namespace,
            prefix=args.prefix,
            count=args.count,
            mode=Mode(args.mode),
            image=args.image,
            storage_class=args.storage_class,
            claim_size=args.claim_size,
            seed=args.seed,
            **durations,
        )
        backend = _build_backend(args)
    except (ValidationError, ConfigurationError) as exc:
        logger.error(
            "cli.invalid_arguments",
            event="cli.invalid_arguments",
            error_code=exc.code,
            error=exc.message,
            **exc.details,
        )
        return 2

    try:
        result = asyncio.run(Orchestrator(config, backend, logger=logger).run())
        error: FatalRunError | None = None
    except ValidationError as exc:
        logger.error("cli.invalid_arguments", event="cli.invalid_arguments", error_code=exc.code, error=exc.message)
        return 2
    except FatalRunError as exc:
        result = exc.result
        error = exc

    _write_report(args, build_run_report(config, result, error=error))

    if error is not None:
        logger.error(
            "run.exit_failure",
            event="run.exit_failure",
            cause=str(error.cause),
            fatal_error_count=len(error.errors),
        )
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
