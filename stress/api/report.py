from __future__ import annotations

from typing import Any

from kubepair.build_info import BUILD_NUMBER
from kubepair.errors import create_error_response

from stress.core.metrics import build_timing_report
from stress.core.models import RunConfig, RunResult
from stress.core.timeparse import format_seconds


def _records(resources) -> list[dict[str, Any]]:
    records = []
    for resource in resources:
        record = resource.to_dict()
        record["elapsed"] = format_seconds(resource.timing.duration)
        records.append(record)
    return records


def build_run_report(
    config: RunConfig,
    result: RunResult | None,
    *,
    error: BaseException | None = None,
) -> dict[str, Any]:
    config_payload = {
        "mode": config.mode.value,
        "namespace": config.namespace,
        "prefix": config.prefix,
        "count": config.count,
        "image": config.image,
        "storage_class": config.storage_class,
        "claim_size": config.claim_size,
        "poll_interval_seconds": config.poll_interval_seconds,
        "poll_timeout_seconds": config.poll_timeout_seconds,
        "max_stagger_seconds": config.max_stagger_seconds,
        "seed": config.seed,
    }
    payload: dict[str, Any] = {
        "build": BUILD_NUMBER,
        "config": config_payload,
        "success": error is None,
    }

    if result is not None:
        result_payload = result.to_dict()
        result_payload["storage_claims"] = _records(result.claims)
        result_payload["compute_units"] = _records(result.units)
        payload["result"] = result_payload
        payload["summary"] = build_timing_report(result)

    if error is not None:
        payload["error"] = create_error_response(error)

    return payload
