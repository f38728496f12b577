from __future__ import annotations

import math
from typing import Any, Iterable

from stress.core.models import RunResult
from stress.core.resources import Resource


def _percentile(sorted_values: list[float], p: float) -> float | None:
    """Compute percentile using linear interpolation.

    Expects sorted_values sorted ascending.
    """

    if not sorted_values:
        return None

    if p <= 0:
        return float(sorted_values[0])
    if p >= 1:
        return float(sorted_values[-1])

    k = (len(sorted_values) - 1) * p
    f = int(math.floor(k))
    c = int(math.ceil(k))
    if f == c:
        return float(sorted_values[f])
    d0 = sorted_values[f] * (c - k)
    d1 = sorted_values[c] * (k - f)
    return float(d0 + d1)


def summarize_durations(resources: Iterable[Resource]) -> dict[str, Any]:
    """Latency summary over the resources whose phase completed."""
    items = list(resources)
    values = sorted(r.timing.duration for r in items if r.timing.duration is not None)

    mean = (sum(values) / len(values)) if values else None
    return {
        "count": len(items),
        "completed": len(values),
        "incomplete": len(items) - len(values),
        "min_seconds": values[0] if values else None,
        "max_seconds": values[-1] if values else None,
        "mean_seconds": mean,
        "p50_seconds": _percentile(values, 0.50),
        "p95_seconds": _percentile(values, 0.95),
        "p99_seconds": _percentile(values, 0.99),
    }


def build_timing_report(result: RunResult) -> dict[str, Any]:
    return {
        "storage_claims": summarize_durations(result.claims),
        "compute_units": summarize_durations(result.units),
        "overall": summarize_durations([*result.claims, *result.units]),
    }
