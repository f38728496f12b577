"""Pre-built run scenarios."""

from __future__ import annotations

__all__ = ["build_run_config", "run_round_trip"]

from stress.scenarios.lifecycle import build_run_config, run_round_trip
