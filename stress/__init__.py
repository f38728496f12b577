"""Stress harness for storage claim + compute unit pairs.

Launches concurrent provision or decommission workflows against a cluster
backend and records how long each resource takes to settle.
"""

from __future__ import annotations

__all__ = []
