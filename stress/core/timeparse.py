from __future__ import annotations

import re


_DURATION_RE = re.compile(r"^(?P<value>\d+(?:\.\d+)?)(?P<unit>ms|s|m|h)?$")


def parse_duration_to_seconds(raw: str) -> float:
    """Parse duration strings like '500ms', '10s', '5m', '1h' into seconds.

    A bare number is taken as seconds.
    """
    match = _DURATION_RE.match(raw.strip())
    if not match:
        raise ValueError("duration must match <number>[unit] where unit is ms|s|m|h")

    value = float(match.group("value"))
    unit = match.group("unit") or "s"

    if unit == "ms":
        return value / 1000.0
    if unit == "s":
        return value
    if unit == "m":
        return value * 60.0
    if unit == "h":
        return value * 3600.0

    raise ValueError("unsupported duration unit")


def format_seconds(seconds: float | None) -> str:
    """Render seconds compactly, e.g. 0.25 -> '250ms', 75 -> '1m15.0s'."""
    if seconds is None:
        return "-"
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, rest = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m{rest:.1f}s"
    hours, minutes = divmod(minutes, 60)
    return f"{int(hours)}h{int(minutes)}m{rest:.0f}s"
