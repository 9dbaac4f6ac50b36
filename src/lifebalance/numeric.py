"""Small numeric helpers shared by the engines."""

import math
from typing import Any


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (55.5 -> 56, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def is_number(value: Any) -> bool:
    """True for finite real numbers (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def round_dp(value: float, dp: int = 2) -> float:
    """Round half-up to `dp` decimal places."""
    factor = 10 ** dp
    return math.floor(value * factor + 0.5) / factor


def format_number(value: float | None, missing: str = "") -> str:
    """Render a number compactly: 70.0 -> "70", 7.25 -> "7.25", None -> missing."""
    if value is None:
        return missing
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
