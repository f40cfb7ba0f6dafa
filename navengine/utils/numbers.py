"""Numeric helpers shared by the engines and the formatter."""

import math

SATS_PER_BTC = 100_000_000


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def is_finite_number(value: object) -> bool:
    """True for ints/floats that are neither NaN nor infinite (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
