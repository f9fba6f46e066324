"""Numeric coercion and rounding helpers."""

import math
from typing import Any, Optional


def to_optional_float(value: Any) -> Optional[float]:
    """Parse a finite float, or return None for missing/invalid input."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def to_float(value: Any, default: float = 0.0) -> float:
    """Parse a finite float, falling back to ``default``."""
    number = to_optional_float(value)
    return default if number is None else number


def to_minutes(value: Any) -> float:
    """Parse a non-negative minute count; invalid or negative input is 0."""
    return max(0.0, to_float(value))


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return min(max(value, low), high)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def round_up_to_five(value: Optional[float]) -> Optional[int]:
    """Round up to the next multiple of 5 minutes (None for non-finite)."""
    if value is None or not math.isfinite(value):
        return None
    return int(math.ceil(math.ceil(value) / 5.0) * 5)


def round_to(value: Optional[float], digits: int) -> Optional[float]:
    """Round half-up to ``digits`` decimals, passing None through."""
    if value is None:
        return None
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def nearly_equal(a: float, b: float, tolerance: float = 1e-6) -> bool:
    """Compare two numbers within an absolute tolerance."""
    return abs(a - b) < tolerance
