"""Numeric guards shared by the calculators"""

import math
from numbers import Real

from mca_pipeline.domain.exceptions import InvalidInputError


def require_finite(name: str, value: object) -> float:
    """Return value as float, or raise InvalidInputError for None, bools, strings, NaN and inf"""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    result = float(value)
    if not math.isfinite(result):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    return result


def round_half_up(value: float) -> int:
    """Round .5 away from negative infinity, unlike Python's banker's rounding"""
    return math.floor(value + 0.5)
