"""Truthness-v0.1 Distance Primitives — branch distance for scalar comparisons.

Converts a raw comparison into a Truthness pair, the classic branch-distance
heuristic of search-based test generation:

    a == b :  of_true  = 1 - normalize_distance(|a - b|)   (= 1 / (1 + d))
              of_false = 1.0 if a != b else 0.0
    a <  b :  of_true  = 1.0 if a < b  else 1 / (1.1 + (a - b))
              of_false = 1.0 if a >= b else 1 / (1.1 + (b - a))

Arithmetic never overflows or rounds a difference away:
    - Integers (including numpy int64 scalars) are widened to Python int.
    - Float pairs stay float. Mixed finite pairs (int, float, Decimal,
      Fraction) are compared exactly through Fraction.
    - Every gap is saturated to sys.float_info.max before the division, and
      degrees are floored at MIN_DEGREE, so they stay strictly positive even
      for inf and NaN operands.

Usage:
    t = less_than_truthness(-5, 1)      # Truthness(of_true=1.0, of_false=0.14...)
    t = compute_comparison_truthness("Equality", 3, 3.0)
"""

from __future__ import annotations

import math
import numbers
import sys
from decimal import Decimal
from fractions import Fraction
from typing import Callable, Union

import numpy as np

from truthness.config import TruthnessConfig
from truthness.protocol import (
    BELOW_ONE,
    MIN_DEGREE,
    ConstraintKind,
    InvalidInputError,
    Truthness,
)

Number = Union[int, float, Decimal, numbers.Real]

_MAX_GAP: float = sys.float_info.max


# ---------------------------------------------------------------------------
# Widening / saturation
# ---------------------------------------------------------------------------

def is_number(value: object) -> bool:
    """True for anything the primitives accept as a numeric operand."""
    return isinstance(value, (numbers.Real, Decimal, np.bool_))


def _widen(value: object) -> Number:
    if isinstance(value, (bool, np.bool_, np.integer)):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    if isinstance(value, (numbers.Real, Decimal)):
        return value
    raise InvalidInputError(f"Expected a numeric operand, got {type(value).__name__}")


def _to_float(value: Number) -> float:
    """Float image of value. A finite value beyond float range clamps to the
    largest finite float of its sign, so it still orders strictly inside the
    infinities."""
    try:
        result = float(value)
    except OverflowError:
        return _MAX_GAP if value > 0 else -_MAX_GAP
    if math.isinf(result) and _is_finite(value):
        return math.copysign(_MAX_GAP, result)
    return result


def _is_finite(value: Number) -> bool:
    if isinstance(value, numbers.Rational):
        return True
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def _exact(value: Number) -> numbers.Rational:
    if isinstance(value, numbers.Rational):
        return value
    return Fraction(value) if isinstance(value, Decimal) else Fraction(float(value))


def _widen_pair(a: object, b: object) -> tuple[Number, Number]:
    """Operands in a common representation that cannot overflow or round.

    float pairs stay float (their difference is zero only when they are
    equal); mixed finite pairs go exact through Fraction; anything with an
    infinity or NaN falls back to float, with the finite side clamped so
    10 ** 400 stays below inf.
    """
    x, y = _widen(a), _widen(b)
    if isinstance(x, float) and isinstance(y, float):
        return x, y
    if _is_finite(x) and _is_finite(y):
        return _exact(x), _exact(y)
    return _to_float(x), _to_float(y)


def _saturate(gap: Number) -> float:
    """Non-negative gap as a finite float; overflow, inf and NaN map to the max."""
    try:
        value = float(gap)
    except OverflowError:
        return _MAX_GAP
    if math.isnan(value) or value > _MAX_GAP:
        return _MAX_GAP
    return value


def normalize_distance(distance: Number) -> float:
    """Monotonic map from [0, inf) onto [0, 1): d / (d + 1).

    Raises:
        ValueError: If the distance is negative or NaN.
    """
    if not distance >= 0:
        raise ValueError(f"distance must be non-negative, got {distance}")
    d = _saturate(distance)
    return d / (d + 1.0)


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

def equality_truthness(a: Number, b: Number) -> Truthness:
    """Truthness of a == b.

    of_true is exactly 1.0 iff the operands are equal. On an exact match
    of_false is 0.0: equality is a terminal fact there, not a gradient target.
    """
    x, y = _widen_pair(a, b)
    if x == y:
        return Truthness(1.0, 0.0)
    of_true = 1.0 - normalize_distance(_saturate(abs(x - y)))
    return Truthness(min(max(of_true, MIN_DEGREE), BELOW_ONE), 1.0)


def less_than_truthness(a: Number, b: Number) -> Truthness:
    """Truthness of a < b.

    On the failing side the degree is 1 / (offset + gap): just below 1.0 when
    the operands are one step apart, shrinking as the gap grows.
    """
    x, y = _widen_pair(a, b)
    offset = TruthnessConfig.LESS_THAN_OFFSET
    of_true = 1.0 if x < y else 1.0 / (offset + _saturate(x - y))
    of_false = 1.0 if x >= y else 1.0 / (offset + _saturate(y - x))
    return Truthness(of_true, of_false)


_COMPARISONS: dict[ConstraintKind, Callable[[Number, Number], Truthness]] = {
    ConstraintKind.EQUALITY: equality_truthness,
    ConstraintKind.LESS_THAN: less_than_truthness,
}


def compute_comparison_truthness(
    kind: ConstraintKind | str,
    a: Number,
    b: Number,
) -> Truthness:
    """Entry point for instrumented branch comparisons.

    Args:
        kind: ConstraintKind.EQUALITY or ConstraintKind.LESS_THAN (or a name
            ConstraintKind.parse() understands).
        a: Left operand.
        b: Right operand.

    Raises:
        InvalidInputError: For any other kind, or a non-numeric operand.
    """
    kind = ConstraintKind.parse(kind)
    try:
        primitive = _COMPARISONS[kind]
    except KeyError:
        raise InvalidInputError(
            f"Comparison kind must be EQUALITY or LESS_THAN, got {kind.name}"
        ) from None
    return primitive(a, b)
