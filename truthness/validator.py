"""Truthness-v0.1 Constraint Evaluator — bean-validation style heuristics.

Maps one ConstraintDescriptor (kind + parameters + observed value) to a
Truthness, built on the distance primitives.

Null-value policy:
    - Presence kinds (NOT_NULL, NOT_BLANK, NOT_EMPTY) with an absent value
      are maximally violated: Truthness(FAILED_DEGREE, 1.0). FAILED_DEGREE is
      below anything a present value can score under those kinds.
    - NULL is satisfied by absence and violated by presence.
    - Every other kind is vacuously satisfied by absence. Presence is the
      business of a separate constraint.

Distances for present values:
    - Numeric kinds reduce to less_than_truthness / equality_truthness.
    - RANGE, MIN, MAX, SIZE_RANGE, NOT_EMPTY and NOT_BLANK are bounded checks:
      the conjunction (Truthness.and_) of a lower and an upper bound, over the
      value itself, its size, or its count of non-whitespace characters.
    - PATTERN, NOT_NULL, NULL and ASSERT_* are binary: the unsatisfied side
      gets FAILED_DEGREE. No character-level regex distance is attempted.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sized
from typing import Any, Callable, Optional

import numpy as np

from truthness.config import TruthnessConfig
from truthness.protocol import (
    ConstraintDescriptor,
    ConstraintKind,
    InvalidInputError,
    Truthness,
)
from truthness.util.distance import (
    equality_truthness,
    is_number,
    less_than_truthness,
)

logger = logging.getLogger(__name__)

PRESENCE_KINDS: frozenset[ConstraintKind] = frozenset({
    ConstraintKind.NOT_NULL,
    ConstraintKind.NOT_BLANK,
    ConstraintKind.NOT_EMPTY,
})


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def _satisfied() -> Truthness:
    return Truthness(1.0, TruthnessConfig.FAILED_DEGREE)


def _violated() -> Truthness:
    return Truthness(TruthnessConfig.FAILED_DEGREE, 1.0)


def _binary(ok: bool) -> Truthness:
    return _satisfied() if ok else _violated()


def _invalid(descriptor: ConstraintDescriptor, reason: str) -> InvalidInputError:
    message = f"{descriptor.property_name}: {reason} for constraint {descriptor.kind.name}"
    logger.debug("Rejecting constraint: %s", message)
    return InvalidInputError(message)


def _require_number(descriptor: ConstraintDescriptor, value: Any, role: str) -> Any:
    if not is_number(value):
        raise _invalid(descriptor, f"{role} must be numeric, got {type(value).__name__}")
    return value


def _require_str(descriptor: ConstraintDescriptor) -> str:
    value = descriptor.observed_value
    if not isinstance(value, str):
        raise _invalid(descriptor, f"value must be a string, got {type(value).__name__}")
    return value


def _size(descriptor: ConstraintDescriptor) -> int:
    """Element count of a string, byte string, sequence, set, mapping or array."""
    value = descriptor.observed_value
    if isinstance(value, np.ndarray):
        return int(value.size)
    if isinstance(value, Sized):
        return len(value)
    raise _invalid(descriptor, f"value of type {type(value).__name__} has no size")


def bounded_truthness(
    value: Any,
    lower: Optional[Any] = None,
    upper: Optional[Any] = None,
    lower_inclusive: bool = True,
    upper_inclusive: bool = True,
) -> Truthness:
    """Truthness of lower <= value <= upper (or strict, per inclusivity).

    Each present bound is one less-than check; the two are joined with
    Truthness.and_(), so of_true is the minimum over both bounds. A range
    with no bounds at all holds for every value.
    """
    checks = []
    if lower is not None:
        checks.append(
            less_than_truthness(value, lower).invert()
            if lower_inclusive
            else less_than_truthness(lower, value)
        )
    if upper is not None:
        checks.append(
            less_than_truthness(upper, value).invert()
            if upper_inclusive
            else less_than_truthness(value, upper)
        )
    if not checks:
        return _satisfied()
    return Truthness.and_(*checks)


# ---------------------------------------------------------------------------
# Per-kind handlers (present values only)
# ---------------------------------------------------------------------------

def _not_null(descriptor: ConstraintDescriptor) -> Truthness:
    return _satisfied()


def _null(descriptor: ConstraintDescriptor) -> Truthness:
    return _violated()


def _equality(descriptor: ConstraintDescriptor) -> Truthness:
    value = descriptor.observed_value
    expected = descriptor.parameters["expected"]
    if is_number(value) and is_number(expected):
        return equality_truthness(value, expected)
    # No distance over arbitrary objects: exact match or a flat miss.
    return Truthness(1.0, 0.0) if value == expected else _violated()


def _less_than(descriptor: ConstraintDescriptor) -> Truthness:
    value = _require_number(descriptor, descriptor.observed_value, "value")
    bound = _require_number(descriptor, descriptor.parameters["bound"], "bound")
    return less_than_truthness(value, bound)


def _positive(descriptor: ConstraintDescriptor) -> Truthness:
    return less_than_truthness(0, _require_number(descriptor, descriptor.observed_value, "value"))


def _positive_or_zero(descriptor: ConstraintDescriptor) -> Truthness:
    value = _require_number(descriptor, descriptor.observed_value, "value")
    return less_than_truthness(value, 0).invert()


def _negative(descriptor: ConstraintDescriptor) -> Truthness:
    return less_than_truthness(_require_number(descriptor, descriptor.observed_value, "value"), 0)


def _negative_or_zero(descriptor: ConstraintDescriptor) -> Truthness:
    value = _require_number(descriptor, descriptor.observed_value, "value")
    return less_than_truthness(0, value).invert()


def _range(descriptor: ConstraintDescriptor) -> Truthness:
    p = descriptor.parameters
    value = _require_number(descriptor, descriptor.observed_value, "value")
    lower = None if p["min"] is None else _require_number(descriptor, p["min"], "min")
    upper = None if p["max"] is None else _require_number(descriptor, p["max"], "max")
    return bounded_truthness(
        value, lower, upper,
        lower_inclusive=bool(p["min_inclusive"]),
        upper_inclusive=bool(p["max_inclusive"]),
    )


def _min(descriptor: ConstraintDescriptor) -> Truthness:
    value = _require_number(descriptor, descriptor.observed_value, "value")
    return bounded_truthness(value, lower=_require_number(descriptor, descriptor.parameters["bound"], "bound"))


def _max(descriptor: ConstraintDescriptor) -> Truthness:
    value = _require_number(descriptor, descriptor.observed_value, "value")
    return bounded_truthness(value, upper=_require_number(descriptor, descriptor.parameters["bound"], "bound"))


def _size_range(descriptor: ConstraintDescriptor) -> Truthness:
    p = descriptor.parameters
    lower = None if p["min"] is None else _require_number(descriptor, p["min"], "min")
    upper = None if p["max"] is None else _require_number(descriptor, p["max"], "max")
    return bounded_truthness(_size(descriptor), lower, upper)


def _not_empty(descriptor: ConstraintDescriptor) -> Truthness:
    return bounded_truthness(_size(descriptor), lower=1)


def _not_blank(descriptor: ConstraintDescriptor) -> Truthness:
    text = _require_str(descriptor)
    visible = sum(1 for ch in text if not ch.isspace())
    return bounded_truthness(visible, lower=1)


def _pattern(descriptor: ConstraintDescriptor) -> Truthness:
    text = _require_str(descriptor)
    try:
        pattern = re.compile(descriptor.parameters["regexp"], descriptor.parameters["flags"])
    except (re.error, TypeError) as exc:
        raise _invalid(descriptor, f"invalid regexp ({exc})") from exc
    # Bean validation matches the whole value, not a substring.
    return _binary(pattern.fullmatch(text) is not None)


def _assert_bool(expected: bool) -> Callable[[ConstraintDescriptor], Truthness]:
    def handler(descriptor: ConstraintDescriptor) -> Truthness:
        value = descriptor.observed_value
        if not isinstance(value, (bool, np.bool_)):
            raise _invalid(descriptor, f"value must be a boolean, got {type(value).__name__}")
        return _binary(bool(value) is expected)
    return handler


_HANDLERS: dict[ConstraintKind, Callable[[ConstraintDescriptor], Truthness]] = {
    ConstraintKind.EQUALITY: _equality,
    ConstraintKind.LESS_THAN: _less_than,
    ConstraintKind.NOT_NULL: _not_null,
    ConstraintKind.NULL: _null,
    ConstraintKind.NOT_BLANK: _not_blank,
    ConstraintKind.NOT_EMPTY: _not_empty,
    ConstraintKind.PATTERN: _pattern,
    ConstraintKind.SIZE_RANGE: _size_range,
    ConstraintKind.POSITIVE: _positive,
    ConstraintKind.POSITIVE_OR_ZERO: _positive_or_zero,
    ConstraintKind.NEGATIVE: _negative,
    ConstraintKind.NEGATIVE_OR_ZERO: _negative_or_zero,
    ConstraintKind.RANGE: _range,
    ConstraintKind.MIN: _min,
    ConstraintKind.MAX: _max,
    ConstraintKind.ASSERT_TRUE: _assert_bool(True),
    ConstraintKind.ASSERT_FALSE: _assert_bool(False),
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def evaluate_constraint(descriptor: ConstraintDescriptor) -> Truthness:
    """Truthness of one constraint for the value observed on its property.

    Raises:
        InvalidInputError: If the kind is unsupported or the observed value or
            parameters do not fit the kind.
    """
    kind = descriptor.kind
    if descriptor.is_absent:
        result = _violated() if kind in PRESENCE_KINDS else _satisfied()
    else:
        handler = _HANDLERS.get(kind)
        if handler is None:
            raise _invalid(descriptor, "unsupported kind")
        result = handler(descriptor)

    logger.debug(
        "%s %s -> of_true=%.6g of_false=%.6g",
        descriptor.property_name, kind.name, result.of_true, result.of_false,
    )
    return result
