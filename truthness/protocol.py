"""Truthness-v0.1 Protocol Definitions.

Strict dataclass contracts for everything passed between the collaborator
and the heuristic engine. Every value is immutable; no dicts-as-messages
except the read-only parameter mapping of a constraint.
"""

from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional

import numpy as np
from numpy.typing import NDArray


# Largest double strictly below 1.0. Non-terminal degrees are clamped to it
# so that rounding can never turn "almost true" into "true".
BELOW_ONE: float = math.nextafter(1.0, 0.0)

# Smallest degree the engine emits: 1 / (1 + float max), the score of a
# saturated gap. Only equality's of_false on an exact match goes lower (0.0).
MIN_DEGREE: float = 1.0 / (1.0 + sys.float_info.max)


class InvalidInputError(ValueError):
    """Caller misuse: empty constraint set, unknown kind, malformed parameters.

    Never transient. Retrying with the same input cannot succeed.
    """


# ---------------------------------------------------------------------------
# Truthness value type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Truthness:
    """Heuristic degree to which a predicate is true and to which it is false.

    Both degrees are computed independently, so they do not sum to 1. of_true
    lies in (0, 1]; of_false lies in [0, 1], where 0.0 is reserved for an exact
    equality match. A degree of exactly 1.0 is terminal: the predicate (or its
    negation) holds.

    Attributes:
        of_true: How close the predicate is to being true.
        of_false: How close the predicate is to being false.
    """
    of_true: float
    of_false: float

    def __post_init__(self) -> None:
        of_true, of_false = float(self.of_true), float(self.of_false)
        if not 0.0 < of_true <= 1.0:
            raise ValueError(f"of_true must be in (0, 1], got {of_true}")
        if not 0.0 <= of_false <= 1.0:
            raise ValueError(f"of_false must be in [0, 1], got {of_false}")
        object.__setattr__(self, "of_true", of_true)
        object.__setattr__(self, "of_false", of_false)

    def is_true(self) -> bool:
        return self.of_true == 1.0

    def is_false(self) -> bool:
        return self.of_false == 1.0

    def invert(self) -> Truthness:
        """Truthness of the negated predicate.

        The terminal 0.0 of an exact equality match becomes MIN_DEGREE on the
        true side, where degrees stay strictly positive.
        """
        return Truthness(max(self.of_false, MIN_DEGREE), self.of_true)

    # ------------------------------------------------------------------
    # Combinators
    # ------------------------------------------------------------------

    @staticmethod
    def and_(*truthnesses: Truthness) -> Truthness:
        """Conjunction: true only as far as the weakest operand is true.

        A conjunction is false as soon as one operand is false, so the false
        degree is the strongest one.
        """
        if not truthnesses:
            raise InvalidInputError("Cannot combine an empty list of truthness values")
        return Truthness(
            min(t.of_true for t in truthnesses),
            max(t.of_false for t in truthnesses),
        )

    @staticmethod
    def or_(*truthnesses: Truthness) -> Truthness:
        """Disjunction: the dual of and_()."""
        if not truthnesses:
            raise InvalidInputError("Cannot combine an empty list of truthness values")
        return Truthness(
            max(t.of_true for t in truthnesses),
            min(t.of_false for t in truthnesses),
        )

    @staticmethod
    def average(truthnesses: Iterable[Truthness]) -> Truthness:
        """Arithmetic mean of each degree.

        The mean of a degree is exactly 1.0 iff every term is 1.0; otherwise it
        is clamped below 1.0 so float rounding cannot fake a terminal value.
        """
        items = list(truthnesses)
        if not items:
            raise InvalidInputError("Cannot average an empty list of truthness values")
        of_true = np.fromiter((t.of_true for t in items), dtype=np.float64, count=len(items))
        of_false = np.fromiter((t.of_false for t in items), dtype=np.float64, count=len(items))
        return Truthness(_mean_degree(of_true), _mean_degree(of_false))


def _mean_degree(values: NDArray[np.float64]) -> float:
    if bool(np.all(values == 1.0)):
        return 1.0
    return min(float(np.mean(values)), BELOW_ONE)


# ---------------------------------------------------------------------------
# Constraint kinds
# ---------------------------------------------------------------------------

class ConstraintKind(Enum):
    """Declarative rule attached to one property of an evaluated object."""
    EQUALITY = auto()
    LESS_THAN = auto()
    NOT_NULL = auto()
    NULL = auto()
    NOT_BLANK = auto()
    NOT_EMPTY = auto()
    PATTERN = auto()
    SIZE_RANGE = auto()
    POSITIVE = auto()
    POSITIVE_OR_ZERO = auto()
    NEGATIVE = auto()
    NEGATIVE_OR_ZERO = auto()
    RANGE = auto()
    MIN = auto()
    MAX = auto()
    ASSERT_TRUE = auto()
    ASSERT_FALSE = auto()

    @classmethod
    def parse(cls, name: ConstraintKind | str) -> ConstraintKind:
        """Resolve a kind from its enum name, CamelCase name or annotation name.

        Accepts "SIZE_RANGE", "size_range", "SizeRange", "Size",
        "javax.validation.constraints.Size" and "@Size" alike.

        Raises:
            InvalidInputError: If the name matches no supported kind.
        """
        if isinstance(name, ConstraintKind):
            return name
        if not isinstance(name, str):
            raise InvalidInputError(f"Constraint kind must be a string, got {type(name).__name__}")
        simple = name.strip().lstrip("@").rsplit(".", 1)[-1]
        if simple in ANNOTATION_TO_KIND:
            return ANNOTATION_TO_KIND[simple]
        key = simple.upper() if "_" in simple or simple.isupper() else _CAMEL_BOUNDARY.sub("_", simple).upper()
        try:
            return cls[key]
        except KeyError:
            raise InvalidInputError(f"Unsupported constraint kind: {name!r}") from None


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Bean-validation annotations whose simple name differs from the kind name
ANNOTATION_TO_KIND: dict[str, ConstraintKind] = {
    "Size": ConstraintKind.SIZE_RANGE,
    "DecimalMin": ConstraintKind.MIN,
    "DecimalMax": ConstraintKind.MAX,
}


# ---------------------------------------------------------------------------
# Parameter schema per kind: (required names, optional names with defaults)
# Single source of truth: descriptors are validated against it on creation.
# ---------------------------------------------------------------------------

KIND_PARAMETERS: dict[ConstraintKind, tuple[tuple[str, ...], dict[str, Any]]] = {
    ConstraintKind.EQUALITY: (("expected",), {}),
    ConstraintKind.LESS_THAN: (("bound",), {}),
    ConstraintKind.MIN: (("bound",), {}),
    ConstraintKind.MAX: (("bound",), {}),
    ConstraintKind.RANGE: (
        (),
        {"min": None, "max": None, "min_inclusive": True, "max_inclusive": True},
    ),
    ConstraintKind.SIZE_RANGE: ((), {"min": 0, "max": None}),
    ConstraintKind.PATTERN: (("regexp",), {"flags": 0}),
}


# ---------------------------------------------------------------------------
# Constraint descriptors
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConstraintDescriptor:
    """One declared rule on one named property, with the value observed for it.

    Attributes:
        property_name: Name of the constrained property.
        kind: The rule; strings are resolved with ConstraintKind.parse().
        parameters: Kind-specific parameters (see KIND_PARAMETERS). Missing
            optional ones are filled with their defaults.
        observed_value: Value the property holds. None means absent, which is
            meaningful input, not an error.
    """
    property_name: str
    kind: ConstraintKind
    parameters: Mapping[str, Any] = field(default_factory=dict)
    observed_value: Any = None

    def __post_init__(self) -> None:
        kind = ConstraintKind.parse(self.kind)
        required, optional = KIND_PARAMETERS.get(kind, ((), {}))
        given = dict(self.parameters)

        unknown = set(given) - set(required) - set(optional)
        if unknown:
            raise InvalidInputError(
                f"{self.property_name}: unknown parameters {sorted(unknown)} "
                f"for constraint {kind.name}"
            )
        missing = [p for p in required if p not in given]
        if missing:
            raise InvalidInputError(
                f"{self.property_name}: missing parameters {missing} "
                f"for constraint {kind.name}"
            )

        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "parameters", MappingProxyType({**optional, **given}))

    @classmethod
    def of(
        cls,
        kind: ConstraintKind | str,
        property_name: str,
        observed_value: Any = None,
        **parameters: Any,
    ) -> ConstraintDescriptor:
        """Shorthand: ConstraintDescriptor.of("Size", "name", "abc", min=2, max=5)."""
        return cls(
            property_name=property_name,
            kind=kind,
            parameters=parameters,
            observed_value=observed_value,
        )

    @property
    def is_absent(self) -> bool:
        return self.observed_value is None

    def with_value(self, observed_value: Any) -> ConstraintDescriptor:
        """Same rule, another observed value."""
        return replace(self, observed_value=observed_value)


@dataclass(frozen=True)
class ObjectConstraintSet:
    """All constraint descriptors declared for one evaluated object.

    Built by the collaborator right before evaluation and consumed once.
    A property with two rules appears as two descriptors.
    """
    constraints: tuple[ConstraintDescriptor, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "constraints", tuple(self.constraints))

    def __len__(self) -> int:
        return len(self.constraints)

    def __iter__(self) -> Iterator[ConstraintDescriptor]:
        return iter(self.constraints)

    def property_names(self) -> tuple[str, ...]:
        """Constrained property names, in declaration order, without repeats."""
        return tuple(dict.fromkeys(c.property_name for c in self.constraints))

    def for_property(self, name: str) -> tuple[ConstraintDescriptor, ...]:
        return tuple(c for c in self.constraints if c.property_name == name)

    def replace_value(self, name: str, observed_value: Optional[Any]) -> ObjectConstraintSet:
        """Copy of this set with every constraint on `name` observing a new value."""
        return ObjectConstraintSet(tuple(
            c.with_value(observed_value) if c.property_name == name else c
            for c in self.constraints
        ))
