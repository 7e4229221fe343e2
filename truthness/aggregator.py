"""Truthness-v0.1 Aggregator — one fitness signal per constrained object.

Combines the truthness of every constraint declared on an object into a
single Truthness: the arithmetic mean of of_true and, independently, of
of_false.

Key design choices:
    - Mean, not minimum. Fixing one violated field strictly raises the
      aggregate even while other fields stay invalid; a strict AND would hide
      that progress and leave the search on a plateau.
    - Flat over the whole object. A property with two constraints contributes
      two terms, so it weighs twice as much as a single-constraint property.
      Downstream fitness comparisons depend on this weighting.
    - Ceiling: the aggregate of_true is exactly 1.0 iff every constraint is
      satisfied.

Usage:
    constraints = ObjectConstraintSet((
        ConstraintDescriptor.of("Min", "x", 42, bound=1),
        ConstraintDescriptor.of("NotBlank", "name", "  "),
    ))
    t = compute_object_truthness(constraints)
"""

from __future__ import annotations

import logging
from typing import Iterable, Union

from truthness.protocol import (
    ConstraintDescriptor,
    InvalidInputError,
    ObjectConstraintSet,
    Truthness,
)
from truthness.validator import evaluate_constraint

logger = logging.getLogger(__name__)


def compute_object_truthness(
    constraints: Union[ObjectConstraintSet, Iterable[ConstraintDescriptor]],
) -> Truthness:
    """Overall truthness of "this object is valid".

    Args:
        constraints: Every constraint declared on the object, with the values
            observed on it.

    Returns:
        Mean of the per-constraint truthness values.

    Raises:
        InvalidInputError: If there are no constraints at all, or any single
            constraint is malformed.
    """
    if not isinstance(constraints, ObjectConstraintSet):
        constraints = ObjectConstraintSet(tuple(constraints))
    if len(constraints) == 0:
        logger.debug("Rejecting object with no declared constraints")
        raise InvalidInputError("Object has no declared constraints: nothing to score")

    results = [evaluate_constraint(c) for c in constraints]
    overall = Truthness.average(results)

    logger.debug(
        "Object truthness over %d constraints on %d properties (%d satisfied): "
        "of_true=%.6g of_false=%.6g",
        len(results),
        len(constraints.property_names()),
        sum(1 for t in results if t.is_true()),
        overall.of_true,
        overall.of_false,
    )
    return overall
