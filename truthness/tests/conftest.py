"""Shared pytest fixtures for truthness unit tests.

The two bean builders mirror a typical validated request object: one with
numeric bounds, one with string/collection rules. Every keyword is the
observed value of the property of the same name.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
import pytest

from truthness.protocol import ConstraintDescriptor, ObjectConstraintSet


# ---------------------------------------------------------------------------
# Bean builders
# ---------------------------------------------------------------------------

@pytest.fixture
def int_bean() -> Callable[..., ObjectConstraintSet]:
    """a >= 42, b <= 666, -5 <= c <= -2 (two rules), d > 0, e >= 0, f < 0."""

    def build(a: Any = 0, b: Any = 0, c: Any = 0, d: Any = 0, e: Any = 0, f: Any = 0):
        return ObjectConstraintSet((
            ConstraintDescriptor.of("Min", "a", a, bound=42),
            ConstraintDescriptor.of("Max", "b", b, bound=666),
            ConstraintDescriptor.of("Min", "c", c, bound=-5),
            ConstraintDescriptor.of("Max", "c", c, bound=-2),
            ConstraintDescriptor.of("Positive", "d", d),
            ConstraintDescriptor.of("PositiveOrZero", "e", e),
            ConstraintDescriptor.of("Negative", "f", f),
        ))

    return build


@pytest.fixture
def string_bean() -> Callable[..., ObjectConstraintSet]:
    """Presence, pattern and size rules over strings, lists, arrays and maps."""

    def build(**values: Any):
        v = dict.fromkeys("abcdefghil", None)
        v.update(values)
        return ObjectConstraintSet((
            ConstraintDescriptor.of("NotNull", "a", v["a"]),
            ConstraintDescriptor.of("Null", "b", v["b"]),
            ConstraintDescriptor.of("NotEmpty", "c", v["c"]),
            ConstraintDescriptor.of("NotBlank", "d", v["d"]),
            ConstraintDescriptor.of("Pattern", "e", v["e"], regexp="e+"),
            ConstraintDescriptor.of("Size", "f", v["f"], min=2, max=5),
            ConstraintDescriptor.of("Size", "g", v["g"], min=2),
            ConstraintDescriptor.of("NotEmpty", "h", v["h"]),
            ConstraintDescriptor.of("NotEmpty", "i", v["i"]),
            ConstraintDescriptor.of("Size", "l", v["l"], min=1),
        ))

    return build


@pytest.fixture
def int64_extremes() -> tuple[np.int64, np.int64]:
    info = np.iinfo(np.int64)
    return np.int64(info.min), np.int64(info.max)
