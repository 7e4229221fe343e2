"""Unit tests for truthness.aggregator — object-level truthness."""

from __future__ import annotations

import logging

import numpy as np
import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from truthness.aggregator import compute_object_truthness
from truthness.protocol import (
    ConstraintDescriptor,
    InvalidInputError,
    ObjectConstraintSet,
    Truthness,
)
from truthness.validator import evaluate_constraint

values_ = st.lists(st.integers(-10 ** 6, 10 ** 6), min_size=1, max_size=20)


def _min_zero(values: list[int]) -> ObjectConstraintSet:
    """One `>= 0` rule per value, each on its own property."""
    return ObjectConstraintSet(tuple(
        ConstraintDescriptor.of("Min", f"p{i}", v, bound=0) for i, v in enumerate(values)
    ))


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

class TestEmpty:
    def test_empty_set_rejected(self):
        with pytest.raises(InvalidInputError):
            compute_object_truthness(ObjectConstraintSet())

    def test_empty_iterable_rejected(self):
        with pytest.raises(InvalidInputError):
            compute_object_truthness([])

    def test_malformed_constraint_propagates(self):
        bad = ConstraintDescriptor.of("Positive", "x", "not a number")
        with pytest.raises(InvalidInputError):
            compute_object_truthness([bad])


# ---------------------------------------------------------------------------
# Single-constraint object
# ---------------------------------------------------------------------------

class TestSingleConstraint:
    @pytest.fixture
    def bean(self):
        return ObjectConstraintSet((ConstraintDescriptor.of("Range", "x", None, min=1),))

    def test_satisfied(self, bean):
        t = compute_object_truthness(bean.replace_value("x", 42))
        assert t.is_true()
        assert not t.is_false()

    def test_violated_with_gradient(self, bean):
        tm5 = compute_object_truthness(bean.replace_value("x", -5))
        tm100 = compute_object_truthness(bean.replace_value("x", -100))
        assert not tm5.is_true() and tm5.is_false()
        assert not tm100.is_true() and tm100.is_false()
        assert tm5.of_true > tm100.of_true

    def test_boundary(self, bean):
        t = compute_object_truthness(bean.replace_value("x", 1))
        assert t.is_true()
        assert not t.is_false()

    def test_same_as_constraint(self, bean):
        c = bean.replace_value("x", -3)
        assert compute_object_truthness(c) == evaluate_constraint(c.constraints[0])


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

class TestAggregation:
    def test_mean_of_each_degree(self):
        constraints = [
            ConstraintDescriptor.of("Min", "a", 0, bound=42),
            ConstraintDescriptor.of("NotNull", "b", "x"),
        ]
        parts = [evaluate_constraint(c) for c in constraints]
        t = compute_object_truthness(constraints)
        assert t.of_true == pytest.approx(np.mean([p.of_true for p in parts]))
        assert t.of_false == pytest.approx(np.mean([p.of_false for p in parts]))

    def test_flat_across_properties(self, int_bean):
        bean = int_bean(c=0)
        # c carries two rules: Min(-5) holds, Max(-2) fails; both count
        parts = [evaluate_constraint(c) for c in bean]
        assert len(parts) == 7
        t = compute_object_truthness(bean)
        assert t.of_true == pytest.approx(sum(p.of_true for p in parts) / 7)

    def test_property_with_two_rules_weighs_more(self):
        h = evaluate_constraint(ConstraintDescriptor.of("NotNull", "x")).of_true
        two_rules = compute_object_truthness([
            ConstraintDescriptor.of("NotNull", "x"),
            ConstraintDescriptor.of("NotBlank", "x"),
            ConstraintDescriptor.of("Min", "y", 5, bound=0),
        ])
        assert two_rules.of_true == pytest.approx((2 * h + 1.0) / 3)

    def test_accepts_generator(self):
        t = compute_object_truthness(ConstraintDescriptor.of("NotNull", n, 1) for n in "abc")
        assert t.is_true()

    def test_debug_summary_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="truthness.aggregator"):
            compute_object_truthness(_min_zero([1, -1]))
        assert "over 2 constraints on 2 properties (1 satisfied)" in caplog.text

    @given(values_)
    def test_ceiling_law(self, values):
        t = compute_object_truthness(_min_zero(values))
        assert t.is_true() == all(v >= 0 for v in values)
        assert 0.0 < t.of_true <= 1.0

    @given(values_, st.data())
    def test_fixing_one_violation_strictly_improves(self, values, data):
        violated = [i for i, v in enumerate(values) if v < 0]
        assume(violated)
        i = data.draw(st.sampled_from(violated))
        fixed = list(values)
        fixed[i] = data.draw(st.integers(0, 10 ** 6))
        before = compute_object_truthness(_min_zero(values))
        after = compute_object_truthness(_min_zero(fixed))
        assert after.of_true > before.of_true

    def test_improvement_with_mixed_kinds(self):
        base = ObjectConstraintSet((
            ConstraintDescriptor.of("NotNull", "name"),
            ConstraintDescriptor.of("Pattern", "code", "zz", regexp="[A-Z]{2}"),
            ConstraintDescriptor.of("Size", "tags", [], min=1, max=3),
            ConstraintDescriptor.of("Range", "age", 200, min=0, max=150),
        ))
        before = compute_object_truthness(base)
        for name, good in [("name", "bob"), ("code", "ZZ"), ("tags", ["a"]), ("age", 30)]:
            after = compute_object_truthness(base.replace_value(name, good))
            assert after.of_true > before.of_true


# ---------------------------------------------------------------------------
# End-to-end beans
# ---------------------------------------------------------------------------

class TestIntBean:
    def test_progression(self, int_bean):
        t0 = compute_object_truthness(int_bean())
        assert not t0.is_true()

        t1 = compute_object_truthness(int_bean(a=50))
        assert not t1.is_true()
        assert t1.of_true > t0.of_true

        t2 = compute_object_truthness(int_bean(a=50, b=1000))
        assert not t2.is_true()
        assert t1.of_true > t2.of_true

        t3 = compute_object_truthness(int_bean(a=50, b=33, c=-3))
        assert not t3.is_true()
        assert t3.of_true > t1.of_true

        t4 = compute_object_truthness(int_bean(a=50, b=33, c=-3, d=1))
        assert not t4.is_true()
        assert t4.of_true > t3.of_true

        t5 = compute_object_truthness(int_bean(a=50, b=33, c=-3, d=1, f=-1))
        assert t5.is_true()
        assert not t5.is_false()


class TestStringBean:
    def test_progression(self, string_bean):
        def score(**values) -> Truthness:
            return compute_object_truthness(string_bean(**values))

        t0 = score()
        assert not t0.is_true()

        state = {"a": "foo"}
        t1 = score(**state)
        assert t1.of_true > t0.of_true

        t2 = score(**state, b="foo")
        assert t1.of_true > t2.of_true

        state.update(c="    ")
        t3 = score(**state)
        assert t3.of_true > t1.of_true

        state.update(d="hello")
        t4 = score(**state)
        assert t4.of_true > t3.of_true

        t5 = score(**{**state, "d": "   "})
        assert t4.of_true > t5.of_true

        state.update(e="eeeee")
        t6 = score(**state)
        assert t6.of_true == pytest.approx(t4.of_true)

        t7 = score(**{**state, "e": "eeeeehhhh"})
        assert t6.of_true > t7.of_true

        state.update(e="ee", f="1")
        t8 = score(**state)
        assert t6.of_true > t8.of_true

        state.update(f="123456789")
        t9 = score(**state)
        assert t8.of_true > t9.of_true

        state.update(f="1234")
        t10 = score(**state)
        assert t10.of_true == pytest.approx(t6.of_true)

        state.update(g=["a"])
        t11 = score(**state)
        assert t10.of_true > t11.of_true

        state.update(g=["a", "b"])
        t12 = score(**state)
        assert t12.of_true == pytest.approx(t10.of_true)

        state.update(h=[])
        t13 = score(**state)
        assert t13.of_true > t12.of_true

        state.update(h=["a"])
        t14 = score(**state)
        assert t14.of_true > t13.of_true

        state.update(i=np.array(["foo"]))
        t15 = score(**state)
        assert t15.of_true > t14.of_true

        state.update(l={})
        t16 = score(**state)
        assert t15.of_true > t16.of_true

        state.update(l={"A": "A"})
        t17 = score(**state)
        assert t17.of_true > t16.of_true
        assert t17.is_true()
