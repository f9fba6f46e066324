import pytest

from taskpace.estimation.pert import derive_bounds, estimate_task, expected_duration, spread_sigma
from taskpace.models.task import Task


def test_derive_bounds_example():
    estimate = derive_bounds(90, 3)
    assert estimate.optimistic == 61
    assert estimate.pessimistic == 133
    assert estimate.sigma == pytest.approx(12.0)


def test_derive_bounds_clamps_weight_and_keeps_order():
    for m in (1, 2, 5, 30, 90, 480):
        for w in (-3, 0, 1, 2, 3, 4, 5, 9, None, float("nan")):
            estimate = derive_bounds(m, w)
            assert estimate.optimistic >= 1
            assert estimate.pessimistic > estimate.optimistic
            assert 1 <= estimate.weight <= 5


def test_expected_duration_defaults_weight():
    assert expected_duration(60, 90, 150) == pytest.approx((60 + 3 * 90 + 150) / 5)
    assert expected_duration(60, 90, 150, float("inf")) == pytest.approx((60 + 3 * 90 + 150) / 5)
    assert expected_duration(60, 90, 150, 4) == pytest.approx((60 + 4 * 90 + 150) / 6)


def test_expected_duration_monotone_and_bounded():
    o, p = 30, 200
    for w in range(1, 6):
        previous = None
        for m in range(o + 1, p):
            value = expected_duration(o, m, p, w)
            assert o <= value <= p
            if previous is not None:
                assert value >= previous
            previous = value


def test_spread_sigma():
    assert spread_sigma(10, 70) == pytest.approx(10.0)


def test_estimate_task_prefers_consistent_user_bounds():
    task = Task("t1", estimated_minutes=100, optimistic_minutes=80, pessimistic_minutes=160, uncertainty_weight=4)
    estimate = estimate_task(task)
    assert (estimate.optimistic, estimate.pessimistic, estimate.weight) == (80, 160, 4)
    assert estimate.expected == pytest.approx((80 + 400 + 160) / 6)


def test_estimate_task_derives_when_bounds_inconsistent():
    task = Task("t1", estimated_minutes=90, optimistic_minutes=120, pessimistic_minutes=60)
    estimate = estimate_task(task, default_weight=3)
    assert (estimate.optimistic, estimate.pessimistic) == (61, 133)
