from datetime import timedelta

from taskpace.forecast.guidance import recovery_fallback, resolve_guidance
from taskpace.utils.datetime_utils import day_key, start_of_day


def deadline_in(now, tz, days):
    return start_of_day(day_key(now, tz), tz) + timedelta(days=days)


def test_late_task_targets(now, tz):
    guidance = resolve_guidance(deadline_in(now, tz, 4), 100, 'late', now, tz)
    assert guidance.required_per_day == 25
    assert guidance.required_minutes_for_warn == 25
    assert guidance.required_minutes_for_ok == 50


def test_warn_task_targets(now, tz):
    guidance = resolve_guidance(deadline_in(now, tz, 4), 100, 'warn', now, tz)
    assert guidance.required_minutes_for_warn == 0
    assert guidance.required_minutes_for_ok == 40


def test_ok_or_unknown_risk_targets(now, tz):
    for risk in ('ok', None, 'bogus'):
        guidance = resolve_guidance(deadline_in(now, tz, 4), 100, risk, now, tz)
        assert guidance.required_minutes_for_warn == 25
        assert guidance.required_minutes_for_ok == 25


def test_targets_capped_at_remaining(now, tz):
    guidance = resolve_guidance(deadline_in(now, tz, 1), 30, 'late', now, tz)
    assert guidance.required_minutes_for_ok == 30


def test_no_guidance_without_deadline_or_remaining(now, tz):
    assert not resolve_guidance(None, 100, 'late', now, tz).available
    assert not resolve_guidance(deadline_in(now, tz, 3), 0, 'late', now, tz).available
    assert not resolve_guidance(deadline_in(now, tz, 3), None, 'late', now, tz).available
    assert resolve_guidance(None, 100, 'late', now, tz).required_minutes_for_ok is None


def test_past_deadline_counts_as_one_day(now, tz):
    guidance = resolve_guidance(now - timedelta(days=2), 45, 'ok', now, tz)
    assert guidance.required_per_day == 45
    assert guidance.required_minutes_for_ok == 45


def test_targets_are_multiples_of_five(now, tz):
    for remaining in range(5, 400, 5):
        for days in (1, 2, 3, 6, 9):
            for risk in ('ok', 'warn', 'late'):
                guidance = resolve_guidance(deadline_in(now, tz, days), remaining, risk, now, tz)
                for value in (guidance.required_minutes_for_warn, guidance.required_minutes_for_ok):
                    assert value % 5 == 0
                    assert 0 <= value <= remaining


def test_recovery_fallback():
    assert recovery_fallback(100, 4, behind=False) == 25
    assert recovery_fallback(100, 4, behind=True) == 50
    assert recovery_fallback(0, 4, behind=True) == 0
