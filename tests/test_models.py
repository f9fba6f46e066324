from datetime import date, datetime, timedelta, timezone

import pytest

from taskpace.models.plan import DailyPlan, PlanItem, plans_equal
from taskpace.models.task import Task, TaskForecast
from taskpace.utils.datetime_utils import to_instant


def test_task_from_camel_case_record(tz):
    task = Task.from_record({
        'id': 't1',
        'text': 'Essay',
        'estimatedMinutes': '120',
        'deadline': {'seconds': 1773500000},
        'createdAt': '2026-03-01T09:00:00',
        'actualLogs': {'2026-03-09': 30, 'not-a-day': 10, '2026-03-08': -5},
        'actualTotalMinutes': 'abc',
        'scale': 4,
    }, tz)

    assert task.task_id == 't1'
    assert task.title == 'Essay'
    assert task.estimated_minutes == 120.0
    assert task.deadline == datetime.fromtimestamp(1773500000, tz=timezone.utc)
    assert task.created_at == datetime(2026, 3, 1, 9, 0, tzinfo=tz)
    assert task.actual_logs == {date(2026, 3, 9): 30.0, date(2026, 3, 8): 0.0}
    assert task.actual_total_minutes == 0.0
    assert task.uncertainty_weight == 4
    assert task.cumulative_minutes == 30
    assert task.remaining_minutes == 90


def test_task_record_with_flat_forecast_fields(tz):
    task = Task.from_record({'id': 't2', 'riskLevel': 'late', 'requiredPaceAdj': 12, 'eacDate': '2026-03-20'}, tz)

    assert task.forecast.risk_level == 'late'
    assert task.forecast.required_pace_adj == 12.0
    assert task.forecast.eac_date == date(2026, 3, 20)


def test_forecast_record_keeps_spi_alias():
    record = TaskForecast(spi_7d=0.75, eac_date=date(2026, 3, 12), risk_level='warn').to_record()
    assert record['spi'] == 0.75
    assert record['eac_date'] == '2026-03-12'
    assert TaskForecast.from_record({'riskLevel': 'nonsense'}).risk_level is None


def test_task_to_record_formats_days(now):
    task = Task('t3', deadline=now, actual_logs={date(2026, 3, 9): 15})
    record = task.to_record()
    assert record['actual_logs'] == {'2026-03-09': 15}
    assert record['deadline'] == now.isoformat()
    assert record['forecast'] is None


def test_to_instant_variants(tz):
    assert to_instant(None, tz) is None
    assert to_instant("not a date", tz) is None
    assert to_instant(float('nan'), tz) is None
    assert to_instant(True, tz) is None
    assert to_instant(date(2026, 3, 10), tz) == datetime(2026, 3, 10, tzinfo=tz)
    assert to_instant("2026-03-10T12:00:00Z", tz) == datetime(2026, 3, 10, 12, tzinfo=timezone.utc)
    assert to_instant(datetime(2026, 3, 10, 8, 0), tz).tzinfo is tz


def test_plan_validate_rejects_overbooking():
    plan = DailyPlan(date(2026, 3, 10), 60, [PlanItem('a', 40, 1), PlanItem('b', 30, 2)])
    with pytest.raises(ValueError):
        plan.validate()

    plan = DailyPlan(date(2026, 3, 10), 60, [PlanItem('a', 40, 1)])
    plan.validate({'a': 40})
    with pytest.raises(ValueError):
        plan.validate({'a': 20})


def test_plan_record_round_trip_and_equality(now):
    plan = DailyPlan(date(2026, 3, 10), 120, [PlanItem('a', 70, 1, 35, 'Essay'), PlanItem('b', 50, 2)])
    record = plan.to_record()

    assert record['totalPlannedMinutes'] == 120
    assert record['items'][0] == {
        'todoId': 'a', 'title': 'Essay', 'plannedMinutes': 70, 'requiredMinutes': 35, 'order': 1,
    }
    assert plans_equal(plan, DailyPlan.from_record(record))
    assert plan.minutes_for('b') == 50
    assert plan.minutes_for('zzz') == 0

    other = DailyPlan(date(2026, 3, 10), 120, [PlanItem('a', 60, 1), PlanItem('b', 60, 2)])
    assert not plans_equal(plan, other)
    assert not plans_equal(plan, None)


def test_has_started(now):
    task = Task('t4', planned_start_at=now + timedelta(hours=1))
    assert not task.has_started(now)
    assert task.has_started(now + timedelta(hours=2))


def test_uncertainty_weight_rounds_half_up(tz):
    assert Task.from_record({'id': 't5', 'uncertaintyWeight': 2.5}, tz).uncertainty_weight == 3
    assert Task.from_record({'id': 't6', 'uncertaintyWeight': '3.4'}, tz).uncertainty_weight == 3
