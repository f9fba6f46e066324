from datetime import datetime

from taskpace.engine.windows import window_settings
from taskpace.estimation.required_time import recommend_start, required_minutes
from taskpace.models.task import Task
from taskpace.utils.config import get_default_config


def test_required_minutes_by_risk_mode():
    task = Task('t1', estimated_minutes=90, uncertainty_weight=3)

    assert required_minutes(task, 'mean').minutes == 93
    assert required_minutes(task, 'safe').minutes == 105
    assert required_minutes(task, 'challenge').minutes == 81
    assert required_minutes(task, 'unknown').minutes == 93


def test_required_minutes_priority_and_buffer():
    high = Task('t1', estimated_minutes=90, priority='high')
    buffered = Task('t2', estimated_minutes=90, buffer_rate=0.1)
    low = Task('t3', estimated_minutes=90, priority='low')

    assert required_minutes(high).minutes == 107
    assert required_minutes(buffered).minutes == 102
    assert required_minutes(low).minutes == 84


def test_required_minutes_is_at_least_one():
    assert required_minutes(Task('t1', estimated_minutes=0)).minutes >= 1


def test_recommend_start_clamped_into_window(tz):
    notify, work = window_settings(get_default_config())
    evening = Task('t1', deadline=datetime(2026, 3, 10, 20, 0, tzinfo=tz))
    afternoon = Task('t2', deadline=datetime(2026, 3, 10, 16, 0, tzinfo=tz))

    assert recommend_start(evening, 93, notify, work, tz) == datetime(2026, 3, 10, 18, 0, tzinfo=tz)
    assert recommend_start(afternoon, 93, notify, work, tz) == datetime(2026, 3, 10, 14, 27, tzinfo=tz)
    assert recommend_start(Task('t3'), 93, notify, work, tz) is None
