from datetime import timedelta

import pytest

from taskpace.engine.allocator import DailyAllocator
from taskpace.engine.planner import MODE_REMAINING, DailyPlanner
from taskpace.engine.store import InMemoryStore, JsonFileStore, PlanPersistenceError
from taskpace.forecast.worklog import add_minutes
from taskpace.models.plan import plans_equal
from taskpace.models.task import Task
from taskpace.policies import LagScorePolicy
from taskpace.utils.config import get_default_config
from taskpace.utils.datetime_utils import day_key


class DeniedStore(InMemoryStore):
    def save_plan(self, user_id, plan):
        raise PlanPersistenceError("write denied", permission_denied=True)


class FlakyStore(InMemoryStore):
    def save_plan(self, user_id, plan):
        raise PlanPersistenceError("backend unavailable")


def make_planner(store):
    config = get_default_config()
    return DailyPlanner(store, DailyAllocator(LagScorePolicy(config), config), config)


def make_tasks(now):
    return [
        Task('a', title='Essay', estimated_minutes=300, deadline=now + timedelta(days=3), created_at=now),
        Task('b', title='Slides', estimated_minutes=200, deadline=now + timedelta(days=4), created_at=now),
    ]


def test_get_or_create_saves_once(now, tz):
    store = InMemoryStore()
    planner = make_planner(store)
    tasks = make_tasks(now)

    first = planner.get_or_create('u1', tasks, now)
    second = planner.get_or_create('u1', tasks, now)

    assert list(store.plans) == [('u1', day_key(now, tz))]
    assert plans_equal(first, second)
    assert first.cap_minutes == 120
    assert {item.task_id for item in first.items} == {'a', 'b'}


def test_get_or_create_tolerates_save_failure(now):
    plan = make_planner(DeniedStore()).get_or_create('u1', make_tasks(now), now)
    assert plan.items


def test_refresh_without_changes_writes_nothing(now, tz):
    store = InMemoryStore()
    planner = make_planner(store)
    tasks = make_tasks(now)
    planner.get_or_create('u1', tasks, now)

    result = planner.refresh('u1', tasks, now)

    assert not result.changed
    assert result.persisted
    assert store.revisions == {}


def test_refresh_after_completion_records_revision(now, tz):
    store = InMemoryStore()
    planner = make_planner(store)
    tasks = make_tasks(now)
    before = planner.get_or_create('u1', tasks, now)

    tasks[0].completed = True
    result = planner.refresh('u1', tasks, now)

    assert result.changed and result.persisted
    assert [item.task_id for item in result.plan.items] == ['b']
    revisions = store.revisions[('u1', day_key(now, tz))]
    assert len(revisions) == 1
    assert revisions[0].before == before.to_record()
    assert revisions[0].after == result.plan.to_record()
    assert revisions[0].changed_at == now


def test_first_refresh_saves_without_revision(now, tz):
    store = InMemoryStore()
    result = make_planner(store).refresh('u1', make_tasks(now), now)

    assert result.changed and result.persisted
    assert ('u1', day_key(now, tz)) in store.plans
    assert store.revisions == {}


def test_refresh_permission_error_is_retryable(now):
    result = make_planner(DeniedStore()).refresh('u1', make_tasks(now), now)

    assert result.changed
    assert not result.persisted
    assert result.retryable
    assert "Permission" in result.message
    assert result.plan.items


def test_refresh_generic_persistence_error(now):
    result = make_planner(FlakyStore()).refresh('u1', make_tasks(now), now)
    assert result.retryable
    assert "try again" in result.message


def test_remaining_mode_subtracts_logged_minutes(now, tz):
    tasks = make_tasks(now)
    tasks[0].actual_logs[day_key(now, tz)] = 90
    tasks[0].actual_total_minutes = 90

    plan = make_planner(InMemoryStore()).compute_plan(tasks, now, mode=MODE_REMAINING)

    assert plan.cap_minutes is None
    assert plan.total_planned_minutes <= 30


def test_compute_plan_forecasts_missing_tasks(now):
    tasks = make_tasks(now)
    make_planner(InMemoryStore()).compute_plan(tasks, now)
    assert all(task.forecast is not None for task in tasks)


def test_json_store_round_trip(tmp_path, now, tz):
    store = JsonFileStore(str(tmp_path))
    planner = make_planner(store)
    tasks = make_tasks(now)

    plan = planner.get_or_create('u1', tasks, now)
    loaded = store.load_plan('u1', day_key(now, tz))
    assert plans_equal(plan, loaded)

    tasks[1].completed = True
    planner.refresh('u1', tasks, now)
    assert (tmp_path / "plans" / "u1" / f"{day_key(now, tz).isoformat()}.history.json").exists()


def test_refresh_uses_newly_logged_minutes(now, tz):
    store = InMemoryStore()
    planner = make_planner(store)
    tasks = make_tasks(now)
    planner.get_or_create('u1', tasks, now)
    assert tasks[0].forecast.required_pace == 100.0

    add_minutes(tasks[0], day_key(now, tz), 150)
    result = planner.refresh('u1', tasks, now)

    assert tasks[0].forecast.required_pace == 50.0
    assert store.task_fields['a']['required_pace'] == 50.0
    item = next(i for i in result.plan.items if i.task_id == 'a')
    assert item.required_minutes == 50


def corrupt_plan_file(root, now, tz):
    path = root / "plans" / "u1" / f"{day_key(now, tz).isoformat()}.json"
    path.parent.mkdir(parents=True)
    path.write_text("{not json")
    return path


def test_json_store_wraps_read_errors(tmp_path, now, tz):
    corrupt_plan_file(tmp_path, now, tz)
    with pytest.raises(PlanPersistenceError):
        JsonFileStore(str(tmp_path)).load_plan('u1', day_key(now, tz))


def test_refresh_replaces_corrupt_plan_file(tmp_path, now, tz):
    path = corrupt_plan_file(tmp_path, now, tz)
    store = JsonFileStore(str(tmp_path))

    result = make_planner(store).refresh('u1', make_tasks(now), now)

    assert result.persisted
    assert result.plan.items
    assert plans_equal(store.load_plan('u1', day_key(now, tz)), result.plan)
    assert not path.with_name(path.stem + ".history.json").exists()


def test_get_or_create_recomputes_over_corrupt_plan_file(tmp_path, now, tz):
    corrupt_plan_file(tmp_path, now, tz)
    plan = make_planner(JsonFileStore(str(tmp_path))).get_or_create('u1', make_tasks(now), now)
    assert {item.task_id for item in plan.items} == {'a', 'b'}
