"""Applying edits to a task's daily work log."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from ..models.task import Task
from ..utils.numeric import round_half_up, to_minutes


@dataclass(frozen=True)
class LogChange:
    day: date
    delta: int
    next_total: float


def sanitize_minutes(value: Any) -> int:
    """Whole, non-negative minutes; anything invalid is 0."""
    return round_half_up(to_minutes(value))


def apply_log_diff(task: Task, day: date, new_value: Any, old_value: Optional[Any] = None) -> LogChange:
    """Replace the minutes logged on ``day`` and move the cumulative total by the difference.

    Raises ValueError if the cumulative total would become negative.
    """
    new_minutes = sanitize_minutes(new_value)
    old_minutes = sanitize_minutes(task.actual_logs.get(day) if old_value is None else old_value)
    delta = new_minutes - old_minutes

    if delta == 0:
        return LogChange(day, 0, to_minutes(task.actual_total_minutes))

    next_total = sanitize_minutes(task.actual_total_minutes) + delta
    if next_total < 0:
        raise ValueError(f"Cumulative minutes for task {task.task_id} would become negative")

    task.actual_logs[day] = max(0, sanitize_minutes(task.actual_logs.get(day)) + delta)
    task.actual_total_minutes = next_total
    return LogChange(day, delta, next_total)


def add_minutes(task: Task, day: date, minutes: Any) -> LogChange:
    """Add minutes on top of what is already logged for the day."""
    existing = sanitize_minutes(task.actual_logs.get(day))
    return apply_log_diff(task, day, existing + sanitize_minutes(minutes), existing)
