"""Daily plan models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..utils.datetime_utils import format_day_key, parse_day_key
from ..utils.numeric import round_half_up, to_minutes, to_optional_float


@dataclass
class PlanItem:
    """One task recommended for today."""

    task_id: str
    planned_minutes: int
    order: int
    required_minutes: Optional[int] = None
    title: str = ""

    def to_record(self) -> Dict[str, Any]:
        return {
            'todoId': self.task_id,
            'title': self.title,
            'plannedMinutes': self.planned_minutes,
            'requiredMinutes': self.required_minutes,
            'order': self.order,
        }


@dataclass
class DailyPlan:
    """Capacity-bounded allocation for one user and one calendar day."""

    day: date
    cap_minutes: Optional[int]
    items: List[PlanItem] = field(default_factory=list)

    @property
    def total_planned_minutes(self) -> int:
        return sum(item.planned_minutes for item in self.items)

    def minutes_for(self, task_id: str) -> int:
        """Planned minutes for a task, 0 when it is not in the plan."""
        for item in self.items:
            if item.task_id == task_id:
                return item.planned_minutes
        return 0

    def validate(self, remaining_by_task: Optional[Dict[str, float]] = None) -> None:
        """Reject plans that break the capacity invariant.

        Raises ValueError for negative minutes, totals above the cap, or
        allocations beyond a task's remaining work when that is known.
        """
        for item in self.items:
            if item.planned_minutes < 0:
                raise ValueError(f"Negative planned minutes for {item.task_id}")
            if remaining_by_task is not None and item.task_id in remaining_by_task:
                if item.planned_minutes > remaining_by_task[item.task_id] + 0.5:
                    raise ValueError(f"Planned minutes exceed remaining work for {item.task_id}")
        if self.cap_minutes is not None and self.total_planned_minutes > self.cap_minutes:
            raise ValueError(
                f"Planned total {self.total_planned_minutes} exceeds capacity {self.cap_minutes}"
            )

    def to_record(self) -> Dict[str, Any]:
        """Document shape persisted per user and day."""
        return {
            'date': format_day_key(self.day),
            'capMinutes': self.cap_minutes,
            'totalPlannedMinutes': self.total_planned_minutes,
            'items': [item.to_record() for item in self.items],
        }

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> 'DailyPlan':
        items = []
        for index, raw in enumerate(data.get('items') or []):
            order = to_optional_float(raw.get('order'))
            required = to_optional_float(raw.get('requiredMinutes'))
            items.append(PlanItem(
                task_id=str(raw.get('todoId')),
                planned_minutes=round_half_up(to_minutes(raw.get('plannedMinutes'))),
                order=int(order) if order is not None else index + 1,
                required_minutes=round_half_up(required) if required is not None else None,
                title=str(raw.get('title') or ''),
            ))
        cap = to_optional_float(data.get('capMinutes'))
        return cls(
            day=parse_day_key(data.get('date')),
            cap_minutes=round_half_up(cap) if cap is not None else None,
            items=items,
        )


@dataclass(frozen=True)
class PlanRevision:
    """Append-only audit record of a plan refresh."""

    before: Optional[Dict[str, Any]]
    after: Dict[str, Any]
    changed_at: datetime

    def to_record(self) -> Dict[str, Any]:
        return {
            'before': self.before,
            'after': self.after,
            'changedAt': self.changed_at.isoformat(),
        }


def plans_equal(a: Optional[DailyPlan], b: Optional[DailyPlan]) -> bool:
    """Whether two plans would show the user the same thing."""
    if a is None or b is None:
        return False
    if a.cap_minutes != b.cap_minutes:
        return False
    if a.total_planned_minutes != b.total_planned_minutes:
        return False
    if len(a.items) != len(b.items):
        return False
    return all(
        x.task_id == y.task_id and x.planned_minutes == y.planned_minutes and x.order == y.order
        for x, y in zip(a.items, b.items)
    )
