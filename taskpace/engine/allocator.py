"""Daily capacity allocation engine."""

import logging
import math
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ..models.plan import DailyPlan, PlanItem
from ..models.task import Task
from ..models.trace import AllocationDecision, AllocationTrace, CandidateFeatures
from ..policies.base import AllocationPolicy
from ..policies.deadline import DeadlinePolicy
from ..utils.config import get_section
from ..utils.datetime_utils import day_key, days_until
from ..utils.numeric import round_half_up, round_up_to_five, to_optional_float
from .windows import day_capacity_minutes

logger = logging.getLogger(__name__)

DEFAULT_DAILY_CAP = 120


class DailyAllocator:
    """Greedy three-pass allocation of a daily time budget.

    1. take the top candidates by policy order at their minimum (required) pace;
    2. grow each toward its recovery target;
    3. pull in remaining capacity, nearest deadline first, in bounded steps.
    """

    def __init__(self, policy: AllocationPolicy, config: Optional[dict] = None):
        """Initialize allocator with policy and configuration."""
        self.policy = policy
        self.config = config or {}
        self.allocation_config = get_section(self.config, 'allocation')
        self.max_items = int(self.allocation_config.get('max_items', 3))
        self.pull_in_step = float(self.allocation_config.get('pull_in_step_minutes', 30))
        self.capacity_by_weekday = self.allocation_config.get('capacity_by_weekday') or {}
        cap = to_optional_float(self.allocation_config.get('daily_cap_minutes'))
        self.daily_cap = int(cap) if cap is not None and cap > 0 else DEFAULT_DAILY_CAP

    def resolve_cap(self, cap: Optional[float], now: datetime) -> int:
        """Use the requested cap when it is a sane positive number, else the configured default."""
        value = to_optional_float(cap)
        if value is not None and value > 0:
            return max(1, round_half_up(value))
        weekday_cap = day_capacity_minutes(day_key(now, self.policy.tz), self.capacity_by_weekday)
        if weekday_cap:
            return weekday_cap
        return self.daily_cap

    def allocate(
        self,
        tasks: List[Task],
        now: datetime,
        cap: Optional[float] = None,
    ) -> Tuple[DailyPlan, AllocationTrace]:
        """Build today's plan for the given tasks."""
        run_id = str(uuid.uuid4())[:8]
        capacity = self.resolve_cap(cap, now)

        candidates = [
            self.policy.compute_candidate_features(task, now)
            for task in tasks
            if self.policy.is_candidate(task, now)
        ]
        ordered = self.policy.order_candidates(candidates)

        decisions: List[AllocationDecision] = []
        selected = self._select(ordered, capacity, decisions)
        plan_items = [c for c in selected if c.allocated > 0]

        fallback_used = False
        if not plan_items and candidates:
            fallback_used = True
            plan_items = self.fallback(candidates, capacity, now, decisions)

        minutes = _round_allocations([c.allocated for c in plan_items], capacity)
        kept = [(c, m) for c, m in zip(plan_items, minutes) if m > 0]
        items = [
            PlanItem(
                task_id=c.task_id,
                planned_minutes=m,
                order=index + 1,
                required_minutes=round_half_up(c.required),
                title=c.title,
            )
            for index, (c, m) in enumerate(kept)
        ]
        plan = DailyPlan(day=day_key(now, self.policy.tz), cap_minutes=capacity, items=items)

        trace = AllocationTrace(
            run_id=run_id,
            timestamp=now,
            policy_name=self.policy.get_policy_name(),
            config={
                'cap_minutes': capacity,
                'max_items': self.max_items,
                'pull_in_step_minutes': self.pull_in_step,
            },
            candidates=ordered,
            decisions=decisions,
            summary_stats=self._compute_summary_stats(plan, candidates),
            fallback_used=fallback_used,
        )
        logger.debug(
            "allocation %s: %d candidates, %d planned, %d/%d minutes",
            run_id, len(candidates), len(items), plan.total_planned_minutes, capacity,
        )
        return plan, trace

    def _select(
        self,
        ordered: List[CandidateFeatures],
        cap: float,
        decisions: List[AllocationDecision],
    ) -> List[CandidateFeatures]:
        selected: List[CandidateFeatures] = []
        used = 0.0

        # pass 1: minimum pace for the top candidates
        for c in ordered:
            if len(selected) >= self.max_items or used >= cap:
                break
            c.allocated = min(c.min_minutes, max(0.0, cap - used))
            used += c.allocated
            selected.append(c)
            decisions.append(AllocationDecision(c.task_id, 'minimum', c.allocated, "Required pace"))

        # pass 2: grow toward recovery
        for c in selected:
            if used >= cap:
                break
            extra = min(max(0.0, c.recover_minutes - c.allocated), max(0.0, cap - used))
            if extra > 0:
                c.allocated += extra
                used += extra
                decisions.append(AllocationDecision(c.task_id, 'recover', extra, "Toward recovery target"))

        # pass 3: pull in remaining capacity, nearest deadline first
        by_deadline = sorted(selected, key=lambda c: c.deadline)
        progress = True
        while used < cap and progress:
            progress = False
            for c in by_deadline:
                if used >= cap:
                    break
                extra = min(self.pull_in_step, max(0.0, c.remaining_minutes - c.allocated), max(0.0, cap - used))
                if extra > 0:
                    c.allocated += extra
                    used += extra
                    progress = True
                    decisions.append(AllocationDecision(c.task_id, 'pull-in', extra, "Filling spare capacity"))

        return selected

    def fallback(
        self,
        candidates: List[CandidateFeatures],
        cap: float,
        now: datetime,
        decisions: Optional[List[AllocationDecision]] = None,
    ) -> List[CandidateFeatures]:
        """Nearest-deadline picks sized at the plain per-day pace.

        Used when the passes leave every candidate at zero minutes, so the
        user always has something to work on. Pass 3 gives every selected
        candidate a positive share whenever capacity is left, so from
        ``allocate`` this only runs as a guard against an empty plan.
        """
        decisions = decisions if decisions is not None else []
        ranked = DeadlinePolicy(self.config).order_candidates(candidates)
        picked: List[CandidateFeatures] = []
        cap_left = float(cap)
        for c in ranked:
            if len(picked) >= self.max_items or cap_left <= 0:
                break
            days = days_until(c.deadline, now)
            per_day = round_up_to_five(c.remaining_minutes / days) or 0
            minutes = min(per_day, c.remaining_minutes, cap_left)
            if minutes <= 0:
                continue
            c.allocated = minutes
            cap_left -= minutes
            picked.append(c)
            decisions.append(AllocationDecision(c.task_id, 'fallback', minutes, "No backlog signal; nearest deadline"))
        return picked

    def _compute_summary_stats(self, plan: DailyPlan, candidates: List[CandidateFeatures]) -> Dict[str, object]:
        """Compute summary statistics for the trace."""
        behind = sum(1 for c in candidates if c.lag > 0)
        return {
            'candidates_total': len(candidates),
            'candidates_behind': behind,
            'tasks_planned': len(plan.items),
            'total_planned_minutes': plan.total_planned_minutes,
            'capacity_utilization_percent': (
                plan.total_planned_minutes / plan.cap_minutes * 100 if plan.cap_minutes else 0
            ),
        }


def _round_allocations(values: List[float], cap: int) -> List[int]:
    """Whole minutes whose total never exceeds ``cap``.

    Floors every value, then hands the leftover minutes to the largest
    fractional parts.
    """
    floors = [int(math.floor(v)) for v in values]
    target = min(cap, round_half_up(sum(values)))
    leftover = max(0, target - sum(floors))
    by_fraction = sorted(range(len(values)), key=lambda i: values[i] - floors[i], reverse=True)
    for i in by_fraction[:leftover]:
        if values[i] - floors[i] > 0:
            floors[i] += 1
    return floors
