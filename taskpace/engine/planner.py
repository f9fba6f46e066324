"""Daily plan lifecycle: lazy creation, refresh and revision history."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..models.plan import DailyPlan, PlanRevision, plans_equal
from ..models.task import Task
from ..utils.datetime_utils import day_key
from .allocator import DailyAllocator
from .forecaster import Forecaster
from .store import PlanPersistenceError, Store

logger = logging.getLogger(__name__)

MODE_INITIAL = "initial"
MODE_REMAINING = "remaining"


@dataclass
class RefreshResult:
    """What a refresh did, for the caller to surface to the user."""

    plan: DailyPlan
    changed: bool
    persisted: bool
    retryable: bool = False
    message: str = ""


class DailyPlanner:
    """Creates one plan per user per day and keeps an audit trail of refreshes."""

    def __init__(self, store: Store, allocator: DailyAllocator, config: Optional[dict] = None):
        """Initialize planner with a store, an allocator and configuration."""
        self.store = store
        self.allocator = allocator
        self.config = config or {}
        self.forecaster = Forecaster(store, self.config)

    def compute_plan(self, tasks: List[Task], now: datetime, mode: str = MODE_INITIAL) -> DailyPlan:
        """Re-forecast every task from its logs, then run the allocator."""
        # stored fields are only rewritten when a forecast changed
        self.forecaster.refresh(tasks, now)

        if mode == MODE_REMAINING:
            plan, _ = self.allocator.allocate(tasks, now, cap=self._remaining_cap(tasks, now))
            plan.cap_minutes = None
        else:
            plan, _ = self.allocator.allocate(tasks, now)
        return plan

    def _remaining_cap(self, tasks: List[Task], now: datetime) -> Optional[float]:
        """Daily cap minus what was already logged today; None lets the allocator fall back."""
        today = day_key(now, self.allocator.policy.tz)
        logged_today = sum(t.actual_logs.get(today, 0) for t in tasks)
        remaining = self.allocator.resolve_cap(None, now) - logged_today
        return remaining if remaining > 0 else None

    def get_or_create(self, user_id: str, tasks: List[Task], now: datetime) -> DailyPlan:
        """Today's stored plan, computed and saved on first use."""
        today = day_key(now, self.allocator.policy.tz)
        try:
            existing = self.store.load_plan(user_id, today)
        except PlanPersistenceError as exc:
            logger.warning("could not load plan for %s: %s", user_id, exc)
            existing = None
        if existing is not None:
            return existing

        plan = self.compute_plan(tasks, now)
        try:
            self.store.save_plan(user_id, plan)
        except PlanPersistenceError as exc:
            logger.warning("could not save initial plan for %s: %s", user_id, exc)
        return plan

    def refresh(self, user_id: str, tasks: List[Task], now: datetime, mode: str = MODE_INITIAL) -> RefreshResult:
        """Recompute today's plan and persist it only if it changed."""
        today = day_key(now, self.allocator.policy.tz)
        try:
            previous = self.store.load_plan(user_id, today)
        except PlanPersistenceError as exc:
            logger.warning("could not load plan for %s: %s", user_id, exc)
            previous = None

        plan = self.compute_plan(tasks, now, mode)

        if previous is not None and plans_equal(previous, plan):
            return RefreshResult(plan, changed=False, persisted=True,
                                 message="No progress changes; the plan is unchanged.")

        try:
            self.store.save_plan(user_id, plan)
            if previous is not None:
                revision = PlanRevision(before=previous.to_record(), after=plan.to_record(), changed_at=now)
                self.store.append_revision(user_id, today, revision)
        except PlanPersistenceError as exc:
            logger.warning("could not persist refreshed plan for %s: %s", user_id, exc)
            if exc.permission_denied:
                message = "Permission denied while saving today's plan; sign in again or check access."
            else:
                message = "Saving today's plan failed; please try again later."
            return RefreshResult(plan, changed=True, persisted=False, retryable=True, message=message)

        return RefreshResult(plan, changed=True, persisted=True,
                             message="Today's plan was recalculated from the logged progress.")
