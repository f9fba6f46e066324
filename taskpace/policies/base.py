"""Base allocation policy interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..forecast.guidance import recovery_fallback, resolve_guidance
from ..models.task import Task
from ..models.trace import CandidateFeatures
from ..utils.datetime_utils import days_until, get_timezone
from ..utils.numeric import clamp, to_minutes, to_optional_float


class AllocationPolicy(ABC):
    """Abstract base class for daily allocation policies."""

    def __init__(self, config: Optional[dict] = None):
        """Initialize policy with configuration."""
        self.config = config or {}
        self.tz = get_timezone(self.config.get('timezone'))

    def is_candidate(self, task: Task, now: datetime) -> bool:
        """Open, started, deadline-bearing work can be planned for today."""
        if task.completed or task.deadline is None:
            return False
        if not task.has_started(now):
            return False
        estimated = to_minutes(task.estimated_minutes)
        return estimated > 0 and task.cumulative_minutes < estimated

    def compute_candidate_features(self, task: Task, now: datetime) -> CandidateFeatures:
        """Compute lag, urgency and per-day targets for a task."""
        estimated = to_minutes(task.estimated_minutes)
        actual = task.cumulative_minutes
        remaining = max(0.0, estimated - actual)

        created = task.created_at or now
        total_days = days_until(task.deadline, created)
        elapsed = days_until(now, created, minimum=0)
        ideal = min(1.0, elapsed / total_days)
        lag = ideal - min(1.0, actual / estimated)

        days_to_deadline = days_until(task.deadline, now)
        score = 3 * max(0.0, lag) + 2 / (days_to_deadline + 1) + remaining / days_to_deadline

        required = self._required_pace(task)
        min_minutes = clamp(required, 0.0, remaining)

        risk = task.forecast.risk_level if task.forecast else None
        guidance = resolve_guidance(task.deadline, remaining, risk, now, self.tz)
        recover = guidance.required_minutes_for_ok
        if recover is None:
            recover = recovery_fallback(remaining, days_to_deadline, lag > 0)
        recover_minutes = clamp(recover, min_minutes, remaining)

        return CandidateFeatures(
            task_id=task.task_id,
            title=task.title,
            remaining_minutes=remaining,
            days_to_deadline=days_to_deadline,
            deadline=task.deadline,
            lag=lag,
            score=score,
            required=required,
            min_minutes=min_minutes,
            recover_minutes=recover_minutes,
        )

    @staticmethod
    def _required_pace(task: Task) -> float:
        """Relaxed required pace when available, else the plain one, else 0."""
        if task.forecast is None:
            return 0.0
        for value in (task.forecast.required_pace_adj, task.forecast.required_pace):
            number = to_optional_float(value)
            if number is not None:
                return max(0.0, number)
        return 0.0

    @abstractmethod
    def order_candidates(self, candidates: List[CandidateFeatures]) -> List[CandidateFeatures]:
        """Order candidates according to policy logic."""
        pass

    @abstractmethod
    def get_policy_name(self) -> str:
        """Return the name of this policy."""
        pass
