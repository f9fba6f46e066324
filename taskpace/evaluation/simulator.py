"""Offline multi-day comparison of allocation policies."""

import copy
import random
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from ..engine.allocator import DailyAllocator
from ..engine.forecaster import Forecaster
from ..forecast.worklog import add_minutes
from ..models.task import Task
from ..policies.base import AllocationPolicy
from ..policies.deadline import DeadlinePolicy
from ..policies.lag_score import LagScorePolicy
from ..utils.config import get_section
from ..utils.datetime_utils import day_key, get_timezone


class SimulationResult:
    """Results from simulating a policy."""

    def __init__(self, policy_name: str):
        self.policy_name = policy_name
        self.tasks_total = 0
        self.tasks_completed_on_time = 0
        self.tasks_late = 0
        self.planned_minutes = 0
        self.risk_days: Counter = Counter()

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON export."""
        on_time_rate = (self.tasks_completed_on_time / self.tasks_total * 100) if self.tasks_total > 0 else 0
        return {
            'policy': self.policy_name,
            'on_time_rate_percent': on_time_rate,
            'tasks_completed_on_time': self.tasks_completed_on_time,
            'tasks_late': self.tasks_late,
            'tasks_total': self.tasks_total,
            'planned_minutes': self.planned_minutes,
            'risk_days': dict(self.risk_days),
        }


class PolicySimulator:
    """Replays days of planning and logging for each policy on the same task set."""

    def __init__(self, config: Optional[dict] = None):
        """Initialize simulator with configuration."""
        self.config = config or {}
        self.eval_config = get_section(self.config, 'evaluation')
        self.tz = get_timezone(self.config.get('timezone'))

    def simulate(self, policy: AllocationPolicy, tasks: List[Task], start: datetime,
                 days: Optional[int] = None) -> SimulationResult:
        """Plan each day, log the plan with seeded noise, and re-forecast."""
        days = days or self.eval_config.get('simulate_days', 14)
        noise = float(self.eval_config.get('effort_noise', 0.25))
        rng = random.Random(self.eval_config.get('seed', 42))

        working = copy.deepcopy(tasks)
        allocator = DailyAllocator(policy, self.config)
        forecaster = Forecaster(config=self.config)
        result = SimulationResult(policy.get_policy_name())
        result.tasks_total = len(working)
        finished_at: Dict[str, datetime] = {}

        for offset in range(days):
            now = start + timedelta(days=offset)
            forecaster.refresh(working, now)
            for task in working:
                if task.forecast and task.forecast.risk_level and not task.completed:
                    result.risk_days[task.forecast.risk_level] += 1

            plan, _ = allocator.allocate(working, now)
            result.planned_minutes += plan.total_planned_minutes
            for task in working:
                planned = plan.minutes_for(task.task_id)
                if planned <= 0:
                    continue
                effort = planned * rng.uniform(1 - noise, 1 + noise)
                add_minutes(task, day_key(now, self.tz), effort)
                if task.remaining_minutes <= 0 and task.task_id not in finished_at:
                    task.completed = True
                    finished_at[task.task_id] = now

        for task in working:
            done = finished_at.get(task.task_id)
            if done is not None and task.deadline is not None and done <= task.deadline:
                result.tasks_completed_on_time += 1
            elif task.deadline is not None and (done is not None or task.deadline < start + timedelta(days=days)):
                result.tasks_late += 1

        return result

    def compare(self, tasks: List[Task], start: datetime) -> Tuple[SimulationResult, SimulationResult]:
        """Simulate the deadline baseline and the lag-score policy."""
        baseline = self.simulate(DeadlinePolicy(self.config), tasks, start)
        lag_score = self.simulate(LagScorePolicy(self.config), tasks, start)
        return baseline, lag_score
