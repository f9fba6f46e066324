"""Synthetic task and work-log generator."""

import random
from datetime import datetime, timedelta
from typing import List, Optional

from ..models.task import Task
from ..utils.config import get_section
from ..utils.datetime_utils import day_key, get_timezone


class TaskGenerator:
    """Generates deterministic task sets with partial work histories."""

    def __init__(self, seed: int = 42, config: Optional[dict] = None):
        """Initialize generator with seed for reproducibility."""
        self.seed = seed
        self.random = random.Random(seed)
        self.config = config or {}
        self.eval_config = get_section(self.config, 'evaluation')
        self.tz = get_timezone(self.config.get('timezone'))

    def generate_tasks(self, count: int, now: datetime) -> List[Task]:
        """Generate a set of open tasks with realistic properties."""
        tasks = []
        categories = ['report', 'study', 'review', 'planning', 'coding']
        priorities = ['low', 'mid', 'mid', 'high']

        for i in range(count):
            # Vary task sizes (some small, some large)
            roll = self.random.random()
            if roll < 0.3:
                estimated_minutes = self.random.randint(30, 120)
            elif roll < 0.8:
                estimated_minutes = self.random.randint(120, 600)
            else:
                estimated_minutes = self.random.randint(600, 1800)

            created_at = now - timedelta(days=self.random.randint(0, 10))
            deadline = now + timedelta(days=self.random.randint(1, 21))

            planned_start_at = None
            if self.random.random() < 0.1:
                planned_start_at = now + timedelta(days=self.random.randint(1, 3))

            task = Task(
                task_id=f"task_{i:03d}",
                title=f"{self.random.choice(categories).title()} {i}",
                estimated_minutes=estimated_minutes,
                deadline=deadline,
                uncertainty_weight=self.random.randint(1, 5),
                created_at=created_at,
                planned_start_at=planned_start_at,
                priority=self.random.choice(priorities),
            )
            self._generate_history(task, now)
            tasks.append(task)

        return tasks

    def _generate_history(self, task: Task, now: datetime) -> None:
        """Fill the log for the days between creation and yesterday."""
        if task.planned_start_at is not None:
            return
        today = day_key(now, self.tz)
        day = day_key(task.created_at, self.tz)
        diligence = self.random.uniform(0.2, 1.0)
        while day < today:
            if self.random.random() < diligence:
                minutes = self.random.choice([15, 20, 30, 45, 60, 90])
                task.actual_logs[day] = minutes
            day += timedelta(days=1)

        logged = task.logged_minutes
        if logged >= task.estimated_minutes:
            # keep generated tasks open
            task.actual_logs.clear()
            logged = 0
        task.actual_total_minutes = logged

    def generate_task_stream(self, now: datetime, task_count: Optional[int] = None) -> List[Task]:
        """Generate the configured number of tasks."""
        task_count = task_count or self.eval_config.get('task_count', 12)
        return self.generate_tasks(task_count, now)
