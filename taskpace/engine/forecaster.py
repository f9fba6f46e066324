"""Batch forecast refresh with change-only write-back."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from ..forecast.progress import changed_fields, forecast_with_config
from ..models.task import Task
from .store import Store

logger = logging.getLogger(__name__)


@dataclass
class ForecastReport:
    """Outcome of one refresh over a batch of tasks."""

    updated: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)


class Forecaster:
    """Recomputes task forecasts and writes back only what changed."""

    def __init__(self, store: Optional[Store] = None, config: Optional[dict] = None):
        """Initialize forecaster with an optional store and configuration."""
        self.store = store
        self.config = config or {}

    def refresh_task(self, task: Task, now: datetime) -> Dict[str, object]:
        """Forecast one task, persist the changed fields and cache the result on the task."""
        forecast = forecast_with_config(task, now, self.config)
        stored = task.forecast.to_record() if task.forecast else None
        changed = changed_fields(stored, forecast.to_record())
        if changed and self.store is not None:
            self.store.update_task_fields(task.task_id, changed)
        task.forecast = forecast
        return changed

    def refresh(self, tasks: List[Task], now: datetime) -> ForecastReport:
        """Forecast every task; one failing task does not stop the others."""
        report = ForecastReport()
        for task in tasks:
            try:
                changed = self.refresh_task(task, now)
            except Exception as exc:
                logger.exception("forecast failed for task %s", task.task_id)
                report.failed[task.task_id] = str(exc)
                continue
            if changed:
                report.updated.append(task.task_id)
            else:
                report.unchanged.append(task.task_id)

        logger.info(
            "forecast refresh: %d updated, %d unchanged, %d failed",
            len(report.updated), len(report.unchanged), len(report.failed),
        )
        return report
