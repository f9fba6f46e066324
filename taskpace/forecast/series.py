"""Per-day progress series for charts and analytics."""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from ..models.task import Task
from ..utils.datetime_utils import day_key, days_until, get_timezone, start_of_day
from ..utils.numeric import round_to, to_minutes
from .progress import WARMUP_WORKED_DAYS, WINDOW_DAYS


@dataclass
class SeriesPoint:
    day: date
    minutes: float
    cumulative: float
    remaining: float
    pace_7d: float
    eac_date: Optional[date]
    spi: Optional[float]


def build_progress_series(task: Task, days: Sequence[date], tz: Optional[ZoneInfo] = None) -> List[SeriesPoint]:
    """Replay the task's log over ``days``.

    The series starts at the planned start day, or the earliest logged day
    when no start is planned; days before it are dropped. The 7-day pace only
    looks back over the series itself, with the same warm-up rule as the
    forecast.
    """
    tz = tz or get_timezone()
    if not days:
        return []

    if task.planned_start_at is not None:
        start = day_key(task.planned_start_at, tz)
    elif task.actual_logs:
        start = min(task.actual_logs)
    else:
        start = None

    effective = [d for d in days if start is None or d >= start]
    estimated = to_minutes(task.estimated_minutes)
    points: List[SeriesPoint] = []
    cumulative = 0.0

    for index, day in enumerate(effective):
        minutes = to_minutes(task.actual_logs.get(day))
        cumulative += minutes
        remaining = max(0.0, estimated - cumulative)

        window = [to_minutes(task.actual_logs.get(d)) for d in effective[max(0, index - WINDOW_DAYS + 1):index + 1]]
        worked = sum(1 for m in window if m > 0)
        pace = sum(window) / (max(1, worked) if worked < WARMUP_WORKED_DAYS else WINDOW_DAYS)

        eac_date = None
        if pace > 0 and remaining > 0:
            eac_date = day + timedelta(days=math.ceil(remaining / pace))

        spi = None
        if task.deadline is not None:
            days_left = days_until(task.deadline, start_of_day(day, tz))
            required = remaining / days_left if remaining > 0 else 0.0
            if required > 0:
                spi = round_to(pace / required, 2)
            else:
                spi = 1.0 if remaining == 0 else 0.0

        points.append(SeriesPoint(day, minutes, cumulative, remaining, pace, eac_date, spi))

    return points
