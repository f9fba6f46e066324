"""Rolling progress forecast.

Turns a task's daily effort log into a trailing 7-day pace, an exponentially
smoothed pace, the pace required to meet the deadline, schedule performance
ratios (SPI), a projected completion day (EAC) and a risk level.

Everything here is a pure function of the task, ``now`` and the tunables.
"""

import math
from datetime import date, datetime, timedelta
from functools import reduce
from typing import Any, Dict, Iterable, Mapping, Optional
from zoneinfo import ZoneInfo

from ..models.task import Task, TaskForecast
from ..utils.config import get_section
from ..utils.datetime_utils import day_key, day_range, days_until, get_timezone, start_of_day, trailing_days
from ..utils.numeric import clamp, nearly_equal, round_to, to_minutes

EPSILON = 1e-6
WINDOW_DAYS = 7
WARMUP_WORKED_DAYS = 3
SPI_WARN = 0.9

# fields compared when deciding whether a write-back is needed
FORECAST_FIELDS = (
    'actual_total_minutes',
    'pace_7d',
    'pace_exp',
    'required_pace',
    'required_pace_adj',
    'spi',
    'spi_7d',
    'spi_exp',
    'spi_adj',
    'eac_date',
    'risk_level',
    'ideal_progress',
    'actual_progress',
)


def window_pace(logs: Mapping[date, float], today: date) -> tuple:
    """Trailing 7-day pace with the warm-up rule.

    Returns (pace, sum of the window, number of days with work). Until three
    days in the window have work, the sum is divided by the worked days
    instead of 7 so that early zero days do not dilute the pace.
    """
    minutes = [to_minutes(logs.get(day)) for day in trailing_days(today, WINDOW_DAYS)]
    total = sum(minutes)
    worked_days = sum(1 for m in minutes if m > 0)
    denominator = max(1, worked_days) if worked_days < WARMUP_WORKED_DAYS else WINDOW_DAYS
    return total / denominator, total, worked_days


def exponential_pace(daily_minutes: Iterable[float], alpha: float, initial: float = 0.0) -> float:
    """Fold daily minutes through the smoothing recurrence alpha*x + (1-alpha)*prev."""
    return reduce(lambda prev, minutes: alpha * minutes + (1 - alpha) * prev, daily_minutes, initial)


def smoothed_pace(task: Task, today: date, alpha: float, tz: Optional[ZoneInfo] = None) -> float:
    """Exponential pace over the task's history from its first day through today."""
    first_days = [day for day in task.actual_logs if day <= today]
    if task.created_at is not None:
        first_days.append(day_key(task.created_at, tz))
    if not first_days:
        return 0.0
    start = min(min(first_days), today)
    history = (to_minutes(task.actual_logs.get(day)) for day in day_range(start, today))
    return exponential_pace(history, alpha)


def performance_index(pace: float, required_pace: float, remaining: float) -> float:
    """Schedule performance index: actual pace over required pace."""
    if required_pace > EPSILON:
        return pace / required_pace
    return 1.0 if remaining == 0 else 0.0


def projected_completion(today: date, remaining: float, pace: float) -> Optional[date]:
    """Day the remaining work is done at the given pace; None without velocity."""
    if remaining <= 0:
        return today
    if pace <= EPSILON:
        return None
    return today + timedelta(days=math.ceil(remaining / max(EPSILON, pace)))


def progress_ratios(task: Task, now: datetime, actual: float) -> tuple:
    """(ideal, actual) progress ratios for display."""
    estimated = to_minutes(task.estimated_minutes)
    actual_progress = clamp(actual / estimated, 0.0, 1.0) if estimated > 0 else 0.0
    if task.created_at is None or task.deadline is None:
        return None, actual_progress
    total_days = days_until(task.deadline, task.created_at)
    elapsed = days_until(now, task.created_at, minimum=0)
    return clamp(elapsed / total_days, 0.0, 1.0), actual_progress


def classify_risk(
    remaining: float,
    has_deadline: bool,
    worked_days: int,
    spi_7d: float,
    projected_late: bool,
) -> str:
    """Risk level from the unrelaxed SPI and the projected completion.

    The warn cut-off is the fixed SPI_WARN; the configurable threshold only
    decides when the required pace is relaxed. During warm-up (fewer than
    three worked days) ``late`` is never reported.
    """
    if remaining <= 0 or not has_deadline:
        return 'ok'
    if worked_days < WARMUP_WORKED_DAYS:
        return 'warn' if spi_7d < SPI_WARN or projected_late else 'ok'
    if projected_late:
        return 'late'
    if spi_7d < SPI_WARN:
        return 'warn'
    return 'ok'


def forecast_progress(
    task: Task,
    now: datetime,
    alpha: float = 0.3,
    relax_factor: float = 0.9,
    spi_warn_threshold: float = SPI_WARN,
    tz: Optional[ZoneInfo] = None,
) -> TaskForecast:
    """Compute the forecast fields for one task."""
    tz = tz or get_timezone()
    today = day_key(now, tz)

    actual = task.cumulative_minutes
    pace_7d, _, worked_days = window_pace(task.actual_logs, today)
    pace_exp = smoothed_pace(task, today, alpha, tz)
    remaining = max(0.0, to_minutes(task.estimated_minutes) - actual)

    required_pace = 0.0
    eac_date = None
    projected_late = False
    if task.deadline is not None:
        days_left = days_until(task.deadline, now)
        required_pace = remaining / days_left if remaining > 0 else 0.0
        eac_date = projected_completion(today, remaining, pace_7d)
        projected_late = eac_date is None or start_of_day(eac_date, tz) > task.deadline

    spi_7d = performance_index(pace_7d, required_pace, remaining)
    spi_exp = performance_index(pace_exp, required_pace, remaining)

    # dynamic buffer: a below-threshold task is measured against a relaxed pace
    required_pace_adj = required_pace
    spi_adj = spi_7d
    if spi_7d < spi_warn_threshold:
        required_pace_adj = required_pace * relax_factor
        spi_adj = performance_index(pace_7d, required_pace_adj, remaining)

    ideal_progress, actual_progress = progress_ratios(task, now, actual)

    risk_level = None
    if task.has_started(now):
        risk_level = classify_risk(
            remaining,
            task.deadline is not None,
            worked_days,
            spi_7d,
            projected_late,
        )

    return TaskForecast(
        actual_total_minutes=actual,
        remaining_minutes=remaining,
        worked_days_7d=worked_days,
        pace_7d=round_to(pace_7d, 1),
        pace_exp=round_to(pace_exp, 1),
        required_pace=round_to(required_pace, 1),
        required_pace_adj=round_to(required_pace_adj, 1),
        spi_7d=round_to(spi_7d, 2),
        spi_exp=round_to(spi_exp, 2),
        spi_adj=round_to(spi_adj, 2),
        eac_date=eac_date,
        risk_level=risk_level,
        ideal_progress=round_to(ideal_progress, 2),
        actual_progress=round_to(actual_progress, 2),
    )


def forecast_with_config(task: Task, now: datetime, config: Optional[Dict[str, Any]] = None) -> TaskForecast:
    """forecast_progress with tunables read from the ``forecast`` config section."""
    section = get_section(config, 'forecast')
    return forecast_progress(
        task,
        now,
        alpha=section['alpha'],
        relax_factor=section['relax_factor'],
        spi_warn_threshold=section['spi_warn_threshold'],
        tz=get_timezone((config or {}).get('timezone')),
    )


def changed_fields(stored: Optional[Mapping[str, Any]], computed: Mapping[str, Any]) -> Dict[str, Any]:
    """Fields of ``computed`` that differ from ``stored``.

    Numbers compare within 1e-6, everything else by equality. An empty result
    means the write-back can be skipped.
    """
    stored = stored or {}
    changed = {}
    for key in FORECAST_FIELDS:
        if key not in computed:
            continue
        new = computed[key]
        old = stored.get(key)
        both_numbers = (
            isinstance(new, (int, float)) and isinstance(old, (int, float))
            and not isinstance(new, bool) and not isinstance(old, bool)
        )
        equal = nearly_equal(new, old) if both_numbers else new == old
        if not equal:
            changed[key] = new
    return changed
