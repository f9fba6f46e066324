"""Time-window resolution.

For a calendar day, the allowed window is the intersection of the hours the
user accepts notifications and the hours the user works. Weekends use their
own notify window and work hours (falling back to the weekday hours), unless
``skip_weekends`` closes them entirely.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Mapping, Optional
from zoneinfo import ZoneInfo

from ..utils.datetime_utils import day_key, get_timezone, is_weekend, start_of_day
from ..utils.numeric import to_optional_float

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [start, end) for one day; ``empty`` windows collapse to midnight."""

    start: datetime
    end: datetime
    empty: bool

    @property
    def minutes(self) -> int:
        if self.empty:
            return 0
        return int((self.end - self.start).total_seconds() // 60)

    def contains(self, instant: datetime) -> bool:
        return not self.empty and self.start <= instant < self.end


def hhmm_to_minutes(value: Optional[str]) -> Optional[int]:
    """Parse "HH:MM" into minutes after midnight, clamped to [0, 1440]."""
    if not value:
        return None
    parts = str(value).split(":")
    if len(parts) != 2:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    return max(0, min(MINUTES_PER_DAY, hours * 60 + minutes))


def _bounds(interval: Optional[Mapping[str, Any]]) -> tuple:
    interval = interval or {}
    start = hhmm_to_minutes(interval.get('start') or "00:00")
    end = hhmm_to_minutes(interval.get('end') or "24:00")
    return (0 if start is None else start, MINUTES_PER_DAY if end is None else end)


def allowed_window(
    day: date,
    notify_window: Optional[Mapping[str, Any]] = None,
    work_hours: Optional[Mapping[str, Any]] = None,
    tz: Optional[ZoneInfo] = None,
) -> TimeWindow:
    """Intersection of the notify window and the work hours for a day."""
    tz = tz or get_timezone()
    notify_window = notify_window or {}
    work_hours = work_hours or {}
    midnight = start_of_day(day, tz)
    weekend = is_weekend(day)

    if weekend and work_hours.get('skip_weekends'):
        return TimeWindow(midnight, midnight, True)

    notify = notify_window.get('weekend' if weekend else 'weekday')
    if weekend:
        hours = work_hours.get('weekend') or work_hours.get('weekday')
    else:
        hours = work_hours.get('weekday')

    notify_start, notify_end = _bounds(notify)
    work_start, work_end = _bounds(hours)
    start_min = max(notify_start, work_start)
    end_min = min(notify_end, work_end)

    if start_min >= end_min:
        return TimeWindow(midnight, midnight, True)

    # wall-clock offsets so DST days keep their local hours
    start = datetime.combine(day, datetime.min.time(), tzinfo=tz) + timedelta(minutes=start_min)
    end = datetime.combine(day, datetime.min.time(), tzinfo=tz) + timedelta(minutes=end_min)
    return TimeWindow(start, end, False)


def clamp_to_window(
    instant: datetime,
    notify_window: Optional[Mapping[str, Any]] = None,
    work_hours: Optional[Mapping[str, Any]] = None,
    tz: Optional[ZoneInfo] = None,
) -> datetime:
    """Move an instant into the day's allowed window without delaying it past the window."""
    tz = tz or get_timezone()
    window = allowed_window(day_key(instant, tz), notify_window, work_hours, tz)
    if window.empty:
        return window.start
    if instant < window.start:
        return window.start
    if instant > window.end:
        return window.end
    return instant


def is_within_window(
    instant: datetime,
    notify_window: Optional[Mapping[str, Any]] = None,
    work_hours: Optional[Mapping[str, Any]] = None,
    tz: Optional[ZoneInfo] = None,
) -> bool:
    """Whether the user may be prompted at this instant."""
    tz = tz or get_timezone()
    return allowed_window(day_key(instant, tz), notify_window, work_hours, tz).contains(instant)


def next_prompt_time(
    instant: datetime,
    notify_window: Optional[Mapping[str, Any]] = None,
    work_hours: Optional[Mapping[str, Any]] = None,
    tz: Optional[ZoneInfo] = None,
    horizon_days: int = 7,
) -> Optional[datetime]:
    """Earliest allowed instant at or after ``instant`` within the horizon."""
    tz = tz or get_timezone()
    today = day_key(instant, tz)
    for offset in range(horizon_days + 1):
        window = allowed_window(today + timedelta(days=offset), notify_window, work_hours, tz)
        if window.empty or window.end <= instant:
            continue
        return max(window.start, instant)
    return None


def day_capacity_minutes(day: date, capacity_by_weekday: Optional[Mapping[Any, Any]]) -> Optional[int]:
    """Per-weekday capacity override (0 = Monday), None when unset."""
    if not capacity_by_weekday:
        return None
    weekday = day.weekday()
    minutes = capacity_by_weekday.get(weekday, capacity_by_weekday.get(str(weekday)))
    value = to_optional_float(minutes)
    if value is None:
        return None
    return max(0, int(value))


def window_settings(config: Optional[Dict[str, Any]]) -> tuple:
    """(notify_window, work_hours) from the notifications config section."""
    section = (config or {}).get('notifications') or {}
    return section.get('notify_window') or {}, section.get('work_hours') or {}
