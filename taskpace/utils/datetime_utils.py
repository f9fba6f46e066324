"""Date and time utilities.

Everything inside the engine works on timezone-aware ``datetime`` instants and
``date`` day keys in the user's configured time zone. ``to_instant`` is the one
place where loosely-typed timestamps from stored documents are normalized.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Iterable, List, Mapping, Optional
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

DEFAULT_TIMEZONE = "Asia/Tokyo"
SECONDS_PER_DAY = 24 * 3600


def get_timezone(name: Optional[str] = None) -> ZoneInfo:
    """Resolve a time zone name, defaulting to the application zone."""
    return ZoneInfo(name or DEFAULT_TIMEZONE)


def to_instant(value: Any, tz: Optional[ZoneInfo] = None) -> Optional[datetime]:
    """Convert a stored timestamp into an aware datetime.

    Accepts datetimes (naive ones are taken as local to ``tz``), dates
    (local midnight), ISO-8601 strings, epoch seconds and ``{"seconds": n}``
    mappings. Anything unparseable yields None.
    """
    tz = tz or get_timezone()
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=tz)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=tz)
    if isinstance(value, Mapping):
        seconds = value.get("seconds")
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return to_instant(seconds, tz)
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            parsed = date_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=tz)
    return None


def day_key(instant: datetime, tz: Optional[ZoneInfo] = None) -> date:
    """Calendar day of an instant in the given zone."""
    return instant.astimezone(tz or get_timezone()).date()


def start_of_day(day: date, tz: Optional[ZoneInfo] = None) -> datetime:
    """Local midnight of a calendar day."""
    return datetime.combine(day, time.min, tzinfo=tz or get_timezone())


def format_day_key(day: date) -> str:
    """Format a day key as YYYY-MM-DD."""
    return day.isoformat()


def parse_day_key(key: Any) -> Optional[date]:
    """Parse a YYYY-MM-DD day key, returning None when malformed."""
    if isinstance(key, datetime):
        return key.date()
    if isinstance(key, date):
        return key
    try:
        return date.fromisoformat(str(key).strip())
    except ValueError:
        return None


def days_until(later: datetime, earlier: datetime, minimum: int = 1) -> int:
    """Whole days from earlier to later, rounded up, never below ``minimum``."""
    seconds = (later - earlier).total_seconds()
    return max(minimum, math.ceil(seconds / SECONDS_PER_DAY))


def trailing_days(end: date, count: int) -> List[date]:
    """The ``count`` calendar days ending at (and including) ``end``."""
    return [end - timedelta(days=offset) for offset in range(count)]


def day_range(start: date, end: date) -> Iterable[date]:
    """Every calendar day from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_weekend(day: date) -> bool:
    """Check if a date falls on Saturday or Sunday."""
    return day.weekday() >= 5
