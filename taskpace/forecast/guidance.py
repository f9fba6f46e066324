"""Daily guidance: minutes to log today to reach a better risk tier."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ..utils.datetime_utils import day_key, days_until, get_timezone, start_of_day
from ..utils.numeric import round_half_up, round_up_to_five, to_optional_float
from .risk import normalize_risk

# (warn factor, ok factor) applied to the plain per-day pace; None means 0
_TARGET_FACTORS = {
    'late': (1.0, 2.0),
    'warn': (None, 1.5),
}
_DEFAULT_FACTORS = (1.0, 1.0)


@dataclass(frozen=True)
class Guidance:
    required_per_day: Optional[float] = None
    required_minutes_for_warn: Optional[int] = None
    required_minutes_for_ok: Optional[int] = None

    @property
    def available(self) -> bool:
        return self.required_per_day is not None


def resolve_guidance(
    deadline: Optional[datetime],
    remaining_minutes: Optional[float],
    risk: Optional[str],
    now: datetime,
    tz: Optional[ZoneInfo] = None,
) -> Guidance:
    """Targets for today, rounded up to 5 minutes and capped at the remaining work.

    Escaping ``late`` asks for twice the plain required pace, escaping
    ``warn`` for 1.5 times. No deadline or nothing remaining yields an empty
    Guidance rather than an error.
    """
    remaining_value = to_optional_float(remaining_minutes)
    if deadline is None or remaining_value is None:
        return Guidance()
    remaining = max(0, round_half_up(remaining_value))
    if remaining <= 0:
        return Guidance()

    tz = tz or get_timezone()
    today = start_of_day(day_key(now, tz), tz)
    days_left = days_until(deadline, today)
    base_per_day = remaining / days_left

    warn_factor, ok_factor = _TARGET_FACTORS.get(normalize_risk(risk), _DEFAULT_FACTORS)

    def target(factor: Optional[float]) -> int:
        if factor is None:
            return 0
        rounded = round_up_to_five(base_per_day * factor)
        return min(rounded, remaining)

    return Guidance(
        required_per_day=base_per_day,
        required_minutes_for_warn=target(warn_factor),
        required_minutes_for_ok=target(ok_factor),
    )


def recovery_fallback(remaining: float, days_to_deadline: int, behind: bool) -> int:
    """Recovery target used when no guidance can be derived."""
    base_per_day = remaining / days_to_deadline if days_to_deadline > 0 else remaining
    return round_up_to_five(base_per_day * (2 if behind else 1)) or 0
