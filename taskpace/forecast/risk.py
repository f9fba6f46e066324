"""Risk level normalization and display resolution."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from ..models.task import RISK_LEVELS, Task

RISK_LABELS = {
    'ok': 'On track',
    'warn': 'Needs attention',
    'late': 'Behind schedule',
    'none': 'Not started',
}


@dataclass(frozen=True)
class RiskDisplay:
    key: str
    label: str
    before_start: bool = False


def normalize_risk(value: Any) -> Optional[str]:
    """Canonical risk key or None."""
    if not value:
        return None
    text = str(value).strip().lower()
    return text if text in RISK_LEVELS else None


def spi_to_risk(spi: Optional[float]) -> Optional[str]:
    """Coarse risk from an SPI value alone."""
    if spi is None:
        return None
    if spi >= 1:
        return 'ok'
    if spi >= 0.85:
        return 'warn'
    return 'late'


def resolve_risk_display(task: Task, now: datetime, series: Optional[Sequence[Any]] = None) -> RiskDisplay:
    """Risk shown to the user.

    A task that has not started shows "none"; an incomplete task past its
    deadline is always late; otherwise the stored risk wins, with the last SPI
    of the progress series as a fallback.
    """
    if not task.has_started(now):
        return RiskDisplay('none', RISK_LABELS['none'], before_start=True)

    if task.deadline is not None and not task.completed and now > task.deadline:
        return RiskDisplay('late', RISK_LABELS['late'])

    risk = normalize_risk(task.forecast.risk_level if task.forecast else None)
    if risk is None and series:
        risk = spi_to_risk(getattr(series[-1], 'spi', None))

    key = risk or 'none'
    return RiskDisplay(key, RISK_LABELS[key])
