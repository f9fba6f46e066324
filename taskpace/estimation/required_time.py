"""Required working time and recommended start.

T_req = (TEw + k*sigma) * (1 + buffer) * priority_factor, where ``k`` comes
from the risk mode: "safe" plans for one sigma of overrun, "challenge" for one
sigma of underrun.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo

from ..engine.windows import clamp_to_window
from ..models.task import Task
from ..utils.numeric import round_half_up, to_minutes
from .pert import DEFAULT_WEIGHT, ThreePointEstimate, estimate_task

PRIORITY_FACTOR = {'high': 1.15, 'mid': 1.0, 'low': 0.9}

RISK_MODE_SIGMA = {'safe': 1, 'mean': 0, 'challenge': -1}


@dataclass(frozen=True)
class RequiredTime:
    """Required minutes with the inputs that produced them."""

    minutes: int
    estimate: ThreePointEstimate
    k_sigma: int
    buffer_rate: float
    priority_factor: float


def required_minutes(
    task: Task,
    risk_mode: str = "mean",
    default_weight: int = DEFAULT_WEIGHT,
) -> RequiredTime:
    """Minutes to reserve for a task under the given risk mode."""
    estimate = estimate_task(task, default_weight)
    k_sigma = RISK_MODE_SIGMA.get(risk_mode, 0)
    buffer_rate = max(0.0, to_minutes(task.buffer_rate))
    priority_factor = PRIORITY_FACTOR.get(task.priority, 1.0)

    core = estimate.expected + k_sigma * estimate.sigma
    if core <= 0:
        core = max(1.0, to_minutes(task.estimated_minutes))

    minutes = max(1, round_half_up(core * (1 + buffer_rate) * priority_factor))
    return RequiredTime(minutes, estimate, k_sigma, buffer_rate, priority_factor)


def recommend_start(
    task: Task,
    minutes: int,
    notify_window: Optional[Mapping[str, Any]] = None,
    work_hours: Optional[Mapping[str, Any]] = None,
    tz: Optional[ZoneInfo] = None,
) -> Optional[datetime]:
    """Latest start that still fits before the deadline, pulled into the allowed window."""
    if task.deadline is None:
        return None
    candidate = task.deadline - timedelta(minutes=minutes)
    return clamp_to_window(candidate, notify_window, work_hours, tz)
