"""Effort estimation."""

from .pert import ThreePointEstimate, derive_bounds, estimate_task, expected_duration, spread_sigma
from .required_time import RequiredTime, recommend_start, required_minutes

__all__ = [
    'ThreePointEstimate',
    'expected_duration',
    'spread_sigma',
    'derive_bounds',
    'estimate_task',
    'RequiredTime',
    'required_minutes',
    'recommend_start',
]
