"""Allocation policy implementations."""

from .base import AllocationPolicy
from .deadline import DeadlinePolicy
from .lag_score import LagScorePolicy

POLICIES = {
    'lag-score': LagScorePolicy,
    'deadline': DeadlinePolicy,
}


def get_policy(name: str, config: dict) -> AllocationPolicy:
    """Instantiate a policy by its CLI name."""
    try:
        return POLICIES[name.lower()](config)
    except KeyError:
        raise ValueError(f"Unknown policy: {name}") from None


__all__ = ['AllocationPolicy', 'DeadlinePolicy', 'LagScorePolicy', 'POLICIES', 'get_policy']
