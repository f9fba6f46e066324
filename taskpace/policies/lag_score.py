"""Lag-weighted scoring policy."""

from typing import List

from ..models.trace import CandidateFeatures
from .base import AllocationPolicy


class LagScorePolicy(AllocationPolicy):
    """Surface tasks that are falling behind before large on-track ones.

    score = 3*max(0, lag) + 2/(D+1) + R/D, highest first.
    """

    def order_candidates(self, candidates: List[CandidateFeatures]) -> List[CandidateFeatures]:
        """Order by score (highest first), then deadline, then required pace."""
        def sort_key(c: CandidateFeatures):
            return (-c.score, c.deadline, -c.required)

        return sorted(candidates, key=sort_key)

    def get_policy_name(self) -> str:
        """Return policy name."""
        return "LAG-SCORE"
