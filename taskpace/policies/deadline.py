"""Nearest-deadline ordering policy."""

from typing import List

from ..models.trace import CandidateFeatures
from .base import AllocationPolicy


class DeadlinePolicy(AllocationPolicy):
    """Deadline first, then the larger required pace."""

    def order_candidates(self, candidates: List[CandidateFeatures]) -> List[CandidateFeatures]:
        """Order by deadline (earliest first), then required pace (highest first)."""
        return sorted(candidates, key=lambda c: (c.deadline, -c.required))

    def get_policy_name(self) -> str:
        """Return policy name."""
        return "DEADLINE"
