"""Allocation trace models for observability."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Optional, Any


@dataclass
class CandidateFeatures:
    """Computed features for a candidate task during allocation."""

    task_id: str
    title: str
    remaining_minutes: float
    days_to_deadline: int
    deadline: datetime
    lag: float
    score: float
    required: float
    min_minutes: float
    recover_minutes: float
    allocated: float = 0.0


@dataclass
class AllocationDecision:
    """Records a single allocation step."""

    task_id: str
    stage: str
    minutes: float
    reason: str


@dataclass
class AllocationTrace:
    """Complete trace of an allocation run."""

    run_id: str
    timestamp: datetime
    policy_name: str
    config: Dict[str, Any]
    candidates: List[CandidateFeatures] = field(default_factory=list)
    decisions: List[AllocationDecision] = field(default_factory=list)
    summary_stats: Dict[str, Any] = field(default_factory=dict)
    fallback_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert trace to dictionary for JSON export."""
        return asdict(self)

    def to_human_readable(self) -> str:
        """Generate human-readable log format."""
        lines = [
            f"=== Allocation Run: {self.run_id} ===",
            f"Policy: {self.policy_name}",
            f"Timestamp: {self.timestamp}",
            "",
            "Configuration:",
        ]

        for key, value in self.config.items():
            lines.append(f"  {key}: {value}")

        lines.extend(["", "Candidates:"])

        for c in self.candidates:
            lines.append(f"  Task {c.task_id} ({c.title}):")
            lines.append(f"    Remaining: {c.remaining_minutes:.0f} minutes")
            lines.append(f"    Days to deadline: {c.days_to_deadline}")
            lines.append(f"    Lag: {c.lag:+.2f}")
            lines.append(f"    Score: {c.score:.3f}")
            lines.append(f"    Required / min / recover: "
                         f"{c.required:.1f} / {c.min_minutes:.1f} / {c.recover_minutes:.1f}")

        lines.extend(["", "Allocation Decisions:"])

        for decision in self.decisions:
            lines.append(f"  [{decision.stage}] {decision.task_id}: +{decision.minutes:.1f} min")
            lines.append(f"    Reason: {decision.reason}")

        if self.fallback_used:
            lines.append("  (fallback ranking applied)")

        lines.extend(["", "Summary Statistics:"])

        for key, value in self.summary_stats.items():
            lines.append(f"  {key}: {value}")

        lines.append("=" * 50)

        return "\n".join(lines)
