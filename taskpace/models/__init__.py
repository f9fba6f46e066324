"""Data models."""

from .plan import DailyPlan, PlanItem, PlanRevision, plans_equal
from .task import RISK_LEVELS, Task, TaskForecast
from .trace import AllocationDecision, AllocationTrace, CandidateFeatures

__all__ = [
    'Task',
    'TaskForecast',
    'RISK_LEVELS',
    'DailyPlan',
    'PlanItem',
    'PlanRevision',
    'plans_equal',
    'CandidateFeatures',
    'AllocationDecision',
    'AllocationTrace',
]
