"""Allocation engine, plan lifecycle and collaborators."""

from .allocator import DailyAllocator
from .forecaster import ForecastReport, Forecaster
from .planner import DailyPlanner, RefreshResult
from .store import InMemoryStore, JsonFileStore, PlanPersistenceError, Store
from .windows import TimeWindow, allowed_window, clamp_to_window, is_within_window

__all__ = [
    'DailyAllocator',
    'Forecaster',
    'ForecastReport',
    'DailyPlanner',
    'RefreshResult',
    'Store',
    'InMemoryStore',
    'JsonFileStore',
    'PlanPersistenceError',
    'TimeWindow',
    'allowed_window',
    'clamp_to_window',
    'is_within_window',
]
