"""Task and forecast data models."""

from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional
from zoneinfo import ZoneInfo

from ..utils.datetime_utils import format_day_key, get_timezone, parse_day_key, to_instant
from ..utils.numeric import round_half_up, to_float, to_minutes, to_optional_float

RISK_LEVELS = ('ok', 'warn', 'late')

# camelCase document keys accepted alongside the snake_case field names
_RECORD_ALIASES = {
    'id': 'task_id',
    'todoId': 'task_id',
    'text': 'title',
    'estimatedMinutes': 'estimated_minutes',
    'optimisticMinutes': 'optimistic_minutes',
    'pessimisticMinutes': 'pessimistic_minutes',
    'uncertaintyWeight': 'uncertainty_weight',
    'scale': 'uncertainty_weight',
    'createdAt': 'created_at',
    'plannedStartAt': 'planned_start_at',
    'plannedStart': 'planned_start_at',
    'actualLogs': 'actual_logs',
    'actualTotalMinutes': 'actual_total_minutes',
    'buffer': 'buffer_rate',
}

_FORECAST_ALIASES = {
    'pace7d': 'pace_7d',
    'paceExp': 'pace_exp',
    'requiredPace': 'required_pace',
    'requiredPaceAdj': 'required_pace_adj',
    'spi': 'spi_7d',
    'spi7d': 'spi_7d',
    'spiExp': 'spi_exp',
    'spiAdj': 'spi_adj',
    'eacDate': 'eac_date',
    'riskLevel': 'risk_level',
    'idealProgress': 'ideal_progress',
    'actualProgress': 'actual_progress',
}


@dataclass
class TaskForecast:
    """Derived forecast fields written back onto a task."""

    actual_total_minutes: float = 0.0
    remaining_minutes: float = 0.0
    worked_days_7d: int = 0
    pace_7d: float = 0.0
    pace_exp: float = 0.0
    required_pace: float = 0.0
    required_pace_adj: float = 0.0
    spi_7d: float = 0.0
    spi_exp: float = 0.0
    spi_adj: float = 0.0
    eac_date: Optional[date] = None
    risk_level: Optional[str] = None
    ideal_progress: Optional[float] = None
    actual_progress: float = 0.0

    @property
    def spi(self) -> float:
        """Alias kept for stored documents that use ``spi``."""
        return self.spi_7d

    def to_record(self) -> Dict[str, Any]:
        """Flat mapping of the stored fields, dates as day-key strings."""
        record = asdict(self)
        record['spi'] = self.spi_7d
        record['eac_date'] = format_day_key(self.eac_date) if self.eac_date else None
        return record

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> 'TaskForecast':
        """Rebuild cached forecast fields from a stored mapping."""
        values = _apply_aliases(data, _FORECAST_ALIASES)
        risk = values.get('risk_level')
        return cls(
            actual_total_minutes=to_minutes(values.get('actual_total_minutes')),
            remaining_minutes=to_minutes(values.get('remaining_minutes')),
            worked_days_7d=int(to_minutes(values.get('worked_days_7d'))),
            pace_7d=to_float(values.get('pace_7d')),
            pace_exp=to_float(values.get('pace_exp')),
            required_pace=to_float(values.get('required_pace')),
            required_pace_adj=to_float(values.get('required_pace_adj')),
            spi_7d=to_float(values.get('spi_7d')),
            spi_exp=to_float(values.get('spi_exp')),
            spi_adj=to_float(values.get('spi_adj')),
            eac_date=parse_day_key(values['eac_date']) if values.get('eac_date') else None,
            risk_level=risk if risk in RISK_LEVELS else None,
            ideal_progress=to_optional_float(values.get('ideal_progress')),
            actual_progress=to_float(values.get('actual_progress')),
        )


@dataclass
class Task:
    """Represents a tracked task with its effort log."""

    task_id: str
    title: str = ""
    estimated_minutes: float = 0.0
    deadline: Optional[datetime] = None
    optimistic_minutes: Optional[float] = None
    pessimistic_minutes: Optional[float] = None
    uncertainty_weight: Optional[int] = None
    created_at: Optional[datetime] = None
    planned_start_at: Optional[datetime] = None
    actual_logs: Dict[date, float] = field(default_factory=dict)
    actual_total_minutes: float = 0.0
    completed: bool = False
    priority: str = "mid"
    buffer_rate: float = 0.0
    forecast: Optional[TaskForecast] = None

    @property
    def logged_minutes(self) -> float:
        """Sum of the per-day logs."""
        return sum(to_minutes(v) for v in self.actual_logs.values())

    @property
    def cumulative_minutes(self) -> float:
        """Cumulative effort, tolerating drift between the logs and the stored total."""
        return max(self.logged_minutes, to_minutes(self.actual_total_minutes))

    @property
    def remaining_minutes(self) -> float:
        """Remaining work, never negative."""
        return max(0.0, to_minutes(self.estimated_minutes) - self.cumulative_minutes)

    def has_started(self, now: datetime) -> bool:
        """False while the planned start lies in the future."""
        return self.planned_start_at is None or now >= self.planned_start_at

    @classmethod
    def from_record(cls, data: Mapping[str, Any], tz: Optional[ZoneInfo] = None) -> 'Task':
        """Normalize a stored task document into canonical types."""
        tz = tz or get_timezone()
        values = _apply_aliases(data, _RECORD_ALIASES)

        logs: Dict[date, float] = {}
        raw_logs = values.get('actual_logs') or {}
        if isinstance(raw_logs, Mapping):
            for key, minutes in raw_logs.items():
                day = parse_day_key(key)
                if day is not None:
                    logs[day] = to_minutes(minutes)

        weight = to_optional_float(values.get('uncertainty_weight'))
        forecast_data = values.get('forecast')
        if forecast_data is None and any(k in data for k in _FORECAST_ALIASES):
            forecast_data = data

        return cls(
            task_id=str(values.get('task_id', '')),
            title=str(values.get('title') or ''),
            estimated_minutes=to_minutes(values.get('estimated_minutes')),
            deadline=to_instant(values.get('deadline'), tz),
            optimistic_minutes=to_optional_float(values.get('optimistic_minutes')),
            pessimistic_minutes=to_optional_float(values.get('pessimistic_minutes')),
            uncertainty_weight=round_half_up(weight) if weight is not None else None,
            created_at=to_instant(values.get('created_at'), tz),
            planned_start_at=to_instant(values.get('planned_start_at'), tz),
            actual_logs=logs,
            actual_total_minutes=to_minutes(values.get('actual_total_minutes')),
            completed=bool(values.get('completed', False)),
            priority=str(values.get('priority') or 'mid'),
            buffer_rate=to_float(values.get('buffer_rate')),
            forecast=TaskForecast.from_record(forecast_data) if isinstance(forecast_data, Mapping) else None,
        )

    def to_record(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly mapping."""
        return {
            'task_id': self.task_id,
            'title': self.title,
            'estimated_minutes': self.estimated_minutes,
            'deadline': self.deadline.isoformat() if self.deadline else None,
            'optimistic_minutes': self.optimistic_minutes,
            'pessimistic_minutes': self.pessimistic_minutes,
            'uncertainty_weight': self.uncertainty_weight,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'planned_start_at': self.planned_start_at.isoformat() if self.planned_start_at else None,
            'actual_logs': {format_day_key(d): m for d, m in sorted(self.actual_logs.items())},
            'actual_total_minutes': self.actual_total_minutes,
            'completed': self.completed,
            'priority': self.priority,
            'buffer_rate': self.buffer_rate,
            'forecast': self.forecast.to_record() if self.forecast else None,
        }


def _apply_aliases(data: Mapping[str, Any], aliases: Mapping[str, str]) -> Dict[str, Any]:
    values = dict(data)
    for alias, name in aliases.items():
        if alias in data and name not in values:
            values[name] = data[alias]
    return values
