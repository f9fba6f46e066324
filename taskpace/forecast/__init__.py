"""Progress forecasting, guidance and risk."""

from .guidance import Guidance, resolve_guidance
from .progress import changed_fields, classify_risk, exponential_pace, forecast_progress, forecast_with_config
from .risk import RiskDisplay, normalize_risk, resolve_risk_display
from .series import SeriesPoint, build_progress_series
from .worklog import LogChange, add_minutes, apply_log_diff

__all__ = [
    'forecast_progress',
    'forecast_with_config',
    'exponential_pace',
    'classify_risk',
    'changed_fields',
    'Guidance',
    'resolve_guidance',
    'RiskDisplay',
    'normalize_risk',
    'resolve_risk_display',
    'SeriesPoint',
    'build_progress_series',
    'LogChange',
    'apply_log_diff',
    'add_minutes',
]
