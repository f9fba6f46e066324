"""Utility functions."""

from .config import get_default_config, get_section, load_config, merge_config
from .datetime_utils import (
    DEFAULT_TIMEZONE,
    day_key,
    days_until,
    get_timezone,
    start_of_day,
    to_instant,
)
from .numeric import round_up_to_five, to_float, to_optional_float

__all__ = [
    'load_config',
    'merge_config',
    'get_default_config',
    'get_section',
    'DEFAULT_TIMEZONE',
    'get_timezone',
    'to_instant',
    'day_key',
    'start_of_day',
    'days_until',
    'to_float',
    'to_optional_float',
    'round_up_to_five',
]
