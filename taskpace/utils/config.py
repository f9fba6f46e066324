"""Configuration management."""

import copy
import json
import yaml
from pathlib import Path
from typing import Dict, Any, Optional


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML or JSON file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r', encoding='utf-8') as f:
        if path.suffix.lower() in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        elif path.suffix.lower() == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

    return merge_config(get_default_config(), data or {})


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        'timezone': 'Asia/Tokyo',
        'forecast': {
            'alpha': 0.3,
            'relax_factor': 0.9,
            'spi_warn_threshold': 0.9,
        },
        'estimation': {
            'default_uncertainty': 3,
            'risk_mode': 'mean',  # safe | mean | challenge
        },
        'allocation': {
            'daily_cap_minutes': 120,
            'max_items': 3,
            'pull_in_step_minutes': 30,
            'capacity_by_weekday': {},  # 0 = Monday
        },
        'notifications': {
            'notify_window': {
                'weekday': {'start': '08:00', 'end': '22:00'},
                'weekend': {'start': '09:00', 'end': '21:00'},
            },
            'work_hours': {
                'weekday': {'start': '09:00', 'end': '18:00'},
                'weekend': None,
                'skip_weekends': False,
            },
        },
        'evaluation': {
            'task_count': 12,
            'simulate_days': 14,
            'seed': 42,
            'effort_noise': 0.25,
        },
    }


def get_section(config: Optional[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """Return a config section, falling back to the defaults for missing keys."""
    defaults = get_default_config().get(name, {})
    section = (config or {}).get(name) or {}
    return merge_config(defaults, section)
