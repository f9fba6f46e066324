import json

import pytest
import yaml

from taskpace.utils.config import get_default_config, get_section, load_config, merge_config


def test_yaml_overrides_merge_with_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({'allocation': {'daily_cap_minutes': 90}, 'timezone': 'UTC'}))

    config = load_config(str(path))

    assert config['allocation']['daily_cap_minutes'] == 90
    assert config['allocation']['max_items'] == 3
    assert config['timezone'] == 'UTC'
    assert config['forecast']['alpha'] == 0.3


def test_json_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({'forecast': {'alpha': 0.5}}))
    assert load_config(str(path))['forecast']['alpha'] == 0.5


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("")
    assert load_config(str(path)) == get_default_config()


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_unsupported_config_format(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[forecast]\n")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_merge_does_not_mutate_base():
    base = get_default_config()
    merged = merge_config(base, {'notifications': {'work_hours': {'skip_weekends': True}}})

    assert merged['notifications']['work_hours']['skip_weekends'] is True
    assert merged['notifications']['work_hours']['weekday'] == {'start': '09:00', 'end': '18:00'}
    assert base['notifications']['work_hours']['skip_weekends'] is False


def test_get_section_fills_missing_keys():
    section = get_section({'forecast': {'alpha': 0.4}}, 'forecast')
    assert section == {'alpha': 0.4, 'relax_factor': 0.9, 'spi_warn_threshold': 0.9}
    assert get_section(None, 'estimation')['risk_mode'] == 'mean'
