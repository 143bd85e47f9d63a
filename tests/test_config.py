"""Tests for loading game configuration."""
import json

import pytest

from config import DEFAULT_CONFIG, GameConfig, load_config


def write_config(tmp_path, data):
    config_file = tmp_path / 'config.json'
    config_file.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return str(config_file)


def test_defaults():
    assert load_config() is DEFAULT_CONFIG
    assert DEFAULT_CONFIG.grid_size == 4
    assert DEFAULT_CONFIG.win_value == 2048
    assert DEFAULT_CONFIG.time_limit == 120.0
    assert DEFAULT_CONFIG.combo_window == 2.0
    assert DEFAULT_CONFIG.settle_time == 0.15
    assert DEFAULT_CONFIG.history_depth == 10


def test_missing_file(tmp_path):
    assert load_config(str(tmp_path / 'nope.json')) is DEFAULT_CONFIG


def test_overrides_merge_with_defaults(tmp_path):
    config = load_config(write_config(tmp_path, {'grid_size': 5, 'time_limit': 60}))
    assert config.grid_size == 5
    assert config.time_limit == 60
    assert config.win_value == 2048


def test_power_up_overrides(tmp_path):
    config = load_config(write_config(tmp_path, {
        'power_ups': {'shuffle': {'uses': 4}, 'teleport': {'uses': 1}},
    }))
    assert config.power_ups['shuffle'] == ('Shuffle', 'Shuffle all tiles', 4, 5)
    assert config.power_ups['bomb'] == DEFAULT_CONFIG.power_ups['bomb']
    assert 'teleport' not in config.power_ups


def test_unknown_keys_ignored(tmp_path):
    config = load_config(write_config(tmp_path, {'colour': 'neon', 'win_value': 1024}))
    assert config.win_value == 1024


@pytest.mark.parametrize("content", [
    '{broken',
    '[1, 2, 3]',
    json.dumps({'grid_size': 1}),
    json.dumps({'four_probability': 2}),
    json.dumps({'power_ups': {'undo': 3}}),
])
def test_bad_files_fall_back_to_defaults(tmp_path, content):
    assert load_config(write_config(tmp_path, content)) is DEFAULT_CONFIG


def test_config_validation():
    with pytest.raises(ValueError):
        GameConfig(history_depth=0)
