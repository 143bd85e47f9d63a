"""
game configuration: rule constants and an optional JSON override file
"""
import json
import logging
import os
from dataclasses import dataclass, field, fields, replace

logger = logging.getLogger(__name__)


GRID_SIZE = 4
WIN_VALUE = 2048
TIME_LIMIT = 120.0       # seconds for time attack
TICK_INTERVAL = 0.1      # time attack countdown resolution
COMBO_WINDOW = 2.0       # combo resets after this long without a merge
SETTLE_TIME = 0.15       # moves are ignored this long after an accepted one
HISTORY_DEPTH = 10
FOUR_PROBABILITY = 0.1   # 90% chance for 2 and 10% chance for 4

# id -> (name, description, uses, cooldown)
POWER_UP_DEFS = {
    'undo': ('Undo', 'Undo last move', 3, 0),
    'shuffle': ('Shuffle', 'Shuffle all tiles', 2, 5),
    'remove': ('Remove', 'Remove lowest tile', 3, 3),
    'bomb': ('Bomb', 'Remove all lowest value tiles', 1, 10),
}


@dataclass(frozen=True)
class GameConfig:
    """tunable rules for a game session"""
    grid_size: int = GRID_SIZE
    win_value: int = WIN_VALUE
    time_limit: float = TIME_LIMIT
    tick_interval: float = TICK_INTERVAL
    combo_window: float = COMBO_WINDOW
    settle_time: float = SETTLE_TIME
    history_depth: int = HISTORY_DEPTH
    four_probability: float = FOUR_PROBABILITY
    power_ups: dict = field(default_factory=lambda: dict(POWER_UP_DEFS))

    def __post_init__(self):
        if self.grid_size < 2:
            raise ValueError(f"grid_size must be at least 2, got {self.grid_size}")
        if self.history_depth < 1:
            raise ValueError(f"history_depth must be at least 1, got {self.history_depth}")
        if not 0.0 <= self.four_probability <= 1.0:
            raise ValueError(f"four_probability must be in [0, 1], got {self.four_probability}")


DEFAULT_CONFIG = GameConfig()


def load_config(config_file=None):
    """
    load a GameConfig, merging a JSON file over the defaults

    missing or unreadable files give the default config. unknown keys are
    ignored. power_ups entries are given as
    {"shuffle": {"uses": 1, "cooldown": 8}} and merged per power-up.
    """
    if config_file is None or not os.path.exists(config_file):
        return DEFAULT_CONFIG

    try:
        with open(config_file, 'r') as f:
            loaded = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Error loading config {config_file}: {e}, using defaults")
        return DEFAULT_CONFIG

    if not isinstance(loaded, dict):
        logger.warning(f"Config {config_file} is not a JSON object, using defaults")
        return DEFAULT_CONFIG

    return _merge_with_defaults(loaded)


def _merge_with_defaults(loaded):
    """merge loaded settings with defaults to ensure all keys exist"""
    known = {f.name for f in fields(GameConfig)}
    overrides = {}

    try:
        for key, value in loaded.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
            elif key == 'power_ups':
                overrides[key] = _merge_power_ups(value)
            else:
                overrides[key] = value
        return replace(DEFAULT_CONFIG, **overrides)
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning(f"Invalid config values ({e}), using defaults")
        return DEFAULT_CONFIG


def _merge_power_ups(loaded):
    merged = dict(POWER_UP_DEFS)
    for power_up_id, options in loaded.items():
        if power_up_id not in merged:
            logger.warning(f"Ignoring unknown power-up: {power_up_id}")
            continue
        name, description, uses, cooldown = merged[power_up_id]
        merged[power_up_id] = (
            name,
            description,
            int(options.get('uses', uses)),
            int(options.get('cooldown', cooldown)),
        )
    return merged
