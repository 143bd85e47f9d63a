"""
persistence for the best score and cumulative stats

reads fall back to zero values and writes never raise, so a missing or
broken store only means progress is not kept.
"""
import json
import logging
import os
from pathlib import Path

from stats import GameStats

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_FILE = Path.home() / '.neon2048' / 'save.json'


class MemoryStorage:
    """in-process store, used by the gym environment and tests"""

    def __init__(self, best_score=0, stats=None):
        self.best_score = best_score
        self.stats = stats or GameStats()

    def load_best_score(self):
        return self.best_score

    def save_best_score(self, score):
        self.best_score = score

    def load_stats(self):
        return self.stats

    def save_stats(self, stats):
        self.stats = stats


class JsonFileStorage:
    """
    single JSON file holding {"best_score": int, "stats": {...}}

    the file is re-read for each load and rewritten for each save
    """

    def __init__(self, storage_file=DEFAULT_STORAGE_FILE):
        self.storage_file = Path(storage_file)

    def _read(self):
        if not self.storage_file.exists():
            return {}
        try:
            with open(self.storage_file, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Error loading {self.storage_file}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed save file {self.storage_file}")
            return {}
        return data

    def _write(self, key, value):
        data = self._read()
        data[key] = value
        try:
            self.storage_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_file = self.storage_file.with_suffix('.tmp')
            with open(tmp_file, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_file, self.storage_file)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Error saving {key} to {self.storage_file}: {e}")
            return False

    def load_best_score(self):
        try:
            return max(0, int(self._read().get('best_score', 0)))
        except (TypeError, ValueError):
            logger.warning(f"Invalid best score in {self.storage_file}, using 0")
            return 0

    def save_best_score(self, score):
        self._write('best_score', int(score))

    def load_stats(self):
        record = self._read().get('stats')
        if not isinstance(record, dict):
            return GameStats()
        try:
            return GameStats.from_dict(record)
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid stats in {self.storage_file}: {e}")
            return GameStats()

    def save_stats(self, stats):
        self._write('stats', stats.to_dict())
