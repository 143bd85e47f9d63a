"""
cumulative statistics across finished games
"""
from dataclasses import asdict, dataclass, fields, replace
from typing import Optional

from game import highest_tile


@dataclass(frozen=True)
class GameStats:
    games_played: int = 0
    games_won: int = 0
    total_score: int = 0
    highest_tile: int = 0
    total_moves: int = 0
    total_merges: int = 0
    longest_combo: int = 0
    fastest_win: Optional[float] = None  # seconds, None until the first win

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        """build from a flat record, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                continue
            if key == 'fastest_win':
                values[key] = None if value is None else float(value)
            else:
                values[key] = int(value)
        return cls(**values)

    @property
    def average_score(self):
        if self.games_played == 0:
            return 0
        return self.total_score / self.games_played

    @property
    def win_rate(self):
        if self.games_played == 0:
            return 0.0
        return self.games_won / self.games_played


def update_game_stats(stats, state, won, merge_count, elapsed=None, peak_combo=0):
    """
    fold one finished session into the running totals

    args:
        stats: current GameStats
        state: final GameState of the session
        won: whether the session reached the win tile
        merge_count: merges of the finishing move (0 when ended another way)
        elapsed: seconds since the session started, used for fastest_win
        peak_combo: highest combo reached during the session
    """
    fastest_win = stats.fastest_win
    if won and elapsed is not None:
        if fastest_win is None or elapsed < fastest_win:
            fastest_win = elapsed

    return replace(
        stats,
        games_played=stats.games_played + 1,
        games_won=stats.games_won + (1 if won else 0),
        total_score=stats.total_score + state.score,
        highest_tile=max(stats.highest_tile, highest_tile(state.grid)),
        total_moves=stats.total_moves + state.move_count,
        total_merges=stats.total_merges + merge_count,
        longest_combo=max(stats.longest_combo, peak_combo),
        fastest_win=fastest_win,
    )
