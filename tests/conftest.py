"""Pytest configuration and shared fixtures for testing."""
import random
from dataclasses import replace

import pytest

from config import GameConfig
from grid import Grid
from session import GameMode, GameSession, SessionCallbacks
from storage import MemoryStorage


class FakeClock:
    """Manually advanced clock for timer tests."""

    def __init__(self, start=1000.0):
        self.now = start

    def advance(self, seconds):
        self.now += seconds

    def __call__(self):
        return self.now


class CallbackRecorder:
    """Collects feedback callbacks in the order they fire."""

    def __init__(self):
        self.events = []

    def callbacks(self):
        return SessionCallbacks(
            on_move=lambda: self.events.append(('move',)),
            on_merge=lambda value: self.events.append(('merge', value)),
            on_win=lambda: self.events.append(('win',)),
            on_game_over=lambda: self.events.append(('game_over',)),
            on_power_up=lambda power_up_id: self.events.append(('power_up', power_up_id)),
        )

    def count(self, name):
        return sum(1 for event in self.events if event[0] == name)


# full board with no equal neighbours
STUCK_ROWS = [
    [2, 4, 2, 4],
    [4, 2, 4, 2],
    [2, 4, 2, 4],
    [4, 2, 4, 2],
]


@pytest.fixture
def clock():
    """Create a fake clock."""
    return FakeClock()


@pytest.fixture
def rng():
    """Create a seeded random generator."""
    return random.Random(2048)


@pytest.fixture
def recorder():
    return CallbackRecorder()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def make_session(clock, rng, storage, recorder):
    """Factory for sessions sharing the fake clock, rng, storage and recorder."""
    def _make(mode=GameMode.CLASSIC, config=None):
        return GameSession(
            mode,
            config=config or GameConfig(),
            storage=storage,
            callbacks=recorder.callbacks(),
            clock=clock,
            rng=rng,
        )
    return _make


@pytest.fixture
def session(make_session):
    """Create a classic mode session."""
    return make_session()


def place(session, rows):
    """Replace the live board of a session with the given rows (0 = empty)."""
    session._state = replace(session.state, grid=Grid.from_rows(rows, session.ids))
    return session.state.grid
