"""
game session: the state machine around the move engine

the apply_* functions are pure transitions, one per event type. they take a
GameState and return the next one. GameSession wires them to the timers,
undo history, power-ups, persistence and feedback callbacks.
"""
import logging
import random
import sched
import time
from collections import namedtuple
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from combo import ComboTimer, combo_score, next_combo_count
from config import DEFAULT_CONFIG
from game import Direction, has_won, highest_tile, move_grid, moves_available
from grid import Grid, TileIds
from history import History, HistoryEntry
from powerups import BOMB, REMOVE, SHUFFLE, UNDO, bomb_tiles, create_power_ups, remove_lowest_tile, shuffle_tiles
from stats import GameStats, update_game_stats
from storage import MemoryStorage

logger = logging.getLogger(__name__)


class GameMode(Enum):
    CLASSIC = 'classic'
    TIME_ATTACK = 'timeAttack'
    ZEN = 'zen'

    @classmethod
    def parse(cls, mode):
        """accept a GameMode, its value ('timeAttack') or its name ('time_attack')"""
        if isinstance(mode, cls):
            return mode
        try:
            return cls(mode)
        except ValueError:
            pass
        try:
            return cls[str(mode).upper()]
        except KeyError:
            raise ValueError(f"unknown game mode: {mode!r}") from None


@dataclass(frozen=True)
class GameState:
    grid: Grid
    score: int = 0
    best_score: int = 0
    game_over: bool = False
    won: bool = False
    keep_playing: bool = False
    move_count: int = 0
    start_time: float = 0.0
    time_remaining: Optional[float] = None
    game_mode: GameMode = GameMode.CLASSIC
    combo_count: int = 0
    last_merge_value: int = 0
    session_id: int = 0

    @property
    def awaiting_keep_playing(self):
        """won and the player has not chosen to continue yet"""
        return self.won and not self.keep_playing


MoveOutcome = namedtuple('MoveOutcome', ['state', 'result', 'history_entry'])


def new_game_state(config=DEFAULT_CONFIG, mode=GameMode.CLASSIC, best_score=0,
                   ids=None, rng=random, now=0.0, session_id=0):
    """fresh board with two random tiles"""
    ids = ids or TileIds()
    grid = Grid(config.grid_size)
    grid.add_random_tile(ids, rng, config.four_probability)
    grid.add_random_tile(ids, rng, config.four_probability)

    return GameState(
        grid=grid,
        best_score=best_score,
        start_time=now,
        time_remaining=config.time_limit if mode is GameMode.TIME_ATTACK else None,
        game_mode=mode,
        session_id=session_id,
    )


def can_move(state):
    """whether a move request may be processed at all"""
    if state.game_over and state.game_mode is not GameMode.ZEN:
        return False
    if state.awaiting_keep_playing:
        return False
    return True


def apply_move(state, direction, ids, rng=random, config=DEFAULT_CONFIG):
    """
    resolve one move request

    returns MoveOutcome(state, result, history_entry). history_entry is the
    pre-move snapshot, None when nothing moved. a stuck board in classic or
    time attack ends the game even though nothing moved.
    """
    result = move_grid(state.grid.copy(), direction, ids)
    zen = state.game_mode is GameMode.ZEN

    if not result.moved:
        if not zen and not state.game_over and not moves_available(state.grid):
            return MoveOutcome(replace(state, game_over=True), result, None)
        return MoveOutcome(state, result, None)

    entry = HistoryEntry(state.grid.copy(), state.score, state.move_count)

    combo_count = next_combo_count(state.combo_count, result.merge_count)
    score = state.score + combo_score(result.score, combo_count)

    grid = result.grid
    grid.add_random_tile(ids, rng, config.four_probability)

    new_state = replace(
        state,
        grid=grid,
        score=score,
        best_score=max(state.best_score, score),
        move_count=state.move_count + 1,
        won=state.won or has_won(grid, config.win_value),
        game_over=False if zen else not moves_available(grid),
        combo_count=combo_count,
        last_merge_value=result.max_merge_value or state.last_merge_value,
    )
    return MoveOutcome(new_state, result, entry)


def apply_power_up(state, power_up_id, rng=random, undo_entry=None):
    """
    apply a power-up's board effect, None when it cannot be used

    undo_entry is the history snapshot to restore for 'undo'
    """
    if power_up_id == UNDO:
        if undo_entry is None:
            return None
        return replace(
            state,
            grid=undo_entry.grid.copy(),
            score=undo_entry.score,
            move_count=undo_entry.move_count,
            game_over=False,
        )

    if power_up_id == SHUFFLE:
        grid = shuffle_tiles(state.grid, rng)
    elif power_up_id == REMOVE:
        grid = remove_lowest_tile(state.grid, rng)
    elif power_up_id == BOMB:
        grid, removed_count = bomb_tiles(state.grid)
        logger.debug(f"bomb removed {removed_count} tiles")
    else:
        return None

    if grid is None:
        return None
    return replace(state, grid=grid)


def apply_tick(state, now, config=DEFAULT_CONFIG):
    """time attack countdown, forces game over at zero"""
    if state.game_mode is not GameMode.TIME_ATTACK:
        return state
    if state.game_over or state.awaiting_keep_playing:
        return state

    remaining = max(0.0, config.time_limit - (now - state.start_time))
    if remaining <= 0:
        return replace(state, time_remaining=0.0, game_over=True)
    return replace(state, time_remaining=remaining)


def apply_combo_decay(state):
    return replace(state, combo_count=0)


def apply_keep_playing(state):
    """leave the win screen, the won flag stays set for statistics"""
    if not state.awaiting_keep_playing:
        return state
    return replace(state, keep_playing=True)


@dataclass
class SessionCallbacks:
    """optional feedback hooks, fired after the state is committed"""
    on_move: Optional[Callable[[], None]] = None
    on_merge: Optional[Callable[[int], None]] = None
    on_win: Optional[Callable[[], None]] = None
    on_game_over: Optional[Callable[[], None]] = None
    on_power_up: Optional[Callable[[str], None]] = None


class GameSession:
    """
    one player's game, from start to game over or reset

    time is read from clock (seconds). timers live on a sched.scheduler that
    uses the same clock and only runs when update() is called, so the host
    loop decides when they fire. move() and use_power_up() run due timers
    first.

    usage:
        session = GameSession(GameMode.CLASSIC, storage=JsonFileStorage())
        session.move('left')
        session.use_power_up('undo')
        session.update()   # once per frame
    """

    def __init__(self, mode=GameMode.CLASSIC, config=None, storage=None,
                 callbacks=None, clock=time.monotonic, rng=None):
        self.config = config or DEFAULT_CONFIG
        self.storage = storage if storage is not None else MemoryStorage()
        self.callbacks = callbacks or SessionCallbacks()
        self.clock = clock
        self.rng = rng or random.Random()

        self.scheduler = sched.scheduler(clock)
        self.combo_timer = ComboTimer(self.scheduler, self._on_combo_decay, self.config.combo_window)
        self._tick_event = None

        self.history = History(self.config.history_depth)
        self.stats = self._load('load_stats', GameStats())
        self._saved_best = self._load('load_best_score', 0)

        self._session_id = 0
        self._start(GameMode.parse(mode))

    # ------------------------------------------------------------------
    # read-only views

    @property
    def state(self):
        """the committed state, its grid is shared with the session and must not be changed"""
        return self._state

    @property
    def grid(self):
        """a private copy of the board"""
        return self._state.grid.copy()

    @property
    def power_ups(self):
        """copies of the power-up records, keyed by id"""
        return {power_up_id: replace(power_up) for power_up_id, power_up in self._power_ups.items()}

    @property
    def highest_tile(self):
        return highest_tile(self._state.grid)

    @property
    def can_undo(self):
        return bool(self.history)

    @property
    def is_locked(self):
        return self.clock() < self._locked_until

    @property
    def finalized(self):
        return self._finalized

    # ------------------------------------------------------------------
    # input events

    def move(self, direction):
        """
        request a move, returns True if any tile moved

        rejected requests (unknown direction, settle lock, finished game,
        pending win screen) leave everything untouched
        """
        direction = Direction.parse(direction)
        if direction is None:
            return False

        self.update()
        now = self.clock()
        if now < self._locked_until:
            logger.debug("move ignored, previous move still settling")
            return False
        if not can_move(self._state):
            return False

        self._locked_until = now + self.config.settle_time
        previous = self._state
        outcome = apply_move(previous, direction, self.ids, self.rng, self.config)
        self._state = outcome.state
        result = outcome.result

        if outcome.history_entry is not None:
            self.history.push(*outcome.history_entry)
            for power_up in self._power_ups.values():
                power_up.tick()

            if result.merge_count:
                self._peak_combo = max(self._peak_combo, self._state.combo_count)
                self.combo_timer.restart()
                self._notify('on_merge', result.max_merge_value)

            if self._state.best_score > self._saved_best:
                self._saved_best = self._state.best_score
                self._save('save_best_score', self._saved_best)

            self._notify('on_move')

        if self._state.won and not previous.won:
            logger.info(f"Reached {self.config.win_value} after {self._state.move_count} moves")
            self._notify('on_win')

        if self._state.game_over and not previous.game_over:
            self._end_game(result.merge_count)

        return result.moved

    def use_power_up(self, power_up_id):
        """use a power-up by id, returns True on success"""
        self.update()
        power_up = self._power_ups.get(power_up_id)
        if power_up is None or not power_up.ready:
            return False
        if self._state.game_over and self._state.game_mode is not GameMode.ZEN:
            return False

        undo_entry = self.history.peek() if power_up_id == UNDO else None
        new_state = apply_power_up(self._state, power_up_id, self.rng, undo_entry)
        if new_state is None:
            return False

        if power_up_id == UNDO:
            self.history.pop()
        self._state = new_state
        power_up.consume()
        logger.debug(f"used power-up {power_up_id}, {power_up.uses} uses left")
        self._notify('on_power_up', power_up_id)
        return True

    def keep_playing(self):
        """continue after winning, returns True if the win screen was dismissed"""
        new_state = apply_keep_playing(self._state)
        if new_state is self._state:
            return False
        self._state = new_state
        return True

    def new_game(self, mode=None):
        """
        start over, optionally switching mode

        an unfinished session with at least one move is counted in the stats
        before it is replaced
        """
        mode = GameMode.parse(mode) if mode is not None else self._state.game_mode
        if self._state.move_count > 0 and not self._finalized:
            self._finalize(merge_count=0)
        self._start(mode)

    def update(self):
        """run timers that are due"""
        self.scheduler.run(blocking=False)

    def close(self):
        """drop pending timers"""
        self._cancel_timers()

    # ------------------------------------------------------------------
    # internals

    def _start(self, mode):
        self._cancel_timers()
        self._session_id += 1
        self.ids = TileIds()
        self.history.clear()
        self._power_ups = create_power_ups(self.config.power_ups)
        self._finalized = False
        self._peak_combo = 0
        self._locked_until = float('-inf')

        self._state = new_game_state(
            self.config, mode, self._saved_best, self.ids, self.rng,
            now=self.clock(), session_id=self._session_id,
        )
        logger.info(f"New {mode.value} game started (session {self._session_id})")

        if mode is GameMode.TIME_ATTACK:
            self._schedule_tick()

    def _cancel_timers(self):
        self.combo_timer.cancel()
        if self._tick_event is not None:
            try:
                self.scheduler.cancel(self._tick_event)
            except ValueError:
                pass
            self._tick_event = None

    def _schedule_tick(self):
        self._tick_event = self.scheduler.enter(
            self.config.tick_interval, 1, self._on_tick, (self._session_id,))

    def _on_tick(self, session_id):
        self._tick_event = None
        if session_id != self._state.session_id:
            return

        was_over = self._state.game_over
        self._state = apply_tick(self._state, self.clock(), self.config)
        if self._state.game_over:
            if not was_over:
                logger.info("Time is up")
                self._end_game(merge_count=0)
            return
        self._schedule_tick()

    def _on_combo_decay(self):
        self._state = apply_combo_decay(self._state)

    def _end_game(self, merge_count):
        logger.info(f"Game over: score {self._state.score} in {self._state.move_count} moves")
        self._finalize(merge_count)
        self._notify('on_game_over')

    def _finalize(self, merge_count):
        if self._finalized:
            return
        self._finalized = True
        elapsed = self.clock() - self._state.start_time
        self.stats = update_game_stats(
            self.stats, self._state, self._state.won, merge_count,
            elapsed=elapsed, peak_combo=self._peak_combo,
        )
        self._save('save_stats', self.stats)

    def _notify(self, name, *args):
        callback = getattr(self.callbacks, name)
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception(f"{name} callback failed")

    def _load(self, method, default):
        try:
            return getattr(self.storage, method)()
        except Exception as e:
            logger.warning(f"Storage {method} failed: {e}")
            return default

    def _save(self, method, value):
        try:
            getattr(self.storage, method)(value)
        except Exception as e:
            logger.warning(f"Storage {method} failed: {e}")
