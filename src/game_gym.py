import random

import gymnasium as gym
from gymnasium import spaces
import numpy as np

from config import DEFAULT_CONFIG
from game import Direction, highest_tile, move_grid
from grid import TileIds
from session import GameMode, GameSession
from storage import MemoryStorage


class StepClock:
    """simulated clock, the environment advances it by a fixed step per action"""

    def __init__(self, start=0.0):
        self.now = start

    def advance(self, seconds):
        self.now += seconds

    def __call__(self):
        return self.now


class Game2048Env(gym.Env):
    """
    gymnasium environment around a game session

    actions:
    - 0-3: move up, down, left, right
    - 4-7: power-up undo, shuffle, remove, bomb

    time is simulated: each step moves the clock forward by seconds_per_step,
    so the combo window and the time attack countdown run in game time, not
    wall time. seconds_per_step must be longer than the settle lock or every
    other move would be ignored.
    """

    metadata = {"render_modes": ["human", "ansi"]}

    def __init__(self, mode=GameMode.CLASSIC, config=None, seconds_per_step=0.25, render_mode=None):
        super().__init__()

        self.config = config or DEFAULT_CONFIG
        if seconds_per_step <= self.config.settle_time:
            raise ValueError(
                f"seconds_per_step ({seconds_per_step}) must exceed settle_time ({self.config.settle_time})")
        self.seconds_per_step = seconds_per_step
        self.render_mode = render_mode

        self.clock = StepClock()
        self.session = GameSession(
            mode,
            config=self.config,
            storage=MemoryStorage(),
            clock=self.clock,
            rng=random.Random(),
        )

        self.action_space = spaces.Discrete(8)

        # raw tile values, 0 for empty cells
        size = self.config.grid_size
        self.observation_space = spaces.Box(
            low=0,
            high=131072,  # up to 131072 tile (not reaching here anyways)
            shape=(size, size),
            dtype=np.int32
        )

        self.action_to_direction = {
            0: Direction.UP,
            1: Direction.DOWN,
            2: Direction.LEFT,
            3: Direction.RIGHT,
        }
        self.action_to_power_up = {
            4: 'undo',
            5: 'shuffle',
            6: 'remove',
            7: 'bomb',
        }

        # board after the last valid move, before the random tile
        self.last_afterstate = None

    def _get_observation(self):
        return self.session.state.grid.to_array()

    def _get_info(self, moved=False, points=0, afterstate=None):
        state = self.session.state
        return {
            "score": state.score,
            "moved": moved,
            "points_gained": points,
            "afterstate": afterstate,
            "max_tile": highest_tile(state.grid),
            "combo_count": state.combo_count,
            "time_remaining": state.time_remaining,
        }

    def get_afterstate(self, action):
        """
        board after a move but before the random tile

        args:
            action: 0=up, 1=down, 2=left, 3=right

        returns:
            afterstate_board: board after the move (None if nothing moved)
            reward: raw points from merging, without the combo multiplier
            valid: if the move changes the board
        """
        direction = self.action_to_direction[action]
        result = move_grid(self.session.grid, direction, TileIds())
        if not result.moved:
            return None, 0, False
        return result.grid.to_array(), result.score, True

    def reset(self, seed=None, options=None):
        """start a new episode, options may carry {"mode": "zen"}"""
        super().reset(seed=seed)

        self.session.rng = random.Random(int(self.np_random.integers(2 ** 32)))
        mode = (options or {}).get("mode")
        self.session.new_game(mode)
        self.last_afterstate = None

        return self._get_observation(), self._get_info()

    def step(self, action):
        """
        take one step in the environment

        reward is the change in score, so an undo gives a negative reward
        """
        if not self.action_space.contains(action):
            raise ValueError(f"invalid action {action!r}")
        action = int(action)

        self.clock.advance(self.seconds_per_step)
        score_before = self.session.state.score
        afterstate = None

        if action in self.action_to_direction:
            afterstate, _, valid = self.get_afterstate(action)
            moved = self.session.move(self.action_to_direction[action])
            if valid and moved:
                self.last_afterstate = afterstate
            else:
                afterstate = None
        else:
            moved = self.session.use_power_up(self.action_to_power_up[action])

        points = self.session.state.score - score_before
        reward = float(points)

        observation = self._get_observation()
        terminated = self.session.state.game_over
        truncated = False
        info = self._get_info(moved, points, afterstate)

        if self.render_mode == "human":
            self.render()

        return observation, reward, terminated, truncated, info

    def render(self):
        """display the game state"""
        text = self._board_text()
        if self.render_mode == "ansi":
            return text
        print(text)

    def _board_text(self):
        state = self.session.state
        size = state.grid.size
        width = size * 5 + 1
        lines = [f"Score: {state.score}  Combo: {state.combo_count}", "-" * width]
        for row in self._get_observation():
            cells = "".join("    |" if value == 0 else f"{value:4}|" for value in row)
            lines.append("|" + cells)
        lines.append("-" * width)
        if state.game_over:
            lines.append("GAME OVER!")
        return "\n".join(lines)

    def close(self):
        """clean up resources"""
        self.session.close()
