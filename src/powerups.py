"""
power-ups: one-shot board actions limited by uses and cooldown

the grid effects here never touch the grid they are given. each one returns
a new grid, or None when it cannot be applied.
"""
import random
from dataclasses import dataclass, replace

from config import POWER_UP_DEFS

UNDO = 'undo'
SHUFFLE = 'shuffle'
REMOVE = 'remove'
BOMB = 'bomb'


@dataclass
class PowerUp:
    id: str
    name: str
    description: str
    uses: int
    max_uses: int
    cooldown: int
    current_cooldown: int = 0

    @property
    def ready(self):
        return self.uses > 0 and self.current_cooldown == 0

    def consume(self):
        """spend one use and start the cooldown"""
        self.uses -= 1
        self.current_cooldown = self.cooldown

    def tick(self):
        """one accepted move has passed"""
        self.current_cooldown = max(0, self.current_cooldown - 1)


def create_power_ups(definitions=None):
    """fresh power-up set keyed by id, in display order"""
    definitions = definitions or POWER_UP_DEFS
    return {
        power_up_id: PowerUp(power_up_id, name, description, uses, uses, cooldown)
        for power_up_id, (name, description, uses, cooldown) in definitions.items()
    }


def shuffle_tiles(grid, rng=random):
    """
    randomly permute the positions of all tiles (Fisher-Yates)

    tiles keep their id and value, previous_position records where they were
    """
    tiles = grid.tiles()
    if not tiles:
        return None

    positions = [tile.position for tile in tiles]
    for i in range(len(positions) - 1, 0, -1):
        j = rng.randint(0, i)
        positions[i], positions[j] = positions[j], positions[i]

    shuffled = type(grid)(grid.size)
    for tile, position in zip(tiles, positions):
        shuffled.insert(replace(
            tile,
            position=position,
            previous_position=tile.position,
            merged_from=None,
            is_new=False,
        ))
    return shuffled


def _lowest_tiles(tiles):
    lowest = min(tile.value for tile in tiles)
    return [tile for tile in tiles if tile.value == lowest]


def remove_lowest_tile(grid, rng=random):
    """remove one random tile among those with the lowest value"""
    new_grid = grid.copy()
    tiles = new_grid.tiles()
    if not tiles:
        return None

    new_grid.remove(rng.choice(_lowest_tiles(tiles)))
    return new_grid


def bomb_tiles(grid):
    """
    remove every tile holding the lowest value

    returns (new_grid, removed_count), new_grid is None if nothing was removed
    """
    new_grid = grid.copy()
    tiles = new_grid.tiles()
    if not tiles:
        return None, 0

    targets = _lowest_tiles(tiles)
    for tile in targets:
        new_grid.remove(tile)
    return new_grid, len(targets)
