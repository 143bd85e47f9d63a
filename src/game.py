"""
core game logic and mechanics
"""
import logging
from collections import namedtuple
from enum import Enum

from config import WIN_VALUE
from grid import Position, Tile

logger = logging.getLogger(__name__)


class Direction(Enum):
    UP = 'up'
    DOWN = 'down'
    LEFT = 'left'
    RIGHT = 'right'

    @classmethod
    def parse(cls, direction):
        """accept a Direction or its name, None for anything else"""
        if isinstance(direction, cls):
            return direction
        try:
            return cls(str(direction).lower())
        except ValueError:
            return None


VECTORS = {
    Direction.UP: Position(0, -1),
    Direction.DOWN: Position(0, 1),
    Direction.LEFT: Position(-1, 0),
    Direction.RIGHT: Position(1, 0),
}


MoveResult = namedtuple('MoveResult', ['grid', 'score', 'moved', 'merge_count', 'max_merge_value'])


def build_traversals(size, vector):
    """
    cell visiting order for a move

    tiles nearest the destination edge go first so every tile is moved
    at most once and the row compacts correctly
    """
    xs = list(range(size))
    ys = list(range(size))
    if vector.x == 1:
        xs.reverse()
    if vector.y == 1:
        ys.reverse()
    return xs, ys


def find_farthest_position(grid, cell, vector):
    """farthest empty cell along vector, and the occupied cell past it (or None)"""
    previous = cell
    current = cell.offset(vector)
    while grid.within_bounds(current) and grid.cell(current) is None:
        previous = current
        current = current.offset(vector)

    next_cell = current if grid.within_bounds(current) else None
    return previous, next_cell


def move_grid(grid, direction, ids):
    """
    move all tiles in direction and merge them

    grid is owned by the caller and is modified in place, then returned
    inside the MoveResult. no new tile is spawned here.
    """
    vector = VECTORS[direction]
    xs, ys = build_traversals(grid.size, vector)
    score = 0
    moved = False
    merge_count = 0
    max_merge_value = 0

    # reset merge markers and remember where everything started
    for tile in grid.tiles():
        tile.merged_from = None
        tile.is_new = False
        tile.previous_position = tile.position

    for x in xs:
        for y in ys:
            cell = Position(x, y)
            tile = grid.cell(cell)
            if tile is None:
                continue

            farthest, next_cell = find_farthest_position(grid, cell, vector)
            next_tile = grid.cell(next_cell) if next_cell else None

            if next_tile and next_tile.value == tile.value and not next_tile.merged_from:
                merged_value = tile.value * 2
                merged = Tile(
                    id=ids.next(),
                    value=merged_value,
                    position=next_cell,
                    previous_position=tile.position,
                    merged_from=(tile, next_tile),
                )
                grid.remove(tile)
                grid.remove(next_tile)
                grid.insert(merged)
                tile.position = next_cell

                score += merged_value
                merge_count += 1
                max_merge_value = max(max_merge_value, merged_value)
                moved = True
            elif farthest != cell:
                grid.remove(tile)
                tile.position = farthest
                grid.insert(tile)
                moved = True

    logger.debug(f"move {direction.value}: moved={moved} merges={merge_count} score={score}")
    return MoveResult(grid, score, moved, merge_count, max_merge_value)


def moves_available(grid):
    """check if any move is possible (an empty cell or two equal neighbours)"""
    if grid.available_cells():
        return True

    for tile in grid.tiles():
        for vector in (VECTORS[Direction.RIGHT], VECTORS[Direction.DOWN]):
            neighbour = tile.position.offset(vector)
            if grid.within_bounds(neighbour):
                other = grid.cell(neighbour)
                if other is not None and other.value == tile.value:
                    return True

    return False


def has_won(grid, target=WIN_VALUE):
    return any(tile.value >= target for tile in grid.tiles())


def highest_tile(grid):
    return max((tile.value for tile in grid.tiles()), default=0)

