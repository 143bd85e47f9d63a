"""
grid model: tiles, positions and the N x N cell array
"""
import itertools
import random
from dataclasses import dataclass, replace

import numpy as np

from config import GRID_SIZE, FOUR_PROBABILITY


@dataclass(frozen=True)
class Position:
    x: int  # column
    y: int  # row

    def offset(self, vector):
        return Position(self.x + vector.x, self.y + vector.y)


@dataclass
class Tile:
    """a single tile with a power-of-two value"""
    id: int
    value: int
    position: Position
    previous_position: Position = None
    merged_from: tuple = None
    is_new: bool = False

    def __post_init__(self):
        if self.value < 2 or self.value & (self.value - 1):
            raise ValueError(f"tile value must be a power of two >= 2, got {self.value}")


class TileIds:
    """monotonic tile id generator, one per session"""

    def __init__(self, start=1):
        self._counter = itertools.count(start)

    def next(self):
        return next(self._counter)


class Grid:
    """
    fixed size board, cells indexed as cells[x][y]

    empty cells hold None
    """

    def __init__(self, size=GRID_SIZE):
        if size < 1:
            raise ValueError(f"grid size must be positive, got {size}")
        self.size = size
        self.cells = [[None for _ in range(size)] for _ in range(size)]

    @classmethod
    def from_rows(cls, rows, ids=None):
        """
        build a grid from a row-major list of values (0 = empty)

        handy for tests and for loading boards from other code
        """
        ids = ids or TileIds()
        grid = cls(len(rows))
        for y, row in enumerate(rows):
            if len(row) != grid.size:
                raise ValueError("rows must form a square board")
            for x, value in enumerate(row):
                if value:
                    grid.insert(Tile(ids.next(), value, Position(x, y)))
        return grid

    def within_bounds(self, position):
        return 0 <= position.x < self.size and 0 <= position.y < self.size

    def cell(self, position):
        """tile at position, or None when empty"""
        if not self.within_bounds(position):
            raise IndexError(f"position {position} outside {self.size}x{self.size} grid")
        return self.cells[position.x][position.y]

    def insert(self, tile):
        if self.cell(tile.position) is not None:
            raise ValueError(f"cell {tile.position} is already occupied")
        self.cells[tile.position.x][tile.position.y] = tile

    def remove(self, tile):
        self.cells[tile.position.x][tile.position.y] = None

    def available_cells(self):
        """all empty positions"""
        return [Position(x, y)
                for x in range(self.size)
                for y in range(self.size)
                if self.cells[x][y] is None]

    def tiles(self):
        """all tiles on the board"""
        return [self.cells[x][y]
                for x in range(self.size)
                for y in range(self.size)
                if self.cells[x][y] is not None]

    def is_empty(self):
        return not self.tiles()

    def copy(self):
        """copy the grid with fresh tile records so nothing is shared"""
        clone = Grid(self.size)
        for tile in self.tiles():
            clone.cells[tile.position.x][tile.position.y] = replace(
                tile,
                merged_from=tuple(tile.merged_from) if tile.merged_from else None,
            )
        return clone

    def add_random_tile(self, ids, rng=random, four_probability=FOUR_PROBABILITY):
        """add a random tile (2 or 4) to an empty space, returns it or None when full"""
        empty_cells = self.available_cells()
        if not empty_cells:
            return None

        position = rng.choice(empty_cells)
        value = 4 if rng.random() < four_probability else 2
        tile = Tile(ids.next(), value, position, is_new=True)
        self.insert(tile)
        return tile

    def to_array(self):
        """row-major numpy array of tile values, 0 for empty cells"""
        board = np.zeros((self.size, self.size), dtype=np.int32)
        for tile in self.tiles():
            board[tile.position.y, tile.position.x] = tile.value
        return board

    def value_sum(self):
        return sum(tile.value for tile in self.tiles())

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.to_array(), other.to_array())

    __hash__ = None

    def __repr__(self):
        return f"Grid({self.to_array().tolist()})"
