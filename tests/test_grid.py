"""Tests for the grid model."""
import random

import numpy as np
import pytest

from grid import Grid, Position, Tile, TileIds


class TestTile:

    @pytest.mark.parametrize("value", [0, 1, 3, 6, -2])
    def test_rejects_non_power_of_two(self, value):
        with pytest.raises(ValueError):
            Tile(1, value, Position(0, 0))

    def test_accepts_powers_of_two(self):
        assert Tile(1, 2, Position(0, 0)).value == 2
        assert Tile(2, 65536, Position(0, 0)).value == 65536


class TestTileIds:

    def test_ids_are_monotonic(self):
        ids = TileIds()
        assert [ids.next() for _ in range(3)] == [1, 2, 3]

    def test_generators_are_independent(self):
        first, second = TileIds(), TileIds()
        first.next()
        assert second.next() == 1


class TestGrid:

    def test_empty_grid(self):
        grid = Grid(4)
        assert len(grid.available_cells()) == 16
        assert grid.tiles() == []
        assert grid.is_empty()

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            Grid(0)

    def test_from_rows_orientation(self):
        grid = Grid.from_rows([[0, 2], [4, 0]])
        assert grid.cell(Position(1, 0)).value == 2
        assert grid.cell(Position(0, 1)).value == 4

    def test_from_rows_requires_square(self):
        with pytest.raises(ValueError):
            Grid.from_rows([[2, 0, 0], [0, 0]])

    def test_to_array_is_row_major(self):
        rows = [[0, 2, 0], [0, 0, 8], [4, 0, 0]]
        board = Grid.from_rows(rows).to_array()
        assert board.dtype == np.int32
        assert board.tolist() == rows

    def test_insert_into_occupied_cell(self):
        grid = Grid.from_rows([[2, 0], [0, 0]])
        with pytest.raises(ValueError):
            grid.insert(Tile(99, 4, Position(0, 0)))

    def test_cell_out_of_bounds(self):
        with pytest.raises(IndexError):
            Grid(4).cell(Position(4, 0))

    def test_copy_is_independent(self):
        grid = Grid.from_rows([[2, 4], [0, 0]])
        clone = grid.copy()
        clone.remove(clone.cell(Position(0, 0)))
        clone.cell(Position(1, 0)).value = 8

        assert grid.cell(Position(0, 0)).value == 2
        assert grid.cell(Position(1, 0)).value == 4
        assert clone.cell(Position(0, 0)) is None

    def test_copy_keeps_ids(self):
        grid = Grid.from_rows([[2, 4], [0, 0]])
        assert [t.id for t in grid.copy().tiles()] == [t.id for t in grid.tiles()]

    def test_equality_compares_values(self):
        assert Grid.from_rows([[2, 0], [0, 4]]) == Grid.from_rows([[2, 0], [0, 4]])
        assert Grid.from_rows([[2, 0], [0, 4]]) != Grid.from_rows([[2, 0], [4, 0]])


class TestRandomTile:

    def test_adds_to_empty_cell(self):
        grid = Grid.from_rows([[2, 0], [4, 8]])
        tile = grid.add_random_tile(TileIds(10), random.Random(1))
        assert tile.position == Position(1, 0)
        assert tile.value in (2, 4)
        assert tile.is_new
        assert grid.available_cells() == []

    def test_full_grid_returns_none(self):
        grid = Grid.from_rows([[2, 4], [4, 2]])
        assert grid.add_random_tile(TileIds(10), random.Random(1)) is None

    def test_four_probability(self):
        ids = TileIds(10)
        always_four = Grid(2)
        always_four.add_random_tile(ids, random.Random(1), four_probability=1.0)
        never_four = Grid(2)
        never_four.add_random_tile(ids, random.Random(1), four_probability=0.0)

        assert always_four.tiles()[0].value == 4
        assert never_four.tiles()[0].value == 2

    def test_mostly_twos(self):
        rng = random.Random(3)
        ids = TileIds()
        values = []
        for _ in range(1000):
            grid = Grid(4)
            values.append(grid.add_random_tile(ids, rng).value)
        fours = values.count(4) / len(values)
        assert 0.05 < fours < 0.15
