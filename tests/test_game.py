"""Tests for the move engine and board queries."""
import random

import pytest

from conftest import STUCK_ROWS
from game import Direction, build_traversals, has_won, highest_tile, move_grid, moves_available, VECTORS
from grid import Grid, Position, TileIds


def rows_after(rows, direction):
    result = move_grid(Grid.from_rows(rows), direction, TileIds(100))
    return result.grid.to_array().tolist(), result


def random_rows(rng, size=4, fill=0.6):
    return [[rng.choice([2, 2, 4, 8, 16]) if rng.random() < fill else 0
             for _ in range(size)] for _ in range(size)]


class TestMoveScenarios:
    """Hand-checked boards for each direction."""

    def test_two_tiles_merge_left(self):
        rows = [
            [2, 2, 0, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
        ]
        result = move_grid(Grid.from_rows(rows), Direction.LEFT, TileIds(100))

        tiles = result.grid.tiles()
        assert len(tiles) == 1
        assert tiles[0].value == 4
        assert tiles[0].position == Position(0, 0)
        assert result.merge_count == 1
        assert result.score == 4
        assert result.max_merge_value == 4
        assert result.moved

    def test_merged_tile_does_not_merge_again(self):
        board, result = rows_after([[2, 2, 4, 0]] + [[0] * 4] * 3, Direction.LEFT)
        assert board[0] == [4, 4, 0, 0]
        assert result.merge_count == 1
        assert result.score == 4

    def test_four_equal_tiles_make_two_merges(self):
        board, result = rows_after([[2, 2, 2, 2]] + [[0] * 4] * 3, Direction.LEFT)
        assert board[0] == [4, 4, 0, 0]
        assert result.merge_count == 2
        assert result.score == 8

    def test_pairs_merge_separately(self):
        board, result = rows_after([[2, 2, 4, 4]] + [[0] * 4] * 3, Direction.LEFT)
        assert board[0] == [4, 8, 0, 0]
        assert result.max_merge_value == 8

    def test_move_right_merges_nearest_edge_first(self):
        board, _ = rows_after([[2, 2, 2, 0]] + [[0] * 4] * 3, Direction.RIGHT)
        assert board[0] == [0, 0, 2, 4]

    def test_move_up_compacts_column(self):
        rows = [
            [2, 0, 0, 0],
            [0, 0, 0, 0],
            [2, 0, 0, 0],
            [4, 0, 0, 0],
        ]
        board, result = rows_after(rows, Direction.UP)
        assert [row[0] for row in board] == [4, 4, 0, 0]
        assert result.merge_count == 1

    def test_move_down(self):
        rows = [
            [0, 8, 0, 0],
            [0, 8, 0, 0],
            [0, 8, 0, 0],
            [0, 0, 0, 0],
        ]
        board, _ = rows_after(rows, Direction.DOWN)
        assert [row[1] for row in board] == [0, 0, 8, 16]

    def test_blocked_move_reports_not_moved(self):
        board, result = rows_after([[2, 4, 0, 0]] + [[0] * 4] * 3, Direction.LEFT)
        assert board[0] == [2, 4, 0, 0]
        assert not result.moved
        assert result.score == 0

    def test_engine_does_not_spawn(self):
        board, _ = rows_after([[0, 0, 0, 2]] + [[0] * 4] * 3, Direction.LEFT)
        assert sum(1 for row in board for value in row if value) == 1

    def test_tile_ids_are_kept_when_sliding(self):
        grid = Grid.from_rows([[0, 0, 0, 2]] + [[0] * 4] * 3)
        tile_id = grid.tiles()[0].id
        result = move_grid(grid, Direction.LEFT, TileIds(100))
        moved_tile = result.grid.cell(Position(0, 0))
        assert moved_tile.id == tile_id
        assert moved_tile.previous_position == Position(3, 0)

    def test_merged_tile_gets_fresh_id(self):
        grid = Grid.from_rows([[2, 2, 0, 0]] + [[0] * 4] * 3)
        old_ids = {tile.id for tile in grid.tiles()}
        result = move_grid(grid, Direction.LEFT, TileIds(100))
        merged = result.grid.cell(Position(0, 0))
        assert merged.id not in old_ids
        assert {tile.id for tile in merged.merged_from} == old_ids


class TestTraversals:

    def test_positive_vector_reverses_axis(self):
        xs, ys = build_traversals(4, VECTORS[Direction.RIGHT])
        assert xs == [3, 2, 1, 0]
        assert ys == [0, 1, 2, 3]

    def test_down_reverses_rows(self):
        xs, ys = build_traversals(4, VECTORS[Direction.DOWN])
        assert xs == [0, 1, 2, 3]
        assert ys == [3, 2, 1, 0]


class TestMoveProperties:
    """Invariants checked over many random boards."""

    @pytest.mark.parametrize("direction", list(Direction))
    def test_invariants_hold_on_random_boards(self, direction):
        rng = random.Random(7)
        for _ in range(200):
            rows = random_rows(rng)
            grid = Grid.from_rows(rows)
            count_before = len(grid.tiles())
            sum_before = grid.value_sum()

            result = move_grid(grid, direction, TileIds(1000))
            tiles = result.grid.tiles()

            # one tile disappears per merge, value is conserved
            assert len(tiles) == count_before - result.merge_count
            assert result.grid.value_sum() == sum_before

            merged = [tile for tile in tiles if tile.merged_from]
            assert len(merged) == result.merge_count
            for tile in merged:
                first, second = tile.merged_from
                assert first.value == second.value == tile.value // 2
                # sources were never merge results of this move
                assert first.merged_from is None
                assert second.merged_from is None

    def test_merge_score_is_sum_of_merged_values(self):
        rng = random.Random(11)
        for _ in range(100):
            result = move_grid(Grid.from_rows(random_rows(rng)), Direction.LEFT, TileIds(1000))
            merged_values = [tile.value for tile in result.grid.tiles() if tile.merged_from]
            assert result.score == sum(merged_values)


class TestBoardQueries:

    def test_moves_available_with_empty_cell(self):
        assert moves_available(Grid.from_rows([[2, 0], [4, 8]]))

    def test_no_moves_on_stuck_board(self):
        assert not moves_available(Grid.from_rows(STUCK_ROWS))

    def test_moves_available_with_equal_neighbours(self):
        rows = [row[:] for row in STUCK_ROWS]
        rows[3][3] = 4  # equal to its left neighbour
        assert moves_available(Grid.from_rows(rows))

    def test_vertical_neighbours_count(self):
        rows = [row[:] for row in STUCK_ROWS]
        rows[1][0] = 2  # equal to the tile above
        assert moves_available(Grid.from_rows(rows))

    def test_has_won(self):
        assert has_won(Grid.from_rows([[2048, 0], [0, 0]]))
        assert has_won(Grid.from_rows([[4096, 0], [0, 0]]))
        assert not has_won(Grid.from_rows([[1024, 1024], [0, 0]]))

    def test_has_won_custom_target(self):
        assert has_won(Grid.from_rows([[512, 0], [0, 0]]), target=512)

    def test_highest_tile(self):
        assert highest_tile(Grid(4)) == 0
        assert highest_tile(Grid.from_rows([[2, 64], [8, 0]])) == 64


class TestDirectionParsing:

    def test_parse_names(self):
        assert Direction.parse('left') is Direction.LEFT
        assert Direction.parse('UP') is Direction.UP
        assert Direction.parse(Direction.DOWN) is Direction.DOWN

    def test_parse_unknown(self):
        assert Direction.parse('sideways') is None
        assert Direction.parse(None) is None
