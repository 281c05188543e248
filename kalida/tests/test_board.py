"""
Tests for the board model.

Tests:
- Construction and validation
- Placement never overwrites and never raises
- Trial placements and snapshots do not leak
"""

import pytest

from ..engine_core.board import Board, Move, EMPTY, PLAYER_O, PLAYER_X, other_player
from .conftest import board_from_rows


class TestBoardConstruction:
    """Tests for creating boards."""

    def test_default_board_is_empty_6x6(self):
        """Default board is 6x6 and empty."""
        board = Board()
        assert board.size == 6
        assert board.is_empty()
        assert len(board.empty_positions()) == 36

    @pytest.mark.parametrize("size", [0, -3, 2.5, "6", True])
    def test_bad_size_rejected(self, size):
        """Non-positive or non-integer sizes raise ValueError."""
        with pytest.raises(ValueError):
            Board(size)

    def test_from_grid(self):
        """A host grid is copied into a board."""
        board = Board.from_grid([["X", "", ""], ["", "O", ""], ["", "", ""]])
        assert board.size == 3
        assert board.get(0, 0) == PLAYER_X
        assert board.get(1, 1) == PLAYER_O
        assert board.count_pieces() == 2

    def test_from_grid_rejects_ragged_rows(self):
        """Grids must be square."""
        with pytest.raises(ValueError):
            Board.from_grid([["", ""], [""]])

    def test_from_grid_rejects_unknown_markers(self):
        """Only '', 'X' and 'O' are accepted."""
        with pytest.raises(ValueError):
            Board.from_grid([["Z", ""], ["", ""]])


class TestPlacement:
    """Tests for placing markers."""

    def test_place_records_last_move(self, empty_board):
        """A successful placement sets the cell and last move."""
        assert empty_board.place(2, 3, PLAYER_X)
        assert empty_board.get(2, 3) == PLAYER_X
        assert empty_board.last_move.row == 2
        assert empty_board.last_move.col == 3
        assert empty_board.last_move.player == PLAYER_X

    def test_place_on_occupied_cell_fails(self, empty_board):
        """An occupied cell is never overwritten."""
        empty_board.place(0, 0, PLAYER_X)
        assert not empty_board.place(0, 0, PLAYER_O)
        assert empty_board.get(0, 0) == PLAYER_X

    @pytest.mark.parametrize("row,col", [(-1, 0), (0, 6), (6, 6)])
    def test_place_out_of_bounds_fails(self, empty_board, row, col):
        """Out-of-bounds placements return False."""
        assert not empty_board.place(row, col, PLAYER_X)
        assert empty_board.is_empty()

    def test_place_unknown_player_fails(self, empty_board):
        """Only X and O can be placed."""
        assert not empty_board.place(0, 0, "Z")
        assert not empty_board.place(0, 0, EMPTY)
        assert empty_board.is_empty()

    def test_get_out_of_bounds_is_none(self, empty_board):
        assert empty_board.get(-1, 2) is None
        assert empty_board.get(2, 6) is None


class TestQueries:
    """Tests for board queries."""

    def test_empty_positions_row_major(self):
        """Empty cells come back in row-major order."""
        board = board_from_rows("X..", ".O.", "...")
        assert board.empty_positions()[:3] == [Move(0, 1), Move(0, 2), Move(1, 0)]

    def test_occupied_positions_by_player(self):
        board = board_from_rows("X.O", ".X.", "...")
        assert board.occupied_positions(PLAYER_X) == [Move(0, 0), Move(1, 1)]
        assert board.occupied_positions(PLAYER_O) == [Move(0, 2)]
        assert board.count_pieces() == 3

    def test_is_full(self, full_board):
        assert full_board.is_full()
        assert full_board.empty_positions() == []

    def test_center(self):
        assert Board(6).center == Move(3, 3)
        assert Board(5).center == Move(2, 2)

    def test_move_as_dict(self):
        assert Move(1, 4).as_dict() == {"row": 1, "col": 4}

    def test_other_player(self):
        assert other_player(PLAYER_X) == PLAYER_O
        assert other_player(PLAYER_O) == PLAYER_X


class TestCopies:
    """Tests for trial placements and snapshots."""

    def test_trial_restores_cell(self, empty_board):
        """A trial placement is undone on exit."""
        with empty_board.trial(1, 1, PLAYER_X):
            assert empty_board.get(1, 1) == PLAYER_X
        assert empty_board.get(1, 1) == EMPTY

    def test_trial_restores_on_error(self, empty_board):
        """A trial placement is undone even if the body raises."""
        with pytest.raises(RuntimeError):
            with empty_board.trial(1, 1, PLAYER_X):
                raise RuntimeError("boom")
        assert empty_board.get(1, 1) == EMPTY

    def test_snapshot_is_independent(self, empty_board):
        """Mutating a snapshot never affects the original."""
        empty_board.place(0, 0, PLAYER_X)
        copy = empty_board.snapshot()
        copy.place(5, 5, PLAYER_O)
        copy.undo(0, 0)

        assert empty_board.get(0, 0) == PLAYER_X
        assert empty_board.get(5, 5) == EMPTY

    def test_to_grid_is_a_copy(self, empty_board):
        grid = empty_board.to_grid()
        grid[0][0] = PLAYER_X
        assert empty_board.get(0, 0) == EMPTY

    def test_reset(self, empty_board):
        empty_board.place(3, 3, PLAYER_X)
        empty_board.reset()
        assert empty_board.is_empty()
        assert empty_board.last_move is None

    def test_str_uses_dots(self):
        board = board_from_rows("X..", ".O.", "...")
        assert str(board) == "X..\n.O.\n..."
