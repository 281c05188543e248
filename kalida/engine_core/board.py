"""
Board - Grid state for the Kalida game family.

Design principles:
- Fixed size: dimensions are validated once, at construction
- Forgiving moves: illegal placements return False instead of raising
- Cheap snapshots: copies never alias the original grid
- Search-friendly: undo() exists for backtracking only, never for the UI

Cells hold "" (empty) or a player marker ("X" / "O").
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator


EMPTY = ""
PLAYER_X = "X"
PLAYER_O = "O"
PLAYERS = (PLAYER_X, PLAYER_O)

DEFAULT_SIZE = 6


def other_player(player: str) -> str:
    """Get the opponent's marker."""
    return PLAYER_O if player == PLAYER_X else PLAYER_X


@dataclass(frozen=True)
class Move:
    """A (row, col) grid coordinate, 0-indexed."""
    row: int
    col: int

    def as_dict(self) -> dict[str, int]:
        return {"row": self.row, "col": self.col}


@dataclass(frozen=True)
class LastMove:
    """Record of the most recent placement."""
    row: int
    col: int
    player: str


class Board:
    """
    An N x N Kalida board.

    Every cell moves from empty to a player marker exactly once,
    until reset() is called.
    """

    def __init__(self, size: int = DEFAULT_SIZE):
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise ValueError(f"Board size must be a positive integer, got {size!r}")
        self.size = size
        self.cells: list[list[str]] = [[EMPTY] * size for _ in range(size)]
        self.last_move: LastMove | None = None

    @classmethod
    def from_grid(cls, grid: Iterable[Iterable[str]]) -> Board:
        """
        Build a board from a host grid snapshot.

        Raises:
            ValueError: If the grid is not square or holds unknown markers
        """
        rows = [list(row) for row in grid]
        board = cls(len(rows))
        for r, row in enumerate(rows):
            if len(row) != board.size:
                raise ValueError(
                    f"Row {r} has {len(row)} cells, expected {board.size}"
                )
            for c, value in enumerate(row):
                if value != EMPTY and value not in PLAYERS:
                    raise ValueError(f"Unknown marker {value!r} at ({r}, {c})")
                board.cells[r][c] = value
        return board

    # =========================================================================
    # Queries
    # =========================================================================

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def get(self, row: int, col: int) -> str | None:
        """Get the marker at a cell, or None when out of bounds."""
        if not self.in_bounds(row, col):
            return None
        return self.cells[row][col]

    def is_empty_at(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and self.cells[row][col] == EMPTY

    def is_full(self) -> bool:
        return all(cell != EMPTY for row in self.cells for cell in row)

    def is_empty(self) -> bool:
        return all(cell == EMPTY for row in self.cells for cell in row)

    def empty_positions(self) -> list[Move]:
        """All empty cells in row-major order."""
        return [
            Move(r, c)
            for r in range(self.size)
            for c in range(self.size)
            if self.cells[r][c] == EMPTY
        ]

    def occupied_positions(self, player: str | None = None) -> list[Move]:
        """Occupied cells in row-major order, optionally for one player."""
        return [
            Move(r, c)
            for r in range(self.size)
            for c in range(self.size)
            if self.cells[r][c] != EMPTY
            and (player is None or self.cells[r][c] == player)
        ]

    def count_pieces(self, player: str | None = None) -> int:
        return len(self.occupied_positions(player))

    @property
    def center(self) -> Move:
        return Move(self.size // 2, self.size // 2)

    # =========================================================================
    # Mutation
    # =========================================================================

    def place(self, row: int, col: int, player: str) -> bool:
        """
        Place a marker.

        Returns False without touching the board if the cell is out of
        bounds, already occupied, or the marker is not a player.
        """
        if player not in PLAYERS or not self.is_empty_at(row, col):
            return False
        self.cells[row][col] = player
        self.last_move = LastMove(row, col, player)
        return True

    def undo(self, row: int, col: int) -> None:
        """Clear a cell. Reserved for search backtracking."""
        self.cells[row][col] = EMPTY

    @contextmanager
    def trial(self, row: int, col: int, player: str) -> Iterator[Board]:
        """
        Temporarily set a cell, restoring it on exit.

        Usage:
            with board.trial(2, 3, "X"):
                winner = rules.check_game_winner(board)
        """
        previous = self.cells[row][col]
        self.cells[row][col] = player
        try:
            yield self
        finally:
            self.cells[row][col] = previous

    def reset(self) -> None:
        self.cells = [[EMPTY] * self.size for _ in range(self.size)]
        self.last_move = None

    # =========================================================================
    # Copies
    # =========================================================================

    def snapshot(self) -> Board:
        """Independent copy; mutating it never affects this board."""
        copy = Board(self.size)
        copy.cells = [row.copy() for row in self.cells]
        copy.last_move = self.last_move
        return copy

    def to_grid(self) -> list[list[str]]:
        return [row.copy() for row in self.cells]

    def __str__(self) -> str:
        return "\n".join(
            "".join(cell or "." for cell in row) for row in self.cells
        )
