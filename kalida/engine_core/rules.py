"""
Line Rules - Win detection for the line variant of Kalida.

A player wins with WIN_LENGTH same-player cells in a straight line
(horizontal, vertical or either diagonal). Optional modifiers:
- Bounce: a diagonal run may reflect off a board edge, at most twice
- Missing teeth: a run whose consecutive cells are not step-adjacent
  is not a win
- Wrap: a straight run may continue across the opposite edge

Detection is pure: boards passed in are left exactly as they were found.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterator

from .board import Board, Move, EMPTY, PLAYERS

Cell = tuple[int, int]

DEFAULT_WIN_LENGTH = 5

# Horizontal, vertical, diagonal, anti-diagonal
DIRECTIONS: tuple[tuple[int, int], ...] = ((0, 1), (1, 0), (1, 1), (1, -1))
DIAGONALS: tuple[tuple[int, int], ...] = ((1, 1), (1, -1))
BOUNCE_DIRECTIONS: tuple[tuple[int, int], ...] = ((-1, -1), (1, 1), (-1, 1), (1, -1))

MAX_REFLECTIONS = 2


@dataclass(frozen=True)
class RuleConfig:
    """Rule flags for the line variant. Never mutated after creation."""
    bounce_enabled: bool = False
    missing_teeth_enabled: bool = False
    wrap_enabled: bool = False
    win_length: int = DEFAULT_WIN_LENGTH


@dataclass
class WinResult:
    """
    Outcome of a win check.

    bounce_index / second_bounce_index are positions in winning_path
    where the run reflected, or -1.
    """
    winner: str | None = None
    winning_path: list[Cell] = field(default_factory=list)
    bounce_index: int = -1
    second_bounce_index: int = -1

    @property
    def is_win(self) -> bool:
        return self.winner is not None


@dataclass
class GameStatus:
    """Game status as reported to the host."""
    is_over: bool = False
    winner: str | None = None
    winning_cells: list[Cell] = field(default_factory=list)
    is_draw: bool = False
    bounce_index: int = -1
    second_bounce_index: int = -1

    def to_dict(self, include_bounce: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "is_over": self.is_over,
            "winner": self.winner,
            "winning_cells": [list(cell) for cell in self.winning_cells],
            "is_draw": self.is_draw,
        }
        if include_bounce:
            data["bounce_index"] = self.bounce_index
            data["second_bounce_index"] = self.second_bounce_index
        return data


@dataclass
class BounceTrace:
    """A traced diagonal path with the path indices where it reflected."""
    path: list[Cell]
    bounce_indices: list[int] = field(default_factory=list)
    exhausted: bool = False  # A third reflection was needed


# =============================================================================
# Path classification
# =============================================================================

def has_missing_teeth(path: list[Cell]) -> bool:
    """
    Check a traced path for gaps.

    Paths shorter than 3 always count as having missing teeth. Only
    consecutive pairs of the path are compared; empty cells on the
    enclosing line are not looked at.
    """
    if len(path) < 3:
        return True
    for (r1, c1), (r2, c2) in zip(path, path[1:]):
        if max(abs(r2 - r1), abs(c2 - c1)) != 1:
            return True
    return False


def is_great_diagonal(path: list[Cell], size: int) -> bool:
    """True if every cell lies on one of the two board-spanning diagonals."""
    if len(path) < 3:
        return False
    if all(r == c for r, c in path):
        return True
    return all(r + c == size - 1 for r, c in path)


def is_on_major_axis(path: list[Cell], size: int) -> bool:
    """True for a single row, a single column, or a great diagonal."""
    if len(path) < 3:
        return False
    if len({r for r, _ in path}) == 1 or len({c for _, c in path}) == 1:
        return True
    return is_great_diagonal(path, size)


def trace_bounce(
    board: Board,
    row: int,
    col: int,
    dr: int,
    dc: int,
    player: str,
    required: int,
) -> BounceTrace:
    """
    Trace same-player cells from (row, col), reflecting off edges.

    When the next step leaves the board, the out-of-range component(s)
    of the direction are negated and tracing resumes from the last
    in-bounds cell. The trace stops at `required` cells, at the first
    non-player or revisited cell, or when a third reflection is needed.
    """
    n = board.size
    cells = board.cells
    path = [(row, col)]
    visited = {row * n + col}
    bounces: list[int] = []
    r, c = row, col

    while len(path) < required:
        nr, nc = r + dr, c + dc
        if not (0 <= nr < n and 0 <= nc < n):
            if len(bounces) == MAX_REFLECTIONS:
                return BounceTrace(path, bounces, exhausted=True)
            bounces.append(len(path) - 1)
            if not 0 <= nr < n:
                dr = -dr
            if not 0 <= nc < n:
                dc = -dc
            nr, nc = r + dr, c + dc
            if not (0 <= nr < n and 0 <= nc < n):
                bounces.pop()
                break
            if nr * n + nc in visited or cells[nr][nc] != player:
                bounces.pop()
                break
        key = nr * n + nc
        if key in visited or cells[nr][nc] != player:
            break
        path.append((nr, nc))
        visited.add(key)
        r, c = nr, nc

    return BounceTrace(path, bounces)


# =============================================================================
# Line rules
# =============================================================================

class LineRules:
    """
    Win detection for the line variant.

    Usage:
        rules = LineRules(RuleConfig(bounce_enabled=True))
        winner = rules.check_game_winner(board)
        move = rules.find_winning_move(board, "X")
    """

    def __init__(self, config: RuleConfig | None = None):
        self.config = config or RuleConfig()

    @property
    def win_length(self) -> int:
        return self.config.win_length

    def check_game_winner(self, board: Board) -> str | None:
        """Return the winning player, or None."""
        n = board.size
        cells = board.cells
        need = self.config.win_length
        teeth = self.config.missing_teeth_enabled

        # Straight runs, measured once from the start of each run
        for r in range(n):
            for c in range(n):
                player = cells[r][c]
                if player == EMPTY:
                    continue
                for dr, dc in DIRECTIONS:
                    pr, pc = r - dr, c - dc
                    if 0 <= pr < n and 0 <= pc < n and cells[pr][pc] == player:
                        continue
                    length = 1
                    nr, nc = r + dr, c + dc
                    while 0 <= nr < n and 0 <= nc < n and cells[nr][nc] == player:
                        length += 1
                        nr += dr
                        nc += dc
                    if length >= need and not (teeth and length < 3):
                        return player

        if not (self.config.bounce_enabled or self.config.wrap_enabled):
            return None

        for move in board.occupied_positions():
            player = cells[move.row][move.col]
            if self.config.wrap_enabled and self._check_wrap_win(
                board, move.row, move.col, player
            ).is_win:
                return player
            if self.config.bounce_enabled and self._check_bounce_win(
                board, move.row, move.col, player
            ).is_win:
                return player
        return None

    def check_win(self, board: Board, row: int, col: int) -> WinResult:
        """
        Check for a win involving the cell at (row, col).

        Tried in order: straight run, wrap run, bounce run.
        """
        player = board.get(row, col)
        if player not in PLAYERS:
            return WinResult()

        result = self._check_regular_win(board, row, col, player)
        if result.is_win:
            return result

        if self.config.wrap_enabled:
            result = self._check_wrap_win(board, row, col, player)
            if result.is_win:
                return result

        if self.config.bounce_enabled:
            result = self._check_bounce_win(board, row, col, player)
            if result.is_win:
                return result

        return WinResult()

    def check_game_status(self, board: Board) -> GameStatus:
        """Full status: the first winning cell in row-major order, or a draw."""
        for move in board.occupied_positions():
            result = self.check_win(board, move.row, move.col)
            if result.is_win:
                return GameStatus(
                    is_over=True,
                    winner=result.winner,
                    winning_cells=result.winning_path,
                    bounce_index=result.bounce_index,
                    second_bounce_index=result.second_bounce_index,
                )

        is_draw = board.is_full()
        return GameStatus(is_over=is_draw, is_draw=is_draw)

    def find_winning_move(self, board: Board, player: str) -> Move | None:
        """
        Find an empty cell that wins immediately for `player`.

        Cells are tried in row-major order. The board is restored after
        every trial placement.
        """
        for move in board.empty_positions():
            with board.trial(move.row, move.col, player):
                won = self._wins_through(board, move.row, move.col, player)
            if won:
                return move
        return None

    # =========================================================================
    # Win types
    # =========================================================================

    def _check_regular_win(
        self, board: Board, row: int, col: int, player: str
    ) -> WinResult:
        n = board.size
        cells = board.cells
        need = self.config.win_length

        for dr, dc in DIRECTIONS:
            run = [(row, col)]
            for sign in (-1, 1):
                for i in range(1, need):
                    nr, nc = row + i * dr * sign, col + i * dc * sign
                    if not (0 <= nr < n and 0 <= nc < n) or cells[nr][nc] != player:
                        break
                    run.append((nr, nc))

            if len(run) < need:
                continue

            run.sort()
            if (
                self.config.missing_teeth_enabled
                and not is_great_diagonal(run, n)
                and has_missing_teeth(run)
            ):
                continue
            return WinResult(winner=player, winning_path=run)

        return WinResult()

    def _check_wrap_win(
        self, board: Board, row: int, col: int, player: str
    ) -> WinResult:
        n = board.size
        cells = board.cells
        need = self.config.win_length

        for dr, dc in DIRECTIONS:
            visited = {row * n + col}
            sides: dict[int, list[Cell]] = {-1: [], 1: []}
            wrapped = False
            for sign in (-1, 1):
                for i in range(1, need):
                    raw_r, raw_c = row + i * dr * sign, col + i * dc * sign
                    nr, nc = raw_r % n, raw_c % n
                    key = nr * n + nc
                    if key in visited or cells[nr][nc] != player:
                        break
                    if (nr, nc) != (raw_r, raw_c):
                        wrapped = True
                    visited.add(key)
                    sides[sign].append((nr, nc))

            path = list(reversed(sides[-1])) + [(row, col)] + sides[1]
            if len(path) < need or not wrapped:
                continue

            same_row = len({r for r, _ in path}) == 1
            same_col = len({c for _, c in path}) == 1
            if (
                self.config.missing_teeth_enabled
                and (same_row or same_col)
                and has_missing_teeth(path)
            ):
                continue
            return WinResult(winner=player, winning_path=path)

        return WinResult()

    def _check_bounce_win(
        self, board: Board, row: int, col: int, player: str
    ) -> WinResult:
        for trace in self._bounce_wins_from(board, row, col, player):
            bounces = trace.bounce_indices
            return WinResult(
                winner=player,
                winning_path=trace.path,
                bounce_index=bounces[0],
                second_bounce_index=bounces[1] if len(bounces) > 1 else -1,
            )
        return WinResult()

    def _bounce_wins_from(
        self, board: Board, row: int, col: int, player: str
    ) -> Iterator[BounceTrace]:
        """Yield every qualifying bounce run that starts at (row, col)."""
        need = self.config.win_length
        for dr, dc in BOUNCE_DIRECTIONS:
            trace = trace_bounce(board, row, col, dr, dc, player, need)
            if trace.exhausted or len(trace.path) < need or not trace.bounce_indices:
                continue
            if self.config.missing_teeth_enabled and has_missing_teeth(trace.path):
                continue
            yield trace

    def _wins_through(self, board: Board, row: int, col: int, player: str) -> bool:
        if self.check_win(board, row, col).winner == player:
            return True
        if not self.config.bounce_enabled:
            return False

        # A bounce run is traced from its end, which need not be this cell
        for move in board.occupied_positions(player):
            for trace in self._bounce_wins_from(board, move.row, move.col, player):
                if (row, col) in trace.path:
                    return True
        return False
