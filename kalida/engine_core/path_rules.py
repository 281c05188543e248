"""
Path Rules - Win detection for the path (edge-to-edge) variant.

A player wins with a connected chain of their markers joining two
opposite edges (left-right or top-bottom). Cells connect in all 8
directions, but a winning chain may use at most one contiguous
stretch of diagonal steps; every other link must be orthogonal.

Corners belong to both adjacent edges.
"""

from __future__ import annotations
from collections import deque
from enum import Enum

from .board import Board, PLAYERS
from .rules import Cell, GameStatus


class EdgePair(Enum):
    """Opposite edges a winning path must join."""
    LEFT_RIGHT = "left_right"
    TOP_BOTTOM = "top_bottom"


# Diagonal allowance of a partial path
DIAG_NONE = 0
DIAG_ACTIVE = 1
DIAG_SPENT = 2

NEIGHBORS: tuple[tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


def count_diagonal_runs(path: list[Cell]) -> int:
    """Count maximal runs of consecutive diagonal steps in a path."""
    runs = 0
    in_run = False
    for (r1, c1), (r2, c2) in zip(path, path[1:]):
        diagonal = r1 != r2 and c1 != c2
        if diagonal and not in_run:
            runs += 1
        in_run = diagonal
    return runs


class PathRules:
    """
    Breadth-first search over (cell, diagonal state).

    State space is size * size * 3; each state is visited at most once,
    keyed by (row * size + col) * 3 + state.
    """

    def check_game_status(self, board: Board) -> GameStatus:
        for player in PLAYERS:
            path = self.check_win_for_player(board, player)
            if path:
                return GameStatus(is_over=True, winner=player, winning_cells=path)

        is_draw = board.is_full()
        return GameStatus(is_over=is_draw, is_draw=is_draw)

    def check_win_for_player(self, board: Board, player: str) -> list[Cell] | None:
        """Winning path for `player` across either edge pair, or None."""
        for edge_pair in (EdgePair.LEFT_RIGHT, EdgePair.TOP_BOTTOM):
            path = self.find_edge_path(board, player, edge_pair)
            if path:
                return path
        return None

    def find_edge_path(
        self, board: Board, player: str, edge_pair: EdgePair
    ) -> list[Cell] | None:
        """Shortest valid path joining the two edges of `edge_pair`, or None."""
        n = board.size
        cells = board.cells
        left_right = edge_pair == EdgePair.LEFT_RIGHT

        parents: dict[int, int | None] = {}
        queue: deque[int] = deque()
        for i in range(n):
            r, c = (i, 0) if left_right else (0, i)
            if cells[r][c] == player:
                key = (r * n + c) * 3 + DIAG_NONE
                parents[key] = None
                queue.append(key)

        while queue:
            key = queue.popleft()
            state = key % 3
            r, c = divmod(key // 3, n)

            if (c if left_right else r) == n - 1:
                return self._reconstruct(key, parents, n)

            for dr, dc in NEIGHBORS:
                nr, nc = r + dr, c + dc
                if not (0 <= nr < n and 0 <= nc < n) or cells[nr][nc] != player:
                    continue

                if dr != 0 and dc != 0:
                    if state == DIAG_SPENT:
                        continue
                    next_state = DIAG_ACTIVE
                elif state == DIAG_ACTIVE:
                    next_state = DIAG_SPENT
                else:
                    next_state = state

                next_key = (nr * n + nc) * 3 + next_state
                if next_key in parents:
                    continue
                parents[next_key] = key
                queue.append(next_key)

        return None

    @staticmethod
    def _reconstruct(key: int, parents: dict[int, int | None], n: int) -> list[Cell]:
        path: list[Cell] = []
        current: int | None = key
        while current is not None:
            path.append(divmod(current // 3, n))
            current = parents[current]
        path.reverse()
        return path
