"""
Opening Book - Move choice for the first few plies.

Preference order:
1. The center, if free
2. Against a lone corner stone, the central cells of that corner's
   great diagonal, farthest from the corner first
3. Block an opponent holding exactly two cells of a great diagonal
4. A random free cell two steps (Chebyshev distance) from the center
5. The first free cell of the nearest ring, row-major
6. Any free cell
"""

from __future__ import annotations
import random

from ..engine_core.board import Board, Move, EMPTY


def great_diagonals(size: int) -> list[list[Move]]:
    """The main and anti diagonal, each from row 0 down."""
    return [
        [Move(i, i) for i in range(size)],
        [Move(i, size - 1 - i) for i in range(size)],
    ]


class OpeningBook:
    """
    Opening play for the advanced difficulty.

    Randomness comes from the injected rng so tests can seed it.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def select(self, board: Board, player: str, opponent: str) -> Move | None:
        """Pick an opening move, or None on a full board."""
        empty = board.empty_positions()
        if not empty:
            return None

        center = board.center
        if board.is_empty_at(center.row, center.col):
            return center

        reply = self.corner_response(board, opponent)
        if reply:
            return reply

        block = self.diagonal_block(board, opponent)
        if block:
            return block

        ring = self.ring(board, 2)
        if ring:
            return self.rng.choice(ring)

        for distance in range(1, board.size):
            ring = self.ring(board, distance)
            if ring:
                return ring[0]

        return self.rng.choice(empty)

    @staticmethod
    def corner_response(board: Board, opponent: str) -> Move | None:
        """Reply to an opponent whose only stone sits in a corner."""
        stones = board.occupied_positions(opponent)
        if len(stones) != 1:
            return None
        corner = stones[0]
        last = board.size - 1
        if corner.row not in (0, last) or corner.col not in (0, last):
            return None

        middle = sorted({board.size // 2, last // 2}, key=lambda i: -abs(i - corner.row))
        for row in middle:
            col = row if corner.row == corner.col else last - row
            if board.is_empty_at(row, col):
                return Move(row, col)
        return None

    @staticmethod
    def diagonal_block(board: Board, opponent: str) -> Move | None:
        """First free cell of a great diagonal the opponent holds twice."""
        for line in great_diagonals(board.size):
            held = sum(1 for m in line if board.cells[m.row][m.col] == opponent)
            if held != 2:
                continue
            for m in line:
                if board.cells[m.row][m.col] == EMPTY:
                    return m
        return None

    @staticmethod
    def ring(board: Board, distance: int) -> list[Move]:
        """Free cells at exactly `distance` from the center, row-major."""
        center = board.center
        return [
            m for m in board.empty_positions()
            if max(abs(m.row - center.row), abs(m.col - center.col)) == distance
        ]
