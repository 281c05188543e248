"""
Pytest fixtures for Kalida tests.
"""

import random

import pytest

from ..engine_core.board import Board, EMPTY
from ..engine_core.path_rules import PathRules
from ..engine_core.rules import LineRules, RuleConfig
from ..bots.dispatcher import StrategyDispatcher


def board_from_rows(*rows: str) -> Board:
    """Build a board from text rows, "." for empty."""
    return Board.from_grid([[EMPTY if ch == "." else ch for ch in row] for row in rows])


def board_with(player_cells: dict, size: int = 6) -> Board:
    """Build a board from {player: [(row, col), ...]}."""
    board = Board(size)
    for player, cells in player_cells.items():
        for row, col in cells:
            assert board.place(row, col, player)
    return board


class FakeClock:
    """
    Clock returning scripted readings, in seconds.

    Once the script runs out, the last reading repeats.
    """

    def __init__(self, *readings: float):
        self.readings = list(readings) or [0.0]
        self.calls = 0

    def __call__(self) -> float:
        index = min(self.calls, len(self.readings) - 1)
        self.calls += 1
        return self.readings[index]


@pytest.fixture
def empty_board() -> Board:
    """Empty 6x6 board."""
    return Board()


@pytest.fixture
def full_board() -> Board:
    """Full 6x6 board with no five in a row."""
    return board_from_rows(
        "XXOOXX",
        "OOXXOO",
        "XXOOXX",
        "OOXXOO",
        "XXOOXX",
        "OOXXOO",
    )


@pytest.fixture
def line_rules() -> LineRules:
    """Plain line rules, no modifiers."""
    return LineRules(RuleConfig())


@pytest.fixture
def bounce_rules() -> LineRules:
    return LineRules(RuleConfig(bounce_enabled=True))


@pytest.fixture
def path_rules() -> PathRules:
    return PathRules()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def dispatcher() -> StrategyDispatcher:
    """Seeded dispatcher with a short search budget."""
    return StrategyDispatcher(seed=7, time_limit_ms=100)
