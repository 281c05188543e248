"""
Engine Core - Board state and win detection.

The engine core:
1. Holds the board grid and applies moves
2. Detects line-variant wins (straight, wrap, bounce, missing teeth)
3. Detects path-variant wins (edge-to-edge connections)
"""

from .board import Board, Move, LastMove, EMPTY, PLAYER_X, PLAYER_O, PLAYERS, other_player
from .rules import (
    LineRules,
    RuleConfig,
    WinResult,
    GameStatus,
    has_missing_teeth,
    is_great_diagonal,
    is_on_major_axis,
)
from .path_rules import PathRules, EdgePair, count_diagonal_runs

__all__ = [
    "Board",
    "Move",
    "LastMove",
    "EMPTY",
    "PLAYER_X",
    "PLAYER_O",
    "PLAYERS",
    "other_player",
    "LineRules",
    "RuleConfig",
    "WinResult",
    "GameStatus",
    "has_missing_teeth",
    "is_great_diagonal",
    "is_on_major_axis",
    "PathRules",
    "EdgePair",
    "count_diagonal_runs",
]
