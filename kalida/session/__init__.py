"""
Session Module - In-memory game sessions.

A session represents one match on one board:
- Created when a host starts a game
- Holds the board, turn order, scores and computer opponent
- Ended by the host, or cleaned up once stale
"""

from .game import (
    GameSession,
    SessionState,
    Variant,
    MoveRecord,
    TurnResult,
    KalidaError,
    InvalidMoveError,
    GameOverError,
)
from .manager import SessionManager

__all__ = [
    "SessionManager",
    "GameSession",
    "SessionState",
    "Variant",
    "MoveRecord",
    "TurnResult",
    "KalidaError",
    "InvalidMoveError",
    "GameOverError",
]
