"""
API Module - Host interface.

Exposes the engine via REST API. A host can:
1. Ask for a computer move on a board it holds
2. Ask for the win/draw status of a board
3. Run whole games in server-side sessions

All session state is in memory.
"""

from .schemas import (
    # Requests
    MoveRequest,
    StatusRequest,
    CreateSessionRequest,
    PlayMoveRequest,
    # Responses
    MoveResponse,
    GameStatusResponse,
    SessionResponse,
    TurnResponse,
    ErrorResponse,
    # Enums
    ErrorCode,
    VariantType,
    SessionStatus,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "MoveRequest",
    "StatusRequest",
    "CreateSessionRequest",
    "PlayMoveRequest",
    # Responses
    "MoveResponse",
    "GameStatusResponse",
    "SessionResponse",
    "TurnResponse",
    "ErrorResponse",
    # Enums
    "ErrorCode",
    "VariantType",
    "SessionStatus",
    # Service
    "APIService",
    "create_app",
]
