"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a game host and the engine.
Boards travel as lists of rows; each cell is "", "X" or "O".

Error Codes:
- INVALID_BOARD: Board is not square or holds unknown markers
- INVALID_MOVE: Cell is out of bounds, taken, or it is not the caller's turn
- SESSION_NOT_FOUND: Session does not exist or has been ended
- GAME_OVER: The game has ended; reset the session to play again
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class VariantType(str, Enum):
    """Win condition."""
    LINE = "line"
    PATH = "path"


class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    GAME_OVER = "game_over"


class ErrorCode(str, Enum):
    """Structured error codes."""
    INVALID_BOARD = "INVALID_BOARD"
    INVALID_MOVE = "INVALID_MOVE"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    GAME_OVER = "GAME_OVER"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class MoveInfo(BaseModel):
    """A cell, 0-indexed."""
    row: int
    col: int


class PlayedMove(BaseModel):
    """A move applied to a session board."""
    row: int
    col: int
    player: str
    by_computer: bool = False


class RuleFlags(BaseModel):
    """Line-variant rule modifiers."""
    bounce_enabled: bool = False
    missing_teeth_enabled: bool = False
    wrap_enabled: bool = Field(False, description="Straight runs continue across the opposite edge")


class GameStatusResponse(BaseModel):
    """Win/draw status of a board."""
    is_over: bool
    winner: Optional[str] = None
    winning_cells: list[tuple[int, int]] = Field(default_factory=list)
    is_draw: bool = False
    bounce_index: Optional[int] = Field(
        None, description="Path index of the first reflection, -1 if none (line variant only)"
    )
    second_bounce_index: Optional[int] = Field(
        None, description="Path index of the second reflection, -1 if none (line variant only)"
    )


# =============================================================================
# Request Models
# =============================================================================

class MoveRequest(RuleFlags):
    """Request a computer move for a board snapshot."""
    board: list[list[str]] = Field(..., description="Rows of '', 'X' or 'O'")
    player: str = Field(..., pattern="^[XO]$", description="Marker to move")
    difficulty: Optional[str] = Field(
        None, description="easy, medium, hard, extra or advanced"
    )
    seed: Optional[int] = Field(None, description="Seed for a reproducible choice")


class StatusRequest(RuleFlags):
    """Request the status of a board snapshot."""
    board: list[list[str]] = Field(..., description="Rows of '', 'X' or 'O'")
    variant: VariantType = VariantType.LINE


class CreateSessionRequest(RuleFlags):
    """Request to create a new game session."""
    variant: VariantType = VariantType.LINE
    size: int = Field(6, ge=1, le=26, description="Board side length")
    computer_player: Optional[str] = Field(
        None, pattern="^[XO]$", description="Marker played by the computer, if any"
    )
    difficulty: Optional[str] = Field(None, description="Computer difficulty")


class PlayMoveRequest(BaseModel):
    """A move by the player whose turn it is."""
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class MoveResponse(BaseModel):
    """Computer move for a board snapshot."""
    move: Optional[MoveInfo] = Field(None, description="None only when the board is full")
    difficulty: str
    explanation: str = ""
    api_version: str = "v1"


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    variant: VariantType
    size: int
    rules: RuleFlags
    board: list[list[str]]
    current_player: str
    status: SessionStatus
    game_status: GameStatusResponse
    scores: dict[str, int] = Field(default_factory=dict)
    computer_player: Optional[str] = None
    difficulty: Optional[str] = None
    move_count: int = 0
    history: list[PlayedMove] = Field(default_factory=list)
    created_at: float = 0.0
    api_version: str = "v1"


class TurnResponse(BaseModel):
    """Moves applied by a play request, with the session afterwards."""
    moves: list[PlayedMove]
    session: SessionResponse
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
