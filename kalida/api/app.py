"""
FastAPI Application - REST API for game hosts.

Endpoints:
    GET    /api/v1/health                     Health check
    POST   /api/v1/move                       Computer move for a board snapshot
    POST   /api/v1/status                     Win/draw status of a board snapshot
    POST   /api/v1/sessions                   Create game session
    GET    /api/v1/sessions                   List sessions
    GET    /api/v1/sessions/{id}              Get session
    DELETE /api/v1/sessions/{id}              End session
    POST   /api/v1/sessions/{id}/moves        Play a move (computer replies)
    POST   /api/v1/sessions/{id}/reset        Clear the board, keep scores

All responses are JSON with explicit Pydantic schemas. Engine and session
routes are plain functions and run in the FastAPI worker threadpool.
"""

from typing import Union
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..bots.dispatcher import StrategyDispatcher
from ..session import SessionManager
from .service import APIService
from .schemas import (
    # Request models
    CreateSessionRequest,
    MoveRequest,
    PlayMoveRequest,
    StatusRequest,
    # Response models
    EndSessionResponse,
    ErrorResponse,
    GameStatusResponse,
    HealthResponse,
    MoveResponse,
    SessionListResponse,
    SessionResponse,
    TurnResponse,
    # Enums
    ErrorCode,
)

logger = logging.getLogger(__name__)

# Environment configuration
KALIDA_ENV = os.getenv("KALIDA_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
KALIDA_DEFAULT_DIFFICULTY = os.getenv("KALIDA_DEFAULT_DIFFICULTY", "medium")
KALIDA_TIME_LIMIT_MS = os.getenv("KALIDA_TIME_LIMIT_MS", None)

# HTTP status per error code
ERROR_STATUS_CODES = {
    ErrorCode.INVALID_BOARD: 400,
    ErrorCode.INVALID_MOVE: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.GAME_OVER: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    production = KALIDA_ENV == "production"
    app = FastAPI(
        title="Kalida Engine API",
        description="""
Kalida five-in-a-row engine: computer moves and win detection.

## Variants

- **line**: five in a row, with optional bounce, missing-teeth and wrap rules
- **path**: connect two opposite edges using at most one diagonal run

## Error Codes

| Code | Description |
|------|-------------|
| `INVALID_BOARD` | Board is not square or holds unknown markers |
| `INVALID_MOVE` | Cell is out of bounds or taken |
| `SESSION_NOT_FOUND` | Session does not exist |
| `GAME_OVER` | Game has ended; reset to play again |
        """,
        version=__version__,
        docs_url=None if production else "/api/docs",
        redoc_url=None if production else "/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    if service is None:
        time_limit_ms = int(KALIDA_TIME_LIMIT_MS) if KALIDA_TIME_LIMIT_MS else None
        dispatcher = StrategyDispatcher(time_limit_ms=time_limit_ms)
        service = APIService(
            session_manager=SessionManager(dispatcher),
            default_difficulty=KALIDA_DEFAULT_DIFFICULTY,
        )
    api_service = service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=ERROR_STATUS_CODES.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def unhandled_error(request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return make_error_response(ErrorResponse(
            error="Internal server error",
            error_code=ErrorCode.INTERNAL_ERROR,
        ))

    # =========================================================================
    # Engine Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/move",
        response_model=MoveResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid board"}},
        tags=["Engine"],
        summary="Get a computer move for a board",
    )
    def get_move(body: MoveRequest) -> Union[MoveResponse, JSONResponse]:
        """
        Select a move for `player` at the given difficulty.

        `move` is null only when the board is full. Unknown difficulty
        tags fall back to easy.
        """
        response = api_service.suggest_move(body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/status",
        response_model=GameStatusResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid board"}},
        tags=["Engine"],
        summary="Get the win/draw status of a board",
    )
    def get_status(body: StatusRequest) -> Union[GameStatusResponse, JSONResponse]:
        """Bounce indices are reported for the line variant only."""
        response = api_service.check_status(body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid parameters"}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    def create_session(body: CreateSessionRequest) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new game session.

        With `computer_player="X"` the computer has already opened the
        game in the returned board.
        """
        response = api_service.create_session(body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current board, turn and scores of a session."""
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    def end_session(session_id: str) -> EndSessionResponse:
        """End a game session and release it."""
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/moves",
        response_model=TurnResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid move"},
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Game over"},
        },
        tags=["Sessions"],
        summary="Play a move",
    )
    def play_move(
        session_id: str,
        body: PlayMoveRequest,
    ) -> Union[TurnResponse, JSONResponse]:
        """
        Play the current player's mark.

        If the computer is due next, its reply is included in `moves`.
        """
        response = api_service.play_move(session_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/reset",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Start a rematch",
    )
    def reset_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Clear the board and give X the first move. Scores are kept."""
        response = api_service.reset_session(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="kalida-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Kalida Engine API",
            "version": __version__,
            "docs": None if production else "/api/docs",
            "health": "/api/v1/health",
        }

    return app


# For running directly: uvicorn kalida.api.app:app
app = create_app()
