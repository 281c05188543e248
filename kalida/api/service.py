"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Formats responses for hosts

This layer is framework-agnostic. Failures come back as ErrorResponse
values; the HTTP layer picks the status code.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from ..bots.dispatcher import StrategyDispatcher
from ..bots.personality import resolve_difficulty
from ..engine_core.board import Board
from ..engine_core.rules import GameStatus
from ..session import (
    GameOverError,
    GameSession,
    InvalidMoveError,
    SessionManager,
    SessionState,
    Variant,
)
from .schemas import (
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    GameStatusResponse,
    MoveInfo,
    MoveRequest,
    MoveResponse,
    PlayedMove,
    PlayMoveRequest,
    RuleFlags,
    SessionResponse,
    SessionStatus,
    StatusRequest,
    TurnResponse,
    VariantType,
)

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Stateless move for a host-held board
        response = service.suggest_move(MoveRequest(board=grid, player="O"))

        # Session play
        session = service.create_session(CreateSessionRequest(computer_player="O"))
        turn = service.play_move(session.session_id, PlayMoveRequest(row=2, col=2))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    default_difficulty: str = "medium"

    @property
    def dispatcher(self) -> StrategyDispatcher:
        return self.session_manager.dispatcher

    # =========================================================================
    # Stateless queries
    # =========================================================================

    def suggest_move(self, request: MoveRequest) -> MoveResponse | ErrorResponse:
        """Pick a computer move for a board snapshot."""
        board = _parse_board(request.board)
        if isinstance(board, ErrorResponse):
            return board

        dispatcher = self.dispatcher
        if request.seed is not None:
            dispatcher = StrategyDispatcher(
                seed=request.seed, time_limit_ms=self.dispatcher.time_limit_ms
            )

        difficulty = request.difficulty or self.default_difficulty
        decision = dispatcher.decide(
            board,
            difficulty,
            request.player,
            bounce_enabled=request.bounce_enabled,
            missing_teeth_enabled=request.missing_teeth_enabled,
            wrap_enabled=request.wrap_enabled,
        )
        return MoveResponse(
            move=MoveInfo(**decision.move.as_dict()) if decision.move else None,
            difficulty=resolve_difficulty(difficulty) or "easy",
            explanation=decision.explanation,
        )

    def check_status(self, request: StatusRequest) -> GameStatusResponse | ErrorResponse:
        """Win/draw status of a board snapshot."""
        board = _parse_board(request.board)
        if isinstance(board, ErrorResponse):
            return board

        if request.variant == VariantType.PATH:
            return _status_to_response(self.dispatcher.check_path_status(board), line=False)

        status = self.dispatcher.check_game_status(
            board,
            bounce_enabled=request.bounce_enabled,
            missing_teeth_enabled=request.missing_teeth_enabled,
            wrap_enabled=request.wrap_enabled,
        )
        return _status_to_response(status, line=True)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse | ErrorResponse:
        """Create a new game session."""
        try:
            session = self.session_manager.create_session(
                variant=Variant(request.variant.value),
                size=request.size,
                bounce_enabled=request.bounce_enabled,
                missing_teeth_enabled=request.missing_teeth_enabled,
                wrap_enabled=request.wrap_enabled,
                computer_player=request.computer_player,
                difficulty=request.difficulty or self.default_difficulty,
            )
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.VALIDATION_ERROR)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Get session status."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        return self._session_to_response(session)

    def play_move(
        self, session_id: str, request: PlayMoveRequest
    ) -> TurnResponse | ErrorResponse:
        """Play a move, plus the computer's reply if one is due."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)

        try:
            result = session.play(request.row, request.col)
        except GameOverError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.GAME_OVER)
        except InvalidMoveError as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.INVALID_MOVE,
                details={"row": request.row, "col": request.col},
            )

        return TurnResponse(
            moves=[PlayedMove(**record.as_dict()) for record in result.moves],
            session=self._session_to_response(session),
        )

    def reset_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Clear the board for a rematch; scores are kept."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        session.reset()
        return self._session_to_response(session)

    def end_session(self, session_id: str) -> bool:
        """End a session and release it."""
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def _session_to_response(self, session: GameSession) -> SessionResponse:
        line = session.variant == Variant.LINE
        return SessionResponse(
            session_id=session.session_id,
            variant=VariantType(session.variant.value),
            size=session.size,
            rules=RuleFlags(
                bounce_enabled=session.rules.bounce_enabled,
                missing_teeth_enabled=session.rules.missing_teeth_enabled,
                wrap_enabled=session.rules.wrap_enabled,
            ),
            board=session.board.to_grid(),
            current_player=session.current_player,
            status=(
                SessionStatus.ACTIVE if session.state == SessionState.ACTIVE
                else SessionStatus.GAME_OVER
            ),
            game_status=_status_to_response(session.status, line=line),
            scores=dict(session.scores),
            computer_player=session.computer_player,
            difficulty=session.difficulty if session.computer_player else None,
            move_count=len(session.history),
            history=[PlayedMove(**record.as_dict()) for record in session.history],
            created_at=session.created_at,
        )


def _parse_board(grid: list[list[str]]) -> Board | ErrorResponse:
    try:
        return Board.from_grid(grid)
    except ValueError as e:
        return ErrorResponse(error=str(e), error_code=ErrorCode.INVALID_BOARD)


def _status_to_response(status: GameStatus, line: bool) -> GameStatusResponse:
    return GameStatusResponse(
        is_over=status.is_over,
        winner=status.winner,
        winning_cells=list(status.winning_cells),
        is_draw=status.is_draw,
        bounce_index=status.bounce_index if line else None,
        second_bounce_index=status.second_bounce_index if line else None,
    )


def _session_not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
    )
