"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Host creates a session (variant, rule flags, optional computer opponent)
2. Players move through the session until a win or a draw
3. Host resets the board for a rematch (scores are kept) or ends the session
4. Ended sessions are dropped from memory

PERSISTENCE RULES:
- Sessions are in-memory only
- One StrategyDispatcher is shared by all sessions
"""

from __future__ import annotations
import logging
import time
import uuid

from ..engine_core.board import DEFAULT_SIZE
from ..engine_core.rules import RuleConfig
from ..bots.dispatcher import StrategyDispatcher
from .game import GameSession, SessionState, Variant

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions and let a computer X open the game
    - Track sessions by ID
    - Clean up finished sessions
    """

    def __init__(self, dispatcher: StrategyDispatcher | None = None):
        self.dispatcher = dispatcher or StrategyDispatcher()
        self._sessions: dict[str, GameSession] = {}

    def create_session(
        self,
        variant: Variant = Variant.LINE,
        size: int = DEFAULT_SIZE,
        bounce_enabled: bool = False,
        missing_teeth_enabled: bool = False,
        wrap_enabled: bool = False,
        computer_player: str | None = None,
        difficulty: str = "easy",
    ) -> GameSession:
        """
        Create a new game session.

        Raises:
            ValueError: For a bad size, an unknown computer marker, or a
                computer opponent in the path variant
        """
        session = GameSession(
            session_id=str(uuid.uuid4()),
            variant=variant,
            size=size,
            rules=RuleConfig(
                bounce_enabled=bounce_enabled,
                missing_teeth_enabled=missing_teeth_enabled,
                wrap_enabled=wrap_enabled,
            ),
            computer_player=computer_player,
            difficulty=difficulty,
            dispatcher=self.dispatcher,
        )
        session.play_computer()

        self._sessions[session.session_id] = session
        logger.info(
            "Created %s session %s (computer=%s, difficulty=%s)",
            variant.value, session.session_id, computer_player, difficulty,
        )
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """End a session and drop it. Returns False if it did not exist."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.state = SessionState.ABANDONED
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions that have not been ended."""
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600, now: float | None = None) -> int:
        """
        End finished sessions older than max_age_seconds.

        Returns the number of sessions removed.
        """
        current_time = time.time() if now is None else now
        stale = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.active
        ]
        for session_id in stale:
            self.end_session(session_id)
        return len(stale)
