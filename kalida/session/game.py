"""
Game Session - One play-through on one board.

A session follows the table flow of a Kalida game:
1. X moves first
2. Each move is checked for a win or a draw
3. A win ends the game and adds to the winner's score
4. Otherwise the turn passes, and a computer opponent replies at once

Scores survive `reset()`, so a session can hold a whole match.
Computer opponents play the line variant only.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import time

from ..engine_core.board import Board, DEFAULT_SIZE, PLAYER_X, PLAYERS, other_player
from ..engine_core.path_rules import PathRules
from ..engine_core.rules import GameStatus, LineRules, RuleConfig
from ..bots.dispatcher import StrategyDispatcher

logger = logging.getLogger(__name__)


class KalidaError(Exception):
    """Base class for game-flow errors."""


class InvalidMoveError(KalidaError):
    """The cell is out of bounds or already taken."""


class GameOverError(KalidaError):
    """The game has ended; reset the session to play again."""


class Variant(Enum):
    """Win condition of a session."""
    LINE = "line"
    PATH = "path"


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Won or drawn, waiting for reset
    ABANDONED = "abandoned"  # Ended by the host


@dataclass
class MoveRecord:
    """A move as it was played."""
    row: int
    col: int
    player: str
    by_computer: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "row": self.row,
            "col": self.col,
            "player": self.player,
            "by_computer": self.by_computer,
        }


@dataclass
class TurnResult:
    """Moves applied by one call, and the status afterwards."""
    moves: list[MoveRecord]
    status: GameStatus


@dataclass
class GameSession:
    """
    An in-memory game session.

    Holds the board, the rule flags, whose turn it is, the match score
    and the optional computer opponent.
    """
    session_id: str
    created_at: float = field(default_factory=time.time)

    variant: Variant = Variant.LINE
    size: int = DEFAULT_SIZE
    rules: RuleConfig = field(default_factory=RuleConfig)

    # Computer opponent (None = human vs human)
    computer_player: str | None = None
    difficulty: str = "easy"
    dispatcher: StrategyDispatcher = field(default_factory=StrategyDispatcher)

    # Game state
    board: Board = field(init=False)
    current_player: str = PLAYER_X
    state: SessionState = SessionState.ACTIVE
    status: GameStatus = field(default_factory=GameStatus)
    scores: dict[str, int] = field(default_factory=lambda: {p: 0 for p in PLAYERS})
    history: list[MoveRecord] = field(default_factory=list)

    def __post_init__(self):
        if self.computer_player is not None:
            if self.computer_player not in PLAYERS:
                raise ValueError(f"Unknown computer player {self.computer_player!r}")
            if self.variant == Variant.PATH:
                raise ValueError("Computer opponents play the line variant only")
        self.board = Board(self.size)
        self._line_rules = LineRules(self.rules)
        self._path_rules = PathRules()

    @property
    def active(self) -> bool:
        return self.state == SessionState.ACTIVE

    def is_computer_turn(self) -> bool:
        return self.active and self.current_player == self.computer_player

    def check_status(self) -> GameStatus:
        """Win/draw status of the current board under the session's rules."""
        if self.variant == Variant.PATH:
            return self._path_rules.check_game_status(self.board)
        return self._line_rules.check_game_status(self.board)

    # =========================================================================
    # Moves
    # =========================================================================

    def play(self, row: int, col: int) -> TurnResult:
        """
        Play the current player's mark at (row, col).

        If a computer opponent is due next, its reply is played too and
        included in the result.

        Raises:
            GameOverError: If the game has already ended
            InvalidMoveError: If the cell is out of bounds or taken
        """
        if not self.active:
            raise GameOverError(f"Session {self.session_id} is over")
        if self.is_computer_turn():
            raise InvalidMoveError(f"It is the computer's turn ({self.computer_player})")

        moves = [self._apply(row, col, by_computer=False)]
        reply = self.play_computer()
        if reply:
            moves.append(reply)
        return TurnResult(moves=moves, status=self.status)

    def play_computer(self) -> MoveRecord | None:
        """Let the computer move if it is its turn. Returns the move played."""
        if not self.is_computer_turn():
            return None

        move = self.dispatcher.get_move(
            self.board,
            self.difficulty,
            self.current_player,
            bounce_enabled=self.rules.bounce_enabled,
            missing_teeth_enabled=self.rules.missing_teeth_enabled,
            wrap_enabled=self.rules.wrap_enabled,
        )
        if move is None:
            return None
        return self._apply(move.row, move.col, by_computer=True)

    def _apply(self, row: int, col: int, by_computer: bool) -> MoveRecord:
        player = self.current_player
        if not self.board.place(row, col, player):
            raise InvalidMoveError(f"Cannot place {player} at ({row}, {col})")

        record = MoveRecord(row, col, player, by_computer)
        self.history.append(record)

        self.status = self.check_status()
        if self.status.is_over:
            self.state = SessionState.GAME_OVER
            if self.status.winner:
                self.scores[self.status.winner] += 1
            logger.info(
                "Session %s over: %s",
                self.session_id,
                f"{self.status.winner} wins" if self.status.winner else "draw",
            )
        else:
            self.current_player = other_player(player)
        return record

    def reset(self) -> MoveRecord | None:
        """
        Clear the board for a new game, keeping the scores.

        Returns the computer's opening move if it plays X.
        """
        self.board.reset()
        self.current_player = PLAYER_X
        self.state = SessionState.ACTIVE
        self.status = GameStatus()
        self.history.clear()
        return self.play_computer()

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "variant": self.variant.value,
            "size": self.size,
            "board": self.board.to_grid(),
            "current_player": self.current_player,
            "state": self.state.value,
            "scores": dict(self.scores),
            "computer_player": self.computer_player,
            "difficulty": self.difficulty,
            "status": self.status.to_dict(include_bounce=self.variant == Variant.LINE),
            "history": [record.as_dict() for record in self.history],
        }
