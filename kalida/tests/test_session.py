"""
Tests for game sessions and the session manager.

Tests:
- Turn order, wins, draws and scores
- Rejected moves
- Computer replies and computer openings
- Reset keeps the match score
- Manager lifecycle and cleanup
"""

import pytest

from ..engine_core.board import Move, PLAYER_O, PLAYER_X
from ..engine_core.rules import RuleConfig
from ..session import (
    GameOverError,
    GameSession,
    InvalidMoveError,
    SessionManager,
    SessionState,
    Variant,
)


def play_all(session, moves):
    for row, col in moves:
        session.play(row, col)


# X takes row 0, O trails along row 1
X_WINS_ROW_0 = [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2), (1, 2), (0, 3), (1, 3), (0, 4)]


@pytest.fixture
def session(dispatcher):
    """Human vs human line session."""
    return GameSession(session_id="test", dispatcher=dispatcher)


@pytest.fixture
def manager(dispatcher):
    return SessionManager(dispatcher)


class TestTurns:
    """Tests for human vs human play."""

    def test_x_moves_first_and_turns_alternate(self, session):
        result = session.play(2, 2)

        assert [m.player for m in result.moves] == [PLAYER_X]
        assert session.current_player == PLAYER_O
        assert session.board.get(2, 2) == PLAYER_X

        session.play(3, 3)
        assert session.current_player == PLAYER_X
        assert len(session.history) == 2

    def test_to_dict_lists_history(self, session):
        session.play(2, 2)
        session.play(0, 5)

        data = session.to_dict()
        assert data["history"] == [
            {"row": 2, "col": 2, "player": PLAYER_X, "by_computer": False},
            {"row": 0, "col": 5, "player": PLAYER_O, "by_computer": False},
        ]
        assert data["board"][0][5] == PLAYER_O

    def test_win_ends_game_and_scores(self, session):
        play_all(session, X_WINS_ROW_0)

        assert session.state == SessionState.GAME_OVER
        assert session.status.winner == PLAYER_X
        assert session.status.winning_cells == [(0, c) for c in range(5)]
        assert session.scores == {PLAYER_X: 1, PLAYER_O: 0}
        assert session.current_player == PLAYER_X

    def test_play_after_game_over(self, session):
        play_all(session, X_WINS_ROW_0)
        with pytest.raises(GameOverError):
            session.play(5, 5)

    def test_draw(self, dispatcher):
        """A 2x2 board fills up with no five."""
        session = GameSession(session_id="draw", size=2, dispatcher=dispatcher)
        play_all(session, [(0, 0), (0, 1), (1, 0), (1, 1)])

        assert session.status.is_draw
        assert session.state == SessionState.GAME_OVER
        assert session.scores == {PLAYER_X: 0, PLAYER_O: 0}

    @pytest.mark.parametrize("row,col", [(6, 0), (0, -1)])
    def test_out_of_bounds(self, session, row, col):
        with pytest.raises(InvalidMoveError):
            session.play(row, col)
        assert session.history == []

    def test_occupied_cell(self, session):
        session.play(1, 1)
        with pytest.raises(InvalidMoveError):
            session.play(1, 1)
        assert session.current_player == PLAYER_O

    def test_bounce_rules_apply(self, dispatcher):
        """A reflected run ends the game only when bounce is on."""
        moves = [(1, 3), (0, 0), (2, 4), (0, 1), (3, 5), (5, 0), (4, 4), (5, 1), (5, 3)]

        plain = GameSession(session_id="plain", dispatcher=dispatcher)
        play_all(plain, moves)
        assert plain.active

        bounce = GameSession(
            session_id="bounce", rules=RuleConfig(bounce_enabled=True), dispatcher=dispatcher
        )
        play_all(bounce, moves)
        assert bounce.status.winner == PLAYER_X
        assert bounce.status.bounce_index == 2


class TestPathSessions:
    """Tests for the edge-to-edge variant."""

    def test_column_wins(self, dispatcher):
        session = GameSession(
            session_id="path", variant=Variant.PATH, size=3, dispatcher=dispatcher
        )
        play_all(session, [(0, 0), (0, 1), (1, 0), (1, 1), (2, 0)])

        assert session.status.winner == PLAYER_X
        assert session.status.winning_cells == [(0, 0), (1, 0), (2, 0)]
        assert "bounce_index" not in session.to_dict()["status"]

    def test_path_rejects_computer(self, dispatcher):
        with pytest.raises(ValueError):
            GameSession(
                session_id="path", variant=Variant.PATH,
                computer_player=PLAYER_O, dispatcher=dispatcher,
            )


class TestComputerOpponent:
    """Tests for sessions against the computer."""

    def test_computer_replies(self, dispatcher):
        session = GameSession(
            session_id="cpu", computer_player=PLAYER_O, difficulty="hard", dispatcher=dispatcher
        )
        result = session.play(0, 0)

        assert len(result.moves) == 2
        reply = result.moves[1]
        assert reply.by_computer
        assert reply.player == PLAYER_O
        assert Move(reply.row, reply.col) == Move(3, 3)
        assert session.current_player == PLAYER_X

    def test_computer_blocks(self, dispatcher):
        session = GameSession(
            session_id="cpu", computer_player=PLAYER_O, difficulty="hard", dispatcher=dispatcher
        )
        for c in range(3):
            session.board.place(0, c, PLAYER_X)
            session.board.place(5, c, PLAYER_O)

        result = session.play(0, 3)
        assert (result.moves[1].row, result.moves[1].col) == (0, 4)
        assert session.active

    def test_not_your_turn(self, dispatcher):
        session = GameSession(session_id="cpu", computer_player=PLAYER_X, dispatcher=dispatcher)
        with pytest.raises(InvalidMoveError):
            session.play(0, 0)

    def test_unknown_computer_marker(self, dispatcher):
        with pytest.raises(ValueError):
            GameSession(session_id="cpu", computer_player="Z", dispatcher=dispatcher)


class TestReset:
    """Tests for rematches."""

    def test_reset_keeps_scores(self, session):
        play_all(session, X_WINS_ROW_0)
        assert session.reset() is None

        assert session.board.is_empty()
        assert session.active
        assert session.current_player == PLAYER_X
        assert session.history == []
        assert not session.status.is_over
        assert session.scores[PLAYER_X] == 1

    def test_computer_x_opens_after_reset(self, dispatcher):
        session = GameSession(
            session_id="cpu", computer_player=PLAYER_X, difficulty="advanced",
            dispatcher=dispatcher,
        )
        opening = session.reset()
        assert opening is not None
        assert (opening.row, opening.col) == (3, 3)
        assert session.current_player == PLAYER_O


class TestSessionManager:
    """Tests for session lifecycle."""

    def test_create_and_get(self, manager):
        session = manager.create_session(bounce_enabled=True)
        assert manager.get_session(session.session_id) is session
        assert session.rules.bounce_enabled
        assert session.dispatcher is manager.dispatcher

    def test_computer_x_opens(self, manager):
        session = manager.create_session(computer_player=PLAYER_X, difficulty="extra")
        assert len(session.history) == 1
        assert session.history[0].by_computer
        assert session.board.get(3, 3) == PLAYER_X
        assert session.current_player == PLAYER_O

    def test_bad_size(self, manager):
        with pytest.raises(ValueError):
            manager.create_session(size=0)

    def test_end_session(self, manager):
        session = manager.create_session()
        assert manager.end_session(session.session_id)
        assert session.state == SessionState.ABANDONED
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_list_active_sessions(self, manager):
        first = manager.create_session()
        second = manager.create_session(variant=Variant.PATH)
        assert set(manager.list_active_sessions()) == {first.session_id, second.session_id}

    def test_cleanup_only_finished_old_sessions(self, manager):
        finished = manager.create_session()
        play_all(finished, X_WINS_ROW_0)
        ongoing = manager.create_session()

        later = finished.created_at + 7200
        assert manager.cleanup_stale_sessions(now=later) == 1
        assert manager.get_session(finished.session_id) is None
        assert manager.get_session(ongoing.session_id) is ongoing

    def test_cleanup_keeps_recent_sessions(self, manager):
        finished = manager.create_session()
        play_all(finished, X_WINS_ROW_0)
        assert manager.cleanup_stale_sessions(now=finished.created_at + 10) == 0
