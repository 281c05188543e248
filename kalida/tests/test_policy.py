"""
Tests for bot policies and the opening book.
"""

import random

import pytest

from ..engine_core.board import Board, Move, PLAYER_O, PLAYER_X
from ..engine_core.rules import RuleConfig
from ..bots.evaluator import EvaluationWeights, HeuristicEvaluator
from ..bots.opening import OpeningBook, great_diagonals
from ..bots.policy import (
    AdvancedPolicy,
    BotPolicy,
    HeuristicPolicy,
    MinimaxPolicy,
    RandomPolicy,
)
from ..bots.search import SearchConfig
from .conftest import board_with


DOUBLE_THREAT = {PLAYER_X: [(2, 1), (2, 2), (1, 3), (3, 3)]}
# X in a corner, O holding the center
QUIET = {PLAYER_X: [(0, 0)], PLAYER_O: [(3, 3)]}
PLAIN = RuleConfig()


class TestBaseClass:
    """Tests for the abstract policy interface."""

    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BotPolicy()

    def test_super_call_raises(self, empty_board):
        class Lazy(BotPolicy):
            def select_move(self, board, player, opponent, config):
                return super().select_move(board, player, opponent, config)

        with pytest.raises(NotImplementedError):
            Lazy().select_move(empty_board, PLAYER_X, PLAYER_O, PLAIN)

    def test_name(self):
        assert RandomPolicy().get_name() == "RandomPolicy"


class TestRandomPolicy:
    """Tests for uniform random play."""

    def test_picks_empty_cell(self, rng):
        board = board_with({PLAYER_X: [(0, 0), (1, 1)]})
        decision = RandomPolicy(rng=rng).select_move(board, PLAYER_O, PLAYER_X, PLAIN)
        assert board.is_empty_at(decision.move.row, decision.move.col)
        assert decision.evaluated_moves == 34

    def test_seeded_policies_agree(self, empty_board):
        first = RandomPolicy(seed=99)
        second = RandomPolicy(seed=99)
        for _ in range(5):
            a = first.select_move(empty_board, PLAYER_X, PLAYER_O, PLAIN).move
            b = second.select_move(empty_board, PLAYER_X, PLAYER_O, PLAIN).move
            assert a == b

    def test_full_board(self, full_board):
        decision = RandomPolicy().select_move(full_board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move is None
        assert decision.confidence == 0.0


class TestHeuristicPolicy:
    """Tests for the win / block / fork / center policy."""

    def test_takes_win(self, rng):
        board = board_with({PLAYER_X: [(4, c) for c in range(1, 5)], PLAYER_O: [(0, 0)]})
        decision = HeuristicPolicy(rng=rng).select_move(board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(4, 0)
        assert decision.explanation == "Winning move"

    def test_blocks(self, rng):
        board = board_with({PLAYER_O: [(r, 5) for r in range(4)], PLAYER_X: [(0, 0)]})
        decision = HeuristicPolicy(rng=rng).select_move(board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(4, 5)

    def test_takes_center(self, rng, empty_board):
        decision = HeuristicPolicy(rng=rng).select_move(empty_board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(3, 3)

    def test_depth_two_finds_fork(self, rng):
        """At depth 2 the bot plays the cell that opens two lines."""
        board = board_with(DOUBLE_THREAT)
        decision = HeuristicPolicy(depth=2, rng=rng).select_move(board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(2, 3)
        assert decision.evaluation_details["potential_wins"] == 2

    def test_depth_one_builds_threat(self, rng):
        """Without the fork step the same cell is found as a double threat."""
        board = board_with(DOUBLE_THREAT)
        decision = HeuristicPolicy(depth=1, rng=rng).select_move(board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(2, 3)
        assert decision.explanation == "Builds threat"
        assert decision.evaluation_details == {"priority": 90}

    @pytest.mark.parametrize("depth", [1, 2])
    def test_blocks_open_end_three(self, depth):
        """A three that can grow into a four is blocked at every seed."""
        board = board_with({PLAYER_O: [(2, 1), (2, 2), (2, 3)], PLAYER_X: [(3, 3), (0, 5)]})
        for seed in range(20):
            policy = HeuristicPolicy(depth=depth, rng=random.Random(seed))
            decision = policy.select_move(board, PLAYER_X, PLAYER_O, PLAIN)
            assert decision.move == Move(2, 0)
            assert decision.explanation == "Blocks threat"

    def test_ignores_weak_opponent_shapes(self, rng):
        """Lone corner stones are not worth a block, so the center is taken."""
        board = board_with({PLAYER_O: [(0, 0), (0, 5)]})
        decision = HeuristicPolicy(rng=rng).select_move(board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(3, 3)
        assert decision.explanation == "Takes center"

    def test_depth_one_plays_next_to_own_piece(self, rng):
        board = board_with(QUIET)
        decision = HeuristicPolicy(depth=1, rng=rng).select_move(board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move in (Move(0, 1), Move(1, 0), Move(1, 1))
        assert decision.explanation == "Next to own piece"

    def test_depth_two_plays_best_evaluated_cell(self):
        """Hard play picks the first cell with the best one-ply evaluation."""
        board = board_with(QUIET)
        evaluator = HeuristicEvaluator(EvaluationWeights())
        expected = None
        best = None
        for move in board.empty_positions():
            with board.trial(move.row, move.col, PLAYER_X):
                score = evaluator.evaluate_board(board, PLAYER_X, PLAYER_O)
            if best is None or score > best:
                expected, best = move, score

        for seed in (0, 1, 2):
            policy = HeuristicPolicy(depth=2, rng=random.Random(seed))
            decision = policy.select_move(board, PLAYER_X, PLAYER_O, PLAIN)
            assert decision.move == expected
            assert decision.best_score == best
            assert decision.explanation == "Best evaluated cell"
        assert board.count_pieces() == 2

    def test_adjacent_cells_stay_on_board(self):
        board = board_with(QUIET)
        cells = HeuristicPolicy.adjacent_cells(board, PLAYER_O)
        assert len(cells) == 8
        assert HeuristicPolicy.adjacent_cells(board, PLAYER_X) == [Move(0, 1), Move(1, 0), Move(1, 1)]

    def test_zero_chance_is_random(self):
        """With no heuristic share, even a win can be missed."""
        board = board_with({PLAYER_X: [(4, c) for c in range(1, 5)]})
        policy = HeuristicPolicy(heuristic_chance=0.0, rng=random.Random(5))
        decision = policy.select_move(board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.explanation == "Selected randomly"


class TestMinimaxPolicy:
    """Tests for the fixed-depth policy."""

    def test_empty_board_takes_center(self, empty_board):
        decision = MinimaxPolicy().select_move(empty_board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(3, 3)

    def test_reports_depth(self):
        board = board_with({PLAYER_X: [(3, 3)], PLAYER_O: [(2, 2)]})
        policy = MinimaxPolicy(search_config=SearchConfig(default_depth=1))
        decision = policy.select_move(board, PLAYER_O, PLAYER_X, PLAIN)
        assert decision.explanation == "Minimax search"
        assert decision.evaluation_details == {"depth": 1}
        assert board.is_empty_at(decision.move.row, decision.move.col)

    def test_full_board(self, full_board):
        assert MinimaxPolicy().select_move(full_board, PLAYER_X, PLAYER_O, PLAIN).move is None


class TestAdvancedPolicy:
    """Tests for the strongest policy."""

    def make_policy(self, rng):
        return AdvancedPolicy(rng=rng, search_config=SearchConfig(time_limit_ms=100))

    def test_opening_takes_center(self, rng, empty_board):
        decision = self.make_policy(rng).select_move(empty_board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(3, 3)
        assert decision.explanation == "Opening book"

    def test_takes_win_over_block(self, rng):
        board = board_with({
            PLAYER_X: [(5, c) for c in range(4)],
            PLAYER_O: [(0, c) for c in range(4)],
        })
        decision = self.make_policy(rng).select_move(board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(5, 4)

    def test_blocks_four(self, rng):
        board = board_with({PLAYER_O: [(0, c) for c in range(4)], PLAYER_X: [(5, 5), (4, 4)]})
        decision = self.make_policy(rng).select_move(board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(0, 4)
        assert decision.explanation == "Blocks opponent win"

    def test_forcing_move(self, rng):
        board = board_with({**DOUBLE_THREAT, PLAYER_O: [(5, 5)]})
        decision = self.make_policy(rng).select_move(board, PLAYER_X, PLAYER_O, PLAIN)
        assert decision.move == Move(2, 3)
        assert decision.explanation == "Forcing move"

    def test_critical_block(self, rng):
        """A three with one open end is blocked before searching."""
        policy = self.make_policy(rng)
        board = board_with({PLAYER_O: [(2, 1), (2, 2), (2, 3)], PLAYER_X: [(2, 0), (5, 0)]})
        assert policy.find_critical_block(board, PLAYER_X, PLAYER_O, PLAIN) == Move(2, 4)

    def test_no_critical_block_on_quiet_board(self, rng):
        board = board_with({PLAYER_O: [(0, 0)], PLAYER_X: [(5, 5)]})
        assert self.make_policy(rng).find_critical_block(board, PLAYER_X, PLAYER_O, PLAIN) is None

    def test_search_returns_legal_move(self, rng):
        board = board_with({PLAYER_X: [(3, 3), (3, 2)], PLAYER_O: [(2, 2)]})
        decision = self.make_policy(rng).select_move(board, PLAYER_O, PLAYER_X, PLAIN)
        assert decision.move is not None
        assert board.is_empty_at(decision.move.row, decision.move.col)

    def test_ordered_candidates_put_urgent_first(self, rng):
        board = board_with({PLAYER_O: [(0, 0), (0, 1), (0, 2), (0, 3)], PLAYER_X: [(3, 3)]})
        candidates = self.make_policy(rng).ordered_candidates(board, PLAYER_X, PLAYER_O, PLAIN)
        assert candidates[0] == Move(0, 4)

    def test_ordered_candidates_capped_early(self, rng):
        board = board_with({PLAYER_X: [(1, 1), (4, 4)], PLAYER_O: [(1, 4), (4, 1)]})
        policy = AdvancedPolicy(rng=rng, search_config=SearchConfig(root_candidate_limit=5))
        assert len(policy.ordered_candidates(board, PLAYER_X, PLAYER_O, PLAIN)) == 5


class TestOpeningBook:
    """Tests for opening play."""

    def test_center_first(self, rng, empty_board):
        assert OpeningBook(rng).select(empty_board, PLAYER_X, PLAYER_O) == Move(3, 3)

    def test_ring_two_after_center(self, rng):
        board = board_with({PLAYER_O: [(3, 3)]})
        move = OpeningBook(rng).select(board, PLAYER_X, PLAYER_O)
        assert max(abs(move.row - 3), abs(move.col - 3)) == 2

    @pytest.mark.parametrize("corner,expected", [
        ((0, 0), Move(2, 2)),
        ((5, 5), Move(2, 2)),
        ((0, 5), Move(3, 2)),
        ((5, 0), Move(2, 3)),
    ])
    def test_corner_reply_with_center_held(self, rng, corner, expected):
        """With the center ours, a lone corner stone is met on its diagonal."""
        board = board_with({PLAYER_X: [(3, 3)], PLAYER_O: [corner]})
        assert OpeningBook(rng).select(board, PLAYER_X, PLAYER_O) == expected

    def test_corner_reply_order(self):
        board = board_with({PLAYER_X: [(0, 5)]})
        assert OpeningBook.corner_response(board, PLAYER_X) == Move(3, 2)
        board.place(3, 2, PLAYER_O)
        assert OpeningBook.corner_response(board, PLAYER_X) == Move(2, 3)
        board.place(2, 3, PLAYER_O)
        assert OpeningBook.corner_response(board, PLAYER_X) is None

    def test_no_corner_reply_for_edge_stone(self):
        board = board_with({PLAYER_X: [(0, 2)]})
        assert OpeningBook.corner_response(board, PLAYER_X) is None

    def test_blocks_great_diagonal_pair(self, rng):
        """Two opposing cells on the anti-diagonal are blocked at its first gap."""
        board = board_with({PLAYER_X: [(0, 5), (1, 4), (3, 3)]})
        assert OpeningBook(rng).select(board, PLAYER_O, PLAYER_X) == Move(2, 3)

    def test_nearest_ring_on_small_board(self, rng):
        board = board_with({PLAYER_O: [(1, 1)]}, size=3)
        assert OpeningBook(rng).select(board, PLAYER_X, PLAYER_O) == Move(0, 0)

    def test_full_board(self, rng, full_board):
        assert OpeningBook(rng).select(full_board, PLAYER_X, PLAYER_O) is None

    def test_great_diagonals(self):
        main, anti = great_diagonals(3)
        assert main == [Move(0, 0), Move(1, 1), Move(2, 2)]
        assert anti == [Move(0, 2), Move(1, 1), Move(2, 0)]

    def test_ring(self):
        board = Board(6)
        assert len(OpeningBook.ring(board, 1)) == 8
