"""
Minimax Search - Depth-bounded alpha-beta search over the line variant.

Search flow for a move request:
1. Take an immediate win, else block the opponent's immediate win
2. Take the center if it is free
3. Score neighbouring candidates with alpha-beta minimax

The search works on a private copy of the caller's board. Interior
nodes mutate that copy in place and restore it on every exit path.

Time budgets are cooperative: the clock is read only between sibling
moves at the root, never inside a subtree.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import logging
import math
import time

from ..engine_core.board import Board, Move, EMPTY
from ..engine_core.rules import LineRules
from .evaluator import HeuristicEvaluator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchConfig:
    """Depth, phase and time settings for the search."""
    default_depth: int = 3
    reduced_depth: int = 2  # When bounce and missing-teeth are both on
    root_candidate_limit: int = 10
    max_branching: int | None = None  # Interior nodes; None = all candidates
    win_score: float = 1000.0

    # Phase table, by fraction of the board filled
    early_game_depth: int = 5
    mid_game_depth: int = 5
    late_game_depth: int = 6
    early_game_threshold: float = 0.2
    late_game_threshold: float = 0.7

    # Iterative deepening
    time_limit_ms: int = 1000
    iterative_deepening_start: int = 2


@dataclass
class SearchResult:
    """Outcome of a time-bounded search."""
    move: Move | None
    score: float = -math.inf
    depth: int = 0
    completed: bool = False  # True if `depth` was searched to the end
    nodes: int = 0
    elapsed_ms: float = 0.0


class MinimaxSearch:
    """
    Alpha-beta minimax for one player against one opponent.

    Usage:
        search = MinimaxSearch(LineRules(config))
        move = search.find_minimax_move(board, "O", "X")
    """

    def __init__(
        self,
        rules: LineRules,
        evaluator: HeuristicEvaluator | None = None,
        config: SearchConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.rules = rules
        self.evaluator = evaluator or HeuristicEvaluator()
        self.config = config or SearchConfig()
        self.clock = clock
        self.nodes = 0

    def search_depth(self) -> int:
        """Fixed depth for the root search."""
        rule_config = self.rules.config
        if rule_config.bounce_enabled and rule_config.missing_teeth_enabled:
            return self.config.reduced_depth
        return self.config.default_depth

    def phase_depth(self, board: Board) -> int:
        """Depth by game phase (fraction of cells filled)."""
        filled = board.count_pieces() / (board.size * board.size)
        if filled < self.config.early_game_threshold:
            return self.config.early_game_depth
        if filled > self.config.late_game_threshold:
            return self.config.late_game_depth
        return self.config.mid_game_depth

    # =========================================================================
    # Root search
    # =========================================================================

    def find_minimax_move(self, board: Board, player: str, opponent: str) -> Move | None:
        """
        Select a move for `player`.

        Returns None only when the board is full.
        """
        if board.is_full():
            return None

        winning = self.rules.find_winning_move(board, player)
        if winning:
            return winning

        blocking = self.rules.find_winning_move(board, opponent)
        if blocking:
            return blocking

        center = board.center
        if board.is_empty_at(center.row, center.col):
            return center

        candidates = self.candidate_moves(board)[: self.config.root_candidate_limit]
        depth = self.search_depth()
        self.nodes = 0

        best_move: Move | None = None
        best_score = -math.inf
        for move in candidates:
            work = board.snapshot()
            work.place(move.row, move.col, player)
            score = self.minimax(work, depth, -math.inf, math.inf, False, player, opponent)
            if score > best_score:
                best_score = score
                best_move = move

        logger.debug(
            "minimax depth=%d candidates=%d nodes=%d best=%s score=%.1f",
            depth, len(candidates), self.nodes, best_move, best_score,
        )
        return best_move or board.empty_positions()[0]

    def iterative_deepening(
        self,
        board: Board,
        player: str,
        opponent: str,
        candidates: list[Move],
        max_depth: int,
    ) -> SearchResult:
        """
        Search ever deeper until `max_depth` or the time limit.

        Depth counts plies including the root move. Only a depth that
        finished replaces the answer of a shallower one; if the very
        first depth is interrupted, its best fully evaluated candidate
        is used, falling back to the first candidate.
        """
        start = self.clock()
        deadline = start + self.config.time_limit_ms / 1000.0
        self.nodes = 0

        result = SearchResult(move=candidates[0] if candidates else None)
        if not candidates:
            return result

        first_depth = max(1, min(self.config.iterative_deepening_start, max_depth))
        for depth in range(first_depth, max_depth + 1):
            if self.clock() >= deadline:
                break

            best_move: Move | None = None
            best_score = -math.inf
            finished = True
            for move in candidates:
                if self.clock() >= deadline:
                    finished = False
                    break
                work = board.snapshot()
                work.place(move.row, move.col, player)
                score = self.minimax(
                    work, depth - 1, -math.inf, math.inf, False, player, opponent
                )
                if score > best_score:
                    best_score = score
                    best_move = move

            if finished:
                result = SearchResult(move=best_move, score=best_score, depth=depth, completed=True)
            elif not result.completed and best_move is not None:
                result = SearchResult(move=best_move, score=best_score, depth=depth)

            if not finished:
                logger.debug("search timed out during depth %d", depth)
                break

        result.nodes = self.nodes
        result.elapsed_ms = (self.clock() - start) * 1000.0
        logger.debug(
            "iterative deepening depth=%d completed=%s nodes=%d move=%s",
            result.depth, result.completed, result.nodes, result.move,
        )
        return result

    # =========================================================================
    # Recursion
    # =========================================================================

    def minimax(
        self,
        board: Board,
        depth: int,
        alpha: float,
        beta: float,
        maximizing: bool,
        player: str,
        opponent: str,
    ) -> float:
        """
        Score a position for `player`.

        Wins score win_score + depth so that faster wins (and slower
        losses) are preferred.
        """
        self.nodes += 1

        winner = self.rules.check_game_winner(board)
        if winner == player:
            return self.config.win_score + depth
        if winner == opponent:
            return -(self.config.win_score + depth)
        if depth == 0 or board.is_full():
            return self.evaluator.evaluate_board(board, player, opponent)

        moves = self.candidate_moves(board)
        if self.config.max_branching is not None:
            moves = moves[: self.config.max_branching]

        if maximizing:
            best = -math.inf
            for move in moves:
                with board.trial(move.row, move.col, player):
                    score = self.minimax(board, depth - 1, alpha, beta, False, player, opponent)
                best = max(best, score)
                alpha = max(alpha, score)
                if beta <= alpha:
                    break
            return best

        best = math.inf
        for move in moves:
            with board.trial(move.row, move.col, opponent):
                score = self.minimax(board, depth - 1, alpha, beta, True, player, opponent)
            best = min(best, score)
            beta = min(beta, score)
            if beta <= alpha:
                break
        return best

    # =========================================================================
    # Candidates
    # =========================================================================

    @staticmethod
    def candidate_moves(board: Board) -> list[Move]:
        """
        Empty cells next to any occupied cell, in discovery order.

        Falls back to every empty cell when nothing is occupied.
        """
        n = board.size
        cells = board.cells
        seen: set[int] = set()
        moves: list[Move] = []

        for r in range(n):
            for c in range(n):
                if cells[r][c] == EMPTY:
                    continue
                for dr in (-1, 0, 1):
                    for dc in (-1, 0, 1):
                        nr, nc = r + dr, c + dc
                        if not (0 <= nr < n and 0 <= nc < n) or cells[nr][nc] != EMPTY:
                            continue
                        key = nr * n + nc
                        if key not in seen:
                            seen.add(key)
                            moves.append(Move(nr, nc))

        return moves or board.empty_positions()
