"""
Bot Policy - Interface for bot move selection.

A BotPolicy takes a board and returns a decision.
Policies form a closed set, one per strategy:
- RandomPolicy: any empty cell
- HeuristicPolicy: win / block / fork / threat / center shortcuts
- MinimaxPolicy: fixed-depth alpha-beta search
- AdvancedPolicy: opening book, forcing moves, then a time-bounded
  iterative deepening search
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable
import logging
import math
import random
import time

from ..engine_core.board import Board, Move
from ..engine_core.rules import LineRules, RuleConfig
from .evaluator import EvaluationWeights, HeuristicEvaluator
from .opening import OpeningBook
from .search import MinimaxSearch, SearchConfig
from .threats import (
    DEFAULT_PATTERNS,
    DEFAULT_PRIORITIES,
    PatternConfig,
    ThreatPriorities,
    count_potential_wins,
    find_advanced_threat_move,
    find_diagonal_threat_move,
    rate_move,
    score_threat_potential,
)

logger = logging.getLogger(__name__)


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The move to play (None only on a full board)
    - Explanation (for UI/debugging)
    - Confidence in the decision
    """
    move: Move | None
    explanation: str = ""
    confidence: float = 1.0

    # Evaluation details (for debugging)
    evaluated_moves: int = 0
    best_score: float = 0.0
    evaluation_details: dict[str, Any] = field(default_factory=dict)


FULL_BOARD = "Board is full"


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects moves. Implementations range
    from random play to time-bounded search.
    """

    @abstractmethod
    def select_move(
        self,
        board: Board,
        player: str,
        opponent: str,
        config: RuleConfig,
    ) -> BotDecision:
        """
        Select a move for `player`.

        Args:
            board: Private copy of the board; may be mutated temporarily
            player: Marker of the player to move
            opponent: Marker of the other player
            config: Active rule flags

        Returns:
            BotDecision with the selected move
        """
        raise NotImplementedError(f"{type(self).__name__} does not implement select_move")

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects empty cells uniformly at random.

    Used for:
    - The easy difficulty
    - Fallback when no better option is available
    """

    def __init__(self, rng: random.Random | None = None, seed: int | None = None):
        self.rng = rng or random.Random(seed)

    def select_move(
        self,
        board: Board,
        player: str,
        opponent: str,
        config: RuleConfig,
    ) -> BotDecision:
        empty = board.empty_positions()
        if not empty:
            return BotDecision(move=None, explanation=FULL_BOARD, confidence=0.0)

        return BotDecision(
            move=self.rng.choice(empty),
            explanation="Selected randomly",
            confidence=1.0 / len(empty),
            evaluated_moves=len(empty),
        )


class HeuristicPolicy(BotPolicy):
    """
    Shallow heuristic policy.

    Order of play:
    1. Immediate win, then immediate block
    2. At depth 2 or more, a fork (a cell that opens several winning
       lines at once)
    3. Its own most urgent threat, if it is at least a developing one
    4. A block of the opponent's most urgent cell, if it rates above a
       potential threat
    5. The center
    6. At depth 2 or more, the cell whose one-ply result evaluates
       best; otherwise a cell next to one of its own pieces
    7. A random cell

    With heuristic_chance below 1, that fraction of moves is heuristic
    and the rest are random.
    """

    def __init__(
        self,
        depth: int = 1,
        heuristic_chance: float = 1.0,
        rng: random.Random | None = None,
        weights: EvaluationWeights | None = None,
        priorities: ThreatPriorities = DEFAULT_PRIORITIES,
        patterns: PatternConfig = DEFAULT_PATTERNS,
    ):
        self.depth = depth
        self.heuristic_chance = heuristic_chance
        self.rng = rng or random.Random()
        self.evaluator = HeuristicEvaluator(weights or EvaluationWeights())
        self.priorities = priorities
        self.patterns = patterns
        self._random = RandomPolicy(rng=self.rng)

    def select_move(
        self,
        board: Board,
        player: str,
        opponent: str,
        config: RuleConfig,
    ) -> BotDecision:
        if board.is_full():
            return BotDecision(move=None, explanation=FULL_BOARD, confidence=0.0)

        if self.heuristic_chance < 1.0 and self.rng.random() >= self.heuristic_chance:
            return self._random.select_move(board, player, opponent, config)

        return self.find_best_move(board, player, opponent, config)

    def find_best_move(
        self,
        board: Board,
        player: str,
        opponent: str,
        config: RuleConfig,
    ) -> BotDecision:
        rules = LineRules(config)

        winning = rules.find_winning_move(board, player)
        if winning:
            return BotDecision(move=winning, explanation="Winning move")

        blocking = rules.find_winning_move(board, opponent)
        if blocking:
            return BotDecision(move=blocking, explanation="Blocks opponent win")

        if self.depth >= 2:
            for move in board.empty_positions():
                lines = count_potential_wins(
                    board, move.row, move.col, player, config, self.patterns
                )
                if lines >= self.patterns.multiple_threat_count:
                    return BotDecision(
                        move=move,
                        explanation="Opens multiple winning lines",
                        evaluation_details={"potential_wins": lines},
                    )

        move, priority = self.most_urgent(board, player, opponent, config)
        if move and priority >= self.priorities.developing_threat:
            return BotDecision(
                move=move,
                explanation="Builds threat",
                evaluation_details={"priority": priority},
            )

        move, priority = self.most_urgent(board, opponent, player, config)
        if move and priority > self.priorities.potential_threat:
            return BotDecision(
                move=move,
                explanation="Blocks threat",
                evaluation_details={"priority": priority},
            )

        center = board.center
        if board.is_empty_at(center.row, center.col):
            return BotDecision(move=center, explanation="Takes center")

        if self.depth >= 2:
            move, score = self.best_evaluated(board, player, opponent)
            return BotDecision(
                move=move,
                explanation="Best evaluated cell",
                best_score=score,
                evaluated_moves=len(board.empty_positions()),
            )

        adjacent = self.adjacent_cells(board, player)
        if adjacent:
            return BotDecision(
                move=self.rng.choice(adjacent),
                explanation="Next to own piece",
                confidence=1.0 / len(adjacent),
            )

        return self._random.select_move(board, player, opponent, config)

    def most_urgent(
        self,
        board: Board,
        player: str,
        opponent: str,
        config: RuleConfig,
    ) -> tuple[Move | None, int]:
        """Highest rate_move cell for `player`; row-major order breaks ties."""
        best_move = None
        best = 0
        for move in board.empty_positions():
            priority = rate_move(board, move.row, move.col, player, opponent, config,
                                 self.priorities, self.patterns)
            if priority > best:
                best_move, best = move, priority
        return best_move, best

    def best_evaluated(self, board: Board, player: str, opponent: str) -> tuple[Move, float]:
        """The empty cell whose placement leaves the best static evaluation."""
        best_move = None
        best_score = -math.inf
        for move in board.empty_positions():
            with board.trial(move.row, move.col, player):
                score = self.evaluator.evaluate_board(board, player, opponent)
            if score > best_score:
                best_move, best_score = move, score
        return best_move, best_score

    @staticmethod
    def adjacent_cells(board: Board, player: str) -> list[Move]:
        """Empty cells touching one of `player`'s pieces, without duplicates."""
        cells: list[Move] = []
        for piece in board.occupied_positions(player):
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    r, c = piece.row + dr, piece.col + dc
                    if board.is_empty_at(r, c) and Move(r, c) not in cells:
                        cells.append(Move(r, c))
        return cells


class MinimaxPolicy(BotPolicy):
    """
    Fixed-depth minimax policy.

    Depth 3, or 2 when bounce and missing-teeth are both enabled.
    """

    def __init__(
        self,
        weights: EvaluationWeights | None = None,
        search_config: SearchConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.weights = weights or EvaluationWeights()
        self.search_config = search_config or SearchConfig()
        self.clock = clock

    def select_move(
        self,
        board: Board,
        player: str,
        opponent: str,
        config: RuleConfig,
    ) -> BotDecision:
        search = MinimaxSearch(
            LineRules(config),
            HeuristicEvaluator(self.weights),
            self.search_config,
            self.clock,
        )
        move = search.find_minimax_move(board, player, opponent)
        if move is None:
            return BotDecision(move=None, explanation=FULL_BOARD, confidence=0.0)

        return BotDecision(
            move=move,
            explanation="Minimax search",
            evaluated_moves=search.nodes,
            evaluation_details={"depth": search.search_depth()},
        )


class AdvancedPolicy(BotPolicy):
    """
    Strongest policy.

    Order of play:
    1. Opening book while the board holds few pieces
    2. Immediate win, then immediate block
    3. Forcing moves (double threats, open fours) for either side
    4. Blocks of the opponent's critical threats
    5. With bounce enabled, blocks of diagonal build-ups
    6. Iterative deepening up to the phase depth, over threat-ordered
       candidates
    """

    # From this many pieces on, every candidate is searched at the root
    FULL_WIDTH_PIECES = 8

    def __init__(
        self,
        rng: random.Random | None = None,
        weights: EvaluationWeights | None = None,
        search_config: SearchConfig | None = None,
        priorities: ThreatPriorities = DEFAULT_PRIORITIES,
        patterns: PatternConfig = DEFAULT_PATTERNS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.rng = rng or random.Random()
        self.weights = weights or EvaluationWeights()
        self.search_config = search_config or SearchConfig()
        self.priorities = priorities
        self.patterns = patterns
        self.clock = clock
        self.opening_book = OpeningBook(self.rng)

    def select_move(
        self,
        board: Board,
        player: str,
        opponent: str,
        config: RuleConfig,
    ) -> BotDecision:
        if board.is_full():
            return BotDecision(move=None, explanation=FULL_BOARD, confidence=0.0)

        if board.count_pieces() < self.patterns.opening_book_moves:
            return BotDecision(
                move=self.opening_book.select(board, player, opponent),
                explanation="Opening book",
            )

        rules = LineRules(config)

        winning = rules.find_winning_move(board, player)
        if winning:
            return BotDecision(move=winning, explanation="Winning move")

        blocking = rules.find_winning_move(board, opponent)
        if blocking:
            return BotDecision(move=blocking, explanation="Blocks opponent win")

        forcing = find_advanced_threat_move(board, player, opponent, config, self.patterns)
        if forcing:
            return BotDecision(move=forcing, explanation="Forcing move")

        critical = self.find_critical_block(board, player, opponent, config)
        if critical:
            return BotDecision(move=critical, explanation="Blocks critical threat")

        if config.bounce_enabled:
            diagonal = find_diagonal_threat_move(board, player, opponent)
            if diagonal:
                return BotDecision(move=diagonal, explanation="Blocks diagonal build-up")

        search = MinimaxSearch(
            rules,
            HeuristicEvaluator(self.weights),
            self.search_config,
            self.clock,
        )
        candidates = self.ordered_candidates(board, player, opponent, config)
        depth = search.phase_depth(board)
        result = search.iterative_deepening(board, player, opponent, candidates, depth)

        return BotDecision(
            move=result.move,
            explanation=f"Iterative deepening to depth {result.depth}",
            evaluated_moves=result.nodes,
            best_score=result.score,
            evaluation_details={
                "max_depth": depth,
                "depth": result.depth,
                "completed": result.completed,
                "elapsed_ms": result.elapsed_ms,
                "candidates": len(candidates),
            },
        )

    def find_critical_block(
        self,
        board: Board,
        player: str,
        opponent: str,
        config: RuleConfig,
    ) -> Move | None:
        """The opponent's most urgent cell, if it reaches the critical threshold."""
        best_move = None
        best = 0
        for move in board.empty_positions():
            priority = rate_move(board, move.row, move.col, opponent, player, config,
                                 self.priorities, self.patterns)
            if priority > best:
                best_move, best = move, priority
        if best >= self.priorities.critical_threat_threshold:
            return best_move
        return None

    def ordered_candidates(
        self,
        board: Board,
        player: str,
        opponent: str,
        config: RuleConfig,
    ) -> list[Move]:
        """
        Root candidates, most urgent first.

        Sorted by threat priority for either side, then by diagonal
        threat potential; discovery order breaks ties. Early in the game
        the list is capped, but critical moves are always kept.
        """
        scored = []
        for index, move in enumerate(MinimaxSearch.candidate_moves(board)):
            priority = max(
                rate_move(board, move.row, move.col, player, opponent, config,
                          self.priorities, self.patterns),
                rate_move(board, move.row, move.col, opponent, player, config,
                          self.priorities, self.patterns),
            )
            potential = (
                score_threat_potential(board, move.row, move.col, player)
                + score_threat_potential(board, move.row, move.col, opponent)
            )
            scored.append((-priority, -potential, index, move))
        scored.sort(key=lambda item: item[:3])

        if board.count_pieces() >= self.FULL_WIDTH_PIECES:
            return [move for *_, move in scored]

        critical = sum(
            1 for item in scored
            if -item[0] >= self.priorities.critical_threat_threshold
        )
        limit = max(self.search_config.root_candidate_limit, critical)
        return [move for *_, move in scored[:limit]]
