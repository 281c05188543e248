"""
Heuristic Evaluator - Scores board positions for search leaves.

The evaluator assigns a numeric score to a board based on:
- Run features (length of each straight run and how many ends are open)
- Position features (center proximity, adjacency to friendly pieces)
- Diagonal threat potential of each piece

The opponent's total is discounted before it is subtracted.

Weights are immutable values passed in explicitly, so different
evaluators can coexist without sharing state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import math

from ..engine_core.board import Board, EMPTY
from ..engine_core.rules import DIRECTIONS
from .threats import score_threat_potential


@dataclass(frozen=True)
class EvaluationWeights:
    """
    Weights for the static evaluation.

    Higher values = more importance.
    """
    # Terminal
    win: float = 10000.0

    # Runs
    four_in_line: float = 1000.0
    three_open: float = 500.0
    three_half_open: float = 100.0
    two_open: float = 50.0
    two_half_open: float = 10.0
    isolated: float = 1.0

    # Position
    center_control: float = 5.0
    adjacent_to_own: float = 2.0
    diagonal_potential: float = 0.2  # Multiplier on diagonal threat bonus

    # Opponent-related
    opponent_discount: float = 0.8  # Multiply opponent's score by this


@dataclass
class StateEvaluation:
    """
    Result of evaluating a board.
    """
    total_score: float
    player_scores: dict[str, float] = field(default_factory=dict)
    feature_breakdown: dict[str, float] = field(default_factory=dict)


class HeuristicEvaluator:
    """
    Evaluates boards using weighted run and position features.

    Used at search leaves only:
    1. Score every straight run for each player
    2. Add position bonuses per piece
    3. Subtract the discounted opponent score
    """

    def __init__(self, weights: EvaluationWeights | None = None):
        self.weights = weights or EvaluationWeights()

    def evaluate(self, board: Board, player: str, opponent: str) -> StateEvaluation:
        """
        Evaluate a board from a player's perspective.

        Returns positive score if the board is good for player,
        negative if bad.
        """
        my_score, my_features = self._evaluate_player(board, player)
        their_score, _ = self._evaluate_player(board, opponent)
        total = my_score - self.weights.opponent_discount * their_score

        return StateEvaluation(
            total_score=total,
            player_scores={player: my_score, opponent: their_score},
            feature_breakdown=my_features,
        )

    def evaluate_board(self, board: Board, player: str, opponent: str) -> float:
        return self.evaluate(board, player, opponent).total_score

    def run_value(self, length: int, open_ends: int) -> float:
        """Weight of one straight run."""
        w = self.weights
        if length >= 5:
            return w.win
        if length == 4:
            return w.four_in_line if open_ends >= 1 else 0.0
        if length == 3:
            if open_ends == 2:
                return w.three_open
            return w.three_half_open if open_ends == 1 else 0.0
        if length == 2:
            if open_ends == 2:
                return w.two_open
            return w.two_half_open if open_ends == 1 else 0.0
        return w.isolated if open_ends else 0.0

    def _evaluate_player(self, board: Board, player: str) -> tuple[float, dict[str, float]]:
        """Evaluate a single player's pieces."""
        w = self.weights
        n = board.size
        cells = board.cells
        center = n // 2

        runs = 0.0
        position = 0.0
        adjacency = 0.0
        diagonal = 0.0

        for move in board.occupied_positions(player):
            r, c = move.row, move.col

            for dr, dc in DIRECTIONS:
                pr, pc = r - dr, c - dc
                before_in = 0 <= pr < n and 0 <= pc < n
                if before_in and cells[pr][pc] == player:
                    continue  # Not the start of this run
                length = 1
                nr, nc = r + dr, c + dc
                while 0 <= nr < n and 0 <= nc < n and cells[nr][nc] == player:
                    length += 1
                    nr += dr
                    nc += dc
                open_ends = int(before_in and cells[pr][pc] == EMPTY)
                open_ends += int(0 <= nr < n and 0 <= nc < n and cells[nr][nc] == EMPTY)
                runs += self.run_value(length, open_ends)

            distance = math.hypot(r - center, c - center)
            position += max(0.0, w.center_control - min(4.0, distance))

            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    if (dr or dc) and board.get(r + dr, c + dc) == player:
                        adjacency += w.adjacent_to_own

            diagonal += score_threat_potential(board, r, c, player) * w.diagonal_potential

        features = {
            "runs": runs,
            "position": position,
            "adjacency": adjacency,
            "diagonal": diagonal,
        }
        return runs + position + adjacency + diagonal, features
