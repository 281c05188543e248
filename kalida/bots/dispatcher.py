"""
Strategy Dispatcher - Entry point used by hosts.

The dispatcher:
1. Maps a difficulty tag to a policy (built once, then reused)
2. Copies the host's board so the host grid is never touched
3. Reports game status for either rule variant

Usage:
    dispatcher = StrategyDispatcher(seed=7)
    move = dispatcher.get_move(grid, "extra", "O", bounce_enabled=True,
                               missing_teeth_enabled=False)
"""

from __future__ import annotations
from dataclasses import replace
from typing import Callable, Iterable, Union
import logging
import random
import time

from ..engine_core.board import Board, Move, PLAYERS, other_player
from ..engine_core.path_rules import PathRules
from ..engine_core.rules import GameStatus, LineRules, RuleConfig
from .personality import PERSONALITIES, Personality, StrategyKind, resolve_difficulty
from .policy import (
    AdvancedPolicy,
    BotDecision,
    BotPolicy,
    HeuristicPolicy,
    MinimaxPolicy,
    RandomPolicy,
)

logger = logging.getLogger(__name__)

BoardLike = Union[Board, Iterable[Iterable[str]]]

DEFAULT_DIFFICULTY = "easy"


def create_policy(
    personality: Personality,
    rng: random.Random,
    clock: Callable[[], float] = time.monotonic,
) -> BotPolicy:
    """Build the policy a personality calls for."""
    if personality.strategy == StrategyKind.RANDOM:
        return RandomPolicy(rng=rng)
    if personality.strategy == StrategyKind.HEURISTIC:
        return HeuristicPolicy(
            depth=personality.heuristic_depth,
            heuristic_chance=1.0 - personality.randomness,
            rng=rng,
            weights=personality.weights,
        )
    if personality.strategy == StrategyKind.MINIMAX:
        return MinimaxPolicy(personality.weights, personality.search, clock)
    return AdvancedPolicy(
        rng=rng,
        weights=personality.weights,
        search_config=personality.search,
        clock=clock,
    )


class StrategyDispatcher:
    """
    Selects moves by difficulty tag.

    All randomness flows from one injected random.Random, so a seeded
    dispatcher replays the same games.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        seed: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        time_limit_ms: int | None = None,
        personalities: dict[str, Personality] | None = None,
    ):
        self.rng = rng or random.Random(seed)
        self.clock = clock
        self.time_limit_ms = time_limit_ms
        self.personalities = personalities or PERSONALITIES
        self.path_rules = PathRules()
        self._policies: dict[str, BotPolicy] = {}

    def policy_for(self, difficulty: str) -> BotPolicy:
        """Get (or build) the policy for a difficulty tag."""
        tag = resolve_difficulty(difficulty)
        if tag is None or tag not in self.personalities:
            logger.warning("Unknown difficulty %r, falling back to %s", difficulty, DEFAULT_DIFFICULTY)
            tag = DEFAULT_DIFFICULTY

        if tag not in self._policies:
            personality = self.personalities[tag]
            if self.time_limit_ms is not None:
                personality = replace(
                    personality,
                    search=replace(personality.search, time_limit_ms=self.time_limit_ms),
                )
            self._policies[tag] = create_policy(personality, self.rng, self.clock)
        return self._policies[tag]

    def decide(
        self,
        board: BoardLike,
        difficulty: str,
        player: str,
        bounce_enabled: bool = False,
        missing_teeth_enabled: bool = False,
        wrap_enabled: bool = False,
    ) -> BotDecision:
        """
        Select a move with its explanation.

        Raises:
            ValueError: If the player marker or board is malformed
        """
        if player not in PLAYERS:
            raise ValueError(f"Unknown player {player!r}")

        work = _to_board(board).snapshot()
        if work.is_full():
            return BotDecision(move=None, explanation="Board is full", confidence=0.0)

        config = RuleConfig(
            bounce_enabled=bounce_enabled,
            missing_teeth_enabled=missing_teeth_enabled,
            wrap_enabled=wrap_enabled,
        )
        policy = self.policy_for(difficulty)
        decision = policy.select_move(work, player, other_player(player), config)

        logger.debug(
            "%s chose %s for %s (%s)",
            policy.get_name(), decision.move, player, decision.explanation,
        )
        return decision

    def get_move(
        self,
        board: BoardLike,
        difficulty: str,
        player: str,
        bounce_enabled: bool = False,
        missing_teeth_enabled: bool = False,
        wrap_enabled: bool = False,
    ) -> Move | None:
        """Select a move; None only when the board is full."""
        return self.decide(
            board, difficulty, player, bounce_enabled, missing_teeth_enabled, wrap_enabled
        ).move

    def check_game_status(
        self,
        board: BoardLike,
        bounce_enabled: bool = False,
        missing_teeth_enabled: bool = False,
        wrap_enabled: bool = False,
    ) -> GameStatus:
        """Line-variant status."""
        rules = LineRules(RuleConfig(
            bounce_enabled=bounce_enabled,
            missing_teeth_enabled=missing_teeth_enabled,
            wrap_enabled=wrap_enabled,
        ))
        return rules.check_game_status(_to_board(board))

    def check_path_status(self, board: BoardLike) -> GameStatus:
        """Path-variant status."""
        return self.path_rules.check_game_status(_to_board(board))


def _to_board(board: BoardLike) -> Board:
    if isinstance(board, Board):
        return board
    return Board.from_grid(board)
