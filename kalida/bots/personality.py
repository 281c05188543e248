"""
Bot Personalities - Difficulty presets.

Each difficulty tag maps to a personality, which fixes:
- The strategy (random, heuristic, minimax, advanced)
- Evaluation weights (what the bot values)
- Search settings (depths, candidate caps, time budget)
- Randomness (share of moves played at random)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .evaluator import EvaluationWeights
from .search import SearchConfig


class StrategyKind(Enum):
    """Move-selection strategies, weakest first."""
    RANDOM = "random"
    HEURISTIC = "heuristic"
    MINIMAX = "minimax"
    ADVANCED = "advanced"


@dataclass
class Personality:
    """
    A bot personality that defines play strength.

    Personalities can be:
    - Predefined (one per difficulty tag)
    - Tuned (custom weights or search settings for tests)
    """
    name: str
    description: str = ""
    strategy: StrategyKind = StrategyKind.RANDOM

    # Evaluation weights
    weights: EvaluationWeights = field(default_factory=EvaluationWeights)

    # Search settings
    search: SearchConfig = field(default_factory=SearchConfig)
    heuristic_depth: int = 1

    # Probability of a random move instead of the strategy's choice
    randomness: float = 0.0


# ============================================================================
# Predefined Personalities
# ============================================================================

EASY = Personality(
    name="Easy",
    description="Plays any free cell at random",
    strategy=StrategyKind.RANDOM,
    randomness=1.0,
)


MEDIUM = Personality(
    name="Medium",
    description="Wins or blocks half of the time, otherwise random",
    strategy=StrategyKind.HEURISTIC,
    heuristic_depth=1,
    randomness=0.5,
)


HARD = Personality(
    name="Hard",
    description="Always wins or blocks, and sets up forks",
    strategy=StrategyKind.HEURISTIC,
    heuristic_depth=2,
)


EXTRA = Personality(
    name="Extra",
    description="Fixed-depth minimax with alpha-beta pruning",
    strategy=StrategyKind.MINIMAX,
)


ADVANCED = Personality(
    name="Advanced",
    description="Opening book, forcing moves and time-bounded deepening search",
    strategy=StrategyKind.ADVANCED,
    search=SearchConfig(root_candidate_limit=15, max_branching=8),
)


# All predefined personalities, keyed by difficulty tag
PERSONALITIES: dict[str, Personality] = {
    "easy": EASY,
    "medium": MEDIUM,
    "hard": HARD,
    "extra": EXTRA,
    "advanced": ADVANCED,
}

# Older tag names still sent by some hosts
DIFFICULTY_ALIASES: dict[str, str] = {
    "extrahard": "extra",
    "extra_hard": "extra",
    "impossible": "advanced",
}


def resolve_difficulty(difficulty: str) -> str | None:
    """Normalise a difficulty tag, or None if it is unknown."""
    tag = difficulty.strip().lower()
    tag = DIFFICULTY_ALIASES.get(tag, tag)
    return tag if tag in PERSONALITIES else None
