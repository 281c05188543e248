"""
Bots module - Computer opponents.

Provides:
- BotPolicy: Interface for bot move selection
- HeuristicEvaluator: Scores boards at search leaves
- MinimaxSearch: Alpha-beta search with iterative deepening
- Personality: Difficulty presets
- StrategyDispatcher: Difficulty tag to move
"""

from .policy import (
    BotPolicy,
    BotDecision,
    RandomPolicy,
    HeuristicPolicy,
    MinimaxPolicy,
    AdvancedPolicy,
)
from .evaluator import HeuristicEvaluator, EvaluationWeights
from .search import MinimaxSearch, SearchConfig, SearchResult
from .personality import Personality, PERSONALITIES, StrategyKind
from .dispatcher import StrategyDispatcher

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "HeuristicPolicy",
    "MinimaxPolicy",
    "AdvancedPolicy",
    "HeuristicEvaluator",
    "EvaluationWeights",
    "MinimaxSearch",
    "SearchConfig",
    "SearchResult",
    "Personality",
    "PERSONALITIES",
    "StrategyKind",
    "StrategyDispatcher",
]
