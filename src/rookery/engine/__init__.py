"""Chess engine package: move search over the core board."""

from rookery.engine.minimax import (
    PIECE_VALUES,
    MinimaxEngine,
    evaluate_material,
    find_best_move,
)
from rookery.engine.search import IEngine, SearchLimits, SearchResult

DefaultEngine: type[IEngine] = MinimaxEngine

__all__ = [
    "PIECE_VALUES",
    "DefaultEngine",
    "IEngine",
    "MinimaxEngine",
    "SearchLimits",
    "SearchResult",
    "evaluate_material",
    "find_best_move",
]
