"""Shared engine search models and protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rookery.core.board import Board
    from rookery.core.enums import Color
    from rookery.core.move import Move


@dataclass(slots=True, frozen=True)
class SearchLimits:
    """Search constraints for a single move computation.

    Depth is the only latency control; searches are not cancellable.
    """

    max_depth: int = 3


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search.

    ``score`` is a material balance from White's point of view.
    """

    best_move: Move | None
    score: int
    depth: int
    nodes: int


class IEngine(Protocol):
    """Protocol for chess engines used by the game layer."""

    def search(
        self,
        board: Board,
        limits: SearchLimits,
        color: Color | None = None,
    ) -> SearchResult: ...
