"""Concrete player implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rookery.core.enums import Color
from rookery.engine.minimax import MinimaxEngine
from rookery.engine.search import IEngine, SearchLimits
from rookery.game.interfaces import IPlayer

if TYPE_CHECKING:
    from rookery.core.board import Board
    from rookery.core.move import Move


class HumanPlayer(IPlayer):
    """A human participant whose moves arrive through the controller."""

    __slots__ = ("_color", "_name")

    def __init__(self, color: Color, name: str = "") -> None:
        self._color = color
        self._name = name or f"Player ({color})"

    @property
    def color(self) -> Color:
        return self._color

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_human(self) -> bool:
        return True

    def request_move(self, board: Board) -> Move | None:
        return None  # Human moves arrive via controller.submit_move()


class AIPlayer(IPlayer):
    """An automated participant that asks an engine for its move.

    Args:
        color: Side the AI plays.
        name: Display name.
        engine: Search implementation; defaults to :class:`MinimaxEngine`.
        depth: Search depth in plies.
    """

    __slots__ = ("_color", "_name", "_engine", "_limits")

    def __init__(
        self,
        color: Color,
        name: str = "Engine",
        engine: IEngine | None = None,
        depth: int = 2,
    ) -> None:
        self._color = color
        self._name = name
        self._engine = engine if engine is not None else MinimaxEngine()
        self._limits = SearchLimits(max_depth=depth)

    @property
    def color(self) -> Color:
        return self._color

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_human(self) -> bool:
        return False

    @property
    def depth(self) -> int:
        return self._limits.max_depth

    def request_move(self, board: Board) -> Move | None:
        return self._engine.search(board, self._limits, self._color).best_move
