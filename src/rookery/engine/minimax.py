"""Depth-limited minimax search with alpha-beta pruning over material."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rookery.core.enums import Color, PieceType
from rookery.engine.search import IEngine, SearchLimits, SearchResult

if TYPE_CHECKING:
    from rookery.core.board import Board
    from rookery.core.move import Move

_LOGGER = logging.getLogger(__name__)

_INF_SCORE = 1_000_000
_MATE_SCORE = 100_000

PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 0,
}


def evaluate_material(board: Board) -> int:
    """Material balance from White's point of view."""
    score = 0
    for piece in board.pieces():
        value = PIECE_VALUES[piece.piece_type]
        score += value if piece.color == Color.WHITE else -value
    return score


class MinimaxEngine(IEngine):
    """Minimax searcher: WHITE maximizes, BLACK minimizes.

    Every candidate is tried through :meth:`Board.probe`, so the board is
    restored on every exit path. Among equally scored moves the first one
    in generation order wins; pruning never changes which move is chosen.
    """

    __slots__ = ("_nodes",)

    def __init__(self) -> None:
        self._nodes = 0

    def search(
        self,
        board: Board,
        limits: SearchLimits,
        color: Color | None = None,
    ) -> SearchResult:
        if limits.max_depth <= 0:
            raise ValueError("Search depth must be >= 1")

        side = board.active_color if color is None else color
        self._nodes = 0

        root_moves = board.all_legal_moves(side)
        if not root_moves:
            score = 0
            if board.is_king_in_check(side):
                score = -_MATE_SCORE if side == Color.WHITE else _MATE_SCORE
            return SearchResult(None, score, 0, self._nodes)

        maximizing = side == Color.WHITE
        best_move: Move | None = None
        best_score = -_INF_SCORE if maximizing else _INF_SCORE
        alpha = -_INF_SCORE
        beta = _INF_SCORE

        for move in root_moves:
            with board.probe(move):
                score = self._minimax(
                    board, limits.max_depth - 1, alpha, beta, side.opposite, ply=1
                )
            if maximizing:
                if score > best_score:
                    best_score = score
                    best_move = move
                alpha = max(alpha, score)
            else:
                if score < best_score:
                    best_score = score
                    best_move = move
                beta = min(beta, score)

        _LOGGER.debug(
            "Search depth %d for %s: %s (score %d, %d nodes)",
            limits.max_depth,
            side,
            best_move,
            best_score,
            self._nodes,
        )
        return SearchResult(best_move, best_score, limits.max_depth, self._nodes)

    def _minimax(
        self,
        board: Board,
        depth: int,
        alpha: int,
        beta: int,
        color: Color,
        ply: int,
    ) -> int:
        self._nodes += 1
        if depth <= 0:
            return evaluate_material(board)

        moves = board.all_legal_moves(color)
        if not moves:
            if board.is_king_in_check(color):
                # Nearer mates score higher for the winner.
                mate = _MATE_SCORE - ply
                return -mate if color == Color.WHITE else mate
            return 0

        if color == Color.WHITE:
            value = -_INF_SCORE
            for move in moves:
                with board.probe(move):
                    score = self._minimax(
                        board, depth - 1, alpha, beta, Color.BLACK, ply + 1
                    )
                value = max(value, score)
                alpha = max(alpha, value)
                if alpha >= beta:
                    break
            return value

        value = _INF_SCORE
        for move in moves:
            with board.probe(move):
                score = self._minimax(board, depth - 1, alpha, beta, Color.WHITE, ply + 1)
            value = min(value, score)
            beta = min(beta, value)
            if alpha >= beta:
                break
        return value

    @property
    def nodes(self) -> int:
        """Nodes visited by the last search."""
        return self._nodes


def find_best_move(board: Board, depth: int, color: Color) -> Move | None:
    """Best move for *color* found by a *depth*-ply search, or ``None``.

    ``None`` means *color* has no legal moves.
    """
    return MinimaxEngine().search(board, SearchLimits(max_depth=depth), color).best_move
