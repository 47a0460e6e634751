"""High-level chess rules: checkmate, stalemate, draw detection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rookery.core.enums import Color, GameEndReason, GameResult, PieceType

if TYPE_CHECKING:
    from rookery.core.board import Board

_MINOR_PIECES = (PieceType.KNIGHT, PieceType.BISHOP)


@dataclass(frozen=True, slots=True)
class GameStatus:
    """Result of a terminal-state evaluation."""

    result: GameResult = GameResult.IN_PROGRESS
    reason: GameEndReason = GameEndReason.NONE

    @property
    def is_over(self) -> bool:
        return self.result != GameResult.IN_PROGRESS

    @property
    def is_draw(self) -> bool:
        return self.result == GameResult.DRAW

    @property
    def winner(self) -> Color | None:
        if self.result == GameResult.WHITE_WINS:
            return Color.WHITE
        if self.result == GameResult.BLACK_WINS:
            return Color.BLACK
        return None


IN_PROGRESS = GameStatus()


class Rules:
    """Static rule-checker that operates on a :class:`Board`.

    All draws are automatic: the fifty-move rule, insufficient material and
    threefold repetition end the game as soon as they apply.
    """

    @staticmethod
    def is_in_check(board: Board) -> bool:
        return board.is_king_in_check(board.active_color)

    @staticmethod
    def is_checkmate(board: Board) -> bool:
        if not Rules.is_in_check(board):
            return False
        return not board.has_legal_moves(board.active_color)

    @staticmethod
    def is_stalemate(board: Board) -> bool:
        if Rules.is_in_check(board):
            return False
        return not board.has_legal_moves(board.active_color)

    @staticmethod
    def is_insufficient_material(board: Board) -> bool:
        """K vs K, K+minor vs K, K+B vs K+B with bishops on one square color."""
        others = [p for p in board.pieces() if p.piece_type != PieceType.KING]

        if not others:
            return True

        if len(others) == 1:
            return others[0].piece_type in _MINOR_PIECES

        if len(others) == 2:
            first, second = others
            return (
                first.piece_type == PieceType.BISHOP
                and second.piece_type == PieceType.BISHOP
                and first.color != second.color
                and first.square.is_light == second.square.is_light
            )

        return False

    @staticmethod
    def is_fifty_move_rule(board: Board) -> bool:
        return board.halfmove_clock >= 100  # 100 half-moves = 50 full moves

    @staticmethod
    def is_threefold_repetition(board: Board) -> bool:
        return board.repetition_count() >= 3

    @staticmethod
    def evaluate(board: Board) -> GameStatus:
        """Determine the game status, checking rules in a fixed order.

        The first rule that applies is reported. Every outcome except
        checkmate is a draw.
        """
        if Rules.is_fifty_move_rule(board):
            return GameStatus(GameResult.DRAW, GameEndReason.FIFTY_MOVE_RULE)

        if Rules.is_insufficient_material(board):
            return GameStatus(GameResult.DRAW, GameEndReason.INSUFFICIENT_MATERIAL)

        if Rules.is_threefold_repetition(board):
            return GameStatus(GameResult.DRAW, GameEndReason.THREEFOLD_REPETITION)

        side = board.active_color
        if board.has_legal_moves(side):
            return IN_PROGRESS

        if board.is_king_in_check(side):
            result = (
                GameResult.BLACK_WINS if side == Color.WHITE else GameResult.WHITE_WINS
            )
            return GameStatus(result, GameEndReason.CHECKMATE)
        return GameStatus(GameResult.DRAW, GameEndReason.STALEMATE)

    @staticmethod
    def game_result(board: Board) -> GameResult:
        """Determine the current game result."""
        return Rules.evaluate(board).result
