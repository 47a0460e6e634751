"""Core domain layer — pure chess logic with zero external dependencies.

Quick start::

    from rookery.core import Board, STARTING_FEN

    board = Board(STARTING_FEN)
    for move in board.all_legal_moves():
        print(move)
"""

from rookery.core.board import Board
from rookery.core.enums import (
    CastlingRights,
    Color,
    GameEndReason,
    GameResult,
    MoveFlag,
    PieceType,
)
from rookery.core.exceptions import BoardInvariantError, ChessError, FenError
from rookery.core.move import Move, MoveSnapshot, PendingPromotion
from rookery.core.move_generator import is_square_attacked, pseudo_legal_moves
from rookery.core.notation import (
    STARTING_FEN,
    board_from_fen,
    board_to_fen,
    parse_fen,
)
from rookery.core.piece import Piece
from rookery.core.rules import GameStatus, Rules
from rookery.core.types import ALL_SQUARES, Coordinate, in_bounds, parse_square

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "GameEndReason",
    "GameResult",
    "MoveFlag",
    "PieceType",
    # Types / helpers
    "Coordinate",
    "ALL_SQUARES",
    "in_bounds",
    "parse_square",
    # Errors
    "BoardInvariantError",
    "ChessError",
    "FenError",
    # Domain objects
    "Board",
    "GameStatus",
    "Move",
    "MoveSnapshot",
    "PendingPromotion",
    "Piece",
    "Rules",
    "is_square_attacked",
    "pseudo_legal_moves",
    # Notation
    "STARTING_FEN",
    "board_from_fen",
    "board_to_fen",
    "parse_fen",
]
