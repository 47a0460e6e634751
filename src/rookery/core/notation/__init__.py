"""Notation package: FEN parsing and serialization."""

from rookery.core.notation.fen import (
    STARTING_FEN,
    FenFields,
    board_from_fen,
    board_to_fen,
    parse_fen,
)

__all__ = [
    "STARTING_FEN",
    "FenFields",
    "board_from_fen",
    "board_to_fen",
    "parse_fen",
]
