"""FEN parsing and serialization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rookery.core.enums import CastlingRights, Color
from rookery.core.exceptions import FenError
from rookery.core.piece import Piece
from rookery.core.types import Coordinate, parse_square

if TYPE_CHECKING:
    from rookery.core.board import Board

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_CHARS: dict[str, CastlingRights] = {
    "K": CastlingRights.WHITE_KINGSIDE,
    "Q": CastlingRights.WHITE_QUEENSIDE,
    "k": CastlingRights.BLACK_KINGSIDE,
    "q": CastlingRights.BLACK_QUEENSIDE,
}


@dataclass(slots=True)
class FenFields:
    """Decoded FEN fields, before they are loaded into a board."""

    pieces: list[Piece]
    side_to_move: Color
    castling: CastlingRights
    en_passant: Coordinate | None
    halfmove_clock: int
    fullmove_number: int


def parse_fen(fen: str) -> FenFields:
    """Decode *fen* into :class:`FenFields`.

    Raises:
        FenError: wrong field count, rank count other than 8, a rank whose
            width is not 8, an unknown piece letter, or a malformed
            side/castling/en-passant/clock field.
    """
    parts = fen.split()
    if not (2 <= len(parts) <= 6):
        raise FenError("Invalid FEN (need 2-6 fields)", fen)

    # Castling and en-passant default to "-" when omitted
    placement, side_part, castling_part, ep_part = (parts + ["-", "-"])[:4]

    # 1. Piece placement
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise FenError("Invalid FEN board (must contain 8 ranks)", fen)
    pieces: list[Piece] = []
    for rank_idx, rank_text in enumerate(ranks):
        rank = 7 - rank_idx
        file = 0
        for ch in rank_text:
            if ch.isdigit():
                step = int(ch)
                if not (1 <= step <= 8):
                    raise FenError(f"Invalid FEN digit {ch!r}", fen)
                file += step
            else:
                if file >= 8:
                    raise FenError("Invalid FEN rank width", fen)
                pieces.append(Piece.from_char(ch, Coordinate(file, rank)))
                file += 1
            if file > 8:
                raise FenError("Invalid FEN rank width", fen)
        if file != 8:
            raise FenError("Invalid FEN rank width", fen)

    # 2. Side to move
    if side_part == "w":
        side = Color.WHITE
    elif side_part == "b":
        side = Color.BLACK
    else:
        raise FenError(f"Invalid FEN side-to-move field {side_part!r}", fen)

    # 3. Castling
    castling = CastlingRights.NONE
    if castling_part != "-":
        seen: set[str] = set()
        for ch in castling_part:
            right = _CASTLING_CHARS.get(ch)
            if right is None or ch in seen:
                raise FenError(f"Invalid FEN castling field {castling_part!r}", fen)
            seen.add(ch)
            castling |= right

    # 4. En passant
    ep: Coordinate | None = None
    if ep_part != "-":
        try:
            ep = parse_square(ep_part)
        except ValueError:
            raise FenError(f"Invalid FEN en-passant square {ep_part!r}", fen) from None
        expected_ep_rank = 5 if side == Color.WHITE else 2
        if ep.rank != expected_ep_rank:
            raise FenError(f"Invalid FEN en-passant square {ep_part!r}", fen)

    # 5-6. Clocks (optional)
    halfmove = _parse_clock(parts, 4, 0, fen)
    fullmove = _parse_clock(parts, 5, 1, fen)

    return FenFields(pieces, side, castling, ep, halfmove, fullmove)


def _parse_clock(parts: list[str], index: int, minimum: int, fen: str) -> int:
    if len(parts) <= index:
        return minimum
    try:
        value = int(parts[index])
    except ValueError:
        raise FenError(f"Invalid FEN clock field {parts[index]!r}", fen) from None
    if value < minimum:
        raise FenError(f"Invalid FEN clock field {parts[index]!r}", fen)
    return value


def board_from_fen(fen: str) -> Board:
    """Build a :class:`Board` from *fen*."""
    from rookery.core.board import Board

    return Board(fen)


def board_to_fen(board: Board) -> str:
    """Serialise *board* to FEN.

    The en-passant field is only written when a pawn of the side to move
    can actually make the capture.
    """
    # 1. Board
    rows: list[str] = []
    for rank in range(7, -1, -1):
        empty = 0
        row = ""
        for file in range(8):
            piece = board.piece_at(Coordinate(file, rank))
            if piece is None:
                empty += 1
            else:
                if empty:
                    row += str(empty)
                    empty = 0
                row += str(piece)
        if empty:
            row += str(empty)
        rows.append(row)
    board_str = "/".join(rows)

    # 2. Side
    side_str = "w" if board.active_color == Color.WHITE else "b"

    # 3. Castling
    castling_str = "".join(
        ch for ch, right in _CASTLING_CHARS.items() if board.castling & right
    )
    if not castling_str:
        castling_str = "-"

    # 4. En passant
    ep = board.capturable_en_passant()
    ep_str = ep.name if ep is not None else "-"

    return (
        f"{board_str} {side_str} {castling_str} {ep_str} "
        f"{board.halfmove_clock} {board.fullmove_number}"
    )
