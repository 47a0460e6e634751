"""Pseudo-legal move generation and attack detection.

One generator function per :class:`PieceType`, selected through a dispatch
table. Generators only look at geometry and occupancy; leaving one's own
king in check is filtered later by :meth:`Board.legal_moves`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from rookery.core.enums import (
    PROMOTION_TYPES,
    CastlingRights,
    Color,
    MoveFlag,
    PieceType,
)
from rookery.core.move import Move
from rookery.core.types import Coordinate

if TYPE_CHECKING:
    from rookery.core.board import Board
    from rookery.core.piece import Piece


KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)

KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)

BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS: tuple[tuple[int, int], ...] = BISHOP_DIRS + ROOK_DIRS

# (flag, rook file, files that must be empty, king destination file,
#  files the king stands on, crosses or lands on)
CastleSide = tuple[MoveFlag, int, tuple[int, ...], int, tuple[int, ...]]
_CASTLE_SIDES: tuple[CastleSide, ...] = (
    (MoveFlag.CASTLE_KINGSIDE, 7, (5, 6), 6, (4, 5, 6)),
    (MoveFlag.CASTLE_QUEENSIDE, 0, (1, 2, 3), 2, (4, 3, 2)),
)
KING_HOME_FILE = 4


def castle_side(flag: MoveFlag) -> CastleSide:
    """Geometry of the castling move identified by *flag*."""
    for side in _CASTLE_SIDES:
        if side[0] == flag:
            return side
    raise ValueError(f"Not a castling flag: {flag!r}")


def castle_right(flag: MoveFlag, color: Color) -> CastlingRights:
    if flag == MoveFlag.CASTLE_KINGSIDE:
        return CastlingRights.kingside(color)
    return CastlingRights.queenside(color)


# -- Piece-specific generators ----------------------------------------------


def _gen_pawn(board: Board, piece: Piece, moves: list[Move]) -> None:
    color = piece.color
    sq = piece.square
    forward = color.forward
    last_rank = color.opposite.back_rank

    one_step = sq.offset(0, forward)
    if one_step is None:
        return

    if board.piece_at(one_step) is None:
        _add_pawn_move(sq, one_step, last_rank, False, moves)
        if not piece.has_moved:
            two_step = one_step.offset(0, forward)
            if two_step is not None and board.piece_at(two_step) is None:
                moves.append(Move(sq, two_step, MoveFlag.DOUBLE_PAWN))

    for df in (-1, 1):
        cap_sq = sq.offset(df, forward)
        if cap_sq is None:
            continue
        target = board.piece_at(cap_sq)
        if target is not None:
            if target.color != color:
                _add_pawn_move(sq, cap_sq, last_rank, True, moves)
        elif cap_sq == board.en_passant:
            # The pawn being captured sits beside us, behind the target square.
            victim = board.piece_at(Coordinate(cap_sq.file, sq.rank))
            if (
                victim is not None
                and victim.color != color
                and victim.piece_type == PieceType.PAWN
            ):
                moves.append(Move(sq, cap_sq, MoveFlag.EN_PASSANT, capture=True))


def _add_pawn_move(
    from_sq: Coordinate,
    to_sq: Coordinate,
    last_rank: int,
    capture: bool,
    moves: list[Move],
) -> None:
    if to_sq.rank == last_rank:
        for pt in PROMOTION_TYPES:
            moves.append(Move(from_sq, to_sq, MoveFlag.PROMOTION, pt, capture))
    else:
        moves.append(Move(from_sq, to_sq, capture=capture))


def _gen_offsets(
    board: Board,
    piece: Piece,
    offsets: tuple[tuple[int, int], ...],
    moves: list[Move],
) -> None:
    sq = piece.square
    for df, dr in offsets:
        to_sq = sq.offset(df, dr)
        if to_sq is None:
            continue
        target = board.piece_at(to_sq)
        if target is None:
            moves.append(Move(sq, to_sq))
        elif target.color != piece.color:
            moves.append(Move(sq, to_sq, capture=True))


def _gen_sliding(
    board: Board,
    piece: Piece,
    directions: tuple[tuple[int, int], ...],
    moves: list[Move],
) -> None:
    sq = piece.square
    for df, dr in directions:
        to_sq = sq.offset(df, dr)
        while to_sq is not None:
            target = board.piece_at(to_sq)
            if target is None:
                moves.append(Move(sq, to_sq))
                to_sq = to_sq.offset(df, dr)
                continue
            if target.color != piece.color:
                moves.append(Move(sq, to_sq, capture=True))
            break


def _gen_knight(board: Board, piece: Piece, moves: list[Move]) -> None:
    _gen_offsets(board, piece, KNIGHT_OFFSETS, moves)


def _gen_bishop(board: Board, piece: Piece, moves: list[Move]) -> None:
    _gen_sliding(board, piece, BISHOP_DIRS, moves)


def _gen_rook(board: Board, piece: Piece, moves: list[Move]) -> None:
    _gen_sliding(board, piece, ROOK_DIRS, moves)


def _gen_queen(board: Board, piece: Piece, moves: list[Move]) -> None:
    _gen_sliding(board, piece, QUEEN_DIRS, moves)


def _gen_king(board: Board, piece: Piece, moves: list[Move]) -> None:
    _gen_offsets(board, piece, KING_OFFSETS, moves)
    _gen_castling(board, piece, moves)


def _gen_castling(board: Board, king: Piece, moves: list[Move]) -> None:
    """Castling candidates: rights held, king and rook unmoved, path empty.

    Attacked squares are not checked here; see :meth:`Board.legal_moves`.
    """
    if king.has_moved:
        return
    color = king.color
    rank = color.back_rank
    if king.square != Coordinate(KING_HOME_FILE, rank):
        return

    for flag, rook_file, empty_files, to_file, _ in _CASTLE_SIDES:
        if not board.castling & castle_right(flag, color):
            continue
        rook = board.piece_at(Coordinate(rook_file, rank))
        if (
            rook is None
            or rook.color != color
            or rook.piece_type != PieceType.ROOK
            or rook.has_moved
        ):
            continue
        if any(board.piece_at(Coordinate(f, rank)) is not None for f in empty_files):
            continue
        moves.append(Move(king.square, Coordinate(to_file, rank), flag))


_GENERATORS: dict[PieceType, Callable[[Board, Piece, list[Move]], None]] = {
    PieceType.PAWN: _gen_pawn,
    PieceType.KNIGHT: _gen_knight,
    PieceType.BISHOP: _gen_bishop,
    PieceType.ROOK: _gen_rook,
    PieceType.QUEEN: _gen_queen,
    PieceType.KING: _gen_king,
}


# -- Public API -------------------------------------------------------------


def pseudo_legal_moves(board: Board, piece: Piece) -> list[Move]:
    """Moves obeying *piece*'s geometry and occupancy, ignoring own-king safety."""
    moves: list[Move] = []
    _GENERATORS[piece.piece_type](board, piece, moves)
    return moves


def is_square_attacked(board: Board, sq: Coordinate, by_color: Color) -> bool:
    """Is *sq* attacked by any piece of *by_color*?

    Pawns attack diagonally whether or not the square is occupied, which
    matters for castling transit squares.
    """
    pawn_rank_step = -by_color.forward
    for df in (-1, 1):
        from_sq = sq.offset(df, pawn_rank_step)
        if from_sq is not None and _is(board, from_sq, by_color, PieceType.PAWN):
            return True

    for df, dr in KNIGHT_OFFSETS:
        from_sq = sq.offset(df, dr)
        if from_sq is not None and _is(board, from_sq, by_color, PieceType.KNIGHT):
            return True

    for df, dr in KING_OFFSETS:
        from_sq = sq.offset(df, dr)
        if from_sq is not None and _is(board, from_sq, by_color, PieceType.KING):
            return True

    if _ray_hits(board, sq, by_color, BISHOP_DIRS, PieceType.BISHOP):
        return True
    return _ray_hits(board, sq, by_color, ROOK_DIRS, PieceType.ROOK)


def _is(board: Board, sq: Coordinate, color: Color, piece_type: PieceType) -> bool:
    piece = board.piece_at(sq)
    return piece is not None and piece.color == color and piece.piece_type == piece_type


def _ray_hits(
    board: Board,
    sq: Coordinate,
    by_color: Color,
    directions: tuple[tuple[int, int], ...],
    slider: PieceType,
) -> bool:
    for df, dr in directions:
        cur = sq.offset(df, dr)
        while cur is not None:
            piece = board.piece_at(cur)
            if piece is None:
                cur = cur.offset(df, dr)
                continue
            if piece.color == by_color and piece.piece_type in (
                slider,
                PieceType.QUEEN,
            ):
                return True
            break
    return False
