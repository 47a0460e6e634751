"""Board: complete game state with legality filtering and apply/undo."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from rookery.core.enums import (
    PROMOTION_TYPES,
    CastlingRights,
    Color,
    MoveFlag,
    PieceType,
)
from rookery.core.exceptions import BoardInvariantError
from rookery.core.move import Move, MoveSnapshot, PendingPromotion
from rookery.core.move_generator import (
    castle_right,
    castle_side,
    is_square_attacked,
    pseudo_legal_moves,
)
from rookery.core.notation.fen import STARTING_FEN, FenFields, parse_fen
from rookery.core.piece import Piece
from rookery.core.rules import IN_PROGRESS, GameStatus, Rules
from rookery.core.types import Coordinate
from rookery.core.zobrist import (
    castling_key as zobrist_castling_key,
)
from rookery.core.zobrist import (
    en_passant_key as zobrist_en_passant_key,
)
from rookery.core.zobrist import (
    piece_key as zobrist_piece_key,
)
from rookery.core.zobrist import (
    side_to_move_key as zobrist_side_to_move_key,
)

_LOGGER = logging.getLogger(__name__)

_ROOK_CORNERS: dict[Coordinate, CastlingRights] = {
    Coordinate(0, 0): CastlingRights.WHITE_QUEENSIDE,
    Coordinate(7, 0): CastlingRights.WHITE_KINGSIDE,
    Coordinate(0, 7): CastlingRights.BLACK_QUEENSIDE,
    Coordinate(7, 7): CastlingRights.BLACK_KINGSIDE,
}
_ROOK_CASTLE_FILE: dict[MoveFlag, int] = {
    MoveFlag.CASTLE_KINGSIDE: 5,
    MoveFlag.CASTLE_QUEENSIDE: 3,
}


class Board:
    """Full chess state: pieces, side to move, castling, en passant, clocks.

    The board owns its :class:`Piece` objects in an ordered collection and
    indexes them through an 8x8 grid of references. Moves are applied with
    :meth:`apply`, which returns a :class:`MoveSnapshot` that the caller hands
    back to :meth:`undo`. Only *permanent* applications switch the side to
    move, update the repetition table and re-evaluate the game status;
    speculative ones (legality probes, search) change geometry and flags only
    and must be undone in strict LIFO order.
    """

    __slots__ = (
        "_pieces",
        "_grid",
        "active_color",
        "castling",
        "en_passant",
        "halfmove_clock",
        "fullmove_number",
        "_repetitions",
        "_key_stack",
        "_status",
        "_pending",
        "_pending_snapshot",
        "_applied",
        "_speculative",
    )

    def __init__(self, fen: str | None = None) -> None:
        fields = parse_fen(fen if fen is not None else STARTING_FEN)
        self._load(fields)

    @classmethod
    def initial(cls) -> Board:
        """Standard starting position."""
        return cls()

    def _load(self, fields: FenFields) -> None:
        self._pieces: list[Piece] = fields.pieces
        self._grid: list[list[Piece | None]] = [[None] * 8 for _ in range(8)]
        for piece in self._pieces:
            self._grid[piece.square.rank][piece.square.file] = piece

        self.active_color = fields.side_to_move
        self.castling = fields.castling
        self.en_passant = fields.en_passant
        self.halfmove_clock = fields.halfmove_clock
        self.fullmove_number = fields.fullmove_number
        self._derive_moved_flags()

        self._status: GameStatus | None = None
        self._pending: PendingPromotion | None = None
        self._pending_snapshot: MoveSnapshot | None = None
        self._applied = 0
        self._speculative = 0

        key = self._compute_position_key()
        self._key_stack: list[int] = [key]
        self._repetitions: dict[int, int] = {key: 1}
        _LOGGER.debug("Loaded position with %d pieces", len(self._pieces))

    def _derive_moved_flags(self) -> None:
        """Mark pieces that cannot still be on their starting squares."""
        for piece in self._pieces:
            sq = piece.square
            color = piece.color
            if piece.piece_type == PieceType.PAWN:
                piece.has_moved = sq.rank != color.back_rank + color.forward
            elif piece.piece_type == PieceType.KING:
                piece.has_moved = not (
                    sq == Coordinate(4, color.back_rank)
                    and self.castling & CastlingRights.both(color)
                )
            elif piece.piece_type == PieceType.ROOK:
                right = _ROOK_CORNERS.get(sq)
                piece.has_moved = not (
                    right is not None
                    and right & CastlingRights.both(color)
                    and self.castling & right
                )

    # ── Queries ──────────────────────────────────────────────────────────

    def piece_at(self, sq: Coordinate) -> Piece | None:
        return self._grid[sq.rank][sq.file]

    def __getitem__(self, sq: Coordinate) -> Piece | None:
        return self._grid[sq.rank][sq.file]

    def is_empty(self, sq: Coordinate) -> bool:
        return self._grid[sq.rank][sq.file] is None

    def pieces(
        self,
        color: Color | None = None,
        piece_type: PieceType | None = None,
    ) -> list[Piece]:
        """Pieces in collection order, optionally filtered."""
        return [
            p
            for p in self._pieces
            if (color is None or p.color == color)
            and (piece_type is None or p.piece_type == piece_type)
        ]

    def king(self, color: Color) -> Piece:
        """Return the single king of *color*."""
        for piece in self._pieces:
            if piece.color == color and piece.piece_type == PieceType.KING:
                return piece
        raise BoardInvariantError(f"No {color.name} king on board")

    @property
    def pending_promotion(self) -> PendingPromotion | None:
        """Set while a pawn waits on the back rank for its promotion kind."""
        return self._pending

    @property
    def status(self) -> GameStatus:
        """Game status as of the last permanent move (or construction)."""
        if self._pending is not None:
            return IN_PROGRESS
        if self._status is None:
            self._status = Rules.evaluate(self)
        return self._status

    @property
    def position_key(self) -> int:
        """Key of the current position in the repetition table."""
        return self._key_stack[-1]

    def repetition_count(self) -> int:
        """How many times the current position occurred in game history."""
        return self._repetitions.get(self._key_stack[-1], 0)

    @property
    def repetition_table(self) -> dict[int, int]:
        """Copy of the ``position key -> occurrences`` table."""
        return dict(self._repetitions)

    def capturable_en_passant(self) -> Coordinate | None:
        """The en-passant target, if a pawn of the side to move can take on it."""
        ep = self.en_passant
        if ep is None:
            return None
        mover = self.active_color
        victim_rank = ep.rank - mover.forward
        for df in (-1, 1):
            sq = Coordinate(ep.file, victim_rank).offset(df, 0)
            if sq is None:
                continue
            piece = self.piece_at(sq)
            if (
                piece is not None
                and piece.color == mover
                and piece.piece_type == PieceType.PAWN
            ):
                return ep
        return None

    # ── Check detection / legality ───────────────────────────────────────

    def is_square_attacked(self, sq: Coordinate, by_color: Color) -> bool:
        return is_square_attacked(self, sq, by_color)

    def is_king_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked by the opponent?"""
        return is_square_attacked(self, self.king(color).square, color.opposite)

    def pseudo_legal_moves(self, piece: Piece) -> list[Move]:
        self._require_on_board(piece)
        return pseudo_legal_moves(self, piece)

    def legal_moves(self, piece: Piece) -> list[Move]:
        """Pseudo-legal moves of *piece* that do not leave its king in check."""
        self._require_on_board(piece)
        if self._pending is not None:
            return []

        color = piece.color
        legal: list[Move] = []
        for move in pseudo_legal_moves(self, piece):
            if move.is_castle:
                if self._castling_path_safe(move, color):
                    legal.append(move)
                continue
            with self.probe(move):
                safe = not self.is_king_in_check(color)
            if safe:
                legal.append(move)
        return legal

    def all_legal_moves(self, color: Color | None = None) -> list[Move]:
        """All legal moves for *color* (default: side to move)."""
        side = self.active_color if color is None else color
        moves: list[Move] = []
        for piece in tuple(self._pieces):
            if piece.color == side:
                moves.extend(self.legal_moves(piece))
        return moves

    def has_legal_moves(self, color: Color) -> bool:
        return any(
            self.legal_moves(piece)
            for piece in tuple(self._pieces)
            if piece.color == color
        )

    def find_move(
        self,
        from_sq: Coordinate,
        to_sq: Coordinate,
        promotion: PieceType | None = None,
    ) -> Move | None:
        """Resolve a (from, to[, promotion]) request into a legal move.

        When a pawn reaches the last rank and *promotion* is ``None``, the
        returned move carries no kind; applying it permanently leaves the
        board waiting for :meth:`complete_promotion`.
        """
        piece = self.piece_at(from_sq)
        if piece is None:
            return None
        for move in self.legal_moves(piece):
            if move.to_sq != to_sq:
                continue
            if move.is_promotion and promotion is None:
                return Move(from_sq, to_sq, MoveFlag.PROMOTION, None, move.capture)
            if move.promotion == promotion:
                return move
        return None

    def _castling_path_safe(self, move: Move, color: Color) -> bool:
        """King's origin, transit and landing squares must all be unattacked."""
        _, _, _, _, king_files = castle_side(move.flag)
        rank = color.back_rank
        enemy = color.opposite
        return not any(
            is_square_attacked(self, Coordinate(f, rank), enemy) for f in king_files
        )

    def _require_on_board(self, piece: Piece) -> None:
        if self.piece_at(piece.square) is not piece:
            raise BoardInvariantError(f"{piece!r} is not on this board")

    # ── Move application ─────────────────────────────────────────────────

    def submit(self, move: Move) -> MoveSnapshot | None:
        """Permanently play *move* for the side to move if it is legal.

        Returns the snapshot of the applied move, or ``None`` (with no state
        change) when the move is not legal, the game is over or a promotion
        choice is pending.
        """
        if self._pending is not None or self.status.is_over:
            return None
        piece = self.piece_at(move.from_sq)
        if piece is None or piece.color != self.active_color:
            return None
        resolved = self.find_move(move.from_sq, move.to_sq, move.promotion)
        if resolved is None:
            return None
        return self.apply(resolved, permanent=True)

    def apply(self, move: Move, permanent: bool = False) -> MoveSnapshot:
        """Apply *move* and return the record needed to undo it.

        Permanent application of a promotion move without a kind stops
        after the pawn lands; the turn is finalized by
        :meth:`complete_promotion`.
        """
        if self._pending is not None:
            raise BoardInvariantError("A promotion choice is pending")
        if permanent and self._speculative:
            raise BoardInvariantError(
                "Cannot apply a permanent move while speculative moves are outstanding"
            )
        piece = self.piece_at(move.from_sq)
        if piece is None:
            raise BoardInvariantError(f"No piece on {move.from_sq.name}")
        if move.is_promotion:
            if move.promotion is None and not permanent:
                raise BoardInvariantError("Speculative promotion needs a piece kind")
            if move.promotion is not None and move.promotion not in PROMOTION_TYPES:
                raise BoardInvariantError(f"Cannot promote to {move.promotion.name}")

        captured_sq = move.to_sq
        if move.is_en_passant:
            captured_sq = Coordinate(move.to_sq.file, move.from_sq.rank)
        captured = self.piece_at(captured_sq)
        if captured is not None and captured.color == piece.color:
            raise BoardInvariantError(f"{move} would capture a friendly piece")

        self._applied += 1
        if not permanent:
            self._speculative += 1
        snapshot = MoveSnapshot(
            move=move,
            piece=piece,
            had_moved=piece.has_moved,
            castling=self.castling,
            en_passant=self.en_passant,
            halfmove_clock=self.halfmove_clock,
            permanent=permanent,
            token=self._applied,
        )

        # Remove captured piece (normal capture or en passant)
        if captured is not None:
            snapshot.captured = captured
            snapshot.captured_sq = captured_sq
            snapshot.captured_index = self._remove(captured)

        self._relocate(piece, move.to_sq)
        piece.has_moved = True

        # Slide the rook for castling
        if move.is_castle:
            _, rook_file, _, _, _ = castle_side(move.flag)
            rank = move.from_sq.rank
            rook_from = Coordinate(rook_file, rank)
            rook = self.piece_at(rook_from)
            if rook is None or rook.piece_type != PieceType.ROOK:
                raise BoardInvariantError(f"No rook on {rook_from.name} to castle with")
            snapshot.rook = rook
            snapshot.rook_from = rook_from
            snapshot.rook_had_moved = rook.has_moved
            self._relocate(rook, Coordinate(_ROOK_CASTLE_FILE[move.flag], rank))
            rook.has_moved = True

        # En passant target for the opponent
        if move.flag == MoveFlag.DOUBLE_PAWN:
            self.en_passant = Coordinate(
                move.from_sq.file, (move.from_sq.rank + move.to_sq.rank) // 2
            )
        else:
            self.en_passant = None

        self._update_castling(move, piece)

        # Clocks
        if piece.piece_type == PieceType.PAWN or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1

        if move.is_promotion:
            if move.promotion is None:
                self._pending = PendingPromotion(move.to_sq, piece.color)
                self._pending_snapshot = snapshot
                _LOGGER.debug("Promotion pending on %s", move.to_sq.name)
                return snapshot
            self._promote(snapshot, move.promotion)

        if permanent:
            self._finalize(snapshot)
        return snapshot

    def complete_promotion(self, piece_type: PieceType) -> MoveSnapshot:
        """Supply the promotion kind for the pending pawn and finish the turn."""
        snapshot = self._pending_snapshot
        if self._pending is None or snapshot is None:
            raise BoardInvariantError("No promotion is pending")
        if piece_type not in PROMOTION_TYPES:
            raise ValueError(f"Cannot promote to {piece_type.name}")
        self._promote(snapshot, piece_type)
        self._pending = None
        self._pending_snapshot = None
        self._finalize(snapshot)
        return snapshot

    def undo(self, snapshot: MoveSnapshot) -> None:
        """Revert the move recorded in *snapshot*.

        Snapshots must be undone exactly once and in reverse order of
        application.
        """
        if snapshot.consumed:
            raise BoardInvariantError("Snapshot was already undone")
        if snapshot.token != self._applied:
            raise BoardInvariantError("Snapshot is not the most recent application")
        move = snapshot.move
        piece = snapshot.piece
        placed = snapshot.promoted if snapshot.promoted is not None else piece
        if self.piece_at(move.to_sq) is not placed:
            raise BoardInvariantError(f"Snapshot does not match the board for {move}")

        if snapshot.finalized:
            key = self._key_stack.pop()
            count = self._repetitions[key] - 1
            if count:
                self._repetitions[key] = count
            else:
                del self._repetitions[key]
            self.active_color = self.active_color.opposite
            if self.active_color == Color.BLACK:
                self.fullmove_number -= 1
            self._status = None

        if snapshot is self._pending_snapshot:
            self._pending = None
            self._pending_snapshot = None

        # Restore pawn for promotion
        if snapshot.promoted is not None:
            self._pieces[self._pieces.index(snapshot.promoted)] = piece
            self._set(move.to_sq, piece)

        self._relocate(piece, move.from_sq)
        piece.has_moved = snapshot.had_moved

        # Undo rook slide for castling
        rook = snapshot.rook
        if rook is not None and snapshot.rook_from is not None:
            self._relocate(rook, snapshot.rook_from)
            rook.has_moved = snapshot.rook_had_moved

        captured = snapshot.captured
        if captured is not None and snapshot.captured_sq is not None:
            captured.square = snapshot.captured_sq
            self._pieces.insert(snapshot.captured_index, captured)
            self._set(snapshot.captured_sq, captured)

        self.castling = snapshot.castling
        self.en_passant = snapshot.en_passant
        self.halfmove_clock = snapshot.halfmove_clock

        snapshot.consumed = True
        self._applied -= 1
        if not snapshot.permanent:
            self._speculative -= 1

    @contextmanager
    def probe(self, move: Move) -> Iterator[MoveSnapshot]:
        """Apply *move* speculatively; it is undone on every exit path."""
        snapshot = self.apply(move, permanent=False)
        try:
            yield snapshot
        finally:
            self.undo(snapshot)

    # ── Internal mutation helpers ────────────────────────────────────────

    def _set(self, sq: Coordinate, piece: Piece | None) -> None:
        self._grid[sq.rank][sq.file] = piece

    def _relocate(self, piece: Piece, to_sq: Coordinate) -> None:
        self._set(piece.square, None)
        piece.square = to_sq
        self._set(to_sq, piece)

    def _remove(self, piece: Piece) -> int:
        index = self._pieces.index(piece)
        del self._pieces[index]
        self._set(piece.square, None)
        return index

    def _promote(self, snapshot: MoveSnapshot, piece_type: PieceType) -> None:
        pawn = snapshot.piece
        promoted = Piece(pawn.color, piece_type, pawn.square, has_moved=True)
        self._pieces[self._pieces.index(pawn)] = promoted
        self._set(pawn.square, promoted)
        snapshot.promoted = promoted

    def _update_castling(self, move: Move, piece: Piece) -> None:
        castling = self.castling
        if piece.piece_type == PieceType.KING:
            castling &= ~CastlingRights.both(piece.color)
        for sq in (move.from_sq, move.to_sq):
            right = _ROOK_CORNERS.get(sq)
            if right is not None:
                castling &= ~right
        self.castling = castling

    def _finalize(self, snapshot: MoveSnapshot) -> None:
        """Switch turn, record the position and re-evaluate the status."""
        if self.active_color == Color.BLACK:
            self.fullmove_number += 1
        self.active_color = self.active_color.opposite
        key = self._compute_position_key()
        self._key_stack.append(key)
        self._repetitions[key] = self._repetitions.get(key, 0) + 1
        snapshot.finalized = True
        self._status = Rules.evaluate(self)
        _LOGGER.debug(
            "Played %s; %s to move, status %s",
            snapshot.move,
            self.active_color,
            self._status.result.name,
        )

    def _compute_position_key(self) -> int:
        key = zobrist_castling_key(self.castling)
        if self.active_color == Color.BLACK:
            key ^= zobrist_side_to_move_key()
        ep = self.capturable_en_passant()
        if ep is not None:
            key ^= zobrist_en_passant_key(ep.file)
        for piece in self._pieces:
            key ^= zobrist_piece_key(piece.color, piece.piece_type, piece.square)
        return key

    # ── Utilities ────────────────────────────────────────────────────────

    def copy(self) -> Board:
        """Independent copy with the same position and repetition history.

        Undo records of this board do not apply to the copy.
        """
        if self._speculative or self._pending is not None:
            raise BoardInvariantError("Cannot copy a board mid-move")
        board = Board.__new__(Board)
        board._pieces = [p.clone() for p in self._pieces]
        board._grid = [[None] * 8 for _ in range(8)]
        for piece in board._pieces:
            board._set(piece.square, piece)
        board.active_color = self.active_color
        board.castling = self.castling
        board.en_passant = self.en_passant
        board.halfmove_clock = self.halfmove_clock
        board.fullmove_number = self.fullmove_number
        board._status = self._status
        board._pending = None
        board._pending_snapshot = None
        board._applied = 0
        board._speculative = 0
        board._key_stack = self._key_stack.copy()
        board._repetitions = self._repetitions.copy()
        return board

    def check_invariants(self) -> None:
        """Verify that the grid and the piece collection agree."""
        seen: set[int] = set()
        for piece in self._pieces:
            if id(piece) in seen:
                raise BoardInvariantError(f"{piece!r} appears twice in the collection")
            seen.add(id(piece))
            if self.piece_at(piece.square) is not piece:
                raise BoardInvariantError(f"Grid does not reference {piece!r}")
        occupied = sum(1 for row in self._grid for cell in row if cell is not None)
        if occupied != len(self._pieces):
            raise BoardInvariantError(
                f"Grid holds {occupied} pieces, collection holds {len(self._pieces)}"
            )

    # ── Dunder helpers ───────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self._placement() == other._placement()
            and self.active_color == other.active_color
            and self.castling == other.castling
            and self.en_passant == other.en_passant
            and self.halfmove_clock == other.halfmove_clock
            and self._repetitions == other._repetitions
        )

    __hash__ = None  # type: ignore[assignment]

    def _placement(self) -> list[tuple[Color, PieceType, bool] | None]:
        return [
            None if cell is None else (cell.color, cell.piece_type, cell.has_moved)
            for row in self._grid
            for cell in row
        ]

    def __repr__(self) -> str:
        rows: list[str] = []
        for rank in range(7, -1, -1):
            row = []
            for file in range(8):
                p = self._grid[rank][file]
                row.append(str(p) if p else ".")
            rows.append(f"{rank + 1} {' '.join(row)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
