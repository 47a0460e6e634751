"""Move value object and the undo record produced when it is applied."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rookery.core.enums import CastlingRights, MoveFlag, PieceType
from rookery.core.types import Coordinate, parse_square

if TYPE_CHECKING:
    from rookery.core.enums import Color
    from rookery.core.piece import Piece

_PROMO_CHARS: dict[PieceType, str] = {
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
}
_PROMO_CHARS_REV: dict[str, PieceType] = {v: k for k, v in _PROMO_CHARS.items()}


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable value object representing a single chess move.

    ``capture`` is informational and does not take part in equality, so a
    caller can match a generated move without knowing whether it captures.
    """

    from_sq: Coordinate
    to_sq: Coordinate
    flag: MoveFlag = MoveFlag.NORMAL
    promotion: PieceType | None = None
    capture: bool = field(default=False, compare=False)

    # ── Classification ───────────────────────────────────────────────────

    @property
    def is_castle(self) -> bool:
        return self.flag in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE)

    @property
    def is_en_passant(self) -> bool:
        return self.flag == MoveFlag.EN_PASSANT

    @property
    def is_promotion(self) -> bool:
        return self.flag == MoveFlag.PROMOTION

    # ── Display ──────────────────────────────────────────────────────────

    def __str__(self) -> str:
        base = f"{self.from_sq.name}{self.to_sq.name}"
        if self.promotion is not None:
            base += _PROMO_CHARS.get(self.promotion, "")
        return base

    @property
    def uci(self) -> str:
        """UCI long-algebraic notation."""
        return str(self)

    @classmethod
    def from_uci(cls, text: str) -> Move:
        """Parse ``e2e4`` / ``e7e8q`` into a plain move.

        Flags are not inferred here; use :meth:`Board.find_move` to resolve
        the generated move carrying the right flag.
        """
        if len(text) not in (4, 5):
            raise ValueError(f"Invalid UCI move: {text!r}")
        promotion: PieceType | None = None
        if len(text) == 5:
            try:
                promotion = _PROMO_CHARS_REV[text[4]]
            except KeyError:
                raise ValueError(f"Invalid promotion piece in {text!r}") from None
        flag = MoveFlag.PROMOTION if promotion is not None else MoveFlag.NORMAL
        return cls(parse_square(text[:2]), parse_square(text[2:4]), flag, promotion)


@dataclass(slots=True)
class MoveSnapshot:
    """Everything :meth:`Board.apply` mutated, so :meth:`Board.undo` can revert it.

    Owned by whoever performed the move; the board does not keep it.
    """

    move: Move
    piece: Piece
    had_moved: bool
    castling: CastlingRights
    en_passant: Coordinate | None
    halfmove_clock: int
    permanent: bool
    token: int
    captured: Piece | None = None
    captured_sq: Coordinate | None = None
    captured_index: int = -1
    rook: Piece | None = None
    rook_from: Coordinate | None = None
    rook_had_moved: bool = False
    promoted: Piece | None = None
    finalized: bool = False
    consumed: bool = False


@dataclass(frozen=True, slots=True)
class PendingPromotion:
    """A pawn waiting on the back rank for its promotion choice."""

    square: Coordinate
    color: Color
