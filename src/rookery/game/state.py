"""Game state machine — tracks phase transitions and move history."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from rookery.core.board import Board
from rookery.core.enums import (
    PROMOTION_TYPES,
    Color,
    GameEndReason,
    GameResult,
    PieceType,
)
from rookery.core.move import Move, MoveSnapshot, PendingPromotion
from rookery.core.notation import STARTING_FEN, board_to_fen
from rookery.core.types import Coordinate
from rookery.game.interfaces import GamePhase

_LOGGER = logging.getLogger(__name__)


@dataclass
class MoveRecord:
    """A single entry in the move history."""

    move: Move
    snapshot: MoveSnapshot
    fen_after: str = ""
    was_check: bool = False
    was_capture: bool = False

    @property
    def promotion(self) -> PieceType | None:
        promoted = self.snapshot.promoted
        return promoted.piece_type if promoted is not None else None


@dataclass
class GameState:
    """Manages game lifecycle: phase, result, move history, promotions.

    This is a pure data/logic class — no threading, no UI.
    """

    board: Board = field(default_factory=Board, init=False)
    phase: GamePhase = field(default=GamePhase.NOT_STARTED, init=False)
    move_history: list[MoveRecord] = field(default_factory=list, init=False)
    start_fen: str = field(default=STARTING_FEN, init=False)

    # ── Initialisation ───────────────────────────────────────────────────

    def setup(self, fen: str | None = None) -> None:
        """Initialise (or reset) the game with a brand new board."""
        board = Board(fen)  # raises FenError before any state changes
        self.start_fen = fen or STARTING_FEN
        self.board = board
        self.move_history.clear()
        self.phase = (
            GamePhase.GAME_OVER if board.status.is_over else GamePhase.AWAITING_MOVE
        )

    # ── Move application ─────────────────────────────────────────────────

    def apply_move(self, move: Move) -> MoveRecord | None:
        """Play *move* if legal; ``None`` means rejected with no change.

        A pawn reaching the last rank without a chosen kind leaves the game
        in :attr:`GamePhase.AWAITING_PROMOTION`; the record is completed by
        :meth:`complete_promotion`.
        """
        snapshot = self.board.submit(move)
        if snapshot is None:
            return None

        record = MoveRecord(
            move=snapshot.move,
            snapshot=snapshot,
            was_capture=snapshot.captured is not None,
        )
        self.move_history.append(record)

        if self.board.pending_promotion is not None:
            self.phase = GamePhase.AWAITING_PROMOTION
            return record

        self._after_move(record)
        return record

    def complete_promotion(self, piece_type: PieceType) -> MoveRecord | None:
        """Finish a pending promotion.

        Returns ``None`` without touching the board when nothing is pending
        or *piece_type* is not a legal promotion choice.
        """
        if self.board.pending_promotion is None or not self.move_history:
            return None
        if piece_type not in PROMOTION_TYPES:
            _LOGGER.debug("Rejected promotion to %s", piece_type)
            return None
        self.board.complete_promotion(piece_type)
        record = self.move_history[-1]
        record.move = replace(record.move, promotion=piece_type)
        self._after_move(record)
        return record

    def undo_last_move(self) -> Move | None:
        """Undo the last move. Returns the undone Move, or None if empty."""
        if not self.move_history:
            return None

        record = self.move_history.pop()
        self.board.undo(record.snapshot)
        self.phase = GamePhase.AWAITING_MOVE
        return record.move

    # ── Query helpers ────────────────────────────────────────────────────

    @property
    def side_to_move(self) -> Color:
        return self.board.active_color

    @property
    def result(self) -> GameResult:
        return self.board.status.result

    @property
    def reason(self) -> GameEndReason:
        return self.board.status.reason

    @property
    def pending_promotion(self) -> PendingPromotion | None:
        return self.board.pending_promotion

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def ply_count(self) -> int:
        """Number of half-moves played."""
        return len(self.move_history)

    def legal_moves(self, square: Coordinate | None = None) -> list[Move]:
        """Legal moves of the piece on *square*, or of the side to move."""
        if square is None:
            return self.board.all_legal_moves()
        piece = self.board.piece_at(square)
        if piece is None:
            return []
        return self.board.legal_moves(piece)

    # ── Internal ─────────────────────────────────────────────────────────

    def _after_move(self, record: MoveRecord) -> None:
        board = self.board
        record.fen_after = board_to_fen(board)
        record.was_check = board.is_king_in_check(board.active_color)
        if board.status.is_over:
            self.phase = GamePhase.GAME_OVER
            _LOGGER.info(
                "Game over: %s by %s",
                board.status.result.name,
                board.status.reason.name,
            )
        else:
            self.phase = GamePhase.AWAITING_MOVE
