"""Tests for GameState."""

import pytest

from rookery.core.enums import Color, GameEndReason, GameResult, MoveFlag, PieceType
from rookery.core.exceptions import FenError
from rookery.core.move import Move
from rookery.core.notation import STARTING_FEN
from rookery.core.types import A7, A8, D5, D7, E2, E4, E5, parse_square
from rookery.game.interfaces import GamePhase
from rookery.game.state import GameState

PROMOTION_FEN = "4k3/P7/8/8/8/8/8/4K3 w - - 0 1"


class TestGameStateSetup:
    def test_position_is_available_before_setup(self) -> None:
        gs = GameState()
        assert gs.phase == GamePhase.NOT_STARTED
        assert gs.side_to_move == Color.WHITE

    def test_setup_default(self) -> None:
        gs = GameState()
        gs.setup()
        assert gs.phase == GamePhase.AWAITING_MOVE
        assert gs.result == GameResult.IN_PROGRESS
        assert gs.side_to_move == Color.WHITE
        assert gs.ply_count == 0
        assert gs.start_fen == STARTING_FEN

    def test_setup_custom_fen(self) -> None:
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
        gs = GameState()
        gs.setup(fen)
        assert gs.side_to_move == Color.BLACK
        assert gs.start_fen == fen

    def test_setup_resets(self) -> None:
        gs = GameState()
        gs.setup()
        gs.apply_move(Move(E2, E4))
        assert gs.ply_count == 1
        gs.setup()  # reset
        assert gs.ply_count == 0
        assert gs.side_to_move == Color.WHITE

    def test_bad_fen_leaves_state_untouched(self) -> None:
        gs = GameState()
        gs.setup()
        gs.apply_move(Move(E2, E4))
        with pytest.raises(FenError):
            gs.setup("not a fen")
        assert gs.ply_count == 1
        assert gs.side_to_move == Color.BLACK

    def test_setup_finished_position(self) -> None:
        gs = GameState()
        gs.setup("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
        assert gs.phase == GamePhase.GAME_OVER
        assert gs.reason == GameEndReason.INSUFFICIENT_MATERIAL


class TestGameStateMoves:
    def test_apply_move_records(self) -> None:
        gs = GameState()
        gs.setup()
        record = gs.apply_move(Move(E2, E4))
        assert record is not None
        assert record.move.flag == MoveFlag.DOUBLE_PAWN
        assert record.fen_after.startswith("rnbqkbnr/pppppppp/8/8/4P3/")
        assert not record.was_capture
        assert gs.side_to_move == Color.BLACK
        assert gs.ply_count == 1

    def test_illegal_move_returns_none(self) -> None:
        gs = GameState()
        gs.setup()
        assert gs.apply_move(Move(E2, E5)) is None
        assert gs.ply_count == 0

    def test_capture_recorded(self) -> None:
        gs = GameState()
        gs.setup()
        gs.apply_move(Move(E2, E4))
        gs.apply_move(Move(D7, D5))
        record = gs.apply_move(Move(E4, D5))
        assert record is not None and record.was_capture

    def test_check_recorded(self) -> None:
        gs = GameState()
        gs.setup("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        record = gs.apply_move(Move(parse_square("a1"), A8))
        assert record is not None and record.was_check

    def test_checkmate_ends_game(self) -> None:
        gs = GameState()
        gs.setup()
        for uci in ("f2f3", "e7e5", "g2g4", "d8h4"):
            assert gs.apply_move(Move.from_uci(uci)) is not None
        assert gs.is_game_over
        assert gs.result == GameResult.BLACK_WINS
        assert gs.reason == GameEndReason.CHECKMATE
        assert gs.legal_moves() == []

    def test_legal_moves_for_square(self) -> None:
        gs = GameState()
        gs.setup()
        assert len(gs.legal_moves(E2)) == 2
        assert gs.legal_moves(E4) == []
        assert len(gs.legal_moves()) == 20


class TestGameStatePromotion:
    def test_pending_phase(self) -> None:
        gs = GameState()
        gs.setup(PROMOTION_FEN)
        record = gs.apply_move(Move(A7, A8))
        assert record is not None
        assert gs.phase == GamePhase.AWAITING_PROMOTION
        assert gs.pending_promotion is not None
        assert record.promotion is None

    def test_complete_promotion(self) -> None:
        gs = GameState()
        gs.setup(PROMOTION_FEN)
        gs.apply_move(Move(A7, A8))
        record = gs.complete_promotion(PieceType.ROOK)
        assert record is not None
        assert record.promotion == PieceType.ROOK
        assert str(record.move) == "a7a8r"
        assert record.was_check
        assert gs.phase == GamePhase.AWAITING_MOVE
        assert gs.side_to_move == Color.BLACK

    @pytest.mark.parametrize("kind", [PieceType.KING, PieceType.PAWN])
    def test_complete_rejects_invalid_kind(self, kind: PieceType) -> None:
        gs = GameState()
        gs.setup(PROMOTION_FEN)
        gs.apply_move(Move(A7, A8))
        assert gs.complete_promotion(kind) is None
        assert gs.phase == GamePhase.AWAITING_PROMOTION
        assert gs.pending_promotion is not None
        assert gs.move_history[-1].promotion is None

    def test_complete_without_pending(self) -> None:
        gs = GameState()
        gs.setup(PROMOTION_FEN)
        assert gs.complete_promotion(PieceType.QUEEN) is None

    def test_undo_pending_promotion(self) -> None:
        gs = GameState()
        gs.setup(PROMOTION_FEN)
        gs.apply_move(Move(A7, A8))
        gs.undo_last_move()
        assert gs.phase == GamePhase.AWAITING_MOVE
        assert gs.pending_promotion is None
        assert gs.board[A7] is not None


class TestGameStateUndo:
    def test_undo_single(self) -> None:
        gs = GameState()
        gs.setup()
        gs.apply_move(Move(E2, E4))
        undone = gs.undo_last_move()
        assert undone is not None and undone.to_sq == E4
        assert gs.side_to_move == Color.WHITE
        assert gs.ply_count == 0

    def test_undo_empty(self) -> None:
        gs = GameState()
        gs.setup()
        assert gs.undo_last_move() is None

    def test_undo_restores_position(self) -> None:
        gs = GameState()
        gs.setup()
        gs.apply_move(Move(E2, E4))
        gs.apply_move(Move(D7, D5))
        gs.undo_last_move()
        gs.undo_last_move()
        assert gs.board.piece_at(E2) is not None
        assert gs.board.piece_at(D7) is not None
        assert gs.board.repetition_count() == 1
