"""Tests for Rules: checkmate, stalemate, draw detection."""

from rookery.core.board import Board
from rookery.core.enums import Color, GameEndReason, GameResult
from rookery.core.move import Move
from rookery.core.rules import IN_PROGRESS, Rules
from rookery.core.types import B1, B8, C3, C6, E2, E4

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


def _play(board: Board, *moves: str) -> None:
    for text in moves:
        move = Move.from_uci(text)
        assert board.submit(move) is not None, f"{text} rejected"


class TestCheck:
    def test_starting_not_in_check(self) -> None:
        assert not Rules.is_in_check(Board())

    def test_fools_mate_in_check(self) -> None:
        assert Rules.is_in_check(Board(FOOLS_MATE))


class TestCheckmate:
    def test_fools_mate(self) -> None:
        board = Board(FOOLS_MATE)
        assert Rules.is_checkmate(board)
        assert Rules.game_result(board) == GameResult.BLACK_WINS

    def test_fools_mate_played(self) -> None:
        board = Board()
        _play(board, "f2f3", "e7e5", "g2g4", "d8h4")
        assert board.status.result == GameResult.BLACK_WINS
        assert board.status.reason == GameEndReason.CHECKMATE
        assert board.status.winner == Color.BLACK

    def test_back_rank_mate(self) -> None:
        # R on a8 checks black king d8; white king d6 covers all escapes
        board = Board("R2k4/8/3K4/8/8/8/8/8 b - - 0 1")
        assert Rules.is_checkmate(board)
        assert Rules.game_result(board) == GameResult.WHITE_WINS

    def test_not_checkmate_when_can_escape(self) -> None:
        board = Board("R2k4/8/8/8/8/8/8/4K3 b - - 0 1")
        assert not Rules.is_checkmate(board)

    def test_no_moves_accepted_after_mate(self) -> None:
        board = Board(FOOLS_MATE)
        assert board.submit(Move(E2, E4)) is None


class TestStalemate:
    def test_queen_stalemate(self) -> None:
        board = Board("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
        assert Rules.is_stalemate(board)
        assert not Rules.is_checkmate(board)
        status = board.status
        assert status.result == GameResult.DRAW
        assert status.reason == GameEndReason.STALEMATE
        assert status.is_draw

    def test_start_is_not_stalemate(self) -> None:
        assert not Rules.is_stalemate(Board())


class TestInsufficientMaterial:
    def test_bare_kings(self) -> None:
        board = Board("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
        assert Rules.is_insufficient_material(board)
        assert board.status.reason == GameEndReason.INSUFFICIENT_MATERIAL
        assert board.status.result == GameResult.DRAW

    def test_bare_kings_in_corners(self) -> None:
        board = Board("8/8/8/8/8/8/8/K6k w - - 0 1")
        assert board.status.result == GameResult.DRAW
        assert board.status.reason == GameEndReason.INSUFFICIENT_MATERIAL

    def test_king_and_knight(self) -> None:
        assert Rules.is_insufficient_material(Board("4k3/8/8/8/8/8/8/1N2K3 w - - 0 1"))

    def test_king_and_bishop(self) -> None:
        assert Rules.is_insufficient_material(Board("4k3/8/8/8/8/8/8/2B1K3 w - - 0 1"))

    def test_opposing_bishops_same_square_color(self) -> None:
        # c1 and f8 are both dark squares
        board = Board("4kb2/8/8/8/8/8/8/2B1K3 w - - 0 1")
        assert Rules.is_insufficient_material(board)

    def test_opposing_bishops_different_square_color(self) -> None:
        # c1 dark, c8 light
        board = Board("2b1k3/8/8/8/8/8/8/2B1K3 w - - 0 1")
        assert not Rules.is_insufficient_material(board)

    def test_rook_is_sufficient(self) -> None:
        assert not Rules.is_insufficient_material(Board("4k3/8/8/8/8/8/8/R3K3 w - - 0 1"))

    def test_pawn_is_sufficient(self) -> None:
        assert not Rules.is_insufficient_material(Board("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1"))

    def test_capture_into_bare_kings(self) -> None:
        board = Board("4k3/8/8/8/8/8/3r4/4K3 w - - 0 1")
        _play(board, "e1d2")
        assert board.status.reason == GameEndReason.INSUFFICIENT_MATERIAL


class TestFiftyMoveRule:
    def test_triggers_at_100_halfmoves(self) -> None:
        board = Board("4k3/8/8/8/8/8/8/R3K3 w - - 99 60")
        assert board.status == IN_PROGRESS
        _play(board, "a1a2")
        assert board.halfmove_clock == 100
        assert board.status.reason == GameEndReason.FIFTY_MOVE_RULE
        assert board.status.result == GameResult.DRAW

    def test_loaded_position_already_drawn(self) -> None:
        board = Board("4k3/8/8/8/8/8/8/R3K3 w - - 100 80")
        assert Rules.is_fifty_move_rule(board)
        assert board.status.is_over

    def test_pawn_move_resets(self) -> None:
        board = Board("4k3/8/8/8/8/8/4P3/R3K3 w - - 99 60")
        _play(board, "e2e3")
        assert board.halfmove_clock == 0
        assert not board.status.is_over


class TestThreefoldRepetition:
    _SHUFFLE = ("b1c3", "b8c6", "c3b1", "c6b8")

    def test_third_occurrence_draws(self) -> None:
        board = Board()
        _play(board, *self._SHUFFLE)
        # Start position seen twice
        assert board.repetition_count() == 2
        assert not board.status.is_over
        _play(board, *self._SHUFFLE)
        assert board.repetition_count() == 3
        assert board.status.reason == GameEndReason.THREEFOLD_REPETITION
        assert board.status.result == GameResult.DRAW

    def test_not_over_before_final_move(self) -> None:
        board = Board()
        _play(board, *self._SHUFFLE, "b1c3", "b8c6", "c3b1")
        assert not board.status.is_over
        assert board[B1] is not None and board[C6] is not None
        assert board[B8] is None and board[C3] is None

    def test_undo_lowers_count(self) -> None:
        board = Board()
        _play(board, *self._SHUFFLE, "b1c3", "b8c6", "c3b1")
        snapshot = board.submit(Move.from_uci("c6b8"))
        assert snapshot is not None
        assert board.status.is_over
        board.undo(snapshot)
        assert not board.status.is_over
        assert board.repetition_count() == 2

    def test_uncapturable_en_passant_target_is_ignored(self) -> None:
        board = Board("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
        start_key = board.position_key
        _play(board, "g8f6", "g1f3", "f6g8", "f3g1")
        assert board.en_passant is None
        assert board.position_key == start_key
        assert board.repetition_count() == 2

    def test_evaluation_order_prefers_fifty_move(self) -> None:
        # Bare kings at halfmove 100: fifty-move rule is checked first.
        board = Board("4k3/8/8/8/8/8/8/4K3 w - - 100 80")
        assert board.status.reason == GameEndReason.FIFTY_MOVE_RULE
