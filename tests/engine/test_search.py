"""Tests for the minimax search engine."""

import pytest

from rookery.core.board import Board
from rookery.core.enums import Color, PieceType
from rookery.core.move import Move
from rookery.core.notation import board_to_fen
from rookery.core.types import parse_square
from rookery.engine import (
    PIECE_VALUES,
    MinimaxEngine,
    SearchLimits,
    evaluate_material,
    find_best_move,
)

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
BACK_RANK = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"


class TestEvaluation:
    def test_start_is_balanced(self) -> None:
        assert evaluate_material(Board()) == 0

    def test_extra_rook_for_white(self) -> None:
        board = Board("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        assert evaluate_material(board) == PIECE_VALUES[PieceType.ROOK]

    def test_black_material_is_negative(self) -> None:
        board = Board("3qk3/8/8/8/8/8/8/4K3 w - - 0 1")
        assert evaluate_material(board) == -PIECE_VALUES[PieceType.QUEEN]


class TestMinimaxEngine:
    def test_returns_legal_move_from_start(self) -> None:
        board = Board()
        engine = MinimaxEngine()

        result = engine.search(board, SearchLimits(max_depth=2))

        assert result.best_move in board.all_legal_moves()
        assert result.depth == 2
        assert result.nodes > 0
        assert engine.nodes == result.nodes

    def test_finds_mate_in_one(self) -> None:
        board = Board(BACK_RANK)
        result = MinimaxEngine().search(board, SearchLimits(max_depth=2))
        assert result.best_move == Move(parse_square("a1"), parse_square("a8"))
        assert result.score > 90_000

    def test_white_takes_hanging_queen(self) -> None:
        board = Board("4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1")
        move = find_best_move(board, 2, Color.WHITE)
        assert move == Move(parse_square("d1"), parse_square("d5"))

    def test_black_minimizes(self) -> None:
        board = Board("3rk3/8/8/8/3Q4/8/8/4K3 b - - 0 1")
        move = find_best_move(board, 2, Color.BLACK)
        assert move == Move(parse_square("d8"), parse_square("d4"))

    def test_no_move_when_checkmated(self) -> None:
        result = MinimaxEngine().search(Board(FOOLS_MATE), SearchLimits(max_depth=2))
        assert result.best_move is None
        assert result.score < 0

    def test_no_move_when_stalemated(self) -> None:
        board = Board("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
        assert find_best_move(board, 2, Color.BLACK) is None

    def test_ties_keep_first_generated_move(self) -> None:
        board = Board("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        move = find_best_move(board, 1, Color.WHITE)
        assert move == board.all_legal_moves(Color.WHITE)[0]

    def test_deterministic(self) -> None:
        board = Board()
        first = find_best_move(board, 2, Color.WHITE)
        second = find_best_move(board, 2, Color.WHITE)
        assert first == second

    def test_board_unchanged_after_search(self) -> None:
        board = Board("r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1")
        before = board.copy()
        fen = board_to_fen(board)

        MinimaxEngine().search(board, SearchLimits(max_depth=2))

        assert board == before
        assert board_to_fen(board) == fen
        board.check_invariants()

    def test_search_for_side_not_to_move(self) -> None:
        board = Board()
        move = find_best_move(board, 1, Color.BLACK)
        assert move is not None
        piece = board[move.from_sq]
        assert piece is not None and piece.color == Color.BLACK

    def test_zero_depth_rejected(self) -> None:
        with pytest.raises(ValueError):
            MinimaxEngine().search(Board(), SearchLimits(max_depth=0))

    def test_searched_promotion_carries_kind(self) -> None:
        board = Board("k7/4P3/8/8/8/8/8/K7 w - - 0 1")
        move = find_best_move(board, 1, Color.WHITE)
        assert move is not None
        assert move.promotion == PieceType.QUEEN
