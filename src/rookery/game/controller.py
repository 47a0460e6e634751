"""GameController — the central orchestrator of a chess game.

Coordinates: Players, GameState, Board.
Emits events via simple callbacks so the UI / tests can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from rookery.core.enums import Color, GameResult, PieceType
from rookery.core.move import Move, PendingPromotion
from rookery.core.types import Coordinate
from rookery.game.interfaces import GamePhase, IGameController, IPlayer
from rookery.game.state import GameState, MoveRecord

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveRecord, "GameState"], None]
PromotionCallback = Callable[[PendingPromotion], None]
GameOverCallback = Callable[[GameResult], None]
PhaseCallback = Callable[[GamePhase], None]


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_promotion_pending: list[PromotionCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class GameController(IGameController):
    """Orchestrates a full chess game: validates moves, switches turns,
    drives automated players, notifies listeners.

    *max_plies* stops automated play after that many half-moves; human
    moves are never limited.

    Thread-safety: methods are designed to be called from a single thread.
    Automated sides are searched synchronously inside ``submit_move`` and
    ``new_game``.
    """

    __slots__ = (
        "_state",
        "_players",
        "_fen",
        "_driving",
        "_max_plies",
        "events",
    )

    def __init__(self, max_plies: int | None = None) -> None:
        self._state = GameState()
        self._players: dict[Color, IPlayer] = {}
        self._fen: str | None = None
        self._driving = False
        self._max_plies = max_plies
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def current_player(self) -> IPlayer | None:
        color = self._state.side_to_move
        return self._players.get(color)

    def player(self, color: Color) -> IPlayer | None:
        return self._players.get(color)

    # ── IGameController impl ─────────────────────────────────────────────

    def new_game(
        self,
        white: IPlayer,
        black: IPlayer,
        fen: str | None = None,
    ) -> None:
        state = GameState()
        state.setup(fen)  # FenError propagates; the previous game stays intact

        self._players = {Color.WHITE: white, Color.BLACK: black}
        self._fen = fen
        self._state = state
        _LOGGER.debug("New game: %s vs %s", white.name, black.name)

        if state.is_game_over:
            self._emit_game_over(state.result)
            return
        self._emit_phase(GamePhase.AWAITING_MOVE)
        self._drive_automated_players()

    def restart(self) -> None:
        """Start over from the same players and starting position."""
        white = self._players.get(Color.WHITE)
        black = self._players.get(Color.BLACK)
        if white is None or black is None:
            return
        self.new_game(white, black, self._fen)

    def submit_move(self, move: Move) -> bool:
        if not self._apply(move):
            return False
        self._drive_automated_players()
        return True

    def choose_promotion(self, piece_type: PieceType) -> bool:
        if self._state.phase != GamePhase.AWAITING_PROMOTION:
            return False
        record = self._state.complete_promotion(piece_type)
        if record is None:
            return False
        self._after_move(record)
        self._drive_automated_players()
        return True

    def legal_moves_for(self, square: Coordinate) -> list[Move]:
        if self._state.phase not in (GamePhase.AWAITING_MOVE, GamePhase.THINKING):
            return []
        piece = self._state.board.piece_at(square)
        if piece is None or piece.color != self._state.side_to_move:
            return []
        return self._state.legal_moves(square)

    def undo_move(self) -> bool:
        if self._state.is_game_over or not self._state.move_history:
            return False

        self._state.undo_last_move()
        self._emit_phase(GamePhase.AWAITING_MOVE)
        return True

    # ── Internal helpers ─────────────────────────────────────────────────

    def _apply(self, move: Move) -> bool:
        if self._state.phase not in (GamePhase.AWAITING_MOVE, GamePhase.THINKING):
            return False

        record = self._state.apply_move(move)
        if record is None:
            return False

        pending = self._state.pending_promotion
        if pending is not None:
            self._emit_phase(GamePhase.AWAITING_PROMOTION)
            for cb in self.events.on_promotion_pending:
                cb(pending)
            return True

        self._after_move(record)
        return True

    def _after_move(self, record: MoveRecord) -> None:
        for cb in self.events.on_move:
            cb(record, self._state)
        if self._state.is_game_over:
            self._emit_game_over(self._state.result)

    def _drive_automated_players(self) -> None:
        """Let automated players move until a human is to move or the game ends.

        Re-entrant calls made from event handlers return immediately.
        """
        if self._driving:
            return
        self._driving = True
        try:
            while self._state.phase == GamePhase.AWAITING_MOVE:
                cp = self.current_player
                if cp is None or cp.is_human:
                    return
                if (
                    self._max_plies is not None
                    and self._state.ply_count >= self._max_plies
                ):
                    _LOGGER.info("Ply limit %d reached", self._max_plies)
                    return
                self._state.phase = GamePhase.THINKING
                self._emit_phase(GamePhase.THINKING)
                move = cp.request_move(self._state.board)
                if move is None or not self._apply(move):
                    _LOGGER.warning("%s produced no playable move", cp.name)
                    self._state.phase = GamePhase.AWAITING_MOVE
                    return
        finally:
            self._driving = False

    def _emit_game_over(self, result: GameResult) -> None:
        self._emit_phase(GamePhase.GAME_OVER)
        for cb in self.events.on_game_over:
            cb(result)

    def _emit_phase(self, phase: GamePhase) -> None:
        for cb in self.events.on_phase_changed:
            cb(phase)
