"""Application entry point."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Sequence

from rookery.config import Settings
from rookery.core.enums import Color, PieceType
from rookery.core.exceptions import FenError
from rookery.core.move import Move
from rookery.core.notation import board_to_fen
from rookery.game import AIPlayer, GameController, GamePhase, HumanPlayer, IPlayer
from rookery.game.state import GameState, MoveRecord

_LOGGER = logging.getLogger(__name__)

_PROMOTION_CHOICES = {
    "q": PieceType.QUEEN,
    "r": PieceType.ROOK,
    "b": PieceType.BISHOP,
    "n": PieceType.KNIGHT,
}

InputFn = Callable[[str], str]


def _make_player(kind: str, color: Color, depth: int) -> IPlayer:
    if kind == "engine":
        return AIPlayer(color, name=f"Engine ({color.name.lower()})", depth=depth)
    return HumanPlayer(color, name=color.name.capitalize())


def _print_move(record: MoveRecord, state: GameState) -> None:
    check = "+" if record.was_check else ""
    print(f"{state.ply_count:>3}. {record.move}{check}")


def _print_position(ctrl: GameController) -> None:
    print(repr(ctrl.state.board))
    print(board_to_fen(ctrl.state.board))


def _read_human_move(ctrl: GameController, read: InputFn) -> bool:
    """Handle one line of human input. Returns False to quit."""
    state = ctrl.state
    prompt = f"{state.side_to_move.name.lower()}> "
    if state.phase == GamePhase.AWAITING_PROMOTION:
        prompt = "promote to [q/r/b/n]> "

    try:
        text = read(prompt).strip().lower()
    except EOFError:
        return False

    if text in ("quit", "exit"):
        return False
    if text == "undo":
        if not ctrl.undo_move():
            print("Nothing to undo.")
        return True
    if text == "board":
        _print_position(ctrl)
        return True
    if text == "moves":
        print(" ".join(str(m) for m in state.legal_moves()))
        return True

    if state.phase == GamePhase.AWAITING_PROMOTION:
        kind = _PROMOTION_CHOICES.get(text)
        if kind is None or not ctrl.choose_promotion(kind):
            print("Choose one of q, r, b, n.")
        return True

    try:
        request = Move.from_uci(text)
    except ValueError:
        print(f"Cannot read move {text!r}; use coordinates like e2e4.")
        return True
    move = state.board.find_move(request.from_sq, request.to_sq, request.promotion)
    if move is None or not ctrl.submit_move(move):
        print(f"Illegal move: {text}")
    return True


def run(settings: Settings, read: InputFn = input) -> int:
    """Play one game with the configured players. Returns an exit code."""
    ctrl = GameController(max_plies=settings.max_plies)
    ctrl.events.on_move.append(_print_move)
    ctrl.events.on_promotion_pending.append(
        lambda pending: print(f"Promotion pending on {pending.square}")
    )

    white = _make_player(settings.white, Color.WHITE, settings.engine_depth)
    black = _make_player(settings.black, Color.BLACK, settings.engine_depth)

    try:
        # Engine-vs-engine games run inside new_game until the ply limit.
        ctrl.new_game(white, black, settings.start_fen)
    except FenError as exc:
        print(f"Invalid position: {exc}", file=sys.stderr)
        return 2

    while not ctrl.state.is_game_over:
        if ctrl.state.ply_count >= settings.max_plies:
            print(f"Stopped after {settings.max_plies} plies.")
            break
        current = ctrl.current_player
        if current is None or not current.is_human:
            _LOGGER.warning("No move available for %s", ctrl.state.side_to_move.name)
            break
        if not _read_human_move(ctrl, read):
            break

    _print_position(ctrl)
    state = ctrl.state
    if state.is_game_over:
        print(f"Result: {state.result.name} ({state.reason.name.lower()})")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Launch the rookery console."""
    settings = Settings.from_args(argv)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(run(settings))


if __name__ == "__main__":
    main()
