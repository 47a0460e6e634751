"""Game management layer — controller, players, state machine.

Quick start::

    from rookery.game import AIPlayer, GameController, HumanPlayer

    ctrl = GameController()
    ctrl.new_game(
        white=HumanPlayer(Color.WHITE, "Alice"),
        black=AIPlayer(Color.BLACK, depth=2),
    )
"""

from rookery.game.controller import GameController, GameEvents
from rookery.game.interfaces import GamePhase, IGameController, IPlayer
from rookery.game.player import AIPlayer, HumanPlayer
from rookery.game.state import GameState, MoveRecord

__all__ = [
    # Interfaces
    "GamePhase",
    "IGameController",
    "IPlayer",
    # Concrete
    "AIPlayer",
    "GameController",
    "GameEvents",
    "GameState",
    "HumanPlayer",
    "MoveRecord",
]
