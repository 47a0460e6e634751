"""Application settings."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import dataclass

from rookery.core.notation import STARTING_FEN

PLAYER_KINDS = ("human", "engine")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Settings:
    """All user-configurable settings."""

    # Engine
    engine_depth: int = 2

    # Game
    start_fen: str = STARTING_FEN
    white: str = "human"
    black: str = "engine"
    max_plies: int = 200  # cap for engine-vs-engine games

    # Diagnostics
    log_level: str = "WARNING"

    @classmethod
    def from_args(cls, argv: Sequence[str] | None = None) -> Settings:
        """Build settings from command-line arguments."""
        defaults = cls()
        parser = argparse.ArgumentParser(
            prog="rookery",
            description="Play or inspect chess positions in the terminal.",
        )
        parser.add_argument(
            "--fen",
            default=defaults.start_fen,
            help="starting position (default: the standard start)",
        )
        parser.add_argument(
            "--depth",
            type=_positive_int,
            default=defaults.engine_depth,
            help="engine search depth in plies (default: %(default)s)",
        )
        parser.add_argument(
            "--white", choices=PLAYER_KINDS, default=defaults.white
        )
        parser.add_argument(
            "--black", choices=PLAYER_KINDS, default=defaults.black
        )
        parser.add_argument(
            "--max-plies",
            type=_positive_int,
            default=defaults.max_plies,
            help="stop after this many half-moves (default: %(default)s)",
        )
        parser.add_argument(
            "--log-level",
            choices=LOG_LEVELS,
            default=defaults.log_level,
            type=str.upper,
        )
        args = parser.parse_args(argv)
        return cls(
            engine_depth=args.depth,
            start_fen=args.fen,
            white=args.white,
            black=args.black,
            max_plies=args.max_plies,
            log_level=args.log_level,
        )


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return value
