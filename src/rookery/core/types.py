"""Coordinate value type and square helpers.

Board layout (file, rank), both 0-7:
    a1 = (0, 0), h1 = (7, 0)
    a8 = (0, 7), h8 = (7, 7)

Rank 0 is White's back rank.
"""

from __future__ import annotations

from typing import NamedTuple

_FILES = "abcdefgh"
_RANKS = "12345678"


def in_bounds(file: int, rank: int) -> bool:
    """Whether (*file*, *rank*) lies on the 8x8 board."""
    return 0 <= file < 8 and 0 <= rank < 8


class Coordinate(NamedTuple):
    """Immutable board square."""

    file: int
    rank: int

    def offset(self, df: int, dr: int) -> Coordinate | None:
        """Square shifted by (*df*, *dr*), or ``None`` when off the board."""
        file = self.file + df
        rank = self.rank + dr
        if in_bounds(file, rank):
            return Coordinate(file, rank)
        return None

    @property
    def name(self) -> str:
        """Algebraic name, e.g. ``e4``."""
        return _FILES[self.file] + _RANKS[self.rank]

    @property
    def is_light(self) -> bool:
        """a1 is dark, h1 is light."""
        return (self.file + self.rank) % 2 == 1

    def __str__(self) -> str:
        return self.name


def parse_square(name: str) -> Coordinate:
    """Parse square name, e.g. 'e4' -> (4, 3)."""
    if len(name) != 2 or name[0] not in _FILES or name[1] not in _RANKS:
        raise ValueError(f"Invalid square name: {name!r}")
    return Coordinate(_FILES.index(name[0]), _RANKS.index(name[1]))


ALL_SQUARES: tuple[Coordinate, ...] = tuple(
    Coordinate(f, r) for r in range(8) for f in range(8)
)

# ── Named square constants ──────────────────────────────────────────────────

A1, B1, C1, D1, E1, F1, G1, H1 = ALL_SQUARES[0:8]
A2, B2, C2, D2, E2, F2, G2, H2 = ALL_SQUARES[8:16]
A3, B3, C3, D3, E3, F3, G3, H3 = ALL_SQUARES[16:24]
A4, B4, C4, D4, E4, F4, G4, H4 = ALL_SQUARES[24:32]
A5, B5, C5, D5, E5, F5, G5, H5 = ALL_SQUARES[32:40]
A6, B6, C6, D6, E6, F6, G6, H6 = ALL_SQUARES[40:48]
A7, B7, C7, D7, E7, F7, G7, H7 = ALL_SQUARES[48:56]
A8, B8, C8, D8, E8, F8, G8, H8 = ALL_SQUARES[56:64]
