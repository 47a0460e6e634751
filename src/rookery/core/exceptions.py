"""Exceptions raised by the rules engine."""

from __future__ import annotations


class ChessError(Exception):
    """Base exception for all rookery errors."""


class FenError(ChessError, ValueError):
    """Raised when a position string cannot be decoded.

    Construction fails as a whole; no partially built board is returned.
    """

    def __init__(self, reason: str, fen: str | None = None) -> None:
        self.reason = reason
        self.fen = fen
        message = reason if fen is None else f"{reason}: {fen!r}"
        super().__init__(message)


class BoardInvariantError(ChessError, RuntimeError):
    """Raised when the board is driven in a way its invariants forbid.

    Examples: a missing king during check evaluation, undoing a stale or
    already consumed snapshot, or applying a permanent move while a
    promotion choice is still pending. These are caller defects, not game
    states.
    """
