from __future__ import annotations


class InvalidSquareError(ValueError):
    """Malformed square text or out-of-range coordinates."""


class InvalidFENError(ValueError):
    """FEN text that cannot be decoded into a position."""


class IllegalMoveError(ValueError):
    """Move that is not in the legal-move set of the current position.

    Covers wrong turn, empty origin square, opponent's piece, and a missing
    or unexpected promotion piece.
    """


class StateConsistencyError(RuntimeError):
    """Board violates a structural invariant (e.g. a king is missing)."""
