from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidSquareError
from .types import PROMOTION_TYPES, PieceType, Square, parse_square


PROMOTION_LETTERS = {t.value: t for t in PROMOTION_TYPES}


@dataclass(frozen=True)
class Move:
    """Move boundary type.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        promotion (Optional[PieceType]): Piece a pawn reaching the last rank
            turns into. Required for such moves; the engine never picks one.
    """

    from_sq: Square
    to_sq: Square
    promotion: Optional[PieceType] = None

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = self.promotion.value if self.promotion is not None else ""
        return self.from_sq.name + self.to_sq.name + promo

    def __str__(self) -> str:
        return self.to_uci()


def parse_uci(uci: str) -> Move:
    """Parse a UCI move string.

    Args:
        uci (str): Move encoded in long algebraic notation (e.g. ``"e2e4"``).

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length or promotion piece.
        InvalidSquareError: If either square is malformed.
    """
    if not isinstance(uci, str) or len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    promo: Optional[PieceType] = None
    if len(uci) == 5:
        letter = uci[4].lower()
        if letter not in PROMOTION_LETTERS:
            raise ValueError(f"invalid promotion piece: {letter!r}")
        promo = PROMOTION_LETTERS[letter]
    return Move(from_sq, to_sq, promo)


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a square, raising on bad input.

    Strict counterpart of :func:`parse_square`.

    Raises:
        InvalidSquareError: If ``s`` is not a valid square.
    """
    sq = parse_square(s)
    if sq is None:
        raise InvalidSquareError(f"invalid square: {s!r}")
    return sq


def square_to_str(sq: Square) -> str:
    return sq.name
