from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .errors import InvalidSquareError


FILES = "abcdefgh"
BOARD_SIZE = 8


class Color(str, Enum):
    """Side of a piece; values match the FEN active-colour field."""

    WHITE = "w"
    BLACK = "b"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """Row delta of a pawn advance (row 0 is rank 8)."""
        return -1 if self is Color.WHITE else 1

    @property
    def home_row(self) -> int:
        return 7 if self is Color.WHITE else 0

    @property
    def pawn_row(self) -> int:
        return 6 if self is Color.WHITE else 1

    @property
    def promotion_row(self) -> int:
        return 0 if self is Color.WHITE else 7


class PieceType(str, Enum):
    """Piece kind; values are the lowercase FEN/UCI letters."""

    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"


PROMOTION_TYPES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)


@dataclass(frozen=True)
class Piece:
    """Immutable piece value. Relocation produces a copy with ``has_moved`` set."""

    piece_type: PieceType
    color: Color
    has_moved: bool = False

    @property
    def fen_char(self) -> str:
        ch = self.piece_type.value
        return ch.upper() if self.color is Color.WHITE else ch

    @classmethod
    def from_fen_char(cls, ch: str, *, has_moved: bool = False) -> "Piece":
        """Create a piece from a FEN letter (uppercase = white).

        Raises:
            ValueError: If ``ch`` is not one of ``pnbrqkPNBRQK``.
        """
        try:
            ptype = PieceType(ch.lower())
        except ValueError:
            raise ValueError(f"invalid piece character: {ch!r}") from None
        color = Color.WHITE if ch.isupper() else Color.BLACK
        return cls(ptype, color, has_moved)

    def moved(self) -> "Piece":
        return self if self.has_moved else replace(self, has_moved=True)


@dataclass(frozen=True, order=True)
class Square:
    """Board coordinate: ``file`` 0..7 is a..h, ``row`` 0..7 is rank 8..1."""

    file: int
    row: int

    def __post_init__(self) -> None:
        if not (0 <= self.file < BOARD_SIZE and 0 <= self.row < BOARD_SIZE):
            raise InvalidSquareError(f"square out of range: file={self.file}, row={self.row}")

    @property
    def rank(self) -> int:
        """Chess rank number 1..8."""
        return BOARD_SIZE - self.row

    @property
    def name(self) -> str:
        return FILES[self.file] + str(self.rank)

    def offset(self, d_file: int, d_row: int) -> Optional["Square"]:
        """Return the square displaced by the given deltas, or None off the board."""
        f = self.file + d_file
        r = self.row + d_row
        if 0 <= f < BOARD_SIZE and 0 <= r < BOARD_SIZE:
            return Square(f, r)
        return None

    def __str__(self) -> str:
        return self.name


def parse_square(text: object) -> Optional[Square]:
    """Parse algebraic square text such as ``"e4"``.

    Total: any malformed or out-of-range input yields ``None`` instead of
    raising, so callers can pre-validate user input.
    """
    if not isinstance(text, str) or len(text) != 2:
        return None
    file_ch, rank_ch = text[0], text[1]
    if file_ch not in FILES or rank_ch not in "12345678":
        return None
    return Square(FILES.index(file_ch), BOARD_SIZE - int(rank_ch))


@dataclass(frozen=True)
class CastlingRights:
    """Four independent castling flags.

    Rights only ever decrease during play; ``without`` returns a reduced copy.
    """

    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)

    @classmethod
    def from_fen(cls, field: str) -> "CastlingRights":
        """Decode the FEN castling field (``-`` or a subset of ``KQkq``).

        Raises:
            ValueError: On any character outside ``KQkq``.
        """
        if field == "-":
            return cls.none()
        for ch in field:
            if ch not in "KQkq":
                raise ValueError("invalid castling rights")
        return cls("K" in field, "Q" in field, "k" in field, "q" in field)

    def to_fen(self) -> str:
        out = ""
        if self.white_kingside:
            out += "K"
        if self.white_queenside:
            out += "Q"
        if self.black_kingside:
            out += "k"
        if self.black_queenside:
            out += "q"
        return out or "-"

    def has(self, color: Color, kingside: bool) -> bool:
        if color is Color.WHITE:
            return self.white_kingside if kingside else self.white_queenside
        return self.black_kingside if kingside else self.black_queenside

    def without(
        self, color: Color, *, kingside: bool = False, queenside: bool = False
    ) -> "CastlingRights":
        changes: dict[str, bool] = {}
        prefix = "white" if color is Color.WHITE else "black"
        if kingside:
            changes[f"{prefix}_kingside"] = False
        if queenside:
            changes[f"{prefix}_queenside"] = False
        return replace(self, **changes) if changes else self

    def as_dict(self) -> dict[str, bool]:
        return {
            "white_kingside": self.white_kingside,
            "white_queenside": self.white_queenside,
            "black_kingside": self.black_kingside,
            "black_queenside": self.black_queenside,
        }
