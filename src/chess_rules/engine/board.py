from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from .errors import StateConsistencyError
from .types import BOARD_SIZE, Color, Piece, PieceType, Square


BACK_RANK = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


class Board:
    """8x8 piece placement.

    Notes:
    - ``grid[row][file]`` with row 0 holding rank 8, matching the square type.
    - Pieces are immutable values, so :meth:`copy` only duplicates the rows;
      a copy never aliases the original's storage.
    """

    __slots__ = ("_grid",)

    def __init__(self, grid: Optional[List[List[Optional[Piece]]]] = None) -> None:
        if grid is None:
            grid = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        elif len(grid) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in grid):
            raise ValueError("board grid must be 8x8")
        else:
            grid = [list(row) for row in grid]
        self._grid = grid

    @classmethod
    def initial(cls) -> "Board":
        """Standard starting position with every piece unmoved."""
        b = cls()
        for f, pt in enumerate(BACK_RANK):
            b._grid[Color.BLACK.home_row][f] = Piece(pt, Color.BLACK)
            b._grid[Color.BLACK.pawn_row][f] = Piece(PieceType.PAWN, Color.BLACK)
            b._grid[Color.WHITE.pawn_row][f] = Piece(PieceType.PAWN, Color.WHITE)
            b._grid[Color.WHITE.home_row][f] = Piece(pt, Color.WHITE)
        return b

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Optional[Piece]:
        return self._grid[sq.row][sq.file]

    def __setitem__(self, sq: Square, piece: Optional[Piece]) -> None:
        self._grid[sq.row][sq.file] = piece

    def is_empty(self, sq: Square) -> bool:
        return self._grid[sq.row][sq.file] is None

    def rows(self) -> List[List[Optional[Piece]]]:
        """Return the grid as fresh nested lists (row 0 = rank 8)."""
        return [list(row) for row in self._grid]

    # -- Query helpers ------------------------------------------------------

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Square, Piece]]:
        """Yield ``(square, piece)`` in row-major order, optionally for one colour."""
        for r, row in enumerate(self._grid):
            for f, piece in enumerate(row):
                if piece is not None and (color is None or piece.color is color):
                    yield Square(f, r), piece

    def find_king(self, color: Color) -> Optional[Square]:
        for sq, piece in self.pieces(color):
            if piece.piece_type is PieceType.KING:
                return sq
        return None

    def king_square(self, color: Color) -> Square:
        """Return the king square for *color*.

        Raises:
            StateConsistencyError: If the board has no king of that colour.
        """
        sq = self.find_king(color)
        if sq is None:
            raise StateConsistencyError(f"no {color.name} king on board")
        return sq

    # -- Copying ------------------------------------------------------------

    def copy(self) -> "Board":
        b = Board.__new__(Board)
        b._grid = [list(row) for row in self._grid]
        return b

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._grid == other._grid

    def __repr__(self) -> str:
        lines: List[str] = []
        for r, row in enumerate(self._grid):
            cells = [p.fen_char if p else "." for p in row]
            lines.append(f"{BOARD_SIZE - r} {' '.join(cells)}")
        lines.append("  a b c d e f g h")
        return "\n".join(lines)
