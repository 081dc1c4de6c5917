from __future__ import annotations

from .board import Board
from .movegen import pseudo_legal_targets
from .types import Color, PieceType, Square


def is_square_attacked(square: Square, by_color: Color, board: Board) -> bool:
    """Return True if any piece of ``by_color`` attacks ``square`` on ``board``.

    Pawns attack only along their capture diagonals, whatever occupies the
    target; forward pushes never attack. Every other piece type reuses
    pseudo-legal generation, so an own piece on ``square`` shields it.
    """
    for from_sq, piece in board.pieces(by_color):
        if piece.piece_type is PieceType.PAWN:
            if (
                from_sq.row + by_color.forward == square.row
                and abs(from_sq.file - square.file) == 1
            ):
                return True
        elif square in pseudo_legal_targets(from_sq, board):
            return True
    return False


def is_king_in_check(color: Color, board: Board) -> bool:
    """Return True if ``color``'s king is attacked by the opponent on ``board``.

    Raises:
        StateConsistencyError: If ``color`` has no king on ``board``.
    """
    return is_square_attacked(board.king_square(color), color.opponent, board)
