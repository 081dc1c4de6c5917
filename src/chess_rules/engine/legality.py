from __future__ import annotations

from typing import List, Optional

from .attacks import is_king_in_check, is_square_attacked
from .board import Board
from .movegen import pseudo_legal_targets
from .types import CastlingRights, Color, Piece, PieceType, Square


KING_FILE = 4
KINGSIDE_ROOK_FILE = 7
QUEENSIDE_ROOK_FILE = 0


def legal_targets(
    square: Square,
    board: Board,
    side_to_move: Color,
    castling: CastlingRights,
    en_passant_target: Optional[Square],
) -> List[Square]:
    """Return the fully legal destinations of the piece on ``square``.

    A pseudo-legal candidate survives only if, after playing it on a clone
    of ``board`` (en-passant victim removed), the mover's king is not
    attacked. Castling destinations are appended afterwards.

    Returns:
        List[Square]: Empty when the square is empty or holds a piece of the
            side not to move.
    """
    piece = board[square]
    if piece is None or piece.color is not side_to_move:
        return []

    legal: List[Square] = []
    for target in pseudo_legal_targets(square, board, en_passant_target):
        trial = simulate(board, square, target, en_passant_target)
        if not is_king_in_check(side_to_move, trial):
            legal.append(target)

    if piece.piece_type is PieceType.KING:
        legal.extend(castling_targets(square, piece, board, castling))
    return legal


def simulate(
    board: Board, from_sq: Square, to_sq: Square, en_passant_target: Optional[Square]
) -> Board:
    """Play a plain relocation on a copy of ``board`` for the check test.

    The authoritative board is never touched.
    """
    trial = board.copy()
    mover = trial[from_sq]
    trial[to_sq] = mover
    trial[from_sq] = None
    if (
        mover is not None
        and mover.piece_type is PieceType.PAWN
        and to_sq == en_passant_target
        and board[to_sq] is None
    ):
        # Captured pawn sits beside the origin, on the destination file.
        trial[Square(to_sq.file, from_sq.row)] = None
    return trial


def castling_targets(
    square: Square, king: Piece, board: Board, castling: CastlingRights
) -> List[Square]:
    """King destinations (two files away) for each castling side that is legal.

    Requires an unmoved king on its home square, the matching right, empty
    squares between king and rook, an unmoved same-colour rook on its corner,
    and the king's start, transit and destination squares all unattacked.
    """
    color = king.color
    home = Square(KING_FILE, color.home_row)
    if king.has_moved or square != home:
        return []

    enemy = color.opponent
    targets: List[Square] = []
    for kingside in (True, False):
        if not castling.has(color, kingside):
            continue
        rook_file = KINGSIDE_ROOK_FILE if kingside else QUEENSIDE_ROOK_FILE
        rook = board[Square(rook_file, home.row)]
        if (
            rook is None
            or rook.piece_type is not PieceType.ROOK
            or rook.color is not color
            or rook.has_moved
        ):
            continue
        lo, hi = sorted((KING_FILE, rook_file))
        if any(not board.is_empty(Square(f, home.row)) for f in range(lo + 1, hi)):
            continue
        step = 1 if kingside else -1
        # Only the king's path is checked; the queenside rook crossing b-file may be attacked.
        king_path = [Square(KING_FILE + step * i, home.row) for i in range(3)]
        if any(is_square_attacked(sq, enemy, board) for sq in king_path):
            continue
        targets.append(king_path[-1])
    return targets
