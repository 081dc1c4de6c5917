from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .board import Board
from .types import Piece, PieceType, Square


KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, 2),
    (1, 2),
    (-2, 1),
    (2, 1),
    (-2, -1),
    (2, -1),
    (-1, -2),
    (1, -2),
)
BISHOP_DIRS: Tuple[Tuple[int, int], ...] = ((-1, -1), (1, -1), (-1, 1), (1, 1))
ROOK_DIRS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS = BISHOP_DIRS + ROOK_DIRS
KING_OFFSETS = QUEEN_DIRS

SLIDER_DIRS = {
    PieceType.BISHOP: BISHOP_DIRS,
    PieceType.ROOK: ROOK_DIRS,
    PieceType.QUEEN: QUEEN_DIRS,
}


def pseudo_legal_targets(
    square: Square, board: Board, en_passant_target: Optional[Square] = None
) -> List[Square]:
    """Destination squares for the piece on ``square`` by geometry alone.

    Ignores whether the mover's own king is left in check, and never
    produces castling (that lives in the legality layer).

    Args:
        square (Square): Origin square; an empty square yields ``[]``.
        board (Board): Position to generate on.
        en_passant_target (Optional[Square]): Square a pawn may capture onto
            en passant, if any.

    Returns:
        List[Square]: Target squares in generation order.
    """
    piece = board[square]
    if piece is None:
        return []
    if piece.piece_type is PieceType.PAWN:
        return _pawn_targets(square, piece, board, en_passant_target)
    if piece.piece_type is PieceType.KNIGHT:
        return _step_targets(square, piece, board, KNIGHT_OFFSETS)
    if piece.piece_type is PieceType.KING:
        return _step_targets(square, piece, board, KING_OFFSETS)
    return _ray_targets(square, piece, board, SLIDER_DIRS[piece.piece_type])


def _pawn_targets(
    square: Square, piece: Piece, board: Board, en_passant_target: Optional[Square]
) -> List[Square]:
    targets: List[Square] = []
    fwd = piece.color.forward

    one = square.offset(0, fwd)
    if one is not None and board.is_empty(one):
        targets.append(one)
        # Double push from the unmoved starting rank
        if not piece.has_moved and square.row == piece.color.pawn_row:
            two = square.offset(0, 2 * fwd)
            if two is not None and board.is_empty(two):
                targets.append(two)

    for d_file in (-1, 1):
        cap = square.offset(d_file, fwd)
        if cap is None:
            continue
        victim = board[cap]
        if victim is not None and victim.color is not piece.color:
            targets.append(cap)
        elif victim is None and cap == en_passant_target:
            targets.append(cap)
    return targets


def _step_targets(
    square: Square, piece: Piece, board: Board, offsets: Sequence[Tuple[int, int]]
) -> List[Square]:
    targets: List[Square] = []
    for d_file, d_row in offsets:
        to_sq = square.offset(d_file, d_row)
        if to_sq is None:
            continue
        occupant = board[to_sq]
        if occupant is None or occupant.color is not piece.color:
            targets.append(to_sq)
    return targets


def _ray_targets(
    square: Square, piece: Piece, board: Board, dirs: Sequence[Tuple[int, int]]
) -> List[Square]:
    targets: List[Square] = []
    for d_file, d_row in dirs:
        to_sq = square.offset(d_file, d_row)
        while to_sq is not None:
            occupant = board[to_sq]
            if occupant is not None:
                if occupant.color is not piece.color:
                    targets.append(to_sq)
                break
            targets.append(to_sq)
            to_sq = to_sq.offset(d_file, d_row)
    return targets
