from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from .attacks import is_king_in_check
from .board import BACK_RANK, Board
from .errors import InvalidFENError
from .types import BOARD_SIZE, CastlingRights, Color, Piece, PieceType, Square, parse_square

if TYPE_CHECKING:
    from .state import GameState


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


@dataclass
class FENFields:
    """Decoded FEN, one attribute per field."""

    board: Board
    side_to_move: Color
    castling: CastlingRights
    ep_square: Optional[Square]
    halfmove_clock: int
    fullmove_number: int


def to_fen(state: "GameState") -> str:
    """Serialize a game state into a FEN string.

    Field order and letter case follow the standard exactly: placement from
    rank 8 down to rank 1, active colour, castling in ``KQkq`` order (``-``
    when empty), en-passant square or ``-``, half-move clock, full-move number.
    """
    ep = state.en_passant_target
    return " ".join(
        (
            placement_to_fen(state.board),
            state.current_player.value,
            state.castling_rights.to_fen(),
            ep.name if ep is not None else "-",
            str(state.half_move_clock),
            str(state.full_move_number),
        )
    )


def placement_to_fen(board: Board) -> str:
    ranks: List[str] = []
    for row in board.rows():
        run = 0
        out = []
        for piece in row:
            if piece is None:
                run += 1
                continue
            if run > 0:
                out.append(str(run))
                run = 0
            out.append(piece.fen_char)
        if run > 0:
            out.append(str(run))
        ranks.append("".join(out))
    return "/".join(ranks)


def parse_fen(fen: str) -> FENFields:
    """Decode a Forsyth-Edwards Notation string.

    Args:
        fen (str): FEN string describing the position to load.

    Returns:
        FENFields: Decoded position.

    Raises:
        InvalidFENError: If ``fen`` is empty, has the wrong number of fields,
            or contains invalid placement, side to move, castling rights, en
            passant square or move counters, does not have exactly one
            king per colour, or leaves the side not to move in check.

    Notes:
        FEN carries no per-piece history, so ``has_moved`` is inferred from
        placement and castling rights (see :func:`_infer_has_moved`).
    """
    if not fen or not isinstance(fen, str):
        raise InvalidFENError("FEN must be a non-empty string")
    parts = fen.strip().split()
    if len(parts) != 6:
        raise InvalidFENError("FEN must have 6 fields")
    placement, stm, castling_field, ep, halfmove, fullmove = parts

    if stm not in ("w", "b"):
        raise InvalidFENError("side to move must be 'w' or 'b'")
    side_to_move = Color(stm)

    try:
        castling = CastlingRights.from_fen(castling_field)
    except ValueError as e:
        raise InvalidFENError(str(e)) from e

    board = _parse_placement(placement, castling)
    if is_king_in_check(side_to_move.opponent, board):
        raise InvalidFENError("side not to move is in check")

    ep_square: Optional[Square] = None
    if ep != "-":
        ep_square = parse_square(ep)
        if ep_square is None:
            raise InvalidFENError("invalid en passant square")
        _check_en_passant(board, side_to_move, ep_square)

    try:
        halfmove_clock = int(halfmove)
        fullmove_number = int(fullmove)
    except ValueError as e:
        raise InvalidFENError("invalid move counters in FEN") from e
    if halfmove_clock < 0 or fullmove_number <= 0:
        raise InvalidFENError("invalid move counters in FEN")

    return FENFields(
        board=board,
        side_to_move=side_to_move,
        castling=castling,
        ep_square=ep_square,
        halfmove_clock=halfmove_clock,
        fullmove_number=fullmove_number,
    )


def _parse_placement(placement: str, castling: CastlingRights) -> Board:
    ranks = placement.split("/")
    if len(ranks) != BOARD_SIZE:
        raise InvalidFENError("FEN board must have 8 ranks")
    board = Board()
    for row, rank in enumerate(ranks):
        file_idx = 0
        for ch in rank:
            if ch.isdigit():
                n = int(ch)
                if n < 1 or n > 8:
                    raise InvalidFENError("invalid empty count in FEN rank")
                file_idx += n
                continue
            if file_idx >= BOARD_SIZE:
                raise InvalidFENError("too many squares in FEN rank")
            try:
                piece = Piece.from_fen_char(ch)
            except ValueError as e:
                raise InvalidFENError(f"invalid piece in FEN: {ch!r}") from e
            sq = Square(file_idx, row)
            moved = _infer_has_moved(piece, sq, castling)
            board[sq] = Piece(piece.piece_type, piece.color, moved)
            file_idx += 1
        if file_idx != BOARD_SIZE:
            raise InvalidFENError("rank does not sum to 8 squares in FEN")

    for color in Color:
        kings = [p for _, p in board.pieces(color) if p.piece_type is PieceType.KING]
        if len(kings) != 1:
            raise InvalidFENError(f"FEN must contain exactly one {color.name.lower()} king")
    return board


def _check_en_passant(board: Board, side_to_move: Color, ep_square: Square) -> None:
    """The target must sit behind an enemy pawn that just made a double push."""
    if ep_square.row != side_to_move.opponent.pawn_row + side_to_move.opponent.forward:
        raise InvalidFENError("invalid en passant square rank")
    pushed = board[Square(ep_square.file, ep_square.row - side_to_move.forward)]
    if (
        not board.is_empty(ep_square)
        or pushed is None
        or pushed.piece_type is not PieceType.PAWN
        or pushed.color is side_to_move
    ):
        raise InvalidFENError("en passant square without a capturable pawn")


def _infer_has_moved(piece: Piece, sq: Square, castling: CastlingRights) -> bool:
    """Best reconstruction of ``has_moved`` for a piece loaded from FEN.

    - pawns are unmoved on their starting rank;
    - a king is unmoved on its home square while its side holds any right;
    - a corner rook is unmoved while the matching right is held;
    - other pieces are unmoved on their initial squares.
    """
    color = piece.color
    if piece.piece_type is PieceType.PAWN:
        return sq.row != color.pawn_row
    if sq.row != color.home_row:
        return True
    if piece.piece_type is PieceType.KING:
        if sq.file != 4:
            return True
        return not (castling.has(color, True) or castling.has(color, False))
    if piece.piece_type is PieceType.ROOK:
        if sq.file == 7:
            return not castling.has(color, True)
        if sq.file == 0:
            return not castling.has(color, False)
        return True
    return BACK_RANK[sq.file] is not piece.piece_type
