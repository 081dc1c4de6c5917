from __future__ import annotations

import logging
from typing import List, Optional

from .attacks import is_king_in_check
from .board import Board
from .fen import parse_fen, to_fen
from .legality import KINGSIDE_ROOK_FILE, QUEENSIDE_ROOK_FILE, legal_targets
from .move import Move
from .types import PROMOTION_TYPES, CastlingRights, Color, Piece, PieceType, Square


logger = logging.getLogger(__name__)


class GameState:
    """Authoritative position plus the derived state of a game.

    Responsibility: answer legality queries and apply moves atomically.

    Notes:
    - Every read accessor hands out a copy (or an immutable value), so the
      owned board can only change through :meth:`apply_move`.
    - Not thread-safe: callers serialize ``apply_move`` per instance.
    """

    def __init__(
        self,
        board: Optional[Board] = None,
        current_player: Color = Color.WHITE,
        castling_rights: Optional[CastlingRights] = None,
        en_passant_target: Optional[Square] = None,
        half_move_clock: int = 0,
        full_move_number: int = 1,
        move_history: Optional[List[Move]] = None,
    ) -> None:
        self._board = board.copy() if board is not None else Board.initial()
        self._current_player = current_player
        self._castling = castling_rights if castling_rights is not None else CastlingRights()
        self._ep_target = en_passant_target
        self._halfmove_clock = half_move_clock
        self._fullmove_number = full_move_number
        self._history: List[Move] = list(move_history) if move_history else []

    @classmethod
    def new(cls) -> "GameState":
        return cls()

    @classmethod
    def from_fen(cls, fen: str) -> "GameState":
        """Restore a state from FEN.

        Raises:
            InvalidFENError: If ``fen`` cannot be decoded.
        """
        fields = parse_fen(fen)
        return cls(
            board=fields.board,
            current_player=fields.side_to_move,
            castling_rights=fields.castling,
            en_passant_target=fields.ep_square,
            half_move_clock=fields.halfmove_clock,
            full_move_number=fields.fullmove_number,
        )

    def to_fen(self) -> str:
        return to_fen(self)

    def copy(self) -> "GameState":
        return GameState(
            board=self._board,
            current_player=self._current_player,
            castling_rights=self._castling,
            en_passant_target=self._ep_target,
            half_move_clock=self._halfmove_clock,
            full_move_number=self._fullmove_number,
            move_history=self._history,
        )

    # --- Read accessors ---
    @property
    def board(self) -> Board:
        return self._board.copy()

    @property
    def current_player(self) -> Color:
        return self._current_player

    @property
    def castling_rights(self) -> CastlingRights:
        return self._castling

    @property
    def en_passant_target(self) -> Optional[Square]:
        return self._ep_target

    @property
    def half_move_clock(self) -> int:
        return self._halfmove_clock

    @property
    def full_move_number(self) -> int:
        return self._fullmove_number

    @property
    def move_history(self) -> List[Move]:
        return list(self._history)

    def piece_at(self, square: Square) -> Optional[Piece]:
        return self._board[square]

    # --- Legality ---
    def legal_targets(self, square: Square) -> List[Square]:
        return legal_targets(
            square, self._board, self._current_player, self._castling, self._ep_target
        )

    def all_legal_moves(self, color: Optional[Color] = None) -> List[Move]:
        """Enumerate every legal move of ``color`` (default: side to move).

        Pawn moves onto the last rank expand into one move per promotion
        piece (queen, rook, bishop, knight). Returns ``[]`` when ``color``
        is not the side to move.
        """
        color = self._current_player if color is None else color
        if color is not self._current_player:
            return []
        moves: List[Move] = []
        for from_sq, piece in self._board.pieces(color):
            for to_sq in self.legal_targets(from_sq):
                if piece.piece_type is PieceType.PAWN and to_sq.row == color.promotion_row:
                    moves.extend(Move(from_sq, to_sq, promo) for promo in PROMOTION_TYPES)
                else:
                    moves.append(Move(from_sq, to_sq))
        return moves

    def is_in_check(self, color: Optional[Color] = None) -> bool:
        color = self._current_player if color is None else color
        return is_king_in_check(color, self._board)

    def is_checkmate(self, color: Optional[Color] = None) -> bool:
        color = self._current_player if color is None else color
        if color is not self._current_player:
            return False
        return self.is_in_check(color) and not self.all_legal_moves(color)

    def is_stalemate(self, color: Optional[Color] = None) -> bool:
        color = self._current_player if color is None else color
        if color is not self._current_player:
            return False
        return not self.is_in_check(color) and not self.all_legal_moves(color)

    # --- Move application ---
    def apply_move(self, move: Move) -> bool:
        """Apply ``move`` and update all derived state atomically.

        Generation and execution are separate: ``move`` is expected to come
        from :meth:`legal_targets` / :meth:`all_legal_moves` and full
        legality is not re-verified here. Structural problems are rejected:
        empty origin, opponent's piece, and a promotion field that is missing
        on a last-rank pawn move or present on any other move.

        Returns:
            bool: ``True`` if applied; ``False`` if rejected, in which case
                nothing was mutated.
        """
        from_sq, to_sq = move.from_sq, move.to_sq
        mover = self._board[from_sq]
        color = self._current_player
        if mover is None or mover.color is not color:
            logger.debug(
                "rejected move", extra={"move": move.to_uci(), "reason": "not own piece"}
            )
            return False

        is_pawn = mover.piece_type is PieceType.PAWN
        promoting = is_pawn and to_sq.row == color.promotion_row
        if promoting != (move.promotion is not None) or (
            move.promotion is not None and move.promotion not in PROMOTION_TYPES
        ):
            logger.debug("rejected move", extra={"move": move.to_uci(), "reason": "promotion"})
            return False

        board = self._board.copy()
        captured = board[to_sq]
        capture_sq: Optional[Square] = to_sq if captured is not None else None
        if is_pawn and to_sq == self._ep_target and captured is None:
            capture_sq = Square(to_sq.file, from_sq.row)
            captured = board[capture_sq]
            board[capture_sq] = None

        placed = mover.moved()
        if promoting and move.promotion is not None:
            placed = Piece(move.promotion, color, True)
        board[to_sq] = placed
        board[from_sq] = None

        if mover.piece_type is PieceType.KING and abs(to_sq.file - from_sq.file) == 2:
            kingside = to_sq.file > from_sq.file
            rook_file = KINGSIDE_ROOK_FILE if kingside else QUEENSIDE_ROOK_FILE
            rook_from = Square(rook_file, from_sq.row)
            rook_to = Square(to_sq.file - 1 if kingside else to_sq.file + 1, from_sq.row)
            rook = board[rook_from]
            if rook is not None and rook.piece_type is PieceType.ROOK:
                board[rook_to] = rook.moved()
                board[rook_from] = None

        ep_target: Optional[Square] = None
        if is_pawn and abs(to_sq.row - from_sq.row) == 2:
            ep_target = Square(from_sq.file, (from_sq.row + to_sq.row) // 2)

        castling = _updated_castling(self._castling, mover, from_sq, captured, capture_sq)

        halfmove = 0 if is_pawn or captured is not None else self._halfmove_clock + 1
        next_player = color.opponent
        fullmove = self._fullmove_number + (1 if next_player is Color.WHITE else 0)

        # Commit
        self._board = board
        self._ep_target = ep_target
        self._castling = castling
        self._halfmove_clock = halfmove
        self._current_player = next_player
        self._fullmove_number = fullmove
        self._history.append(move)
        return True


def _updated_castling(
    rights: CastlingRights,
    mover: Piece,
    from_sq: Square,
    captured: Optional[Piece],
    capture_sq: Optional[Square],
) -> CastlingRights:
    """Clear rights for king moves, rooks leaving a corner and rooks captured on one."""
    if mover.piece_type is PieceType.KING:
        rights = rights.without(mover.color, kingside=True, queenside=True)
    elif mover.piece_type is PieceType.ROOK and from_sq.row == mover.color.home_row:
        rights = rights.without(
            mover.color,
            kingside=from_sq.file == KINGSIDE_ROOK_FILE,
            queenside=from_sq.file == QUEENSIDE_ROOK_FILE,
        )
    if (
        captured is not None
        and capture_sq is not None
        and captured.piece_type is PieceType.ROOK
        and capture_sq.row == captured.color.home_row
    ):
        rights = rights.without(
            captured.color,
            kingside=capture_sq.file == KINGSIDE_ROOK_FILE,
            queenside=capture_sq.file == QUEENSIDE_ROOK_FILE,
        )
    return rights
