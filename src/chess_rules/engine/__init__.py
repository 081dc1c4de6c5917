"""Chess rules engine: pure, deterministic position logic.

Quick start::

    from chess_rules.engine import GameState, parse_uci

    state = GameState.new()
    state.apply_move(parse_uci("e2e4"))
    print(state.to_fen())
"""

from .attacks import is_king_in_check, is_square_attacked
from .board import Board
from .errors import IllegalMoveError, InvalidFENError, InvalidSquareError, StateConsistencyError
from .fen import STARTPOS_FEN, parse_fen, to_fen
from .game import Game
from .legality import castling_targets, legal_targets
from .move import Move, parse_uci, square_to_str, str_to_square
from .movegen import pseudo_legal_targets
from .perft import divide, perft
from .state import GameState
from .types import (
    PROMOTION_TYPES,
    CastlingRights,
    Color,
    Piece,
    PieceType,
    Square,
    parse_square,
)

__all__ = [
    "Board",
    "CastlingRights",
    "Color",
    "Game",
    "GameState",
    "IllegalMoveError",
    "InvalidFENError",
    "InvalidSquareError",
    "Move",
    "PROMOTION_TYPES",
    "Piece",
    "PieceType",
    "STARTPOS_FEN",
    "Square",
    "StateConsistencyError",
    "castling_targets",
    "divide",
    "is_king_in_check",
    "is_square_attacked",
    "legal_targets",
    "parse_fen",
    "parse_square",
    "parse_uci",
    "perft",
    "pseudo_legal_targets",
    "square_to_str",
    "str_to_square",
    "to_fen",
]
