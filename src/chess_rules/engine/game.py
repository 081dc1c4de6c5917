from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from ..selector.base import MoveSelector, choose_move
from .errors import IllegalMoveError
from .move import Move, parse_uci
from .state import GameState
from .types import Color, Square


logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Game wrapper around a state with strict, validated move application.

    Responsibility: expose legal moves, apply only legal moves, report status,
    and run a selector turn.
    """

    state: GameState

    @classmethod
    def new(cls) -> "Game":
        return cls(state=GameState.new())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(state=GameState.from_fen(fen))

    def to_fen(self) -> str:
        return self.state.to_fen()

    @property
    def side_to_move(self) -> Color:
        return self.state.current_player

    def legal_moves(self) -> List[Move]:
        return self.state.all_legal_moves()

    def legal_moves_uci(self) -> List[str]:
        return [m.to_uci() for m in self.legal_moves()]

    def legal_targets(self, square: Square) -> List[Square]:
        return self.state.legal_targets(square)

    def apply_move(self, move: Move) -> None:
        """Apply ``move`` after checking it against the legal-move set.

        Raises:
            IllegalMoveError: If ``move`` is not legal here, including a
                missing or wrong promotion piece.
        """
        if move not in self.legal_moves():
            raise IllegalMoveError(f"illegal move: {move.to_uci()}")
        if not self.state.apply_move(move):
            raise IllegalMoveError(f"illegal move: {move.to_uci()}")

    def apply_uci(self, uci: str) -> Move:
        move = parse_uci(uci)
        self.apply_move(move)
        return move

    def play_selected(
        self, selector: MoveSelector, rng: Optional[random.Random] = None
    ) -> Optional[Move]:
        """Let ``selector`` pick a move for the side to move and apply it.

        Invalid suggestions are replaced by a uniformly random legal move.

        Returns:
            Optional[Move]: The applied move, or ``None`` if the position is
                terminal and nothing was applied.
        """
        legal = self.legal_moves()
        by_uci = {m.to_uci(): m for m in legal}
        chosen = choose_move(selector, self.to_fen(), [m.to_uci() for m in legal], rng=rng)
        if chosen is None:
            return None
        move = by_uci[chosen]
        self.apply_move(move)
        logger.info("selector move", extra={"move": chosen, "fen": self.to_fen()})
        return move

    # --- State flags for protocol ---
    def in_check(self) -> bool:
        return self.state.is_in_check()

    def checkmate(self) -> bool:
        return self.state.is_checkmate()

    def stalemate(self) -> bool:
        return self.state.is_stalemate()

    def is_over(self) -> bool:
        return not self.legal_moves()

    def winner(self) -> Optional[Color]:
        return self.side_to_move.opponent if self.checkmate() else None

    def status_message(self) -> str:
        side = "White" if self.side_to_move is Color.WHITE else "Black"
        if self.checkmate():
            loser_is_white = self.side_to_move is Color.WHITE
            return f"Checkmate! {'Black' if loser_is_white else 'White'} wins!"
        if self.stalemate():
            return "Stalemate! It's a draw."
        if self.in_check():
            return f"{side} is in Check!"
        return f"{side}'s turn."

    def move_history_uci(self) -> List[str]:
        return [m.to_uci() for m in self.state.move_history]
