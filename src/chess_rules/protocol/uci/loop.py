from __future__ import annotations

import logging
import random
import sys
from typing import Callable, List, Optional

from ...engine.errors import InvalidFENError
from ...engine.game import Game
from ...selector import MoveSelector, RandomMoveSelector, choose_move, open_selector


logger = logging.getLogger(__name__)

Writer = Callable[[str], None]


class UCIEngine:
    """UCI protocol adapter around the rules engine and a move selector.

    Notes:
    - Core remains pure; I/O is isolated here.
    - There is no search: ``go`` answers with the selector's pick, passed
      through the random fallback policy, or ``0000`` in a terminal position.
    - Command set: uci, isready, ucinewgame, position, setoption, go, stop, quit.
    """

    def __init__(
        self, selector: Optional[MoveSelector] = None, rng: Optional[random.Random] = None
    ) -> None:
        self.game: Game = Game.new()
        self.rng = rng or random.Random()
        self.selector: MoveSelector = selector or RandomMoveSelector(self.rng)
        self.book_file: Optional[str] = None

    # ---- Command handlers ----
    def cmd_uci(self, write: Writer) -> None:
        write("id name chess_rules")
        write("id author chess_rules developers")
        write("option name BookFile type string default <empty>")
        write("uciok")

    def cmd_isready(self, write: Writer) -> None:
        write("readyok")

    def cmd_ucinewgame(self) -> None:
        self.game = Game.new()

    def cmd_position(self, args: List[str]) -> None:
        # position [startpos | fen <FEN> ] [moves m1 m2 ...]
        if not args:
            return
        idx = 0
        if args[idx] == "startpos":
            self.game = Game.new()
            idx += 1
        elif args[idx] == "fen":
            idx += 1
            fen_tokens: List[str] = []
            while idx < len(args) and args[idx] != "moves":
                fen_tokens.append(args[idx])
                idx += 1
            try:
                self.game = Game.from_fen(" ".join(fen_tokens))
            except InvalidFENError as e:
                logger.warning("ignoring invalid FEN", extra={"error": str(e)})
                return
        if idx < len(args) and args[idx] == "moves":
            for u in args[idx + 1 :]:
                try:
                    self.game.apply_uci(u)
                except ValueError:
                    # Stop at the first bad move; keep the position reached so far
                    logger.warning("ignoring invalid move", extra={"move": u})
                    break

    def cmd_setoption(self, args: List[str]) -> None:
        # setoption name <name> [value <value>]
        if not args:
            return
        i = 1 if args[0] == "name" else 0
        name_tokens: List[str] = []
        while i < len(args) and args[i] != "value":
            name_tokens.append(args[i])
            i += 1
        value = " ".join(args[i + 1 :]).strip() if i < len(args) else ""
        name = " ".join(name_tokens).strip().lower()
        if name == "bookfile":
            path = None if value in ("", "<empty>") else value
            try:
                self.selector = open_selector(path, self.rng)
            except (OSError, ValueError) as e:
                logger.warning("could not open book", extra={"path": path, "error": str(e)})
                return
            self.book_file = path

    def cmd_go(self, args: List[str], write: Writer) -> None:
        legal = self.game.legal_moves_uci()
        chosen = choose_move(self.selector, self.game.to_fen(), legal, rng=self.rng)
        write(f"bestmove {chosen if chosen is not None else '0000'}")

    def handle(self, line: str, write: Writer) -> bool:
        """Dispatch one command line; return False when the loop should end."""
        tokens = line.strip().split()
        if not tokens:
            return True
        cmd, args = tokens[0], tokens[1:]
        if cmd == "uci":
            self.cmd_uci(write)
        elif cmd == "isready":
            self.cmd_isready(write)
        elif cmd == "ucinewgame":
            self.cmd_ucinewgame()
        elif cmd == "position":
            self.cmd_position(args)
        elif cmd == "setoption":
            self.cmd_setoption(args)
        elif cmd == "go":
            self.cmd_go(args, write)
        elif cmd == "stop":
            pass
        elif cmd == "quit":
            return False
        else:
            logger.debug("unknown UCI command", extra={"command": cmd})
        return True


def _default_writer(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def run_uci(selector: Optional[MoveSelector] = None, rng: Optional[random.Random] = None) -> None:
    engine = UCIEngine(selector=selector, rng=rng)
    for line in sys.stdin:
        if not engine.handle(line, _default_writer):
            break
