from __future__ import annotations

import json
import os
import random
from typing import Any, Dict, List, Optional, Sequence


def position_key(fen: str) -> str:
    """Book lookup key: the first four FEN fields (move counters ignored)."""
    return " ".join(fen.strip().split()[:4])


class BookMoveSelector:
    """Simple JSON-based opening book used as a move selector.

    Format examples:
    - Object mapping FEN -> list of {"uci": "e2e4", "weight": 10}
    - Or {"positions": [{"fen": "...", "moves": [{"uci": "...", "weight": 1}]}]}

    Notes:
    - Only entries present in the supplied legal-move list are considered.
    - Deterministic by default: select the highest-weight move; with
      ``randomize=True`` pick weighted-random from ``rng``.
    - Returns ``None`` for positions outside the book, which the caller turns
      into a random legal move.
    """

    def __init__(
        self, path: str, *, randomize: bool = False, rng: Optional[random.Random] = None
    ) -> None:
        self.path = path
        self.randomize = randomize
        self.rng = rng or random.Random()
        self._index: Dict[str, List[Dict[str, Any]]] = {}
        self._load()

    def __len__(self) -> int:
        return len(self._index)

    def _load(self) -> None:
        if not os.path.exists(self.path):
            raise FileNotFoundError(self.path)
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict) and "positions" in data:
            for ent in data["positions"]:
                fen = str(ent.get("fen", "")).strip()
                moves = ent.get("moves", [])
                if fen and isinstance(moves, list):
                    self._index[position_key(fen)] = [dict(m) for m in moves]
        elif isinstance(data, dict):
            # Direct mapping of FEN -> list[moves]
            for fen, moves in data.items():
                if isinstance(moves, list):
                    self._index[position_key(str(fen))] = [dict(m) for m in moves]
        else:
            raise ValueError("invalid book format")

    def select(self, fen: str, legal_moves: Sequence[str]) -> Optional[str]:
        entries = self._index.get(position_key(fen))
        if not entries or not legal_moves:
            return None

        legal_set = set(legal_moves)
        candidates: List[Dict[str, Any]] = []
        for e in entries:
            u = e.get("uci")
            if not isinstance(u, str) or u.lower() not in legal_set:
                continue
            try:
                w = int(e.get("weight", 1))
            except (TypeError, ValueError):
                w = 1
            candidates.append({"uci": u.lower(), "weight": max(1, w)})

        if not candidates:
            return None

        if not self.randomize:
            # Highest weight, tie-break by lexical UCI
            candidates.sort(key=lambda x: (x["weight"], x["uci"]))
            return candidates[-1]["uci"]

        total = sum(c["weight"] for c in candidates)
        r = self.rng.randint(1, total)
        acc = 0
        for c in candidates:
            acc += c["weight"]
            if r <= acc:
                return c["uci"]
        return candidates[-1]["uci"]
