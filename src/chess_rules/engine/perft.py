from __future__ import annotations

from typing import Dict

from .state import GameState


def perft(state: GameState, depth: int) -> int:
    """Compute perft node count for ``state`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are played on copies, so ``state`` is left untouched.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = state.all_legal_moves()
    if depth == 1:
        return len(moves)
    nodes = 0
    for m in moves:
        child = state.copy()
        child.apply_move(m)
        nodes += perft(child, depth - 1)
    return nodes


def divide(state: GameState, depth: int) -> Dict[str, int]:
    """Per-root-move perft counts, keyed by UCI; handy for diffing against other engines."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for m in state.all_legal_moves():
        child = state.copy()
        child.apply_move(m)
        out[m.to_uci()] = perft(child, depth - 1)
    return out
