from __future__ import annotations

import random
from typing import Optional

from .base import MoveSelector, RandomMoveSelector, choose_move
from .book import BookMoveSelector


def open_selector(path: Optional[str], rng: Optional[random.Random] = None) -> MoveSelector:
    """Book selector for a JSON book at ``path``, otherwise random moves."""
    if not path:
        return RandomMoveSelector(rng)
    return BookMoveSelector(path, rng=rng)


__all__ = [
    "BookMoveSelector",
    "MoveSelector",
    "RandomMoveSelector",
    "choose_move",
    "open_selector",
]
