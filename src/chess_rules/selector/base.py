from __future__ import annotations

import logging
import random
import re
from typing import Optional, Protocol, Sequence


logger = logging.getLogger(__name__)

UCI_RE = re.compile(r"^[a-h][1-8][a-h][1-8][qrbn]?$")


class MoveSelector(Protocol):
    """External move-selection collaborator.

    Given a FEN and the ordered legal moves as UCI strings, return one of
    them. Implementations may return anything, or raise; :func:`choose_move`
    sanitizes the answer.
    """

    def select(self, fen: str, legal_moves: Sequence[str]) -> Optional[str]: ...


class RandomMoveSelector:
    """Pick a uniformly random legal move."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def select(self, fen: str, legal_moves: Sequence[str]) -> Optional[str]:
        if not legal_moves:
            return None
        return self.rng.choice(list(legal_moves))


def choose_move(
    selector: MoveSelector,
    fen: str,
    legal_moves: Sequence[str],
    rng: Optional[random.Random] = None,
) -> Optional[str]:
    """Ask ``selector`` for a move and enforce the fallback policy.

    Args:
        selector (MoveSelector): Collaborator to consult.
        fen (str): Current position.
        legal_moves (Sequence[str]): Legal moves in UCI form, in order.
        rng (Optional[random.Random]): Source for the fallback pick.

    Returns:
        Optional[str]: A member of ``legal_moves``, or ``None`` when the list
            is empty (terminal position, nothing to apply).

    Notes:
        An absent, non-string, malformed or non-member answer, and any
        exception raised by the selector, are replaced by a uniformly random
        element of ``legal_moves``.
    """
    moves = list(legal_moves)
    if not moves:
        return None
    rng = rng or random.Random()

    try:
        raw = selector.select(fen, list(moves))
    except Exception:
        logger.warning(
            "selector failed, falling back to random", exc_info=True, extra={"fen": fen}
        )
        return rng.choice(moves)

    if raw is None or not isinstance(raw, str):
        logger.warning("selector returned no move, falling back to random", extra={"fen": fen})
        return rng.choice(moves)

    suggestion = raw.strip().lower()
    if not UCI_RE.match(suggestion):
        logger.warning(
            "selector returned malformed move, falling back to random",
            extra={"fen": fen, "suggestion": raw},
        )
        return rng.choice(moves)
    if suggestion not in moves:
        logger.warning(
            "selector returned move outside the legal list, falling back to random",
            extra={"fen": fen, "suggestion": suggestion},
        )
        return rng.choice(moves)
    return suggestion
