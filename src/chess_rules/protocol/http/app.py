from __future__ import annotations

import logging
import random
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from ...config import Settings
from ...engine.errors import IllegalMoveError, InvalidFENError, InvalidSquareError
from ...engine.game import Game
from ...engine.move import parse_uci
from ...engine.perft import perft as perft_nodes
from ...engine.types import parse_square
from ...selector import MoveSelector, open_selector
from .error import (
    domain_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware, install_request_id_filter
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="Start from this FEN instead of startpos")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="UCI move string, e.g., e2e4 or e7e8q")


class PerftRequest(BaseModel):
    fen: str = Field(..., description="FEN string")
    depth: int = Field(default=1, ge=0, le=5)


class TargetsResponse(BaseModel):
    square: str
    targets: list[str]


class GameView(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    winner: Optional[str]
    status: str
    castling: Dict[str, bool]
    en_passant: Optional[str]
    halfmove_clock: int
    fullmove_number: int
    last_move: Optional[str]
    move_history: list[str]


def create_app(
    settings: Optional[Settings] = None,
    selector: Optional[MoveSelector] = None,
) -> FastAPI:
    """Build the HTTP app.

    The session store, selector and fallback RNG belong to this app instance;
    nothing is shared at module level.
    """
    settings = settings or Settings.from_env()
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    logging.basicConfig(level=settings.log_level)
    install_request_id_filter()

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    for exc_type in (InvalidFENError, InvalidSquareError, IllegalMoveError):
        app.add_exception_handler(exc_type, domain_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    rng = random.Random(settings.seed)
    rng_lock = threading.Lock()
    if selector is None:
        selector = open_selector(settings.book_path, rng)
    app.state.store = store
    app.state.selector = selector
    app.state.settings = settings

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        if req is not None and req.fen:
            try:
                game = Game.from_fen(req.fen)
            except ValueError:
                raise HTTPException(status_code=400, detail="invalid FEN")
        else:
            game = Game.new()
        game_id = store.create(game)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    # Game routes are sync so they run in the threadpool; each holds the game lock.
    @app.get("/api/games/{game_id}/state", response_model=GameView)
    def get_state(game_id: str) -> GameView:
        with _locked_game(store, game_id) as game:
            return _game_view(game_id, game)

    @app.delete("/api/games/{game_id}")
    def delete_game(game_id: str) -> Dict[str, bool]:
        with _locked_game(store, game_id):
            store.delete(game_id)
        logger.info("game deleted", extra={"game_id": game_id})
        return {"deleted": True}

    @app.post("/api/games/{game_id}/position", response_model=GameView)
    def set_position(game_id: str, req: SetPositionRequest) -> GameView:
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        with _locked_game(store, game_id):
            store.set(game_id, game)
            return _game_view(game_id, game)

    @app.get("/api/games/{game_id}/targets/{square}", response_model=TargetsResponse)
    def targets(game_id: str, square: str) -> TargetsResponse:
        sq = parse_square(square)
        with _locked_game(store, game_id) as game:
            if sq is None:
                raise HTTPException(status_code=400, detail=f"invalid square: {square!r}")
            found = [t.name for t in game.legal_targets(sq)]
        return TargetsResponse(square=sq.name, targets=found)

    @app.post("/api/games/{game_id}/move", response_model=GameView)
    def make_move(game_id: str, req: MoveRequest) -> GameView:
        with _locked_game(store, game_id) as game:
            try:
                move = parse_uci(req.move)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            try:
                game.apply_move(move)
            except IllegalMoveError:
                raise HTTPException(status_code=400, detail="illegal move")
            return _game_view(game_id, game)

    @app.post("/api/games/{game_id}/ai-move", response_model=GameView)
    def ai_move(game_id: str) -> GameView:
        with _locked_game(store, game_id) as game:
            with rng_lock:
                played = game.play_selected(selector, rng=rng)
            if played is None:
                raise HTTPException(status_code=409, detail="no legal moves: game is over")
            return _game_view(game_id, game)

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(game.state, req.depth)}

    return app


@contextmanager
def _locked_game(store: InMemorySessionStore, game_id: str) -> Iterator[Game]:
    """Hold the per-game lock and yield the current game, or raise 404."""
    try:
        lock = store.lock_for(game_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="game not found") from None
    with lock:
        game = store.get(game_id)
        if game is None:
            raise HTTPException(status_code=404, detail="game not found")
        yield game


def _game_view(game_id: str, game: Game) -> GameView:
    state = game.state
    history = game.move_history_uci()
    winner = game.winner()
    ep = state.en_passant_target
    return GameView(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=state.current_player.value,
        legal_moves=game.legal_moves_uci(),
        in_check=game.in_check(),
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        winner=winner.value if winner is not None else None,
        status=game.status_message(),
        castling=state.castling_rights.as_dict(),
        en_passant=ep.name if ep is not None else None,
        halfmove_clock=state.half_move_clock,
        fullmove_number=state.full_move_number,
        last_move=history[-1] if history else None,
        move_history=history,
    )
