from __future__ import annotations

import inspect
import threading
from typing import List, Optional, Sequence

from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from chess_rules.config import Settings
from chess_rules.engine.game import Game
from chess_rules.protocol.http.app import create_app


class ScriptedSelector:
    def __init__(self, answers: List[Optional[str]]) -> None:
        self.answers = list(answers)

    def select(self, fen: str, legal_moves: Sequence[str]) -> Optional[str]:
        return self.answers.pop(0) if self.answers else None


def test_ai_move_plays_selector_choice() -> None:
    client = TestClient(create_app(Settings(seed=1), selector=ScriptedSelector(["g1f3"])))
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/ai-move")
    assert r.status_code == 200
    assert r.json()["last_move"] == "g1f3"
    assert r.json()["side_to_move"] == "b"


def test_ai_move_falls_back_to_random_legal_move() -> None:
    client = TestClient(create_app(Settings(seed=7), selector=ScriptedSelector(["e2e5"])))
    game_id = client.post("/api/games").json()["game_id"]
    legal = client.get(f"/api/games/{game_id}/state").json()["legal_moves"]
    r = client.post(f"/api/games/{game_id}/ai-move")
    assert r.status_code == 200
    assert r.json()["last_move"] in legal


def test_ai_move_with_seed_is_reproducible() -> None:
    played = []
    for _ in range(2):
        client = TestClient(create_app(Settings(seed=42), selector=ScriptedSelector([])))
        game_id = client.post("/api/games").json()["game_id"]
        for _ in range(4):
            client.post(f"/api/games/{game_id}/ai-move")
        played.append(client.get(f"/api/games/{game_id}/state").json()["move_history"])
    assert played[0] == played[1]
    assert len(played[0]) == 4


def test_ai_move_in_terminal_position_conflicts() -> None:
    client = TestClient(create_app(Settings(), selector=ScriptedSelector([])))
    fen = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
    game_id = client.post("/api/games", json={"fen": fen}).json()["game_id"]
    r = client.post(f"/api/games/{game_id}/ai-move")
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "conflict"
    assert client.get(f"/api/games/{game_id}/state").json()["fen"] == fen


def test_targets_endpoint() -> None:
    client = TestClient(create_app(Settings()))
    game_id = client.post("/api/games").json()["game_id"]
    r = client.get(f"/api/games/{game_id}/targets/g1")
    assert r.status_code == 200
    assert r.json()["square"] == "g1"
    assert sorted(r.json()["targets"]) == ["f3", "h3"]
    assert client.get(f"/api/games/{game_id}/targets/e7").json()["targets"] == []
    r_bad = client.get(f"/api/games/{game_id}/targets/z9")
    assert r_bad.status_code == 400


def test_concurrent_ai_moves_on_one_game_are_serialized() -> None:
    app = create_app(Settings(seed=5), selector=ScriptedSelector([]))
    with TestClient(app) as client:
        game_id = client.post("/api/games").json()["game_id"]
        statuses: List[int] = []
        statuses_lock = threading.Lock()

        def worker() -> None:
            for _ in range(3):
                code = client.post(f"/api/games/{game_id}/ai-move").status_code
                with statuses_lock:
                    statuses.append(code)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        state = client.get(f"/api/games/{game_id}/state").json()

    history = state["move_history"]
    played = statuses.count(200)
    assert set(statuses) <= {200, 409}
    assert len(history) == played
    # Replaying the history from the start reaches the same position
    replay = Game.new()
    for uci in history:
        replay.apply_uci(uci)
    assert replay.to_fen() == state["fen"]


def test_game_routes_run_in_threadpool() -> None:
    app = create_app(Settings())
    game_routes = [
        r
        for r in app.routes
        if isinstance(r, APIRoute) and r.path.startswith("/api/games/{game_id}")
    ]
    assert game_routes
    for route in game_routes:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path
