from __future__ import annotations

import logging
from typing import Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from chess_rules.config import Settings
from chess_rules.protocol.http.app import create_app
from chess_rules.protocol.http.logging_middleware import RequestIDLogFilter, current_request_id


class Garbage:
    def select(self, fen: str, legal_moves: Sequence[str]) -> Optional[str]:
        return "zzzz"


def test_healthz_ok() -> None:
    client = TestClient(create_app(Settings()))
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert "x-request-id" in r.headers


def test_request_id_is_propagated() -> None:
    client = TestClient(create_app(Settings()))
    r = client.get("/healthz", headers={"x-request-id": "abc-123"})
    assert r.headers["x-request-id"] == "abc-123"


def test_generated_request_ids_differ() -> None:
    client = TestClient(create_app(Settings()))
    first = client.get("/healthz").headers["x-request-id"]
    second = client.get("/healthz").headers["x-request-id"]
    assert first and second and first != second


def test_request_id_stamped_on_handler_and_selector_logs(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)
    client = TestClient(create_app(Settings(seed=3), selector=Garbage()))
    game_id = client.post("/api/games", headers={"x-request-id": "rid-create"}).json()["game_id"]
    client.post(f"/api/games/{game_id}/ai-move", headers={"x-request-id": "rid-ai"})

    created = [r for r in caplog.records if r.getMessage() == "game created"]
    assert [r.request_id for r in created] == ["rid-create"]  # type: ignore[attr-defined]
    fallbacks = [r for r in caplog.records if "falling back" in r.getMessage()]
    assert fallbacks
    assert {r.request_id for r in fallbacks} == {"rid-ai"}  # type: ignore[attr-defined]
    access = [r for r in caplog.records if r.getMessage().startswith("POST /api/games/")]
    assert any(getattr(r, "game_id", None) == game_id for r in access)


def test_filter_outside_request_uses_placeholder() -> None:
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    assert current_request_id.get() is None
    assert RequestIDLogFilter().filter(record)
    assert record.request_id == "-"  # type: ignore[attr-defined]
