from __future__ import annotations

import pytest
from pydantic import ValidationError

from chess_rules.config import Settings


def test_defaults(clear_env: None) -> None:
    s = Settings.from_env()
    assert s.host == "0.0.0.0"
    assert s.port == 8000
    assert s.log_level == "INFO"
    assert s.book_path is None
    assert s.seed is None


def test_reads_prefixed_environment() -> None:
    s = Settings.from_env(
        {
            "CHESS_RULES_HOST": "127.0.0.1",
            "CHESS_RULES_PORT": "9001",
            "CHESS_RULES_LOG_LEVEL": "debug",
            "CHESS_RULES_BOOK_PATH": "/tmp/book.json",
            "CHESS_RULES_SEED": "17",
            "UNRELATED": "x",
        }
    )
    assert s.host == "127.0.0.1"
    assert s.port == 9001
    assert s.log_level == "DEBUG"
    assert s.book_path == "/tmp/book.json"
    assert s.seed == 17


def test_empty_values_fall_back_to_defaults() -> None:
    s = Settings.from_env({"CHESS_RULES_PORT": "", "CHESS_RULES_SEED": ""})
    assert s.port == 8000
    assert s.seed is None


def test_process_environment(monkeypatch: pytest.MonkeyPatch, clear_env: None) -> None:
    monkeypatch.setenv("CHESS_RULES_PORT", "8123")
    assert Settings.from_env().port == 8123


@pytest.mark.parametrize(
    "env",
    [
        {"CHESS_RULES_PORT": "0"},
        {"CHESS_RULES_PORT": "not-a-port"},
        {"CHESS_RULES_LOG_LEVEL": "chatty"},
        {"CHESS_RULES_SEED": "abc"},
    ],
)
def test_invalid_values_rejected(env: dict[str, str]) -> None:
    with pytest.raises(ValidationError):
        Settings.from_env(env)
