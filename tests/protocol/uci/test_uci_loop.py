from __future__ import annotations

import json
import random
from pathlib import Path
from typing import List

from chess_rules.engine.fen import STARTPOS_FEN
from chess_rules.protocol.uci.loop import UCIEngine


def capture_writer(buf: List[str]):
    def _w(line: str) -> None:
        buf.append(line)

    return _w


def test_basic_handshake():
    eng = UCIEngine()
    out: List[str] = []
    eng.cmd_uci(capture_writer(out))
    assert any(line.startswith("id name ") for line in out)
    assert any(line.startswith("option name BookFile") for line in out)
    assert out[-1] == "uciok"


def test_isready():
    eng = UCIEngine()
    out: List[str] = []
    eng.cmd_isready(capture_writer(out))
    assert out == ["readyok"]


def test_position_and_go():
    eng = UCIEngine(rng=random.Random(3))
    eng.cmd_position(["startpos", "moves", "e2e4", "e7e5"])
    assert eng.game.move_history_uci() == ["e2e4", "e7e5"]
    out: List[str] = []
    eng.cmd_go(["depth", "1"], capture_writer(out))
    assert len(out) == 1 and out[0].startswith("bestmove ")
    assert out[0].split()[1] in eng.game.legal_moves_uci()


def test_position_fen_and_terminal_go():
    eng = UCIEngine()
    fen = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
    eng.cmd_position(["fen", *fen.split()])
    assert eng.game.to_fen() == fen
    out: List[str] = []
    eng.cmd_go([], capture_writer(out))
    assert out == ["bestmove 0000"]


def test_invalid_position_input_is_ignored():
    eng = UCIEngine()
    eng.cmd_position(["fen", "not", "a", "fen"])
    assert eng.game.to_fen() == STARTPOS_FEN
    eng.cmd_position(["startpos", "moves", "e2e4", "e2e4", "d7d5"])
    # Stops at the first illegal move
    assert eng.game.move_history_uci() == ["e2e4"]


def test_setoption_bookfile(tmp_path: Path):
    book = tmp_path / "book.json"
    book.write_text(json.dumps({STARTPOS_FEN: [{"uci": "c2c4", "weight": 3}]}), encoding="utf-8")
    eng = UCIEngine()
    eng.cmd_setoption(["name", "BookFile", "value", str(book)])
    assert eng.book_file == str(book)
    out: List[str] = []
    eng.cmd_position(["startpos"])
    eng.cmd_go([], capture_writer(out))
    assert out == ["bestmove c2c4"]

    # Missing file keeps the previous selector
    eng.cmd_setoption(["name", "BookFile", "value", str(tmp_path / "missing.json")])
    assert eng.book_file == str(book)


def test_handle_dispatch_and_quit():
    eng = UCIEngine(rng=random.Random(0))
    out: List[str] = []
    w = capture_writer(out)
    assert eng.handle("uci", w)
    assert eng.handle("isready", w)
    assert eng.handle("", w)
    assert eng.handle("frobnicate", w)
    assert eng.handle("position startpos moves g1f3", w)
    assert eng.handle("go", w)
    assert eng.handle("ucinewgame", w)
    assert eng.game.move_history_uci() == []
    assert not eng.handle("quit", w)
    assert "readyok" in out
    assert any(line.startswith("bestmove ") for line in out)
