from __future__ import annotations

from chess_rules.engine.board import Board
from chess_rules.engine.move import parse_uci, str_to_square
from chess_rules.engine.state import GameState


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


def test_board_accessor_returns_independent_copy() -> None:
    s = GameState.new()
    snapshot = s.board
    assert snapshot == Board.initial()
    snapshot[str_to_square("e2")] = None
    assert s.piece_at(str_to_square("e2")) is not None
    assert s.board == Board.initial()


def test_board_copy_does_not_alias_rows() -> None:
    b = Board.initial()
    c = b.copy()
    assert c == b
    c[str_to_square("d1")] = None
    assert b[str_to_square("d1")] is not None
    rows = b.rows()
    rows[0][0] = None
    assert b[str_to_square("a8")] is not None


def test_history_accessor_is_a_copy() -> None:
    s = GameState.new()
    assert s.apply_move(parse_uci("e2e4"))
    history = s.move_history
    history.clear()
    assert len(s.move_history) == 1


def test_state_copy_is_independent() -> None:
    s = GameState.new()
    child = s.copy()
    assert child.apply_move(parse_uci("g1f3"))
    assert s.to_fen() != child.to_fen()
    assert s.move_history == []


def test_legality_queries_leave_board_untouched() -> None:
    s = GameState.from_fen(KIWIPETE)
    before = s.board
    s.all_legal_moves()
    s.is_checkmate()
    s.is_stalemate()
    assert s.board == before
