from __future__ import annotations

from chess_rules.engine.move import parse_uci, str_to_square
from chess_rules.engine.state import GameState
from chess_rules.engine.types import Color, PieceType


def moves_set(s: GameState) -> set[str]:
    return {m.to_uci() for m in s.all_legal_moves()}


def test_white_castling_available_when_clear_and_not_in_check() -> None:
    s = GameState.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    ms = moves_set(s)
    assert "e1g1" in ms
    assert "e1c1" in ms
    targets = {t.name for t in s.legal_targets(str_to_square("e1"))}
    assert {"g1", "c1"} <= targets


def test_black_castling_available_on_its_turn() -> None:
    s = GameState.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    ms = moves_set(s)
    assert {"e8g8", "e8c8"} <= ms
    assert "e1g1" not in ms


def test_white_castling_blocked_when_in_check() -> None:
    # Black rook on e8 gives check on e1
    s = GameState.from_fen("4r1k1/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    ms = moves_set(s)
    assert "e1g1" not in ms
    assert "e1c1" not in ms


def test_castling_blocked_when_transit_square_attacked() -> None:
    s = GameState.from_fen("5rk1/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    ms = moves_set(s)
    assert "e1g1" not in ms
    assert "e1c1" in ms


def test_castling_blocked_when_destination_attacked() -> None:
    s = GameState.from_fen("6rk/7p/8/8/8/8/8/R3K2R w KQ - 0 1")
    ms = moves_set(s)
    assert "e1g1" not in ms
    assert "e1c1" in ms


def test_queenside_castling_allowed_when_only_rook_path_attacked() -> None:
    # b1 is attacked but the king never crosses it
    s = GameState.from_fen("1r2k3/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert "e1c1" in moves_set(s)


def test_castling_blocked_by_pieces_between() -> None:
    s = GameState.from_fen("r3k2r/8/8/8/8/8/8/RN2K1NR w KQkq - 0 1")
    ms = moves_set(s)
    assert "e1g1" not in ms
    assert "e1c1" not in ms


def test_castling_requires_matching_right() -> None:
    s = GameState.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w Qkq - 0 1")
    ms = moves_set(s)
    assert "e1g1" not in ms
    assert "e1c1" in ms


def test_kingside_castle_moves_rook_and_clears_rights() -> None:
    s = GameState.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    assert s.apply_move(parse_uci("e1g1"))
    assert s.to_fen() == "r3k2r/8/8/8/8/8/8/R4RK1 b kq - 1 1"
    rook = s.piece_at(str_to_square("f1"))
    assert rook is not None and rook.piece_type is PieceType.ROOK and rook.has_moved
    assert s.piece_at(str_to_square("h1")) is None


def test_queenside_castle_moves_rook_to_d_file() -> None:
    s = GameState.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    assert s.apply_move(parse_uci("e1c1"))
    assert s.to_fen() == "r3k2r/8/8/8/8/8/8/2KR3R b kq - 1 1"


def test_black_queenside_castle_after_white_kingside() -> None:
    s = GameState.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    assert s.apply_move(parse_uci("e1g1"))
    assert "e8c8" in moves_set(s)
    assert s.apply_move(parse_uci("e8c8"))
    assert s.to_fen() == "2kr3r/8/8/8/8/8/8/R4RK1 w - - 2 2"


def test_rook_leaving_and_returning_loses_the_right() -> None:
    s = GameState.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    for uci in ("h1h2", "a8a7", "h2h1", "a7a8"):
        assert s.apply_move(parse_uci(uci))
    assert s.castling_rights.to_fen() == "Qk"
    ms = moves_set(s)
    assert "e1g1" not in ms
    assert "e1c1" in ms


def test_king_move_clears_both_rights() -> None:
    s = GameState.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    assert s.apply_move(parse_uci("e1f1"))
    assert not s.castling_rights.has(Color.WHITE, True)
    assert not s.castling_rights.has(Color.WHITE, False)
    assert s.castling_rights.to_fen() == "kq"


def test_capturing_rook_on_corner_clears_opponent_right() -> None:
    s = GameState.from_fen("r3k2r/8/8/8/8/8/6b1/R3K2R b KQkq - 0 1")
    assert s.apply_move(parse_uci("g2h1"))
    assert s.to_fen() == "r3k2r/8/8/8/8/8/8/R3K2b w Qkq - 0 2"
