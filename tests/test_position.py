import pytest

from chesscore.movegen import legal_moves
from chesscore.position import Position
from chesscore.types import BLACK, WHITE, ANY_CASTLING, PieceType, parse_square, square_name

START = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
KIWI = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


def find(pos, uci):
    for m in legal_moves(pos):
        text = square_name(m.from_sq) + square_name(m.to_sq)
        if text == uci[:4]:
            if len(uci) == 5 and "nbrq"[m.promotion_type - PieceType.KNIGHT] != uci[4]:
                continue
            return m
    raise AssertionError(uci)


def play(pos, moves):
    done = []
    for uci in moves.split():
        m = find(pos, uci)
        pos.do_move(m)
        done.append(m)
    return done


@pytest.mark.parametrize("fen", [START, KIWI, "8/8/8/8/k1p5/8/1P6/K7 w - - 3 40"])
def test_fen_round_trip(fen):
    pos = Position.from_fen(fen)
    assert pos.fen() == fen
    assert pos.is_ok()


def test_start_move_counts():
    assert len(legal_moves(Position.from_fen(START))) == 20
    assert len(legal_moves(Position.from_fen(KIWI))) == 48


def test_do_undo_restores():
    pos = Position.from_fen(KIWI)
    key = pos.key
    for m in legal_moves(pos):
        pos.do_move(m)
        assert pos.is_ok()
        pos.undo_move(m)
        assert pos.fen() == KIWI
        assert pos.key == key


def test_ep_square_set_only_when_capturable():
    pos = Position.from_fen("4k3/8/8/8/3p4/8/4P3/4K3 w - - 0 1")
    play(pos, "e2e4")
    assert square_name(pos.ep_square) == "e3"
    m = find(pos, "d4e3")
    pos.do_move(m)
    assert pos.piece_on(parse_square("e4")) == 0
    pos.undo_move(m)
    assert pos.piece_on(parse_square("e4")) != 0


def test_repetition():
    pos = Position.from_fen(START)
    play(pos, "g1f3 g8f6 f3g1 f6g8")
    assert pos.state.repetition == 4
    assert pos.has_repeated()
    assert pos.is_repetition(5)
    assert not pos.is_repetition(3)


def test_upcoming_repetition():
    pos = Position.from_fen(START)
    play(pos, "g1f3 g8f6 f3g1")
    assert pos.upcoming_repetition(10)
    fresh = Position.from_fen(START)
    assert not fresh.upcoming_repetition(10)


def test_fifty_move_draw():
    pos = Position.from_fen("4k3/8/8/8/8/8/8/4K2R w - - 100 80")
    assert pos.is_draw(0)
    assert not Position.from_fen("4k3/8/8/8/8/8/8/4K2R w - - 10 80").is_draw(0)


def test_flip_twice():
    pos = Position.from_fen(KIWI)
    pos.flip()
    assert pos.fen() != KIWI
    assert pos.side_to_move == BLACK
    pos.flip()
    assert pos.fen() == KIWI


def test_gives_check_and_checkers():
    pos = Position.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    m = find(pos, "a1a8")
    assert pos.gives_check(m)
    pos.do_move(m)
    assert pos.checkers == 1 << parse_square("a8")
    assert not pos.gives_check(find(Position.from_fen(START), "e2e4"))


def test_see():
    pos = Position.from_fen("4k3/8/3p4/4p3/8/8/8/4KR2 w - - 0 1")
    pos2 = Position.from_fen("4k3/8/8/4p3/8/8/8/4QK2 w - - 0 1")
    qxe5 = find(pos2, "e1e5")
    assert pos2.see_ge(qxe5, 0)
    pos3 = Position.from_fen("4k3/8/3p4/4p3/8/8/8/4QK2 w - - 0 1")
    assert not pos3.see_ge(find(pos3, "e1e5"), 0)
    assert pos.see_ge(find(pos, "f1f2"), 0)


def test_castling():
    pos = Position.from_fen(KIWI)
    m = find(pos, "e1h1")
    pos.do_move(m)
    assert pos.piece_on(parse_square("g1")) != 0
    assert not pos.can_castle(1 | 2)
    pos.undo_move(m)
    assert pos.can_castle(ANY_CASTLING)


def test_null_move():
    pos = Position.from_fen(START)
    key = pos.key
    pos.do_null_move()
    assert pos.side_to_move == BLACK
    assert pos.key != key
    pos.undo_null_move()
    assert pos.key == key


def test_endgame_code_material_key():
    a = Position.from_endgame_code("KBPKN", WHITE)
    b = Position.from_fen("8/kn6/8/8/8/8/KBP5/8 w - - 0 10")
    assert a.material_key == b.material_key


def test_errors():
    with pytest.raises(ValueError):
        Position.from_fen("8/8/8/8/8/8/8/8 w - - 0 1")
    with pytest.raises(ValueError):
        Position.from_endgame_code("QK", WHITE)
    with pytest.raises(ValueError):
        Position.from_fen(START).undo_null_move()


def test_render_contains_fen():
    pos = Position.from_fen(START)
    text = pos.render()
    assert "Fen: " + START in text
    assert f"Key: {pos.key:016X}" in text