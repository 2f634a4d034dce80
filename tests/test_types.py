import pytest

from chesscore.types import (
    BLACK,
    B_KING,
    B_PAWN,
    NO_PIECE,
    PIECE_TO_CHAR,
    PIECES,
    RANK_1,
    RANK_8,
    SQ_A1,
    SQ_A8,
    SQ_E2,
    SQ_E4,
    SQ_E7,
    SQ_H1,
    SQ_H8,
    NORTH,
    SOUTH,
    VALUE_MATE,
    VALUE_NONE,
    VALUE_TB,
    W_KING,
    W_PAWN,
    WHITE,
    Color,
    Move,
    MoveType,
    PieceType,
    color_of,
    file_of,
    is_decisive,
    is_loss,
    is_valid,
    is_win,
    make_piece,
    make_square,
    mate_in,
    mated_in,
    parse_square,
    pawn_push,
    rank_of,
    relative_rank,
    relative_square,
    square_name,
    type_of,
)


def test_color_invert():
    assert ~color_of(W_KING) == Color.BLACK
    assert ~color_of(B_KING) == Color.WHITE
    assert make_piece(~WHITE, PieceType.KING) == B_KING
    assert make_piece(~BLACK, PieceType.PAWN) == W_PAWN


def test_square_round_trip():
    for sq in range(64):
        assert make_square(file_of(sq), rank_of(sq)) == sq
        assert parse_square(square_name(sq)) == sq


def test_square_names_fixed_by_notation():
    assert square_name(SQ_A1) == "a1"
    assert square_name(SQ_H8) == "h8"
    assert parse_square("e4") == SQ_E4


@pytest.mark.parametrize("bad", ["", "i1", "a9", "e44", "E4"])
def test_parse_square_rejects(bad):
    with pytest.raises(ValueError):
        parse_square(bad)


def test_square_name_out_of_range():
    with pytest.raises(ValueError):
        square_name(64)


def test_relative_square_and_rank():
    assert relative_square(BLACK, SQ_A1) == SQ_A8
    assert relative_square(WHITE, SQ_H1) == SQ_H1
    assert relative_rank(BLACK, SQ_E7) == relative_rank(WHITE, SQ_E2)
    assert relative_rank(BLACK, SQ_A8) == RANK_1
    assert relative_rank(WHITE, SQ_A8) == RANK_8


def test_piece_round_trip():
    for pc in PIECES:
        assert make_piece(color_of(pc), type_of(pc)) == pc
    assert make_piece(WHITE, PieceType.KING) == W_KING
    assert make_piece(BLACK, PieceType.PAWN) == B_PAWN
    assert PIECE_TO_CHAR[W_PAWN] == "P"
    assert PIECE_TO_CHAR[B_KING] == "k"


def test_color_of_empty_raises():
    with pytest.raises(ValueError):
        color_of(NO_PIECE)


def test_pawn_push():
    assert pawn_push(WHITE) == NORTH
    assert pawn_push(BLACK) == SOUTH


def test_move_fields():
    m = Move(SQ_E2, SQ_E4)
    assert m.from_sq == SQ_E2
    assert m.to_sq == SQ_E4
    assert m.move_type is MoveType.NORMAL
    assert m.is_ok()
    assert m.from_to() == (SQ_E2 << 6) | SQ_E4


def test_move_promotion():
    e8 = make_square(file_of(SQ_E7), RANK_8)
    m = Move(SQ_E7, e8, MoveType.PROMOTION, PieceType.QUEEN)
    assert m.promotion_type is PieceType.QUEEN
    assert m.move_type is MoveType.PROMOTION
    assert m.to_sq == e8
    assert m.from_to() == (SQ_E7 << 6) | e8


def test_move_none_and_null():
    assert not Move.none()
    assert not Move.none().is_ok()
    assert not Move.null().is_ok()
    assert bool(Move.null())
    assert Move.none() == Move(SQ_A1, SQ_A1)
    assert Move.null() != Move.none()


def test_move_hash_equality():
    assert {Move(SQ_E2, SQ_E4), Move(SQ_E2, SQ_E4)} == {Move(SQ_E2, SQ_E4)}


def test_move_rejects_bad_input():
    with pytest.raises(ValueError):
        Move(64, 0)
    with pytest.raises(ValueError):
        Move(SQ_E7, SQ_A8, MoveType.PROMOTION, PieceType.KING)


def test_score_predicates():
    assert mate_in(0) == VALUE_MATE
    assert mated_in(0) == -VALUE_MATE
    assert is_win(mate_in(5))
    assert is_loss(mated_in(5))
    assert is_win(VALUE_TB)
    assert not is_decisive(0)
    assert is_decisive(-VALUE_TB)
    assert not is_valid(VALUE_NONE)
    assert is_valid(0)