import pytest

from chesscore.bitboard import (
    FULL_BB,
    RANK_1_BB,
    attacks_bb,
    between_bb,
    iter_squares,
    line_bb,
    lsb,
    more_than_one,
    pawn_attacks_bb,
    pawn_attacks_from_bb,
    popcount,
    square_bb,
)
from chesscore.types import (
    BLACK,
    SQ_A1,
    SQ_A2,
    SQ_A3,
    SQ_B1,
    SQ_B2,
    SQ_B3,
    SQ_C2,
    SQ_C3,
    SQ_D3,
    SQ_D4,
    SQ_D5,
    SQ_E4,
    SQ_E5,
    SQ_F3,
    SQ_F5,
    SQ_H8,
    WHITE,
    PieceType,
)

SLIDERS_AND_LEAPERS = (
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
    PieceType.KING,
)


def test_popcount_extremes():
    assert popcount(0) == 0
    assert popcount(FULL_BB) == 64
    assert popcount(RANK_1_BB) == 8


def test_lsb_round_trip():
    for sq in range(64):
        assert lsb(square_bb(sq)) == sq
        assert lsb(square_bb(sq) | square_bb(SQ_H8)) == sq


def test_lsb_empty_raises():
    with pytest.raises(ValueError):
        lsb(0)


def test_iter_squares_ascending():
    bb = square_bb(SQ_H8) | square_bb(SQ_A1) | square_bb(SQ_E4)
    assert list(iter_squares(bb)) == [SQ_A1, SQ_E4, SQ_H8]
    assert list(iter_squares(0)) == []


def test_more_than_one():
    assert not more_than_one(0)
    assert not more_than_one(square_bb(SQ_E4))
    assert more_than_one(square_bb(SQ_E4) | square_bb(SQ_A1))


def test_knight_corner():
    assert attacks_bb(PieceType.KNIGHT, SQ_A1) == square_bb(SQ_B3) | square_bb(SQ_C2)


def test_king_corner():
    expected = square_bb(SQ_A2) | square_bb(SQ_B1) | square_bb(SQ_B2)
    assert attacks_bb(PieceType.KING, SQ_A1) == expected


def test_rook_empty_board():
    assert popcount(attacks_bb(PieceType.ROOK, SQ_A1)) == 14


def test_rook_blocked():
    att = attacks_bb(PieceType.ROOK, SQ_A1, square_bb(SQ_A3))
    expected = square_bb(SQ_A2) | square_bb(SQ_A3) | (RANK_1_BB ^ square_bb(SQ_A1))
    assert att == expected
    assert popcount(att) == 9


def test_queen_is_rook_plus_bishop():
    occ = square_bb(SQ_D5) | square_bb(SQ_F3) | square_bb(SQ_B2)
    for sq in range(64):
        assert attacks_bb(PieceType.QUEEN, sq, occ) == (
            attacks_bb(PieceType.ROOK, sq, occ) | attacks_bb(PieceType.BISHOP, sq, occ)
        )


@pytest.mark.parametrize("pt", SLIDERS_AND_LEAPERS)
def test_attacks_symmetric_and_exclude_self(pt):
    for a in range(64):
        att = attacks_bb(pt, a)
        assert (att & square_bb(a)) == 0
        for b in iter_squares(att):
            assert (attacks_bb(pt, b) & square_bb(a)) == square_bb(a)


def test_pawn_attacks_raise_through_generic():
    with pytest.raises(ValueError):
        attacks_bb(PieceType.PAWN, SQ_E4)


def test_pawn_attacks():
    assert pawn_attacks_bb(WHITE, SQ_E4) == square_bb(SQ_D5) | square_bb(SQ_F5)
    assert pawn_attacks_bb(WHITE, SQ_A2) == square_bb(SQ_B3)
    assert pawn_attacks_bb(BLACK, SQ_E4) == square_bb(SQ_D3) | square_bb(SQ_F3)


@pytest.mark.parametrize("color", [WHITE, BLACK])
def test_pawn_attacks_from_matches_single(color):
    bb = FULL_BB
    expected = 0
    for sq in iter_squares(bb):
        expected |= pawn_attacks_bb(color, sq)
    assert pawn_attacks_from_bb(color, bb) == expected
    for sq in range(64):
        assert pawn_attacks_from_bb(color, square_bb(sq)) == pawn_attacks_bb(color, sq)


def test_between_includes_target_only():
    b = between_bb(SQ_A1, SQ_D4)
    assert b == square_bb(SQ_B2) | square_bb(SQ_C3) | square_bb(SQ_D4)
    assert between_bb(SQ_A1, SQ_C2) == square_bb(SQ_C2)
    assert between_bb(SQ_E4, SQ_E4) == square_bb(SQ_E4)


def test_between_is_subset_of_line():
    for a in range(64):
        for b in range(64):
            if line_bb(a, b):
                assert (between_bb(a, b) & ~line_bb(a, b)) == 0
                assert (between_bb(a, b) & square_bb(a)) == 0


def test_line():
    line = line_bb(SQ_B2, SQ_C3)
    assert (line & square_bb(SQ_A1)) == square_bb(SQ_A1)
    assert (line & square_bb(SQ_H8)) == square_bb(SQ_H8)
    assert line == line_bb(SQ_H8, SQ_A1)
    assert line_bb(SQ_A1, SQ_B3) == 0
    assert line_bb(SQ_E4, SQ_E4) == 0
    assert (line_bb(SQ_E4, SQ_E5) & square_bb(SQ_E4)) == square_bb(SQ_E4)