"""Bitboards as Python ints: square sets and attack generation."""

from __future__ import annotations

from typing import Iterator

from .types import Color, PieceType

FULL_BB = (1 << 64) - 1
FILE_A_BB = 0x0101010101010101
FILE_H_BB = FILE_A_BB << 7
RANK_1_BB = 0xFF
RANK_8_BB = 0xFF << 56
FILE_BB = tuple(FILE_A_BB << f for f in range(8))
RANK_BB = tuple(RANK_1_BB << (8 * r) for r in range(8))


def square_bb(square: int) -> int:
    return 1 << square


def popcount(bb: int) -> int:
    return bb.bit_count()


def lsb(bb: int) -> int:
    """Index of the least significant set bit."""
    if not bb:
        raise ValueError("empty bitboard has no least significant square")
    return (bb & -bb).bit_length() - 1


def iter_squares(bb: int) -> Iterator[int]:
    """Yield the set squares from lowest to highest."""
    while bb:
        low = bb & -bb
        yield low.bit_length() - 1
        bb ^= low


def more_than_one(bb: int) -> bool:
    return bool(bb & (bb - 1))


def _offset(square: int, df: int, dr: int) -> int | None:
    f, r = (square & 7) + df, (square >> 3) + dr
    if 0 <= f < 8 and 0 <= r < 8:
        return (r << 3) | f
    return None


def _leaper_table(deltas: tuple[tuple[int, int], ...]) -> tuple[int, ...]:
    table = []
    for sq in range(64):
        bb = 0
        for df, dr in deltas:
            target = _offset(sq, df, dr)
            if target is not None:
                bb |= 1 << target
        table.append(bb)
    return tuple(table)


_KNIGHT = _leaper_table(((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2)))
_KING = _leaper_table(((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1)))
_PAWN = (
    _leaper_table(((-1, 1), (1, 1))),
    _leaper_table(((-1, -1), (1, -1))),
)


def _ray_table(df: int, dr: int) -> tuple[bool, tuple[int, ...]]:
    table = []
    for sq in range(64):
        bb = 0
        target = _offset(sq, df, dr)
        while target is not None:
            bb |= 1 << target
            target = _offset(target, df, dr)
        table.append(bb)
    ascending = dr > 0 or (dr == 0 and df > 0)
    return ascending, tuple(table)


_ROOK_RAYS = tuple(_ray_table(df, dr) for df, dr in ((0, 1), (0, -1), (1, 0), (-1, 0)))
_BISHOP_RAYS = tuple(_ray_table(df, dr) for df, dr in ((1, 1), (-1, 1), (1, -1), (-1, -1)))


def _slide(rays: tuple[tuple[bool, tuple[int, ...]], ...], square: int, occupied: int) -> int:
    result = 0
    for ascending, table in rays:
        ray = table[square]
        blockers = ray & occupied
        if blockers:
            first = lsb(blockers) if ascending else blockers.bit_length() - 1
            ray ^= table[first]
        result |= ray
    return result


def pawn_attacks_bb(color: Color, square: int) -> int:
    """Squares a pawn of the given colour on ``square`` attacks."""
    return _PAWN[int(color)][square]


def pawn_attacks_from_bb(color: Color, bb: int) -> int:
    """Squares attacked by all pawns of the given colour in ``bb``."""
    west, east = bb & ~FILE_A_BB, bb & ~FILE_H_BB
    if color == Color.WHITE:
        return ((west << 7) | (east << 9)) & FULL_BB
    return (west >> 9) | (east >> 7)


def attacks_bb(piece_type: PieceType, square: int, occupied: int = 0) -> int:
    """Squares attacked by a non-pawn piece on ``square`` given the occupancy."""
    pt = PieceType(piece_type)
    if pt is PieceType.KNIGHT:
        return _KNIGHT[square]
    if pt is PieceType.KING:
        return _KING[square]
    if pt is PieceType.BISHOP:
        return _slide(_BISHOP_RAYS, square, occupied)
    if pt is PieceType.ROOK:
        return _slide(_ROOK_RAYS, square, occupied)
    if pt is PieceType.QUEEN:
        return _slide(_BISHOP_RAYS, square, occupied) | _slide(_ROOK_RAYS, square, occupied)
    raise ValueError(f"no attack table for {pt.name}")


def _build_lines() -> tuple[list[list[int]], list[list[int]]]:
    line = [[0] * 64 for _ in range(64)]
    between = [[0] * 64 for _ in range(64)]
    for a in range(64):
        for pt in (PieceType.BISHOP, PieceType.ROOK):
            reach = attacks_bb(pt, a)
            for b in iter_squares(reach):
                line[a][b] = (reach & attacks_bb(pt, b)) | (1 << a) | (1 << b)
                between[a][b] = attacks_bb(pt, a, 1 << b) & attacks_bb(pt, b, 1 << a)
        for b in range(64):
            between[a][b] |= 1 << b
    return line, between


_LINE, _BETWEEN = _build_lines()


def between_bb(a: int, b: int) -> int:
    """Squares strictly between ``a`` and ``b`` plus ``b`` itself.

    When the squares share no line, only ``b`` is returned.
    """
    return _BETWEEN[a][b]


def line_bb(a: int, b: int) -> int:
    """The whole line through ``a`` and ``b``, or 0 if they share none."""
    return _LINE[a][b]