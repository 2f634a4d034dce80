"""Move generation for a position.

Generators work on any position object offering ``side_to_move``,
``checkers`` and ``ep_square`` attributes plus the methods ``pieces``,
``pieces_of``, ``king_square``, ``can_castle``, ``castling_impeded``,
``castling_rook_square`` and ``legal``.
"""

from __future__ import annotations

from typing import Any, Iterator

from .bitboard import (
    FILE_A_BB,
    FILE_H_BB,
    FULL_BB,
    RANK_BB,
    attacks_bb,
    between_bb,
    iter_squares,
    lsb,
    more_than_one,
    pawn_attacks_bb,
)
from .types import (
    BLACK_CASTLING,
    KING_SIDE,
    QUEEN_SIDE,
    RANK_3,
    RANK_7,
    SQ_NONE,
    WHITE,
    WHITE_CASTLING,
    Move,
    MoveType,
    PieceType,
    relative_rank,
)

_PROMOTION_PIECES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)
_SLIDERS_AND_KNIGHTS = (PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN)


def _shift(bb: int, direction: int) -> int:
    if direction == 8:
        return (bb << 8) & FULL_BB
    if direction == -8:
        return bb >> 8
    if direction == 9:
        return ((bb & ~FILE_H_BB) << 9) & FULL_BB
    if direction == 7:
        return ((bb & ~FILE_A_BB) << 7) & FULL_BB
    if direction == -7:
        return (bb & ~FILE_H_BB) >> 7
    if direction == -9:
        return (bb & ~FILE_A_BB) >> 9
    raise ValueError(f"unsupported shift: {direction}")


def _rank_bb(color: Any, rank: int) -> int:
    return RANK_BB[rank ^ (int(color) * 7)]


def _pawn_moves(pos: Any, target: int, evasion: bool) -> Iterator[Move]:
    us = pos.side_to_move
    them = ~us
    up, up_right, up_left = (8, 9, 7) if us == WHITE else (-8, -9, -7)

    pawns = pos.pieces_of(us, PieceType.PAWN)
    on_seventh = pawns & _rank_bb(us, RANK_7)
    not_seventh = pawns & ~_rank_bb(us, RANK_7)
    enemies = pos.checkers if evasion else pos.pieces_of(them)
    empty = ~pos.pieces() & FULL_BB

    single = _shift(not_seventh, up) & empty
    double = _shift(single & _rank_bb(us, RANK_3), up) & empty
    if evasion:
        single &= target
        double &= target
    for to in iter_squares(single):
        yield Move(to - up, to)
    for to in iter_squares(double):
        yield Move(to - 2 * up, to)

    if on_seventh:
        right = _shift(on_seventh, up_right) & enemies
        left = _shift(on_seventh, up_left) & enemies
        push = _shift(on_seventh, up) & empty
        if evasion:
            push &= target
        for bb, direction in ((right, up_right), (left, up_left), (push, up)):
            for to in iter_squares(bb):
                for pt in _PROMOTION_PIECES:
                    yield Move(to - direction, to, MoveType.PROMOTION, pt)

    right = _shift(not_seventh, up_right) & enemies
    left = _shift(not_seventh, up_left) & enemies
    for to in iter_squares(right):
        yield Move(to - up_right, to)
    for to in iter_squares(left):
        yield Move(to - up_left, to)

    ep = pos.ep_square
    if ep != SQ_NONE:
        if relative_rank(us, ep) != 5:
            raise ValueError("en passant square on the wrong rank")
        # An en passant capture cannot resolve a discovered check.
        if evasion and target & (1 << (ep + up)):
            return
        for frm in iter_squares(not_seventh & pawn_attacks_bb(them, ep)):
            yield Move(frm, ep, MoveType.EN_PASSANT)


def _generate(pos: Any, evasion: bool) -> Iterator[Move]:
    us = pos.side_to_move
    ksq = pos.king_square(us)
    checkers = pos.checkers
    own = pos.pieces_of(us)

    if not evasion or not more_than_one(checkers):
        target = between_bb(ksq, lsb(checkers)) if evasion else ~own & FULL_BB
        yield from _pawn_moves(pos, target, evasion)
        occupied = pos.pieces()
        for pt in _SLIDERS_AND_KNIGHTS:
            for frm in iter_squares(pos.pieces_of(us, pt)):
                for to in iter_squares(attacks_bb(pt, frm, occupied) & target):
                    yield Move(frm, to)

    for to in iter_squares(attacks_bb(PieceType.KING, ksq) & ~own & FULL_BB):
        yield Move(ksq, to)

    if not evasion:
        rights = WHITE_CASTLING if us == WHITE else BLACK_CASTLING
        for cr in (rights & KING_SIDE, rights & QUEEN_SIDE):
            if pos.can_castle(cr) and not pos.castling_impeded(cr):
                yield Move(ksq, pos.castling_rook_square(cr), MoveType.CASTLING)


def evasions(pos: Any) -> list[Move]:
    """Pseudo-legal moves that try to get the side to move out of check."""
    if not pos.checkers:
        raise ValueError("evasions need a position in check")
    return list(_generate(pos, evasion=True))


def non_evasions(pos: Any) -> list[Move]:
    """All pseudo-legal captures and quiet moves when not in check."""
    if pos.checkers:
        raise ValueError("the side to move is in check")
    return list(_generate(pos, evasion=False))


def pseudo_legal_moves(pos: Any) -> list[Move]:
    """Evasions when in check, every pseudo-legal move otherwise."""
    return evasions(pos) if pos.checkers else non_evasions(pos)


def legal_moves(pos: Any) -> list[Move]:
    """All legal moves of the side to move."""
    return [m for m in pseudo_legal_moves(pos) if pos.legal(m)]