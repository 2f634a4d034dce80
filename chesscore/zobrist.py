"""Zobrist hashing keys and the cuckoo tables of reversible moves.

The cuckoo tables hold the hash difference of every reversible piece move
(non-pawn pieces only), which lets repetition detection find a move that
returns to an earlier position without generating moves.
"""

from __future__ import annotations

from .bitboard import attacks_bb
from .types import (
    B_PAWN,
    CASTLING_RIGHT_NB,
    FILE_NB,
    PIECE_NB,
    PIECES,
    SQ_A8,
    SQ_H8,
    SQUARE_NB,
    W_PAWN,
    Move,
    PieceType,
    type_of,
)

_MASK = (1 << 64) - 1
CUCKOO_SIZE = 8192
_SEED = 1070372


class PRNG:
    """Xorshift64* pseudo random number generator producing 64-bit keys."""

    __slots__ = ("_state",)

    def __init__(self, seed: int) -> None:
        if not seed & _MASK:
            raise ValueError("the generator needs a non-zero seed")
        self._state = seed & _MASK

    def rand(self) -> int:
        """Return the next 64-bit value."""
        s = self._state
        s ^= s >> 12
        s ^= (s << 25) & _MASK
        s ^= s >> 27
        self._state = s
        return (s * 2685821657736338717) & _MASK


def make_key(seed: int) -> int:
    """A 64-bit key derived from an integer by one linear congruential step."""
    return (seed * 6364136223846793005 + 1442695040888963407) & _MASK


def h1(key: int) -> int:
    """First cuckoo table index of a key."""
    return key & 0x1FFF


def h2(key: int) -> int:
    """Second cuckoo table index of a key."""
    return (key >> 16) & 0x1FFF


def _build_keys() -> tuple[
    tuple[tuple[int, ...], ...], tuple[int, ...], tuple[int, ...], int, int
]:
    rng = PRNG(_SEED)
    psq = [[0] * SQUARE_NB for _ in range(PIECE_NB)]
    for pc in PIECES:
        for s in range(SQUARE_NB):
            psq[pc][s] = rng.rand()
    # Pawns on these squares would already have promoted.
    for s in range(SQ_A8, SQ_H8 + 1):
        psq[W_PAWN][s] = 0
    for s in range(8):
        psq[B_PAWN][s] = 0

    enpassant = tuple(rng.rand() for _ in range(FILE_NB))
    castling = tuple(rng.rand() for _ in range(CASTLING_RIGHT_NB))
    side = rng.rand()
    no_pawns = rng.rand()
    return tuple(tuple(row) for row in psq), enpassant, castling, side, no_pawns


PSQ, ENPASSANT, CASTLING, SIDE, NO_PAWNS = _build_keys()


def _build_cuckoo() -> tuple[tuple[int, ...], tuple[Move, ...], int]:
    keys = [0] * CUCKOO_SIZE
    moves = [Move.none()] * CUCKOO_SIZE
    count = 0
    for pc in PIECES:
        pt = type_of(pc)
        if pt == PieceType.PAWN:
            continue
        for s1 in range(SQUARE_NB):
            reach = attacks_bb(pt, s1, 0)
            for s2 in range(s1 + 1, SQUARE_NB):
                if not reach & (1 << s2):
                    continue
                move = Move(s1, s2)
                key = PSQ[pc][s1] ^ PSQ[pc][s2] ^ SIDE
                i = h1(key)
                while True:
                    keys[i], key = key, keys[i]
                    moves[i], move = move, moves[i]
                    if not move:  # arrived at an empty slot
                        break
                    i = h2(key) if i == h1(key) else h1(key)
                count += 1
    return tuple(keys), tuple(moves), count


CUCKOO, CUCKOO_MOVE, CUCKOO_COUNT = _build_cuckoo()


def cuckoo_lookup(key: int) -> Move | None:
    """The reversible move whose hash difference is ``key``, if any."""
    for i in (h1(key), h2(key)):
        if CUCKOO[i] == key and CUCKOO_MOVE[i]:
            return CUCKOO_MOVE[i]
    return None