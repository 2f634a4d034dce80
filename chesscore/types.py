"""Basic chess types: colours, pieces, squares, moves and score values."""

from __future__ import annotations

from enum import IntEnum


class Color(IntEnum):
    """Side to move; ``~color`` gives the opponent."""

    WHITE = 0
    BLACK = 1

    def __invert__(self) -> "Color":
        return Color(1 - int(self))


WHITE = Color.WHITE
BLACK = Color.BLACK
COLOR_NB = 2


class PieceType(IntEnum):
    """Kind of piece, independent of colour."""

    NO_PIECE_TYPE = 0
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6
    ALL_PIECES = 0


PIECE_TYPE_NB = 8

# Pieces are encoded as (color << 3) | piece_type.
NO_PIECE = 0
W_PAWN, W_KNIGHT, W_BISHOP, W_ROOK, W_QUEEN, W_KING = range(1, 7)
B_PAWN, B_KNIGHT, B_BISHOP, B_ROOK, B_QUEEN, B_KING = range(9, 15)
PIECE_NB = 16
PIECES = (
    W_PAWN, W_KNIGHT, W_BISHOP, W_ROOK, W_QUEEN, W_KING,
    B_PAWN, B_KNIGHT, B_BISHOP, B_ROOK, B_QUEEN, B_KING,
)
PIECE_TO_CHAR = " PNBRQK  pnbrqk"

PAWN_VALUE = 208
KNIGHT_VALUE = 781
BISHOP_VALUE = 825
ROOK_VALUE = 1276
QUEEN_VALUE = 2538
_TYPE_VALUES = (0, PAWN_VALUE, KNIGHT_VALUE, BISHOP_VALUE, ROOK_VALUE, QUEEN_VALUE, 0, 0)
PIECE_VALUE = _TYPE_VALUES + _TYPE_VALUES

# Squares, files and ranks
(SQ_A1, SQ_B1, SQ_C1, SQ_D1, SQ_E1, SQ_F1, SQ_G1, SQ_H1,
 SQ_A2, SQ_B2, SQ_C2, SQ_D2, SQ_E2, SQ_F2, SQ_G2, SQ_H2,
 SQ_A3, SQ_B3, SQ_C3, SQ_D3, SQ_E3, SQ_F3, SQ_G3, SQ_H3,
 SQ_A4, SQ_B4, SQ_C4, SQ_D4, SQ_E4, SQ_F4, SQ_G4, SQ_H4,
 SQ_A5, SQ_B5, SQ_C5, SQ_D5, SQ_E5, SQ_F5, SQ_G5, SQ_H5,
 SQ_A6, SQ_B6, SQ_C6, SQ_D6, SQ_E6, SQ_F6, SQ_G6, SQ_H6,
 SQ_A7, SQ_B7, SQ_C7, SQ_D7, SQ_E7, SQ_F7, SQ_G7, SQ_H7,
 SQ_A8, SQ_B8, SQ_C8, SQ_D8, SQ_E8, SQ_F8, SQ_G8, SQ_H8) = range(64)
SQ_NONE = 64
SQUARE_NB = 64

FILE_A, FILE_B, FILE_C, FILE_D, FILE_E, FILE_F, FILE_G, FILE_H = range(8)
RANK_1, RANK_2, RANK_3, RANK_4, RANK_5, RANK_6, RANK_7, RANK_8 = range(8)
FILE_NB = 8
RANK_NB = 8

NORTH = 8
EAST = 1
SOUTH = -8
WEST = -1

# Castling rights bit flags
NO_CASTLING = 0
WHITE_OO = 1
WHITE_OOO = 2
BLACK_OO = 4
BLACK_OOO = 8
KING_SIDE = WHITE_OO | BLACK_OO
QUEEN_SIDE = WHITE_OOO | BLACK_OOO
WHITE_CASTLING = WHITE_OO | WHITE_OOO
BLACK_CASTLING = BLACK_OO | BLACK_OOO
ANY_CASTLING = WHITE_CASTLING | BLACK_CASTLING
CASTLING_RIGHT_NB = 16

# Score values
MAX_PLY = 246
MAX_MOVES = 256
VALUE_ZERO = 0
VALUE_DRAW = 0
VALUE_NONE = 32002
VALUE_INFINITE = 32001
VALUE_MATE = 32000
VALUE_MATE_IN_MAX_PLY = VALUE_MATE - MAX_PLY
VALUE_MATED_IN_MAX_PLY = -VALUE_MATE_IN_MAX_PLY
VALUE_TB = VALUE_MATE_IN_MAX_PLY - 1
VALUE_TB_WIN_IN_MAX_PLY = VALUE_TB - MAX_PLY
VALUE_TB_LOSS_IN_MAX_PLY = -VALUE_TB_WIN_IN_MAX_PLY


class MoveType(IntEnum):
    """Special move kinds, stored in the top two bits of a move."""

    NORMAL = 0
    PROMOTION = 1 << 14
    EN_PASSANT = 2 << 14
    CASTLING = 3 << 14


class Move:
    """A move packed into 16 bits: destination, origin, promotion and kind.

    Castling is encoded as "king captures its own rook".
    """

    __slots__ = ("raw",)

    def __init__(
        self,
        from_sq: int,
        to_sq: int,
        move_type: MoveType = MoveType.NORMAL,
        promotion: PieceType = PieceType.KNIGHT,
    ) -> None:
        if not (0 <= from_sq < SQUARE_NB and 0 <= to_sq < SQUARE_NB):
            raise ValueError(f"square out of range: {from_sq}, {to_sq}")
        if not PieceType.KNIGHT <= promotion <= PieceType.QUEEN:
            raise ValueError(f"invalid promotion piece: {promotion!r}")
        self.raw = (
            int(MoveType(move_type))
            | ((int(promotion) - PieceType.KNIGHT) << 12)
            | (from_sq << 6)
            | to_sq
        )

    @classmethod
    def none(cls) -> "Move":
        """The empty move."""
        return cls(0, 0)

    @classmethod
    def null(cls) -> "Move":
        """The null move, used to pass the turn."""
        return cls(1, 1)

    @property
    def from_sq(self) -> int:
        return (self.raw >> 6) & 0x3F

    @property
    def to_sq(self) -> int:
        return self.raw & 0x3F

    @property
    def move_type(self) -> MoveType:
        return MoveType(self.raw & (3 << 14))

    @property
    def promotion_type(self) -> PieceType:
        return PieceType(((self.raw >> 12) & 3) + PieceType.KNIGHT)

    def from_to(self) -> int:
        """Origin and destination packed into 12 bits."""
        return self.raw & 0xFFF

    def is_ok(self) -> bool:
        """True unless this is the empty or the null move."""
        return self.raw not in (0, 65)

    def __bool__(self) -> bool:
        return self.raw != 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Move):
            return self.raw == other.raw
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.raw)

    def __repr__(self) -> str:
        if self.raw == 0:
            return "Move.none()"
        if self.raw == 65:
            return "Move.null()"
        text = square_name(self.from_sq) + square_name(self.to_sq)
        if self.move_type is MoveType.PROMOTION:
            text += " pnbrqk"[self.promotion_type]
        return f"Move({text}, {self.move_type.name})"


def make_square(file: int, rank: int) -> int:
    return (rank << 3) | file


def file_of(square: int) -> int:
    return square & 7


def rank_of(square: int) -> int:
    return square >> 3


def relative_square(color: Color, square: int) -> int:
    """Mirror the square vertically for Black."""
    return square ^ (int(color) * 56)


def relative_rank(color: Color, square: int) -> int:
    """Rank of the square as seen from the given side."""
    return rank_of(square) ^ (int(color) * 7)


def make_piece(color: Color, piece_type: PieceType) -> int:
    return (int(color) << 3) + int(piece_type)


def type_of(piece: int) -> PieceType:
    return PieceType(piece & 7)


def color_of(piece: int) -> Color:
    if piece == NO_PIECE:
        raise ValueError("an empty square has no colour")
    return Color(piece >> 3)


def pawn_push(color: Color) -> int:
    return NORTH if color == Color.WHITE else SOUTH


def square_name(square: int) -> str:
    """Algebraic name of a square, such as ``e4``."""
    if not 0 <= square < SQUARE_NB:
        raise ValueError(f"square out of range: {square}")
    return "abcdefgh"[file_of(square)] + "12345678"[rank_of(square)]


def parse_square(name: str) -> int:
    """Square index of an algebraic name such as ``e4``."""
    if len(name) != 2 or name[0] not in "abcdefgh" or name[1] not in "12345678":
        raise ValueError(f"not a square: {name!r}")
    return make_square(ord(name[0]) - ord("a"), ord(name[1]) - ord("1"))


def is_valid(value: int) -> bool:
    return value != VALUE_NONE


def is_win(value: int) -> bool:
    return value >= VALUE_TB_WIN_IN_MAX_PLY


def is_loss(value: int) -> bool:
    return value <= VALUE_TB_LOSS_IN_MAX_PLY


def is_decisive(value: int) -> bool:
    return is_win(value) or is_loss(value)


def mate_in(ply: int) -> int:
    return VALUE_MATE - ply


def mated_in(ply: int) -> int:
    return -VALUE_MATE + ply