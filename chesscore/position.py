"""Board representation: piece placement, state history, hashing and move making."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from . import movegen
from .bitboard import (
    RANK_1_BB,
    RANK_8_BB,
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
from .types import (
    ANY_CASTLING,
    BISHOP_VALUE,
    BLACK,
    EAST,
    KING_SIDE,
    KNIGHT_VALUE,
    NO_PIECE,
    PAWN_VALUE,
    PIECE_NB,
    PIECE_TO_CHAR,
    PIECE_TYPE_NB,
    PIECE_VALUE,
    PIECES,
    QUEEN_SIDE,
    QUEEN_VALUE,
    RANK_1,
    RANK_2,
    RANK_6,
    RANK_8,
    ROOK_VALUE,
    SOUTH,
    SQ_A1,
    SQ_C1,
    SQ_D1,
    SQ_F1,
    SQ_G1,
    SQ_H1,
    SQ_NONE,
    SQUARE_NB,
    WEST,
    WHITE,
    WHITE_OO,
    WHITE_OOO,
    BLACK_OO,
    BLACK_OOO,
    CASTLING_RIGHT_NB,
    Color,
    Move,
    MoveType,
    PieceType,
    color_of,
    file_of,
    make_piece,
    make_square,
    pawn_push,
    rank_of,
    relative_rank,
    relative_square,
    square_name,
    type_of,
)
from .zobrist import CASTLING, ENPASSANT, NO_PAWNS, PSQ, SIDE, cuckoo_lookup, make_key

_P = PieceType


@dataclass
class StateInfo:
    """Per-ply information needed to restore a position when a move is retracted."""

    material_key: int = 0
    pawn_key: int = 0
    minor_piece_key: int = 0
    non_pawn_key: list[int] = field(default_factory=lambda: [0, 0])
    non_pawn_material: list[int] = field(default_factory=lambda: [0, 0])
    castling_rights: int = 0
    rule50: int = 0
    plies_from_null: int = 0
    ep_square: int = SQ_NONE
    key: int = 0
    checkers: int = 0
    previous: Optional["StateInfo"] = field(default=None, repr=False)
    next: Optional["StateInfo"] = field(default=None, repr=False)
    blockers_for_king: list[int] = field(default_factory=lambda: [0, 0])
    pinners: list[int] = field(default_factory=lambda: [0, 0])
    check_squares: list[int] = field(default_factory=lambda: [0] * PIECE_TYPE_NB)
    captured_piece: int = NO_PIECE
    repetition: int = 0

    def carried_over(self) -> "StateInfo":
        """A new state holding the fields that survive a move."""
        return StateInfo(
            material_key=self.material_key,
            pawn_key=self.pawn_key,
            minor_piece_key=self.minor_piece_key,
            non_pawn_key=list(self.non_pawn_key),
            non_pawn_material=list(self.non_pawn_material),
            castling_rights=self.castling_rights,
            rule50=self.rule50,
            plies_from_null=self.plies_from_null,
            ep_square=self.ep_square,
        )


@dataclass
class DirtyPiece:
    """Pieces changed by a move; SQ_NONE marks a piece that appeared or vanished."""

    dirty_num: int = 1
    piece: list[int] = field(default_factory=lambda: [NO_PIECE] * 3)
    from_sq: list[int] = field(default_factory=lambda: [SQ_NONE] * 3)
    to_sq: list[int] = field(default_factory=lambda: [SQ_NONE] * 3)


class Position:
    """A chess position with its chain of previous states."""

    def __init__(self) -> None:
        self._clear()

    def _clear(self) -> None:
        self.board = [NO_PIECE] * SQUARE_NB
        self._by_type = [0] * PIECE_TYPE_NB
        self._by_color = [0, 0]
        self._piece_count = [0] * PIECE_NB
        self._castling_rights_mask = [0] * SQUARE_NB
        self._castling_rook_square = [SQ_NONE] * CASTLING_RIGHT_NB
        self._castling_path = [0] * CASTLING_RIGHT_NB
        self._st = StateInfo()
        self.game_ply = 0
        self.side_to_move = WHITE
        self.chess960 = False

    # ----- setting up -------------------------------------------------

    @classmethod
    def from_fen(cls, fen: str, chess960: bool = False) -> "Position":
        """Build a position from a FEN (or Shredder/X-FEN) string."""
        pos = cls()
        pos._setup(fen, chess960)
        return pos

    @classmethod
    def from_endgame_code(cls, code: str, color: Color) -> "Position":
        """Build a position from an endgame code such as ``KBPKN``.

        The strong side gets ``color``; mainly useful for its material key.
        """
        if not code or code[0] != "K" or code.find("K", 1) < 0:
            raise ValueError(f"not an endgame code: {code!r}")
        second_king = code.find("K", 1)
        v = code.find("v")
        strong_end = second_king if v < 0 else min(v, second_king)
        sides = [code[second_king:], code[:strong_end]]
        if not all(0 < len(s) < 8 for s in sides):
            raise ValueError(f"not an endgame code: {code!r}")
        sides[int(color)] = sides[int(color)].lower()
        fen = (
            f"8/{sides[0]}{8 - len(sides[0])}/8/8/8/8/"
            f"{sides[1]}{8 - len(sides[1])}/8 w - - 0 10"
        )
        return cls.from_fen(fen, False)

    def _setup(self, fen: str, chess960: bool) -> None:
        self._clear()
        fields = fen.split()
        if len(fields) < 2:
            raise ValueError(f"incomplete FEN: {fen!r}")

        sq = make_square(0, RANK_8)
        for token in fields[0]:
            if token.isdigit():
                sq += int(token) * EAST
            elif token == "/":
                sq += 2 * SOUTH
            else:
                idx = PIECE_TO_CHAR.find(token)
                if idx > 0 and token != " ":
                    if not 0 <= sq < SQUARE_NB:
                        raise ValueError(f"piece placement overflows the board: {fen!r}")
                    self.put_piece(idx, sq)
                    sq += 1

        for c in (WHITE, BLACK):
            if self._piece_count[make_piece(c, _P.KING)] != 1:
                raise ValueError(f"each side needs exactly one king: {fen!r}")

        self.side_to_move = WHITE if fields[1] == "w" else BLACK

        castling = fields[2] if len(fields) > 2 else "-"
        for token in castling:
            c = BLACK if token.islower() else WHITE
            rook = make_piece(c, _P.ROOK)
            up = token.upper()
            if up == "K":
                rsq = relative_square(c, SQ_H1)
                while self.board[rsq] != rook:
                    if file_of(rsq) == 0:
                        raise ValueError(f"no rook for castling right {token!r}")
                    rsq -= 1
            elif up == "Q":
                rsq = relative_square(c, SQ_A1)
                while self.board[rsq] != rook:
                    if file_of(rsq) == 7:
                        raise ValueError(f"no rook for castling right {token!r}")
                    rsq += 1
            elif "A" <= up <= "H":
                rsq = make_square(ord(up) - ord("A"), relative_rank(c, RANK_1))
            else:
                continue
            self._set_castling_right(c, rsq)

        st = self._st
        us = self.side_to_move
        them = ~us
        enpassant = False
        ep = fields[3] if len(fields) > 3 else "-"
        if len(ep) >= 2 and "a" <= ep[0] <= "h" and ep[1] == ("6" if us == WHITE else "3"):
            st.ep_square = make_square(ord(ep[0]) - ord("a"), ord(ep[1]) - ord("1"))
            eps = st.ep_square
            enpassant = bool(
                pawn_attacks_bb(them, eps) & self.pieces_of(us, _P.PAWN)
                and self.pieces_of(them, _P.PAWN) & square_bb(eps + pawn_push(them))
                and not self.pieces() & (square_bb(eps) | square_bb(eps + pawn_push(us)))
            )
        if not enpassant:
            st.ep_square = SQ_NONE

        try:
            st.rule50 = int(fields[4]) if len(fields) > 4 else 0
            fullmove = int(fields[5]) if len(fields) > 5 else 0
        except ValueError as exc:
            raise ValueError(f"bad move counters in FEN: {fen!r}") from exc
        self.game_ply = max(2 * (fullmove - 1), 0) + (us == BLACK)
        self.chess960 = chess960
        self._set_state()

    def _set_castling_right(self, c: Color, rfrom: int) -> None:
        kfrom = self.king_square(c)
        side = KING_SIDE if kfrom < rfrom else QUEEN_SIDE
        cr = side & (0b0011 if c == WHITE else 0b1100)
        self._st.castling_rights |= cr
        self._castling_rights_mask[kfrom] |= cr
        self._castling_rights_mask[rfrom] |= cr
        self._castling_rook_square[cr] = rfrom
        kto = relative_square(c, SQ_G1 if cr & KING_SIDE else SQ_C1)
        rto = relative_square(c, SQ_F1 if cr & KING_SIDE else SQ_D1)
        self._castling_path[cr] = (between_bb(rfrom, rto) | between_bb(kfrom, kto)) & ~(
            square_bb(kfrom) | square_bb(rfrom)
        )

    def _set_check_info(self) -> None:
        self._update_slider_blockers(WHITE)
        self._update_slider_blockers(BLACK)
        st = self._st
        ksq = self.king_square(~self.side_to_move)
        occ = self.pieces()
        st.check_squares[_P.PAWN] = pawn_attacks_bb(~self.side_to_move, ksq)
        st.check_squares[_P.KNIGHT] = attacks_bb(_P.KNIGHT, ksq)
        st.check_squares[_P.BISHOP] = attacks_bb(_P.BISHOP, ksq, occ)
        st.check_squares[_P.ROOK] = attacks_bb(_P.ROOK, ksq, occ)
        st.check_squares[_P.QUEEN] = st.check_squares[_P.BISHOP] | st.check_squares[_P.ROOK]
        st.check_squares[_P.KING] = 0

    def _set_state(self) -> None:
        st = self._st
        us = self.side_to_move
        st.key = st.material_key = st.minor_piece_key = 0
        st.non_pawn_key = [0, 0]
        st.pawn_key = NO_PAWNS
        st.non_pawn_material = [0, 0]
        st.checkers = self.attackers_to(self.king_square(us)) & self.pieces_of(~us)
        self._set_check_info()

        for s in iter_squares(self.pieces()):
            pc = self.board[s]
            st.key ^= PSQ[pc][s]
            if type_of(pc) == _P.PAWN:
                st.pawn_key ^= PSQ[pc][s]
            else:
                st.non_pawn_key[color_of(pc)] ^= PSQ[pc][s]
                if type_of(pc) != _P.KING:
                    st.non_pawn_material[color_of(pc)] += PIECE_VALUE[pc]
                    if type_of(pc) <= _P.BISHOP:
                        st.minor_piece_key ^= PSQ[pc][s]

        if st.ep_square != SQ_NONE:
            st.key ^= ENPASSANT[file_of(st.ep_square)]
        if us == BLACK:
            st.key ^= SIDE
        st.key ^= CASTLING[st.castling_rights]
        for pc in PIECES:
            for cnt in range(self._piece_count[pc]):
                st.material_key ^= PSQ[pc][8 + cnt]

    def _update_slider_blockers(self, c: Color) -> None:
        st = self._st
        ksq = self.king_square(c)
        st.blockers_for_king[c] = 0
        st.pinners[~c] = 0
        snipers = (
            (attacks_bb(_P.ROOK, ksq) & self.pieces(_P.QUEEN, _P.ROOK))
            | (attacks_bb(_P.BISHOP, ksq) & self.pieces(_P.QUEEN, _P.BISHOP))
        ) & self.pieces_of(~c)
        occupancy = self.pieces() ^ snipers
        for sniper in iter_squares(snipers):
            b = between_bb(ksq, sniper) & occupancy
            if b and not more_than_one(b):
                st.blockers_for_king[c] |= b
                if b & self.pieces_of(c):
                    st.pinners[~c] |= square_bb(sniper)

    # ----- output -----------------------------------------------------

    def fen(self) -> str:
        """FEN of the position; Shredder-FEN castling letters in Chess960."""
        rows = []
        for r in range(RANK_8, RANK_1 - 1, -1):
            row, empty = "", 0
            for f in range(8):
                pc = self.board[make_square(f, r)]
                if pc == NO_PIECE:
                    empty += 1
                    continue
                if empty:
                    row += str(empty)
                    empty = 0
                row += PIECE_TO_CHAR[pc]
            if empty:
                row += str(empty)
            rows.append(row)
        castling = ""
        for cr, letter, base in (
            (WHITE_OO, "K", "A"),
            (WHITE_OOO, "Q", "A"),
            (BLACK_OO, "k", "a"),
            (BLACK_OOO, "q", "a"),
        ):
            if self.can_castle(cr):
                castling += (
                    chr(ord(base) + file_of(self.castling_rook_square(cr)))
                    if self.chess960
                    else letter
                )
        ep = "-" if self.ep_square == SQ_NONE else square_name(self.ep_square)
        fullmove = 1 + (self.game_ply - (self.side_to_move == BLACK)) // 2
        side = "w" if self.side_to_move == WHITE else "b"
        return f"{'/'.join(rows)} {side} {castling or '-'} {ep} {self.rule50_count} {fullmove}"

    def render(self) -> str:
        """ASCII diagram of the board with FEN, key and checkers."""
        sep = " +---+---+---+---+---+---+---+---+\n"
        out = "\n" + sep
        for r in range(RANK_8, RANK_1 - 1, -1):
            for f in range(8):
                out += " | " + PIECE_TO_CHAR[self.board[make_square(f, r)]]
            out += f" | {r + 1}\n" + sep
        out += "   a   b   c   d   e   f   g   h\n"
        out += f"\nFen: {self.fen()}\nKey: {self.key:016X}\nCheckers: "
        out += "".join(square_name(s) + " " for s in iter_squares(self.checkers))
        return out

    def __str__(self) -> str:
        return self.render()

    # ----- accessors --------------------------------------------------

    @property
    def state(self) -> StateInfo:
        return self._st

    @property
    def ep_square(self) -> int:
        return self._st.ep_square

    @property
    def checkers(self) -> int:
        return self._st.checkers

    @property
    def captured_piece(self) -> int:
        return self._st.captured_piece

    @property
    def rule50_count(self) -> int:
        return self._st.rule50

    @property
    def key(self) -> int:
        st = self._st
        if st.rule50 < 14:
            return st.key
        return st.key ^ make_key((st.rule50 - 14) // 8)

    @property
    def material_key(self) -> int:
        return self._st.material_key

    @property
    def pawn_key(self) -> int:
        return self._st.pawn_key

    @property
    def minor_piece_key(self) -> int:
        return self._st.minor_piece_key

    def non_pawn_key(self, color: Color) -> int:
        return self._st.non_pawn_key[color]

    def non_pawn_material(self, color: Optional[Color] = None) -> int:
        if color is None:
            return sum(self._st.non_pawn_material)
        return self._st.non_pawn_material[color]

    def pieces(self, *args: PieceType) -> int:
        """Union of the given piece types of both colours; all pieces with no arguments."""
        if not args:
            return self._by_type[0]
        result = 0
        for pt in args:
            result |= self._by_type[pt]
        return result

    def pieces_of(self, color: Color, *args: PieceType) -> int:
        """Pieces of one colour, optionally restricted to some types."""
        if not args:
            return self._by_color[color]
        return self._by_color[color] & self.pieces(*args)

    def piece_on(self, square: int) -> int:
        if not 0 <= square < SQUARE_NB:
            raise ValueError(f"square out of range: {square}")
        return self.board[square]

    def empty(self, square: int) -> bool:
        return self.piece_on(square) == NO_PIECE

    def count(self, piece_type: PieceType, color: Optional[Color] = None) -> int:
        if color is None:
            return self.count(piece_type, WHITE) + self.count(piece_type, BLACK)
        return self._piece_count[make_piece(color, piece_type)]

    def king_square(self, color: Color) -> int:
        kings = self.pieces_of(color, _P.KING)
        if not kings:
            raise ValueError("no king on the board")
        return lsb(kings)

    def castling_rights(self, color: Color) -> int:
        return self._st.castling_rights & (0b0011 if color == WHITE else 0b1100)

    def can_castle(self, rights: int) -> bool:
        return bool(self._st.castling_rights & rights)

    def _check_single_right(self, rights: int) -> None:
        if rights not in (WHITE_OO, WHITE_OOO, BLACK_OO, BLACK_OOO):
            raise ValueError(f"not a single castling right: {rights}")

    def castling_impeded(self, rights: int) -> bool:
        self._check_single_right(rights)
        return bool(self.pieces() & self._castling_path[rights])

    def castling_rook_square(self, rights: int) -> int:
        self._check_single_right(rights)
        return self._castling_rook_square[rights]

    def blockers_for_king(self, color: Color) -> int:
        return self._st.blockers_for_king[color]

    def pinners(self, color: Color) -> int:
        return self._st.pinners[color]

    def check_squares(self, piece_type: PieceType) -> int:
        return self._st.check_squares[piece_type]

    def attackers_to(self, square: int, occupied: Optional[int] = None) -> int:
        """All pieces of both colours attacking ``square``."""
        if occupied is None:
            occupied = self.pieces()
        return (
            (attacks_bb(_P.ROOK, square, occupied) & self.pieces(_P.ROOK, _P.QUEEN))
            | (attacks_bb(_P.BISHOP, square, occupied) & self.pieces(_P.BISHOP, _P.QUEEN))
            | (pawn_attacks_bb(BLACK, square) & self.pieces_of(WHITE, _P.PAWN))
            | (pawn_attacks_bb(WHITE, square) & self.pieces_of(BLACK, _P.PAWN))
            | (attacks_bb(_P.KNIGHT, square) & self.pieces(_P.KNIGHT))
            | (attacks_bb(_P.KING, square) & self.pieces(_P.KING))
        )

    def attackers_to_exist(self, square: int, occupied: int, color: Color) -> bool:
        """Whether any piece of ``color`` attacks ``square`` given the occupancy."""
        rq = self.pieces_of(color, _P.ROOK, _P.QUEEN)
        bq = self.pieces_of(color, _P.BISHOP, _P.QUEEN)
        if attacks_bb(_P.ROOK, square) & rq and attacks_bb(_P.ROOK, square, occupied) & rq:
            return True
        if attacks_bb(_P.BISHOP, square) & bq and attacks_bb(_P.BISHOP, square, occupied) & bq:
            return True
        return bool(
            (
                (pawn_attacks_bb(~color, square) & self.pieces(_P.PAWN))
                | (attacks_bb(_P.KNIGHT, square) & self.pieces(_P.KNIGHT))
                | (attacks_bb(_P.KING, square) & self.pieces(_P.KING))
            )
            & self.pieces_of(color)
        )

    def attacks_by(self, piece_type: PieceType, color: Color) -> int:
        """Squares attacked by all pieces of one type and colour."""
        if piece_type == _P.PAWN:
            return pawn_attacks_from_bb(color, self.pieces_of(color, _P.PAWN))
        threats = 0
        for s in iter_squares(self.pieces_of(color, piece_type)):
            threats |= attacks_bb(piece_type, s, self.pieces())
        return threats

    # ----- move properties --------------------------------------------

    def moved_piece(self, move: Move) -> int:
        return self.piece_on(move.from_sq)

    def capture(self, move: Move) -> bool:
        mt = move.move_type
        return (not self.empty(move.to_sq) and mt != MoveType.CASTLING) or mt == MoveType.EN_PASSANT

    def capture_stage(self, move: Move) -> bool:
        return self.capture(move) or (
            move.move_type == MoveType.PROMOTION and move.promotion_type == _P.QUEEN
        )

    def legal(self, move: Move) -> bool:
        """Whether a pseudo-legal move leaves the own king safe."""
        us = self.side_to_move
        frm, to = move.from_sq, move.to_sq

        if move.move_type == MoveType.EN_PASSANT:
            ksq = self.king_square(us)
            capsq = to - pawn_push(us)
            occupied = (self.pieces() ^ square_bb(frm) ^ square_bb(capsq)) | square_bb(to)
            return not (
                attacks_bb(_P.ROOK, ksq, occupied) & self.pieces_of(~us, _P.QUEEN, _P.ROOK)
            ) and not (
                attacks_bb(_P.BISHOP, ksq, occupied) & self.pieces_of(~us, _P.QUEEN, _P.BISHOP)
            )

        if move.move_type == MoveType.CASTLING:
            to = relative_square(us, SQ_G1 if to > frm else SQ_C1)
            step = WEST if to > frm else EAST
            s = to
            while s != frm:
                if self.attackers_to_exist(s, self.pieces(), ~us):
                    return False
                s += step
            return not self.chess960 or not (self.blockers_for_king(us) & square_bb(move.to_sq))

        if type_of(self.board[frm]) == _P.KING:
            return not self.attackers_to_exist(to, self.pieces() ^ square_bb(frm), ~us)

        return not (self.blockers_for_king(us) & square_bb(frm)) or bool(
            line_bb(frm, to) & self.pieces_of(us, _P.KING)
        )

    def pseudo_legal(self, move: Move) -> bool:
        """Whether an arbitrary move could be generated in this position."""
        us = self.side_to_move
        frm, to = move.from_sq, move.to_sq
        pc = self.board[frm]
        if move.move_type != MoveType.NORMAL:
            return move in movegen.pseudo_legal_moves(self)
        if pc == NO_PIECE or color_of(pc) != us:
            return False
        to_bb = square_bb(to)
        if self.pieces_of(us) & to_bb:
            return False
        if type_of(pc) == _P.PAWN:
            if (RANK_8_BB | RANK_1_BB) & to_bb:
                return False
            push = pawn_push(us)
            if (
                not (pawn_attacks_bb(us, frm) & self.pieces_of(~us) & to_bb)
                and not (frm + push == to and self.empty(to))
                and not (
                    frm + 2 * push == to
                    and relative_rank(us, frm) == RANK_2
                    and self.empty(to)
                    and self.empty(to - push)
                )
            ):
                return False
        elif not attacks_bb(type_of(pc), frm, self.pieces()) & to_bb:
            return False

        if self.checkers:
            if type_of(pc) != _P.KING:
                if more_than_one(self.checkers):
                    return False
                if not between_bb(self.king_square(us), lsb(self.checkers)) & to_bb:
                    return False
            elif self.attackers_to_exist(to, self.pieces() ^ square_bb(frm), ~us):
                return False
        return True

    def gives_check(self, move: Move) -> bool:
        """Whether a pseudo-legal move checks the opponent."""
        us = self.side_to_move
        frm, to = move.from_sq, move.to_sq
        if self.check_squares(type_of(self.board[frm])) & square_bb(to):
            return True
        if self.blockers_for_king(~us) & square_bb(frm):
            return (
                not (line_bb(frm, to) & self.pieces_of(~us, _P.KING))
                or move.move_type == MoveType.CASTLING
            )
        mt = move.move_type
        if mt == MoveType.NORMAL:
            return False
        if mt == MoveType.PROMOTION:
            return bool(
                attacks_bb(move.promotion_type, to, self.pieces() ^ square_bb(frm))
                & self.pieces_of(~us, _P.KING)
            )
        if mt == MoveType.EN_PASSANT:
            capsq = make_square(file_of(to), rank_of(frm))
            b = (self.pieces() ^ square_bb(frm) ^ square_bb(capsq)) | square_bb(to)
            ksq = self.king_square(~us)
            return bool(
                (attacks_bb(_P.ROOK, ksq, b) & self.pieces_of(us, _P.QUEEN, _P.ROOK))
                | (attacks_bb(_P.BISHOP, ksq, b) & self.pieces_of(us, _P.QUEEN, _P.BISHOP))
            )
        rto = relative_square(us, SQ_F1 if to > frm else SQ_D1)
        return bool(self.check_squares(_P.ROOK) & square_bb(rto))

    # ----- board edits ------------------------------------------------

    def put_piece(self, piece: int, square: int) -> None:
        b = square_bb(square)
        self.board[square] = piece
        self._by_type[0] |= b
        self._by_type[type_of(piece)] |= b
        self._by_color[color_of(piece)] |= b
        self._piece_count[piece] += 1
        self._piece_count[make_piece(color_of(piece), _P.ALL_PIECES)] += 1

    def remove_piece(self, square: int) -> None:
        pc = self.board[square]
        if pc == NO_PIECE:
            raise ValueError(f"no piece on {square_name(square)}")
        b = square_bb(square)
        self._by_type[0] ^= b
        self._by_type[type_of(pc)] ^= b
        self._by_color[color_of(pc)] ^= b
        self.board[square] = NO_PIECE
        self._piece_count[pc] -= 1
        self._piece_count[make_piece(color_of(pc), _P.ALL_PIECES)] -= 1

    def _move_piece(self, frm: int, to: int) -> None:
        pc = self.board[frm]
        from_to = square_bb(frm) | square_bb(to)
        self._by_type[0] ^= from_to
        self._by_type[type_of(pc)] ^= from_to
        self._by_color[color_of(pc)] ^= from_to
        self.board[frm] = NO_PIECE
        self.board[to] = pc

    def _do_castling(
        self, us: Color, frm: int, to: int, do: bool, dp: Optional[DirtyPiece] = None
    ) -> tuple[int, int, int]:
        king_side = to > frm
        rfrom = to
        rto = relative_square(us, SQ_F1 if king_side else SQ_D1)
        to = relative_square(us, SQ_G1 if king_side else SQ_C1)
        if do and dp is not None:
            dp.piece[0], dp.from_sq[0], dp.to_sq[0] = make_piece(us, _P.KING), frm, to
            dp.piece[1], dp.from_sq[1], dp.to_sq[1] = make_piece(us, _P.ROOK), rfrom, rto
            dp.dirty_num = 2
        # Remove both first: in Chess960 the squares may overlap.
        self.remove_piece(frm if do else to)
        self.remove_piece(rfrom if do else rto)
        self.put_piece(make_piece(us, _P.KING), to if do else frm)
        self.put_piece(make_piece(us, _P.ROOK), rto if do else rfrom)
        return to, rfrom, rto

    # ----- making moves -----------------------------------------------

    def do_move(self, move: Move, gives_check: Optional[bool] = None) -> DirtyPiece:
        """Make a legal move and return the pieces it changed."""
        if not move.is_ok():
            raise ValueError("cannot make the empty or null move")
        if gives_check is None:
            gives_check = self.gives_check(move)

        prev = self._st
        k = prev.key ^ SIDE
        st = prev.carried_over()
        st.previous = prev
        prev.next = st
        self._st = st

        self.game_ply += 1
        st.rule50 += 1
        st.plies_from_null += 1

        dp = DirtyPiece()
        us = self.side_to_move
        them = ~us
        frm, to = move.from_sq, move.to_sq
        pc = self.board[frm]
        if pc == NO_PIECE or color_of(pc) != us:
            self._st = prev
            self.game_ply -= 1
            raise ValueError(f"no piece of the side to move on {square_name(frm)}")
        mt = move.move_type
        captured = make_piece(them, _P.PAWN) if mt == MoveType.EN_PASSANT else self.board[to]

        if mt == MoveType.CASTLING:
            _, rfrom, rto = self._do_castling(us, frm, to, True, dp)
            k ^= PSQ[captured][rfrom] ^ PSQ[captured][rto]
            st.non_pawn_key[us] ^= PSQ[captured][rfrom] ^ PSQ[captured][rto]
            captured = NO_PIECE

        if captured:
            capsq = to
            if type_of(captured) == _P.PAWN:
                if mt == MoveType.EN_PASSANT:
                    capsq -= pawn_push(us)
                st.pawn_key ^= PSQ[captured][capsq]
            else:
                st.non_pawn_material[them] -= PIECE_VALUE[captured]
                st.non_pawn_key[them] ^= PSQ[captured][capsq]
                if type_of(captured) <= _P.BISHOP:
                    st.minor_piece_key ^= PSQ[captured][capsq]
            dp.dirty_num = 2
            dp.piece[1], dp.from_sq[1], dp.to_sq[1] = captured, capsq, SQ_NONE
            self.remove_piece(capsq)
            k ^= PSQ[captured][capsq]
            st.material_key ^= PSQ[captured][8 + self._piece_count[captured]]
            st.rule50 = 0

        k ^= PSQ[pc][frm] ^ PSQ[pc][to]

        if st.ep_square != SQ_NONE:
            k ^= ENPASSANT[file_of(st.ep_square)]
            st.ep_square = SQ_NONE

        mask = self._castling_rights_mask[frm] | self._castling_rights_mask[to]
        if st.castling_rights and mask:
            k ^= CASTLING[st.castling_rights]
            st.castling_rights &= ~mask
            k ^= CASTLING[st.castling_rights]

        if mt != MoveType.CASTLING:
            dp.piece[0], dp.from_sq[0], dp.to_sq[0] = pc, frm, to
            self._move_piece(frm, to)

        if type_of(pc) == _P.PAWN:
            if (to ^ frm) == 16 and (
                pawn_attacks_bb(us, to - pawn_push(us)) & self.pieces_of(them, _P.PAWN)
            ):
                st.ep_square = to - pawn_push(us)
                k ^= ENPASSANT[file_of(st.ep_square)]
            elif mt == MoveType.PROMOTION:
                promotion = make_piece(us, move.promotion_type)
                self.remove_piece(to)
                self.put_piece(promotion, to)
                dp.to_sq[0] = SQ_NONE
                n = dp.dirty_num
                dp.piece[n], dp.from_sq[n], dp.to_sq[n] = promotion, SQ_NONE, to
                dp.dirty_num += 1
                k ^= PSQ[promotion][to]
                st.material_key ^= (
                    PSQ[promotion][8 + self._piece_count[promotion] - 1]
                    ^ PSQ[pc][8 + self._piece_count[pc]]
                )
                if move.promotion_type <= _P.BISHOP:
                    st.minor_piece_key ^= PSQ[promotion][to]
                st.non_pawn_material[us] += PIECE_VALUE[promotion]
            st.pawn_key ^= PSQ[pc][frm] ^ PSQ[pc][to]
            st.rule50 = 0
        else:
            st.non_pawn_key[us] ^= PSQ[pc][frm] ^ PSQ[pc][to]
            if type_of(pc) <= _P.BISHOP:
                st.minor_piece_key ^= PSQ[pc][frm] ^ PSQ[pc][to]

        st.key = k
        st.captured_piece = captured
        st.checkers = (
            self.attackers_to(self.king_square(them)) & self.pieces_of(us) if gives_check else 0
        )
        self.side_to_move = them
        self._set_check_info()

        st.repetition = 0
        end = min(st.rule50, st.plies_from_null)
        if end >= 4:
            stp = st.previous.previous
            for i in range(4, end + 1, 2):
                stp = stp.previous.previous
                if stp.key == st.key:
                    st.repetition = -i if stp.repetition else i
                    break
        return dp

    def undo_move(self, move: Move) -> None:
        """Retract the move made last, restoring the previous position exactly."""
        if self._st.previous is None:
            raise ValueError("no move to undo")
        self.side_to_move = ~self.side_to_move
        us = self.side_to_move
        frm, to = move.from_sq, move.to_sq
        pc = self.board[to]
        mt = move.move_type

        if mt == MoveType.PROMOTION:
            self.remove_piece(to)
            pc = make_piece(us, _P.PAWN)
            self.put_piece(pc, to)

        if mt == MoveType.CASTLING:
            self._do_castling(us, frm, to, False)
        else:
            self._move_piece(to, frm)
            captured = self._st.captured_piece
            if captured:
                capsq = to
                if mt == MoveType.EN_PASSANT:
                    capsq -= pawn_push(us)
                self.put_piece(captured, capsq)

        self._st = self._st.previous
        self.game_ply -= 1

    def do_null_move(self) -> None:
        """Pass the turn without moving a piece."""
        if self.checkers:
            raise ValueError("cannot pass while in check")
        prev = self._st
        st = replace(
            prev,
            non_pawn_key=list(prev.non_pawn_key),
            non_pawn_material=list(prev.non_pawn_material),
            blockers_for_king=list(prev.blockers_for_king),
            pinners=list(prev.pinners),
            check_squares=list(prev.check_squares),
            previous=prev,
            next=None,
        )
        prev.next = st
        self._st = st
        if st.ep_square != SQ_NONE:
            st.key ^= ENPASSANT[file_of(st.ep_square)]
            st.ep_square = SQ_NONE
        st.key ^= SIDE
        st.plies_from_null = 0
        self.side_to_move = ~self.side_to_move
        self._set_check_info()
        st.repetition = 0

    def undo_null_move(self) -> None:
        if self._st.previous is None:
            raise ValueError("no null move to undo")
        self._st = self._st.previous
        self.side_to_move = ~self.side_to_move

    # ----- evaluation helpers -----------------------------------------

    def see_ge(self, move: Move, threshold: int = 0) -> bool:
        """Whether the static exchange evaluation of ``move`` is at least ``threshold``."""
        if move.move_type != MoveType.NORMAL:
            return 0 >= threshold
        frm, to = move.from_sq, move.to_sq
        swap = PIECE_VALUE[self.board[to]] - threshold
        if swap < 0:
            return False
        swap = PIECE_VALUE[self.board[frm]] - swap
        if swap <= 0:
            return True

        occupied = self.pieces() ^ square_bb(frm) ^ square_bb(to)
        stm = self.side_to_move
        attackers = self.attackers_to(to, occupied)
        res = 1
        bq = lambda: attacks_bb(_P.BISHOP, to, occupied) & self.pieces(_P.BISHOP, _P.QUEEN)
        rq = lambda: attacks_bb(_P.ROOK, to, occupied) & self.pieces(_P.ROOK, _P.QUEEN)

        while True:
            stm = ~stm
            attackers &= occupied
            stm_attackers = attackers & self.pieces_of(stm)
            if not stm_attackers:
                break
            if self.pinners(~stm) & occupied:
                stm_attackers &= ~self.blockers_for_king(stm)
                if not stm_attackers:
                    break
            res ^= 1

            bb = stm_attackers & self.pieces(_P.PAWN)
            if bb:
                swap = PAWN_VALUE - swap
                if swap < res:
                    break
                occupied ^= bb & -bb
                attackers |= bq()
                continue
            bb = stm_attackers & self.pieces(_P.KNIGHT)
            if bb:
                swap = KNIGHT_VALUE - swap
                if swap < res:
                    break
                occupied ^= bb & -bb
                continue
            bb = stm_attackers & self.pieces(_P.BISHOP)
            if bb:
                swap = BISHOP_VALUE - swap
                if swap < res:
                    break
                occupied ^= bb & -bb
                attackers |= bq()
                continue
            bb = stm_attackers & self.pieces(_P.ROOK)
            if bb:
                swap = ROOK_VALUE - swap
                if swap < res:
                    break
                occupied ^= bb & -bb
                attackers |= rq()
                continue
            bb = stm_attackers & self.pieces(_P.QUEEN)
            if bb:
                swap = QUEEN_VALUE - swap
                occupied ^= bb & -bb
                attackers |= bq() | rq()
                continue
            # King capture: it fails if the opponent still has attackers.
            return bool(res ^ 1) if attackers & ~self.pieces_of(stm) else bool(res)
        return bool(res)

    # ----- draws ------------------------------------------------------

    def is_draw(self, ply: int) -> bool:
        """Draw by the fifty-move rule or by repetition; stalemate is not detected."""
        st = self._st
        if st.rule50 > 99 and (not self.checkers or movegen.legal_moves(self)):
            return True
        return self.is_repetition(ply)

    def is_repetition(self, ply: int) -> bool:
        rep = self._st.repetition
        return bool(rep) and rep < ply

    def has_repeated(self) -> bool:
        """Whether any position repeated since the last capture or pawn move."""
        stc = self._st
        end = min(stc.rule50, stc.plies_from_null)
        while end >= 4:
            end -= 1
            if stc.repetition:
                return True
            stc = stc.previous
        return False

    def upcoming_repetition(self, ply: int) -> bool:
        """Whether the side to move has a move that draws by repetition."""
        st = self._st
        end = min(st.rule50, st.plies_from_null)
        if end < 3:
            return False
        original = st.key
        stp = st.previous
        other = original ^ stp.key ^ SIDE
        for i in range(3, end + 1, 2):
            stp = stp.previous
            other ^= stp.key ^ stp.previous.key ^ SIDE
            stp = stp.previous
            if other:
                continue
            move = cuckoo_lookup(original ^ stp.key)
            if move is None:
                continue
            s1, s2 = move.from_sq, move.to_sq
            if not ((between_bb(s1, s2) ^ square_bb(s2)) & self.pieces()):
                if ply > i or stp.repetition:
                    return True
        return False

    # ----- debugging --------------------------------------------------

    def flip(self) -> None:
        """Swap the colours, mirroring the board vertically."""
        fields = self.fen().split()
        ranks = fields[0].split("/")
        f = "/".join(reversed(ranks)) + " "
        f += "B " if fields[1] == "w" else "W "
        f += fields[2] + " "
        f = f.swapcase()
        ep = fields[3]
        f += ep if ep == "-" else ep[0] + ("6" if ep[1] == "3" else "3")
        f += f" {fields[4]} {fields[5]}"
        self._setup(f, self.chess960)

    def is_ok(self) -> bool:
        """Consistency check of the internal board representation."""
        try:
            if self.board[self.king_square(WHITE)] != make_piece(WHITE, _P.KING):
                return False
            if self.board[self.king_square(BLACK)] != make_piece(BLACK, _P.KING):
                return False
        except ValueError:
            return False
        if self.ep_square != SQ_NONE and relative_rank(self.side_to_move, self.ep_square) != RANK_6:
            return False
        if self.count(_P.KING, WHITE) != 1 or self.count(_P.KING, BLACK) != 1:
            return False
        if self.attackers_to_exist(
            self.king_square(~self.side_to_move), self.pieces(), self.side_to_move
        ):
            return False
        if self.pieces(_P.PAWN) & (RANK_1_BB | RANK_8_BB):
            return False
        if self.pieces_of(WHITE) & self.pieces_of(BLACK):
            return False
        if self.pieces_of(WHITE) | self.pieces_of(BLACK) != self.pieces():
            return False
        for pc in PIECES:
            bb = self.pieces_of(color_of(pc), type_of(pc))
            if self._piece_count[pc] != popcount(bb) or self._piece_count[pc] != self.board.count(pc):
                return False
        for c in (WHITE, BLACK):
            for side in (KING_SIDE, QUEEN_SIDE):
                cr = side & (0b0011 if c == WHITE else 0b1100)
                if not self.can_castle(cr):
                    continue
                rsq = self._castling_rook_square[cr]
                if (
                    self.board[rsq] != make_piece(c, _P.ROOK)
                    or self._castling_rights_mask[rsq] != cr
                    or (self._castling_rights_mask[self.king_square(c)] & cr) != cr
                ):
                    return False
        return True