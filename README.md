# chesscore

A pure-Python chess core: board representation on 64-bit bitboards, FEN
input and output (standard, Shredder-FEN and X-FEN castling notation,
Chess960 included), incremental Zobrist hashing, pseudo-legal and legal move
generation, check detection, static exchange evaluation, draw and repetition
detection, and the data types a search driver reports with.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Quick start

```python
from chesscore.position import Position
from chesscore.movegen import legal_moves
from chesscore.types import square_name

pos = Position.from_fen(
    "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1", False
)
print(pos.render())

moves = legal_moves(pos)
print(len(moves))                        # 20

move = moves[0]
print(square_name(move.from_sq), square_name(move.to_sq))
pos.do_move(move, pos.gives_check(move))
print(pos.fen())
pos.undo_move(move)
```

## Modules

- `chesscore.types`: `Color` (`~color` gives the opponent), `PieceType`,
  `MoveType`, and `Move`, a 16-bit packed move with `from_sq`, `to_sq`,
  `move_type`, `promotion_type`, `from_to()`, `is_ok()` and the special
  values `Move.none()` and `Move.null()`. Castling is encoded as the king
  capturing its own rook. Square helpers: `make_square`, `file_of`,
  `rank_of`, `relative_square`, `relative_rank`, `pawn_push`,
  `square_name`, `parse_square`. Piece helpers: `make_piece`, `type_of`,
  `color_of`. Score helpers: `mate_in`, `mated_in`, `is_win`, `is_loss`,
  `is_decisive`, `is_valid`.
- `chesscore.bitboard`: bitboards as Python ints: `square_bb`, `popcount`,
  `lsb`, `iter_squares`, `more_than_one`, `pawn_attacks_bb`,
  `pawn_attacks_from_bb`, `attacks_bb`, `between_bb` and `line_bb`.
- `chesscore.zobrist`: the deterministic xorshift `PRNG`, the hash keys it
  produces, `make_key`, the cuckoo index functions `h1` / `h2`, and
  `cuckoo_lookup`, which finds the reversible move behind a hash difference.
- `chesscore.movegen`: `pseudo_legal_moves`, `evasions`, `non_evasions`
  and `legal_moves`, each returning a list of `Move`.
- `chesscore.position`: `Position`, with `StateInfo` (the per-ply state
  chain) and `DirtyPiece` (the pieces a move changed).
  - Build with `Position.from_fen(fen, chess960)` or
    `Position.from_endgame_code("KBPKN", color)`; read back with `fen()`.
  - Query the board with `pieces`, `pieces_of`, `piece_on`, `empty`,
    `count`, `king_square`, `attackers_to`, `attackers_to_exist`,
    `attacks_by`, and the properties `side_to_move`, `checkers`,
    `ep_square`, `rule50_count`, `game_ply`, `key`, `pawn_key`,
    `material_key`, `minor_piece_key`.
  - Castling: `castling_rights`, `can_castle`, `castling_impeded`,
    `castling_rook_square`.
  - Moves: `legal`, `pseudo_legal`, `gives_check`, `capture`,
    `capture_stage`, `moved_piece`, `see_ge`; make and take back with
    `do_move` / `undo_move` and `do_null_move` / `undo_null_move`.
  - Draws: `is_draw` (fifty-move rule and repetition; stalemate is not
    detected), `is_repetition`, `has_repeated`, `upcoming_repetition`.
  - `flip` swaps the colours, `is_ok` checks internal consistency, and
    `render` returns an ASCII diagram with the FEN, hash key and checkers.
- `chesscore.score`: `Mate`, `Tablebase` and `InternalUnits`, and
  `score_from_value(value, to_cp)`, which classifies a value; `to_cp` is a
  function you supply to convert ordinary values to display units.
- `chesscore.search`: `NodeType`, `RootMove` (sorting puts the best score
  first, ties broken by the previous iteration's score; compares equal to
  its first move), `LimitsType`, the `InfoShort` / `InfoFull` /
  `InfoIteration` reports, and `Skill`, a strength setting built from a
  skill level or an Elo rating, with `enabled()` and `time_to_pick(depth)`.

## What this package does not do

There is no search, no position evaluation, no transposition table, no
endgame tablebase probing and no engine protocol or command-line program.
`chesscore.search` holds only the data types such a driver would use;
`Skill` does not choose moves.

## Errors

Malformed FEN strings, out-of-range squares, bad endgame codes and invalid
`Move` arguments raise `ValueError`, as do making a move from a square
without a piece of the side to move and undoing with no move to undo.