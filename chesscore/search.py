"""Data types shared by the search: root moves, limits, progress reports and skill."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .score import Score
from .types import VALUE_INFINITE, Move


class NodeType(Enum):
    """Kind of node in the search tree."""

    NON_PV = 0
    PV = 1
    ROOT = 2


class RootMove:
    """A move at the root with its score and principal variation.

    Sorting a list of root moves puts the best score first; ties are broken
    by the score of the previous iteration.
    """

    def __init__(self, move: Move) -> None:
        self.effort = 0
        self.score = -VALUE_INFINITE
        self.previous_score = -VALUE_INFINITE
        self.average_score = -VALUE_INFINITE
        self.mean_squared_score = -VALUE_INFINITE * VALUE_INFINITE
        self.uci_score = -VALUE_INFINITE
        self.score_lowerbound = False
        self.score_upperbound = False
        self.sel_depth = 0
        self.tb_rank = 0
        self.tb_score = 0
        self.pv: list[Move] = [move]

    def __lt__(self, other: "RootMove") -> bool:
        if not isinstance(other, RootMove):
            return NotImplemented
        if other.score != self.score:
            return other.score < self.score
        return other.previous_score < self.previous_score

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Move):
            return self.pv[0] == other
        if isinstance(other, RootMove):
            return self.pv[0] == other.pv[0]
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RootMove({self.pv[0]!r}, score={self.score})"


@dataclass
class LimitsType:
    """Constraints the caller puts on a search."""

    searchmoves: list[str] = field(default_factory=list)
    time: list[int] = field(default_factory=lambda: [0, 0])
    inc: list[int] = field(default_factory=lambda: [0, 0])
    npmsec: int = 0
    movetime: int = 0
    start_time: int = 0
    movestogo: int = 0
    depth: int = 0
    mate: int = 0
    perft: int = 0
    infinite: int = 0
    nodes: int = 0
    ponder_mode: bool = False

    def use_time_management(self) -> bool:
        """True when either side has a clock time set."""
        return bool(self.time[0] or self.time[1])


@dataclass
class InfoShort:
    """Minimal progress report: depth and score."""

    depth: int = 0
    score: Optional[Score] = None


@dataclass
class InfoFull(InfoShort):
    """Full progress report for one principal variation."""

    sel_depth: int = 0
    multi_pv: int = 0
    wdl: str = ""
    bound: str = ""
    time_ms: int = 0
    nodes: int = 0
    nps: int = 0
    tb_hits: int = 0
    pv: str = ""
    hashfull: int = 0


@dataclass
class InfoIteration:
    """Report of the root move currently being searched."""

    depth: int = 0
    currmove: str = ""
    currmovenumber: int = 0


class Skill:
    """Strength limit, either as a skill level or derived from an Elo rating."""

    LOWEST_ELO = 1320
    HIGHEST_ELO = 3190

    def __init__(self, skill_level: int, uci_elo: int = 0) -> None:
        if uci_elo:
            e = (uci_elo - self.LOWEST_ELO) / (self.HIGHEST_ELO - self.LOWEST_ELO)
            raw = ((37.2473 * e - 40.8525) * e + 22.2943) * e - 0.311438
            self.level = min(max(raw, 0.0), 19.0)
        else:
            self.level = float(skill_level)
        self.best = Move.none()

    def enabled(self) -> bool:
        return self.level < 20.0

    def time_to_pick(self, depth: int) -> bool:
        """Whether this iteration depth is the one at which a move is picked."""
        return depth == 1 + int(self.level)