"""Search scores in the forms a user interface shows them.

A score is a mate distance, a tablebase result or an ordinary value in
centipawn-like units.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from .types import VALUE_INFINITE, VALUE_MATE, VALUE_TB, is_decisive


@dataclass(frozen=True)
class Mate:
    """Mate in ``plies``; negative when the side to move gets mated."""

    plies: int


@dataclass(frozen=True)
class Tablebase:
    """A tablebase win or loss ``plies`` away from the tablebase horizon."""

    plies: int
    win: bool


@dataclass(frozen=True)
class InternalUnits:
    """An ordinary evaluation already converted to display units."""

    value: int


Score = Union[Mate, Tablebase, InternalUnits]


def score_from_value(value: int, to_cp: Callable[[int], int]) -> Score:
    """Classify a search value.

    ``to_cp`` converts a non-decisive value to the units shown to the user.
    """
    if not -VALUE_INFINITE < value < VALUE_INFINITE:
        raise ValueError(f"value out of range: {value}")

    if not is_decisive(value):
        return InternalUnits(to_cp(value))

    if abs(value) <= VALUE_TB:
        distance = VALUE_TB - abs(value)
        return Tablebase(distance, True) if value > 0 else Tablebase(-distance, False)

    distance = VALUE_MATE - abs(value)
    return Mate(distance) if value > 0 else Mate(-distance)