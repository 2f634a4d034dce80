from chesscore.score import Mate
from chesscore.search import (
    InfoFull,
    InfoIteration,
    LimitsType,
    RootMove,
    Skill,
)
from chesscore.types import BLACK, VALUE_INFINITE, Move, SQ_E2, SQ_E4, SQ_D2, SQ_D4, SQ_G1, SQ_F3


def _rm(frm, to, score, previous=-VALUE_INFINITE):
    rm = RootMove(Move(frm, to))
    rm.score = score
    rm.previous_score = previous
    return rm


def test_root_move_defaults():
    rm = RootMove(Move(SQ_E2, SQ_E4))
    assert rm.score == -VALUE_INFINITE
    assert rm.pv == [Move(SQ_E2, SQ_E4)]
    assert rm.mean_squared_score == -VALUE_INFINITE * VALUE_INFINITE


def test_sort_descending_by_score():
    a = _rm(SQ_E2, SQ_E4, 10)
    b = _rm(SQ_D2, SQ_D4, 20)
    assert sorted([a, b]) == [b, a]


def test_tie_broken_by_previous_score():
    a = _rm(SQ_E2, SQ_E4, 10, previous=1)
    b = _rm(SQ_D2, SQ_D4, 10, previous=5)
    result = sorted([a, b])
    assert result[0].pv[0] == Move(SQ_D2, SQ_D4)


def test_sort_is_stable_for_equal_moves():
    a = _rm(SQ_E2, SQ_E4, -VALUE_INFINITE)
    b = _rm(SQ_D2, SQ_D4, -VALUE_INFINITE)
    c = _rm(SQ_G1, SQ_F3, -VALUE_INFINITE)
    assert [rm.pv[0] for rm in sorted([a, b, c])] == [a.pv[0], b.pv[0], c.pv[0]]


def test_equality_with_move():
    rm = RootMove(Move(SQ_E2, SQ_E4))
    assert rm == Move(SQ_E2, SQ_E4)
    assert not (rm == Move(SQ_D2, SQ_D4))
    assert [RootMove(Move(SQ_D2, SQ_D4)), rm].index(Move(SQ_E2, SQ_E4)) == 1


def test_limits_time_management():
    limits = LimitsType()
    assert limits.use_time_management() is False
    limits.time[BLACK] = 1000
    assert limits.use_time_management() is True


def test_limits_are_independent():
    a, b = LimitsType(), LimitsType()
    a.time[0] = 5
    assert b.time == [0, 0]


def test_skill_level_direct():
    skill = Skill(5, 0)
    assert skill.level == 5.0
    assert skill.enabled()
    assert skill.time_to_pick(6)
    assert not skill.time_to_pick(5)


def test_skill_full_strength_disabled():
    assert not Skill(20, 0).enabled()


def test_skill_from_elo_bounds_and_order():
    low = Skill(20, Skill.LOWEST_ELO)
    high = Skill(20, Skill.HIGHEST_ELO)
    assert low.level == 0.0
    assert 0.0 <= high.level <= 19.0
    assert high.level > low.level
    assert low.enabled() and high.enabled()


def test_skill_best_starts_empty():
    assert Skill(3, 0).best == Move.none()


def test_info_full_carries_short_fields():
    info = InfoFull(depth=3, score=Mate(2), multi_pv=1, pv="e2e4")
    assert info.depth == 3
    assert info.score == Mate(2)
    assert info.bound == ""


def test_info_iteration_fields():
    info = InfoIteration(depth=7, currmove="e2e4", currmovenumber=2)
    assert (info.depth, info.currmove, info.currmovenumber) == (7, "e2e4", 2)