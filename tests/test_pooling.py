import pytest

from did_base.procedures import PooledStatsProcedure, SharedStatsStep, StatsProcedure, pool
from testutils import StepA, StepB, StepC, StepD, steps_of

P_AB = StatsProcedure("AB", (StepA, StepB))
P_BA = StatsProcedure("BA", (StepB, StepA))
P_CD = StatsProcedure("CD", (StepC, StepD))
P_ABC = StatsProcedure("ABC", (StepA, StepB, StepC))
P_AC = StatsProcedure("AC", (StepA, StepC))
P_DBC = StatsProcedure("DBC", (StepD, StepB, StepC))

# ---------------------------------------------------------------------------
# SharedStatsStep
# ---------------------------------------------------------------------------


def test_shared_step_canonical_ids():
    s = SharedStatsStep(StepA, [2, 0, 2])
    assert s.ids == (0, 2)
    assert s == SharedStatsStep(StepA, (0, 2))
    assert s != SharedStatsStep(StepA, 0)
    assert s != SharedStatsStep(StepB, (0, 2))
    assert SharedStatsStep(StepA, 1).ids == (1,)


def test_shared_step_display():
    assert str(SharedStatsStep(StepA, [0, 1])) == "StepA"
    assert repr(SharedStatsStep(StepA, [0, 1])) == "StepA (StatsStep shared by 2 procedures)"
    assert repr(SharedStatsStep(StepA, 0)) == "StepA (StatsStep shared by 1 procedure)"


# ---------------------------------------------------------------------------
# pool
# ---------------------------------------------------------------------------


def test_pool_single_procedure():
    pooled = pool(P_ABC)
    assert pooled.procs == (P_ABC,)
    assert pooled.steps == [
        SharedStatsStep(StepA, 0),
        SharedStatsStep(StepB, 0),
        SharedStatsStep(StepC, 0),
    ]
    assert len(pooled) == 3
    assert pooled[1] == SharedStatsStep(StepB, 0)


def test_pool_repeated_procedure():
    pooled = pool(P_ABC, P_ABC, P_ABC)
    assert [s.step for s in pooled] == [StepA, StepB, StepC]
    assert all(s.ids == (0, 1, 2) for s in pooled)


def test_pool_without_common_steps():
    pooled = pool(P_AB, P_CD)
    assert pooled.steps == [
        SharedStatsStep(StepA, 0),
        SharedStatsStep(StepB, 0),
        SharedStatsStep(StepC, 1),
        SharedStatsStep(StepD, 1),
    ]


def test_pool_incompatible_ranks_are_not_shared():
    pooled = pool(P_AB, P_BA)
    assert len(pooled) == 4
    assert all(len(s.ids) == 1 for s in pooled)
    assert pooled.steps.count(SharedStatsStep(StepA, 0)) == 1
    assert pooled.steps.count(SharedStatsStep(StepA, 1)) == 1
    assert steps_of(pooled, 0) == [StepA, StepB]
    assert steps_of(pooled, 1) == [StepB, StepA]


def test_pool_partial_sharing():
    pooled = pool(P_ABC, P_AC, P_DBC)
    assert SharedStatsStep(StepA, (0, 1)) in pooled.steps
    assert SharedStatsStep(StepB, (0, 2)) in pooled.steps
    assert SharedStatsStep(StepC, (0, 1, 2)) in pooled.steps
    assert len(pooled) == 4
    for i, p in enumerate(pooled.procs):
        assert steps_of(pooled, i) == list(p)


def test_pool_splits_both_members_of_disagreeing_pair():
    # 0 and 2 disagree first; 1 is then left with no sharer for either step
    pooled = pool(P_AB, P_AB, P_BA)
    assert len(pooled) == 6
    assert all(len(s.ids) == 1 for s in pooled)
    for i, p in enumerate(pooled.procs):
        assert steps_of(pooled, i) == list(p)


@pytest.mark.parametrize(
    "procs",
    [
        (P_AB, P_CD, P_AB),
        (P_ABC, P_AC, P_BA),
        (P_DBC, P_ABC, P_CD, P_AC),
        (P_BA, P_ABC, P_AB),
    ],
)
def test_pool_preserves_each_procedure_order(procs):
    pooled = pool(*procs)
    for i, p in enumerate(procs):
        assert steps_of(pooled, i) == list(p)


def test_pool_cyclic_order_is_rejected():
    procs = (
        StatsProcedure("AB", (StepA, StepB)),
        StatsProcedure("BC", (StepB, StepC)),
        StatsProcedure("CA", (StepC, StepA)),
    )
    with pytest.raises(RuntimeError, match="no valid order"):
        pool(*procs)


def test_pool_requires_procedures():
    with pytest.raises(ValueError):
        pool()


def test_pooled_procedure_equality_and_display():
    assert pool(P_AB, P_CD) == pool(P_AB, P_CD)
    assert pool(P_AB, P_CD) != pool(P_CD, P_AB)
    assert repr(pool(P_AB, P_CD)) == "PooledStatsProcedure with 4 steps from 2 procedures:\n  AB\n  CD"
    assert str(PooledStatsProcedure((P_AB,), [])) == "PooledStatsProcedure"
