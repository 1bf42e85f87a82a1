"""Pooling the steps of several procedures.

:func:`pool` merges the step sequences of a batch of procedures into one
ordered list of :class:`SharedStatsStep` objects.  A step that occurs in
several procedures is executed once for all of them, unless its position
relative to the other common steps differs between two procedures, in
which case those procedures each get their own copy of the step.
"""

from __future__ import annotations

from itertools import combinations
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from .base import StatsProcedure, StatsStep


class SharedStatsStep:
    """A :class:`StatsStep` together with the indices of the procedures sharing it."""

    __slots__ = ("step", "ids")

    def __init__(self, step: StatsStep, ids: Union[int, Iterable[int]]) -> None:
        if isinstance(ids, int):
            ids = (ids,)
        self.step = step
        self.ids: Tuple[int, ...] = tuple(sorted(set(int(i) for i in ids)))

    @property
    def by_id(self) -> bool:
        return self.step.by_id

    @property
    def copy_args(self) -> Tuple[int, ...]:
        return self.step.copy_args

    def group_args(self, args: Mapping[str, Any]) -> Tuple[Any, ...]:
        return self.step.group_args(args)

    def combined_args(self, allargs: Sequence[Mapping[str, Any]]) -> Tuple[Any, ...]:
        return self.step.combined_args(allargs)

    def run(self, gargs: Sequence[Any], cargs: Sequence[Any] = ()) -> Dict[str, Any]:
        return self.step.run(gargs, cargs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SharedStatsStep):
            return NotImplemented
        return self.step == other.step and self.ids == other.ids

    def __hash__(self) -> int:
        return hash((self.step, self.ids))

    def __str__(self) -> str:
        return str(self.step)

    def __repr__(self) -> str:
        n = len(self.ids)
        return f"{self.step} (StatsStep shared by {n} procedure{'s' if n > 1 else ''})"


class PooledStatsProcedure:
    """Procedures of a batch plus their pooled, totally ordered steps.

    Indexing and iteration run over the shared steps.
    """

    def __init__(self, procs: Sequence[StatsProcedure], steps: Sequence[SharedStatsStep]) -> None:
        self.procs: Tuple[StatsProcedure, ...] = tuple(procs)
        self.steps: List[SharedStatsStep] = list(steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __getitem__(self, i):
        return self.steps[i]

    def __iter__(self) -> Iterator[SharedStatsStep]:
        return iter(self.steps)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PooledStatsProcedure):
            return NotImplemented
        return self.procs == other.procs and self.steps == other.steps

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        nstep = len(self.steps)
        nps = len(self.procs)
        out = f"{type(self).__name__} with {nstep} step{'s' if nstep > 1 else ''} "
        out += f"from {nps} procedure{'s' if nps > 1 else ''}:"
        for p in self.procs:
            out += f"\n  {p}"
        return out


# ----------------------------
# Pooling helpers
# ----------------------------
def _rank(step: StatsStep, at: int, other: int, step_pos: Dict[StatsStep, Dict[int, int]]) -> int:
    """Rank of ``step`` among the steps procedure ``at`` has in common with ``other``."""
    common = [s for s, pos in step_pos.items() if at in pos and other in pos]
    common.sort(key=lambda s: step_pos[s][at])
    return common.index(step)


def _sort(psteps: List[List[SharedStatsStep]]) -> List[SharedStatsStep]:
    """Merge per-procedure shared steps into one order respecting every procedure.

    Each round looks at the next pending step of every procedure in turn.
    Unshared steps are emitted as they are found; a shared step is emitted
    as soon as all procedures sharing it have it as their next step, which
    ends the round.
    """
    state = [0] * len(psteps)
    out: List[SharedStatsStep] = []
    while True:
        pending = [i for i, ps in enumerate(psteps) if state[i] < len(ps)]
        if not pending:
            return out
        firsts = [psteps[i][state[i]] for i in pending]
        progressed = False
        for fstep in firsts:
            if len(fstep.ids) == 1:
                out.append(fstep)
                state[fstep.ids[0]] += 1
                progressed = True
                continue
            holders = [pending[k] for k, f in enumerate(firsts) if f == fstep]
            if len(holders) == len(fstep.ids):
                out.append(fstep)
                for i in holders:
                    state[i] += 1
                progressed = True
                break
        if not progressed:
            blocked = ", ".join(repr(f) for f in firsts)
            raise RuntimeError(f"no valid order exists for the pooled steps; blocked at: {blocked}")


def pool(*procs: StatsProcedure) -> PooledStatsProcedure:
    """Determine how the steps of ``procs`` are shared and in which order they run.

    Parameters
    ----------
    *procs : StatsProcedure
        Procedures to pool.  The index of a procedure in ``procs`` is the
        id recorded in :attr:`SharedStatsStep.ids`.

    Returns
    -------
    PooledStatsProcedure
        For every procedure, the shared steps carrying its index appear in
        the same order as in the procedure itself.

    Notes
    -----
    A step is only shared between two procedures when it has the same rank
    among the steps the two procedures have in common.  Procedures that
    disagree with another sharer about that rank run their own copy.
    """
    if not procs:
        raise ValueError("expect at least one procedure to pool")
    if len(procs) == 1:
        return PooledStatsProcedure(procs, [SharedStatsStep(s, 0) for s in procs[0]])

    nstep = sum(len(p) for p in procs)
    distinct = {s for p in procs for s in p}
    if len(distinct) == nstep:
        return PooledStatsProcedure(
            procs, [SharedStatsStep(s, i) for i, p in enumerate(procs) for s in p]
        )

    step_pos: Dict[StatsStep, Dict[int, int]] = {}
    for i, p in enumerate(procs):
        for n, s in enumerate(p):
            step_pos.setdefault(s, {})[i] = n

    shared: List[List[Optional[SharedStatsStep]]] = [[None] * len(p) for p in procs]
    for step, pos in step_pos.items():
        if len(pos) == 1:
            ((i, n),) = pos.items()
            shared[i][n] = SharedStatsStep(step, i)
            continue
        sharers = list(pos)
        for a, b in combinations(list(sharers), 2):
            if a not in sharers or b not in sharers:
                continue
            if _rank(step, a, b, step_pos) != _rank(step, b, a, step_pos):
                sharers.remove(a)
                sharers.remove(b)
                shared[a][pos[a]] = SharedStatsStep(step, a)
                shared[b][pos[b]] = SharedStatsStep(step, b)
                if len(sharers) <= 1:
                    break
        if sharers:
            s = SharedStatsStep(step, sharers)
            for i in sharers:
                shared[i][pos[i]] = s

    return PooledStatsProcedure(procs, _sort(shared))  # type: ignore[arg-type]


__all__ = ["SharedStatsStep", "PooledStatsProcedure", "pool"]
