"""Specifications and their batched execution.

A :class:`StatsSpec` pairs a procedure with concrete arguments.  It can
be run on its own by calling it, or together with other specifications
through :func:`proceed`, which executes every distinct step call only
once across the batch.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..helpers.config import ProceedOptions
from ..helpers.utils import (
    EqualityGroups,
    IdentityDict,
    IdentityGroups,
    _plural,
    count_object,
    first_or_last,
    isequal,
    log_proceed,
    subset_fields,
)
from .base import StatsProcedure
from .pooling import pool


class StatsSpec:
    """Record the specification of a procedure together with its arguments.

    Attributes
    ----------
    name : str
        Free-form label, ``""`` if not given.
    procedure : StatsProcedure
        The procedure to run.
    args : dict
        Arguments for the steps of ``procedure``.  Step defaults are
        applied when the steps run, not here.
    """

    __slots__ = ("_name", "_procedure", "_args")

    def __init__(self, name: Optional[str], procedure: StatsProcedure, args: Optional[Mapping[str, Any]] = None) -> None:
        if not isinstance(procedure, StatsProcedure):
            raise TypeError(f"expect a StatsProcedure, got {type(procedure).__name__}")
        self._name = "" if name is None else str(name)
        self._procedure = procedure
        self._args: Dict[str, Any] = dict(args or {})

    @property
    def name(self) -> str:
        return self._name

    @property
    def procedure(self) -> StatsProcedure:
        return self._procedure

    @property
    def args(self) -> Dict[str, Any]:
        # A fresh dict so that callers cannot alter the specification.
        return dict(self._args)

    def __call__(self, *, verbose: bool = False, keep=None, keepall: bool = False):
        """Run the procedure with ``args`` and return its result.

        By default the ``"result"`` field is returned if the final trace has
        one, otherwise the value added last.  ``keep`` selects extra fields
        returned in a dict next to ``"result"``; ``keepall`` returns the whole
        trace.
        """
        opts = ProceedOptions(verbose=verbose, keep=keep, keepall=keepall)
        names = opts.keep_names()
        trace = {**self._args, "verbose": True} if verbose else dict(self._args)
        for step in self._procedure:
            trace = step(trace)
        trace = self._procedure.result(trace)
        return _extract(trace, opts.keepall, names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatsSpec):
            return NotImplemented
        return self._procedure == other._procedure and isequal(self._args, other._args)

    __hash__ = None  # type: ignore[assignment]

    def exactly_equals(self, other: "StatsSpec") -> bool:
        """Like ``==`` but the arguments must also be given in the same order."""
        return self == other and list(self._args) == list(other._args)

    def __str__(self) -> str:
        return self._name or "unnamed"

    def __repr__(self) -> str:
        return f"{self} (StatsSpec for {self._procedure})"


def _extract(trace: Dict[str, Any], keepall: bool, names: Optional[Sequence[str]]):
    if keepall:
        return trace
    if names is None:
        return first_or_last(trace)
    return subset_fields(trace, names)


def proceed(specs: Sequence[StatsSpec], *, verbose: bool = False, keep=None, keepall: bool = False, pause: int = 0) -> List[Any]:
    """Carry out the procedures of ``specs`` while avoiding repeated identical steps.

    Parameters
    ----------
    specs : sequence of StatsSpec
        Specifications to run.  Must not be empty.
    verbose : bool, default False
        Print the name of each shared step as it runs.
    keep : str or iterable of str, optional
        Names of extra fields returned next to ``"result"``.
    keepall : bool, default False
        Return the full trace of every specification.
    pause : int, default 0
        Stop after this many shared steps and return the unfinished
        traces as they are (for debugging).  ``0`` never pauses.

    Returns
    -------
    list
        One entry per specification, in the order of ``specs``.
    """
    specs = list(specs)
    if not specs:
        raise ValueError("expect a nonempty collection of specifications")
    opts = ProceedOptions(verbose=verbose, keep=keep, keepall=keepall, pause=pause)
    names = opts.keep_names()

    # Specifications of the same procedure run the same steps.
    gids: Dict[StatsProcedure, List[int]] = {}
    objcount = IdentityDict()
    traces: List[Dict[str, Any]] = []
    for i, sp in enumerate(specs):
        gids.setdefault(sp.procedure, []).append(i)
        args = sp.args
        for val in args.values():
            count_object(objcount, val)
        traces.append(args)

    pooled = pool(*gids)
    ntask_total = 0
    nstep = 0
    paused = False
    for step in pooled:
        tasks = IdentityGroups() if step.by_id else EqualityGroups()
        if opts.verbose:
            log_proceed(f"Running {step}...")
        for i in step.ids:
            for j in gids[pooled.procs[i]]:
                tasks.add(step.group_args(traces[j]), j)

        for gargs, ids in tasks.items():
            nids = len(ids)
            if step.copy_args:
                gargs = list(gargs)
                for k in step.copy_args:
                    # Another trace outside this group still sees the object.
                    if objcount.get(gargs[k], 0) > nids:
                        gargs[k] = deepcopy(gargs[k])
            ret = step.run(gargs, step.combined_args([traces[j] for j in ids]))
            for j in ids:
                for val in ret.values():
                    count_object(objcount, val)
                traces[j] = {**traces[j], **ret}

        ntask = len(tasks)
        ntask_total += ntask
        if opts.verbose:
            log_proceed(
                f"Finished {_plural(ntask, 'task')} for {_plural(len(step.ids), 'procedure')}"
            )
        nstep += 1
        if nstep == opts.pause:
            paused = True
            break

    if opts.verbose:
        log_proceed(
            f"All steps finished ({_plural(ntask_total, 'task')} for "
            f"{_plural(len(pooled.procs), 'procedure')})"
        )
    if paused:
        return traces

    for i, sp in enumerate(specs):
        traces[i] = sp.procedure.result(traces[i])
    return [_extract(t, opts.keepall, names) for t in traces]


__all__ = ["StatsSpec", "proceed"]
