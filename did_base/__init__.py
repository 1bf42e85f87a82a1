"""
The :mod:`did_base` package provides the machinery shared by
difference-in-differences (DiD) estimators: a way of describing an
estimator as a sequence of steps and of running many differently
parameterized specifications of such estimators together.

The package is organised around four kinds of objects:

``StatsStep``
    One named computation.  It wraps a function and records which
    arguments the function reads, which of them have defaults and whether
    calls from several specifications are grouped by object identity or
    by value.  See :class:`did_base.procedures.StatsStep`.

``StatsProcedure``
    An ordered, fixed sequence of steps describing one complete workflow,
    e.g. :data:`did_base.estimator.PrepareSample`.  Subclasses may
    override ``result`` to build a dedicated result object.

``StatsSpec``
    A procedure together with concrete arguments.  Calling a
    specification runs its procedure.

``proceed``
    Runs a batch of specifications.  The steps of the procedures involved
    are pooled (:func:`did_base.procedures.pool`) so that a step whose
    arguments coincide across specifications is executed only once, and
    objects modified in place by a step are copied whenever another
    specification still refers to them.

Batches sharing default arguments are most easily built with
:func:`did_base.specset.specset`.  The data-preparation steps
(``CheckData``, ``GroupTerms``, ``CheckVars``, ``MakeWeights``) live in
:mod:`did_base.steps`, and :func:`did_base.operations.findcell` groups
rows of a panel into cells.

Example
-------
::

    from did_base import specset, did_formatter

    specs, results = specset(
        [{"name": "all"}, {"name": "weighted", "weightname": "w"}],
        defaults={"data": df, "yterm": "y", "treatname": "g",
                  "treatintterms": (), "xterms": ()},
        formatter=did_formatter,
    )

"""

from .estimator import DiffinDiffsEstimator, PrepareSample, SampleResult, did_formatter, didspec
from .helpers.config import ProceedOptions
from .operations import findcell
from .procedures import (
    PooledStatsProcedure,
    SharedStatsStep,
    StatsProcedure,
    StatsSpec,
    StatsStep,
    pool,
    proceed,
)
from .specset import specset
from .steps import CheckData, CheckVars, GroupTerms, MakeWeights

__all__ = [
    "StatsStep",
    "StatsProcedure",
    "SharedStatsStep",
    "PooledStatsProcedure",
    "StatsSpec",
    "pool",
    "proceed",
    "specset",
    "ProceedOptions",
    "CheckData",
    "GroupTerms",
    "CheckVars",
    "MakeWeights",
    "findcell",
    "DiffinDiffsEstimator",
    "PrepareSample",
    "SampleResult",
    "didspec",
    "did_formatter",
]
