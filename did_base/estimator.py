from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from did_base.helpers.config import RESULT_FIELD
from did_base.procedures import StatsProcedure, StatsSpec
from did_base.steps import CheckData, CheckVars, GroupTerms, MakeWeights


class DiffinDiffsEstimator(StatsProcedure):
    """
    Supertype of the procedures implementing difference-in-differences estimators.

    Concrete estimators start with the data-preparation steps below and
    append their own estimation steps.
    """


@dataclass
class SampleResult:
    esample: np.ndarray
    tr_rows: Optional[np.ndarray]
    weights: Optional[np.ndarray]
    nobs: int


class _PrepareSample(DiffinDiffsEstimator):
    def result(self, trace: Dict[str, Any]) -> Dict[str, Any]:
        esample = trace["esample"]
        res = SampleResult(
            esample=esample,
            tr_rows=trace.get("tr_rows"),
            weights=trace.get("weights"),
            nobs=int(esample.sum()),
        )
        return {**trace, RESULT_FIELD: res}


PrepareSample = _PrepareSample(
    "PrepareSample",
    (CheckData, GroupTerms, CheckVars, MakeWeights),
)


def didspec(name: str = "", estimator: StatsProcedure = PrepareSample, **args: Any) -> StatsSpec:
    """Shortcut for building a :class:`StatsSpec` of a DiD estimator."""
    return StatsSpec(name, estimator, args)


def did_formatter(args: Dict[str, Any]):
    """Formatter for :func:`did_base.specset` defaulting the procedure to ``PrepareSample``."""
    args = dict(args)
    name = args.pop("name", "")
    estimator = args.pop("estimator", PrepareSample)
    return name, estimator, args


__all__ = [
    "DiffinDiffsEstimator",
    "SampleResult",
    "PrepareSample",
    "didspec",
    "did_formatter",
]
