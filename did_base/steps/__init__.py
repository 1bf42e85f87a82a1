"""Data-preparation steps shared by difference-in-differences estimators.

Each module defines a plain function doing the work and the
:class:`~did_base.procedures.StatsStep` wrapping it.
"""
from .data import CheckData, CheckVars, check_data, check_vars
from .terms import GroupTerms, group_terms
from .weights import MakeWeights, make_weights

__all__ = [
    "CheckData",
    "check_data",
    "GroupTerms",
    "group_terms",
    "CheckVars",
    "check_vars",
    "MakeWeights",
    "make_weights",
]
