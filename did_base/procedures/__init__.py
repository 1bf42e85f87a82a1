"""Public API for the procedures subpackage.

This module reexports the building blocks of the execution engine so
that users may import them directly from :mod:`did_base.procedures`.
"""
from .base import StatsProcedure, StatsStep
from .pooling import PooledStatsProcedure, SharedStatsStep, pool
from .spec import StatsSpec, proceed

__all__ = [
    "StatsStep",
    "StatsProcedure",
    "SharedStatsStep",
    "PooledStatsProcedure",
    "pool",
    "StatsSpec",
    "proceed",
]
