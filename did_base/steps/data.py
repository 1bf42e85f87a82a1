# did_base/steps/data.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..procedures import StatsStep


def _check_table(data: Any) -> pd.DataFrame:
    if not isinstance(data, pd.DataFrame):
        raise TypeError(f"data must be a pandas DataFrame, got {type(data).__name__}")
    return data


def check_data(
    data: pd.DataFrame,
    subset: Optional[Sequence[bool]],
    weightname: Optional[str],
) -> Dict[str, np.ndarray]:
    """Check ``data`` and find valid rows for the options ``subset`` and ``weightname``.

    Returns ``esample``, the boolean mask of rows kept, and ``aux``, a
    scratch mask of the same length reused by later steps.
    """
    _check_table(data)
    nrow = len(data)
    if subset is not None:
        subset = np.asarray(subset, dtype=bool)
        if subset.shape != (nrow,):
            raise ValueError(
                f"data contain {nrow} rows while subset has {subset.size} elements"
            )
        esample = subset.copy()
    else:
        esample = np.ones(nrow, dtype=bool)

    aux = np.empty(nrow, dtype=bool)

    if weightname is not None:
        colweights = data[weightname]
        aux[:] = colweights.notna().to_numpy()
        esample &= aux
        aux[:] = (colweights.fillna(0) > 0).to_numpy()
        esample &= aux

    if not esample.any():
        raise ValueError("no nonmissing data")
    return {"esample": esample, "aux": aux}


CheckData = StatsStep(
    "CheckData",
    check_data,
    True,
    required=("data",),
    default={"subset": None, "weightname": None},
)


def check_vars(
    data: pd.DataFrame,
    yterm: str,
    treatname: str,
    esample: np.ndarray,
    aux: np.ndarray,
    treatintterms: Sequence[str],
    xterms: Sequence[str],
    nevertreated: Sequence[Any],
) -> Dict[str, np.ndarray]:
    """Exclude rows with missing values and find rows with data from treated units.

    ``esample`` is updated in place.  Values of ``treatintterms`` are only
    required for treated rows, i.e. rows where ``treatname`` is not one of
    ``nevertreated``.
    """
    _check_table(data)
    allvars: List[str] = []
    for v in [treatname, yterm, *xterms]:
        if v not in allvars:
            allvars.append(v)

    for v in allvars:
        col = data[v]
        if col.hasnans:
            aux[:] = col.notna().to_numpy()
            esample &= aux

    tr_rows = esample.copy()
    aux[:] = ~data[treatname].isin(list(nevertreated)).to_numpy()
    tr_rows &= aux

    treatintvars = [v for v in treatintterms if v not in allvars]
    for v in treatintvars:
        col = data[v]
        if col.hasnans:
            aux[:] = col.notna().to_numpy()
            esample[tr_rows] &= aux[tr_rows]
    if treatintvars:
        tr_rows &= esample

    if not esample.any():
        raise ValueError("no nonmissing data")
    return {"esample": esample, "tr_rows": tr_rows}


CheckVars = StatsStep(
    "CheckVars",
    check_vars,
    True,
    required=("data", "yterm", "treatname", "esample", "aux"),
    default={"treatintterms": (), "xterms": (), "nevertreated": (0,)},
    copy_args=(3,),
)


__all__ = ["check_data", "CheckData", "check_vars", "CheckVars"]
