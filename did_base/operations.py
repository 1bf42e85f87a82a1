# did_base/operations.py
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


def findcell(
    cellnames: Sequence[str],
    data: pd.DataFrame,
    esample: Optional[Sequence[bool]] = None,
) -> Dict[Tuple[Any, ...], np.ndarray]:
    """Group row positions of ``data`` by the values of the columns ``cellnames``.

    Rows within a group share the same row-wise combination of values
    from ``cellnames``.  When ``esample`` is given only the selected rows
    are considered and the positions refer to that subsample rather than
    to the full ``data``.

    Returns
    -------
    dict
        Map from tuples of cell values to arrays of row positions.
    """
    cellnames = list(cellnames)
    cols = data[cellnames]
    if esample is not None:
        cols = cols.loc[np.asarray(esample, dtype=bool)]
    if cols.empty:
        raise ValueError("empty data columns")
    cols = cols.reset_index(drop=True)

    groups = cols.groupby(cellnames, sort=True, dropna=False, observed=True).indices
    cellrows: Dict[Tuple[Any, ...], np.ndarray] = {}
    for key, rows in groups.items():
        cell = key if isinstance(key, tuple) else (key,)
        cellrows[cell] = np.asarray(rows, dtype=int)
    return cellrows


__all__ = ["findcell"]
