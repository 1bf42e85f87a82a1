# did_base/steps/weights.py
from __future__ import annotations

from typing import Dict, Optional

import numpy as np
import pandas as pd

from ..procedures import StatsStep


def make_weights(data: pd.DataFrame, esample: np.ndarray, weightname: Optional[str]) -> Dict[str, np.ndarray]:
    """Construct the weight vector over the rows selected by ``esample``."""
    if weightname is None:
        return {"weights": np.ones(int(esample.sum()), dtype=float)}
    weights = data[weightname].to_numpy(dtype=float, na_value=np.nan)[esample]
    if not np.isfinite(weights).all():
        raise ValueError(f"data column {weightname} contain not-a-number values")
    return {"weights": weights}


MakeWeights = StatsStep(
    "MakeWeights",
    make_weights,
    True,
    required=("data", "esample"),
    default={"weightname": None},
)


__all__ = ["make_weights", "MakeWeights"]
