import pandas as pd
import pytest

import testutils


@pytest.fixture(autouse=True)
def reset_calls():
    testutils.CALLS.clear()
    yield
    testutils.CALLS.clear()


@pytest.fixture
def panel():
    """Small unit x year panel; unit 3 is never treated (g == 0)."""
    rows = []
    for unit, g in [(1, 2012), (2, 2013), (3, 0)]:
        for year in range(2010, 2015):
            rows.append(
                {
                    "unit": unit,
                    "year": year,
                    "g": g,
                    "y": float(unit * 10 + (year - 2010)),
                    "w": float(unit),
                    "x": 0.5 * year,
                }
            )
    return pd.DataFrame(rows)
