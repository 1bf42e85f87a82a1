"""
Smoke script for the ``did_base`` package.

This script constructs a simple synthetic panel, declares a batch of
specifications of :data:`did_base.estimator.PrepareSample` sharing the
same data, and runs them together with :func:`did_base.specset.specset`.
It serves as a smoke test for the full engine and illustrates how steps
are shared across specifications.

The synthetic data set contains two countries (A and B), two sectors
(Power and Cement) and six calendar years.  One cluster (Country A,
Power) adopts treatment at year 2013; all other clusters remain
untreated and carry a cohort value of 0.  A covariate is missing for one
row so that specifications controlling for it end up with a smaller
sample.

Usage
-----
Run this script with Python from the project root::

    python test_run.py

With ``verbose`` switched on, the output lists every pooled step and how
many distinct calls it needed, followed by the sample size of each
specification.

"""

import numpy as np
import pandas as pd

from did_base import did_formatter, specset


def build_synthetic_data() -> pd.DataFrame:
    """Construct a small synthetic panel for demonstration.

    Returns
    -------
    pandas.DataFrame
        A panel with an outcome, a cohort column, weights and one covariate.
    """
    countries = ["A", "A", "B", "B"]
    sectors = ["Power", "Cement", "Power", "Cement"]
    years = list(range(2010, 2016))  # 6 years
    data = []
    for country, sector in zip(countries, sectors):
        treated = country == "A" and sector == "Power"
        for year in years:
            base_emis = 100.0 if sector == "Power" else 60.0
            data.append(
                {
                    "Country": country,
                    "CCUS_sector": sector,
                    "Year": year,
                    "cohort": 2013 if treated else 0,
                    "Emissions": base_emis + 2.0 * (year - 2010) + (5.0 if treated and year >= 2013 else 0.0),
                    "weight": 2.0 if sector == "Power" else 1.0,
                    "GDP_per_capita_PPP": 40000 + 500 * (year - 2010),
                }
            )
    df = pd.DataFrame(data)
    df.loc[(df["Country"] == "B") & (df["Year"] == 2010), "GDP_per_capita_PPP"] = np.nan
    return df


def main() -> None:
    df = build_synthetic_data()
    entries = [
        {"name": "baseline"},
        {"name": "weighted", "weightname": "weight"},
        {"name": "covariates", "xterms": ("GDP_per_capita_PPP",)},
        {"name": "post-2010", "subset": np.asarray(df["Year"] > 2010)},
    ]
    specs, results = specset(
        entries,
        defaults={
            "data": df,
            "yterm": "Emissions",
            "treatname": "cohort",
            "treatintterms": (),
            "xterms": (),
        },
        formatter=did_formatter,
        verbose=True,
    )
    for sp, res in zip(specs, results):
        print(f"{str(sp):<12} nobs={res.nobs:>3}  treated rows={int(res.tr_rows.sum()):>3}")


if __name__ == "__main__":
    main()
