import numpy as np
import pytest

from did_base import (
    DiffinDiffsEstimator,
    PrepareSample,
    SampleResult,
    did_formatter,
    didspec,
    pool,
    proceed,
    specset,
)
from did_base.procedures import StatsProcedure

BASE = {"yterm": "y", "treatname": "g", "treatintterms": (), "xterms": ()}


def test_prepare_sample_definition():
    assert isinstance(PrepareSample, DiffinDiffsEstimator)
    assert isinstance(PrepareSample, StatsProcedure)
    assert [str(s) for s in PrepareSample] == ["CheckData", "GroupTerms", "CheckVars", "MakeWeights"]


def test_didspec_single_run(panel):
    sp = didspec("base", data=panel, **BASE)
    assert sp.procedure is PrepareSample
    res = sp()
    assert isinstance(res, SampleResult)
    assert res.nobs == 15
    assert res.tr_rows.sum() == 10
    assert np.array_equal(res.weights, np.ones(15))


def test_proceed_isolates_in_place_updates(panel):
    panel.loc[0, "x"] = np.nan
    specs = [
        didspec("plain", data=panel, **BASE),
        didspec("covariate", data=panel, **{**BASE, "xterms": ("x",)}),
    ]
    res = proceed(specs)
    assert res[0].nobs == 15
    assert res[1].nobs == 14
    assert res[0].esample is not res[1].esample
    assert res[0].esample.all()


def test_proceed_shares_checks_for_same_data(panel):
    specs = [
        didspec("a", data=panel, **BASE),
        didspec("b", data=panel, **{**BASE, "weightname": "w"}),
    ]
    traces = proceed(specs, pause=1)
    # CheckData depends on weightname, so the two samples differ
    assert traces[0]["esample"] is not traces[1]["esample"]

    specs = [didspec("a", data=panel, **BASE), didspec("b", data=panel, **BASE)]
    traces = proceed(specs, pause=1)
    assert traces[0]["esample"] is traces[1]["esample"]


def test_proceed_shares_check_vars_for_equal_terms(panel):
    panel["yy"] = panel["y"]
    specs = [
        didspec(str(i), data=panel, **{**BASE, "yterm": "".join(["y", "y"])})
        for i in range(2)
    ]
    assert specs[0].args["yterm"] is not specs[1].args["yterm"]
    res = proceed(specs)
    # One CheckVars call for both, so the sample is neither copied nor rebuilt
    assert res[0].esample is res[1].esample
    assert res[0].weights is res[1].weights


def test_prepare_sample_pooled_once(panel):
    specs = [didspec(str(i), data=panel, **BASE) for i in range(3)]
    pooled = pool(*{sp.procedure: None for sp in specs})
    assert len(pooled) == 4
    res = proceed(specs, keep=("tr_rows", "weights"))
    assert all(set(r) == {"tr_rows", "weights", "result"} for r in res)


def test_did_formatter_with_specset(panel):
    specs, results = specset(
        [{"name": "unweighted"}, {"name": "weighted", "weightname": "w"}],
        defaults={"data": panel, **BASE},
        formatter=did_formatter,
    )
    assert [sp.name for sp in specs] == ["unweighted", "weighted"]
    assert all(sp.procedure is PrepareSample for sp in specs)
    assert np.array_equal(results[1].weights, panel["w"].to_numpy())


def test_prepare_sample_domain_error(panel):
    with pytest.raises(ValueError, match="no nonmissing data"):
        proceed([didspec("", data=panel, subset=np.zeros(len(panel), dtype=bool), **BASE)])
