"""Tests for metareg.effectsize."""
import numpy as np
import pandas as pd
import pytest

from metareg import Dataset, InvalidCountError
from metareg.effectsize import (
    MEASURES,
    Expression,
    TwoByTwoEffectSizeConverter,
    compute_measure,
    select_measure,
)


@pytest.fixture(scope="module")
def counts():
    return {
        "t_events": np.array([4, 6, 3]),
        "t_total": np.array([123, 306, 231]),
        "c_events": np.array([11, 29, 11]),
        "c_total": np.array([139, 303, 220]),
    }


def test_expression_smoke_test():
    exp = Expression("a / b - c", "toy expression")
    assert exp.names == ["a", "b", "c"]
    assert np.allclose(exp.evaluate(a=[4, 9], b=[2, 3], c=1, d=100), [1, 2])
    with pytest.raises(ValueError):
        exp.evaluate(a=1, b=2)


def test_select_measure():
    assert select_measure("rr") is MEASURES["RR"]
    with pytest.raises(ValueError):
        select_measure("SMD")


def test_log_risk_ratio(counts):
    y, v = TwoByTwoEffectSizeConverter(**counts).get("RR")
    keys = ("t_events", "t_total", "c_events", "c_total")
    a, n1, c, n2 = (counts[k].astype(float) for k in keys)
    assert np.allclose(y, np.log((a / n1) / (c / n2)))
    assert np.allclose(v, 1 / a - 1 / n1 + 1 / c - 1 / n2)
    assert np.allclose(y[0], -0.8893, atol=1e-4)


def test_log_odds_ratio(counts):
    y, v = compute_measure("OR", **counts)
    assert np.isclose(y[0], np.log((4 * 128) / (119 * 11)))
    assert np.isclose(v[0], 1 / 4 + 1 / 119 + 1 / 11 + 1 / 128)


def test_risk_difference(counts):
    y, v = compute_measure("RD", **counts)
    p1, p2 = 4 / 123, 11 / 139
    assert np.isclose(y[0], p1 - p2)
    assert np.isclose(v[0], p1 * (1 - p1) / 123 + p2 * (1 - p2) / 139)


def test_nonevents_complete_totals(counts):
    y1, v1 = compute_measure("RR", **counts)
    y2, v2 = compute_measure(
        "RR",
        t_events=counts["t_events"],
        t_nonevents=counts["t_total"] - counts["t_events"],
        c_events=counts["c_events"],
        c_nonevents=counts["c_total"] - counts["c_events"],
    )
    assert np.allclose(y1, y2)
    assert np.allclose(v1, v2)


def test_converter_from_df(counts):
    df = pd.DataFrame(dict(counts, study=["a", "b", "c"]))
    esc = TwoByTwoEffectSizeConverter(df)
    assert set(esc.known_vars) == {"t_events", "t_total", "c_events", "c_total"}
    assert esc.n_studies == 3

    # keyword arguments take precedence over DataFrame columns
    esc = TwoByTwoEffectSizeConverter(df, t_events=[5, 6, 3])
    assert esc.known_vars["t_events"][0] == 5


def test_converter_caches_results(counts):
    esc = TwoByTwoEffectSizeConverter(**counts)
    y, v = esc.get("rr")
    assert list(esc._cache) == ["RR"]
    y[:] = 0.0
    v[:] = -1.0
    # callers get copies, so the cached values are untouched
    y2, v2 = esc.get("RR")
    assert np.isclose(y2[0], -0.8893, atol=1e-4)
    assert np.all(v2 > 0)


def test_converter_input_validation(counts):
    with pytest.raises(ValueError):
        TwoByTwoEffectSizeConverter(t_events=[1, 2], c_events=[1, 2], c_total=[5, 5])

    with pytest.raises(ValueError):
        TwoByTwoEffectSizeConverter(
            t_events=[1, 2], t_total=[10, 10], t_nonevents=[9, 9], c_events=[1, 2],
            c_total=[5, 5]
        )

    with pytest.raises(ValueError):
        TwoByTwoEffectSizeConverter(t_events=[1, 2, 3], t_total=[10, 10], c_events=[1, 2],
                                    c_total=[5, 5])

    esc = TwoByTwoEffectSizeConverter(t_events=[1, -2], t_total=[10, 10], c_events=[1, 2],
                                      c_total=[5, 5])
    for measure in ("RR", "OR", "RD"):
        with pytest.raises(InvalidCountError) as excinfo:
            esc.get(measure)
        assert excinfo.value.index == 1


def test_zero_counts_depend_on_measure():
    esc = TwoByTwoEffectSizeConverter(t_events=[0, 3], t_total=[20, 30], c_events=[4, 5],
                                      c_total=[20, 30])
    y, _ = esc.get("RD")
    assert np.isclose(y[0], -0.2)

    for measure in ("RR", "OR"):
        with pytest.raises(InvalidCountError) as excinfo:
            esc.get(measure)
        assert excinfo.value.index == 0

    # no non-events in the treated group of the second study
    esc = TwoByTwoEffectSizeConverter(t_events=[2, 30], t_total=[20, 30], c_events=[4, 5],
                                      c_total=[20, 30])
    esc.get("RR")
    with pytest.raises(InvalidCountError) as excinfo:
        esc.get("OR")
    assert excinfo.value.index == 1


def test_compute_measure_return_types(counts):
    results = compute_measure("RR", return_type="dict", **counts)
    assert set(results) == {"y", "v"}

    dset = compute_measure("RR", return_type="dataset", X=[44, 55, 42], X_names=["ablat"],
                           **counts)
    assert isinstance(dset, Dataset)
    assert dset.X_names == ["intercept", "ablat"]
    assert np.allclose(dset.y[:, 0], results["y"])

    conv = compute_measure("RR", return_type="converter", **counts)
    assert isinstance(conv, TwoByTwoEffectSizeConverter)
    assert "RR" in conv._cache

    with pytest.raises(ValueError):
        compute_measure("RR", return_type="series", **counts)

    with pytest.raises(ValueError):
        compute_measure("SMD", **counts)
