"""Tests for metareg.results."""
import numpy as np
import pytest

from metareg import Dataset
from metareg.estimators import DerSimonianLaird, WeightedLeastSquares
from metareg.results import MetaRegressionResults


@pytest.fixture(scope="module")
def dataset(variables):
    return Dataset(*variables, X_names=["my_covariate"])


@pytest.fixture(scope="module")
def results(dataset):
    """Create a results object as a fixture."""
    return DerSimonianLaird().fit_dataset(dataset).summary()


@pytest.fixture(scope="module")
def bcg_fe_results(bcg_dataset_no_mods):
    return WeightedLeastSquares().fit_dataset(bcg_dataset_no_mods).summary()


def test_meta_regression_results_from_arrays(dataset):
    """MetaRegressionResults can be created from estimators fitted to arrays."""
    est = DerSimonianLaird()
    est.fit(y=dataset.y, X=dataset.X, v=dataset.v)
    assert est.dataset_ is None
    results = est.summary()
    assert isinstance(results, MetaRegressionResults)
    assert results.X_names == ["x0", "x1"]

    est.fit_dataset(dataset)
    assert est.dataset_ is dataset
    assert est.summary().X_names == ["intercept", "my_covariate"]


def test_mrr_fe_se(results):
    """Test MetaRegressionResults fixed-effect standard error estimates."""
    se = results.fe_se
    assert se.shape == (2, 1)
    assert np.allclose(se.T, [2.6512, 0.9857], atol=1e-4)


def test_mrr_get_fe_stats(results):
    """Test MetaRegressionResults.get_fe_stats."""
    stats = results.get_fe_stats()
    assert isinstance(stats, dict)
    assert set(stats.keys()) == {"est", "se", "ci_l", "ci_u", "z", "p"}
    assert np.allclose(stats["ci_l"].T, [-5.3033, -1.1655], atol=1e-4)
    assert np.allclose(stats["p"].T, [0.9678, 0.4369], atol=1e-4)


def test_mrr_get_fe_stats_t(results):
    """t-based tests use K - P degrees of freedom and widen the intervals."""
    z_stats = results.get_fe_stats()
    t_stats = results.get_fe_stats(test="t")
    assert set(t_stats.keys()) == {"est", "se", "ci_l", "ci_u", "t", "p"}
    assert results.df_resid == 6
    assert np.allclose(t_stats["t"], z_stats["z"])
    assert np.all(t_stats["p"] > z_stats["p"])
    assert np.all(t_stats["ci_l"] < z_stats["ci_l"])

    with pytest.raises(ValueError):
        results.get_fe_stats(test="f")


def test_mrr_get_re_stats(results):
    """Test MetaRegressionResults.get_re_stats."""
    stats = results.get_re_stats()
    assert set(stats.keys()) == {"tau^2", "ci_l", "ci_u"}
    assert round(stats["ci_l"], 4) == 3.8076
    assert round(stats["ci_u"], 2) == 59.61


def test_mrr_get_heterogeneity_stats(bcg_fe_results):
    """Test MetaRegressionResults.get_heterogeneity_stats."""
    stats = bcg_fe_results.get_heterogeneity_stats()
    # ground truth value is from metafor package in R
    assert np.isclose(stats["Q"], 152.2330, atol=1e-3)
    assert stats["p(Q)"] < 1e-5
    assert np.isclose(stats["I^2"], 100 * (stats["Q"] - 12) / stats["Q"])
    assert np.isclose(stats["H"], np.sqrt(stats["Q"] / 12))


def test_mrr_get_residuals(bcg_fe_results, bcg_dataset_no_mods):
    df = bcg_fe_results.get_residuals()
    assert df.shape == (13, 3)
    assert set(df.columns) == {"fitted", "residual", "std_residual"}
    # weighted residuals of a fixed-effect fit with intercept sum to zero
    w = 1.0 / bcg_dataset_no_mods.v[:, 0]
    assert np.isclose((w * df["residual"]).sum(), 0.0)
    assert np.all(np.abs(df["std_residual"]) > np.abs(df["residual"]))


def test_mrr_get_raw_residuals(bcg_fe_results):
    raw = bcg_fe_results.get_residuals(standardize=False)
    assert list(raw.columns) == ["fitted", "residual"]
    full = bcg_fe_results.get_residuals()
    assert np.allclose(raw["residual"], full["residual"])
    assert np.allclose(raw["fitted"], full["fitted"])


def test_mrr_get_qq_points(bcg_fe_results):
    qq = bcg_fe_results.get_qq_points()
    assert qq.shape == (13, 2)
    assert np.all(np.diff(qq["theoretical"]) > 0)
    assert np.allclose(qq["sample"], np.sort(bcg_fe_results.get_residuals()["std_residual"]))


def test_mrr_to_df(results):
    """Test conversion of MetaRegressionResults to DataFrame."""
    df = results.to_df()
    assert df.shape == (2, 7)
    col_names = {"estimate", "p-value", "z-score", "ci_0.025", "ci_0.975", "se", "name"}
    assert set(df.columns) == col_names
    assert np.allclose(df["p-value"].values, [0.9678, 0.4369], atol=1e-4)

    df = results.to_df(test="t", alpha=0.1)
    assert {"t-value", "ci_0.05", "ci_0.95"} <= set(df.columns)


def test_estimator_summary(dataset):
    """Test Estimator's summary method."""
    est = WeightedLeastSquares()
    # Fails if we haven't fitted yet
    with pytest.raises(ValueError):
        est.summary()

    est.fit_dataset(dataset)
    summary = est.summary()
    assert isinstance(summary, MetaRegressionResults)
