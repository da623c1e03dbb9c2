# emacs: -*- mode: python-mode; py-indent-offset: 4; tab-width: 4; indent-tabs-mode: nil -*-
# ex: set sts=4 ts=4 sw=4 et:
"""
.. _bcg_meta_regression:

==========================================
Meta-Regression of the BCG Vaccine Trials
==========================================

Here we relate the effectiveness of the BCG vaccine to the absolute latitude
of each trial, first with the closed-form weighted regression and then with
fixed-effect and random-effects estimators.
"""
###############################################################################
# Start with the necessary imports
# -----------------------------------------------------------------------------
from pprint import pprint

import matplotlib.pyplot as plt

from metareg import EffectSizeRegressor, compute_measure, datasets, load_study_records
from metareg.estimators import LikelihoodEstimator, WeightedLeastSquares

###############################################################################
# Load the data
# -----------------------------------------------------------------------------
# Each row is a two-by-two table: TB cases and non-cases in the vaccinated
# (``tpos``/``tneg``) and control (``cpos``/``cneg``) groups.
data, meta = datasets.bcg()
pprint(meta)

###############################################################################
# Fit the weighted regression by hand
# -----------------------------------------------------------------------------
# :class:`~metareg.regression.EffectSizeRegressor` computes each trial's log
# risk ratio, its sampling variance and inverse-variance weight, then solves
# the two-parameter weighted least-squares problem in closed form.
studies = load_study_records(data, covariate="ablat")
reg = EffectSizeRegressor().fit(studies)
reg.result_.to_df()

###############################################################################
# Reproduce the fit with the fixed-effect estimator
# -----------------------------------------------------------------------------
# The coefficients are identical. The estimator treats the sampling variances
# as known, so its standard errors are not rescaled by the residual variance.
dset = compute_measure(
    "RR",
    data=data.rename(
        columns={
            "tpos": "t_events",
            "tneg": "t_nonevents",
            "cpos": "c_events",
            "cneg": "c_nonevents",
        }
    ),
    return_type="dataset",
    X=data["ablat"].values,
    X_names=["ablat"],
)
fe_results = WeightedLeastSquares().fit_dataset(dset).summary()
fe_results.to_df()

###############################################################################
# Random-effects meta-regression
# -----------------------------------------------------------------------------
# Allowing for residual heterogeneity between trials adds tau^2 to every
# sampling variance.
re_results = LikelihoodEstimator(method="REML").fit_dataset(dset).summary()
pprint(re_results.get_re_stats())
re_results.to_df()

###############################################################################
# Check the residuals
# -----------------------------------------------------------------------------
qq = re_results.get_qq_points()
fig, ax = plt.subplots(figsize=(5, 5))
ax.scatter(qq["theoretical"], qq["sample"])
ax.axline((0, 0), slope=1, color="gray", linestyle="--")
ax.set_xlabel("Theoretical quantiles")
ax.set_ylabel("Standardized residuals")
fig.show()
