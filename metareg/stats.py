"""Miscellaneous statistical functions."""

import logging

import numpy as np
import scipy.stats as ss
from scipy.optimize import brentq

logger = logging.getLogger(__name__)


def ensure_2d(arr):
    """Ensure the passed array is a 2d float array (a column vector for 1d input)."""
    if arr is None:
        return arr

    arr = np.asarray(arr, dtype=float)
    if arr.ndim == 0:
        arr = arr[None]
    if arr.ndim == 1:
        arr = arr[:, None]

    return arr


def weighted_least_squares(y, v, X, tau2=0.0, return_cov=False):
    """Perform weighted least squares with inverse-variance weights.

    Parameters
    ----------
    y : :obj:`numpy.ndarray` of shape (K, 1)
        Study-level estimates.
    v : :obj:`numpy.ndarray` of shape (K, 1)
        Study-level sampling variances.
    X : :obj:`numpy.ndarray` of shape (K, P)
        Fixed effect design matrix.
    tau2 : :obj:`float`, optional
        tau^2 estimate added to every sampling variance before weighting.
        Default = 0.
    return_cov : :obj:`bool`, optional
        Whether or not to return the covariance matrix of the estimates,
        i.e. the inverse of the weighted Gram matrix ``X' W X``.
        Default = False.

    Returns
    -------
    beta[, cov]
        If return_cov is True, returns both fixed parameter estimates (P x 1)
        and their P x P covariance matrix; if False, only the estimates.
    """
    w = 1.0 / (v + tau2)
    wX = X * w
    cov = np.linalg.pinv(wX.T.dot(X))
    beta = cov.dot(wX.T.dot(y))
    return (beta, cov) if return_cov else beta


def q_gen(y, v, X, tau2):
    """Calculate a generalized form of Cochran's Q-statistic.

    Parameters
    ----------
    y : :obj:`numpy.ndarray` of shape (K, 1)
        Study-level estimates.
    v : :obj:`numpy.ndarray` of shape (K, 1)
        Study-level variances.
    X : :obj:`numpy.ndarray` of shape (K, P)
        Study-level predictors, including the intercept.
    tau2 : :obj:`float`
        Between-study variance. Must be >= 0.

    Returns
    -------
    :obj:`float`
        The weighted residual sum of squares at the given tau^2.
    """
    if np.any(np.asarray(tau2) < 0):
        raise ValueError("Value of tau^2 must be >= 0.")

    beta = weighted_least_squares(y, v, X, tau2)
    w = 1.0 / (v + tau2)
    return float((w * (y - X.dot(beta)) ** 2).sum())


def q_profile(y, v, X, alpha=0.05):
    """Get the CI for tau^2 via the Q-Profile method.

    Parameters
    ----------
    y : :obj:`numpy.ndarray` of shape (K, 1)
        Study-level estimates.
    v : :obj:`numpy.ndarray` of shape (K, 1)
        Study-level variances.
    X : :obj:`numpy.ndarray` of shape (K, P)
        Study-level predictors, including the intercept.
    alpha : :obj:`float`, optional
        alpha value defining the coverage of the CIs,
        where width(CI) = 1 - alpha. Default = 0.05.

    Returns
    -------
    :obj:`dict`
        A dictionary with keys 'ci_l' and 'ci_u', corresponding to the lower
        and upper bounds of the tau^2 confidence interval, respectively.

    Notes
    -----
    Following Viechtbauer (2007), the generalized Q-statistic is
    monotonically decreasing in tau^2, so each bound is the root of
    ``Q(tau^2) - crit``. A bound is truncated at zero when Q at tau^2 = 0 is
    already below the corresponding critical value.
    """
    k, p = X.shape
    df = k - p
    l_crit = ss.chi2.ppf(1 - alpha / 2, df)
    u_crit = ss.chi2.ppf(alpha / 2, df)

    def _solve(crit):
        if q_gen(y, v, X, 0.0) <= crit:
            return 0.0
        hi = max(float(np.var(y)), float(v.mean()), 1.0)
        while q_gen(y, v, X, hi) > crit:
            hi *= 2
        return brentq(lambda tau2: q_gen(y, v, X, tau2) - crit, 0.0, hi, xtol=1e-10)

    bounds = {"ci_l": _solve(l_crit), "ci_u": _solve(u_crit)}
    logger.debug("Q-profile tau^2 interval: %s", bounds)
    return bounds


def two_sided_p(stat, df=None):
    """Two-sided p-values for test statistics.

    Parameters
    ----------
    stat : :obj:`float` or :obj:`numpy.ndarray`
        z or t statistics.
    df : None or :obj:`int`, optional
        Degrees of freedom of the reference t distribution. If None (default),
        the standard normal distribution is used.

    Returns
    -------
    :obj:`float` or :obj:`numpy.ndarray`
        p-values with the same shape as ``stat``.
    """
    stat = np.abs(stat)
    if df is None:
        return 2 * ss.norm.sf(stat)
    return 2 * ss.t.sf(stat, df)
