"""Closed-form fixed-effect meta-regression of log risk ratios on one moderator.

This module fits the weighted regression of study-level log risk ratios on a
single moderator directly from the two-by-two tables, using the textbook
closed-form solution of the two-parameter weighted least-squares problem.
Unlike :class:`~metareg.estimators.WeightedLeastSquares`, the standard errors
are rescaled by the residual variance of the fit (as a weighted ``lm()`` fit
would report them), and both t and z tests are reported.
"""

import logging
import warnings
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .effectsize import TwoByTwoEffectSizeConverter
from .exceptions import InsufficientDataError, InvalidCountError, SingularDesignError
from .stats import two_sided_p
from .utils import _first_invalid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudyRecord:
    """Counts from one study's two-by-two table and its moderator value."""

    t_events: int
    t_total: int
    c_events: int
    c_total: int
    covariate: float

    def swap_groups(self):
        """Return the same study with the treated and control groups exchanged."""
        return StudyRecord(
            self.c_events, self.c_total, self.t_events, self.t_total, self.covariate
        )


@dataclass(frozen=True)
class DerivedStudyStats:
    """Log risk ratio of one study with its sampling variance and weight."""

    log_risk_ratio: float
    variance: float
    weight: float


@dataclass(frozen=True)
class RegressionResult:
    """Output of :meth:`EffectSizeRegressor.fit_weighted_regression`.

    Attributes
    ----------
    intercept, slope : :obj:`float`
        Weighted least-squares coefficients.
    intercept_se, slope_se : :obj:`float`
        Standard errors, scaled by the residual variance ``sigma2``.
    sigma2 : :obj:`float`
        Weighted residual sum of squares divided by ``df_resid``.
    k : :obj:`int`
        Number of studies.
    df_resid : :obj:`int`
        Residual degrees of freedom, ``k - 2``.
    t_intercept, t_slope, p_t_intercept, p_t_slope : :obj:`float`
        Test statistics and two-sided p-values against a t distribution with
        ``df_resid`` degrees of freedom.
    z_intercept, z_slope, p_z_intercept, p_z_slope : :obj:`float`
        The same statistics referred to the standard normal distribution.
        When the line fits every study exactly the standard errors are zero:
        nonzero coefficients get infinite statistics and p-values of zero,
        while a coefficient of exactly zero gets NaN for both.
    """

    intercept: float
    slope: float
    intercept_se: float
    slope_se: float
    sigma2: float
    k: int
    df_resid: int
    t_intercept: float
    t_slope: float
    p_t_intercept: float
    p_t_slope: float
    z_intercept: float
    z_slope: float
    p_z_intercept: float
    p_z_slope: float

    def to_df(self):
        """Return the coefficient table as a pandas DataFrame."""
        return pd.DataFrame(
            {
                "name": ["intercept", "slope"],
                "estimate": [self.intercept, self.slope],
                "se": [self.intercept_se, self.slope_se],
                "t-value": [self.t_intercept, self.t_slope],
                "p(t)": [self.p_t_intercept, self.p_t_slope],
                "z-score": [self.z_intercept, self.z_slope],
                "p(z)": [self.p_z_intercept, self.p_z_slope],
            }
        )


def load_study_records(
    data,
    covariate,
    t_events="tpos",
    c_events="cpos",
    t_total=None,
    c_total=None,
    t_nonevents="tneg",
    c_nonevents="cneg",
):
    """Build StudyRecords from a table of two-by-two counts.

    Parameters
    ----------
    data : :obj:`pandas.DataFrame`
        One row per study.
    covariate : :obj:`str`
        Name of the moderator column.
    t_events, c_events : :obj:`str`, optional
        Names of the event count columns. Defaults match the BCG dataset
        ("tpos" and "cpos").
    t_total, c_total : None or :obj:`str`, optional
        Names of the group size columns. When None, group sizes are the sum
        of the event and non-event columns.
    t_nonevents, c_nonevents : :obj:`str`, optional
        Names of the non-event count columns, used only when the matching
        total column is None. Defaults are "tneg" and "cneg".

    Returns
    -------
    :obj:`list` of :obj:`StudyRecord`

    Raises
    ------
    InvalidCountError
        If a count is not a whole number.
    """
    t_n = data[t_total] if t_total is not None else data[t_events] + data[t_nonevents]
    c_n = data[c_total] if c_total is not None else data[c_events] + data[c_nonevents]
    columns = zip(data[t_events], t_n, data[c_events], c_n, data[covariate])
    return [
        StudyRecord(
            _as_count(a, "treated events", i),
            _as_count(n1, "treated total", i),
            _as_count(c, "control events", i),
            _as_count(n2, "control total", i),
            float(x),
        )
        for i, (a, n1, c, n2, x) in enumerate(columns)
    ]


def _as_count(value, name, index):
    if not float(value).is_integer():
        raise InvalidCountError(
            index, "Study {} has a non-integral {} ({}).".format(index, name, value)
        )
    return int(value)


class EffectSizeRegressor:
    """Fixed-effect meta-regression of log risk ratios on one moderator.

    Parameters
    ----------
    rtol : :obj:`float`, optional
        Relative tolerance used to decide that the moderator has no variation:
        the design is treated as singular when ``W*Wxx - Wx**2`` is at most
        ``rtol * W * Wxx``. Default = 1e-10.

    Examples
    --------
    >>> from metareg import datasets
    >>> data, _ = datasets.bcg()
    >>> studies = load_study_records(data, covariate="ablat")
    >>> result = EffectSizeRegressor().fit(studies).result_
    >>> result.to_df()  # doctest: +SKIP
    """

    def __init__(self, rtol=1e-10):
        self.rtol = rtol

    def compute_derived_stats(self, studies):
        """Compute log risk ratios, variances and weights for each study.

        Parameters
        ----------
        studies : sequence of :obj:`StudyRecord`

        Returns
        -------
        :obj:`list` of :obj:`DerivedStudyStats`
            In the same order as ``studies``.

        Raises
        ------
        InvalidCountError
            If any study has a zero count (or more events than subjects). No
            partial results are returned.
        """
        studies = list(studies)
        if not studies:
            return []

        conv = TwoByTwoEffectSizeConverter(
            t_events=[s.t_events for s in studies],
            t_total=[s.t_total for s in studies],
            c_events=[s.c_events for s in studies],
            c_total=[s.c_total for s in studies],
        )
        y, v = conv.get("RR")
        return [DerivedStudyStats(float(yi), float(vi), 1.0 / float(vi)) for yi, vi in zip(y, v)]

    def fit_weighted_regression(self, stats, covariates):
        """Regress log risk ratios on a moderator with inverse-variance weights.

        Parameters
        ----------
        stats : sequence of :obj:`DerivedStudyStats`
        covariates : sequence of :obj:`float`
            Moderator values; ``covariates[i]`` belongs to ``stats[i]``.

        Returns
        -------
        :obj:`RegressionResult`

        Raises
        ------
        InsufficientDataError
            If fewer than 3 studies are given.
        SingularDesignError
            If the moderator takes a single value across studies.
        ValueError
            If the lengths disagree or a covariate value is not finite.
        """
        stats = list(stats)
        x = np.asarray(covariates, dtype=float).ravel()
        if len(stats) != len(x):
            raise ValueError(
                "Got {} studies but {} covariate values.".format(len(stats), len(x))
            )

        bad = _first_invalid(~np.isfinite(x))
        if bad is not None:
            raise ValueError("Covariate value of study {} is not finite ({}).".format(bad, x[bad]))

        k = len(stats)
        if k < 3:
            raise InsufficientDataError(
                "At least 3 studies are required to fit the regression; got {}.".format(k)
            )

        y = np.array([s.log_risk_ratio for s in stats])
        w = np.array([s.weight for s in stats])

        W = w.sum()
        Wx = (w * x).sum()
        Wy = (w * y).sum()
        Wxx = (w * x ** 2).sum()
        Wxy = (w * x * y).sum()

        denom = W * Wxx - Wx ** 2
        if denom <= self.rtol * W * Wxx:
            raise SingularDesignError(
                "The covariate does not vary across studies; the slope is not identifiable."
            )

        slope = (W * Wxy - Wx * Wy) / denom
        intercept = (Wy - slope * Wx) / W

        df_resid = k - 2
        sigma2 = (w * (y - intercept - slope * x) ** 2).sum() / df_resid
        intercept_se = np.sqrt(sigma2 * Wxx / denom)
        slope_se = np.sqrt(sigma2 * W / denom)

        if sigma2 == 0:
            warnings.warn(
                "The regression line fits every study exactly; standard errors are zero "
                "and test statistics are infinite."
            )

        est = np.array([intercept, slope])
        with np.errstate(divide="ignore", invalid="ignore"):
            stat = est / np.array([intercept_se, slope_se])
        p_t = two_sided_p(stat, df_resid)
        p_z = two_sided_p(stat)

        logger.debug(
            "Weighted regression on %d studies: intercept=%.4f, slope=%.4f, s2=%.4f",
            k,
            intercept,
            slope,
            sigma2,
        )

        return RegressionResult(
            intercept=float(intercept),
            slope=float(slope),
            intercept_se=float(intercept_se),
            slope_se=float(slope_se),
            sigma2=float(sigma2),
            k=k,
            df_resid=df_resid,
            t_intercept=float(stat[0]),
            t_slope=float(stat[1]),
            p_t_intercept=float(p_t[0]),
            p_t_slope=float(p_t[1]),
            z_intercept=float(stat[0]),
            z_slope=float(stat[1]),
            p_z_intercept=float(p_z[0]),
            p_z_slope=float(p_z[1]),
        )

    def fit(self, studies):
        """Compute study statistics and fit the regression on the records' covariates.

        Sets ``stats_`` (list of :obj:`DerivedStudyStats`) and ``result_``
        (:obj:`RegressionResult`) on the instance.
        """
        studies = list(studies)
        self.stats_ = self.compute_derived_stats(studies)
        self.result_ = self.fit_weighted_regression(
            self.stats_, [s.covariate for s in studies]
        )
        return self


def compute_derived_stats(studies):
    """Compute log risk ratios, variances and weights; see :class:`EffectSizeRegressor`."""
    return EffectSizeRegressor().compute_derived_stats(studies)


def fit_weighted_regression(stats, covariates):
    """Fit the closed-form weighted regression; see :class:`EffectSizeRegressor`."""
    return EffectSizeRegressor().fit_weighted_regression(stats, covariates)
