"""Tools for representing and manipulating meta-regression results."""

import numpy as np
import pandas as pd
import scipy.stats as ss

from .stats import q_gen, q_profile, two_sided_p


class MetaRegressionResults:
    """Container for results generated by a fitted meta-regression estimator.

    Parameters
    ----------
    estimator : :obj:`~metareg.estimators.BaseEstimator`
        The fitted estimator that produced the results.
    dataset : None or :obj:`~metareg.core.Dataset`
        The Dataset the estimator was fitted to, or None if the estimator was
        fitted to arrays directly. Only used to label the moderators.
    fe_params : :obj:`numpy.ndarray` of shape (P, 1)
        Fixed-effect coefficients.
    fe_cov : :obj:`numpy.ndarray` of shape (P, P)
        Covariance matrix of the fixed-effect coefficients.
    tau2 : :obj:`float`
        Estimated (or assumed) between-study variance.
    alpha : :obj:`float`, optional
        Default alpha level for confidence intervals. Default = 0.05.
    """

    def __init__(self, estimator, dataset, fe_params, fe_cov, tau2, alpha=0.05):
        self.estimator = estimator
        self.dataset = dataset
        self.fe_params = fe_params
        self.fe_cov = fe_cov
        self.tau2 = tau2
        self.alpha = alpha

        inputs = estimator.inputs_
        self._y, self._v, self._X = inputs["y"], inputs["v"], inputs["X"]

    @property
    def X_names(self):
        """Names of the fixed-effect coefficients."""
        if self.dataset is not None:
            return self.dataset.X_names
        return ["x{}".format(i) for i in range(self._X.shape[1])]

    @property
    def df_resid(self):
        """Residual degrees of freedom (K - P)."""
        k, p = self._X.shape
        return k - p

    @property
    def fe_se(self):
        """Standard errors of the fixed-effect coefficients, shape (P, 1)."""
        return np.sqrt(np.diag(self.fe_cov))[:, None]

    def get_fe_stats(self, test="z", alpha=None):
        """Get fixed-effect statistics.

        Parameters
        ----------
        test : {"z", "t"}, optional
            Reference distribution for tests and confidence intervals: the
            standard normal ("z", default, the usual meta-analytic convention)
            or a t distribution with K - P degrees of freedom ("t").
        alpha : None or :obj:`float`, optional
            Alpha level for the confidence intervals. Defaults to the value
            the results were created with.

        Returns
        -------
        :obj:`dict`
            Keys 'est', 'se', 'ci_l', 'ci_u', 'p' and either 'z' or 't'; all
            values are arrays of shape (P, 1).
        """
        test = test.lower()
        if test not in ("z", "t"):
            raise ValueError("Invalid test '{}'; must be 'z' or 't'.".format(test))
        alpha = self.alpha if alpha is None else alpha

        est, se = self.fe_params, self.fe_se
        stat = est / se
        if test == "z":
            crit = ss.norm.ppf(1 - alpha / 2)
            p = two_sided_p(stat)
        else:
            crit = ss.t.ppf(1 - alpha / 2, self.df_resid)
            p = two_sided_p(stat, self.df_resid)

        return {
            "est": est,
            "se": se,
            "ci_l": est - crit * se,
            "ci_u": est + crit * se,
            test: stat,
            "p": p,
        }

    def get_re_stats(self, alpha=None):
        """Get random-effect statistics.

        Returns
        -------
        :obj:`dict`
            Keys 'tau^2', 'ci_l' and 'ci_u'; the interval is computed with the
            Q-profile method.
        """
        alpha = self.alpha if alpha is None else alpha
        bounds = q_profile(self._y, self._v, self._X, alpha)
        return {"tau^2": self.tau2, "ci_l": bounds["ci_l"], "ci_u": bounds["ci_u"]}

    def get_heterogeneity_stats(self):
        """Get heterogeneity statistics.

        Returns
        -------
        :obj:`dict`
            'Q' (residual heterogeneity of the fixed-effect fit), 'p(Q)',
            'I^2' (percent of variability beyond sampling error) and 'H'.
        """
        df = self.df_resid
        Q = q_gen(self._y, self._v, self._X, 0.0)
        return {
            "Q": Q,
            "p(Q)": float(ss.chi2.sf(Q, df)),
            "I^2": max(0.0, 100.0 * (Q - df) / Q) if Q > 0 else 0.0,
            "H": float(np.sqrt(Q / df)),
        }

    def get_residuals(self, standardize=True):
        """Get fitted values and residuals for model diagnostics.

        Parameters
        ----------
        standardize : :obj:`bool`, optional
            If True, a 'std_residual' column is added. Default = True.

        Returns
        -------
        :obj:`pandas.DataFrame`
            One row per study with columns 'fitted', 'residual' and, when
            ``standardize`` is True, 'std_residual'. Standardized residuals
            divide each residual by the square root of its model-implied
            variance, ``(v + tau^2) - h``, where ``h`` is the variance of the
            fitted value. Studies with leverage one get a NaN standardized
            residual.
        """
        fitted = self._X.dot(self.fe_params)
        resid = self._y - fitted
        df = pd.DataFrame({"fitted": fitted[:, 0], "residual": resid[:, 0]})
        if not standardize:
            return df

        h = np.einsum("kp,pq,kq->k", self._X, self.fe_cov, self._X)[:, None]
        resid_var = self._v + self.tau2 - h
        with np.errstate(divide="ignore", invalid="ignore"):
            std_resid = np.where(resid_var > 0, resid / np.sqrt(resid_var), np.nan)
        df["std_residual"] = std_resid[:, 0]
        return df

    def get_qq_points(self):
        """Get the coordinates of a normal quantile-quantile plot of the residuals.

        Returns
        -------
        :obj:`pandas.DataFrame`
            Columns 'theoretical' (standard normal order statistic medians)
            and 'sample' (sorted standardized residuals), one row per study
            with a defined standardized residual.
        """
        resid = self.get_residuals()["std_residual"].dropna().values
        theoretical, sample = ss.probplot(resid, dist="norm", fit=False)
        return pd.DataFrame({"theoretical": theoretical, "sample": sample})

    def to_df(self, test="z", alpha=None):
        """Return a pandas DataFrame summarizing fixed effect results.

        Parameters
        ----------
        test : {"z", "t"}, optional
            See :meth:`get_fe_stats`. Default = "z".
        alpha : None or :obj:`float`, optional
            Alpha level for the confidence intervals.
        """
        alpha = self.alpha if alpha is None else alpha
        stats = self.get_fe_stats(test=test, alpha=alpha)
        stat_name = "z-score" if test.lower() == "z" else "t-value"
        ci_l = "ci_{:.6g}".format(alpha / 2)
        ci_u = "ci_{:.6g}".format(1 - alpha / 2)
        return pd.DataFrame(
            {
                "name": self.X_names,
                "estimate": stats["est"][:, 0],
                "se": stats["se"][:, 0],
                stat_name: stats[test.lower()][:, 0],
                "p-value": stats["p"][:, 0],
                ci_l: stats["ci_l"][:, 0],
                ci_u: stats["ci_u"][:, 0],
            }
        )
