"""Meta-regression estimator classes."""

import logging
from abc import ABCMeta, abstractmethod
from inspect import Parameter, signature

import numpy as np
import wrapt
from scipy.optimize import minimize_scalar

from ..exceptions import InsufficientDataError, SingularDesignError
from ..results import MetaRegressionResults
from ..stats import ensure_2d, weighted_least_squares

logger = logging.getLogger(__name__)


@wrapt.decorator
def _validate_inputs(wrapped, instance, args, kwargs):
    # Decorator for fit() methods of Estimator classes. Coerces y and v to
    # column vectors and X to a 2d matrix, rejects designs that leave no
    # residual degrees of freedom or are rank deficient, and records the
    # validated inputs on the instance for post-estimation statistics.
    params = signature(wrapped).bind(*args, **kwargs)
    params.apply_defaults()
    params = params.arguments

    y = ensure_2d(params["y"])
    X = ensure_2d(params["X"])
    if y.shape[1] != 1:
        raise ValueError(
            "Estimators accept a single set of estimates; y has shape {}.".format(y.shape)
        )
    if X.shape[0] != y.shape[0]:
        raise ValueError(
            "y and X should have the same number of rows. You provided y with shape "
            "{} and X with shape {}.".format(y.shape, X.shape)
        )

    v = params.get("v")
    if v is None:
        if signature(wrapped).parameters["v"].default is Parameter.empty:
            name = instance.__class__.__name__
            raise ValueError("{} requires sampling variances (v).".format(name))
    else:
        v = ensure_2d(v)
        if v.shape != y.shape:
            raise ValueError(
                "y and v should have the same shape. You provided y with shape {} "
                "and v with shape {}.".format(y.shape, v.shape)
            )
        if np.any(v <= 0):
            raise ValueError("Sampling variances must be strictly positive.")

    k, p = X.shape
    if k <= p:
        raise InsufficientDataError(
            "{} studies cannot support a model with {} fixed parameters; at least {} "
            "studies are required.".format(k, p, p + 1)
        )
    if np.linalg.matrix_rank(X) < p:
        raise SingularDesignError(
            "The design matrix is rank deficient; at least one moderator has no "
            "variation beyond the other columns."
        )

    params.update(y=y, X=X, v=v)
    instance.dataset_ = None
    result = wrapped(**params)
    instance.inputs_ = {"y": y, "v": np.ones_like(y) if v is None else v, "X": X}
    logger.debug(
        "%s fitted to %d studies: beta=%s, tau2=%s",
        instance.__class__.__name__,
        k,
        instance.params_["fe_params"].ravel(),
        instance.params_["tau2"],
    )
    return result


class BaseEstimator(metaclass=ABCMeta):
    """Base class for meta-regression estimators."""

    @abstractmethod
    def fit(self, *args, **kwargs):
        """Fit the estimator to data."""
        pass

    def fit_dataset(self, dataset, *args, **kwargs):
        """Apply the current estimator to the passed Dataset container.

        A convenience interface that wraps fit() and automatically aligns the
        variables held in a Dataset with the required arguments.

        Parameters
        ----------
        dataset : :obj:`~metareg.core.Dataset`
            A Dataset instance holding the data.
        *args, **kwargs
            Optional positional and keyword arguments to pass onto the
            :meth:`fit` method.
        """
        all_kwargs = {}
        for name, param in signature(self.fit).parameters.items():
            if hasattr(dataset, name):
                all_kwargs[name] = getattr(dataset, name)
            elif param.default is Parameter.empty:
                raise ValueError(
                    "Dataset has no attribute '{}' required by {}.fit().".format(
                        name, self.__class__.__name__
                    )
                )

        all_kwargs.update(kwargs)
        self.fit(*args, **all_kwargs)
        self.dataset_ = dataset

        return self

    def summary(self, alpha=0.05):
        """Generate a MetaRegressionResults object for the fitted estimator.

        Parameters
        ----------
        alpha : :obj:`float`, optional
            Default alpha level for confidence intervals. Default = 0.05.

        Returns
        -------
        :obj:`~metareg.results.MetaRegressionResults`
        """
        if not hasattr(self, "params_"):
            name = self.__class__.__name__
            raise ValueError(
                "This {} instance hasn't been fitted yet. Please "
                "call fit() before summary().".format(name)
            )
        p = self.params_
        return MetaRegressionResults(
            self, self.dataset_, p["fe_params"], p["fe_cov"], p["tau2"], alpha=alpha
        )


class WeightedLeastSquares(BaseEstimator):
    """Weighted least-squares meta-regression.

    Provides the weighted least-squares estimate of the fixed effects given
    known/assumed between-study variance tau^2. When tau^2 = 0 (default), the
    model is the standard inverse-variance weighted fixed-effect
    meta-regression.

    Parameters
    ----------
    tau2 : :obj:`float`, optional
        Assumed/known value of tau^2. Must be >= 0. Default is 0.

    Notes
    -----
    If no v argument is passed to fit(), unit weights will be used, resulting
    in the ordinary least-squares (OLS) estimates.
    """

    def __init__(self, tau2=0.0):
        if tau2 < 0:
            raise ValueError("Value of tau^2 must be >= 0.")
        self.tau2 = tau2

    @_validate_inputs
    def fit(self, y, X, v=None):
        """Fit the estimator to data.

        Parameters
        ----------
        y : :obj:`numpy.ndarray` of shape (K,)
            Study-level estimates.
        X : :obj:`numpy.ndarray` of shape (K, P)
            Design matrix, including the intercept column.
        v : None or :obj:`numpy.ndarray` of shape (K,), optional
            Sampling variances. Unit weights are used when None.

        Returns
        -------
        :obj:`~metareg.estimators.WeightedLeastSquares`
        """
        if v is None:
            v = np.ones_like(y)
        beta, cov = weighted_least_squares(y, v, X, self.tau2, return_cov=True)
        self.params_ = {"fe_params": beta, "tau2": float(self.tau2), "fe_cov": cov}
        return self


class DerSimonianLaird(BaseEstimator):
    """DerSimonian-Laird meta-regression estimator.

    Estimates the between-study variance tau^2 with the method-of-moments
    approach of DerSimonian & Laird (1986), generalized to models with
    moderators, then re-estimates the fixed effects with weights
    ``1 / (v + tau^2)``.
    """

    @_validate_inputs
    def fit(self, y, v, X):
        """Fit the estimator to data."""
        k, p = X.shape

        beta_fe, cov_fe = weighted_least_squares(y, v, X, return_cov=True)
        w = 1.0 / v
        Q = float((w * (y - X.dot(beta_fe)) ** 2).sum())

        denom = w.sum() - np.trace(cov_fe.dot((X * w ** 2).T.dot(X)))
        tau2 = max(0.0, (Q - (k - p)) / denom)

        beta, cov = weighted_least_squares(y, v, X, tau2, return_cov=True)
        self.params_ = {"fe_params": beta, "tau2": tau2, "fe_cov": cov}
        return self


class LikelihoodEstimator(BaseEstimator):
    """Likelihood-based estimator for estimates with known variances.

    Estimates tau^2 by minimizing the profile negative log-likelihood (ML) or
    the restricted negative log-likelihood (REML), with the fixed effects
    profiled out through weighted least squares.

    Parameters
    ----------
    method : {"REML", "ML"}, optional
        The estimation method to use. Default is "REML".
    **kwargs
        Options passed on to :func:`scipy.optimize.minimize_scalar`
        (bounded method), e.g. ``options={"xatol": 1e-12}``.
    """

    def __init__(self, method="reml", **kwargs):
        method = method.lower()
        if method not in ("ml", "reml"):
            raise ValueError(
                "No log-likelihood function defined for method '{}'.".format(method)
            )
        self.method = method
        self._nll_func = getattr(self, "_{}_nll".format(method))
        kwargs.setdefault("options", {"xatol": 1e-10})
        self.kwargs = kwargs

    @_validate_inputs
    def fit(self, y, v, X):
        """Fit the estimator to data."""
        upper = 100 * max(float(np.var(y)), float(v.mean()))
        res = minimize_scalar(
            self._nll_func, bounds=(0.0, upper), args=(y, v, X), method="bounded", **self.kwargs
        )
        tau2 = float(res.x)
        if self._nll_func(0.0, y, v, X) <= res.fun:
            tau2 = 0.0

        beta, cov = weighted_least_squares(y, v, X, tau2, return_cov=True)
        self.params_ = {"fe_params": beta, "tau2": tau2, "fe_cov": cov}
        return self

    def _ml_nll(self, tau2, y, v, X):
        """ML negative log-likelihood for meta-regression model."""
        w = 1.0 / (v + tau2)
        beta = weighted_least_squares(y, v, X, tau2)
        R = y - X.dot(beta)
        return -0.5 * (np.log(w).sum() - (w * R ** 2).sum())

    def _reml_nll(self, tau2, y, v, X):
        """REML negative log-likelihood for meta-regression model."""
        w = 1.0 / (v + tau2)
        F = (X * w).T.dot(X)
        return self._ml_nll(tau2, y, v, X) + 0.5 * np.linalg.slogdet(F)[1]
