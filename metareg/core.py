"""Core classes and functions."""

from functools import partial

import numpy as np
import pandas as pd

from .estimators import DerSimonianLaird, LikelihoodEstimator, WeightedLeastSquares
from .stats import ensure_2d
from .utils import _check_inputs_shape, _listify


class Dataset:
    """Container for input data and arguments to estimators.

    Parameters
    ----------
    y : None or :obj:`numpy.ndarray` of shape (K,) or :obj:`str`, optional
        1d array of study-level estimates with length K, or the name of the column in data
        containing the y values.
        Default = None.
    v : None or :obj:`numpy.ndarray` of shape (K,) or :obj:`str`, optional
        1d array of study-level variances with length K, or the name of the column in data
        containing v values.
        Default = None.
    X : None or :obj:`numpy.ndarray` of shape (K,[P]) or :obj:`list` of :obj:`str`, optional
        1d or 2d array containing study-level moderators (dimensions K x P),
        or a list of strings giving the names of the columns in data containing the X values.
        Default = None.
    data : None or :obj:`pandas.DataFrame`, optional
        A pandas DataFrame containing y, v and/or X values.
        By default, columns are expected to have the same names as arguments
        (e.g., the y values will be expected in the 'y' column).
        Default = None.
    X_names : None or :obj:`list` of :obj:`str`, optional
        List of length P containing the names of the moderators.
        Ignored if ``data`` is provided (use ``X`` to specify columns).
        Default = None.
    add_intercept : :obj:`bool`, optional
        If True, an intercept column is automatically added to the predictor matrix.
        Default = True.
    """

    def __init__(self, y=None, v=None, X=None, data=None, X_names=None, add_intercept=True):
        if y is None and data is None:
            raise ValueError(
                "If no y values are provided, a pandas DataFrame "
                "containing a 'y' column must be passed to the "
                "data argument."
            )

        if (X is None) and (not add_intercept):
            raise ValueError("If no X matrix is provided, add_intercept must be True!")

        if data is not None:
            y = data.loc[:, y or "y"].values

            if (v is not None) or ("v" in data.columns):
                v = data.loc[:, v or "v"].values

            if X is not None:
                X_names = _listify(X)
                X = data.loc[:, X_names].values

        self.y = ensure_2d(y)
        self.v = ensure_2d(v)
        if self.y.shape[1] != 1:
            raise ValueError(
                "y must contain a single set of estimates; got shape {}.".format(self.y.shape)
            )

        self.X, self.X_names = self._get_predictors(X, X_names, add_intercept)

        _check_inputs_shape(self.y, self.X, "y", "X", row=True)
        _check_inputs_shape(self.y, self.v, "y", "v", row=True, column=True)

    def _get_predictors(self, X, names, add_intercept):
        if X is None:
            X = pd.DataFrame(index=range(len(self.y)))
        else:
            X = pd.DataFrame(np.asarray(X, dtype=float))
        if names is not None:
            X.columns = _listify(names)

        if add_intercept:
            X.insert(0, "intercept", np.ones(len(X)))

        return X.values.astype(float), [str(c) for c in X.columns]

    @property
    def k(self):
        """Number of studies."""
        return self.y.shape[0]

    def to_df(self):
        """Convert the dataset to a pandas DataFrame.

        Returns
        -------
        :obj:`pandas.DataFrame`
            A DataFrame containing the y, v, and X values.
        """
        df = pd.DataFrame({"y": self.y[:, 0]})
        if self.v is not None:
            df["v"] = self.v[:, 0]
        df[self.X_names] = self.X
        return df


def meta_regression(
    y=None,
    v=None,
    X=None,
    data=None,
    X_names=None,
    add_intercept=True,
    method="REML",
    **kwargs,
):
    """Fit the standard meta-regression/meta-analysis model to provided data.

    Parameters
    ----------
    y, v, X, data, X_names, add_intercept
        See :obj:`Dataset`. If ``data`` is a :obj:`Dataset` instance, the other
        data arguments are ignored.
    method : {"REML", "ML", "DL", "WLS", "FE"}, optional
        Name of estimation method. Default = 'REML'.
        Supported estimators include:

            - 'REML': Restricted maximum-likelihood estimator
            - 'ML': Maximum-likelihood estimator
            - 'DL': DerSimonian-Laird estimator
            - 'WLS' or 'FE': Weighted least squares (fixed effects only)
    **kwargs
        Optional keyword arguments to pass onto the chosen estimator.

    Returns
    -------
    :obj:`~metareg.results.MetaRegressionResults`
    """
    if not isinstance(data, Dataset):
        data = Dataset(y, v, X, data, X_names, add_intercept)

    method = method.lower()
    estimators = {
        "reml": partial(LikelihoodEstimator, method="reml"),
        "ml": partial(LikelihoodEstimator, method="ml"),
        "dl": DerSimonianLaird,
        "wls": WeightedLeastSquares,
        "fe": WeightedLeastSquares,
    }
    if method not in estimators:
        raise ValueError(
            "Unknown method '{}'; must be one of {}.".format(method, sorted(estimators))
        )

    est = estimators[method](**kwargs)
    est.fit_dataset(data)
    return est.summary()
