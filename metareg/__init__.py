"""metareg: meta-regression of risk ratios from two-by-two tables."""

import logging

from .core import Dataset, meta_regression
from .effectsize import TwoByTwoEffectSizeConverter, compute_measure
from .exceptions import (
    InsufficientDataError,
    InvalidCountError,
    MetaRegressionError,
    SingularDesignError,
)
from .info import VERSION
from .regression import (
    DerivedStudyStats,
    EffectSizeRegressor,
    RegressionResult,
    StudyRecord,
    compute_derived_stats,
    fit_weighted_regression,
    load_study_records,
)

__all__ = [
    "Dataset",
    "meta_regression",
    "TwoByTwoEffectSizeConverter",
    "compute_measure",
    "EffectSizeRegressor",
    "StudyRecord",
    "DerivedStudyStats",
    "RegressionResult",
    "compute_derived_stats",
    "fit_weighted_regression",
    "load_study_records",
    "MetaRegressionError",
    "InvalidCountError",
    "InsufficientDataError",
    "SingularDesignError",
]

__version__ = VERSION

logging.getLogger(__name__).addHandler(logging.NullHandler())
