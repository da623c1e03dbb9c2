"""Estimators for meta-analyses and meta-regressions."""
from .estimators import (
    BaseEstimator,
    DerSimonianLaird,
    LikelihoodEstimator,
    WeightedLeastSquares,
)

__all__ = [
    "BaseEstimator",
    "WeightedLeastSquares",
    "DerSimonianLaird",
    "LikelihoodEstimator",
]
