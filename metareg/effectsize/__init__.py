"""Tools for computing effect sizes from two-by-two tables."""
from .base import TwoByTwoEffectSizeConverter, compute_measure
from .expressions import MEASURES, Expression, select_measure

__all__ = [
    "TwoByTwoEffectSizeConverter",
    "compute_measure",
    "Expression",
    "MEASURES",
    "select_measure",
]
