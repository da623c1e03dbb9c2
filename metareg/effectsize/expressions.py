"""Symbolic effect-size expressions for two-by-two tables."""

import numpy as np
from sympy import lambdify, sympify

SYMPY_MODULES = ["numpy"]


class Expression:
    """Represents a single statistical expression.

    Parameters
    ----------
    expression : :obj:`str`
        String representation of the mathematical expression.
    description : :obj:`str`, optional
        Optional text description of expression.
    """

    def __init__(self, expression, description=None):
        self.expr = expression
        self.description = description
        self.sympy = sympify(expression)
        self.symbols = self.sympy.free_symbols
        self.names = sorted(s.name for s in self.symbols)
        self._func = lambdify(
            [s for s in sorted(self.symbols, key=lambda s: s.name)],
            self.sympy,
            modules=SYMPY_MODULES,
        )

    def __repr__(self):
        return "Expression({!r})".format(self.expr)

    def evaluate(self, **values):
        """Evaluate the expression with NumPy.

        Parameters
        ----------
        **values
            Arrays or scalars keyed by symbol name. Extra keys are ignored.

        Returns
        -------
        :obj:`numpy.ndarray`
        """
        missing = set(self.names) - set(values)
        if missing:
            raise ValueError(
                "Cannot evaluate '{}': no values for {}.".format(self.expr, sorted(missing))
            )
        args = [np.asarray(values[name], dtype=float) for name in self.names]
        return np.asarray(self._func(*args), dtype=float)


# Each measure maps to its estimate, its sampling variance, and the quantities
# that must be strictly positive for the variance to be defined.
MEASURES = {
    "RR": {
        "description": "Log risk ratio",
        "estimate": Expression("log((t_events / t_total) / (c_events / c_total))"),
        "variance": Expression("1/t_events - 1/t_total + 1/c_events - 1/c_total"),
        "positive": [
            Expression("t_events", "treated events"),
            Expression("t_total", "treated total"),
            Expression("c_events", "control events"),
            Expression("c_total", "control total"),
        ],
    },
    "OR": {
        "description": "Log odds ratio",
        "estimate": Expression(
            "log((t_events * (c_total - c_events)) / ((t_total - t_events) * c_events))"
        ),
        "variance": Expression(
            "1/t_events + 1/(t_total - t_events) + 1/c_events + 1/(c_total - c_events)"
        ),
        "positive": [
            Expression("t_events", "treated events"),
            Expression("t_total - t_events", "treated non-events"),
            Expression("c_events", "control events"),
            Expression("c_total - c_events", "control non-events"),
        ],
    },
    "RD": {
        "description": "Risk difference",
        "estimate": Expression("t_events / t_total - c_events / c_total"),
        "variance": Expression(
            "t_events * (t_total - t_events) / t_total**3"
            " + c_events * (c_total - c_events) / c_total**3"
        ),
        "positive": [
            Expression("t_total", "treated total"),
            Expression("c_total", "control total"),
        ],
    },
}


def select_measure(measure):
    """Look up the expressions for a named measure (case-insensitive).

    Raises
    ------
    ValueError
        If the measure is unknown.
    """
    key = measure.upper()
    if key not in MEASURES:
        raise ValueError(
            "Invalid measure '{}'; must be one of {}.".format(measure, sorted(MEASURES))
        )
    return MEASURES[key]
