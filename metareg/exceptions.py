"""Exceptions raised for invalid meta-regression inputs."""


class MetaRegressionError(ValueError):
    """Base class for input errors detected before or during a fit."""


class InvalidCountError(MetaRegressionError):
    """A two-by-two table contains a count that makes the effect size undefined.

    Parameters
    ----------
    index : :obj:`int`
        Position of the offending study in the input sequence.
    message : :obj:`str`, optional
        Description of what is wrong with the counts.
    """

    def __init__(self, index, message=None):
        self.index = index
        if message is None:
            message = "Study {} has a non-positive count.".format(index)
        super().__init__(message)


class InsufficientDataError(MetaRegressionError):
    """Too few studies to leave any residual degrees of freedom."""


class SingularDesignError(MetaRegressionError):
    """The moderators carry no variation, so their coefficients are not identifiable."""
