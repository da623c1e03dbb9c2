"""Tools for computing effect sizes from two-by-two tables."""

import logging

import numpy as np

from ..core import Dataset
from ..exceptions import InvalidCountError
from ..utils import _first_invalid
from .expressions import select_measure

logger = logging.getLogger(__name__)

_VARIABLES = ("t_events", "t_total", "t_nonevents", "c_events", "c_total", "c_nonevents")


class TwoByTwoEffectSizeConverter:
    """Effect size converter for studies summarized as two-by-two tables.

    Parameters
    ----------
    data : None or :obj:`pandas.DataFrame`, optional
        Optional DataFrame to extract variables from. Column names must match
        the argument names below. If keyword arguments are also provided, they
        take precedence over the values in the data frame.
    t_events, c_events : array-like
        Number of events in the treated and control groups.
    t_total, c_total : array-like, optional
        Group sizes. Either the totals or the non-event counts must be given.
    t_nonevents, c_nonevents : array-like, optional
        Number of subjects without the event in each group.

    Notes
    -----
    All inputs are study-level counts and must have the same length. Counts
    are validated when a measure is requested: negative or non-finite counts
    and more events than subjects are always rejected, while positivity
    requirements depend on the measure (a zero event count is fine for the
    risk difference but not for the log risk ratio). The first study failing
    any of these checks is reported.
    """

    def __init__(
        self,
        data=None,
        t_events=None,
        t_total=None,
        c_events=None,
        c_total=None,
        t_nonevents=None,
        c_nonevents=None,
    ):
        kwargs = dict(
            t_events=t_events,
            t_total=t_total,
            c_events=c_events,
            c_total=c_total,
            t_nonevents=t_nonevents,
            c_nonevents=c_nonevents,
        )
        kwargs = {k: v for k, v in kwargs.items() if v is not None}

        if data is not None:
            kwargs = self._collect_variables(data, kwargs)

        kwargs = {k: np.atleast_1d(np.asarray(v, dtype=float)) for k, v in kwargs.items()}
        self.known_vars = self._validate(kwargs)
        self._cache = {}

    @staticmethod
    def _collect_variables(data, kwargs):
        # consolidate variables from pandas DF and keyword arguments, giving
        # precedence to the latter.
        df_cols = {col: data.loc[:, col].values for col in data.columns if col in _VARIABLES}
        df_cols.update(kwargs)
        return df_cols

    def _validate(self, kwargs):
        for arm in ("t", "c"):
            events, total, nonevents = (
                "{}_events".format(arm),
                "{}_total".format(arm),
                "{}_nonevents".format(arm),
            )
            if events not in kwargs:
                raise ValueError("Missing required input '{}'.".format(events))
            if total not in kwargs:
                if nonevents not in kwargs:
                    raise ValueError(
                        "Either '{}' or '{}' must be provided.".format(total, nonevents)
                    )
                kwargs[total] = kwargs[events] + kwargs[nonevents]
            elif nonevents in kwargs:
                if not np.allclose(kwargs[events] + kwargs[nonevents], kwargs[total]):
                    raise ValueError(
                        "Inconsistent inputs: {} + {} does not equal {}.".format(
                            events, nonevents, total
                        )
                    )
            kwargs.pop(nonevents, None)

        lengths = set(len(v) for v in kwargs.values())
        if len(lengths) > 1:
            raise ValueError(
                "All count arrays must have the same length; got lengths {}.".format(
                    sorted(lengths)
                )
            )

        return kwargs

    @property
    def n_studies(self):
        """Number of studies held by the converter."""
        return len(self.known_vars["t_events"])

    def get(self, measure="RR"):
        """Compute the estimates and sampling variances for a measure.

        Parameters
        ----------
        measure : {"RR", "OR", "RD"}, optional
            The desired effect size measure. Default = "RR".

        Returns
        -------
        y, v : :obj:`numpy.ndarray`
            1d arrays with the study-level estimates and their variances.

        Raises
        ------
        InvalidCountError
            If any study has a count that leaves the measure or its variance
            undefined. The first offending study is reported.
        """
        key = measure.upper()
        if key in self._cache:
            y, v = self._cache[key]
            return y.copy(), v.copy()

        definition = select_measure(key)
        with np.errstate(divide="ignore", invalid="ignore"):
            y = definition["estimate"].evaluate(**self.known_vars)
            v = definition["variance"].evaluate(**self.known_vars)
        self._check_counts(definition, v)

        logger.debug("Computed %s for %d studies.", key, len(y))
        self._cache[key] = (y, v)
        return y.copy(), v.copy()

    def _check_counts(self, definition, v):
        # Each check pairs a per-study failure mask with a message builder.
        # The study reported is the first one failing any check; the message
        # comes from the first check it fails.
        checks = []
        for name, values in self.known_vars.items():
            checks.append(
                (
                    ~np.isfinite(values) | (values < 0),
                    lambda i, name=name, values=values: "has an invalid {} ({:g})".format(
                        name, values[i]
                    ),
                )
            )

        for arm, group in (("t", "treated"), ("c", "control")):
            events = self.known_vars["{}_events".format(arm)]
            total = self.known_vars["{}_total".format(arm)]
            checks.append(
                (
                    events > total,
                    lambda i, events=events, total=total, group=group: (
                        "reports more events ({:g}) than subjects ({:g}) in the {} group".format(
                            events[i], total[i], group
                        )
                    ),
                )
            )

        measure_name = definition["description"].lower()
        for quantity in definition["positive"]:
            values = quantity.evaluate(**self.known_vars)
            checks.append(
                (
                    values <= 0,
                    lambda i, quantity=quantity, values=values: (
                        "has a non-positive {} ({:g}); the {} is undefined".format(
                            quantity.description, values[i], measure_name
                        )
                    ),
                )
            )

        checks.append(
            (
                ~(v > 0),
                lambda i: "has a sampling variance of zero; its weight is infinite",
            )
        )

        bad = _first_invalid(np.logical_or.reduce([mask for mask, _ in checks]))
        if bad is None:
            return

        describe = next(describe for mask, describe in checks if mask[bad])
        raise InvalidCountError(bad, "Study {} {}.".format(bad, describe(bad)))

    def to_dataset(self, measure="RR", **kwargs):
        """Get a Dataset with y and v mapped to the specified measure.

        Parameters
        ----------
        measure : {"RR", "OR", "RD"}, optional
            The measure to map to the Dataset's y and v attributes.
            Default = "RR".
        **kwargs
            Optional keyword arguments to pass onto the Dataset initializer
            (e.g., X, X_names, add_intercept).

        Returns
        -------
        :obj:`~metareg.core.Dataset`
        """
        y, v = self.get(measure)
        return Dataset(y=y, v=v, **kwargs)


def compute_measure(
    measure,
    data=None,
    return_type="tuple",
    t_events=None,
    t_total=None,
    c_events=None,
    c_total=None,
    t_nonevents=None,
    c_nonevents=None,
    **dataset_kwargs,
):
    """Compute an effect size measure and its variance from two-by-two tables.

    Parameters
    ----------
    measure : {"RR", "OR", "RD"}
        The desired output effect size measure:

            - 'RR': Log risk ratio.
            - 'OR': Log odds ratio.
            - 'RD': Risk difference.
    data : None or :obj:`pandas.DataFrame`, optional
        A DataFrame to extract the count variables from. Column names must
        match the names of the count arguments.
    return_type : {"tuple", "dict", "dataset", "converter"}, optional
        Controls what gets returned:

            - 'tuple': A 2-tuple of 1d arrays ``(y, v)``.
            - 'dict': A dictionary with keys 'y' and 'v'.
            - 'dataset': A :obj:`~metareg.core.Dataset`; ``dataset_kwargs``
              are passed on to its initializer.
            - 'converter': The :obj:`TwoByTwoEffectSizeConverter` used for the
              computation, with the measure already cached.
    t_events, t_total, c_events, c_total, t_nonevents, c_nonevents : array-like, optional
        Study-level counts; see :obj:`TwoByTwoEffectSizeConverter`.
    **dataset_kwargs
        Ignored unless ``return_type == 'dataset'``.

    Returns
    -------
    :obj:`tuple`, :obj:`dict`, :obj:`~metareg.core.Dataset` or :obj:`TwoByTwoEffectSizeConverter`
    """
    select_measure(measure)

    conv = TwoByTwoEffectSizeConverter(
        data,
        t_events=t_events,
        t_total=t_total,
        c_events=c_events,
        c_total=c_total,
        t_nonevents=t_nonevents,
        c_nonevents=c_nonevents,
    )
    y, v = conv.get(measure)

    return_type = return_type.lower()
    if return_type == "tuple":
        return (y, v)
    elif return_type == "dict":
        return {"y": y, "v": v}
    elif return_type == "dataset":
        return conv.to_dataset(measure, **dataset_kwargs)
    elif return_type == "converter":
        return conv
    else:
        raise ValueError(
            "Invalid return_type value '{}'. Must be one of "
            "'tuple', 'dict', 'dataset', or 'converter'.".format(return_type)
        )
