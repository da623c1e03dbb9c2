"""Datasets from metadat."""

import json
import os.path as op

import pandas as pd

from ..utils import get_resource_path


def bcg():
    """Load the BCG vaccine trials dataset.

    Thirteen trials of the BCG vaccine against tuberculosis, compiled by
    Colditz et al. (1994) and curated in the metadat package as ``dat.bcg``.
    It is the standard example for meta-regression of risk ratios on absolute
    latitude.

    Returns
    -------
    df : :obj:`~pandas.DataFrame`
        A dataframe with the following columns:

        - ``"trial"``: trial number
        - ``"author"``: author(s)
        - ``"year"``: publication year
        - ``"tpos"``: TB positive cases in the vaccinated group
        - ``"tneg"``: TB negative cases in the vaccinated group
        - ``"cpos"``: TB positive cases in the control group
        - ``"cneg"``: TB negative cases in the control group
        - ``"ablat"``: absolute latitude of the study location (in degrees)
        - ``"alloc"``: method of treatment allocation

    metadata : :obj:`dict`
        A dictionary with descriptions of the columns in the dataset.

    Notes
    -----
    For more information about this dataset, see metadat's documentation:
    https://wviechtb.github.io/metadat/reference/dat.bcg.html
    """
    dataset_dir = op.join(get_resource_path(), "datasets")
    tsv_file = op.join(dataset_dir, "bcg.tsv")
    json_file = op.join(dataset_dir, "bcg.json")
    df = pd.read_table(tsv_file)
    with open(json_file, "r") as fo:
        metadata = json.load(fo)

    return df, metadata
