"""Tests for the metareg.datasets module."""
import pandas as pd

from metareg import datasets


def test_bcg():
    """Ensure that the BCG dataset is loadable."""
    data, meta = datasets.bcg()
    assert isinstance(data, pd.DataFrame)
    assert data.shape == (13, 9)
    assert isinstance(meta, dict)
    assert set(meta) == set(data.columns)
    assert data.loc[0, ["tpos", "tneg", "cpos", "cneg", "ablat"]].tolist() == [4, 119, 11, 128, 44]
