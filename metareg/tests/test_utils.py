"""Tests for metareg.utils."""
import os.path as op

import numpy as np
import pytest

from metareg import utils


def test_get_resource_path():
    """Test metareg.utils.get_resource_path."""
    assert op.isdir(utils.get_resource_path())
    assert op.isfile(op.join(utils.get_resource_path(), "datasets", "bcg.tsv"))


def test_check_inputs_shape():
    """Test metareg.utils._check_inputs_shape."""
    y = np.ones((5, 1))
    v = np.ones((6, 1))
    X = np.ones((5, 3))

    utils._check_inputs_shape(y, X, "y", "X", row=True)
    utils._check_inputs_shape(y, y, "y", "v", row=True, column=True)
    utils._check_inputs_shape(X, np.ones((1, 3)), "X", "X_names", column=True)

    with pytest.raises(ValueError):
        utils._check_inputs_shape(y, v, "y", "v", row=True, column=True)

    # Raise error if neither row or column is True
    with pytest.raises(ValueError):
        utils._check_inputs_shape(y, X, "y", "X")

    # v may be None
    utils._check_inputs_shape(y, None, "y", "v", row=True, column=True)


def test_first_invalid():
    assert utils._first_invalid(np.array([False, True, True])) == 1
    assert utils._first_invalid(np.array([False, False])) is None


def test_listify():
    assert utils._listify("a") == ["a"]
    assert utils._listify(["a"]) == ["a"]
    assert utils._listify(None) is None
