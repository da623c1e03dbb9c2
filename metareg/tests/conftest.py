import numpy as np
import pytest

from metareg import Dataset, compute_measure, datasets, load_study_records


@pytest.fixture(scope="package")
def bcg_data():
    data, _ = datasets.bcg()
    return data


@pytest.fixture(scope="package")
def bcg_studies(bcg_data):
    return load_study_records(bcg_data, covariate="ablat")


@pytest.fixture(scope="package")
def bcg_yv(bcg_data):
    return compute_measure(
        "RR",
        t_events=bcg_data["tpos"],
        t_nonevents=bcg_data["tneg"],
        c_events=bcg_data["cpos"],
        c_nonevents=bcg_data["cneg"],
    )


@pytest.fixture(scope="package")
def bcg_dataset(bcg_data, bcg_yv):
    y, v = bcg_yv
    return Dataset(y, v, bcg_data["ablat"].values, X_names=["ablat"])


@pytest.fixture(scope="package")
def bcg_dataset_no_mods(bcg_yv):
    y, v = bcg_yv
    return Dataset(y, v)


@pytest.fixture(scope="package")
def variables():
    y = np.array([[-1, 0.5, 0.5, 0.5, 1, 1, 2, 10]]).T
    v = np.array([[1, 1, 2.4, 0.5, 1, 1, 1.2, 1.5]]).T
    X = np.array([1, 1, 2, 2, 4, 4, 2.8, 2.8])
    return (y, v, X)


@pytest.fixture(scope="package")
def vars_with_intercept(variables):
    y, v, X = variables
    return (y, v, np.column_stack([np.ones(len(X)), X]))
