import numpy as np
import pytest

from vsem import VSEMParameters, create_par, simulate, make_synthetic_observations


@pytest.fixture
def parameters():
    return VSEMParameters()


@pytest.fixture
def forcing():
    return create_par(365)


@pytest.fixture
def zero_forcing():
    return np.zeros(4)


@pytest.fixture
def reference_output(parameters, forcing):
    return simulate(parameters, forcing)


@pytest.fixture
def synthetic(reference_output):
    return make_synthetic_observations(reference_output, error_scale=0.1, seed=42)
