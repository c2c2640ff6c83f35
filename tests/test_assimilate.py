import numpy as np
import pandas as pd
import pytest

from vsem import (
    VSEMParameters, VSEMLikelihood, UniformPrior, load_default_params,
    build_parameters, log_posterior, assimilate_map,
    InvalidParameterError, ShapeMismatchError,
)


@pytest.fixture
def prior():
    return UniformPrior(load_default_params(), ['LUE', 'GAMMA', 'error_sd'])


def test_prior_density(prior):
    bounds = load_default_params().loc[prior.names]
    x = bounds['best'].values
    assert np.isclose(prior.logpdf(x), -np.sum(np.log(bounds['upper'] - bounds['lower'])))
    assert prior.logpdf(x * [10, 1, 1]) == -np.inf


def test_prior_samples_within_bounds(prior):
    samples = prior.sample(500, seed=0)
    assert samples.shape == (500, 3)
    lower, upper = np.array(prior.bounds).T
    assert np.all((samples >= lower) & (samples <= upper))
    np.testing.assert_array_equal(samples, prior.sample(500, seed=0))


def test_prior_validation():
    params = load_default_params()
    with pytest.raises(InvalidParameterError):
        UniformPrior(params, ['LUE', 'foo'])
    bad = params.copy()
    bad.loc['LUE', 'upper'] = 0.0
    with pytest.raises(InvalidParameterError):
        UniformPrior(bad, ['LUE'])


def test_prior_shape(prior):
    with pytest.raises(ShapeMismatchError):
        prior.logpdf([0.002, 0.4])


def test_build_parameters():
    params, error_scale = build_parameters([0.003, 0.25], ['LUE', 'error_sd'], error_scale=0.1)
    assert params == VSEMParameters(LUE=0.003)
    assert error_scale == 0.25

    params, error_scale = build_parameters([0.3], ['GAMMA'], reference=VSEMParameters(Cs=10.0), error_scale=0.1)
    assert params == VSEMParameters(GAMMA=0.3, Cs=10.0)
    assert error_scale == 0.1


def test_build_parameters_errors():
    with pytest.raises(InvalidParameterError):
        build_parameters([1.0], ['foo'])
    with pytest.raises(ShapeMismatchError):
        build_parameters([1.0, 2.0], ['LUE'])


def test_log_posterior(forcing, synthetic, prior):
    observations, mask = synthetic
    likelihood = VSEMLikelihood(forcing, observations, mask)
    x = np.array([0.002, 0.4, 0.1])
    expected = prior.logpdf(x) + likelihood(VSEMParameters(), 0.1)
    assert np.isclose(log_posterior(x, prior.names, prior, likelihood), expected)


def test_log_posterior_outside_prior(forcing, synthetic, prior):
    observations, mask = synthetic
    likelihood = VSEMLikelihood(forcing, observations, mask)
    # GAMMA = 2 would be an invalid parameter; the prior rejects it first
    assert log_posterior([0.002, 2.0, 0.1], prior.names, prior, likelihood) == -np.inf


def test_map_moves_towards_truth(reference_output, forcing):
    observations = reference_output[['NEE', 'Cv']].copy()
    likelihood = VSEMLikelihood(forcing, observations)
    prior = UniformPrior(load_default_params(), ['LUE'])

    x0 = np.array([0.003])
    res = assimilate_map(likelihood, prior, x0=x0)

    assert set(res.params) == {'LUE'}
    assert abs(res.params['LUE'] - 0.002) < abs(x0[0] - 0.002)
    assert res.log_posterior >= log_posterior(x0, prior.names, prior, likelihood)


def test_map_starts_from_reference(reference_output, forcing):
    observations = reference_output[['Cv']].copy()
    likelihood = VSEMLikelihood(forcing, observations)
    prior = UniformPrior(load_default_params(), ['GAMMA', 'error_sd'])
    res = assimilate_map(likelihood, prior, reference=VSEMParameters(), error_scale=0.1)
    start = log_posterior([0.4, 0.1], prior.names, prior, likelihood)

    lower, upper = np.array(prior.bounds).T
    assert np.all((res.x >= lower) & (res.x <= upper))
    assert res.log_posterior >= start


def test_map_rejects_start_outside_prior(reference_output, forcing):
    likelihood = VSEMLikelihood(forcing, reference_output[['Cv']].copy())
    prior = UniformPrior(load_default_params(), ['LUE'])
    with pytest.raises(InvalidParameterError):
        assimilate_map(likelihood, prior, x0=[1.0])
    with pytest.raises(ShapeMismatchError):
        assimilate_map(likelihood, prior, x0=[0.002, 0.4])
