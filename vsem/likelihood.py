"""
Heteroscedastic Gaussian likelihood of VSEM output given observations.

Every observed value is treated as an independent draw from

    obs ~ N(pred, sd),   sd = (|pred| + epsilon) * error_scale

with ``sd`` floored for flux variables (NEE) so a near-zero flux prediction
does not collapse the density. Only days listed in the observation mask
contribute; the total log-likelihood is the sum over variables and days.
"""
import logging

import numpy as np
from scipy.stats import norm

from vsem.carbon_dynamics import simulate
from vsem.error_model import LikelihoodSettings, heteroscedastic_sd, check_error_scale
from vsem.exceptions import ShapeMismatchError
from vsem.forcing import validate_forcing
from vsem.observations import align_observations, check_columns, mask_from_observations, validate_mask

logger = logging.getLogger(__name__)


def pointwise_log_likelihood(predicted, observations, observation_mask=None, error_scale=0.1, settings=None):
    """
    Per-day log-densities for each observed variable.

    Parameters
    ----------
    predicted : pandas.DataFrame
        Model output table, as returned by ``simulate``.
    observations : pandas.DataFrame
        Observation table indexed by day number, covering the same days as
        ``predicted`` in any row order.
    observation_mask : dict of str -> array-like, optional
        Observed day indices per variable. Derived from the finite entries of
        ``observations`` when omitted.
    error_scale : float
        Multiplicative error scale (> 0).
    settings : LikelihoodSettings, optional

    Returns
    -------
    dict of str -> np.ndarray
        Log-density of every masked day, per variable.
    """
    if settings is None:
        settings = LikelihoodSettings()
    error_scale = check_error_scale(error_scale)
    if len(predicted) != len(observations):
        raise ShapeMismatchError(
            f"Predicted ({len(predicted)} days) and observed ({len(observations)} days) tables differ in length"
        )
    check_columns(observations)
    observations = align_observations(observations, len(predicted))
    if observation_mask is None:
        observation_mask = mask_from_observations(observations)
    mask = validate_mask(observation_mask, observations)

    densities = {}
    for k, idx in mask.items():
        pred = predicted[k].to_numpy(dtype=float)[idx]
        obs = observations[k].to_numpy(dtype=float)[idx]
        sd = heteroscedastic_sd(pred, error_scale, variable=k, settings=settings)
        densities[k] = norm.logpdf(obs, loc=pred, scale=sd)
    return densities


def observation_log_likelihood(predicted, observations, observation_mask=None, error_scale=0.1, settings=None):
    """Total log-likelihood of an output table; see ``pointwise_log_likelihood``."""
    densities = pointwise_log_likelihood(predicted, observations, observation_mask, error_scale, settings)
    return float(sum(np.sum(v) for v in densities.values()))


def log_likelihood(parameters, observations, observation_mask=None, *, forcing, error_scale, settings=None):
    """
    Simulate VSEM and evaluate the log-likelihood of the observations.

    Raises ``ShapeMismatchError`` if forcing and observations cover a
    different number of days.
    """
    forcing = validate_forcing(forcing)
    if len(forcing) != len(observations):
        raise ShapeMismatchError(
            f"Forcing ({len(forcing)} days) and observations ({len(observations)} days) differ in length"
        )
    predicted = simulate(parameters, forcing)
    return observation_log_likelihood(predicted, observations, observation_mask, error_scale, settings)


class VSEMLikelihood:
    """
    Likelihood bound to one data set.

    Validates forcing, observations and mask once so that repeated calls from
    a sampler or optimiser only pay for the simulation.

    Example
    -------
    likelihood = VSEMLikelihood(PAR, observations, observation_mask)
    ll = likelihood(VSEMParameters(), error_scale = 0.1)
    """

    def __init__(self, forcing, observations, observation_mask=None, settings=None):
        self.forcing = validate_forcing(forcing)
        if len(self.forcing) != len(observations):
            raise ShapeMismatchError(
                f"Forcing ({len(self.forcing)} days) and observations ({len(observations)} days) differ in length"
            )
        check_columns(observations)
        observations = align_observations(observations, len(self.forcing))
        if observation_mask is None:
            observation_mask = mask_from_observations(observations)
        self.observations = observations
        self.observation_mask = validate_mask(observation_mask, observations)
        self.settings = settings if settings is not None else LikelihoodSettings()
        logger.debug(
            "Likelihood over %d days with %d observations",
            len(self.forcing), sum(len(v) for v in self.observation_mask.values()),
        )

    def predict(self, parameters):
        return simulate(parameters, self.forcing)

    def __call__(self, parameters, error_scale):
        predicted = self.predict(parameters)
        return observation_log_likelihood(
            predicted, self.observations, self.observation_mask, error_scale, self.settings
        )
