import logging

import numpy as np
import pandas as pd

from vsem.carbon_dynamics import OBSERVABLE_VARIABLES
from vsem.error_model import heteroscedastic_sd
from vsem.exceptions import ObservationError, ShapeMismatchError

logger = logging.getLogger(__name__)

# Days between observations of each variable in the synthetic data set.
DEFAULT_SAMPLE_EVERY = {'NEE': 1, 'Cv': 22, 'Cs': 22, 'Cr': 22}


def mask_from_observations(observations):
    """Index set of observed days per variable, from the finite entries of each column."""
    check_columns(observations)
    return {
        k: np.flatnonzero(np.isfinite(observations[k].to_numpy(dtype=float)))
        for k in observations.columns
    }


def check_columns(observations):
    unknown = [k for k in observations.columns if k not in OBSERVABLE_VARIABLES]
    if unknown:
        raise ObservationError(f"Unknown observed variables {unknown}; expected a subset of {list(OBSERVABLE_VARIABLES)}")


def align_observations(observations, n_days):
    """
    Put an observation table on the simulated day index ``0..n_days-1``.

    Rows are matched by their day label, not by position: a table holding the
    same days in another order is reindexed, a table holding other days
    raises ``ShapeMismatchError``.
    """
    days = pd.RangeIndex(n_days, name='day')
    index = observations.index
    if index.equals(days):
        return observations
    if len(index) != n_days or not pd.api.types.is_integer_dtype(index) or index.has_duplicates:
        raise ShapeMismatchError(f"Observation index must hold each day 0..{n_days - 1} exactly once")
    if not index.sort_values().equals(pd.Index(np.arange(n_days))):
        raise ShapeMismatchError(
            f"Observation days {index.min()}..{index.max()} do not match simulated days 0..{n_days - 1}"
        )
    logger.debug("Reordering observation rows by day")
    return observations.reindex(days)


def validate_mask(observation_mask, observations):
    """
    Check an observation mask against its observation table.

    Index sets must hold integer day numbers; boolean or fractional masks are
    rejected. Returns a new mask with every index set as a sorted, unique
    integer array.
    """
    n_days = len(observations)
    mask = {}
    for k, idx in observation_mask.items():
        if k not in observations.columns:
            raise ObservationError(f"Mask refers to variable {k!r} which is not in the observation table")
        idx = np.asarray(idx)
        if idx.size == 0:
            idx = idx.astype(int)
        elif idx.dtype == bool or not np.issubdtype(idx.dtype, np.integer):
            raise ShapeMismatchError(f"Mask for {k} must be integer day indices, got dtype {idx.dtype}")
        idx = np.unique(idx.ravel())
        if idx.size and (idx[0] < 0 or idx[-1] >= n_days):
            raise ShapeMismatchError(f"Mask indices for {k} fall outside 0..{n_days - 1}")
        values = observations[k].to_numpy(dtype=float)[idx]
        if not np.all(np.isfinite(values)):
            bad = idx[~np.isfinite(values)]
            raise ObservationError(f"No finite observation of {k} on masked days {bad[:5].tolist()}")
        mask[k] = idx
    return mask


def make_synthetic_observations(reference_output, error_scale, sample_every=None, seed=None, settings=None):
    """
    Create noisy, subsampled observations from a reference simulation.

    Each observable variable is perturbed with the heteroscedastic Gaussian
    error of the likelihood and then kept only every ``sample_every[var]``
    days. Unobserved days are NaN in the table and absent from the mask.

    Parameters
    ----------
    reference_output : pandas.DataFrame
        Output of ``simulate`` with the "true" parameters.
    error_scale : float
        Multiplicative error scale.
    sample_every : dict, optional
        Days between observations per variable. Variables not listed are not
        observed. Default ``DEFAULT_SAMPLE_EVERY``.
    seed : int, optional
        Seed for the noise generator.
    settings : LikelihoodSettings, optional

    Returns
    -------
    observations : pandas.DataFrame
    observation_mask : dict of str -> np.ndarray
    """
    if sample_every is None:
        sample_every = DEFAULT_SAMPLE_EVERY
    rng = np.random.default_rng(seed)
    n_days = len(reference_output)

    observations = pd.DataFrame(index=reference_output.index)
    observation_mask = {}
    for k, step in sample_every.items():
        if k not in OBSERVABLE_VARIABLES:
            raise ObservationError(f"Cannot observe {k!r}; expected one of {list(OBSERVABLE_VARIABLES)}")
        if int(step) < 1:
            raise ObservationError(f"Sampling interval for {k} must be at least one day, got {step}")
        predicted = reference_output[k].to_numpy(dtype=float)
        sd = heteroscedastic_sd(predicted, error_scale, variable=k, settings=settings)
        noisy = predicted + rng.normal(0.0, 1.0, size=n_days) * sd

        idx = np.arange(0, n_days, int(step))
        column = np.full(n_days, np.nan)
        column[idx] = noisy[idx]
        observations[k] = column
        observation_mask[k] = idx

    logger.debug("Synthetic observations: %s", {k: len(v) for k, v in observation_mask.items()})
    return observations, observation_mask


def load_observations(path, index_col='day'):
    """Read an observation table from CSV; empty cells become unobserved days."""
    observations = pd.read_csv(path, index_col=index_col)
    check_columns(observations)
    return observations
