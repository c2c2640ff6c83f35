import logging

import numpy as np
import pandas as pd

from vsem.exceptions import ShapeMismatchError, InvalidParameterError

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.0
PAR_MEAN = 7.0        # MJ m⁻² day⁻¹
PAR_AMPLITUDE = 5.0   # MJ m⁻² day⁻¹


def create_par(days=3 * 365, seed=None, noise_sd=0.0):
    """
    Generate a synthetic daily PAR forcing series.

    PAR(d) = | PAR_MEAN - PAR_AMPLITUDE * cos(2π d / 365) + ε |,  ε ~ N(0, noise_sd)

    The seasonal cycle starts at its winter minimum on day 0 and peaks mid-year.

    Parameters
    ----------
    days : int or array-like
        Number of days, or the explicit day numbers to evaluate.
    seed : int, optional
        Seed for the noise generator; only used when ``noise_sd > 0``.
    noise_sd : float, optional
        Standard deviation of the daily noise (MJ m⁻² day⁻¹). Default 0, a purely
        deterministic series.

    Returns
    -------
    np.ndarray
        Daily PAR (MJ m⁻² day⁻¹), non-negative.

    Example
    -------
    PAR = create_par(2 * 365, seed = 123, noise_sd = 1.0)
    """
    if np.isscalar(days):
        days = np.arange(int(days), dtype=float)
    else:
        days = np.asarray(days, dtype=float)
    if noise_sd < 0:
        raise InvalidParameterError(f"noise_sd must be non-negative, got {noise_sd}")

    par = PAR_MEAN - PAR_AMPLITUDE * np.cos(2.0 * np.pi * days / DAYS_PER_YEAR)
    if noise_sd > 0:
        rng = np.random.default_rng(seed)
        par = par + rng.normal(0.0, noise_sd, size=days.shape)
    return np.abs(par)


def validate_forcing(forcing):
    """Return the forcing as a float array, raising on the wrong shape or on invalid values."""
    forcing = np.asarray(forcing, dtype=float)
    if forcing.ndim != 1:
        raise ShapeMismatchError(f"Forcing must be one-dimensional, got shape {forcing.shape}")
    if not np.all(np.isfinite(forcing)):
        raise InvalidParameterError("Forcing contains non-finite values")
    if np.any(forcing < 0):
        raise InvalidParameterError("Forcing (PAR) must be non-negative")
    return forcing


def load_forcing(path, column='PAR'):
    """Read a daily forcing column from a CSV file."""
    df = pd.read_csv(path)
    if column not in df.columns:
        raise ShapeMismatchError(f"Column {column!r} not found in {path}; available: {list(df.columns)}")
    logger.debug("Loaded %d days of %s from %s", len(df), column, path)
    return validate_forcing(df[column].values)
