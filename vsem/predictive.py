import logging

import numpy as np
import xarray as xr
from tqdm import tqdm

from vsem.assimilate import build_parameters
from vsem.carbon_dynamics import OUTPUT_COLUMNS, OBSERVABLE_VARIABLES, simulate
from vsem.error_model import heteroscedastic_sd
from vsem.forcing import validate_forcing
from vsem.parameters import VSEMParameters

logger = logging.getLogger(__name__)


def run_ensemble(samples, names, forcing, reference=None, progress=False):
    """
    Simulate VSEM for each row of a parameter sample matrix.

    Parameters
    ----------
    samples : array-like, shape (n_samples, len(names))
        Parameter draws, e.g. from ``UniformPrior.sample`` or an MCMC chain.
    names : list of str
        Parameter names of the sample columns; ``error_sd`` is carried along
        in the output but does not affect the simulation.
    forcing : array-like
        Daily PAR.
    reference : VSEMParameters, optional
        Values for parameters not in ``names``.
    progress : bool
        Show a tqdm progress bar.

    Returns
    -------
    xarray.Dataset
        One variable per output column with dims (sample, day); the draws are
        stored as variables with dim (sample,).
    """
    if reference is None:
        reference = VSEMParameters()
    forcing = validate_forcing(forcing)
    samples = np.atleast_2d(np.asarray(samples, dtype=float))
    n_samples, n_days = samples.shape[0], len(forcing)

    out = {k: np.empty((n_samples, n_days)) for k in OUTPUT_COLUMNS}
    for i in tqdm(range(n_samples), disable=not progress, desc='VSEM ensemble'):
        parameters, _ = build_parameters(samples[i], names, reference)
        sim = simulate(parameters, forcing)
        for k in OUTPUT_COLUMNS:
            out[k][i] = sim[k].to_numpy()

    ds = xr.Dataset(
        {k: (('sample', 'day'), v) for k, v in out.items()},
        coords={'sample': np.arange(n_samples), 'day': np.arange(n_days)},
    )
    for j, k in enumerate(names):
        ds[f'param_{k}'] = ('sample', samples[:, j])
    logger.debug("Ensemble of %d runs over %d days", n_samples, n_days)
    return ds


def predictive_intervals(ensemble, quantiles=(0.025, 0.5, 0.975), error_scale=None, seed=None, settings=None):
    """
    Quantiles of an ensemble over samples.

    Without ``error_scale`` this is the credible interval of the model
    output. With ``error_scale`` each member first receives heteroscedastic
    observation noise, giving a prediction interval for new observations.
    ``error_scale`` may be a float or the name of a sampled parameter
    variable (e.g. ``'param_error_sd'``).
    """
    ds = ensemble[list(OBSERVABLE_VARIABLES)]
    if error_scale is not None:
        rng = np.random.default_rng(seed)
        if isinstance(error_scale, str):
            scales = ensemble[error_scale].to_numpy()
        else:
            scales = np.full(ensemble.sizes['sample'], float(error_scale))
        noisy = {}
        for k in OBSERVABLE_VARIABLES:
            values = ds[k].to_numpy()
            sd = np.stack([
                heteroscedastic_sd(values[i], scales[i], variable=k, settings=settings)
                for i in range(values.shape[0])
            ])
            noisy[k] = (('sample', 'day'), values + rng.normal(size=values.shape) * sd)
        ds = xr.Dataset(noisy, coords=ds.coords)
    return ds.quantile(list(quantiles), dim='sample')
