import logging

import numpy as np
from scipy.optimize import minimize

from vsem.exceptions import InvalidParameterError, ShapeMismatchError
from vsem.parameters import VSEMParameters, MODEL_PARAMETERS, ERROR_PARAMETER

logger = logging.getLogger(__name__)


def build_parameters(values, names, reference=None, error_scale=0.1):
    """
    Overlay calibrated values on a reference parameter vector.

    Parameters
    ----------
    values : array-like
        Values of the selected parameters, same order as ``names``.
    names : list of str
        Selected model parameters, optionally including ``error_sd``.
    reference : VSEMParameters, optional
        Values for every parameter not in ``names``. Default ``VSEMParameters()``.
    error_scale : float
        Error scale used when ``error_sd`` is not among ``names``.

    Returns
    -------
    (VSEMParameters, float)
    """
    if reference is None:
        reference = VSEMParameters()
    values = np.asarray(values, dtype=float).ravel()
    if len(values) != len(names):
        raise ShapeMismatchError(f"Got {len(values)} values for {len(names)} parameter names")

    changes = {}
    for k, v in zip(names, values):
        if k == ERROR_PARAMETER:
            error_scale = float(v)
        elif k in MODEL_PARAMETERS:
            changes[k] = float(v)
        else:
            raise InvalidParameterError(f"Unknown parameter {k!r}")
    return reference.replace(**changes), error_scale


def log_posterior(values, names, prior, likelihood, reference=None, error_scale=0.1):
    """
    Unnormalised log-posterior of a selected parameter subset.

    Returns -inf outside the prior support without running the model.
    """
    lp = prior.logpdf(values)
    if not np.isfinite(lp):
        return -np.inf
    parameters, error_scale = build_parameters(values, names, reference, error_scale)
    return lp + likelihood(parameters, error_scale)


def assimilate_map(likelihood,
                   prior,
                   reference=None,
                   error_scale=0.1,
                   x0=None,
                   method='L-BFGS-B',
                   options=None):
    """
    Maximum a posteriori calibration of VSEM parameters.

    Parameters
    ----------
    likelihood : VSEMLikelihood
        Likelihood bound to forcing and observations; called as
        ``likelihood(parameters, error_scale)``.

    prior : UniformPrior
        Prior over the calibrated parameters. Its ``names`` select the
        parameters and its bounds constrain the optimiser.

    reference : VSEMParameters, optional
        Values of the parameters that are not calibrated.

    error_scale : float
        Error scale when ``error_sd`` is not calibrated.

    x0 : np.ndarray, optional
        Starting point (len = len(prior.names)). Defaults to the reference
        values of the selected parameters.

    method : str
        Bounded ``scipy.optimize.minimize`` method.

    options : dict, optional
        Passed through to ``scipy.optimize.minimize``.

    Returns
    -------
    result : OptimizeResult
        The optimization result from scipy.optimize.minimize, with
        ``result.params`` mapping name -> value and ``result.log_posterior``.
    """
    if reference is None:
        reference = VSEMParameters()
    names = prior.names
    if x0 is None:
        start = reference.to_dict() | {ERROR_PARAMETER: error_scale}
        x0 = np.array([start[k] for k in names], dtype=float)
    x0 = np.asarray(x0, dtype=float)
    if x0.shape != (len(names),):
        raise ShapeMismatchError(f"x0 must have {len(names)} entries, got shape {x0.shape}")
    if not np.isfinite(prior.logpdf(x0)):
        raise InvalidParameterError("Initial parameter vector x0 lies outside the prior bounds.")

    # -------------------------
    # Cost function J(x) = -log posterior
    # -------------------------
    def cost_function(param_vector):
        return -log_posterior(param_vector, names, prior, likelihood, reference, error_scale)

    logger.info("Starting MAP calibration of %s", names)
    res = minimize(cost_function, x0, bounds=prior.bounds, method=method, options=options)
    logger.info("MAP calibration finished: success=%s, log posterior=%.4f", res.success, -res.fun)

    res.params = {name: val for name, val in zip(names, res.x)}
    res.log_posterior = -res.fun
    return res
