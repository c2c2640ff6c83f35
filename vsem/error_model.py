from dataclasses import dataclass

import numpy as np

from vsem.exceptions import InvalidParameterError


@dataclass(frozen=True)
class LikelihoodSettings:
    """
    Settings of the heteroscedastic observation error model.

    epsilon : float
        Added to |prediction| before scaling, so zero predictions keep a
        nonzero standard deviation.
    flux_sd_floor : float
        Lower bound on the standard deviation of flux variables
        [kg C m⁻² d⁻¹].
    flux_variables : tuple of str
        Output columns treated as fluxes.
    """
    epsilon: float = 1e-7
    flux_sd_floor: float = 1e-4
    flux_variables: tuple = ('NEE',)

    def __post_init__(self):
        if not self.epsilon >= 0:
            raise InvalidParameterError(f"epsilon must be non-negative, got {self.epsilon}")
        if not self.flux_sd_floor > 0:
            raise InvalidParameterError(f"flux_sd_floor must be positive, got {self.flux_sd_floor}")
        object.__setattr__(self, 'flux_variables', tuple(self.flux_variables))


def check_error_scale(error_scale):
    try:
        error_scale = float(error_scale)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"error_scale must be a real number, got {error_scale!r}")
    if not (np.isfinite(error_scale) and error_scale > 0):
        raise InvalidParameterError(f"error_scale must be positive and finite, got {error_scale}")
    return error_scale


def heteroscedastic_sd(predicted, error_scale, variable=None, settings=None):
    """
    Observation error standard deviation for a predicted series.

    sd = (|predicted| + epsilon) * error_scale, floored at ``flux_sd_floor``
    when ``variable`` is one of the flux variables.
    """
    if settings is None:
        settings = LikelihoodSettings()
    error_scale = check_error_scale(error_scale)
    sd = (np.abs(np.asarray(predicted, dtype=float)) + settings.epsilon) * error_scale
    if variable in settings.flux_variables:
        sd = np.maximum(sd, settings.flux_sd_floor)
    return sd
