import logging

from vsem.parameters import (
    VSEMParameters, load_default_params, default_parameters, default_error_scale,
    MODEL_PARAMETERS, ERROR_PARAMETER,
)
from vsem.forcing import create_par, load_forcing
from vsem.carbon_dynamics import CarbonDynamics, simulate, OUTPUT_COLUMNS, OBSERVABLE_VARIABLES
from vsem.error_model import LikelihoodSettings
from vsem.observations import make_synthetic_observations, mask_from_observations, load_observations
from vsem.likelihood import (
    log_likelihood, observation_log_likelihood, pointwise_log_likelihood, VSEMLikelihood,
)
from vsem.priors import UniformPrior
from vsem.assimilate import build_parameters, log_posterior, assimilate_map
from vsem.predictive import run_ensemble, predictive_intervals
from vsem.exceptions import VSEMError, InvalidParameterError, ShapeMismatchError, ObservationError

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
