import logging
from dataclasses import dataclass, fields, asdict, replace as dc_replace
from pathlib import Path

import numpy as np
import pandas as pd

from vsem.exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

# Process parameters first, initial pools last; same order as the parameter table.
PROCESS_PARAMETERS = ('KEXT', 'LAR', 'LUE', 'GAMMA', 'tauV', 'tauS', 'tauR', 'Av')
POOL_PARAMETERS = ('Cv', 'Cs', 'Cr')
MODEL_PARAMETERS = PROCESS_PARAMETERS + POOL_PARAMETERS
ERROR_PARAMETER = 'error_sd'


# ========================================================================================================================
# Parameter vector
# ========================================================================================================================

@dataclass(frozen=True)
class VSEMParameters:
    """
    Parameter vector of the Very Simple Ecosystem Model (VSEM).

    --------------------------------------------------------------------------
    Process parameters
    --------------------------------------------------------------------------
    KEXT  : Light extinction coefficient [-]
    LAR   : Leaf area ratio, leaf area per unit vegetation carbon [m² kg⁻¹ C]
    LUE   : Light use efficiency [kg C MJ⁻¹ PAR]
    GAMMA : Fraction of GPP lost as autotrophic respiration [-]
    tauV  : Vegetation (aboveground) carbon residence time [days]
    tauS  : Soil carbon residence time [days]
    tauR  : Root carbon residence time [days]
    Av    : Fraction of NPP allocated aboveground [-]

    --------------------------------------------------------------------------
    Initial pools
    --------------------------------------------------------------------------
    Cv : Vegetation carbon [kg C m⁻²]
    Cs : Soil organic carbon [kg C m⁻²]
    Cr : Root carbon [kg C m⁻²]

    Instances are immutable and validated on construction, so an instance that
    exists is always safe to integrate.
    """
    KEXT: float = 0.5
    LAR: float = 1.5
    LUE: float = 0.002
    GAMMA: float = 0.4
    tauV: float = 1440.0
    tauS: float = 27370.0
    tauR: float = 1440.0
    Av: float = 0.5
    Cv: float = 3.0
    Cs: float = 15.0
    Cr: float = 3.0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise InvalidParameterError(f"Parameter {f.name} must be a real number, got {value!r}")
            if not np.isfinite(value):
                raise InvalidParameterError(f"Parameter {f.name} must be finite, got {value}")
            object.__setattr__(self, f.name, value)

        for name in ('tauV', 'tauS', 'tauR'):
            if getattr(self, name) <= 0:
                raise InvalidParameterError(f"Turnover time {name} must be positive, got {getattr(self, name)}")
        for name in ('GAMMA', 'Av'):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise InvalidParameterError(f"Fraction {name} must lie in [0, 1], got {getattr(self, name)}")
        for name in ('KEXT', 'LAR', 'LUE') + POOL_PARAMETERS:
            if getattr(self, name) < 0:
                raise InvalidParameterError(f"Parameter {name} must be non-negative, got {getattr(self, name)}")

    @classmethod
    def from_dict(cls, values):
        unknown = set(values) - set(MODEL_PARAMETERS)
        if unknown:
            raise InvalidParameterError(f"Unknown VSEM parameters: {sorted(unknown)}")
        return cls(**values)

    @classmethod
    def from_series(cls, series):
        """Build from a pandas Series indexed by parameter name; extra entries such as ``error_sd`` are ignored."""
        return cls.from_dict({k: series[k] for k in MODEL_PARAMETERS if k in series.index})

    def to_dict(self):
        return asdict(self)

    def to_series(self):
        return pd.Series(self.to_dict(), name='value')

    def replace(self, **changes):
        unknown = set(changes) - set(MODEL_PARAMETERS)
        if unknown:
            raise InvalidParameterError(f"Unknown VSEM parameters: {sorted(unknown)}")
        return dc_replace(self, **changes)

    @property
    def initial_pools(self):
        return {'Cv': self.Cv, 'Cs': self.Cs, 'Cr': self.Cr}


# ========================================================================================================================
# Helpers: Load parameter table
# ========================================================================================================================

def load_default_params(path=None):
    """
    Load the parameter table with best guesses and prior bounds.

    Parameters
    ----------
    path : str or Path, optional
        CSV with columns ``name, best, lower, upper``. Defaults to the table
        shipped in ``vsem/model_parameters``.

    Returns
    -------
    pandas.DataFrame
        Indexed by parameter name, columns ``best``, ``lower``, ``upper``.
    """
    if path is None:
        path = Path(__file__).parent / "model_parameters/vsem_params.csv"
    params = pd.read_csv(path, index_col=0)

    missing = {'best', 'lower', 'upper'} - set(params.columns)
    if missing:
        raise InvalidParameterError(f"Parameter table {path} is missing columns: {sorted(missing)}")
    params = params[['best', 'lower', 'upper']].astype(float)
    check_bounds(params)
    logger.debug("Loaded %d parameters from %s", len(params), path)
    return params


def check_bounds(params):
    """Raise if any row has lower >= upper or a best guess outside its bounds."""
    bad = params.index[~(params['lower'] < params['upper'])]
    if len(bad):
        raise InvalidParameterError(f"Lower bound must be below upper bound for: {list(bad)}")
    outside = params.index[(params['best'] < params['lower']) | (params['best'] > params['upper'])]
    if len(outside):
        raise InvalidParameterError(f"Best guess outside bounds for: {list(outside)}")


def default_parameters(params=None):
    if params is None:
        params = load_default_params()
    return VSEMParameters.from_series(params['best'])


def default_error_scale(params=None):
    if params is None:
        params = load_default_params()
    return float(params.loc[ERROR_PARAMETER, 'best'])
