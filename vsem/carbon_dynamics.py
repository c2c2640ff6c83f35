import logging

import numpy as np
import pandas as pd

from vsem.fluxes import LAI_to_FAPAR, vegetation_to_LAI, calc_GPP_LUE, calc_NPP, calc_NEE
from vsem.forcing import validate_forcing
from vsem.parameters import VSEMParameters

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = ['NEE', 'Cv', 'Cs', 'Cr', 'GPP', 'NPP']
OBSERVABLE_VARIABLES = ('NEE', 'Cv', 'Cs', 'Cr')


class CarbonDynamics:
    """
    CarbonDynamics: Daily carbon balance of the Very Simple Ecosystem Model (VSEM).

    Three carbon pools are advanced with an explicit daily step: aboveground
    vegetation, roots and soil organic matter. Light interception follows
    Beer's law on a leaf area proportional to vegetation carbon, GPP follows a
    light-use-efficiency model, and every pool loses carbon with first-order
    turnover.

    References
    ----------
    - Hartig et al. (2019). BayesianTools: General-purpose MCMC and SMC samplers
      and tools for Bayesian statistics. R package, VSEM test model.

    --------------------------------------------------------------------------
    Model Pools (state variables)
    --------------------------------------------------------------------------
    Cv : Aboveground vegetation carbon [kg C m⁻²]
    Cr : Root carbon [kg C m⁻²]
    Cs : Soil organic carbon [kg C m⁻²]

    --------------------------------------------------------------------------
    Pool updates (dt = 1 day, all fluxes from start-of-day pools)
    --------------------------------------------------------------------------
    dCv = Av * NPP - Cv / tauV
    dCr = (1 - Av) * NPP - Cr / tauR
    dCs = Cv / tauV + Cr / tauR - Cs / tauS

    --------------------------------------------------------------------------
    Negative pools
    --------------------------------------------------------------------------
    A forward step can overshoot below zero when a turnover time is shorter
    than the step. With ``clamp=True`` (default) such pools are set to zero and
    counted in ``n_clamped``.

    --------------------------------------------------------------------------
    Example
    --------------------------------------------------------------------------
    carbon_dynamics = CarbonDynamics(VSEMParameters())
    out = carbon_dynamics.update(PAR = 10.0)
    print(out)
    """

    def __init__(self, parameters, clamp=True):
        if not isinstance(parameters, VSEMParameters):
            parameters = VSEMParameters.from_dict(dict(parameters))
        self.parameters = parameters
        self.clamp = clamp
        self.n_clamped = 0
        self.C = dict(parameters.initial_pools)

    # ----------------------------------------------------------------------
    def update(self, PAR):
        """
        Perform one daily update of carbon pools and fluxes.

        Parameters
        ----------
        PAR : float
            Photosynthetically active radiation [MJ m⁻² d⁻¹]

        Returns
        -------
        results : dict
            'NEE', 'GPP', 'NPP' : fluxes of the day [kg C m⁻² d⁻¹]
            'Cv', 'Cs', 'Cr' : end-of-day pools [kg C m⁻²]
        """
        p = self.parameters

        # 1. Light interception and production
        fAPAR = LAI_to_FAPAR(vegetation_to_LAI(self.C['Cv'], p.LAR), k=p.KEXT)
        GPP = float(calc_GPP_LUE(PAR, fAPAR, p.LUE))
        NPP = calc_NPP(GPP, p.GAMMA)
        Ra = GPP - NPP

        # 2. Turnover fluxes
        T_veg = self.C['Cv'] / p.tauV
        T_root = self.C['Cr'] / p.tauR
        T_soil = self.C['Cs'] / p.tauS

        NEE = calc_NEE(GPP, Ra, T_soil)

        # 3. Apply updates
        self.C['Cv'] += p.Av * NPP - T_veg
        self.C['Cr'] += (1.0 - p.Av) * NPP - T_root
        self.C['Cs'] += T_veg + T_root - T_soil

        if self.clamp:
            for k in self.C:
                if self.C[k] < 0.0:
                    self.C[k] = 0.0
                    self.n_clamped += 1

        return {
            'NEE': NEE,
            'Cv': self.C['Cv'],
            'Cs': self.C['Cs'],
            'Cr': self.C['Cr'],
            'GPP': GPP,
            'NPP': NPP,
        }

    def run(self, forcing):
        forcing = validate_forcing(forcing)
        out = np.empty((len(forcing), len(OUTPUT_COLUMNS)))
        for i, PAR in enumerate(forcing):
            day = self.update(PAR)
            out[i] = [day[k] for k in OUTPUT_COLUMNS]
        return pd.DataFrame(out, columns=OUTPUT_COLUMNS, index=pd.RangeIndex(len(forcing), name='day'))


def simulate(parameters, forcing, clamp=True):
    """
    Run VSEM over a daily forcing series.

    Parameters
    ----------
    parameters : VSEMParameters or mapping
        Process parameters and initial pools.
    forcing : array-like
        Daily PAR (MJ m⁻² d⁻¹), one value per simulated day.
    clamp : bool, optional
        Clamp negative pools to zero after each step. Default True.

    Returns
    -------
    pandas.DataFrame
        One row per day (index ``day``), columns NEE, Cv, Cs, Cr, GPP, NPP.
    """
    model = CarbonDynamics(parameters, clamp=clamp)
    output = model.run(forcing)
    if model.n_clamped:
        logger.warning("Clamped %d negative pool values to zero over %d days", model.n_clamped, len(output))
    logger.debug("Simulated %d days", len(output))
    return output
