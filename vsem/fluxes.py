import numpy as np

# ========================================================================================================================
# Function LAI_to_FAPAR
# ========================================================================================================================

def LAI_to_FAPAR(lai, k=0.5):
    """
    Calculate FAPAR from LAI using the Beer–Lambert law.

    Parameters
    ----------
    lai : float or np.ndarray
        Leaf area index (m² m⁻²)
    k : float, optional
        Light extinction coefficient (KEXT). Default 0.5 (spherical leaves).

    Returns
    -------
    fapar : float or np.ndarray
        Fraction of absorbed PAR (0–1)

    Example
    -------
    fapar = LAI_to_FAPAR(4.5, k = 0.5)
    """
    lai = np.asarray(lai, dtype=float)
    fapar = 1.0 - np.exp(-k * lai)
    return np.clip(fapar, 0.0, 1.0)


def vegetation_to_LAI(C_veg, LAR):
    """Leaf area index from vegetation carbon [kg C m⁻²] and leaf area ratio [m² kg⁻¹ C]."""
    return LAR * C_veg


# ========================================================================================================================
# Function calc_GPP_LUE
# ========================================================================================================================

def calc_GPP_LUE(PAR, fAPAR, LUE):
    """
    Calculate daily Gross Primary Productivity (GPP) using the Light Use Efficiency (LUE) approach.

    Parameters
    ----------
    PAR : float
        Incoming photosynthetically active radiation (MJ m⁻² day⁻¹).
    fAPAR : float
        Fraction of PAR absorbed by the canopy (0–1).
    LUE : float
        Light Use Efficiency (kg C MJ⁻¹).

    Returns
    -------
    float
        GPP in kilograms of carbon per square meter per day (kg C m⁻² day⁻¹).

    Notes
    -----
    - GPP = PAR × fAPAR × LUE
    - Zero PAR gives exactly zero GPP, whatever the canopy.
    """
    return PAR * fAPAR * LUE


# ========================================================================================================================
# Respiration and net exchange
# ========================================================================================================================

def calc_NPP(GPP, GAMMA):
    """Net primary production after autotrophic respiration, ``(1 - GAMMA) * GPP``."""
    return (1.0 - GAMMA) * GPP


def calc_NEE(GPP, Ra, Rh):
    """
    Net ecosystem exchange (kg C m⁻² day⁻¹).

    Positive values are a carbon source to the atmosphere:
    NEE = Ra + Rh - GPP.
    """
    return Ra + Rh - GPP
