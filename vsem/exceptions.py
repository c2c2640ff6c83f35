"""
Exception hierarchy for vsem.

All errors raised on purpose by the package derive from ``VSEMError``. The
concrete classes also derive from ``ValueError`` so callers that only know
about the builtin still catch them.
"""


class VSEMError(Exception):
    """Base exception for all vsem errors."""
    pass


class InvalidParameterError(VSEMError, ValueError):
    """
    Out-of-domain parameter value.

    Raised when:
    - A turnover time is zero or negative
    - A fraction (GAMMA, Av) lies outside [0, 1]
    - A rate, initial pool or error scale is negative or not finite
    - A parameter name is unknown
    - Lower and upper bounds are inconsistent
    """
    pass


class ShapeMismatchError(VSEMError, ValueError):
    """
    Inputs that cannot be aligned by day index.

    Raised when:
    - The forcing series is not one-dimensional
    - Forcing and observation lengths disagree
    - Observation mask indices fall outside the simulated horizon
    """
    pass


class ObservationError(VSEMError, ValueError):
    """
    Malformed observation table.

    Raised when:
    - An observed column is not a model output variable
    - A day listed in the observation mask has no finite observed value
    """
    pass
