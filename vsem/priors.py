import numpy as np
from scipy.stats import uniform

from vsem.exceptions import InvalidParameterError, ShapeMismatchError


class UniformPrior:
    """
    Independent uniform priors over a subset of the parameter table.

    Parameters
    ----------
    bounds : pandas.DataFrame
        Parameter table with ``lower`` and ``upper`` columns, indexed by name.
    names : list of str
        Parameters to include, in the order of the value vectors passed to
        ``logpdf`` and returned by ``sample``.

    Example
    -------
    prior = UniformPrior(load_default_params(), ['LUE', 'GAMMA', 'error_sd'])
    x = prior.sample(1, seed = 1)[0]
    prior.logpdf(x)
    """

    def __init__(self, bounds, names):
        names = list(names)
        unknown = [k for k in names if k not in bounds.index]
        if unknown:
            raise InvalidParameterError(f"No bounds for parameters {unknown}")
        self.names = names
        self.lower = bounds.loc[names, 'lower'].to_numpy(dtype=float)
        self.upper = bounds.loc[names, 'upper'].to_numpy(dtype=float)
        if not np.all(self.lower < self.upper):
            bad = [k for k, lo, hi in zip(names, self.lower, self.upper) if not lo < hi]
            raise InvalidParameterError(f"Lower bound must be below upper bound for: {bad}")
        self.dists = {
            k: uniform(loc=lo, scale=hi - lo) for k, lo, hi in zip(names, self.lower, self.upper)
        }

    @property
    def bounds(self):
        return list(zip(self.lower, self.upper))

    def logpdf(self, values):
        values = np.asarray(values, dtype=float)
        if values.shape != (len(self.names),):
            raise ShapeMismatchError(f"Expected {len(self.names)} values, got shape {values.shape}")
        return float(np.sum([self.dists[k].logpdf(x) for k, x in zip(self.names, values)]))

    def sample(self, n=1, seed=None):
        """Draw ``n`` parameter vectors, shape (n, len(names))."""
        rng = np.random.default_rng(seed)
        return np.column_stack([self.dists[k].rvs(size=n, random_state=rng) for k in self.names])
