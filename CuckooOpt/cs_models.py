# CuckooOpt/cs_models.py
"""Data models for box-constrained Cuckoo Search problems.

This module contains the core classes for defining a CS run, including:

*   ``Boundaries``: The per-dimension (lower, upper) box of the search space.
*   ``CuckooParameters``: Tuning parameters and stop criteria, all defaulted.
*   ``SearchDetails``: The details record returned when a run terminates.
*   ``OptimizationProblem``: The main class that aggregates objective and box.
"""
import numpy as np

OUTCOME_CONVERGED = "converged"
OUTCOME_BUDGET_EXHAUSTED = "budget_exhausted"

DISCOVERY_MODES = ('random', 'proportional')

# Upper-case names of the legacy parameter struct
LEGACY_PARAMETER_NAMES = {
    'NAG': 'population_size',
    'XI': 'beta',
    'BETA': 'beta',
    'DELTA': 'alpha',
    'ALPHA': 'alpha',
    'PD': 'discovery_probability',
    'EPS1': 'eps1',
    'EPS2': 'eps2',
    'MSAT': 'max_saturation',
    'MITE': 'max_iterations',
    'UNCONST': 'unconstrained',
}


class Boundaries:
    """Simple constraints ``lower <= x <= upper`` for every design variable.

    Parameters
    ----------
    bounds : array_like
        An Nd-by-2 matrix. Rows need not be sorted; the smaller entry of each
        row becomes the lower boundary.
    """
    def __init__(self, bounds):
        bnd = np.asarray(bounds, dtype=float)
        if bnd.ndim != 2 or bnd.shape[1] != 2:
            raise ValueError(f"Boundaries must be an Nd-by-2 matrix, got shape {bnd.shape}.")
        if bnd.shape[0] == 0:
            raise ValueError("Boundaries must describe at least one dimension.")
        if not np.all(np.isfinite(bnd)):
            raise ValueError("Boundaries must be finite.")

        self.lower = np.min(bnd, axis=1)
        self.upper = np.max(bnd, axis=1)
        self.Nd = bnd.shape[0]

    def as_array(self):
        return np.column_stack((self.lower, self.upper))

    def broadcast(self, Na):
        """Returns the lower and upper rows repeated to an Na-by-Nd shape."""
        ones = np.ones((Na, 1))
        return ones * self.lower, ones * self.upper

    def contains(self, nests):
        nests = np.atleast_2d(nests)
        return bool(np.all(nests >= self.lower) and np.all(nests <= self.upper))


class CuckooParameters:
    def __init__(self, population_size=25, beta=1.5, alpha=1.0,
                 discovery_probability=0.25, discovery_mode='random',
                 eps1=1e-2, eps2=1e-12, max_saturation=100,
                 max_iterations=10**12, unconstrained=False):
        self.population_size = population_size
        self.beta = beta                      # Levy exponent, do not modify casually
        self.alpha = alpha                    # step size scale factor
        self.discovery_probability = discovery_probability
        self.discovery_mode = discovery_mode
        self.eps1 = eps1                      # historical (fitness) tolerance
        self.eps2 = eps2                      # population (position) tolerance
        self.max_saturation = max_saturation
        self.max_iterations = max_iterations
        self.unconstrained = unconstrained

    def as_dict(self):
        return dict(vars(self))

    def merged(self, overrides=None):
        """Returns a new parameter set with ``overrides`` applied on top.

        Keys may be the attribute names or the legacy upper-case names
        (``NAG``, ``XI``, ``DELTA``, ``PD``, ``EPS1``, ``EPS2``, ``MSAT``,
        ``MITE``, ``UNCONST``). ``None`` values are ignored.
        """
        values = self.as_dict()
        for key, value in (overrides or {}).items():
            name = LEGACY_PARAMETER_NAMES.get(key, key)
            if name not in values:
                raise ValueError(f"Unknown Cuckoo Search parameter: '{key}'")
            if value is not None:
                values[name] = value
        return CuckooParameters(**values)

    def validate(self):
        """Raises ``ValueError`` for any out-of-domain setting."""
        if isinstance(self.population_size, bool) or not isinstance(self.population_size, (int, np.integer)) \
                or self.population_size <= 0:
            raise ValueError(f"population_size must be a positive integer, got {self.population_size!r}")
        if not 0.0 <= self.discovery_probability <= 1.0:
            raise ValueError(f"discovery_probability must lie in [0, 1], got {self.discovery_probability}")
        if not 0.0 < self.beta <= 2.0:
            raise ValueError(f"beta must lie in (0, 2], got {self.beta}")
        if self.alpha < 0:
            raise ValueError(f"alpha must be non-negative, got {self.alpha}")
        if self.eps1 < 0 or self.eps2 < 0:
            raise ValueError("eps1 and eps2 must be non-negative.")
        if self.max_saturation < 1:
            raise ValueError(f"max_saturation must be at least 1, got {self.max_saturation}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")
        if self.discovery_mode not in DISCOVERY_MODES:
            raise ValueError(f"discovery_mode must be one of {DISCOVERY_MODES}, got '{self.discovery_mode}'")
        return self


class SearchDetails:
    def __init__(self, time=0.0, fevs=0, steps=0, outcome=OUTCOME_BUDGET_EXHAUSTED):
        self.time = time
        self.fevs = fevs
        self.steps = steps
        self.outcome = outcome

    @property
    def outmsg(self):
        # 1 is convergence
        return 1 if self.outcome == OUTCOME_CONVERGED else 0

    def as_dict(self):
        return {'time': self.time, 'fevs': self.fevs, 'steps': self.steps,
                'outcome': self.outcome, 'outmsg': self.outmsg}


class OptimizationProblem:
    def __init__(self, objective, boundaries, name=None):
        if not callable(objective):
            raise TypeError(f"The objective must be callable, got {type(objective).__name__}.")
        self.objective = objective
        self.boundaries = boundaries if isinstance(boundaries, Boundaries) else Boundaries(boundaries)
        self.name = name or getattr(objective, '__name__', 'objective')
        self.Nd = self.boundaries.Nd
