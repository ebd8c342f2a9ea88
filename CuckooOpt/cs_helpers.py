# CuckooOpt/cs_helpers.py
"""
Cuckoo Search (CS) helpers for the CuckooOpt package.

This module provides the `CuckooSearch` class, which implements Cuckoo Search
via Levy flights [1] on top of `BaseOptimizer`, together with the stateless
operators it is built from. Every stochastic operator receives its
``numpy.random.Generator`` explicitly so that a run is reproducible from a seed.

References
----------
[1] Yang, X.-S., & Deb, S. (2009). Cuckoo Search via Levy flights. In 2009
    World Congress on Nature & Biologically Inspired Computing (NaBIC),
    pp. 210-214. IEEE. doi:10.1109/NABIC.2009.5393690
"""
import math

import numpy as np

from .base_optimizer import BaseOptimizer
from .benchmarks import resolve_objective
from .cs_models import CuckooParameters, OptimizationProblem


def mantegna_sigma(beta):
    """Standard deviation of the numerator in Mantegna's algorithm."""
    num = math.gamma(1 + beta) * math.sin(math.pi * beta / 2)
    den = math.gamma((1 + beta) / 2) * beta * 2 ** ((beta - 1) / 2)
    return (num / den) ** (1 / beta)


def levy_flight(nests, alpha, beta, best_nest, rng):
    """Gets new cuckoos by a Levy flight biased towards the best nest.

    Step lengths follow Mantegna's algorithm: ``L = U / |V|**(1/beta)`` with
    ``U ~ N(0, sigma**2)`` and ``V ~ N(0, 1)``. The candidate update is
    ``nests + alpha * L * (nests - best_nest)``.

    Parameters
    ----------
    nests : numpy.ndarray
        Population matrix of shape (Na, Nd).
    alpha : float
        Step size scale factor.
    beta : float
        Levy exponent.
    best_nest : numpy.ndarray
        Best nest of the population, broadcast across the rows.
    rng : numpy.random.Generator
        Random source. ``U`` is drawn before ``V``.

    Returns
    -------
    numpy.ndarray
        New candidate matrix with the same shape as ``nests``.

    """
    sigma = mantegna_sigma(beta)
    u = rng.normal(0.0, sigma, size=nests.shape)
    v = rng.normal(0.0, 1.0, size=nests.shape)
    step = u / np.abs(v) ** (1 / beta)
    return nests + alpha * step * (nests - best_nest)


def update_positions(nests, fitness, new_nests, new_fitness):
    """Keeps, row by row, whichever of the old and new nests is better.

    A new nest replaces the old one only if its fitness is strictly lower, so
    ties keep the old nest and the merged fitness is elementwise <= ``fitness``.
    Inputs are left untouched.
    """
    improved = new_fitness < fitness
    merged_nests = np.where(improved[:, np.newaxis], new_nests, nests)
    merged_fitness = np.where(improved, new_fitness, fitness)
    return merged_nests, merged_fitness


def randomly_discovering_eggs(nests, discovery_probability, rng):
    """A fraction of the eggs is discovered and those nests are rebuilt.

    Each entry is abandoned with probability ``discovery_probability``;
    abandoned entries take a random step along the difference of two randomly
    permuted copies of the population.
    """
    Na, Nd = nests.shape
    discovered = rng.random((Na, Nd)) < discovery_probability
    perm_1 = rng.permutation(Na)
    perm_2 = rng.permutation(Na)
    step = rng.random((Na, Nd)) * (nests[perm_1] - nests[perm_2])
    return nests + np.where(discovered, step, 0.0)


def proportionally_discovering_eggs(nests, fitness, discovery_probability, rng):
    """Like `randomly_discovering_eggs`, but worse nests are discovered more often.

    The abandon probability of the nest ranked ``r`` (0 is the best) is
    ``min(1, 2 * pD * r / (Na - 1))``, which keeps the best nest in place and
    the mean probability at ``pD`` for ``pD <= 0.5``.
    """
    Na, Nd = nests.shape
    if Na > 1:
        ranks = np.empty(Na)
        ranks[np.argsort(fitness, kind='stable')] = np.arange(Na)
        row_probability = np.minimum(1.0, 2.0 * discovery_probability * ranks / (Na - 1))
    else:
        row_probability = np.full(Na, float(discovery_probability))
    discovered = rng.random((Na, Nd)) < row_probability[:, np.newaxis]
    perm_1 = rng.permutation(Na)
    perm_2 = rng.permutation(Na)
    step = rng.random((Na, Nd)) * (nests[perm_1] - nests[perm_2])
    return nests + np.where(discovered, step, 0.0)


def check_convergence(previous_best_fitness, best_fitness, best_nest, fitness, nests,
                      saturation, eps1, eps2, max_saturation):
    """Evaluates the stop criteria of one generation.

    Parameters
    ----------
    previous_best_fitness, best_fitness : float
        Best fitness before and after the generation.
    best_nest : numpy.ndarray
        Current best nest.
    fitness, nests : numpy.ndarray
        Current fitness vector and population.
    saturation : int
        Number of consecutive saturated generations so far.
    eps1 : float
        Historical tolerance on the improvement of the best fitness.
    eps2 : float
        Population tolerance on the spread of fitness and positions.
    max_saturation : int
        Saturated generations needed to declare convergence.

    Returns
    -------
    tuple[bool, int]
        The stop signal and the updated saturation counter.

    Notes
    -----
    Two signals are combined: historical saturation (the best fitness improved
    by less than ``eps1`` for ``max_saturation`` generations in a row) and
    population collapse (both the standard deviation of the fitness and the
    largest coordinate deviation from the best nest fall below ``eps2``).

    """
    improvement = previous_best_fitness - best_fitness
    if abs(improvement) < eps1:
        saturation += 1
    else:
        saturation = 0

    with np.errstate(invalid='ignore'):
        fitness_spread = np.std(fitness)
        position_spread = np.max(np.abs(nests - best_nest))
    collapsed = bool(fitness_spread < eps2 and position_spread < eps2)

    return saturation >= max_saturation or collapsed, saturation


class CuckooSearch(BaseOptimizer):
    """
    Implements Cuckoo Search via Levy flights for box-constrained minimization.

    Keyword arguments other than ``verbose`` are parameter overrides merged
    into ``parameters`` (see `CuckooParameters.merged`).
    """
    def __init__(self, problem, parameters=None, random_seed=None, pool=None,
                 time_limit=None, **kwargs):
        verbose = kwargs.pop('verbose', False)
        if isinstance(parameters, dict):
            parameters = CuckooParameters().merged(parameters)
        self.parameters = (parameters or CuckooParameters()).merged(kwargs).validate()

        super().__init__(problem=problem,
                         population_size=self.parameters.population_size,
                         generations=self.parameters.max_iterations,
                         random_seed=random_seed,
                         unconstrained=self.parameters.unconstrained,
                         pool=pool,
                         time_limit=time_limit,
                         verbose=verbose)

    def _discover_eggs(self):
        if self.parameters.discovery_mode == 'proportional':
            return proportionally_discovering_eggs(self.nests, self.fitness,
                                                   self.parameters.discovery_probability, self.rng)
        return randomly_discovering_eggs(self.nests, self.parameters.discovery_probability, self.rng)

    def evolve_one_generation(self, gen_num=0, run_id_for_print=""):
        params = self.parameters
        previous_best_fitness = self.best_fitness

        # Get cuckoos by Levy flight and keep the better nests
        new_nests = levy_flight(self.nests, params.alpha, params.beta, self.best_nest, self.rng)
        new_nests = self._apply_constraints(new_nests)
        new_fitness = self._evaluate_population(new_nests)
        self.nests, self.fitness = update_positions(self.nests, self.fitness, new_nests, new_fitness)

        # A fraction of nests is discovered and rebuilt
        new_nests = self._apply_constraints(self._discover_eggs())
        new_fitness = self._evaluate_population(new_nests)
        self.nests, self.fitness = update_positions(self.nests, self.fitness, new_nests, new_fitness)

        self._rank_positions()

        stop, self.saturation = check_convergence(
            previous_best_fitness, self.best_fitness, self.best_nest, self.fitness, self.nests,
            self.saturation, params.eps1, params.eps2, params.max_saturation)
        self.steps += 1
        self._record_history()

        if self.verbose:
            print_prefix = f"Run {run_id_for_print} - CS - " if run_id_for_print else "CS - "
            print(f"{print_prefix}Gen {gen_num+1:03d} | Best Fitness: {self.best_fitness:.6e} | "
                  f"Saturation: {self.saturation}/{params.max_saturation} | FEvs: {self.evaluations}")

        if stop:
            self._signal_convergence()


def cuckoo_search(objective, boundaries, parameters=None, random_seed=None, **kwargs):
    """Minimizes ``objective`` inside ``boundaries`` with Cuckoo Search.

    Parameters
    ----------
    objective : callable or str
        Function of a length-Nd vector, or the name of a bundled benchmark.
    boundaries : array_like
        Nd-by-2 matrix of (lower, upper) pairs, sorted per row if needed.
    parameters : CuckooParameters or dict, optional
        Tuning parameters. Defaults are used for anything not given.
    random_seed : int, numpy.random.SeedSequence or numpy.random.Generator, optional
        Seed of the single random stream used by the whole run.
    **kwargs
        ``pool``, ``time_limit``, ``verbose`` or individual parameter overrides.

    Returns
    -------
    tuple
        ``(best_nest, best_fitness, details)`` where ``details`` is a
        `SearchDetails` record.

    Examples
    --------
    >>> best_nest, best_fitness, details = cuckoo_search(
    ...     'rosenbrock', [[-30, 30], [-30, 30]], random_seed=1, max_iterations=200)

    """
    name = objective if isinstance(objective, str) else None
    problem = OptimizationProblem(resolve_objective(objective), boundaries, name=name)
    solver = CuckooSearch(problem, parameters=parameters, random_seed=random_seed, **kwargs)
    return solver.run()
