# CuckooOpt/base_optimizer.py
"""
Base optimizer module for the CuckooOpt package.

This module defines the `BaseOptimizer` class, which serves as the foundation
for population-based optimizers in the package. It encapsulates the shared
logic for problem handling, population management, fitness evaluation,
ranking and the termination bookkeeping of a run.
"""
import time

import numpy as np

from .cs_models import OptimizationProblem, SearchDetails, OUTCOME_CONVERGED, OUTCOME_BUDGET_EXHAUSTED
from .utils import simple_constraints, evaluate_function


class BaseOptimizer:
    def __init__(self,
                 problem: OptimizationProblem,
                 population_size: int,
                 generations: int,
                 random_seed=None,
                 unconstrained=False,
                 pool=None,
                 time_limit=None,
                 **kwargs):

        self.verbose = kwargs.get('verbose', False)

        if isinstance(population_size, bool) or not isinstance(population_size, (int, np.integer)) \
                or population_size <= 0:
            raise ValueError(f"population_size must be a positive integer, got {population_size!r}")

        self.problem: OptimizationProblem = problem
        self.population_size = int(population_size)
        self.generations = generations  # hard iteration ceiling
        self.random_seed = random_seed
        self.unconstrained = unconstrained
        self.pool = pool
        self.time_limit = time_limit

        # Generator, SeedSequence, int or None are all accepted
        self.rng = np.random.default_rng(random_seed)

        self.Na = self.population_size
        self.Nd = self.problem.Nd
        self.bnd_1, self.bnd_2 = self.problem.boundaries.broadcast(self.Na)

        # --- State variables ---
        self.nests = None
        self.fitness = None
        self.best_nest = None
        self.best_fitness = float('inf')
        self.evaluations = 0
        self.steps = 1
        self.saturation = 0
        self.outcome = None
        self.history = []

        self._stop_requested = False
        self._start_time = time.perf_counter()
        self._end_time = None

        self._initialize_population()

    def _initialize_population(self):
        """Samples Na nests uniformly inside the boundaries, evaluates and ranks them."""
        self.nests = self.bnd_1 + self.rng.random((self.Na, self.Nd)) * (self.bnd_2 - self.bnd_1)
        self.fitness = self._evaluate_population(self.nests)
        self._rank_positions()
        self._record_history()

    def _evaluate_population(self, nests):
        fitness = evaluate_function(self.problem.objective, nests, pool=self.pool)
        self.evaluations += len(nests)
        return fitness

    def _apply_constraints(self, nests):
        if self.unconstrained:
            return nests
        return simple_constraints(nests, self.bnd_1, self.bnd_2)

    def _rank_positions(self):
        g = int(np.argmin(self.fitness))
        self.best_fitness = float(self.fitness[g])
        self.best_nest = self.nests[g].copy()

    def _record_history(self):
        self.history.append({
            'generation': self.steps - 1,
            'best_fitness': self.best_fitness,
            'evaluations': self.evaluations,
        })

    def _finalize(self, outcome):
        self.outcome = outcome
        self._end_time = time.perf_counter()

    # --- Methods to be implemented by subclasses ---
    def evolve_one_generation(self, gen_num=0, run_id_for_print=""):
        """Performs a single generation of the optimization algorithm."""
        raise NotImplementedError("This method should be implemented by subclasses.")

    # --- Termination ---
    @property
    def is_finished(self):
        return self.outcome is not None

    def request_stop(self):
        """Asks the optimizer to stop at the next generation boundary."""
        self._stop_requested = True

    def elapsed_time(self):
        end = self._end_time if self._end_time is not None else time.perf_counter()
        return end - self._start_time

    def _check_budget(self):
        """Finalizes the run if the iteration ceiling, a stop request or the deadline was hit."""
        if self.is_finished:
            return True
        deadline_passed = self.time_limit is not None and self.elapsed_time() >= self.time_limit
        if self.steps > self.generations or self._stop_requested or deadline_passed:
            self._finalize(OUTCOME_BUDGET_EXHAUSTED)
            return True
        return False

    def _signal_convergence(self):
        self._finalize(OUTCOME_CONVERGED)

    # --- Common public methods for epoch interface ---
    def run_epoch(self, generations_in_epoch, current_gen_offset=0, run_id=""):
        """Runs the optimizer for at most ``generations_in_epoch`` generations."""
        for gen in range(generations_in_epoch):
            if self._check_budget():
                break
            self.evolve_one_generation(gen_num=current_gen_offset + gen, run_id_for_print=run_id)
        self._check_budget()

    def run(self, run_id_for_print=""):
        """Runs the optimizer until it converges or exhausts its budget."""
        while not self._check_budget():
            self.evolve_one_generation(gen_num=self.steps - 1, run_id_for_print=run_id_for_print)
        return self.best_nest.copy(), self.best_fitness, self.details()

    def get_best_nest(self):
        """Returns the best nest found so far."""
        return None if self.best_nest is None else self.best_nest.copy()

    def details(self):
        return SearchDetails(time=self.elapsed_time(), fevs=self.evaluations,
                             steps=self.steps - 1,
                             outcome=self.outcome or OUTCOME_BUDGET_EXHAUSTED)

    def inject_nest(self, nest):
        """Replaces the worst nest with an external one (e.g. a migrant).

        The migrant is projected and evaluated; it only takes the worst nest's
        place if its fitness is strictly lower, so the best fitness never rises.
        Returns True if the nest was accepted.
        """
        if self.nests is None or nest is None:
            return False
        nest = np.asarray(nest, dtype=float).reshape(1, self.Nd)
        if not self.unconstrained:
            nest = simple_constraints(nest, self.problem.boundaries.lower, self.problem.boundaries.upper)
        new_fitness = self._evaluate_population(nest)[0]
        worst = int(np.argmax(self.fitness))
        if new_fitness < self.fitness[worst]:
            self.nests[worst] = nest[0]
            self.fitness[worst] = new_fitness
            self._rank_positions()
            return True
        return False
