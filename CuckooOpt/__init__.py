# CuckooOpt/__init__.py

"""
CuckooOpt: A Python package for box-constrained global optimization with
Cuckoo Search via Levy flights.

This package provides tools for defining simple-constrained minimization
problems and solving them with a reproducible, population-based Cuckoo Search,
either sequentially or as parallel islands with migration.
"""
from types import SimpleNamespace

# Import key classes from data model modules
from .cs_models import (
    Boundaries, CuckooParameters, SearchDetails, OptimizationProblem,
    OUTCOME_CONVERGED, OUTCOME_BUDGET_EXHAUSTED
)

# Import the optimizer and its operators
from .cs_helpers import (
    CuckooSearch,
    cuckoo_search,
    mantegna_sigma,
    levy_flight,
    update_positions,
    randomly_discovering_eggs,
    proportionally_discovering_eggs,
    check_convergence,
)

# Import the base optimizer class for users who might want to extend the package
from .base_optimizer import BaseOptimizer

# Import the bundled benchmark objectives
from .benchmarks import (
    BENCHMARKS,
    ackley1, beale, bird, rosenbrock, rastrigin, sphere, welded_beam_design,
    get_benchmark, resolve_objective, default_boundaries
)

# Import the most useful utility functions
from .utils import (
    simple_constraints,
    evaluate_function,
    load_config,
    display_optimization_results,
    display_problem_summary,
    export_results,
)

# Import the core parallel execution function
from .cores import run_parallel_with_migration

# Define the public API of the package using __all__.
__all__ = [
    # Models
    'Boundaries', 'CuckooParameters', 'SearchDetails', 'OptimizationProblem',
    'OUTCOME_CONVERGED', 'OUTCOME_BUDGET_EXHAUSTED',

    # Optimizer and operators
    'CuckooSearch', 'cuckoo_search', 'mantegna_sigma', 'levy_flight',
    'update_positions', 'randomly_discovering_eggs',
    'proportionally_discovering_eggs', 'check_convergence',

    # Base Class
    'BaseOptimizer',

    # Benchmarks
    'BENCHMARKS', 'ackley1', 'beale', 'bird', 'rosenbrock', 'rastrigin',
    'sphere', 'welded_beam_design', 'get_benchmark', 'resolve_objective',
    'default_boundaries',

    # Utilities
    'simple_constraints', 'evaluate_function', 'load_config',
    'display_optimization_results', 'display_problem_summary', 'export_results',

    # Core Execution
    'run_parallel_with_migration', 'run'
]

__version__ = "1.0.0"


def run(config_file='config.json', **kwargs):
    """
    High-level programmatic API to run a Cuckoo Search optimization.

    This function provides a simple way to configure and run an optimization
    by passing parameters as keyword arguments or via a config file.

    Args:
        config_file (str, optional): Path to the JSON configuration file.
                                     Defaults to 'config.json'.
        **kwargs: Keyword arguments corresponding to the command-line options.
                  These will override any values from the config file.

    Returns:
        dict or None: The best run (keys ``best_nest``, ``best_fitness``,
        ``details``), or None if no finite solution was found.
    """
    # Import inside the function to avoid circular dependencies
    from .run_problem import main as run_problem_main, DEFAULT_BENCHMARK, DEFAULT_EPOCHS, \
        DEFAULT_GEN_PER_EPOCH, DEFAULT_WORKERS

    defaults = {
        'benchmark': DEFAULT_BENCHMARK,
        'epochs': DEFAULT_EPOCHS,
        'generations_per_epoch': DEFAULT_GEN_PER_EPOCH,
        'number_of_workers': DEFAULT_WORKERS,
    }
    config_defaults = load_config(config_file)
    if not config_defaults:
        print(f"Warning: Config file '{config_file}' not found. Using internal defaults.")
    defaults.update(config_defaults)

    # Update defaults with any user-provided keyword arguments
    defaults.update(kwargs)
    args = SimpleNamespace(**defaults)

    return run_problem_main(args)
