# CuckooOpt/utils.py
"""Utility functions for the CuckooOpt package.

This module provides a collection of helper functions used across the package.
Responsibilities include:
- Enforcing simple (box) constraints on a population of nests.
- Evaluating an objective function over a population.
- Loading run defaults from a JSON configuration file.
- Formatting and displaying final optimization results.
- Exporting results to structured files.

"""
import csv
import json
import math
from pathlib import Path

import numpy as np

BEST_FITNESS_KEY = "best_fitness"
BEST_NEST_KEY = "best_nest"
DETAILS_KEY = "details"


def simple_constraints(nests, lower, upper):
    """Clamps every nest into the box ``[lower, upper]``.

    Parameters
    ----------
    nests : numpy.ndarray
        Population matrix of shape (Na, Nd).
    lower, upper : numpy.ndarray
        Lower and upper boundaries, either length-Nd rows or already
        broadcast to (Na, Nd).

    Returns
    -------
    numpy.ndarray
        A new matrix where entries below ``lower`` are set to ``lower`` and
        entries above ``upper`` are set to ``upper``.

    Notes
    -----
    A dimension with ``lower == upper`` collapses to that constant. NaN
    entries are set to ``lower``; infinities clamp like any other value.

    Examples
    --------
    >>> simple_constraints(np.array([[-2.0, 0.5, 3.0]]), np.zeros(3), np.ones(3))
    array([[0. , 0.5, 1. ]])

    """
    nests = np.where(np.isnan(nests), lower, nests)
    return np.minimum(np.maximum(nests, lower), upper)


def _finite_or_inf(value):
    value = float(value)
    return value if math.isfinite(value) else float('inf')


def evaluate_function(objective, nests, pool=None):
    """Evaluates the objective at every nest (row) of the population.

    Parameters
    ----------
    objective : callable
        Maps a length-Nd vector to a scalar.
    nests : numpy.ndarray
        Population matrix of shape (Na, Nd).
    pool : object, optional
        Anything with an order-preserving ``map`` (e.g. ``multiprocessing.Pool``).
        When given, rows are dispatched through it.

    Returns
    -------
    numpy.ndarray
        Fitness vector of length Na. Non-finite objective values (NaN, +/-Inf)
        are replaced by ``+inf`` so that the candidate always loses selection.

    """
    rows = [nest.copy() for nest in nests]
    if pool is not None:
        values = pool.map(objective, rows)
    else:
        values = [objective(row) for row in rows]
    return np.array([_finite_or_inf(v) for v in values], dtype=float)


def load_config(config_file):
    """Loads a sectioned JSON config file and flattens it into one mapping.

    Returns an empty dict when the file does not exist.
    """
    defaults = {}
    config_path = Path(config_file)
    if config_path.is_file():
        with open(config_path, 'r') as f:
            config_data = json.load(f)
        for section, params in config_data.items():
            if isinstance(params, dict):
                defaults.update(params)
            else:
                defaults[section] = params
    return defaults


def export_results(result, problem, output_dir, parameters=None, history=None):
    """Exports the best solution of a run to structured files.

    Parameters
    ----------
    result : dict
        Run result with keys ``best_nest``, ``best_fitness``, ``details`` and
        optionally ``seed``.
    problem : OptimizationProblem
        The problem that was solved, used for the boundary columns.
    output_dir : str
        Directory where ``summary.json``, ``best_nest.csv`` and
        ``convergence_history.csv`` will be written.
    parameters : dict, optional
        Parameter mapping stored in the summary.
    history : list[dict], optional
        Per-generation records with ``generation``, ``best_fitness`` and
        ``evaluations`` keys.

    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    print(f"\nExporting results to directory: {output_path.resolve()}")

    best_nest = np.asarray(result[BEST_NEST_KEY], dtype=float)
    best_fitness = float(result[BEST_FITNESS_KEY])
    summary = {
        "problem": problem.name,
        "dimensions": problem.Nd,
        "seed": result.get('seed'),
        BEST_FITNESS_KEY: best_fitness if math.isfinite(best_fitness) else None,
        BEST_NEST_KEY: best_nest.tolist(),
        DETAILS_KEY: result.get(DETAILS_KEY, {}),
        "parameters": parameters or {},
    }
    with open(output_path / 'summary.json', 'w') as f:
        json.dump(summary, f, indent=4)
    print("  - Saved summary.json")

    with open(output_path / 'best_nest.csv', 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=["Dimension", "Lower_Bound", "Upper_Bound", "Value"])
        writer.writeheader()
        for i, value in enumerate(best_nest):
            writer.writerow({
                "Dimension": i + 1,
                "Lower_Bound": problem.boundaries.lower[i],
                "Upper_Bound": problem.boundaries.upper[i],
                "Value": value,
            })
    print("  - Saved best_nest.csv")

    if history:
        with open(output_path / 'convergence_history.csv', 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=["generation", "best_fitness", "evaluations"])
            writer.writeheader()
            writer.writerows(history)
        print("  - Saved convergence_history.csv")


def display_problem_summary(problem):
    """Prints a summary of the optimization problem to the console."""
    print("\n" + "="*60)
    print("Cuckoo Search Problem Summary".center(60))
    print("="*60)
    print(f"\nObjective: {problem.name}")
    print(f"Dimensions (Nd): {problem.Nd}")
    print("\nBoundaries:")
    for i, (lb, ub) in enumerate(zip(problem.boundaries.lower, problem.boundaries.upper)):
        fixed = "  (fixed)" if lb == ub else ""
        print(f"  - x{i+1:<3d}: [{lb:>12.6g}, {ub:>12.6g}]{fixed}")
    print("\n" + "="*60 + "\n")


def display_optimization_results(all_run_results, problem, output_dir=None, parameters=None):
    """Summarizes and displays the final optimization results to the console.

    Parameters
    ----------
    all_run_results : list[dict]
        One dictionary per run with keys ``seed``, ``best_nest``,
        ``best_fitness``, ``details`` and optionally ``history``.
    problem : OptimizationProblem
        The problem instance used for the optimization.
    output_dir : str, optional
        If provided, the best run is exported with `export_results`.
    parameters : dict, optional
        Parameters forwarded to the exported summary.

    Returns
    -------
    dict or None
        The best run found, or None if no run produced a finite fitness.

    """
    print(f"--- Summary of {len(all_run_results)} Cuckoo Search Run(s) on {problem.name} ---")
    if not all_run_results:
        print("No results to summarize.")
        return None

    best_run = None
    for run_result in all_run_results:
        fitness = run_result.get(BEST_FITNESS_KEY, float('inf'))
        details = run_result.get(DETAILS_KEY) or {}
        fitness_str = f"{fitness:.6e}" if math.isfinite(fitness) else "Inf"
        if 'error' in run_result:
            print(f"Run {run_result.get('seed', 'N/A')}: failed ({run_result['error']})")
            continue
        print(f"Run {run_result.get('seed', 'N/A')}: Best Fitness = {fitness_str} "
              f"({details.get('steps', 0)} steps, {details.get('fevs', 0)} evaluations, "
              f"{details.get('outcome', 'N/A')})")
        if math.isfinite(fitness) and (best_run is None or fitness < best_run[BEST_FITNESS_KEY]):
            best_run = run_result

    if best_run is None:
        print(f"\nNo valid (finite fitness) solution found across all runs for {problem.name}.")
        return None

    details = best_run.get(DETAILS_KEY) or {}
    print(f"\nBest fitness found across all runs: {best_run[BEST_FITNESS_KEY]:.10e}")
    print(f"  Best solution from run: {best_run.get('seed', 'N/A')}")
    print("  Best nest:")
    for i, value in enumerate(np.asarray(best_run[BEST_NEST_KEY], dtype=float)):
        print(f"    x{i+1:<3d} = {value: .10f}")
    print(f"  Elapsed time : {details.get('time', 0.0):.3f} s")
    print(f"  Evaluations  : {details.get('fevs', 0)}")
    print(f"  Steps        : {details.get('steps', 0)}")
    print(f"  Outcome      : {details.get('outcome', 'N/A')} (outmsg={details.get('outmsg', 0)})")

    if output_dir:
        export_results(best_run, problem, output_dir, parameters=parameters,
                       history=best_run.get('history'))
    return best_run
