# CuckooOpt/run_problem.py
"""
Main executable script for running Cuckoo Search optimizations with CuckooOpt.

This script serves as the command-line interface (CLI) for the package. It
handles parsing user arguments, resolving the benchmark objective and its
boundaries, setting up the optimizer and orchestrating the optimization run
either sequentially or in parallel. Finally, it displays the results.
"""
import argparse
import multiprocessing
import sys
import time

from tqdm import tqdm

from .benchmarks import BENCHMARKS, get_benchmark, default_boundaries
from .cs_helpers import CuckooSearch
from .cs_models import CuckooParameters, OptimizationProblem
from .cores import run_parallel_with_migration
from .utils import load_config, display_optimization_results, display_problem_summary

# --- Internal defaults, used when neither config file nor CLI give a value ---
DEFAULT_BENCHMARK = 'rosenbrock'
DEFAULT_EPOCHS = 10
DEFAULT_GEN_PER_EPOCH = 100
DEFAULT_WORKERS = 1
DEFAULT_EVALUATION_WORKERS = 1

PARAMETER_ARGS = ('population_size', 'alpha', 'beta', 'discovery_probability', 'discovery_mode',
                  'eps1', 'eps2', 'max_saturation', 'unconstrained')


def build_boundaries(args):
    """Returns the Nd-by-2 boundary matrix for the benchmark and bound overrides."""
    dimensions = getattr(args, 'dimensions', None)
    bnd = default_boundaries(args.benchmark, dimensions)
    lower_bound = getattr(args, 'lower_bound', None)
    upper_bound = getattr(args, 'upper_bound', None)
    if lower_bound is not None:
        bnd[:, 0] = lower_bound
    if upper_bound is not None:
        bnd[:, 1] = upper_bound
    return bnd


def build_parameters(args):
    """Merges the parsed arguments into a `CuckooParameters` instance."""
    overrides = {name: getattr(args, name, None) for name in PARAMETER_ARGS}
    overrides['max_iterations'] = args.epochs * args.generations_per_epoch
    return CuckooParameters().merged(overrides).validate()


# --- Main Execution Function ---
def main(args):
    """
    Main function to run Cuckoo Search, configured by command-line arguments.
    """
    print(f"Cuckoo Search via Levy flights on '{args.benchmark}' with CuckooOpt")

    try:
        get_benchmark(args.benchmark)
        bnd = build_boundaries(args)
        parameters = build_parameters(args)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    problem = OptimizationProblem(get_benchmark(args.benchmark).function, bnd, name=args.benchmark)
    display_problem_summary(problem)

    number_of_workers = getattr(args, 'number_of_workers', None) or DEFAULT_WORKERS
    evaluation_workers = getattr(args, 'evaluation_workers', None) or DEFAULT_EVALUATION_WORKERS
    random_seed = getattr(args, 'random_seed', None)
    verbose = bool(getattr(args, 'verbose', False))

    print("\n" + "="*50)
    print("Optimization Run Configuration".center(50))
    print("="*50)
    print(f"  - Parallel Workers: {number_of_workers}")
    print(f"  - Epochs: {args.epochs}")
    print(f"  - Generations per Epoch: {args.generations_per_epoch}")
    print(f"  - Total Generations (max.): {parameters.max_iterations}")
    print(f"  - Random Seed: {random_seed if random_seed is not None else 'None (fresh entropy)'}")
    print("\n  Cuckoo Search Parameters:")
    print(f"    - Number of Nests (Na): {parameters.population_size}")
    print(f"    - Step Size Scale (alpha): {parameters.alpha}")
    print(f"    - Levy Exponent (beta): {parameters.beta}")
    print(f"    - Discovery Probability (pD): {parameters.discovery_probability} ({parameters.discovery_mode})")
    print(f"    - Stop Criteria: eps1={parameters.eps1}, eps2={parameters.eps2}, mSat={parameters.max_saturation}")
    print(f"    - Unconstrained: {parameters.unconstrained}")
    print("="*50 + "\n")

    start_time = time.time()

    if number_of_workers <= 1:
        print("\nRunning in sequential mode (1 worker)...")
        pool = multiprocessing.Pool(evaluation_workers) if evaluation_workers > 1 else None
        try:
            solver = CuckooSearch(problem, parameters=parameters, random_seed=random_seed,
                                  pool=pool, time_limit=getattr(args, 'time_limit', None),
                                  verbose=verbose)
            for epoch in tqdm(range(args.epochs), desc="Epochs Progress"):
                solver.run_epoch(
                    generations_in_epoch=args.generations_per_epoch,
                    current_gen_offset=epoch * args.generations_per_epoch,
                    run_id="sequential" if verbose else ""
                )
                tqdm.write(f"Epoch {epoch+1}/{args.epochs} complete. Current Best Fitness: {solver.best_fitness:.6e}")
                if solver.is_finished:
                    tqdm.write(f"Search terminated ({solver.outcome}) after {solver.steps - 1} steps.")
                    break
        finally:
            if pool is not None:
                pool.close()
                pool.join()

        run_results = [(0, solver.best_nest, solver.best_fitness,
                        {**solver.details().as_dict(), 'history': solver.history})]
    else:
        print(f"\nRunning in parallel mode with {number_of_workers} workers...")
        run_results = run_parallel_with_migration(
            objective=args.benchmark, boundaries=bnd, parameters=parameters.as_dict(),
            epochs=args.epochs, generations_per_epoch=args.generations_per_epoch,
            num_workers=number_of_workers, random_seed=random_seed, verbose=verbose,
            time_limit=getattr(args, 'time_limit', None))

    processed_results = []
    for worker_id, best_nest, best_fitness, details in run_results:
        details = dict(details or {})
        history = details.pop('history', None)
        result = {'seed': f"worker_{worker_id}", 'best_nest': best_nest,
                  'best_fitness': best_fitness, 'details': details, 'history': history}
        if best_nest is None:
            result['error'] = details.get('error', 'no result')
        processed_results.append(result)

    elapsed_time = time.time() - start_time
    print(f"\nOptimization completed in {elapsed_time:.2f} seconds.")
    return display_optimization_results(processed_results, problem, getattr(args, 'output_dir', None),
                                        parameters=parameters.as_dict())


def cli(argv=None):
    """Command-line interface function."""
    parser = argparse.ArgumentParser(
        description="Run Cuckoo Search via Levy flights on a benchmark problem using CuckooOpt.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        add_help=False
    )

    parser.add_argument('--config_file', type=str, default='config.json', help="Path to the JSON configuration file.")
    temp_args, _ = parser.parse_known_args(argv)
    config_defaults = load_config(temp_args.config_file)

    # Registered after the config pass so '-h' lists every option
    parser.add_argument('-h', '--help', action='help', help="Show this help message and exit.")

    problem_group = parser.add_argument_group('Problem Arguments')
    problem_group.add_argument('--benchmark', type=str, default=DEFAULT_BENCHMARK,
                               help=f"Benchmark objective: {', '.join(sorted(BENCHMARKS))}.")
    problem_group.add_argument('--dimensions', type=int, help="Number of design variables (default: the benchmark's own).")
    problem_group.add_argument('--lower_bound', type=float, help="Override the lower bound of every dimension.")
    problem_group.add_argument('--upper_bound', type=float, help="Override the upper bound of every dimension.")

    core_group = parser.add_argument_group('Core Optimization Arguments')
    core_group.add_argument('--epochs', type=int, default=DEFAULT_EPOCHS)
    core_group.add_argument('--generations_per_epoch', type=int, default=DEFAULT_GEN_PER_EPOCH)
    core_group.add_argument('--number_of_workers', type=int, default=DEFAULT_WORKERS,
                            help="Number of parallel islands (<=1 for sequential).")
    core_group.add_argument('--evaluation_workers', type=int, default=DEFAULT_EVALUATION_WORKERS,
                            help="Processes used to evaluate nests in sequential mode.")
    core_group.add_argument('--random_seed', type=int, help="Seed for reproducible runs.")
    core_group.add_argument('--time_limit', type=float, help="Wall-clock budget in seconds (per worker in parallel mode).")
    core_group.add_argument('--verbose', action='store_true')
    core_group.add_argument('--output_dir', type=str, default=None, help="Directory to save structured output files (JSON, CSV).")

    cs_group = parser.add_argument_group('Cuckoo Search Parameters')
    cs_group.add_argument('--population_size', type=int, help="Number of nests (Na).")
    cs_group.add_argument('--alpha', type=float, help="Step size scale factor.")
    cs_group.add_argument('--beta', type=float, help="Levy exponent used by Mantegna's algorithm.")
    cs_group.add_argument('--discovery_probability', type=float, help="Probability of discovering eggs (pD).")
    cs_group.add_argument('--discovery_mode', type=str, choices=['random', 'proportional'])
    cs_group.add_argument('--unconstrained', action='store_true', default=None, help="Skip the boundary projection.")

    stop_group = parser.add_argument_group('Stop Criteria')
    stop_group.add_argument('--eps1', type=float, help="Historical tolerance on the best fitness.")
    stop_group.add_argument('--eps2', type=float, help="Population tolerance on fitness and positions.")
    stop_group.add_argument('--max_saturation', type=int, help="Saturated steps before convergence.")

    parser.set_defaults(**config_defaults)

    parsed_args = parser.parse_args(argv)

    return main(parsed_args)


if __name__ == "__main__":
    cli()
