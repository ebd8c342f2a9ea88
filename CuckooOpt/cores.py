# CuckooOpt/cores.py
"""Core parallel processing module for the CuckooOpt package.

This module contains the functions responsible for setting up and managing
the multiprocessing environment, including the optimization worker function
and the logic for inter-process communication (migration of best nests).

Workers form a ring: after every epoch worker ``i`` posts its best nest on its
own outbox and then waits for the nest worker ``i - 1`` posted for the same
epoch. Every exchange is therefore fixed by the seed, not by process timing.
"""
import multiprocessing

import numpy as np

from .benchmarks import resolve_objective
from .cs_helpers import CuckooSearch
from .cs_models import CuckooParameters, OptimizationProblem


def spawn_worker_seeds(random_seed, num_workers):
    """Derives one independent, reproducible seed stream per worker."""
    return np.random.SeedSequence(random_seed).spawn(num_workers)


def optimization_worker(
    worker_id, objective, boundaries, parameters, epochs, generations_per_epoch,
    worker_seed, outbox, inbox, results_queue, verbose=False, time_limit=None
):
    """A worker process that runs Cuckoo Search with ring migration.

    This function is intended to be the target of a ``multiprocessing.Process``.
    It builds a `CuckooSearch` solver, runs it for a series of epochs, and
    after every epoch sends its best nest to the next worker and injects the
    one received from the previous worker.

    Parameters
    ----------
    worker_id : int
        A unique identifier for the worker process.
    objective : str or callable
        Benchmark name or a picklable objective function.
    boundaries : array_like
        Nd-by-2 boundary matrix.
    parameters : dict
        Cuckoo Search parameters (see `CuckooParameters`).
    epochs : int
        The number of epochs (and migrations) of the run.
    generations_per_epoch : int
        The number of generations to run within each epoch before migration.
    worker_seed : numpy.random.SeedSequence
        Seed stream of this worker.
    outbox : queue-like
        Queue this worker posts exactly one item per epoch on.
    inbox : queue-like
        Outbox of the previous worker in the ring.
    results_queue : queue-like
        A shared queue where the final best result from this worker is placed.
    verbose : bool, optional
        Print per-generation progress.
    time_limit : float, optional
        Wall-clock budget of this worker in seconds. A time limit makes the
        run depend on machine speed, so it is not reproducible.

    Notes
    -----
    A worker whose search has terminated keeps taking part in the exchange
    until the last epoch, but no longer injects what it receives, so its
    result is frozen. A failed worker posts ``None`` for the remaining epochs
    and places an error entry in the results queue, so no neighbour blocks.

    """
    print(f"Worker {worker_id}: Starting Cuckoo Search.")
    sent = 0
    try:
        problem = OptimizationProblem(resolve_objective(objective), boundaries,
                                      name=objective if isinstance(objective, str) else None)
        solver = CuckooSearch(problem, parameters=CuckooParameters().merged(parameters),
                              random_seed=worker_seed, time_limit=time_limit, verbose=verbose)

        for epoch in range(epochs):
            was_finished = solver.is_finished
            solver.run_epoch(
                generations_in_epoch=generations_per_epoch,
                current_gen_offset=epoch * generations_per_epoch,
                run_id=str(worker_id))
            if not was_finished:
                print(f"Worker {worker_id}: Epoch {epoch+1}/{epochs} complete. Current Best Fitness: {solver.best_fitness:.6e}")
                if solver.is_finished:
                    print(f"Worker {worker_id}: Search terminated ({solver.outcome}) at epoch {epoch+1}.")

            outbox.put(solver.get_best_nest())
            sent += 1
            incoming_nest = inbox.get()
            if incoming_nest is not None and not solver.is_finished:
                accepted = solver.inject_nest(incoming_nest)
                print(f"Worker {worker_id}: Migration {'accepted' if accepted else 'rejected'} at epoch {epoch+1}.")

        results_queue.put((worker_id, solver.best_nest, solver.best_fitness,
                           {**solver.details().as_dict(), 'history': solver.history}))
    except Exception as e_worker:
        print(f"FATAL ERROR in worker {worker_id}: {e_worker}")
        for _ in range(sent, epochs):
            outbox.put(None)
        results_queue.put((worker_id, None, float('inf'), {"error": str(e_worker)}))
    finally:
        print(f"Worker {worker_id}: Finished.")


def run_parallel_with_migration(
    objective, boundaries, parameters, epochs, generations_per_epoch,
    num_workers, random_seed=None, verbose=False, time_limit=None
):
    """Manages the pool of Cuckoo Search workers and their communication.

    Parameters
    ----------
    objective : str or callable
        Benchmark name or a picklable objective function.
    boundaries : array_like
        Nd-by-2 boundary matrix.
    parameters : dict
        Cuckoo Search parameters shared by every worker.
    epochs : int
        The number of epochs for each worker to run.
    generations_per_epoch : int
        The number of generations per epoch.
    num_workers : int
        The number of parallel worker processes to spawn.
    random_seed : int, optional
        Root seed; worker ``i`` uses the ``i``-th spawned child stream. Without
        a ``time_limit`` the whole run is reproducible from it.
    verbose : bool, optional
        Forwarded to the workers.
    time_limit : float, optional
        Wall-clock budget of every worker in seconds.

    Returns
    -------
    list
        Results sorted by worker id. Each item is a tuple:
        (worker_id, best_nest, best_fitness, details_dict).

    """
    manager = multiprocessing.Manager()
    outboxes = [manager.Queue() for _ in range(num_workers)]
    results_queue = manager.Queue()
    seeds = spawn_worker_seeds(random_seed, num_workers)
    processes = []
    for i in range(num_workers):
        p = multiprocessing.Process(
            target=optimization_worker,
            args=(
                i, objective, boundaries, parameters, epochs, generations_per_epoch,
                seeds[i], outboxes[i], outboxes[i - 1], results_queue, verbose, time_limit
            )
        )
        processes.append(p)
        p.start()
    for p in processes:
        p.join()
    all_results = [results_queue.get() for _ in range(results_queue.qsize())]
    return sorted(all_results, key=lambda item: item[0])
