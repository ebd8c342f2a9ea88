# tests/test_cores.py
import queue

import pytest
import numpy as np

from CuckooOpt.cs_models import OUTCOME_BUDGET_EXHAUSTED
from CuckooOpt.cores import spawn_worker_seeds, optimization_worker, run_parallel_with_migration

TEST_BOUNDS = [[-10.0, 10.0], [-10.0, 10.0]]
TEST_PARAMETERS = {'population_size': 8, 'max_iterations': 20, 'eps1': 0.0}
RASTRIGIN_BOUNDS = [[-5.12, 5.12]] * 4
RASTRIGIN_PARAMETERS = {'population_size': 10, 'eps1': 0.0}


def test_spawn_worker_seeds_are_reproducible_and_distinct():
    first = spawn_worker_seeds(7, 3)
    second = spawn_worker_seeds(7, 3)
    draws_1 = [np.random.default_rng(s).random() for s in first]
    draws_2 = [np.random.default_rng(s).random() for s in second]
    assert draws_1 == draws_2
    assert len(set(draws_1)) == 3


def test_optimization_worker_reports_result():
    """A single worker run in-process; its own outbox closes the ring."""
    ring = queue.Queue()
    results_queue = queue.Queue()
    seed = spawn_worker_seeds(1, 1)[0]
    optimization_worker(0, 'sphere', TEST_BOUNDS, TEST_PARAMETERS, epochs=2,
                        generations_per_epoch=5, worker_seed=seed,
                        outbox=ring, inbox=ring, results_queue=results_queue)
    worker_id, best_nest, best_fitness, details = results_queue.get_nowait()
    assert worker_id == 0
    assert best_nest.shape == (2,)
    assert best_fitness == pytest.approx(float(np.sum(best_nest**2)))
    assert details['steps'] == 10
    assert len(details['history']) == 11
    assert ring.empty()


def test_optimization_worker_reports_errors_and_feeds_the_ring():
    """A failed worker still posts one item per epoch so its neighbour never waits."""
    outbox = queue.Queue()
    results_queue = queue.Queue()
    optimization_worker(3, 'no_such_benchmark', TEST_BOUNDS, TEST_PARAMETERS, epochs=4,
                        generations_per_epoch=1, worker_seed=None,
                        outbox=outbox, inbox=queue.Queue(), results_queue=results_queue)
    worker_id, best_nest, best_fitness, details = results_queue.get_nowait()
    assert worker_id == 3
    assert best_nest is None
    assert best_fitness == float('inf')
    assert 'error' in details
    assert [outbox.get_nowait() for _ in range(4)] == [None] * 4
    assert outbox.empty()


def test_finished_worker_keeps_its_result():
    """Once terminated, received nests are no longer injected."""
    ring = queue.Queue()
    results_queue = queue.Queue()
    parameters = {**TEST_PARAMETERS, 'max_iterations': 3}
    optimization_worker(0, 'sphere', TEST_BOUNDS, parameters, epochs=3,
                        generations_per_epoch=5, worker_seed=spawn_worker_seeds(2, 1)[0],
                        outbox=ring, inbox=ring, results_queue=results_queue)
    _, _, _, details = results_queue.get_nowait()
    assert details['steps'] == 3
    assert details['fevs'] == 8 + 3 * 2 * 8


def test_run_parallel_with_migration():
    results = run_parallel_with_migration('sphere', TEST_BOUNDS, TEST_PARAMETERS, epochs=2,
                                          generations_per_epoch=5, num_workers=2, random_seed=11)
    assert [r[0] for r in results] == [0, 1]
    for _, best_nest, best_fitness, details in results:
        assert np.isfinite(best_fitness)
        assert best_nest.shape == (2,)
        assert details['fevs'] >= 8


def test_run_parallel_with_migration_is_reproducible():
    """Same seed, same islands, same exchanges: identical results."""
    runs = [run_parallel_with_migration('rastrigin', RASTRIGIN_BOUNDS, RASTRIGIN_PARAMETERS,
                                        epochs=6, generations_per_epoch=10, num_workers=3,
                                        random_seed=42)
            for _ in range(2)]
    for first, second in zip(*runs):
        assert first[0] == second[0]
        np.testing.assert_array_equal(first[1], second[1])
        assert first[2] == second[2]
        assert first[3]['fevs'] == second[3]['fevs']
        assert first[3]['steps'] == second[3]['steps']


def test_run_parallel_with_migration_time_limit():
    results = run_parallel_with_migration('sphere', TEST_BOUNDS, TEST_PARAMETERS, epochs=3,
                                          generations_per_epoch=5, num_workers=2, random_seed=5,
                                          time_limit=0.0)
    assert len(results) == 2
    for _, _, best_fitness, details in results:
        assert np.isfinite(best_fitness)
        assert details['steps'] == 0
        assert details['outcome'] == OUTCOME_BUDGET_EXHAUSTED
