# tests/test_cs_helpers.py
import pytest
import numpy as np
from multiprocessing.pool import ThreadPool

from CuckooOpt.cs_models import (
    CuckooParameters, OptimizationProblem, OUTCOME_CONVERGED, OUTCOME_BUDGET_EXHAUSTED
)
from CuckooOpt.benchmarks import sphere, rosenbrock
from CuckooOpt.cs_helpers import (
    CuckooSearch, cuckoo_search, mantegna_sigma, levy_flight, update_positions,
    randomly_discovering_eggs, proportionally_discovering_eggs, check_convergence
)

# --- Constants for the test runs ---
TEST_SEED = 12345
TEST_NA = 10
TEST_BOUNDS = [[-10.0, 10.0], [-10.0, 10.0]]
# Stop criteria that never fire before the iteration ceiling
NO_EARLY_STOP = {'eps1': 0.0, 'eps2': 0.0}


@pytest.fixture
def sphere_problem():
    return OptimizationProblem(sphere, TEST_BOUNDS, name='sphere')


@pytest.fixture
def population():
    rng = np.random.default_rng(0)
    nests = rng.uniform(-5, 5, size=(TEST_NA, 3))
    fitness = np.array([sphere(n) for n in nests])
    return nests, fitness


# --- Operators ---

def test_mantegna_sigma_for_default_beta():
    assert mantegna_sigma(1.5) == pytest.approx(0.6965745, rel=1e-6)
    assert mantegna_sigma(1.0) == pytest.approx(1.0)


def test_levy_flight_is_deterministic_for_a_seed(population):
    nests, fitness = population
    best = nests[np.argmin(fitness)]
    first = levy_flight(nests, 1.0, 1.5, best, np.random.default_rng(TEST_SEED))
    second = levy_flight(nests, 1.0, 1.5, best, np.random.default_rng(TEST_SEED))
    assert first.shape == nests.shape
    np.testing.assert_array_equal(first, second)


def test_levy_flight_leaves_best_nest_in_place(population):
    """The step is proportional to the distance to the best nest."""
    nests, fitness = population
    g = int(np.argmin(fitness))
    new_nests = levy_flight(nests, 1.0, 1.5, nests[g], np.random.default_rng(TEST_SEED))
    np.testing.assert_array_equal(new_nests[g], nests[g])
    np.testing.assert_array_equal(levy_flight(nests, 0.0, 1.5, nests[g], np.random.default_rng(1)), nests)


def test_update_positions_keeps_old_nest_on_ties():
    nests = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])
    fitness = np.array([1.0, 2.0, 3.0])
    new_nests = nests + 10.0
    new_fitness = np.array([1.0, 1.5, 4.0])
    merged_nests, merged_fitness = update_positions(nests, fitness, new_nests, new_fitness)
    np.testing.assert_array_equal(merged_nests, [[0.0, 0.0], [11.0, 11.0], [2.0, 2.0]])
    np.testing.assert_array_equal(merged_fitness, [1.0, 1.5, 3.0])
    assert np.all(merged_fitness <= fitness)


def test_discovery_with_zero_probability_is_a_no_op(population):
    nests, fitness = population
    rng = np.random.default_rng(TEST_SEED)
    np.testing.assert_array_equal(randomly_discovering_eggs(nests, 0.0, rng), nests)
    np.testing.assert_array_equal(proportionally_discovering_eggs(nests, fitness, 0.0, rng), nests)


def test_random_discovery_moves_entries(population):
    nests, _ = population
    new_nests = randomly_discovering_eggs(nests, 1.0, np.random.default_rng(TEST_SEED))
    assert new_nests.shape == nests.shape
    assert not np.array_equal(new_nests, nests)


def test_proportional_discovery_keeps_best_nest(population):
    nests, fitness = population
    g = int(np.argmin(fitness))
    new_nests = proportionally_discovering_eggs(nests, fitness, 0.5, np.random.default_rng(TEST_SEED))
    np.testing.assert_array_equal(new_nests[g], nests[g])


def test_check_convergence_saturation():
    nests = np.array([[0.0, 0.0], [1.0, 1.0]])
    fitness = np.array([0.0, 2.0])
    stop, saturation = check_convergence(1.0, 1.0, nests[0], fitness, nests,
                                         saturation=2, eps1=1e-3, eps2=1e-12, max_saturation=3)
    assert stop and saturation == 3

    stop, saturation = check_convergence(1.0, 0.5, nests[0], fitness, nests,
                                         saturation=2, eps1=1e-3, eps2=1e-12, max_saturation=3)
    assert not stop and saturation == 0


def test_check_convergence_population_collapse():
    nests = np.ones((4, 2))
    fitness = np.full(4, 2.0)
    stop, saturation = check_convergence(5.0, 2.0, nests[0], fitness, nests,
                                         saturation=0, eps1=1e-3, eps2=1e-12, max_saturation=100)
    assert stop and saturation == 0


def test_check_convergence_ignores_infinite_fitness():
    nests = np.array([[0.0], [1.0]])
    fitness = np.array([np.inf, np.inf])
    stop, _ = check_convergence(np.inf, np.inf, nests[0], fitness, nests,
                                saturation=0, eps1=1e-3, eps2=1e-12, max_saturation=100)
    assert not stop


# --- Driver ---

def test_driver_keeps_invariants(sphere_problem):
    """Population stays in bounds, keeps its size and the best fitness never rises."""
    solver = CuckooSearch(sphere_problem, random_seed=TEST_SEED, population_size=TEST_NA,
                          max_iterations=50, **NO_EARLY_STOP)
    previous_best = solver.best_fitness
    for _ in range(50):
        solver.evolve_one_generation()
        assert solver.nests.shape == (TEST_NA, 2)
        assert sphere_problem.boundaries.contains(solver.nests)
        assert solver.best_fitness <= previous_best
        assert solver.best_fitness == pytest.approx(solver.fitness.min())
        previous_best = solver.best_fitness


def test_budget_exhaustion_counts_steps_and_evaluations(sphere_problem):
    best_nest, best_fitness, details = CuckooSearch(
        sphere_problem, random_seed=TEST_SEED, population_size=TEST_NA,
        max_iterations=5, **NO_EARLY_STOP).run()
    assert details.outcome == OUTCOME_BUDGET_EXHAUSTED
    assert details.outmsg == 0
    assert details.steps == 5
    assert details.fevs == TEST_NA + 5 * 2 * TEST_NA
    assert best_fitness == pytest.approx(sphere(best_nest))


def test_same_seed_reproduces_the_run(sphere_problem):
    runs = [CuckooSearch(sphere_problem, random_seed=TEST_SEED, population_size=TEST_NA,
                         max_iterations=30).run() for _ in range(2)]
    np.testing.assert_array_equal(runs[0][0], runs[1][0])
    assert runs[0][1] == runs[1][1]
    assert runs[0][2].fevs == runs[1][2].fevs


def test_pool_evaluation_matches_sequential(sphere_problem):
    sequential = CuckooSearch(sphere_problem, random_seed=TEST_SEED, population_size=TEST_NA,
                              max_iterations=10).run()
    with ThreadPool(2) as pool:
        pooled = CuckooSearch(sphere_problem, random_seed=TEST_SEED, population_size=TEST_NA,
                              max_iterations=10, pool=pool).run()
    np.testing.assert_array_equal(sequential[0], pooled[0])


def test_single_nest_converges_immediately(sphere_problem):
    """With one nest neither move can change it and the population has collapsed."""
    solver = CuckooSearch(sphere_problem, random_seed=TEST_SEED, population_size=1)
    start = solver.nests.copy()
    best_nest, _, details = solver.run()
    np.testing.assert_array_equal(best_nest, start[0])
    assert details.outcome == OUTCOME_CONVERGED
    assert details.steps == 1
    assert details.fevs == 3


def test_objective_undefined_outside_bounds_is_never_seen():
    def guarded(x):
        return np.nan if np.any(np.abs(x) > 1000) else float(np.sum(x**2))

    problem = OptimizationProblem(guarded, TEST_BOUNDS)
    _, best_fitness, _ = CuckooSearch(problem, random_seed=TEST_SEED, alpha=1e6,
                                      max_iterations=20, **NO_EARLY_STOP).run()
    assert np.isfinite(best_fitness)


def test_unconstrained_run_survives_nan_objective():
    def guarded(x):
        return np.nan if np.any(np.abs(x) > 1000) else float(np.sum(x**2))

    problem = OptimizationProblem(guarded, TEST_BOUNDS)
    _, best_fitness, details = CuckooSearch(problem, random_seed=TEST_SEED, alpha=1e6,
                                            unconstrained=True, max_iterations=20,
                                            **NO_EARLY_STOP).run()
    assert np.isfinite(best_fitness)
    assert details.steps == 20


def test_degenerate_dimension_stays_fixed():
    problem = OptimizationProblem(sphere, [[-5.0, 5.0], [3.0, 3.0]])
    best_nest, _, _ = CuckooSearch(problem, random_seed=TEST_SEED, max_iterations=20).run()
    assert best_nest[1] == 3.0


def test_request_stop_and_time_limit(sphere_problem):
    solver = CuckooSearch(sphere_problem, random_seed=TEST_SEED)
    solver.request_stop()
    _, _, details = solver.run()
    assert details.outcome == OUTCOME_BUDGET_EXHAUSTED
    assert details.steps == 0
    assert details.fevs == 25

    _, _, details = CuckooSearch(sphere_problem, random_seed=TEST_SEED, time_limit=0.0).run()
    assert details.outcome == OUTCOME_BUDGET_EXHAUSTED
    assert details.steps == 0


def test_run_epoch_stops_at_the_ceiling(sphere_problem):
    solver = CuckooSearch(sphere_problem, random_seed=TEST_SEED, max_iterations=7, **NO_EARLY_STOP)
    solver.run_epoch(5)
    assert not solver.is_finished
    solver.run_epoch(5, current_gen_offset=5)
    assert solver.is_finished
    assert solver.details().steps == 7
    assert len(solver.history) == 8


def test_inject_nest_only_accepts_improvements(sphere_problem):
    solver = CuckooSearch(sphere_problem, random_seed=TEST_SEED, population_size=TEST_NA)
    evaluations = solver.evaluations
    # Projected onto the corner (10, 10), the worst point of the box
    assert not solver.inject_nest([50.0, 50.0])
    assert solver.inject_nest([0.0, 0.0])
    assert solver.best_fitness == 0.0
    np.testing.assert_array_equal(solver.get_best_nest(), [0.0, 0.0])
    assert solver.evaluations == evaluations + 2


def test_parameters_as_dict_and_overrides(sphere_problem):
    solver = CuckooSearch(sphere_problem, parameters={'NAG': 8, 'PD': 0.1}, alpha=0.5)
    assert solver.Na == 8
    assert solver.parameters.discovery_probability == pytest.approx(0.1)
    assert solver.parameters.alpha == pytest.approx(0.5)
    with pytest.raises(ValueError):
        CuckooSearch(sphere_problem, discovery_probability=2.0)


def test_rosenbrock_with_default_parameters():
    """Default stop criteria end the classic 2-D Rosenbrock run by convergence."""
    best_nest, best_fitness, details = cuckoo_search(
        'rosenbrock', [[-30.0, 30.0], [-30.0, 30.0]], random_seed=0, max_iterations=5000)
    assert details.outcome == OUTCOME_CONVERGED
    assert details.steps < 5000
    assert best_fitness < 1e-2
    assert best_nest == pytest.approx([1.0, 1.0], abs=0.2)
    assert details.fevs == 25 + 2 * 25 * details.steps


def test_rosenbrock_with_tight_tolerance():
    best_nest, best_fitness, details = cuckoo_search(
        rosenbrock, [[-5.0, 5.0], [-5.0, 5.0]], random_seed=TEST_SEED,
        eps1=1e-12, max_saturation=10**6, max_iterations=3000)
    assert best_fitness < 1e-3
    assert best_nest == pytest.approx([1.0, 1.0], abs=0.1)
    assert details.fevs == 25 + 2 * 25 * details.steps


def test_proportional_mode_finds_sphere_minimum():
    _, best_fitness, _ = cuckoo_search(
        'sphere', TEST_BOUNDS, parameters=CuckooParameters(discovery_mode='proportional'),
        random_seed=TEST_SEED, eps1=0.0, max_iterations=300)
    assert best_fitness < 1e-4
