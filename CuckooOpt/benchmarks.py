# CuckooOpt/benchmarks.py
"""Benchmark objective functions for the CuckooOpt package.

Every benchmark is a pure function of a 1-D vector returning a scalar. The
functions and their default search boxes follow:

1. Jamil, M. & Yang, X. S. A literature survey of benchmark functions for
   global optimisation problems. Int. J. Math. Model. Numer. Optim. 4, 150 (2013).
2. Soneji, H. & Sanghvi, R. C. Towards the improvement of Cuckoo search
   algorithm. Int. J. Comput. Inf. Syst. Ind. Manag. Appl. 6, 77-88 (2014).
3. Rakhshani, H. & Rahati, A. Intelligent Multiple Search Strategy Cuckoo
   Algorithm for Numerical and Engineering Optimization Problems. Arab. J.
   Sci. Eng. (2016). doi:10.1007/s13369-016-2270-8
"""
import math

import numpy as np


def ackley1(x):
    """Ackley 1 from [1]. Global minimum 0 at the origin."""
    x = np.asarray(x, dtype=float)
    n = x.size
    return float(-20.0 * np.exp(-0.02 * np.sqrt(np.sum(x**2) / n))
                 - np.exp(np.sum(np.cos(2.0 * np.pi * x)) / n) + 20.0 + math.e)


def beale(x):
    """Beale from [1]. Global minimum 0 at (3, 0.5)."""
    x1, x2 = float(x[0]), float(x[1])
    return ((1.5 - x1 + x1 * x2)**2 + (2.25 - x1 + x1 * x2**2)**2
            + (2.625 - x1 + x1 * x2**3)**2)


def bird(x):
    """Bird from [1]. Global minimum about -106.7645 at (4.7010, 3.1529)."""
    x1, x2 = float(x[0]), float(x[1])
    return (math.sin(x1) * math.exp((1 - math.cos(x2))**2)
            + math.cos(x2) * math.exp((1 - math.sin(x1))**2) + (x1 - x2)**2)


def rosenbrock(x):
    """Rosenbrock from [1]. Global minimum 0 at (1, ..., 1)."""
    x = np.asarray(x, dtype=float)
    return float(np.sum(100.0 * (x[1:] - x[:-1]**2)**2 + (x[:-1] - 1.0)**2))


def rastrigin(x):
    """Rastrigin from [2]. Global minimum 0 at the origin."""
    x = np.asarray(x, dtype=float)
    return float(10.0 * x.size + np.sum(x**2 - 10.0 * np.cos(2.0 * np.pi * x)))


def sphere(x):
    x = np.asarray(x, dtype=float)
    return float(np.sum(x**2))


# Welded beam design constants from [3]
WB_LOAD = 6000.0            # P, lb
WB_LENGTH = 14.0            # L, in
WB_YOUNG = 30e6             # E, psi
WB_SHEAR_MODULUS = 12e6     # G, psi
WB_TAU_MAX = 13600.0        # psi
WB_SIGMA_MAX = 30000.0      # psi
WB_DELTA_MAX = 0.25         # in
WB_PENALTY = 1e6


def welded_beam_constraints(x):
    """Returns the seven ``g_i(x) <= 0`` constraints of the welded beam design."""
    h, l, t, b = (float(v) for v in x[:4])
    P, L, E, G = WB_LOAD, WB_LENGTH, WB_YOUNG, WB_SHEAR_MODULUS

    tau_p = P / (math.sqrt(2.0) * h * l)
    M = P * (L + l / 2.0)
    R = math.sqrt(l**2 / 4.0 + ((h + t) / 2.0)**2)
    J = 2.0 * (math.sqrt(2.0) * h * l * (l**2 / 12.0 + ((h + t) / 2.0)**2))
    tau_pp = M * R / J
    tau = math.sqrt(tau_p**2 + 2.0 * tau_p * tau_pp * l / (2.0 * R) + tau_pp**2)
    sigma = 6.0 * P * L / (b * t**2)
    delta = 4.0 * P * L**3 / (E * t**3 * b)
    P_c = (4.013 * E * math.sqrt(t**2 * b**6 / 36.0) / L**2) \
        * (1.0 - t / (2.0 * L) * math.sqrt(E / (4.0 * G)))

    return np.array([
        tau - WB_TAU_MAX,
        sigma - WB_SIGMA_MAX,
        h - b,
        0.10471 * h**2 + 0.04811 * t * b * (14.0 + l) - 5.0,
        0.125 - h,
        delta - WB_DELTA_MAX,
        P - P_c,
    ])


def welded_beam_design(x):
    """Welded beam design cost from [3] with a static quadratic penalty.

    The design vector is ``[h, l, t, b]`` (weld thickness, weld length, bar
    height, bar thickness). The best known cost is about 1.7249.
    """
    h, l, t, b = (float(v) for v in x[:4])
    cost = 1.10471 * h**2 * l + 0.04811 * t * b * (14.0 + l)
    violation = np.maximum(welded_beam_constraints(x), 0.0)
    return cost + WB_PENALTY * float(np.sum(violation**2))


class Benchmark:
    def __init__(self, function, bounds, dimensions, fixed_dimensions=False):
        self.function = function
        self.bounds = bounds            # (lower, upper) applied to every dimension
        self.dimensions = dimensions    # default Nd
        self.fixed_dimensions = fixed_dimensions


BENCHMARKS = {
    'ackley1': Benchmark(ackley1, (-35.0, 35.0), 2),
    'beale': Benchmark(beale, (-35.0, 35.0), 2, fixed_dimensions=True),
    'bird': Benchmark(bird, (-2 * math.pi, 2 * math.pi), 2, fixed_dimensions=True),
    'rosenbrock': Benchmark(rosenbrock, (-30.0, 30.0), 2),
    'rastrigin': Benchmark(rastrigin, (-1.0, 1.0), 2),
    'sphere': Benchmark(sphere, (-10.0, 10.0), 2),
    'welded_beam_design': Benchmark(welded_beam_design, (0.1, 10.0), 4, fixed_dimensions=True),
}


def get_benchmark(name):
    """Looks up a benchmark by (case-insensitive) name."""
    key = str(name).strip().lower()
    if key not in BENCHMARKS:
        raise ValueError(f"Unknown benchmark '{name}'. Available: {', '.join(sorted(BENCHMARKS))}")
    return BENCHMARKS[key]


def resolve_objective(objective):
    """Returns ``objective`` if it is callable, otherwise the benchmark it names."""
    if callable(objective):
        return objective
    if isinstance(objective, str):
        return get_benchmark(objective).function
    raise TypeError(f"The objective must be callable or a benchmark name, got {type(objective).__name__}.")


def default_boundaries(name, dimensions=None):
    """Builds the Nd-by-2 boundary matrix of a benchmark.

    Parameters
    ----------
    name : str
        Benchmark name.
    dimensions : int, optional
        Number of design variables. Defaults to the benchmark's own.

    Returns
    -------
    numpy.ndarray
        Matrix of shape (Nd, 2).

    """
    benchmark = get_benchmark(name)
    if dimensions is None or dimensions <= 0:
        dimensions = benchmark.dimensions
    if benchmark.fixed_dimensions and dimensions != benchmark.dimensions:
        raise ValueError(f"Benchmark '{name}' is defined for {benchmark.dimensions} dimensions only.")
    return np.ones((dimensions, 1)) * np.array(benchmark.bounds)
