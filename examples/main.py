import numpy as np

import CuckooOpt

if __name__ == "__main__":
    # Run an optimization by passing parameters as keyword arguments
    CuckooOpt.run(
        benchmark='rosenbrock',
        dimensions=2,
        epochs=10,
        generations_per_epoch=100,
        random_seed=42,
    )

    # Islands with migration on a multimodal benchmark
    print("\nStarting a parallel Rastrigin run...\n")
    CuckooOpt.run(
        benchmark='rastrigin',
        dimensions=5,
        epochs=5,
        number_of_workers=4,
        random_seed=7,
    )

    # Library-level call with a user-defined objective
    best_nest, best_fitness, details = CuckooOpt.cuckoo_search(
        lambda x: float(np.sum((x - 0.5)**2)),
        [[-5, 5]] * 3,
        random_seed=0,
        eps1=1e-10,
        max_iterations=500,
    )
    print(f"\nShifted sphere: f={best_fitness:.3e} at {best_nest} ({details.as_dict()})")
