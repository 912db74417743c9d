"""Built-in in-memory instances."""

import random

from jobshop.models import ProblemModel

REFERENCE_JOBS = [
    [(0, 3), (1, 2), (2, 2)],
    [(0, 2), (1, 1), (2, 4)],
    [(0, 4), (1, 3), (2, 3)],
]


def reference_instance() -> ProblemModel:
    """Three jobs on three machines, each job visiting M0 -> M1 -> M2."""
    return ProblemModel.from_lists(REFERENCE_JOBS, num_machines=3)


def random_instance(
    num_jobs: int, num_machines: int, seed: int = 0, low: int = 1, high: int = 99
) -> ProblemModel:
    """Generate a Taillard-like job-shop instance.

    Every job visits every machine exactly once in a random order; durations
    are uniform integers in ``[low, high]``.
    """
    if num_jobs <= 0 or num_machines <= 0:
        raise ValueError("num_jobs and num_machines must be positive")
    rng = random.Random(seed)
    jobs = []
    for _ in range(num_jobs):
        machines = list(range(num_machines))
        rng.shuffle(machines)
        jobs.append([(m, rng.randint(low, high)) for m in machines])
    return ProblemModel.from_lists(jobs, num_machines=num_machines)
