"""Search algorithms for the job-shop scheduling problem.

Contains:
- Ant Colony Optimization
- Genetic Algorithm
- Simulated Annealing
- Tabu Search

Every strategy exposes ``optimize(model, params=None, rng=None, **kw)`` and
returns the best :class:`~jobshop.models.Solution` it found.
"""

import random
from typing import Any, Callable, Optional

from jobshop.algorithms import ant_colony, annealing, genetic, tabu
from jobshop.models import ProblemModel, Solution
from jobshop.params import PARAMS_BY_ALGORITHM

STRATEGIES: dict[str, Callable[..., Solution]] = {
    "ant_colony": ant_colony.optimize,
    "genetic": genetic.optimize,
    "annealing": annealing.optimize,
    "tabu": tabu.optimize,
}


def optimize(
    name: str,
    model: ProblemModel,
    params: Any = None,
    rng: Optional[random.Random] = None,
    **kwargs: Any,
) -> Solution:
    """Run strategy ``name`` on ``model``.

    Raises:
        ValueError: Unknown strategy or a parameter bundle of another strategy.
    """
    if name not in STRATEGIES:
        raise ValueError(f"Unknown algorithm: {name}")
    expected = PARAMS_BY_ALGORITHM[name]
    if params is not None and not isinstance(params, expected):
        raise ValueError(f"{name} expects {expected.__name__}, got {type(params).__name__}")
    return STRATEGIES[name](model, params, rng, **kwargs)


__all__ = ["STRATEGIES", "optimize", "ant_colony", "annealing", "genetic", "tabu"]
