"""Shared primitives used by execution modes.

``run_algorithm`` is the thin dispatch helper every mode goes through, so
timing and progress collection live in one place.
"""
from __future__ import annotations

import random
import time
from typing import Any

from jobshop.algorithms import optimize
from jobshop.models import ProblemModel, Solution


def run_algorithm(
    name: str,
    model: ProblemModel,
    params: Any,
    rng: random.Random,
    progress: list[int] | None = None,
    time_progress: list[float] | None = None,
    iter_log_path: str | None = None,
) -> tuple[Solution, float]:
    """Execute selected algorithm and return its result and runtime.

    Args:
        name: One of ``{"ant_colony", "genetic", "annealing", "tabu"}``.
        model: Problem instance.
        params: Parameter bundle matching ``name`` (None -> defaults).
        rng: Random generator forwarded to the metaheuristic.
        progress: Optional list mutated in-place with best-so-far makespan
            per iteration.
        time_progress: Optional list mutated with elapsed wall times (s).
        iter_log_path: Optional per-iteration CSV trace.

    Returns:
        Tuple ``(solution, elapsed_seconds)``.

    Raises:
        ValueError: If an unknown algorithm name is provided.
    """
    t0 = time.perf_counter()
    solution = optimize(
        name,
        model,
        params,
        rng,
        progress=progress,
        time_progress=time_progress,
        iter_log_path=iter_log_path,
    )
    return solution, time.perf_counter() - t0
