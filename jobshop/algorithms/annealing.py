"""Simulated Annealing for the job-shop scheduling problem."""

import logging
import math
import random
import threading
from typing import List, Optional

from jobshop.algorithms.base import Budget, SearchState, log_iteration, open_log_file
from jobshop.generator import generate_initial
from jobshop.models import ProblemModel, Solution
from jobshop.operations import random_swap, validate_schedule
from jobshop.params import AnnealingParams

logger = logging.getLogger("jobshop.annealing")


def acceptance_probability(old_cost: int, new_cost: int, temperature: float) -> float:
    """Boltzmann acceptance: 1 for improvements, ``exp((old - new) / T)`` otherwise."""
    if new_cost < old_cost:
        return 1.0
    if temperature <= 0.0:
        return 0.0
    return math.exp((old_cost - new_cost) / temperature)


def accept(old_cost: int, new_cost: int, temperature: float, rng: random.Random) -> bool:
    if new_cost < old_cost:
        return True
    return rng.random() < acceptance_probability(old_cost, new_cost, temperature)


def optimize(
    model: ProblemModel,
    params: Optional[AnnealingParams] = None,
    rng: Optional[random.Random] = None,
    *,
    initial: Optional[Solution] = None,
    progress: Optional[List[int]] = None,
    time_progress: Optional[List[float]] = None,
    current_progress: Optional[List[int]] = None,
    iter_log_path: Optional[str] = None,
    stop_event: Optional[threading.Event] = None,
) -> Solution:
    """Simulated Annealing with geometric cooling.

    Parameters:
        model: problem instance
        params: iterations, initial temperature, cooling rate, time limit
        rng: random source (fresh unseeded one if None)
        initial: optional start solution (random one otherwise)
        progress: filled with best-so-far makespan per iteration
        time_progress: filled with elapsed seconds per iteration
        current_progress: filled with current makespan per iteration
        iter_log_path: path to CSV log file
        stop_event: cancellation token checked between iterations

    Returns:
        Best solution found.
    """
    params = params or AnnealingParams()
    if rng is None:
        rng = random.Random()
    if initial is None:
        initial = generate_initial(model, rng)
    else:
        validate_schedule(model, initial.schedule)

    budget = Budget(params.iterations, params.time_limit_ms, stop_event)
    state = SearchState(current=initial, best=initial, start_time=budget.start_time)
    temperature = params.initial_temperature
    accepted = 0
    logger.info(
        "[annealing] start makespan=%d T0=%.2f cooling=%.4f iterations=%d",
        initial.makespan,
        temperature,
        params.cooling_rate,
        params.iterations,
    )

    with open_log_file(iter_log_path, "annealing") as log_file:
        while True:
            reason = budget.exhausted(state.iteration)
            if reason is not None:
                break
            new_schedule, _ = random_swap(state.current.schedule, rng)
            neighbor = Solution.of(model, new_schedule)

            if accept(state.current.makespan, neighbor.makespan, temperature, rng):
                state.current = neighbor
                accepted += 1
                if state.update_best():
                    logger.debug(
                        "[annealing] iter %d new best=%d T=%.4f",
                        state.iteration,
                        state.best.makespan,
                        temperature,
                    )

            state.record(progress, time_progress, current_progress)
            log_iteration(log_file, state)
            state.iteration += 1

            # Cooling
            temperature *= params.cooling_rate

    logger.info(
        "[annealing] stop (%s) iter=%d best=%d accepted=%d T=%.4f",
        reason,
        state.iteration,
        state.best.makespan,
        accepted,
        temperature,
    )
    return state.best
