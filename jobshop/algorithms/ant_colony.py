"""Ant Colony Optimization for the job-shop scheduling problem.

Ants build schedules position by position. At dispatch position ``p`` every
still-selectable job gets the score
``pheromone[p][job] ** alpha * (1 / (job_duration + 1)) ** beta`` and one job
is drawn by roulette wheel. After each iteration all trails evaporate and
every ant reinforces ``pheromone[a][b]`` for each adjacent pair ``(a, b)`` of
jobs in its construction order.

Two readings of "selectable" are supported (``AntColonyParams.exhaustion``):

* ``"operations"`` -- a job is selectable until all of its operations were
  dispatched, so the construction is directly a full schedule.
* ``"single_visit"`` -- a job is selectable only once; the resulting job
  order is expanded into a block schedule where each job runs all of its
  operations back to back at its turn.
"""

import logging
import math
import random
import threading
from typing import List, Optional, Sequence

from jobshop.algorithms.base import Budget, SearchState, log_iteration, open_log_file
from jobshop.evaluation import evaluate_many
from jobshop.generator import generate_initial
from jobshop.models import ProblemModel, Solution
from jobshop.operations import expand_job_order
from jobshop.params import AntColonyParams

logger = logging.getLogger("jobshop.ant_colony")

PheromoneMatrix = List[List[float]]


def init_pheromone(size: int, value: float = 1.0) -> PheromoneMatrix:
    return [[value] * size for _ in range(size)]


def heuristic_weights(model: ProblemModel, beta: float) -> List[float]:
    """``(1 / (makespan of the job alone + 1)) ** beta`` per job."""
    return [(1.0 / (model.job_duration(j) + 1)) ** beta for j in range(model.num_jobs)]


def roulette_select(
    candidates: Sequence[int], scores: Sequence[float], rng: random.Random
) -> int:
    """Pick a candidate with probability proportional to its score.

    Falls back to a uniform pick when every score is zero (e.g. after the
    trails of a position evaporated below float resolution).
    """
    total = sum(scores)
    if not total > 0.0 or math.isinf(total):
        return rng.choice(list(candidates))
    r = rng.random() * total
    cumulative = 0.0
    for job, score in zip(candidates, scores):
        cumulative += score
        if r < cumulative:
            return job
    return candidates[-1]


def construct_order(
    model: ProblemModel,
    pheromone: PheromoneMatrix,
    weights: Sequence[float],
    params: AntColonyParams,
    rng: random.Random,
) -> List[int]:
    """One ant's construction order (length num_tasks or num_jobs)."""
    if params.exhaustion == "single_visit":
        remaining = [1] * model.num_jobs
    else:
        remaining = list(model.operation_counts)
    steps = sum(remaining)
    alpha = params.alpha
    order: List[int] = []
    for position in range(steps):
        row = pheromone[position]
        candidates = [j for j, left in enumerate(remaining) if left > 0]
        scores = [(row[j] ** alpha) * weights[j] for j in candidates]
        job = roulette_select(candidates, scores, rng)
        remaining[job] -= 1
        order.append(job)
    return order


def update_pheromone(
    pheromone: PheromoneMatrix,
    orders: Sequence[Sequence[int]],
    makespans: Sequence[int],
    evaporation: float,
    q: float,
) -> None:
    """Evaporate every trail, then deposit ``q / makespan`` along each order."""
    keep = 1.0 - evaporation
    for row in pheromone:
        for i in range(len(row)):
            row[i] *= keep
    for order, makespan in zip(orders, makespans):
        deposit = q / makespan if makespan > 0 else q
        for a, b in zip(order, order[1:]):
            pheromone[a][b] += deposit


def optimize(
    model: ProblemModel,
    params: Optional[AntColonyParams] = None,
    rng: Optional[random.Random] = None,
    *,
    progress: Optional[List[int]] = None,
    time_progress: Optional[List[float]] = None,
    iter_log_path: Optional[str] = None,
    stop_event: Optional[threading.Event] = None,
    pheromone: Optional[PheromoneMatrix] = None,
) -> Solution:
    """Ant Colony Optimization main loop.

    Parameters:
        model: problem instance
        params: colony size, iterations, alpha/beta, evaporation, q, exhaustion
        rng: random source (fresh unseeded one if None); ants are built
            sequentially from it, only their evaluation is parallel
        progress: filled with best-so-far makespan per iteration
        time_progress: filled with elapsed seconds per iteration
        iter_log_path: path to CSV log file ("current" = iteration-best ant)
        stop_event: cancellation token checked between iterations
        pheromone: optional num_tasks x num_tasks matrix owned by the caller
            (initialised to 1.0 when omitted); updated in place

    Returns:
        Best solution over the random baseline and all ants.
    """
    params = params or AntColonyParams()
    if rng is None:
        rng = random.Random()
    size = model.num_tasks
    if pheromone is None:
        pheromone = init_pheromone(size)
    elif len(pheromone) != size or any(len(row) != size for row in pheromone):
        raise ValueError(f"pheromone matrix must be {size}x{size}")
    weights = heuristic_weights(model, params.beta)

    baseline = generate_initial(model, rng)
    budget = Budget(params.iterations, params.time_limit_ms, stop_event)
    state = SearchState(current=baseline, best=baseline, start_time=budget.start_time)
    logger.info(
        "[ant_colony] start baseline=%d ants=%d exhaustion=%s",
        baseline.makespan,
        params.num_ants,
        params.exhaustion,
    )

    with open_log_file(iter_log_path, "ant_colony") as log_file:
        while True:
            reason = budget.exhausted(state.iteration)
            if reason is not None:
                break
            orders: List[List[int]] = []
            schedules: List[List[int]] = []
            for _ in range(params.num_ants):
                order = construct_order(model, pheromone, weights, params, rng)
                orders.append(order)
                if params.exhaustion == "single_visit":
                    schedules.append(expand_job_order(model, order))
                else:
                    schedules.append(order)
            makespans = evaluate_many(model, schedules, workers=params.workers)

            ants = [Solution(tuple(s), c) for s, c in zip(schedules, makespans)]
            state.current = min(ants, key=lambda sol: sol.makespan)
            if state.update_best():
                logger.debug(
                    "[ant_colony] iter %d new best=%d", state.iteration, state.best.makespan
                )

            update_pheromone(pheromone, orders, makespans, params.evaporation, params.q)
            state.record(progress, time_progress)
            log_iteration(log_file, state)
            state.iteration += 1

    logger.info(
        "[ant_colony] stop (%s) iter=%d best=%d", reason, state.iteration, state.best.makespan
    )
    return state.best
