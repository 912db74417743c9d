"""Generational genetic algorithm for the job-shop scheduling problem."""

import logging
import random
import threading
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from jobshop.algorithms.base import Budget, SearchState, log_iteration, open_log_file
from jobshop.evaluation import evaluate_many
from jobshop.generator import create_random_schedule
from jobshop.models import ProblemModel, Solution
from jobshop.params import GeneticParams

logger = logging.getLogger("jobshop.genetic")


def tournament_selection(
    population: Sequence[Solution], size: int, rng: random.Random
) -> Solution:
    """Draw ``size`` individuals with replacement and return the fittest."""
    best = population[rng.randrange(len(population))]
    for _ in range(size - 1):
        contender = population[rng.randrange(len(population))]
        if contender.makespan < best.makespan:
            best = contender
    return best


def prefix_crossover(
    parent_a: Sequence[int], parent_b: Sequence[int], cut: int
) -> Tuple[List[int], List[int]]:
    """Exchange the first ``cut`` genes of the two parents.

    Per-job occurrence counts are not preserved in general.
    """
    child_a = list(parent_b[:cut]) + list(parent_a[cut:])
    child_b = list(parent_a[:cut]) + list(parent_b[cut:])
    return child_a, child_b


def _order_fill(prefix: Sequence[int], donor: Sequence[int]) -> List[int]:
    # remaining occurrences per job after the kept prefix
    remaining = Counter(donor)
    remaining.subtract(prefix)
    child = list(prefix)
    for job in donor:
        if remaining[job] > 0:
            child.append(job)
            remaining[job] -= 1
    return child


def order_crossover(
    parent_a: Sequence[int], parent_b: Sequence[int], cut: int
) -> Tuple[List[int], List[int]]:
    """Job-order crossover preserving the multiset of job indices.

    Child A keeps parent A's first ``cut`` genes and receives the missing
    occurrences in the order they appear in parent B; child B likewise with
    the parents' roles exchanged.
    """
    return _order_fill(parent_a[:cut], parent_b), _order_fill(parent_b[:cut], parent_a)


def mutate(schedule: List[int], rate: float, rng: random.Random) -> bool:
    """With probability ``rate`` swap two random positions in place."""
    if rng.random() < rate:
        n = len(schedule)
        i = rng.randrange(n)
        j = rng.randrange(n)
        schedule[i], schedule[j] = schedule[j], schedule[i]
        return True
    return False


def breed(
    parent_a: Solution,
    parent_b: Solution,
    params: GeneticParams,
    rng: random.Random,
) -> Tuple[List[int], List[int]]:
    """Crossover (with probability ``crossover_rate``) followed by mutation."""
    child_a = list(parent_a.schedule)
    child_b = list(parent_b.schedule)
    if rng.random() < params.crossover_rate:
        cut = rng.randrange(len(child_a))
        if params.crossover == "prefix":
            child_a, child_b = prefix_crossover(child_a, child_b, cut)
        else:
            child_a, child_b = order_crossover(child_a, child_b, cut)
    mutate(child_a, params.mutation_rate, rng)
    mutate(child_b, params.mutation_rate, rng)
    return child_a, child_b


def optimize(
    model: ProblemModel,
    params: Optional[GeneticParams] = None,
    rng: Optional[random.Random] = None,
    *,
    progress: Optional[List[int]] = None,
    time_progress: Optional[List[float]] = None,
    iter_log_path: Optional[str] = None,
    stop_event: Optional[threading.Event] = None,
) -> Solution:
    """Genetic algorithm with tournament selection and full replacement.

    Parameters:
        model: problem instance
        params: population size, generations, rates, crossover kind
        rng: random source (fresh unseeded one if None)
        progress: filled with best-so-far makespan per generation
        time_progress: filled with elapsed seconds per generation
        iter_log_path: path to CSV log file (one row per generation, the
            "current" column is the generation's best individual)
        stop_event: cancellation token checked between generations

    Returns:
        Best solution over all generations.
    """
    params = params or GeneticParams()
    if rng is None:
        rng = random.Random()

    schedules = [create_random_schedule(model, rng=rng) for _ in range(params.population_size)]
    makespans = evaluate_many(model, schedules, workers=params.workers)
    population = [Solution(tuple(s), c) for s, c in zip(schedules, makespans)]
    seed_best = min(population, key=lambda sol: sol.makespan)

    budget = Budget(params.generations, params.time_limit_ms, stop_event)
    state = SearchState(current=seed_best, best=seed_best, start_time=budget.start_time)
    logger.info(
        "[genetic] start best=%d population=%d crossover=%s",
        seed_best.makespan,
        params.population_size,
        params.crossover,
    )

    with open_log_file(iter_log_path, "genetic") as log_file:
        while True:
            reason = budget.exhausted(state.iteration)
            if reason is not None:
                break
            offspring: List[List[int]] = []
            while len(offspring) < params.population_size:
                parent_a = tournament_selection(population, params.tournament_size, rng)
                parent_b = tournament_selection(population, params.tournament_size, rng)
                offspring.extend(breed(parent_a, parent_b, params, rng))
            offspring = offspring[: params.population_size]

            makespans = evaluate_many(model, offspring, workers=params.workers)
            population = [Solution(tuple(s), c) for s, c in zip(offspring, makespans)]

            state.current = min(population, key=lambda sol: sol.makespan)
            if state.update_best():
                logger.debug(
                    "[genetic] generation %d new best=%d", state.iteration, state.best.makespan
                )
            state.record(progress, time_progress)
            log_iteration(log_file, state)
            state.iteration += 1

    logger.info(
        "[genetic] stop (%s) generations=%d best=%d", reason, state.iteration, state.best.makespan
    )
    return state.best
