"""Tabu Search for the job-shop scheduling problem."""

import logging
import random
import threading
from collections import deque
from typing import Deque, Iterator, List, Optional, Tuple

from jobshop.algorithms.base import Budget, SearchState, log_iteration, open_log_file
from jobshop.generator import generate_initial
from jobshop.models import ProblemModel, Solution
from jobshop.operations import random_swap, validate_schedule
from jobshop.params import TabuParams

logger = logging.getLogger("jobshop.tabu")

Move = Tuple[int, int]


class TabuList:
    """Bounded FIFO of recent moves; pairs compare regardless of order."""

    def __init__(self, tenure: int) -> None:
        if tenure <= 0:
            raise ValueError(f"tenure must be positive, got {tenure}")
        self.tenure = tenure
        self._moves: Deque[Move] = deque(maxlen=tenure)

    def push(self, move: Move) -> None:
        """Append ``move``; the oldest entry is dropped when full."""
        self._moves.append((move[0], move[1]))

    def __contains__(self, move: object) -> bool:
        if not isinstance(move, tuple) or len(move) != 2:
            return False
        a, b = move
        return any((x == a and y == b) or (x == b and y == a) for x, y in self._moves)

    def __len__(self) -> int:
        return len(self._moves)

    def __iter__(self) -> Iterator[Move]:
        return iter(self._moves)


def leading_pair(schedule: Tuple[int, ...]) -> Move:
    """Job pair at schedule positions 0 and 1."""
    second = schedule[1] if len(schedule) > 1 else schedule[0]
    return schedule[0], second


def best_of_sampled_swaps(
    model: ProblemModel,
    current: Solution,
    samples: int,
    rng: random.Random,
    keep_current: bool = True,
) -> Tuple[Solution, Optional[Move]]:
    """Sample ``samples`` random swaps of ``current`` and keep the lowest makespan.

    With ``keep_current`` the search starts from ``current`` itself, so a
    sample only wins when it is strictly better; ``(current, None)`` is
    returned when none is. Otherwise the best sample wins even if worse.
    Ties keep the earliest candidate.

    Raises:
        ValueError: If ``samples`` is smaller than 1.
    """
    if samples < 1:
        raise ValueError(f"samples must be at least 1, got {samples}")
    best: Optional[Solution] = current if keep_current else None
    best_move: Optional[Move] = None
    for _ in range(samples):
        schedule, move = random_swap(current.schedule, rng)
        candidate = Solution.of(model, schedule)
        if best is None or candidate.makespan < best.makespan:
            best = candidate
            best_move = move
    return best, best_move


def optimize(
    model: ProblemModel,
    params: Optional[TabuParams] = None,
    rng: Optional[random.Random] = None,
    *,
    initial: Optional[Solution] = None,
    progress: Optional[List[int]] = None,
    time_progress: Optional[List[float]] = None,
    current_progress: Optional[List[int]] = None,
    iter_log_path: Optional[str] = None,
    stop_event: Optional[threading.Event] = None,
    tabu_list: Optional[TabuList] = None,
) -> Solution:
    """Tabu Search core loop.

    Notes:
        - Neighbourhood: ``params.neighbors`` random two-position swaps
          (number of jobs by default).
        - ``neighbor_choice="improving"``: only a sample strictly better
          than the current solution becomes the candidate; without one the
          current solution is kept and nothing is pushed (with
          ``move_identity="swap"``). ``"best_sampled"`` takes the best
          sample even when it is worse.
        - Move identity follows ``params.move_identity``; ``"leading_pair"``
          is derived from the candidate, which may be the current solution.
        - Aspiration: a tabu move is taken if it improves the global best.
        - A rejected tabu move leaves the current solution unchanged.

    Args (selected):
        tabu_list: Optional pre-built list (lets callers inspect it after
            the run); a fresh ``TabuList(params.tenure)`` otherwise.

    Returns:
        Best solution found.
    """
    params = params or TabuParams()
    if rng is None:
        rng = random.Random()
    if initial is None:
        initial = generate_initial(model, rng)
    else:
        validate_schedule(model, initial.schedule)
    if tabu_list is None:
        tabu_list = TabuList(params.tenure)
    samples = params.neighbors if params.neighbors is not None else model.num_jobs
    keep_current = params.neighbor_choice == "improving"

    budget = Budget(params.iterations, params.time_limit_ms, stop_event)
    state = SearchState(current=initial, best=initial, start_time=budget.start_time)
    tabu_hits = 0
    aspirations = 0
    logger.info(
        "[tabu] start makespan=%d tenure=%d neighbors=%d choice=%s move=%s",
        initial.makespan,
        params.tenure,
        samples,
        params.neighbor_choice,
        params.move_identity,
    )

    with open_log_file(iter_log_path, "tabu") as log_file:
        while True:
            reason = budget.exhausted(state.iteration)
            if reason is not None:
                break
            neighbor, move = best_of_sampled_swaps(
                model, state.current, samples, rng, keep_current=keep_current
            )
            if params.move_identity == "leading_pair":
                move = leading_pair(neighbor.schedule)

            if move is not None:
                is_tabu = move in tabu_list
                if is_tabu:
                    tabu_hits += 1
                if not is_tabu or neighbor.makespan < state.best.makespan:
                    if is_tabu:
                        aspirations += 1
                    state.current = neighbor
                    tabu_list.push(move)

            if state.update_best():
                logger.debug("[tabu] iter %d new best=%d", state.iteration, state.best.makespan)
            state.record(progress, time_progress, current_progress)
            log_iteration(log_file, state)
            state.iteration += 1

    logger.info(
        "[tabu] stop (%s) iter=%d best=%d tabu_hits=%d aspirations=%d",
        reason,
        state.iteration,
        state.best.makespan,
        tabu_hits,
        aspirations,
    )
    return state.best
