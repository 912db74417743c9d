"""Schedule utilities: creation, validation and elementary moves.

Concepts
--------
Schedule
    A sequence of job indices. Job ``j`` appears exactly as many times as it
    has operations; its k-th occurrence dispatches its k-th operation. Every
    ordering of that multiset is feasible, so neighbourhood moves only need
    to permute positions.
"""

from __future__ import annotations

import random
from collections import Counter
from typing import Sequence

from jobshop.errors import InvalidSchedule
from jobshop.models import ProblemModel


def create_base_schedule(model: ProblemModel) -> list[int]:
    """Create the canonical job-major schedule ``[0, 0, .., 1, 1, ..]``.

    Args:
        model: Problem instance.

    Returns:
        List where job ``j`` is repeated once per operation, jobs ascending.
        Useful as a deterministic start and as the multiset to shuffle.
    """
    schedule: list[int] = []
    for job, count in enumerate(model.operation_counts):
        schedule.extend([job] * count)
    return schedule


def validate_schedule(model: ProblemModel, schedule: Sequence[int]) -> bool:
    """Validate a schedule's length and per-job occurrence counts.

    Args:
        model: Problem instance supplying each job's operation count.
        schedule: Candidate dispatch order.

    Returns:
        True if the schedule is valid (handy inside assertions).

    Raises:
        InvalidSchedule: If the length is wrong, a job index is out of range,
            or a job occurs a different number of times than it has
            operations.
    """
    if len(schedule) != model.num_tasks:
        raise InvalidSchedule(
            f"Schedule length {len(schedule)} does not match {model.num_tasks} operations"
        )
    counts = Counter(schedule)
    for job in counts:
        if not isinstance(job, int) or not (0 <= job < model.num_jobs):
            raise InvalidSchedule(f"Job index out of range: {job!r}")
    for job, expected in enumerate(model.operation_counts):
        if counts.get(job, 0) != expected:
            raise InvalidSchedule(
                f"Job {job} appears {counts.get(job, 0)} times, expected {expected}"
            )
    return True


def swap_positions(schedule: Sequence[int], i: int, j: int) -> list[int]:
    """Return a copy of ``schedule`` with positions ``i`` and ``j`` swapped."""
    new_schedule = list(schedule)
    new_schedule[i], new_schedule[j] = new_schedule[j], new_schedule[i]
    return new_schedule


def random_swap(
    schedule: Sequence[int], rng: random.Random
) -> tuple[list[int], tuple[int, int]]:
    """Swap two uniformly drawn positions (they may coincide).

    Returns:
        ``(new_schedule, (job_a, job_b))`` where the pair holds the job
        indices that were exchanged, i.e. the move identity used by tabu
        search.
    """
    n = len(schedule)
    i = rng.randrange(n)
    j = rng.randrange(n)
    return swap_positions(schedule, i, j), (schedule[i], schedule[j])


def expand_job_order(model: ProblemModel, job_order: Sequence[int]) -> list[int]:
    """Expand an order of distinct jobs into a block schedule.

    Each job's operations are dispatched back to back at the job's turn,
    e.g. ``[2, 0, 1]`` with three operations per job becomes
    ``[2, 2, 2, 0, 0, 0, 1, 1, 1]``.
    """
    schedule: list[int] = []
    for job in job_order:
        schedule.extend([job] * model.operation_counts[job])
    return schedule
