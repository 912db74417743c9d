"""Makespan evaluation of dispatch-order schedules.

``evaluate`` is the hot path of every strategy, so it works on plain lists
and never builds the full timeline (see :mod:`jobshop.decoder` for that).
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Sequence

from .errors import InvalidSchedule
from .models import ProblemModel


def evaluate(schedule: Sequence[int], model: ProblemModel) -> int:
    """Return the makespan of ``schedule``.

    Walks the schedule left to right; each occurrence of job ``j`` dispatches
    its next pending operation at ``max(machine ready, job ready)``.
    Occurrences beyond a job's operation count are skipped.

    Raises:
        InvalidSchedule: On a job index outside ``[0, num_jobs)``.
    """
    jobs = model.jobs
    num_jobs = len(jobs)
    machine_time = [0] * model.num_machines
    job_time = [0] * num_jobs
    cursor = [0] * num_jobs
    for job in schedule:
        if not 0 <= job < num_jobs:
            raise InvalidSchedule(f"Job index out of range: {job!r}")
        k = cursor[job]
        ops = jobs[job]
        if k >= len(ops):
            continue
        cursor[job] = k + 1
        machine, duration = ops[k]
        start = machine_time[machine]
        if job_time[job] > start:
            start = job_time[job]
        end = start + duration
        machine_time[machine] = end
        job_time[job] = end
    return max(machine_time)


def evaluate_many(
    model: ProblemModel,
    schedules: Iterable[Sequence[int]],
    workers: int = 1,
) -> list[int]:
    """Evaluate a batch of schedules, preserving input order.

    With ``workers > 1`` the batch is spread over a thread pool and the call
    returns once every schedule has been scored.
    """
    batch = list(schedules)
    if workers <= 1 or len(batch) <= 1:
        return [evaluate(s, model) for s in batch]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(evaluate, batch, [model] * len(batch)))
