from typing import Iterable

from .errors import InvalidSchedule
from .models import ProblemModel, ScheduledOperation, Timeline
from .operations import validate_schedule


def build_timeline(
    model: ProblemModel,
    schedule: Iterable[int],
    validate: bool = False,
) -> Timeline:
    """Decode a schedule into placed operations (semi-active timetable).

    Each occurrence of a job places that job's next operation as early as
    allowed by (1) the job's previous operation and (2) the machine's
    previous operation. Order of consideration is exactly the schedule.

    Args:
        model: Problem data.
        schedule: Dispatch order of job indices.
        validate: When True run :func:`validate_schedule` before decoding.

    Returns:
        Timeline with every placed operation and the makespan. The makespan
        equals :func:`jobshop.evaluation.evaluate` for the same schedule.

    Raises:
        InvalidSchedule: On a job index outside ``[0, num_jobs)``, or if
            ``validate`` is set and the schedule is invalid.
    """
    schedule = list(schedule)
    if validate:
        validate_schedule(model, schedule)
    ready_job = [0] * model.num_jobs
    ready_machine = [0] * model.num_machines
    next_index = [0] * model.num_jobs
    operations: list[ScheduledOperation] = []

    for job in schedule:
        if not 0 <= job < model.num_jobs:
            raise InvalidSchedule(f"Job index out of range: {job!r}")
        k = next_index[job]
        if k >= model.operation_counts[job]:
            continue
        machine, duration = model.jobs[job][k]
        start = max(ready_job[job], ready_machine[machine])
        end = start + duration
        ready_job[job] = end
        ready_machine[machine] = end
        next_index[job] += 1
        operations.append(
            ScheduledOperation(
                start=start,
                end=end,
                job=job,
                operation_index=k,
                machine=machine,
                duration=duration,
            )
        )

    return Timeline(operations=operations, makespan=max(ready_machine))


def check_no_machine_overlap(timeline: Timeline) -> bool:
    """Ensure no two operations overlap on the same machine.

    Raises:
        AssertionError: On the first detected overlap.
    """
    by_machine: dict[int, list[ScheduledOperation]] = {}
    for op in timeline.operations:
        by_machine.setdefault(op.machine, []).append(op)
    for machine_ops in by_machine.values():
        machine_ops.sort(key=lambda r: (r.start, r.end))
        prev_end = -1
        for r in machine_ops:
            if r.start < prev_end:
                raise AssertionError(
                    "Overlap on machine " f"{r.machine} between end {prev_end} and start {r.start}"
                )
            prev_end = r.end
    return True


def check_job_precedence(timeline: Timeline) -> bool:
    """Ensure operation k of a job starts after operation k-1 finished."""
    last_end: dict[int, int] = {}
    last_index: dict[int, int] = {}
    for op in sorted(timeline.operations, key=lambda r: (r.job, r.operation_index)):
        if op.job in last_end:
            if op.operation_index != last_index[op.job] + 1 or op.start < last_end[op.job]:
                raise AssertionError(f"Precedence violated for job {op.job} at op {op.operation_index}")
        last_end[op.job] = op.end
        last_index[op.job] = op.operation_index
    return True
