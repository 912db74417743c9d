"""Core data structures for job-shop instances and solutions.

This module defines:
    Operation         -- one machine-bound unit of work (machine, duration).
    ProblemModel      -- immutable container with all jobs of one instance.
    Solution          -- a dispatch-order schedule plus its cached makespan.
    ScheduledOperation, Timeline -- decoded start/end rows used for charts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Sequence

from jobshop.errors import InvalidModel


Schedule = Sequence[int]  # dispatch order of job indices


class Operation(NamedTuple):
    """Single operation: the machine it runs on and its processing time."""

    machine: int
    duration: int


@dataclass(frozen=True)
class ProblemModel:
    """Immutable job-shop instance.

    Attributes:
        jobs: Nested tuple: jobs[j][k] -> Operation of job j at position k.
        num_machines: Number of machines (M).
    """

    jobs: tuple[tuple[Operation, ...], ...]
    num_machines: int
    operation_counts: tuple[int, ...] = field(init=False, repr=False, compare=False)
    job_durations: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.jobs:
            raise InvalidModel("Problem model needs at least one job")
        if self.num_machines <= 0:
            raise InvalidModel(f"Problem model needs at least one machine, got {self.num_machines}")
        for j, ops in enumerate(self.jobs):
            if not ops:
                raise InvalidModel(f"Job {j} has no operations")
            for k, (machine, duration) in enumerate(ops):
                if not (0 <= machine < self.num_machines):
                    raise InvalidModel(
                        f"Job {j} operation {k}: machine {machine} out of range "
                        f"[0, {self.num_machines})"
                    )
                if not isinstance(duration, int) or duration < 0:
                    raise InvalidModel(
                        f"Job {j} operation {k}: duration must be a non-negative int, "
                        f"got {duration!r}"
                    )
        object.__setattr__(self, "operation_counts", tuple(len(ops) for ops in self.jobs))
        object.__setattr__(
            self, "job_durations", tuple(sum(op.duration for op in ops) for ops in self.jobs)
        )

    @classmethod
    def from_lists(
        cls,
        jobs: Iterable[Iterable[tuple[int, int]]],
        num_machines: int | None = None,
    ) -> "ProblemModel":
        """Build a model from nested ``(machine, duration)`` pairs.

        ``num_machines`` defaults to the highest machine index plus one.
        """
        converted = tuple(
            tuple(Operation(int(m), d) for m, d in job_ops) for job_ops in jobs
        )
        if num_machines is None:
            machines = [op.machine for ops in converted for op in ops]
            num_machines = max(machines) + 1 if machines else 0
        return cls(jobs=converted, num_machines=num_machines)

    @property
    def num_jobs(self) -> int:
        return len(self.jobs)

    @property
    def num_tasks(self) -> int:
        """Total number of operations (schedule length)."""
        return sum(self.operation_counts)

    def job_duration(self, job: int) -> int:
        """Makespan of ``job`` scheduled alone (sum of its durations)."""
        return self.job_durations[job]

    def machine_load(self, machine: int) -> int:
        return sum(op.duration for ops in self.jobs for op in ops if op.machine == machine)


@dataclass(frozen=True)
class Solution:
    """Schedule with its makespan.

    The schedule is stored as a tuple so the cached makespan cannot go stale;
    build new solutions with :meth:`of` whenever the order changes.
    """

    schedule: tuple[int, ...]
    makespan: int

    @classmethod
    def of(cls, model: ProblemModel, schedule: Iterable[int]) -> "Solution":
        from jobshop.evaluation import evaluate

        sched = tuple(schedule)
        return cls(schedule=sched, makespan=evaluate(sched, model))


@dataclass(frozen=True)
class ScheduledOperation:
    """Single placed operation with timing and identification data."""

    start: int
    end: int
    job: int
    operation_index: int
    machine: int
    duration: int


@dataclass(frozen=True)
class Timeline:
    """Decoded schedule: every placed operation plus the makespan."""

    operations: list[ScheduledOperation]
    makespan: int
