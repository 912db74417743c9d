"""Common structures and helper functions for search algorithms."""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

from jobshop.models import Solution

logger = logging.getLogger("jobshop")


@dataclass
class SearchState:
    """Per-run state shared by the four strategies."""

    current: Solution
    best: Solution
    start_time: float = 0.0
    iteration: int = 0

    def update_best(self, candidate: Optional[Solution] = None) -> bool:
        """Replace best with ``candidate`` (default: current) on strict improvement."""
        candidate = self.current if candidate is None else candidate
        if candidate.makespan < self.best.makespan:
            self.best = candidate
            return True
        return False

    def record(
        self,
        progress: Optional[List[int]] = None,
        time_progress: Optional[List[float]] = None,
        current_progress: Optional[List[int]] = None,
    ) -> None:
        """Append this iteration's values to the caller-owned lists."""
        if progress is not None:
            progress.append(self.best.makespan)
        if time_progress is not None:
            time_progress.append(time.perf_counter() - self.start_time)
        if current_progress is not None:
            current_progress.append(self.current.makespan)

    def elapsed_ms(self) -> int:
        """Return elapsed time from start in ms."""
        return int((time.perf_counter() - self.start_time) * 1000)


@dataclass
class Budget:
    """Iteration budget with optional deadline and cancellation token.

    Both the deadline and the event are only looked at between iterations.
    """

    iterations: int
    time_limit_ms: Optional[int] = None
    stop_event: Optional[threading.Event] = None
    start_time: float = field(default_factory=time.perf_counter)

    def exhausted(self, iteration: int) -> Optional[str]:
        """Return the stop reason or None while the run may continue."""
        if iteration >= self.iterations:
            return "iterations"
        if self.stop_event is not None and self.stop_event.is_set():
            return "cancelled"
        if self.time_limit_ms is not None:
            if (time.perf_counter() - self.start_time) * 1000.0 >= self.time_limit_ms:
                return "time_limit"
        return None


@contextmanager
def open_log_file(path: str | None, algo_name: str) -> Iterator[Any]:
    """Context manager for the optional per-iteration CSV trace."""
    log_file = None
    if path:
        try:
            log_file = open(path, "w", encoding="utf-8")
            log_file.write("iteration,elapsed_ms,current_makespan,best_makespan,schedule\n")
        except OSError as e:
            logger.warning("[%s] Failed to open log file %s: %s", algo_name, path, e)
            log_file = None
    try:
        yield log_file
    finally:
        if log_file:
            log_file.close()


def log_iteration(log_file: Any, state: SearchState) -> None:
    """Write iteration to log file."""
    if log_file:
        schedule_str = " ".join(map(str, state.current.schedule))
        log_file.write(
            f"{state.iteration},{state.elapsed_ms()},{state.current.makespan},"
            f'{state.best.makespan},"{schedule_str}"\n'
        )
