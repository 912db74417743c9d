"""Core package for job-shop metaheuristic experiments.

Exports the problem model, the makespan evaluator, the schedule generator
and the strategy dispatcher.
"""

from jobshop.algorithms import STRATEGIES, optimize  # noqa: F401
from jobshop.errors import InvalidModel, InvalidSchedule  # noqa: F401
from jobshop.evaluation import evaluate  # noqa: F401
from jobshop.generator import generate_initial  # noqa: F401
from jobshop.models import Operation, ProblemModel, Solution  # noqa: F401

__all__ = [
    "InvalidModel",
    "InvalidSchedule",
    "Operation",
    "ProblemModel",
    "STRATEGIES",
    "Solution",
    "evaluate",
    "generate_initial",
    "optimize",
]
