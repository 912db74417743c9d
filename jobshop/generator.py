"""Random initial schedules."""

from __future__ import annotations

import random
from typing import Optional

from .models import ProblemModel, Solution
from .operations import create_base_schedule


def create_random_schedule(
    model: ProblemModel,
    *,
    rng: Optional[random.Random] = None,
) -> list[int]:
    """Uniformly shuffle the canonical multiset of job indices.

    Args:
        model: Problem data.
        rng: Optional random.Random instance (for reproducibility). If None
            a fresh unseeded generator is used.

    Returns:
        A schedule in which every ordering of the multiset is equally likely.
    """
    if rng is None:
        rng = random.Random()
    schedule = create_base_schedule(model)
    rng.shuffle(schedule)
    return schedule


def generate_initial(model: ProblemModel, rng: Optional[random.Random] = None) -> Solution:
    """Random valid schedule together with its makespan."""
    return Solution.of(model, create_random_schedule(model, rng=rng))
