"""Execution modes built on top of the search strategies."""

from jobshop.modes.auto import run_auto
from jobshop.modes.common import run_algorithm

__all__ = ["run_algorithm", "run_auto"]
