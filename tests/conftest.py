"""Pytest configuration, shared fixtures & custom summary hook.

Also ensures the project root is on sys.path so ``jobshop`` and ``main``
import without installation.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_root = Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from jobshop.instances import random_instance, reference_instance  # noqa: E402
from jobshop.models import ProblemModel  # noqa: E402


@pytest.fixture
def reference_model() -> ProblemModel:
    """The 3 jobs x 3 machines instance used throughout the tests."""
    return reference_instance()


@pytest.fixture
def medium_model() -> ProblemModel:
    return random_instance(6, 4, seed=7)


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter,
    exitstatus: int,
    config: pytest.Config,
) -> None:  # noqa: D401
    """Append a compact custom summary at the end of test session."""
    stats = terminalreporter.stats
    collected = terminalreporter._numcollected  # type: ignore[attr-defined]
    passed = len(stats.get("passed", []))
    failed = len(stats.get("failed", []))
    errors = len(stats.get("error", []))
    skipped = len(stats.get("skipped", []))

    terminalreporter.section("Custom summary", sep="=")
    terminalreporter.write_line(
        "Collected: "
        f"{collected} | Passed: {passed} | Failed: {failed} | "
        f"Errors: {errors} | Skipped: {skipped}"
    )
    if failed:
        terminalreporter.write_line("Failed tests:")
        for rep in stats["failed"]:
            terminalreporter.write_line(f"  - {rep.nodeid}")
