"""Auto mode execution logic.

Runs each strategy (ant colony, genetic, annealing, tabu) independently
``runs`` times. Best run statistics and simple aggregates are persisted as
JSON while per-strategy best schedules may be rendered to Gantt charts.
"""
from __future__ import annotations

import json
import logging
import os
import random
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from jobshop.algorithms import STRATEGIES
from jobshop.decoder import build_timeline
from jobshop.models import ProblemModel, Solution
from jobshop.visualization import plot_gantt, plot_iteration_progress_multi
from .common import run_algorithm

logger = logging.getLogger("jobshop.auto")


def _avg(vals: List[float]) -> Optional[float]:
    return sum(vals) / len(vals) if vals else None


def run_auto(
    model: ProblemModel,
    instance_name: str,
    runs: int,
    params_by_algo: Mapping[str, Any],
    rng: random.Random,
    charts_dir: str,
    draw_charts: bool = True,
) -> tuple[Optional[str], Optional[Solution]]:
    """Run independent repeated experiments for all strategies.

    Args:
        model: Problem instance.
        instance_name: Stored in the JSON output for traceability.
        runs: Number of independent runs per strategy.
        params_by_algo: Parameter bundle per strategy name (missing -> defaults).
        rng: Random generator shared sequentially by all runs.
        charts_dir: Directory for output artefacts (created if missing).
        draw_charts: Render Gantt and convergence charts.

    Returns:
        ``(strategy_name, best_solution)`` across all strategies, or
        ``(None, None)`` when ``runs == 0``.
    """
    os.makedirs(charts_dir, exist_ok=True)
    algo_names = tuple(STRATEGIES)
    stats: Dict[str, Dict[str, Any]] = {
        name: {"best": None, "best_time": None, "makespans": [], "times": [], "progress": []}
        for name in algo_names
    }
    for i in range(1, runs + 1):
        for name in algo_names:
            progress: List[int] = []
            solution, elapsed = run_algorithm(
                name, model, params_by_algo.get(name), rng, progress=progress
            )
            entry = stats[name]
            entry["makespans"].append(solution.makespan)
            entry["times"].append(elapsed)
            if entry["best"] is None or solution.makespan < entry["best"].makespan:
                entry.update({"best": solution, "best_time": elapsed, "progress": progress})
        if i % max(1, runs // 10) == 0:
            logger.info(
                "Progress %d/%d: %s",
                i,
                runs,
                " ".join(f"{n}={stats[n]['best'].makespan}" for n in algo_names),
            )

    for name in algo_names:
        if stats[name]["best"] is None:
            continue
        logger.info(
            "Auto summary %-10s: best=%d (%.4fs) avg=%.2f (%.4fs)",
            name,
            stats[name]["best"].makespan,
            stats[name]["best_time"],
            _avg([float(v) for v in stats[name]["makespans"]]),
            _avg(stats[name]["times"]),
        )
    candidates = [(name, stats[name]["best"]) for name in algo_names if stats[name]["best"]]
    if not candidates:
        return None, None
    best_name, best_solution = min(candidates, key=lambda x: x[1].makespan)
    logger.info("Overall best algorithm=%s makespan=%d", best_name, best_solution.makespan)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    payload = {
        "instance": instance_name,
        "jobs": model.num_jobs,
        "machines": model.num_machines,
        "runs": runs,
        "timestamp": stamp,
        "per_run": {
            name: [
                {"run": idx + 1, "makespan": c, "time": t}
                for idx, (c, t) in enumerate(zip(stats[name]["makespans"], stats[name]["times"]))
            ]
            for name in algo_names
        },
        "best": {
            name: {
                "makespan": stats[name]["best"].makespan,
                "time": stats[name]["best_time"],
                "schedule": list(stats[name]["best"].schedule),
            }
            for name in algo_names
        },
        "averages": {
            name: {
                "avg_makespan": _avg([float(v) for v in stats[name]["makespans"]]),
                "avg_time": _avg(stats[name]["times"]),
            }
            for name in algo_names
        },
        "overall_best": {"algorithm": best_name, "makespan": best_solution.makespan},
    }
    results_path = os.path.join(charts_dir, f"auto_results_{stamp}.json")
    with open(results_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    logger.info("Saved auto mode results JSON to %s", results_path)

    if draw_charts:
        for name in algo_names:
            timeline = build_timeline(model, stats[name]["best"].schedule)
            g_path = os.path.join(charts_dir, f"gantt_{name}_c{timeline.makespan}_{stamp}.png")
            plot_gantt(timeline, model, save_path=g_path, algo_name=name)
            logger.info("Saved Gantt chart for %s to %s", name, g_path)
        multi_path = os.path.join(charts_dir, f"auto_progress_{stamp}.png")
        plot_iteration_progress_multi(
            {name: stats[name]["progress"] for name in algo_names}, save_path=multi_path
        )
        logger.info("Saved convergence comparison to %s", multi_path)
    return best_name, best_solution
