#!/usr/bin/env python3
"""Config-driven entry point: build an instance, run strategies, report.

Usage::

    python main.py --config config.yaml
"""

import argparse
import json
import logging
import os
import random
from datetime import datetime
from typing import Any, Dict

import yaml

from jobshop.algorithms import STRATEGIES
from jobshop.decoder import build_timeline
from jobshop.instances import random_instance, reference_instance
from jobshop.models import ProblemModel
from jobshop.modes.auto import run_auto
from jobshop.modes.common import run_algorithm
from jobshop.params import params_from_mapping
from jobshop.visualization import plot_gantt, plot_iteration_progress_multi

logger = logging.getLogger("jobshop")


def load_config(config_file: str = "config.yaml") -> Dict[str, Any]:
    """Load configuration from a YAML or JSON file."""
    if not os.path.isfile(config_file):
        raise FileNotFoundError(f"Config file not found: {config_file}")
    with open(config_file, "r", encoding="utf-8") as f:
        text = f.read()
    if config_file.endswith((".yml", ".yaml")):
        cfg = yaml.safe_load(text) or {}
    else:
        cfg = json.loads(text)
    if not isinstance(cfg, dict):
        raise ValueError(f"Config root must be a mapping, got {type(cfg).__name__}")
    return cfg


def build_model(instance_cfg: Any) -> tuple[ProblemModel, str]:
    """Instance section -> (model, display name).

    Accepts ``"reference"`` or ``{"random": {"jobs": J, "machines": M, "seed": S}}``.
    """
    if instance_cfg in (None, "reference"):
        return reference_instance(), "reference_3x3"
    if isinstance(instance_cfg, dict) and isinstance(instance_cfg.get("random"), dict):
        gen = instance_cfg["random"]
        jobs = gen.get("jobs")
        machines = gen.get("machines")
        seed = int(gen.get("seed", 0))
        if jobs is None or machines is None:
            raise ValueError("instance.random needs 'jobs' and 'machines'")
        model = random_instance(int(jobs), int(machines), seed=seed)
        return model, f"random_j{jobs}_m{machines}_seed{seed}"
    raise ValueError(f"Unsupported instance section: {instance_cfg!r}")


def build_params(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Parameter bundle per strategy; the global time limit fills in gaps."""
    time_limit_ms = cfg.get("time_limit_ms")
    out = {}
    for name in STRATEGIES:
        section = cfg.get(name, {}) if isinstance(cfg.get(name), dict) else {}
        section = dict(section)
        if time_limit_ms is not None:
            section.setdefault("time_limit_ms", int(time_limit_ms))
        out[name] = params_from_mapping(name, section)
    return out


def run_single(
    algo_name: str,
    model: ProblemModel,
    instance_name: str,
    params: Any,
    runs: int,
    rng: random.Random,
    charts_dir: str,
    trace: bool,
) -> None:
    best = None
    histories: Dict[str, list[int]] = {}
    for r_idx in range(runs):
        progress: list[int] = []
        trace_file = None
        if trace:
            os.makedirs(os.path.join(charts_dir, "traces"), exist_ok=True)
            trace_file = os.path.join(
                charts_dir, "traces", f"trace_{algo_name}_run{r_idx}_{instance_name}.csv"
            )
        solution, elapsed = run_algorithm(
            algo_name, model, params, rng, progress=progress, iter_log_path=trace_file
        )
        logger.info(
            "%s run %d/%d: best makespan=%d time=%.2f ms",
            algo_name,
            r_idx + 1,
            runs,
            solution.makespan,
            elapsed * 1000.0,
        )
        histories[f"run_{r_idx}"] = progress
        if best is None or solution.makespan < best.makespan:
            best = solution
    if best is None:
        return
    timeline = build_timeline(model, best.schedule, validate=False)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_path = os.path.join(
        charts_dir, f"gantt_{algo_name}_c{timeline.makespan}_{instance_name}_{stamp}.png"
    )
    plot_gantt(timeline, model, save_path=out_path, algo_name=algo_name)
    logger.info("Saved Gantt chart to %s", out_path)
    multi_path = os.path.join(charts_dir, f"{algo_name}_multi_progress_{stamp}.png")
    plot_iteration_progress_multi(histories, save_path=multi_path)
    logger.info("Saved multi-series progress to %s", multi_path)


def main(cfg: Dict[str, Any]) -> None:
    model, instance_name = build_model(cfg.get("instance"))
    logger.info(
        "Instance: %s jobs=%d machines=%d ops=%d",
        instance_name,
        model.num_jobs,
        model.num_machines,
        model.num_tasks,
    )
    params = build_params(cfg)
    algo = cfg.get("algo", "tabu")
    runs = int(cfg.get("runs", 1))
    seed = cfg.get("seed")
    rng = random.Random(seed) if seed is not None else random.Random()
    charts_cfg = cfg.get("charts", {}) if isinstance(cfg.get("charts"), dict) else {}
    charts_dir = charts_cfg.get("dir", "charts")
    os.makedirs(charts_dir, exist_ok=True)

    if algo == "auto":
        run_auto(model, instance_name, runs, params, rng, charts_dir)
    elif algo in STRATEGIES:
        run_single(
            algo,
            model,
            instance_name,
            params[algo],
            runs,
            rng,
            charts_dir,
            bool(charts_cfg.get("trace", False)),
        )
    else:
        raise ValueError(f"Unknown algorithm: {algo}; use 'auto' or one of {sorted(STRATEGIES)}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Job-shop metaheuristics (config driven)")
    parser.add_argument("--config", required=True, help="Path to a YAML/JSON config file")
    args = parser.parse_args()

    config = load_config(args.config)
    log_level = config.get("log_level", "INFO")
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    main(config)
