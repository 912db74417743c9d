import os
from typing import Dict, List, Optional

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402

from jobshop.models import ProblemModel, Timeline  # noqa: E402


def _ensure_dir(path: str):
    if path:
        os.makedirs(path, exist_ok=True)


def plot_gantt(
    timeline: Timeline,
    model: ProblemModel,
    save_path: str,
    algo_name: Optional[str] = None,
    show_legend: Optional[bool] = None,
) -> str:
    """Create and save a Gantt chart of a decoded schedule.

    - Uses constrained_layout to reduce layout warnings.
    - Disables legend automatically for many jobs unless forced.
    - Adaptive figure size based on number of machines and jobs.

    Returns:
        The path the chart was written to.
    """
    m = model.num_machines
    n = model.num_jobs
    base_w, base_h = 10, 0.5 * m + 2
    fig, ax = plt.subplots(
        figsize=(min(base_w + n * 0.05, 18), min(base_h, 16)),
        constrained_layout=True,
    )
    cmap = plt.get_cmap("tab20")
    colors = [cmap(i % 20) for i in range(n)]
    for op in timeline.operations:
        ax.barh(
            op.machine,
            op.duration,
            left=op.start,
            height=0.8,
            color=colors[op.job],
            alpha=0.85,
            edgecolor="black",
            linewidth=0.6,
        )
    ax.set_xlabel("Time", fontsize=12)
    ax.set_ylabel("Machine", fontsize=12)
    title = f"Gantt Chart - makespan = {timeline.makespan}"
    if algo_name:
        title = f"{algo_name}: {title}"
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.set_yticks(range(m))
    ax.set_yticklabels([f"M{i}" for i in range(m)])
    ax.grid(True, alpha=0.25, axis="x", linestyle="--", linewidth=0.7)
    ax.set_ylim(-0.5, m - 0.5)

    if show_legend is None:
        # auto policy: only show when jobs <= 40
        show_legend = n <= 40
    if show_legend:
        legend_elements = [
            plt.Rectangle(
                (0, 0), 1, 1, facecolor=colors[i], alpha=0.85, edgecolor="black", label=f"Job {i}"
            )
            for i in range(n)
        ]
        ax.legend(
            handles=legend_elements,
            bbox_to_anchor=(1.02, 1),
            loc="upper left",
            borderaxespad=0.0,
            fontsize=8,
            frameon=False,
            ncol=1 if n <= 25 else 2,
        )

    _ensure_dir(os.path.dirname(save_path))
    fig.savefig(save_path, dpi=180)
    plt.close(fig)
    return save_path


def plot_iteration_progress_multi(
    histories: Dict[str, List[int]],
    save_path: str,
    title: str = "Convergence comparison",
) -> str:
    """Draw several best-so-far makespan histories on one plot and save it."""
    fig, ax = plt.subplots(figsize=(10, 6), constrained_layout=True)
    for label, values in histories.items():
        if not values:
            continue
        xs = list(range(1, len(values) + 1))
        ax.plot(xs, values, label=label, linewidth=2)
        ax.annotate(
            f"{values[-1]}",
            xy=(xs[-1], values[-1]),
            xytext=(6, -10),
            textcoords="offset points",
            fontsize=9,
            bbox=dict(boxstyle="round,pad=0.2", facecolor="white", alpha=0.55),
        )
    ax.set_xlabel("Iteration", fontsize=12)
    ax.set_ylabel("Makespan", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.grid(True, alpha=0.25, linestyle="--", linewidth=0.7)
    ax.legend(
        loc="center left",
        bbox_to_anchor=(1.02, 0.5),
        frameon=False,
        fontsize=9,
        borderaxespad=0.0,
    )
    _ensure_dir(os.path.dirname(save_path))
    fig.savefig(save_path, dpi=180)
    plt.close(fig)
    return save_path
