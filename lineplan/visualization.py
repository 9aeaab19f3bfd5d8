import os
from pathlib import Path
from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.patches import Patch  # noqa: E402

from .models import Color, OrderEntry, Schedule, Score  # noqa: E402
from .switchover import DEFAULT_POLICY, SwitchoverPolicy  # noqa: E402
from .timeline import expand  # noqa: E402

PRODUCT_COLORS = {
    Color.DARK: "saddlebrown",
    Color.MILK: "chocolate",
    Color.WHITE: "moccasin",
}
COSTLY_SWITCHOVER_COLOR = "orange"
SWITCHOVER_COLOR = "gainsboro"
OVERDUE_EDGE = "red"


def plot_gantt(
    schedule: Schedule,
    save_path: str,
    policy: SwitchoverPolicy = DEFAULT_POLICY,
    score: Optional[Score] = None,
    title: Optional[str] = None,
    show_labels: Optional[bool] = None,
) -> str:
    """Render a schedule's timeline as a Gantt chart and save it.

    Orders are colored by product color, allergen products are hatched,
    overdue orders get a red outline, costly switchovers are orange.

    Returns:
        Path of the written image.
    """
    timeline = expand(schedule, policy)
    m = len(timeline)
    n = schedule.order_count()
    fig, ax = plt.subplots(
        figsize=(min(10 + n * 0.03, 18), min(0.5 * m + 2, 16)),
        constrained_layout=True,
    )
    if show_labels is None:
        # labels become unreadable on crowded charts
        show_labels = n <= 40
    for row, (machine_id, entries) in enumerate(timeline.items()):
        for entry in entries:
            start = entry.end - entry.duration
            if isinstance(entry, OrderEntry):
                product = entry.order.product
                overdue = entry.end > entry.order.due
                ax.barh(
                    row,
                    entry.duration,
                    left=start,
                    height=0.8,
                    color=PRODUCT_COLORS.get(product.color, "grey"),
                    hatch="//" if product.allergens else None,
                    edgecolor=OVERDUE_EDGE if overdue else "black",
                    linewidth=1.6 if overdue else 0.6,
                )
                if show_labels:
                    ax.text(
                        start + entry.duration / 2,
                        row,
                        entry.order.order_id,
                        ha="center",
                        va="center",
                        fontsize=7,
                    )
            else:
                ax.barh(
                    row,
                    entry.duration,
                    left=start,
                    height=0.4,
                    color=COSTLY_SWITCHOVER_COLOR if entry.costly else SWITCHOVER_COLOR,
                    edgecolor="none",
                )
    if title is None:
        title = "Schedule"
        if score is not None:
            title = (
                f"Schedule - tardiness {score.total_tardiness}, makespan {score.makespan}, "
                f"costly switchovers {score.costly_switchovers}"
            )
    ax.set_xlabel("Time", fontsize=12)
    ax.set_ylabel("Machine", fontsize=12)
    ax.set_title(title, fontsize=13, fontweight="bold")
    ax.set_yticks(range(m))
    ax.set_yticklabels(list(timeline.keys()))
    ax.set_ylim(-0.5, m - 0.5)
    ax.invert_yaxis()
    ax.grid(True, alpha=0.25, axis="x", linestyle="--", linewidth=0.7)
    legend = [
        Patch(facecolor=c, edgecolor="black", label=color.value)
        for color, c in PRODUCT_COLORS.items()
    ]
    legend += [
        Patch(facecolor="white", edgecolor="black", hatch="//", label="allergens"),
        Patch(facecolor="white", edgecolor=OVERDUE_EDGE, label="overdue"),
        Patch(facecolor=COSTLY_SWITCHOVER_COLOR, label="costly switchover"),
        Patch(facecolor=SWITCHOVER_COLOR, label="switchover"),
    ]
    ax.legend(
        handles=legend,
        bbox_to_anchor=(1.02, 1),
        loc="upper left",
        borderaxespad=0.0,
        fontsize=8,
        frameon=False,
    )
    _ensure_dir(os.path.dirname(save_path))
    fig.savefig(save_path, dpi=150)
    plt.close(fig)
    return save_path


def plot_score_progress(
    scores: Sequence[Score],
    save_path: str,
    pre_optimization_index: Optional[int] = None,
) -> str:
    """Plot tardiness, makespan and costly switchovers per committed snapshot."""
    steps = list(range(len(scores)))
    fig, ax = plt.subplots(figsize=(10, 6), constrained_layout=True)
    ax.plot(steps, [s.total_tardiness for s in scores], label="total tardiness", linewidth=2)
    ax.plot(steps, [s.makespan for s in scores], label="makespan", linewidth=2)
    ax.set_xlabel("Snapshot", fontsize=12)
    ax.set_ylabel("Time", fontsize=12)
    ax2 = ax.twinx()
    ax2.plot(
        steps,
        [s.costly_switchovers for s in scores],
        label="costly switchovers",
        color="orange",
        linestyle="--",
        linewidth=1.5,
    )
    ax2.set_ylabel("Costly switchovers", fontsize=12)
    if pre_optimization_index is not None and pre_optimization_index >= 0:
        ax.axvline(x=pre_optimization_index, color="red", linestyle="--", linewidth=1.2)
        ax.text(
            pre_optimization_index,
            ax.get_ylim()[1],
            " optimization start",
            color="red",
            fontsize=9,
            va="top",
            ha="left",
        )
    handles, labels = ax.get_legend_handles_labels()
    handles2, labels2 = ax2.get_legend_handles_labels()
    ax.legend(handles + handles2, labels + labels2, loc="upper left", frameon=False, fontsize=9)
    ax.set_title("Score progress", fontsize=14, fontweight="bold")
    ax.grid(True, alpha=0.25, linestyle="--", linewidth=0.7)
    _ensure_dir(os.path.dirname(save_path))
    fig.savefig(save_path, dpi=150)
    plt.close(fig)
    return save_path


def _ensure_dir(path: str):
    if path:
        os.makedirs(path, exist_ok=True)


def next_unique_path(path: str | Path) -> str:
    """If the file exists append _1, _2 ... until a free name is found."""
    p = Path(path)
    if not p.exists():
        return str(p)
    counter = 1
    while True:
        candidate = p.parent / f"{p.stem}_{counter}{p.suffix}"
        if not candidate.exists():
            return str(candidate)
        counter += 1
