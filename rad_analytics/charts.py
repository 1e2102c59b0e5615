"""
charts.py — matplotlib renderings of the two analytic views

  hourly_distribution.png   studies per hour (bar / line / pie)
  staff_overview.png        studies per signer
  staff_modalities.png      signer × modality stacked bars

All functions take already-filtered data and write one PNG each.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from rad_analytics.buckets import HourBucket
from rad_analytics.config import CHART_COLORS
from rad_analytics.productivity import ProductivitySummary

logger = logging.getLogger(__name__)

CHART_TYPES = ("bar", "line", "pie")


def _pyplot():
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    return plt


def plot_hourly_distribution(
    buckets: Iterable[HourBucket],
    output_path: Path,
    chart_type: str = "line",
    time_format: str = "24",
) -> Path:
    if chart_type not in CHART_TYPES:
        raise ValueError(f"chart_type must be one of {CHART_TYPES}, got {chart_type!r}")
    plt = _pyplot()
    buckets = list(buckets)
    labels = [b.label(time_format) for b in buckets]
    counts = [b.count for b in buckets]

    fig, ax = plt.subplots(figsize=(13, 5))
    if chart_type == "pie":
        # Pie slices only for hours with studies
        nonzero = [(lbl, c) for lbl, c in zip(labels, counts) if c > 0]
        if nonzero:
            ax.pie(
                [c for _, c in nonzero],
                labels=[f"{lbl}: {c}" for lbl, c in nonzero],
                colors=[CHART_COLORS[i % len(CHART_COLORS)] for i in range(len(nonzero))],
            )
        else:
            ax.text(0.5, 0.5, "No data", ha="center", va="center")
        ax.axis("equal")
    else:
        x = range(len(labels))
        if chart_type == "bar":
            ax.bar(x, counts, color=CHART_COLORS[0], alpha=0.85, width=0.65)
        else:
            ax.plot(x, counts, color=CHART_COLORS[0], linewidth=2, marker="o")
        ax.set_xticks(list(x))
        ax.set_xticklabels(labels, rotation=45, ha="right", fontsize=8)
        ax.set_ylabel("Studies")
        ax.grid(axis="y", alpha=0.3)

    ax.set_title(f"Hourly Study Distribution (total {sum(counts)})", fontsize=13, fontweight="bold")
    fig.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    logger.info(f"Chart → {output_path}")
    return output_path


def plot_staff_overview(summary: ProductivitySummary, output_path: Path) -> Path:
    plt = _pyplot()
    names = [s.signer for s in summary.staff]
    counts = [s.count for s in summary.staff]

    fig, ax = plt.subplots(figsize=(13, 5))
    x = range(len(names))
    ax.bar(x, counts, color=CHART_COLORS[1], alpha=0.85, width=0.65)
    for bar, val in zip(ax.patches, counts):
        ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height() + 0.2, str(val),
                ha="center", va="bottom", fontsize=8)
    ax.set_xticks(list(x))
    ax.set_xticklabels(names, rotation=40, ha="right", fontsize=9)
    ax.set_ylabel("Studies")
    ax.set_title(
        f"Studies by Radiologist\n{summary.total_studies} studies over {summary.working_days} working days",
        fontsize=13, fontweight="bold",
    )
    ax.grid(axis="y", alpha=0.3)
    fig.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    logger.info(f"Chart → {output_path}")
    return output_path


def plot_staff_modalities(
    summary: ProductivitySummary,
    output_path: Path,
    modalities: Optional[List[str]] = None,
) -> Path:
    """Stacked bars; modalities defaults to those with data in the summary."""
    plt = _pyplot()
    staff = list(summary.staff_modalities)
    columns = modalities or [m.modality for m in summary.modalities_with_data]
    names = [s.signer for s in staff]
    x = range(len(names))

    fig, ax = plt.subplots(figsize=(13, 6))
    bottoms: List[float] = [0.0] * len(staff)
    for i, modality in enumerate(columns):
        vals = [s.modalities.get(modality, 0) for s in staff]
        ax.bar(x, vals, bottom=bottoms, label=modality,
               color=CHART_COLORS[i % len(CHART_COLORS)], width=0.65)
        bottoms = [b + v for b, v in zip(bottoms, vals)]
    ax.set_xticks(list(x))
    ax.set_xticklabels(names, rotation=40, ha="right", fontsize=9)
    ax.set_ylabel("Studies")
    ax.set_title("Modality Mix by Radiologist", fontsize=13, fontweight="bold")
    if columns:
        ax.legend(fontsize=8)
    ax.grid(axis="y", alpha=0.3)
    fig.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    logger.info(f"Chart → {output_path}")
    return output_path


def generate_charts(
    buckets: Iterable[HourBucket],
    summary: ProductivitySummary,
    output_dir: Path,
    prefix: str = "rad",
    chart_type: str = "line",
    time_format: str = "24",
) -> Dict[str, Path]:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    return {
        "hourly": plot_hourly_distribution(
            buckets, output_dir / f"{prefix}_hourly_distribution.png", chart_type, time_format
        ),
        "staff": plot_staff_overview(summary, output_dir / f"{prefix}_staff_overview.png"),
        "staff_modalities": plot_staff_modalities(summary, output_dir / f"{prefix}_staff_modalities.png"),
    }
