"""Diagnostic figure factories for SRG runs."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from srgscan.core.types import ResidualStats, TrendFit
from srgscan.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle
from srgscan.plotting.utils import save_figure


def plot_detection_curve(
    table: pd.DataFrame,
    out_path: Path,
    *,
    threshold: int | None = None,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> Path:
    """Genes ranked by detection count, with the max-detection cap if set.

    Used to pick `max_cells_detected` by eye: the cap belongs where the
    plateau of near-ubiquitous genes bends into the decline.
    """
    counts = np.sort(table["cells_detected"].to_numpy(dtype=float))[::-1]
    rank = np.arange(1, counts.size + 1, dtype=float)

    fig, ax = plt.subplots(figsize=style.figsize_curve)
    ax.plot(rank, counts, color=style.color_fit, linewidth=1.2)
    if threshold is not None:
        ax.axhline(
            float(threshold),
            color=style.color_srg,
            linestyle="--",
            linewidth=1.0,
            label=f"max_cells_detected={threshold}",
        )
        ax.legend(loc="best", fontsize=style.legend_fontsize, frameon=True)
    if counts.size and counts[-1] > 0:
        ax.set_yscale("log")
    ax.set_xlabel("Gene rank")
    ax.set_ylabel("Cells detected")
    ax.set_title(f"Detection curve (n={counts.size} genes)")
    ax.grid(alpha=0.25, linewidth=0.6)
    fig.tight_layout()
    save_figure(fig, out_path, style=style)
    return out_path


def plot_trend_fit(
    table: pd.DataFrame,
    trend: TrendFit,
    out_path: Path,
    *,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> Path:
    """Inverse average expression against detection count, with the OLS line."""
    srg = table["is_srg"].to_numpy(dtype=bool)
    x = table["cells_detected"].to_numpy(dtype=float)
    y = table["inv_avg_expression"].to_numpy(dtype=float)

    fig, ax = plt.subplots(figsize=style.figsize_scatter)
    ax.scatter(
        x[~srg],
        y[~srg],
        s=style.s_bg,
        alpha=style.alpha_bg,
        color=style.color_bg,
        label=f"other (n={int((~srg).sum())})",
        rasterized=True,
    )
    ax.scatter(
        x[srg],
        y[srg],
        s=style.s_fg,
        alpha=style.alpha_fg,
        color=style.color_srg,
        label=f"SRG (n={int(srg.sum())})",
    )
    if x.size:
        xs = np.linspace(float(x.min()), float(x.max()), 100)
        ax.plot(
            xs,
            trend.predict(xs),
            color=style.color_fit,
            linewidth=1.5,
            label=f"fit: {trend.intercept:.4g} + {trend.slope:.4g}x",
        )

    # table is sorted by z_score, so the head holds the strongest SRGs
    top = table.loc[srg].head(style.annotate_top_k)
    for _, row in top.iterrows():
        ax.annotate(
            str(row["gene_id"]),
            (float(row["cells_detected"]), float(row["inv_avg_expression"])),
            fontsize=7,
            xytext=(3, -3),
            textcoords="offset points",
        )

    ax.set_xlabel("Cells detected")
    ax.set_ylabel("1 / average expression")
    ax.set_title("Inverse expression trend")
    ax.legend(loc="best", fontsize=style.legend_fontsize, frameon=True)
    ax.grid(alpha=0.25, linewidth=0.6)
    fig.tight_layout()
    save_figure(fig, out_path, style=style)
    return out_path


def plot_zscore_hist(
    table: pd.DataFrame,
    stats: ResidualStats,
    cutoff: float,
    out_path: Path,
    *,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> Path:
    """Histogram of residual Z-scores with the cutoff and residual mean."""
    z = table["z_score"].to_numpy(dtype=float)

    fig, ax = plt.subplots(figsize=style.figsize_hist)
    ax.hist(z, bins=style.hist_bins, color=style.color_bg, edgecolor="black", linewidth=0.4)
    ax.axvline(float(cutoff), color=style.color_srg, linestyle="--", linewidth=1.2, label=f"cutoff={cutoff:g}")
    if stats.stddev > 0:
        ax.axvline(
            stats.mean / stats.stddev,
            color=style.color_fit,
            linestyle=":",
            linewidth=1.2,
            label="residual mean",
        )
    ax.set_xlabel("Z-score (residual / sd)")
    ax.set_ylabel("Gene count")
    ax.set_title("Residual Z-scores")
    ax.legend(loc="best", fontsize=style.legend_fontsize, frameon=True)
    fig.tight_layout()
    save_figure(fig, out_path, style=style)
    return out_path
