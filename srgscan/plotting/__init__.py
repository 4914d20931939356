"""Diagnostic plotting API for SRG runs."""

from srgscan.plotting.diagnostics import (
    plot_detection_curve,
    plot_trend_fit,
    plot_zscore_hist,
)
from srgscan.plotting.styles import (
    DEFAULT_PLOT_STYLE,
    PlotStyle,
    apply_plot_style,
    plot_style_dict,
)
from srgscan.plotting.utils import save_figure

__all__ = [
    "PlotStyle",
    "DEFAULT_PLOT_STYLE",
    "apply_plot_style",
    "plot_style_dict",
    "save_figure",
    "plot_detection_curve",
    "plot_trend_fit",
    "plot_zscore_hist",
]
