"""Typed configuration and result containers for SRG computations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

GENE_COLUMNS: tuple[str, ...] = (
    "gene_id",
    "cells_detected",
    "total_umi",
    "avg_expression",
    "inv_avg_expression",
    "predicted_inv_avg_expression",
    "residual",
    "z_score",
    "is_srg",
)


@dataclass(frozen=True)
class SRGConfig:
    """Thresholds for one SRG run.

    - `min_cells_detected`: genes detected in fewer cells are dropped.
    - `max_cells_detected`: genes detected in this many cells or more are
      dropped; `None` disables the cap.
    - `z_score_cutoff`: genes with a Z-score strictly below it are SRGs.
    - `auto_max_threshold`: estimate the cap from the detection curve knee
      when `max_cells_detected` is unset.
    """

    min_cells_detected: int = 2
    max_cells_detected: int | None = None
    z_score_cutoff: float = -1.0
    auto_max_threshold: bool = False


@dataclass(frozen=True)
class TrendFit:
    """OLS fit of inverse average expression on detection count."""

    intercept: float
    slope: float
    r_value: float
    p_value: float
    stderr: float
    n_genes: int

    def predict(self, cells_detected):
        return self.intercept + self.slope * cells_detected


@dataclass(frozen=True)
class ResidualStats:
    mean: float
    stddev: float
    n_genes: int


@dataclass(frozen=True)
class SRGResult:
    """Output of `find_srgs`.

    `table` is sorted by ascending `z_score`; `hits` follows the same order.
    """

    table: pd.DataFrame
    hits: tuple[str, ...]
    trend: TrendFit
    residual_stats: ResidualStats
    config: SRGConfig
    n_genes_input: int
    n_genes_scored: int
    max_cells_detected_used: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
