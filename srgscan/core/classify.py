"""Residual Z-scores and SRG calls."""

from __future__ import annotations

import numpy as np
import pandas as pd

from srgscan.core.errors import DegenerateDistributionError
from srgscan.core.types import ResidualStats

DEFAULT_Z_CUTOFF = -1.0


def _is_zero_spread(table: pd.DataFrame, residuals: np.ndarray, stddev: float) -> bool:
    """Treat spreads at the rounding level of the fitted values as zero."""
    scale_col = "inv_avg_expression" if "inv_avg_expression" in table.columns else "residual"
    scale = np.abs(table[scale_col].to_numpy(dtype=float))
    peak = float(scale.max()) if scale.size else 0.0
    atol = 8.0 * np.finfo(float).eps * max(1.0, peak) * max(1, residuals.size)
    return bool(np.isclose(stddev, 0.0, rtol=0.0, atol=atol))


def residual_stats(residuals: np.ndarray) -> ResidualStats:
    """Mean and population standard deviation (ddof=0) of the residuals."""
    arr = np.asarray(residuals, dtype=float).ravel()
    if arr.size == 0:
        raise DegenerateDistributionError(
            "no residuals to summarise", stage="classify", field="residual"
        )
    return ResidualStats(
        mean=float(np.mean(arr)),
        stddev=float(np.std(arr, ddof=0)),
        n_genes=int(arr.size),
    )


def classify_residuals(
    table: pd.DataFrame,
    cutoff: float = DEFAULT_Z_CUTOFF,
    stats: ResidualStats | None = None,
) -> pd.DataFrame:
    """Score residuals and flag SRGs.

    `z_score = residual / stddev`; the residual mean is not subtracted.
    Genes with `z_score < cutoff` are SRGs. The result is stably sorted by
    ascending `z_score`.
    """
    residuals = table["residual"].to_numpy(dtype=float)
    if stats is None:
        stats = residual_stats(residuals)
    if not np.isfinite(stats.stddev) or _is_zero_spread(table, residuals, stats.stddev):
        raise DegenerateDistributionError(
            f"residual standard deviation is {stats.stddev}; Z-scores are undefined",
            stage="classify",
            field="residual",
        )

    out = table.copy()
    out["z_score"] = residuals / stats.stddev
    out["is_srg"] = out["z_score"].to_numpy() < float(cutoff)
    return out.sort_values("z_score", kind="mergesort").reset_index(drop=True)


def hit_list(table: pd.DataFrame) -> list[str]:
    return [str(g) for g in table.loc[table["is_srg"].to_numpy(dtype=bool), "gene_id"]]
