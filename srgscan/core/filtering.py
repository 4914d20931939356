"""Detection-count filters and the optional knee heuristic for the upper cap."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from srgscan.core.types import SRGConfig

logger = logging.getLogger(__name__)


def filter_min_detected(table: pd.DataFrame, min_cells_detected: int = 2) -> pd.DataFrame:
    """Keep genes detected in at least `min_cells_detected` cells."""
    if int(min_cells_detected) < 2:
        raise ValueError("min_cells_detected must be >= 2.")
    keep = table["cells_detected"].to_numpy() >= int(min_cells_detected)
    return table.loc[keep].reset_index(drop=True)


def filter_max_detected(table: pd.DataFrame, threshold: int | None = None) -> pd.DataFrame:
    """Drop genes detected in `threshold` cells or more; `None` keeps everything."""
    if threshold is None:
        return table.reset_index(drop=True)
    keep = table["cells_detected"].to_numpy() < threshold
    return table.loc[keep].reset_index(drop=True)


def estimate_detection_knee(cells_detected: np.ndarray) -> int | None:
    """Suggest a max-detection cap from the knee of the ranked detection curve.

    Genes are ranked by descending `cells_detected`; the knee is the rank with
    the most negative second difference, where the saturated plateau of
    near-ubiquitous genes bends into the decline. Returns the detection
    count at the knee, or `None` when the curve is too short or has no such
    bend.
    """
    counts = np.sort(np.asarray(cells_detected, dtype=float).ravel())[::-1]
    if counts.size < 3 or counts[0] == counts[-1]:
        return None
    d2 = np.diff(counts, n=2)
    if float(np.min(d2)) >= 0.0:
        return None
    knee_idx = int(np.argmin(d2)) + 1
    return int(counts[knee_idx])


def filter_genes(
    table: pd.DataFrame,
    config: SRGConfig,
    threshold: int | None = None,
) -> pd.DataFrame:
    """Apply the minimum filter, then the maximum filter."""
    out = filter_min_detected(table, config.min_cells_detected)
    cap = config.max_cells_detected if threshold is None else threshold
    out = filter_max_detected(out, cap)
    logger.debug(
        "filter: %d -> %d genes (min=%d, max=%s)",
        table.shape[0],
        out.shape[0],
        config.min_cells_detected,
        cap,
    )
    return out


def resolve_max_threshold(table: pd.DataFrame, config: SRGConfig) -> int | None:
    """Pick the cap from config, or from the knee heuristic when enabled."""
    if config.max_cells_detected is not None:
        return int(config.max_cells_detected)
    if not config.auto_max_threshold:
        return None
    detected = table.loc[table["cells_detected"] >= config.min_cells_detected, "cells_detected"]
    knee = estimate_detection_knee(detected.to_numpy())
    logger.info("auto max_cells_detected from detection knee: %s", knee)
    return knee
