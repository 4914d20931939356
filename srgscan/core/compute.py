"""Core SRG computation (no plotting, no filesystem I/O)."""

from __future__ import annotations

import logging

from srgscan.core.aggregate import aggregate_genes
from srgscan.core.classify import classify_residuals, hit_list, residual_stats
from srgscan.core.expression import add_expression_metrics
from srgscan.core.filtering import filter_genes, resolve_max_threshold
from srgscan.core.matrix import RawMatrix, validate_matrix
from srgscan.core.trend import apply_trend, fit_trend
from srgscan.core.types import GENE_COLUMNS, SRGConfig, SRGResult

logger = logging.getLogger(__name__)


def find_srgs(matrix: RawMatrix, config: SRGConfig | None = None) -> SRGResult:
    """Run validation, aggregation, filtering, trend fitting and classification on `matrix`."""
    cfg = config or SRGConfig()
    matrix = validate_matrix(matrix.counts, matrix.gene_ids, matrix.cell_ids)

    genes = aggregate_genes(matrix)
    threshold = resolve_max_threshold(genes, cfg)
    kept = filter_genes(genes, cfg, threshold=threshold)
    logger.debug("aggregated %d genes, %d kept after filtering", genes.shape[0], kept.shape[0])

    scored = add_expression_metrics(kept)
    trend = fit_trend(scored)
    scored = apply_trend(scored, trend)
    stats = residual_stats(scored["residual"].to_numpy())
    final = classify_residuals(scored, cutoff=cfg.z_score_cutoff, stats=stats)
    final = final.loc[:, list(GENE_COLUMNS)]
    hits = tuple(hit_list(final))
    logger.debug(
        "trend intercept=%.6g slope=%.6g; residual sd=%.6g; %d SRGs",
        trend.intercept,
        trend.slope,
        stats.stddev,
        len(hits),
    )

    return SRGResult(
        table=final,
        hits=hits,
        trend=trend,
        residual_stats=stats,
        config=cfg,
        n_genes_input=int(genes.shape[0]),
        n_genes_scored=int(final.shape[0]),
        max_cells_detected_used=threshold,
        metadata={
            "n_cells": matrix.n_cells,
            "n_genes_zero_detected": int((genes["cells_detected"] == 0).sum()),
        },
    )
