"""End-to-end SRG run: read a DGE, score genes, write tables, hits and figures."""

from __future__ import annotations

import platform
from dataclasses import asdict
from datetime import datetime, timezone
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Any

import matplotlib
import numpy as np
import pandas as pd
import scipy

from srgscan._version import __version__
from srgscan.config import config_from_dict, load_json_config
from srgscan.core.aggregate import aggregate_genes
from srgscan.core.compute import find_srgs
from srgscan.core.errors import SRGError
from srgscan.core.filtering import filter_min_detected
from srgscan.core.types import SRGConfig, SRGResult
from srgscan.pipeline.io import (
    ensure_dir,
    read_dge,
    setup_logger,
    write_hits,
    write_json,
    write_stats_table,
)

LOGGER_NAME = "srgscan"


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _library_versions() -> dict[str, str]:
    versions = {
        "numpy": np.__version__,
        "pandas": pd.__version__,
        "scipy": scipy.__version__,
        "matplotlib": matplotlib.__version__,
    }
    try:
        versions["scanpy"] = importlib_metadata.version("scanpy")
    except importlib_metadata.PackageNotFoundError:
        versions["scanpy"] = "not installed"
    return versions


def _write_figures(result: SRGResult, matrix, fig_dir: Path) -> dict[str, str]:
    from srgscan.plotting import (
        apply_plot_style,
        plot_detection_curve,
        plot_trend_fit,
        plot_zscore_hist,
    )

    apply_plot_style()
    detected = filter_min_detected(aggregate_genes(matrix), result.config.min_cells_detected)
    paths = {
        "detection_curve": plot_detection_curve(
            detected,
            fig_dir / "detection_curve.png",
            threshold=result.max_cells_detected_used,
        ),
        "trend_fit": plot_trend_fit(result.table, result.trend, fig_dir / "trend_fit.png"),
        "zscore_hist": plot_zscore_hist(
            result.table,
            result.residual_stats,
            result.config.z_score_cutoff,
            fig_dir / "zscore_hist.png",
        ),
    }
    return {k: v.as_posix() for k, v in paths.items()}


def run_srg_pipeline(
    input_path: str | Path,
    outdir: str | Path,
    config: SRGConfig | None = None,
    *,
    make_plots: bool = True,
    log_level: str = "INFO",
) -> dict[str, Any]:
    """Run the full SRG pipeline and write its artifacts under `outdir`.

    Artifacts are written only after every stage has succeeded.
    """
    cfg = config or SRGConfig()
    root = Path(outdir)
    ensure_dir(root)
    logger = setup_logger(root / "logs" / "srgscan.log", LOGGER_NAME, level=log_level)
    started = _now_utc_iso()

    matrix = read_dge(input_path)
    logger.info("Loaded %s: %d genes x %d cells", input_path, matrix.n_genes, matrix.n_cells)

    try:
        result = find_srgs(matrix, cfg)
    except SRGError as exc:
        logger.error("SRG run failed at stage '%s': %s", exc.stage, exc.reason)
        raise

    logger.info(
        "Scored %d of %d genes (min_cells_detected=%d, max_cells_detected=%s)",
        result.n_genes_scored,
        result.n_genes_input,
        cfg.min_cells_detected,
        result.max_cells_detected_used,
    )
    logger.info(
        "Trend: intercept=%.6g slope=%.6g r=%.4f",
        result.trend.intercept,
        result.trend.slope,
        result.trend.r_value,
    )
    logger.info(
        "Residuals: mean=%.6g sd=%.6g; %d SRGs below z=%g",
        result.residual_stats.mean,
        result.residual_stats.stddev,
        len(result.hits),
        cfg.z_score_cutoff,
    )

    stats_path = write_stats_table(result.table, root / "tables" / "gene_stats.csv")
    hits_path = write_hits(result.hits, root / "hits.txt")
    figures: dict[str, str] = {}
    plot_style: dict[str, Any] | None = None
    if make_plots:
        from srgscan.plotting import plot_style_dict

        figures = _write_figures(result, matrix, root / "figures")
        plot_style = plot_style_dict()

    summary: dict[str, Any] = {
        "status": "ok",
        "timestamp_utc": _now_utc_iso(),
        "started_utc": started,
        "srgscan_version": __version__,
        "python_version": platform.python_version(),
        "versions": _library_versions(),
        "input_path": str(input_path),
        "parameters": asdict(cfg),
        "max_cells_detected_used": result.max_cells_detected_used,
        "n_cells": matrix.n_cells,
        "n_genes_input": result.n_genes_input,
        "n_genes_scored": result.n_genes_scored,
        "n_hits": len(result.hits),
        "trend": asdict(result.trend),
        "residual_stats": asdict(result.residual_stats),
        "plot_style": plot_style,
        "artifacts": {
            "gene_stats": stats_path.as_posix(),
            "hits": hits_path.as_posix(),
            "figures": figures,
        },
    }
    metadata_path = root / "metadata.json"
    write_json(metadata_path, summary)
    summary["artifacts"]["metadata"] = metadata_path.as_posix()
    logger.info("Wrote %d hits to %s", len(result.hits), hits_path)
    return summary


def run_from_config(config_path: str | Path, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
    """Run the pipeline from a JSON config; non-None `overrides` win."""
    data = dict(load_json_config(config_path))
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    input_path = data.get("input_path")
    if not input_path:
        raise ValueError(f"Config '{config_path}' is missing 'input_path'.")
    cfg = config_from_dict(data)
    return run_srg_pipeline(
        input_path,
        data.get("outdir", "."),
        cfg,
        make_plots=bool(data.get("make_plots", True)),
        log_level=str(data.get("log_level", "INFO")),
    )

