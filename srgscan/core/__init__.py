"""Core compute subpackage."""

from srgscan.core.aggregate import aggregate_genes
from srgscan.core.classify import classify_residuals, hit_list, residual_stats
from srgscan.core.compute import find_srgs
from srgscan.core.errors import (
    DegenerateDistributionError,
    InsufficientDataError,
    MalformedMatrixError,
    SRGError,
)
from srgscan.core.expression import add_expression_metrics
from srgscan.core.filtering import (
    estimate_detection_knee,
    filter_genes,
    filter_max_detected,
    filter_min_detected,
    resolve_max_threshold,
)
from srgscan.core.matrix import RawMatrix, matrix_from_frame, validate_matrix
from srgscan.core.trend import apply_trend, fit_trend
from srgscan.core.types import GENE_COLUMNS, ResidualStats, SRGConfig, SRGResult, TrendFit

__all__ = [
    "GENE_COLUMNS",
    "RawMatrix",
    "SRGConfig",
    "SRGResult",
    "TrendFit",
    "ResidualStats",
    "SRGError",
    "MalformedMatrixError",
    "InsufficientDataError",
    "DegenerateDistributionError",
    "validate_matrix",
    "matrix_from_frame",
    "aggregate_genes",
    "filter_min_detected",
    "filter_max_detected",
    "filter_genes",
    "resolve_max_threshold",
    "estimate_detection_knee",
    "add_expression_metrics",
    "fit_trend",
    "apply_trend",
    "residual_stats",
    "classify_residuals",
    "hit_list",
    "find_srgs",
]
