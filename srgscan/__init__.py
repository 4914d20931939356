"""SRGscan public API."""

from srgscan._version import __version__
from srgscan.core.compute import find_srgs
from srgscan.core.errors import (
    DegenerateDistributionError,
    InsufficientDataError,
    MalformedMatrixError,
    SRGError,
)
from srgscan.core.matrix import RawMatrix, matrix_from_frame, validate_matrix
from srgscan.core.types import SRGConfig, SRGResult


def run_srg_pipeline(*args, **kwargs):
    """Lazy wrapper to avoid importing plotting dependencies at import time."""
    from srgscan.pipeline.run import run_srg_pipeline as _run_srg_pipeline

    return _run_srg_pipeline(*args, **kwargs)


__all__ = [
    "__version__",
    "find_srgs",
    "validate_matrix",
    "matrix_from_frame",
    "RawMatrix",
    "SRGConfig",
    "SRGResult",
    "SRGError",
    "MalformedMatrixError",
    "InsufficientDataError",
    "DegenerateDistributionError",
    "run_srg_pipeline",
]
