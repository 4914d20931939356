"""Validated gene x cell UMI count matrix."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
import pandas as pd
import scipy.sparse as sp

from srgscan.core.errors import MalformedMatrixError

STAGE = "matrix"


@dataclass(frozen=True)
class RawMatrix:
    """Immutable DGE matrix: rows are genes, columns are cells."""

    gene_ids: tuple[str, ...]
    cell_ids: tuple[str, ...]
    counts: Any

    @property
    def n_genes(self) -> int:
        return int(self.counts.shape[0])

    @property
    def n_cells(self) -> int:
        return int(self.counts.shape[1])

    @property
    def is_sparse(self) -> bool:
        return sp.issparse(self.counts)


def _first_duplicate(ids: Sequence[str]) -> str | None:
    idx = pd.Index(ids)
    dup = idx[idx.duplicated()]
    if dup.empty:
        return None
    return str(dup[0])


def _check_rows(counts: Any) -> None:
    if isinstance(counts, (np.ndarray, pd.DataFrame)) or sp.issparse(counts):
        return
    lengths = {len(row) for row in counts if hasattr(row, "__len__")}
    if len(lengths) > 1:
        raise MalformedMatrixError(
            f"ragged rows with lengths {sorted(lengths)}", stage=STAGE, field="counts"
        )


def _check_values(values: np.ndarray, gene_ids: Sequence[str], rows: np.ndarray | None = None) -> None:
    """Validate count values; `rows` maps each value to its gene row (sparse data)."""

    def _gene_at(flat_pos: int) -> str:
        if rows is not None:
            return str(gene_ids[int(rows[flat_pos])])
        n_cols = values.shape[1] if values.ndim == 2 else 1
        return str(gene_ids[int(flat_pos // max(1, n_cols))])

    flat = values.ravel()
    bad = np.flatnonzero(~np.isfinite(flat))
    if bad.size:
        raise MalformedMatrixError(
            "counts must be finite", stage=STAGE, field="counts", gene_id=_gene_at(bad[0])
        )
    bad = np.flatnonzero(flat < 0)
    if bad.size:
        raise MalformedMatrixError(
            "counts must be non-negative",
            stage=STAGE,
            field="counts",
            gene_id=_gene_at(bad[0]),
        )
    bad = np.flatnonzero(flat != np.round(flat))
    if bad.size:
        raise MalformedMatrixError(
            "counts must be integers", stage=STAGE, field="counts", gene_id=_gene_at(bad[0])
        )


def validate_matrix(
    counts: Any,
    gene_ids: Sequence[str],
    cell_ids: Sequence[str] | None = None,
) -> RawMatrix:
    """Check the DGE contract and return an immutable `RawMatrix`.

    `counts` may be a nested sequence, a 2D numpy array or a scipy sparse
    matrix with one row per entry of `gene_ids`.
    """
    genes = tuple(str(g) for g in gene_ids)
    dup = _first_duplicate(genes)
    if dup is not None:
        raise MalformedMatrixError("gene ids must be unique", stage=STAGE, field="gene_id", gene_id=dup)

    if sp.issparse(counts):
        mat = sp.csr_matrix(counts, copy=True)
        if mat.shape[0] != len(genes):
            raise MalformedMatrixError(
                f"matrix has {mat.shape[0]} rows but {len(genes)} gene ids",
                stage=STAGE,
                field="gene_id",
            )
        rows = np.repeat(np.arange(mat.shape[0]), np.diff(mat.indptr))
        _check_values(np.asarray(mat.data, dtype=float), genes, rows=rows)
        mat.data = mat.data.astype(np.int64)
        mat.eliminate_zeros()
        data: Any = mat
    else:
        _check_rows(counts)
        try:
            arr = np.asarray(counts, dtype=float)
        except (TypeError, ValueError) as exc:
            raise MalformedMatrixError(
                f"counts are not a numeric matrix: {exc}", stage=STAGE, field="counts"
            ) from exc
        if arr.ndim == 1 and arr.size == 0:
            arr = arr.reshape(0, 0)
        if arr.ndim != 2:
            raise MalformedMatrixError(
                f"counts must be 2D, got shape {arr.shape}", stage=STAGE, field="counts"
            )
        if arr.shape[0] != len(genes):
            raise MalformedMatrixError(
                f"matrix has {arr.shape[0]} rows but {len(genes)} gene ids",
                stage=STAGE,
                field="gene_id",
            )
        _check_values(arr, genes)
        data = arr.astype(np.int64)

    n_cells = int(data.shape[1])
    if n_cells < 2:
        raise MalformedMatrixError(
            f"matrix needs at least 2 cells, got {n_cells}", stage=STAGE, field="cell_id"
        )

    if cell_ids is None:
        cells = tuple(f"cell_{i}" for i in range(n_cells))
    else:
        cells = tuple(str(c) for c in cell_ids)
        if len(cells) != n_cells:
            raise MalformedMatrixError(
                f"matrix has {n_cells} columns but {len(cells)} cell ids",
                stage=STAGE,
                field="cell_id",
            )
    return RawMatrix(gene_ids=genes, cell_ids=cells, counts=data)


def matrix_from_frame(frame: pd.DataFrame) -> RawMatrix:
    """Build a `RawMatrix` from a gene-indexed, cell-columned frame."""
    if frame.columns.duplicated().any():
        dup = str(frame.columns[frame.columns.duplicated()][0])
        raise MalformedMatrixError(f"duplicate cell id '{dup}'", stage=STAGE, field="cell_id")
    values = frame.apply(pd.to_numeric, errors="coerce").to_numpy(dtype=float)
    return validate_matrix(values, gene_ids=list(frame.index), cell_ids=list(frame.columns))
