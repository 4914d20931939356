"""Per-gene detection and UMI totals."""

from __future__ import annotations

import numpy as np
import pandas as pd
import scipy.sparse as sp

from srgscan.core.matrix import RawMatrix


def aggregate_genes(matrix: RawMatrix) -> pd.DataFrame:
    """Reduce the count matrix to one row per gene, in matrix row order.

    Returns columns `gene_id`, `cells_detected` (cells with a non-zero count)
    and `total_umi` (sum over cells).
    """
    X = matrix.counts
    if sp.issparse(X):
        csr = sp.csr_matrix(X)
        cells_detected = np.diff(csr.indptr).astype(np.int64)
        if csr.nnz and np.any(csr.data == 0):
            cells_detected = np.asarray((csr != 0).sum(axis=1)).ravel().astype(np.int64)
        total_umi = np.asarray(csr.sum(axis=1)).ravel().astype(np.int64)
    else:
        arr = np.asarray(X)
        cells_detected = np.count_nonzero(arr, axis=1).astype(np.int64)
        total_umi = arr.sum(axis=1).astype(np.int64)

    return pd.DataFrame(
        {
            "gene_id": pd.Series(matrix.gene_ids, dtype=object),
            "cells_detected": cells_detected,
            "total_umi": total_umi,
        }
    )
