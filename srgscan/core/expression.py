"""Average and inverse-average expression per gene."""

from __future__ import annotations

import numpy as np
import pandas as pd

from srgscan.core.errors import MalformedMatrixError


def add_expression_metrics(table: pd.DataFrame) -> pd.DataFrame:
    """Add `avg_expression` and `inv_avg_expression` columns.

    Expects filtered genes (every row detected in at least one cell); a
    detected gene with zero total UMI breaks the count contract and is
    rejected.
    """
    detected = table["cells_detected"].to_numpy(dtype=float)
    total = table["total_umi"].to_numpy(dtype=float)

    for field, values in (("cells_detected", detected), ("total_umi", total)):
        bad = np.flatnonzero(values <= 0)
        if bad.size:
            raise MalformedMatrixError(
                f"{field} must be positive to compute average expression",
                stage="expression",
                field=field,
                gene_id=str(table["gene_id"].iloc[int(bad[0])]),
            )

    avg = total / detected
    out = table.copy()
    out["avg_expression"] = avg
    out["inv_avg_expression"] = 1.0 / avg
    return out
