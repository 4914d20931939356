"""Linear trend of inverse average expression against detection count.

Under a simple capture model the expression needed for a gene to be seen in
a cell scales inversely with how often it is seen, so `1 / avg_expression`
falls roughly linearly with `cells_detected`. Genes far below the fitted line
are detected in fewer cells than their expression predicts.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy.stats import linregress

from srgscan.core.errors import InsufficientDataError
from srgscan.core.types import TrendFit


def fit_trend(table: pd.DataFrame) -> TrendFit:
    """Fit `inv_avg_expression = intercept + slope * cells_detected` by OLS."""
    x = table["cells_detected"].to_numpy(dtype=float)
    y = table["inv_avg_expression"].to_numpy(dtype=float)
    n_distinct = int(np.unique(x).size)
    if n_distinct < 2:
        raise InsufficientDataError(
            f"need at least 2 distinct detection counts to fit the trend, got {n_distinct} "
            f"across {x.size} genes",
            stage="trend",
            field="cells_detected",
        )

    res = linregress(x, y)
    return TrendFit(
        intercept=float(res.intercept),
        slope=float(res.slope),
        r_value=float(res.rvalue),
        p_value=float(res.pvalue),
        stderr=float(res.stderr),
        n_genes=int(x.size),
    )


def apply_trend(table: pd.DataFrame, trend: TrendFit) -> pd.DataFrame:
    """Add `predicted_inv_avg_expression` and `residual` from a fitted trend."""
    x = table["cells_detected"].to_numpy(dtype=float)
    predicted = trend.predict(x)
    out = table.copy()
    out["predicted_inv_avg_expression"] = predicted
    out["residual"] = out["inv_avg_expression"].to_numpy(dtype=float) - predicted
    return out
