from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from srgscan.core.classify import classify_residuals, hit_list, residual_stats
from srgscan.core.errors import DegenerateDistributionError
from srgscan.core.types import ResidualStats


def _table(residuals, genes=None) -> pd.DataFrame:
    residuals = np.asarray(residuals, dtype=float)
    if genes is None:
        genes = [f"G{i + 1}" for i in range(residuals.size)]
    return pd.DataFrame({"gene_id": genes, "residual": residuals})


def test_residual_stats_use_population_sd():
    stats = residual_stats(np.array([1.0, 2.0, 3.0, 4.0]))
    assert np.isclose(stats.mean, 2.5)
    assert np.isclose(stats.stddev, np.sqrt(1.25))
    assert stats.n_genes == 4


def test_z_score_is_not_centred():
    table = _table([1.0, 2.0, 3.0, 4.0])
    out = classify_residuals(table)
    sd = np.sqrt(1.25)
    assert np.allclose(out["z_score"], np.array([1.0, 2.0, 3.0, 4.0]) / sd)
    assert not out["is_srg"].any()


def test_z_score_scale_invariance():
    residuals = np.array([0.3, -1.2, 0.5, 0.1, 0.9])
    k = 7.5
    base = classify_residuals(_table(residuals))
    scaled = classify_residuals(_table(k * residuals))
    assert np.isclose(residual_stats(k * residuals).stddev, k * residual_stats(residuals).stddev)
    assert np.allclose(base["z_score"], scaled["z_score"])
    assert base["gene_id"].tolist() == scaled["gene_id"].tolist()


def test_cutoff_boundary_is_strict():
    out = classify_residuals(_table([-1.0, 1.0], genes=["LOW", "HIGH"]), cutoff=-1.0)
    low = out.loc[out["gene_id"] == "LOW"].iloc[0]
    assert low["z_score"] == -1.0
    assert not bool(low["is_srg"])

    stats = ResidualStats(mean=0.0, stddev=1.0, n_genes=2)
    eps = 1e-9
    out = classify_residuals(_table([-1.0 - eps, 1.0], genes=["LOW", "HIGH"]), cutoff=-1.0, stats=stats)
    assert bool(out.loc[out["gene_id"] == "LOW", "is_srg"].iloc[0])


def test_output_sorted_by_z_score_with_hits():
    out = classify_residuals(_table([0.5, -2.0, 1.0, -0.5, 0.0]))
    assert out["gene_id"].tolist() == ["G2", "G4", "G5", "G1", "G3"]
    assert np.all(np.diff(out["z_score"].to_numpy()) >= 0)
    assert hit_list(out) == ["G2"]


def test_ties_keep_original_order():
    out = classify_residuals(_table([1.0, -1.0, -1.0, 1.0], genes=["C", "A", "B", "D"]))
    assert out["gene_id"].tolist() == ["A", "B", "C", "D"]


def test_zero_variance_is_degenerate():
    with pytest.raises(DegenerateDistributionError) as info:
        classify_residuals(_table([0.25, 0.25, 0.25]))
    assert info.value.stage == "classify"
    with pytest.raises(DegenerateDistributionError):
        residual_stats(np.array([]))


def test_rounding_level_spread_is_degenerate():
    # an exact fit leaves residuals at floating-point noise, not zero
    with pytest.raises(DegenerateDistributionError) as info:
        classify_residuals(_table([1.1e-16, -1.1e-16, 5.5e-17]))
    assert info.value.field == "residual"

    table = _table([2.2e-16, -2.2e-16])
    table["inv_avg_expression"] = [1.0, 1.0 / 3.0]
    with pytest.raises(DegenerateDistributionError):
        classify_residuals(table)

    # small but real spread still scores
    out = classify_residuals(_table([1e-6, -1e-6]))
    assert np.allclose(out["z_score"], [-1.0, 1.0])


def test_classify_does_not_mutate_input():
    table = _table([0.5, -2.0, 1.0])
    classify_residuals(table)
    assert list(table.columns) == ["gene_id", "residual"]
    assert table["gene_id"].tolist() == ["G1", "G2", "G3"]
