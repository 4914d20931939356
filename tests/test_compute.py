from __future__ import annotations

import numpy as np
import pytest

from srgscan.core.aggregate import aggregate_genes
from srgscan.core.compute import find_srgs
from srgscan.core.errors import (
    DegenerateDistributionError,
    InsufficientDataError,
    MalformedMatrixError,
)
from srgscan.core.filtering import filter_genes
from srgscan.core.matrix import RawMatrix, validate_matrix
from srgscan.core.types import GENE_COLUMNS, SRGConfig


def _toy_matrix(n_cells: int = 10):
    rows = {}
    for d in (2, 3, 5, 6, 7, 8, 9):
        rows[f"BG{d}"] = [1] * d + [0] * (n_cells - d)
    rows["GeneA"] = [1, 1, 1, 1] + [0] * (n_cells - 4)
    rows["GeneB"] = [0, 0, 0, 2] + [0] * (n_cells - 4)
    rows["GeneC"] = [5] + [0] * (n_cells - 1)
    # highly expressed but seen in only three cells
    rows["HOT"] = [50, 50, 50] + [0] * (n_cells - 3)
    rows["ZERO"] = [0] * n_cells
    return validate_matrix(list(rows.values()), gene_ids=list(rows))


def test_three_gene_scenario_filters_single_cell_genes():
    m = validate_matrix(
        [[1, 1, 1, 1], [0, 0, 0, 2], [5, 0, 0, 0]],
        gene_ids=["GeneA", "GeneB", "GeneC"],
    )
    genes = aggregate_genes(m)
    assert genes.set_index("gene_id").loc["GeneA"].tolist() == [4, 4]
    kept = filter_genes(genes, SRGConfig())
    assert kept["gene_id"].tolist() == ["GeneA"]

    # a single surviving gene cannot support the trend
    with pytest.raises(InsufficientDataError):
        find_srgs(m)


def test_find_srgs_end_to_end():
    result = find_srgs(_toy_matrix())
    table = result.table

    assert list(table.columns) == list(GENE_COLUMNS)
    assert result.n_genes_input == 12
    assert result.n_genes_scored == 9
    assert not {"GeneB", "GeneC", "ZERO"} & set(table["gene_id"])
    assert (table["cells_detected"] >= 2).all()

    assert result.hits == ("HOT",)
    assert table["gene_id"].iloc[0] == "HOT"
    assert np.all(np.diff(table["z_score"].to_numpy()) >= 0)
    assert table["is_srg"].sum() == 1

    gene_a = table.set_index("gene_id").loc["GeneA"]
    assert gene_a["avg_expression"] == 1.0
    assert gene_a["inv_avg_expression"] == 1.0

    assert np.isclose(result.residual_stats.mean, 0.0, atol=1e-12)
    assert np.allclose(
        table["z_score"], table["residual"] / result.residual_stats.stddev
    )
    assert result.max_cells_detected_used is None
    assert result.metadata["n_genes_zero_detected"] == 1


def test_find_srgs_honours_max_threshold_and_cutoff():
    result = find_srgs(_toy_matrix(), SRGConfig(max_cells_detected=9))
    assert "BG9" not in set(result.table["gene_id"])
    assert result.n_genes_scored == 8
    assert result.max_cells_detected_used == 9

    loose = find_srgs(_toy_matrix(), SRGConfig(z_score_cutoff=0.0))
    assert len(loose.hits) > 1
    assert loose.hits[0] == "HOT"
    assert list(loose.hits) == loose.table.loc[loose.table["is_srg"], "gene_id"].tolist()


def test_two_point_exact_fit_is_degenerate():
    # both genes sit on the fitted line, so the residual spread is rounding noise
    m = validate_matrix(
        [[1, 1] + [0] * 8, [3] * 10],
        gene_ids=["G1", "G2"],
    )
    with pytest.raises(DegenerateDistributionError) as info:
        find_srgs(m)
    assert info.value.stage == "classify"


def test_find_srgs_validates_hand_built_matrix():
    counts = _toy_matrix().counts.copy()
    counts[0, 0] = -1
    m = RawMatrix(gene_ids=_toy_matrix().gene_ids, cell_ids=_toy_matrix().cell_ids, counts=counts)
    with pytest.raises(MalformedMatrixError, match="non-negative") as info:
        find_srgs(m)
    assert info.value.stage == "matrix"
    assert info.value.gene_id == "BG2"

    fractional = RawMatrix(gene_ids=("A", "B"), cell_ids=("c1", "c2"), counts=np.array([[1.5, 2.0], [3.0, 1.0]]))
    with pytest.raises(MalformedMatrixError, match="integers"):
        find_srgs(fractional)
