from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from srgscan.core.filtering import (
    estimate_detection_knee,
    filter_genes,
    filter_max_detected,
    filter_min_detected,
    resolve_max_threshold,
)
from srgscan.core.types import SRGConfig


def _genes(detected: list[int]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "gene_id": [f"G{i}" for i in range(len(detected))],
            "cells_detected": detected,
            "total_umi": [3 * d for d in detected],
        }
    )


def test_min_filter_drops_single_and_zero_detection():
    out = filter_min_detected(_genes([0, 1, 2, 5, 1, 3]))
    assert out["gene_id"].tolist() == ["G2", "G3", "G5"]
    assert out.index.tolist() == [0, 1, 2]


def test_min_filter_is_idempotent():
    table = _genes([0, 1, 2, 7, 1, 4, 9])
    once = filter_min_detected(table)
    twice = filter_min_detected(once)
    pd.testing.assert_frame_equal(once, twice)


def test_min_filter_rejects_minimum_below_two():
    with pytest.raises(ValueError, match=">= 2"):
        filter_min_detected(_genes([2, 3]), 0)
    # a single-cell floor lets cells_detected == 1 genes into the trend
    with pytest.raises(ValueError, match=">= 2"):
        filter_min_detected(_genes([1, 2, 3]), 1)


def test_max_filter_none_is_noop_and_threshold_is_exclusive():
    table = _genes([2, 5, 10, 11])
    assert filter_max_detected(table, None).shape[0] == 4
    out = filter_max_detected(table, 10)
    assert out["cells_detected"].tolist() == [2, 5]


def test_max_filter_is_monotone_in_threshold():
    rng = np.random.default_rng(2)
    table = _genes(rng.integers(2, 500, size=300).tolist())
    sizes = [filter_max_detected(table, t).shape[0] for t in range(1, 520, 13)]
    assert all(a <= b for a, b in zip(sizes, sizes[1:]))


def test_filter_genes_applies_min_then_max_and_keeps_order():
    table = _genes([1, 9, 3, 890, 2, 1000])
    cfg = SRGConfig(max_cells_detected=890)
    out = filter_genes(table, cfg)
    assert out["gene_id"].tolist() == ["G1", "G2", "G4"]
    # input frame is untouched
    assert table.shape[0] == 6


def test_knee_finds_saturation_bend():
    detected = [2, 30, 100, 5, 99, 100, 60, 10, 2, 100]
    assert estimate_detection_knee(np.array(detected)) == 99


def test_knee_returns_none_for_short_or_flat_curves():
    assert estimate_detection_knee(np.array([5, 3])) is None
    assert estimate_detection_knee(np.array([4, 4, 4, 4])) is None
    # strictly convex decline has no plateau to cut
    assert estimate_detection_knee(np.array([64, 32, 16, 8, 4, 2])) is None


def test_resolve_max_threshold_prefers_explicit_value():
    table = _genes([2, 30, 100, 5, 99, 100, 60, 10, 2, 100])
    assert resolve_max_threshold(table, SRGConfig()) is None
    assert resolve_max_threshold(table, SRGConfig(max_cells_detected=50, auto_max_threshold=True)) == 50
    assert resolve_max_threshold(table, SRGConfig(auto_max_threshold=True)) == 99
