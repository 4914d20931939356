"""Pipeline I/O, logging, and utility helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from srgscan.core.errors import MalformedMatrixError
from srgscan.core.matrix import RawMatrix, matrix_from_frame, validate_matrix

TEXT_SUFFIXES: tuple[str, ...] = (".txt", ".tsv", ".dge", ".csv")


def _get_scanpy():
    import scanpy as sc

    return sc


def ensure_dir(path: str | Path) -> None:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)


def setup_logger(log_path: Path, logger_name: str, level: str | int = logging.INFO) -> logging.Logger:
    ensure_dir(log_path.parent)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    fh = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    fh.setFormatter(formatter)
    logger.addHandler(fh)
    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)
    return logger


def _base_suffix(path: Path) -> str:
    suffixes = [s.lower() for s in path.suffixes]
    if suffixes and suffixes[-1] == ".gz":
        suffixes = suffixes[:-1]
    return suffixes[-1] if suffixes else ""


def read_dge(path: str | Path) -> RawMatrix:
    """Read a DGE count matrix (genes x cells).

    Delimited text (`.txt`, `.tsv`, `.dge`, `.csv`, optionally gzipped) holds
    gene ids in the first column and cell ids in the header row. `.h5ad`
    files are cells x genes and are transposed.
    """
    in_path = Path(path)
    if not in_path.exists():
        raise FileNotFoundError(f"Input file '{in_path}' not found.")

    suffix = _base_suffix(in_path)
    if suffix == ".h5ad":
        return _read_h5ad(in_path)
    if suffix not in TEXT_SUFFIXES:
        raise ValueError(
            f"Unsupported DGE format '{suffix or in_path.name}'. "
            f"Use one of {', '.join(TEXT_SUFFIXES + ('.h5ad',))}."
        )

    sep = "," if suffix == ".csv" else "\t"
    try:
        # pandas renames repeated header labels (c1 -> c1.1); keep the raw ones
        header = pd.read_csv(in_path, sep=sep, header=None, nrows=1, dtype=str)
        frame = pd.read_csv(in_path, sep=sep, index_col=0)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise MalformedMatrixError(
            f"cannot parse '{in_path.name}': {exc}", stage="matrix", field="counts"
        ) from exc
    cells = header.iloc[0, 1:].astype(str).tolist()
    if len(cells) != frame.shape[1]:
        raise MalformedMatrixError(
            f"header has {len(cells)} cell ids but rows have {frame.shape[1]} values",
            stage="matrix",
            field="cell_id",
        )
    frame.columns = cells
    frame.index = frame.index.astype(str)
    return matrix_from_frame(frame)


def _read_h5ad(path: Path) -> RawMatrix:
    sc = _get_scanpy()
    adata = sc.read_h5ad(path)
    X = adata.X
    if X is None:
        raise ValueError(f"'{path}' has no X matrix.")
    return validate_matrix(
        X.T,
        gene_ids=[str(g) for g in adata.var_names],
        cell_ids=[str(c) for c in adata.obs_names],
    )


def write_stats_table(table: pd.DataFrame, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(out, index=False)
    return out


def write_hits(hits: Iterable[str], path: str | Path) -> Path:
    """Write gene ids one per line, no header and no quoting."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as fh:
        for gene in hits:
            fh.write(f"{gene}\n")
    return out


def read_hits(path: str | Path) -> list[str]:
    with Path(path).open("r", encoding="utf-8") as fh:
        return [line.rstrip("\n") for line in fh if line.strip()]
