"""Configuration loading utilities for SRG runs."""

from __future__ import annotations

import json
import math
from dataclasses import fields
from pathlib import Path
from typing import Any

from srgscan.core.types import SRGConfig

PIPELINE_KEYS: frozenset[str] = frozenset({"input_path", "outdir", "make_plots", "log_level"})


def load_json_config(path: str | Path) -> dict[str, Any]:
    """Load and validate a pipeline config from a JSON file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if config_path.suffix.lower() != ".json":
        raise ValueError(
            f"Unsupported config format for '{config_path}'. Use a .json config file."
        )

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Invalid JSON in config '{config_path}' at line {exc.lineno}, "
            f"column {exc.colno}: {exc.msg}"
        ) from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Invalid config root in '{config_path}': expected JSON object, got {type(data).__name__}."
        )
    return data


def _as_int(key: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or float(value) != int(value):
        raise ValueError(f"'{key}' must be an integer, got {value!r}.")
    out = int(value)
    if out < minimum:
        raise ValueError(f"'{key}' must be >= {minimum}, got {out}.")
    return out


def config_from_dict(data: dict[str, Any]) -> SRGConfig:
    """Build an `SRGConfig` from config keys; pipeline-only keys are ignored."""
    srg_keys = {f.name for f in fields(SRGConfig)}
    unknown = sorted(set(data) - srg_keys - PIPELINE_KEYS)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    defaults = SRGConfig()
    min_cells = _as_int("min_cells_detected", data.get("min_cells_detected", defaults.min_cells_detected), 2)

    max_raw = data.get("max_cells_detected", defaults.max_cells_detected)
    max_cells = None if max_raw is None else _as_int("max_cells_detected", max_raw, 1)

    cutoff_raw = data.get("z_score_cutoff", defaults.z_score_cutoff)
    if isinstance(cutoff_raw, bool) or not isinstance(cutoff_raw, (int, float)):
        raise ValueError(f"'z_score_cutoff' must be a number, got {cutoff_raw!r}.")
    cutoff = float(cutoff_raw)
    if not math.isfinite(cutoff):
        raise ValueError("'z_score_cutoff' must be finite.")

    auto = data.get("auto_max_threshold", defaults.auto_max_threshold)
    if not isinstance(auto, bool):
        raise ValueError(f"'auto_max_threshold' must be true or false, got {auto!r}.")

    return SRGConfig(
        min_cells_detected=min_cells,
        max_cells_detected=max_cells,
        z_score_cutoff=cutoff,
        auto_max_threshold=auto,
    )
