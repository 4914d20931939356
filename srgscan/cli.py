"""Command-line interfaces for SRGscan."""

from __future__ import annotations

import argparse
from typing import Any, Iterable

from srgscan.config import config_from_dict
from srgscan.core.aggregate import aggregate_genes
from srgscan.core.filtering import estimate_detection_knee, filter_min_detected
from srgscan.pipeline.io import read_dge
from srgscan.pipeline.run import run_from_config, run_srg_pipeline


def _srg_overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "min_cells_detected": args.min_cells_detected,
        "max_cells_detected": args.max_cells_detected,
        "z_score_cutoff": args.z_cutoff,
        "auto_max_threshold": True if args.auto_max_threshold else None,
    }


def run_main(argv: Iterable[str] | None = None) -> int:
    """Run the SRG pipeline.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(description="Find spatially restricted genes in a DGE matrix")
    parser.add_argument("--input", default=None, help="DGE matrix (.txt/.tsv/.csv[.gz] or .h5ad)")
    parser.add_argument("--outdir", default=None, help="Output directory root")
    parser.add_argument("--config", default=None, help="Path to JSON config")
    parser.add_argument(
        "--min-cells-detected",
        type=int,
        default=None,
        help="Drop genes detected in fewer cells (default 2)",
    )
    parser.add_argument(
        "--max-cells-detected",
        type=int,
        default=None,
        help="Drop genes detected in this many cells or more (default: no cap)",
    )
    parser.add_argument(
        "--z-cutoff",
        type=float,
        default=None,
        help="Genes with Z-score below this are SRGs (default -1)",
    )
    parser.add_argument(
        "--auto-max-threshold",
        action="store_true",
        help="Estimate the max-detection cap from the detection curve knee",
    )
    parser.add_argument("--no-plots", action="store_true", help="Skip diagnostic figures")
    parser.add_argument("--log-level", default=None, help="Logging level (default INFO)")
    args = parser.parse_args(list(argv) if argv is not None else None)

    overrides = _srg_overrides(args)
    if args.config is not None:
        overrides.update(
            {
                "input_path": args.input,
                "outdir": args.outdir,
                "make_plots": False if args.no_plots else None,
                "log_level": args.log_level,
            }
        )
        summary = run_from_config(args.config, overrides)
    else:
        if args.input is None:
            parser.error("--input is required unless --config is given")
        cfg = config_from_dict({k: v for k, v in overrides.items() if v is not None})
        summary = run_srg_pipeline(
            args.input,
            args.outdir or ".",
            cfg,
            make_plots=not args.no_plots,
            log_level=args.log_level or "INFO",
        )

    print(f"n_genes_scored={summary['n_genes_scored']}")
    print(f"n_hits={summary['n_hits']}")
    print(f"hits={summary['artifacts']['hits']}")
    return 0


def knee_main(argv: Iterable[str] | None = None) -> int:
    """Print a suggested max-detection cap for a DGE matrix.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(description="Suggest max_cells_detected from the detection curve")
    parser.add_argument("--input", required=True, help="DGE matrix (.txt/.tsv/.csv[.gz] or .h5ad)")
    parser.add_argument("--min-cells-detected", type=int, default=2, help="Minimum detection filter")
    args = parser.parse_args(list(argv) if argv is not None else None)

    matrix = read_dge(args.input)
    genes = filter_min_detected(aggregate_genes(matrix), args.min_cells_detected)
    knee = estimate_detection_knee(genes["cells_detected"].to_numpy())
    print(f"n_genes={genes.shape[0]}")
    print(f"n_cells={matrix.n_cells}")
    print(f"suggested_max_cells_detected={knee if knee is not None else 'none'}")
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(description="SRGscan CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("run", help="Run the SRG pipeline", add_help=False)
    sub.add_parser("knee", help="Suggest a max-detection cap", add_help=False)

    args, remainder = parser.parse_known_args(list(argv) if argv is not None else None)
    if args.command == "run":
        return run_main(remainder)
    if args.command == "knee":
        return knee_main(remainder)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
