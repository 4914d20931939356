#!/usr/bin/env python3
"""Run the SRGscan pipeline from a JSON config."""

from __future__ import annotations

import argparse

from srgscan.pipeline.run import run_from_config


def main() -> int:
    parser = argparse.ArgumentParser(description="SRGscan pipeline")
    parser.add_argument(
        "--config",
        default="configs/srgscan_example.json",
        help="Path to JSON config",
    )
    args = parser.parse_args()
    run_from_config(args.config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
