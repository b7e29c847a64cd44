#!/usr/bin/env python3
"""Generate roadside house placements from a YAML layout job."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from site_planner.services.layout_spec import (  # noqa: E402
    LayoutSpecError,
    load_layout_spec,
    run_layout_job,
)


def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(description="Lay out houses along road centerlines.")
    parser.add_argument("input", type=Path, help="YAML layout job path.")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output directory (default: layouts/<stem>).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every skipped slot.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        spec = load_layout_spec(args.input)
        output_dir = args.output or Path("layouts") / spec.stem
        geojson_path = run_layout_job(spec, output_dir)
    except LayoutSpecError as exc:
        print(f"Layout failed: {exc}", file=sys.stderr)
        return 1

    print(f"Generated layout: {geojson_path}")
    return 0


if __name__ == "__main__":
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    raise SystemExit(main(sys.argv[1:]))
