#!/usr/bin/env python3
"""Compute area, edges and bearings for a site boundary polygon."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from site_planner.exporters.geojson import site_analysis_to_dict, write_json  # noqa: E402
from site_planner.models.geometry import GeoPoint  # noqa: E402
from site_planner.services.site_metrics import SiteMetricsError, analyse_boundary  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyse a site boundary GeoJSON Polygon")
    parser.add_argument("boundary", type=Path, help="GeoJSON Feature or Polygon geometry")
    parser.add_argument("--site-id", default=None, help="Identifier stored with the analysis")
    parser.add_argument("--json", type=Path, required=True, help="Destination JSON file")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    data = json.loads(args.boundary.read_text(encoding="utf-8"))
    geometry = data.get("geometry", data) if isinstance(data, dict) else None
    if not isinstance(geometry, dict) or geometry.get("type") != "Polygon":
        print("Boundary must be a GeoJSON Polygon.", file=sys.stderr)
        return 1

    points = [GeoPoint.from_sequence(position) for position in geometry["coordinates"][0]]
    try:
        analysis = analyse_boundary(points, site_id=args.site_id)
    except SiteMetricsError as exc:
        print(f"Analysis failed: {exc}", file=sys.stderr)
        return 1

    write_json(site_analysis_to_dict(analysis), args.json)
    print(f"Site area {analysis.area_ha:.4f} ha written to {args.json}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
