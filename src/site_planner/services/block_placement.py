"""Positioning pre-fab block drawings (CAD units) on the map."""

from __future__ import annotations

import copy
import math
from typing import Any, Dict, List, Optional, Tuple

from site_planner.constants import DEFAULT_BLOCK_SIZE_M
from site_planner.models.geometry import GeoPoint, LocalPoint
from site_planner.services.geodesy import MetricFrame


class BlockPlacementError(ValueError):
    """Raised when a block drawing is not a GeoJSON FeatureCollection."""


def transform_block_to_geo(
    block: Dict[str, Any],
    target: GeoPoint,
    rotation_deg: float = 0.0,
    target_size_m: float = DEFAULT_BLOCK_SIZE_M,
) -> Optional[Dict[str, Any]]:
    """Return a copy of ``block`` with its LineStrings placed at ``target``.

    The drawing is centered on its bounding box, scaled so the larger side
    spans ``target_size_m`` meters and rotated by the geographic bearing
    ``rotation_deg`` (converted to a math angle as ``90 - bearing``).
    Returns ``None`` when the drawing has no LineString coordinates.
    """
    if not isinstance(block, dict) or not isinstance(block.get("features"), list):
        raise BlockPlacementError("Block must be a GeoJSON FeatureCollection")
    if target_size_m <= 0:
        raise BlockPlacementError("target_size_m must be positive")

    placed = copy.deepcopy(block)
    lines = [feature for feature in placed["features"] if _is_line(feature)]
    coords = [(float(x), float(y)) for feature in lines for x, y, *_ in feature["geometry"]["coordinates"]]
    if not coords:
        return None

    min_x = min(x for x, _ in coords)
    max_x = max(x for x, _ in coords)
    min_y = min(y for _, y in coords)
    max_y = max(y for _, y in coords)
    extent = max(max_x - min_x, max_y - min_y)
    scale = target_size_m / extent if extent > 0 else 1.0
    center = ((min_x + max_x) / 2, (min_y + max_y) / 2)

    angle = math.radians(90.0 - rotation_deg)
    frame = MetricFrame(target)
    for feature in lines:
        feature["geometry"]["coordinates"] = [
            list(frame.to_geo(_to_meters((float(x), float(y)), center, scale, angle)).as_tuple())
            for x, y, *_ in feature["geometry"]["coordinates"]
        ]
    return placed


def block_road_lines(placed_block: Dict[str, Any]) -> List[Dict[str, Any]]:
    """LineString features of a placed block whose ``Layer`` names a road."""
    roads: List[Dict[str, Any]] = []
    for feature in placed_block.get("features", []):
        layer = (feature.get("properties") or {}).get("Layer") or ""
        if _is_line(feature) and "ROAD" in layer.upper():
            roads.append(feature)
    return roads


def _is_line(feature: Any) -> bool:
    return (
        isinstance(feature, dict)
        and isinstance(feature.get("geometry"), dict)
        and feature["geometry"].get("type") == "LineString"
    )


def _to_meters(
    point: Tuple[float, float],
    center: Tuple[float, float],
    scale: float,
    angle: float,
) -> LocalPoint:
    x = (point[0] - center[0]) * scale
    y = (point[1] - center[1]) * scale
    return LocalPoint(
        x * math.cos(angle) - y * math.sin(angle),
        x * math.sin(angle) + y * math.cos(angle),
    )


__all__ = ["BlockPlacementError", "transform_block_to_geo", "block_road_lines"]
