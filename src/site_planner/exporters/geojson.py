"""GeoJSON export for house layouts and site analyses."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from site_planner.constants import HOUSE_HEIGHT_M
from site_planner.models.layout import LayoutResult, PlacedFootprint
from site_planner.services.site_metrics import SiteAnalysis


def placement_to_feature(placement: PlacedFootprint) -> Dict[str, Any]:
    """GeoJSON Polygon feature for one placed house."""
    return {
        "type": "Feature",
        "properties": {
            "id": placement.id,
            "houseType": placement.template_id,
            "color": placement.color,
            "width": placement.width,
            "length": placement.length,
            "roadIndex": placement.source_road_index,
            "side": placement.side.value,
            "slot": placement.slot_index,
            "arcPosition": round(placement.arc_position, 3),
            "bearing": round(placement.orientation_deg, 3),
            "height": HOUSE_HEIGHT_M,
        },
        "geometry": {
            "type": "Polygon",
            "coordinates": [[list(point.as_tuple()) for point in placement.world_polygon]],
        },
    }


def placements_to_feature_collection(result: LayoutResult) -> Dict[str, Any]:
    """FeatureCollection of all placements; warnings go in a foreign member."""
    collection: Dict[str, Any] = {
        "type": "FeatureCollection",
        "features": [placement_to_feature(placement) for placement in result.placements],
    }
    if result.warnings:
        collection["warnings"] = [
            {"code": warning.code, "message": warning.message} for warning in result.warnings
        ]
    return collection


def site_analysis_to_dict(analysis: SiteAnalysis) -> Dict[str, Any]:
    """Serializable payload describing a site boundary."""
    return {
        "siteId": analysis.site_id,
        "areaM2": round(analysis.area_m2, 2),
        "areaHa": round(analysis.area_ha, 4),
        "perimeterM": round(analysis.perimeter_m, 2),
        "area": analysis.planar_area,
        "boundary": {
            "type": "Polygon",
            "coordinates": [[list(point.as_tuple()) for point in analysis.boundary]],
        },
        "edges": [
            {
                "from": list(edge.start.as_tuple()),
                "to": list(edge.end.as_tuple()),
                "length": round(edge.length_m, 3),
                "bearing": round(edge.bearing_deg, 3),
                "direction": edge.direction,
            }
            for edge in analysis.edges
        ],
    }


def write_json(payload: Dict[str, Any], destination: Path) -> None:
    """Write a JSON mapping to disk, creating parent folders."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    with destination.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)
