"""Extract classified road centerlines from GeoJSON feature collections."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from site_planner.models.geometry import GeoPoint
from site_planner.models.layout import Centerline, RoadClass

logger = logging.getLogger(__name__)

_LAYER_CLASSES = {
    "ROAD_PRIMARY": RoadClass.PRIMARY,
    "ROAD_SECONDARY": RoadClass.SECONDARY,
    "ROAD_TERTIARY": RoadClass.TERTIARY,
}


class RoadNetworkError(ValueError):
    """Raised when the road document is not a GeoJSON FeatureCollection."""


def road_class_from_layer(layer: Optional[str]) -> RoadClass:
    """Map a CAD ``Layer`` property onto a road class."""
    if not layer:
        return RoadClass.DEFAULT
    return _LAYER_CLASSES.get(layer.upper(), RoadClass.DEFAULT)


def is_road_layer(layer: Optional[str]) -> bool:
    return layer is None or "ROAD" in layer.upper()


def extract_centerlines(collection: Any) -> List[Centerline]:
    """Return every LineString road feature as a :class:`Centerline`.

    Features with a ``Layer`` property are kept only when the layer names a
    road; features without one (drawn roads) are always kept.
    """
    if not isinstance(collection, dict) or collection.get("type") != "FeatureCollection":
        raise RoadNetworkError("Roads must be a GeoJSON FeatureCollection")

    centerlines: List[Centerline] = []
    for index, feature in enumerate(collection.get("features") or []):
        if not isinstance(feature, dict):
            continue
        geometry = feature.get("geometry")
        if not isinstance(geometry, dict) or geometry.get("type") != "LineString":
            continue
        properties = feature.get("properties")
        if not isinstance(properties, dict):
            properties = {}
        layer = properties.get("Layer")
        if layer is not None and not isinstance(layer, str):
            layer = str(layer)
        if not is_road_layer(layer):
            continue
        try:
            points = [GeoPoint.from_sequence(position) for position in geometry.get("coordinates") or []]
        except (IndexError, TypeError, ValueError) as exc:
            logger.warning("Skipping road feature %d with malformed coordinates: %s", index, exc)
            continue
        centerlines.append(
            Centerline(
                points=tuple(points),
                road_class=road_class_from_layer(layer),
                name=properties.get("name"),
            )
        )
    return centerlines


__all__ = ["RoadNetworkError", "road_class_from_layer", "is_road_layer", "extract_centerlines"]
