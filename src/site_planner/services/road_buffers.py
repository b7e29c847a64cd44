"""Buffered road polygons used to keep houses off neighbouring roads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import shapely
from shapely.geometry import LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry

from site_planner.constants import (
    ROAD_BUFFER_DEFAULT_M,
    ROAD_BUFFER_PRIMARY_M,
    ROAD_BUFFER_SECONDARY_M,
    ROAD_BUFFER_TERTIARY_M,
)
from site_planner.models.geometry import GeoPoint
from site_planner.models.layout import Centerline, RoadClass
from site_planner.services.geodesy import MetricFrame

_BUFFER_WIDTHS = {
    RoadClass.PRIMARY: ROAD_BUFFER_PRIMARY_M,
    RoadClass.SECONDARY: ROAD_BUFFER_SECONDARY_M,
    RoadClass.TERTIARY: ROAD_BUFFER_TERTIARY_M,
    RoadClass.DEFAULT: ROAD_BUFFER_DEFAULT_M,
}


@dataclass(frozen=True)
class RoadBuffer:
    """Polygon (lon/lat degrees) covering a road plus its safety margin."""

    road_index: int
    road_class: RoadClass
    width_m: float
    polygon: BaseGeometry

    def intersects(self, ring: Sequence[GeoPoint]) -> bool:
        """True when the closed ring touches or overlaps the buffer."""
        if len(ring) < 3:
            return False
        return Polygon([point.as_tuple() for point in ring]).intersects(self.polygon)


def buffer_width_for(road_class: RoadClass) -> float:
    """Buffer distance either side of the centerline for a road class."""
    return _BUFFER_WIDTHS[road_class]


def build_road_buffer(centerline: Centerline, road_index: int) -> Optional[RoadBuffer]:
    """Buffer a centerline in a local metric frame and return it in degrees.

    Returns ``None`` for a centerline without points.
    """
    points: List[GeoPoint] = []
    for point in centerline.points:
        if not points or points[-1] != point:
            points.append(point)
    if not points:
        return None

    frame = MetricFrame.centered_on(points)
    local_coords = [frame.project(point.lon, point.lat) for point in points]
    width = buffer_width_for(centerline.road_class)
    if len(local_coords) == 1:
        local_shape = Point(local_coords[0]).buffer(width)
    else:
        local_shape = LineString(local_coords).buffer(width)

    return RoadBuffer(
        road_index=road_index,
        road_class=centerline.road_class,
        width_m=width,
        polygon=shapely.transform(local_shape, frame.unproject, interleaved=False),
    )


def build_road_buffers(centerlines: Sequence[Centerline]) -> List[Optional[RoadBuffer]]:
    """Buffers for every centerline, index-aligned with the input."""
    return [build_road_buffer(centerline, index) for index, centerline in enumerate(centerlines)]


__all__ = ["RoadBuffer", "buffer_width_for", "build_road_buffer", "build_road_buffers"]
