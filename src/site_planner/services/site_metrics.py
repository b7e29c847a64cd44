"""Area, edge and bearing analysis for a drawn site boundary."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from shapely.geometry import Polygon

from site_planner.models.geometry import GeoPoint, close_ring
from site_planner.services.geodesy import (
    MetricFrame,
    haversine_distance,
    initial_bearing,
    normalize_bearing,
)

_CARDINALS = (
    "North",
    "Northeast",
    "East",
    "Southeast",
    "South",
    "Southwest",
    "West",
    "Northwest",
)


class SiteMetricsError(ValueError):
    """Raised when a boundary cannot be analysed."""


@dataclass(frozen=True)
class BoundaryEdge:
    """One side of the site boundary."""

    start: GeoPoint
    end: GeoPoint
    length_m: float
    bearing_deg: float  # [0, 360)
    direction: str


@dataclass(frozen=True)
class SiteAnalysis:
    """Derived measurements for a closed site boundary."""

    boundary: Tuple[GeoPoint, ...]
    area_m2: float
    perimeter_m: float
    planar_area: float  # shoelace area in squared degrees
    edges: Tuple[BoundaryEdge, ...] = field(default_factory=tuple)
    site_id: Optional[str] = None

    @property
    def area_ha(self) -> float:
        return self.area_m2 / 10000.0

    @property
    def longest_edge(self) -> Optional[BoundaryEdge]:
        if not self.edges:
            return None
        return max(self.edges, key=lambda edge: edge.length_m)


def polygon_area_shoelace(points: Sequence[GeoPoint]) -> float:
    """Planar area of a closed ring in coordinate units (shoelace formula)."""
    total = 0.0
    for start, end in zip(points[:-1], points[1:]):
        total += start.lon * end.lat - end.lon * start.lat
    return abs(total) / 2.0


def geodesic_area(points: Sequence[GeoPoint]) -> float:
    """Area of the ring in square meters using a local metric frame."""
    if len(points) < 3:
        return 0.0
    frame = MetricFrame.centered_on(points)
    polygon = Polygon([frame.project(point.lon, point.lat) for point in points])
    return abs(polygon.area)


def cardinal_direction(bearing_deg: float) -> str:
    """Eight-way compass name for a bearing (45 degree sectors centered on North)."""
    sector = int(((normalize_bearing(bearing_deg) + 22.5) % 360.0) // 45.0)
    return _CARDINALS[sector]


def boundary_edges(points: Sequence[GeoPoint]) -> List[BoundaryEdge]:
    """Edges between consecutive points of a closed ring."""
    edges: List[BoundaryEdge] = []
    for start, end in zip(points[:-1], points[1:]):
        bearing = normalize_bearing(initial_bearing(start, end))
        edges.append(
            BoundaryEdge(
                start=start,
                end=end,
                length_m=haversine_distance(start, end),
                bearing_deg=bearing,
                direction=cardinal_direction(bearing),
            )
        )
    return edges


def analyse_boundary(points: Sequence[GeoPoint], site_id: Optional[str] = None) -> SiteAnalysis:
    """Measure a site boundary; the ring is closed before analysis."""
    ring = close_ring(points)
    if len(set(ring)) < 3:
        raise SiteMetricsError("Boundary needs at least 3 distinct points")

    edges = boundary_edges(ring)
    return SiteAnalysis(
        boundary=tuple(ring),
        area_m2=geodesic_area(ring),
        perimeter_m=sum(edge.length_m for edge in edges),
        planar_area=polygon_area_shoelace(ring),
        edges=tuple(edges),
        site_id=site_id,
    )


__all__ = [
    "SiteMetricsError",
    "BoundaryEdge",
    "SiteAnalysis",
    "polygon_area_shoelace",
    "geodesic_area",
    "cardinal_direction",
    "boundary_edges",
    "analyse_boundary",
]
