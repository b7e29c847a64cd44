"""Great-circle helpers and meter/degree conversion on a spherical earth."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from site_planner.constants import EARTH_RADIUS_M, METERS_PER_DEGREE_LAT
from site_planner.models.geometry import GeoPoint, LocalPoint

_ZERO_LENGTH_M = 1e-9


def haversine_distance(start: GeoPoint, end: GeoPoint) -> float:
    """Great-circle distance between two points in meters."""
    lat1 = math.radians(start.lat)
    lat2 = math.radians(end.lat)
    d_lat = lat2 - lat1
    d_lon = math.radians(end.lon - start.lon)
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def initial_bearing(start: GeoPoint, end: GeoPoint) -> float:
    """Bearing from ``start`` towards ``end`` in degrees, clockwise from north, in (-180, 180]."""
    lat1 = math.radians(start.lat)
    lat2 = math.radians(end.lat)
    d_lon = math.radians(end.lon - start.lon)
    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lon)
    return math.degrees(math.atan2(y, x))


def normalize_bearing(bearing: float) -> float:
    """Wrap a bearing into [0, 360)."""
    return bearing % 360.0


def destination_point(origin: GeoPoint, distance_m: float, bearing_deg: float) -> GeoPoint:
    """Point reached by travelling ``distance_m`` from ``origin`` along ``bearing_deg``."""
    if distance_m == 0:
        return origin
    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    lat1 = math.radians(origin.lat)
    lon1 = math.radians(origin.lon)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(delta) + math.cos(lat1) * math.sin(delta) * math.cos(theta)
    )
    lon2 = lon1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2),
    )
    return GeoPoint(math.degrees(lon2), math.degrees(lat2))


def interpolate_segment(start: GeoPoint, end: GeoPoint, distance_m: float) -> GeoPoint:
    """Point ``distance_m`` meters from ``start`` along the great circle to ``end``."""
    if distance_m <= 0:
        return start
    if distance_m >= haversine_distance(start, end):
        return end
    return destination_point(start, distance_m, initial_bearing(start, end))


def cumulative_lengths(points: Sequence[GeoPoint]) -> List[float]:
    """Arc length from the first point to each point of the polyline."""
    if not points:
        return []
    lengths = [0.0]
    for start, end in zip(points[:-1], points[1:]):
        lengths.append(lengths[-1] + haversine_distance(start, end))
    return lengths


def polyline_length(points: Sequence[GeoPoint]) -> float:
    lengths = cumulative_lengths(points)
    return lengths[-1] if lengths else 0.0


def point_at_distance(
    points: Sequence[GeoPoint],
    cumulative: Sequence[float],
    target_m: float,
) -> Optional[Tuple[GeoPoint, float]]:
    """Interpolate the point and local road bearing at ``target_m`` along the polyline.

    Zero-length segments are skipped, so the bearing always comes from a
    segment with extent. Targets past either end clamp to that end. Returns
    ``None`` when the polyline has no segment with non-zero length.
    """
    segments = [
        index
        for index in range(len(points) - 1)
        if cumulative[index + 1] - cumulative[index] > _ZERO_LENGTH_M
    ]
    if not segments:
        return None

    chosen = segments[-1]
    for index in segments:
        if target_m <= cumulative[index + 1]:
            chosen = index
            break

    start = points[chosen]
    end = points[chosen + 1]
    bearing = initial_bearing(start, end)
    along = min(max(target_m - cumulative[chosen], 0.0), cumulative[chosen + 1] - cumulative[chosen])
    return interpolate_segment(start, end, along), bearing


@dataclass(frozen=True)
class MetricFrame:
    """Equirectangular tangent frame converting between degrees and meters.

    X grows east and Y grows north, both in meters from ``origin``. Accuracy is
    adequate over the few hundred meters a site spans.
    """

    origin: GeoPoint

    @property
    def meters_per_degree_lon(self) -> float:
        return METERS_PER_DEGREE_LAT * math.cos(math.radians(self.origin.lat))

    @property
    def meters_per_degree_lat(self) -> float:
        return METERS_PER_DEGREE_LAT

    def to_local(self, point: GeoPoint) -> LocalPoint:
        x, y = self.project(point.lon, point.lat)
        return LocalPoint(x, y)

    def to_geo(self, point: LocalPoint) -> GeoPoint:
        lon, lat = self.unproject(point.x, point.y)
        return GeoPoint(lon, lat)

    def project(self, lon, lat):
        """Degrees to meters; works on scalars or coordinate arrays (``shapely.transform``)."""
        return (
            (lon - self.origin.lon) * self.meters_per_degree_lon,
            (lat - self.origin.lat) * self.meters_per_degree_lat,
        )

    def unproject(self, x, y):
        """Meters to degrees; inverse of :meth:`project`."""
        return (
            self.origin.lon + x / self.meters_per_degree_lon,
            self.origin.lat + y / self.meters_per_degree_lat,
        )

    @classmethod
    def centered_on(cls, points: Sequence[GeoPoint]) -> "MetricFrame":
        """Frame whose origin is the bounding-box center of ``points``."""
        if not points:
            raise ValueError("Cannot center a metric frame on zero points")
        lons = [point.lon for point in points]
        lats = [point.lat for point in points]
        return cls(GeoPoint((min(lons) + max(lons)) / 2, (min(lats) + max(lats)) / 2))


__all__ = [
    "haversine_distance",
    "initial_bearing",
    "normalize_bearing",
    "destination_point",
    "interpolate_segment",
    "cumulative_lengths",
    "polyline_length",
    "point_at_distance",
    "MetricFrame",
]
