"""Point types shared by the geodesy and layout services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple


@dataclass(frozen=True)
class GeoPoint:
    """Geographic point in degrees (WGS84 longitude/latitude order)."""

    lon: float
    lat: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lon, self.lat)

    @classmethod
    def from_sequence(cls, raw: Sequence[float]) -> "GeoPoint":
        """Build from a GeoJSON ``[lon, lat]`` position (extra values ignored)."""
        return cls(float(raw[0]), float(raw[1]))


@dataclass(frozen=True)
class LocalPoint:
    """Cartesian point in a local metric frame (meters)."""

    x: float
    y: float


def close_ring(points: Iterable[GeoPoint]) -> List[GeoPoint]:
    """Return the points as a list whose last element repeats the first."""
    ring = list(points)
    if ring and ring[0] != ring[-1]:
        ring.append(ring[0])
    return ring


__all__ = ["GeoPoint", "LocalPoint", "close_ring"]
