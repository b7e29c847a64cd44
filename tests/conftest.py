"""Shared fixtures for building roads and templates in meters."""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from site_planner.models.geometry import GeoPoint, LocalPoint
from site_planner.models.layout import Centerline, FootprintTemplate, RoadClass
from site_planner.services.geodesy import destination_point

ORIGIN = GeoPoint(0.0, 0.0)


def _straight_road(
    length_m: float,
    start: Optional[GeoPoint] = None,
    bearing: float = 90.0,
    road_class: RoadClass = RoadClass.DEFAULT,
) -> Centerline:
    start = start or ORIGIN
    return Centerline(points=(start, destination_point(start, length_m, bearing)), road_class=road_class)


def _rect_template(template_id: int, width: float, length: float) -> FootprintTemplate:
    half = width / 2
    ring = (
        LocalPoint(-half, 0.0),
        LocalPoint(half, 0.0),
        LocalPoint(half, length),
        LocalPoint(-half, length),
        LocalPoint(-half, 0.0),
    )
    return FootprintTemplate(id=template_id, width=width, length=length, polygon=ring)


@pytest.fixture
def straight_road() -> Callable[..., Centerline]:
    """Factory for a two-point road starting at the origin, heading east by default."""
    return _straight_road


@pytest.fixture
def rect_template() -> Callable[[int, float, float], FootprintTemplate]:
    """Factory for a normalized rectangular footprint."""
    return _rect_template
