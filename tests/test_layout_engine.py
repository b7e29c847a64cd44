"""Tests for roadside house placement."""

from __future__ import annotations

import math
import random

import pytest
from shapely.geometry import Polygon

from site_planner.models.geometry import GeoPoint, LocalPoint
from site_planner.models.layout import (
    Centerline,
    FootprintTemplate,
    LayoutConfig,
    RoadClass,
    Side,
)
from site_planner.services.geodesy import (
    MetricFrame,
    destination_point,
    haversine_distance,
    polyline_length,
)
from site_planner.services.layout_engine import layout, plan_slots, transform_footprint
from site_planner.services.road_buffers import RoadBuffer, build_road_buffers

CONFIG = LayoutConfig(edge_spacing_m=5.0, road_offset_m=10.0, end_clearance_m=5.0)


def test_single_template_fills_straight_road_greedily(straight_road, rect_template):
    road = straight_road(100.0)
    template = rect_template(1, 8.0, 10.0)

    result = layout([road], [template], CONFIG, rng=random.Random(7))

    # usable 90 m: slots consume 0, 13, ..., 78; the next would end at 99.
    groups = result.by_road_side()
    assert len(groups[(0, Side.LEFT)]) == 7
    assert len(groups[(0, Side.RIGHT)]) == 7
    assert [p.arc_position for p in groups[(0, Side.LEFT)]] == pytest.approx(
        [9.0, 22.0, 35.0, 48.0, 61.0, 74.0, 87.0]
    )
    assert result.warnings == ()


def test_placements_are_closed_valid_and_offset_to_the_correct_side(straight_road, rect_template):
    road = straight_road(100.0)
    result = layout([road], [rect_template(1, 8.0, 10.0)], CONFIG, rng=random.Random(3))

    assert result.placements
    for placement in result.placements:
        ring = placement.world_polygon
        assert ring[0] == ring[-1]
        assert Polygon([point.as_tuple() for point in ring]).is_valid
        # Eastbound road: left is north, right is south.
        if placement.side is Side.LEFT:
            assert placement.anchor.lat > 0
            assert abs((placement.orientation_deg + 180.0) % 360.0 - 180.0) < 1e-6
        else:
            assert placement.anchor.lat < 0
            assert placement.orientation_deg == pytest.approx(180.0, abs=1e-6)
        road_point = GeoPoint(placement.anchor.lon, 0.0)
        assert haversine_distance(road_point, placement.anchor) == pytest.approx(10.0, abs=1e-3)


def test_spacing_and_clearance_hold_for_mixed_templates(straight_road, rect_template):
    road = straight_road(180.0)
    templates = [rect_template(1, 8.0, 10.0), rect_template(2, 12.0, 8.0), rect_template(3, 6.0, 14.0)]

    result = layout([road], templates, CONFIG, rng=random.Random(11))
    total = polyline_length(road.points)

    for (_, _), placements in result.by_road_side().items():
        for placement in placements:
            assert placement.arc_position - placement.width / 2 >= CONFIG.end_clearance_m - 1e-9
            assert placement.arc_position + placement.width / 2 <= total - CONFIG.end_clearance_m + 1e-9
        for first, second in zip(placements[:-1], placements[1:]):
            gap = second.arc_position - first.arc_position
            assert gap >= first.width / 2 + second.width / 2 + CONFIG.edge_spacing_m - 1e-9


def test_short_road_yields_nothing(straight_road, rect_template):
    road = straight_road(8.0)

    result = layout([road], [rect_template(1, 8.0, 10.0)], CONFIG)

    assert result.placements == ()
    assert [w.code for w in result.warnings] == ["centerline_degenerate"]


def test_degenerate_road_does_not_abort_other_roads(straight_road, rect_template):
    lonely = Centerline(points=(GeoPoint(5.0, 5.0),))
    road = straight_road(100.0)

    result = layout([lonely, road], [rect_template(1, 8.0, 10.0)], CONFIG)

    assert {p.source_road_index for p in result.placements} == {1}
    degenerate = result.warnings_with_code("centerline_degenerate")
    assert len(degenerate) == 1
    assert degenerate[0].road_index == 0


def test_foreign_buffers_block_every_slot(straight_road, rect_template):
    road = straight_road(100.0)
    north_start = destination_point(destination_point(GeoPoint(0.0, 0.0), 20.0, 270.0), 15.0, 0.0)
    south_start = destination_point(destination_point(GeoPoint(0.0, 0.0), 20.0, 270.0), 15.0, 180.0)
    north = straight_road(140.0, start=north_start, road_class=RoadClass.PRIMARY)
    south = straight_road(140.0, start=south_start, road_class=RoadClass.PRIMARY)

    result = layout([road, north, south], [rect_template(1, 8.0, 10.0)], CONFIG, rng=random.Random(5))

    assert [p for p in result.placements if p.source_road_index == 0] == []
    blocked = [w for w in result.warnings_with_code("collision") if w.road_index == 0]
    assert len(blocked) == 14


def test_explicit_buffers_cover_roads_outside_the_call(straight_road, rect_template):
    road = straight_road(100.0)
    own = build_road_buffers([road])
    frame = MetricFrame(GeoPoint(0.0, 0.0))
    blanket = Polygon(
        [
            frame.unproject(-50.0, -50.0),
            frame.unproject(150.0, -50.0),
            frame.unproject(150.0, 50.0),
            frame.unproject(-50.0, 50.0),
        ]
    )
    foreign = RoadBuffer(road_index=99, road_class=RoadClass.PRIMARY, width_m=8.0, polygon=blanket)

    result = layout([road], [rect_template(1, 8.0, 10.0)], CONFIG, buffers=[*own, foreign])

    assert result.placements == ()
    assert len(result.warnings_with_code("collision")) == 14


def test_no_placement_intersects_a_foreign_buffer(straight_road, rect_template):
    east = straight_road(200.0, start=destination_point(GeoPoint(0.0, 0.0), 100.0, 270.0))
    north = straight_road(
        200.0,
        start=destination_point(GeoPoint(0.0, 0.0), 100.0, 180.0),
        bearing=0.0,
        road_class=RoadClass.SECONDARY,
    )
    templates = [rect_template(1, 8.0, 10.0), rect_template(2, 12.0, 8.0)]
    buffers = build_road_buffers([east, north])

    result = layout([east, north], templates, CONFIG, rng=random.Random(2), buffers=buffers)

    assert result.placements
    assert result.warnings_with_code("collision")
    for placement in result.placements:
        for buffer in buffers:
            if buffer.road_index == placement.source_road_index:
                continue
            assert not buffer.intersects(placement.world_polygon)


def test_invalid_template_is_skipped_with_warning(straight_road, rect_template):
    road = straight_road(150.0)
    broken = FootprintTemplate(id=2, width=0.0, length=10.0, polygon=rect_template(2, 8.0, 10.0).polygon)
    templates = [rect_template(1, 8.0, 10.0), broken, rect_template(3, 6.0, 14.0)]

    result = layout([road], templates, CONFIG, rng=random.Random(4))

    assert result.placements
    assert set(result.count_by_template()) <= {1, 3}
    invalid = result.warnings_with_code("template_invalid")
    assert [w.template_id for w in invalid] == [2]


def test_layout_is_reproducible_with_the_same_seed(straight_road, rect_template):
    road = straight_road(250.0, bearing=45.0)
    templates = [rect_template(1, 8.0, 10.0), rect_template(2, 12.0, 8.0), rect_template(3, 6.0, 14.0)]

    first = layout([road], templates, CONFIG, rng=random.Random(99))
    second = layout([road], templates, CONFIG, rng=random.Random(99))

    assert first == second


def test_zero_length_segments_do_not_change_the_layout(straight_road, rect_template):
    road = straight_road(100.0)
    start, end = road.points
    padded = Centerline(points=(start, start, end, end))
    template = rect_template(1, 8.0, 10.0)

    plain = layout([road], [template], CONFIG, rng=random.Random(1))
    doubled = layout([padded], [template], CONFIG, rng=random.Random(1))

    assert len(doubled.placements) == 14
    for a, b in zip(plain.placements, doubled.placements):
        assert a.anchor.lon == pytest.approx(b.anchor.lon)
        assert a.anchor.lat == pytest.approx(b.anchor.lat)


def test_plan_slots_accepts_template_that_exactly_fills_remaining_length(rect_template):
    template = rect_template(1, 8.0, 10.0)

    slots = plan_slots(21.0, [template], CONFIG, random.Random(0))

    assert [slot.start_m for slot in slots] == [5.0, 18.0]
    assert slots[-1].end_m == 26.0


def test_plan_slots_is_bounded_for_tiny_templates(rect_template):
    config = LayoutConfig(edge_spacing_m=0.0, max_slots_per_side=50)

    slots = plan_slots(100.0, [rect_template(1, 1e-6, 1.0)], config, random.Random(0))

    assert len(slots) == 50


def test_transform_footprint_rotates_local_axes():
    anchor = GeoPoint(0.0, 0.0)
    frame = MetricFrame(anchor)
    polygon = [LocalPoint(0.0, 0.0), LocalPoint(4.0, 10.0), LocalPoint(0.0, 10.0), LocalPoint(0.0, 0.0)]

    north = transform_footprint(polygon, anchor, 0.0)
    corner = frame.to_local(north[1])
    assert corner.x == pytest.approx(4.0, abs=0.02)
    assert corner.y == pytest.approx(10.0, abs=0.02)
    assert north[0] == anchor

    east = transform_footprint(polygon, anchor, 90.0)
    ahead = frame.to_local(east[2])
    assert ahead.x == pytest.approx(10.0, abs=0.02)
    assert ahead.y == pytest.approx(0.0, abs=0.02)


def test_layout_config_rejects_negative_distances():
    with pytest.raises(ValueError):
        LayoutConfig(edge_spacing_m=-1.0)
    with pytest.raises(ValueError):
        LayoutConfig(max_slots_per_side=0)


def test_road_fitting_no_template_yields_nothing_without_warning(straight_road, rect_template):
    # 14 m road leaves 4 m after clearance; an 8 m house never fits.
    road = straight_road(14.0)

    result = layout([road], [rect_template(1, 8.0, 10.0)], CONFIG, rng=random.Random(0))

    assert result.placements == ()
    assert result.warnings_with_code("centerline_degenerate") == []


def test_road_class_strings_are_accepted(straight_road, rect_template):
    road = straight_road(100.0)
    primary = Centerline(points=road.points, road_class="PRIMARY")
    unknown = Centerline(points=road.points, road_class="motorway")

    assert primary.road_class is RoadClass.PRIMARY
    assert unknown.road_class is RoadClass.DEFAULT

    result = layout([primary], [rect_template(1, 8.0, 10.0)], CONFIG, rng=random.Random(0))
    assert len(result.placements) == 14
    result = layout([unknown], [rect_template(1, 8.0, 10.0)], CONFIG, rng=random.Random(0))
    assert len(result.placements) == 14


def test_non_finite_template_is_skipped(straight_road, rect_template):
    road = straight_road(150.0)
    endless = FootprintTemplate(id=9, width=8.0, length=math.inf, polygon=rect_template(9, 8.0, 10.0).polygon)

    result = layout([road], [rect_template(1, 8.0, 10.0), endless], CONFIG, rng=random.Random(4))

    assert set(result.count_by_template()) == {1}
    assert [w.template_id for w in result.warnings_with_code("template_invalid")] == [9]
