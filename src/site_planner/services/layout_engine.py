"""Greedy placement of house footprints along both sides of road centerlines."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from site_planner.models.geometry import GeoPoint, LocalPoint, close_ring
from site_planner.models.layout import (
    Centerline,
    FootprintTemplate,
    LayoutConfig,
    LayoutResult,
    LayoutWarning,
    PlacedFootprint,
    Side,
)
from site_planner.services.geodesy import (
    cumulative_lengths,
    destination_point,
    normalize_bearing,
    point_at_distance,
)
from site_planner.services.road_buffers import RoadBuffer, build_road_buffers

logger = logging.getLogger(__name__)

# Absorbs float drift so a template exactly filling the remaining length fits.
_FIT_TOLERANCE_M = 1e-9


@dataclass(frozen=True)
class LayoutSlot:
    """A template reserved at an arc-length interval along one road side."""

    index: int
    template: FootprintTemplate
    start_m: float

    @property
    def end_m(self) -> float:
        return self.start_m + self.template.width

    @property
    def center_m(self) -> float:
        return self.start_m + self.template.width / 2


def layout(
    centerlines: Sequence[Centerline],
    templates: Sequence[FootprintTemplate],
    config: Optional[LayoutConfig] = None,
    rng: Optional[random.Random] = None,
    buffers: Optional[Sequence[Optional[RoadBuffer]]] = None,
) -> LayoutResult:
    """Place templates along both sides of every centerline.

    ``buffers`` are matched to roads through ``RoadBuffer.road_index`` and
    default to buffers of ``centerlines`` themselves. Supply them explicitly
    to avoid roads that are not being laid out in this call. Bad input never
    raises: degenerate roads, invalid templates and colliding slots are
    reported in ``LayoutResult.warnings``.
    """
    config = config or LayoutConfig()
    rng = rng if rng is not None else random.Random(0)
    warnings: List[LayoutWarning] = []

    usable_templates = _valid_templates(templates, warnings)
    if buffers is None:
        buffers = build_road_buffers(centerlines)
    road_buffers = [buffer for buffer in buffers if buffer is not None]

    placements: List[PlacedFootprint] = []
    if usable_templates:
        for road_index, centerline in enumerate(centerlines):
            placements.extend(
                _layout_road(road_index, centerline, usable_templates, config, rng, road_buffers, warnings)
            )

    logger.info(
        "Placed %d houses along %d roads (%d warnings)",
        len(placements),
        len(centerlines),
        len(warnings),
    )
    return LayoutResult(placements=tuple(placements), warnings=tuple(warnings))


def plan_slots(
    usable_length_m: float,
    templates: Sequence[FootprintTemplate],
    config: LayoutConfig,
    rng: random.Random,
) -> List[LayoutSlot]:
    """Draw templates until the next one no longer fits in ``usable_length_m``.

    Only template widths and the gaps between them count against the budget;
    a template that exactly fills the remaining length is accepted. Slot
    starts are offset by the end clearance.
    """
    slots: List[LayoutSlot] = []
    if not templates or usable_length_m <= 0:
        return slots

    consumed = 0.0
    while len(slots) < config.max_slots_per_side:
        template = rng.choice(templates)
        if consumed + template.width > usable_length_m + _FIT_TOLERANCE_M:
            break
        slots.append(LayoutSlot(len(slots), template, config.end_clearance_m + consumed))
        consumed += template.width + config.edge_spacing_m
    return slots


def transform_footprint(
    polygon: Sequence[LocalPoint],
    anchor: GeoPoint,
    orientation_deg: float,
) -> Tuple[GeoPoint, ...]:
    """Rotate a local footprint by ``orientation_deg`` and place it at ``anchor``.

    Local +Y maps onto the orientation bearing and +X onto the bearing 90
    degrees clockwise of it. Each vertex is projected along the great circle
    from the anchor. The returned ring is closed.
    """
    world: List[GeoPoint] = []
    for point in polygon:
        distance = math.hypot(point.x, point.y)
        if distance == 0:
            world.append(anchor)
            continue
        local_bearing = math.degrees(math.atan2(point.x, point.y))
        world.append(destination_point(anchor, distance, orientation_deg + local_bearing))
    return tuple(close_ring(world))


def _valid_templates(
    templates: Sequence[FootprintTemplate],
    warnings: List[LayoutWarning],
) -> List[FootprintTemplate]:
    valid: List[FootprintTemplate] = []
    for template in templates:
        problem = template.validation_error()
        if problem is None:
            valid.append(template)
            continue
        logger.warning("Skipping template %s: %s", template.id, problem)
        warnings.append(
            LayoutWarning(
                code="template_invalid",
                message=f"Template {template.id} skipped: {problem}",
                template_id=template.id,
            )
        )
    return valid


def _layout_road(
    road_index: int,
    centerline: Centerline,
    templates: Sequence[FootprintTemplate],
    config: LayoutConfig,
    rng: random.Random,
    buffers: Sequence[RoadBuffer],
    warnings: List[LayoutWarning],
) -> List[PlacedFootprint]:
    points = centerline.points
    if len(points) < 2:
        warnings.append(
            LayoutWarning(
                code="centerline_degenerate",
                message=f"Road {road_index} has {len(points)} point(s); at least 2 required",
                road_index=road_index,
            )
        )
        return []

    cumulative = cumulative_lengths(points)
    total_length = cumulative[-1]
    usable_length = total_length - 2 * config.end_clearance_m
    if usable_length <= 0:
        warnings.append(
            LayoutWarning(
                code="centerline_degenerate",
                message=(
                    f"Road {road_index} is {total_length:.2f} m long; "
                    f"no usable length after {config.end_clearance_m:.2f} m end clearance"
                ),
                road_index=road_index,
            )
        )
        return []

    foreign_buffers = [buffer for buffer in buffers if buffer.road_index != road_index]
    placements: List[PlacedFootprint] = []
    for side in (Side.LEFT, Side.RIGHT):
        for slot in plan_slots(usable_length, templates, config, rng):
            placement = _place_slot(road_index, points, cumulative, slot, side, config)
            if placement is None:
                continue
            blocker = _first_collision(placement, foreign_buffers)
            if blocker is not None:
                logger.debug(
                    "Skipping %s: intersects %s road %d buffer (%.1f m)",
                    placement.id,
                    blocker.road_class.value,
                    blocker.road_index,
                    blocker.width_m,
                )
                warnings.append(
                    LayoutWarning(
                        code="collision",
                        message=f"{placement.id} intersects the buffer of road {blocker.road_index}",
                        template_id=slot.template.id,
                        road_index=road_index,
                    )
                )
                continue
            placements.append(placement)
    return placements


def _place_slot(
    road_index: int,
    points: Sequence[GeoPoint],
    cumulative: Sequence[float],
    slot: LayoutSlot,
    side: Side,
    config: LayoutConfig,
) -> Optional[PlacedFootprint]:
    located = point_at_distance(points, cumulative, slot.center_m)
    if located is None:
        return None
    road_point, road_bearing = located

    # Footprint front edge sits on the offset point and the body extends away from the road.
    outward = road_bearing + side.sign * 90.0
    anchor = destination_point(road_point, config.road_offset_m, outward)
    orientation = normalize_bearing(outward)
    template = slot.template

    return PlacedFootprint(
        id=f"house_{road_index}_{side.value}_{slot.index}",
        template_id=template.id,
        anchor=anchor,
        orientation_deg=orientation,
        side=side,
        world_polygon=transform_footprint(template.polygon, anchor, orientation),
        source_road_index=road_index,
        slot_index=slot.index,
        arc_position=slot.center_m,
        width=template.width,
        length=template.length,
        color=template.color,
    )


def _first_collision(
    placement: PlacedFootprint,
    buffers: Sequence[RoadBuffer],
) -> Optional[RoadBuffer]:
    for buffer in buffers:
        if buffer.intersects(placement.world_polygon):
            return buffer
    return None


__all__ = ["LayoutSlot", "layout", "plan_slots", "transform_footprint"]
