"""Data structures for roadside house layout."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from site_planner.constants import (
    DEFAULT_EDGE_SPACING_M,
    DEFAULT_END_CLEARANCE_M,
    DEFAULT_MAX_SLOTS_PER_SIDE,
    DEFAULT_ROAD_OFFSET_M,
    DEFAULT_TEMPLATE_COLOR,
)
from site_planner.models.geometry import GeoPoint, LocalPoint


class RoadClass(Enum):
    """Road hierarchy used to size collision buffers."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
    DEFAULT = "default"

    @classmethod
    def coerce(cls, value: Any) -> "RoadClass":
        """Accept a member or its name/value string; anything unknown is DEFAULT."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.DEFAULT
        return cls.DEFAULT


class Side(Enum):
    """Side of a road relative to its direction of travel."""

    LEFT = "left"
    RIGHT = "right"

    @property
    def sign(self) -> int:
        return -1 if self is Side.LEFT else 1


@dataclass(frozen=True)
class Centerline:
    """Road midline as an ordered sequence of geographic points."""

    points: Tuple[GeoPoint, ...]
    road_class: RoadClass = RoadClass.DEFAULT
    name: Optional[str] = None

    def __post_init__(self) -> None:
        # Accept any sequence but always store an immutable tuple.
        object.__setattr__(self, "points", tuple(self.points))
        object.__setattr__(self, "road_class", RoadClass.coerce(self.road_class))


@dataclass(frozen=True)
class FootprintTemplate:
    """Reusable house outline in a local frame (meters).

    The polygon is normalized so the horizontal center sits on X=0 and the
    front edge (the side facing the road) on Y=0.
    """

    id: int
    width: float
    length: float
    polygon: Tuple[LocalPoint, ...]
    color: str = DEFAULT_TEMPLATE_COLOR

    def __post_init__(self) -> None:
        object.__setattr__(self, "polygon", tuple(self.polygon))

    def validation_error(self) -> Optional[str]:
        """Describe why the template cannot be placed, or ``None`` if it can."""
        if not (math.isfinite(self.width) and self.width > 0):
            return f"width must be positive and finite (got {self.width})"
        if not (math.isfinite(self.length) and self.length > 0):
            return f"length must be positive and finite (got {self.length})"
        if len(set(self.polygon)) < 3:
            return "polygon needs at least 3 distinct points"
        return None


@dataclass(frozen=True)
class PlacedFootprint:
    """A template positioned beside a road in geographic coordinates."""

    id: str
    template_id: int
    anchor: GeoPoint
    orientation_deg: float
    side: Side
    world_polygon: Tuple[GeoPoint, ...]
    source_road_index: int
    slot_index: int
    arc_position: float  # meters along the source road to the anchor
    width: float
    length: float
    color: str = DEFAULT_TEMPLATE_COLOR


@dataclass(frozen=True)
class LayoutConfig:
    """Distances controlling roadside placement (meters)."""

    edge_spacing_m: float = DEFAULT_EDGE_SPACING_M
    road_offset_m: float = DEFAULT_ROAD_OFFSET_M
    end_clearance_m: float = DEFAULT_END_CLEARANCE_M
    max_slots_per_side: int = DEFAULT_MAX_SLOTS_PER_SIDE

    def __post_init__(self) -> None:
        for name in ("edge_spacing_m", "road_offset_m", "end_clearance_m"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if self.max_slots_per_side < 1:
            raise ValueError("max_slots_per_side must be >= 1")


@dataclass(frozen=True)
class LayoutWarning:
    """Non-fatal issue recorded while laying out houses."""

    code: str  # "template_invalid", "centerline_degenerate", "collision"
    message: str
    template_id: Optional[int] = None
    road_index: Optional[int] = None


@dataclass(frozen=True)
class LayoutResult:
    """Placements produced by one layout run plus any warnings."""

    placements: Tuple[PlacedFootprint, ...] = ()
    warnings: Tuple[LayoutWarning, ...] = field(default_factory=tuple)

    def by_road_side(self) -> Dict[Tuple[int, Side], List[PlacedFootprint]]:
        """Group placements by (road index, side), preserving slot order."""
        groups: Dict[Tuple[int, Side], List[PlacedFootprint]] = {}
        for placement in self.placements:
            key = (placement.source_road_index, placement.side)
            groups.setdefault(key, []).append(placement)
        return groups

    def count_by_template(self) -> Dict[int, int]:
        return dict(Counter(placement.template_id for placement in self.placements))

    def warnings_with_code(self, code: str) -> List[LayoutWarning]:
        return [warning for warning in self.warnings if warning.code == code]


__all__ = [
    "RoadClass",
    "Side",
    "Centerline",
    "FootprintTemplate",
    "PlacedFootprint",
    "LayoutConfig",
    "LayoutWarning",
    "LayoutResult",
]
