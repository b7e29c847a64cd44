"""Loading house footprint templates from GeoJSON files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from site_planner.constants import (
    DEFAULT_TEMPLATE_COLOR,
    FALLBACK_TEMPLATE_SIZE,
    FALLBACK_TEMPLATE_SIZES,
    TEMPLATE_COLORS,
)
from site_planner.models.layout import FootprintTemplate
from site_planner.models.geometry import LocalPoint

logger = logging.getLogger(__name__)


class TemplateCatalogError(ValueError):
    """Raised when a template document cannot be turned into a footprint."""


@dataclass(frozen=True)
class CatalogLoadResult:
    """Templates loaded from disk plus the fallbacks that replaced failures."""

    templates: Tuple[FootprintTemplate, ...]
    warnings: Tuple[str, ...] = ()


def template_color(template_id: int) -> str:
    return TEMPLATE_COLORS.get(template_id, DEFAULT_TEMPLATE_COLOR)


def parse_template_geojson(data: Any, template_id: int) -> FootprintTemplate:
    """Build a template from the first feature of a GeoJSON FeatureCollection.

    LineString outlines are closed if needed; Polygons contribute their
    exterior ring. Coordinates are local meters, normalized so the footprint
    is centered on X=0 with its front (minimum Y) edge on Y=0.
    """
    if not isinstance(data, dict):
        raise TemplateCatalogError("Template GeoJSON must be a mapping")
    features = data.get("features") or []
    if not isinstance(features, list) or not features:
        raise TemplateCatalogError("Template GeoJSON has no features")

    geometry = features[0].get("geometry") if isinstance(features[0], dict) else None
    if not isinstance(geometry, dict):
        raise TemplateCatalogError("First feature has no geometry")

    geometry_type = geometry.get("type")
    coordinates = geometry.get("coordinates")
    if geometry_type == "LineString":
        ring = _parse_ring(coordinates)
        if ring[0] != ring[-1]:
            ring.append(ring[0])
    elif geometry_type == "Polygon":
        if not isinstance(coordinates, list) or not coordinates:
            raise TemplateCatalogError("Polygon has no exterior ring")
        ring = _parse_ring(coordinates[0])
    else:
        raise TemplateCatalogError(f"Unsupported template geometry: {geometry_type}")

    min_x = min(x for x, _ in ring)
    max_x = max(x for x, _ in ring)
    min_y = min(y for _, y in ring)
    max_y = max(y for _, y in ring)

    return FootprintTemplate(
        id=template_id,
        width=max_x - min_x,
        length=max_y - min_y,
        polygon=_normalize_ring(ring, min_x, max_x, min_y),
        color=template_color(template_id),
    )


def fallback_template(template_id: int) -> FootprintTemplate:
    """Rectangular stand-in used when a template file cannot be loaded."""
    width, length = FALLBACK_TEMPLATE_SIZES.get(template_id, FALLBACK_TEMPLATE_SIZE)
    ring = [(0.0, 0.0), (width, 0.0), (width, length), (0.0, length), (0.0, 0.0)]
    return FootprintTemplate(
        id=template_id,
        width=width,
        length=length,
        polygon=_normalize_ring(ring, 0.0, width, 0.0),
        color=template_color(template_id),
    )


def load_template_file(path: Path, template_id: int) -> FootprintTemplate:
    """Read and parse one template GeoJSON file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise TemplateCatalogError(f"Unable to read template {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise TemplateCatalogError(f"Template {path} is not valid JSON: {exc}") from exc
    return parse_template_geojson(data, template_id)


def load_template_catalog(paths: Iterable[Path]) -> CatalogLoadResult:
    """Load templates numbered 1..n in path order, substituting fallbacks on failure."""
    templates: List[FootprintTemplate] = []
    warnings: List[str] = []
    for template_id, path in enumerate(paths, start=1):
        try:
            templates.append(load_template_file(Path(path), template_id))
        except TemplateCatalogError as exc:
            logger.warning("Using fallback for template %d: %s", template_id, exc)
            warnings.append(f"Template {template_id} ({Path(path).name}) replaced by fallback: {exc}")
            templates.append(fallback_template(template_id))
    return CatalogLoadResult(templates=tuple(templates), warnings=tuple(warnings))


def template_to_geojson(template: FootprintTemplate) -> Dict[str, Any]:
    """Serialize a template back to a single-feature FeatureCollection."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"houseType": template.id, "width": template.width, "length": template.length},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[[point.x, point.y] for point in template.polygon]],
                },
            }
        ],
    }


def _parse_ring(raw: Any) -> List[Tuple[float, float]]:
    if not isinstance(raw, list) or not raw:
        raise TemplateCatalogError("Template outline must be a non-empty coordinate list")
    ring: List[Tuple[float, float]] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, (list, tuple)) or len(entry) < 2:
            raise TemplateCatalogError(f"coordinates[{index}] must be [x, y]")
        try:
            ring.append((float(entry[0]), float(entry[1])))
        except (TypeError, ValueError) as exc:
            raise TemplateCatalogError(f"coordinates[{index}] must be numeric") from exc
    return ring


def _normalize_ring(
    ring: Sequence[Tuple[float, float]],
    min_x: float,
    max_x: float,
    min_y: float,
) -> Tuple[LocalPoint, ...]:
    center_x = (min_x + max_x) / 2
    return tuple(LocalPoint(x - center_x, y - min_y) for x, y in ring)


__all__ = [
    "TemplateCatalogError",
    "CatalogLoadResult",
    "parse_template_geojson",
    "fallback_template",
    "load_template_file",
    "load_template_catalog",
    "template_color",
    "template_to_geojson",
]
