"""Raster preview of a generated layout."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable, Optional, Sequence

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QBrush, QColor, QImage, QPainter, QPen, QPolygonF

from site_planner.models.geometry import GeoPoint, LocalPoint
from site_planner.models.layout import Centerline, LayoutResult
from site_planner.services.geodesy import MetricFrame
from site_planner.services.road_buffers import RoadBuffer


class PreviewError(ValueError):
    """Raised when a preview cannot be rendered or saved."""


def render_layout_preview(
    centerlines: Sequence[Centerline],
    result: LayoutResult,
    buffers: Sequence[Optional[RoadBuffer]] = (),
    *,
    resolution: float = 0.5,
    padding: float = 20.0,
) -> QImage:
    """Draw road buffers, centerlines and houses into an RGB image.

    ``resolution`` is meters per pixel; north is up.
    """
    if resolution <= 0:
        raise PreviewError("resolution must be positive")
    geo_points = [point for centerline in centerlines for point in centerline.points]
    geo_points.extend(point for placement in result.placements for point in placement.world_polygon)
    if not geo_points:
        raise PreviewError("Nothing to draw; no roads or placements.")

    frame = MetricFrame.centered_on(geo_points)
    local_points = [frame.to_local(point) for point in geo_points]
    min_x = min(p.x for p in local_points) - padding
    max_x = max(p.x for p in local_points) + padding
    min_y = min(p.y for p in local_points) - padding
    max_y = max(p.y for p in local_points) + padding
    width = max(1, math.ceil((max_x - min_x) / resolution))
    height = max(1, math.ceil((max_y - min_y) / resolution))

    def to_pixel(point: GeoPoint) -> QPointF:
        local = frame.to_local(point)
        return _local_to_pixel(local, min_x, min_y, resolution, height)

    image = QImage(width, height, QImage.Format.Format_RGB888)
    image.fill(QColor(245, 245, 240))
    painter = QPainter(image)
    try:
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(QColor(215, 215, 215)))
        for buffer in buffers:
            if buffer is None or buffer.polygon.is_empty:
                continue
            ring = [GeoPoint(lon, lat) for lon, lat in buffer.polygon.exterior.coords]
            painter.drawPolygon(QPolygonF([to_pixel(point) for point in ring]))

        painter.setPen(QPen(QColor(60, 60, 60), 2))
        for centerline in centerlines:
            _draw_polyline(painter, [to_pixel(point) for point in centerline.points])

        painter.setPen(QPen(QColor(30, 30, 30), 1))
        for placement in result.placements:
            painter.setBrush(QBrush(QColor(placement.color)))
            painter.drawPolygon(QPolygonF([to_pixel(point) for point in placement.world_polygon]))
    finally:
        painter.end()
    return image


def write_layout_preview(
    centerlines: Sequence[Centerline],
    result: LayoutResult,
    destination: Path,
    buffers: Sequence[Optional[RoadBuffer]] = (),
    *,
    resolution: float = 0.5,
    padding: float = 20.0,
) -> None:
    """Render the preview and save it as PNG."""
    image = render_layout_preview(
        centerlines,
        result,
        buffers,
        resolution=resolution,
        padding=padding,
    )
    destination.parent.mkdir(parents=True, exist_ok=True)
    if not image.save(str(destination), "PNG"):
        raise PreviewError(f"Failed to save preview PNG: {destination}")


def _local_to_pixel(
    point: LocalPoint,
    min_x: float,
    min_y: float,
    resolution: float,
    height: int,
) -> QPointF:
    return QPointF(
        (point.x - min_x) / resolution,
        (height - 1) - (point.y - min_y) / resolution,
    )


def _draw_polyline(painter: QPainter, points: Iterable[QPointF]) -> None:
    coords = list(points)
    for start, end in zip(coords[:-1], coords[1:]):
        painter.drawLine(start, end)


__all__ = ["PreviewError", "render_layout_preview", "write_layout_preview"]
