"""Service layer for geometry, layout generation, and input loading."""

__all__ = [
    "block_placement",
    "geodesy",
    "layout_engine",
    "layout_spec",
    "road_buffers",
    "road_network",
    "site_metrics",
    "template_catalog",
]
