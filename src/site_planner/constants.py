"""Application-wide constants and default values."""

# Spherical earth used for great-circle math (meters)
EARTH_RADIUS_M = 6371008.8
METERS_PER_DEGREE_LAT = 111320.0  # equirectangular approximation

# Roadside layout defaults (meters)
DEFAULT_EDGE_SPACING_M = 5.0  # edge-to-edge gap between neighbouring houses
DEFAULT_ROAD_OFFSET_M = 10.0  # from road centerline to house front edge
DEFAULT_END_CLEARANCE_M = 5.0  # kept free at both ends of a road
DEFAULT_MAX_SLOTS_PER_SIDE = 500

# Collision buffer half-width around a road, by road class (meters)
ROAD_BUFFER_PRIMARY_M = 8.0
ROAD_BUFFER_SECONDARY_M = 6.0
ROAD_BUFFER_TERTIARY_M = 4.0
ROAD_BUFFER_DEFAULT_M = 3.0

# Fallback house footprints (width, length) keyed by template id
FALLBACK_TEMPLATE_SIZES = {
    1: (8.0, 10.0),
    2: (12.0, 8.0),
    3: (6.0, 14.0),
}
FALLBACK_TEMPLATE_SIZE = (8.0, 10.0)

TEMPLATE_COLORS = {
    1: "#ff4444",  # red
    2: "#44ff44",  # green
    3: "#4444ff",  # blue
}
DEFAULT_TEMPLATE_COLOR = "#888888"

# Single-storey extrusion height written to GeoJSON output (meters)
HOUSE_HEIGHT_M = 4.0

# Pre-fab blocks are scaled so their larger side spans this many meters
DEFAULT_BLOCK_SIZE_M = 300.0
