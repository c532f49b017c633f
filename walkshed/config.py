"""
Central config: walking model constants and engine parameters.
Override the tunables via environment variables if needed.
"""
import os

# Walking speed (m/min); edge travel time is length / speed * 60 seconds
WALK_SPEED_M_PER_MIN = 83.33

# Planar degree -> meter approximation used for boundary areas
METERS_PER_DEGREE = 111_000

# Node / test-road id prefixes ("n_1", "t_1", ...)
NODE_ID_PREFIX = "n_"
TEST_ROAD_ID_PREFIX = "t_"

# Two coordinates closer than this (degrees, both axes) are the same point
SNAP_TOLERANCE_DEG = float(os.getenv("WALKSHED_SNAP_TOLERANCE_DEG", "1e-6"))

# "angular" (centroid sort) or "hull" (convex hull)
DEFAULT_BOUNDARY_METHOD = os.getenv("WALKSHED_BOUNDARY_METHOD", "angular")

# Thresholds (minutes) used by the impact KPIs
DEFAULT_THRESHOLDS_MIN = (5, 10, 15)

WGS84 = "EPSG:4326"


def walk_time_seconds(length_m: float) -> float:
    """Seconds needed to walk `length_m` meters at WALK_SPEED_M_PER_MIN."""
    return length_m / WALK_SPEED_M_PER_MIN * 60
