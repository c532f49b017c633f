from typing import Iterable, Optional, Tuple
import math
import osmnx as ox
from .config import SNAP_TOLERANCE_DEG

Coord = Tuple[float, float]  # (lng, lat)


def as_coord(value) -> Coord:
    """
    Accept (lng, lat) tuples/lists or {"lng": .., "lat": ..} mappings.
    """
    if isinstance(value, dict):
        if not {"lng", "lat"} <= set(value.keys()):
            raise ValueError(f"Coordinate mapping needs 'lng' and 'lat', got keys {sorted(value)}")
        lng, lat = value["lng"], value["lat"]
    else:
        lng, lat = value
    lng, lat = float(lng), float(lat)
    if not (math.isfinite(lng) and math.isfinite(lat)):
        raise ValueError(f"Coordinate must be finite, got ({lng}, {lat})")
    return lng, lat


def great_circle_m(a: Coord, b: Coord) -> float:
    """Great-circle distance in meters between two (lng, lat) points."""
    return float(ox.distance.great_circle(a[1], a[0], b[1], b[0]))


def same_point(a: Coord, b: Coord, tol: float = SNAP_TOLERANCE_DEG) -> bool:
    return abs(a[0] - b[0]) <= tol and abs(a[1] - b[1]) <= tol


def find_node_at(nodes: Iterable[Tuple[str, Coord]], target: Coord, tol: float = SNAP_TOLERANCE_DEG) -> Optional[str]:
    """
    Id of the closest node within `tol` of `target`, or None.
    Ties go to the first node seen, so pass nodes in a stable order.
    """
    best_id, best_d = None, math.inf
    for node_id, c in nodes:
        if not same_point(c, target, tol):
            continue
        d = math.hypot(c[0] - target[0], c[1] - target[1])
        if d < best_d:
            best_id, best_d = node_id, d
    return best_id
