"""
Boundary polygon and approximate area of a reachable point set.
"""
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

import numpy as np
from shapely.geometry import MultiPoint, Polygon

from .config import DEFAULT_BOUNDARY_METHOD, METERS_PER_DEGREE

Coord = Tuple[float, float]  # (lng, lat)


@dataclass
class BoundaryPolygon:
    ring: List[Coord] = field(default_factory=list)  # not closed: last != first
    area_m2: float = 0.0
    method: str = DEFAULT_BOUNDARY_METHOD

    def to_shapely(self):
        if len(self.ring) < 3:
            return MultiPoint(self.ring)
        return Polygon(self.ring)


def _angular_order(pts: np.ndarray) -> List[Coord]:
    c = pts.mean(axis=0)
    d = pts - c
    angles = np.arctan2(d[:, 1], d[:, 0])
    radii = np.hypot(d[:, 0], d[:, 1])
    # lexsort: last key is primary -> angle, then radius, then lng, lat
    order = np.lexsort((pts[:, 1], pts[:, 0], radii, angles))
    return [(float(pts[i, 0]), float(pts[i, 1])) for i in order]


def _hull_order(pts: np.ndarray) -> List[Coord]:
    hull = MultiPoint([tuple(p) for p in pts]).convex_hull
    if not isinstance(hull, Polygon):
        # collinear input collapses to a LineString
        return [tuple(map(float, xy)) for xy in hull.coords]
    coords = [(float(x), float(y)) for x, y in list(hull.exterior.coords)[:-1]]
    if not hull.exterior.is_ccw:
        coords.reverse()
    return coords


def ring_area_m2(ring: Sequence[Coord]) -> float:
    """
    Shoelace area of an ordered ring in degrees squared, scaled to m² with
    1° lat = 111 km and 1° lng = 111 km * cos(lat of the first vertex).
    """
    if len(ring) < 3:
        return 0.0
    deg2 = Polygon(ring).area
    lat0 = math.radians(ring[0][1])
    return deg2 * METERS_PER_DEGREE * METERS_PER_DEGREE * math.cos(lat0)


def extract_boundary(points: Iterable[Coord], method: str = DEFAULT_BOUNDARY_METHOD) -> BoundaryPolygon:
    """
    Order the unordered reachable coordinates into a ring and measure it.

    ``angular`` sorts by angle around the centroid (an envelope through every
    point); ``hull`` keeps only the convex hull vertices.
    """
    if method not in ("angular", "hull"):
        raise ValueError(f"Unknown boundary method: {method!r}")
    uniq = sorted(set((float(x), float(y)) for x, y in points))
    if len(uniq) <= 2:
        return BoundaryPolygon(ring=uniq, area_m2=0.0, method=method)
    pts = np.asarray(uniq, dtype=float)
    ring = _angular_order(pts) if method == "angular" else _hull_order(pts)
    return BoundaryPolygon(ring=ring, area_m2=ring_area_m2(ring), method=method)


def boundary_from_result(network, result, method: str = DEFAULT_BOUNDARY_METHOD) -> BoundaryPolygon:
    """Boundary of the reachable nodes of `result` (network may be a store or a graph)."""
    G = network if not hasattr(network, "snapshot") else network.snapshot()
    coords = [(G.nodes[n]["lng"], G.nodes[n]["lat"]) for n in result.reachable if n in G]
    return extract_boundary(coords, method=method)
