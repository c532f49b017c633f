import json
from typing import List, Optional, Tuple
import geopandas as gpd
import pandas as pd
from shapely.geometry import LineString, Point, shape, mapping

from .boundary import BoundaryPolygon
from .config import WGS84
from .search import SearchResult


def road_lines_from_geojson_bytes(data: bytes) -> gpd.GeoDataFrame:
    """
    Proposed test roads from a GeoJSON FeatureCollection of LineStrings.
    Feature properties are kept; an optional ``length_m`` property overrides
    the great-circle length of the road.
    """
    js = json.loads(data.decode("utf-8"))
    if js.get("type") != "FeatureCollection":
        raise ValueError(f"Test roads must be a FeatureCollection, got {js.get('type')!r}")
    records, lines = [], []
    for i, ft in enumerate(js.get("features", [])):
        geom = shape(ft["geometry"]) if ft.get("geometry") else None
        if not isinstance(geom, LineString):
            kind = geom.geom_type if geom is not None else "no geometry"
            raise ValueError(f"Test road feature {i} must be a LineString, got {kind}")
        if Point(geom.coords[0]).equals(Point(geom.coords[-1])):
            raise ValueError(f"Test road feature {i} starts and ends at the same point")
        records.append(dict(ft.get("properties") or {}))
        lines.append(geom)
    if not lines:
        return gpd.GeoDataFrame(geometry=gpd.GeoSeries([], crs=WGS84))
    return gpd.GeoDataFrame(records, geometry=lines, crs=WGS84)


def gdf_to_geojson_bytes(gdf: gpd.GeoDataFrame) -> bytes:
    feats = []
    for _, row in gdf.iterrows():
        props = {k: v for k, v in row.items() if k != "geometry"}
        geom = mapping(row.geometry) if row.geometry is not None else None
        feats.append({"type": "Feature", "properties": props, "geometry": geom})
    fc = {"type": "FeatureCollection", "features": feats}
    return json.dumps(fc, default=float).encode("utf-8")


def reachable_to_gdf(G, result: SearchResult) -> gpd.GeoDataFrame:
    """Reachable nodes as points with their walk time (sec and min)."""
    records, geoms = [], []
    for node_id, t in result.reachable_sorted():
        data = G.nodes[node_id]
        records.append({"node_id": node_id, "walk_time_sec": t, "walk_time_min": t / 60.0})
        geoms.append(Point(data["lng"], data["lat"]))
    # never empty: the origin is always reachable
    return gpd.GeoDataFrame(records, geometry=geoms, crs=WGS84)


def boundary_to_gdf(poly: BoundaryPolygon, **props) -> gpd.GeoDataFrame:
    rec = {"area_m2": poly.area_m2, "method": poly.method, **props}
    return gpd.GeoDataFrame([rec], geometry=[poly.to_shapely()], crs=WGS84)


def roads_from_gdf(gdf: gpd.GeoDataFrame) -> List[Tuple[Tuple[float, float], Tuple[float, float], Optional[float]]]:
    """(start, end, length_m or None) per row; first and last vertex are the endpoints."""
    roads = []
    for _, row in gdf.iterrows():
        coords = list(row.geometry.coords)
        length = row.get("length_m")
        length = float(length) if length is not None and pd.notna(length) else None
        roads.append(((coords[0][0], coords[0][1]), (coords[-1][0], coords[-1][1]), length))
    return roads
