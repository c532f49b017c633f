"""
Adapter from an acquired (osmnx-style) networkx graph to a NetworkStore.

The acquisition step is expected to hand over an already reduced graph;
nothing here fetches or simplifies geometry.
"""
import logging
from typing import Dict, Iterable, Optional

import networkx as nx
import osmnx as ox

from .network import NetworkStore
from .utils_geo import great_circle_m

logger = logging.getLogger(__name__)


def _edge_length_m(G: nx.Graph, u, v, data: Dict) -> float:
    """Best-effort edge length in meters."""
    val = data.get("length")
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return float(val)
    geom = data.get("geometry")
    if geom is not None and hasattr(geom, "coords"):
        coords = list(geom.coords)
        if len(coords) >= 2:
            return sum(great_circle_m(p, q) for p, q in zip(coords[:-1], coords[1:]))
    n1, n2 = G.nodes[u], G.nodes[v]
    return great_circle_m((n1["x"], n1["y"]), (n2["x"], n2["y"]))


def from_graph(G: nx.Graph, boundary_nodes: Optional[Iterable] = None,
               id_map: Optional[Dict] = None) -> NetworkStore:
    """
    Build a NetworkStore from a graph whose nodes carry ``x`` (lng) / ``y``
    (lat). Directed and parallel edges collapse to one undirected edge with
    the shortest length. Pass a dict as `id_map` to receive the
    original id -> new id mapping.
    """
    boundary = set(boundary_nodes or ())
    store = NetworkStore()
    if id_map is None:
        id_map = {}
    for n, data in G.nodes(data=True):
        if "x" not in data or "y" not in data:
            raise ValueError(f"Node {n!r} has no x/y coordinates; cannot place it on the map.")
        id_map[n] = store.add_node(float(data["x"]), float(data["y"]), is_boundary=n in boundary)

    shortest = {}
    for u, v, data in G.edges(data=True):
        if u == v:
            continue
        L = _edge_length_m(G, u, v, data)
        key = frozenset((id_map[u], id_map[v]))
        if key not in shortest or L < shortest[key]:
            shortest[key] = L
    for key, L in shortest.items():
        a, b = tuple(key)
        store.add_edge(a, b, L)

    logger.info("converted graph: %d nodes, %d edges", len(store), store.number_of_edges())
    return store


def load_graphml(path, boundary_nodes: Optional[Iterable] = None) -> NetworkStore:
    """Read a GraphML file saved by osmnx (``ox.save_graphml``) into a store."""
    G = ox.load_graphml(path)
    return from_graph(G, boundary_nodes=boundary_nodes)
