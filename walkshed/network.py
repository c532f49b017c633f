"""
Base road network: nodes with WGS84 coordinates and undirected walkable edges.

The graph lives in a networkx ``Graph`` so adjacency is always symmetric and
every unordered node pair has exactly one edge slot. Edge attributes follow
the usual osmnx naming (``length`` in meters, ``travel_time`` in seconds).
"""
import logging
import math
import re
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import networkx as nx

from .config import NODE_ID_PREFIX, walk_time_seconds
from .errors import EdgeEndpointMissing, SelfLoop

logger = logging.getLogger(__name__)

_NUMERIC_SUFFIX = re.compile(r"^(.*?)(\d+)$")


def node_sort_key(node_id) -> Tuple[str, int, str]:
    """Order ids by prefix, then numeric suffix, so "n_2" sorts before "n_10"."""
    s = str(node_id)
    m = _NUMERIC_SUFFIX.match(s)
    if m:
        return (m.group(1), int(m.group(2)), s)
    return (s, -1, s)


def numeric_suffix(node_id) -> Optional[int]:
    m = _NUMERIC_SUFFIX.match(str(node_id))
    return int(m.group(2)) if m else None


def edge_key(a: str, b: str) -> Tuple[str, str]:
    """Canonical key for the undirected edge between a and b."""
    return (a, b) if node_sort_key(a) <= node_sort_key(b) else (b, a)


@dataclass(frozen=True)
class Node:
    id: str
    lng: float
    lat: float
    connections: frozenset
    is_boundary: bool = False


@dataclass(frozen=True)
class Edge:
    key: Tuple[str, str]
    length: float  # meters
    time: float    # seconds

    @property
    def source(self) -> str:
        return self.key[0]

    @property
    def target(self) -> str:
        return self.key[1]


def _check_coord(lng, lat):
    for name, v in (("lng", lng), ("lat", lat)):
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            raise ValueError(f"Node {name} must be a finite number, got {v!r}")


class NetworkStore:
    """
    Mutable base network.

    All reads and writes go through one re-entrant lock; searches should run
    on ``snapshot()`` so they never observe a half-applied mutation.
    """

    def __init__(self):
        self._graph = nx.Graph()
        self._lock = threading.RLock()
        self.next_id = 1

    # --------------- Nodes -----------------------------

    def add_node(self, lng: float, lat: float, is_boundary: bool = False) -> str:
        _check_coord(lng, lat)
        with self._lock:
            node_id = f"{NODE_ID_PREFIX}{self.next_id}"
            self.next_id += 1
            self._graph.add_node(node_id, lng=float(lng), lat=float(lat), is_boundary=bool(is_boundary))
        logger.debug("add_node %s (%.6f, %.6f)", node_id, lng, lat)
        return node_id

    def _put_node(self, node_id: str, lng: float, lat: float, is_boundary: bool = False):
        # used by snapshot import: keeps the caller's id, does not touch the counter
        self._graph.add_node(node_id, lng=float(lng), lat=float(lat), is_boundary=bool(is_boundary))

    def remove_node(self, node_id: str) -> None:
        with self._lock:
            if node_id not in self._graph:
                return
            degree = self._graph.degree(node_id)
            # networkx drops every incident edge along with the node
            self._graph.remove_node(node_id)
        logger.debug("remove_node %s (cascaded %d edges)", node_id, degree)

    def set_boundary(self, node_id: str, flag: bool = True) -> None:
        with self._lock:
            if node_id not in self._graph:
                raise KeyError(node_id)
            self._graph.nodes[node_id]["is_boundary"] = bool(flag)

    def get_node(self, node_id: str) -> Optional[Node]:
        with self._lock:
            if node_id not in self._graph:
                return None
            data = self._graph.nodes[node_id]
            return Node(
                id=node_id,
                lng=data["lng"],
                lat=data["lat"],
                connections=frozenset(self._graph.adj[node_id]),
                is_boundary=data.get("is_boundary", False),
            )

    def has_node(self, node_id: str) -> bool:
        with self._lock:
            return node_id in self._graph

    def all_nodes(self) -> List[Node]:
        with self._lock:
            ids = sorted(self._graph.nodes, key=node_sort_key)
            return [self.get_node(n) for n in ids]

    def neighbors(self, node_id: str) -> frozenset:
        with self._lock:
            if node_id not in self._graph:
                return frozenset()
            return frozenset(self._graph.adj[node_id])

    # --------------- Edges -----------------------------

    def add_edge(self, a: str, b: str, length: float) -> Edge:
        if a == b:
            raise SelfLoop(a)
        if isinstance(length, bool) or not isinstance(length, (int, float)) \
                or not math.isfinite(length) or length < 0:
            raise ValueError(f"Edge length must be a finite, non-negative number, got {length!r}")
        with self._lock:
            for n in (a, b):
                if n not in self._graph:
                    raise EdgeEndpointMissing(n)
            t = walk_time_seconds(float(length))
            # same unordered pair -> same slot, attributes overwritten
            self._graph.add_edge(a, b, length=float(length), travel_time=t)
        logger.debug("add_edge %s-%s length=%.1fm time=%.1fs", a, b, length, t)
        return Edge(edge_key(a, b), float(length), t)

    def remove_edge(self, a: str, b: str) -> None:
        with self._lock:
            if self._graph.has_edge(a, b):
                self._graph.remove_edge(a, b)
                logger.debug("remove_edge %s-%s", a, b)

    def get_edge(self, a: str, b: str) -> Optional[Edge]:
        with self._lock:
            if not self._graph.has_edge(a, b):
                return None
            data = self._graph.edges[a, b]
            return Edge(edge_key(a, b), data["length"], data["travel_time"])

    def all_edges(self) -> List[Edge]:
        with self._lock:
            edges = [
                Edge(edge_key(u, v), d["length"], d["travel_time"])
                for u, v, d in self._graph.edges(data=True)
            ]
        return sorted(edges, key=lambda e: (node_sort_key(e.key[0]), node_sort_key(e.key[1])))

    # --------------- Views -----------------------------

    def snapshot(self) -> nx.Graph:
        """Frozen copy of the current graph; safe to search from any thread."""
        with self._lock:
            G = self._graph.copy()
        return nx.freeze(G)

    def _restore_counter(self, ids: Iterable[str]) -> None:
        suffixes = [s for s in (numeric_suffix(i) for i in ids) if s is not None]
        self.next_id = max(suffixes) + 1 if suffixes else 1

    def number_of_edges(self) -> int:
        with self._lock:
            return self._graph.number_of_edges()

    def __len__(self):
        with self._lock:
            return self._graph.number_of_nodes()

    def __contains__(self, node_id):
        return self.has_node(node_id)
