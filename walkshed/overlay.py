"""
What-if overlay: hypothetical test roads kept apart from the base network.

Test roads are never written into a NetworkStore. At query time they are
fused with a snapshot of the base graph and the regular search runs over the
fused view, so chains of test roads propagate like any other edge.
"""
import logging
import math
import threading
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

import networkx as nx

from .config import SNAP_TOLERANCE_DEG, TEST_ROAD_ID_PREFIX, walk_time_seconds
from .network import node_sort_key
from .search import SearchResult, _as_graph, search
from .utils_geo import Coord, as_coord, find_node_at, great_circle_m

logger = logging.getLogger(__name__)

ACTIVE = "active"
DELETED = "deleted"


@dataclass(frozen=True)
class TestRoad:
    id: str
    start: Coord
    end: Coord
    length: float
    status: str = ACTIVE

    # keep pytest from collecting this as a test class
    __test__ = False

    @property
    def time(self) -> float:
        return walk_time_seconds(self.length)

    @property
    def active(self) -> bool:
        return self.status == ACTIVE


class OverlayManager:
    def __init__(self, snap_tolerance: float = SNAP_TOLERANCE_DEG):
        self._roads: Dict[str, TestRoad] = {}
        self._lock = threading.RLock()
        self.next_id = 1
        self.snap_tolerance = snap_tolerance

    # --------------- Test roads -----------------------------

    def add_test_road(self, start, end, length: Optional[float] = None) -> str:
        """
        Register a test road between two coordinates; returns its id.
        `length` defaults to the great-circle distance between the endpoints.
        """
        a, b = as_coord(start), as_coord(end)
        if a == b:
            raise ValueError("Test road start and end are the same point")
        if length is None:
            length = great_circle_m(a, b)
        elif not math.isfinite(length) or length < 0:
            raise ValueError(f"Test road length must be a finite, non-negative number, got {length!r}")
        with self._lock:
            road_id = f"{TEST_ROAD_ID_PREFIX}{self.next_id}"
            self.next_id += 1
            self._roads[road_id] = TestRoad(road_id, a, b, float(length))
        logger.info("test road %s added (%.1fm)", road_id, length)
        return road_id

    def remove_test_road(self, road_id: str) -> None:
        """Soft delete: the record stays for audit/undo, the id is never reused."""
        with self._lock:
            road = self._roads.get(road_id)
            if road is None or not road.active:
                return
            self._roads[road_id] = replace(road, status=DELETED)
        logger.info("test road %s deleted", road_id)

    def restore_test_road(self, road_id: str) -> None:
        with self._lock:
            road = self._roads.get(road_id)
            if road is None:
                raise KeyError(road_id)
            self._roads[road_id] = replace(road, status=ACTIVE)

    def get(self, road_id: str) -> Optional[TestRoad]:
        with self._lock:
            return self._roads.get(road_id)

    def list_active(self) -> List[TestRoad]:
        with self._lock:
            roads = [r for r in self._roads.values() if r.active]
        return sorted(roads, key=lambda r: node_sort_key(r.id))

    def list_all(self) -> List[TestRoad]:
        with self._lock:
            roads = list(self._roads.values())
        return sorted(roads, key=lambda r: node_sort_key(r.id))

    def clear(self) -> None:
        with self._lock:
            for road_id, road in self._roads.items():
                if road.active:
                    self._roads[road_id] = replace(road, status=DELETED)

    # --------------- Fused view -----------------------------

    def fused_graph(self, network, roads: Optional[List[TestRoad]] = None) -> nx.Graph:
        """
        Frozen graph = base snapshot + one edge per active test road.

        Endpoints snap onto an existing (or earlier synthetic) node within the
        snap tolerance, otherwise a synthetic node "<road id>_a"/"_b" is added.
        Existing edges are only ever replaced by a faster one.
        """
        if roads is None:
            roads = self.list_active()
        G = nx.Graph(_as_graph(network))
        index = [
            (n, (d["lng"], d["lat"]))
            for n, d in sorted(G.nodes(data=True), key=lambda nd: node_sort_key(nd[0]))
        ]
        for road in roads:
            ends = []
            for label, coord in (("a", road.start), ("b", road.end)):
                nid = find_node_at(index, coord, self.snap_tolerance)
                if nid is None:
                    nid = f"{road.id}_{label}"
                    while nid in G:
                        nid += "_"
                    G.add_node(nid, lng=coord[0], lat=coord[1], is_boundary=False, test_road=road.id)
                    index.append((nid, coord))
                ends.append(nid)
            u, v = ends
            if u == v:
                continue
            if G.has_edge(u, v) and G.edges[u, v]["travel_time"] <= road.time:
                continue
            G.add_edge(u, v, length=road.length, travel_time=road.time, test_road=road.id)
        return nx.freeze(G)

    def compute_enhanced(self, network, origin_id: str, max_time_seconds: float,
                         deadline: Optional[float] = None) -> SearchResult:
        # one consistent (base snapshot, active roads) pair per query
        base = _as_graph(network)
        roads = self.list_active()
        G = self.fused_graph(base, roads)
        logger.debug("enhanced search over %d test roads", len(roads))
        return search(G, origin_id, max_time_seconds, deadline=deadline)

    def one_hop_estimate(self, network, base_result: SearchResult) -> SearchResult:
        """
        APPROXIMATE fast path for very large networks.

        Only extends the base result across test roads that touch an already
        reached node, one road deep. Chains of test roads and improvements
        that continue past the far endpoint are not propagated; use
        `compute_enhanced` for the exact answer.
        """
        G = _as_graph(network)
        index = [(n, (d["lng"], d["lat"])) for n, d in G.nodes(data=True)]
        out = SearchResult(
            origin=base_result.origin,
            budget=base_result.budget,
            distances=dict(base_result.distances),
            previous=dict(base_result.previous),
            truncated=base_result.truncated,
            approximate=True,
        )
        reached = base_result.reachable
        for road in self.list_active():
            u = find_node_at(index, road.start, self.snap_tolerance) or f"{road.id}_a"
            v = find_node_at(index, road.end, self.snap_tolerance) or f"{road.id}_b"
            for src, dst in ((u, v), (v, u)):
                if src not in reached:
                    continue
                nd = reached[src] + road.time
                if nd <= out.budget and nd < out.distances.get(dst, math.inf):
                    out.distances[dst] = nd
                    out.previous[dst] = src
        return out


def compute_enhanced(network, overlay: OverlayManager, origin_id: str, max_time_seconds: float,
                     deadline: Optional[float] = None) -> SearchResult:
    return overlay.compute_enhanced(network, origin_id, max_time_seconds, deadline=deadline)
