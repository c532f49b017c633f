"""
Budget-limited shortest walk time search (Dijkstra on a binary heap).
"""
import heapq
import logging
import math
import time as _time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import networkx as nx

from .errors import OriginNotFound, Unreachable
from .network import node_sort_key

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    origin: str
    budget: float
    distances: Dict[str, float] = field(default_factory=dict)
    previous: Dict[str, str] = field(default_factory=dict)
    truncated: bool = False
    approximate: bool = False

    @property
    def reachable(self) -> Dict[str, float]:
        """Nodes with a finite time within budget, origin included at 0."""
        return {
            n: d for n, d in self.distances.items()
            if math.isfinite(d) and d <= self.budget
        }

    def reachable_sorted(self) -> List[tuple]:
        return sorted(self.reachable.items(), key=lambda kv: (kv[1], node_sort_key(kv[0])))


def _as_graph(network) -> nx.Graph:
    if isinstance(network, nx.Graph):
        return network
    return network.snapshot()


def search(network, origin_id: str, max_time_seconds: float,
           deadline: Optional[float] = None) -> SearchResult:
    """
    Shortest walk time from `origin_id` to every node reachable within
    `max_time_seconds`.

    `network` is a NetworkStore or an undirected networkx graph whose edges
    carry ``travel_time``. `deadline` is a ``time.monotonic()`` instant; if it
    passes mid-search the partial result is returned with ``truncated=True``
    and must be read as a lower bound on the reachable set.
    """
    if not math.isfinite(max_time_seconds) or max_time_seconds < 0:
        raise ValueError(f"max_time_seconds must be a finite, non-negative number, got {max_time_seconds}")
    G = _as_graph(network)
    if origin_id not in G:
        raise OriginNotFound(origin_id)

    result = SearchResult(origin=origin_id, budget=float(max_time_seconds))
    dist = result.distances
    prev = result.previous
    finalized = set()

    dist[origin_id] = 0.0
    heap = [(0.0, node_sort_key(origin_id), origin_id)]

    while heap:
        if deadline is not None and _time.monotonic() >= deadline:
            result.truncated = True
            logger.info("search from %s truncated after %d finalized nodes", origin_id, len(finalized))
            break
        d, _, u = heapq.heappop(heap)
        if u in finalized or d > dist.get(u, math.inf):
            continue
        finalized.add(u)
        # over budget: finalized but never expanded
        if d > max_time_seconds:
            continue
        for v, data in G.adj[u].items():
            if v in finalized:
                continue
            nd = d + data["travel_time"]
            if nd < dist.get(v, math.inf):
                dist[v] = nd
                prev[v] = u
                heapq.heappush(heap, (nd, node_sort_key(v), v))

    logger.debug("search from %s: %d reachable within %.0fs", origin_id, len(result.reachable), max_time_seconds)
    return result


def reconstruct_path(result: SearchResult, origin_id: str, target_id: str) -> List[str]:
    """Node ids from origin to target following predecessors."""
    d = result.distances.get(target_id, math.inf)
    if not math.isfinite(d):
        raise Unreachable(target_id)
    path = [target_id]
    current = target_id
    while current != origin_id:
        current = result.previous.get(current)
        if current is None:
            # target was reached from a different origin
            raise Unreachable(target_id)
        path.append(current)
    path.reverse()
    return path
