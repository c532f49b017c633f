"""
Query interface: one base network plus one overlay, answering reachability
queries in plain dict/list form for a presentation layer.
"""
import logging
import threading
from typing import Any, Dict, Optional

from .boundary import boundary_from_result
from .config import DEFAULT_BOUNDARY_METHOD
from .kpis import compare_results
from .network import NetworkStore
from .overlay import OverlayManager
from .search import SearchResult, search
from .snapshot import export_snapshot, import_snapshot

logger = logging.getLogger(__name__)


class ReachabilityEngine:
    def __init__(self, network: Optional[NetworkStore] = None,
                 overlay: Optional[OverlayManager] = None,
                 boundary_method: str = DEFAULT_BOUNDARY_METHOD):
        self.network = network if network is not None else NetworkStore()
        self.overlay = overlay if overlay is not None else OverlayManager()
        self.boundary_method = boundary_method
        self._swap_lock = threading.Lock()

    # ---- network lifecycle ----

    def load(self, data: Dict[str, Any]) -> None:
        """Replace the base network; on FormatError the current one stays."""
        store = import_snapshot(data)
        with self._swap_lock:
            self.network = store
        logger.info("engine network replaced (%d nodes)", len(store))

    def export(self) -> Dict[str, Any]:
        return export_snapshot(self.network)

    # ---- queries ----

    def _shape(self, G, result: SearchResult) -> Dict[str, Any]:
        poly = boundary_from_result(G, result, method=self.boundary_method)
        return {
            "reachable": [
                {"nodeId": n, "distanceSeconds": d} for n, d in result.reachable_sorted()
            ],
            "boundary": [{"lng": x, "lat": y} for x, y in poly.ring],
            "areaSquareMeters": poly.area_m2,
            "truncated": result.truncated,
        }

    def search_result(self, origin_id: str, max_time_seconds: float,
                      deadline: Optional[float] = None) -> SearchResult:
        return search(self.network.snapshot(), origin_id, max_time_seconds, deadline=deadline)

    def enhanced_result(self, origin_id: str, max_time_seconds: float,
                        deadline: Optional[float] = None) -> SearchResult:
        return self.overlay.compute_enhanced(self.network.snapshot(), origin_id, max_time_seconds, deadline=deadline)

    def search(self, origin_id: str, max_time_seconds: float,
               deadline: Optional[float] = None) -> Dict[str, Any]:
        G = self.network.snapshot()
        return self._shape(G, search(G, origin_id, max_time_seconds, deadline=deadline))

    def compute_enhanced(self, origin_id: str, max_time_seconds: float,
                         deadline: Optional[float] = None) -> Dict[str, Any]:
        G = self.overlay.fused_graph(self.network.snapshot())
        return self._shape(G, search(G, origin_id, max_time_seconds, deadline=deadline))

    def compare(self, origin_id: str, max_time_seconds: float):
        """Per-node base vs enhanced table (see kpis.compare_results)."""
        base = self.search_result(origin_id, max_time_seconds)
        enhanced = self.enhanced_result(origin_id, max_time_seconds)
        return compare_results(base, enhanced)

    # ---- overlay ----

    def add_test_road(self, start, end, length: Optional[float] = None) -> str:
        return self.overlay.add_test_road(start, end, length=length)

    def remove_test_road(self, road_id: str) -> None:
        self.overlay.remove_test_road(road_id)
