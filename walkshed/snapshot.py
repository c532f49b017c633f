"""
Portable JSON snapshot of a NetworkStore.

    {"nodes": [{"id", "lng", "lat", "isBoundary", "connections"}],
     "edges": [{"from", "to", "length", "time"}]}
"""
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Union

from .errors import FormatError
from .network import NetworkStore, edge_key, node_sort_key

logger = logging.getLogger(__name__)


def export_snapshot(network: NetworkStore) -> Dict[str, Any]:
    # one frozen view, so nodes and edges always agree under concurrent edits
    G = network.snapshot()
    nodes = [
        {
            "id": n,
            "lng": d["lng"],
            "lat": d["lat"],
            "isBoundary": d.get("is_boundary", False),
            "connections": sorted(G.adj[n]),
        }
        for n, d in sorted(G.nodes(data=True), key=lambda nd: node_sort_key(nd[0]))
    ]
    edges = []
    for u, v, d in G.edges(data=True):
        a, b = edge_key(u, v)
        edges.append({"from": a, "to": b, "length": d["length"], "time": d["travel_time"]})
    edges.sort(key=lambda e: (node_sort_key(e["from"]), node_sort_key(e["to"])))
    return {"nodes": nodes, "edges": edges}


def _number(obj: dict, key: str, where: str) -> float:
    if key not in obj:
        raise FormatError(f"{where} is missing required field '{key}'")
    v = obj[key]
    if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
        raise FormatError(f"{where} field '{key}' must be a finite number, got {v!r}")
    return float(v)


def _node_id(obj: dict, key: str, where: str) -> str:
    if key not in obj:
        raise FormatError(f"{where} is missing required field '{key}'")
    v = obj[key]
    if not isinstance(v, str) or not v:
        raise FormatError(f"{where} field '{key}' must be a non-empty string, got {v!r}")
    return v


def import_snapshot(data: Dict[str, Any]) -> NetworkStore:
    """
    Build a new NetworkStore from snapshot data.

    Edges are authoritative for adjacency; ``connections`` is optional and
    only checked for references to unknown nodes. Any structural problem
    raises FormatError before a store is returned, so callers' current
    network is never touched.
    """
    if not isinstance(data, dict):
        raise FormatError(f"Snapshot must be an object, got {type(data).__name__}")
    for key in ("nodes", "edges"):
        if not isinstance(data.get(key), list):
            raise FormatError(f"Snapshot field '{key}' must be a list")

    store = NetworkStore()
    for i, raw in enumerate(data["nodes"]):
        where = f"nodes[{i}]"
        if not isinstance(raw, dict):
            raise FormatError(f"{where} must be an object")
        node_id = _node_id(raw, "id", where)
        if store.has_node(node_id):
            raise FormatError(f"{where} duplicates node id '{node_id}'")
        lng, lat = _number(raw, "lng", where), _number(raw, "lat", where)
        is_boundary = raw.get("isBoundary", False)
        if not isinstance(is_boundary, bool):
            raise FormatError(f"{where} field 'isBoundary' must be true or false, got {is_boundary!r}")
        store._put_node(node_id, lng, lat, is_boundary)

    for i, raw in enumerate(data["nodes"]):
        conns = raw.get("connections", [])
        if not isinstance(conns, list):
            raise FormatError(f"nodes[{i}] field 'connections' must be a list")
        missing = [c for c in conns if not store.has_node(c)]
        if missing:
            raise FormatError(f"nodes[{i}] connects to unknown node(s) {missing}")

    for i, raw in enumerate(data["edges"]):
        where = f"edges[{i}]"
        if not isinstance(raw, dict):
            raise FormatError(f"{where} must be an object")
        a, b = _node_id(raw, "from", where), _node_id(raw, "to", where)
        length = _number(raw, "length", where)
        for n in (a, b):
            if not store.has_node(n):
                raise FormatError(f"{where} references unknown node '{n}'")
        if a == b:
            raise FormatError(f"{where} is a self-loop on '{a}'")
        if length < 0:
            raise FormatError(f"{where} has negative length {length}")
        # travel time is re-derived from length
        store.add_edge(a, b, length)

    store._restore_counter(raw["id"] for raw in data["nodes"])
    logger.info("imported snapshot: %d nodes, %d edges", len(store), store.number_of_edges())
    return store


def to_json(network: NetworkStore, indent: int = 2) -> str:
    return json.dumps(export_snapshot(network), indent=indent)


def from_json(text: Union[str, bytes]) -> NetworkStore:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"Snapshot is not valid JSON: {e}") from e
    return import_snapshot(data)


def save_snapshot(network: NetworkStore, path: Union[str, Path]) -> None:
    Path(path).write_text(to_json(network), encoding="utf-8")


def load_snapshot(path: Union[str, Path]) -> NetworkStore:
    return from_json(Path(path).read_bytes())
