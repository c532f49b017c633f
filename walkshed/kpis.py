import pandas as pd

from .config import DEFAULT_THRESHOLDS_MIN
from .network import node_sort_key
from .search import SearchResult


def result_frame(result: SearchResult) -> pd.DataFrame:
    """One row per reachable node: node_id, walk_time_sec."""
    rows = [{"node_id": n, "walk_time_sec": d} for n, d in result.reachable_sorted()]
    return pd.DataFrame(rows, columns=["node_id", "walk_time_sec"])


def coverage_kpis(walk_df: pd.DataFrame, thresholds_min=DEFAULT_THRESHOLDS_MIN) -> pd.DataFrame:
    """
    Count reachable nodes within each walk-time threshold.
    Assumes walk_df has rows (node_id, walk_time_sec).
    """
    rows = []
    for thr in thresholds_min:
        within = int((walk_df["walk_time_sec"] <= thr * 60).sum())
        rows.append({
            "threshold_min": thr,
            "nodes_within": within,
            "pct_within": within / len(walk_df) if len(walk_df) else 0.0,
        })
    return pd.DataFrame(rows, columns=["threshold_min", "nodes_within", "pct_within"])


def compare_results(base: SearchResult, enhanced: SearchResult) -> pd.DataFrame:
    """
    Base vs enhanced walk time per node reachable in either result.
    Nodes only reachable thanks to test roads get NaN base time and
    newly_reachable = True.
    """
    b, e = base.reachable, enhanced.reachable
    nodes = sorted(set(b) | set(e), key=node_sort_key)
    out = pd.DataFrame({
        "node_id": nodes,
        "base_time_sec": [b.get(n) for n in nodes],
        "enhanced_time_sec": [e.get(n) for n in nodes],
    }, columns=["node_id", "base_time_sec", "enhanced_time_sec"])
    out["base_time_sec"] = out["base_time_sec"].astype(float)
    out["enhanced_time_sec"] = out["enhanced_time_sec"].astype(float)
    out["newly_reachable"] = out["base_time_sec"].isna() & out["enhanced_time_sec"].notna()
    out["time_saved_sec"] = (out["base_time_sec"] - out["enhanced_time_sec"]).fillna(0.0)
    return out


def impact_summary(comparison: pd.DataFrame, base_area_m2: float, enhanced_area_m2: float) -> dict:
    improved = comparison[comparison["time_saved_sec"] > 0]
    return {
        "base_nodes": int(comparison["base_time_sec"].notna().sum()),
        "enhanced_nodes": int(comparison["enhanced_time_sec"].notna().sum()),
        "newly_reachable": int(comparison["newly_reachable"].sum()),
        "improved_nodes": int(len(improved)),
        "mean_time_saved_sec": float(improved["time_saved_sec"].mean()) if len(improved) else 0.0,
        "base_area_m2": base_area_m2,
        "enhanced_area_m2": enhanced_area_m2,
        "area_gain_m2": enhanced_area_m2 - base_area_m2,
    }
