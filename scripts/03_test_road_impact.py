"""
What-if: effect of proposed test roads (GeoJSON LineStrings) on one walkshed.
Base network is never modified.
"""
import sys, os, argparse, json
from pathlib import Path
import pandas as pd

# make walkshed importable no matter where you run from
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from walkshed.boundary import boundary_from_result
from walkshed.engine import ReachabilityEngine
from walkshed.errors import OriginNotFound, FormatError
from walkshed.geojson_io import road_lines_from_geojson_bytes, roads_from_gdf, boundary_to_gdf, gdf_to_geojson_bytes
from walkshed.kpis import compare_results, impact_summary
from walkshed.snapshot import load_snapshot

OUT = Path("output")

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("origin", help="origin node id, e.g. n_1")
    ap.add_argument("roads", help="GeoJSON with LineString test roads")
    ap.add_argument("--minutes", type=float, default=15)
    ap.add_argument("--network", default=str(OUT / "network.json"))
    args = ap.parse_args()

    if not Path(args.network).exists():
        raise SystemExit(f"Missing {args.network}; run scripts/01_import_graphml.py first.")
    if not Path(args.roads).exists():
        raise SystemExit(f"Missing {args.roads}.")
    try:
        engine = ReachabilityEngine(network=load_snapshot(args.network))
    except FormatError as e:
        raise SystemExit(f"Could not read {args.network}: {e}")

    try:
        lines = road_lines_from_geojson_bytes(Path(args.roads).read_bytes())
    except ValueError as e:
        raise SystemExit(f"Could not read {args.roads}: {e}")
    for start, end, length in roads_from_gdf(lines):
        engine.add_test_road(start, end, length=length)
    print(f"{len(engine.overlay.list_active())} test roads loaded")

    budget = args.minutes * 60
    try:
        base = engine.search_result(args.origin, budget)
        enhanced = engine.enhanced_result(args.origin, budget)
    except OriginNotFound as e:
        raise SystemExit(str(e))

    fused = engine.overlay.fused_graph(engine.network)
    base_poly = boundary_from_result(engine.network, base, method=engine.boundary_method)
    enh_poly = boundary_from_result(fused, enhanced, method=engine.boundary_method)

    comparison = compare_results(base, enhanced)
    summary = impact_summary(comparison, base_poly.area_m2, enh_poly.area_m2)

    OUT.mkdir(parents=True, exist_ok=True)
    comparison.to_csv(OUT / "test_road_comparison.csv", index=False)
    (OUT / "test_road_summary.json").write_text(json.dumps(summary, indent=2))
    boundaries = pd.concat(
        [boundary_to_gdf(base_poly, scenario="base"), boundary_to_gdf(enh_poly, scenario="enhanced")],
        ignore_index=True,
    )
    (OUT / "test_road_boundaries.geojson").write_bytes(gdf_to_geojson_bytes(boundaries))
    print(json.dumps(summary, indent=2))
    print("Wrote output/test_road_comparison.csv, output/test_road_summary.json, output/test_road_boundaries.geojson")

if __name__ == "__main__":
    main()
