"""
Reachable nodes and walkshed boundary from one origin, written as GeoJSON.
"""
import sys, os, argparse
from pathlib import Path

# make walkshed importable no matter where you run from
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from walkshed.boundary import boundary_from_result
from walkshed.config import DEFAULT_BOUNDARY_METHOD
from walkshed.errors import OriginNotFound, FormatError
from walkshed.geojson_io import reachable_to_gdf, boundary_to_gdf, gdf_to_geojson_bytes
from walkshed.kpis import result_frame, coverage_kpis
from walkshed.search import search
from walkshed.snapshot import load_snapshot

OUT = Path("output")

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("origin", help="origin node id, e.g. n_1")
    ap.add_argument("--minutes", type=float, default=15)
    ap.add_argument("--network", default=str(OUT / "network.json"))
    ap.add_argument("--method", choices=["angular", "hull"], default=DEFAULT_BOUNDARY_METHOD)
    args = ap.parse_args()

    if not Path(args.network).exists():
        raise SystemExit(f"Missing {args.network}; run scripts/01_import_graphml.py first.")
    try:
        store = load_snapshot(args.network)
    except FormatError as e:
        raise SystemExit(f"Could not read {args.network}: {e}")

    G = store.snapshot()
    try:
        result = search(G, args.origin, args.minutes * 60)
    except OriginNotFound as e:
        raise SystemExit(str(e))
    poly = boundary_from_result(G, result, method=args.method)
    print(f"{len(result.reachable)} nodes within {args.minutes:g} min; area ~ {poly.area_m2 / 1e6:.3f} km²")

    OUT.mkdir(parents=True, exist_ok=True)
    (OUT / "reachable_nodes.geojson").write_bytes(gdf_to_geojson_bytes(reachable_to_gdf(G, result)))
    (OUT / "walkshed_boundary.geojson").write_bytes(
        gdf_to_geojson_bytes(boundary_to_gdf(poly, origin=args.origin, minutes=args.minutes))
    )
    coverage_kpis(result_frame(result)).to_csv(OUT / "coverage_kpis.csv", index=False)
    print("Wrote output/reachable_nodes.geojson, output/walkshed_boundary.geojson, output/coverage_kpis.csv")

if __name__ == "__main__":
    main()
