"""
Convert an acquired walking graph (osmnx GraphML on disk) into a network snapshot.
"""
import sys, os, argparse
from pathlib import Path

# make walkshed importable no matter where you run from
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from walkshed.convert import load_graphml
from walkshed.snapshot import save_snapshot

OUT = Path("output")

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("graphml", help="GraphML saved with osmnx.save_graphml")
    ap.add_argument("--out", default=str(OUT / "network.json"))
    args = ap.parse_args()

    src = Path(args.graphml)
    if not src.exists():
        raise SystemExit(f"Missing {src}. Export the walking graph with osmnx.save_graphml first.")

    print(f"Reading {src} ...")
    store = load_graphml(src)
    print(f"  {len(store)} nodes, {store.number_of_edges()} edges")

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    save_snapshot(store, out)
    print(f"Saved to {out}")

if __name__ == "__main__":
    main()
