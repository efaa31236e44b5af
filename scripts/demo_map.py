#!/usr/bin/env python3
"""Demo: paint the showcase map, triangulate it and write a preview and a mesh export.

Usage
-----
    python scripts/demo_map.py --out exports/demo_map.png
    python scripts/demo_map.py --chunks 2 2 --seed 7 --json exports/demo_map.json --workers 4
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from hexmap import GridConfig, HexGrid, export_mesh_json, paint_demo_map, render_mesh_png


def main() -> None:
    parser = argparse.ArgumentParser(description="Paint and triangulate the demo map")
    parser.add_argument("--chunks", type=int, nargs=2, default=(4, 3), metavar=("X", "Z"))
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--workers", type=int)
    parser.add_argument("--out", default="exports/demo_map.png")
    parser.add_argument("--json", dest="json_path")
    parser.add_argument("--dpi", type=int, default=150)
    args = parser.parse_args()

    config = GridConfig(chunk_count_x=args.chunks[0], chunk_count_z=args.chunks[1], seed=args.seed)
    grid = HexGrid(config)
    print(f"Grid: {config.cell_count_x} × {config.cell_count_z} cells in {len(grid.chunks)} chunks")

    paint_demo_map(grid)

    t0 = time.perf_counter()
    meshes = grid.rebuild(max_workers=args.workers)
    elapsed = time.perf_counter() - t0
    triangles = sum(mesh.triangle_count for mesh in meshes)
    print(f"Triangulated {triangles} triangles in {elapsed:.2f}s")

    for name, count in sorted(grid.stats().items()):
        print(f"  {name:<32} {count}")

    render_mesh_png(grid, args.out, dpi=args.dpi, title=f"Demo map (seed {args.seed})")
    print(f"Saved {args.out}")

    if args.json_path:
        export_mesh_json(grid, args.json_path)
        print(f"Saved {args.json_path}")


if __name__ == "__main__":
    main()
