"""hexmap command-line interface."""

from __future__ import annotations

import argparse
from typing import List, Optional

from .config import DEFAULT_MAP, SMALL_MAP, GridConfig
from .io import load_json, save_json

_PRESETS = {"default": DEFAULT_MAP, "small": SMALL_MAP}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="hexmap CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("demo", help="Paint the demo map and save it")
    demo.add_argument("--out", dest="output_path", required=True)
    demo.add_argument("--preset", choices=sorted(_PRESETS), default="default")
    demo.add_argument("--seed", type=int)
    demo.add_argument("--render-out", dest="render_path")
    demo.add_argument("--dpi", type=int, default=150)

    export = sub.add_parser("export", help="Triangulate a saved map and export its meshes")
    export.add_argument("--in", dest="input_path", required=True)
    export.add_argument("--out", dest="output_path", required=True)
    export.add_argument("--workers", type=int)
    export.add_argument("--indent", type=int)

    render = sub.add_parser("render", help="Render a saved map to PNG")
    render.add_argument("--in", dest="input_path", required=True)
    render.add_argument("--out", dest="output_path", required=True)
    render.add_argument("--dpi", type=int, default=150)
    render.add_argument("--no-shade", action="store_true")

    stats = sub.add_parser("stats", help="Print triangulation counts for a saved map")
    stats.add_argument("--in", dest="input_path", required=True)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "demo":
        _cmd_demo(args)

    elif args.command == "export":
        from .export import export_mesh_json
        grid = load_json(args.input_path)
        grid.rebuild(max_workers=args.workers)
        export_mesh_json(grid, args.output_path, indent=args.indent)
        print(f"Saved {args.output_path}")

    elif args.command == "render":
        from .visualize import render_mesh_png
        grid = load_json(args.input_path)
        render_mesh_png(
            grid, args.output_path,
            dpi=args.dpi, shade_strength=0.0 if args.no_shade else 0.5,
        )
        print(f"Saved {args.output_path}")

    elif args.command == "stats":
        grid = load_json(args.input_path)
        grid.rebuild()
        for name, count in sorted(grid.stats().items()):
            print(f"{name}: {count}")


def _cmd_demo(args) -> None:
    from dataclasses import replace

    from .editing import paint_demo_map
    from .grid import HexGrid

    config: GridConfig = _PRESETS[args.preset]
    if args.seed is not None:
        config = replace(config, seed=args.seed)

    grid = HexGrid(config)
    paint_demo_map(grid)
    save_json(grid, args.output_path)
    if args.render_path:
        from .visualize import render_mesh_png
        render_mesh_png(grid, args.render_path, dpi=args.dpi)
    print(f"Saved {args.output_path}")


if __name__ == "__main__":
    main()
