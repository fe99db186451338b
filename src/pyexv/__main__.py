"""Main entry point for pyexv."""

import argparse
import json
import logging
import sys
from pathlib import Path

from pyexv.controller.viewer_state import coerce_explosion_factor
from pyexv.errors import PyexvError
from pyexv.layout.config import ExplosionConfig
from pyexv.layout.engine import ExplosionEngine, ExplosionLayout
from pyexv.model.loader import load_scene


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="pyexv",
        description="Python exploded viewer - compute exploded-view layouts for scene descriptions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "path",
        type=Path,
        help="JSON scene description to lay out",
    )
    parser.add_argument(
        "--factor",
        default="1.0",
        metavar="F",
        help="Explosion factor, clamped to 0..1 (default: 1.0)",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=3,
        metavar="N",
        help="Overlap resolution passes (default: 3)",
    )
    parser.add_argument(
        "--early-exit",
        action="store_true",
        help="Stop overlap resolution once a pass makes no adjustment",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print targets as JSON instead of a table",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def format_layout(layout: ExplosionLayout, factor: float, as_json: bool = False) -> str:
    """Render a layout for display.

    Args:
        layout: Computed explosion layout
        factor: Explosion factor used for positions
        as_json: Whether to produce JSON

    Returns:
        Formatted text
    """
    positions = layout.positions_at(factor)

    if as_json:
        return json.dumps({
            "factor": factor,
            "max_distance": layout.max_distance,
            "targets": [
                {
                    "id": target.node.id,
                    "name": target.node.name,
                    "direction": target.direction.tolist(),
                    "multiplier": target.local_distance_multiplier,
                    "position": positions[target.node.id].tolist(),
                }
                for target in layout.targets
            ],
        }, indent=2)

    lines = [f"{len(layout.targets)} targets, max distance {layout.max_distance:.3f}, factor {factor:.2f}"]
    for target in layout.targets:
        dx, dy, dz = target.direction
        px, py, pz = positions[target.node.id]
        lines.append(
            f"{target.node.name or target.node.id:<24} "
            f"dir=({dx:+.3f}, {dy:+.3f}, {dz:+.3f}) "
            f"mult={target.local_distance_multiplier:.3f} "
            f"pos=({px:.3f}, {py:.3f}, {pz:.3f})"
        )
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s - %(levelname)s - %(message)s")

    scene_path = args.path.resolve()
    if not scene_path.is_file():
        print(f"Error: Scene file '{scene_path}' does not exist", file=sys.stderr)
        return 1

    try:
        config = ExplosionConfig(overlap_iterations=args.iterations, overlap_early_exit=args.early_exit)
        root = load_scene(scene_path)
    except PyexvError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    layout = ExplosionEngine(config).calculate_targets(root)
    print(format_layout(layout, coerce_explosion_factor(args.factor), as_json=args.json))
    return 0


if __name__ == "__main__":
    sys.exit(main())
