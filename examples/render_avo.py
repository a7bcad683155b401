#!/usr/bin/env python3
"""Render the acceleration-velocity-obstacle (AVO) scene.

This script renders the swept-sphere obstacle of agent A avoiding agent B:
the set of relative velocities that lead to a collision within the
lookahead horizon, given A's acceleration-limited velocity response.

Usage:
    python -m examples.render_avo [options]

Options:
    --width WIDTH           Image width in pixels (default: 512)
    --height HEIGHT         Image height in pixels (default: 512)
    --position-a X Y Z      Position of agent A (default: 100 0 0)
    --position-b X Y Z      Position of agent B (default: -100 0 0)
    --velocity-a X Y Z      Velocity of agent A (default: 0 0 0)
    --velocity-b X Y Z      Velocity of agent B (default: 0 0 0)
    --radius RADIUS         Radius of each agent (default: 50)
    --lookahead SECONDS     Time horizon (default: 5)
    --azimuth RADIANS       Orbit azimuth (default: 0.0)
    --elevation RADIANS     Orbit elevation (default: 0.3)
    --output OUTPUT         Output file path (default: avo.png)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_avo --velocity-a -50 0 0 --output avo_moving.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the acceleration-velocity-obstacle scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=512, help="Image width in pixels (default: 512)")
    parser.add_argument("--height", type=int, default=512, help="Image height in pixels (default: 512)")
    parser.add_argument("--position-a", type=float, nargs=3, default=(100.0, 0.0, 0.0), metavar=("X", "Y", "Z"))
    parser.add_argument("--position-b", type=float, nargs=3, default=(-100.0, 0.0, 0.0), metavar=("X", "Y", "Z"))
    parser.add_argument("--velocity-a", type=float, nargs=3, default=(0.0, 0.0, 0.0), metavar=("X", "Y", "Z"))
    parser.add_argument("--velocity-b", type=float, nargs=3, default=(0.0, 0.0, 0.0), metavar=("X", "Y", "Z"))
    parser.add_argument("--radius", type=float, default=50.0, help="Radius of each agent (default: 50)")
    parser.add_argument("--lookahead", type=float, default=5.0, help="Time horizon (default: 5)")
    parser.add_argument("--azimuth", type=float, default=0.0, help="Orbit azimuth in radians (default: 0.0)")
    parser.add_argument("--elevation", type=float, default=0.3, help="Orbit elevation in radians (default: 0.3)")
    parser.add_argument("--output", type=str, default="avo.png", help="Output file path (default: avo.png)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_avo(
    width: int = 512,
    height: int = 512,
    agents=None,
    azimuth: float = 0.0,
    elevation: float = 0.3,
    output_path: str = "avo.png",
    quiet: bool = False,
) -> Path:
    """Render the AVO scene and save to file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from raymarcher.core.frame import FrameParams, FrameRenderer
    from raymarcher.preview.export import save_png_from_array
    from raymarcher.scene.presets import create_avo_scene, gradient_background
    from raymarcher.scene.trajectory import AgentPair

    if agents is None:
        agents = AgentPair()

    if not quiet:
        params = agents.to_trajectory_params()
        print(f"Creating AVO scene ({width}x{height})...")
        print(f"  k = {params.acceleration_ctrl_param:.3f}, radius_ab = {params.radius_ab:.1f}")

    camera = create_avo_scene(agents, aspect_ratio=width / height, azimuth=azimuth, elevation=elevation)

    start_time = time.time()
    renderer = FrameRenderer(width, height)
    image = renderer.render(
        FrameParams(projection=camera.projection(), view=camera.view()),
        gradient_background(width, height),
    )

    output_file = Path(output_path)
    save_png_from_array(image, str(output_file))

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        from raymarcher.scene.trajectory import AgentPair

        agents = AgentPair(
            position_a=tuple(args.position_a),
            position_b=tuple(args.position_b),
            velocity_a=tuple(args.velocity_a),
            velocity_b=tuple(args.velocity_b),
            radius_a=args.radius,
            radius_b=args.radius,
            lookahead=args.lookahead,
        )
        render_avo(
            width=args.width,
            height=args.height,
            agents=agents,
            azimuth=args.azimuth,
            elevation=args.elevation,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
