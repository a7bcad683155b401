#!/usr/bin/env python3
"""Render the spherinder cross-section scene.

This script renders the 3D cross-section of a spherinder sliced by a tilted
hyperplane, cut by one plane and capped by another, seen from an orbit
camera. With --frames N it renders an animation of the slice offset w, one
PNG per frame.

Usage:
    python -m examples.render_spherinder_section [options]

Options:
    --width WIDTH       Image width in pixels (default: 512)
    --height HEIGHT     Image height in pixels (default: 512)
    --frames FRAMES     Number of animation frames (default: 1)
    --fps FPS           Animation frame rate for the w offset (default: 30)
    --azimuth RADIANS   Orbit azimuth (default: 0.0)
    --background PATH   Background image (default: vertical gradient)
    --ray-method NAME   unproject or ndc_to_world (default: ndc_to_world)
    --output OUTPUT     Output file path (default: spherinder_section.png)
    --quiet             Suppress progress output

Example:
    python -m examples.render_spherinder_section --width 256 --height 256 --frames 10
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
        description="Render the spherinder cross-section scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=512, help="Image width in pixels (default: 512)")
    parser.add_argument("--height", type=int, default=512, help="Image height in pixels (default: 512)")
    parser.add_argument("--frames", type=int, default=1, help="Number of animation frames (default: 1)")
    parser.add_argument("--fps", type=float, default=30.0, help="Animation frame rate (default: 30)")
    parser.add_argument("--azimuth", type=float, default=0.0, help="Orbit azimuth in radians (default: 0.0)")
    parser.add_argument("--background", type=str, default=None, help="Background image path")
    parser.add_argument(
        "--ray-method",
        choices=("unproject", "ndc_to_world"),
        default="ndc_to_world",
        help="Camera ray reconstruction (default: ndc_to_world)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spherinder_section.png",
        help="Output file path (default: spherinder_section.png)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def frame_path(output_path: Path, index: int, total: int) -> Path:
    """Output path of frame ``index``; a single frame uses the path as is."""
    if total == 1:
        return output_path
    return output_path.with_name(f"{output_path.stem}_{index:04d}{output_path.suffix}")


def render_spherinder_section(
    width: int = 512,
    height: int = 512,
    frames: int = 1,
    fps: float = 30.0,
    azimuth: float = 0.0,
    background_path: str | None = None,
    ray_method: str = "ndc_to_world",
    output_path: str = "spherinder_section.png",
    quiet: bool = False,
) -> list[Path]:
    """Render the spherinder cross-section and save each frame.

    Returns:
        Paths of the saved image files.
    """
    # Lazy imports to allow Taichi initialization first
    from raymarcher.core.frame import FrameParams, FrameRenderer
    from raymarcher.core.settings import MarchSettings, configure
    from raymarcher.preview.export import load_background, save_png_from_array
    from raymarcher.scene.presets import (
        create_spherinder_section_scene,
        gradient_background,
        slice_offset_at,
    )

    if frames <= 0:
        raise ValueError(f"frames must be positive, got {frames}")

    configure(MarchSettings(ray_method=ray_method))

    if not quiet:
        print(f"Creating spherinder cross-section scene ({width}x{height})...")

    camera = create_spherinder_section_scene(aspect_ratio=width / height, azimuth=azimuth)

    if background_path is not None:
        background = load_background(background_path, width, height)
    else:
        background = gradient_background(width, height)

    renderer = FrameRenderer(width, height)
    output = Path(output_path)
    saved: list[Path] = []

    start_time = time.time()
    for index in range(frames):
        params = FrameParams(
            projection=camera.projection(),
            view=camera.view(),
            slice_offset=slice_offset_at(index / fps),
        )
        image = renderer.render(params, background)

        path = frame_path(output, index, frames)
        save_png_from_array(image, str(path))
        saved.append(path)

        if not quiet:
            elapsed = time.time() - start_time
            print(
                f"\r  Frame {index + 1}/{frames} (w = {params.slice_offset:.2f}) "
                f"- {(index + 1) / elapsed:.1f} fps",
                end="",
                flush=True,
            )

    if not quiet:
        print()
        print(f"Saved to: {saved[0].absolute() if frames == 1 else output.parent.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return saved


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
        render_spherinder_section(
            width=args.width,
            height=args.height,
            frames=args.frames,
            fps=args.fps,
            azimuth=args.azimuth,
            background_path=args.background,
            ray_method=args.ray_method,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
