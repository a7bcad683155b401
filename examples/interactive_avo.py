#!/usr/bin/env python3
"""Interactive viewer for the AVO and spherinder cross-section scenes.

Usage:
    python -m examples.interactive_avo [--scene avo|section]

Controls (avo):
    - (A)/(B) Position and Velocity sliders (-100 to 100)
    - Max Acceleration / Max Velocity sliders (0 to 1000)
    - Radius sliders (0 to 100)
    - Lookahead slider (0 to 100)
    - Camera Azimuth / Elevation sliders
    - Export PNG: Save current frame with timestamp

The section scene animates the slice offset over time and offers the same
camera and export controls.
"""

from __future__ import annotations

import argparse
import platform
import sys

import taichi as ti


def initialize_taichi() -> str:
    """Pick a Taichi backend: Metal on macOS, then any GPU, then CPU.

    Returns:
        Human-readable backend name for the startup banner.
    """
    system = platform.system()

    if system == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Open the viewer window; returns 1 when no display is available."""
    parser = argparse.ArgumentParser(description="Interactive raymarcher viewer.")
    parser.add_argument("--scene", choices=("avo", "section"), default="avo")
    parser.add_argument("--width", type=int, default=640)
    parser.add_argument("--height", type=int, default=480)
    args = parser.parse_args()

    # Kernels are compiled against the backend chosen here
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from raymarcher.preview.interactive import InteractivePreview

    if not InteractivePreview.is_display_available():
        print("No display found; the viewer needs a graphical session.", file=sys.stderr)
        return 1

    print(f"Creating interactive preview window ({args.width}x{args.height})...")
    preview = InteractivePreview(args.width, args.height)

    print(f"Viewing the {args.scene} scene. Drag the sliders to change it,")
    print("press Export PNG to save the frame, close the window to quit.")

    try:
        if args.scene == "avo":
            preview.run_avo()
        else:
            preview.run_spherinder_section()
    except KeyboardInterrupt:
        print("\nStopped.")
    finally:
        preview.close()
        print("Viewer closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
