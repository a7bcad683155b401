"""Interactive preview window using Taichi GGUI.

This module provides an interactive window for the two 4D-geometry scenes
using Taichi's ti.ui.Window and canvas system. Frames are stateless, so each
window frame re-renders the scene from the current slider values.

Features:
    - Taichi GGUI-based window (GPU-accelerated)
    - Support for updating display from numpy arrays
    - AVO agent position, velocity, limit, radius and lookahead sliders
    - Animated spherinder cross-section with orbit controls
    - Timestamped PNG export

Example:
    >>> from raymarcher.preview.interactive import InteractivePreview
    >>> from raymarcher.scene.trajectory import AgentPair
    >>>
    >>> preview = InteractivePreview(640, 480)
    >>> preview.run_avo(AgentPair())  # Renders continuously until window closed
"""

from __future__ import annotations

import copy
import math
import os
import time
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

if TYPE_CHECKING:
    import numpy.typing as npt

    from raymarcher.core.frame import FrameRenderer
    from raymarcher.scene.trajectory import AgentPair

# Slider ranges of the agent control panel
POSITION_RANGE = (-100.0, 100.0)
VELOCITY_RANGE = (-100.0, 100.0)
LIMIT_RANGE = (0.0, 1000.0)
RADIUS_RANGE = (0.0, 100.0)
LOOKAHEAD_RANGE = (0.0, 100.0)

# Floors for sliders whose zero end is invalid for the trajectory
MIN_ACCELERATION = 1e-3
MIN_LOOKAHEAD = 1e-3


def apply_panel_values(agents: AgentPair, **values: object) -> AgentPair:
    """Copy of ``agents`` with the control panel values applied.

    Agent A's acceleration limit and the lookahead are raised to a small
    positive floor so the result always converts to valid
    :class:`TrajectoryParams`.
    """
    updated = replace(agents, **values)
    return replace(
        updated,
        max_acceleration_a=max(updated.max_acceleration_a, MIN_ACCELERATION),
        lookahead=max(updated.lookahead, MIN_LOOKAHEAD),
    )


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        display_image: Taichi field storing the display image (RGB float).
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        title: str = "Raymarcher - Interactive Preview",
    ) -> None:
        """Initialize the interactive preview window.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            title: Window title.

        Note:
            The window is created lazily, on first use.
        """
        self.width = width
        self.height = height
        self._title = title
        self._is_initialized = False

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None
        self._renderer: FrameRenderer | None = None
        self._last_image: npt.NDArray[np.float32] | None = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(width, height)
        )

    def _initialize_window(self) -> None:
        if self._is_initialized:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()
        self._is_initialized = True

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_image(self, image: npt.NDArray[np.float32]) -> None:
        """Update the display image from a numpy array.

        Args:
            image: Array of shape (height, width, 3|4); alpha is dropped and
                values are clamped to [0, 1].

        Raises:
            ValueError: If image shape doesn't match (height, width, 3|4).
        """
        if image.ndim != 3 or image.shape[:2] != (self.height, self.width) or image.shape[2] not in (3, 4):
            raise ValueError(
                f"Image shape {image.shape} doesn't match expected "
                f"({self.height}, {self.width}, 3|4)"
            )

        rgb = np.clip(image[:, :, :3], 0.0, 1.0).astype(np.float32)

        # NumPy images are (height, width, channels) with row 0 at the top;
        # Taichi fields are (x, y) with the origin at bottom-left
        image_transposed = np.ascontiguousarray(np.transpose(np.flipud(rgb), (1, 0, 2)))
        self.display_image.from_numpy(image_transposed)
        self._last_image = image

    def is_running(self) -> bool:
        return self.window.running

    def show_frame(self) -> None:
        """Present the current display image."""
        self.canvas.set_image(self.display_image)
        self.window.show()

    def run(self) -> None:
        """Show the display image until the window is closed."""
        self._initialize_window()

        while self.is_running():
            self.show_frame()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            if ssh_connection and not display:
                return False
            return True

        if display or wayland:
            return True

        if os.name == "nt":
            return True

        return False

    # =========================================================================
    # Scene Loops
    # =========================================================================

    def _ensure_renderer(self) -> FrameRenderer:
        from raymarcher.core.frame import FrameRenderer

        if self._renderer is None:
            self._renderer = FrameRenderer(self.width, self.height)
        return self._renderer

    def run_avo(self, agents: AgentPair | None = None) -> None:
        """Run the acceleration-velocity-obstacle viewer until closed.

        GUI Controls:
            - Agent A/B position and velocity sliders (-100 to 100)
            - Max acceleration / velocity sliders (0 to 1000)
            - Radius sliders (0 to 100)
            - Lookahead slider (0 to 100)
            - Camera azimuth / elevation sliders
            - Export PNG button
        """
        from raymarcher.core.frame import FrameParams
        from raymarcher.scene.presets import create_avo_scene, gradient_background
        from raymarcher.scene.trajectory import AgentPair

        self._initialize_window()
        renderer = self._ensure_renderer()

        self._agents = copy.deepcopy(agents) if agents is not None else AgentPair()
        self._azimuth = 0.0
        self._elevation = 0.3
        background = gradient_background(self.width, self.height)

        while self.is_running():
            camera = create_avo_scene(
                self._agents,
                aspect_ratio=renderer.aspect_ratio,
                azimuth=self._azimuth,
                elevation=self._elevation,
            )
            params = FrameParams(projection=camera.projection(), view=camera.view())
            self.update_image(renderer.render(params, background))

            self._draw_avo_panel()
            self._draw_camera_panel(0.02, 0.72)
            self._draw_export_panel(0.02, 0.86, "avo")
            self.show_frame()

    def run_spherinder_section(self) -> None:
        """Run the animated spherinder cross-section viewer until closed.

        The slice offset advances with wall-clock time; camera sliders orbit
        around the origin.
        """
        from raymarcher.core.frame import FrameParams
        from raymarcher.scene.presets import (
            create_spherinder_section_scene,
            gradient_background,
            slice_offset_at,
        )

        self._initialize_window()
        renderer = self._ensure_renderer()

        self._azimuth = 0.0
        self._elevation = 0.3
        background = gradient_background(self.width, self.height)
        start_time = time.time()

        while self.is_running():
            camera = create_spherinder_section_scene(
                aspect_ratio=renderer.aspect_ratio,
                azimuth=self._azimuth,
                elevation=self._elevation,
            )
            params = FrameParams(
                projection=camera.projection(),
                view=camera.view(),
                slice_offset=slice_offset_at(time.time() - start_time),
            )
            self.update_image(renderer.render(params, background))

            self._draw_camera_panel(0.02, 0.02)
            self._draw_export_panel(0.02, 0.16, "spherinder_section")
            self.show_frame()

    # =========================================================================
    # GUI Panels
    # =========================================================================

    def _slider_vector(self, gui, label: str, vector, value_range) -> tuple[float, float, float]:
        return (
            gui.slider_float(f"{label} X", vector[0], minimum=value_range[0], maximum=value_range[1]),
            gui.slider_float(f"{label} Y", vector[1], minimum=value_range[0], maximum=value_range[1]),
            gui.slider_float(f"{label} Z", vector[2], minimum=value_range[0], maximum=value_range[1]),
        )

    def _draw_avo_panel(self) -> None:
        agents = self._agents
        with self.window.GUI.sub_window("Agents", 0.02, 0.02, 0.3, 0.68) as gui:
            position_a = self._slider_vector(gui, "(A) Position", agents.position_a, POSITION_RANGE)
            velocity_a = self._slider_vector(gui, "(A) Velocity", agents.velocity_a, VELOCITY_RANGE)
            position_b = self._slider_vector(gui, "(B) Position", agents.position_b, POSITION_RANGE)
            velocity_b = self._slider_vector(gui, "(B) Velocity", agents.velocity_b, VELOCITY_RANGE)

            max_acceleration_a = gui.slider_float(
                "(A) Max Acceleration", agents.max_acceleration_a, minimum=LIMIT_RANGE[0], maximum=LIMIT_RANGE[1]
            )
            max_acceleration_b = gui.slider_float(
                "(B) Max Acceleration", agents.max_acceleration_b, minimum=LIMIT_RANGE[0], maximum=LIMIT_RANGE[1]
            )
            max_velocity_a = gui.slider_float(
                "(A) Max Velocity", agents.max_velocity_a, minimum=LIMIT_RANGE[0], maximum=LIMIT_RANGE[1]
            )
            max_velocity_b = gui.slider_float(
                "(B) Max Velocity", agents.max_velocity_b, minimum=LIMIT_RANGE[0], maximum=LIMIT_RANGE[1]
            )
            radius_a = gui.slider_float(
                "(A) Radius", agents.radius_a, minimum=RADIUS_RANGE[0], maximum=RADIUS_RANGE[1]
            )
            radius_b = gui.slider_float(
                "(B) Radius", agents.radius_b, minimum=RADIUS_RANGE[0], maximum=RADIUS_RANGE[1]
            )
            lookahead = gui.slider_float(
                "Lookahead", agents.lookahead, minimum=LOOKAHEAD_RANGE[0], maximum=LOOKAHEAD_RANGE[1]
            )

        self._agents = apply_panel_values(
            agents,
            position_a=position_a,
            velocity_a=velocity_a,
            position_b=position_b,
            velocity_b=velocity_b,
            max_acceleration_a=max_acceleration_a,
            max_acceleration_b=max_acceleration_b,
            max_velocity_a=max_velocity_a,
            max_velocity_b=max_velocity_b,
            radius_a=radius_a,
            radius_b=radius_b,
            lookahead=lookahead,
        )

    def _draw_camera_panel(self, x: float, y: float) -> None:
        with self.window.GUI.sub_window("Camera", x, y, 0.3, 0.12) as gui:
            self._azimuth = gui.slider_float(
                "Azimuth", self._azimuth, minimum=-math.pi, maximum=math.pi
            )
            self._elevation = gui.slider_float(
                "Elevation", self._elevation, minimum=-1.5, maximum=1.5
            )

    def _draw_export_panel(self, x: float, y: float, prefix: str) -> None:
        with self.window.GUI.sub_window("Export", x, y, 0.3, 0.08) as gui:
            if gui.button("Export PNG"):
                self._export_png(prefix)

    def _export_png(self, prefix: str) -> None:
        """Export the last rendered frame to a timestamped PNG file."""
        from raymarcher.preview.export import save_png_from_array

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"{prefix}_{timestamp}.png"

        if self._last_image is not None:
            save_png_from_array(self._last_image, filename)
            print(f"Exported: {filename}")
        else:
            print("Error: No frame available for export")
