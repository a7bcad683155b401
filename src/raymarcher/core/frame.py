"""Frame-level wrapper around the renderer for host render loops.

A frame is a pure function of its parameter block and background: the
camera matrices, the slice offset of the 4D cross-section scene, the
optional trajectory parameters of the swept-sphere scene, and the image the
result is composited over. FrameRenderer uploads those inputs and runs the
per-pixel kernel once.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raymarcher.core.frame import FrameParams, FrameRenderer
    >>> from raymarcher.scene.presets import create_spherinder_section_scene
    >>>
    >>> camera = create_spherinder_section_scene()
    >>> renderer = FrameRenderer(640, 480)
    >>> params = FrameParams(projection=camera.projection(), view=camera.view())
    >>> image = renderer.render(params)
"""

from collections.abc import Generator, Iterable
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from raymarcher.camera.projection import setup_camera_matrices
from raymarcher.core.renderer import (
    get_image_numpy,
    render_frame,
    set_background,
    setup_render_target,
)
from raymarcher.scene.distance_field import set_slice_offset
from raymarcher.scene.trajectory import TrajectoryParams, setup_trajectory


@dataclass
class FrameParams:
    """Per-frame parameter block.

    Attributes:
        projection: 4x4 projection matrix.
        view: 4x4 camera-to-world transform.
        projection_inverse: Inverse projection; computed when None.
        slice_offset: Offset of the spherinder slice hyperplanes along their normals.
        trajectory: Swept-sphere parameters, or None to keep the current ones.
    """

    projection: npt.ArrayLike
    view: npt.ArrayLike
    projection_inverse: npt.ArrayLike | None = None
    slice_offset: float = 0.0
    trajectory: TrajectoryParams | None = None


def apply_frame_params(params: FrameParams) -> None:
    """Upload a parameter block to the kernels.

    Raises:
        ValueError: If a matrix or the trajectory parameters are invalid.
    """
    setup_camera_matrices(params.projection, params.view, params.projection_inverse)
    set_slice_offset(params.slice_offset)
    if params.trajectory is not None:
        setup_trajectory(params.trajectory)


class FrameRenderer:
    """Renders frames of a fixed size over a background image.

    The renderer owns the global render target (Taichi fields); only one
    FrameRenderer should be active at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the frame renderer.

        Args:
            width: Image width in pixels (max 1024).
            height: Image height in pixels (max 1024).

        Raises:
            ValueError: If dimensions are invalid.
        """
        self._width = width
        self._height = height
        self._frame_count = 0
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def aspect_ratio(self) -> float:
        return self._width / self._height

    @property
    def frame_count(self) -> int:
        """Get the number of frames rendered so far."""
        return self._frame_count

    def resize(self, width: int, height: int) -> None:
        """Resize the render target.

        Raises:
            ValueError: If dimensions are invalid.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render(
        self,
        params: FrameParams,
        background: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.float32]:
        """Render one frame.

        Args:
            params: The frame's parameter block.
            background: Image of shape (height, width, 3|4); black if None.

        Returns:
            RGBA image of shape (height, width, 4).
        """
        if background is None:
            background = np.zeros((self._height, self._width, 3), dtype=np.float32)

        apply_frame_params(params)
        set_background(background)
        render_frame()
        self._frame_count += 1
        return get_image_numpy()

    def render_sequence(
        self,
        params_iter: Iterable[FrameParams],
        background: npt.ArrayLike | None = None,
    ) -> Generator[npt.NDArray[np.float32], None, None]:
        """Render a sequence of frames, yielding each image as it completes.

        Example:
            >>> for image in renderer.render_sequence(orbit_params(60)):
            ...     frames.append(image)
        """
        for params in params_iter:
            yield self.render(params, background)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"frames={self.frame_count})"
        )
