"""Per-pixel sphere-tracing renderer and frame buffers.

Every pixel is an independent, stateless evaluation: build the camera ray,
sphere-trace the scene, shade hits with the viewer light and composite the
lighting over the background color of that pixel. No state is carried from
one frame to the next.

Pixel (i, j) samples screen coordinates ``((i + 0.5) / W, (j + 0.5) / H)``
with j = 0 the top row, so buffers map directly onto (height, width) images.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raymarcher.core.renderer import (
    ...     get_image_numpy, render_frame, set_background, setup_render_target
    ... )
    >>> from raymarcher.scene.presets import create_test_sphere_scene
    >>> from raymarcher.camera.projection import setup_camera
    >>>
    >>> camera = create_test_sphere_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(640, 480)
    >>> set_background(np.zeros((480, 640, 3), dtype=np.float32))
    >>> render_frame()
    >>> image = get_image_numpy()  # (480, 640, 4)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raymarcher.camera.projection import get_camera_ray
from raymarcher.core.marcher import estimate_normal, is_hit, sphere_trace
from raymarcher.core.settings import ensure_configured, get_blend_alpha
from raymarcher.materials.phong import Lighting, evaluate_lighting, make_viewer_light

vec2 = tm.vec2
vec3 = tm.vec3
vec4 = tm.vec4

# =============================================================================
# Compositor
# =============================================================================


@ti.func
def composite(background: vec3, lighting: Lighting, hit: ti.i32) -> vec4:
    """Blend the lighting of a hit over the background color.

    A hit adds ``blend_alpha * (diffuse + specular)`` to the background and
    reports alpha ``blend_alpha``; a miss returns the background with alpha 1.
    """
    color = vec4(background.x, background.y, background.z, 1.0)
    if hit == 1:
        alpha = get_blend_alpha()
        rgb = background + alpha * (lighting.diffuse + lighting.specular)
        color = vec4(rgb.x, rgb.y, rgb.z, alpha)
    return color


@ti.func
def _trace_pixel(uv: vec2, background: vec3):
    """Shade one pixel; returns (rgba, travelled distance, march status)."""
    ray = get_camera_ray(uv)
    result = sphere_trace(ray.origin, ray.direction)
    hit = is_hit(result, ray.origin)

    lighting = Lighting(diffuse=vec3(0.0, 0.0, 0.0), specular=vec3(0.0, 0.0, 0.0))
    if hit == 1:
        normal = estimate_normal(result.point)
        light = make_viewer_light(ray.origin)
        lighting = evaluate_lighting(light, result.point, normal)

    return composite(background, lighting, hit), result.distance, result.status


@ti.func
def shade_pixel(uv: vec2, background: vec3) -> vec4:
    """Color of the pixel at screen coordinates ``uv`` over ``background``.

    Args:
        uv: Screen coordinates in [0, 1], v = 0 at the top edge.
        background: Background RGB of this pixel.

    Returns:
        Composited RGBA color.
    """
    color, _, _ = _trace_pixel(uv, background)
    return color


@ti.func
def pixel_uv(i: ti.i32, j: ti.i32, width: ti.i32, height: ti.i32) -> vec2:
    return vec2(
        (ti.cast(i, ti.f32) + 0.5) / ti.cast(width, ti.f32),
        (ti.cast(j, ti.f32) + 0.5) / ti.cast(height, ti.f32),
    )


# =============================================================================
# Render Target (Image Buffers)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Output color, background input and per-pixel march diagnostics
_color_buffer = ti.Vector.field(4, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_background_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_distance_buffer = ti.field(dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_status_buffer = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers, including the
    background.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()
    _background_buffer.fill(0.0)


def clear_render_target() -> None:
    """Clear the output buffers to zero."""
    _color_buffer.fill(0.0)
    _distance_buffer.fill(0.0)
    _status_buffer.fill(0)


def reset_render_target() -> None:
    """Mark the render target as uninitialized."""
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


@ti.kernel
def _upload_background(image: ti.types.ndarray(dtype=ti.f32, ndim=3), width: ti.i32, height: ti.i32):
    for i, j in ti.ndrange(width, height):
        _background_buffer[i, j] = vec3(image[j, i, 0], image[j, i, 1], image[j, i, 2])


def set_background(image: npt.ArrayLike) -> None:
    """Upload the background the frame is composited over.

    Args:
        image: Float image of shape (height, width, 3) or (height, width, 4)
            matching the render target; alpha is ignored.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the image shape does not match the render target.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    array = np.asarray(image, dtype=np.float32)
    if array.ndim != 3 or array.shape[:2] != (height, width) or array.shape[2] not in (3, 4):
        raise ValueError(
            f"Background must have shape ({height}, {width}, 3|4), got {array.shape}"
        )

    _upload_background(np.ascontiguousarray(array[:, :, :3]), width, height)


def set_background_color(color: tuple[float, float, float]) -> None:
    """Fill the whole background with one RGB color."""
    _background_buffer.fill(list(color))


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32):
    """Shade every pixel of the active region in parallel."""
    for i, j in ti.ndrange(width, height):
        uv = pixel_uv(i, j, width, height)
        color, distance, status = _trace_pixel(uv, _background_buffer[i, j])
        _color_buffer[i, j] = color
        _distance_buffer[i, j] = distance
        _status_buffer[i, j] = status


@ti.kernel
def _render_single_pixel(u: ti.f32, v: ti.f32, r: ti.f32, g: ti.f32, b: ti.f32) -> vec4:
    return shade_pixel(vec2(u, v), vec3(r, g, b))


# =============================================================================
# Public Rendering API
# =============================================================================


def render_frame() -> None:
    """Render one frame into the color buffer.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    ensure_configured()

    width, height = get_image_dimensions()
    _render_frame(width, height)


def render_pixel(
    u: float,
    v: float,
    background: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> tuple[float, float, float, float]:
    """Shade a single screen coordinate from Python.

    This is a Python-callable function for testing. For full frames, use
    render_frame() which processes all pixels in parallel.

    Args:
        u: Horizontal screen coordinate in [0, 1] (left to right).
        v: Vertical screen coordinate in [0, 1] (top to bottom).
        background: Background color under this pixel.

    Returns:
        Tuple of (R, G, B, A).
    """
    ensure_configured()
    color = _render_single_pixel(u, v, background[0], background[1], background[2])
    return (float(color[0]), float(color[1]), float(color[2]), float(color[3]))


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered frame as a NumPy array.

    Values are not clamped; lit pixels can exceed 1.

    Returns:
        NumPy array of shape (height, width, 4), row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:width, :height, :]

    # Transpose from (width, height, 4) to (height, width, 4) for standard image format
    return np.ascontiguousarray(np.transpose(image, (1, 0, 2))).astype(np.float32)


def get_distance_numpy() -> npt.NDArray[np.float32]:
    """Get the distance travelled by each pixel's ray, shape (height, width)."""
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return np.ascontiguousarray(_distance_buffer.to_numpy()[:width, :height].T)


def get_status_numpy() -> npt.NDArray[np.int32]:
    """Get the MarchStatus of each pixel's ray, shape (height, width)."""
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return np.ascontiguousarray(_status_buffer.to_numpy()[:width, :height].T)


def save_image(filepath: str) -> None:
    """Save the rendered frame as an RGBA PNG.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    from raymarcher.preview.export import save_png_from_array

    save_png_from_array(get_image_numpy(), filepath, keep_alpha=True)
