"""Perspective camera ray reconstruction from projection and view matrices.

Matrices follow a right-handed convention with an infinite reverse-Z
perspective projection: the near plane maps to NDC depth 1 and infinity to
depth 0. The "view" matrix is the camera-to-world transform, so its
translation column is the camera position.

Two equivalent ray constructions are provided:

- Method A (:func:`ray_from_screen_uv`) unprojects a near-plane NDC point to
  view space with the inverse projection, treats it as a direction and
  rotates it into world space.
- Method B (:func:`ray_from_ndc`) transforms a near point and a far point
  through ``view @ inverse(projection)`` and takes their difference.

Screen coordinates ``uv`` are in [0, 1] with v growing downwards; NDC
coordinates are in [-1, 1] with y growing upwards.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raymarcher.camera.projection import PerspectiveCamera, setup_camera
    >>>
    >>> camera = PerspectiveCamera(
    ...     lookfrom=(0.0, 0.0, 1000.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=45.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_camera_ray(vec2(0.5, 0.5))  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raymarcher.core.ray import Ray, make_ray, safe_normalize
from raymarcher.core.settings import RayMethod, ensure_configured, get_epsilon, get_ray_method

vec2 = tm.vec2
vec3 = tm.vec3
vec4 = tm.vec4

# =============================================================================
# Matrix Builders (Python-side)
# =============================================================================


def perspective_infinite_reverse(vfov: float, aspect_ratio: float, near: float) -> npt.NDArray[np.float64]:
    """Right-handed infinite perspective projection with reversed depth.

    Args:
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height.
        near: Distance to the near plane.

    Returns:
        A 4x4 projection matrix (column vectors, ``clip = P @ view_point``).

    Raises:
        ValueError: If an argument is out of range.
    """
    if not 0.0 < vfov < 180.0:
        raise ValueError(f"vfov must be in (0, 180) degrees, got {vfov}")
    if aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
    if near <= 0.0:
        raise ValueError(f"near must be positive, got {near}")

    f = 1.0 / math.tan(math.radians(vfov) / 2.0)
    return np.array(
        [
            [f / aspect_ratio, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, 0.0, near],
            [0.0, 0.0, -1.0, 0.0],
        ],
        dtype=np.float64,
    )


def look_at_transform(
    lookfrom: tuple[float, float, float],
    lookat: tuple[float, float, float],
    vup: tuple[float, float, float],
) -> npt.NDArray[np.float64]:
    """Camera-to-world transform of a camera at ``lookfrom`` facing ``lookat``.

    The camera looks down its local -Z axis with +Y up.

    Raises:
        ValueError: If the view direction is zero or parallel to ``vup``.
    """
    origin = np.array(lookfrom, dtype=np.float64)
    target = np.array(lookat, dtype=np.float64)
    up = np.array(vup, dtype=np.float64)

    # w points from lookat toward lookfrom (backward)
    w = origin - target
    w_length = np.linalg.norm(w)
    if w_length < 1e-12:
        raise ValueError("lookfrom and lookat must differ")
    w = w / w_length

    u = np.cross(up, w)
    u_length = np.linalg.norm(u)
    if u_length < 1e-12:
        raise ValueError("vup must not be parallel to the view direction")
    u = u / u_length

    v = np.cross(w, u)

    transform = np.identity(4, dtype=np.float64)
    transform[:3, 0] = u
    transform[:3, 1] = v
    transform[:3, 2] = w
    transform[:3, 3] = origin
    return transform


@dataclass
class PerspectiveCamera:
    """Look-at configuration of a perspective camera.

    Attributes:
        lookfrom: Camera position in world space.
        lookat: Point the camera is looking at.
        vup: Up direction used to orient the camera.
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        near: Near plane distance of the projection.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 45.0
    aspect_ratio: float = 1.0
    near: float = 0.1

    def projection(self) -> npt.NDArray[np.float64]:
        return perspective_infinite_reverse(self.vfov, self.aspect_ratio, self.near)

    def view(self) -> npt.NDArray[np.float64]:
        return look_at_transform(self.lookfrom, self.lookat, self.vup)


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_projection = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
_projection_inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())

# Camera-to-world transform
_view = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())

# view @ projection_inverse, used by the NDC-to-world path
_ndc_to_world = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())


def _as_matrix(matrix: npt.ArrayLike, name: str) -> npt.NDArray[np.float64]:
    array = np.asarray(matrix, dtype=np.float64)
    if array.shape != (4, 4):
        raise ValueError(f"{name} must be a 4x4 matrix, got shape {array.shape}")
    if not np.all(np.isfinite(array)):
        raise ValueError(f"{name} contains non-finite values")
    return array


def setup_camera_matrices(
    projection: npt.ArrayLike,
    view: npt.ArrayLike,
    projection_inverse: npt.ArrayLike | None = None,
) -> None:
    """Upload host-supplied camera matrices.

    Args:
        projection: 4x4 projection matrix.
        view: 4x4 camera-to-world transform.
        projection_inverse: Inverse of ``projection``; computed when omitted.

    Raises:
        ValueError: If a matrix has the wrong shape or the projection is
            singular.
    """
    projection_matrix = _as_matrix(projection, "projection")
    view_matrix = _as_matrix(view, "view")

    if projection_inverse is None:
        try:
            inverse_matrix = np.linalg.inv(projection_matrix)
        except np.linalg.LinAlgError as e:
            raise ValueError("projection matrix is singular") from e
    else:
        inverse_matrix = _as_matrix(projection_inverse, "projection_inverse")

    _projection[None] = ti.Matrix(projection_matrix.tolist())
    _projection_inverse[None] = ti.Matrix(inverse_matrix.tolist())
    _view[None] = ti.Matrix(view_matrix.tolist())
    _ndc_to_world[None] = ti.Matrix((view_matrix @ inverse_matrix).tolist())
    _camera_origin[None] = view_matrix[:3, 3].tolist()


def setup_camera(camera: PerspectiveCamera) -> None:
    """Initialize camera state from a look-at configuration.

    Raises:
        ValueError: If the camera configuration is degenerate.
    """
    setup_camera_matrices(camera.projection(), camera.view())


def get_camera_info() -> dict[str, object]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin and the uploaded matrices as nested lists.
    """
    origin = _camera_origin[None]
    return {
        "origin": (float(origin[0]), float(origin[1]), float(origin[2])),
        "projection": _projection.to_numpy().tolist(),
        "projection_inverse": _projection_inverse.to_numpy().tolist(),
        "view": _view.to_numpy().tolist(),
    }


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def screen_uv_to_ndc(uv: vec2) -> vec2:
    """Map screen uv (v down) to NDC xy (y up)."""
    return vec2(2.0 * uv.x - 1.0, 1.0 - 2.0 * uv.y)


@ti.func
def ray_from_screen_uv(uv: vec2) -> Ray:
    """Camera ray through screen coordinates by unprojecting the near plane.

    Args:
        uv: Screen coordinates in [0, 1], v = 0 at the top edge.

    Returns:
        A Ray from the camera position with a unit direction.
    """
    ndc = screen_uv_to_ndc(uv)
    view_point = _projection_inverse[None] @ vec4(ndc.x, ndc.y, 1.0, 1.0)

    # Drop w: the unprojected point is used as a view-space direction
    view_direction = vec4(view_point[0], view_point[1], view_point[2], 0.0)
    world_direction = _view[None] @ view_direction

    direction = safe_normalize(vec3(world_direction[0], world_direction[1], world_direction[2]))
    return make_ray(_camera_origin[None], direction)


@ti.func
def ray_from_ndc(ndc: vec2) -> Ray:
    """Camera ray through NDC coordinates from a near and a far point.

    Both points are taken through ``view @ inverse(projection)``: the near
    point at depth 1 and the far point at depth ``epsilon``.

    Args:
        ndc: NDC coordinates in [-1, 1], y up.

    Returns:
        A Ray starting on the near plane with a unit direction.
    """
    near_h = _ndc_to_world[None] @ vec4(ndc.x, ndc.y, 1.0, 1.0)
    far_h = _ndc_to_world[None] @ vec4(ndc.x, ndc.y, get_epsilon(), 1.0)

    near_point = vec3(near_h[0], near_h[1], near_h[2]) / near_h[3]
    far_point = vec3(far_h[0], far_h[1], far_h[2]) / far_h[3]

    return make_ray(near_point, safe_normalize(far_point - near_point))


@ti.func
def get_camera_ray(uv: vec2) -> Ray:
    """Camera ray through screen coordinates using the configured method."""
    ray = ray_from_ndc(screen_uv_to_ndc(uv))
    if get_ray_method() == int(RayMethod.UNPROJECT):
        ray = ray_from_screen_uv(uv)
    return ray


# =============================================================================
# Utility Functions
# =============================================================================

_out_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_out_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _camera_ray_kernel(u: ti.f32, v: ti.f32, method: ti.i32):
    uv = vec2(u, v)
    ray = Ray(origin=vec3(0.0), direction=vec3(0.0))
    if method == -1:  # configured method
        ray = get_camera_ray(uv)
    elif method == int(RayMethod.UNPROJECT):
        ray = ray_from_screen_uv(uv)
    elif method == int(RayMethod.NDC_TO_WORLD):
        ray = ray_from_ndc(screen_uv_to_ndc(uv))
    _out_origin[None] = ray.origin
    _out_direction[None] = ray.direction


def generate_ray(
    u: float, v: float, method: RayMethod | None = None
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Generate the camera ray through screen coordinates from Python.

    Args:
        u: Horizontal screen coordinate in [0, 1] (left to right).
        v: Vertical screen coordinate in [0, 1] (top to bottom).
        method: Ray construction to use; defaults to the configured one.

    Returns:
        Tuple (origin, direction).
    """
    ensure_configured()
    _camera_ray_kernel(u, v, -1 if method is None else int(method))

    origin = _out_origin[None]
    direction = _out_direction[None]
    return (
        (float(origin[0]), float(origin[1]), float(origin[2])),
        (float(direction[0]), float(direction[1]), float(direction[2])),
    )
