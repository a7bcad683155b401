"""Scene-level signed distance field built from primitive SDFs.

The scene stores primitives in Taichi fields (structure-of-arrays layout)
for GPU-efficient access. Each primitive carries a boolean operation that
folds its distance into the running scene distance, left to right, starting
from the empty scene (``+max_distance``):

    UNION      d = min(d, primitive)
    INTERSECT  d = max(d, primitive)
    SUBTRACT   d = max(d, -primitive)

so a capped spherinder slice ``max(max(spherinder, -plane1), plane2)`` is
built as::

    add_spherinder_slice(origin, normal, radius)
    add_half_space(plane1_origin, plane1_normal, op=CsgOp.SUBTRACT)
    add_half_space(plane2_origin, plane2_normal, op=CsgOp.INTERSECT)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raymarcher.scene.distance_field import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -5.0), 1.0)
    >>> # Use scene_distance(p) within a Taichi kernel
"""

from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raymarcher.core.settings import ensure_configured, get_max_distance
from raymarcher.geometry.hyperplane import (
    Hyperplane,
    hyperplanes_intersect,
    make_hyperplane,
    plane_from_hyperplanes,
)
from raymarcher.geometry.primitives import (
    op_intersect,
    op_subtract,
    op_union,
    sd_plane,
    sd_sphere,
    sd_spherinder_slice,
    sd_torus,
)
from raymarcher.scene.trajectory import trajectory_distance

vec3 = tm.vec3

Vector3 = tuple[float, float, float]
Vector4 = tuple[float, float, float, float]


class PrimitiveKind(IntEnum):
    """Primitive distance functions available to the scene."""

    SPHERE = 0
    TORUS = 1
    HALF_SPACE = 2
    SPHERINDER_SLICE = 3
    TRAJECTORY = 4


class CsgOp(IntEnum):
    """How a primitive is folded into the scene distance."""

    UNION = 0
    INTERSECT = 1
    SUBTRACT = 2


# Maximum number of primitives supported in the scene
MAX_PRIMITIVES = 64

# Primitive storage: Structure of Arrays layout for GPU efficiency
# centers hold the sphere/torus center or the half-space origin
prim_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
prim_ops = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
prim_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
prim_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
prim_radii = ti.Vector.field(2, dtype=ti.f32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())

# Hyperplane frames of spherinder slices (precomputed at insertion)
hyper_normals = ti.Vector.field(4, dtype=ti.f32, shape=MAX_PRIMITIVES)
hyper_origins = ti.Vector.field(4, dtype=ti.f32, shape=MAX_PRIMITIVES)
hyper_u = ti.Vector.field(4, dtype=ti.f32, shape=MAX_PRIMITIVES)
hyper_v = ti.Vector.field(4, dtype=ti.f32, shape=MAX_PRIMITIVES)
hyper_w = ti.Vector.field(4, dtype=ti.f32, shape=MAX_PRIMITIVES)
spherinder_origins = ti.Vector.field(4, dtype=ti.f32, shape=MAX_PRIMITIVES)

# Per-frame offset of every spherinder slice hyperplane along its normal
_slice_offset = ti.field(dtype=ti.f32, shape=())

# Staging fields for building frames on the Taichi side
_staging_origin_a = ti.Vector.field(4, dtype=ti.f32, shape=())
_staging_normal_a = ti.Vector.field(4, dtype=ti.f32, shape=())
_staging_origin_b = ti.Vector.field(4, dtype=ti.f32, shape=())
_staging_normal_b = ti.Vector.field(4, dtype=ti.f32, shape=())
_staging_valid = ti.field(dtype=ti.i32, shape=())
_staging_plane_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_staging_plane_normal = ti.Vector.field(3, dtype=ti.f32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene and reset the slice offset.

    The actual field data is not cleared but will be overwritten when new
    primitives are added.
    """
    num_primitives[None] = 0
    _slice_offset[None] = 0.0


def get_primitive_count() -> int:
    """Get the number of primitives in the scene."""
    return int(num_primitives[None])


def set_slice_offset(w: float) -> None:
    """Move every spherinder slice hyperplane by ``w`` along its normal."""
    _slice_offset[None] = w


def get_slice_offset() -> float:
    return float(_slice_offset[None])


def _next_index() -> int:
    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")
    return idx


def _store(idx: int, kind: PrimitiveKind, op: CsgOp) -> int:
    prim_kinds[idx] = int(kind)
    prim_ops[idx] = int(CsgOp(op))
    num_primitives[None] = idx + 1
    return idx


def _unit(vector: tuple[float, ...], name: str) -> npt.NDArray[np.float64]:
    v = np.asarray(vector, dtype=np.float64)
    norm = float(np.linalg.norm(v))
    if norm < 1e-12:
        raise ValueError(f"{name} must be non-zero, got {vector}")
    return v / norm


def add_sphere(center: Vector3, radius: float, op: CsgOp = CsgOp.UNION) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        op: How the sphere is combined with the primitives before it.

    Returns:
        The index of the added primitive.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    idx = _next_index()
    prim_centers[idx] = list(center)
    prim_radii[idx] = [radius, 0.0]
    return _store(idx, PrimitiveKind.SPHERE, op)


def add_torus(
    center: Vector3,
    major_radius: float,
    minor_radius: float,
    op: CsgOp = CsgOp.UNION,
) -> int:
    """Add a torus lying in the XZ plane around ``center``.

    Raises:
        ValueError: If a radius is not positive.
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    if major_radius <= 0.0 or minor_radius <= 0.0:
        raise ValueError(
            f"Torus radii must be positive, got ({major_radius}, {minor_radius})"
        )
    idx = _next_index()
    prim_centers[idx] = list(center)
    prim_radii[idx] = [major_radius, minor_radius]
    return _store(idx, PrimitiveKind.TORUS, op)


def add_half_space(origin: Vector3, normal: Vector3, op: CsgOp = CsgOp.UNION) -> int:
    """Add the half-space behind an oriented plane.

    The solid is the side opposite to ``normal``. With ``CsgOp.INTERSECT`` the
    plane caps the scene; with ``CsgOp.SUBTRACT`` it removes the solid side.

    Raises:
        ValueError: If the normal is zero.
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    unit_normal = _unit(normal, "Plane normal")
    idx = _next_index()
    prim_centers[idx] = list(origin)
    prim_normals[idx] = unit_normal.tolist()
    return _store(idx, PrimitiveKind.HALF_SPACE, op)


@ti.kernel
def _build_hyperplane(idx: ti.i32):
    hyperplane = make_hyperplane(_staging_origin_a[None], _staging_normal_a[None])
    hyper_normals[idx] = hyperplane.normal
    hyper_origins[idx] = hyperplane.origin
    hyper_u[idx] = hyperplane.u_direction
    hyper_v[idx] = hyperplane.v_direction
    hyper_w[idx] = hyperplane.w_direction


def add_spherinder_slice(
    hyperplane_origin: Vector4,
    hyperplane_normal: Vector4,
    radius: float,
    spherinder_origin: Vector4 = (0.0, 0.0, 0.0, 0.0),
    op: CsgOp = CsgOp.UNION,
) -> int:
    """Add the 3D cross-section of a spherinder cut by a hyperplane.

    The renderer's 3D space is the hyperplane's local (u, v, w) space.

    Args:
        hyperplane_origin: A point on the slicing hyperplane.
        hyperplane_normal: Normal of the slicing hyperplane (non-zero).
        radius: Radius of the spherinder's spherical cross-section.
        spherinder_origin: A point on the spherinder axis.
        op: How the slice is combined with the primitives before it.

    Returns:
        The index of the added primitive.

    Raises:
        ValueError: If the normal is zero or the radius is not positive.
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Spherinder radius must be positive, got {radius}")
    _unit(hyperplane_normal, "Hyperplane normal")
    idx = _next_index()

    _staging_origin_a[None] = list(hyperplane_origin)
    _staging_normal_a[None] = list(hyperplane_normal)
    _build_hyperplane(idx)

    spherinder_origins[idx] = list(spherinder_origin)
    prim_radii[idx] = [radius, 0.0]
    return _store(idx, PrimitiveKind.SPHERINDER_SLICE, op)


@ti.kernel
def _build_section():
    hyperplane = make_hyperplane(_staging_origin_a[None], _staging_normal_a[None])
    other = make_hyperplane(_staging_origin_b[None], _staging_normal_b[None])
    _staging_valid[None] = hyperplanes_intersect(hyperplane, other)
    plane = plane_from_hyperplanes(hyperplane, other)
    _staging_plane_origin[None] = plane.origin
    _staging_plane_normal[None] = plane.normal


def hyperplane_section(
    hyperplane_origin: Vector4,
    hyperplane_normal: Vector4,
    cutting_origin: Vector4,
    cutting_normal: Vector4,
) -> tuple[Vector3, Vector3]:
    """Compute the plane a cutting hyperplane traces in a slicing hyperplane.

    Returns:
        Tuple (origin, normal) of the plane in the slicing hyperplane's local
        (u, v, w) space.

    Raises:
        ValueError: If a normal is zero or the hyperplanes are parallel.
    """
    _unit(hyperplane_normal, "Hyperplane normal")
    _unit(cutting_normal, "Cutting hyperplane normal")

    _staging_origin_a[None] = list(hyperplane_origin)
    _staging_normal_a[None] = list(hyperplane_normal)
    _staging_origin_b[None] = list(cutting_origin)
    _staging_normal_b[None] = list(cutting_normal)
    _build_section()

    if _staging_valid[None] == 0:
        raise ValueError("Hyperplanes are parallel; they do not intersect in a plane")

    origin = _staging_plane_origin[None]
    normal = _staging_plane_normal[None]
    return (
        (float(origin[0]), float(origin[1]), float(origin[2])),
        (float(normal[0]), float(normal[1]), float(normal[2])),
    )


def add_hyperplane_section(
    hyperplane_origin: Vector4,
    hyperplane_normal: Vector4,
    cutting_origin: Vector4,
    cutting_normal: Vector4,
    op: CsgOp = CsgOp.INTERSECT,
) -> int:
    """Add the half-space bounded by a hyperplane section.

    The plane is computed once, at insertion, in the slicing hyperplane's
    local space; it does not follow :func:`set_slice_offset`.

    Raises:
        ValueError: If a normal is zero or the hyperplanes are parallel.
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    origin, normal = hyperplane_section(
        hyperplane_origin, hyperplane_normal, cutting_origin, cutting_normal
    )
    return add_half_space(origin, normal, op)


def add_trajectory(op: CsgOp = CsgOp.UNION) -> int:
    """Add the swept-sphere obstacle configured by ``setup_trajectory``.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    idx = _next_index()
    return _store(idx, PrimitiveKind.TRAJECTORY, op)


def get_hyperplane_frame(idx: int) -> dict[str, npt.NDArray[np.float32]]:
    """Get the stored hyperplane frame of a spherinder slice (for debugging).

    Raises:
        ValueError: If ``idx`` is not a spherinder slice.
    """
    if not 0 <= idx < num_primitives[None] or prim_kinds[idx] != PrimitiveKind.SPHERINDER_SLICE:
        raise ValueError(f"Primitive {idx} is not a spherinder slice")
    return {
        "normal": hyper_normals.to_numpy()[idx],
        "origin": hyper_origins.to_numpy()[idx],
        "u": hyper_u.to_numpy()[idx],
        "v": hyper_v.to_numpy()[idx],
        "w": hyper_w.to_numpy()[idx],
    }


# =============================================================================
# Distance Evaluation (Taichi-compatible)
# =============================================================================


@ti.func
def _slice_hyperplane(idx: ti.i32) -> Hyperplane:
    return Hyperplane(
        normal=hyper_normals[idx],
        origin=hyper_origins[idx] + _slice_offset[None] * hyper_normals[idx],
        u_direction=hyper_u[idx],
        v_direction=hyper_v[idx],
        w_direction=hyper_w[idx],
    )


@ti.func
def primitive_distance(idx: ti.i32, p: vec3) -> ti.f32:
    """Signed distance from ``p`` to primitive ``idx`` alone."""
    kind = prim_kinds[idx]
    d = get_max_distance()

    if kind == int(PrimitiveKind.SPHERE):
        d = sd_sphere(p - prim_centers[idx], prim_radii[idx].x)
    elif kind == int(PrimitiveKind.TORUS):
        d = sd_torus(p - prim_centers[idx], prim_radii[idx])
    elif kind == int(PrimitiveKind.HALF_SPACE):
        d = sd_plane(p, prim_centers[idx], prim_normals[idx])
    elif kind == int(PrimitiveKind.SPHERINDER_SLICE):
        d = sd_spherinder_slice(
            p, _slice_hyperplane(idx), spherinder_origins[idx], prim_radii[idx].x
        )
    elif kind == int(PrimitiveKind.TRAJECTORY):
        d = trajectory_distance(p)

    return d


@ti.func
def scene_distance(p: vec3) -> ti.f32:
    """Signed distance from ``p`` to the whole scene.

    Pure function of ``p`` and the scene fields; an empty scene reports
    ``max_distance`` everywhere.
    """
    result = get_max_distance()
    count = num_primitives[None]

    ti.loop_config(serialize=True)
    for idx in range(count):
        d = primitive_distance(idx, p)
        op = prim_ops[idx]
        if op == int(CsgOp.UNION):
            result = op_union(result, d)
        elif op == int(CsgOp.INTERSECT):
            result = op_intersect(result, d)
        else:
            result = op_subtract(result, d)

    return result


@ti.kernel
def _evaluate_kernel(
    points: ti.types.ndarray(dtype=vec3, ndim=1),
    out: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    for i in range(points.shape[0]):
        out[i] = scene_distance(points[i])


def evaluate_distance(points: npt.ArrayLike) -> npt.NDArray[np.float32]:
    """Evaluate the scene distance at a batch of points.

    Args:
        points: Array-like of shape (N, 3) or (3,).

    Returns:
        Distances of shape (N,) (or a 0-d array for a single point).

    Raises:
        ValueError: If the points do not have 3 components.
    """
    ensure_configured()

    array = np.asarray(points, dtype=np.float32)
    if array.ndim not in (1, 2) or array.shape[-1] != 3:
        raise ValueError(f"Points must have shape (N, 3), got {array.shape}")
    single = array.ndim == 1
    array = np.ascontiguousarray(array.reshape(-1, 3))

    out = np.zeros(array.shape[0], dtype=np.float32)
    _evaluate_kernel(array, out)
    return out[0] if single else out
