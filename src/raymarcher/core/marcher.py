"""Sphere tracing and gradient normals over the scene distance field.

Sphere tracing advances a ray by the field value at its current point. The
field is a lower bound on the distance to the nearest surface, so the step
can never pass through a surface. A ray stops when

- the field drops below ``epsilon`` (CONVERGED),
- the travelled distance reaches ``max_distance`` (ESCAPED), or
- ``max_steps`` iterations have been spent (EXHAUSTED).

A ray that starts inside a solid flips the sign of the field once, at the
origin, and then marches towards the boundary from the inside.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raymarcher.core.marcher import march_ray
    >>> from raymarcher.scene.distance_field import add_sphere
    >>> add_sphere((0.0, 0.0, -5.0), 1.0)
    >>> march_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))["status"]
    <MarchStatus.CONVERGED: 0>
"""

from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from raymarcher.core.ray import safe_normalize
from raymarcher.core.settings import (
    ensure_configured,
    get_epsilon,
    get_max_distance,
    get_max_steps,
    get_strict_hits,
)
from raymarcher.scene.distance_field import scene_distance

vec3 = tm.vec3

Vector3 = tuple[float, float, float]


class MarchStatus(IntEnum):
    """How a march ended."""

    CONVERGED = 0
    ESCAPED = 1
    EXHAUSTED = 2


@ti.dataclass
class MarchResult:
    """Outcome of one sphere trace.

    Attributes:
        point: Converged point, escape point or last sampled point.
        distance: Distance travelled along the ray.
        steps: Number of field evaluations spent marching.
        status: A MarchStatus value.
    """

    point: vec3
    distance: ti.f32
    steps: ti.i32
    status: ti.i32


@ti.func
def sphere_trace(origin: vec3, direction: vec3) -> MarchResult:
    """March a ray through the scene until it converges, escapes or runs out.

    Args:
        origin: Ray origin.
        direction: Unit ray direction.

    Returns:
        The MarchResult of this ray.
    """
    epsilon = get_epsilon()
    max_distance = get_max_distance()

    sign = 1.0
    if scene_distance(origin) < 0.0:
        sign = -1.0

    t = 0.0
    point = origin
    steps = 0
    status = int(MarchStatus.EXHAUSTED)

    # Active flag for early termination
    active = 1

    ti.loop_config(serialize=True)
    for _ in range(get_max_steps()):
        if active == 1:
            point = origin + direction * t
            d = sign * scene_distance(point)
            steps += 1

            if d < epsilon:
                status = int(MarchStatus.CONVERGED)
                active = 0
            else:
                t += d
                if t >= max_distance:
                    point = origin + direction * t
                    status = int(MarchStatus.ESCAPED)
                    active = 0

    return MarchResult(point=point, distance=t, steps=steps, status=status)


@ti.func
def is_hit(result: MarchResult, origin: vec3) -> ti.i32:
    """Whether a march result counts as a surface hit.

    A result is a hit when its point lies closer to the origin than
    ``max_distance - epsilon``. With ``strict_hits`` only converged rays hit.
    """
    hit = 0
    if tm.length(result.point - origin) < get_max_distance() - get_epsilon():
        hit = 1
    if get_strict_hits() == 1 and result.status != int(MarchStatus.CONVERGED):
        hit = 0
    return hit


@ti.func
def estimate_normal(point: vec3) -> vec3:
    """Surface normal from central differences of the scene field.

    Uses six field evaluations with step ``epsilon``. A vanishing gradient
    gives the zero vector.
    """
    e = get_epsilon()
    dx = vec3(e, 0.0, 0.0)
    dy = vec3(0.0, e, 0.0)
    dz = vec3(0.0, 0.0, e)

    gradient = vec3(
        scene_distance(point + dx) - scene_distance(point - dx),
        scene_distance(point + dy) - scene_distance(point - dy),
        scene_distance(point + dz) - scene_distance(point - dz),
    )
    return safe_normalize(gradient)


# =============================================================================
# Python-side entry points
# =============================================================================

_out_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_out_distance = ti.field(dtype=ti.f32, shape=())
_out_steps = ti.field(dtype=ti.i32, shape=())
_out_status = ti.field(dtype=ti.i32, shape=())
_out_hit = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _march_kernel(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
    origin = vec3(ox, oy, oz)
    result = sphere_trace(origin, vec3(dx, dy, dz))
    _out_point[None] = result.point
    _out_distance[None] = result.distance
    _out_steps[None] = result.steps
    _out_status[None] = result.status
    _out_hit[None] = is_hit(result, origin)


@ti.kernel
def _normal_kernel(px: ti.f32, py: ti.f32, pz: ti.f32):
    _out_point[None] = estimate_normal(vec3(px, py, pz))


def march_ray(origin: Vector3, direction: Vector3) -> dict[str, object]:
    """March a single ray from Python.

    Args:
        origin: Ray origin.
        direction: Ray direction; normalized before marching.

    Returns:
        Dictionary with point, distance, steps, status (MarchStatus) and hit.

    Raises:
        ValueError: If the direction is zero.
    """
    ensure_configured()

    d = np.asarray(direction, dtype=np.float64)
    norm = float(np.linalg.norm(d))
    if norm < 1e-12:
        raise ValueError(f"Ray direction must be non-zero, got {direction}")
    d = d / norm

    _march_kernel(
        float(origin[0]), float(origin[1]), float(origin[2]),
        float(d[0]), float(d[1]), float(d[2]),
    )

    point = _out_point[None]
    return {
        "point": (float(point[0]), float(point[1]), float(point[2])),
        "distance": float(_out_distance[None]),
        "steps": int(_out_steps[None]),
        "status": MarchStatus(int(_out_status[None])),
        "hit": bool(_out_hit[None]),
    }


def estimate_normal_at(point: Vector3) -> Vector3:
    """Estimate the scene normal at a point from Python."""
    ensure_configured()
    _normal_kernel(float(point[0]), float(point[1]), float(point[2]))
    normal = _out_point[None]
    return (float(normal[0]), float(normal[1]), float(normal[2]))
