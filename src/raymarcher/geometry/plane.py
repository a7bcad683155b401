"""Oriented 3D planes with an orthonormal local frame.

A Plane stores its unit normal, an origin on the plane and two in-plane
directions (u, v) such that (normal, u, v) are pairwise orthonormal. The
frame is seeded from the world axis least aligned with the normal, which
keeps the cross products well conditioned for every normal direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raymarcher.geometry.plane import make_plane, plane_signed_distance
    >>> # Within a Taichi kernel:
    >>> # plane = make_plane(vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
    >>> # d = plane_signed_distance(plane, vec3(0.0, 2.0, 0.0))  # 2.0
"""

import taichi as ti
import taichi.math as tm

from raymarcher.core.ray import axis_vector3, safe_normalize

vec2 = tm.vec2
vec3 = tm.vec3


@ti.dataclass
class Plane:
    """An oriented plane with a local (u, v) frame.

    Attributes:
        normal: Unit normal; the positive half-space lies on its side.
        origin: A point on the plane.
        u_direction: First in-plane unit axis.
        v_direction: Second in-plane unit axis.
    """

    normal: vec3
    origin: vec3
    u_direction: vec3
    v_direction: vec3


@ti.func
def least_aligned_axis(normal: vec3) -> ti.i32:
    """Index of the world axis with the smallest absolute dot with ``normal``.

    Ties go to the later axis (Z over Y over X).
    """
    best = 0
    best_score = ti.abs(normal[0])
    for i in ti.static(range(1, 3)):
        score = ti.abs(normal[i])
        if score <= best_score:
            best = i
            best_score = score
    return best


@ti.func
def make_plane(origin: vec3, normal: vec3) -> Plane:
    """Build a plane and its orthonormal frame from an origin and a normal.

    Args:
        origin: A point on the plane.
        normal: The plane normal; need not be unit length but must be non-zero.

    Returns:
        A Plane whose (normal, u_direction, v_direction) are orthonormal.
    """
    n = safe_normalize(normal)
    seed = axis_vector3(least_aligned_axis(n))

    u_direction = safe_normalize(tm.cross(n, seed))
    v_direction = safe_normalize(tm.cross(n, u_direction))

    return Plane(normal=n, origin=origin, u_direction=u_direction, v_direction=v_direction)


@ti.func
def plane_signed_distance(plane: Plane, point: vec3) -> ti.f32:
    """Signed perpendicular distance from ``point`` to the plane."""
    return tm.dot(point - plane.origin, plane.normal)


@ti.func
def plane_project_2d(plane: Plane, point: vec3) -> vec2:
    """Express a 3D point in the plane's (u, v) coordinates."""
    relative = point - plane.origin
    return vec2(tm.dot(plane.u_direction, relative), tm.dot(plane.v_direction, relative))


@ti.func
def plane_project_3d(plane: Plane, local: vec2) -> vec3:
    """Map plane (u, v) coordinates back to a world-space point."""
    return plane.origin + local.x * plane.u_direction + local.y * plane.v_direction
