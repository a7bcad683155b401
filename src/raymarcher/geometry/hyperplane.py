"""Oriented 4D hyperplanes used to slice 4D solids into 3D.

A Hyperplane stores its unit normal, an origin and three directions
(u, v, w) that together with the normal form an orthonormal basis of R^4.
The (u, v, w) coordinates are the 3D space the renderer marches in: a 3D
point p corresponds to the 4D point ``origin + p.x*u + p.y*v + p.z*w``.

The basis is seeded from the three world axes that remain after removing
the axis most aligned with the normal, then orthonormalized with
Gram-Schmidt against the normal and the previously produced directions.

This module also derives the 3D plane traced by a second hyperplane inside
the first one's local space (the "hyperplane section").
"""

import taichi as ti
import taichi.math as tm

from raymarcher.core.ray import axis_vector4, safe_normalize
from raymarcher.geometry.plane import Plane, make_plane

vec3 = tm.vec3
vec4 = tm.vec4

# Projected normals shorter than this mean the hyperplanes are parallel
INTERSECTION_EPSILON = 1e-4


@ti.dataclass
class Hyperplane:
    """An oriented hyperplane in R^4 with a local (u, v, w) frame.

    Attributes:
        normal: Unit normal.
        origin: A point on the hyperplane.
        u_direction: First in-hyperplane unit axis.
        v_direction: Second in-hyperplane unit axis.
        w_direction: Third in-hyperplane unit axis.
    """

    normal: vec4
    origin: vec4
    u_direction: vec4
    v_direction: vec4
    w_direction: vec4


@ti.func
def most_aligned_axis(normal: vec4) -> ti.i32:
    """Index of the world axis with the largest absolute dot with ``normal``.

    Ties go to the later axis (W over Z over Y over X).
    """
    best = 0
    best_score = ti.abs(normal[0])
    for i in ti.static(range(1, 4)):
        score = ti.abs(normal[i])
        if score >= best_score:
            best = i
            best_score = score
    return best


@ti.func
def _seed_axis(k: ti.i32, excluded: ti.i32) -> vec4:
    """The k-th world axis (in axis order) skipping the excluded axis."""
    index = k
    if k >= excluded:
        index = k + 1
    return axis_vector4(index)


@ti.func
def _project_onto(v: vec4, axis: vec4) -> vec4:
    return axis * tm.dot(axis, v)


@ti.func
def make_hyperplane(origin: vec4, normal: vec4) -> Hyperplane:
    """Build a hyperplane and its orthonormal frame from an origin and a normal.

    Args:
        origin: A point on the hyperplane.
        normal: The hyperplane normal; need not be unit length but must be
            non-zero.

    Returns:
        A Hyperplane whose (normal, u, v, w) directions are orthonormal.
    """
    n = safe_normalize(normal)
    excluded = most_aligned_axis(n)

    seed_u = _seed_axis(0, excluded)
    seed_v = _seed_axis(1, excluded)
    seed_w = _seed_axis(2, excluded)

    u_direction = safe_normalize(seed_u - _project_onto(seed_u, n))
    v_direction = safe_normalize(
        seed_v - _project_onto(seed_v, n) - _project_onto(seed_v, u_direction)
    )
    w_direction = safe_normalize(
        seed_w
        - _project_onto(seed_w, n)
        - _project_onto(seed_w, u_direction)
        - _project_onto(seed_w, v_direction)
    )

    return Hyperplane(
        normal=n,
        origin=origin,
        u_direction=u_direction,
        v_direction=v_direction,
        w_direction=w_direction,
    )


@ti.func
def hyperplane_signed_distance(hyperplane: Hyperplane, point: vec4) -> ti.f32:
    """Signed perpendicular distance from a 4D point to the hyperplane."""
    return tm.dot(hyperplane.normal, point - hyperplane.origin)


@ti.func
def hyperplane_project_4d(hyperplane: Hyperplane, local: vec3) -> vec4:
    """Lift local (u, v, w) coordinates to the 4D point they describe."""
    return (
        hyperplane.origin
        + local.x * hyperplane.u_direction
        + local.y * hyperplane.v_direction
        + local.z * hyperplane.w_direction
    )


@ti.func
def hyperplane_project_3d(hyperplane: Hyperplane, point: vec4) -> vec3:
    """Express a 4D point in the hyperplane's local (u, v, w) coordinates."""
    relative = point - hyperplane.origin
    return vec3(
        tm.dot(relative, hyperplane.u_direction),
        tm.dot(relative, hyperplane.v_direction),
        tm.dot(relative, hyperplane.w_direction),
    )


@ti.func
def _section_normal(hyperplane: Hyperplane, other: Hyperplane) -> vec3:
    """The other hyperplane's normal expressed in this hyperplane's local frame."""
    return vec3(
        tm.dot(hyperplane.u_direction, other.normal),
        tm.dot(hyperplane.v_direction, other.normal),
        tm.dot(hyperplane.w_direction, other.normal),
    )


@ti.func
def hyperplanes_intersect(hyperplane: Hyperplane, other: Hyperplane) -> ti.i32:
    """Check whether ``other`` cuts ``hyperplane`` along a proper 3D plane.

    Returns:
        1 if the traced plane exists, 0 if the hyperplanes are parallel.
    """
    n3 = _section_normal(hyperplane, other)
    result = 0
    if tm.length(n3) >= INTERSECTION_EPSILON:
        result = 1
    return result


@ti.func
def plane_from_hyperplanes(hyperplane: Hyperplane, other: Hyperplane) -> Plane:
    """The 3D plane that ``other`` traces in ``hyperplane``'s local space.

    The local normal is ``other.normal`` expressed in (u, v, w). A local point
    p lies on ``other`` when ``n3 . p = other.origin . other.normal -
    hyperplane.origin . other.normal``; the plane origin is the solution of
    that equation closest to the local origin. The frame is rebuilt with
    :func:`make_plane`.

    Only meaningful when :func:`hyperplanes_intersect` is 1; for parallel
    hyperplanes a plane through the local origin with a zero frame is
    returned.
    """
    n3 = _section_normal(hyperplane, other)
    n3_length = tm.length(n3)
    offset = tm.dot(other.origin, other.normal) - tm.dot(hyperplane.origin, other.normal)

    origin = vec3(0.0, 0.0, 0.0)
    normal = vec3(0.0, 0.0, 0.0)
    if n3_length >= INTERSECTION_EPSILON:
        normal = n3 / n3_length
        origin = normal * (offset / n3_length)

    return make_plane(origin, normal)
