"""Primitive signed distance functions and boolean combinators.

Every function returns a signed distance: negative inside the solid, zero on
its boundary and positive outside. All of them are Lipschitz-1 lower bounds
on the true Euclidean distance, which is what makes sphere tracing safe.

Formulas follow Inigo Quilez's distance function reference:
https://iquilezles.org/articles/distfunctions/
"""

import taichi as ti
import taichi.math as tm

from raymarcher.geometry.hyperplane import Hyperplane, hyperplane_project_4d

vec2 = tm.vec2
vec3 = tm.vec3
vec4 = tm.vec4


@ti.func
def sd_sphere(p: vec3, radius: ti.f32) -> ti.f32:
    """Sphere of ``radius`` centred at the origin."""
    return tm.length(p) - radius


@ti.func
def sd_torus(p: vec3, radii: vec2) -> ti.f32:
    """Torus in the XZ plane; ``radii`` = (major, minor)."""
    q = vec2(tm.length(vec2(p.x, p.z)) - radii.x, p.y)
    return tm.length(q) - radii.y


@ti.func
def sd_plane(p: vec3, origin: vec3, normal: vec3) -> ti.f32:
    """Half-space bounded by the plane through ``origin`` with unit ``normal``.

    The solid lies on the negative side of the normal.
    """
    return tm.dot(p - origin, normal)


@ti.func
def sd_spherinder_slice(
    p: vec3,
    hyperplane: Hyperplane,
    spherinder_origin: vec4,
    radius: ti.f32,
) -> ti.f32:
    """3D cross-section of a spherinder cut by an oriented hyperplane.

    The spherinder is a sphere of ``radius`` in xyz extruded infinitely along
    w. ``p`` is interpreted in the hyperplane's local (u, v, w) frame, lifted
    to 4D, and measured against the spherinder axis. The lift is an isometry
    and dropping w never increases length, so the result is a valid bound.
    """
    point = hyperplane_project_4d(hyperplane, p) - spherinder_origin
    return tm.length(point.xyz) - radius


# =============================================================================
# Boolean Combinators
# =============================================================================


@ti.func
def op_union(a: ti.f32, b: ti.f32) -> ti.f32:
    return ti.min(a, b)


@ti.func
def op_intersect(a: ti.f32, b: ti.f32) -> ti.f32:
    return ti.max(a, b)


@ti.func
def op_subtract(a: ti.f32, b: ti.f32) -> ti.f32:
    """Remove solid ``b`` from solid ``a``."""
    return ti.max(a, -b)
