"""Ray type and the vector helpers shared by the marcher.

The camera builds one Ray per pixel, the marcher walks it, and the lighting
model reflects against the estimated normal. Everything here is a
``ti.func`` and can only be called from inside a kernel.

Every normalization in the renderer goes through :func:`safe_normalize`,
which maps a (near) zero-length input to a zero vector instead of NaN so a
degenerate input only drops its contribution.

Example:
    >>> @ti.kernel
    ... def point_along() -> ti.math.vec3:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3
vec4 = tm.vec4

# Lengths at or below this are treated as zero when normalizing
NORMALIZE_EPSILON = 1e-12


@ti.dataclass
class Ray:
    """Marching ray.

    Attributes:
        origin: World-space start of the march (the camera position or the
            near-plane point, depending on the ray method).
        direction: Unit direction when built by the camera module.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Position after travelling ``t`` along the ray."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Helpers
# =============================================================================


@ti.func
def safe_normalize(v):
    """Normalize a vec2, vec3 or vec4, returning zeros for a zero-length input."""
    n = tm.length(v)
    result = v * 0.0
    if n > NORMALIZE_EPSILON:
        result = v / n
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """GLSL-style ``reflect``: mirror ``incident`` about a unit ``normal``.

    ``incident`` points toward the surface, so reflecting the negated light
    direction gives the direction the light bounces off in.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def axis_vector3(index: ti.i32) -> vec3:
    """Unit vector along world axis ``index`` (0=X, 1=Y, 2=Z)."""
    axis = vec3(0.0)
    for i in ti.static(range(3)):
        if index == i:
            axis[i] = 1.0
    return axis


@ti.func
def axis_vector4(index: ti.i32) -> vec4:
    """Unit vector along world axis ``index`` (0=X, 1=Y, 2=Z, 3=W)."""
    axis = vec4(0.0)
    for i in ti.static(range(4)):
        if index == i:
            axis[i] = 1.0
    return axis
