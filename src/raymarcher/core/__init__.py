"""Core rendering module.

Components:
    ray: Ray data structure and guarded vector helpers
    settings: Numeric configuration injected into the kernels
    marcher: Sphere tracer and normal estimator
    renderer: Compositor, per-pixel entry point and frame buffers
    frame: Frame parameter block and host render loop wrapper
"""

from .ray import (
    Ray,
    axis_vector3,
    axis_vector4,
    make_ray,
    ray_at,
    reflect,
    safe_normalize,
    vec3,
)
from .settings import (
    DEFAULT_SETTINGS,
    MarchSettings,
    RayMethod,
    configure,
    get_settings,
    reset_settings,
)

# Note: marcher, renderer and frame are NOT imported here to avoid circular imports.
# Import directly from raymarcher.core.renderer or raymarcher.core.frame when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "safe_normalize",
    "reflect",
    "axis_vector3",
    "axis_vector4",
    "MarchSettings",
    "RayMethod",
    "DEFAULT_SETTINGS",
    "configure",
    "get_settings",
    "reset_settings",
]
