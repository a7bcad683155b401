"""Numeric configuration injected into the sphere-tracing kernels.

The marcher, normal estimator, lighting model and compositor never use
hard-coded precision constants. They read the values below from Taichi
fields that are written once from Python by :func:`configure`, so precision
and performance can be traded off without touching algorithm code.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raymarcher.core.settings import MarchSettings, configure
    >>> configure(MarchSettings(epsilon=0.001, max_steps=500))
"""

from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Literal

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

RayMethodName = Literal["unproject", "ndc_to_world"]


class RayMethod(IntEnum):
    """Camera ray reconstruction used by the per-pixel entry point."""

    UNPROJECT = 0
    NDC_TO_WORLD = 1


@dataclass(frozen=True)
class MarchSettings:
    """Precision, budget and shading constants for one renderer configuration.

    Attributes:
        epsilon: Convergence threshold of the sphere tracer, the
            central-difference step of the normal estimator and the far-point
            depth of NDC-to-world ray generation.
        max_steps: Iteration budget of the sphere tracer.
        max_distance: Travel distance after which a ray is considered escaped.
        trajectory_samples: Number of time samples in the swept-sphere union.
        trajectory_t_start: First time sample of the swept-sphere union.
        blend_alpha: Weight of the lighting overlay and alpha of hit pixels.
        shininess: Phong specular exponent.
        diffuse_color: Diffuse color of the viewer light.
        diffuse_power: Diffuse intensity of the viewer light.
        specular_color: Specular color of the viewer light.
        specular_power: Specular intensity of the viewer light.
        ray_method: "unproject" (inverse projection, then camera transform) or
            "ndc_to_world" (two points through view * inverse(projection)).
        strict_hits: If True, rays that exhaust the step budget are treated as
            misses instead of using the distance-only hit test.
    """

    epsilon: float = 0.01
    max_steps: int = 300
    max_distance: float = 10000.0
    trajectory_samples: int = 25
    trajectory_t_start: float = 0.001
    blend_alpha: float = 0.5
    shininess: float = 32.0
    diffuse_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    diffuse_power: float = 0.6
    specular_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    specular_power: float = 0.4
    ray_method: RayMethodName = "ndc_to_world"
    strict_hits: bool = False

    def validate(self) -> None:
        """Check that all values are usable by the kernels.

        Raises:
            ValueError: If any value is out of range.
        """
        if not self.epsilon > 0.0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if self.max_steps <= 0:
            raise ValueError(f"max_steps must be positive, got {self.max_steps}")
        if not self.max_distance > self.epsilon:
            raise ValueError(
                f"max_distance ({self.max_distance}) must exceed epsilon ({self.epsilon})"
            )
        if self.trajectory_samples <= 0:
            raise ValueError(
                f"trajectory_samples must be positive, got {self.trajectory_samples}"
            )
        if not self.trajectory_t_start > 0.0:
            raise ValueError(
                f"trajectory_t_start must be positive, got {self.trajectory_t_start}"
            )
        if not 0.0 <= self.blend_alpha <= 1.0:
            raise ValueError(f"blend_alpha must be in [0, 1], got {self.blend_alpha}")
        if self.shininess < 0.0:
            raise ValueError(f"shininess must be non-negative, got {self.shininess}")
        if self.ray_method not in ("unproject", "ndc_to_world"):
            raise ValueError(f"Unknown ray method: {self.ray_method}")


DEFAULT_SETTINGS = MarchSettings()

# =============================================================================
# Taichi Fields (GPU-accessible copies of the active settings)
# =============================================================================

_configured = ti.field(dtype=ti.i32, shape=())
_epsilon = ti.field(dtype=ti.f32, shape=())
_max_steps = ti.field(dtype=ti.i32, shape=())
_max_distance = ti.field(dtype=ti.f32, shape=())
_trajectory_samples = ti.field(dtype=ti.i32, shape=())
_trajectory_t_start = ti.field(dtype=ti.f32, shape=())
_blend_alpha = ti.field(dtype=ti.f32, shape=())
_shininess = ti.field(dtype=ti.f32, shape=())
_diffuse_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_diffuse_power = ti.field(dtype=ti.f32, shape=())
_specular_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_specular_power = ti.field(dtype=ti.f32, shape=())
_ray_method = ti.field(dtype=ti.i32, shape=())
_strict_hits = ti.field(dtype=ti.i32, shape=())

_active_settings: MarchSettings = DEFAULT_SETTINGS


def configure(settings: MarchSettings) -> None:
    """Validate settings and make them visible to the kernels.

    Args:
        settings: The settings to activate.

    Raises:
        ValueError: If the settings are invalid.
    """
    global _active_settings

    settings.validate()

    _epsilon[None] = settings.epsilon
    _max_steps[None] = settings.max_steps
    _max_distance[None] = settings.max_distance
    _trajectory_samples[None] = settings.trajectory_samples
    _trajectory_t_start[None] = settings.trajectory_t_start
    _blend_alpha[None] = settings.blend_alpha
    _shininess[None] = settings.shininess
    _diffuse_color[None] = list(settings.diffuse_color)
    _diffuse_power[None] = settings.diffuse_power
    _specular_color[None] = list(settings.specular_color)
    _specular_power[None] = settings.specular_power
    _ray_method[None] = int(
        RayMethod.UNPROJECT if settings.ray_method == "unproject" else RayMethod.NDC_TO_WORLD
    )
    _strict_hits[None] = int(settings.strict_hits)
    _configured[None] = 1

    _active_settings = settings


def reset_settings() -> None:
    """Restore the default settings."""
    configure(DEFAULT_SETTINGS)


def ensure_configured() -> None:
    """Activate the default settings if :func:`configure` was never called."""
    if _configured[None] == 0:
        reset_settings()


def get_settings() -> MarchSettings:
    """Get the currently active settings."""
    return _active_settings


def settings_as_dict() -> dict[str, object]:
    """Get the active settings as a plain dictionary (for logging/debugging)."""
    return asdict(_active_settings)


# =============================================================================
# Kernel-side accessors
# =============================================================================


@ti.func
def get_epsilon() -> ti.f32:
    return _epsilon[None]


@ti.func
def get_max_steps() -> ti.i32:
    return _max_steps[None]


@ti.func
def get_max_distance() -> ti.f32:
    return _max_distance[None]


@ti.func
def get_trajectory_samples() -> ti.i32:
    return _trajectory_samples[None]


@ti.func
def get_trajectory_t_start() -> ti.f32:
    return _trajectory_t_start[None]


@ti.func
def get_blend_alpha() -> ti.f32:
    return _blend_alpha[None]


@ti.func
def get_shininess() -> ti.f32:
    return _shininess[None]


@ti.func
def get_light_terms():
    """Get (diffuse_color, diffuse_power, specular_color, specular_power)."""
    return _diffuse_color[None], _diffuse_power[None], _specular_color[None], _specular_power[None]


@ti.func
def get_ray_method() -> ti.i32:
    return _ray_method[None]


@ti.func
def get_strict_hits() -> ti.i32:
    return _strict_hits[None]
