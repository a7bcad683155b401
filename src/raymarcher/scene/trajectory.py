"""Swept-sphere distance field along a predicted relative trajectory.

This is the acceleration-velocity-obstacle visualization variant. Two agents
A and B with a combined radius move relative to each other; agent A reacts
to a velocity change with exponential convergence controlled by
``acceleration_ctrl_param`` (k). For each time offset t of a fixed number of
samples spread linearly over ``[t_start, lookahead)``, the colliding set of
velocities is a sphere with

    param  = k * (e^(-t/k) - 1)
    center = offset + velocity_b + (param * velocity_ab - position_ab) / t
    radius = radius_ab / t

and the field is the union (min) of those spheres. Gaps between samples can
let a ray slip past a fast-changing obstacle; that approximation is kept.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raymarcher.scene.trajectory import AgentPair, setup_trajectory
    >>> agents = AgentPair(position_a=(100.0, 0.0, 0.0), position_b=(-100.0, 0.0, 0.0))
    >>> setup_trajectory(agents.to_trajectory_params())
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raymarcher.core.settings import (
    ensure_configured,
    get_max_distance,
    get_settings,
    get_trajectory_samples,
    get_trajectory_t_start,
)

vec3 = tm.vec3

Vector3 = tuple[float, float, float]

# Below this |k| the deceleration term uses its k -> 0 limit
MIN_CONTROL_PARAM = 1e-8

# Upper bound for sample_trajectory() output buffers
MAX_TRAJECTORY_SAMPLES = 256


@dataclass(frozen=True)
class TrajectoryParams:
    """Per-frame parameters of the swept-sphere obstacle.

    Attributes:
        offset: World-space position the obstacle is drawn relative to.
        acceleration_ctrl_param: Time constant k of the velocity response.
        e: Base of the exponential (Euler's number in practice).
        lookahead: Time horizon covered by the samples.
        velocity_ab: Relative velocity of A with respect to B.
        velocity_b: Velocity of B.
        position_ab: Relative position of A with respect to B.
        radius_ab: Combined radius of both agents.
    """

    offset: Vector3 = (0.0, 0.0, 0.0)
    acceleration_ctrl_param: float = 1.0
    e: float = math.e
    lookahead: float = 5.0
    velocity_ab: Vector3 = (0.0, 0.0, 0.0)
    velocity_b: Vector3 = (0.0, 0.0, 0.0)
    position_ab: Vector3 = (0.0, 0.0, 0.0)
    radius_ab: float = 1.0

    def validate(self) -> None:
        """Check the parameters.

        Raises:
            ValueError: If a parameter would make the field undefined.
        """
        if not self.e > 0.0:
            raise ValueError(f"Exponential base e must be positive, got {self.e}")
        if not self.lookahead > 0.0:
            raise ValueError(f"lookahead must be positive, got {self.lookahead}")
        if self.radius_ab < 0.0:
            raise ValueError(f"radius_ab must be non-negative, got {self.radius_ab}")


@dataclass
class AgentPair:
    """Two spherical agents as configured in the interactive visualization.

    Converts agent state into :class:`TrajectoryParams` for agent A avoiding
    agent B.
    """

    position_a: Vector3 = (100.0, 0.0, 0.0)
    position_b: Vector3 = (-100.0, 0.0, 0.0)
    velocity_a: Vector3 = (0.0, 0.0, 0.0)
    velocity_b: Vector3 = (0.0, 0.0, 0.0)
    max_acceleration_a: float = 100.0
    max_acceleration_b: float = 100.0
    max_velocity_a: float = 200.0
    max_velocity_b: float = 200.0
    radius_a: float = 50.0
    radius_b: float = 50.0
    lookahead: float = 5.0

    def acceleration_ctrl_param(self) -> float:
        """Time constant k = 2 * max_velocity / max_acceleration of agent A.

        Raises:
            ValueError: If agent A cannot accelerate.
        """
        if self.max_acceleration_a <= 0.0:
            raise ValueError(
                f"max_acceleration_a must be positive, got {self.max_acceleration_a}"
            )
        return 2.0 * self.max_velocity_a / self.max_acceleration_a

    def to_trajectory_params(self) -> TrajectoryParams:
        pa = np.asarray(self.position_a, dtype=np.float64)
        pb = np.asarray(self.position_b, dtype=np.float64)
        va = np.asarray(self.velocity_a, dtype=np.float64)
        vb = np.asarray(self.velocity_b, dtype=np.float64)

        return TrajectoryParams(
            offset=tuple(pa.tolist()),
            acceleration_ctrl_param=self.acceleration_ctrl_param(),
            e=math.e,
            lookahead=self.lookahead,
            velocity_ab=tuple((va - vb).tolist()),
            velocity_b=tuple(vb.tolist()),
            position_ab=tuple((pa - pb).tolist()),
            radius_ab=self.radius_a + self.radius_b,
        )


# =============================================================================
# Taichi Fields for Trajectory State (GPU-accessible)
# =============================================================================

_offset = ti.Vector.field(3, dtype=ti.f32, shape=())
_acceleration_ctrl_param = ti.field(dtype=ti.f32, shape=())
_e = ti.field(dtype=ti.f32, shape=())
_lookahead = ti.field(dtype=ti.f32, shape=())
_velocity_ab = ti.Vector.field(3, dtype=ti.f32, shape=())
_velocity_b = ti.Vector.field(3, dtype=ti.f32, shape=())
_position_ab = ti.Vector.field(3, dtype=ti.f32, shape=())
_radius_ab = ti.field(dtype=ti.f32, shape=())

_sample_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRAJECTORY_SAMPLES)
_sample_radii = ti.field(dtype=ti.f32, shape=MAX_TRAJECTORY_SAMPLES)

_active_params: TrajectoryParams | None = None


def setup_trajectory(params: TrajectoryParams) -> None:
    """Upload the trajectory parameters for the current frame.

    Args:
        params: The trajectory parameters.

    Raises:
        ValueError: If the parameters are invalid.
    """
    global _active_params

    params.validate()

    _offset[None] = list(params.offset)
    _acceleration_ctrl_param[None] = params.acceleration_ctrl_param
    _e[None] = params.e
    _lookahead[None] = params.lookahead
    _velocity_ab[None] = list(params.velocity_ab)
    _velocity_b[None] = list(params.velocity_b)
    _position_ab[None] = list(params.position_ab)
    _radius_ab[None] = params.radius_ab

    _active_params = params


def get_trajectory_params() -> TrajectoryParams | None:
    """Get the parameters last passed to :func:`setup_trajectory`."""
    return _active_params


# =============================================================================
# Distance Evaluation (Taichi-compatible)
# =============================================================================


@ti.func
def deceleration_param(t: ti.f32, k: ti.f32, e: ti.f32) -> ti.f32:
    """k * (e^(-t/k) - 1), with the k -> 0 limit of 0."""
    result = 0.0
    if ti.abs(k) > MIN_CONTROL_PARAM:
        result = k * (e ** (-t / k) - 1.0)
    return result


@ti.func
def sample_time(index: ti.i32, samples: ti.i32) -> ti.f32:
    """Time offset of sample ``index``: lerp(t_start, lookahead, index / samples)."""
    fraction = ti.cast(index, ti.f32) / ti.cast(samples, ti.f32)
    return tm.mix(get_trajectory_t_start(), _lookahead[None], fraction)


@ti.func
def trajectory_sphere(t: ti.f32):
    """Center and radius of the obstacle sphere at time offset ``t`` (> 0).

    Returns:
        A tuple (center, radius).
    """
    param = deceleration_param(t, _acceleration_ctrl_param[None], _e[None])
    center = (
        _offset[None]
        + _velocity_b[None]
        + (param * _velocity_ab[None] - _position_ab[None]) / t
    )
    radius = _radius_ab[None] / t
    return center, radius


@ti.func
def trajectory_distance(p: vec3) -> ti.f32:
    """Union of the sampled obstacle spheres evaluated at ``p``."""
    samples = get_trajectory_samples()
    result = get_max_distance()

    ti.loop_config(serialize=True)
    for i in range(samples):
        center, radius = trajectory_sphere(sample_time(i, samples))
        result = ti.min(result, tm.length(p - center) - radius)

    return result


@ti.kernel
def _sample_trajectory_kernel(count: ti.i32):
    for i in range(count):
        center, radius = trajectory_sphere(sample_time(i, count))
        _sample_centers[i] = center
        _sample_radii[i] = radius


def sample_trajectory(
    count: int | None = None,
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32]]:
    """Evaluate the obstacle spheres of the current trajectory.

    Useful for drawing the predicted curve or checking the field.

    Args:
        count: Number of samples (default: the configured trajectory_samples).

    Returns:
        Tuple (centers, radii) with shapes (count, 3) and (count,).

    Raises:
        ValueError: If count is outside [1, MAX_TRAJECTORY_SAMPLES].
    """
    ensure_configured()
    if count is None:
        count = get_settings().trajectory_samples
    if not 1 <= count <= MAX_TRAJECTORY_SAMPLES:
        raise ValueError(
            f"Sample count must be in [1, {MAX_TRAJECTORY_SAMPLES}], got {count}"
        )

    _sample_trajectory_kernel(count)
    centers = _sample_centers.to_numpy()[:count]
    radii = _sample_radii.to_numpy()[:count]
    return centers, radii
