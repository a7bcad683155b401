"""Ready-made scenes and camera setups.

Three scenes are provided:

- the spherinder cross-section: a radius-100 spherinder sliced by a tilted
  hyperplane, cut by one plane and capped by another, viewed from an orbit
  of radius 1000 (animated by the slice offset);
- the acceleration-velocity-obstacle (AVO) scene: the swept-sphere obstacle
  of two agents, viewed from the same orbit;
- a unit test sphere in front of a camera at the origin.

Each factory clears the scene, adds its primitives and returns the
PerspectiveCamera to render with.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raymarcher.scene.presets import create_spherinder_section_scene
    >>> from raymarcher.camera.projection import setup_camera
    >>>
    >>> camera = create_spherinder_section_scene(aspect_ratio=16.0 / 9.0)
    >>> setup_camera(camera)
"""

import math

import numpy as np
import numpy.typing as npt

from raymarcher.camera.projection import PerspectiveCamera
from raymarcher.scene.distance_field import (
    CsgOp,
    add_half_space,
    add_sphere,
    add_spherinder_slice,
    add_trajectory,
    clear_scene,
)
from raymarcher.scene.trajectory import AgentPair, setup_trajectory

# =============================================================================
# Spherinder Cross-Section Constants
# =============================================================================

SLICE_HYPERPLANE_ORIGIN = (-43.733166, 138.09503, -105.5708, 0.0)
SLICE_HYPERPLANE_NORMAL = (-0.7777588, -0.12597124, -0.42334685, 0.44721353)
SPHERINDER_ORIGIN = (0.0, 0.0, 0.0, 0.0)
SPHERINDER_RADIUS = 100.0

CUT_PLANE_ORIGIN = (3.4217021, -3.7875133, 5.4648843)
CUT_PLANE_NORMAL = (0.45757827, -0.50649756, 0.73080945)
CAP_PLANE_ORIGIN = (-44.757824, 15.044995, -5.303109)
CAP_PLANE_NORMAL = (0.9419595, -0.3166324, 0.11160762)

# Orbit camera used by both 4D scenes
ORBIT_RADIUS = 1000.0

# Slice offset animation: w advances 10 units per second and wraps at 50
SLICE_OFFSET_SPEED = 10.0
SLICE_OFFSET_PERIOD = 50.0

# Test sphere
TEST_SPHERE_CENTER = (0.0, 0.0, -5.0)
TEST_SPHERE_RADIUS = 1.0


def orbit_camera(
    azimuth: float = 0.0,
    elevation: float = 0.0,
    radius: float = ORBIT_RADIUS,
    focus: tuple[float, float, float] = (0.0, 0.0, 0.0),
    aspect_ratio: float = 1.0,
    vfov: float = 45.0,
) -> PerspectiveCamera:
    """Camera on a sphere around ``focus`` looking at it.

    Args:
        azimuth: Rotation about +Y in radians; 0 places the camera on +Z.
        elevation: Angle above the XZ plane in radians, in (-pi/2, pi/2).
        radius: Distance from the focus.
        focus: Point the camera orbits and looks at.
        aspect_ratio: Width divided by height of the output image.
        vfov: Vertical field of view in degrees.

    Raises:
        ValueError: If the radius is not positive or the elevation is at a pole.
    """
    if radius <= 0.0:
        raise ValueError(f"Orbit radius must be positive, got {radius}")
    if not -math.pi / 2.0 < elevation < math.pi / 2.0:
        raise ValueError(f"Elevation must be in (-pi/2, pi/2), got {elevation}")

    horizontal = radius * math.cos(elevation)
    lookfrom = (
        focus[0] + horizontal * math.sin(azimuth),
        focus[1] + radius * math.sin(elevation),
        focus[2] + horizontal * math.cos(azimuth),
    )
    return PerspectiveCamera(
        lookfrom=lookfrom,
        lookat=focus,
        vup=(0.0, 1.0, 0.0),
        vfov=vfov,
        aspect_ratio=aspect_ratio,
    )


def slice_offset_at(seconds: float) -> float:
    """Animated w offset of the cross-section after ``seconds``."""
    return (seconds * SLICE_OFFSET_SPEED) % SLICE_OFFSET_PERIOD


def create_spherinder_section_scene(
    aspect_ratio: float = 1.0,
    azimuth: float = 0.0,
    elevation: float = 0.0,
) -> PerspectiveCamera:
    """Build the spherinder cross-section scene.

    The solid is ``max(max(spherinder_slice, -cut_plane), cap_plane)``.

    Returns:
        The orbit camera looking at the world origin.
    """
    clear_scene()

    add_spherinder_slice(
        SLICE_HYPERPLANE_ORIGIN,
        SLICE_HYPERPLANE_NORMAL,
        SPHERINDER_RADIUS,
        spherinder_origin=SPHERINDER_ORIGIN,
    )
    add_half_space(CUT_PLANE_ORIGIN, CUT_PLANE_NORMAL, op=CsgOp.SUBTRACT)
    add_half_space(CAP_PLANE_ORIGIN, CAP_PLANE_NORMAL, op=CsgOp.INTERSECT)

    return orbit_camera(azimuth, elevation, aspect_ratio=aspect_ratio)


def create_avo_scene(
    agents: AgentPair | None = None,
    aspect_ratio: float = 1.0,
    azimuth: float = 0.0,
    elevation: float = 0.0,
) -> PerspectiveCamera:
    """Build the acceleration-velocity-obstacle scene.

    Args:
        agents: Agent configuration; the default pair sits at x = +-100.
        aspect_ratio: Width divided by height of the output image.
        azimuth: Orbit azimuth in radians.
        elevation: Orbit elevation in radians.

    Returns:
        The orbit camera looking at the world origin.
    """
    if agents is None:
        agents = AgentPair()

    clear_scene()
    setup_trajectory(agents.to_trajectory_params())
    add_trajectory()

    return orbit_camera(azimuth, elevation, aspect_ratio=aspect_ratio)


def gradient_background(
    width: int,
    height: int,
    top: tuple[float, float, float] = (0.35, 0.45, 0.6),
    bottom: tuple[float, float, float] = (0.05, 0.05, 0.08),
) -> npt.NDArray[np.float32]:
    """Vertical gradient background of shape (height, width, 3)."""
    weights = np.linspace(0.0, 1.0, height, dtype=np.float32)[:, None, None]
    column = (1.0 - weights) * np.asarray(top, dtype=np.float32) + weights * np.asarray(
        bottom, dtype=np.float32
    )
    return np.ascontiguousarray(np.broadcast_to(column, (height, width, 3)), dtype=np.float32)


def create_test_sphere_scene(aspect_ratio: float = 1.0) -> PerspectiveCamera:
    """A unit sphere at (0, 0, -5) seen from a camera at the origin."""
    clear_scene()
    add_sphere(TEST_SPHERE_CENTER, TEST_SPHERE_RADIUS)

    return PerspectiveCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=45.0,
        aspect_ratio=aspect_ratio,
    )
