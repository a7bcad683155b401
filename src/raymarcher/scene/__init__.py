"""Scene module: the signed distance field rendered by the marcher.

Components:
    distance_field: Primitive storage and the CSG fold (scene_distance)
    trajectory: Swept-sphere obstacle of the AVO visualization
    presets: Ready-made scenes and orbit cameras

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for primitive parameters
    - Hyperplane frames precomputed at insertion
"""

from .distance_field import (
    MAX_PRIMITIVES,
    CsgOp,
    PrimitiveKind,
    add_half_space,
    add_hyperplane_section,
    add_sphere,
    add_spherinder_slice,
    add_torus,
    add_trajectory,
    clear_scene,
    evaluate_distance,
    get_primitive_count,
    hyperplane_section,
    scene_distance,
    set_slice_offset,
)
from .presets import (
    create_avo_scene,
    create_spherinder_section_scene,
    create_test_sphere_scene,
    gradient_background,
    orbit_camera,
    slice_offset_at,
)
from .trajectory import AgentPair, TrajectoryParams, sample_trajectory, setup_trajectory

__all__ = [
    # Distance field
    "PrimitiveKind",
    "CsgOp",
    "MAX_PRIMITIVES",
    "clear_scene",
    "add_sphere",
    "add_torus",
    "add_half_space",
    "add_spherinder_slice",
    "add_hyperplane_section",
    "add_trajectory",
    "hyperplane_section",
    "set_slice_offset",
    "get_primitive_count",
    "evaluate_distance",
    "scene_distance",
    # Trajectory
    "TrajectoryParams",
    "AgentPair",
    "setup_trajectory",
    "sample_trajectory",
    # Presets
    "create_spherinder_section_scene",
    "create_avo_scene",
    "create_test_sphere_scene",
    "orbit_camera",
    "slice_offset_at",
    "gradient_background",
]
