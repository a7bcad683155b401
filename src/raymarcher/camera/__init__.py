"""Camera module for ray reconstruction.

Components:
    projection: Infinite reverse-Z perspective camera, matrix builders and
        the two ray reconstruction methods (unproject, NDC-to-world)

Ray generation uses screen coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: top to bottom across image
"""

from .projection import (
    PerspectiveCamera,
    generate_ray,
    get_camera_info,
    get_camera_ray,
    look_at_transform,
    perspective_infinite_reverse,
    ray_from_ndc,
    ray_from_screen_uv,
    screen_uv_to_ndc,
    setup_camera,
    setup_camera_matrices,
)

__all__ = [
    "PerspectiveCamera",
    "perspective_infinite_reverse",
    "look_at_transform",
    "setup_camera",
    "setup_camera_matrices",
    "get_camera_info",
    "get_camera_ray",
    "generate_ray",
    "ray_from_ndc",
    "ray_from_screen_uv",
    "screen_uv_to_ndc",
]
