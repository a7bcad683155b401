"""Geometry module for planes, hyperplanes and distance primitives.

Components:
    plane: Oriented 3D plane with an orthonormal (u, v) frame
    hyperplane: Oriented 4D hyperplane with an orthonormal (u, v, w) frame
    primitives: Primitive signed distance functions and boolean combinators

All routines are Taichi functions (@ti.func) meant to be called from
kernels.
"""

from .hyperplane import (
    Hyperplane,
    hyperplane_project_3d,
    hyperplane_project_4d,
    hyperplane_signed_distance,
    hyperplanes_intersect,
    make_hyperplane,
    plane_from_hyperplanes,
)
from .plane import Plane, make_plane, plane_project_2d, plane_project_3d, plane_signed_distance
from .primitives import (
    op_intersect,
    op_subtract,
    op_union,
    sd_plane,
    sd_sphere,
    sd_spherinder_slice,
    sd_torus,
)

__all__ = [
    "Plane",
    "make_plane",
    "plane_signed_distance",
    "plane_project_2d",
    "plane_project_3d",
    "Hyperplane",
    "make_hyperplane",
    "hyperplane_signed_distance",
    "hyperplane_project_3d",
    "hyperplane_project_4d",
    "hyperplanes_intersect",
    "plane_from_hyperplanes",
    "sd_sphere",
    "sd_torus",
    "sd_plane",
    "sd_spherinder_slice",
    "op_union",
    "op_intersect",
    "op_subtract",
]
