"""Materials module: the Phong viewer-light model."""

from .phong import Lighting, PointLight, evaluate_lighting, make_viewer_light

__all__ = [
    "PointLight",
    "Lighting",
    "make_viewer_light",
    "evaluate_lighting",
]
