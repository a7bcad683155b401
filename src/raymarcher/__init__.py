"""Taichi-based sphere-tracing renderer for signed distance fields.

This package renders implicit surfaces by marching camera rays through a
composition of signed distance functions, with support for:
- 3D cross-sections of 4D solids (spherinder sliced by a hyperplane)
- Swept-sphere obstacles along predicted agent trajectories
- Phong shading from a viewer light composited over a background image

Subpackages:
    core: Ray utilities, settings, sphere tracer, renderer and frame loop
    geometry: Planes, hyperplanes and primitive distance functions
    materials: Lighting model
    scene: Scene distance field, trajectory variant and preset scenes
    camera: Ray reconstruction from projection/view matrices
    preview: Matplotlib preview, PNG I/O and GGUI window
"""

__version__ = "0.1.0"
