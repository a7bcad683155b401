"""Phong lighting from a point light placed at the viewer.

The light is rebuilt for every shading evaluation at the ray origin, so the
surface is always lit from the camera. The lighting terms are

    light_dir  = normalize(light.position - point)
    diffuse    = max(dot(n, light_dir), 0) * diffuse_color * diffuse_power
    reflect_dir = reflect(-light_dir, n)
    view_dir   = normalize(point)
    specular   = max(dot(view_dir, reflect_dir), 0)^shininess
                 * specular_color * specular_power

``view_dir`` points from the world origin to the surface point rather than
from the surface to the eye. The highlight therefore depends on where the
world origin sits relative to the scene; the rendered look relies on it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raymarcher.materials.phong import evaluate_lighting, make_viewer_light
    >>> # Within a Taichi kernel:
    >>> # light = make_viewer_light(ray.origin)
    >>> # lighting = evaluate_lighting(light, hit_point, normal)
"""

import taichi as ti
import taichi.math as tm

from raymarcher.core.ray import reflect, safe_normalize
from raymarcher.core.settings import get_light_terms, get_shininess

vec3 = tm.vec3


@ti.dataclass
class PointLight:
    """A point light with separate diffuse and specular terms.

    Attributes:
        position: World-space position of the light.
        diffuse_color: RGB color of the diffuse term.
        diffuse_power: Scalar intensity of the diffuse term.
        specular_color: RGB color of the specular term.
        specular_power: Scalar intensity of the specular term.
    """

    position: vec3
    diffuse_color: vec3
    diffuse_power: ti.f32
    specular_color: vec3
    specular_power: ti.f32


@ti.dataclass
class Lighting:
    """Diffuse and specular contributions at a surface point."""

    diffuse: vec3
    specular: vec3


@ti.func
def make_viewer_light(position: vec3) -> PointLight:
    """Point light at ``position`` using the configured colors and powers."""
    diffuse_color, diffuse_power, specular_color, specular_power = get_light_terms()
    return PointLight(
        position=position,
        diffuse_color=diffuse_color,
        diffuse_power=diffuse_power,
        specular_color=specular_color,
        specular_power=specular_power,
    )


@ti.func
def evaluate_lighting(light: PointLight, point: vec3, normal: vec3) -> Lighting:
    """Evaluate the Phong terms of ``light`` at a surface point.

    Args:
        light: The light source.
        point: Surface point in world space.
        normal: Unit surface normal; a zero normal gives no lighting.

    Returns:
        The diffuse and specular contributions (RGB, not clamped).
    """
    diffuse = vec3(0.0, 0.0, 0.0)
    specular = vec3(0.0, 0.0, 0.0)

    light_dir = safe_normalize(light.position - point)
    if tm.dot(normal, normal) > 0.0 and tm.dot(light_dir, light_dir) > 0.0:
        lambert = ti.max(tm.dot(normal, light_dir), 0.0)
        diffuse = lambert * light.diffuse_color * light.diffuse_power

        reflect_dir = reflect(-light_dir, normal)
        view_dir = safe_normalize(point)
        highlight = ti.max(tm.dot(view_dir, reflect_dir), 0.0) ** get_shininess()
        specular = highlight * light.specular_color * light.specular_power

    return Lighting(diffuse=diffuse, specular=specular)
