"""Pytest configuration for raymarcher tests.

Taichi runs on the CPU backend for the whole session; every test starts
from an empty scene, default settings and no render target.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Single ti.init for the session; re-initializing mid-run crashes Taichi."""
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Reset scene, settings and render target around each test."""
    # Deferred until ti.init has run
    from raymarcher.core.renderer import clear_render_target, reset_render_target
    from raymarcher.core.settings import reset_settings
    from raymarcher.scene.distance_field import clear_scene
    from raymarcher.scene.trajectory import TrajectoryParams, setup_trajectory

    def _clear_all():
        clear_scene()
        reset_settings()
        setup_trajectory(TrajectoryParams())
        clear_render_target()
        reset_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def test_sphere_camera():
    """Camera at the origin looking down -Z at a unit sphere centered at z = -5."""
    from raymarcher.camera.projection import setup_camera
    from raymarcher.scene.presets import create_test_sphere_scene

    camera = create_test_sphere_scene()
    setup_camera(camera)
    return camera
