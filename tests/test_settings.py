"""Tests for the injected march settings."""

import pytest
import taichi as ti


class TestMarchSettingsDefaults:
    """Default values of a fresh configuration."""

    def test_defaults(self):
        from raymarcher.core.settings import DEFAULT_SETTINGS

        assert DEFAULT_SETTINGS.epsilon == 0.01
        assert DEFAULT_SETTINGS.max_steps == 300
        assert DEFAULT_SETTINGS.max_distance == 10000.0
        assert DEFAULT_SETTINGS.trajectory_samples == 25
        assert DEFAULT_SETTINGS.trajectory_t_start == 0.001
        assert DEFAULT_SETTINGS.blend_alpha == 0.5
        assert DEFAULT_SETTINGS.shininess == 32.0
        assert DEFAULT_SETTINGS.ray_method == "ndc_to_world"
        assert DEFAULT_SETTINGS.strict_hits is False

    def test_settings_are_frozen(self):
        from dataclasses import FrozenInstanceError

        from raymarcher.core.settings import MarchSettings

        settings = MarchSettings()
        with pytest.raises(FrozenInstanceError):
            settings.epsilon = 0.1  # type: ignore[misc]


class TestMarchSettingsValidation:
    """Invalid values are rejected before reaching the kernels."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"epsilon": 0.0},
            {"max_steps": 0},
            {"max_distance": 0.001},
            {"trajectory_samples": 0},
            {"trajectory_t_start": 0.0},
            {"blend_alpha": 1.5},
            {"shininess": -1.0},
            {"ray_method": "raster"},
        ],
    )
    def test_invalid_settings_raise(self, overrides):
        from raymarcher.core.settings import MarchSettings, configure

        with pytest.raises(ValueError):
            configure(MarchSettings(**overrides))

    def test_invalid_settings_keep_previous(self):
        from raymarcher.core.settings import MarchSettings, configure, get_settings

        configure(MarchSettings(epsilon=0.05))
        with pytest.raises(ValueError):
            configure(MarchSettings(epsilon=-1.0))
        assert get_settings().epsilon == 0.05


class TestConfigure:
    """configure() makes values visible inside kernels."""

    def test_kernel_sees_configured_values(self):
        from raymarcher.core.settings import (
            MarchSettings,
            RayMethod,
            configure,
            get_epsilon,
            get_max_steps,
            get_ray_method,
        )

        epsilon = ti.field(dtype=ti.f32, shape=())
        steps = ti.field(dtype=ti.i32, shape=())
        method = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            epsilon[None] = get_epsilon()
            steps[None] = get_max_steps()
            method[None] = get_ray_method()

        configure(MarchSettings(epsilon=0.001, max_steps=42, ray_method="unproject"))
        test_kernel()

        assert abs(epsilon[None] - 0.001) < 1e-9
        assert steps[None] == 42
        assert method[None] == int(RayMethod.UNPROJECT)

    def test_reset_restores_defaults(self):
        from raymarcher.core.settings import (
            DEFAULT_SETTINGS,
            MarchSettings,
            configure,
            get_settings,
            reset_settings,
        )

        configure(MarchSettings(max_steps=10))
        reset_settings()
        assert get_settings() == DEFAULT_SETTINGS

    def test_settings_as_dict(self):
        from raymarcher.core.settings import settings_as_dict

        values = settings_as_dict()
        assert values["epsilon"] == 0.01
        assert values["diffuse_power"] == 0.6
        assert values["specular_power"] == 0.4
