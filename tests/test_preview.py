"""Tests for the preview module.

This module tests the preview/display and preview/export functionality including:
- Gamma encoding
- Display preparation of RGBA frames
- PNG export and background loading
- RMSE computation

Note: Tests avoid displaying actual windows by not calling show_preview
in automated tests. The processing functions are tested directly.
"""

import numpy as np
import pytest
from PIL import Image as PILImage


class TestGamma:
    """Test gamma encoding."""

    def test_gamma_1_no_change(self):
        from raymarcher.preview.display import apply_gamma

        image = np.array([[[0.25, 0.5, 2.0]]], dtype=np.float32)
        assert np.array_equal(apply_gamma(image, 1.0), image)

    def test_gamma_brightens_midtones(self):
        from raymarcher.preview.display import apply_gamma

        image = np.full((2, 2, 3), 0.25, dtype=np.float32)
        assert np.allclose(apply_gamma(image, 2.0), 0.5)

    def test_gamma_clamps_negative(self):
        from raymarcher.preview.display import apply_gamma

        image = np.array([[[-1.0, 0.0, 1.0]]], dtype=np.float32)
        result = apply_gamma(image, 2.2)

        assert not np.any(np.isnan(result))
        assert result[0, 0, 0] == 0.0

    def test_non_positive_gamma_raises(self):
        from raymarcher.preview.display import apply_gamma

        with pytest.raises(ValueError):
            apply_gamma(np.zeros((1, 1, 3), dtype=np.float32), 0.0)


class TestProcessImage:
    """Test display preparation."""

    def test_drops_alpha_by_default(self):
        from raymarcher.preview.display import process_image_for_display

        image = np.ones((4, 4, 4), dtype=np.float32)
        assert process_image_for_display(image).shape == (4, 4, 3)

    def test_keep_alpha(self):
        from raymarcher.preview.display import process_image_for_display

        image = np.full((4, 4, 4), 0.5, dtype=np.float32)
        result = process_image_for_display(image, keep_alpha=True)

        assert result.shape == (4, 4, 4)
        assert np.allclose(result[:, :, 3], 0.5)

    def test_clamps_lit_values(self):
        """Lit pixels can exceed 1 before display."""
        from raymarcher.preview.display import process_image_for_display

        image = np.full((2, 2, 4), 1.3, dtype=np.float32)
        assert np.all(process_image_for_display(image) <= 1.0)

    def test_invalid_shape_raises(self):
        from raymarcher.preview.display import process_image_for_display

        with pytest.raises(ValueError):
            process_image_for_display(np.zeros((4, 4), dtype=np.float32))


class TestImageToUint8:
    """Test conversion to uint8."""

    def test_black_and_white(self):
        from raymarcher.preview.export import image_to_uint8

        image = np.array([[[0.0, 0.0, 0.0, 1.0], [1.0, 1.0, 1.0, 0.5]]], dtype=np.float32)
        result = image_to_uint8(image)

        assert result.dtype == np.uint8
        assert result.shape == (1, 2, 3)
        assert np.all(result[0, 0] == 0)
        assert np.all(result[0, 1] == 255)


class TestSavePngFromArray:
    """Test PNG export from NumPy array."""

    def test_save_rgb(self, tmp_path):
        from raymarcher.preview.export import save_png_from_array

        image = np.zeros((32, 64, 4), dtype=np.float32)
        image[:, :, 0] = np.linspace(0, 1, 64)
        image[:, :, 3] = 1.0
        filepath = tmp_path / "gradient.png"

        save_png_from_array(image, str(filepath))

        with PILImage.open(filepath) as img:
            assert img.size == (64, 32)  # PIL size is (width, height)
            assert img.mode == "RGB"
            pixels = np.asarray(img)
        assert pixels[0, 0, 0] == 0
        assert pixels[0, -1, 0] == 255

    def test_save_rgba(self, tmp_path):
        from raymarcher.preview.export import save_png_from_array

        image = np.full((8, 8, 4), 0.5, dtype=np.float32)
        filepath = tmp_path / "alpha.png"

        save_png_from_array(image, str(filepath), keep_alpha=True)

        with PILImage.open(filepath) as img:
            assert img.mode == "RGBA"


class TestLoadBackground:
    """Test loading background images."""

    @pytest.fixture
    def background_file(self, tmp_path):
        pixels = np.zeros((10, 20, 3), dtype=np.uint8)
        pixels[:, :, 1] = 255
        filepath = tmp_path / "background.png"
        PILImage.fromarray(pixels).save(filepath)
        return str(filepath)

    def test_load_keeps_size(self, background_file):
        from raymarcher.preview.export import load_background

        image = load_background(background_file)

        assert image.shape == (10, 20, 3)
        assert image.dtype == np.float32
        assert np.allclose(image[:, :, 1], 1.0)
        assert np.allclose(image[:, :, 0], 0.0)

    def test_load_resizes(self, background_file):
        from raymarcher.preview.export import load_background

        image = load_background(background_file, 8, 6)

        assert image.shape == (6, 8, 3)
        assert np.allclose(image[:, :, 1], 1.0)

    def test_single_dimension_raises(self, background_file):
        from raymarcher.preview.export import load_background

        with pytest.raises(ValueError):
            load_background(background_file, width=8)

    def test_background_renders(self, background_file, test_sphere_camera):
        from raymarcher.core.frame import FrameParams, FrameRenderer
        from raymarcher.preview.export import load_background

        background = load_background(background_file, 16, 16)
        image = FrameRenderer(16, 16).render(
            FrameParams(
                projection=test_sphere_camera.projection(), view=test_sphere_camera.view()
            ),
            background,
        )
        assert np.allclose(image[0, 0], (0.0, 1.0, 0.0, 1.0))


class TestComputeRmse:
    """Test RMSE computation."""

    def test_rmse_identical_images(self):
        from raymarcher.preview.export import compute_rmse

        image = np.random.rand(10, 10, 3).astype(np.float32)
        assert np.isclose(compute_rmse(image, image), 0.0)

    def test_rmse_different_images(self):
        from raymarcher.preview.export import compute_rmse

        image_a = np.zeros((10, 10, 3), dtype=np.float32)
        image_b = np.ones((10, 10, 3), dtype=np.float32)
        assert np.isclose(compute_rmse(image_a, image_b), 1.0)

    def test_rmse_shape_mismatch_raises(self):
        from raymarcher.preview.export import compute_rmse

        image_a = np.zeros((10, 10, 3), dtype=np.float32)
        image_b = np.zeros((20, 20, 3), dtype=np.float32)

        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(image_a, image_b)


class TestModuleExports:
    """Test that all expected symbols are exported from the package."""

    def test_preview_exports(self):
        from raymarcher.preview import (
            apply_gamma,
            compute_rmse,
            load_background,
            process_image_for_display,
            save_png_from_array,
            show_comparison,
            show_distance_map,
            show_preview,
        )

        assert callable(apply_gamma)
        assert callable(compute_rmse)
        assert callable(load_background)
        assert callable(process_image_for_display)
        assert callable(save_png_from_array)
        assert callable(show_comparison)
        assert callable(show_distance_map)
        assert callable(show_preview)


class TestInteractivePreview:
    """Test the GGUI preview without opening a window."""

    def test_update_image_orientation(self):
        from raymarcher.preview.interactive import InteractivePreview

        preview = InteractivePreview(4, 2)
        image = np.zeros((2, 4, 4), dtype=np.float32)
        image[0, 0] = (1.0, 0.0, 0.0, 1.0)  # top-left

        preview.update_image(image)
        field = preview.display_image.to_numpy()

        assert field.shape == (4, 2, 3)
        # Taichi y grows upward, so the top row has the largest y
        assert np.allclose(field[0, 1], (1.0, 0.0, 0.0))
        assert np.allclose(field[0, 0], 0.0)

    def test_update_image_shape_mismatch_raises(self):
        from raymarcher.preview.interactive import InteractivePreview

        preview = InteractivePreview(4, 2)
        with pytest.raises(ValueError):
            preview.update_image(np.zeros((4, 2, 3), dtype=np.float32))


class TestAgentPanel:
    """Test how slider values from the AVO panel become trajectory parameters."""

    def test_lookahead_slider_feeds_trajectory(self):
        from raymarcher.preview.interactive import apply_panel_values
        from raymarcher.scene.trajectory import AgentPair

        agents = apply_panel_values(AgentPair(), lookahead=42.0, radius_b=10.0)
        params = agents.to_trajectory_params()

        assert params.lookahead == pytest.approx(42.0)
        assert params.radius_ab == pytest.approx(60.0)

    def test_zero_lookahead_is_clamped(self):
        from raymarcher.preview.interactive import MIN_LOOKAHEAD, apply_panel_values
        from raymarcher.scene.trajectory import AgentPair

        agents = apply_panel_values(AgentPair(), lookahead=0.0)
        params = agents.to_trajectory_params()

        assert params.lookahead == pytest.approx(MIN_LOOKAHEAD)
        params.validate()

    def test_zero_acceleration_is_clamped(self):
        from raymarcher.preview.interactive import MIN_ACCELERATION, apply_panel_values
        from raymarcher.scene.trajectory import AgentPair

        agents = apply_panel_values(AgentPair(), max_acceleration_a=0.0)

        assert agents.max_acceleration_a == pytest.approx(MIN_ACCELERATION)
        assert agents.acceleration_ctrl_param() > 0.0

    def test_input_is_not_modified(self):
        from raymarcher.preview.interactive import apply_panel_values
        from raymarcher.scene.trajectory import AgentPair

        original = AgentPair()
        apply_panel_values(original, lookahead=0.0)

        assert original.lookahead == pytest.approx(5.0)
