"""Unit tests for the scene distance field.

Tests cover:
- Primitive insertion and validation
- Left-to-right boolean folding
- Batch evaluation from Python
- Spherinder slices, slice offset and hyperplane sections
"""

import math

import numpy as np
import pytest


class TestScenePrimitives:
    """Tests for adding primitives."""

    def test_empty_scene_reports_max_distance(self):
        from raymarcher.scene.distance_field import evaluate_distance

        assert evaluate_distance((0.0, 0.0, 0.0)) == pytest.approx(10000.0)

    def test_add_sphere_returns_index(self):
        from raymarcher.scene.distance_field import add_sphere, get_primitive_count

        assert add_sphere((0.0, 0.0, 0.0), 1.0) == 0
        assert add_sphere((2.0, 0.0, 0.0), 1.0) == 1
        assert get_primitive_count() == 2

    def test_clear_scene(self):
        from raymarcher.scene.distance_field import (
            add_sphere,
            clear_scene,
            get_primitive_count,
            get_slice_offset,
            set_slice_offset,
        )

        add_sphere((0.0, 0.0, 0.0), 1.0)
        set_slice_offset(3.0)
        clear_scene()
        assert get_primitive_count() == 0
        assert get_slice_offset() == 0.0

    def test_invalid_primitives_raise(self):
        from raymarcher.scene.distance_field import (
            add_half_space,
            add_sphere,
            add_spherinder_slice,
            add_torus,
            get_primitive_count,
        )

        with pytest.raises(ValueError):
            add_sphere((0.0, 0.0, 0.0), 0.0)
        with pytest.raises(ValueError):
            add_torus((0.0, 0.0, 0.0), 2.0, -0.5)
        with pytest.raises(ValueError):
            add_half_space((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        with pytest.raises(ValueError):
            add_spherinder_slice((0.0, 0.0, 0.0, 0.0), (0.0, 0.0, 0.0, 0.0), 1.0)
        with pytest.raises(ValueError):
            add_spherinder_slice((0.0, 0.0, 0.0, 0.0), (0.0, 0.0, 0.0, 1.0), -1.0)

        assert get_primitive_count() == 0

    def test_capacity_exceeded_raises(self):
        from raymarcher.scene.distance_field import MAX_PRIMITIVES, add_sphere

        for i in range(MAX_PRIMITIVES):
            add_sphere((float(i), 0.0, 0.0), 0.5)

        with pytest.raises(RuntimeError, match="Maximum number of primitives"):
            add_sphere((0.0, 0.0, 0.0), 0.5)


class TestSceneDistance:
    """Tests for the folded scene distance."""

    def test_single_sphere(self):
        from raymarcher.scene.distance_field import add_sphere, evaluate_distance

        add_sphere((0.0, 0.0, -5.0), 1.0)
        assert evaluate_distance((0.0, 0.0, 0.0)) == pytest.approx(4.0, abs=1e-5)

    def test_batch_evaluation(self):
        from raymarcher.scene.distance_field import add_sphere, evaluate_distance

        add_sphere((0.0, 0.0, 0.0), 1.0)
        points = np.array(
            [[0.0, 0.0, 0.0], [3.0, 0.0, 0.0], [0.0, -1.0, 0.0]], dtype=np.float32
        )
        distances = evaluate_distance(points)

        assert distances.shape == (3,)
        assert np.allclose(distances, [-1.0, 2.0, 0.0], atol=1e-5)

    def test_bad_point_shape_raises(self):
        from raymarcher.scene.distance_field import evaluate_distance

        with pytest.raises(ValueError):
            evaluate_distance(np.zeros((4, 2)))

    def test_union_takes_nearest(self):
        from raymarcher.scene.distance_field import add_sphere, evaluate_distance

        add_sphere((-3.0, 0.0, 0.0), 1.0)
        add_sphere((3.0, 0.0, 0.0), 1.0)
        assert evaluate_distance((2.0, 0.0, 0.0)) == pytest.approx(0.0, abs=1e-5)
        assert evaluate_distance((0.0, 0.0, 0.0)) == pytest.approx(2.0, abs=1e-5)

    def test_subtract_carves_hole(self):
        from raymarcher.scene.distance_field import CsgOp, add_sphere, evaluate_distance

        add_sphere((0.0, 0.0, 0.0), 2.0)
        add_sphere((0.0, 0.0, 0.0), 1.0, op=CsgOp.SUBTRACT)

        # Inside the hole, one unit from its wall
        assert evaluate_distance((0.0, 0.0, 0.0)) == pytest.approx(1.0, abs=1e-5)
        # Inside the shell
        assert evaluate_distance((1.5, 0.0, 0.0)) == pytest.approx(-0.5, abs=1e-5)

    def test_intersect_caps_with_half_space(self):
        from raymarcher.scene.distance_field import (
            CsgOp,
            add_half_space,
            add_sphere,
            evaluate_distance,
        )

        add_sphere((0.0, 0.0, 0.0), 2.0)
        add_half_space((0.0, 0.0, 0.0), (0.0, 5.0, 0.0), op=CsgOp.INTERSECT)

        assert evaluate_distance((0.0, 1.0, 0.0)) == pytest.approx(1.0, abs=1e-5)
        assert evaluate_distance((0.0, -1.0, 0.0)) == pytest.approx(-1.0, abs=1e-5)

    def test_fold_is_order_dependent(self):
        """Subtracting before anything else leaves nothing to subtract from."""
        from raymarcher.scene.distance_field import CsgOp, add_sphere, evaluate_distance

        add_sphere((0.0, 0.0, 0.0), 1.0, op=CsgOp.SUBTRACT)
        add_sphere((5.0, 0.0, 0.0), 1.0)

        assert evaluate_distance((0.0, 0.0, 0.0)) == pytest.approx(4.0, abs=1e-5)

    def test_torus(self):
        from raymarcher.scene.distance_field import add_torus, evaluate_distance

        add_torus((0.0, 1.0, 0.0), 2.0, 0.5)
        assert evaluate_distance((2.0, 1.0, 0.0)) == pytest.approx(-0.5, abs=1e-5)
        assert evaluate_distance((0.0, 1.0, 0.0)) == pytest.approx(1.5, abs=1e-5)


class TestSpherinderSlice:
    """Tests for 4D spherinder cross-sections."""

    def test_axis_aligned_slice_is_sphere(self):
        from raymarcher.scene.distance_field import add_spherinder_slice, evaluate_distance

        add_spherinder_slice((0.0, 0.0, 0.0, 7.0), (0.0, 0.0, 0.0, 1.0), 2.0)
        assert evaluate_distance((0.0, 0.0, 0.0)) == pytest.approx(-2.0, abs=1e-5)
        assert evaluate_distance((0.0, 5.0, 0.0)) == pytest.approx(3.0, abs=1e-5)

    def test_slice_offset_moves_hyperplane_along_normal(self):
        from raymarcher.scene.distance_field import (
            add_spherinder_slice,
            evaluate_distance,
            set_slice_offset,
        )

        add_spherinder_slice((0.0, 0.0, 0.0, 0.0), (1.0, 0.0, 0.0, 1.0), 2.0)
        assert evaluate_distance((0.0, 0.0, 0.0)) == pytest.approx(-2.0, abs=1e-5)

        # Local origin moves to 4 * (1, 0, 0, 1) / sqrt(2)
        set_slice_offset(4.0)
        expected = 4.0 / math.sqrt(2.0) - 2.0
        assert evaluate_distance((0.0, 0.0, 0.0)) == pytest.approx(expected, abs=1e-4)

    def test_get_hyperplane_frame(self):
        from raymarcher.scene.distance_field import (
            add_sphere,
            add_spherinder_slice,
            get_hyperplane_frame,
        )

        sphere = add_sphere((0.0, 0.0, 0.0), 1.0)
        idx = add_spherinder_slice((1.0, 2.0, 3.0, 4.0), (0.0, 0.0, 0.0, 2.0), 1.0)

        frame = get_hyperplane_frame(idx)
        assert np.allclose(frame["normal"], (0.0, 0.0, 0.0, 1.0), atol=1e-6)
        assert np.allclose(frame["origin"], (1.0, 2.0, 3.0, 4.0), atol=1e-6)
        assert np.allclose(frame["u"], (1.0, 0.0, 0.0, 0.0), atol=1e-6)

        with pytest.raises(ValueError):
            get_hyperplane_frame(sphere)
        with pytest.raises(ValueError):
            get_hyperplane_frame(5)


class TestHyperplaneSection:
    """Tests for planes traced by a cutting hyperplane."""

    def test_section_plane(self):
        from raymarcher.scene.distance_field import hyperplane_section

        origin, normal = hyperplane_section(
            (0.0, 0.0, 0.0, 0.0),
            (0.0, 0.0, 0.0, 1.0),
            (2.0, 0.0, 0.0, 0.0),
            (1.0, 0.0, 0.0, 1.0),
        )
        assert np.allclose(origin, (2.0, 0.0, 0.0), atol=1e-4)
        assert np.allclose(normal, (1.0, 0.0, 0.0), atol=1e-5)

    def test_parallel_hyperplanes_raise(self):
        from raymarcher.scene.distance_field import hyperplane_section

        with pytest.raises(ValueError, match="parallel"):
            hyperplane_section(
                (0.0, 0.0, 0.0, 0.0),
                (0.0, 0.0, 0.0, 1.0),
                (0.0, 0.0, 0.0, 3.0),
                (0.0, 0.0, 0.0, 1.0),
            )

    def test_add_hyperplane_section_intersects(self):
        from raymarcher.scene.distance_field import (
            add_hyperplane_section,
            add_sphere,
            evaluate_distance,
            get_primitive_count,
        )

        add_sphere((0.0, 0.0, 0.0), 5.0)
        add_hyperplane_section(
            (0.0, 0.0, 0.0, 0.0),
            (0.0, 0.0, 0.0, 1.0),
            (2.0, 0.0, 0.0, 0.0),
            (1.0, 0.0, 0.0, 1.0),
        )

        assert get_primitive_count() == 2
        assert evaluate_distance((0.0, 0.0, 0.0)) == pytest.approx(-2.0, abs=1e-4)
        assert evaluate_distance((3.0, 0.0, 0.0)) == pytest.approx(1.0, abs=1e-4)
