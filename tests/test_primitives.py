"""Unit tests for primitive signed distance functions and combinators."""

import taichi as ti


class TestPrimitiveDistances:
    """Tests for individual SDFs."""

    def test_sphere(self):
        from raymarcher.geometry.primitives import sd_sphere, vec3

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            result[0] = sd_sphere(vec3(0.0, 0.0, 0.0), 2.0)
            result[1] = sd_sphere(vec3(0.0, 2.0, 0.0), 2.0)
            result[2] = sd_sphere(vec3(3.0, 4.0, 0.0), 2.0)

        test_kernel()
        assert abs(result[0] + 2.0) < 1e-6
        assert abs(result[1]) < 1e-6
        assert abs(result[2] - 3.0) < 1e-6

    def test_torus(self):
        from raymarcher.geometry.primitives import sd_torus, vec2, vec3

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            radii = vec2(2.0, 0.5)
            result[0] = sd_torus(vec3(3.0, 0.0, 0.0), radii)
            result[1] = sd_torus(vec3(0.0, 0.0, -2.0), radii)
            result[2] = sd_torus(vec3(0.0, 0.0, 0.0), radii)

        test_kernel()
        assert abs(result[0] - 0.5) < 1e-6
        assert abs(result[1] + 0.5) < 1e-6
        # Center of the hole: sqrt(2^2) - 0.5
        assert abs(result[2] - 1.5) < 1e-6

    def test_plane(self):
        from raymarcher.geometry.primitives import sd_plane, vec3

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            origin = vec3(0.0, 1.0, 0.0)
            normal = vec3(0.0, 1.0, 0.0)
            result[0] = sd_plane(vec3(5.0, 4.0, -3.0), origin, normal)
            result[1] = sd_plane(vec3(0.0, -1.0, 0.0), origin, normal)

        test_kernel()
        assert abs(result[0] - 3.0) < 1e-6
        assert abs(result[1] + 2.0) < 1e-6

    def test_spherinder_slice(self):
        """Slicing at w = 5 along +W gives a plain sphere in local space."""
        from raymarcher.geometry.hyperplane import make_hyperplane
        from raymarcher.geometry.primitives import sd_spherinder_slice, vec3, vec4

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            hyperplane = make_hyperplane(vec4(0.0, 0.0, 0.0, 5.0), vec4(0.0, 0.0, 0.0, 1.0))
            spherinder_origin = vec4(0.0, 0.0, 0.0, 0.0)
            result[0] = sd_spherinder_slice(vec3(3.0, 4.0, 0.0), hyperplane, spherinder_origin, 2.0)
            result[1] = sd_spherinder_slice(vec3(0.0, 0.0, 0.0), hyperplane, spherinder_origin, 2.0)

        test_kernel()
        assert abs(result[0] - 3.0) < 1e-5
        assert abs(result[1] + 2.0) < 1e-5

    def test_spherinder_slice_tilted(self):
        """A tilted slice stretches the section along the tilted axis."""
        from raymarcher.geometry.hyperplane import make_hyperplane
        from raymarcher.geometry.primitives import sd_spherinder_slice, vec3, vec4

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            # Normal (1, 0, 0, 1): u = (1, 0, 0, -1) / sqrt(2), v = +Y, w = +Z
            hyperplane = make_hyperplane(vec4(0.0, 0.0, 0.0, 0.0), vec4(1.0, 0.0, 0.0, 1.0))
            result[None] = sd_spherinder_slice(
                vec3(2.0, 0.0, 0.0), hyperplane, vec4(0.0, 0.0, 0.0, 0.0), 1.0
            )

        test_kernel()
        # 4D point (sqrt(2), 0, 0, -sqrt(2)) has xyz length sqrt(2)
        assert abs(result[None] - (2.0**0.5 - 1.0)) < 1e-5


class TestCombinators:
    """Tests for min/max boolean operations."""

    def test_operations(self):
        from raymarcher.geometry.primitives import op_intersect, op_subtract, op_union

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            result[0] = op_union(1.0, -2.0)
            result[1] = op_intersect(1.0, -2.0)
            result[2] = op_subtract(1.0, -2.0)

        test_kernel()
        assert result[0] == -2.0
        assert result[1] == 1.0
        assert result[2] == 2.0
