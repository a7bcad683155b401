"""Unit tests for Ray data structure and vector utilities."""

import taichi as ti


class TestRay:
    """Tests for Ray dataclass and ray_at."""

    def test_ray_at(self):
        """Test point evaluation along a ray."""
        from raymarcher.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 4.0)

        test_kernel()
        p = result[None]
        assert abs(p[0] - 1.0) < 1e-6
        assert abs(p[1] - 2.0) < 1e-6
        assert abs(p[2] + 1.0) < 1e-6


class TestSafeNormalize:
    """Tests for guarded normalization."""

    def test_normalize_vec3(self):
        from raymarcher.core.ray import safe_normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = safe_normalize(vec3(3.0, 0.0, 4.0))

        test_kernel()
        n = result[None]
        assert abs(n[0] - 0.6) < 1e-6
        assert abs(n[1]) < 1e-6
        assert abs(n[2] - 0.8) < 1e-6

    def test_zero_vector_gives_zero(self):
        """A zero-length input must not produce NaN."""
        from raymarcher.core.ray import safe_normalize, vec3, vec4

        result3 = ti.field(dtype=ti.math.vec3, shape=())
        result4 = ti.field(dtype=ti.math.vec4, shape=())

        @ti.kernel
        def test_kernel():
            result3[None] = safe_normalize(vec3(0.0, 0.0, 0.0))
            result4[None] = safe_normalize(vec4(0.0, 0.0, 0.0, 0.0))

        test_kernel()
        for c in result3[None]:
            assert c == 0.0
        for c in result4[None]:
            assert c == 0.0

    def test_vec4_unit_length(self):
        from raymarcher.core.ray import safe_normalize, vec4

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = ti.math.length(safe_normalize(vec4(1.0, 2.0, -3.0, 4.0)))

        test_kernel()
        assert abs(result[None] - 1.0) < 1e-6


class TestVectorHelpers:
    """Tests for reflect and axis vectors."""

    def test_reflect(self):
        """Reflecting (1, -1, 0) about +Y gives (1, 1, 0)."""
        from raymarcher.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_axis_vectors(self):
        from raymarcher.core.ray import axis_vector3, axis_vector4

        result3 = ti.Vector.field(3, dtype=ti.f32, shape=3)
        result4 = ti.Vector.field(4, dtype=ti.f32, shape=4)

        @ti.kernel
        def test_kernel():
            for i in range(3):
                result3[i] = axis_vector3(i)
            for i in range(4):
                result4[i] = axis_vector4(i)

        test_kernel()
        import numpy as np

        assert np.allclose(result3.to_numpy(), np.identity(3))
        assert np.allclose(result4.to_numpy(), np.identity(4))
