"""Unit tests for the Ray type and vector utilities.

Tests cover:
- Ray construction and evaluation
- Length, normalization, dot and cross products
- Near-zero detection
- Reflection and refraction
- Schlick reflectance
- Random sampling helpers
"""

import math

import taichi as ti


class TestRay:
    """Tests for Ray construction and ray_at."""

    def test_ray_at_evaluates_point(self):
        """Test origin + t * direction."""
        from src.weekend.core.ray import make_ray, ray_at

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(ti.math.vec3(1.0, 2.0, 3.0), ti.math.vec3(0.0, 0.0, -2.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        p = result[None]
        assert abs(p[0] - 1.0) < 1e-5
        assert abs(p[1] - 2.0) < 1e-5
        assert abs(p[2] - (-2.0)) < 1e-5

    def test_ray_at_zero_is_origin(self):
        """Test that t = 0 gives the origin."""
        from src.weekend.core.ray import Ray, ray_at

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=ti.math.vec3(4.0, -1.0, 0.5), direction=ti.math.vec3(1.0, 1.0, 1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        p = result[None]
        assert abs(p[0] - 4.0) < 1e-5
        assert abs(p[1] + 1.0) < 1e-5
        assert abs(p[2] - 0.5) < 1e-5


class TestVectorOps:
    """Tests for the vector helpers."""

    def test_length_and_length_squared(self):
        """Test |(3, 4, 12)| = 13."""
        from src.weekend.core.ray import length, length_squared

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            v = ti.math.vec3(3.0, 4.0, 12.0)
            result[0] = length(v)
            result[1] = length_squared(v)

        test_kernel()
        assert abs(result[0] - 13.0) < 1e-5
        assert abs(result[1] - 169.0) < 1e-3

    def test_normalize_gives_unit_length(self):
        """Test that normalization gives unit length for assorted vectors."""
        from src.weekend.core.ray import length, normalize

        inputs = [(1.0, 0.0, 0.0), (3.0, 4.0, 0.0), (-2.0, 7.0, 0.5), (1e-3, 2e-3, -3e-3)]
        result = ti.field(dtype=ti.f32, shape=len(inputs))
        vectors = ti.Vector.field(3, dtype=ti.f32, shape=len(inputs))
        for i, v in enumerate(inputs):
            vectors[i] = v

        @ti.kernel
        def test_kernel():
            for i in vectors:
                result[i] = length(normalize(vectors[i]))

        test_kernel()
        for i in range(len(inputs)):
            assert abs(result[i] - 1.0) < 1e-5

    def test_normalize_preserves_direction(self):
        """Test that normalize((0, 0, -5)) = (0, 0, -1)."""
        from src.weekend.core.ray import normalize

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(ti.math.vec3(0.0, 0.0, -5.0))

        test_kernel()
        n = result[None]
        assert abs(n[0]) < 1e-6
        assert abs(n[1]) < 1e-6
        assert abs(n[2] + 1.0) < 1e-6

    def test_dot_and_cross(self):
        """Test dot and cross of the x and y axes."""
        from src.weekend.core.ray import cross, dot

        dot_result = ti.field(dtype=ti.f32, shape=())
        cross_result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            x = ti.math.vec3(1.0, 0.0, 0.0)
            y = ti.math.vec3(0.0, 1.0, 0.0)
            dot_result[None] = dot(x, y) + dot(x, x)
            cross_result[None] = cross(x, y)

        test_kernel()
        assert abs(dot_result[None] - 1.0) < 1e-6
        c = cross_result[None]
        assert abs(c[0]) < 1e-6
        assert abs(c[1]) < 1e-6
        assert abs(c[2] - 1.0) < 1e-6

    def test_near_zero(self):
        """Test the 1e-8 squared-length threshold."""
        from src.weekend.core.ray import near_zero

        result = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            result[0] = near_zero(ti.math.vec3(0.0, 0.0, 0.0))
            result[1] = near_zero(ti.math.vec3(1e-5, 0.0, 0.0))
            result[2] = near_zero(ti.math.vec3(1e-3, 0.0, 0.0))

        test_kernel()
        assert result[0] == 1
        assert result[1] == 1
        assert result[2] == 0


class TestReflectRefract:
    """Tests for reflect, refract and schlick_reflectance."""

    def test_reflect_flips_normal_component(self):
        """Test dot(reflect(v, n), n) = -dot(v, n) for several vectors."""
        from src.weekend.core.ray import dot, reflect

        cases = [
            ((1.0, -1.0, 0.0), (0.0, 1.0, 0.0)),
            ((0.3, -0.2, 0.9), (0.0, 0.0, -1.0)),
            ((2.0, 5.0, -1.0), (0.6, 0.8, 0.0)),
        ]
        vs = ti.Vector.field(3, dtype=ti.f32, shape=len(cases))
        ns = ti.Vector.field(3, dtype=ti.f32, shape=len(cases))
        before = ti.field(dtype=ti.f32, shape=len(cases))
        after = ti.field(dtype=ti.f32, shape=len(cases))
        for i, (v, n) in enumerate(cases):
            vs[i] = v
            ns[i] = n

        @ti.kernel
        def test_kernel():
            for i in vs:
                before[i] = dot(vs[i], ns[i])
                after[i] = dot(reflect(vs[i], ns[i]), ns[i])

        test_kernel()
        for i in range(len(cases)):
            assert abs(after[i] + before[i]) < 1e-5

    def test_refract_with_ratio_one_passes_straight(self):
        """Test that eta = 1 leaves a unit direction unchanged."""
        from src.weekend.core.ray import normalize, refract

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            uv = normalize(ti.math.vec3(1.0, -1.0, 0.0))
            result[None] = refract(uv, ti.math.vec3(0.0, 1.0, 0.0), 1.0)

        test_kernel()
        d = result[None]
        inv_sqrt2 = 1.0 / math.sqrt(2.0)
        assert abs(d[0] - inv_sqrt2) < 1e-5
        assert abs(d[1] + inv_sqrt2) < 1e-5
        assert abs(d[2]) < 1e-5

    def test_refract_obeys_snells_law(self):
        """Test sin(theta_t) = eta * sin(theta_i) entering glass."""
        from src.weekend.core.ray import normalize, refract

        result = ti.Vector.field(3, dtype=ti.f32, shape=())
        eta = 1.0 / 1.5

        @ti.kernel
        def test_kernel():
            uv = normalize(ti.math.vec3(1.0, -1.0, 0.0))
            result[None] = refract(uv, ti.math.vec3(0.0, 1.0, 0.0), eta)

        test_kernel()
        d = result[None]
        length_d = math.sqrt(d[0] ** 2 + d[1] ** 2 + d[2] ** 2)
        sin_t = abs(d[0]) / length_d
        assert abs(sin_t - eta * math.sin(math.pi / 4)) < 1e-4
        assert d[1] < 0.0

    def test_schlick_at_normal_incidence(self):
        """Test that Schlick gives r0 when cosine = 1."""
        from src.weekend.core.ray import schlick_reflectance

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = schlick_reflectance(1.0, 1.5)
            result[1] = schlick_reflectance(0.0, 1.5)

        test_kernel()
        assert abs(result[0] - 0.04) < 1e-5
        # Grazing incidence reflects everything
        assert abs(result[1] - 1.0) < 1e-5


class TestRandomSampling:
    """Tests for the random sampling helpers."""

    def test_random_in_unit_sphere_inside_ball(self):
        """Test that every sample has squared length < 1."""
        from src.weekend.core.ray import length_squared, random_in_unit_sphere

        n = 2000
        result = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                result[i] = length_squared(random_in_unit_sphere())

        test_kernel()
        samples = result.to_numpy()
        assert (samples < 1.0).all()
        assert (samples >= 0.0).all()

    def test_random_unit_vector_is_unit_and_centered(self):
        """Test unit length and roughly zero mean."""
        from src.weekend.core.ray import random_unit_vector

        n = 4000
        result = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                result[i] = random_unit_vector()

        test_kernel()
        samples = result.to_numpy()
        lengths = (samples**2).sum(axis=1) ** 0.5
        assert abs(lengths - 1.0).max() < 1e-4
        assert abs(samples.mean(axis=0)).max() < 0.1

    def test_random_in_range_bounds(self):
        """Test that components fall in [lo, hi)."""
        from src.weekend.core.ray import random_in_range

        n = 1000
        result = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                result[i] = random_in_range(0.5, 1.0)

        test_kernel()
        samples = result.to_numpy()
        assert samples.min() >= 0.5
        assert samples.max() <= 1.0
