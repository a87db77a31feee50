"""Tests for the path tracing integrator.

This module tests the core path tracing functionality including:
- Render target setup and validation
- Sky background gradient
- Depth cutoff and absorption
- Mirror bounces through the material dispatch
- Row-batch rendering and byte conversion
- End-to-end render of a single-sphere scene, including 1 spp at depth 1

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import math

import numpy as np
import pytest
import taichi as ti


def _trace(origin, direction, max_depth):
    """Run ray_color for one ray and return the color as a numpy array."""
    from src.weekend.core.integrator import ray_color
    from src.weekend.core.ray import make_ray

    result = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(o: ti.math.vec3, d: ti.math.vec3, depth: ti.i32):
        result[None] = ray_color(make_ray(o, d), depth)

    test_kernel(ti.math.vec3(*origin), ti.math.vec3(*direction), max_depth)
    return result.to_numpy()


def _sky(direction):
    """Python reference for the background gradient."""
    d = np.asarray(direction, dtype=np.float64)
    t = 0.5 * (d[1] / np.linalg.norm(d) + 1.0)
    return (1.0 - t) * np.array([1.0, 1.0, 1.0]) + t * np.array([0.7, 0.8, 1.0])


def _to_byte(c):
    return math.floor(256.0 * min(max(math.sqrt(c), 0.0), 0.999))


def _corner_sky_bytes():
    """Byte range of the sky over the top-left pixel of an 11x11, 90 degree view.

    The pixel footprint covers x in [-1, -0.8) and y in (0.8, 1] at z = -1.
    """
    corners = [_sky((x, y, -1.0)) for x in (-1.0, -0.8) for y in (0.8, 1.0)]
    lo = np.min(corners, axis=0)
    hi = np.max(corners, axis=0)
    return [_to_byte(c) for c in lo], [_to_byte(c) for c in hi]


class TestRenderTargetSetup:
    """Test render target initialization and management."""

    def test_setup_sets_dimensions(self):
        from src.weekend.core.integrator import get_image_dimensions, setup_render_target

        setup_render_target(64, 48)
        assert get_image_dimensions() == (64, 48)

    def test_setup_clears_pixels(self, single_sphere_camera):
        from src.weekend.camera.pinhole import setup_camera
        from src.weekend.core.integrator import (
            get_pixels_numpy,
            render_frame,
            setup_render_target,
        )

        setup_camera(single_sphere_camera)
        setup_render_target(4, 4)
        render_frame(samples_per_pixel=1)
        setup_render_target(4, 4)

        assert (get_pixels_numpy() == 0).all()

    @pytest.mark.parametrize("size", [(0, 10), (10, 0), (2049, 10), (10, 2049)])
    def test_invalid_dimensions_rejected(self, size):
        from src.weekend.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(*size)

    def test_render_before_setup_raises(self):
        from src.weekend.core import integrator

        previous = integrator._render_target_initialized[None]
        integrator._render_target_initialized[None] = 0
        try:
            with pytest.raises(RuntimeError):
                integrator.render_rows(0, 1, 1)
            with pytest.raises(RuntimeError):
                integrator.get_pixels_numpy()
        finally:
            integrator._render_target_initialized[None] = previous


class TestRayColor:
    """Tests for the radiance estimator."""

    def test_depth_zero_is_black(self):
        """No bounces allowed means no light, even for escaping rays."""
        color = _trace((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0)

        assert np.allclose(color, 0.0)

    def test_negative_depth_is_black(self):
        color = _trace((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), -3)

        assert np.allclose(color, 0.0)

    @pytest.mark.parametrize(
        "direction",
        [(0.0, 1.0, 0.0), (0.0, -1.0, 0.0), (1.0, 0.0, 0.0), (0.3, 0.5, -2.0)],
    )
    def test_miss_returns_sky_gradient(self, direction):
        color = _trace((0.0, 0.0, 0.0), direction, 10)

        assert np.allclose(color, _sky(direction), atol=1e-5)

    def test_black_diffuse_absorbs_everything(self):
        from src.weekend.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -2.0), 1.0, (0.0, 0.0, 0.0))

        color = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10)
        assert np.allclose(color, 0.0)

    def test_mirror_bounce_tints_sky(self):
        """A perfect mirror sends the ray back toward +Z with albedo applied."""
        from src.weekend.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -2.0), 1.0, (0.5, 0.25, 1.0), 0.0)

        color = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10)
        expected = np.array([0.5, 0.25, 1.0]) * _sky((0.0, 0.0, 1.0))
        assert np.allclose(color, expected, atol=1e-5)

    def test_depth_budget_counts_bounces(self):
        """One bounce needs a depth of 2: the hit and the escaping ray."""
        from src.weekend.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -2.0), 1.0, (0.5, 0.5, 0.5), 0.0)

        assert np.allclose(_trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 1), 0.0)
        assert not np.allclose(_trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 2), 0.0)

    def test_glass_never_absorbs(self):
        """A glass sphere alone in the sky always returns a sky color."""
        from src.weekend.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, -3.0), 1.0, 1.5)

        color = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 50)
        assert color.min() >= 0.7 - 1e-5
        assert color.max() <= 1.0 + 1e-5


class TestRowBatches:
    """Tests for row-batch rendering into the pixel buffer."""

    def test_only_requested_rows_written(self, single_sphere_camera):
        from src.weekend.camera.pinhole import setup_camera
        from src.weekend.core.integrator import get_pixels_numpy, render_rows, setup_render_target

        setup_camera(single_sphere_camera)
        setup_render_target(8, 8)
        render_rows(2, 2, samples_per_pixel=1)
        pixels = get_pixels_numpy()

        assert pixels.shape == (8, 8, 4)
        assert pixels.dtype == np.uint8
        assert (pixels[2:4, :, 3] == 255).all()
        assert (pixels[:2] == 0).all()
        assert (pixels[4:] == 0).all()

    def test_batch_past_last_row_is_clipped(self, single_sphere_camera):
        from src.weekend.camera.pinhole import setup_camera
        from src.weekend.core.integrator import get_pixels_numpy, render_rows, setup_render_target

        setup_camera(single_sphere_camera)
        setup_render_target(5, 5)
        render_rows(4, 4, samples_per_pixel=1)

        assert (get_pixels_numpy()[4, :, 3] == 255).all()

    def test_single_pixel_image(self, single_sphere_camera):
        from src.weekend.camera.pinhole import setup_camera
        from src.weekend.core.integrator import get_pixels_numpy, render_frame, setup_render_target

        setup_camera(single_sphere_camera)
        setup_render_target(1, 1)
        render_frame(samples_per_pixel=4)
        pixels = get_pixels_numpy()

        assert pixels.shape == (1, 1, 4)
        assert pixels[0, 0, 3] == 255
        # Sky only: blue channel saturates
        assert pixels[0, 0, 2] == 255

    def test_bytes_are_gamma_corrected(self):
        """A pure sky straight up encodes as floor(256 * sqrt(c))."""
        from src.weekend.camera.pinhole import PinholeCamera, setup_camera
        from src.weekend.core.integrator import get_pixels_numpy, render_frame, setup_render_target

        # Very narrow view straight up: every sample sees (0.7, 0.8, 1.0)
        setup_camera(
            PinholeCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 1.0, 0.0),
                vup=(0.0, 0.0, -1.0),
                vfov=0.01,
                aspect_ratio=1.0,
            )
        )
        setup_render_target(3, 3)
        render_frame(samples_per_pixel=2)
        pixels = get_pixels_numpy()

        for channel, value in enumerate((0.7, 0.8, 1.0)):
            expected = _to_byte(value)
            assert abs(int(pixels[1, 1, channel]) - expected) <= 1

    def test_render_pixel_returns_linear_color(self, single_sphere_camera):
        from src.weekend.camera.pinhole import setup_camera
        from src.weekend.core.integrator import render_pixel, setup_render_target

        setup_camera(single_sphere_camera)
        setup_render_target(11, 11)
        color = render_pixel(5, 5, samples_per_pixel=4)

        assert len(color) == 3
        # Center of the image looks down -Z at the horizon
        assert np.allclose(color, _sky((0.0, 0.0, -1.0)), atol=0.05)


class TestEndToEnd:
    """Full render of a single diffuse sphere."""

    def test_single_sphere_render(self, single_sphere_camera):
        from src.weekend.camera.pinhole import setup_camera
        from src.weekend.core.integrator import get_pixels_numpy, render_frame, setup_render_target
        from src.weekend.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.8, 0.1, 0.1))
        setup_camera(single_sphere_camera)

        width = height = 11
        setup_render_target(width, height)
        render_frame(samples_per_pixel=8)
        pixels = get_pixels_numpy()

        assert (pixels[:, :, 3] == 255).all()

        # Center pixel sees the red sphere, not the sky
        center = pixels[height // 2, width // 2]
        sky_center = [_to_byte(c) for c in _sky((0.0, 0.0, -1.0))]
        assert int(center[1]) < sky_center[1] - 50
        assert int(center[0]) > int(center[1])

        # Top-left pixel sees only sky
        corner = pixels[0, 0]
        lo, hi = _corner_sky_bytes()
        for channel in range(3):
            assert lo[channel] - 1 <= int(corner[channel]) <= hi[channel] + 1

    def test_one_sample_one_bounce(self, single_sphere_camera):
        """With a depth budget of 1, sphere hits are black and misses are sky."""
        from src.weekend.camera.pinhole import setup_camera
        from src.weekend.core.integrator import get_pixels_numpy, render_frame, setup_render_target
        from src.weekend.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.8, 0.1, 0.1))
        setup_camera(single_sphere_camera)

        width = height = 11
        setup_render_target(width, height)
        render_frame(samples_per_pixel=1, max_depth=1)
        pixels = get_pixels_numpy()

        assert (pixels[:, :, 3] == 255).all()

        # The scattered ray from the sphere has no depth left
        center = pixels[height // 2, width // 2]
        assert center.tolist() == [0, 0, 0, 255]

        corner = pixels[0, 0]
        lo, hi = _corner_sky_bytes()
        for channel in range(3):
            assert lo[channel] - 1 <= int(corner[channel]) <= hi[channel] + 1
        assert corner[2] == 255
