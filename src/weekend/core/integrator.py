"""Path tracing integrator and row-batched frame kernel.

This module implements the radiance estimator and the kernel that turns it
into pixels.

The estimator follows a camera ray through the scene: at each hit the
material either absorbs the ray (black) or scatters it, tinting whatever
light the scattered ray gathers by the material attenuation. Rays that
escape pick up the sky gradient. Paths longer than the depth budget
contribute black. The recursion is unrolled into a loop that carries the
product of attenuations, which gives the same estimate as the recursive
definition.

Pixels are produced a batch of rows at a time so a host can interleave
redraws between batches (see ``src.weekend.core.progressive``). Within a batch
every pixel runs in parallel and each Taichi thread draws from its own
random stream.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.weekend.core.integrator import (
    ...     setup_render_target, render_rows, get_pixels_numpy
    ... )
    >>> from src.weekend.scene.random_spheres import create_random_spheres_scene
    >>> from src.weekend.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=1)
    >>> setup_camera(camera)
    >>> setup_render_target(320, 180)
    >>> render_rows(0, 180, samples_per_pixel=10, max_depth=10)
    >>> pixels = get_pixels_numpy()  # (180, 320, 4) uint8
"""

import logging
import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.weekend.camera.pinhole import get_ray
from src.weekend.core.ray import Ray, normalize
from src.weekend.materials.dielectric import get_dielectric_ior, scatter_dielectric
from src.weekend.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from src.weekend.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from src.weekend.scene.intersection import intersect_scene
from src.weekend.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (path length)
MAX_DEPTH = 10

# Ray parameter window; T_MIN keeps scattered rays off the surface they left
T_MIN = 0.001
T_MAX = math.inf

# Sky gradient endpoints (straight down -> straight up)
HORIZON_COLOR = (1.0, 1.0, 1.0)
ZENITH_COLOR = (0.7, 0.8, 1.0)

# Largest channel value before byte conversion
MAX_CHANNEL = 0.999

# =============================================================================
# Render Target (Pixel Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# RGBA pixel buffer indexed [row, column], row 0 at the top of the image
_pixel_buffer = ti.Vector.field(4, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image dimensions and clear the pixel buffer.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is below 1 or exceeds the maximum size.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 1x1")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()
    logger.debug(f"Render target set up at {width}x{height}")


def clear_render_target() -> None:
    """Clear the pixel buffer to zero."""
    _pixel_buffer.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scattering function of the hit material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material ids absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation, did_scatter = scatter_lambertian(albedo, normal)

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            ior, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient: white looking down, light blue looking up."""
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * vec3(0.7, 0.8, 1.0)


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Equivalent to the recursive estimator
        color(ray, d) = 0                                  if d <= 0
                      = attenuation * color(scattered, d-1) on scatter
                      = 0                                  on absorption
                      = background(ray)                    on miss

    Args:
        ray: The ray to trace (direction of any length).
        max_depth: Number of surface interactions allowed.

    Returns:
        The linear RGB radiance estimate (unclamped).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction
    depth = max_depth
    active = 1

    while active == 1:
        if depth <= 0:
            # Path length cutoff
            active = 0
        else:
            rec = intersect_scene(origin, direction, T_MIN, T_MAX)
            if rec.hit == 0:
                color = throughput * background_color(direction)
                active = 0
            else:
                scattered, attenuation, did_scatter = _scatter_material(
                    rec.material_id, direction, rec.normal, rec.front_face
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered
                    depth -= 1

    return color


@ti.func
def sample_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Average ``samples_per_pixel`` jittered estimates for one pixel.

    Args:
        pixel_i: Column, 0 at the left.
        pixel_j: Row, 0 at the top.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of independent samples.
        max_depth: Depth budget for each path.

    Returns:
        The mean linear radiance over all samples.
    """
    # Single-pixel images still map their only pixel onto the viewport
    u_scale = 1.0 / ti.cast(ti.max(width - 1, 1), ti.f32)
    v_scale = 1.0 / ti.cast(ti.max(height - 1, 1), ti.f32)

    total = vec3(0.0, 0.0, 0.0)
    for _ in range(samples_per_pixel):
        u = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) * u_scale
        v = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) * v_scale
        # Rows count down from the top, camera t counts up from the bottom
        total += ray_color(get_ray(u, 1.0 - v), max_depth)

    return total / ti.cast(samples_per_pixel, ti.f32)


@ti.func
def to_rgba8(color: vec3):
    """Gamma-correct (gamma 2), clamp to [0, 0.999] and quantize to bytes."""
    rgb = tm.clamp(ti.sqrt(color), 0.0, MAX_CHANNEL)
    return ti.Vector(
        [
            ti.cast(ti.cast(256.0 * rgb[0], ti.i32), ti.u8),
            ti.cast(ti.cast(256.0 * rgb[1], ti.i32), ti.u8),
            ti.cast(ti.cast(256.0 * rgb[2], ti.i32), ti.u8),
            ti.cast(255, ti.u8),
        ]
    )


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_count: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Render ``row_count`` rows starting at ``row_start`` into the pixel buffer."""
    for r, i in ti.ndrange(row_count, width):
        j = row_start + r
        if j < height:
            color = sample_pixel(i, j, width, height, samples_per_pixel, max_depth)
            _pixel_buffer[j, i] = to_rgba8(color)


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Return the mean linear radiance of one pixel without touching the buffer."""
    return sample_pixel(pixel_i, pixel_j, width, height, samples_per_pixel, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_rows(
    row_start: int,
    row_count: int,
    samples_per_pixel: int,
    max_depth: int = MAX_DEPTH,
) -> None:
    """Render a batch of rows into the pixel buffer.

    Rows past the bottom of the image are ignored, so the last batch may be
    requested at full size.

    Args:
        row_start: First row to render (0 = top).
        row_count: Number of rows in the batch.
        samples_per_pixel: Samples averaged per pixel.
        max_depth: Depth budget for each path.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_rows(row_start, row_count, width, height, samples_per_pixel, max_depth)


def render_frame(samples_per_pixel: int, max_depth: int = MAX_DEPTH) -> None:
    """Render every row of the image in one kernel launch."""
    _check_render_target_initialized()

    _, height = get_image_dimensions()
    render_rows(0, height, samples_per_pixel, max_depth)


def render_pixel(
    pixel_i: int,
    pixel_j: int,
    samples_per_pixel: int = 1,
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate the linear color of a single pixel.

    Intended for testing and debugging; the pixel buffer is left untouched.

    Args:
        pixel_i: Column (0 = left).
        pixel_j: Row (0 = top).
        samples_per_pixel: Samples averaged.
        max_depth: Depth budget for each path.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, samples_per_pixel, max_depth)

    return (float(color[0]), float(color[1]), float(color[2]))


def get_pixels_numpy() -> npt.NDArray[np.uint8]:
    """Get the active region of the pixel buffer.

    Returns:
        Array of shape (height, width, 4), dtype uint8, RGBA with the top-left
        pixel at [0, 0].

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_buffer = _pixel_buffer.to_numpy()
    return np.ascontiguousarray(full_buffer[:height, :width, :]).astype(np.uint8)
