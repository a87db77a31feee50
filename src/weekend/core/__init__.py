"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector algebra and random sampling utilities
    integrator: The path tracing estimator, pixel buffer and row-batch kernel
    progressive: FrameRenderer, the cooperative row-batched frame loop

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_range,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from src.weekend.core.integrator or src.weekend.core.progressive.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_in_range",
    "random_in_unit_sphere",
    "random_unit_vector",
]
