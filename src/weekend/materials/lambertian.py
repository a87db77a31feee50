"""Lambertian (ideal diffuse) material implementation.

The scattered direction is the surface normal plus a random unit vector,
which approximates a cosine-weighted distribution over the hemisphere
around the normal. Every hit scatters and the attenuation is the albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.weekend.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, normal)
"""

import taichi as ti
import taichi.math as tm

from src.weekend.core.ray import near_zero, random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian_with_sample(albedo: vec3, normal: vec3, unit_sample: vec3):
    """Scatter off a Lambertian surface using a given unit vector sample.

    If the normal and the sample nearly cancel, the normal itself is used so
    the scattered ray never has a zero direction.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal at the hit point.
        unit_sample: A unit vector, uniformly distributed for unbiased results.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter); the
        direction is not normalized and did_scatter is always 1.
    """
    scattered_direction = normal + unit_sample

    if near_zero(scattered_direction):
        scattered_direction = normal

    # Diffuse surfaces never absorb the ray outright
    did_scatter = 1
    attenuation = albedo

    return scattered_direction, attenuation, did_scatter


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Sample a scattered ray direction for Lambertian material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    return scatter_lambertian_with_sample(albedo, normal, random_unit_vector())


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 1024

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]
