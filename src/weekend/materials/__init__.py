"""Materials module for surface scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with fuzz
    dielectric: Clear glass-like materials (reflection or refraction)

Each material provides a ``scatter_*`` Taichi function returning
``(scattered_direction, attenuation, did_scatter)`` and a parameter registry
stored in Taichi fields. The set of materials is closed; the integrator
dispatches on the material type tag kept by the scene manager.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_with_draw,
    will_reflect,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_with_sample,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_fuzz_value,
    get_metal_material_count,
    scatter_metal,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_with_sample",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_albedo",
    "get_lambertian_material_count",
    # Metal
    "scatter_metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_albedo",
    "get_metal_fuzz",
    "get_metal_fuzz_value",
    "get_metal_material_count",
    # Dielectric
    "scatter_dielectric",
    "scatter_dielectric_with_draw",
    "will_reflect",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_ior",
    "get_dielectric_material_count",
]
