"""Scene module for scene management and nearest-hit queries.

This module handles scene representation and ray-scene queries:

Components:
    intersection: Sphere storage and nearest-hit traversal
    manager: Unified scene manager coordinating spheres and materials
    random_spheres: The random spheres demo scene

Scene data is organized for Taichi kernels:
    - Structure-of-Arrays layout for sphere data
    - Contiguous material ID arrays with a per-id type tag
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .random_spheres import (
    RandomSpheresParams,
    create_camera,
    create_random_spheres_scene,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Random spheres module
    "RandomSpheresParams",
    "create_camera",
    "create_random_spheres_scene",
]
