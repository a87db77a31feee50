"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, HitRecord and ray-sphere intersection

Spheres are the only primitive. Intersection routines are Taichi functions
(@ti.func) so they inline into the rendering kernels.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
]
