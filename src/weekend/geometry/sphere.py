"""Sphere primitive and ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord returned by every
intersection query, and the intersection routine itself.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

which expands to the quadratic a*t^2 + 2*half_b*t + c = 0 with:
    a = dot(direction, direction)
    half_b = dot(origin - center, direction)
    c = |origin - center|^2 - radius^2

The (t_min, t_max) window lets the scene query find the nearest hit by
shrinking t_max to the closest t found so far.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.weekend.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material_id: The unified material ID shared with the scene manager.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    A record is produced by value for every query; ``hit`` tells whether the
    other fields carry an intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: The ray parameter of the intersection.
        point: The 3D intersection point.
        normal: Unit surface normal, always facing against the incoming ray.
        front_face: 1 if the ray hit the outward-facing side, 0 otherwise.
        material_id: The material ID of the hit primitive (-1 on a miss).
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection inside the open interval (t_min, t_max).

    The smaller root is preferred; if it lies outside the interval the larger
    root is tried. A negative discriminant is a miss, never an error.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Lower bound on t (avoids self-intersection).
        t_max: Upper bound on t (closest hit found so far).

    Returns:
        A HitRecord; check the ``hit`` field to determine if an
        intersection occurred.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = root > t_min and root < t_max
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = root > t_min and root < t_max

        if valid:
            point = ray_origin + root * ray_direction
            outward_normal = (point - sphere.center) / sphere.radius

            front_face = 0
            normal = -outward_normal
            if tm.dot(ray_direction, outward_normal) < 0.0:
                front_face = 1
                normal = outward_normal

            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere inside a Taichi kernel."""
    return Sphere(center=center, radius=radius, material_id=material_id)
