"""Ray data structure and vector utilities for Monte Carlo ray tracing.

This module provides the fundamental Ray dataclass and the vector algebra used
by every other part of the tracer. Vectors are Taichi ``vec3`` values, so every
operation returns a new vector; the same type stands for points, directions
and linear RGB colors (component-wise multiply is the color attenuation).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Squared length below which a scatter direction counts as degenerate
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to
            be unit length; camera rays and scattered rays usually are not.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point ray.origin + t * ray.direction."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Return ``v / length(v)``.

    A zero-length input is a caller error; the result is then non-finite.
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether a vector is degenerate (squared length below 1e-8).

    Returns:
        1 if the vector is near zero, 0 otherwise.
    """
    result = 0
    if length_squared(v) < NEAR_ZERO_EPSILON:
        result = 1
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a unit normal: v - 2 (v . n) n."""
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(uv: vec3, normal: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The refracted ray is split into a component perpendicular to the normal
    and a component parallel to it. The caller decides beforehand whether
    refraction is possible; this function does not detect total internal
    reflection.

    Args:
        uv: The incoming direction (unit length).
        normal: The unit surface normal, pointing against ``uv``.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-uv, normal), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Approximate Fresnel reflectance with Schlick's formula.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0)(1 - cosine)^5 with r0 = ((1 - ref_idx) / (1 + ref_idx))^2.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_range(lo: ti.f32, hi: ti.f32) -> vec3:
    """Generate a vector with each component uniform in [lo, hi)."""
    return vec3(
        lo + ti.random(ti.f32) * (hi - lo),
        lo + ti.random(ti.f32) * (hi - lo),
        lo + ti.random(ti.f32) * (hi - lo),
    )


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a point uniformly distributed inside the unit ball.

    Rejection-samples the [-1, 1]^3 cube. The loop has no iteration cap so
    the distribution stays exactly uniform; the acceptance rate is pi/6, so
    it needs about 1.9 draws on average.

    Returns:
        A random point with squared length < 1.
    """
    p = random_in_range(-1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = random_in_range(-1.0, 1.0)
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector by normalizing random_in_unit_sphere()."""
    return normalize(random_in_unit_sphere())
