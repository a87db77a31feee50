"""Taichi implementation of the weekend path tracer.

This package renders sphere scenes with a Monte Carlo path tracer written in
Taichi, with support for:
- Lambertian, metal and dielectric (glass) materials
- A look-at pinhole camera
- Row-batched frame rendering with cancellation and resume
- The random spheres demo scene

Subpackages:
    core: Ray type, vector utilities, integrator and frame loop
    geometry: Sphere primitive and hit records
    materials: Scattering models and their parameter registries
    scene: Scene management and nearest-hit queries
    camera: Camera model with ray generation
    preview: Image export and preview windows
"""

__version__ = "0.1.0"
