"""Random spheres scene configuration.

This module builds the "final scene" of the weekend path tracer: a huge
grey ground sphere, a lattice of small randomly coloured spheres and three
large feature spheres (glass, diffuse brown, polished metal).

The lattice covers a, b in [-11, 11). Each cell holds one small sphere of
radius 0.2 jittered within the cell, unless it would crowd the metal
feature sphere at (4, 0.2, 0). Materials are drawn per sphere:
- 80%: diffuse, albedo = random * random (per channel)
- 15%: metal, albedo in [0.5, 1), fuzz in [0, 0.5)
- 5%: glass, ior 1.5

Randomness comes from a NumPy Generator, so passing a seed reproduces the
scene exactly.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.weekend.scene.random_spheres import create_random_spheres_scene
    >>> from src.weekend.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=42)
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

import logging
from dataclasses import dataclass

import numpy as np

from src.weekend.camera.pinhole import PinholeCamera
from src.weekend.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Random Spheres Parameters (for interactive preview)
# =============================================================================


@dataclass
class RandomSpheresParams:
    """Camera parameters for the random spheres scene.

    Attributes:
        lookfrom: Camera position. Default (13, 2, 3).
        lookat: Point the camera looks at. Default the origin.
        vup: Camera up vector. Default +Y.
        vfov: Vertical field of view in degrees. Default 20.
        aspect_ratio: Image width / height. Default 16:9.

    Example:
        >>> params = RandomSpheresParams(lookfrom=(10.0, 3.0, 5.0))
        >>> scene, camera = create_random_spheres_scene(params, seed=1)
    """

    lookfrom: tuple[float, float, float] = (13.0, 2.0, 3.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 20.0
    aspect_ratio: float = 16.0 / 9.0


# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small sphere lattice: a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_RADIUS = 0.2
JITTER = 0.9

# Small spheres closer than this to KEEP_CLEAR_POINT are skipped
KEEP_CLEAR_POINT = (4.0, 0.2, 0.0)
KEEP_CLEAR_DISTANCE = 0.9

# Material draw thresholds
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.15  # diffuse + metal = 0.95

GLASS_IOR = 1.5

# Feature spheres
BIG_RADIUS = 1.0
GLASS_CENTER = (0.0, 1.0, 0.0)
DIFFUSE_CENTER = (-4.0, 1.0, 0.0)
DIFFUSE_ALBEDO = (0.4, 0.2, 0.1)
METAL_CENTER = (4.0, 1.0, 0.0)
METAL_ALBEDO = (0.7, 0.6, 0.5)
METAL_FUZZ = 0.0


# =============================================================================
# Random Spheres Factory
# =============================================================================


def create_camera(params: RandomSpheresParams | None = None) -> PinholeCamera:
    """Build the camera for the scene from its parameters."""
    if params is None:
        params = RandomSpheresParams()

    return PinholeCamera(
        lookfrom=tuple(params.lookfrom),
        lookat=tuple(params.lookat),
        vup=tuple(params.vup),
        vfov=params.vfov,
        aspect_ratio=params.aspect_ratio,
    )


def _add_small_sphere(
    scene: SceneManager,
    rng: np.random.Generator,
    center: tuple[float, float, float],
) -> None:
    """Add one lattice sphere with a randomly drawn material."""
    choose_mat = rng.random()

    if choose_mat < DIFFUSE_PROBABILITY:
        albedo = rng.random(3) * rng.random(3)
        scene.add_lambertian_sphere(center, SMALL_RADIUS, tuple(float(c) for c in albedo))
    elif choose_mat < DIFFUSE_PROBABILITY + METAL_PROBABILITY:
        albedo = rng.uniform(0.5, 1.0, 3)
        fuzz = float(rng.uniform(0.0, 0.5))
        scene.add_metal_sphere(
            center, SMALL_RADIUS, tuple(float(c) for c in albedo), fuzz
        )
    else:
        scene.add_dielectric_sphere(center, SMALL_RADIUS, GLASS_IOR)


def create_random_spheres_scene(
    params: RandomSpheresParams | None = None,
    seed: int | None = None,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the random spheres scene.

    Clears any previously loaded scene and builds:
    - The ground sphere (Lambertian, grey)
    - Up to 22 x 22 small spheres with random materials
    - Three big spheres: glass at the origin, brown diffuse behind it,
      polished metal in front of it

    Args:
        params: Camera parameters. If None, uses RandomSpheresParams().
        seed: Seed for the NumPy random generator. None draws a fresh scene.

    Returns:
        A tuple of (SceneManager, PinholeCamera). The camera still has to be
        loaded with setup_camera() before rendering.

    Example:
        >>> scene, camera = create_random_spheres_scene(seed=3)
        >>> scene.get_sphere_count() <= 1 + 22 * 22 + 3
        True
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)

    keep_clear = np.array(KEEP_CLEAR_POINT)
    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            center = np.array(
                [
                    a + JITTER * rng.random(),
                    SMALL_RADIUS,
                    b + JITTER * rng.random(),
                ]
            )
            if np.linalg.norm(center - keep_clear) > KEEP_CLEAR_DISTANCE:
                _add_small_sphere(scene, rng, tuple(float(c) for c in center))

    scene.add_dielectric_sphere(GLASS_CENTER, BIG_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere(DIFFUSE_CENTER, BIG_RADIUS, DIFFUSE_ALBEDO)
    scene.add_metal_sphere(METAL_CENTER, BIG_RADIUS, METAL_ALBEDO, METAL_FUZZ)

    logger.debug(
        f"Random spheres scene: {scene.get_sphere_count()} spheres, "
        f"{scene.get_material_count()} materials"
    )

    return scene, create_camera(params)
