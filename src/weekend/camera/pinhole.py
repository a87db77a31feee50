"""Pinhole camera model for perspective projection ray generation.

The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

There is no lens model: every ray starts at the camera origin.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.weekend.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0/9.0
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from src.weekend.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport vectors for ray computation
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())  # Lower-left of viewport


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def compute_camera_frame(camera: PinholeCamera) -> dict[str, np.ndarray]:
    """Derive the camera basis and viewport from its configuration.

    Args:
        camera: Camera configuration with position, orientation, and FOV.

    Returns:
        Dictionary of float64 arrays: origin, u, v, w, horizontal, vertical,
        lower_left.

    Raises:
        ValueError: If the configuration cannot define a camera frame
            (lookfrom == lookat, vup parallel to the view direction,
            vfov outside (0, 180) or non-positive aspect ratio).
    """
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"Vertical field of view {camera.vfov} must be in (0, 180) degrees")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"Aspect ratio {camera.aspect_ratio} must be positive")

    theta = math.radians(camera.vfov)
    viewport_height = 2.0 * math.tan(theta / 2.0)
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w_norm = np.linalg.norm(w)
    if w_norm == 0.0:
        raise ValueError("Camera lookfrom and lookat must differ")
    w = w / w_norm

    u = np.cross(vup, w)
    u_norm = np.linalg.norm(u)
    if u_norm == 0.0:
        raise ValueError("Camera vup must not be parallel to the view direction")
    u = u / u_norm

    v = np.cross(w, u)

    horizontal = viewport_width * u
    vertical = viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - w

    return {
        "origin": lookfrom,
        "u": u,
        "v": v,
        "w": w,
        "horizontal": horizontal,
        "vertical": vertical,
        "lower_left": lower_left,
    }


def setup_camera(camera: PinholeCamera) -> None:
    """Load a camera configuration into the Taichi camera fields.

    Must be called before rendering and again whenever the viewpoint changes.

    Raises:
        ValueError: If the configuration is degenerate (see compute_camera_frame).
    """
    frame = compute_camera_frame(camera)

    _camera_origin[None] = frame["origin"].tolist()
    _camera_u[None] = frame["u"].tolist()
    _camera_v[None] = frame["v"].tolist()
    _camera_w[None] = frame["w"].tolist()
    _viewport_horizontal[None] = frame["horizontal"].tolist()
    _viewport_vertical[None] = frame["vertical"].tolist()
    _lower_left_corner[None] = frame["lower_left"].tolist()


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    Returns:
        A Ray from the camera origin toward
        lower_left + s * horizontal + t * vertical. The direction is not
        normalized.
    """
    origin = _camera_origin[None]
    direction = (
        _lower_left_corner[None]
        + s * _viewport_horizontal[None]
        + t * _viewport_vertical[None]
        - origin
    )
    return make_ray(origin, direction)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
    """
    fields = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, vec_field in fields.items():
        value = vec_field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
