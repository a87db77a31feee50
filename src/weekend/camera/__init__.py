"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole (perspective) camera model

Camera responsibilities:
    - Build the look-at orthonormal basis from lookfrom/lookat/vup
    - Size the viewport from the vertical field of view and aspect ratio
    - Transform normalized (s, t) image coordinates to world-space rays

Ray generation uses normalized coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .pinhole import (
    PinholeCamera,
    compute_camera_frame,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "compute_camera_frame",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
