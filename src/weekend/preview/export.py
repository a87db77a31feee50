"""Image export utilities for rendered frames.

This module saves the RGBA pixel buffer produced by the frame renderer.

Supported formats:
    - PPM (plain-text P3, bottom row first)
    - PNG (8-bit RGB via Pillow)

Both writers accept either a FrameRenderer or a (height, width, 4) uint8
array with the top-left pixel at [0, 0].

Example:
    >>> from src.weekend.preview.export import save_png, save_ppm
    >>> from src.weekend.core.progressive import FrameRenderer
    >>>
    >>> renderer = FrameRenderer(320, 180)
    >>> renderer.render()
    >>> save_png(renderer, "render.png")
    >>> save_ppm(renderer, "render.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Union

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from src.weekend.core.progressive import FrameRenderer

logger = logging.getLogger(__name__)

PixelSource = Union["FrameRenderer", npt.NDArray[np.uint8]]


def _as_pixels(source: PixelSource) -> npt.NDArray[np.uint8]:
    """Resolve a renderer or array into a (height, width, 4) uint8 array.

    Integer arrays of other dtypes are accepted when every value fits in a byte.

    Raises:
        ValueError: If the array does not have shape (height, width, 3 or 4),
            is not an integer array, or holds values outside [0, 255].
    """
    if hasattr(source, "get_pixels"):
        pixels = source.get_pixels()
    else:
        pixels = np.asarray(source)

    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ValueError(
            f"Pixel array shape {pixels.shape} must be (height, width, 3) or (height, width, 4)"
        )
    if pixels.dtype != np.uint8:
        if not np.issubdtype(pixels.dtype, np.integer):
            raise ValueError(f"Pixel array dtype {pixels.dtype} must be an integer type")
        if pixels.size and (pixels.min() < 0 or pixels.max() > 255):
            raise ValueError(
                f"Pixel values must be in [0, 255], got range "
                f"[{pixels.min()}, {pixels.max()}]"
            )
    return pixels.astype(np.uint8, copy=False)


def pixels_to_ppm(source: PixelSource) -> str:
    """Encode pixels as a plain-text PPM (P3) document.

    The header is ``P3``, the dimensions, and the maximum value 255. Each pixel
    follows on its own line as ``R G B``, starting from the bottom row and
    going left to right within a row. Alpha is dropped.

    Args:
        source: A FrameRenderer or a (height, width, 3|4) uint8 array.

    Returns:
        The PPM document, ending with a newline.
    """
    pixels = _as_pixels(source)
    height, width = pixels.shape[:2]

    lines = ["P3", f"{width} {height}", "255"]
    for row in pixels[::-1]:
        lines.extend(f"{r} {g} {b}" for r, g, b in row[:, :3].tolist())

    return "\n".join(lines) + "\n"


def save_ppm(source: PixelSource, filepath: str | Path) -> None:
    """Save pixels as a plain-text PPM file.

    Args:
        source: A FrameRenderer or a (height, width, 3|4) uint8 array.
        filepath: Output file path (should end in .ppm).
    """
    Path(filepath).write_text(pixels_to_ppm(source), encoding="ascii")
    logger.info(f"Saved PPM: {filepath}")


def image_to_rgb(source: PixelSource) -> npt.NDArray[np.uint8]:
    """Drop the alpha channel, giving a (height, width, 3) uint8 array."""
    return np.ascontiguousarray(_as_pixels(source)[:, :, :3])


def save_png(source: PixelSource, filepath: str | Path) -> None:
    """Save pixels as an 8-bit RGB PNG file.

    The pixel buffer is already gamma corrected, so values are written as is.

    Args:
        source: A FrameRenderer or a (height, width, 3|4) uint8 array.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(image_to_rgb(source))
    pil_image.save(filepath)
    logger.info(f"Saved PNG: {filepath}")
