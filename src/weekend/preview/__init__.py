"""Preview module for output and visualization.

This module handles rendering output and interactive preview:

Components:
    display: Matplotlib-based preview display
    export: PPM/PNG image export utilities
    interactive: Taichi GGUI-based interactive preview window

Features:
    - Progressive preview that fills in row batch by row batch
    - Plain-text PPM export (bottom row first)
    - PNG export via Pillow

Example:
    >>> from src.weekend.preview import show_preview, save_png
    >>> from src.weekend.core.progressive import FrameRenderer
    >>>
    >>> renderer = FrameRenderer(320, 180)
    >>> renderer.render()
    >>> show_preview(renderer)
    >>> save_png(renderer, "output.png")

For interactive GGUI preview:
    >>> from src.weekend.preview import InteractivePreview
    >>> preview = InteractivePreview(400, 225)
    >>> preview.run_interactive()
"""

from src.weekend.preview.display import (
    format_title,
    show_preview,
    show_progressive,
)
from src.weekend.preview.export import (
    image_to_rgb,
    pixels_to_ppm,
    save_png,
    save_ppm,
)
from src.weekend.preview.interactive import InteractivePreview

__all__ = [
    # Interactive preview
    "InteractivePreview",
    # Display functions
    "show_preview",
    "show_progressive",
    "format_title",
    # Export functions
    "pixels_to_ppm",
    "save_ppm",
    "save_png",
    "image_to_rgb",
]
