"""Matplotlib-based preview display for rendered frames.

This module shows the renderer's pixel buffer in a Matplotlib figure, either
once the frame is finished or while it is being rendered row batch by row
batch.

Features:
    - Static preview window
    - Progressive preview that redraws between row batches
    - Closing the progressive window cancels the render

Example:
    >>> from src.weekend.preview.display import show_preview
    >>> from src.weekend.core.progressive import FrameRenderer
    >>>
    >>> renderer = FrameRenderer(320, 180)
    >>> renderer.render()
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.weekend.core.progressive import FrameRenderer


def format_title(renderer: FrameRenderer) -> str:
    """Describe the render state, e.g. ``"Render Preview - 10 SPP (90/180 rows)"``."""
    title = f"Render Preview - {renderer.settings.samples_per_pixel} SPP"
    if not renderer.is_complete:
        title += f" ({renderer.rows_done}/{renderer.height} rows)"
    return title


def show_preview(
    renderer: FrameRenderer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display the current pixel buffer as a Matplotlib figure.

    Args:
        renderer: The FrameRenderer instance to display.
        title: Custom title (default shows samples per pixel and progress).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(renderer.get_pixels())
    ax.axis("off")
    ax.set_title(format_title(renderer) if title is None else title)

    plt.tight_layout()
    plt.show(block=block)


def show_progressive(
    renderer: FrameRenderer,
    *,
    redraw_every: int = 8,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> bool:
    """Render the remaining rows while showing progress in a Matplotlib window.

    The figure is redrawn every ``redraw_every`` batches and once more when
    the frame finishes. Closing the window cancels the render at the next
    batch boundary.

    Args:
        renderer: The FrameRenderer to drive.
        redraw_every: Number of row batches between redraws.
        figsize: Figure size in inches (width, height).
        block: Whether to keep the window open once the frame is finished.

    Returns:
        True if the frame completed, False if it was cancelled.
    """
    import matplotlib.pyplot as plt

    plt.ion()
    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.axis("off")
    artist = ax.imshow(renderer.get_pixels())

    def redraw() -> None:
        artist.set_data(renderer.get_pixels())
        ax.set_title(format_title(renderer))
        fig.canvas.draw_idle()
        plt.pause(0.001)

    for batch_index, _ in enumerate(renderer.render_progressive(), start=1):
        if not plt.fignum_exists(fig.number):
            renderer.cancel()
            continue
        if batch_index % redraw_every == 0:
            redraw()

    plt.ioff()
    if plt.fignum_exists(fig.number):
        redraw()
        plt.show(block=block)

    return renderer.is_complete
