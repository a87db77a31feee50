"""Row-batched frame renderer with cancellation and resume.

This module wraps the row-batch kernel in the integrator with a frame loop
that:
- Renders the image a few rows at a time, top to bottom
- Reports progress after every batch (callback or generator)
- Stops cleanly at the next batch boundary when cancelled
- Resumes from the first unfinished row on the next render call

The FrameRenderer owns the render target dimensions and delegates pixel
storage to the global integrator buffer (a Taichi field).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.weekend.core.progressive import FrameRenderer, RenderSettings
    >>> from src.weekend.scene.random_spheres import create_random_spheres_scene
    >>> from src.weekend.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=7)
    >>> setup_camera(camera)
    >>>
    >>> renderer = FrameRenderer(320, 180, RenderSettings(samples_per_pixel=10))
    >>> renderer.render()
    >>> pixels = renderer.get_pixels()
"""

import logging
from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.weekend.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_pixels_numpy,
    render_rows,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Rows rendered between two progress reports
ROWS_PER_BATCH = 2

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


@dataclass
class RenderSettings:
    """Per-frame render parameters.

    Attributes:
        samples_per_pixel: Jittered samples averaged per pixel (>= 1).
        max_depth: Maximum number of surface interactions per path (>= 0).
        rows_per_batch: Rows rendered between progress reports (>= 1).
    """

    samples_per_pixel: int = 10
    max_depth: int = MAX_DEPTH
    rows_per_batch: int = ROWS_PER_BATCH

    def __post_init__(self) -> None:
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be at least 1")
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must not be negative")
        if self.rows_per_batch < 1:
            raise ValueError(f"rows_per_batch = {self.rows_per_batch} must be at least 1")


class FrameRenderer:
    """Renders one frame in row batches into the shared pixel buffer.

    A frame is finished once every row has been rendered exactly once. A
    cancelled frame keeps the rows it already finished; the next call to
    render() or render_progressive() picks up at the first unfinished row.
    Use reset() to start the frame over.

    A cancel() stays pending until a render call stops on it, so calling
    cancel() before render() stops that render before its first batch.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        settings: The RenderSettings used for every batch.
    """

    def __init__(
        self,
        width: int,
        height: int,
        settings: RenderSettings | None = None,
    ) -> None:
        """Initialize the frame renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            settings: Render settings; defaults to RenderSettings().

        Raises:
            ValueError: If dimensions are outside the supported range.
        """
        self.settings = settings if settings is not None else RenderSettings()
        self._width = width
        self._height = height
        self._next_row = 0
        self._cancel_requested = False
        self._was_cancelled = False
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def rows_done(self) -> int:
        """Number of rows rendered so far in the current frame."""
        return self._next_row

    @property
    def is_complete(self) -> bool:
        """True once every row of the frame has been rendered."""
        return self._next_row >= self._height

    @property
    def cancel_requested(self) -> bool:
        """True if cancel() was called and no render has stopped on it yet."""
        return self._cancel_requested

    @property
    def was_cancelled(self) -> bool:
        """True if the most recent render call stopped because of cancel()."""
        return self._was_cancelled

    def cancel(self) -> None:
        """Ask the running render to stop at the next batch boundary.

        Safe to call from a progress callback or from the consumer of
        render_progressive().
        """
        self._cancel_requested = True

    def reset(self) -> None:
        """Clear the pixel buffer and start the frame over from the top row."""
        clear_render_target()
        self._next_row = 0
        self._cancel_requested = False
        self._was_cancelled = False

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and start a new frame.

        Raises:
            ValueError: If dimensions are outside the supported range.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self._next_row = 0
        self._cancel_requested = False
        self._was_cancelled = False

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render the remaining rows, yielding after every batch.

        Yields:
            Tuple of (rows_done, height) after each batch.

        Example:
            >>> for rows_done, total in renderer.render_progressive():
            ...     print(f"{rows_done}/{total} rows")
            ...     if user_pressed_escape():
            ...         renderer.cancel()
        """
        self._was_cancelled = False
        batch = self.settings.rows_per_batch

        while self._next_row < self._height:
            if self._cancel_requested:
                logger.warning(
                    f"Render cancelled at row {self._next_row} of {self._height}"
                )
                self._cancel_requested = False
                self._was_cancelled = True
                return

            row_count = min(batch, self._height - self._next_row)
            render_rows(
                self._next_row,
                row_count,
                self.settings.samples_per_pixel,
                self.settings.max_depth,
            )
            self._next_row += row_count
            yield (self._next_row, self._height)

        # A cancel() during the last batch has nothing left to stop
        self._cancel_requested = False
        logger.info(
            f"Frame complete: {self._width}x{self._height} at "
            f"{self.settings.samples_per_pixel} spp"
        )

    def render(self, callback: ProgressCallback | None = None) -> bool:
        """Render the remaining rows of the frame.

        Args:
            callback: Optional function called after each batch with
                (rows_done, height). It may call cancel().

        Returns:
            True if the frame is complete, False if the render was cancelled.
        """
        for rows_done, total in self.render_progressive():
            if callback is not None:
                callback(rows_done, total)
        return self.is_complete

    def get_pixels(self) -> npt.NDArray[np.uint8]:
        """Get the RGBA pixel buffer as an array of shape (height, width, 4)."""
        return get_pixels_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the displayed (gamma-corrected) RGB image in [0, 1].

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.
        """
        return self.get_pixels()[:, :, :3].astype(np.float32) / 255.0

    def save_png(self, filepath: str | Path) -> None:
        """Save the current pixel buffer as a PNG file."""
        from src.weekend.preview.export import save_png

        save_png(self, filepath)

    def save_ppm(self, filepath: str | Path) -> None:
        """Save the current pixel buffer as a plain-text PPM file."""
        from src.weekend.preview.export import save_ppm

        save_ppm(self, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"rows_done={self.rows_done}, spp={self.settings.samples_per_pixel})"
        )
