"""Interactive preview window using Taichi GGUI.

This module provides an interactive window for the random spheres scene:
sliders move the camera and set the sample count, the Render button starts
a new frame, and Export PPM writes the last finished frame to disk. Frames
are rendered a few row batches per window refresh so the window stays
responsive while the image fills in from the top.

Example:
    >>> import numpy as np
    >>> from src.weekend.preview.interactive import InteractivePreview
    >>>
    >>> preview = InteractivePreview(400, 225)
    >>> pixels = np.zeros((225, 400, 4), dtype=np.uint8)
    >>> preview.update_image(pixels)
    >>> preview.run()

Interactive Rendering Example:
    >>> from src.weekend.preview.interactive import InteractivePreview
    >>> from src.weekend.scene.random_spheres import RandomSpheresParams
    >>>
    >>> preview = InteractivePreview(400, 225)
    >>> preview.set_params(RandomSpheresParams(lookfrom=(13.0, 2.0, 3.0)))
    >>> preview.run_interactive()  # Blocks until window closed
"""

from __future__ import annotations

import copy
import os
from collections.abc import Generator
from datetime import datetime
from typing import TYPE_CHECKING, Any

import numpy as np
import taichi as ti

if TYPE_CHECKING:
    import numpy.typing as npt

    from src.weekend.core.progressive import FrameRenderer
    from src.weekend.scene.random_spheres import RandomSpheresParams

# Slider ranges
LOOKFROM_RANGE = (-20.0, 20.0)
SAMPLES_RANGE = (1, 100)


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    This class wraps ti.ui.Window to display the renderer's pixel buffer
    while it is being filled. It manages the window, canvas, display buffer
    and the in-flight frame.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        display_image: Taichi field storing the display image (RGB float).
        batches_per_refresh: Row batches rendered between window refreshes.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        title: str = "Random Spheres - Interactive Preview",
        samples_per_pixel: int = 10,
        batches_per_refresh: int = 4,
    ) -> None:
        """Initialize the interactive preview window.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            title: Window title.
            samples_per_pixel: Initial value of the samples slider.
            batches_per_refresh: Row batches rendered between window refreshes.

        Note:
            The window is created but not shown until run() or
            run_interactive() is called.
        """
        self.width = width
        self.height = height
        self.batches_per_refresh = batches_per_refresh
        self._title = title
        self._samples_per_pixel = samples_per_pixel
        self._is_initialized = False

        # Defer window creation until run() to support headless checks
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        self._renderer: FrameRenderer | None = None
        self._frame: Generator[tuple[int, int], None, None] | None = None
        self._last_frame: npt.NDArray[np.uint8] | None = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(width, height)
        )

    def _initialize_window(self) -> None:
        """Initialize the Taichi GGUI window and canvas."""
        if self._is_initialized:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()
        self._is_initialized = True

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_image(self, pixels: npt.NDArray[np.uint8]) -> None:
        """Update the display image from an RGBA pixel array.

        Args:
            pixels: Array of shape (height, width, 4) or (height, width, 3),
                dtype uint8, top-left pixel at [0, 0].

        Raises:
            ValueError: If the array shape doesn't match the window size.
        """
        if pixels.shape[:2] != (self.height, self.width) or pixels.shape[2] not in (3, 4):
            raise ValueError(
                f"Image shape {pixels.shape} doesn't match expected "
                f"({self.height}, {self.width}, 4)"
            )

        rgb = pixels[:, :, :3].astype(np.float32) / 255.0

        # NumPy images are (height, width, channels) with row 0 at the top,
        # Taichi fields are (x, y) with y = 0 at the bottom
        image_transposed = np.ascontiguousarray(np.transpose(np.flipud(rgb), (1, 0, 2)))
        self.display_image.from_numpy(image_transposed)

    def is_running(self) -> bool:
        """Check if the window is still open."""
        return self.window.running

    def show_frame(self) -> None:
        """Present the current display image."""
        self.canvas.set_image(self.display_image)
        self.window.show()

    def run(self) -> None:
        """Show the display image until the window is closed.

        For integration with a renderer use run_interactive(), or call
        is_running() and show_frame() in your own loop.
        """
        self._initialize_window()

        while self.is_running():
            self.show_frame()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            if ssh_connection and not display:
                return False
            return True

        if display or wayland:
            return True

        if os.name == "nt":
            return True

        return False

    # =========================================================================
    # Interactive Rendering Support
    # =========================================================================

    def set_params(self, params: RandomSpheresParams) -> None:
        """Set the camera parameters used by the next frame.

        The parameters take effect when a new frame starts (on the Render
        button, or at startup).
        """
        self._pending_params: RandomSpheresParams = copy.deepcopy(params)

    def _params_changed(self) -> bool:
        """Check if parameters have changed since the camera was last set up."""
        if not hasattr(self, "_pending_params"):
            return False

        if not hasattr(self, "_current_params"):
            return True

        return self._pending_params != self._current_params

    def _apply_camera(self) -> None:
        """Load the camera for the pending parameters."""
        from src.weekend.camera.pinhole import setup_camera
        from src.weekend.scene.random_spheres import RandomSpheresParams, create_camera

        if not hasattr(self, "_pending_params"):
            self._pending_params = RandomSpheresParams(aspect_ratio=self.width / self.height)

        setup_camera(create_camera(self._pending_params))
        self._current_params = copy.deepcopy(self._pending_params)

    def _ensure_renderer(self) -> FrameRenderer:
        """Ensure the frame renderer is initialized."""
        from src.weekend.core.progressive import FrameRenderer, RenderSettings

        if self._renderer is None:
            self._renderer = FrameRenderer(
                self.width,
                self.height,
                RenderSettings(samples_per_pixel=self._samples_per_pixel),
            )
        return self._renderer

    def start_frame(self) -> None:
        """Abandon the frame in flight and start a new one.

        Applies pending camera parameters and the current sample count.
        """
        renderer = self._ensure_renderer()

        if self._frame is not None:
            self._frame.close()
            self._frame = None

        if self._params_changed():
            self._apply_camera()

        renderer.settings.samples_per_pixel = self._samples_per_pixel
        renderer.reset()
        self._frame = renderer.render_progressive()

    def step(self) -> bool:
        """Advance the frame in flight by up to ``batches_per_refresh`` batches.

        Returns:
            True while rows remain to be rendered.
        """
        if self._frame is None:
            return False

        for _ in range(self.batches_per_refresh):
            if next(self._frame, None) is None:
                self._frame = None
                renderer = self.get_renderer()
                if renderer is not None and renderer.is_complete:
                    self._last_frame = renderer.get_pixels().copy()
                return False
        return True

    def run_interactive(self) -> None:
        """Run the interactive rendering loop.

        On each window refresh:
        1. Draw the control panel and react to its widgets
        2. Render a few more row batches of the current frame
        3. Show the partially filled pixel buffer

        GUI Controls:
            - Camera X/Y/Z sliders (lookfrom)
            - Samples slider (samples per pixel)
            - Render button (start a new frame)
            - Export PPM button (save the last finished frame)

        The loop continues until the window is closed.
        """
        from src.weekend.scene.random_spheres import RandomSpheresParams

        self._initialize_window()
        renderer = self._ensure_renderer()

        if not hasattr(self, "_pending_params"):
            self._pending_params = RandomSpheresParams(aspect_ratio=self.width / self.height)

        self._slider_x: float = self._pending_params.lookfrom[0]
        self._slider_y: float = self._pending_params.lookfrom[1]
        self._slider_z: float = self._pending_params.lookfrom[2]

        self.start_frame()

        while self.is_running():
            self._draw_gui_panel()

            if self._frame is not None:
                self.step()
                self.update_image(renderer.get_pixels())

            self.show_frame()

    def get_samples_per_pixel(self) -> int:
        """Get the sample count used for the next frame."""
        return self._samples_per_pixel

    def get_renderer(self) -> Any:
        """Get the underlying frame renderer, or None if not initialized."""
        return self._renderer

    def get_last_frame(self) -> npt.NDArray[np.uint8] | None:
        """Get a copy of the pixels of the last finished frame, if any."""
        return self._last_frame

    def _draw_gui_panel(self) -> None:
        """Draw the control panel and react to its widgets."""
        with self.window.GUI.sub_window("Camera", 0.02, 0.02, 0.3, 0.25) as gui:
            new_x = gui.slider_float("Camera X", self._slider_x, *LOOKFROM_RANGE)
            new_y = gui.slider_float("Camera Y", self._slider_y, *LOOKFROM_RANGE)
            new_z = gui.slider_float("Camera Z", self._slider_z, *LOOKFROM_RANGE)
            new_spp = gui.slider_int("Samples", self._samples_per_pixel, *SAMPLES_RANGE)
            render_clicked = gui.button("Render")
            export_clicked = gui.button("Export PPM")

        if (new_x, new_y, new_z) != (self._slider_x, self._slider_y, self._slider_z):
            self._slider_x, self._slider_y, self._slider_z = new_x, new_y, new_z
            params = copy.deepcopy(self._pending_params)
            params.lookfrom = (new_x, new_y, new_z)
            self._pending_params = params

        self._samples_per_pixel = new_spp

        if render_clicked:
            self.start_frame()
        if export_clicked:
            self._export_ppm()

    def _export_ppm(self) -> None:
        """Export the last finished frame to a timestamped PPM file."""
        from src.weekend.preview.export import save_ppm

        if self._last_frame is None:
            print("Render the scene first, then export.")
            return

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"render_{timestamp}.ppm"
        save_ppm(self._last_frame, filename)
        print(f"Exported: {filename}")
