#!/usr/bin/env python3
"""Interactive random spheres renderer with camera and sample controls.

This script opens an interactive preview window for the random spheres scene
and renders frames a few rows at a time, so the image fills in from the top
while the window stays responsive.

Usage:
    python -m examples.interactive_random_spheres [--width W] [--height H] [--seed S]

Controls:
    - Camera X/Y/Z: Move the camera (it keeps looking at the origin)
    - Samples: Samples per pixel for the next frame
    - Render: Start a new frame with the current settings
    - Export PPM: Save the last finished frame with a timestamp
"""

from __future__ import annotations

import argparse
import logging
import platform
import sys
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402


def initialize_taichi(seed: int) -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if platform.system() == "Darwin":
        try:
            ti.init(arch=ti.metal, random_seed=seed)
            return "Metal (GPU)"
        except RuntimeError:
            logging.getLogger(__name__).info("Metal backend unavailable")

    try:
        ti.init(arch=ti.gpu, random_seed=seed)
        return "GPU"
    except RuntimeError:
        logging.getLogger(__name__).info("GPU backend unavailable")

    ti.init(arch=ti.cpu, random_seed=seed)
    return "CPU"


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the interactive random spheres renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(description="Interactive random spheres renderer.")
    parser.add_argument("--width", type=int, default=400, help="Window width (default: 400)")
    parser.add_argument("--height", type=int, default=225, help="Window height (default: 225)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the scene layout")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    # Initialize Taichi first (before importing modules that use ti.kernel)
    backend = initialize_taichi(args.seed if args.seed is not None else 0)
    print(f"Taichi backend: {backend}")

    from src.weekend.preview.interactive import InteractivePreview
    from src.weekend.scene.random_spheres import (
        RandomSpheresParams,
        create_random_spheres_scene,
    )

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    params = RandomSpheresParams(aspect_ratio=args.width / args.height)
    scene, _ = create_random_spheres_scene(params, seed=args.seed)
    print(f"Scene: {scene.get_sphere_count()} spheres")

    print(f"Creating interactive preview window ({args.width}x{args.height})...")
    preview = InteractivePreview(args.width, args.height)
    preview.set_params(params)

    print("Starting interactive rendering...")
    print("  - Move the camera sliders, then click 'Render'")
    print("  - Click 'Export PPM' to save the last finished frame")
    print("  - Close window to exit")
    print()

    try:
        preview.run_interactive()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
