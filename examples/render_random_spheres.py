#!/usr/bin/env python3
"""Render the random spheres scene.

This script renders the random spheres scene end to end: it builds the scene,
sets up the camera, renders the frame in row batches and saves the result.

Usage:
    python -m examples.render_random_spheres [options]

Options:
    --width WIDTH         Image width in pixels (default: 400)
    --height HEIGHT       Image height in pixels (default: 225)
    --samples SAMPLES     Samples per pixel (default: 10)
    --max-depth DEPTH     Maximum bounces per path (default: 10)
    --lookfrom X Y Z      Camera position (default: 13 2 3)
    --seed SEED           Seed for the scene and the pixel sampler
    --output OUTPUT       Output PNG path (default: random_spheres.png)
    --ppm PPM             Also write a plain-text PPM file
    --arch {cpu,gpu}      Taichi backend (default: cpu)
    --preview             Show the frame filling in with Matplotlib
    --quiet               Suppress progress output
    --verbose             Enable debug logging

Example:
    python -m examples.render_random_spheres --width 320 --height 180 --samples 20 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=225,
        help="Image height in pixels (default: 225)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=10,
        help="Samples per pixel (default: 10)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=10,
        help="Maximum bounces per path (default: 10)",
    )
    parser.add_argument(
        "--lookfrom",
        type=float,
        nargs=3,
        default=(13.0, 2.0, 3.0),
        metavar=("X", "Y", "Z"),
        help="Camera position (default: 13 2 3)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the scene and the pixel sampler",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="random_spheres.png",
        help="Output PNG path (default: random_spheres.png)",
    )
    parser.add_argument(
        "--ppm",
        type=str,
        default=None,
        help="Also write a plain-text PPM file",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the frame filling in with Matplotlib",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def render_random_spheres(
    width: int = 400,
    height: int = 225,
    samples_per_pixel: int = 10,
    max_depth: int = 10,
    lookfrom: tuple[float, float, float] = (13.0, 2.0, 3.0),
    seed: int | None = None,
    output_path: str = "random_spheres.png",
    ppm_path: str | None = None,
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the random spheres scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Samples per pixel.
        max_depth: Maximum bounces per path.
        lookfrom: Camera position.
        seed: Seed for the scene layout (None for a fresh scene).
        output_path: Output file path (PNG).
        ppm_path: Optional plain-text PPM output path.
        preview: If True, show progress in a Matplotlib window.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved PNG file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.weekend.camera.pinhole import setup_camera
    from src.weekend.core.progressive import FrameRenderer, RenderSettings
    from src.weekend.preview.display import show_progressive
    from src.weekend.preview.export import save_png, save_ppm
    from src.weekend.scene.random_spheres import (
        RandomSpheresParams,
        create_random_spheres_scene,
    )

    if not quiet:
        print(f"Creating random spheres scene ({width}x{height})...")

    params = RandomSpheresParams(lookfrom=tuple(lookfrom), aspect_ratio=width / height)
    scene, camera = create_random_spheres_scene(params, seed=seed)
    setup_camera(camera)

    if not quiet:
        print(
            f"  {scene.get_sphere_count()} spheres, "
            f"{scene.get_material_count()} materials"
        )

    settings = RenderSettings(samples_per_pixel=samples_per_pixel, max_depth=max_depth)
    renderer = FrameRenderer(width, height, settings)

    if not quiet:
        print(f"Rendering {samples_per_pixel} samples per pixel...")

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (rows_done / total_rows) * 100
            rows_per_sec = rows_done / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows "
                f"({progress_pct:.1f}%) - {rows_per_sec:.1f} rows/s",
                end="",
                flush=True,
            )

    if preview:
        completed = show_progressive(renderer, block=False)
    else:
        completed = renderer.render(callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    if not completed:
        raise RuntimeError(f"Render stopped at row {renderer.rows_done} of {height}")

    output_file = Path(output_path)
    save_png(renderer, output_file)
    if ppm_path is not None:
        save_ppm(renderer, ppm_path)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        if ppm_path is not None:
            print(f"Saved PPM to: {Path(ppm_path).absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    arch = ti.gpu if args.arch == "gpu" else ti.cpu
    ti.init(arch=arch, random_seed=args.seed if args.seed is not None else 0)

    try:
        render_random_spheres(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            lookfrom=tuple(args.lookfrom),
            seed=args.seed,
            output_path=args.output,
            ppm_path=args.ppm,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
