#!/usr/bin/env python3
"""Render a hand-built scene through the library API.

This script shows how to assemble a scene with SceneManager, frame it with a
CameraConfig and render it with the Renderer, without going through the
command-line interface. It also writes the scene as JSON so it can be
re-rendered with ``pathtracer --scene-file``.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 320)
    --samples SAMPLES   Number of samples per pixel (default: 32)
    --output OUTPUT     Output file path (default: marbles.png)
    --scene-json PATH   Also save the scene description as JSON
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --width 160 --samples 8 --output small.ppm
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import asdict
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a row of marbles on a ground plane.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=320, help="Image width (default: 320)")
    parser.add_argument(
        "--samples", type=int, default=32, help="Samples per pixel (default: 32)"
    )
    parser.add_argument(
        "--output", type=str, default="marbles.png", help="Output file (default: marbles.png)"
    )
    parser.add_argument(
        "--scene-json", type=str, default=None, help="Also save the scene as JSON"
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def build_marbles():
    """Build a row of marbles going from matte to mirror to glass."""
    # Lazy imports to allow Taichi initialization first
    from pathtracer.camera import CameraConfig
    from pathtracer.scene import SceneManager

    scene = SceneManager()
    scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 1000.0, (0.45, 0.5, 0.45))

    scene.add_lambertian_sphere((-3.0, 0.5, 0.0), 0.5, (0.7, 0.2, 0.2))
    scene.add_metal_sphere((-1.5, 0.5, 0.0), 0.5, (0.8, 0.8, 0.8), 0.6)
    scene.add_metal_sphere((0.0, 0.5, 0.0), 0.5, (0.9, 0.9, 0.9), 0.0)
    scene.add_dielectric_sphere((1.5, 0.5, 0.0), 0.5, 1.33)
    scene.add_dielectric_sphere((3.0, 0.5, 0.0), 0.5, 2.4)

    camera_config = CameraConfig(
        aspect_ratio=2.0,
        max_depth=20,
        vfov=35.0,
        lookfrom=(0.0, 2.0, 7.0),
        lookat=(0.0, 0.5, 0.0),
        defocus_angle=0.5,
        focus_dist=7.0,
    )
    return scene, camera_config


def render_marbles(
    width: int = 320,
    num_samples: int = 32,
    output_path: str = "marbles.png",
    scene_json: str | None = None,
    quiet: bool = False,
) -> Path:
    """Render the marbles scene and save it to a file.

    Returns:
        Path to the saved image file.
    """
    from pathtracer.core.renderer import Renderer

    scene, camera_config = build_marbles()
    camera = camera_config.with_image_width(width).with_samples_per_pixel(num_samples).build()

    if scene_json:
        with open(scene_json, "w", encoding="utf-8") as f:
            json.dump({**scene.to_dict(), "camera": asdict(camera_config)}, f, indent=2)

    renderer = Renderer(camera)

    if not quiet:
        print(f"Rendering {camera.image_width}x{camera.image_height} at {num_samples} spp...")

    start_time = time.time()

    def progress_callback(pixels_done: int, total_pixels: int) -> None:
        if not quiet:
            print(f"\r  Progress: {100.0 * pixels_done / total_pixels:.1f}%", end="", flush=True)

    renderer.render(callback=progress_callback)

    if not quiet:
        print()

    output_file = Path(output_path)
    if output_file.suffix.lower() == ".png":
        renderer.save_png(str(output_file))
    else:
        renderer.save_ppm(str(output_file))

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    ti.init(arch=ti.cpu)

    try:
        render_marbles(
            width=args.width,
            num_samples=args.samples,
            output_path=args.output,
            scene_json=args.scene_json,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
