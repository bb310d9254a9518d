"""Command-line interface for rendering scenes.

Renders a preset or a JSON scene file and writes the image as plain PPM
(to stdout by default) or PNG.

Usage:
    python -m pathtracer [options]
    pathtracer [options]

Example:
    pathtracer --scene three_spheres --width 200 --samples 20 > out.ppm
    pathtracer --scene random_spheres --seed 7 --output cover.png --arch gpu
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import replace

import taichi as ti
from tqdm import tqdm

logger = logging.getLogger(__name__)

SCENE_CHOICES = ("three_spheres", "random_spheres", "empty")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="pathtracer",
        description="Render a scene of spheres with a Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    scene_group = parser.add_mutually_exclusive_group()
    scene_group.add_argument(
        "--scene",
        choices=SCENE_CHOICES,
        default="three_spheres",
        help="Preset scene to render (default: three_spheres)",
    )
    scene_group.add_argument(
        "--scene-file",
        type=str,
        default=None,
        help="JSON scene file to render instead of a preset",
    )
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument(
        "--aspect-ratio", type=float, default=None, help="Image width / height ratio"
    )
    parser.add_argument(
        "--samples", type=int, default=None, help="Number of samples per pixel"
    )
    parser.add_argument(
        "--max-depth", type=int, default=None, help="Maximum number of ray bounces"
    )
    parser.add_argument(
        "--vfov", type=float, default=None, help="Vertical field of view in degrees"
    )
    parser.add_argument(
        "--defocus-angle",
        type=float,
        default=None,
        help="Defocus cone angle in degrees (0 for a pinhole camera)",
    )
    parser.add_argument(
        "--focus-dist", type=float, default=None, help="Distance to the plane in focus"
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help="Output path; '-' writes PPM to stdout, '.png' writes PNG (default: -)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random number generators and random scene layout",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress the progress bar")
    parser.add_argument("--verbose", action="store_true", help="Enable info logging")
    return parser.parse_args(argv)


def _camera_overrides(args: argparse.Namespace) -> dict:
    overrides = {
        "image_width": args.width,
        "aspect_ratio": args.aspect_ratio,
        "samples_per_pixel": args.samples,
        "max_depth": args.max_depth,
        "vfov": args.vfov,
        "defocus_angle": args.defocus_angle,
        "focus_dist": args.focus_dist,
    }
    return {name: value for name, value in overrides.items() if value is not None}


def render(args: argparse.Namespace) -> None:
    """Build the scene, render it and write the output.

    Must run after ti.init().

    Raises:
        OSError: If the scene file or output cannot be read or written.
        ValueError: If the scene or camera configuration is invalid.
        RuntimeError: If the scene exceeds the registry capacity.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.core.renderer import Renderer
    from pathtracer.scene.presets import create_preset, load_scene_file

    if args.scene_file:
        scene, camera_config = load_scene_file(args.scene_file)
    else:
        scene, camera_config = create_preset(args.scene, seed=args.seed)

    camera = replace(camera_config, **_camera_overrides(args)).build()
    logger.info(
        "Scene has %d spheres and %d materials; rendering %dx%d at %d spp",
        scene.get_sphere_count(),
        scene.get_material_count(),
        camera.image_width,
        camera.image_height,
        camera.samples_per_pixel,
    )

    renderer = Renderer(camera)
    start_time = time.time()

    with tqdm(
        total=renderer.total_pixels,
        desc="Pixels written",
        unit="px",
        file=sys.stderr,
        disable=args.quiet,
        leave=False,
    ) as progress_bar:

        def progress_callback(pixels_done: int, total_pixels: int) -> None:
            progress_bar.update(pixels_done - progress_bar.n)

        renderer.render(callback=progress_callback)

    if args.output == "-":
        renderer.write_ppm(sys.stdout)
        sys.stdout.flush()
    elif args.output.lower().endswith(".png"):
        renderer.save_png(args.output)
    else:
        renderer.save_ppm(args.output)

    logger.info("Done in %.2fs", time.time() - start_time)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    init_kwargs = {"arch": ti.gpu if args.arch == "gpu" else ti.cpu}
    if args.seed is not None:
        init_kwargs["random_seed"] = args.seed
    ti.init(**init_kwargs)

    try:
        render(args)
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
