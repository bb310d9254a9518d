"""Ready-made scenes and scene files.

Each preset populates a fresh SceneManager and returns it together with the
CameraConfig that frames it:

- three_spheres: Ground plane with a diffuse, a hollow glass and a metal sphere
- random_spheres: Hundreds of small random spheres around three large ones
- empty: No geometry; every ray sees the sky

Scenes can also be loaded from JSON files holding "materials", "spheres" and
an optional "camera" object (see load_scene_file).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.presets import three_spheres
    >>>
    >>> scene, camera_config = three_spheres()
    >>> camera = camera_config.with_image_width(200).build()
"""

import json
import logging
import random
from collections.abc import Callable
from dataclasses import fields
from typing import Any

from pathtracer.camera.thin_lens import CameraConfig
from pathtracer.scene.manager import SceneManager, parse_number, parse_vec3

logger = logging.getLogger(__name__)

# =============================================================================
# Three Spheres Constants
# =============================================================================

GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.1, 0.2, 0.5)
GLASS_IOR = 1.5

# Gold-ish metal
METAL_ALBEDO = (0.8, 0.6, 0.2)
METAL_FUZZ = 0.0


def three_spheres(seed: int | None = None) -> tuple[SceneManager, CameraConfig]:
    """Create the three-sphere scene.

    - A large yellowish ground sphere
    - A blue diffuse sphere in the middle
    - A hollow glass sphere on the left: a glass shell with a negative-radius
      sphere of the same glass inside it, whose inverted normals make the
      inside behave as an air bubble
    - A polished gold metal sphere on the right

    Args:
        seed: Ignored; the layout is fixed.

    Returns:
        Tuple of (scene, camera_config).
    """
    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, GROUND_ALBEDO)
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, CENTER_ALBEDO)

    glass = scene.add_dielectric_material(GLASS_IOR)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    scene.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)

    scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, METAL_ALBEDO, METAL_FUZZ)

    camera_config = CameraConfig(
        aspect_ratio=16.0 / 9.0,
        image_width=400,
        samples_per_pixel=100,
        max_depth=50,
        vfov=20.0,
        lookfrom=(-2.0, 2.0, 1.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=10.0,
        focus_dist=3.4,
    )

    logger.debug("Created three_spheres scene with %d spheres", scene.get_sphere_count())
    return scene, camera_config


def random_spheres(seed: int | None = None) -> tuple[SceneManager, CameraConfig]:
    """Create the random-spheres scene.

    A grid of small spheres with randomly chosen materials (80% diffuse,
    15% metal, 5% glass), jittered within their grid cells, plus three large
    spheres: glass in the middle, diffuse brown behind, metal in front.

    Args:
        seed: Seed for the scene layout. The same seed always yields the
            same scene; None picks a fresh layout.

    Returns:
        Tuple of (scene, camera_config).
    """
    rng = random.Random(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 1000.0, (0.5, 0.5, 0.5))

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = (a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())

            # Keep clear of the large metal sphere
            dx, dy, dz = center[0] - 4.0, center[1] - 0.2, center[2]
            if dx * dx + dy * dy + dz * dz <= 0.9 * 0.9:
                continue

            if choose_mat < 0.8:
                albedo = tuple(rng.random() * rng.random() for _ in range(3))
                scene.add_lambertian_sphere(center, 0.2, albedo)
            elif choose_mat < 0.95:
                albedo = tuple(rng.uniform(0.5, 1.0) for _ in range(3))
                fuzz = rng.uniform(0.0, 0.5)
                scene.add_metal_sphere(center, 0.2, albedo, fuzz)
            else:
                scene.add_dielectric_sphere(center, 0.2, GLASS_IOR)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, GLASS_IOR)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, (0.4, 0.2, 0.1))
    scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.7, 0.6, 0.5), 0.0)

    camera_config = CameraConfig(
        aspect_ratio=16.0 / 9.0,
        image_width=400,
        samples_per_pixel=50,
        max_depth=50,
        vfov=20.0,
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=0.6,
        focus_dist=10.0,
    )

    logger.debug(
        "Created random_spheres scene with %d spheres (seed=%s)",
        scene.get_sphere_count(),
        seed,
    )
    return scene, camera_config


def empty(seed: int | None = None) -> tuple[SceneManager, CameraConfig]:
    """Create a scene with no geometry, using the default camera.

    The seed is ignored; there is nothing to lay out.
    """
    return SceneManager(), CameraConfig()


# Preset name -> factory taking an optional seed
PRESETS: dict[str, Callable[[int | None], tuple[SceneManager, CameraConfig]]] = {
    "three_spheres": three_spheres,
    "random_spheres": random_spheres,
    "empty": empty,
}


def create_preset(
    name: str, seed: int | None = None
) -> tuple[SceneManager, CameraConfig]:
    """Build a preset scene by name.

    Raises:
        ValueError: If no preset has that name.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown scene preset: {name!r} (choose from {', '.join(sorted(PRESETS))})"
        ) from None
    return factory(seed)


# =============================================================================
# Scene Files
# =============================================================================

_VECTOR_CAMERA_FIELDS = ("lookfrom", "lookat", "vup")
_INT_CAMERA_FIELDS = ("image_width", "samples_per_pixel", "max_depth")


def camera_config_from_dict(data: dict[str, Any]) -> CameraConfig:
    """Build a CameraConfig from a plain dictionary.

    Keys are CameraConfig field names; missing or null keys stay unset.

    Raises:
        ValueError: If the dictionary has unknown keys or a value of the
            wrong shape.
    """
    if not isinstance(data, dict):
        raise ValueError("Camera settings must be an object")
    known = {f.name for f in fields(CameraConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown camera setting(s): {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}
    for name, value in data.items():
        if value is None:
            continue
        if name in _VECTOR_CAMERA_FIELDS:
            values[name] = parse_vec3(value, f"camera.{name}")
        elif name in _INT_CAMERA_FIELDS:
            values[name] = parse_number(value, f"camera.{name}", int)
        else:
            values[name] = parse_number(value, f"camera.{name}")
    return CameraConfig(**values)


def load_scene_file(filepath: str) -> tuple[SceneManager, CameraConfig]:
    """Load a scene from a JSON file.

    The file holds an object with "materials" and "spheres" lists in the
    format produced by SceneManager.to_dict(), plus an optional "camera"
    object of CameraConfig settings.

    Args:
        filepath: Path to the JSON scene file.

    Returns:
        Tuple of (scene, camera_config).

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or describes an invalid scene.
    """
    with open(filepath, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Scene file {filepath} must contain a JSON object")

    scene = SceneManager()
    scene.from_dict(data)
    camera_config = camera_config_from_dict(data.get("camera") or {})

    logger.info(
        "Loaded scene %s: %d materials, %d spheres",
        filepath,
        scene.get_material_count(),
        scene.get_sphere_count(),
    )
    return scene, camera_config
