"""Ray color integrator for Monte Carlo light transport.

This module implements the main rendering kernels: a path is traced from the
camera through the scene, bouncing off surfaces according to their material
properties, until it escapes to the sky, is absorbed, or runs out of bounces.

The path is followed iteratively, carrying a throughput (the product of the
attenuations collected so far):
    - Escaped ray: contributes throughput * background
    - Absorbed ray: contributes black
    - Bounce limit reached: contributes black

The render target stores the per-pixel sum of sample colors. Averaging,
gamma correction and quantization happen when the image is emitted (see
pathtracer.preview.export).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera import CameraConfig, setup_camera
    >>> from pathtracer.core.integrator import render_image, setup_render_target
    >>> from pathtracer.scene.presets import three_spheres
    >>>
    >>> scene, config = three_spheres()
    >>> camera = config.build()
    >>> setup_camera(camera)
    >>> setup_render_target(camera.image_width, camera.image_height)
    >>> render_image(camera.samples_per_pixel, camera.max_depth)
"""

import logging
from collections.abc import Callable

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import get_ray
from pathtracer.materials.dielectric import scatter_dielectric_by_id
from pathtracer.materials.lambertian import scatter_lambertian_by_id
from pathtracer.materials.metal import scatter_metal_by_id
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Hit search interval; T_MIN keeps scattered rays from re-hitting their origin
T_MIN = 0.001
T_MAX = 1e10

# Sky gradient endpoints
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Per-pixel sum of sample colors, indexed [column, row] with row 0 at the top
_color_sums = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to zero."""
    _color_sums.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scatter function of the hit material's variant.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (unit length, facing the ray).
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
        An unknown material absorbs the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )
    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )
    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky color for a ray that escapes the scene.

    A vertical gradient from white at the horizon to light blue overhead,
    driven by the y component of the normalized direction.
    """
    unit_direction = tm.normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * SKY_HORIZON_COLOR + a * SKY_ZENITH_COLOR


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Estimate the color seen along a ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (any non-zero length).
        max_depth: Maximum number of scene intersections along the path.
            0 yields black.

    Returns:
        The linear RGB color estimate for this path.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current_origin = origin
    current_direction = direction

    # Taichi does not support break inside ti.func loops
    active = 1

    for _ in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(current_origin, current_direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                color = throughput * background_color(current_direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    hit_record.material_id,
                    current_direction,
                    hit_record.normal,
                    hit_record.front_face,
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current_origin = hit_record.point
                    current_direction = scattered_direction

    # A path still active here ran out of bounces and stays black
    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def render_row(
    row: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Render every pixel of one image row.

    Columns are processed in parallel; each thread accumulates
    samples_per_pixel jittered samples into its own pixel's sum.

    Args:
        row: Image row (0 = top).
        width: Image width in pixels.
        samples_per_pixel: Number of samples per pixel.
        max_depth: Maximum bounces per path.
    """
    for i in range(width):
        pixel_sum = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            ray = get_ray(i, row)
            pixel_sum += ray_color(ray.origin, ray.direction, max_depth)
        _color_sums[i, row] += pixel_sum


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    return ray_color(origin, direction, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
) -> tuple[float, float, float]:
    """Trace one ray through the current scene.

    This is a Python-callable function for testing and debugging. For
    production rendering, use render_image() which processes pixels in
    parallel.

    Args:
        origin: The ray origin.
        direction: The ray direction.
        max_depth: Maximum number of bounces.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _trace_single_ray(vec3(*origin), vec3(*direction), max_depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(
    samples_per_pixel: int,
    max_depth: int,
    callback: Callable[[int, int], None] | None = None,
) -> None:
    """Render the full image into the render target, one row at a time.

    Args:
        samples_per_pixel: Number of samples per pixel.
        max_depth: Maximum bounces per path.
        callback: Optional function called after each row with
            (pixels_done, total_pixels).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    total_pixels = width * height

    logger.info(
        "Rendering %dx%d at %d samples per pixel, max depth %d",
        width,
        height,
        samples_per_pixel,
        max_depth,
    )

    for row in range(height):
        render_row(row, width, samples_per_pixel, max_depth)
        if callback is not None:
            callback((row + 1) * width, total_pixels)


def get_color_sums_numpy() -> np.ndarray:
    """Get the accumulated color sums as a NumPy array.

    Returns:
        Array of shape (height, width, 3), dtype float32, row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_buffer = _color_sums.to_numpy()
    sums = full_buffer[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    return np.ascontiguousarray(np.transpose(sums, (1, 0, 2)), dtype=np.float32)
