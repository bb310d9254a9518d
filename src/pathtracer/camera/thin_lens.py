"""Thin-lens camera model for perspective ray generation with depth of field.

This module implements the camera that generates primary rays for rendering.
The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Jittered sub-pixel sampling for anti-aliasing
- Defocus blur by sampling ray origins on a disk (thin-lens aperture)

Configuration is a CameraConfig whose fields are all optional; build()
resolves it against the default table into an immutable Camera snapshot.
The snapshot derives an orthonormal basis (u, v, w) from the view
parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

setup_camera() uploads the snapshot into Taichi fields, from which every
render thread reads it without synchronization.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.thin_lens import CameraConfig, setup_camera, get_ray
    >>>
    >>> camera = CameraConfig(image_width=400, aspect_ratio=16.0 / 9.0).build()
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(200, 112)  # Ray through a pixel near the center
"""

import logging
import math
from dataclasses import dataclass, replace

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, make_ray, random_in_unit_disk, vec3

logger = logging.getLogger(__name__)

Vec3Tuple = tuple[float, float, float]

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_ASPECT_RATIO = 1.0
DEFAULT_IMAGE_WIDTH = 100
DEFAULT_SAMPLES_PER_PIXEL = 10
DEFAULT_MAX_DEPTH = 10
DEFAULT_VFOV = 90.0
DEFAULT_LOOKFROM: Vec3Tuple = (0.0, 0.0, 0.0)
DEFAULT_LOOKAT: Vec3Tuple = (0.0, 0.0, -1.0)
DEFAULT_VUP: Vec3Tuple = (0.0, 1.0, 0.0)
DEFAULT_DEFOCUS_ANGLE = 0.0
DEFAULT_FOCUS_DIST = 10.0


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class Camera:
    """A fully resolved camera snapshot.

    Built once by CameraConfig.build() and never modified while rendering.
    Holds both the resolved configuration and the derived viewport geometry.

    Attributes:
        aspect_ratio: Ideal width / height ratio of the image.
        image_width: Rendered image width in pixels.
        image_height: Rendered image height in pixels, at least 1.
        samples_per_pixel: Number of jittered rays traced per pixel.
        max_depth: Maximum number of bounces per ray.
        vfov: Vertical field of view in degrees.
        lookfrom: Camera position.
        lookat: Point the camera looks at.
        vup: Camera-relative up direction.
        defocus_angle: Cone angle in degrees of rays through each pixel;
            0 or less gives a pinhole camera.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
        center: Camera center (same as lookfrom).
        pixel00_loc: Center of the top-left pixel.
        pixel_delta_u: Offset to the pixel to the right.
        pixel_delta_v: Offset to the pixel below.
        u: Camera frame basis vector pointing right.
        v: Camera frame basis vector pointing up.
        w: Camera frame basis vector pointing opposite the view direction.
        defocus_disk_u: Horizontal radius vector of the defocus disk.
        defocus_disk_v: Vertical radius vector of the defocus disk.
    """

    aspect_ratio: float
    image_width: int
    image_height: int
    samples_per_pixel: int
    max_depth: int
    vfov: float
    lookfrom: Vec3Tuple
    lookat: Vec3Tuple
    vup: Vec3Tuple
    defocus_angle: float
    focus_dist: float
    center: Vec3Tuple
    pixel00_loc: Vec3Tuple
    pixel_delta_u: Vec3Tuple
    pixel_delta_v: Vec3Tuple
    u: Vec3Tuple
    v: Vec3Tuple
    w: Vec3Tuple
    defocus_disk_u: Vec3Tuple
    defocus_disk_v: Vec3Tuple

    @property
    def pixel_count(self) -> int:
        """Total number of pixels in the image."""
        return self.image_width * self.image_height


def _to_tuple(array: np.ndarray) -> Vec3Tuple:
    return (float(array[0]), float(array[1]), float(array[2]))


def _positive_or(value, default):
    if value is None or value <= 0:
        return default
    return value


@dataclass
class CameraConfig:
    """Camera configuration with every parameter optional.

    Unset (None) parameters take the defaults below when build() is called.
    Image width and samples per pixel must be positive, so zero or negative
    values fall back to the default rather than raising; the same applies to
    a non-positive aspect ratio or focus distance and a negative max depth.

    =================  ===============
    Parameter          Default
    =================  ===============
    aspect_ratio       1.0
    image_width        100
    samples_per_pixel  10
    max_depth          10
    vfov               90.0 degrees
    lookfrom           (0, 0, 0)
    lookat             (0, 0, -1)
    vup                (0, 1, 0)
    defocus_angle      0.0 degrees
    focus_dist         10.0
    =================  ===============
    """

    aspect_ratio: float | None = None
    image_width: int | None = None
    samples_per_pixel: int | None = None
    max_depth: int | None = None
    vfov: float | None = None
    lookfrom: Vec3Tuple | None = None
    lookat: Vec3Tuple | None = None
    vup: Vec3Tuple | None = None
    defocus_angle: float | None = None
    focus_dist: float | None = None

    def with_aspect_ratio(self, aspect_ratio: float) -> "CameraConfig":
        """Return a copy with the aspect ratio set."""
        return replace(self, aspect_ratio=aspect_ratio)

    def with_image_width(self, image_width: int) -> "CameraConfig":
        """Return a copy with the image width set. Zero means use the default."""
        return replace(self, image_width=image_width)

    def with_samples_per_pixel(self, samples_per_pixel: int) -> "CameraConfig":
        """Return a copy with the sample count set. Zero means use the default."""
        return replace(self, samples_per_pixel=samples_per_pixel)

    def with_max_depth(self, max_depth: int) -> "CameraConfig":
        """Return a copy with the bounce limit set."""
        return replace(self, max_depth=max_depth)

    def with_vfov(self, vfov: float) -> "CameraConfig":
        """Return a copy with the vertical field of view (degrees) set."""
        return replace(self, vfov=vfov)

    def with_view(
        self,
        lookfrom: Vec3Tuple,
        lookat: Vec3Tuple,
        vup: Vec3Tuple | None = None,
    ) -> "CameraConfig":
        """Return a copy positioned at lookfrom and aimed at lookat."""
        return replace(self, lookfrom=lookfrom, lookat=lookat, vup=vup or self.vup)

    def with_focus(self, defocus_angle: float, focus_dist: float) -> "CameraConfig":
        """Return a copy with the defocus angle (degrees) and focus distance set."""
        return replace(self, defocus_angle=defocus_angle, focus_dist=focus_dist)

    def build(self) -> Camera:
        """Resolve defaults and derive the viewport geometry.

        Returns:
            An immutable Camera snapshot ready for setup_camera().
        """
        aspect_ratio = float(_positive_or(self.aspect_ratio, DEFAULT_ASPECT_RATIO))
        image_width = int(_positive_or(self.image_width, DEFAULT_IMAGE_WIDTH))
        samples_per_pixel = int(_positive_or(self.samples_per_pixel, DEFAULT_SAMPLES_PER_PIXEL))
        max_depth = DEFAULT_MAX_DEPTH
        if self.max_depth is not None and self.max_depth >= 0:
            max_depth = int(self.max_depth)
        vfov = float(self.vfov if self.vfov is not None else DEFAULT_VFOV)
        lookfrom = self.lookfrom if self.lookfrom is not None else DEFAULT_LOOKFROM
        lookat = self.lookat if self.lookat is not None else DEFAULT_LOOKAT
        vup = self.vup if self.vup is not None else DEFAULT_VUP
        defocus_angle = float(
            self.defocus_angle if self.defocus_angle is not None else DEFAULT_DEFOCUS_ANGLE
        )
        focus_dist = float(_positive_or(self.focus_dist, DEFAULT_FOCUS_DIST))

        image_height = max(1, int(image_width / aspect_ratio))

        # Viewport dimensions on the focus plane
        theta = math.radians(vfov)
        h = math.tan(theta / 2.0)
        viewport_height = 2.0 * h * focus_dist
        # Realized image ratio keeps pixels square
        viewport_width = viewport_height * (image_width / image_height)

        center = np.array(lookfrom, dtype=np.float64)
        target = np.array(lookat, dtype=np.float64)
        up = np.array(vup, dtype=np.float64)

        # w points from lookat toward lookfrom (backward)
        w = center - target
        w = w / np.linalg.norm(w)
        # u points right (perpendicular to w and vup)
        u = np.cross(up, w)
        u = u / np.linalg.norm(u)
        # v points up in the camera's frame
        v = np.cross(w, u)

        # Image rows run top to bottom, so the vertical viewport edge points down
        viewport_u = viewport_width * u
        viewport_v = viewport_height * -v

        pixel_delta_u = viewport_u / image_width
        pixel_delta_v = viewport_v / image_height

        viewport_upper_left = center - focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
        pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

        defocus_radius = focus_dist * math.tan(math.radians(defocus_angle / 2.0))

        camera = Camera(
            aspect_ratio=aspect_ratio,
            image_width=image_width,
            image_height=image_height,
            samples_per_pixel=samples_per_pixel,
            max_depth=max_depth,
            vfov=vfov,
            lookfrom=_to_tuple(center),
            lookat=_to_tuple(target),
            vup=_to_tuple(up),
            defocus_angle=defocus_angle,
            focus_dist=focus_dist,
            center=_to_tuple(center),
            pixel00_loc=_to_tuple(pixel00_loc),
            pixel_delta_u=_to_tuple(pixel_delta_u),
            pixel_delta_v=_to_tuple(pixel_delta_v),
            u=_to_tuple(u),
            v=_to_tuple(v),
            w=_to_tuple(w),
            defocus_disk_u=_to_tuple(u * defocus_radius),
            defocus_disk_v=_to_tuple(v * defocus_radius),
        )
        logger.debug(
            "Built camera %dx%d, %d spp, depth %d",
            image_width,
            image_height,
            samples_per_pixel,
            max_depth,
        )
        return camera


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_angle = ti.field(dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)


def setup_camera(camera: Camera) -> None:
    """Upload a camera snapshot into the Taichi fields read by get_ray().

    Must be called from Python (not from within a Taichi kernel) before
    rendering.

    Args:
        camera: The resolved camera to render with.
    """
    _camera_center[None] = camera.center
    _pixel00_loc[None] = camera.pixel00_loc
    _pixel_delta_u[None] = camera.pixel_delta_u
    _pixel_delta_v[None] = camera.pixel_delta_v
    _defocus_disk_u[None] = camera.defocus_disk_u
    _defocus_disk_v[None] = camera.defocus_disk_v
    _defocus_angle[None] = camera.defocus_angle
    _camera_u[None] = camera.u
    _camera_v[None] = camera.v
    _camera_w[None] = camera.w


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def pixel_sample_square() -> vec3:
    """Random offset in the [-0.5, -0.5] to [+0.5, +0.5] unit square."""
    return vec3(ti.random(ti.f32) - 0.5, ti.random(ti.f32) - 0.5, 0.0)


@ti.func
def defocus_disk_sample() -> vec3:
    """Random point on the camera's defocus disk."""
    p = random_in_unit_disk()
    return _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]


@ti.func
def get_pixel_center(pixel_i: ti.i32, pixel_j: ti.i32) -> vec3:
    """Center of pixel (i, j) on the focus plane; (0, 0) is the top-left pixel."""
    return (
        _pixel00_loc[None]
        + ti.cast(pixel_i, ti.f32) * _pixel_delta_u[None]
        + ti.cast(pixel_j, ti.f32) * _pixel_delta_v[None]
    )


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32) -> Ray:
    """Generate a jittered camera ray for pixel (i, j).

    The ray targets a random point inside the pixel cell (anti-aliasing).
    It starts at the camera center for a pinhole camera (defocus_angle <= 0),
    or at a random point on the defocus disk otherwise.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).

    Returns:
        A Ray from the camera toward the sampled point (not normalized).
    """
    offset = pixel_sample_square()
    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(pixel_i, ti.f32) + offset.x) * _pixel_delta_u[None]
        + (ti.cast(pixel_j, ti.f32) + offset.y) * _pixel_delta_v[None]
    )

    ray_origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        ray_origin = defocus_disk_sample()

    return make_ray(ray_origin, pixel_sample - ray_origin)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the camera state currently uploaded to Taichi, for debugging.

    Returns:
        Dictionary with origin, u, v, w, pixel00_loc, pixel_delta_u,
        pixel_delta_v, defocus_disk_u and defocus_disk_v.
    """
    fields = {
        "origin": _camera_center,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "pixel00_loc": _pixel00_loc,
        "pixel_delta_u": _pixel_delta_u,
        "pixel_delta_v": _pixel_delta_v,
        "defocus_disk_u": _defocus_disk_u,
        "defocus_disk_v": _defocus_disk_v,
    }
    info = {}
    for name, value_field in fields.items():
        value = value_field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
