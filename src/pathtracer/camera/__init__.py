"""Camera module for view and ray generation.

Components:
    thin_lens: Look-at perspective camera with optional defocus blur

Camera responsibilities:
    - Resolve a partially specified CameraConfig against defaults
    - Derive the viewport geometry and camera basis
    - Generate jittered primary rays for pixel (i, j), row 0 at the top
    - Sample ray origins on the defocus disk when defocus_angle > 0
"""

from .thin_lens import (
    Camera,
    CameraConfig,
    defocus_disk_sample,
    get_camera_info,
    get_pixel_center,
    get_ray,
    pixel_sample_square,
    setup_camera,
)

__all__ = [
    "Camera",
    "CameraConfig",
    "setup_camera",
    "get_ray",
    "get_pixel_center",
    "pixel_sample_square",
    "defocus_disk_sample",
    "get_camera_info",
]
