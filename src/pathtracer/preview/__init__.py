"""Image output for rendered frames.

Components:
    export: Averaging, gamma correction and 8-bit quantization of the
        accumulated color sums, plus PPM and PNG writers

This package has no Taichi state, so it can be imported before ti.init().
"""

from .export import (
    INTENSITY_MAX,
    average_samples,
    color_to_rgb8,
    linear_to_gamma,
    save_png,
    save_ppm,
    write_ppm,
)

__all__ = [
    "INTENSITY_MAX",
    "linear_to_gamma",
    "average_samples",
    "color_to_rgb8",
    "write_ppm",
    "save_ppm",
    "save_png",
]
