"""Image export utilities for rendered images.

This module turns the per-pixel color sums held by the render target into
8-bit output:
    1. Average: scale each sum by 1 / samples_per_pixel
    2. Gamma: gamma-2 transfer (square root); non-positive values map to 0
    3. Quantize: clamp to [0, 0.999] and map to int(256 * x), so every
       channel lands in [0, 255]

Supported formats:
    - PPM (plain-text P3)
    - PNG (8-bit via Pillow)

All arrays are laid out (height, width, 3) with row 0 at the top.

Example:
    >>> import sys
    >>> from pathtracer.preview.export import write_ppm
    >>> write_ppm(sys.stdout, renderer.color_sums(), camera.samples_per_pixel)
"""

from __future__ import annotations

import logging
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Upper clamp bound before quantization; keeps int(256 * x) <= 255
INTENSITY_MAX = 0.999


def linear_to_gamma(linear_component):
    """Apply the gamma-2 transfer function.

    Works on Python floats and NumPy arrays alike. Non-positive inputs
    map to 0.

    Args:
        linear_component: Linear intensity value(s).

    Returns:
        sqrt(x) for positive x, 0 otherwise.
    """
    return np.sqrt(np.maximum(linear_component, 0.0))


def average_samples(
    color_sums: npt.NDArray[np.float32],
    samples_per_pixel: int,
) -> npt.NDArray[np.float64]:
    """Divide accumulated color sums by the number of samples.

    Args:
        color_sums: Array of per-pixel color sums, shape (height, width, 3).
        samples_per_pixel: Number of samples each sum holds. Must be positive.

    Returns:
        Mean linear color per pixel as float64.

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    if samples_per_pixel <= 0:
        raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")
    return np.asarray(color_sums, dtype=np.float64) * (1.0 / samples_per_pixel)


def color_to_rgb8(
    color_sums: npt.NDArray[np.float32],
    samples_per_pixel: int,
) -> npt.NDArray[np.uint8]:
    """Convert per-pixel color sums to 8-bit RGB.

    Args:
        color_sums: Array of color sums, shape (..., 3).
        samples_per_pixel: Number of samples each sum holds.

    Returns:
        Array of the same shape with dtype uint8.
    """
    gamma_corrected = linear_to_gamma(average_samples(color_sums, samples_per_pixel))
    clamped = np.clip(gamma_corrected, 0.0, INTENSITY_MAX)
    return np.floor(256.0 * clamped).astype(np.uint8)


def write_ppm(
    stream: TextIO,
    color_sums: npt.NDArray[np.float32],
    samples_per_pixel: int,
) -> None:
    """Write an image as plain-text PPM (P3).

    The header is "P3", then "<width> <height>", then "255"; each following
    line holds one pixel as "r g b", rows top to bottom, pixels left to right.

    Args:
        stream: Text stream to write to.
        color_sums: Array of color sums, shape (height, width, 3).
        samples_per_pixel: Number of samples each sum holds.

    Raises:
        OSError: If writing to the stream fails.
    """
    rgb = color_to_rgb8(color_sums, samples_per_pixel)
    height, width = rgb.shape[:2]

    stream.write(f"P3\n{width} {height}\n255\n")
    for row in rgb:
        stream.write("".join(f"{r} {g} {b}\n" for r, g, b in row.tolist()))


def save_ppm(
    filepath: str,
    color_sums: npt.NDArray[np.float32],
    samples_per_pixel: int,
) -> None:
    """Save an image as a plain-text PPM file.

    Args:
        filepath: Output file path.
        color_sums: Array of color sums, shape (height, width, 3).
        samples_per_pixel: Number of samples each sum holds.

    Raises:
        OSError: If the file cannot be written.
    """
    with open(filepath, "w", encoding="ascii") as f:
        write_ppm(f, color_sums, samples_per_pixel)
    logger.info("Saved PPM to %s", filepath)


def save_png(
    filepath: str,
    color_sums: npt.NDArray[np.float32],
    samples_per_pixel: int,
) -> None:
    """Save an image as an 8-bit PNG file.

    Uses the same averaging, gamma and quantization as write_ppm().

    Args:
        filepath: Output file path (should end in .png).
        color_sums: Array of color sums, shape (height, width, 3).
        samples_per_pixel: Number of samples each sum holds.

    Raises:
        OSError: If the file cannot be written.
    """
    rgb = color_to_rgb8(color_sums, samples_per_pixel)
    pil_image = PILImage.fromarray(rgb, mode="RGB")
    pil_image.save(filepath)
    logger.info("Saved PNG to %s", filepath)
