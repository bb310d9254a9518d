"""Renderer tying a camera to the render target.

This module provides a convenient wrapper around the core integrator that
supports:
- Rendering a whole image with per-row progress callbacks
- Row-by-row rendering as a generator
- Emitting the result as PPM or PNG

Rows are rendered as sequential kernel launches; the pixels of a row are
traced by parallel Taichi threads, each writing only its own pixel.

Example:
    >>> import sys
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.renderer import Renderer
    >>> from pathtracer.scene.presets import three_spheres
    >>>
    >>> scene, config = three_spheres()
    >>> renderer = Renderer(config.build())
    >>> renderer.render()
    >>> renderer.write_ppm(sys.stdout)
"""

from collections.abc import Callable, Generator
from typing import TextIO

import numpy as np
import numpy.typing as npt

from pathtracer.camera.thin_lens import Camera, setup_camera
from pathtracer.core.integrator import (
    clear_render_target,
    get_color_sums_numpy,
    render_image,
    render_row,
    setup_render_target,
)
from pathtracer.preview import export

# Callback receives (pixels_done, total_pixels)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders the current scene through one camera.

    The scene itself lives in the global Taichi registries populated by a
    SceneManager; the renderer only owns the camera and drives the render
    target.

    Attributes:
        camera: The resolved camera being rendered.
    """

    def __init__(self, camera: Camera) -> None:
        """Upload the camera and prepare a cleared render target.

        Args:
            camera: The resolved camera to render with.

        Raises:
            ValueError: If the image exceeds the maximum supported size.
        """
        self.camera = camera
        setup_camera(camera)
        setup_render_target(camera.image_width, camera.image_height)

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return self.camera.image_width

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return self.camera.image_height

    @property
    def total_pixels(self) -> int:
        """Number of pixels in the image."""
        return self.camera.pixel_count

    def reset(self) -> None:
        """Discard any accumulated samples."""
        clear_render_target()

    def render(self, callback: ProgressCallback | None = None) -> None:
        """Render every row of the image, replacing any previous result.

        Args:
            callback: Optional function called after each row with
                (pixels_done, total_pixels).
        """
        clear_render_target()
        render_image(self.camera.samples_per_pixel, self.camera.max_depth, callback)

    def render_rows(self) -> Generator[int, None, None]:
        """Render the image one row at a time, replacing any previous result.

        Yields:
            The number of pixels rendered so far, after each row.
        """
        clear_render_target()
        for row in range(self.height):
            render_row(row, self.width, self.camera.samples_per_pixel, self.camera.max_depth)
            yield (row + 1) * self.width

    def color_sums(self) -> npt.NDArray[np.float32]:
        """Per-pixel color sums, shape (height, width, 3), row 0 at the top."""
        return get_color_sums_numpy()

    def to_rgb8(self) -> npt.NDArray[np.uint8]:
        """The rendered image as gamma-corrected 8-bit RGB."""
        return export.color_to_rgb8(self.color_sums(), self.camera.samples_per_pixel)

    def write_ppm(self, stream: TextIO) -> None:
        """Write the rendered image to a text stream as plain PPM."""
        export.write_ppm(stream, self.color_sums(), self.camera.samples_per_pixel)

    def save_ppm(self, filepath: str) -> None:
        """Save the rendered image as a plain PPM file."""
        export.save_ppm(filepath, self.color_sums(), self.camera.samples_per_pixel)

    def save_png(self, filepath: str) -> None:
        """Save the rendered image as an 8-bit PNG file."""
        export.save_png(filepath, self.color_sums(), self.camera.samples_per_pixel)
