"""Tests for the Renderer wrapper and end-to-end renders.

Tests cover:
- Render target sizing from the camera
- Progress callbacks and the row generator
- Exact output for a render of the empty sky
- Deterministic scenes rendered through the full pipeline
"""

import io

import numpy as np
import pytest


class TestRendererBasics:
    """Tests for Renderer setup and progress reporting."""

    def test_dimensions_follow_camera(self):
        from pathtracer.camera import CameraConfig
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(CameraConfig(image_width=8, aspect_ratio=2.0).build())
        assert renderer.width == 8
        assert renderer.height == 4
        assert renderer.total_pixels == 32
        assert renderer.color_sums().shape == (4, 8, 3)

    def test_oversized_camera_raises(self):
        from pathtracer.camera import CameraConfig
        from pathtracer.core.renderer import Renderer

        with pytest.raises(ValueError):
            Renderer(CameraConfig(image_width=4096).build())

    def test_callback_counts_pixels(self):
        from pathtracer.camera import CameraConfig
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(
            CameraConfig(image_width=4, aspect_ratio=2.0, samples_per_pixel=1).build()
        )
        progress = []
        renderer.render(callback=lambda done, total: progress.append((done, total)))
        assert progress == [(4, 8), (8, 8)]

    def test_render_rows_generator(self):
        from pathtracer.camera import CameraConfig
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(
            CameraConfig(image_width=3, aspect_ratio=1.0, samples_per_pixel=1).build()
        )
        assert list(renderer.render_rows()) == [3, 6, 9]
        assert renderer.color_sums().any()

    def test_repeated_render_replaces_result(self):
        """Rendering twice yields the same image, not doubled sums."""
        from pathtracer.camera import CameraConfig
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(
            CameraConfig(image_width=2, samples_per_pixel=3, vfov=0.001).build()
        )
        renderer.render()
        first_sums = renderer.color_sums()
        first_rgb = renderer.to_rgb8()

        renderer.render()
        assert np.allclose(renderer.color_sums(), first_sums, atol=1e-4)
        assert np.array_equal(renderer.to_rgb8(), first_rgb)

        list(renderer.render_rows())
        assert np.allclose(renderer.color_sums(), first_sums, atol=1e-4)
        assert renderer.to_rgb8()[0, 0].tolist() == [221, 236, 255]

    def test_reset_clears_samples(self):
        from pathtracer.camera import CameraConfig
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(CameraConfig(image_width=2, samples_per_pixel=1).build())
        renderer.render()
        renderer.reset()
        assert not renderer.color_sums().any()


class TestEndToEnd:
    """Full renders with known results."""

    def test_single_pixel_sky_ppm(self):
        """A 1x1 render of an empty scene looking down -z is the horizon color."""
        from pathtracer.camera import CameraConfig
        from pathtracer.core.renderer import Renderer
        from pathtracer.scene.presets import empty

        _, config = empty()
        # A tiny field of view keeps the jittered rays parallel to -z
        camera = config.with_image_width(1).with_vfov(0.001).build()
        renderer = Renderer(camera)
        renderer.render()

        stream = io.StringIO()
        renderer.write_ppm(stream)
        # sqrt(0.75), sqrt(0.85) and the clamped 1.0 quantized to 8 bits
        assert stream.getvalue() == "P3\n1 1\n255\n221 236 255\n"

    def test_zero_depth_renders_black(self):
        from pathtracer.camera import CameraConfig
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(CameraConfig(image_width=3, max_depth=0).build())
        renderer.render()
        assert not renderer.to_rgb8().any()

    def test_sphere_occludes_sky(self):
        """A black sphere filling the view renders black; the sky corners do not."""
        from pathtracer.camera import CameraConfig
        from pathtracer.core.renderer import Renderer
        from pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.0, 0.0, 0.0))

        renderer = Renderer(CameraConfig(image_width=9, samples_per_pixel=4).build())
        renderer.render()
        rgb = renderer.to_rgb8()

        assert rgb[4, 4].tolist() == [0, 0, 0]
        assert rgb[0, 0].min() > 150

    def test_png_and_ppm_agree(self, tmp_path):
        from PIL import Image

        from pathtracer.camera import CameraConfig
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(CameraConfig(image_width=4, samples_per_pixel=2).build())
        renderer.render()

        png_path = tmp_path / "out.png"
        ppm_path = tmp_path / "out.ppm"
        renderer.save_png(str(png_path))
        renderer.save_ppm(str(ppm_path))

        with Image.open(png_path) as png, Image.open(ppm_path) as ppm:
            assert np.array_equal(np.asarray(png), np.asarray(ppm))
