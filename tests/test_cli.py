"""Tests for the command-line interface.

Taichi is initialized once per session, so these tests stub out ti.init
when going through main().
"""

import json

import pytest


@pytest.fixture
def no_reinit(monkeypatch):
    """Record ti.init() calls made by main() instead of re-initializing Taichi."""
    from pathtracer import cli

    calls = []
    monkeypatch.setattr(cli.ti, "init", lambda **kwargs: calls.append(kwargs))
    return calls


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        from pathtracer.cli import parse_args

        args = parse_args([])
        assert args.scene == "three_spheres"
        assert args.scene_file is None
        assert args.output == "-"
        assert args.arch == "cpu"
        assert args.width is None
        assert not args.quiet

    def test_scene_and_scene_file_are_exclusive(self):
        from pathtracer.cli import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--scene", "empty", "--scene-file", "x.json"])

    def test_unknown_scene_rejected(self):
        from pathtracer.cli import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--scene", "cornell_box"])


class TestMain:
    """Tests for end-to-end CLI runs."""

    def test_renders_ppm_to_stdout(self, no_reinit, capsys):
        from pathtracer.cli import main

        exit_code = main(
            ["--scene", "empty", "--width", "1", "--vfov", "0.001", "--samples", "4", "--quiet"]
        )
        assert exit_code == 0
        assert capsys.readouterr().out == "P3\n1 1\n255\n221 236 255\n"
        assert no_reinit == [{"arch": __import__("taichi").cpu}]

    def test_seed_is_forwarded(self, no_reinit, capsys):
        from pathtracer.cli import main

        assert main(["--scene", "empty", "--width", "1", "--seed", "9", "--quiet"]) == 0
        assert no_reinit[0]["random_seed"] == 9

    def test_overrides_preset_camera(self, no_reinit, capsys):
        from pathtracer.cli import main

        exit_code = main(
            [
                "--scene",
                "three_spheres",
                "--width",
                "8",
                "--aspect-ratio",
                "2",
                "--samples",
                "1",
                "--max-depth",
                "2",
                "--quiet",
            ]
        )
        assert exit_code == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[:3] == ["P3", "8 4", "255"]
        assert len(lines) == 3 + 32

    def test_writes_png(self, no_reinit, tmp_path):
        from PIL import Image

        from pathtracer.cli import main

        output = tmp_path / "out.png"
        assert main(["--scene", "empty", "--width", "6", "--output", str(output), "--quiet"]) == 0
        with Image.open(output) as img:
            assert img.size == (6, 6)

    def test_writes_ppm_file(self, no_reinit, tmp_path):
        from pathtracer.cli import main

        output = tmp_path / "out.ppm"
        assert main(["--scene", "empty", "--width", "2", "--output", str(output), "--quiet"]) == 0
        assert output.read_text().startswith("P3\n2 2\n255\n")

    def test_scene_file(self, no_reinit, tmp_path, capsys):
        from pathtracer.cli import main

        scene_path = tmp_path / "scene.json"
        scene_path.write_text(
            json.dumps(
                {
                    "materials": [{"type": "metal", "albedo": [0.9, 0.9, 0.9], "fuzz": 0.1}],
                    "spheres": [{"center": [0, 0, -1], "radius": 0.5, "material_id": 0}],
                    "camera": {"image_width": 3, "samples_per_pixel": 2},
                }
            )
        )
        assert main(["--scene-file", str(scene_path), "--quiet"]) == 0
        assert capsys.readouterr().out.startswith("P3\n3 3\n255\n")

    def test_unwritable_output_returns_1(self, no_reinit, tmp_path):
        from pathtracer.cli import main

        output = tmp_path / "missing" / "out.ppm"
        assert main(["--scene", "empty", "--width", "1", "--output", str(output), "--quiet"]) == 1

    def test_bad_scene_file_returns_1(self, no_reinit, tmp_path):
        from pathtracer.cli import main

        scene_path = tmp_path / "scene.json"
        scene_path.write_text("{not json")
        assert main(["--scene-file", str(scene_path), "--quiet"]) == 1

    @pytest.mark.parametrize(
        "data",
        [
            {"materials": [{"type": "lambertian", "albedo": [0.5, 0.5]}]},
            {"camera": {"samples_per_pixel": "many"}},
        ],
    )
    def test_malformed_scene_file_returns_1(self, no_reinit, tmp_path, data):
        from pathtracer.cli import main

        scene_path = tmp_path / "scene.json"
        scene_path.write_text(json.dumps(data))
        assert main(["--scene-file", str(scene_path), "--quiet"]) == 1

    def test_missing_scene_file_returns_1(self, no_reinit, tmp_path):
        from pathtracer.cli import main

        assert main(["--scene-file", str(tmp_path / "none.json"), "--quiet"]) == 1
