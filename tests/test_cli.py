"""Tests for the command-line interface."""

import logging

import numpy as np
import pytest

from pathlight import cli
from pathlight.config import RenderConfig
from pathlight.logging_config import LOGGER_NAME

SCENE_YAML = """\
width: 6
height: 4
samples_per_pixel: 2
camera:
  position: [0, 0, -3]
objects:
  - center: [0, 0, 0]
    radius: 1.0
    albedo: [0.7, 0.7, 0.7]
  - center: [0, 3, -1]
    radius: 0.5
    albedo: [0, 0, 0]
    emission: [20, 20, 20]
"""


@pytest.fixture(autouse=True)
def restore_logging():
    """main() installs handlers on the package logger; remove them afterwards."""
    logger = logging.getLogger(LOGGER_NAME)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)


@pytest.fixture
def scene_file(tmp_path):
    path = tmp_path / "scene.yml"
    path.write_text(SCENE_YAML)
    return path


@pytest.fixture
def no_taichi_init(monkeypatch):
    """Keep the test session's Taichi runtime; main() would otherwise re-init it."""
    calls = []
    monkeypatch.setattr(cli, "init_taichi", lambda arch: calls.append(arch) or "cpu")
    return calls


class TestParser:
    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        assert args.scene == cli.DEFAULT_SCENE
        assert args.output == cli.DEFAULT_OUTPUT
        assert args.seed == 0
        assert not args.random_seed
        assert args.gamma == 2.2
        assert args.tone_map == "none"
        assert args.batch_size == 8
        assert args.arch == "auto"
        assert args.width is None and args.height is None and args.samples is None

    def test_all_options(self):
        args = cli.build_parser().parse_args(
            [
                "my.yml",
                "-o",
                "x.png",
                "--width",
                "10",
                "--height",
                "20",
                "--samples",
                "3",
                "--seed",
                "42",
                "--gamma",
                "1.8",
                "--tone-map",
                "reinhard",
                "--exposure",
                "2",
                "--batch-size",
                "4",
                "--arch",
                "cpu",
                "-v",
                "--log-file",
                "run.log",
            ]
        )
        assert args.scene == "my.yml"
        assert args.output == "x.png"
        assert (args.width, args.height, args.samples) == (10, 20, 3)
        assert args.seed == 42
        assert args.tone_map == "reinhard"
        assert args.verbose
        assert args.log_file == "run.log"

    @pytest.mark.parametrize(
        "argv",
        [
            ["--seed", "1", "--random-seed"],
            ["-v", "-q"],
            ["--tone-map", "filmic"],
            ["--arch", "tpu"],
            ["--samples", "many"],
        ],
    )
    def test_invalid_arguments_exit(self, argv):
        with pytest.raises(SystemExit) as excinfo:
            cli.build_parser().parse_args(argv)
        assert excinfo.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--version"])
        assert "pathlight" in capsys.readouterr().out


class TestConfigFromArgs:
    def test_fixed_seed(self):
        args = cli.build_parser().parse_args(["--seed", "9", "--samples", "5", "--gamma", "2.0"])
        config = cli.config_from_args(args)
        assert config == RenderConfig(seed=9, gamma=2.0, samples=5)

    def test_random_seed(self):
        config = cli.config_from_args(cli.build_parser().parse_args(["--random-seed"]))
        assert config.seed is None

    def test_invalid_value_raises(self):
        args = cli.build_parser().parse_args(["--batch-size", "0"])
        with pytest.raises(ValueError, match="batch_size"):
            cli.config_from_args(args)


class TestPrepareScene:
    def test_overrides(self, scene_file):
        scene = cli.prepare_scene(scene_file, width=12)
        assert (scene.width, scene.height) == (12, 4)

    def test_no_overrides(self, scene_file):
        scene = cli.prepare_scene(scene_file)
        assert (scene.width, scene.height, scene.samples_per_pixel) == (6, 4, 2)


class TestMain:
    def test_missing_scene_returns_error(self, tmp_path, caplog, no_taichi_init):
        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            code = cli.main([str(tmp_path / "missing.yml"), "-q"])
        assert code == 1
        assert "Scene file not found" in caplog.text
        assert no_taichi_init == []

    def test_invalid_scene_returns_error(self, tmp_path, caplog, no_taichi_init):
        path = tmp_path / "bad.yml"
        path.write_text("width: 4\nheight: 4\n")
        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            code = cli.main([str(path), "-q"])
        assert code == 1
        assert "samples_per_pixel" in caplog.text

    def test_invalid_config_returns_error(self, scene_file, no_taichi_init):
        assert cli.main([str(scene_file), "--gamma", "-1", "-q"]) == 1
        assert no_taichi_init == []

    def test_renders_scene_to_ppm(self, scene_file, tmp_path, no_taichi_init):
        from pathlight.output.export import load_image

        output = tmp_path / "out" / "image.ppm"
        code = cli.main([str(scene_file), "-o", str(output), "--arch", "cpu", "-q"])

        assert code == 0
        assert no_taichi_init == ["cpu"]
        pixels = load_image(output)
        assert pixels.shape == (4, 6, 3)
        assert pixels.max() > 0

    def test_log_file(self, scene_file, tmp_path, no_taichi_init):
        log_file = tmp_path / "run.log"
        output = tmp_path / "image.png"
        code = cli.main([str(scene_file), "-o", str(output), "--samples", "1", "--log-file", str(log_file)])

        assert code == 0
        assert output.is_file()
        text = log_file.read_text()
        assert "Rendered 1 samples per pixel" in text
        assert "Saved" in text


class TestRenderToFile:
    def test_render_to_file(self, scene_file, tmp_path):
        from pathlight.output.export import load_image

        scene = cli.prepare_scene(scene_file)
        result = cli.render_to_file(scene, tmp_path / "image.png", RenderConfig(seed=1))

        assert result.samples_per_pixel == 2
        assert result.seed == 1
        assert np.array_equal(load_image(tmp_path / "image.png"), result.to_uint8())
