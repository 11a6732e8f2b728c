"""Unit tests for image quantization and file output."""

import numpy as np
import pytest
from PIL import Image as PILImage

from pathlight.output.export import (
    compute_rmse,
    image_to_uint8,
    load_image,
    save_image,
    save_png,
    save_ppm,
)


@pytest.fixture
def gradient():
    """A 2x3 display image with distinct pixels."""
    return np.array(
        [
            [[0.0, 0.0, 0.0], [0.5, 0.25, 1.0], [1.0, 1.0, 1.0]],
            [[2.0, -1.0, 0.1], [0.2, 0.4, 0.6], [np.nan, 0.999, 0.004]],
        ],
        dtype=np.float32,
    )


class TestQuantization:
    def test_clamps_and_truncates(self, gradient):
        pixels = image_to_uint8(gradient)
        assert pixels.dtype == np.uint8
        assert pixels[0, 1].tolist() == [127, 63, 255]
        assert pixels[0, 2].tolist() == [255, 255, 255]
        assert pixels[1, 0].tolist() == [255, 0, 25]
        assert pixels[1, 2].tolist() == [0, 254, 1]


class TestPpm:
    def test_plain_text_layout(self, gradient, tmp_path):
        path = save_ppm(gradient, tmp_path / "image.ppm")
        lines = path.read_text().splitlines()

        assert lines[:3] == ["P3", "3 2", "255"]
        assert len(lines) == 3 + 6
        # Row 0 first, left to right
        assert lines[3] == "0 0 0"
        assert lines[4] == "127 63 255"
        assert lines[6] == "255 0 25"

    def test_uint8_input_is_written_as_is(self, tmp_path):
        pixels = np.array([[[1, 2, 3]]], dtype=np.uint8)
        path = save_ppm(pixels, tmp_path / "one.ppm")
        assert path.read_text() == "P3\n1 1\n255\n1 2 3\n"

    def test_load_ppm(self, gradient, tmp_path):
        path = save_ppm(gradient, tmp_path / "image.ppm")
        assert np.array_equal(load_image(path), image_to_uint8(gradient))

    def test_load_rejects_other_magic(self, tmp_path):
        path = tmp_path / "binary.ppm"
        path.write_text("P6\n1 1\n255\n")
        with pytest.raises(ValueError, match="PPM"):
            load_image(path)

    def test_bad_shape_raises(self, tmp_path):
        with pytest.raises(ValueError, match="shape"):
            save_ppm(np.zeros((4, 4)), tmp_path / "flat.ppm")


class TestPillowFormats:
    def test_png_round_trip(self, gradient, tmp_path):
        path = save_png(gradient, tmp_path / "image.png")
        with PILImage.open(path) as img:
            assert img.size == (3, 2)
            assert img.mode == "RGB"
        assert np.array_equal(load_image(path), image_to_uint8(gradient))


class TestSaveImage:
    @pytest.mark.parametrize("name", ["image.ppm", "image.PPM", "image.png"])
    def test_dispatch_by_suffix_and_mkdir(self, gradient, tmp_path, name):
        path = save_image(gradient, tmp_path / "a" / "b" / name)
        assert path.is_file()
        is_ppm = path.read_bytes().startswith(b"P3")
        assert is_ppm == name.lower().endswith(".ppm")

    def test_logs_written_path(self, gradient, tmp_path, caplog):
        with caplog.at_level("INFO", logger="pathlight"):
            path = save_image(gradient, tmp_path / "image.ppm")
        assert str(path) in caplog.text


class TestRmse:
    def test_identical_images(self, gradient):
        clean = np.nan_to_num(gradient)
        assert compute_rmse(clean, clean) == 0.0

    def test_known_value(self):
        a = np.zeros((2, 2, 3), dtype=np.float32)
        b = np.full((2, 2, 3), 0.5, dtype=np.float32)
        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError, match="shapes"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)))
