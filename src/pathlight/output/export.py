"""Image writers for rendered images.

Supported formats:
    - PPM (plain-text "P3", no dependencies beyond NumPy)
    - PNG and every other format Pillow knows, chosen by file suffix

Images handed to the writers are display-ready float arrays of shape
(height, width, 3), row 0 at the top; they are quantized with
``image_to_uint8``.

Example:
    >>> from pathlight.output.export import save_image
    >>> save_image(result.image, "out/image.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize a display-ready image to 8 bits.

    Non-finite values become 0, channels are clamped to [0, 1] and scaled by
    255 with truncation.

    Args:
        image: Float image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    image = np.nan_to_num(np.asarray(image, dtype=np.float32), nan=0.0, posinf=0.0, neginf=0.0)
    image = np.clip(image, 0.0, 1.0)
    return (image * 255).astype(np.uint8)


def _check_shape(image: np.ndarray) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def save_ppm(image: npt.NDArray, filepath: str | Path) -> Path:
    """Write a plain-text (P3) PPM file.

    The header is ``P3``, ``<width> <height>``, ``255``, followed by one
    ``r g b`` line per pixel, row by row from the top.

    Args:
        image: Float image in [0, 1] (quantized here) or a uint8 image, shape
            (H, W, 3).
        filepath: Output path.

    Returns:
        The path written.
    """
    image = np.asarray(image)
    _check_shape(image)
    pixels = image if image.dtype == np.uint8 else image_to_uint8(image)
    height, width, _ = pixels.shape

    path = Path(filepath)
    with path.open("w", encoding="ascii") as f:
        f.write(f"P3\n{width} {height}\n255\n")
        for r, g, b in pixels.reshape(-1, 3):
            f.write(f"{r} {g} {b}\n")
    return path


def save_png(image: npt.NDArray, filepath: str | Path) -> Path:
    """Write an image with Pillow (format from the file suffix, e.g. PNG).

    Args:
        image: Float image in [0, 1] or a uint8 image, shape (H, W, 3).
        filepath: Output path.

    Returns:
        The path written.
    """
    image = np.asarray(image)
    _check_shape(image)
    pixels = image if image.dtype == np.uint8 else image_to_uint8(image)

    path = Path(filepath)
    pil_image = PILImage.fromarray(np.ascontiguousarray(pixels))
    pil_image.save(path)
    return path


def save_image(image: npt.NDArray, filepath: str | Path) -> Path:
    """Write an image, picking the writer from the suffix.

    ``.ppm`` files are written as plain-text PPM, anything else through Pillow.
    Missing parent directories are created.

    Args:
        image: Float image in [0, 1] or a uint8 image, shape (H, W, 3).
        filepath: Output path.

    Returns:
        The path written.

    Raises:
        OSError: If the file cannot be written.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix.lower() == ".ppm":
        save_ppm(image, path)
    else:
        save_png(image, path)

    logger.info("Wrote %s", path)
    return path


def load_image(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Read an image written by ``save_image`` back as uint8 (H, W, 3).

    Plain-text PPM files are parsed directly; other formats go through Pillow.
    """
    path = Path(filepath)
    if path.suffix.lower() == ".ppm":
        with path.open("r", encoding="ascii") as f:
            tokens = f.read().split()
        if not tokens or tokens[0] != "P3":
            raise ValueError(f"{path}: not a plain-text PPM file")
        width, height, _ = (int(t) for t in tokens[1:4])
        values = np.array([int(t) for t in tokens[4:]], dtype=np.uint8)
        return values.reshape(height, width, 3)

    with PILImage.open(path) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
