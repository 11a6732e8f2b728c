"""Display transform for rendered images.

The pipeline applied to the averaged linear radiance is:

1. Scrub: NaN and infinite channels become 0
2. Tone mapping (optional, "none" by default)
3. Gamma correction: c^(1/gamma), negative values clamped to 0

Values above 1 are kept; quantization to 8 bits clamps them (see
``pathlight.output.export.image_to_uint8``).
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]

TONE_MAP_METHODS: tuple[str, ...] = ("none", "reinhard", "exposure")


def scrub_non_finite(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float32]:
    """Replace NaN and +/-Inf channels with zero.

    Args:
        image: Image array of any shape.

    Returns:
        A float32 copy with every non-finite value set to 0.
    """
    result = np.array(image, dtype=np.float32, copy=True)
    result[~np.isfinite(result)] = 0.0
    return result


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Apply Reinhard tone mapping: L / (1 + L).

    Args:
        image: Linear HDR image array of shape (H, W, 3).

    Returns:
        Tone mapped image in [0, 1) range.
    """
    image = np.maximum(image, 0.0)
    result = image / (1.0 + image)
    return result.astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply exposure-based tone mapping: 1 - exp(-c * exposure).

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        exposure: Exposure value (default 1.0). Higher values brighten the image.

    Returns:
        Tone mapped image in [0, 1) range.
    """
    image = np.maximum(image, 0.0)
    result = 1.0 - np.exp(-image * exposure)
    return result.astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction: out = in^(1/gamma).

    Negative values are clamped to 0 first; there is no upper clamp.

    Args:
        image: Linear image array.
        gamma: Gamma value (default 2.2).

    Returns:
        Gamma corrected image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if not gamma > 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    image = np.maximum(image, 0.0)
    if gamma == 1.0:
        return image.astype(np.float32)

    result = np.power(image, 1.0 / gamma)
    return result.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.floating],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Scrub, tone map and gamma correct a linear image.

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        Finite, non-negative float32 image.

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    result = scrub_non_finite(image)

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map == "exposure":
        result = tone_map_exposure(result, exposure)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)

    # Gamma of a huge value can overflow back to inf
    return scrub_non_finite(result)
