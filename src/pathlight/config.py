"""Render configuration and Taichi initialization.

``RenderConfig`` holds the settings that are not part of the scene itself:
the random seed, the display transform and how samples are batched.
``init_taichi`` picks the Taichi backend and must run before any module that
allocates Taichi fields is imported.
"""

from __future__ import annotations

import logging
import math
import secrets
from dataclasses import dataclass

import taichi as ti

from pathlight.output.tonemap import TONE_MAP_METHODS

logger = logging.getLogger(__name__)

# Seeds are passed to kernels as signed 32-bit integers
MAX_SEED = 2**31 - 1

ARCH_CHOICES = ("auto", "cpu", "gpu")


def random_seed() -> int:
    """Draw a seed from the operating system's random source."""
    return secrets.randbelow(MAX_SEED + 1)


@dataclass
class RenderConfig:
    """Settings for a render.

    Attributes:
        seed: Seed of the per-sample random numbers. A fixed seed reproduces
            the image bit for bit; None draws a fresh seed per renderer.
        gamma: Display gamma; output channels are c^(1/gamma).
        tone_map: "none", "reinhard" or "exposure", applied before gamma.
        exposure: Exposure for the "exposure" tone map.
        batch_size: Samples per pixel rendered per kernel launch.
        samples: Samples per pixel; overrides the scene's value when set.
    """

    seed: int | None = 0
    gamma: float = 2.2
    tone_map: str = "none"
    exposure: float = 1.0
    batch_size: int = 8
    samples: int | None = None

    def __post_init__(self) -> None:
        if self.seed is not None and not (
            isinstance(self.seed, int) and 0 <= self.seed <= MAX_SEED
        ):
            raise ValueError(f"seed must be an integer in [0, {MAX_SEED}], got {self.seed!r}")
        if not (math.isfinite(self.gamma) and self.gamma > 0.0):
            raise ValueError(f"gamma must be positive, got {self.gamma}")
        if self.tone_map not in TONE_MAP_METHODS:
            raise ValueError(
                f"tone_map must be one of {', '.join(TONE_MAP_METHODS)}, got {self.tone_map!r}"
            )
        if not (math.isfinite(self.exposure) and self.exposure > 0.0):
            raise ValueError(f"exposure must be positive, got {self.exposure}")
        if not (isinstance(self.batch_size, int) and self.batch_size > 0):
            raise ValueError(f"batch_size must be a positive integer, got {self.batch_size!r}")
        if self.samples is not None and not (
            isinstance(self.samples, int) and self.samples > 0
        ):
            raise ValueError(f"samples must be a positive integer, got {self.samples!r}")

    def resolve_seed(self) -> int:
        """The seed to render with: the configured one or a fresh random one."""
        if self.seed is None:
            seed = random_seed()
            logger.info("Using random seed %d", seed)
            return seed
        return self.seed


def init_taichi(arch: str = "auto", debug: bool = False, **kwargs) -> str:
    """Initialize Taichi.

    Args:
        arch: "gpu", "cpu", or "auto" to try the GPU and fall back to the CPU.
        debug: Enable Taichi's debug mode (bounds checks).
        **kwargs: Passed through to ``ti.init``.

    Returns:
        The architecture that was initialized ("gpu" or "cpu").

    Raises:
        ValueError: If ``arch`` is not one of ARCH_CHOICES.
    """
    if arch not in ARCH_CHOICES:
        raise ValueError(f"arch must be one of {', '.join(ARCH_CHOICES)}, got {arch!r}")

    if arch == "cpu":
        ti.init(arch=ti.cpu, debug=debug, **kwargs)
        chosen = "cpu"
    elif arch == "gpu":
        ti.init(arch=ti.gpu, debug=debug, **kwargs)
        chosen = "gpu"
    else:
        try:
            ti.init(arch=ti.gpu, debug=debug, **kwargs)
            chosen = "gpu"
        except Exception as e:
            logger.warning("GPU initialization failed (%s); falling back to CPU", e)
            ti.init(arch=ti.cpu, debug=debug, **kwargs)
            chosen = "cpu"

    logger.info("Taichi initialized on %s", chosen)
    return chosen
