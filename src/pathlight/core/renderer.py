"""Render driver with progressive sample accumulation.

This module wraps the integrator kernels in a Renderer that:
- Uploads a Scene (spheres, lights, camera) and sizes the render target
- Accumulates samples per pixel in batches, with progress callbacks or a
  generator interface
- Produces the display image (scrubbed, optionally tone mapped, gamma
  corrected) and writes it to disk

The render target and scene storage are module-level Taichi fields, so one
Renderer drives them at a time; constructing a new Renderer replaces the
uploaded scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.core.renderer import Renderer
    >>> from pathlight.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> renderer = Renderer(create_cornell_box_scene(width=128, height=128))
    >>> result = renderer.render()
    >>> result.save("out/cornell_box.png")
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt

from pathlight.camera.pinhole import setup_camera
from pathlight.config import RenderConfig
from pathlight.core.integrator import (
    clear_render_target,
    get_linear_image_numpy,
    get_non_finite_count,
    get_total_samples,
    render_image,
    setup_render_target,
)
from pathlight.output.export import image_to_uint8, save_image
from pathlight.output.tonemap import process_image_for_display, scrub_non_finite
from pathlight.scene.description import Scene
from pathlight.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


@dataclass
class RenderResult:
    """Outcome of a render.

    Attributes:
        image: Display image (H, W, 3) float32: scrubbed, tone mapped and
            gamma corrected; not clamped.
        linear: Averaged linear radiance (H, W, 3) float32, scrubbed.
        samples_per_pixel: Samples averaged per pixel.
        seed: Seed the samples were drawn with.
        non_finite_samples: Samples whose radiance was not finite and was
            replaced with zero.
        elapsed: Wall-clock render time in seconds.
    """

    image: npt.NDArray[np.float32]
    linear: npt.NDArray[np.float32]
    samples_per_pixel: int
    seed: int
    non_finite_samples: int = 0
    elapsed: float = 0.0

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    def to_uint8(self) -> npt.NDArray[np.uint8]:
        """Quantize the display image to 8 bits per channel."""
        return image_to_uint8(self.image)

    def save(self, filepath: str | Path) -> Path:
        """Write the display image (format from the suffix)."""
        return save_image(self.image, filepath)


class Renderer:
    """Progressive renderer for one scene.

    Attributes:
        scene: The scene being rendered.
        config: Render settings.
        seed: Seed in use (resolved from the config at construction).
    """

    def __init__(self, scene: Scene, config: RenderConfig | None = None) -> None:
        """Upload the scene and camera and set up the render target.

        Args:
            scene: The scene to render.
            config: Render settings; defaults to RenderConfig().

        Raises:
            ValueError: If the image is larger than the render target or the
                camera frame is degenerate.
            RuntimeError: If the scene holds too many objects.
        """
        self.scene = scene
        self.config = config if config is not None else RenderConfig()
        self.seed = self.config.resolve_seed()

        self._manager = SceneManager()
        self._manager.load(scene)
        setup_camera(scene.camera, scene.aspect_ratio)
        setup_render_target(scene.width, scene.height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.scene.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.scene.height

    @property
    def target_samples(self) -> int:
        """Samples per pixel a full render accumulates."""
        if self.config.samples is not None:
            return self.config.samples
        return self.scene.samples_per_pixel

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    @property
    def non_finite_samples(self) -> int:
        """Samples scrubbed to zero so far."""
        return get_non_finite_count()

    def reset(self) -> None:
        """Discard accumulated samples; the next render starts from sample 0."""
        clear_render_target()

    def render_progressive(
        self,
        num_samples: int | None = None,
        batch_size: int | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples in batches, yielding progress after each batch.

        Args:
            num_samples: Samples per pixel to add; defaults to target_samples.
            batch_size: Samples per batch; defaults to config.batch_size.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        if num_samples is None:
            num_samples = self.target_samples
        if batch_size is None:
            batch_size = self.config.batch_size
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if num_samples <= 0:
            return

        start_samples = self.sample_count
        target_samples = start_samples + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, seed=self.seed)
            remaining -= batch
            logger.debug("Accumulated %d/%d samples", self.sample_count, target_samples)
            yield (self.sample_count, target_samples)

    def render(
        self,
        num_samples: int | None = None,
        batch_size: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> RenderResult:
        """Accumulate samples and return the resulting image.

        Can be called repeatedly to keep refining the same image.

        Args:
            num_samples: Samples per pixel to add; defaults to target_samples.
            batch_size: Samples per batch; defaults to config.batch_size.
            callback: Called after each batch with
                (current_total_samples, target_total_samples).

        Returns:
            The RenderResult for everything accumulated so far.
        """
        if num_samples is None:
            num_samples = self.target_samples

        logger.info(
            "Rendering %dx%d, %d samples per pixel, seed %d",
            self.width,
            self.height,
            num_samples,
            self.seed,
        )
        start_time = time.perf_counter()

        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

        elapsed = time.perf_counter() - start_time
        result = self.result(elapsed)
        logger.info("Rendered %d samples per pixel in %.2fs", result.samples_per_pixel, elapsed)
        if result.non_finite_samples:
            logger.warning(
                "%d samples produced non-finite radiance and were replaced with zero",
                result.non_finite_samples,
            )
        return result

    def get_linear_image(self) -> npt.NDArray[np.float32]:
        """Averaged linear radiance (H, W, 3), non-finite values zeroed."""
        return scrub_non_finite(get_linear_image_numpy())

    def get_image(self) -> npt.NDArray[np.float32]:
        """Display image (H, W, 3) using the configured tone map and gamma."""
        return process_image_for_display(
            get_linear_image_numpy(),
            tone_map=self.config.tone_map,
            gamma=self.config.gamma,
            exposure=self.config.exposure,
        )

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Display image quantized to 8 bits."""
        return image_to_uint8(self.get_image())

    def result(self, elapsed: float = 0.0) -> RenderResult:
        """Snapshot of the current accumulation."""
        return RenderResult(
            image=self.get_image(),
            linear=self.get_linear_image(),
            samples_per_pixel=self.sample_count,
            seed=self.seed,
            non_finite_samples=self.non_finite_samples,
            elapsed=elapsed,
        )

    def save_image(self, filepath: str | Path) -> Path:
        """Save the current display image (format from the suffix)."""
        return save_image(self.get_image(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}, seed={self.seed})"
        )


def render_scene(scene: Scene, config: RenderConfig | None = None) -> RenderResult:
    """Render a scene to completion.

    Args:
        scene: The scene to render.
        config: Render settings; defaults to RenderConfig().

    Returns:
        The finished RenderResult.
    """
    return Renderer(scene, config).render()
