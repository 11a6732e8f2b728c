#!/usr/bin/env python3
"""Render the sphere-only Cornell box scene.

This script renders the Cornell box preset end to end: it builds the scene,
renders it progressively with a progress line, and writes the image.

Usage:
    python examples/render_cornell_box.py [options]

Options:
    --width WIDTH       Image width in pixels (default: 256)
    --height HEIGHT     Image height in pixels (default: 256)
    --samples SAMPLES   Number of samples per pixel (default: 128)
    --output OUTPUT     Output file path (default: cornell_box.png)
    --batch-size SIZE   Samples per progress update (default: 8)
    --seed SEED         Random seed (default: 0)
    --quiet             Suppress progress output

Example:
    python examples/render_cornell_box.py --width 128 --height 128 --samples 32
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from pathlight.config import RenderConfig, init_taichi
from pathlight.logging_config import setup_logging

logger = logging.getLogger("pathlight.examples.cornell_box")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the Cornell box scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=256, help="Image width (default: 256)")
    parser.add_argument("--height", type=int, default=256, help="Image height (default: 256)")
    parser.add_argument(
        "--samples",
        type=int,
        default=128,
        help="Number of samples per pixel (default: 128)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="cornell_box.png",
        help="Output file path (default: cornell_box.png)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=8,
        help="Samples per progress update (default: 8)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_cornell_box(
    width: int = 256,
    height: int = 256,
    num_samples: int = 128,
    output_path: str = "cornell_box.png",
    batch_size: int = 8,
    seed: int = 0,
    quiet: bool = False,
) -> Path:
    """Render the Cornell box scene and save to file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathlight.core.renderer import Renderer
    from pathlight.scene.cornell_box import create_cornell_box_scene

    scene = create_cornell_box_scene(width=width, height=height, samples_per_pixel=num_samples)
    renderer = Renderer(scene, RenderConfig(seed=seed, batch_size=batch_size))

    start_time = time.perf_counter()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.perf_counter() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    result = renderer.render(callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = result.save(output_path)
    logger.info("Saved to %s in %.2fs", output_file.absolute(), result.elapsed)
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging(logging.WARNING if args.quiet else logging.INFO)

    try:
        init_taichi("auto")
        render_cornell_box(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            output_path=args.output,
            batch_size=args.batch_size,
            seed=args.seed,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
