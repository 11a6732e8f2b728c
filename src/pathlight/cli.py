"""Command-line entry point.

Usage:
    pathlight [scene.yml] [options]
    python -m pathlight [scene.yml] [options]

Options:
    -o, --output PATH       Output image (default: out/image.ppm); .ppm is
                            written as plain-text PPM, other suffixes via Pillow
    --width W, --height H   Override the scene's image size
    --samples N             Override the scene's samples per pixel
    --seed S                Random seed (default: 0)
    --random-seed           Draw a fresh seed from the OS
    --gamma G               Display gamma (default: 2.2)
    --tone-map METHOD       none, reinhard or exposure (default: none)
    --exposure E            Exposure for --tone-map exposure (default: 1.0)
    --batch-size B          Samples per kernel launch (default: 8)
    --arch ARCH             auto, cpu or gpu (default: auto)
    -v, --verbose           Debug logging
    -q, --quiet             Only warnings and errors
    --log-file PATH         Also write the log to a file

Example:
    pathlight examples/scene.yml -o out/spheres.png --samples 256
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pathlight import __version__
from pathlight.config import ARCH_CHOICES, RenderConfig, init_taichi
from pathlight.logging_config import setup_logging
from pathlight.output.tonemap import TONE_MAP_METHODS
from pathlight.scene.description import Scene
from pathlight.scene.loader import load_scene

logger = logging.getLogger(__name__)

DEFAULT_SCENE = "scene.yml"
DEFAULT_OUTPUT = "out/image.ppm"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pathlight",
        description="Render a scene of diffuse spheres with a Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "scene",
        nargs="?",
        default=DEFAULT_SCENE,
        help=f"Scene file (default: {DEFAULT_SCENE})",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=DEFAULT_OUTPUT,
        help=f"Output image path (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument("--width", type=int, help="Override the image width in pixels")
    parser.add_argument("--height", type=int, help="Override the image height in pixels")
    parser.add_argument("--samples", type=int, help="Override the samples per pixel")

    seed_group = parser.add_mutually_exclusive_group()
    seed_group.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    seed_group.add_argument(
        "--random-seed",
        action="store_true",
        help="Use a fresh random seed (non-reproducible)",
    )

    parser.add_argument("--gamma", type=float, default=2.2, help="Display gamma (default: 2.2)")
    parser.add_argument(
        "--tone-map",
        choices=TONE_MAP_METHODS,
        default="none",
        help="Tone mapping applied before gamma (default: none)",
    )
    parser.add_argument(
        "--exposure",
        type=float,
        default=1.0,
        help="Exposure for the exposure tone map (default: 1.0)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=8,
        help="Samples per pixel per kernel launch (default: 8)",
    )
    parser.add_argument(
        "--arch",
        choices=ARCH_CHOICES,
        default="auto",
        help="Taichi backend (default: auto, GPU with CPU fallback)",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Warnings and errors only")
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Build the RenderConfig described by parsed arguments.

    Raises:
        ValueError: If a setting is invalid.
    """
    return RenderConfig(
        seed=None if args.random_seed else args.seed,
        gamma=args.gamma,
        tone_map=args.tone_map,
        exposure=args.exposure,
        batch_size=args.batch_size,
        samples=args.samples,
    )


def prepare_scene(
    scene_path: str | Path,
    width: int | None = None,
    height: int | None = None,
) -> Scene:
    """Load a scene file and apply image size overrides."""
    scene = load_scene(scene_path)
    if width is not None or height is not None:
        scene = scene.with_overrides(width=width, height=height)
    return scene


def render_to_file(scene: Scene, output: str | Path, config: RenderConfig):
    """Render a scene and write the image.

    Taichi must already be initialized.

    Returns:
        The RenderResult.
    """
    # Field-allocating modules; imported after ti.init()
    from pathlight.core.renderer import Renderer

    renderer = Renderer(scene, config)
    result = renderer.render()
    path = result.save(output)
    logger.info(
        "Saved %s (%dx%d, %d spp, %.2fs)",
        path,
        result.width,
        result.height,
        result.samples_per_pixel,
        result.elapsed,
    )
    return result


def main(argv: list[str] | None = None) -> int:
    """Run the command line.

    Returns:
        Process exit code: 0 on success, 1 on error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    setup_logging(level, args.log_file)

    try:
        config = config_from_args(args)
        scene = prepare_scene(args.scene, width=args.width, height=args.height)
        init_taichi(args.arch)
        render_to_file(scene, args.output, config)
    except Exception as e:
        logger.error("%s", e)
        logger.debug("Traceback:", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
