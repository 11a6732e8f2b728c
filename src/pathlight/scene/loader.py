"""Scene file loading.

Scene files are YAML (JSON documents are accepted too, being valid YAML):

    width: 320
    height: 240
    samples_per_pixel: 64
    camera:
      position: [0, 0, 0]
      forward: [0, 0, 1]
    objects:
      - center: [0, 0, 5]
        radius: 1.0
        albedo: [0.8, 0.8, 0.8]
        emission: [0, 0, 0]
        material: Diffuse

``camera`` and the per-object ``emission`` and ``material`` keys are optional.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from pathlight.scene.description import Scene

logger = logging.getLogger(__name__)


def parse_scene(data: Any, source: str = "<scene>") -> Scene:
    """Validate a decoded scene document.

    Args:
        data: The decoded document.
        source: Name used in error messages.

    Returns:
        The validated Scene.

    Raises:
        ValueError: If the document is malformed.
    """
    try:
        return Scene.from_dict(data)
    except ValueError as e:
        raise ValueError(f"{source}: {e}") from e


def load_scene(path: str | Path) -> Scene:
    """Load and validate a scene file.

    Args:
        path: Path to a YAML scene file.

    Returns:
        The validated Scene.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid YAML or the scene is malformed.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Scene file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"{path}: invalid YAML: {e}") from e

    scene = parse_scene(data, source=str(path))
    logger.info(
        "Loaded %s: %dx%d, %d spp, %d objects",
        path,
        scene.width,
        scene.height,
        scene.samples_per_pixel,
        len(scene.objects),
    )
    return scene


def save_scene(scene: Scene, path: str | Path) -> Path:
    """Write a scene to a YAML file.

    Args:
        scene: The scene to write.
        path: Destination path. Parent directories are created.

    Returns:
        The path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(scene.to_dict(), f, sort_keys=False)
    logger.info("Wrote scene to %s", path)
    return path
