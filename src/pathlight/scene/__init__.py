"""Scene module for scene description, loading and ray queries.

Components:
    description: Validated in-memory Scene and SceneObject
    loader: YAML scene files
    cornell_box: Sphere-only Cornell box preset
    intersection: Taichi sphere storage and scene-level ray queries
    manager: Upload of a Scene into the Taichi fields

``intersection`` and ``manager`` allocate Taichi fields on import; import them
directly after ``ti.init()``.
"""

from .cornell_box import CornellBoxParams, create_cornell_box_scene
from .description import Scene, SceneObject
from .loader import load_scene, parse_scene, save_scene

__all__ = [
    "Scene",
    "SceneObject",
    "load_scene",
    "parse_scene",
    "save_scene",
    "CornellBoxParams",
    "create_cornell_box_scene",
]
