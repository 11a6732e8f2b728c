"""Upload of scene descriptions into Taichi fields.

The SceneManager is the bridge between the host-side ``Scene`` and the
kernel-side sphere storage in ``pathlight.scene.intersection``. Uploading a
scene clears whatever was stored before, writes every object in order (so
object indices match ``Scene.objects``) and installs the light list computed by
the Scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.scene.cornell_box import create_cornell_box_scene
    >>> from pathlight.scene.manager import SceneManager
    >>> manager = SceneManager()
    >>> manager.load(create_cornell_box_scene())
    >>> manager.get_light_count()
    1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pathlight.scene.description import Scene, SceneObject
from pathlight.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_light_count,
    get_sphere_count,
    set_lights,
)

logger = logging.getLogger(__name__)


@dataclass
class SphereInfo:
    """Information about a sphere uploaded to the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        is_light: Whether the sphere is sampled as a light.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    is_light: bool


class SceneManager:
    """Keeps the Taichi sphere storage in sync with a Scene.

    Attributes:
        scene: The scene currently uploaded, or None.
        spheres: SphereInfo for every uploaded sphere.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.scene: Scene | None = None
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the scene from the Taichi fields."""
        self._clear_all()
        self.scene = None

    def load(self, scene: Scene) -> None:
        """Upload a scene, replacing the previous one.

        Args:
            scene: The scene to upload.

        Raises:
            RuntimeError: If the scene holds more than MAX_SPHERES objects.
        """
        if len(scene.objects) > MAX_SPHERES:
            raise RuntimeError(
                f"Scene has {len(scene.objects)} objects; at most {MAX_SPHERES} are supported"
            )
        self._clear_all()
        for obj in scene.objects:
            self._add_object(obj)
        set_lights(scene.light_indices)
        self.scene = scene
        logger.debug(
            "Uploaded %d spheres, %d lights", get_sphere_count(), get_light_count()
        )

    def _add_object(self, obj: SceneObject) -> int:
        idx = add_sphere(
            obj.center.to_tuple(),
            obj.radius,
            albedo=obj.albedo.to_tuple(),
            emission=obj.emission.to_tuple(),
            material=obj.material,
        )
        self.spheres.append(
            SphereInfo(
                sphere_index=idx,
                center=obj.center.to_tuple(),
                radius=obj.radius,
                is_light=obj.is_light,
            )
        )
        return idx

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the Taichi fields."""
        return get_sphere_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the Taichi fields."""
        return get_light_count()

    def get_light_indices(self) -> list[int]:
        """Indices of the uploaded light spheres."""
        return [info.sphere_index for info in self.spheres if info.is_light]
