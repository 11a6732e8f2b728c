"""In-memory scene description.

A Scene is the decoded, validated input of a render: image size, samples per
pixel, the camera and an ordered, immutable list of spherical objects. The set
of light sources (objects with non-black emission) is derived once when the
scene is built and reused for every light sample during rendering.

Nothing here touches Taichi; ``pathlight.scene.manager`` uploads a Scene into
the kernel-side fields.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Sequence

from pathlight.camera.model import PinholeCamera
from pathlight.core.color import Color
from pathlight.core.vector import V3
from pathlight.materials.material import Material

logger = logging.getLogger(__name__)

# Scene-file keys holding the albedo, in order of preference
ALBEDO_KEYS = ("albedo", "color", "lambertian")


@dataclass(frozen=True)
class SceneObject:
    """A sphere with its surface properties.

    Attributes:
        center: Sphere center.
        radius: Sphere radius (> 0).
        albedo: Diffuse reflectance, every channel in [0, 1].
        emission: Emitted radiance; black for non-emissive objects.
        material: Material tag.
    """

    center: V3
    radius: float
    albedo: Color
    emission: Color = field(default_factory=Color.black)
    material: Material = Material.DIFFUSE

    def __post_init__(self) -> None:
        if not (math.isfinite(self.radius) and self.radius > 0.0):
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        if not all(math.isfinite(c) for c in self.center):
            raise ValueError(f"Sphere center must be finite, got {self.center}")
        if not all(math.isfinite(c) and 0.0 <= c <= 1.0 for c in self.albedo):
            raise ValueError(f"Albedo channels must lie in [0, 1], got {self.albedo}")
        if not all(math.isfinite(c) and c >= 0.0 for c in self.emission):
            raise ValueError(
                f"Emission channels must be finite and non-negative, got {self.emission}"
            )
        if not isinstance(self.material, Material):
            object.__setattr__(self, "material", Material(self.material))

    @property
    def is_light(self) -> bool:
        """True if the object emits light."""
        return not self.emission.is_black()

    def to_dict(self) -> dict[str, Any]:
        return {
            "center": list(self.center.to_tuple()),
            "radius": self.radius,
            "albedo": list(self.albedo.to_tuple()),
            "emission": list(self.emission.to_tuple()),
            "material": self.material.label,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SceneObject:
        """Build an object from a scene-file mapping.

        ``color`` and ``lambertian`` are accepted in place of ``albedo``;
        ``emission`` defaults to black and ``material`` to Diffuse.

        Raises:
            ValueError: On missing keys or invalid values.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Object must be a mapping, got {type(data).__name__}")
        albedo = next(
            (data[key] for key in ALBEDO_KEYS if data.get(key) is not None), None
        )
        if albedo is None:
            raise ValueError("Object is missing 'albedo'")
        for key in ("center", "radius"):
            if key not in data:
                raise ValueError(f"Object is missing '{key}'")
        try:
            radius = float(data["radius"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid radius: {data['radius']!r}") from e
        emission = data.get("emission")
        return cls(
            center=V3.from_sequence(data["center"]),
            radius=radius,
            albedo=Color.from_sequence(albedo),
            emission=Color.black() if emission is None else Color.from_sequence(emission),
            material=Material.from_name(data.get("material", Material.DIFFUSE.label)),
        )


@dataclass(frozen=True)
class Scene:
    """Everything a render reads.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Radiance estimates averaged per pixel.
        objects: Ordered spheres; stored as a tuple.
        camera: Pinhole camera.
        light_indices: Indices into ``objects`` of every emissive object,
            computed at construction.
    """

    width: int
    height: int
    samples_per_pixel: int
    objects: Sequence[SceneObject] = ()
    camera: PinholeCamera = field(default_factory=PinholeCamera)
    light_indices: tuple[int, ...] = field(init=False)

    def __post_init__(self) -> None:
        for name in ("width", "height", "samples_per_pixel"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

        objects = tuple(self.objects)
        for index, obj in enumerate(objects):
            if not isinstance(obj, SceneObject):
                raise ValueError(f"Object {index} is not a SceneObject: {obj!r}")
        object.__setattr__(self, "objects", objects)

        lights = tuple(i for i, obj in enumerate(objects) if obj.is_light)
        object.__setattr__(self, "light_indices", lights)

        if not lights:
            logger.warning(
                "Scene has no emissive objects; direct lighting is disabled and the "
                "image will be black"
            )
        logger.debug(
            "Scene %dx%d, %d spp, %d objects, %d lights",
            self.width,
            self.height,
            self.samples_per_pixel,
            len(objects),
            len(lights),
        )

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def lights(self) -> tuple[SceneObject, ...]:
        """The emissive objects, in scene order."""
        return tuple(self.objects[i] for i in self.light_indices)

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "samples_per_pixel": self.samples_per_pixel,
            "camera": self.camera.to_dict(),
            "objects": [obj.to_dict() for obj in self.objects],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Scene:
        """Build a scene from a decoded scene-file mapping.

        Raises:
            ValueError: On missing keys or invalid values. Errors inside an
                object name its index.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Scene must be a mapping, got {type(data).__name__}")
        for key in ("width", "height", "samples_per_pixel"):
            if key not in data:
                raise ValueError(f"Scene is missing '{key}'")

        raw_objects = data.get("objects") or []
        if not isinstance(raw_objects, list):
            raise ValueError("'objects' must be a list")
        objects = []
        for index, raw in enumerate(raw_objects):
            try:
                objects.append(SceneObject.from_dict(raw))
            except ValueError as e:
                raise ValueError(f"Object {index}: {e}") from e

        camera_data = data.get("camera") or {}
        if not isinstance(camera_data, dict):
            raise ValueError("'camera' must be a mapping")
        try:
            camera = PinholeCamera.from_dict(camera_data)
        except ValueError as e:
            raise ValueError(f"Camera: {e}") from e

        return cls(
            width=data["width"],
            height=data["height"],
            samples_per_pixel=data["samples_per_pixel"],
            objects=objects,
            camera=camera,
        )

    def with_overrides(
        self,
        width: int | None = None,
        height: int | None = None,
        samples_per_pixel: int | None = None,
    ) -> Scene:
        """Return a copy with the given image settings replaced."""
        return Scene(
            width=self.width if width is None else width,
            height=self.height if height is None else height,
            samples_per_pixel=(
                self.samples_per_pixel if samples_per_pixel is None else samples_per_pixel
            ),
            objects=self.objects,
            camera=self.camera,
        )
