"""Host-side pinhole camera description.

The camera sits at ``position`` and looks along ``forward``. A virtual screen
is placed ``screen_distance`` in front of it; ``screen_half_extent`` is half of
the screen's world-space width, so the field of view is expressed as a screen
size rather than an angle. The vertical half extent follows from the image
aspect ratio.

The orthonormal basis is built from cross products of the forward direction
and the up hint:

    right = normalize(forward x up_hint)
    up    = right x forward

This module holds no Taichi state and can be used before ``ti.init()``. The
Taichi side lives in ``pathlight.camera.pinhole``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from pathlight.core.vector import V3, V3U


def _number(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid {key}: {value!r}") from e


@dataclass(frozen=True)
class CameraBasis:
    """Orthonormal camera frame and screen size for one image shape."""

    origin: V3
    forward: V3U
    right: V3U
    up: V3U
    screen_distance: float
    half_width: float
    half_height: float


@dataclass(frozen=True)
class PinholeCamera:
    """Configuration for a pinhole camera.

    Attributes:
        position: Camera position in world space.
        forward: Viewing direction (any non-zero length).
        up: Up hint; must not be parallel to ``forward``.
        screen_distance: Distance from the camera to the virtual screen.
        screen_half_extent: Half of the screen width in world units.
    """

    position: V3 = field(default_factory=V3.zero)
    forward: V3 = field(default_factory=lambda: V3(0.0, 0.0, 1.0))
    up: V3 = field(default_factory=lambda: V3(0.0, 1.0, 0.0))
    screen_distance: float = 1.0
    screen_half_extent: float = 1.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.screen_distance) and self.screen_distance > 0.0):
            raise ValueError(
                f"screen_distance must be positive, got {self.screen_distance}"
            )
        if not (math.isfinite(self.screen_half_extent) and self.screen_half_extent > 0.0):
            raise ValueError(
                f"screen_half_extent must be positive, got {self.screen_half_extent}"
            )
        if self.forward.square_norm() == 0.0:
            raise ValueError("Camera forward direction must be non-zero")
        if self.up.square_norm() == 0.0:
            raise ValueError("Camera up hint must be non-zero")

    def basis(self, aspect_ratio: float) -> CameraBasis:
        """Build the camera frame for an image of the given aspect ratio.

        Args:
            aspect_ratio: Image width divided by height.

        Returns:
            The camera basis with right/up/forward unit vectors and screen size.

        Raises:
            ValueError: If the aspect ratio is not positive or ``up`` is parallel
                to ``forward``.
        """
        if not aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")

        forward = self.forward.normalize()
        side = forward.as_v3().cross(self.up)
        if side.norm() < 1e-6 * self.up.norm():
            raise ValueError("Camera up hint must not be parallel to the forward direction")
        right = side.normalize()
        up = right.cross(forward)

        return CameraBasis(
            origin=self.position,
            forward=forward,
            right=right,
            up=up,
            screen_distance=self.screen_distance,
            half_width=self.screen_half_extent,
            half_height=self.screen_half_extent / aspect_ratio,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the mapping used in scene files."""
        return {
            "position": list(self.position.to_tuple()),
            "forward": list(self.forward.to_tuple()),
            "up": list(self.up.to_tuple()),
            "screen_distance": self.screen_distance,
            "screen_half_extent": self.screen_half_extent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PinholeCamera:
        """Build a camera from a scene-file mapping; missing keys take defaults."""
        defaults = cls()
        return cls(
            position=V3.from_sequence(data.get("position", defaults.position.to_tuple())),
            forward=V3.from_sequence(data.get("forward", defaults.forward.to_tuple())),
            up=V3.from_sequence(data.get("up", defaults.up.to_tuple())),
            screen_distance=_number(data, "screen_distance", defaults.screen_distance),
            screen_half_extent=_number(
                data, "screen_half_extent", defaults.screen_half_extent
            ),
        )
