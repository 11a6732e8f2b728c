"""Cornell box scene built only from spheres.

The classic Cornell box has flat walls. With sphere-only geometry each wall is
approximated by a very large sphere whose surface is nearly flat over the
visible area:

- Left wall: red diffuse
- Right wall: green diffuse
- Back wall, floor, ceiling: white diffuse
- Two white diffuse spheres on the floor
- A small spherical light under the ceiling

The box interior spans -1..1 on every axis; the front (z = -1) is open and the
camera looks in along +z.

Example:
    >>> from pathlight.scene.cornell_box import create_cornell_box_scene
    >>> scene = create_cornell_box_scene(width=128, height=128, samples_per_pixel=16)
    >>> len(scene.light_indices)
    1
"""

from dataclasses import dataclass

from pathlight.camera.model import PinholeCamera
from pathlight.core.color import Color
from pathlight.core.vector import V3
from pathlight.scene.description import Scene, SceneObject


@dataclass
class CornellBoxParams:
    """Parameters for configuring a Cornell box scene.

    Attributes:
        light_intensity: Emitted radiance of the light, per channel before
            tinting by ``light_color``.
        light_color: RGB tint of the light (each component in [0, 1]).
        left_wall_color: RGB albedo of the left wall.
        right_wall_color: RGB albedo of the right wall.
        back_wall_color: RGB albedo of the back wall, floor and ceiling.

    Example:
        >>> params = CornellBoxParams(light_intensity=60.0)
        >>> scene = create_cornell_box_scene(params=params)
    """

    light_intensity: float = 40.0
    light_color: tuple[float, float, float] = (1.0, 0.85, 0.7)
    left_wall_color: tuple[float, float, float] = (0.65, 0.05, 0.05)
    right_wall_color: tuple[float, float, float] = (0.12, 0.45, 0.15)
    back_wall_color: tuple[float, float, float] = (0.73, 0.73, 0.73)


# =============================================================================
# Cornell Box Geometry
# =============================================================================

# Half size of the box interior
BOX_HALF_SIZE = 1.0

# Radius of the spheres standing in for walls
WALL_RADIUS = 100.0

# Light under the ceiling
LIGHT_CENTER = (0.0, 0.75, 0.0)
LIGHT_RADIUS = 0.15

SPHERE_ALBEDO = (0.73, 0.73, 0.73)


def create_cornell_box_camera() -> PinholeCamera:
    """Camera in front of the open side, framing the whole box."""
    return PinholeCamera(
        position=V3(0.0, 0.0, -3.8),
        forward=V3(0.0, 0.0, 1.0),
        up=V3(0.0, 1.0, 0.0),
        screen_distance=1.0,
        screen_half_extent=0.36,
    )


def create_cornell_box_objects(params: CornellBoxParams | None = None) -> list[SceneObject]:
    """Build the walls, the two spheres and the light.

    Args:
        params: Colors and light settings; defaults to CornellBoxParams().

    Returns:
        The scene objects, walls first and the light last.
    """
    if params is None:
        params = CornellBoxParams()

    s = BOX_HALF_SIZE
    r = WALL_RADIUS
    white = Color.from_sequence(params.back_wall_color)

    def wall(center: V3, albedo: Color) -> SceneObject:
        return SceneObject(center=center, radius=r, albedo=albedo)

    objects = [
        # Looking along +z with +y up, the viewer's left is +x
        wall(V3(s + r, 0.0, 0.0), Color.from_sequence(params.left_wall_color)),
        wall(V3(-s - r, 0.0, 0.0), Color.from_sequence(params.right_wall_color)),
        wall(V3(0.0, 0.0, s + r), white),
        wall(V3(0.0, -s - r, 0.0), white),
        wall(V3(0.0, s + r, 0.0), white),
        SceneObject(
            center=V3(-0.4, -s + 0.4, 0.3),
            radius=0.4,
            albedo=Color.from_sequence(SPHERE_ALBEDO),
        ),
        SceneObject(
            center=V3(0.45, -s + 0.3, -0.25),
            radius=0.3,
            albedo=Color.from_sequence(SPHERE_ALBEDO),
        ),
    ]

    emission = Color.from_sequence(params.light_color) * params.light_intensity
    objects.append(
        SceneObject(
            center=V3(*LIGHT_CENTER),
            radius=LIGHT_RADIUS,
            albedo=Color.black(),
            emission=emission,
        )
    )
    return objects


def create_cornell_box_scene(
    width: int = 256,
    height: int = 256,
    samples_per_pixel: int = 64,
    params: CornellBoxParams | None = None,
) -> Scene:
    """Create the Cornell box scene.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Samples averaged per pixel.
        params: Colors and light settings.

    Returns:
        The Cornell box Scene with its camera.
    """
    return Scene(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        objects=create_cornell_box_objects(params),
        camera=create_cornell_box_camera(),
    )
