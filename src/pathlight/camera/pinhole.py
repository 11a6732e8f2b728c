"""Pinhole camera ray generation for Taichi kernels.

The camera frame computed by ``PinholeCamera.basis`` is uploaded into Taichi
fields by ``setup_camera``; ``get_ray`` and ``get_ray_jittered`` then build
primary rays inside kernels.

Image coordinates are normalized:
- u = 0: left edge of the image, u = 1: right edge
- v = 0: top edge of the image, v = 1: bottom edge

so pixel row 0 is the top row of the output buffer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.camera.model import PinholeCamera
    >>> from pathlight.camera.pinhole import setup_camera, get_ray
    >>> setup_camera(PinholeCamera(), aspect_ratio=4.0 / 3.0)
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through the image center
"""

import taichi as ti
import taichi.math as tm

from pathlight.camera.model import CameraBasis, PinholeCamera
from pathlight.core.ray import Ray, make_ray, vec3

# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())

_screen_distance = ti.field(dtype=ti.f32, shape=())
_half_width = ti.field(dtype=ti.f32, shape=())
_half_height = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side)
# =============================================================================


def setup_camera(camera: PinholeCamera, aspect_ratio: float) -> CameraBasis:
    """Upload the camera frame for an image of the given aspect ratio.

    Args:
        camera: Camera configuration.
        aspect_ratio: Image width divided by height.

    Returns:
        The basis that was uploaded.

    Raises:
        ValueError: If the camera frame is degenerate (see ``PinholeCamera.basis``).
    """
    basis = camera.basis(aspect_ratio)

    _camera_origin[None] = list(basis.origin.to_tuple())
    _camera_forward[None] = list(basis.forward.to_tuple())
    _camera_right[None] = list(basis.right.to_tuple())
    _camera_up[None] = list(basis.up.to_tuple())

    _screen_distance[None] = basis.screen_distance
    _half_width[None] = basis.half_width
    _half_height[None] = basis.half_height

    return basis


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (top to bottom).

    Returns:
        A Ray from the camera position through the matching screen point.
    """
    sx = (2.0 * u - 1.0) * _half_width[None]
    sy = (1.0 - 2.0 * v) * _half_height[None]

    origin = _camera_origin[None]
    screen_point = (
        origin
        + _screen_distance[None] * _camera_forward[None]
        + sx * _camera_right[None]
        + sy * _camera_up[None]
    )
    direction = tm.normalize(screen_point - origin)

    return make_ray(origin, direction)


@ti.func
def get_ray_jittered(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    jitter_u: ti.f32,
    jitter_v: ti.f32,
) -> Ray:
    """Generate a primary ray through a random point inside a pixel.

    The jitter offsets are drawn by the caller from the sample's generator
    state, uniformly in [0, 1), which gives plain random (not stratified)
    antialiasing.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        jitter_u: Horizontal offset inside the pixel, in [0, 1).
        jitter_v: Vertical offset inside the pixel, in [0, 1).

    Returns:
        The jittered primary ray.
    """
    u = (ti.cast(pixel_i, ti.f32) + jitter_u) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + jitter_v) / ti.cast(height, ti.f32)

    return get_ray(u, v)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with origin, forward, right, up and the screen size as
        (distance, half_width, half_height).
    """

    def _as_tuple(f) -> tuple[float, float, float]:
        value = f[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": _as_tuple(_camera_origin),
        "forward": _as_tuple(_camera_forward),
        "right": _as_tuple(_camera_right),
        "up": _as_tuple(_camera_up),
        "screen": (
            float(_screen_distance[None]),
            float(_half_width[None]),
            float(_half_height[None]),
        ),
    }
