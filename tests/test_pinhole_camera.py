"""Unit tests for the pinhole camera.

Tests cover:
- Camera validation and orthonormal basis computation
- Upload of the basis into Taichi fields
- Ray generation for center and corner pixels
- Image orientation (row 0 is the top of the image)
- Jittered sampling inside a pixel
"""

import math

import pytest
import taichi as ti

from pathlight.camera.model import PinholeCamera
from pathlight.core.vector import V3


def _dot(a, b):
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _trace_uv(u, v):
    """Generate the camera ray for (u, v) and return (origin, direction)."""
    from pathlight.camera.pinhole import get_ray

    result_origin = ti.field(dtype=ti.math.vec3, shape=())
    result_dir = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(uu: ti.f32, vv: ti.f32):
        ray = get_ray(uu, vv)
        result_origin[None] = ray.origin
        result_dir[None] = ray.direction

    test_kernel(u, v)
    return tuple(result_origin[None]), tuple(result_dir[None])


class TestCameraModel:
    """Host-side camera description."""

    def test_defaults(self):
        camera = PinholeCamera()
        assert camera.position == V3.zero()
        assert camera.forward == V3(0.0, 0.0, 1.0)
        assert camera.up == V3(0.0, 1.0, 0.0)
        assert camera.screen_distance == 1.0
        assert camera.screen_half_extent == 1.0

    def test_default_basis_is_orthonormal_and_right_handed(self):
        basis = PinholeCamera().basis(1.0)
        right, up, forward = basis.right.to_tuple(), basis.up.to_tuple(), basis.forward.to_tuple()

        assert abs(_dot(right, up)) < 1e-9
        assert abs(_dot(right, forward)) < 1e-9
        assert abs(_dot(up, forward)) < 1e-9
        # right = forward x up for forward +z and up +y
        assert right == pytest.approx((-1.0, 0.0, 0.0))
        assert up == pytest.approx((0.0, 1.0, 0.0))

    def test_up_hint_is_orthogonalized(self):
        camera = PinholeCamera(forward=V3(0.0, 0.0, 2.0), up=V3(0.0, 1.0, 1.0))
        basis = camera.basis(1.0)
        assert basis.up.to_tuple() == pytest.approx((0.0, 1.0, 0.0))
        assert basis.forward.to_tuple() == pytest.approx((0.0, 0.0, 1.0))

    def test_screen_extent_follows_aspect_ratio(self):
        basis = PinholeCamera(screen_half_extent=0.5).basis(2.0)
        assert basis.half_width == 0.5
        assert basis.half_height == 0.25

    @pytest.mark.parametrize("aspect", [0.0, -1.0])
    def test_non_positive_aspect_ratio_raises(self, aspect):
        with pytest.raises(ValueError, match="aspect_ratio"):
            PinholeCamera().basis(aspect)

    def test_up_parallel_to_forward_raises(self):
        camera = PinholeCamera(forward=V3(0.0, 1.0, 0.0), up=V3(0.0, 2.0, 0.0))
        with pytest.raises(ValueError, match="parallel"):
            camera.basis(1.0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"screen_distance": 0.0},
            {"screen_half_extent": -1.0},
            {"forward": V3.zero()},
            {"up": V3.zero()},
            {"screen_distance": float("nan")},
        ],
    )
    def test_invalid_camera_raises(self, kwargs):
        with pytest.raises(ValueError):
            PinholeCamera(**kwargs)

    def test_dict_conversion(self):
        camera = PinholeCamera(position=V3(1.0, 2.0, 3.0), screen_distance=2.0, screen_half_extent=0.3)
        assert PinholeCamera.from_dict(camera.to_dict()) == camera
        assert PinholeCamera.from_dict({}) == PinholeCamera()

    def test_from_dict_rejects_bad_numbers(self):
        with pytest.raises(ValueError, match="screen_distance"):
            PinholeCamera.from_dict({"screen_distance": None})


class TestCameraUpload:
    """Tests for setup_camera."""

    def test_setup_camera_uploads_basis(self):
        from pathlight.camera.pinhole import get_camera_info, setup_camera

        camera = PinholeCamera(position=V3(1.5, 2.5, 3.5), screen_distance=2.0, screen_half_extent=0.8)
        basis = setup_camera(camera, 2.0)
        info = get_camera_info()

        assert info["origin"] == pytest.approx((1.5, 2.5, 3.5))
        assert info["forward"] == pytest.approx(basis.forward.to_tuple())
        assert info["right"] == pytest.approx(basis.right.to_tuple())
        assert info["up"] == pytest.approx(basis.up.to_tuple())
        assert info["screen"] == pytest.approx((2.0, 0.8, 0.4))

    def test_setup_camera_rejects_degenerate_frame(self):
        from pathlight.camera.pinhole import setup_camera

        with pytest.raises(ValueError):
            setup_camera(PinholeCamera(forward=V3(0.0, 1.0, 0.0)), 1.0)


class TestRayGeneration:
    """Tests for get_ray."""

    def test_center_ray_points_forward(self):
        from pathlight.camera.pinhole import setup_camera

        setup_camera(PinholeCamera(position=V3(0.0, 1.0, -3.0)), 1.0)
        origin, direction = _trace_uv(0.5, 0.5)

        assert origin == pytest.approx((0.0, 1.0, -3.0))
        assert direction == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)

    def test_ray_direction_is_unit(self):
        from pathlight.camera.pinhole import setup_camera

        setup_camera(PinholeCamera(screen_half_extent=3.0), 1.5)
        for u, v in [(0.0, 0.0), (1.0, 1.0), (0.2, 0.9), (0.75, 0.1)]:
            _, direction = _trace_uv(u, v)
            assert math.sqrt(_dot(direction, direction)) == pytest.approx(1.0, abs=1e-5)

    def test_top_left_corner(self):
        """u=0, v=0 looks toward -right and +up, i.e. the top-left of the image."""
        from pathlight.camera.pinhole import setup_camera

        basis = setup_camera(PinholeCamera(), 1.0)
        _, direction = _trace_uv(0.0, 0.0)

        assert _dot(direction, basis.up.to_tuple()) > 0.0
        assert _dot(direction, basis.right.to_tuple()) < 0.0
        # Screen at distance 1 with half extent 1: direction is (-1, 1, 1) in the frame
        assert _dot(direction, basis.forward.to_tuple()) == pytest.approx(1.0 / math.sqrt(3.0), abs=1e-5)

    def test_rows_increase_downward(self):
        from pathlight.camera.pinhole import setup_camera

        setup_camera(PinholeCamera(), 1.0)
        _, top = _trace_uv(0.5, 0.1)
        _, bottom = _trace_uv(0.5, 0.9)
        assert top[1] > 0.0 > bottom[1]

    def test_corner_rays_symmetric(self):
        from pathlight.camera.pinhole import setup_camera

        setup_camera(PinholeCamera(), 1.0)
        _, top_left = _trace_uv(0.0, 0.0)
        _, bottom_right = _trace_uv(1.0, 1.0)
        assert top_left[0] == pytest.approx(-bottom_right[0], abs=1e-6)
        assert top_left[1] == pytest.approx(-bottom_right[1], abs=1e-6)
        assert top_left[2] == pytest.approx(bottom_right[2], abs=1e-6)

    def test_wide_image_has_smaller_vertical_extent(self):
        from pathlight.camera.pinhole import setup_camera

        setup_camera(PinholeCamera(), 2.0)
        _, direction = _trace_uv(1.0, 0.0)
        # (x, y) on the screen = (-1, 0.5) at distance 1
        assert direction[1] / direction[2] == pytest.approx(0.5, abs=1e-5)
        assert abs(direction[0] / direction[2]) == pytest.approx(1.0, abs=1e-5)


class TestJitteredRays:
    """Tests for get_ray_jittered."""

    def test_jittered_rays_stay_inside_pixel(self):
        from pathlight.camera.pinhole import get_ray_jittered, setup_camera
        from pathlight.core.rng import random_f32, seed_sample_state

        width, height = 8, 4
        setup_camera(PinholeCamera(), width / height)
        n = 512
        screen = ti.Vector.field(2, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for k in range(n):
                state = seed_sample_state(1, 0, k)
                ju, state = random_f32(state)
                jv, state = random_f32(state)
                ray = get_ray_jittered(2, 1, width, height, ju, jv)
                # Project back onto the screen plane at z = 1
                screen[k] = ti.Vector([ray.direction.x / ray.direction.z, ray.direction.y / ray.direction.z])

        test_kernel()
        pts = screen.to_numpy()
        # With the default frame, screen x = -(2u - 1) and half extents are (1, 0.5)
        u = (1.0 - pts[:, 0]) / 2.0
        v = (1.0 - pts[:, 1] / 0.5) / 2.0
        assert u.min() >= 2.0 / width - 1e-5
        assert u.max() <= 3.0 / width + 1e-5
        assert v.min() >= 1.0 / height - 1e-5
        assert v.max() <= 2.0 / height + 1e-5
        # Offsets actually vary
        assert u.std() > 0.01

    def test_zero_jitter_hits_pixel_corner(self):
        from pathlight.camera.pinhole import get_ray, get_ray_jittered, setup_camera

        setup_camera(PinholeCamera(), 1.0)
        diff = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            a = get_ray_jittered(1, 3, 4, 4, 0.0, 0.0)
            b = get_ray(0.25, 0.75)
            diff[None] = ti.math.length(a.direction - b.direction)

        test_kernel()
        assert diff[None] < 1e-6
