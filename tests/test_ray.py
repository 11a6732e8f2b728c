"""Unit tests for ray operations and sampling kernels.

Tests cover:
- Ray dataclass and ray_at function
- Vector helpers
- Orthonormal basis construction
- Cosine-weighted hemisphere sampling
- Uniform sphere and sphere-surface sampling
"""

import numpy as np
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_positive_t(self):
        """Test ray_at with positive t moves along direction."""
        from pathlight.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - (-2.0)) < 1e-6

    def test_make_ray(self):
        """Test make_ray convenience function."""
        from pathlight.core.ray import make_ray, vec3

        origin_result = ti.field(dtype=ti.math.vec3, shape=())
        dir_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 1.0, 0.0))
            origin_result[None] = ray.origin
            dir_result[None] = ray.direction

        test_kernel()
        assert tuple(origin_result[None]) == (1.0, 2.0, 3.0)
        assert tuple(dir_result[None]) == (0.0, 1.0, 0.0)


class TestVectorUtilities:
    """Tests for vector utility functions."""

    def test_length_squared_and_max_component(self):
        from pathlight.core.ray import length_squared, max_component, vec3

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = length_squared(vec3(1.0, 2.0, 2.0))
            result[1] = max_component(vec3(0.2, 0.9, -3.0))

        test_kernel()
        assert abs(result[0] - 9.0) < 1e-6
        assert abs(result[1] - 0.9) < 1e-6

    def test_near_zero(self):
        from pathlight.core.ray import near_zero, vec3

        result = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = near_zero(vec3(1e-9, -1e-9, 0.0))
            result[1] = near_zero(vec3(1e-9, 1e-3, 0.0))

        test_kernel()
        assert result[0] == 1
        assert result[1] == 0


class TestOrthonormalBasis:
    """Tests for build_onb_from_normal."""

    def test_basis_is_orthonormal_for_many_normals(self):
        from pathlight.core.ray import build_onb_from_normal, random_unit_vector
        from pathlight.core.rng import seed_sample_state

        n = 512
        errors = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                state = seed_sample_state(11, i, 0)
                normal, state = random_unit_vector(state)
                t, b, nn = build_onb_from_normal(normal)
                err = ti.abs(ti.math.dot(t, b)) + ti.abs(ti.math.dot(t, nn))
                err += ti.abs(ti.math.dot(b, nn))
                err += ti.abs(ti.math.length(t) - 1.0) + ti.abs(ti.math.length(b) - 1.0)
                errors[i] = err

        test_kernel()
        assert errors.to_numpy().max() < 1e-4

    def test_basis_for_normals_along_axes(self):
        """Normals parallel to the X helper axis switch to Y."""
        from pathlight.core.ray import build_onb_from_normal, vec3

        dots = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            t0, b0, n0 = build_onb_from_normal(vec3(1.0, 0.0, 0.0))
            t1, b1, n1 = build_onb_from_normal(vec3(-1.0, 0.0, 0.0))
            t2, b2, n2 = build_onb_from_normal(vec3(0.0, 0.0, 1.0))
            dots[0] = ti.abs(ti.math.dot(t0, n0)) + ti.abs(ti.math.dot(b0, n0))
            dots[1] = ti.abs(ti.math.dot(t1, n1)) + ti.abs(ti.math.dot(b1, n1))
            dots[2] = ti.abs(ti.math.dot(t2, n2)) + ti.abs(ti.math.dot(b2, n2))

        test_kernel()
        assert dots.to_numpy().max() < 1e-6


class TestCosineHemisphere:
    """Tests for cosine-weighted hemisphere sampling."""

    def test_samples_never_below_surface(self):
        """For any unit normal, sampled directions satisfy dot(n, d) >= 0."""
        from pathlight.core.ray import random_unit_vector, sample_cosine_hemisphere
        from pathlight.core.rng import seed_sample_state

        n_normals = 256
        n_samples = 64
        min_cos = ti.field(dtype=ti.f32, shape=n_normals)
        max_len_err = ti.field(dtype=ti.f32, shape=n_normals)

        @ti.kernel
        def test_kernel():
            for i in range(n_normals):
                state = seed_sample_state(5, i, 0)
                normal, state = random_unit_vector(state)
                lowest = 1.0
                worst = 0.0
                for _ in range(n_samples):
                    d, pdf, state = sample_cosine_hemisphere(normal, state)
                    lowest = ti.min(lowest, ti.math.dot(normal, d))
                    worst = ti.max(worst, ti.abs(ti.math.length(d) - 1.0))
                min_cos[i] = lowest
                max_len_err[i] = worst

        test_kernel()
        assert min_cos.to_numpy().min() >= -1e-6
        assert max_len_err.to_numpy().max() < 1e-4

    def test_pdf_matches_cosine_over_pi(self):
        from pathlight.core.ray import sample_cosine_hemisphere, vec3
        from pathlight.core.rng import seed_sample_state

        n = 1024
        err = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            normal = ti.math.normalize(vec3(0.3, -0.5, 0.8))
            for i in range(n):
                state = seed_sample_state(2, i, 0)
                d, pdf, state = sample_cosine_hemisphere(normal, state)
                err[i] = ti.abs(pdf - ti.max(ti.math.dot(normal, d), 0.0) / ti.math.pi)

        test_kernel()
        assert err.to_numpy().max() < 1e-6

    def test_mean_cosine_is_two_thirds(self):
        """E[cos theta] = 2/3 under the cos/pi density."""
        from pathlight.core.ray import sample_cosine_hemisphere, vec3
        from pathlight.core.rng import seed_sample_state

        n = 20000
        cosines = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            for i in range(n):
                state = seed_sample_state(9, i, 0)
                d, pdf, state = sample_cosine_hemisphere(normal, state)
                cosines[i] = d.y

        test_kernel()
        assert abs(cosines.to_numpy().mean() - 2.0 / 3.0) < 0.01


class TestSphereSampling:
    """Tests for uniform direction and sphere-surface sampling."""

    def test_random_unit_vector_is_unit_and_centered(self):
        from pathlight.core.ray import random_unit_vector
        from pathlight.core.rng import seed_sample_state

        n = 20000
        dirs = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                state = seed_sample_state(4, i, 0)
                d, state = random_unit_vector(state)
                dirs[i] = d

        test_kernel()
        arr = dirs.to_numpy()
        lengths = np.linalg.norm(arr, axis=1)
        assert np.all(np.abs(lengths - 1.0) < 1e-4)
        assert np.all(np.abs(arr.mean(axis=0)) < 0.02)

    def test_sample_sphere_surface_points_lie_on_sphere(self):
        from pathlight.core.ray import sample_sphere_surface, vec3
        from pathlight.core.rng import seed_sample_state

        n = 2048
        radial_err = ti.field(dtype=ti.f32, shape=n)
        normal_err = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            center = vec3(1.0, -2.0, 3.0)
            radius = 0.75
            for i in range(n):
                state = seed_sample_state(8, i, 0)
                p, nrm, state = sample_sphere_surface(center, radius, state)
                radial_err[i] = ti.abs(ti.math.length(p - center) - radius)
                expected = (p - center) / radius
                normal_err[i] = ti.math.length(nrm - expected)

        test_kernel()
        assert radial_err.to_numpy().max() < 1e-5
        assert normal_err.to_numpy().max() < 1e-4
