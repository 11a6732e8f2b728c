"""Pytest configuration for pathlight tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate every field allocated so far.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene and render target data around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before fields are allocated
    from pathlight.core.integrator import clear_render_target
    from pathlight.scene.intersection import clear_scene

    clear_scene()
    clear_render_target()

    yield

    clear_scene()
    clear_render_target()


@pytest.fixture
def make_scene():
    """Factory building a Scene from (center, radius, albedo, emission) tuples."""
    from pathlight.camera.model import PinholeCamera
    from pathlight.core.color import Color
    from pathlight.core.vector import V3
    from pathlight.scene.description import Scene, SceneObject

    def _make(objects, width=4, height=4, samples_per_pixel=1, camera=None):
        scene_objects = [
            SceneObject(
                center=V3(*center),
                radius=radius,
                albedo=Color(*albedo),
                emission=Color(*emission),
            )
            for center, radius, albedo, emission in objects
        ]
        return Scene(
            width=width,
            height=height,
            samples_per_pixel=samples_per_pixel,
            objects=scene_objects,
            camera=camera if camera is not None else PinholeCamera(),
        )

    return _make
