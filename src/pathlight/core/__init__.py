"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    vector: Host-side V3 / V3U value types
    color: Host-side RGB Color value type
    rng: Counter-based per-sample random numbers for Taichi kernels
    ray: Ray data structure, vector helpers and sampling kernels
    integrator: Light transport (next-event estimation + Russian roulette)
    renderer: Parallel render driver with progressive accumulation

The integrator and renderer allocate Taichi fields on import and are therefore
not imported here. Import them directly once Taichi is initialized:
    from pathlight.core.renderer import Renderer
"""

from .color import Color
from .ray import (
    Ray,
    build_onb_from_normal,
    length_squared,
    local_to_world,
    make_ray,
    max_component,
    near_zero,
    normalize,
    random_cosine_direction,
    random_unit_vector,
    ray_at,
    sample_cosine_hemisphere,
    sample_sphere_surface,
    vec3,
)
from .rng import hash_u32, next_state, random_f32, seed_sample_state
from .vector import V3, V3U

__all__ = [
    "V3",
    "V3U",
    "Color",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "normalize",
    "max_component",
    "near_zero",
    "build_onb_from_normal",
    "local_to_world",
    "random_cosine_direction",
    "sample_cosine_hemisphere",
    "random_unit_vector",
    "sample_sphere_surface",
    "hash_u32",
    "next_state",
    "random_f32",
    "seed_sample_state",
]
