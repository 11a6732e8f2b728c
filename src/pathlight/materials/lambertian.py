"""Ideal diffuse reflection.

A Lambertian surface reflects the same radiance in every outgoing direction:

    f_r = albedo / pi

Continuation directions are drawn with density cos(theta) / pi around the
normal, so the path weight f_r * cos(theta) / pdf is just the albedo.
"""

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import near_zero, sample_cosine_hemisphere

vec3 = tm.vec3


@ti.func
def eval_lambertian(albedo: vec3) -> vec3:
    """BRDF value albedo / pi, without the cosine factor."""
    return albedo / tm.pi


@ti.func
def pdf_lambertian(normal: vec3, direction: vec3) -> ti.f32:
    """Density of ``direction`` under cosine sampling; 0 below the surface."""
    return ti.max(tm.dot(normal, direction), 0.0) / tm.pi


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.u32):
    """Draw a continuation direction around ``normal``.

    Args:
        albedo: Diffuse reflectance, each channel in [0, 1].
        normal: Unit normal on the side the path arrived from.
        state: Generator state.

    Returns:
        A tuple (direction, weight, pdf, state); weight is the albedo.
    """
    direction, pdf, rng = sample_cosine_hemisphere(normal, state)

    # A collapsed sample continues along the normal
    if near_zero(direction):
        direction = normal
        pdf = 1.0 / tm.pi

    return direction, albedo, pdf, rng
