"""Ray data structure, vector utilities and sampling kernels.

This module provides the Ray dataclass, vector helpers and the Monte Carlo
sampling routines used by the integrator:

- Cosine-weighted hemisphere sampling around a surface normal (diffuse BSDF)
- Uniform sampling of directions on the unit sphere
- Uniform sampling of points on a sphere's surface (light sampling)

All sampling functions take an explicit generator state (see
``pathlight.core.rng``) and return the advanced state with their result.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from pathlight.core.rng import random_f32

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# |normal.x| above which the world X axis is too close to the normal to serve
# as the helper axis of the orthonormal basis
ONB_PARALLEL_THRESHOLD = 0.9


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3, unit length).
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from an origin and a direction.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector (expected to be normalized).

    Returns:
        A new Ray instance.
    """
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector (must not be zero).

    Returns:
        A unit vector in the same direction as v.
    """
    return tm.normalize(v)


@ti.func
def max_component(v: vec3) -> ti.f32:
    """Return the largest of the three components."""
    return ti.max(v.x, v.y, v.z)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Args:
        v: The vector to check.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Sampling Kernels
# =============================================================================


@ti.func
def build_onb_from_normal(normal: vec3):
    """Build an orthonormal basis (u, v, normal) around a unit normal.

    The helper axis is world X unless the normal is nearly parallel to it, in
    which case world Y is used. Then u = normalize(helper x normal) and
    v = normal x u.

    Args:
        normal: The surface normal (unit length).

    Returns:
        A tuple (tangent, bitangent, normal) forming an orthonormal basis.
    """
    a = vec3(1.0, 0.0, 0.0)
    if ti.abs(normal.x) > ONB_PARALLEL_THRESHOLD:
        a = vec3(0.0, 1.0, 0.0)
    tangent = tm.normalize(tm.cross(a, normal))
    bitangent = tm.cross(normal, tangent)
    return tangent, bitangent, normal


@ti.func
def local_to_world(local_dir: vec3, tangent: vec3, bitangent: vec3, normal: vec3) -> vec3:
    """Transform a direction from the local (z-up) frame to world coordinates."""
    return local_dir.x * tangent + local_dir.y * bitangent + local_dir.z * normal


@ti.func
def random_cosine_direction(state: ti.u32):
    """Draw a cosine-weighted direction in the local z-up hemisphere.

    phi ~ U(0, 2 pi) and cos(theta) = sqrt(xi) with xi ~ U(0, 1).

    Args:
        state: Generator state.

    Returns:
        A tuple (direction, state); the direction has z >= 0.
    """
    r1, s1 = random_f32(state)
    r2, s2 = random_f32(s1)
    phi = 2.0 * tm.pi * r1
    cos_theta = ti.sqrt(r2)
    sin_theta = ti.sqrt(ti.max(0.0, 1.0 - cos_theta * cos_theta))
    direction = vec3(ti.cos(phi) * sin_theta, ti.sin(phi) * sin_theta, cos_theta)
    return direction, s2


@ti.func
def sample_cosine_hemisphere(normal: vec3, state: ti.u32):
    """Cosine-weighted hemisphere sampling around a normal.

    The sampled local direction is mapped through the basis of
    ``build_onb_from_normal`` and renormalized to remove floating-point drift.

    Args:
        normal: The surface normal defining the hemisphere (unit length).
        state: Generator state.

    Returns:
        A tuple (direction, pdf, state) where pdf = cos(theta) / pi.
    """
    local_dir, new_state = random_cosine_direction(state)
    tangent, bitangent, n = build_onb_from_normal(normal)
    world_dir = tm.normalize(local_to_world(local_dir, tangent, bitangent, n))
    pdf = ti.max(tm.dot(world_dir, normal), 0.0) / tm.pi
    return world_dir, pdf, new_state


@ti.func
def random_unit_vector(state: ti.u32):
    """Draw a direction uniformly distributed over the unit sphere.

    Uses the spherical parametrization z = 1 - 2 xi1, phi = 2 pi xi2, which is
    uniform in solid angle.

    Args:
        state: Generator state.

    Returns:
        A tuple (direction, state).
    """
    r1, s1 = random_f32(state)
    r2, s2 = random_f32(s1)
    z = 1.0 - 2.0 * r1
    r = ti.sqrt(ti.max(0.0, 1.0 - z * z))
    phi = 2.0 * tm.pi * r2
    return vec3(r * ti.cos(phi), r * ti.sin(phi), z), s2


@ti.func
def sample_sphere_surface(center: vec3, radius: ti.f32, state: ti.u32):
    """Pick a uniformly distributed point on a sphere's surface.

    The density with respect to surface area is 1 / (4 pi radius^2).

    Args:
        center: Sphere center.
        radius: Sphere radius.
        state: Generator state.

    Returns:
        A tuple (point, normal, state); normal is the outward unit normal at the
        sampled point.
    """
    direction, new_state = random_unit_vector(state)
    point = center + radius * direction
    return point, direction, new_state
