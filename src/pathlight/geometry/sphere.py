"""Sphere primitive with ray-sphere intersection.

This module provides a Sphere dataclass and the intersection routine used for
every ray in the renderer. Ray directions are unit length, so the quadratic

    |origin + t * direction - center|^2 = radius^2

reduces to t^2 + 2 b t + c = 0 with

    b = dot(direction, origin - center)
    c = |origin - center|^2 - radius^2

and the reduced discriminant b^2 - c. A discriminant <= 0 (including exact
tangency) is a miss. Otherwise the roots -b - sqrt(d) and -b + sqrt(d) are
tried in ascending order and the first one strictly inside (t_min, t_max) is
accepted, so a ray starting inside the sphere reports its exit point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1; always strictly inside (t_min, t_max).
        point: The 3D point where the ray intersected the sphere.
            Only valid if hit == 1.
        normal: The unit surface normal at the intersection point, facing the
            hemisphere the ray arrived from (flipped when the ray starts
            inside the sphere). Only valid if hit == 1.
        front_face: Whether the ray hit the outside (1) or inside (0) of the
            sphere. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.
        t_min: Lower bound (exclusive) of the accepted ray parameter.
        t_max: Upper bound (exclusive) of the accepted ray parameter.

    Returns:
        A HitRecord containing intersection information. Check the hit field
        to determine if an intersection occurred.
    """
    oc = ray_origin - sphere.center
    b = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = -b - sqrt_d
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = -b + sqrt_d
            valid = (t > t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction

            outward_normal = tm.normalize(hit_point - sphere.center)

            # Ray travelling along the outward normal started inside the sphere
            if tm.dot(ray_direction, outward_normal) > 0.0:
                is_front_face = 0
                hit_normal = -outward_normal
            else:
                is_front_face = 1
                hit_normal = outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
