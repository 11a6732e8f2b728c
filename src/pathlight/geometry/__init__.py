"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection is a brute-force scan over every object (see
``pathlight.scene.intersection``); there is no spatial acceleration structure.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
]
