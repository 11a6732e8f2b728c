"""Material enumeration and BSDF dispatch.

Every object carries a Material tag. The integrator never inspects the tag
itself; it calls ``scatter_material`` and ``eval_material``, which dispatch to
the sampling and evaluation routines of the tagged variant. Adding a variant
means adding an enum member and a branch in each dispatcher.
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from pathlight.materials.lambertian import (
    eval_lambertian,
    pdf_lambertian,
    scatter_lambertian,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Accepted spellings in scene files, beyond the member names
_ALIASES = {
    "lambertian": "DIFFUSE",
}


class Material(IntEnum):
    """Enumeration of supported material types."""

    DIFFUSE = 0

    @classmethod
    def from_name(cls, name: str) -> "Material":
        """Look up a material by name, case-insensitively.

        Args:
            name: Variant name such as "Diffuse", or an alias like "lambertian".

        Returns:
            The matching Material.

        Raises:
            ValueError: If the name does not match any material.
        """
        key = str(name).strip()
        key = _ALIASES.get(key.lower(), key.upper())
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown material type: {name}") from None

    @property
    def label(self) -> str:
        """Name as written in scene files, e.g. "Diffuse"."""
        return self.name.capitalize()


@ti.func
def scatter_material(material: ti.i32, albedo: vec3, normal: vec3, state: ti.u32):
    """Sample a continuation direction for the given material.

    Args:
        material: Material tag (see Material).
        albedo: Surface reflectance.
        normal: Unit surface normal facing the incoming ray.
        state: Generator state.

    Returns:
        A tuple (direction, attenuation, pdf, state) where attenuation is
        BSDF * cos / pdf for the sampled direction. Unknown tags absorb the
        path (zero attenuation).
    """
    direction = normal
    attenuation = vec3(0.0, 0.0, 0.0)
    pdf = 0.0
    new_state = state

    if material == int(Material.DIFFUSE):
        direction, attenuation, pdf, new_state = scatter_lambertian(albedo, normal, state)

    return direction, attenuation, pdf, new_state


@ti.func
def eval_material(material: ti.i32, albedo: vec3, normal: vec3, direction: vec3) -> vec3:
    """Evaluate the BSDF for light arriving from ``direction``.

    Args:
        material: Material tag (see Material).
        albedo: Surface reflectance.
        normal: Unit surface normal facing the incoming ray.
        direction: Unit direction toward the light.

    Returns:
        The BSDF value, zero below the surface or for unknown tags.
    """
    value = vec3(0.0, 0.0, 0.0)

    if material == int(Material.DIFFUSE):
        if tm.dot(normal, direction) > 0.0:
            value = eval_lambertian(albedo)

    return value


@ti.func
def pdf_material(material: ti.i32, normal: vec3, direction: vec3) -> ti.f32:
    """Density with which ``scatter_material`` produces ``direction``."""
    pdf = 0.0

    if material == int(Material.DIFFUSE):
        pdf = pdf_lambertian(normal, direction)

    return pdf
