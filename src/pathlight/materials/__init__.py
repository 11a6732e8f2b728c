"""Materials module for BSDF sampling.

Components:
    material: Material enumeration and per-variant sample/eval/pdf dispatch
    lambertian: Ideal diffuse reflection with cosine-weighted sampling

The integrator only calls the dispatchers in ``material``; a new variant adds an
enum member and a branch there.
"""

from .lambertian import eval_lambertian, pdf_lambertian, scatter_lambertian
from .material import Material, eval_material, pdf_material, scatter_material

__all__ = [
    "Material",
    "scatter_material",
    "eval_material",
    "pdf_material",
    "scatter_lambertian",
    "eval_lambertian",
    "pdf_lambertian",
]
