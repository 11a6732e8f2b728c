"""Monte Carlo path tracer for scenes built from diffuse spheres.

This package estimates the radiance reaching a virtual pinhole camera with Taichi
kernels, combining next-event estimation, cosine-weighted BSDF sampling and
Russian roulette termination:
- Sphere-only geometry with brute-force intersection
- Diffuse (Lambertian) material with an open material enumeration
- Explicit light sampling over every emissive sphere
- Seeded, reproducible per-sample random numbers
- Progressive accumulation with NaN/Inf scrubbing and gamma correction

Subpackages:
    core: Vector/color primitives, random numbers, integrator and render driver
    geometry: Sphere primitive and ray-sphere intersection
    materials: Material enumeration and BSDF sampling
    scene: Scene description, loading and scene-level ray queries
    camera: Pinhole camera with jittered primary rays
    output: Tone mapping and image writers

Taichi fields are allocated when their modules are imported, so ``ti.init()`` must
be called before importing ``pathlight.scene.intersection``,
``pathlight.camera.pinhole``, ``pathlight.core.integrator`` or
``pathlight.core.renderer``.
"""

__version__ = "0.1.0"
