"""Scene-level sphere intersection testing.

This module stores the scene's spheres in Taichi fields and answers the two ray
queries the integrator needs:

- ``intersect_scene``: closest hit across every sphere, with the index of the
  hit object so shading can look up its albedo, emission and material
- ``intersect_scene_any``: visibility test for shadow rays, stopping at the
  first hit

Both are brute-force linear scans; scenes are small and there is no spatial
index.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0, 0, -1), 0.5, albedo=(0.8, 0.8, 0.8))
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathlight.geometry.sphere import HitRecord, Sphere, hit_sphere
from pathlight.materials.material import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The unit surface normal, facing the side the ray came from.
            Only valid if hit == 1.
        front_face: Whether the ray hit the outside (1) or inside (0).
            Only valid if hit == 1.
        object_id: Index of the hit sphere in the scene. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    object_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_emissions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_materials = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Indices of emissive spheres, used for light sampling
light_indices = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_lights = ti.field(dtype=ti.i32, shape=())


def _to_list(v) -> list[float]:
    """Convert a 3-vector (tuple, V3, Color or Taichi vector) to a list."""
    if hasattr(v, "to_list"):
        v = v.to_list()
    return [float(c) for c in v]


def clear_scene() -> None:
    """Remove every sphere and light from the scene.

    Resets the counts to zero. The field data is overwritten as new spheres
    are added.
    """
    num_spheres[None] = 0
    num_lights[None] = 0


def add_sphere(
    center,
    radius: float,
    albedo=(0.0, 0.0, 0.0),
    emission=(0.0, 0.0, 0.0),
    material: int = Material.DIFFUSE,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        albedo: Diffuse reflectance.
        emission: Emitted radiance.
        material: Material tag.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = _to_list(center)
    sphere_radii[idx] = radius
    sphere_albedos[idx] = _to_list(albedo)
    sphere_emissions[idx] = _to_list(emission)
    sphere_materials[idx] = int(material)
    num_spheres[None] = idx + 1
    return idx


def set_lights(indices) -> None:
    """Set which spheres are sampled as light sources.

    Args:
        indices: Sphere indices with non-black emission.

    Raises:
        ValueError: If an index does not refer to an existing sphere.
    """
    count = num_spheres[None]
    indices = list(indices)
    for k, idx in enumerate(indices):
        if not 0 <= idx < count:
            raise ValueError(f"Light index {idx} out of range (scene has {count} spheres)")
        light_indices[k] = idx
    num_lights[None] = len(indices)


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_light_count() -> int:
    """Get the number of light sources in the scene."""
    return int(num_lights[None])


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, object_id: ti.i32) -> SceneHitRecord:
    """Convert a HitRecord to a SceneHitRecord with the object index."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        object_id=object_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        object_id=-1,
    )


@ti.func
def get_sphere(object_id: ti.i32) -> Sphere:
    """Fetch sphere geometry by index."""
    return Sphere(center=sphere_centers[object_id], radius=sphere_radii[object_id])


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Test ray against all spheres in the scene.

    The upper bound shrinks to each accepted hit, so the record returned is the
    one with the smallest t inside (t_min, t_max).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t_min: Lower bound (exclusive) of accepted hits.
        t_max: Upper bound (exclusive) of accepted hits.

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if no intersection was found.
    """
    closest_t = t_max
    result = _make_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        rec = hit_sphere(ray_origin, ray_direction, get_sphere(i), t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, i)

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Test if the ray hits any sphere in (t_min, t_max) (shadow ray query).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t_min: Lower bound (exclusive) of accepted hits.
        t_max: Upper bound (exclusive) of accepted hits.

    Returns:
        1 if any sphere was hit, 0 otherwise.
    """
    hit_any = 0

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        if hit_any == 0:
            rec = hit_sphere(ray_origin, ray_direction, get_sphere(i), t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    return hit_any
