"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimator and the kernels that accumulate
per-pixel samples into the render target.

Each path starts at a jittered camera ray. At every surface hit the path:

1. Rolls Russian roulette with survival probability ``p`` (always 1 for the
   first bounces, the albedo's largest channel afterwards, decaying
   geometrically from ``RR_DECAY_DEPTH`` on) and divides its throughput by
   ``p`` when it survives.
2. Adds direct lighting by next-event estimation: one light picked uniformly,
   one point picked uniformly on its surface, a shadow ray to that point.
3. Samples a continuation direction from the material and multiplies the
   throughput by the sample weight.

Surface emission is added for the camera hit only. Every emitter belongs to
the light set, so light reached by a bounce ray is already counted by step 2 of
the previous vertex.

Non-finite sample values are replaced with zero (and counted) before they are
accumulated, so one degenerate path cannot spoil a pixel average.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.core.integrator import render_image, setup_render_target
    >>> setup_render_target(320, 240)
    >>> render_image(num_samples=16, seed=7)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from pathlight.camera.pinhole import get_ray_jittered
from pathlight.core.ray import max_component, sample_sphere_surface
from pathlight.core.rng import random_f32, seed_sample_state
from pathlight.materials.material import eval_material, scatter_material
from pathlight.scene.intersection import (
    intersect_scene,
    intersect_scene_any,
    light_indices,
    num_lights,
    sphere_albedos,
    sphere_centers,
    sphere_emissions,
    sphere_materials,
    sphere_radii,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum path length; Russian roulette normally ends paths much earlier
MAX_DEPTH = 128

# Bounces up to and including this depth always survive
RR_FORCED_DEPTH = 5

# From this depth on the survival probability halves every bounce
RR_DECAY_DEPTH = 64

# Offset applied to new ray origins to avoid self-intersection
RAY_EPSILON = 1e-3

# Shadow rays test the open interval (SHADOW_EPSILON, distance - SHADOW_EPSILON)
SHADOW_EPSILON = 1e-3

# Valid ray parameter range
T_MIN = 1e-3
T_MAX = 1e10

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of scrubbed sample radiance per pixel
_color_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Samples accumulated per pixel (every pixel receives the same number)
_total_samples = ti.field(dtype=ti.i32, shape=())

# Samples that produced a NaN or infinite channel
_non_finite_count = ti.field(dtype=ti.i32, shape=())

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the accumulated samples."""
    _color_sum.fill(0.0)
    _total_samples[None] = 0
    _non_finite_count[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def _offset_ray_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Push a ray origin off the surface, on the side the ray leaves toward."""
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + RAY_EPSILON * offset_dir


@ti.func
def survival_probability(albedo: vec3, depth: ti.i32) -> ti.f32:
    """Russian roulette survival probability for a bounce.

    Args:
        albedo: Albedo of the surface hit at this depth.
        depth: Bounce index, 0 for the camera-ray hit.

    Returns:
        1 for depth <= RR_FORCED_DEPTH; the largest albedo channel until
        RR_DECAY_DEPTH; that value times 0.5^(depth - RR_DECAY_DEPTH) after.
        Never above 1.
    """
    p = 1.0
    if depth > RR_FORCED_DEPTH:
        p = max_component(albedo)
        if depth >= RR_DECAY_DEPTH:
            p = p * ti.pow(0.5, ti.cast(depth - RR_DECAY_DEPTH, ti.f32))
    return ti.min(p, 1.0)


@ti.func
def _estimate_direct_light(
    point: vec3,
    normal: vec3,
    albedo: vec3,
    material: ti.i32,
    state: ti.u32,
):
    """Next-event estimate of the light arriving directly from emitters.

    One light is chosen uniformly (pdf 1 / N) and one point uniformly on its
    surface (pdf 1 / (4 pi R^2) per unit area). The area-measure estimator is

        f_r * Le * cos_surface * cos_light / d^2 / (pdf_select * pdf_area)

    Emitters radiate from both faces, so cos_light is taken in absolute
    value and a point inside an emissive sphere is lit by its inner face. For
    a point outside a light, samples on the far hemisphere are blocked by the
    light sphere itself. Points below the shading surface (cos_surface <= 0)
    contribute nothing. Scenes without lights skip the estimate.

    Args:
        point: Shading point.
        normal: Unit normal at the shading point, facing the incoming ray.
        albedo: Surface albedo.
        material: Material tag of the surface.
        state: Generator state.

    Returns:
        A tuple (radiance, state).
    """
    direct = vec3(0.0, 0.0, 0.0)
    rng = state
    n_lights = num_lights[None]

    if n_lights > 0:
        u, rng = random_f32(rng)
        k = ti.min(ti.cast(u * ti.cast(n_lights, ti.f32), ti.i32), n_lights - 1)
        light_id = light_indices[k]
        light_radius = sphere_radii[light_id]

        light_point, light_normal, rng = sample_sphere_surface(
            sphere_centers[light_id], light_radius, rng
        )

        to_light = light_point - point
        dist_sq = tm.dot(to_light, to_light)
        if dist_sq > 0.0:
            dist = ti.sqrt(dist_sq)
            wi = to_light / dist
            cos_surface = tm.dot(normal, wi)
            cos_light = ti.abs(tm.dot(light_normal, wi))

            if cos_surface > 0.0 and cos_light > 0.0:
                occluded = intersect_scene_any(point, wi, SHADOW_EPSILON, dist - SHADOW_EPSILON)
                if occluded == 0:
                    f = eval_material(material, albedo, normal, wi)
                    pdf_select = 1.0 / ti.cast(n_lights, ti.f32)
                    pdf_area = 1.0 / (4.0 * tm.pi * light_radius * light_radius)
                    geometry = cos_surface * cos_light / dist_sq
                    direct = f * sphere_emissions[light_id] * geometry / (pdf_select * pdf_area)

    return direct, rng


@ti.func
def trace_path(origin: vec3, direction: vec3, state: ti.u32):
    """Estimate the radiance arriving along a ray.

    Args:
        origin: Ray origin.
        direction: Unit ray direction.
        state: Generator state.

    Returns:
        A tuple (radiance, state). The radiance may hold non-finite values for
        degenerate paths; callers scrub it.
    """
    rng = state
    ray_origin = origin
    ray_direction = direction

    # Accumulated radiance for this path
    radiance = vec3(0.0, 0.0, 0.0)

    # Product of sample weights and 1 / p along the path
    throughput = vec3(1.0, 1.0, 1.0)

    # Cleared once the path ends
    active = 1

    for depth in range(MAX_DEPTH):
        if active == 1:
            hit_record = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                active = 0
            else:
                object_id = hit_record.object_id
                hit_point = hit_record.point
                normal = hit_record.normal
                albedo = sphere_albedos[object_id]
                material = sphere_materials[object_id]

                if depth == 0:
                    radiance += throughput * sphere_emissions[object_id]

                p = survival_probability(albedo, depth)
                u, rng = random_f32(rng)

                if p <= 0.0 or u > p:
                    active = 0
                else:
                    throughput = throughput / p

                    direct, rng = _estimate_direct_light(hit_point, normal, albedo, material, rng)
                    radiance += throughput * direct

                    new_direction, attenuation, pdf, rng = scatter_material(
                        material, albedo, normal, rng
                    )
                    throughput = throughput * attenuation

                    if pdf <= 0.0 or max_component(throughput) <= 0.0:
                        active = 0
                    else:
                        ray_origin = _offset_ray_origin(hit_point, normal, new_direction)
                        ray_direction = new_direction

    return radiance, rng


@ti.func
def render_sample_impl(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    state: ti.u32,
):
    """Trace one jittered camera sample through a pixel.

    Returns:
        A tuple (radiance, state).
    """
    jitter_u, s1 = random_f32(state)
    jitter_v, s2 = random_f32(s1)
    ray = get_ray_jittered(pixel_i, pixel_j, width, height, jitter_u, jitter_v)
    radiance, new_state = trace_path(ray.origin, ray.direction, s2)
    return radiance, new_state


@ti.func
def _scrub_sample(color: vec3):
    """Zero non-finite and negative channels.

    Returns:
        A tuple (color, was_non_finite).
    """
    scrubbed = color
    bad = 0
    for c in ti.static(range(3)):
        if tm.isnan(scrubbed[c]) or tm.isinf(scrubbed[c]):
            scrubbed[c] = 0.0
            bad = 1
    scrubbed = tm.max(scrubbed, vec3(0.0, 0.0, 0.0))
    return scrubbed, bad


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_batch(
    width: ti.i32,
    height: ti.i32,
    first_sample: ti.i32,
    num_samples: ti.i32,
    seed: ti.i32,
):
    """Add ``num_samples`` samples to every pixel.

    Sample ``s`` of pixel (i, j) uses the generator state derived from
    (seed, j * width + i, s), so the sum does not depend on how samples are
    split across calls.
    """
    for i, j in ti.ndrange(width, height):
        pixel_index = j * width + i
        for s in range(num_samples):
            state = seed_sample_state(seed, pixel_index, first_sample + s)
            color, _ = render_sample_impl(i, j, width, height, state)
            color, bad = _scrub_sample(color)
            if bad == 1:
                _non_finite_count[None] += 1
            _color_sum[i, j] += color


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    sample_index: ti.i32,
    seed: ti.i32,
) -> vec3:
    """Render one unscrubbed sample for a specific pixel."""
    state = seed_sample_state(seed, pixel_j * width + pixel_i, sample_index)
    color, _ = render_sample_impl(pixel_i, pixel_j, width, height, state)
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def render_sample(
    pixel_i: int, pixel_j: int, sample_index: int = 0, seed: int = 0
) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        sample_index: Index of the sample within the pixel.
        seed: Render seed.

    Returns:
        Tuple of (R, G, B) radiance, before scrubbing.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, sample_index, seed)

    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, seed: int = 0) -> None:
    """Add samples per pixel to the render target.

    Samples continue the global sample numbering of earlier calls, so calling
    this twice with n samples gives the same sums as one call with 2n.

    Args:
        num_samples: Number of samples to add per pixel.
        seed: Render seed.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    if num_samples <= 0:
        return

    width, height = get_image_dimensions()
    first = int(_total_samples[None])
    _render_batch(width, height, first, num_samples, seed)
    _total_samples[None] = first + num_samples


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_total_samples[None])


def get_non_finite_count() -> int:
    """Get the number of samples whose radiance had to be scrubbed."""
    return int(_non_finite_count[None])


def get_linear_image_numpy() -> np.ndarray:
    """Get the averaged linear radiance as a NumPy array.

    Returns:
        Array of shape (height, width, 3), dtype float32, row 0 at the top.
        All zeros before any sample has been rendered.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    total = int(_total_samples[None])

    # Extract active region, then (width, height, 3) -> (height, width, 3)
    image = _color_sum.to_numpy()[:width, :height, :]
    image = np.transpose(image, (1, 0, 2))

    if total > 0:
        image = image / np.float32(total)

    return np.ascontiguousarray(image, dtype=np.float32)
