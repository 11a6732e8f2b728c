"""Output module: display transform and image writers.

Components:
    tonemap: NaN scrubbing, optional tone mapping and gamma correction
    export: 8-bit quantization, PPM and Pillow writers, image comparison
"""

from .export import (
    compute_rmse,
    image_to_uint8,
    load_image,
    save_image,
    save_png,
    save_ppm,
)
from .tonemap import (
    TONE_MAP_METHODS,
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    scrub_non_finite,
    tone_map_exposure,
    tone_map_reinhard,
)

__all__ = [
    "ToneMapMethod",
    "TONE_MAP_METHODS",
    "scrub_non_finite",
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "image_to_uint8",
    "save_ppm",
    "save_png",
    "save_image",
    "load_image",
    "compute_rmse",
]
