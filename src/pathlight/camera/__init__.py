"""Camera module for view and ray generation.

Components:
    model: Host-side pinhole camera description and basis construction
    pinhole: Taichi fields and primary-ray generation with pixel jitter

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across the image
    v in [0, 1]: top to bottom across the image

``pinhole`` allocates Taichi fields on import; import it directly after
``ti.init()``.
"""

from .model import CameraBasis, PinholeCamera

__all__ = [
    "CameraBasis",
    "PinholeCamera",
]
