"""Host-side RGB color type.

Colors hold linear radiance (or reflectance) per channel. Radiance values are not
bounded above; 8-bit conversion clamps to [0, 1] after gamma correction.

Example:
    >>> from pathlight.core.color import Color
    >>> albedo = Color(0.8, 0.5, 0.2)
    >>> light = Color(4.0, 4.0, 4.0)
    >>> albedo.blend(light).scale(0.25)
    Color(r=0.8, g=0.5, b=0.2)
    >>> Color(0.5, 0.5, 0.5).gamma_correction(2.2).to_rgb8()
    (186, 186, 186)
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass


def _quantize(c: float) -> int:
    return int(min(max(c, 0.0), 1.0) * 255.0)


@dataclass(frozen=True)
class Color:
    """An RGB triple of linear floating-point channels.

    Attributes:
        r: Red channel.
        g: Green channel.
        b: Blue channel.
    """

    r: float
    g: float
    b: float

    @classmethod
    def black(cls) -> Color:
        """Return the black (zero) color."""
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> Color:
        """Build a color from a sequence of exactly three numbers.

        Raises:
            ValueError: If the sequence does not hold three numbers.
        """
        if (
            not isinstance(values, Sequence)
            or isinstance(values, (str, bytes))
            or len(values) != 3
        ):
            raise ValueError(f"Expected a sequence of 3 numbers, got {values!r}")
        try:
            return cls(float(values[0]), float(values[1]), float(values[2]))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Expected a sequence of 3 numbers, got {values!r}") from e

    def __add__(self, other: Color) -> Color:
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __mul__(self, k: float) -> Color:
        return self.scale(k)

    __rmul__ = __mul__

    def __truediv__(self, k: float) -> Color:
        return Color(self.r / k, self.g / k, self.b / k)

    def __iter__(self) -> Iterator[float]:
        yield self.r
        yield self.g
        yield self.b

    def scale(self, k: float) -> Color:
        """Multiply every channel by ``k``."""
        return Color(self.r * k, self.g * k, self.b * k)

    def blend(self, other: Color) -> Color:
        """Component-wise product, e.g. reflectance times incoming radiance."""
        return Color(self.r * other.r, self.g * other.g, self.b * other.b)

    def max_channel(self) -> float:
        """Largest of the three channels."""
        return max(self.r, self.g, self.b)

    def is_black(self) -> bool:
        """True if every channel is exactly zero."""
        return self == Color.black()

    def gamma_correction(self, gamma: float) -> Color:
        """Apply ``c ** (1 / gamma)`` to every channel (negatives clamp to 0)."""
        inv = 1.0 / gamma
        return Color(
            max(self.r, 0.0) ** inv,
            max(self.g, 0.0) ** inv,
            max(self.b, 0.0) ** inv,
        )

    def nan_safe(self) -> Color:
        """Replace every non-finite channel (NaN or +/-Inf) with zero."""
        return Color(
            self.r if math.isfinite(self.r) else 0.0,
            self.g if math.isfinite(self.g) else 0.0,
            self.b if math.isfinite(self.b) else 0.0,
        )

    def red(self) -> int:
        """Red channel quantized to 8 bits."""
        return _quantize(self.r)

    def green(self) -> int:
        """Green channel quantized to 8 bits."""
        return _quantize(self.g)

    def blue(self) -> int:
        """Blue channel quantized to 8 bits."""
        return _quantize(self.b)

    def to_rgb8(self) -> tuple[int, int, int]:
        """All three channels quantized to 8 bits."""
        return (self.red(), self.green(), self.blue())

    def to_tuple(self) -> tuple[float, float, float]:
        """Return the channels as a tuple."""
        return (self.r, self.g, self.b)
