"""Host-side 3D vector primitives.

These small immutable value types describe scenes and cameras on the Python side.
Inside Taichi kernels the same roles are played by ``taichi.math.vec3`` (see
``pathlight.core.ray``).

``V3`` is a plain vector. ``V3U`` is a vector known to have unit length: it is
obtained by normalising a non-zero ``V3`` or, when the caller has already
established unit length, through ``V3U.trusted``.

Example:
    >>> from pathlight.core.vector import V3
    >>> forward = V3(0.0, 0.0, 2.0).normalize()
    >>> forward
    V3U(x=0.0, y=0.0, z=1.0)
    >>> right = forward.cross(V3(0.0, 1.0, 0.0).normalize())
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

# Maximum deviation of |v| from 1 accepted by the V3U constructor
UNIT_TOLERANCE = 1e-3


@dataclass(frozen=True)
class V3:
    """A 3D vector with float components.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.
    """

    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> V3:
        """Return the zero vector."""
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> V3:
        """Build a vector from a sequence of exactly three numbers.

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

    def __add__(self, other: V3) -> V3:
        return V3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: V3) -> V3:
        return V3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> V3:
        return V3(-self.x, -self.y, -self.z)

    def __mul__(self, k: float) -> V3:
        return self.scale(k)

    __rmul__ = __mul__

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def scale(self, k: float) -> V3:
        """Multiply every component by ``k``."""
        return V3(self.x * k, self.y * k, self.z * k)

    def dot(self, other: V3) -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: V3) -> V3:
        """Cross product ``self x other``."""
        return V3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def square_norm(self) -> float:
        """Squared Euclidean length."""
        return self.dot(self)

    def norm(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.square_norm())

    def elem_multiply(self, other: V3) -> V3:
        """Component-wise product."""
        return V3(self.x * other.x, self.y * other.y, self.z * other.z)

    def normalize(self) -> V3U:
        """Return the unit vector pointing in the same direction.

        Raises:
            ValueError: If the vector has zero length or non-finite components.
        """
        return V3U.from_v3(self)

    def nan_safe(self) -> V3:
        """Replace NaN components with zero."""
        return V3(
            0.0 if math.isnan(self.x) else self.x,
            0.0 if math.isnan(self.y) else self.y,
            0.0 if math.isnan(self.z) else self.z,
        )

    def to_tuple(self) -> tuple[float, float, float]:
        """Return the components as a tuple."""
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class V3U:
    """A 3D vector with (approximately) unit length.

    Direct construction checks the norm. Use ``V3U.from_v3`` to normalise an
    arbitrary vector and ``V3U.trusted`` when the components are already known to
    form a unit vector.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.
    """

    x: float
    y: float
    z: float

    def __post_init__(self) -> None:
        n = math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)
        if not abs(n - 1.0) <= UNIT_TOLERANCE:
            raise ValueError(f"V3U requires unit length, got |v| = {n}")

    @classmethod
    def from_v3(cls, v: V3) -> V3U:
        """Normalise ``v``.

        Raises:
            ValueError: If ``v`` has zero length or non-finite components.
        """
        n = v.norm()
        if n == 0.0 or not math.isfinite(n):
            raise ValueError(f"Cannot normalize vector {v}")
        return cls.trusted(v.x / n, v.y / n, v.z / n)

    @classmethod
    def trusted(cls, x: float, y: float, z: float) -> V3U:
        """Build a unit vector without checking its length."""
        obj = object.__new__(cls)
        object.__setattr__(obj, "x", x)
        object.__setattr__(obj, "y", y)
        object.__setattr__(obj, "z", z)
        return obj

    def __neg__(self) -> V3U:
        return V3U.trusted(-self.x, -self.y, -self.z)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def as_v3(self) -> V3:
        """Return the underlying plain vector."""
        return V3(self.x, self.y, self.z)

    def dot(self, other: V3U | V3) -> float:
        """Dot product with a unit or plain vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: V3U) -> V3U:
        """Cross product, renormalised to unit length.

        Raises:
            ValueError: If the two vectors are parallel.
        """
        return self.as_v3().cross(other.as_v3()).normalize()

    def to_tuple(self) -> tuple[float, float, float]:
        """Return the components as a tuple."""
        return (self.x, self.y, self.z)
