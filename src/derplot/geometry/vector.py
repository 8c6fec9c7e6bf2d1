"""Homogeneous 4-component vector used by the transform pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np


@dataclass(frozen=True)
class Vector4:
    """Point or direction in projective space.

    ``w`` defaults to 1, so ``Vector4(x, y, z)`` is a point. Arithmetic is
    component-wise over all four components, including ``w``.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def __post_init__(self) -> None:
        for name in ("x", "y", "z", "w"):
            object.__setattr__(self, name, float(getattr(self, name)))

    @classmethod
    def of(cls, values: Sequence[float]) -> "Vector4":
        """Build from up to four values; missing xyz are 0 and missing w is 1."""

        items = [float(v) for v in values]
        if len(items) > 4:
            raise ValueError(f"Vector4 takes at most 4 components, got {len(items)}")
        return cls(*items)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Vector4":
        flat = np.asarray(array, dtype=np.float64).reshape(-1)
        return cls.of(flat.tolist())

    def as_array(self) -> np.ndarray:
        return np.array((self.x, self.y, self.z, self.w), dtype=np.float64)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.z, self.w)

    def __iter__(self) -> Iterator[float]:
        return iter(self.as_tuple())

    def __len__(self) -> int:
        return 4

    def __getitem__(self, index: int) -> float:
        return self.as_tuple()[index]

    def __add__(self, other: "Vector4") -> "Vector4":
        if not isinstance(other, Vector4):
            return NotImplemented
        return Vector4(self.x + other.x, self.y + other.y, self.z + other.z, self.w + other.w)

    def __sub__(self, other: "Vector4") -> "Vector4":
        if not isinstance(other, Vector4):
            return NotImplemented
        return Vector4(self.x - other.x, self.y - other.y, self.z - other.z, self.w - other.w)

    def __mul__(self, scalar: float) -> "Vector4":
        if isinstance(scalar, Vector4):
            return self.hadamard(scalar)
        if not isinstance(scalar, (int, float)):
            return NotImplemented
        s = float(scalar)
        return Vector4(self.x * s, self.y * s, self.z * s, self.w * s)

    __rmul__ = __mul__

    def hadamard(self, other: "Vector4") -> "Vector4":
        """Component-wise product."""

        return Vector4(self.x * other.x, self.y * other.y, self.z * other.z, self.w * other.w)

    def dot(self, other: "Vector4") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z + self.w * other.w

    def normalized(self) -> "Vector4":
        """Perspective divide: xyz over w, then w = 1.

        The caller must rule out ``w == 0`` first; it raises ZeroDivisionError.
        """

        w = self.w
        return Vector4(self.x / w, self.y / w, self.z / w, 1.0)

    def clamped(self) -> "Vector4":
        """Clamp every component to [0, 1]."""

        return Vector4(*(min(1.0, max(0.0, v)) for v in self.as_tuple()))

    def __str__(self) -> str:
        return f"({self.x:g}, {self.y:g}, {self.z:g}, {self.w:g})"


__all__ = ["Vector4"]
