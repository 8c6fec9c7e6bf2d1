"""Integer pixel rectangle used as the render viewport."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Optional


@dataclass(frozen=True)
class Region:
    """Axis-aligned integer region ``[x_min, x_max] x [y_min, y_max]``.

    A maximum below its minimum is clamped up to the minimum, so the area is
    never negative.
    """

    x_min: int = 0
    x_max: int = 0
    y_min: int = 0
    y_max: int = 0

    def __post_init__(self) -> None:
        x_min, x_max = int(self.x_min), int(self.x_max)
        y_min, y_max = int(self.y_min), int(self.y_max)
        object.__setattr__(self, "x_min", x_min)
        object.__setattr__(self, "x_max", max(x_max, x_min))
        object.__setattr__(self, "y_min", y_min)
        object.__setattr__(self, "y_max", max(y_max, y_min))

    @classmethod
    def from_size(cls, width: int, height: int) -> "Region":
        """Origin-cornered region ``(0, width, 0, height)``."""

        return cls(0, width, 0, height)

    @property
    def width(self) -> int:
        return self.x_max - self.x_min

    @property
    def height(self) -> int:
        return self.y_max - self.y_min

    def area(self) -> int:
        return self.width * self.height

    def with_bounds(self, x_min: int, x_max: int, y_min: int, y_max: int) -> Optional["Region"]:
        """Return a region with the new bounds, or ``None`` if they are inverted."""

        if x_max < x_min or y_max < y_min:
            return None
        return Region(x_min, x_max, y_min, y_max)

    def fits_in(self, outer: "Region") -> bool:
        return (
            outer.x_min <= self.x_min
            and outer.x_max >= self.x_max
            and outer.y_min <= self.y_min
            and outer.y_max >= self.y_max
        )

    def fits_in_size(self, width: int, height: int) -> bool:
        return self.fits_in(Region.from_size(width, height))

    def pos_of(self, x: float, y: float) -> tuple[bool, int, int]:
        """Map normalized device coordinates to a pixel.

        Returns ``(inside, px, py)``. Y is flipped since pixel row 0 is the top.
        ``inside`` reports whether ``(x, y)`` lay in ``[-1, 1) x [-1, 1)``; the
        pixel is computed either way and still needs a buffer bounds check.
        Non-finite input maps to ``(False, -1, -1)``.
        """

        if not (math.isfinite(x) and math.isfinite(y)):
            return False, -1, -1
        px = self.x_min + math.floor((x + 1.0) * 0.5 * self.width)
        py = self.y_max - math.floor((y + 1.0) * 0.5 * self.height)
        inside = -1.0 <= x < 1.0 and -1.0 <= y < 1.0
        return inside, int(px), int(py)


__all__ = ["Region"]
