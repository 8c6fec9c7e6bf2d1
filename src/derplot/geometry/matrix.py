"""4x4 float matrix value type with column-major storage order."""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

from derplot.geometry.vector import Vector4


class Matrix4:
    """Immutable 4x4 matrix.

    Storage order is column-major: flat index ``row + col * 4`` holds
    ``element(row, col)``, which is the layout used when building a matrix from
    16 values. Products compose with the column-vector convention, so
    ``a @ b`` applied to a point runs ``b`` first.
    """

    __slots__ = ("_m",)

    def __init__(self, values: Optional[Union[Sequence[float], np.ndarray]] = None) -> None:
        if values is None:
            grid = np.zeros((4, 4), dtype=np.float64)
        else:
            arr = np.asarray(values, dtype=np.float64)
            if arr.shape == (4, 4):
                grid = arr.copy()
            else:
                flat = arr.reshape(-1)
                if flat.size > 16:
                    raise ValueError(f"Matrix4 takes at most 16 values, got {flat.size}")
                padded = np.zeros(16, dtype=np.float64)
                padded[: flat.size] = flat
                grid = padded.reshape((4, 4), order="F")
        grid.flags.writeable = False
        self._m = grid

    # --- Construction -------------------------------------------------------------
    @classmethod
    def identity(cls) -> "Matrix4":
        return cls(np.eye(4, dtype=np.float64))

    @classmethod
    def zeros(cls) -> "Matrix4":
        return cls()

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix4":
        grid = np.asarray(rows, dtype=np.float64)
        if grid.shape != (4, 4):
            raise ValueError(f"expected 4x4 rows, got shape {grid.shape}")
        return cls(grid)

    # --- Access -------------------------------------------------------------------
    def get(self, row: int, col: Optional[int] = None) -> float:
        """Element lookup; a single argument is a flat column-major index.

        Out-of-range indices read as 0.0 rather than raising.
        """

        if col is None:
            index = int(row)
            if not 0 <= index < 16:
                return 0.0
            return float(self._m[index % 4, index // 4])
        if not (0 <= row < 4 and 0 <= col < 4):
            return 0.0
        return float(self._m[row, col])

    def values(self) -> tuple[float, ...]:
        """All 16 values in column-major order."""

        return tuple(float(v) for v in self._m.reshape(-1, order="F"))

    def as_array(self) -> np.ndarray:
        """Read-only ``(4, 4)`` array indexed ``[row, col]``."""

        return self._m

    def take_vector(self) -> Vector4:
        """Translation column (elements 12..15)."""

        return Vector4(*(float(v) for v in self._m[:, 3]))

    # --- Arithmetic ---------------------------------------------------------------
    def __matmul__(self, other: "Matrix4") -> "Matrix4":
        if not isinstance(other, Matrix4):
            return NotImplemented
        return Matrix4(self._m @ other._m)

    def __add__(self, other: "Matrix4") -> "Matrix4":
        if not isinstance(other, Matrix4):
            return NotImplemented
        return Matrix4(self._m + other._m)

    def __sub__(self, other: "Matrix4") -> "Matrix4":
        if not isinstance(other, Matrix4):
            return NotImplemented
        return Matrix4(self._m - other._m)

    def __mul__(self, scalar: float) -> "Matrix4":
        if isinstance(scalar, Matrix4):
            return self @ scalar
        if not isinstance(scalar, (int, float)):
            return NotImplemented
        return Matrix4(self._m * float(scalar))

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix4):
            return NotImplemented
        return bool(np.array_equal(self._m, other._m))

    def __hash__(self) -> int:
        return hash(self.values())

    def allclose(self, other: "Matrix4", *, atol: float = 1e-6) -> bool:
        return bool(np.allclose(self._m, other._m, atol=atol))

    def __repr__(self) -> str:
        return f"Matrix4({list(self.values())!r})"

    def __str__(self) -> str:
        return "\n".join(" ".join(f"{float(v):g}" for v in row) for row in self._m)


IDENTITY = Matrix4.identity()


__all__ = ["IDENTITY", "Matrix4"]
