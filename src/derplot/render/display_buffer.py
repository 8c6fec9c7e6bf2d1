"""32-bit pixel buffer backed by owned or caller-borrowed storage.

Pixels are packed ARGB values, row-major with row 0 at the top. When the
caller hands in its own storage the buffer writes into it in place; keeping
that storage alive for as long as the renderer runs is the caller's contract
and cannot be checked here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, Optional, Union

import numpy as np


logger = logging.getLogger(__name__)


class BufferOwnership(Enum):
    """Who allocated the pixel storage."""

    NONE = "none"
    OWNED = "owned"
    BORROWED = "borrowed"


@dataclass(frozen=True)
class OwnedStorage:
    """Storage allocated by the buffer itself."""

    pixels: np.ndarray


@dataclass(frozen=True)
class BorrowedStorage:
    """View over caller storage; ``source`` is kept only for identity."""

    pixels: np.ndarray
    source: Any


Storage = Union[OwnedStorage, BorrowedStorage]


def _borrow(external: Any, width: int, height: int) -> BorrowedStorage:
    count = width * height
    if isinstance(external, np.ndarray):
        if external.itemsize != 4:
            raise ValueError(f"external buffer must hold 32-bit cells, got itemsize {external.itemsize}")
        if external.size != count:
            raise ValueError(f"external buffer holds {external.size} cells, expected {count}")
        if not external.flags.c_contiguous:
            raise ValueError("external buffer must be C-contiguous")
        if not external.flags.writeable:
            raise ValueError("external buffer must be writeable")
        pixels = external.reshape(-1).view(np.uint32).reshape(height, width)
    else:
        try:
            view = memoryview(external)
        except TypeError as exc:
            raise TypeError(f"external buffer must support the buffer protocol: {exc}") from exc
        if view.readonly:
            raise ValueError("external buffer must be writeable")
        if view.nbytes != count * 4:
            raise ValueError(f"external buffer holds {view.nbytes} bytes, expected {count * 4}")
        pixels = np.frombuffer(view.cast("B"), dtype=np.uint32).reshape(height, width)
    return BorrowedStorage(pixels=pixels, source=external)


class DisplayBuffer:
    """Fixed-size pixel grid with bounds-checked writes.

    A buffer with a zero dimension is "not ready": it has no storage and every
    operation reports failure without side effects.
    """

    def __init__(self, width: int = 0, height: int = 0, external: Optional[Any] = None) -> None:
        width = int(width)
        height = int(height)
        if width < 0 or height < 0:
            raise ValueError(f"buffer dimensions must be non-negative, got {width}x{height}")
        self._width = width
        self._height = height
        self._storage: Optional[Storage]
        if width == 0 or height == 0:
            self._storage = None
            self._width = 0
            self._height = 0
        elif external is None:
            self._storage = OwnedStorage(pixels=np.zeros((height, width), dtype=np.uint32))
        else:
            self._storage = _borrow(external, width, height)
        logger.debug(
            "display buffer %dx%d ownership=%s",
            self._width,
            self._height,
            self.ownership.value,
        )

    # --- Introspection ------------------------------------------------------------
    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def ready(self) -> bool:
        return self._storage is not None

    @property
    def ownership(self) -> BufferOwnership:
        if isinstance(self._storage, OwnedStorage):
            return BufferOwnership.OWNED
        if isinstance(self._storage, BorrowedStorage):
            return BufferOwnership.BORROWED
        return BufferOwnership.NONE

    def data(self) -> Optional[np.ndarray]:
        """Read-only ``(height, width)`` uint32 view, or ``None`` when not ready."""

        if self._storage is None:
            return None
        view = self._storage.pixels.view()
        view.flags.writeable = False
        return view

    def index_of(self, x: int, y: int) -> Optional[int]:
        """Flat row-major index of ``(x, y)``, or ``None`` when outside."""

        if x < 0 or y < 0 or x >= self._width or y >= self._height:
            return None
        return self._width * y + x

    # --- Writes -------------------------------------------------------------------
    def clear(self, color: int) -> bool:
        if self._storage is None:
            return False
        self._storage.pixels.fill(np.uint32(color & 0xFFFFFFFF))
        return True

    def plot(self, x: int, y: int, color: int) -> bool:
        if self._storage is None:
            return False
        if x < 0 or y < 0 or x >= self._width or y >= self._height:
            return False
        self._storage.pixels[y, x] = color & 0xFFFFFFFF
        return True

    def __repr__(self) -> str:
        return f"DisplayBuffer({self._width}x{self._height}, {self.ownership.value})"


__all__ = [
    "BorrowedStorage",
    "BufferOwnership",
    "DisplayBuffer",
    "OwnedStorage",
]
