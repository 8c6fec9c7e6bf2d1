"""Render state machine: current matrices, viewport and colors plus rasterizers.

The state is owned by the render executor. Non-drawing commands mutate the
current configuration; drawing commands go through either the raw pixel-space
rasterizers or the transform pipeline (modelview, projection, perspective
divide, depth clip, viewport mapping) before reaching the display buffer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
import threading
from typing import Optional

import numpy as np

from derplot.config.logging_policy import DebugPolicy
from derplot.config.models import DEFAULT_CLEAR_COLOR, DEFAULT_FRONT_COLOR
from derplot.geometry.matrix import IDENTITY, Matrix4
from derplot.geometry.region import Region
from derplot.geometry.transforms import multiply
from derplot.geometry.vector import Vector4
from derplot.render.display_buffer import DisplayBuffer


logger = logging.getLogger(__name__)

Pixel = tuple[int, int]


class MatrixTarget(Enum):
    """Which of the two render matrices a command affects."""

    MODELVIEW = 0
    PROJECTION = 1


class PointStatus(Enum):
    """Outcome of running one point through the transform pipeline."""

    OK = "ok"
    UNRENDERABLE = "unrenderable"
    DEPTH_CLIPPED = "depth_clipped"
    OUTSIDE_VIEWPORT = "outside_viewport"


@dataclass(frozen=True)
class ProjectedPoint:
    status: PointStatus
    pixel: Pixel

    @property
    def ok(self) -> bool:
        return self.status is PointStatus.OK


class RenderStateOwnershipError(AssertionError):
    """Render state mutated from a thread other than its owner."""


def default_viewport(buffer: DisplayBuffer) -> Region:
    """Viewport whose corners are the first and last buffer pixels.

    Transformed points never reach column ``width - 1`` or row 0 with this
    viewport, since NDC +1 lies outside the half-open mapping. Set
    ``Region(0, width, -1, height - 1)`` when points must cover every pixel.
    """

    return Region(0, max(0, buffer.width - 1), 0, max(0, buffer.height - 1))


class RenderState:
    """Current render configuration bound to one display buffer."""

    def __init__(
        self,
        buffer: DisplayBuffer,
        *,
        front_color: int = DEFAULT_FRONT_COLOR,
        clear_color: int = DEFAULT_CLEAR_COLOR,
        debug_policy: Optional[DebugPolicy] = None,
    ) -> None:
        policy = debug_policy or DebugPolicy()
        self._buffer = buffer
        self._modelview: Matrix4 = IDENTITY
        self._projection: Matrix4 = IDENTITY
        self._viewport = default_viewport(buffer)
        self._front_color = int(front_color) & 0xFFFFFFFF
        self._clear_color = int(clear_color) & 0xFFFFFFFF
        self._log_pipeline = policy.logging.log_pipeline
        self._check_owner = policy.checks.owner_thread
        self._owner: Optional[int] = None

    # --- Ownership ----------------------------------------------------------------
    def bind_owner(self, ident: Optional[int] = None) -> None:
        """Record the thread allowed to mutate this state (default: caller)."""

        self._owner = threading.get_ident() if ident is None else int(ident)

    def _touch(self) -> None:
        if not self._check_owner or self._owner is None:
            return
        current = threading.get_ident()
        if current != self._owner:
            raise RenderStateOwnershipError(
                f"render state owned by thread {self._owner} mutated from thread {current}"
            )

    # --- Read access --------------------------------------------------------------
    @property
    def buffer(self) -> DisplayBuffer:
        return self._buffer

    @property
    def modelview(self) -> Matrix4:
        return self._modelview

    @property
    def projection(self) -> Matrix4:
        return self._projection

    @property
    def viewport(self) -> Region:
        return self._viewport

    @property
    def front_color(self) -> int:
        return self._front_color

    @property
    def clear_color(self) -> int:
        return self._clear_color

    @property
    def log_pipeline(self) -> bool:
        return self._log_pipeline

    def matrix(self, target: MatrixTarget) -> Matrix4:
        if target is MatrixTarget.PROJECTION:
            return self._projection
        return self._modelview

    # --- Configuration ------------------------------------------------------------
    def set_matrix(self, target: MatrixTarget, mat: Matrix4) -> None:
        self._touch()
        if target is MatrixTarget.PROJECTION:
            self._projection = mat
        else:
            self._modelview = mat

    def set_viewport(self, viewport: Region) -> None:
        self._touch()
        self._viewport = viewport

    def set_front_color(self, color: int) -> None:
        self._touch()
        self._front_color = int(color) & 0xFFFFFFFF

    def set_clear_color(self, color: int) -> None:
        self._touch()
        self._clear_color = int(color) & 0xFFFFFFFF

    # --- Raw (pixel space) rasterization ------------------------------------------
    def clear(self) -> bool:
        self._touch()
        return self._buffer.clear(self._clear_color)

    def raw_draw_point(self, x: int, y: int) -> bool:
        self._touch()
        if x < 0 or y < 0:
            return False
        return self._buffer.plot(x, y, self._front_color)

    def raw_draw_big_point(self, x: int, y: int) -> bool:
        """Plot a pixel and its four axis neighbours.

        Neighbours are only drawn when the center lands in the buffer; each of
        them is bounds-checked on its own.
        """

        self._touch()
        if x < 0 or y < 0:
            return False
        color = self._front_color
        plot = self._buffer.plot
        if not plot(x, y, color):
            return False
        plot(x - 1, y, color)
        plot(x + 1, y, color)
        plot(x, y - 1, color)
        plot(x, y + 1, color)
        return True

    def raw_draw_line(self, p1: Pixel, p2: Pixel) -> bool:
        """Slope/intercept line stepping along the dominant axis.

        ``abs(dx) > abs(dy)`` selects x stepping; a tie steps along y. The
        minor coordinate is truncated toward zero and every pixel is clipped
        against the buffer on its own.
        """

        self._touch()
        (x1, y1), (x2, y2) = (int(p1[0]), int(p1[1])), (int(p2[0]), int(p2[1]))
        if (x1, y1) == (x2, y2):
            return self.raw_draw_point(x1, y1)
        if not self._buffer.ready:
            return False

        dx = x2 - x1
        dy = y2 - y1
        width = self._buffer.width
        height = self._buffer.height
        if abs(dx) > abs(dy):
            if x1 > x2:
                x1, y1, x2, y2 = x2, y2, x1, y1
            m = dy / dx
            b = y1 - x1 * m
            start = max(0, x1)
            end = width - 1 if x2 > width else x2
            major = np.arange(start, end + 1, dtype=np.int64)
            minor = major * m + b
            self._plot_run(major, minor, x_major=True)
        else:
            if y1 > y2:
                x1, y1, x2, y2 = x2, y2, x1, y1
            m = dx / dy
            b = x1 - y1 * m
            start = max(0, y1)
            end = height - 1 if y2 > height else y2
            major = np.arange(start, end + 1, dtype=np.int64)
            minor = major * m + b
            self._plot_run(major, minor, x_major=False)
        return True

    def _plot_run(self, major: np.ndarray, minor: np.ndarray, *, x_major: bool) -> None:
        if major.size == 0:
            return
        limit = self._buffer.height if x_major else self._buffer.width
        # Truncation toward zero maps (-1, 0) onto 0, so the lower bound is -1.
        keep = np.isfinite(minor) & (minor > -1.0) & (minor < limit)
        if not keep.any():
            return
        minor_px = np.trunc(minor[keep]).astype(np.int64)
        major_px = major[keep]
        if x_major:
            xs, ys = major_px, minor_px
        else:
            xs, ys = minor_px, major_px
        for x, y in zip(xs.tolist(), ys.tolist()):
            self._buffer.plot(x, y, self._front_color)

    # --- Transformed (3D) rasterization -------------------------------------------
    def transform_point(self, point: Vector4) -> ProjectedPoint:
        """Run a point through modelview, projection, divide, clip and viewport."""

        p = multiply(multiply(point, self._modelview), self._projection)
        if p.w == 0.0:
            return ProjectedPoint(PointStatus.UNRENDERABLE, (-1, -1))
        p = p.normalized()
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            return ProjectedPoint(PointStatus.UNRENDERABLE, (-1, -1))
        inside, px, py = self._viewport.pos_of(p.x, p.y)
        if not math.isfinite(p.z) or p.z < -1.0 or p.z > 1.0:
            return ProjectedPoint(PointStatus.DEPTH_CLIPPED, (px, py))
        if not inside:
            return ProjectedPoint(PointStatus.OUTSIDE_VIEWPORT, (px, py))
        return ProjectedPoint(PointStatus.OK, (px, py))

    def draw_point(self, point: Vector4, big: bool = False) -> bool:
        self._touch()
        projected = self.transform_point(point)
        if not projected.ok:
            if self._log_pipeline:
                logger.debug("point %s dropped: %s", point, projected.status.value)
            return False
        x, y = projected.pixel
        if big:
            return self.raw_draw_big_point(x, y)
        return self.raw_draw_point(x, y)

    def draw_line(self, p1: Vector4, p2: Vector4) -> bool:
        """Draw a 3D segment.

        Either endpoint failing the depth clip (or the w test) drops the whole
        line. An endpoint that only misses the viewport still contributes its
        mapped pixel, and the raw rasterizer clips per pixel.
        """

        self._touch()
        ends = []
        for point in (p1, p2):
            projected = self.transform_point(point)
            if projected.status in (PointStatus.DEPTH_CLIPPED, PointStatus.UNRENDERABLE):
                if self._log_pipeline:
                    logger.debug("line endpoint %s dropped: %s", point, projected.status.value)
                return False
            if projected.status is PointStatus.OUTSIDE_VIEWPORT and self._log_pipeline:
                logger.debug("line endpoint %s outside viewport; passing %s", point, projected.pixel)
            ends.append(projected.pixel)
        return self.raw_draw_line(ends[0], ends[1])


__all__ = [
    "MatrixTarget",
    "Pixel",
    "PointStatus",
    "ProjectedPoint",
    "RenderState",
    "RenderStateOwnershipError",
    "default_viewport",
]
