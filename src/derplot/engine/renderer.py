"""Producer-facing renderer: builds commands and hands them to the executor.

Every drawing or configuration call returns immediately after queueing a
command. Reading pixels back (``snapshot``/``buffer_copy``) is only meaningful
after ``drain()`` or ``shutdown()`` has returned.
"""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any, Iterable, Optional, Sequence

import numpy as np

from derplot.config.models import RendererCtx
from derplot.engine.dispatch import DispatchEngine
from derplot.geometry.matrix import Matrix4
from derplot.geometry.region import Region
from derplot.geometry.vector import Vector4
from derplot.metrics import Metrics
from derplot.render.commands import (
    Axis,
    Clear,
    Command,
    DrawLine,
    DrawRawLine,
    PlotPoint,
    PlotRawPoint,
    RotateMatrix,
    ScaleMatrix,
    SetClearColor,
    SetFrontColor,
    SetMatrix,
    SetOrtho,
    SetPerspective,
    SetViewport,
    TranslateMatrix,
)
from derplot.render.display_buffer import DisplayBuffer
from derplot.render.render_state import MatrixTarget, RenderState


logger = logging.getLogger(__name__)


class DrawMode(Enum):
    """How :meth:`Renderer.draw` turns a point list into primitives."""

    NOTHING = 0x00
    POINTS = 0x01
    BIG_POINTS = 0x02
    LINES = 0x04
    LINE_STRIP = 0x05
    LINE_LOOP = 0x06


class Renderer:
    """Software renderer with an asynchronous command executor.

    ``external_buffer`` lets the caller supply the pixel storage (a numpy
    array or writable buffer of ``width * height`` 32-bit cells); otherwise
    the renderer allocates its own. A zero-sized renderer is constructed but
    never ready, and every command sent to it is dropped.
    """

    def __init__(
        self,
        width: int,
        height: int,
        external_buffer: Optional[Any] = None,
        *,
        ctx: Optional[RendererCtx] = None,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self._ctx = ctx or RendererCtx()
        cfg = self._ctx.cfg
        self.metrics = metrics if metrics is not None else Metrics(window=cfg.metrics_window)
        self._buffer = DisplayBuffer(width, height, external_buffer)
        self._state = RenderState(
            self._buffer,
            front_color=cfg.front_color,
            clear_color=cfg.clear_color,
            debug_policy=self._ctx.debug_policy,
        )
        self._engine = DispatchEngine(self._state, ctx=self._ctx, metrics=self.metrics)
        if self._buffer.ready:
            self._engine.start()
        else:
            self._engine.shutdown()
        logger.info(
            "renderer created: %dx%d ownership=%s ready=%s",
            self._buffer.width,
            self._buffer.height,
            self._buffer.ownership.value,
            self._buffer.ready,
        )

    # --- Introspection ------------------------------------------------------------
    @property
    def width(self) -> int:
        return self._buffer.width

    @property
    def height(self) -> int:
        return self._buffer.height

    @property
    def is_ready(self) -> bool:
        return self._buffer.ready and not self._engine.terminated

    @property
    def engine(self) -> DispatchEngine:
        return self._engine

    @property
    def state(self) -> RenderState:
        """Render state; only inspect it after ``drain()`` or ``shutdown()``."""

        return self._state

    def submit(self, command: Command) -> bool:
        return self._engine.submit(command)

    # --- Drawing ------------------------------------------------------------------
    def clear(self) -> bool:
        return self.submit(Clear())

    def draw_raw_point(self, x: int, y: int) -> bool:
        return self.submit(PlotRawPoint((x, y)))

    def draw_raw_big_point(self, x: int, y: int) -> bool:
        return self.submit(PlotRawPoint((x, y), big=True))

    def draw_raw_line(self, x1: int, y1: int, x2: int, y2: int) -> bool:
        return self.submit(DrawRawLine((x1, y1), (x2, y2)))

    def draw_point(self, point: Any) -> bool:
        return self.submit(PlotPoint(point))

    def draw_big_point(self, point: Any) -> bool:
        return self.submit(PlotPoint(point, big=True))

    def draw_line(self, p1: Any, p2: Any) -> bool:
        return self.submit(DrawLine(p1, p2))

    def draw(self, mode: DrawMode, points: Iterable[Any]) -> int:
        """Queue the primitives ``mode`` describes over ``points``.

        ``LINES`` pairs consecutive points and ignores a trailing odd one;
        ``LINE_STRIP`` joins neighbours; ``LINE_LOOP`` also closes the strip
        when it has at least three points. Returns the number of commands
        queued.
        """

        mode = DrawMode(mode)
        pts: Sequence[Vector4] = [p if isinstance(p, Vector4) else Vector4.of(p) for p in points]
        commands: list[Command] = []
        if mode is DrawMode.POINTS or mode is DrawMode.BIG_POINTS:
            big = mode is DrawMode.BIG_POINTS
            commands = [PlotPoint(p, big=big) for p in pts]
        elif mode is DrawMode.LINES:
            commands = [DrawLine(pts[i], pts[i + 1]) for i in range(0, len(pts) - 1, 2)]
        elif mode is DrawMode.LINE_STRIP or mode is DrawMode.LINE_LOOP:
            commands = [DrawLine(a, b) for a, b in zip(pts, pts[1:])]
            if mode is DrawMode.LINE_LOOP and len(pts) >= 3:
                commands.append(DrawLine(pts[-1], pts[0]))
        queued = 0
        for command in commands:
            if self.submit(command):
                queued += 1
        return queued

    # --- Matrices -----------------------------------------------------------------
    def set_projection_matrix(self, matrix: Any) -> bool:
        return self.submit(SetMatrix(matrix, MatrixTarget.PROJECTION))

    def set_modelview_matrix(self, matrix: Any) -> bool:
        return self.submit(SetMatrix(matrix, MatrixTarget.MODELVIEW))

    def ortho_projection(
        self, left: float, right: float, bottom: float, top: float, near: float, far: float
    ) -> bool:
        return self.submit(SetOrtho(left, right, bottom, top, near, far))

    def perspective_projection(self, fovy: float, near: float, far: float, aspect: float) -> bool:
        return self.submit(SetPerspective(fovy, near, far, aspect))

    def translate(self, vector: Any, matrix: MatrixTarget = MatrixTarget.MODELVIEW) -> bool:
        return self.submit(TranslateMatrix(vector, matrix))

    def rotate_x(self, angle: float, matrix: MatrixTarget = MatrixTarget.MODELVIEW) -> bool:
        return self.submit(RotateMatrix(angle, Axis.X, matrix))

    def rotate_y(self, angle: float, matrix: MatrixTarget = MatrixTarget.MODELVIEW) -> bool:
        return self.submit(RotateMatrix(angle, Axis.Y, matrix))

    def rotate_z(self, angle: float, matrix: MatrixTarget = MatrixTarget.MODELVIEW) -> bool:
        return self.submit(RotateMatrix(angle, Axis.Z, matrix))

    def scale(self, vector: Any, matrix: MatrixTarget = MatrixTarget.MODELVIEW) -> bool:
        return self.submit(ScaleMatrix(vector, matrix))

    # --- State --------------------------------------------------------------------
    def front_color(self, color: int) -> bool:
        return self.submit(SetFrontColor(color))

    def clear_color(self, color: int) -> bool:
        return self.submit(SetClearColor(color))

    def set_viewport(self, region: Region) -> bool:
        return self.submit(SetViewport(region))

    # --- Synchronization ----------------------------------------------------------
    def drain(self) -> None:
        self._engine.drain()

    flush = drain

    def shutdown(self) -> None:
        if not self._engine.terminated:
            logger.info("renderer shutting down: pending=%d", self._engine.pending())
        self._engine.shutdown()

    terminate = shutdown

    def __enter__(self) -> "Renderer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # --- Readback -----------------------------------------------------------------
    def snapshot(self) -> Optional[np.ndarray]:
        """Copy of the pixels as a ``(height, width)`` uint32 array."""

        data = self._buffer.data()
        if data is None:
            return None
        return data.copy()

    def buffer_copy(self, dest: Any) -> bool:
        """Copy the pixels, row-major, into the writable buffer ``dest``.

        ``dest`` must hold at least ``width * height * 4`` bytes; a smaller
        destination raises ``ValueError``. Returns False when there is
        nothing to copy.
        """

        if dest is None:
            return False
        data = self._buffer.data()
        if data is None:
            return False
        raw = data.reshape(-1).view(np.uint8)
        if isinstance(dest, np.ndarray):
            if not dest.flags.c_contiguous:
                raise ValueError("destination array must be C-contiguous")
            out = dest.reshape(-1).view(np.uint8)
        else:
            out = np.frombuffer(memoryview(dest).cast("B"), dtype=np.uint8)
        if out.size < raw.size:
            raise ValueError(f"destination holds {out.size} bytes, need {raw.size}")
        out[: raw.size] = raw
        return True

    def __repr__(self) -> str:
        return f"Renderer({self.width}x{self.height}, ready={self.is_ready})"


__all__ = ["DrawMode", "Renderer"]
