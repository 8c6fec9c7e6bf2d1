"""Render commands queued by producers and applied by the render executor.

The variant set is closed: :data:`Command` is the union of every frozen
dataclass below, and :func:`apply_command` handles each of them. Constructors
normalize their fields (colors masked to 32 bits, matrix targets and rotation
axes resolved through their enums) and reject anything malformed, so apply
never meets an invalid command.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import numbers
from typing import ClassVar, Sequence, Union

from derplot.geometry.matrix import Matrix4
from derplot.geometry.region import Region
from derplot.geometry.transforms import (
    ortho_matrix,
    perspective_matrix,
    rotate_x,
    rotate_y,
    rotate_z,
    scale,
    translate,
)
from derplot.geometry.vector import Vector4
from derplot.render.render_state import MatrixTarget, Pixel, RenderState


logger = logging.getLogger(__name__)


class Axis(Enum):
    X = 0
    Y = 1
    Z = 2


def _target(value: object) -> MatrixTarget:
    if isinstance(value, MatrixTarget):
        return value
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(f"matrix target must be a MatrixTarget or int, got {value!r}")
    return MatrixTarget(int(value))


def _axis(value: object) -> Axis:
    if isinstance(value, Axis):
        return value
    if isinstance(value, str):
        try:
            return Axis[value.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown rotation axis {value!r}") from None
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(f"rotation axis must be an Axis, int or name, got {value!r}")
    return Axis(int(value))


def _color(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(f"color must be an int, got {value!r}")
    return int(value) & 0xFFFFFFFF


def _pixel(value: Sequence[int]) -> Pixel:
    x, y = value
    return (int(x), int(y))


def _vector(value: object) -> Vector4:
    if isinstance(value, Vector4):
        return value
    return Vector4.of(value)  # type: ignore[arg-type]


def _matrix(value: object) -> Matrix4:
    if isinstance(value, Matrix4):
        return value
    return Matrix4(value)  # type: ignore[arg-type]


# ---- Variants ----------------------------------------------------------------

class _CommandBase:
    kind: ClassVar[str] = ""

    def apply(self, state: RenderState) -> bool:
        """Apply to ``state``; True means the executor should terminate."""

        return apply_command(self, state)  # type: ignore[arg-type]


@dataclass(frozen=True)
class Terminate(_CommandBase):
    kind: ClassVar[str] = "terminate"


@dataclass(frozen=True)
class SetViewport(_CommandBase):
    region: Region
    kind: ClassVar[str] = "set_viewport"

    def __post_init__(self) -> None:
        if not isinstance(self.region, Region):
            raise TypeError(f"viewport must be a Region, got {self.region!r}")


@dataclass(frozen=True)
class Clear(_CommandBase):
    kind: ClassVar[str] = "clear"


@dataclass(frozen=True)
class PlotRawPoint(_CommandBase):
    pixel: Pixel
    big: bool = False
    kind: ClassVar[str] = "plot_raw_point"

    def __post_init__(self) -> None:
        object.__setattr__(self, "pixel", _pixel(self.pixel))
        object.__setattr__(self, "big", bool(self.big))


@dataclass(frozen=True)
class DrawRawLine(_CommandBase):
    p1: Pixel
    p2: Pixel
    kind: ClassVar[str] = "draw_raw_line"

    def __post_init__(self) -> None:
        object.__setattr__(self, "p1", _pixel(self.p1))
        object.__setattr__(self, "p2", _pixel(self.p2))


@dataclass(frozen=True)
class PlotPoint(_CommandBase):
    point: Vector4
    big: bool = False
    kind: ClassVar[str] = "plot_point"

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", _vector(self.point))
        object.__setattr__(self, "big", bool(self.big))


@dataclass(frozen=True)
class DrawLine(_CommandBase):
    p1: Vector4
    p2: Vector4
    kind: ClassVar[str] = "draw_line"

    def __post_init__(self) -> None:
        object.__setattr__(self, "p1", _vector(self.p1))
        object.__setattr__(self, "p2", _vector(self.p2))


@dataclass(frozen=True)
class SetMatrix(_CommandBase):
    matrix: Matrix4
    target: MatrixTarget = MatrixTarget.MODELVIEW
    kind: ClassVar[str] = "set_matrix"

    def __post_init__(self) -> None:
        object.__setattr__(self, "matrix", _matrix(self.matrix))
        object.__setattr__(self, "target", _target(self.target))


@dataclass(frozen=True)
class SetOrtho(_CommandBase):
    left: float
    right: float
    bottom: float
    top: float
    near: float
    far: float
    kind: ClassVar[str] = "set_ortho"

    def __post_init__(self) -> None:
        for name in ("left", "right", "bottom", "top", "near", "far"):
            object.__setattr__(self, name, float(getattr(self, name)))


@dataclass(frozen=True)
class SetPerspective(_CommandBase):
    fovy: float
    near: float
    far: float
    aspect: float
    kind: ClassVar[str] = "set_perspective"

    def __post_init__(self) -> None:
        for name in ("fovy", "near", "far", "aspect"):
            object.__setattr__(self, name, float(getattr(self, name)))


@dataclass(frozen=True)
class TranslateMatrix(_CommandBase):
    vector: Vector4
    target: MatrixTarget = MatrixTarget.MODELVIEW
    kind: ClassVar[str] = "translate_matrix"

    def __post_init__(self) -> None:
        object.__setattr__(self, "vector", _vector(self.vector))
        object.__setattr__(self, "target", _target(self.target))


@dataclass(frozen=True)
class RotateMatrix(_CommandBase):
    angle: float
    axis: Axis
    target: MatrixTarget = MatrixTarget.MODELVIEW
    kind: ClassVar[str] = "rotate_matrix"

    def __post_init__(self) -> None:
        object.__setattr__(self, "angle", float(self.angle))
        object.__setattr__(self, "axis", _axis(self.axis))
        object.__setattr__(self, "target", _target(self.target))


@dataclass(frozen=True)
class ScaleMatrix(_CommandBase):
    vector: Vector4
    target: MatrixTarget = MatrixTarget.MODELVIEW
    kind: ClassVar[str] = "scale_matrix"

    def __post_init__(self) -> None:
        object.__setattr__(self, "vector", _vector(self.vector))
        object.__setattr__(self, "target", _target(self.target))


@dataclass(frozen=True)
class SetFrontColor(_CommandBase):
    color: int
    kind: ClassVar[str] = "set_front_color"

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", _color(self.color))


@dataclass(frozen=True)
class SetClearColor(_CommandBase):
    color: int
    kind: ClassVar[str] = "set_clear_color"

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", _color(self.color))


Command = Union[
    Terminate,
    SetViewport,
    Clear,
    PlotRawPoint,
    DrawRawLine,
    PlotPoint,
    DrawLine,
    SetMatrix,
    SetOrtho,
    SetPerspective,
    TranslateMatrix,
    RotateMatrix,
    ScaleMatrix,
    SetFrontColor,
    SetClearColor,
]

COMMAND_TYPES: tuple[type, ...] = (
    Terminate,
    SetViewport,
    Clear,
    PlotRawPoint,
    DrawRawLine,
    PlotPoint,
    DrawLine,
    SetMatrix,
    SetOrtho,
    SetPerspective,
    TranslateMatrix,
    RotateMatrix,
    ScaleMatrix,
    SetFrontColor,
    SetClearColor,
)

_ROTATIONS = {Axis.X: rotate_x, Axis.Y: rotate_y, Axis.Z: rotate_z}


# ---- Application -------------------------------------------------------------

def apply_command(command: Command, state: RenderState) -> bool:
    """Apply ``command`` to ``state``; return True only for :class:`Terminate`."""

    if isinstance(command, Terminate):
        return True
    if isinstance(command, Clear):
        state.clear()
    elif isinstance(command, SetViewport):
        state.set_viewport(command.region)
    elif isinstance(command, PlotRawPoint):
        x, y = command.pixel
        if command.big:
            state.raw_draw_big_point(x, y)
        else:
            state.raw_draw_point(x, y)
    elif isinstance(command, DrawRawLine):
        state.raw_draw_line(command.p1, command.p2)
    elif isinstance(command, PlotPoint):
        state.draw_point(command.point, big=command.big)
    elif isinstance(command, DrawLine):
        state.draw_line(command.p1, command.p2)
    elif isinstance(command, SetMatrix):
        state.set_matrix(command.target, command.matrix)
    elif isinstance(command, SetOrtho):
        proj = ortho_matrix(command.left, command.right, command.bottom, command.top, command.near, command.far)
        if proj is None:
            if state.log_pipeline:
                logger.debug("ortho projection rejected: %s", command)
        else:
            state.set_matrix(MatrixTarget.PROJECTION, proj)
    elif isinstance(command, SetPerspective):
        proj = perspective_matrix(command.fovy, command.near, command.far, command.aspect)
        if proj is None:
            if state.log_pipeline:
                logger.debug("perspective projection rejected: %s", command)
        else:
            state.set_matrix(MatrixTarget.PROJECTION, proj)
    elif isinstance(command, TranslateMatrix):
        state.set_matrix(command.target, translate(state.matrix(command.target), command.vector))
    elif isinstance(command, RotateMatrix):
        rotation = _ROTATIONS[command.axis]
        state.set_matrix(command.target, rotation(state.matrix(command.target), command.angle))
    elif isinstance(command, ScaleMatrix):
        state.set_matrix(command.target, scale(state.matrix(command.target), command.vector))
    elif isinstance(command, SetFrontColor):
        state.set_front_color(command.color)
    elif isinstance(command, SetClearColor):
        state.set_clear_color(command.color)
    else:
        raise TypeError(f"unsupported render command: {command!r}")
    return False


__all__ = [
    "Axis",
    "COMMAND_TYPES",
    "Clear",
    "Command",
    "DrawLine",
    "DrawRawLine",
    "PlotPoint",
    "PlotRawPoint",
    "RotateMatrix",
    "ScaleMatrix",
    "SetClearColor",
    "SetFrontColor",
    "SetMatrix",
    "SetOrtho",
    "SetPerspective",
    "SetViewport",
    "Terminate",
    "TranslateMatrix",
    "apply_command",
]
