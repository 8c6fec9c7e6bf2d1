"""Display buffer, render state machine and the render command set."""

from .commands import (
    COMMAND_TYPES,
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
    Terminate,
    TranslateMatrix,
    apply_command,
)
from .display_buffer import BorrowedStorage, BufferOwnership, DisplayBuffer, OwnedStorage
from .render_state import (
    MatrixTarget,
    PointStatus,
    ProjectedPoint,
    RenderState,
    RenderStateOwnershipError,
    default_viewport,
)

__all__ = [
    "COMMAND_TYPES",
    "Axis",
    "BorrowedStorage",
    "BufferOwnership",
    "Clear",
    "Command",
    "DisplayBuffer",
    "DrawLine",
    "DrawRawLine",
    "MatrixTarget",
    "OwnedStorage",
    "PlotPoint",
    "PlotRawPoint",
    "PointStatus",
    "ProjectedPoint",
    "RenderState",
    "RenderStateOwnershipError",
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
    "default_viewport",
]
