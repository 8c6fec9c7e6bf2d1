"""
derplot: software 3D point and line rasterizer

Drawing calls are queued as immutable commands and applied in order by a
dedicated executor thread that owns the render state and pixel buffer.
"""

from derplot.config import RendererConfig, RendererCtx, load_renderer_ctx
from derplot.engine import DrawMode, Renderer
from derplot.geometry import IDENTITY, Matrix4, Region, Vector4
from derplot.metrics import Metrics
from derplot.render import DisplayBuffer, MatrixTarget

__version__ = "0.1.0"

__all__ = [
    "DisplayBuffer",
    "DrawMode",
    "IDENTITY",
    "MatrixTarget",
    "Matrix4",
    "Metrics",
    "Region",
    "Renderer",
    "RendererConfig",
    "RendererCtx",
    "Vector4",
    "load_renderer_ctx",
]
