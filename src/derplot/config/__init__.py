"""Configuration and debug policy for the derplot renderer."""

from .logging_policy import (
    DebugPolicy,
    LoggingToggles,
    RuntimeChecks,
    enable_debug_logging,
    load_debug_policy,
)
from .models import (
    DEFAULT_CLEAR_COLOR,
    DEFAULT_FRONT_COLOR,
    RendererConfig,
    RendererCtx,
    load_renderer_config,
    load_renderer_ctx,
)

__all__ = [
    "DEFAULT_CLEAR_COLOR",
    "DEFAULT_FRONT_COLOR",
    "DebugPolicy",
    "LoggingToggles",
    "RendererConfig",
    "RendererCtx",
    "RuntimeChecks",
    "enable_debug_logging",
    "load_debug_policy",
    "load_renderer_config",
    "load_renderer_ctx",
]
