"""Configuration dataclasses shared across the derplot package."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from typing import Mapping, Optional

from derplot.config.logging_policy import DebugPolicy, load_debug_policy


logger = logging.getLogger(__name__)

DEFAULT_FRONT_COLOR = 0xFFFFFFFF
DEFAULT_CLEAR_COLOR = 0xFF000000


# ---- Helpers -----------------------------------------------------------------

def _env_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    v = env.get(name)
    if v is None:
        return bool(default)
    v = v.strip().lower()
    return v not in ("0", "", "false", "no", "off")


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    v = env.get(name)
    if v is None:
        return int(default)
    try:
        return int(v)
    except ValueError:
        return int(default)


def _env_str(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    v = env.get(name)
    if v is None:
        return default
    v = v.strip()
    return v if v != "" else default


def _env_color(env: Mapping[str, str], name: str, default: int) -> int:
    """Parse ``0xAARRGGBB``, ``#AARRGGBB`` or a decimal into a 32-bit color."""

    v = _env_str(env, name)
    if v is None:
        return int(default)
    text = v.lower()
    try:
        if text.startswith("#"):
            value = int(text[1:], 16)
        else:
            value = int(text, 0)
    except ValueError:
        logger.debug("ignoring malformed color %s=%r", name, v)
        return int(default)
    return value & 0xFFFFFFFF


# ---- Models ------------------------------------------------------------------

@dataclass(frozen=True)
class RendererConfig:
    """Renderer construction defaults."""

    front_color: int = DEFAULT_FRONT_COLOR
    clear_color: int = DEFAULT_CLEAR_COLOR
    thread_name: str = "derplot-render"
    daemon: bool = True
    metrics_window: int = 512


@dataclass(frozen=True)
class RendererCtx:
    """Resolved configuration handed to a renderer and its executor."""

    cfg: RendererConfig = field(default_factory=RendererConfig)
    debug_policy: DebugPolicy = field(default_factory=DebugPolicy)


def load_renderer_config(env: Optional[Mapping[str, str]] = None) -> RendererConfig:
    env = os.environ if env is None else env
    defaults = RendererConfig()
    return RendererConfig(
        front_color=_env_color(env, "DERPLOT_FRONT_COLOR", defaults.front_color),
        clear_color=_env_color(env, "DERPLOT_CLEAR_COLOR", defaults.clear_color),
        thread_name=_env_str(env, "DERPLOT_THREAD_NAME", defaults.thread_name) or defaults.thread_name,
        daemon=_env_bool(env, "DERPLOT_DAEMON", defaults.daemon),
        metrics_window=max(16, _env_int(env, "DERPLOT_METRICS_WINDOW", defaults.metrics_window)),
    )


def load_renderer_ctx(env: Optional[Mapping[str, str]] = None) -> RendererCtx:
    env = os.environ if env is None else env
    return RendererCtx(cfg=load_renderer_config(env), debug_policy=load_debug_policy(env))


__all__ = [
    "DEFAULT_CLEAR_COLOR",
    "DEFAULT_FRONT_COLOR",
    "RendererConfig",
    "RendererCtx",
    "load_renderer_config",
    "load_renderer_ctx",
]
