from __future__ import annotations

"""Central debug/logging policy plumbing for the derplot renderer."""

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEBUG_ENV = "DERPLOT_DEBUG"
PACKAGE_LOGGER = "derplot"


@dataclass(frozen=True)
class LoggingToggles:
    log_dispatch: bool = False
    log_pipeline: bool = False
    log_lifecycle: bool = False


@dataclass(frozen=True)
class RuntimeChecks:
    # Assert that render state is only touched from the executor thread.
    owner_thread: bool = False


@dataclass(frozen=True)
class DebugPolicy:
    enabled: bool = False
    logging: LoggingToggles = LoggingToggles()
    checks: RuntimeChecks = RuntimeChecks()


_LOG_FLAG_MAP: dict[str, Iterable[str]] = {
    "dispatch": ("log_dispatch",),
    "pipeline": ("log_pipeline",),
    "lifecycle": ("log_lifecycle",),
    "all": ("log_dispatch", "log_pipeline", "log_lifecycle"),
}

_CHECK_FLAG_MAP: dict[str, Iterable[str]] = {
    "owner-thread": ("owner_thread",),
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _coerce_bool(value: object, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        val = value.strip().lower()
        if val in _TRUTHY:
            return True
        if val in _FALSY:
            return False
    return default


def _split_flags(raw: object) -> set[str]:
    result: set[str] = set()
    items: Iterable[object]
    if raw is None:
        return result
    if isinstance(raw, str):
        items = raw.split(",")
    elif isinstance(raw, Iterable):
        items = raw
    else:
        return result
    for item in items:
        token = str(item).strip().lower().replace("_", "-")
        if token:
            result.add(token)
    return result


def _load_debug_config(env: Mapping[str, str]) -> tuple[bool, dict[str, object]]:
    raw = env.get(DEBUG_ENV)
    if raw is None:
        return False, {}
    raw_str = raw.strip()
    if raw_str.lower() in _FALSY:
        return False, {}
    if raw_str.lower() in _TRUTHY:
        return True, {}
    try:
        parsed = json.loads(raw_str)
        if isinstance(parsed, dict):
            enabled = _coerce_bool(parsed.get("enabled", True), True)
            return enabled, parsed
        if isinstance(parsed, (list, tuple)):
            return True, {"flags": parsed}
    except ValueError:
        logger.debug("Failed to parse %s JSON; treating as flag list", DEBUG_ENV, exc_info=True)
    return True, {"flags": raw_str}


def load_debug_policy(env: Optional[Mapping[str, str]] = None) -> DebugPolicy:
    env = os.environ if env is None else env
    enabled, cfg = _load_debug_config(env)

    flags = _split_flags(cfg.get("flags"))

    log_kwargs = {name: False for name in LoggingToggles.__annotations__.keys()}
    for flag, attrs in _LOG_FLAG_MAP.items():
        if flag in flags:
            for attr in attrs:
                log_kwargs[attr] = True

    check_kwargs = {name: False for name in RuntimeChecks.__annotations__.keys()}
    for flag, attrs in _CHECK_FLAG_MAP.items():
        if flag in flags:
            for attr in attrs:
                check_kwargs[attr] = True
    checks_cfg = cfg.get("checks")
    if isinstance(checks_cfg, dict):
        if "owner_thread" in checks_cfg:
            check_kwargs["owner_thread"] = _coerce_bool(checks_cfg["owner_thread"], False)

    return DebugPolicy(
        enabled=enabled,
        logging=LoggingToggles(**log_kwargs),
        checks=RuntimeChecks(**check_kwargs),
    )


def enable_debug_logging(policy: DebugPolicy) -> bool:
    """Attach a DEBUG stream handler to the package logger when enabled.

    Root logging is left alone. Returns whether a handler is installed.
    """

    if not policy.enabled:
        return False
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if any(getattr(h, "_derplot_local", False) for h in pkg_logger.handlers):
        return True
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(asctime)s] %(name)s - %(levelname)s - %(message)s"))
    handler.setLevel(logging.DEBUG)
    handler._derplot_local = True  # type: ignore[attr-defined]
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(logging.DEBUG)
    pkg_logger.propagate = False
    return True


__all__ = [
    "DEBUG_ENV",
    "DebugPolicy",
    "LoggingToggles",
    "RuntimeChecks",
    "enable_debug_logging",
    "load_debug_policy",
]
