from __future__ import annotations
import logging
import os


CAPTURE_LIVE = 'live'
CAPTURE_SNAPSHOT = 'snapshot'

_CAPTURE_MODES = (CAPTURE_LIVE, CAPTURE_SNAPSHOT)


def value_from_env(var: str, default: str | None = None) -> str | None:
    raw = os.environ.get(var)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def get_capture_mode() -> str:
    # live keeps a reference to the frame locals, snapshot copies them
    mode = (value_from_env('EXPLICIT_PROMISE_CAPTURE', CAPTURE_LIVE) or CAPTURE_LIVE).lower()
    return mode if mode in _CAPTURE_MODES else CAPTURE_LIVE


def get_log_level() -> int | None:
    """Level for the package logger, or None when logging is not configured."""
    raw = value_from_env('EXPLICIT_PROMISE_LOG_LEVEL')
    if raw is None:
        return None
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else None
