"""Logger factory for explicit_promise.

All modules log through children of the ``explicit_promise`` logger. The root
package logger is configured once: with a stream handler when
EXPLICIT_PROMISE_LOG_LEVEL is set, otherwise with a NullHandler so the library
stays silent unless the application configures logging itself.
"""

from __future__ import annotations

import logging

from explicit_promise.config import get_log_level

ROOT_LOGGER_NAME = "explicit_promise"

_configured = False


def _configure_root() -> logging.Logger:
    global _configured
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _configured:
        return root

    level = get_log_level()
    # Avoid adding duplicate handlers if the application already attached one
    if not root.handlers:
        if level is None:
            root.addHandler(logging.NullHandler())
        else:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            root.addHandler(handler)
    if level is not None:
        root.setLevel(level)
    _configured = True
    return root


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or a child of it for ``name``."""
    root = _configure_root()
    if not name or name == ROOT_LOGGER_NAME:
        return root
    if name.startswith(ROOT_LOGGER_NAME + "."):
        name = name[len(ROOT_LOGGER_NAME) + 1:]
    return root.getChild(name)


def reset_logger() -> None:
    """Drop the handlers installed by get_logger so the next call reconfigures."""
    global _configured
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    _configured = False
