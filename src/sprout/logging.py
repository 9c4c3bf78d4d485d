"""Loggers for the ``sprout`` namespace.

Console progress is rendered by :mod:`sprout.formatting`; these loggers carry
the diagnostic lines underneath it. Handlers are attached to the ``sprout``
logger only, so embedding sprout in an application leaves the root logger
alone.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path


ROOT = "sprout"
ENV_LEVEL = "SPROUT_LOG_LEVEL"

_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
_configured = False


def _level(name: str | None, default: int = logging.WARNING) -> int:
    if not name:
        return default
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else default


def _ensure_base_logger() -> None:
    global _configured
    if _configured:
        return
    root = logging.getLogger(ROOT)
    root.setLevel(_level(os.getenv(ENV_LEVEL)))
    if not any(type(h) is logging.StreamHandler for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``sprout`` namespace."""
    _ensure_base_logger()
    if name != ROOT and not name.startswith(f"{ROOT}."):
        name = f"{ROOT}.{name}"
    return logging.getLogger(name)


def configure_logging(level: str | None = None, log_file: str | Path | None = None) -> logging.Logger:
    """Apply the ``logging`` config section.

    ``SPROUT_LOG_LEVEL`` wins over ``level``. A ``log_file`` gets one rotating
    handler however often this is called.
    """
    root = get_logger(ROOT)
    if level and not os.getenv(ENV_LEVEL):
        root.setLevel(_level(level))
    if log_file:
        path = Path(log_file).resolve()
        if not any(
            isinstance(h, RotatingFileHandler) and Path(h.baseFilename) == path
            for h in root.handlers
        ):
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
            handler.setFormatter(logging.Formatter(_FORMAT))
            root.addHandler(handler)
    return root
