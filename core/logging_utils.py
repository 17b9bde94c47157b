"""
Logging setup for the case driver.

The level comes from the caller, overridden by PIZZA_LOG_LEVEL (a level name
or number); PIZZA_DEBUG=1/true/yes/on forces DEBUG when no level is given.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DEBUG_SWITCHES = frozenset({"1", "true", "yes", "on"})


def _resolve_level(value: int | str | None, fallback: int) -> int:
    """Numeric level for an int, a digit string or a level name; `fallback` otherwise."""
    if isinstance(value, int):
        return value
    name = (value or "").strip().upper()
    if name.isdigit():
        return int(name)
    level = logging.getLevelName(name) if name else fallback
    return level if isinstance(level, int) else fallback


def get_log_level_from_env(default: str | int = "INFO") -> int:
    fallback = _resolve_level(default, logging.INFO)
    env_level = os.environ.get("PIZZA_LOG_LEVEL", "").strip()
    if env_level:
        return _resolve_level(env_level, fallback)
    if os.environ.get("PIZZA_DEBUG", "").strip().lower() in _DEBUG_SWITCHES:
        return logging.DEBUG
    return fallback


def setup_logging(*, level: int | str, log_file: Optional[str | Path] = None) -> None:
    """
    Configure root logging once; optionally mirror records to `log_file`.
    """
    level = _resolve_level(level, logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)

    if log_file is not None:
        path = Path(log_file).resolve()
        exists = any(
            isinstance(h, logging.FileHandler) and Path(h.baseFilename) == path
            for h in root.handlers
        )
        if not exists:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(file_handler)

    for handler in root.handlers:
        handler.setLevel(level)
