"""Logging setup: a debug file when asked for, silence otherwise.

The TUI owns the terminal, so nothing is ever logged to stderr while it runs.
"""

import logging
import os
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "beadtree"
DEBUG_ENV = "BEADTREE_DEBUG"
DEFAULT_LOG_PATH = Path.home() / ".beadtree" / "debug.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def debug_requested(flag: bool = False, env: Optional[dict] = None) -> bool:
    env = os.environ if env is None else env
    value = str(env.get(DEBUG_ENV, "")).strip().lower()
    return flag or value in ("1", "true", "yes", "on")


def configure_logging(debug: bool = False, log_path: Optional[Path] = None) -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False
    if not debug:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.WARNING)
        return logger

    path = Path(log_path or DEFAULT_LOG_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.debug("debug logging to %s", path)
    return logger


__all__ = ["debug_requested", "configure_logging", "DEFAULT_LOG_PATH"]
