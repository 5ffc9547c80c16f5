"""
Logging configuration for the timeline CLI.

Engine modules only create loggers under the ``roadmap_timeline`` namespace;
handlers are attached here, once, by the CLI.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional


DEBUG_MODE = os.environ.get("ROADMAP_TIMELINE_DEBUG", "").lower() in ("1", "true", "yes")

LOGGER_NAME = "roadmap_timeline"


def setup_logging(level: Optional[int] = None, quiet: bool = False) -> logging.Logger:
    """Set up the package logger.

    Args:
        level: Logging level (default: DEBUG if ROADMAP_TIMELINE_DEBUG, else WARNING)
        quiet: If True, attach no console handler

    Returns:
        Configured logger
    """
    if level is None:
        level = logging.DEBUG if DEBUG_MODE else logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    if not quiet:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        if level <= logging.DEBUG:
            fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
        else:
            fmt = "%(levelname)s: %(message)s"
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)

    logger.propagate = False
    return logger
