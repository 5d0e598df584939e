"""Logging helpers.

All loggers live under the ``patchmap`` namespace. The package logger
gets a NullHandler so importing the library never prints anything; an
embedding application opts in via ``configure_logging``.
"""

from __future__ import annotations

import logging
from typing import Optional

from patchmap.config import LoggingSection

ROOT_LOGGER_NAME = "patchmap"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(section: Optional[LoggingSection] = None) -> logging.Logger:
    """Attach a stream handler to the package logger and set its level.

    Calling this twice replaces the handler installed by the first call
    instead of stacking a second one.
    """
    section = section or LoggingSection()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(section.level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_patchmap_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(section.format))
    handler._patchmap_handler = True
    logger.addHandler(handler)
    return logger
