"""
FinNova - Logging
==================
Logger factory shared by every FinNova module.  All loggers write one
line per record to stdout, tagged by component (``[ROUTER]``,
``[MEMORY]``, ``[API]`` ...) inside the message itself.

Level resolution:
  • ``settings.LOG_LEVEL`` when set (``DEBUG`` / ``INFO`` / ``WARNING`` / ``ERROR``)
  • otherwise from ``settings.ENV``: ``dev`` → DEBUG, ``prod`` → WARNING

Usage:
    from finnova.src.utils.logger import get_logger
    logger = get_logger(__name__)
    logger.info("[ROUTER] Pipeline total: %.1fms", total_ms)
"""

import logging
import sys

from finnova.config.settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_ENV_LEVELS = {"dev": logging.DEBUG, "prod": logging.WARNING}
_FORMATTER = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)


def resolve_level(env: str, explicit: str | None = None) -> int:
    """Numeric log level for an environment mode, unless *explicit* names one."""
    if explicit:
        return logging.getLevelName(explicit.upper())
    return _ENV_LEVELS.get(env, logging.INFO)


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Return the logger *name* with FinNova's stdout handler attached once.

    Args:
        name:  Usually ``__name__`` of the calling module.
        level: Override for this logger; defaults to :func:`resolve_level`.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    resolved = level if level is not None else resolve_level(settings.ENV, settings.LOG_LEVEL)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_FORMATTER)
    logger.addHandler(handler)
    logger.setLevel(resolved)
    # Not forwarded to the root logger
    logger.propagate = False
    return logger
