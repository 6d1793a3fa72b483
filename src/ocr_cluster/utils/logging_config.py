"""
Logging helpers for OCR Cluster.

Modules obtain their logger with ``get_logger(__name__)``. Nothing is
printed until an application calls ``setup_logging()``, which attaches a
single stream handler to the package logger.

Usage:
    from ocr_cluster.utils.logging_config import get_logger, setup_logging

    logger = get_logger(__name__)
    setup_logging("DEBUG")
"""

import logging
from typing import Optional

PACKAGE_LOGGER_NAME = "ocr_cluster"

_handler: Optional[logging.Handler] = None

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return the logger for *name* (usually the caller's ``__name__``)."""
    return logging.getLogger(name)


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Calling it again replaces the handler installed by a previous call
    instead of stacking a second one.

    Args:
        level: Level name such as "INFO" or "DEBUG". Defaults to the
            configured ``OCR_CLUSTER_LOG_LEVEL``.
        fmt: ``logging.Formatter`` format string. Defaults to the
            configured ``OCR_CLUSTER_LOG_FORMAT``.

    Returns:
        The configured package logger.
    """
    global _handler

    from ..config import config

    level = (level or config.logging.level).upper()
    fmt = fmt or config.logging.format
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {level}")

    root = logging.getLogger(PACKAGE_LOGGER_NAME)
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(_handler)
    root.setLevel(level)
    return root
