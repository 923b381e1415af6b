"""Logging setup for the indicator engine."""

import logging
from typing import Optional

from indicator_engine.core.config import get_settings

PACKAGE_LOGGER = "indicator_engine"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Set the package logger level.

    Handlers are left to the host application; a NullHandler keeps the
    library silent when nothing is configured.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel((level or get_settings().log_level).upper())
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger
