"""
Logging setup for fingerprint_sync.

Modules log through ``logging.getLogger(__name__)``; this only attaches a
handler to the package logger so that those records go somewhere.
Callers (a scheduler, a script) invoke it once at start-up; the
library itself never does.
"""

import logging
from typing import Optional, Union

from fingerprint_sync.config import get_config

PACKAGE_LOGGER = "fingerprint_sync"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger and set its level.

    Calling this more than once only updates the level.

    Args:
        level: Logging level name ("DEBUG", "INFO", ...) or number.
               Defaults to LOG_LEVEL from the configuration.

    Returns:
        The configured package logger
    """
    if level is None:
        level = get_config().log_level

    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
