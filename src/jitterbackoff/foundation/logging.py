"""Logging setup for jitterbackoff.

All library loggers live under the "jitterbackoff" namespace:
    jitterbackoff.config   - coercion of rejected settings
    jitterbackoff.backoff  - per-round nominal/jittered delays

The package root carries a NullHandler, so nothing is emitted unless the
application configures logging. `configure_logging` only sets the level.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from jitterbackoff.foundation.config import LoggingSettings

ROOT_LOGGER = "jitterbackoff"


def configure_logging(settings: LoggingSettings | None = None) -> logging.Logger:
    """Apply the configured level to the package logger.

    Args:
        settings: Logging settings; defaults to the global settings

    Returns:
        The package root logger
    """
    if settings is None:
        from jitterbackoff.foundation.config import get_settings
        settings = get_settings().logging
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(settings.level)
    return logger
