"""jitterbackoff - Exponential backoff with jitter for retry loops.

Computes successive retry delays that grow exponentially up to a limit, with
random jitter so that many clients retrying at once do not stay in lockstep.

Quick Start:
    >>> from jitterbackoff import new_backoff
    >>>
    >>> backoff = new_backoff(
    ...     initial_delay=0,         # retry immediately the first time
    ...     base_delay=0.5,          # then 500ms, 1s, 2s, ...
    ...     exponential_limit=60,    # stop growing at 1 minute
    ... )
    >>> while not try_connect():
    ...     backoff.sleep()

Coercing (never raises, invalid settings fall back):
    >>> from jitterbackoff import coerce_backoff
    >>> coerce_backoff(jitter_factor=1.0).jitter_factor
    0.3

Async:
    >>> await backoff.async_sleep()

Inspection:
    >>> backoff.peek_delay()
    datetime.timedelta(seconds=2)
"""

from __future__ import annotations

import logging

from .foundation.errors import ConfigurationError, ConfigViolation, ViolationCode
from .runtime.backoff import (
    DEFAULT_BASE_DELAY,
    DEFAULT_CONFIG,
    DEFAULT_EXPONENTIAL_LIMIT,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_JITTER_FACTOR,
    Backoff,
    BackoffConfig,
    BackoffOptions,
    BackoffState,
    GrowthPhase,
    coerce_backoff,
    new_backoff,
    resolve_options,
    validate_options,
)
from .foundation.config import (
    BackoffSettings,
    JitterBackoffSettings,
    LoggingSettings,
    clear_settings_cache,
    get_settings,
)
from .foundation.logging import configure_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Backoff
    "Backoff", "BackoffState", "GrowthPhase", "new_backoff", "coerce_backoff",
    # Configuration
    "BackoffOptions", "BackoffConfig", "resolve_options", "validate_options",
    "DEFAULT_CONFIG", "DEFAULT_INITIAL_DELAY", "DEFAULT_BASE_DELAY",
    "DEFAULT_EXPONENTIAL_LIMIT", "DEFAULT_JITTER_FACTOR",
    # Errors
    "ConfigurationError", "ConfigViolation", "ViolationCode",
    # Settings
    "JitterBackoffSettings", "BackoffSettings", "LoggingSettings",
    "get_settings", "clear_settings_cache",
    # Logging
    "configure_logging",
]
