"""Exponential backoff with jitter for retry loops.

Provides a stateful delay generator with validated configuration:
- Backoff: Nominal delay state machine with jittered output
- new_backoff / coerce_backoff: Strict and coercing constructors
- BackoffOptions / BackoffConfig: Optional overrides and resolved settings

Example:
    >>> from jitterbackoff.runtime.backoff import new_backoff
    >>>
    >>> backoff = new_backoff(initial_delay=0, base_delay=0.5, exponential_limit=60)
    >>> while not try_connect():
    ...     backoff.sleep()
"""

from .backoff import Backoff, BackoffState, GrowthPhase, coerce_backoff, new_backoff
from .options import (
    DEFAULT_BASE_DELAY,
    DEFAULT_CONFIG,
    DEFAULT_EXPONENTIAL_LIMIT,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_JITTER_FACTOR,
    BackoffConfig,
    BackoffOptions,
    resolve_options,
    validate_options,
)

__all__ = [
    # State machine
    "Backoff",
    "BackoffState",
    "GrowthPhase",
    "new_backoff",
    "coerce_backoff",
    # Configuration
    "BackoffOptions",
    "BackoffConfig",
    "resolve_options",
    "validate_options",
    # Defaults
    "DEFAULT_CONFIG",
    "DEFAULT_INITIAL_DELAY",
    "DEFAULT_BASE_DELAY",
    "DEFAULT_EXPONENTIAL_LIMIT",
    "DEFAULT_JITTER_FACTOR",
]
