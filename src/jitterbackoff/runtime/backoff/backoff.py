"""Exponential backoff with jitter.

A `Backoff` tracks a nominal (pre-jitter) delay that grows exponentially
up to a limit, and hands out jittered delays around it:

    nominal:  initial -> x2 -> x2 -> ... -> limit -> limit -> ...
    returned: nominal * uniform(1 - jitter/2, 1 + jitter/2)

Jitter never feeds back into the nominal sequence. An initial delay of 0
gives an immediate first retry, after which growth resumes from the base
delay.

Example:
    >>> b = new_backoff(initial_delay=0, base_delay=0.5, exponential_limit=60)
    >>> b.sleep()  # immediate, initial delay is 0
    >>> b.sleep()  # 425~575ms
    >>> b.sleep()  # 850~1150ms
    >>> # ... 2s, 4s, 8s, 16s, 32s, then 60s (+/- 15%) from there on

A Backoff is not synchronized; give each retry loop its own instance.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Self

from .options import DEFAULT_CONFIG, BackoffConfig, BackoffOptions, resolve_options

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from jitterbackoff.foundation.config import JitterBackoffSettings

logger = logging.getLogger("jitterbackoff.backoff")

_MICROSECOND = timedelta(microseconds=1)
_MAX_MICROSECONDS = timedelta.max // _MICROSECOND


class GrowthPhase(StrEnum):
    """Where the nominal delay sits relative to its growth rules."""
    COLD_START = "cold_start"  # 0, next round uses the base delay
    GROWING = "growing"  # doubling each round
    SATURATED = "saturated"  # at or past the limit, stable


@dataclass(frozen=True, slots=True)
class BackoffState:
    """Snapshot of a Backoff's nominal delay and configuration."""

    current_delay: timedelta
    base_delay: timedelta
    exponential_limit: timedelta
    jitter_factor: float


class Backoff:
    """Exponential backoff state machine with jitter.

    Build one with `new_backoff` (strict) or `coerce_backoff` (never fails);
    constructing directly takes an already-valid BackoffConfig.

    Args:
        config: Resolved configuration (defaults when omitted)
        rng: Random source; the `random` module when omitted
    """

    __slots__ = ("_delay", "_base_delay", "_exp_limit", "_jitter_factor", "_uniform")

    def __init__(self, config: BackoffConfig | None = None, *, rng: random.Random | None = None) -> None:
        cfg = config or DEFAULT_CONFIG
        self._delay = cfg.initial_delay
        self._base_delay = cfg.base_delay
        self._exp_limit = cfg.exponential_limit
        self._jitter_factor = cfg.jitter_factor
        self._uniform: Callable[[], float] = (rng or random).random

    @classmethod
    def from_options(
        cls,
        options: BackoffOptions | Mapping[str, Any] | None = None,
        *,
        coerce: bool = False,
        rng: random.Random | None = None,
    ) -> Self:
        """Create from options layered onto the defaults.

        Raises:
            ConfigurationError: When not coercing and any setting is invalid
        """
        return cls(resolve_options(options, coerce=coerce), rng=rng)

    @classmethod
    def from_settings(
        cls,
        settings: JitterBackoffSettings | None = None,
        *,
        coerce: bool = False,
        rng: random.Random | None = None,
    ) -> Self:
        """Create from environment settings (the global settings when omitted)."""
        if settings is None:
            from jitterbackoff.foundation.config import get_settings
            settings = get_settings()
        return cls.from_options(settings.backoff.to_options(), coerce=coerce, rng=rng)

    @property
    def base_delay(self) -> timedelta:
        return self._base_delay

    @property
    def exponential_limit(self) -> timedelta:
        return self._exp_limit

    @property
    def jitter_factor(self) -> float:
        return self._jitter_factor

    @property
    def state(self) -> BackoffState:
        """Current nominal delay plus configuration."""
        return BackoffState(self._delay, self._base_delay, self._exp_limit, self._jitter_factor)

    @property
    def phase(self) -> GrowthPhase:
        if not self._delay:
            return GrowthPhase.COLD_START
        if self._delay < self._exp_limit:
            return GrowthPhase.GROWING
        return GrowthPhase.SATURATED

    def peek_delay(self) -> timedelta:
        """Nominal delay the next round will use, without advancing or drawing randomness."""
        return self._delay

    def advance(self) -> timedelta:
        """Return this round's jittered delay and move the nominal delay on.

        The nominal delay grows from its own pre-jitter value: 0 becomes the
        base delay, anything under the limit doubles (capped at the limit),
        and anything at or over the limit stays put.
        """
        nominal = self._delay
        multiplier = 1.0 + (self._uniform() - 0.5) * self._jitter_factor
        if multiplier == 1.0:
            jittered = nominal
        else:
            micros = math.floor(nominal // _MICROSECOND * multiplier + 0.5)
            jittered = timedelta(microseconds=min(micros, _MAX_MICROSECONDS))

        if not nominal:
            self._delay = self._base_delay
        elif nominal < self._exp_limit:
            # same as min(nominal * 2, limit), but never builds a delay past timedelta.max
            self._delay = self._exp_limit if nominal > self._exp_limit - nominal else nominal * 2

        logger.debug("backoff round: nominal=%s jittered=%s next=%s", nominal, jittered, self._delay)
        return jittered

    def sleep(self) -> timedelta:
        """Block the calling thread for the next jittered delay. Returns the delay slept."""
        delay = self.advance()
        time.sleep(delay.total_seconds())
        return delay

    async def async_sleep(self) -> timedelta:
        """Suspend the calling task for the next jittered delay. Returns the delay awaited."""
        delay = self.advance()
        await asyncio.sleep(delay.total_seconds())
        return delay

    def __repr__(self) -> str:
        return (
            f"Backoff(current_delay={self._delay!r}, base_delay={self._base_delay!r}, "
            f"exponential_limit={self._exp_limit!r}, jitter_factor={self._jitter_factor!r})"
        )


def new_backoff(
    *,
    initial_delay: timedelta | float | None = None,
    base_delay: timedelta | float | None = None,
    exponential_limit: timedelta | float | None = None,
    jitter_factor: float | None = None,
    rng: random.Random | None = None,
) -> Backoff:
    """Create a backoff, rejecting invalid settings.

    Omitted settings use the defaults: 100ms initial and base delay, 3 minute
    exponential limit, 0.3 jitter factor (+/- 15%). Numbers are seconds.

    Raises:
        ConfigurationError: Listing every invalid setting
    """
    return Backoff.from_options(
        _overrides(initial_delay, base_delay, exponential_limit, jitter_factor), rng=rng,
    )


def coerce_backoff(
    *,
    initial_delay: timedelta | float | None = None,
    base_delay: timedelta | float | None = None,
    exponential_limit: timedelta | float | None = None,
    jitter_factor: float | None = None,
    rng: random.Random | None = None,
) -> Backoff:
    """Create a backoff, replacing invalid settings instead of failing.

    Negative initial delay and exponential limit become 0. A non-positive base
    delay keeps the default. A negative jitter factor becomes 0; one >= 1
    keeps the default.
    """
    return Backoff.from_options(
        _overrides(initial_delay, base_delay, exponential_limit, jitter_factor), coerce=True, rng=rng,
    )


def _overrides(initial_delay: Any, base_delay: Any, exponential_limit: Any, jitter_factor: Any) -> dict[str, Any]:
    return {
        "initial_delay": initial_delay,
        "base_delay": base_delay,
        "exponential_limit": exponential_limit,
        "jitter_factor": jitter_factor,
    }
