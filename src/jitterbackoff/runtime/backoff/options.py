"""Backoff configuration: defaults, options, and validation.

Settings are supplied as a `BackoffOptions` model (or a plain mapping) whose
fields are all optional; omitted settings take the module defaults. A single
pass checks every supplied setting, then either raises one aggregated
`ConfigurationError` (strict) or replaces each rejected value with its
fallback (coercing):

    initial_delay      >= 0      negative -> 0
    base_delay         > 0       <= 0     -> default (100ms)
    exponential_limit  >= 0      negative -> 0
    jitter_factor      [0, 1)    < 0      -> 0, >= 1 -> default (0.3)

Values that cannot be parsed at all are reported as INVALID_TYPE when strict
and replaced by the setting's default when coercing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from jitterbackoff.foundation.errors import ConfigurationError, ConfigViolation, ViolationCode

logger = logging.getLogger("jitterbackoff.config")

DEFAULT_INITIAL_DELAY: Final = timedelta(milliseconds=100)
DEFAULT_BASE_DELAY: Final = timedelta(milliseconds=100)
DEFAULT_EXPONENTIAL_LIMIT: Final = timedelta(minutes=3)
DEFAULT_JITTER_FACTOR: Final = 0.3

_ZERO: Final = timedelta(0)


class BackoffOptions(BaseModel):
    """Optional overrides layered onto the backoff defaults.

    A field left as None means "use the default". Delays accept timedelta,
    int/float seconds (also as text), or ISO 8601 duration strings.

    Example:
        >>> BackoffOptions(initial_delay=0, base_delay=0.5, exponential_limit=60)
        BackoffOptions(initial_delay=datetime.timedelta(0), ...)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "title": "Backoff Options",
            "description": "Overrides for exponential backoff with jitter",
            "examples": [{"initial_delay": 0, "base_delay": 0.5, "exponential_limit": 60}],
        },
    )

    initial_delay: timedelta | None = Field(default=None, description="Delay before the first retry")
    base_delay: timedelta | None = Field(default=None, description="Delay growth resumes from after a zero delay")
    exponential_limit: timedelta | None = Field(default=None, description="Delay beyond which growth stops")
    jitter_factor: float | None = Field(default=None, description="Randomized fraction of each delay, in [0, 1)")

    @field_validator("initial_delay", "base_delay", "exponential_limit", mode="before")
    @classmethod
    def _parse_seconds(cls, v: object) -> object:
        """Accept numbers of seconds given as text ("0.5"), e.g. from the environment."""
        if isinstance(v, str):
            try:
                return float(v)
            except ValueError:
                return v  # let pydantic try ISO 8601 / HH:MM:SS
        return v

    def supplied(self) -> dict[str, Any]:
        """Settings that were explicitly provided."""
        return self.model_dump(exclude_none=True)


@dataclass(frozen=True, slots=True)
class _Rule:
    setting: str
    check: Callable[[Any], bool]
    code: ViolationCode
    message: str
    fallback: Callable[[Any], Any]
    default: Any


_RULES: Final[tuple[_Rule, ...]] = (
    _Rule(
        "initial_delay", lambda d: d >= _ZERO, ViolationCode.INITIAL_DELAY_NEGATIVE,
        "the initial delay must be >= 0",
        lambda _: _ZERO,  # caller wanted an immediate first retry
        DEFAULT_INITIAL_DELAY,
    ),
    _Rule(
        "base_delay", lambda d: d > _ZERO, ViolationCode.BASE_DELAY_NOT_POSITIVE,
        "the base delay must be > 0",
        lambda _: DEFAULT_BASE_DELAY,
        DEFAULT_BASE_DELAY,
    ),
    _Rule(
        "exponential_limit", lambda d: d >= _ZERO, ViolationCode.EXPONENTIAL_LIMIT_NEGATIVE,
        "the exponential limit must be >= 0",
        lambda _: _ZERO,  # caller wanted no exponential growth
        DEFAULT_EXPONENTIAL_LIMIT,
    ),
    _Rule(
        "jitter_factor", lambda j: 0.0 <= j < 1.0, ViolationCode.JITTER_FACTOR_OUT_OF_RANGE,
        "the jitter factor must be in the range [0, 1)",
        lambda j: 0.0 if j < 0 else DEFAULT_JITTER_FACTOR,  # NaN keeps the default too
        DEFAULT_JITTER_FACTOR,
    ),
)

SETTINGS: Final[tuple[str, ...]] = tuple(r.setting for r in _RULES)
_RULES_BY_SETTING: Final = {r.setting: r for r in _RULES}


@dataclass(frozen=True, slots=True)
class BackoffConfig:
    """Fully resolved, valid backoff configuration.

    Constructing one directly validates it strictly.
    """

    initial_delay: timedelta = DEFAULT_INITIAL_DELAY
    base_delay: timedelta = DEFAULT_BASE_DELAY
    exponential_limit: timedelta = DEFAULT_EXPONENTIAL_LIMIT
    jitter_factor: float = DEFAULT_JITTER_FACTOR

    def __post_init__(self) -> None:
        violations = [
            _violation(rule, value)
            for rule in _RULES
            if not rule.check(value := getattr(self, rule.setting))
        ]
        if violations:
            raise ConfigurationError(violations)


DEFAULT_CONFIG: Final = BackoffConfig()


def _violation(rule: _Rule, value: Any) -> ConfigViolation:
    return ConfigViolation(setting=rule.setting, value=value, code=rule.code, message=rule.message)


def _parse(raw: Mapping[str, Any]) -> tuple[BackoffOptions, dict[str, ConfigViolation]]:
    """Parse a mapping into options, separating out unparseable settings."""
    if unknown := sorted(set(raw) - set(SETTINGS)):
        raise TypeError(f"unknown backoff setting(s): {', '.join(unknown)}")
    try:
        return BackoffOptions.model_validate(dict(raw)), {}
    except ValidationError as exc:
        bad: dict[str, ConfigViolation] = {}
        for err in exc.errors():
            setting = str(err["loc"][0])
            bad.setdefault(setting, ConfigViolation(
                setting=setting,
                value=err.get("input"),
                code=ViolationCode.INVALID_TYPE,
                message=err["msg"],
            ))
        return BackoffOptions.model_validate({k: v for k, v in raw.items() if k not in bad}), bad


def _collect(options: BackoffOptions | Mapping[str, Any]) -> tuple[BackoffOptions, list[ConfigViolation]]:
    if isinstance(options, BackoffOptions):
        parsed, unparseable = options, {}
    else:
        parsed, unparseable = _parse(options)
    supplied = parsed.supplied()
    violations: list[ConfigViolation] = []
    for rule in _RULES:
        if rule.setting in unparseable:
            violations.append(unparseable[rule.setting])
        elif rule.setting in supplied and not rule.check(supplied[rule.setting]):
            violations.append(_violation(rule, supplied[rule.setting]))
    return parsed, violations


def validate_options(options: BackoffOptions | Mapping[str, Any]) -> list[ConfigViolation]:
    """Check every supplied setting and return all violations (empty if valid)."""
    return _collect(options)[1]


def resolve_options(
    options: BackoffOptions | Mapping[str, Any] | None = None,
    *,
    coerce: bool = False,
) -> BackoffConfig:
    """Layer options onto the defaults and produce a valid configuration.

    Args:
        options: Overrides; None or empty means all defaults
        coerce: Replace invalid values with fallbacks instead of raising

    Returns:
        Resolved BackoffConfig

    Raises:
        ConfigurationError: When not coercing and any setting is invalid.
            Every violation is reported, not just the first.
        TypeError: When a mapping names an unknown setting.
    """
    if options is None:
        return DEFAULT_CONFIG
    parsed, violations = _collect(options)
    if violations and not coerce:
        raise ConfigurationError(violations)

    values = {rule.setting: rule.default for rule in _RULES}
    values.update(parsed.supplied())
    for v in violations:
        rule = _RULES_BY_SETTING[v.setting]
        values[v.setting] = rule.default if v.is_type_error else rule.fallback(v.value)
        logger.debug("coerced %s=%r to %r (%s)", v.setting, v.value, values[v.setting], v.code)
    return BackoffConfig(**values)
