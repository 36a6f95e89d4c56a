"""Configuration errors for backoff construction.

Provides violation codes and structured violation records.
Uses Pydantic for validation and serialization of violation records.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ViolationCode(StrEnum):
    """Machine-readable codes for rejected backoff settings."""
    INITIAL_DELAY_NEGATIVE = "INITIAL_DELAY_NEGATIVE"
    BASE_DELAY_NOT_POSITIVE = "BASE_DELAY_NOT_POSITIVE"
    EXPONENTIAL_LIMIT_NEGATIVE = "EXPONENTIAL_LIMIT_NEGATIVE"
    JITTER_FACTOR_OUT_OF_RANGE = "JITTER_FACTOR_OUT_OF_RANGE"
    INVALID_TYPE = "INVALID_TYPE"


class ConfigViolation(BaseModel):
    """A single rejected backoff setting.

    Attributes:
        setting: Name of the offending setting (e.g. "jitter_factor")
        value: The value that was supplied
        code: Machine-readable violation code
        message: Human-readable explanation
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "title": "Config Violation",
            "description": "A backoff setting that failed validation",
            "examples": [{
                "setting": "jitter_factor",
                "value": 1.0,
                "code": "JITTER_FACTOR_OUT_OF_RANGE",
                "message": "the jitter factor must be in the range [0, 1)",
            }],
        },
    )

    setting: str = Field(min_length=1, description="Name of the rejected setting")
    value: Any = Field(default=None, description="Value that was supplied")
    code: ViolationCode = Field(description="Machine-readable violation code")
    message: str = Field(min_length=1, description="Human-readable error message")

    @computed_field
    @property
    def is_type_error(self) -> bool:
        """Whether the value could not be parsed at all."""
        return self.code is ViolationCode.INVALID_TYPE

    def render(self) -> str:
        """Format as `setting: message (got value)`."""
        return f"{self.setting}: {self.message} (got {self.value!r})"

    __str__ = render


class ConfigurationError(ValueError):
    """Raised by strict construction when one or more settings are invalid.

    Carries every violation found, in setting order, rather than only the first.

    Example:
        >>> try:
        ...     new_backoff(base_delay=0, jitter_factor=1.0)
        ... except ConfigurationError as e:
        ...     e.settings
        ('base_delay', 'jitter_factor')
    """

    __slots__ = ("violations",)

    def __init__(self, violations: Iterable[ConfigViolation]) -> None:
        self.violations: tuple[ConfigViolation, ...] = tuple(violations)
        if not self.violations:
            raise ValueError("ConfigurationError requires at least one violation")
        super().__init__("; ".join(v.render() for v in self.violations))

    @property
    def settings(self) -> tuple[str, ...]:
        """Names of the rejected settings, in order."""
        return tuple(v.setting for v in self.violations)

    @property
    def codes(self) -> frozenset[ViolationCode]:
        return frozenset(v.code for v in self.violations)

    def __contains__(self, setting: object) -> bool:
        return setting in self.settings
