"""Tests for backoff configuration: strict validation and coercion."""

from __future__ import annotations

import logging
import math
from datetime import timedelta

import pytest
from pydantic import ValidationError

from jitterbackoff import (
    DEFAULT_BASE_DELAY,
    DEFAULT_CONFIG,
    DEFAULT_EXPONENTIAL_LIMIT,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_JITTER_FACTOR,
    BackoffConfig,
    BackoffOptions,
    ConfigurationError,
    ConfigViolation,
    ViolationCode,
    coerce_backoff,
    new_backoff,
    resolve_options,
    validate_options,
)

ZERO = timedelta(0)
NEG = timedelta(microseconds=-1)


def _settings(
    initial: timedelta | None = DEFAULT_INITIAL_DELAY,
    base: timedelta | None = DEFAULT_BASE_DELAY,
    limit: timedelta | None = DEFAULT_EXPONENTIAL_LIMIT,
    jitter: float | None = DEFAULT_JITTER_FACTOR,
) -> dict[str, object]:
    return {"initial_delay": initial, "base_delay": base, "exponential_limit": limit, "jitter_factor": jitter}


# ─────────────────────────────────────────────────────────────────────────────
# Defaults
# ─────────────────────────────────────────────────────────────────────────────


def test_defaults() -> None:
    assert DEFAULT_INITIAL_DELAY == timedelta(milliseconds=100)
    assert DEFAULT_BASE_DELAY == timedelta(milliseconds=100)
    assert DEFAULT_EXPONENTIAL_LIMIT == timedelta(minutes=3)
    assert DEFAULT_JITTER_FACTOR == 0.3


def test_no_options_gives_default_config() -> None:
    assert resolve_options() == DEFAULT_CONFIG
    assert resolve_options({}) == DEFAULT_CONFIG
    assert resolve_options(BackoffOptions()) == DEFAULT_CONFIG


def test_none_means_unset() -> None:
    assert resolve_options(_settings(None, None, None, None)) == DEFAULT_CONFIG


# ─────────────────────────────────────────────────────────────────────────────
# Strict construction
# ─────────────────────────────────────────────────────────────────────────────


VALID = {
    "default inputs": _settings(),
    "0 init delay": _settings(initial=ZERO),
    "0 exp limit": _settings(limit=ZERO),
    "0 jitter factor": _settings(jitter=0.0),
}

INVALID = {
    "negative init delay": (_settings(initial=NEG), "initial_delay", ViolationCode.INITIAL_DELAY_NEGATIVE),
    "negative base delay": (_settings(base=NEG), "base_delay", ViolationCode.BASE_DELAY_NOT_POSITIVE),
    "0 base delay": (_settings(base=ZERO), "base_delay", ViolationCode.BASE_DELAY_NOT_POSITIVE),
    "negative exp limit": (_settings(limit=NEG), "exponential_limit", ViolationCode.EXPONENTIAL_LIMIT_NEGATIVE),
    "negative jitter factor": (_settings(jitter=-1.0), "jitter_factor", ViolationCode.JITTER_FACTOR_OUT_OF_RANGE),
    "jitter factor == 1": (_settings(jitter=1.0), "jitter_factor", ViolationCode.JITTER_FACTOR_OUT_OF_RANGE),
    "jitter factor > 1": (_settings(jitter=1.3), "jitter_factor", ViolationCode.JITTER_FACTOR_OUT_OF_RANGE),
}


class TestStrict:
    """new_backoff / resolve_options(coerce=False)."""

    @pytest.mark.parametrize("settings", VALID.values(), ids=VALID.keys())
    def test_valid_settings_accepted(self, settings: dict[str, object]) -> None:
        b = new_backoff(**settings)
        assert b.peek_delay() == settings["initial_delay"]
        assert b.base_delay == settings["base_delay"]
        assert b.exponential_limit == settings["exponential_limit"]
        assert b.jitter_factor == settings["jitter_factor"]

    @pytest.mark.parametrize("settings", VALID.values(), ids=VALID.keys())
    def test_valid_settings_match_coerced(self, settings: dict[str, object]) -> None:
        assert new_backoff(**settings).state == coerce_backoff(**settings).state

    @pytest.mark.parametrize(("settings", "setting", "code"), INVALID.values(), ids=INVALID.keys())
    def test_invalid_setting_rejected(self, settings: dict[str, object], setting: str, code: ViolationCode) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            new_backoff(**settings)
        err = exc_info.value
        assert err.settings == (setting,)
        assert setting in err
        assert err.codes == {code}
        assert setting in str(err)

    def test_violations_accumulate(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            new_backoff(initial_delay=-1, base_delay=0, exponential_limit=-5, jitter_factor=1.0)
        assert exc_info.value.settings == ("initial_delay", "base_delay", "exponential_limit", "jitter_factor")
        assert exc_info.value.codes == {
            ViolationCode.INITIAL_DELAY_NEGATIVE,
            ViolationCode.BASE_DELAY_NOT_POSITIVE,
            ViolationCode.EXPONENTIAL_LIMIT_NEGATIVE,
            ViolationCode.JITTER_FACTOR_OUT_OF_RANGE,
        }

    def test_jitter_factor_one_names_setting(self) -> None:
        with pytest.raises(ConfigurationError, match="jitter_factor"):
            new_backoff(jitter_factor=1.0)

    def test_nan_jitter_factor_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            new_backoff(jitter_factor=math.nan)

    def test_unparseable_value_reported_with_range_errors(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_options({"initial_delay": "soon", "jitter_factor": 2.0})
        violations = exc_info.value.violations
        assert [v.setting for v in violations] == ["initial_delay", "jitter_factor"]
        assert violations[0].code is ViolationCode.INVALID_TYPE
        assert violations[0].is_type_error
        assert violations[0].value == "soon"
        assert not violations[1].is_type_error

    def test_unknown_setting_is_type_error(self) -> None:
        with pytest.raises(TypeError, match="max_delay"):
            resolve_options({"max_delay": 10})

    def test_config_validates_on_construction(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            BackoffConfig(base_delay=ZERO, jitter_factor=-0.1)
        assert exc_info.value.settings == ("base_delay", "jitter_factor")


# ─────────────────────────────────────────────────────────────────────────────
# Coercing construction
# ─────────────────────────────────────────────────────────────────────────────


COERCED = {
    "negative init delay to 0": (_settings(initial=NEG), _settings(initial=ZERO)),
    "negative base delay to the default": (_settings(base=NEG), _settings()),
    "0 base delay to the default": (_settings(base=ZERO), _settings()),
    "negative exp limit to 0": (_settings(limit=NEG), _settings(limit=ZERO)),
    "negative jitter factor to 0": (_settings(jitter=-1.0), _settings(jitter=0.0)),
    "jitter factor == 1 to the default": (_settings(jitter=1.0), _settings()),
    "jitter factor > 1 to the default": (_settings(jitter=1.3), _settings()),
}


class TestCoerce:
    """coerce_backoff / resolve_options(coerce=True)."""

    @pytest.mark.parametrize(("given", "expected"), COERCED.values(), ids=COERCED.keys())
    def test_fallbacks(self, given: dict[str, object], expected: dict[str, object]) -> None:
        assert resolve_options(given, coerce=True) == BackoffConfig(**expected)

    def test_jitter_factor_one_keeps_default_not_zero(self) -> None:
        assert coerce_backoff(jitter_factor=1.0).jitter_factor == 0.3

    def test_zero_base_delay_keeps_default(self) -> None:
        assert coerce_backoff(base_delay=0).base_delay == timedelta(milliseconds=100)

    def test_everything_invalid_still_builds(self) -> None:
        b = coerce_backoff(initial_delay=-3, base_delay=-3, exponential_limit=-3, jitter_factor=7.0)
        assert b.peek_delay() == ZERO
        assert b.base_delay == DEFAULT_BASE_DELAY
        assert b.exponential_limit == ZERO
        assert b.jitter_factor == DEFAULT_JITTER_FACTOR

    def test_nan_jitter_factor_keeps_default(self) -> None:
        assert coerce_backoff(jitter_factor=math.nan).jitter_factor == DEFAULT_JITTER_FACTOR

    def test_unparseable_value_keeps_default(self) -> None:
        cfg = resolve_options({"exponential_limit": "forever", "jitter_factor": "lots"}, coerce=True)
        assert cfg.exponential_limit == DEFAULT_EXPONENTIAL_LIMIT
        assert cfg.jitter_factor == DEFAULT_JITTER_FACTOR

    def test_coercion_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="jitterbackoff.config"):
            coerce_backoff(base_delay=0)
        assert any("base_delay" in r.getMessage() for r in caplog.records)


# ─────────────────────────────────────────────────────────────────────────────
# Options model & validation helpers
# ─────────────────────────────────────────────────────────────────────────────


class TestOptions:

    def test_numbers_are_seconds(self) -> None:
        opts = BackoffOptions(initial_delay=0, base_delay=0.5, exponential_limit=60)
        assert opts.initial_delay == ZERO
        assert opts.base_delay == timedelta(milliseconds=500)
        assert opts.exponential_limit == timedelta(minutes=1)

    def test_seconds_as_text(self) -> None:
        cfg = resolve_options({"initial_delay": "0", "base_delay": "0.5", "exponential_limit": "-1"}, coerce=True)
        assert cfg.initial_delay == ZERO
        assert cfg.base_delay == timedelta(milliseconds=500)
        assert cfg.exponential_limit == ZERO

    def test_supplied_excludes_unset(self) -> None:
        assert BackoffOptions(jitter_factor=0.1).supplied() == {"jitter_factor": 0.1}

    def test_options_are_frozen(self) -> None:
        opts = BackoffOptions()
        with pytest.raises(ValidationError):
            opts.jitter_factor = 0.5  # type: ignore[misc]

    def test_validate_options_returns_all(self) -> None:
        violations = validate_options(BackoffOptions(base_delay=0, jitter_factor=-0.5))
        assert [v.code for v in violations] == [
            ViolationCode.BASE_DELAY_NOT_POSITIVE,
            ViolationCode.JITTER_FACTOR_OUT_OF_RANGE,
        ]

    def test_validate_options_empty_when_valid(self) -> None:
        assert validate_options({"initial_delay": 0, "exponential_limit": 0}) == []

    def test_violation_render(self) -> None:
        v = ConfigViolation(
            setting="base_delay", value=ZERO,
            code=ViolationCode.BASE_DELAY_NOT_POSITIVE, message="the base delay must be > 0",
        )
        assert str(v) == "base_delay: the base delay must be > 0 (got datetime.timedelta(0))"

    def test_error_requires_violations(self) -> None:
        with pytest.raises(ValueError):
            ConfigurationError([])
