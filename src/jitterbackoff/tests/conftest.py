"""Shared fixtures for jitterbackoff tests."""

from __future__ import annotations

import random
from collections.abc import Iterator

import pytest

from jitterbackoff import clear_settings_cache


class StubRandom(random.Random):
    """Random source returning a fixed value, counting draws."""

    def __init__(self, value: float = 0.5) -> None:
        super().__init__(0)
        self.value = value
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return self.value


@pytest.fixture
def midpoint() -> StubRandom:
    """u = 0.5, so the jitter multiplier is exactly 1."""
    return StubRandom(0.5)


@pytest.fixture
def seeded() -> random.Random:
    return random.Random(1234)


@pytest.fixture(autouse=True)
def clean_settings() -> Iterator[None]:
    """Reset cached settings around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def stub_random() -> type[StubRandom]:
    return StubRandom
