"""
Shared test fixtures for the neat-catch test suite.

Provides a recording sleep for the retry driver (no real waiting) and a
settings cache reset so environment-driven tests don't leak into each other.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from neat_catch.config import get_settings


class RecordingSleep:
    """Async stand-in for asyncio.sleep that records every requested wait (seconds)."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(float(seconds))

    @property
    def calls_ms(self) -> list[float]:
        return [round(seconds * 1000, 6) for seconds in self.calls]


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    """Return a fresh RecordingSleep for one test."""
    return RecordingSleep()


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Drop cached settings before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
