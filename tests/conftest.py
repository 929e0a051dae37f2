"""Pytest configuration and fixtures for VisConnect tests."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from visconnect.services.clock import Clock


class FakeClock(Clock):
    """Simulated clock: sleeping advances time instantly."""

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime(2024, 8, 15, 12, 0, tzinfo=timezone.utc)
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)
        await asyncio.sleep(0)


@pytest.fixture
def clock():
    """Deterministic clock starting at a fixed UTC instant."""
    return FakeClock()
