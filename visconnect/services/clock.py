"""
Clock - time source shared by the cache, circuit breaker, retrier and queue.

All TTL, cooldown and pacing math goes through a Clock instance so that
tests can swap in a simulated clock instead of sleeping for real.
"""

import asyncio
from datetime import datetime, timezone


class Clock:
    """Wall-clock time and cooperative sleep."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def elapsed_ms(self, since: datetime) -> float:
        """Milliseconds elapsed since ``since``."""
        return (self.now() - since).total_seconds() * 1000


system_clock = Clock()
