"""
BackoffRetrier - bounded retries with exponential delay.

Delay before retry ``i`` (0-indexed) is ``min(base_delay * 2**i, max_delay)``.
Upstream client errors (4xx other than 429) are never retried; everything
else (network errors, timeouts, 5xx, 429, unclassified) is.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from loguru import logger

from visconnect.services.clock import Clock, system_clock
from visconnect.services.errors import UpstreamError

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry bounds for one kind of upstream call."""

    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 5.0  # seconds

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number ``attempt`` (0-indexed)."""
        return min(self.base_delay * (2**attempt), self.max_delay)


def is_retryable(error: BaseException) -> bool:
    """Classify a failure by kind and status code."""
    if isinstance(error, UpstreamError) and error.is_client_error:
        return False
    return True


class BackoffRetrier:
    """
    Runs an async operation up to ``max_retries + 1`` times.

    Usage:
        retrier = BackoffRetrier()
        data = await retrier.retry(lambda: fetch(), RetryPolicy(max_retries=3))
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or system_clock

    async def retry(
        self,
        operation: Callable[[], Awaitable[T]],
        policy: RetryPolicy | None = None,
    ) -> T:
        policy = policy or RetryPolicy()
        attempts = policy.max_retries + 1
        attempt = 0

        while True:
            try:
                return await operation()
            except Exception as e:
                if not is_retryable(e):
                    logger.debug(f"Non-retryable error, giving up: {e}")
                    raise

                if attempt >= policy.max_retries:
                    logger.error(f"All {attempts} attempts failed: {e}")
                    raise

                delay = policy.delay_for(attempt)
                retry_after = getattr(e, "retry_after", None)
                if retry_after:
                    delay = max(delay, retry_after)

                logger.warning(
                    f"Attempt {attempt + 1}/{attempts} failed: {e}. "
                    f"Retrying in {delay:.2f}s"
                )
                await self._clock.sleep(delay)
                attempt += 1
