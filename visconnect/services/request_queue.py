"""
RequestQueue - FIFO outbound rate limiter.

Serializes outbound upstream calls through a single worker and paces them
to a requests-per-minute budget. Exactly one task runs at a time; tasks are
dispatched in arrival order.
"""

import asyncio
from collections import deque
from datetime import datetime
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

from visconnect.services.clock import Clock, system_clock
from visconnect.services.errors import RateLimitError

T = TypeVar("T")


class RequestQueue:
    """
    Paces outbound calls to ``requests_per_minute``.

    Usage:
        queue = RequestQueue(requests_per_minute=60)
        data = await queue.enqueue(lambda: http_client.post(...))
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        clock: Clock | None = None,
        max_size: int | None = None,
        service_id: str = "upstream",
    ):
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be > 0")

        self.service_id = service_id
        self.min_interval = 60.0 / requests_per_minute  # seconds
        self._clock = clock or system_clock
        self._max_size = max_size or None

        self._queue: deque[tuple[Callable[[], Awaitable[Any]], asyncio.Future[Any]]] = (
            deque()
        )
        self._worker: asyncio.Task[None] | None = None
        self._last_request_time: datetime | None = None
        self._dispatched = 0

    async def enqueue(self, task: Callable[[], Awaitable[T]]) -> T:
        """
        Queue ``task`` and wait for its own outcome.

        Raises:
            RateLimitError: If a max_size cap is configured and reached
        """
        if self._max_size is not None and len(self._queue) >= self._max_size:
            raise RateLimitError(self.service_id, retry_after=self.min_interval)

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._queue.append((task, future))

        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._process())

        return await future

    async def _process(self) -> None:
        """Worker loop: pace, dequeue one task, run it, repeat until empty."""
        while self._queue:
            if self._last_request_time is not None:
                elapsed = (self._clock.now() - self._last_request_time).total_seconds()
                if elapsed < self.min_interval:
                    await self._clock.sleep(self.min_interval - elapsed)

            task, future = self._queue.popleft()
            if future.done():
                # Caller went away (cancelled); nothing to deliver
                continue

            self._last_request_time = self._clock.now()
            self._dispatched += 1
            logger.debug(
                f"[RequestQueue] dispatch #{self._dispatched} "
                f"({len(self._queue)} waiting)"
            )

            try:
                result = await task()
            except asyncio.CancelledError:
                future.cancel()
                raise
            except Exception as e:
                if not future.done():
                    future.set_exception(e)
            else:
                if not future.done():
                    future.set_result(result)

    def get_queue_length(self) -> int:
        return len(self._queue)

    @property
    def processing(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def get_status(self) -> dict[str, Any]:
        """Get current status as dictionary."""
        return {
            "queue_length": len(self._queue),
            "processing": self.processing,
            "last_request_time": (
                self._last_request_time.isoformat() if self._last_request_time else None
            ),
            "min_interval": self.min_interval,
            "dispatched": self._dispatched,
        }

    async def close(self) -> None:
        """Stop the worker and fail everything still waiting."""
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None

        while self._queue:
            _, future = self._queue.popleft()
            if not future.done():
                future.cancel()
