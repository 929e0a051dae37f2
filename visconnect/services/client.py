"""
ServiceClient - Unified async upstream client with resilience patterns.

Combines:
- CacheManager for fresh + fallback response caching
- CircuitBreaker for failure protection (outermost)
- BackoffRetrier for bounded retries
- RequestQueue for outbound pacing (innermost, around the raw call)

Every fetch follows the same skeleton:
    fresh cache hit -> return
    breaker(retry(queue(raw call))) -> transform -> write both tiers -> return
    on failure -> fallback tier, else raise
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Awaitable, Callable, Generic, Mapping, TypeVar

import httpx
from loguru import logger

from visconnect.services.cache import CacheManager
from visconnect.services.circuit_breaker import CircuitBreaker
from visconnect.services.clock import Clock, system_clock
from visconnect.services.errors import ServiceError, UpstreamError, UpstreamTimeoutError
from visconnect.services.request_queue import RequestQueue
from visconnect.services.retry import BackoffRetrier, RetryPolicy

T = TypeVar("T")

Json = dict[str, Any]


@dataclass
class RequestResult(Generic[T]):
    """Result from a service request."""

    data: T | None
    from_cache: str | None = None  # 'memory' | 'fallback' | None
    is_stale: bool = False
    service_id: str | None = None


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class ServiceClient:
    """
    Resilient HTTP client for one upstream target.

    The breaker, queue, cache and retrier are owned by the composition root
    and passed in; nothing here is a process-wide global.

    Usage:
        client = ServiceClient(base_url="https://upstream.example/api")

        result = await client.fetch(
            key="tournament_count",
            call=lambda: client.post_form({"Request": xml}),
            transform=count_tournaments,
            ttl=timedelta(minutes=5),
            fallback_ttl=timedelta(hours=1),
        )
    """

    def __init__(
        self,
        base_url: str,
        *,
        service_id: str = "vis",
        api_key: str = "",
        timeout: float = 10.0,
        connect_timeout: float = 5.0,
        cache: CacheManager | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        request_queue: RequestQueue | None = None,
        retrier: BackoffRetrier | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Clock | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.service_id = service_id
        self._api_key = api_key
        self._timeout = timeout
        self._connect_timeout = connect_timeout
        self._clock = clock or system_clock
        self._transport = transport

        self.cache = cache or CacheManager(clock=self._clock)
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            service_id, clock=self._clock
        )
        self.request_queue = request_queue or RequestQueue(
            clock=self._clock, service_id=service_id
        )
        self.retrier = retrier or BackoffRetrier(clock=self._clock)
        self.retry_policy = retry_policy or RetryPolicy()

        # HTTP client (lazy initialization)
        self._http_client: httpx.AsyncClient | None = None

    @property
    def clock(self) -> Clock:
        return self._clock

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            headers = {"Accept": "application/json"}
            if self._api_key:
                headers["X-FIVB-App-ID"] = self._api_key
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=self._connect_timeout),
                headers=headers,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._http_client

    async def fetch(
        self,
        key: str,
        call: Callable[[], Awaitable[Json]],
        transform: Callable[[Json], T | None],
        *,
        ttl: timedelta,
        fallback_ttl: timedelta | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> RequestResult[T]:
        """
        Fetch one resource through cache, breaker, retrier and queue.

        A 404 from upstream, or a transform that yields None, resolves to
        ``data=None`` and is never cached.

        Raises:
            CircuitOpenError: If the breaker is open and no fallback exists
            UpstreamError: If the call failed and no fallback exists
        """
        cached = self.cache.get(key)
        if cached is not None:
            return RequestResult(data=cached, from_cache="memory", service_id=self.service_id)

        policy = retry_policy or self.retry_policy

        async def attempt() -> Json:
            return await self.request_queue.enqueue(call)

        async def guarded() -> Json | None:
            try:
                return await self.retrier.retry(attempt, policy)
            except UpstreamError as e:
                if e.status_code == 404:
                    logger.debug(f"Upstream reported not found for {key}")
                    return None
                raise

        try:
            raw = await self.circuit_breaker.execute(guarded)
        except ServiceError as e:
            if fallback_ttl is not None:
                fallback = self.cache.get_fallback(key)
                if fallback is not None:
                    logger.warning(
                        f"Request to {self.service_id} failed, serving fallback data "
                        f"for '{key}': {e}"
                    )
                    return RequestResult(
                        data=fallback,
                        from_cache="fallback",
                        is_stale=True,
                        service_id=self.service_id,
                    )
            logger.error(f"Request to {self.service_id} failed for '{key}': {e}")
            raise

        data = transform(raw) if raw is not None else None
        if data is not None:
            if fallback_ttl is not None:
                self.cache.set_with_fallback(key, data, ttl, fallback_ttl)
            else:
                self.cache.set(key, data, ttl)

        return RequestResult(data=data, service_id=self.service_id)

    async def post_form(self, data: Mapping[str, str]) -> Json:
        """POST a form body to the base URL and return the parsed JSON object."""
        return await self._execute_request("POST", data=data)

    async def _execute_request(
        self,
        method: str,
        data: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Json:
        """Execute the actual HTTP request, mapping every failure to UpstreamError."""
        client = self._get_http_client()
        started = self._clock.now()

        try:
            response = await client.request(
                method=method, url=self.base_url, data=data, params=params
            )
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(self.service_id, self._timeout, cause=e) from e
        except httpx.RequestError as e:
            raise UpstreamError(
                f"{self.service_id} network error: {e}",
                cause=e,
                service_id=self.service_id,
            ) from e

        elapsed = self._clock.elapsed_ms(started)
        logger.debug(f"{method} {self.service_id} -> {response.status_code} ({elapsed:.0f}ms)")

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                cause=e,
                service_id=self.service_id,
                retry_after=_parse_retry_after(response.headers.get("Retry-After")),
            ) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(
                "Response was not valid JSON",
                status_code=response.status_code,
                cause=e,
                service_id=self.service_id,
            ) from e

        if not isinstance(payload, dict):
            raise UpstreamError(
                f"Expected JSON object, got {type(payload).__name__}",
                status_code=response.status_code,
                service_id=self.service_id,
            )

        return payload

    async def close(self) -> None:
        """Close the HTTP client and stop the request queue."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

        await self.request_queue.close()
        logger.debug("ServiceClient closed")

    async def __aenter__(self) -> "ServiceClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    # Health and status methods

    def get_health_status(self) -> dict[str, Any]:
        """Get status of the resilience components."""
        return {
            "cache": self.cache.get_stats().to_dict(),
            "circuit_breaker": self.circuit_breaker.get_status(),
            "request_queue": self.request_queue.get_status(),
        }

    def reset_circuit(self) -> None:
        """Reset the circuit breaker."""
        self.circuit_breaker.reset()

    def clear_cache(self, pattern: str | None = None) -> int:
        """Clear cache entries, optionally matching a pattern."""
        return self.cache.clear(pattern)
