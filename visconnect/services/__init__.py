"""
Service layer infrastructure - resilience patterns for upstream API calls.

Provides:
- CacheManager: Fresh + fallback caching with TTL
- CircuitBreaker: Prevents cascading failures
- BackoffRetrier: Bounded retries with exponential delay
- RequestQueue: FIFO outbound rate limiting
- ServiceClient: Unified client combining all patterns
"""

from visconnect.services.errors import (
    ServiceError,
    UpstreamError,
    UpstreamTimeoutError,
    CircuitOpenError,
    RateLimitError,
)
from visconnect.services.clock import Clock, system_clock
from visconnect.services.cache import CacheManager, CacheEntry, CacheStats
from visconnect.services.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
)
from visconnect.services.retry import BackoffRetrier, RetryPolicy, is_retryable
from visconnect.services.request_queue import RequestQueue
from visconnect.services.client import ServiceClient, RequestResult

__all__ = [
    # Errors
    "ServiceError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "CircuitOpenError",
    "RateLimitError",
    # Clock
    "Clock",
    "system_clock",
    # Cache
    "CacheManager",
    "CacheEntry",
    "CacheStats",
    # Circuit Breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    # Retry
    "BackoffRetrier",
    "RetryPolicy",
    "is_retryable",
    # Rate limiting
    "RequestQueue",
    # Client
    "ServiceClient",
    "RequestResult",
]
