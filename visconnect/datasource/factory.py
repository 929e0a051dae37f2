"""
Composition root for tournament sources.

Builds one breaker, one request queue and one cache for the VIS target and
hands them to the client explicitly.
"""

from datetime import timedelta

import httpx
from loguru import logger

from visconnect.datasource.base import BaseTournamentSource
from visconnect.datasource.mock import MockTournamentSource
from visconnect.datasource.vis import VisSource
from visconnect.services.cache import CacheManager
from visconnect.services.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from visconnect.services.client import ServiceClient
from visconnect.services.clock import Clock, system_clock
from visconnect.services.request_queue import RequestQueue
from visconnect.services.retry import BackoffRetrier, RetryPolicy
from visconnect.settings import Settings


def create_vis_client(
    settings: Settings,
    clock: Clock | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ServiceClient:
    """Wire a ServiceClient for VIS from settings."""
    clock = clock or system_clock
    service_id = VisSource.SERVICE_ID

    return ServiceClient(
        base_url=settings.vis_api_url,
        service_id=service_id,
        api_key=settings.vis_api_key,
        timeout=settings.request_timeout,
        connect_timeout=settings.connect_timeout,
        cache=CacheManager(
            max_size=settings.cache_max_size,
            default_ttl=timedelta(seconds=settings.cache_ttl),
            clock=clock,
        ),
        circuit_breaker=CircuitBreaker(
            service_id,
            CircuitBreakerConfig(
                failure_threshold=settings.circuit_breaker_threshold,
                reset_timeout=timedelta(seconds=settings.circuit_breaker_cooldown),
            ),
            clock=clock,
        ),
        request_queue=RequestQueue(
            requests_per_minute=settings.rate_limit_rpm,
            clock=clock,
            max_size=settings.request_queue_max_size,
            service_id=service_id,
        ),
        retrier=BackoffRetrier(clock=clock),
        retry_policy=RetryPolicy(
            max_retries=settings.max_retries,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        ),
        clock=clock,
        transport=transport,
    )


def create_tournament_source(
    settings: Settings,
    clock: Clock | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BaseTournamentSource:
    """Live VIS source, or the in-memory demo source when no key is configured."""
    if settings.is_demo:
        logger.info("Initializing tournament source in demo mode with mock data")
        return MockTournamentSource()

    logger.info(f"Initializing VIS source for {settings.vis_api_url}")
    return VisSource(create_vis_client(settings, clock=clock, transport=transport))
