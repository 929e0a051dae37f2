"""
FIVB VIS data source for beach volleyball tournaments.

Every operation runs through ServiceClient.fetch, so each one gets the same
fresh-cache / breaker / retry / queue / fallback treatment. Only the query,
the TTLs and the payload transform differ per resource.
"""

from datetime import timedelta
from typing import Any

from loguru import logger

from visconnect.datasource.base import BaseTournamentSource
from visconnect.datasource.vis import query as q
from visconnect.datasource.vis.transform import (
    count_tournaments,
    extract_matches,
    extract_tournament_detail,
    extract_tournaments,
    is_healthy_payload,
)
from visconnect.services.cache import CacheStats
from visconnect.services.client import Json, ServiceClient
from visconnect.services.errors import ServiceError
from visconnect.services.retry import RetryPolicy
from visconnect.tournament.types import (
    HealthStatus,
    Match,
    Tournament,
    TournamentDetail,
    TournamentFilters,
)

HEALTH_TTL = timedelta(seconds=30)
HEALTH_FAILURE_TTL = timedelta(seconds=10)
COUNT_TTL = timedelta(minutes=5)
TOURNAMENTS_TTL = timedelta(minutes=5)
TOURNAMENT_TTL = timedelta(minutes=3)
MATCHES_TTL = timedelta(minutes=2)

FALLBACK_TTL = timedelta(hours=1)
MATCHES_FALLBACK_TTL = timedelta(minutes=30)

HEALTH_RETRY = RetryPolicy(max_retries=2, base_delay=0.5, max_delay=2.0)


class VisSource(BaseTournamentSource):
    """
    VIS API data source.

    Wraps a ServiceClient configured for the VIS endpoint.
    """

    SERVICE_ID = "vis"

    def __init__(self, client: ServiceClient):
        self.client = client

    @property
    def service_id(self) -> str:
        return self.SERVICE_ID

    def is_configured(self) -> bool:
        return bool(self.client.base_url)

    def _send(self, query: q.VisQuery):
        async def call() -> Json:
            return await self.client.post_form(query.form())

        return call

    async def health_check(self) -> HealthStatus:
        """
        Probe VIS with GetServiceInformation.

        Failures are reported as an unhealthy status (cached briefly), never
        raised. Health is not written to the fallback tier.
        """
        clock = self.client.clock
        started = clock.now()

        def to_status(payload: Json) -> HealthStatus:
            healthy = is_healthy_payload(payload)
            status = HealthStatus(
                status="healthy" if healthy else "unhealthy",
                timestamp=clock.now().isoformat(),
                response_time=round(clock.elapsed_ms(started), 1),
            )
            logger.info(f"VIS health: {status.status} ({status.response_time}ms)")
            return status

        try:
            result = await self.client.fetch(
                q.HEALTH_KEY,
                self._send(q.service_information_query()),
                to_status,
                ttl=HEALTH_TTL,
                retry_policy=HEALTH_RETRY,
            )
        except ServiceError as e:
            status = HealthStatus(
                status="unhealthy",
                timestamp=clock.now().isoformat(),
                error=str(e),
            )
            logger.info(f"VIS health: unhealthy ({e})")
            self.client.cache.set(q.HEALTH_KEY, status, HEALTH_FAILURE_TTL)
            return status

        status = result.data
        if status is None:
            return HealthStatus(
                status="unhealthy",
                timestamp=clock.now().isoformat(),
                error="Service information not found",
            )
        if status.status == "unhealthy" and result.from_cache is None:
            self.client.cache.set(q.HEALTH_KEY, status, HEALTH_FAILURE_TTL)
        return status

    async def get_tournament_count(self) -> int:
        result = await self.client.fetch(
            q.COUNT_KEY,
            self._send(q.tournament_count_query()),
            count_tournaments,
            ttl=COUNT_TTL,
            fallback_ttl=FALLBACK_TTL,
        )
        return result.data or 0

    async def get_tournaments(self, filters: TournamentFilters | None = None) -> list[Tournament]:
        """
        Fetch tournaments matching ``filters``.

        Returns:
            List of Tournament objects (empty if upstream has none)
        """
        filters = filters or TournamentFilters()
        result = await self.client.fetch(
            q.tournaments_key(filters),
            self._send(q.tournaments_query(filters)),
            extract_tournaments,
            ttl=TOURNAMENTS_TTL,
            fallback_ttl=FALLBACK_TTL,
        )
        tournaments = result.data or []
        logger.debug(f"Fetched {len(tournaments)} tournaments (cache: {result.from_cache})")
        return tournaments

    async def get_tournament_by_id(self, tournament_id: str) -> TournamentDetail | None:
        result = await self.client.fetch(
            q.tournament_key(tournament_id),
            self._send(q.tournament_info_query(tournament_id)),
            extract_tournament_detail,
            ttl=TOURNAMENT_TTL,
            fallback_ttl=FALLBACK_TTL,
        )
        if result.data is None:
            logger.info(f"Tournament {tournament_id} not found")
        return result.data

    async def get_tournament_matches(self, tournament_id: str) -> list[Match]:
        def transform(payload: Json) -> list[Match]:
            return extract_matches(payload, tournament_id)

        result = await self.client.fetch(
            q.matches_key(tournament_id),
            self._send(q.matches_query(tournament_id)),
            transform,
            ttl=MATCHES_TTL,
            fallback_ttl=MATCHES_FALLBACK_TTL,
        )
        return result.data or []

    def clear_cache(self, pattern: str | None = None) -> None:
        removed = self.client.clear_cache(pattern)
        logger.info(f"Cleared {removed} cache entries (pattern: {pattern!r})")

    def get_cache_stats(self) -> CacheStats:
        return self.client.cache.get_stats()

    def get_resilience_status(self) -> dict[str, Any]:
        return self.client.get_health_status()

    async def close(self) -> None:
        await self.client.close()
