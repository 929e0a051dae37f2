"""FastAPI server exposing tournaments from a tournament source."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from visconnect.datasource.base import BaseTournamentSource
from visconnect.exceptions import NotFoundError
from visconnect.services.errors import (
    CircuitOpenError,
    RateLimitError,
    ServiceError,
    UpstreamError,
    UpstreamTimeoutError,
)
from visconnect.tournament.service import (
    PaginatedTournaments,
    TournamentDetailResponse,
    TournamentQuery,
    TournamentService,
)

RETRY_AFTER_SECONDS = 60


def _error_code(error: ServiceError) -> str:
    if isinstance(error, CircuitOpenError):
        return "CIRCUIT_OPEN"
    if isinstance(error, RateLimitError):
        return "RATE_LIMITED"
    if isinstance(error, UpstreamTimeoutError):
        return "UPSTREAM_TIMEOUT"
    if isinstance(error, UpstreamError):
        return "UPSTREAM_ERROR"
    return "SERVICE_UNAVAILABLE"


class TournamentServer:
    """HTTP server for tournament queries."""

    def __init__(self, source: BaseTournamentSource):
        self.source = source
        self.service = TournamentService(source)
        self.app = FastAPI(title="VisConnect Tournament Server", lifespan=self.lifespan)

        self.app.add_exception_handler(ServiceError, self.handle_service_error)

        # Register routes
        self.app.get("/health")(self.health_check)
        self.app.get("/api/health/vis")(self.upstream_health)
        self.app.get("/api/tournaments")(self.list_tournaments)
        self.app.get("/api/tournaments/{tournament_id}")(self.get_tournament)
        self.app.get("/api/tournaments/{tournament_id}/matches")(self.get_matches)
        self.app.get("/api/cache/stats")(self.cache_stats)
        self.app.delete("/api/cache")(self.clear_cache)

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        logger.info(f"Tournament server started (source: {self.source.service_id})")
        yield
        await self.source.close()
        logger.info("Tournament server stopped")

    async def handle_service_error(self, request: Request, exc: ServiceError) -> JSONResponse:
        """Upstream trouble always surfaces as 503, keeping the upstream status when known."""
        logger.error(f"{request.method} {request.url.path} failed: {exc}")

        error: dict[str, Any] = {
            "code": _error_code(exc),
            "message": str(exc),
            "statusCode": 503,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        upstream_status = getattr(exc, "status_code", None)
        if isinstance(exc, UpstreamError) and upstream_status is not None:
            error["upstreamStatus"] = upstream_status

        return JSONResponse(
            status_code=503,
            content={"error": error},
            headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
        )

    async def health_check(self):
        """Liveness; does not touch the upstream."""
        return {"status": "ok", "service": "visconnect", "source": self.source.service_id}

    async def upstream_health(self):
        status = await self.source.health_check()
        return status.model_dump()

    async def list_tournaments(
        self,
        page: int | None = None,
        limit: int | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        location: str | None = None,
        locations: str | None = None,
        types: str | None = None,
        statuses: str | None = None,
        search: str | None = None,
    ) -> PaginatedTournaments:
        query = TournamentQuery(
            page=page,
            limit=limit,
            date_from=date_from,
            date_to=date_to,
            location=location,
            locations=locations,
            types=types,
            statuses=statuses,
            search=search,
        )
        return await self.service.get_tournaments(query)

    async def get_tournament(self, tournament_id: str) -> TournamentDetailResponse:
        detail = await self.service.get_tournament_detail(tournament_id)
        if detail is None:
            raise NotFoundError(f"Tournament {tournament_id} not found")
        return detail

    async def get_matches(self, tournament_id: str):
        matches = await self.source.get_tournament_matches(tournament_id)
        return {
            "tournament_id": tournament_id,
            "matches": [m.model_dump(mode="json") for m in matches],
            "statistics": self.service.calculate_statistics(matches).model_dump(),
        }

    async def cache_stats(self):
        return self.source.get_cache_stats().to_dict()

    async def clear_cache(self, pattern: str | None = None):
        self.source.clear_cache(pattern)
        return {"cleared": True, "pattern": pattern}


def create_app(source: BaseTournamentSource) -> FastAPI:
    """Create FastAPI app serving ``source``.

    Args:
        source: Tournament source (live VIS or demo)

    Returns:
        FastAPI app
    """
    server = TournamentServer(source)
    return server.app
