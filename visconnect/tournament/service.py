"""
TournamentService - pagination, search and statistics over a tournament source.
"""

from datetime import date

from loguru import logger
from pydantic import BaseModel, Field

from visconnect.datasource.base import BaseTournamentSource
from visconnect.exceptions import ValidationError
from visconnect.tournament.types import (
    Match,
    MatchStatus,
    Tournament,
    TournamentDetail,
    TournamentFilters,
)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


class TournamentQuery(BaseModel):
    """Caller-facing listing parameters (all optional, strings as received)."""

    page: int | None = None
    limit: int | None = None
    date_from: str | None = None
    date_to: str | None = None
    location: str | None = None
    locations: str | None = None  # comma-separated
    types: str | None = None  # comma-separated levels
    statuses: str | None = None  # comma-separated
    search: str | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class PaginatedTournaments(BaseModel):
    tournaments: list[Tournament]
    pagination: Pagination


class TournamentStatistics(BaseModel):
    total_matches: int = 0
    completed_matches: int = 0
    upcoming_matches: int = 0
    live_matches: int = 0


class TournamentDetailResponse(BaseModel):
    tournament: TournamentDetail
    matches: list[Match] = Field(default_factory=list)
    statistics: TournamentStatistics = Field(default_factory=TournamentStatistics)


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip().lower() for item in value.split(",") if item.strip()]


def _parse_date(value: str | None, name: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise ValidationError(f"Invalid {name}: {value!r} (expected YYYY-MM-DD)")


def _level_token(value: str) -> str:
    return value.replace(" ", "_")


class TournamentService:
    """
    Consumer of a tournament source.

    Usage:
        service = TournamentService(source)
        page = await service.get_tournaments(TournamentQuery(page=2, search="rio"))
    """

    def __init__(self, source: BaseTournamentSource):
        self.source = source

    def build_filters(self, query: TournamentQuery) -> tuple[int, int, TournamentFilters]:
        page = max(1, query.page or 1)
        limit = min(MAX_PAGE_SIZE, max(1, query.limit or DEFAULT_PAGE_SIZE))

        filters = TournamentFilters(
            limit=limit,
            offset=(page - 1) * limit,
            start_date_from=_parse_date(query.date_from, "date_from"),
            start_date_to=_parse_date(query.date_to, "date_to"),
            country=(query.location or "").strip() or None,
        )
        if (
            filters.start_date_from
            and filters.start_date_to
            and filters.start_date_from > filters.start_date_to
        ):
            raise ValidationError("date_from must not be after date_to")

        return page, limit, filters

    async def get_tournaments(self, query: TournamentQuery) -> PaginatedTournaments:
        page, limit, filters = self.build_filters(query)

        tournaments = await self.source.get_tournaments(filters)
        tournaments = self.apply_client_side_filters(tournaments, query)

        total = await self.source.get_tournament_count()
        total_pages = -(-total // limit)

        logger.info(
            f"Tournaments retrieved: {len(tournaments)} (page {page}, limit {limit}, total {total})"
        )
        return PaginatedTournaments(
            tournaments=tournaments,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages),
        )

    @staticmethod
    def apply_client_side_filters(
        tournaments: list[Tournament], query: TournamentQuery
    ) -> list[Tournament]:
        search = (query.search or "").strip().lower()
        locations = _split(query.locations)
        types = {_level_token(t) for t in _split(query.types)}
        statuses = set(_split(query.statuses))

        def keep(tournament: Tournament) -> bool:
            city = tournament.location.city.lower()
            country = tournament.location.country.lower()

            if search and not (
                search in tournament.name.lower() or search in city or search in country
            ):
                return False

            if locations and not any(loc in city or loc in country for loc in locations):
                return False

            if types and tournament.level.value not in types:
                return False

            if statuses and tournament.status.value not in statuses:
                return False

            return True

        return [t for t in tournaments if keep(t)]

    async def get_tournament_detail(self, tournament_id: str) -> TournamentDetailResponse | None:
        tournament = await self.source.get_tournament_by_id(tournament_id)
        if tournament is None:
            return None

        matches = await self.source.get_tournament_matches(tournament_id)

        logger.info(f"Tournament detail retrieved: {tournament_id} ({len(matches)} matches)")
        return TournamentDetailResponse(
            tournament=tournament,
            matches=matches,
            statistics=self.calculate_statistics(matches),
        )

    @staticmethod
    def calculate_statistics(matches: list[Match]) -> TournamentStatistics:
        return TournamentStatistics(
            total_matches=len(matches),
            completed_matches=sum(1 for m in matches if m.status == MatchStatus.COMPLETED),
            upcoming_matches=sum(1 for m in matches if m.status == MatchStatus.SCHEDULED),
            live_matches=sum(1 for m in matches if m.status == MatchStatus.LIVE),
        )
