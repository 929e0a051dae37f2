"""
In-memory tournament source for demo/offline mode.

Used when no VIS API key is configured. Serves a fixed set of tournaments
and matches through the same interface as the live source.
"""

from datetime import date, datetime, timezone

from visconnect.datasource.base import BaseTournamentSource
from visconnect.services.cache import CacheStats
from visconnect.tournament.types import (
    HealthStatus,
    Location,
    Match,
    MatchScore,
    MatchStatus,
    SetScore,
    Team,
    Tournament,
    TournamentDates,
    TournamentDetail,
    TournamentFilters,
    TournamentLevel,
    TournamentStatus,
)


def _tournament(
    tournament_id: str,
    name: str,
    start: date,
    end: date,
    city: str,
    country: str,
    venue: str,
    level: TournamentLevel,
    status: TournamentStatus,
    match_count: int,
) -> Tournament:
    return Tournament(
        id=tournament_id,
        name=name,
        dates=TournamentDates(
            start=datetime(start.year, start.month, start.day, tzinfo=timezone.utc),
            end=datetime(end.year, end.month, end.day, tzinfo=timezone.utc),
        ),
        location=Location(city=city, country=country, venue=venue),
        level=level,
        status=status,
        match_count=match_count,
    )


MOCK_TOURNAMENTS = [
    _tournament(
        "mock-001", "Beach Volleyball World Championships 2024",
        date(2024, 8, 15), date(2024, 8, 25),
        "Rio de Janeiro", "Brazil", "Copacabana Beach Arena",
        TournamentLevel.WORLD_CHAMPIONSHIP, TournamentStatus.COMPLETED, 64,
    ),
    _tournament(
        "mock-002", "FIVB World Tour Finals 2024",
        date(2024, 9, 10), date(2024, 9, 15),
        "Doha", "Qatar", "Katara Beach Complex",
        TournamentLevel.WORLD_TOUR, TournamentStatus.ONGOING, 32,
    ),
    _tournament(
        "mock-003", "European Beach Volleyball Championship 2024",
        date(2024, 7, 20), date(2024, 7, 28),
        "Vienna", "Austria", "Donauinsel Beach Arena",
        TournamentLevel.CONTINENTAL, TournamentStatus.COMPLETED, 48,
    ),
    _tournament(
        "mock-004", "Asian Beach Games 2024",
        date(2024, 10, 5), date(2024, 10, 12),
        "Sanya", "China", "Sanya Bay Beach Stadium",
        TournamentLevel.CONTINENTAL, TournamentStatus.UPCOMING, 40,
    ),
    _tournament(
        "mock-005", "USA Beach Volleyball National Championship",
        date(2024, 6, 15), date(2024, 6, 22),
        "Manhattan Beach", "USA", "Manhattan Beach Pier",
        TournamentLevel.NATIONAL, TournamentStatus.COMPLETED, 56,
    ),
    _tournament(
        "mock-006", "FIVB Beach Volleyball World Tour - Rome",
        date(2024, 11, 1), date(2024, 11, 5),
        "Rome", "Italy", "Foro Italico Beach Arena",
        TournamentLevel.WORLD_TOUR, TournamentStatus.UPCOMING, 24,
    ),
]


def _utc(year: int, month: int, day: int, hour: int, minute: int) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


MOCK_MATCHES: dict[str, list[Match]] = {
    "mock-001": [
        Match(
            id="match-001-01",
            tournament_id="mock-001",
            team1=Team(player1="Ana Patricia Silva Ramos", player2="Duda Lisboa", country="BRA"),
            team2=Team(player1="Melissa Humana-Paredes", player2="Brandie Wilkerson", country="CAN"),
            score=MatchScore(
                set1=SetScore(team1=21, team2=18),
                set2=SetScore(team1=21, team2=16),
            ),
            status=MatchStatus.COMPLETED,
            scheduled_time=_utc(2024, 8, 25, 18, 0),
            actual_start_time=_utc(2024, 8, 25, 18, 5),
            duration=45,
            round="Gold Medal Match",
            court="Center Court",
            winner="team1",
        ),
        Match(
            id="match-001-02",
            tournament_id="mock-001",
            team1=Team(player1="Tanja Hüberli", player2="Nina Betschart", country="SUI"),
            team2=Team(player1="Barbora Hermannová", player2="Marie-Sara Štochlová", country="CZE"),
            score=MatchScore(
                set1=SetScore(team1=21, team2=19),
                set2=SetScore(team1=19, team2=21),
                set3=SetScore(team1=15, team2=13),
            ),
            status=MatchStatus.COMPLETED,
            scheduled_time=_utc(2024, 8, 25, 15, 30),
            actual_start_time=_utc(2024, 8, 25, 15, 35),
            duration=62,
            round="Bronze Medal Match",
            court="Court 1",
            winner="team1",
        ),
    ],
    "mock-002": [
        Match(
            id="match-002-01",
            tournament_id="mock-002",
            team1=Team(player1="Anders Mol", player2="Christian Sørum", country="NOR"),
            team2=Team(player1="David Åhman", player2="Jonatan Hellvig", country="SWE"),
            score=MatchScore(
                set1=SetScore(team1=19, team2=21),
                set2=SetScore(team1=21, team2=15),
            ),
            status=MatchStatus.LIVE,
            scheduled_time=_utc(2024, 9, 15, 16, 0),
            actual_start_time=_utc(2024, 9, 15, 16, 5),
            round="Semi-Final",
            court="Center Court",
        ),
        Match(
            id="match-002-02",
            tournament_id="mock-002",
            team1=Team(player1="Evandro Gonçalves", player2="Arthur Lanci", country="BRA"),
            team2=Team(player1="Sam Pedlow", player2="Ben Saxton", country="ENG"),
            status=MatchStatus.SCHEDULED,
            scheduled_time=_utc(2024, 9, 15, 19, 0),
            round="Semi-Final",
            court="Court 1",
        ),
    ],
}


class MockTournamentSource(BaseTournamentSource):
    """Demo data source; no network, no cache."""

    SERVICE_ID = "vis-mock"

    def __init__(
        self,
        tournaments: list[Tournament] | None = None,
        matches: dict[str, list[Match]] | None = None,
    ):
        self._tournaments = tournaments if tournaments is not None else MOCK_TOURNAMENTS
        self._matches = matches if matches is not None else MOCK_MATCHES

    @property
    def service_id(self) -> str:
        return self.SERVICE_ID

    def is_configured(self) -> bool:
        return True

    async def health_check(self) -> HealthStatus:
        return HealthStatus(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            response_time=0.0,
        )

    async def get_tournament_count(self) -> int:
        return len(self._tournaments)

    async def get_tournaments(self, filters: TournamentFilters | None = None) -> list[Tournament]:
        filters = filters or TournamentFilters()
        tournaments = [t.model_copy(deep=True) for t in self._tournaments]

        if filters.country:
            needle = filters.country.lower()
            tournaments = [t for t in tournaments if needle in t.location.country.lower()]

        if filters.start_date_from:
            tournaments = [
                t for t in tournaments
                if t.dates.start and t.dates.start.date() >= filters.start_date_from
            ]

        if filters.start_date_to:
            tournaments = [
                t for t in tournaments
                if t.dates.start and t.dates.start.date() <= filters.start_date_to
            ]

        start = filters.offset or 0
        end = start + filters.limit if filters.limit else None
        return tournaments[start:end]

    async def get_tournament_by_id(self, tournament_id: str) -> TournamentDetail | None:
        for tournament in self._tournaments:
            if tournament.id == tournament_id:
                return TournamentDetail(
                    **tournament.model_dump(),
                    description=(
                        f"Mock description for {tournament.name}. "
                        "This is a demonstration tournament with sample data."
                    ),
                )
        return None

    async def get_tournament_matches(self, tournament_id: str) -> list[Match]:
        return [m.model_copy(deep=True) for m in self._matches.get(tournament_id, [])]

    def clear_cache(self, pattern: str | None = None) -> None:
        return None

    def get_cache_stats(self) -> CacheStats:
        return CacheStats()
