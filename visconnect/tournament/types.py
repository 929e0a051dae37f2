"""
Tournament domain types using Pydantic models.

This is the stable internal representation; it does not follow upstream
field names.
"""

from datetime import date, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class TournamentLevel(str, Enum):
    """Tournament tier."""

    WORLD_CHAMPIONSHIP = "world_championship"
    WORLD_TOUR = "world_tour"
    CONTINENTAL = "continental"
    NATIONAL = "national"
    OTHER = "other"


class TournamentStatus(str, Enum):
    """Tournament lifecycle status."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MatchStatus(str, Enum):
    """Match lifecycle status."""

    SCHEDULED = "Scheduled"
    LIVE = "Live"
    COMPLETED = "Completed"
    POSTPONED = "Postponed"


Winner = Literal["team1", "team2"]


class TournamentDates(BaseModel):
    start: datetime | None = None
    end: datetime | None = None


class Location(BaseModel):
    city: str = ""
    country: str = ""
    venue: str | None = None


class Tournament(BaseModel):
    """A tournament as listed."""

    id: str
    name: str
    dates: TournamentDates = Field(default_factory=TournamentDates)
    location: Location = Field(default_factory=Location)
    level: TournamentLevel = TournamentLevel.OTHER
    status: TournamentStatus = TournamentStatus.UPCOMING
    match_count: int = 0


class Team(BaseModel):
    player1: str
    player2: str = ""
    country: str = ""


class SetScore(BaseModel):
    team1: int
    team2: int


class MatchScore(BaseModel):
    """Up to three sets; absent sets are None."""

    set1: SetScore | None = None
    set2: SetScore | None = None
    set3: SetScore | None = None

    def sets(self) -> list[SetScore]:
        return [s for s in (self.set1, self.set2, self.set3) if s is not None]

    def is_empty(self) -> bool:
        return not self.sets()


class Match(BaseModel):
    """A single match within a tournament."""

    id: str
    tournament_id: str
    team1: Team
    team2: Team
    score: MatchScore = Field(default_factory=MatchScore)
    status: MatchStatus = MatchStatus.SCHEDULED
    scheduled_time: datetime | None = None
    actual_start_time: datetime | None = None
    duration: int | None = None  # minutes
    round: str = "Unknown Round"
    court: str = "Unknown Court"
    winner: Winner | None = None


class TournamentDetail(Tournament):
    """A tournament with its description and (separately fetched) matches."""

    matches: list[Match] = Field(default_factory=list)
    description: str | None = None


class HealthStatus(BaseModel):
    """Upstream health probe result."""

    status: Literal["healthy", "unhealthy", "degraded"]
    timestamp: str
    response_time: float | None = None  # milliseconds
    error: str | None = None


class TournamentFilters(BaseModel):
    """Filters pushed down to the upstream tournament listing."""

    level: TournamentLevel | None = None
    status: TournamentStatus | None = None
    start_date_from: date | None = None
    start_date_to: date | None = None
    country: str | None = None
    limit: int | None = Field(default=None, ge=1)
    offset: int | None = Field(default=None, ge=0)
