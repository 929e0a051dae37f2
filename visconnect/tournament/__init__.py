"""
Tournament domain model and the service consuming it.
"""

from visconnect.tournament.types import (
    HealthStatus,
    Match,
    MatchScore,
    MatchStatus,
    SetScore,
    Team,
    Tournament,
    TournamentDetail,
    TournamentFilters,
    TournamentLevel,
    TournamentStatus,
)

__all__ = [
    "HealthStatus",
    "Match",
    "MatchScore",
    "MatchStatus",
    "SetScore",
    "Team",
    "Tournament",
    "TournamentDetail",
    "TournamentFilters",
    "TournamentLevel",
    "TournamentStatus",
]
