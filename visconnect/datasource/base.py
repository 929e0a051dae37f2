"""
Base tournament source interface.
"""

from abc import ABC, abstractmethod

from visconnect.services.cache import CacheStats
from visconnect.tournament.types import (
    HealthStatus,
    Match,
    Tournament,
    TournamentDetail,
    TournamentFilters,
)


class BaseTournamentSource(ABC):
    """
    Abstract base class for tournament data sources.

    This is everything the Tournament Service depends on. The live VIS source
    and the in-memory demo source both implement it.
    """

    @property
    @abstractmethod
    def service_id(self) -> str:
        """Unique identifier for this data source."""
        ...

    @abstractmethod
    def is_configured(self) -> bool:
        """Check if the data source is properly configured."""
        ...

    @abstractmethod
    async def get_tournaments(self, filters: TournamentFilters | None = None) -> list[Tournament]:
        ...

    @abstractmethod
    async def get_tournament_count(self) -> int:
        ...

    @abstractmethod
    async def get_tournament_by_id(self, tournament_id: str) -> TournamentDetail | None:
        """The tournament, or None if upstream does not know it."""
        ...

    @abstractmethod
    async def get_tournament_matches(self, tournament_id: str) -> list[Match]:
        ...

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Probe the upstream. Never raises."""
        ...

    @abstractmethod
    def clear_cache(self, pattern: str | None = None) -> None:
        ...

    @abstractmethod
    def get_cache_stats(self) -> CacheStats:
        ...

    async def close(self) -> None:
        """Release network resources."""
        return None
