"""
Tournament data sources.
"""

from visconnect.datasource.base import BaseTournamentSource
from visconnect.datasource.factory import create_tournament_source, create_vis_client
from visconnect.datasource.mock import MockTournamentSource
from visconnect.datasource.vis import VisSource

__all__ = [
    "BaseTournamentSource",
    "MockTournamentSource",
    "VisSource",
    "create_tournament_source",
    "create_vis_client",
]
