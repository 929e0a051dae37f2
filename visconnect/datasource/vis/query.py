"""
Structured VIS queries.

A query is ``{resource, fields, attributes}``; ``to_xml`` renders the
upstream request document. The ``*_key`` helpers give deterministic cache
keys per resource.
"""

import json
from dataclasses import dataclass, field
from xml.sax.saxutils import quoteattr

from visconnect.tournament.types import TournamentFilters

TOURNAMENT_FIELDS = (
    "TournamentId",
    "Name",
    "StartDate",
    "EndDate",
    "Country",
    "City",
    "Venue",
    "Level",
    "Status",
)

MATCH_FIELDS = (
    "MatchId",
    "TournamentId",
    "Team1Players",
    "Team2Players",
    "Team1Country",
    "Team2Country",
    "StartTime",
    "Status",
    "Score",
    "Round",
    "Court",
)


@dataclass(frozen=True)
class VisQuery:
    request_type: str
    fields: tuple[str, ...] = ()
    attributes: dict[str, str] = field(default_factory=dict)
    wrapped: bool = True

    def to_xml(self) -> str:
        attrs = [f"Type={quoteattr(self.request_type)}"]
        if self.fields:
            attrs.append(f"Fields={quoteattr(','.join(self.fields))}")
        attrs.extend(f"{name}={quoteattr(value)}" for name, value in self.attributes.items())

        request = f"<Request {' '.join(attrs)} />"
        return f"<Requests>{request}</Requests>" if self.wrapped else request

    def form(self) -> dict[str, str]:
        """Form body for the raw upstream call."""
        return {"Request": self.to_xml()}


def stable_filters(filters: TournamentFilters) -> str:
    """Filters as sorted JSON without unset values."""
    return json.dumps(filters.model_dump(mode="json", exclude_none=True), sort_keys=True)


def service_information_query() -> VisQuery:
    return VisQuery("GetServiceInformation", wrapped=False)


def tournament_count_query() -> VisQuery:
    return VisQuery("GetTournaments", fields=("TournamentId",))


def tournaments_query(filters: TournamentFilters) -> VisQuery:
    attributes: dict[str, str] = {}
    if filters.country:
        attributes["Country"] = filters.country
    if filters.start_date_from:
        attributes["StartDateFrom"] = filters.start_date_from.isoformat()
    if filters.start_date_to:
        attributes["StartDateTo"] = filters.start_date_to.isoformat()
    if filters.limit:
        attributes["MaxResults"] = str(filters.limit)
    return VisQuery("GetTournaments", fields=TOURNAMENT_FIELDS, attributes=attributes)


def tournament_info_query(tournament_id: str) -> VisQuery:
    return VisQuery("GetTournamentInfo", attributes={"TournamentId": tournament_id})


def matches_query(tournament_id: str) -> VisQuery:
    return VisQuery("GetMatches", fields=MATCH_FIELDS, attributes={"TournamentId": tournament_id})


# Cache keys


HEALTH_KEY = "vis_health_check"
COUNT_KEY = "tournament_count"


def tournaments_key(filters: TournamentFilters) -> str:
    return f"tournaments_{stable_filters(filters)}"


def tournament_key(tournament_id: str) -> str:
    return f"tournament_{tournament_id}"


def matches_key(tournament_id: str) -> str:
    return f"tournament_matches_{tournament_id}"
