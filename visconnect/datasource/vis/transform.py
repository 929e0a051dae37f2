"""
VIS payload -> domain model.

Pure functions. Nothing here raises on a malformed field: unknown enum
tokens map to a default, bad scores/names degrade to empty values, and a
record without an id becomes None so the caller can drop it without failing
the whole batch.
"""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from dateutil import parser as date_parser
from loguru import logger

from visconnect.datasource.vis.models import RawMatch, RawTournament
from visconnect.tournament.types import (
    Location,
    Match,
    MatchScore,
    MatchStatus,
    SetScore,
    Team,
    Tournament,
    TournamentDates,
    TournamentDetail,
    TournamentLevel,
    TournamentStatus,
    Winner,
)

LEVEL_TOKENS: dict[str, TournamentLevel] = {
    "world championship": TournamentLevel.WORLD_CHAMPIONSHIP,
    "world_championship": TournamentLevel.WORLD_CHAMPIONSHIP,
    "world tour": TournamentLevel.WORLD_TOUR,
    "world_tour": TournamentLevel.WORLD_TOUR,
    "continental": TournamentLevel.CONTINENTAL,
    "national": TournamentLevel.NATIONAL,
}

STATUS_TOKENS: dict[str, TournamentStatus] = {
    "upcoming": TournamentStatus.UPCOMING,
    "scheduled": TournamentStatus.UPCOMING,
    "ongoing": TournamentStatus.ONGOING,
    "live": TournamentStatus.ONGOING,
    "in_progress": TournamentStatus.ONGOING,
    "completed": TournamentStatus.COMPLETED,
    "finished": TournamentStatus.COMPLETED,
    "cancelled": TournamentStatus.CANCELLED,
}

MATCH_STATUS_TOKENS: dict[str, MatchStatus] = {
    "scheduled": MatchStatus.SCHEDULED,
    "upcoming": MatchStatus.SCHEDULED,
    "live": MatchStatus.LIVE,
    "ongoing": MatchStatus.LIVE,
    "in_progress": MatchStatus.LIVE,
    "completed": MatchStatus.COMPLETED,
    "finished": MatchStatus.COMPLETED,
    "postponed": MatchStatus.POSTPONED,
    "cancelled": MatchStatus.POSTPONED,
}

PLAYER_SEPARATORS = re.compile(r"[/,]")

MAX_SETS = 3


def _token(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


# -----------------------------
# Enum mapping
# -----------------------------


def map_tournament_level(value: Any) -> TournamentLevel:
    return LEVEL_TOKENS.get(_token(value), TournamentLevel.OTHER)


def map_tournament_status(value: Any) -> TournamentStatus:
    return STATUS_TOKENS.get(_token(value), TournamentStatus.UPCOMING)


def map_match_status(value: Any) -> MatchStatus:
    return MATCH_STATUS_TOKENS.get(_token(value), MatchStatus.SCHEDULED)


# -----------------------------
# Field parsers
# -----------------------------


def parse_datetime(value: Any) -> datetime | None:
    """Lenient date parsing; anything unparseable is None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError):
        return None


def parse_players(value: Any) -> list[str]:
    """
    Split a team's player field into names.

    "John Doe/Jane Smith" -> ["John Doe", "Jane Smith"]
    "A, B" -> ["A", "B"]
    "Solo Player" -> ["Solo Player"]
    "" / None -> []
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [name for name in (_text(v) for v in value) if name]
    return [name.strip() for name in PLAYER_SEPARATORS.split(str(value)) if name.strip()]


def _parse_set_token(token: str) -> SetScore | None:
    parts = token.split("-")
    if len(parts) != 2:
        return None
    team1, team2 = _to_int(parts[0]), _to_int(parts[1])
    if team1 is None or team2 is None:
        return None
    return SetScore(team1=team1, team2=team2)


def _parse_set_object(value: Any) -> SetScore | None:
    if not isinstance(value, Mapping):
        return None
    team1 = _to_int(value.get("team1Score", value.get("homeScore")))
    team2 = _to_int(value.get("team2Score", value.get("awayScore")))
    if team1 is None or team2 is None:
        return None
    return SetScore(team1=team1, team2=team2)


def parse_score(value: Any) -> MatchScore:
    """
    Parse a match score.

    Accepts "21-19, 18-21, 15-13" or {"sets": [{"team1Score": .., "team2Score": ..}]}.
    Only the first three sets count; a malformed set is skipped and keeps
    its position. Anything else yields an empty score.
    """
    sets: list[SetScore | None] = []

    if isinstance(value, str):
        sets = [_parse_set_token(token.strip()) for token in value.split(",")]
    elif isinstance(value, Mapping) and isinstance(value.get("sets"), list):
        sets = [_parse_set_object(item) for item in value["sets"]]

    score = MatchScore()
    for index, set_score in enumerate(sets[:MAX_SETS]):
        if set_score is not None:
            setattr(score, f"set{index + 1}", set_score)
    return score


def determine_winner(score: MatchScore) -> Winner | None:
    """Side with strictly more sets won; a tie (including no sets) is None."""
    team1_sets = 0
    team2_sets = 0

    for set_score in score.sets():
        if set_score.team1 > set_score.team2:
            team1_sets += 1
        elif set_score.team2 > set_score.team1:
            team2_sets += 1

    if team1_sets > team2_sets:
        return "team1"
    if team2_sets > team1_sets:
        return "team2"
    return None


# -----------------------------
# Record transforms
# -----------------------------


def transform_tournament(record: Any) -> Tournament | None:
    if not isinstance(record, Mapping):
        return None

    raw = RawTournament.model_validate(record)
    tournament_id = _text(raw.id)
    if not tournament_id:
        logger.debug(f"Dropping tournament record without id: {dict(record)}")
        return None

    return Tournament(
        id=tournament_id,
        name=_text(raw.name, "Unknown Tournament"),
        dates=TournamentDates(
            start=parse_datetime(raw.start_date),
            end=parse_datetime(raw.end_date),
        ),
        location=Location(
            city=_text(raw.city),
            country=_text(raw.country),
            venue=_text(raw.venue) or None,
        ),
        level=map_tournament_level(raw.level),
        status=map_tournament_status(raw.status),
        match_count=max(_to_int(raw.match_count) or 0, 0),
    )


def transform_tournament_detail(record: Any) -> TournamentDetail | None:
    tournament = transform_tournament(record)
    if tournament is None:
        return None

    description = _text(RawTournament.model_validate(record).description) or None
    return TournamentDetail(**tournament.model_dump(), description=description)


def _team(players: list[str], country: Any) -> Team:
    return Team(
        player1=players[0] if players else "Unknown Player",
        player2=players[1] if len(players) > 1 else "",
        country=_text(country),
    )


def transform_match(record: Any, tournament_id: str) -> Match | None:
    if not isinstance(record, Mapping):
        return None

    raw = RawMatch.model_validate(record)
    match_id = _text(raw.id)
    if not match_id:
        logger.debug(f"Dropping match record without id in tournament {tournament_id}")
        return None

    score = parse_score(raw.score)
    status = map_match_status(raw.status)
    winner = determine_winner(score) if status == MatchStatus.COMPLETED else None

    return Match(
        id=match_id,
        tournament_id=tournament_id,
        team1=_team(parse_players(raw.team1_players), raw.team1_country),
        team2=_team(parse_players(raw.team2_players), raw.team2_country),
        score=score,
        status=status,
        scheduled_time=parse_datetime(raw.start_time),
        actual_start_time=parse_datetime(raw.actual_start_time),
        duration=_to_int(raw.duration),
        round=_text(raw.round, "Unknown Round"),
        court=_text(raw.court, "Unknown Court"),
        winner=winner,
    )


# -----------------------------
# Payload navigation
# -----------------------------


def first_response(payload: Any) -> Mapping[str, Any] | None:
    """``responses[0]`` of a VIS envelope, if present."""
    if not isinstance(payload, Mapping):
        return None
    responses = payload.get("responses")
    if isinstance(responses, list) and responses and isinstance(responses[0], Mapping):
        return responses[0]
    return None


def extract_records(payload: Any, collection: str) -> list[Mapping[str, Any]]:
    """
    Records under ``responses[0].<collection>`` or a top-level ``<collection>``.

    A single object counts as one record; anything else is an empty list.
    """
    container = first_response(payload)
    if container is None:
        container = payload if isinstance(payload, Mapping) else {}

    data = container.get(collection)
    if isinstance(data, Mapping):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, Mapping)]
    return []


def extract_tournaments(payload: Any) -> list[Tournament]:
    tournaments = []
    for record in extract_records(payload, "tournaments"):
        tournament = transform_tournament(record)
        if tournament is not None:
            tournaments.append(tournament)
    return tournaments


def extract_tournament_detail(payload: Any) -> TournamentDetail | None:
    record = first_response(payload)
    if record is None:
        return None
    nested = record.get("tournament")
    if isinstance(nested, Mapping):
        record = nested
    return transform_tournament_detail(record)


def extract_matches(payload: Any, tournament_id: str) -> list[Match]:
    matches = []
    for record in extract_records(payload, "matches"):
        match = transform_match(record, tournament_id)
        if match is not None:
            matches.append(match)
    return matches


def count_tournaments(payload: Any) -> int:
    return len(extract_records(payload, "tournaments"))


def is_healthy_payload(payload: Any) -> bool:
    if not isinstance(payload, Mapping):
        return False
    if payload.get("id") == "FivbVis":
        return True
    responses = payload.get("responses")
    return isinstance(responses, list) and len(responses) > 0
