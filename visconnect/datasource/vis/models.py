"""
Raw VIS records.

The upstream is inconsistent about field names (camelCase, PascalCase,
short aliases) and types (numbers as strings, single objects instead of
lists). These models only collect the alternate spellings into one field;
values stay loosely typed and are normalized by ``transform``.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RawRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RawTournament(RawRecord):
    id: Any = Field(default=None, validation_alias=AliasChoices("tournamentId", "TournamentId", "id", "No"))
    name: Any = Field(default=None, validation_alias=AliasChoices("name", "Name", "Title"))
    start_date: Any = Field(default=None, validation_alias=AliasChoices("startDate", "StartDate"))
    end_date: Any = Field(default=None, validation_alias=AliasChoices("endDate", "EndDate"))
    city: Any = Field(default=None, validation_alias=AliasChoices("city", "City"))
    country: Any = Field(default=None, validation_alias=AliasChoices("country", "Country", "CountryName"))
    venue: Any = Field(default=None, validation_alias=AliasChoices("venue", "Venue"))
    level: Any = Field(default=None, validation_alias=AliasChoices("level", "Level", "Type"))
    status: Any = Field(default=None, validation_alias=AliasChoices("status", "Status"))
    match_count: Any = Field(default=None, validation_alias=AliasChoices("matchCount", "MatchCount"))
    description: Any = Field(default=None, validation_alias=AliasChoices("description", "Description"))


class RawMatch(RawRecord):
    id: Any = Field(default=None, validation_alias=AliasChoices("matchId", "MatchId", "id", "No"))
    team1_players: Any = Field(default=None, validation_alias=AliasChoices("team1Players", "Team1Players"))
    team2_players: Any = Field(default=None, validation_alias=AliasChoices("team2Players", "Team2Players"))
    team1_country: Any = Field(default=None, validation_alias=AliasChoices("team1Country", "Team1Country"))
    team2_country: Any = Field(default=None, validation_alias=AliasChoices("team2Country", "Team2Country"))
    score: Any = Field(default=None, validation_alias=AliasChoices("score", "Score"))
    status: Any = Field(default=None, validation_alias=AliasChoices("status", "Status"))
    start_time: Any = Field(default=None, validation_alias=AliasChoices("startTime", "StartTime"))
    actual_start_time: Any = Field(default=None, validation_alias=AliasChoices("actualStartTime", "ActualStartTime"))
    duration: Any = Field(default=None, validation_alias=AliasChoices("duration", "Duration"))
    round: Any = Field(default=None, validation_alias=AliasChoices("round", "Round"))
    court: Any = Field(default=None, validation_alias=AliasChoices("court", "Court"))
