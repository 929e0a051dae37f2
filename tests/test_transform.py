"""Tests for VIS payload normalization."""

from datetime import datetime

import pytest

from visconnect.datasource.vis.transform import (
    count_tournaments,
    determine_winner,
    extract_matches,
    extract_tournament_detail,
    extract_tournaments,
    is_healthy_payload,
    map_match_status,
    map_tournament_level,
    map_tournament_status,
    parse_datetime,
    parse_players,
    parse_score,
    transform_match,
    transform_tournament,
)
from visconnect.tournament.types import (
    MatchScore,
    MatchStatus,
    SetScore,
    TournamentLevel,
    TournamentStatus,
)


class TestParseScore:
    """Test score string/object parsing."""

    def test_three_sets(self):
        score = parse_score("21-19, 18-21, 15-13")

        assert score.set1 == SetScore(team1=21, team2=19)
        assert score.set2 == SetScore(team1=18, team2=21)
        assert score.set3 == SetScore(team1=15, team2=13)

    def test_two_sets(self):
        score = parse_score("21-15,21-17")

        assert score.set1 == SetScore(team1=21, team2=15)
        assert score.set2 == SetScore(team1=21, team2=17)
        assert score.set3 is None

    def test_only_first_three_sets_count(self):
        score = parse_score("21-19, 18-21, 15-13, 15-10")
        assert len(score.sets()) == 3

    def test_malformed_set_keeps_position(self):
        score = parse_score("21-19, abc, 15-13")

        assert score.set1 == SetScore(team1=21, team2=19)
        assert score.set2 is None
        assert score.set3 == SetScore(team1=15, team2=13)

    def test_structured_sets(self):
        score = parse_score({"sets": [{"team1Score": 21, "team2Score": 17}, {"team1Score": "19", "team2Score": "21"}]})

        assert score.set1 == SetScore(team1=21, team2=17)
        assert score.set2 == SetScore(team1=19, team2=21)

    @pytest.mark.parametrize("value", [None, "", "invalid", 42, {"sets": "nope"}, ["21-19"]])
    def test_unusable_values_give_empty_score(self, value):
        assert parse_score(value).is_empty()


class TestParsePlayers:
    """Test team player splitting."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("John Doe/Jane Smith", ["John Doe", "Jane Smith"]),
            ("A, B", ["A", "B"]),
            ("Solo Player", ["Solo Player"]),
            ("", []),
            (None, []),
            (["X", " Y "], ["X", "Y"]),
        ],
    )
    def test_split(self, value, expected):
        assert parse_players(value) == expected


class TestDetermineWinner:
    """Test sets-won comparison."""

    def test_straight_sets(self):
        score = MatchScore(set1=SetScore(team1=21, team2=15), set2=SetScore(team1=21, team2=17))
        assert determine_winner(score) == "team1"

    def test_three_setter(self):
        score = parse_score("21-19, 18-21, 13-15")
        assert determine_winner(score) == "team2"

    def test_tied_sets(self):
        score = parse_score("21-19, 18-21")
        assert determine_winner(score) is None

    def test_no_sets(self):
        assert determine_winner(MatchScore()) is None


class TestEnumMapping:
    """Test upstream token -> enum mapping."""

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("World Championship", TournamentLevel.WORLD_CHAMPIONSHIP),
            ("world_tour", TournamentLevel.WORLD_TOUR),
            ("World Tour", TournamentLevel.WORLD_TOUR),
            ("Continental", TournamentLevel.CONTINENTAL),
            ("NATIONAL", TournamentLevel.NATIONAL),
            ("Beach Pro Tour Elite16", TournamentLevel.OTHER),
            (None, TournamentLevel.OTHER),
        ],
    )
    def test_levels(self, token, expected):
        assert map_tournament_level(token) == expected

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("Live", TournamentStatus.ONGOING),
            ("in_progress", TournamentStatus.ONGOING),
            ("Finished", TournamentStatus.COMPLETED),
            ("cancelled", TournamentStatus.CANCELLED),
            ("scheduled", TournamentStatus.UPCOMING),
            ("???", TournamentStatus.UPCOMING),
        ],
    )
    def test_tournament_status(self, token, expected):
        assert map_tournament_status(token) == expected

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("live", MatchStatus.LIVE),
            ("Finished", MatchStatus.COMPLETED),
            ("postponed", MatchStatus.POSTPONED),
            ("cancelled", MatchStatus.POSTPONED),
            ("", MatchStatus.SCHEDULED),
        ],
    )
    def test_match_status(self, token, expected):
        assert map_match_status(token) == expected


class TestParseDatetime:
    def test_iso_date(self):
        assert parse_datetime("2024-08-15") == datetime(2024, 8, 15)

    @pytest.mark.parametrize("value", [None, "", "not a date", 20240815])
    def test_unparseable(self, value):
        assert parse_datetime(value) is None


class TestTransformRecords:
    """Test record -> domain model conversion."""

    def test_tournament_alternate_spellings(self):
        tournament = transform_tournament(
            {
                "TournamentId": 123,
                "Name": "Gstaad Elite16",
                "StartDate": "2024-07-09",
                "EndDate": "2024-07-14",
                "City": "Gstaad",
                "CountryName": "Switzerland",
                "Level": "World Tour",
                "Status": "Finished",
                "unexpected": "ignored",
            }
        )

        assert tournament.id == "123"
        assert tournament.name == "Gstaad Elite16"
        assert tournament.dates.start == datetime(2024, 7, 9)
        assert tournament.location.city == "Gstaad"
        assert tournament.location.country == "Switzerland"
        assert tournament.location.venue is None
        assert tournament.level == TournamentLevel.WORLD_TOUR
        assert tournament.status == TournamentStatus.COMPLETED

    def test_tournament_defaults(self):
        tournament = transform_tournament({"id": "t1", "startDate": "garbage"})

        assert tournament.name == "Unknown Tournament"
        assert tournament.dates.start is None
        assert tournament.level == TournamentLevel.OTHER
        assert tournament.status == TournamentStatus.UPCOMING

    def test_tournament_without_id_dropped(self):
        assert transform_tournament({"name": "No id"}) is None
        assert transform_tournament("not a record") is None

    def test_completed_match(self):
        match = transform_match(
            {
                "matchId": "m1",
                "team1Players": "Mol/Sorum",
                "team2Players": "Ahman/Hellvig",
                "team1Country": "NOR",
                "team2Country": "SWE",
                "score": "21-19, 18-21, 15-13",
                "status": "completed",
                "startTime": "2024-08-10T14:00:00Z",
                "round": "Final",
            },
            "t1",
        )

        assert match.tournament_id == "t1"
        assert match.team1.player1 == "Mol"
        assert match.team1.player2 == "Sorum"
        assert match.team2.country == "SWE"
        assert match.status == MatchStatus.COMPLETED
        assert match.winner == "team1"
        assert match.round == "Final"
        assert match.court == "Unknown Court"
        assert match.scheduled_time.year == 2024

    def test_live_match_has_no_winner(self):
        match = transform_match({"id": "m2", "score": "21-10", "status": "live"}, "t1")

        assert match.status == MatchStatus.LIVE
        assert match.winner is None
        assert match.team1.player1 == "Unknown Player"
        assert match.round == "Unknown Round"


class TestPayloadNavigation:
    """Test locating records inside VIS envelopes."""

    def test_tournaments_from_responses(self):
        payload = {"responses": [{"tournaments": [{"id": "a"}, {"name": "no id"}, {"id": "b"}]}]}

        assert [t.id for t in extract_tournaments(payload)] == ["a", "b"]

    def test_top_level_collection(self):
        assert [t.id for t in extract_tournaments({"tournaments": [{"id": "a"}]})] == ["a"]

    def test_single_object_collection(self):
        assert count_tournaments({"responses": [{"tournaments": {"id": "a"}}]}) == 1

    @pytest.mark.parametrize("payload", [{}, {"responses": []}, {"tournaments": None}])
    def test_empty_payloads(self, payload):
        assert extract_tournaments(payload) == []
        assert count_tournaments(payload) == 0

    def test_tournament_detail_nested(self):
        payload = {"responses": [{"tournament": {"id": "t1", "name": "X", "description": "Desc"}}]}

        detail = extract_tournament_detail(payload)

        assert detail.id == "t1"
        assert detail.description == "Desc"

    def test_tournament_detail_missing(self):
        assert extract_tournament_detail({}) is None

    def test_matches(self):
        payload = {"responses": [{"matches": [{"matchId": "m1"}, {"matchId": "m2"}]}]}

        matches = extract_matches(payload, "t1")

        assert [m.id for m in matches] == ["m1", "m2"]
        assert all(m.tournament_id == "t1" for m in matches)

    @pytest.mark.parametrize(
        "payload, healthy",
        [
            ({"id": "FivbVis", "version": "1.0"}, True),
            ({"responses": [{}]}, True),
            ({"responses": []}, False),
            ({}, False),
        ],
    )
    def test_health_payload(self, payload, healthy):
        assert is_healthy_payload(payload) is healthy
