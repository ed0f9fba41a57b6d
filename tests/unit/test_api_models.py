"""Unit tests for provider payload models and score parsing."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError
from watch_core.api_models import (
    ODDS_EVENTS_ADAPTER,
    SCORE_EVENTS_ADAPTER,
    ScoreEvent,
    parse_scores_from_api_dict,
)


class TestParseScoresFromApiDict:
    """Test score parsing helper function."""

    def test_valid_scores(self):
        score_data = {
            "home_team": "Lakers",
            "away_team": "Celtics",
            "scores": [
                {"name": "Lakers", "score": "108"},
                {"name": "Celtics", "score": "105"},
            ],
        }

        assert parse_scores_from_api_dict(score_data) == (108, 105)

    def test_scores_in_reverse_order(self):
        """Away team listed first still maps by name."""
        score_data = {
            "home_team": "Lakers",
            "away_team": "Celtics",
            "scores": [
                {"name": "Celtics", "score": "105"},
                {"name": "Lakers", "score": "108"},
            ],
        }

        assert parse_scores_from_api_dict(score_data) == (108, 105)

    def test_null_scores(self):
        assert parse_scores_from_api_dict(
            {"home_team": "Lakers", "away_team": "Celtics", "scores": None}
        ) == (None, None)

    @pytest.mark.parametrize("bad_value", ["", "abc", None])
    def test_unparseable_score_is_none(self, bad_value):
        score_data = {
            "home_team": "Lakers",
            "away_team": "Celtics",
            "scores": [
                {"name": "Lakers", "score": bad_value},
                {"name": "Celtics", "score": "99"},
            ],
        }

        assert parse_scores_from_api_dict(score_data) == (None, 99)

    def test_integer_scores_accepted(self):
        score_data = {
            "home_team": "Lakers",
            "away_team": "Celtics",
            "scores": [{"name": "Lakers", "score": 7}, {"name": "Celtics", "score": 3}],
        }

        assert parse_scores_from_api_dict(score_data) == (7, 3)


class TestOddsEvents:
    """Odds endpoint payload validation."""

    def test_parse_fixture(self, sample_odds_data):
        events = ODDS_EVENTS_ADAPTER.validate_python(sample_odds_data)

        assert len(events) == 2
        first = events[0]
        assert first.commence_time == datetime(2026, 1, 15, 0, 10, tzinfo=UTC)
        assert [b.key for b in first.bookmakers] == ["draftkings", "fanduel"]
        assert first.bookmakers[0].last_update.tzinfo == UTC
        assert first.bookmakers[1].market_keys() == {"spreads", "totals"}
        assert first.bookmakers[1].market("h2h") is None
        assert events[1].bookmakers == []

    def test_extra_fields_ignored(self, odds_event_factory):
        payload = odds_event_factory()
        payload["unexpected"] = {"nested": True}

        events = ODDS_EVENTS_ADAPTER.validate_python([payload])

        assert events[0].id == "evt_1"

    def test_missing_required_field_rejected(self, odds_event_factory):
        payload = odds_event_factory()
        del payload["home_team"]

        with pytest.raises(ValidationError):
            ODDS_EVENTS_ADAPTER.validate_python([payload])


class TestScoreEvents:
    """Scores endpoint payload validation."""

    def test_parse_fixture(self, sample_scores_data):
        events = SCORE_EVENTS_ADAPTER.validate_python(sample_scores_data)

        assert events[0].parsed_scores() == (98, 96)
        assert events[0].last_update == datetime(2026, 1, 15, 2, 20, tzinfo=UTC)
        assert events[1].scores is None
        assert events[1].parsed_scores() == (None, None)

    def test_optional_clock_fields(self, score_event_factory):
        event = ScoreEvent.model_validate(score_event_factory(period=4, clock_seconds=90))

        assert event.period == 4
        assert event.clock_seconds == 90

    def test_clock_fields_default_to_none(self, score_event_factory):
        event = ScoreEvent.model_validate(score_event_factory())

        assert event.period is None
        assert event.clock_seconds is None
        assert event.completed is False
