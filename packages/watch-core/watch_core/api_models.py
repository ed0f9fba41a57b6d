"""The Odds API payload models and conversion utilities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from watch_core.time import parse_api_datetime


class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class OddsOutcome(_ProviderModel):
    """One priced outcome inside a market (a team for spreads, Over/Under for totals)."""

    name: str
    price: float
    point: float | None = None


class OddsMarket(_ProviderModel):
    """A bookmaker market such as spreads or totals."""

    key: str
    outcomes: list[OddsOutcome] = Field(default_factory=list)


class Bookmaker(_ProviderModel):
    """A bookmaker's quotes for one event."""

    key: str
    title: str | None = None
    last_update: datetime | None = None
    markets: list[OddsMarket] = Field(default_factory=list)

    @field_validator("last_update", mode="before")
    @classmethod
    def _parse_last_update(cls, value):
        if isinstance(value, str):
            return parse_api_datetime(value)
        return value

    def market(self, key: str) -> OddsMarket | None:
        """Return the market with the given key, if offered."""
        for market in self.markets:
            if market.key == key:
                return market
        return None

    def market_keys(self) -> set[str]:
        return {market.key for market in self.markets}


class OddsEvent(_ProviderModel):
    """Event object from the odds endpoint."""

    id: str
    sport_key: str
    sport_title: str | None = None
    commence_time: datetime
    home_team: str
    away_team: str
    bookmakers: list[Bookmaker] = Field(default_factory=list)

    @field_validator("commence_time", mode="before")
    @classmethod
    def _parse_commence_time(cls, value):
        if isinstance(value, str):
            return parse_api_datetime(value)
        return value


class ScoreEntry(_ProviderModel):
    """Team score as reported by the scores endpoint; score is a string."""

    name: str
    score: str | int | None = None


class ScoreEvent(_ProviderModel):
    """
    Event object from the scores endpoint.

    period and clock_seconds are optional extension fields; the public feed
    omits them, in which case the game clock is estimated from commence_time.
    """

    id: str
    sport_key: str
    sport_title: str | None = None
    commence_time: datetime
    completed: bool = False
    home_team: str
    away_team: str
    scores: list[ScoreEntry] | None = None
    last_update: datetime | None = None
    period: int | None = None
    clock_seconds: int | None = None

    @field_validator("commence_time", "last_update", mode="before")
    @classmethod
    def _parse_datetimes(cls, value):
        if isinstance(value, str):
            return parse_api_datetime(value)
        return value

    def parsed_scores(self) -> tuple[int | None, int | None]:
        """Home and away scores as integers; either is None when absent or unparseable."""
        return parse_scores_from_api_dict(self.model_dump())


ODDS_EVENTS_ADAPTER = TypeAdapter(list[OddsEvent])
SCORE_EVENTS_ADAPTER = TypeAdapter(list[ScoreEvent])


@dataclass(slots=True)
class OddsResponse:
    """Response from get_odds() API call."""

    events: list[OddsEvent]
    response_time_ms: int
    quota_remaining: int | None
    timestamp: datetime


@dataclass(slots=True)
class ScoresResponse:
    """Response from get_scores() API call."""

    events: list[ScoreEvent]
    response_time_ms: int
    quota_remaining: int | None
    timestamp: datetime


def parse_scores_from_api_dict(score_data: dict) -> tuple[int | None, int | None]:
    """
    Extract home and away scores from API scores response.

    Args:
        score_data: Score data from The Odds API scores endpoint
            Expected format:
            {
                "home_team": "Lakers",
                "away_team": "Celtics",
                "scores": [
                    {"name": "Lakers", "score": "108"},
                    {"name": "Celtics", "score": "105"}
                ]
            }

    Returns:
        Tuple of (home_score, away_score), either may be None if not found

    Example:
        >>> home, away = parse_scores_from_api_dict({
        ...     "home_team": "Lakers",
        ...     "away_team": "Celtics",
        ...     "scores": [{"name": "Lakers", "score": "108"}, {"name": "Celtics", "score": "105"}],
        ... })
        >>> (home, away)
        (108, 105)
    """
    home_team = score_data.get("home_team")
    away_team = score_data.get("away_team")
    scores = score_data.get("scores") or []

    home_score = None
    away_score = None

    for score in scores:
        score_name = score.get("name")
        score_value = score.get("score")
        if score_value is None:
            continue

        try:
            value = int(score_value)
        except (ValueError, TypeError):
            continue  # Unparseable score, leave as None

        if score_name == home_team:
            home_score = value
        elif score_name == away_team:
            away_score = value

    return home_score, away_score
