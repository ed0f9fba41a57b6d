"""Per-sport constant tables for the signal engine.

Every sport-dependent number used by stage, competitiveness, pace and tension
derivation lives in a SportProfile. Supporting another sport means registering
another profile; the derivation functions never branch on the sport.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from watch_core.exceptions import UnsupportedSportError


class Stage(str, Enum):
    """Coarse temporal phase of a game."""

    EARLY = "early"
    MID = "mid"
    LATE = "late"


class ActivityLevel(str, Enum):
    """Coarse scoring-pace bucket."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _frozen(mapping: dict[Stage, float]) -> Mapping[Stage, float]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True, slots=True)
class SportProfile:
    """
    Constant tables for one sport.

    Attributes:
        name: Profile name (basketball, football)
        period_seconds: Regulation length of one period
        periods: Regulation periods per game
        competitive_thresholds: Max absolute score difference per stage (inclusive)
        tension_decay: Tension points lost per point of score difference
        stage_multipliers: Tension multiplier per stage
        competitive_bonus: Tension multiplier applied to competitive games
        pace_baseline: Expected combined points per period
        pace_high: Pace factor above which activity is high
        pace_low: Pace factor below which activity is low
        close_finish_margin: Final margin at or under which a finish counts as close
        momentum_swing: Margin swing between snapshots that counts as a momentum shift
        expected_duration_minutes: Typical wall-clock length of a game, used to
            estimate period and clock when the provider reports neither
    """

    name: str
    period_seconds: int
    periods: int
    competitive_thresholds: Mapping[Stage, float]
    tension_decay: float
    stage_multipliers: Mapping[Stage, float]
    competitive_bonus: float
    pace_baseline: float
    pace_high: float
    pace_low: float
    close_finish_margin: int = 5
    momentum_swing: int = 8
    expected_duration_minutes: int = 150
    sport_key_prefixes: tuple[str, ...] = field(default=())


BASKETBALL = SportProfile(
    name="basketball",
    period_seconds=720,
    periods=4,
    competitive_thresholds=_frozen({Stage.EARLY: 12, Stage.MID: 10, Stage.LATE: 8}),
    tension_decay=5,
    stage_multipliers=_frozen({Stage.EARLY: 0.6, Stage.MID: 0.8, Stage.LATE: 1.0}),
    competitive_bonus=1.2,
    pace_baseline=55,
    pace_high=1.15,
    pace_low=0.85,
    close_finish_margin=5,
    momentum_swing=8,
    expected_duration_minutes=135,
    sport_key_prefixes=("basketball_",),
)

FOOTBALL = SportProfile(
    name="football",
    period_seconds=900,
    periods=4,
    competitive_thresholds=_frozen({Stage.EARLY: 14, Stage.MID: 11, Stage.LATE: 8}),
    tension_decay=7,
    stage_multipliers=_frozen({Stage.EARLY: 0.5, Stage.MID: 0.75, Stage.LATE: 1.0}),
    competitive_bonus=1.25,
    pace_baseline=12,
    pace_high=1.25,
    pace_low=0.75,
    close_finish_margin=5,
    momentum_swing=7,
    expected_duration_minutes=195,
    sport_key_prefixes=("americanfootball_",),
)

SPORT_PROFILES: dict[str, SportProfile] = {
    BASKETBALL.name: BASKETBALL,
    FOOTBALL.name: FOOTBALL,
}

_LEAGUES = {
    "basketball_nba": "NBA",
    "americanfootball_nfl": "NFL",
    "baseball_mlb": "MLB",
    "icehockey_nhl": "NHL",
}


def get_sport_profile(sport: str) -> SportProfile:
    """
    Resolve a profile from a profile name or a provider sport key.

    Example:
        >>> get_sport_profile("basketball_nba").name
        'basketball'

    Raises:
        UnsupportedSportError: If no registered profile matches
    """
    if sport in SPORT_PROFILES:
        return SPORT_PROFILES[sport]

    for profile in SPORT_PROFILES.values():
        if any(sport.startswith(prefix) for prefix in profile.sport_key_prefixes):
            return profile

    available = ", ".join(sorted(SPORT_PROFILES))
    raise UnsupportedSportError(f"No sport profile for '{sport}'. Available: {available}")


def league_for_sport_key(sport_key: str) -> str:
    """Map a provider sport key to the league label stored on teams."""
    return _LEAGUES.get(sport_key, sport_key.upper())
