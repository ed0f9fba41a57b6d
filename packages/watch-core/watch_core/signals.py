"""Spoiler-safe signal derivation from raw score and clock state.

All functions are pure. Sport-dependent constants come from a SportProfile; no
UI labels or priority values are computed here (see watch_core.priority).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from watch_core.sports import BASKETBALL, ActivityLevel, SportProfile, Stage
from watch_core.time import elapsed_seconds

LATE_GAME_SECONDS = 300
MIN_PERIODS_FOR_PACE = 0.5


@dataclass(frozen=True, slots=True)
class GameClock:
    """Period (1-based) and seconds remaining in it."""

    period: int
    clock_remaining: int


@dataclass(frozen=True, slots=True)
class GameSignals:
    """Derived signals for one observed score state."""

    stage: Stage
    competitive: bool
    activity_level: ActivityLevel
    tension_score: int


def get_stage(period: int, clock_remaining: float) -> Stage:
    """
    Determine game stage from period and clock.

    - early: periods 1-2
    - mid: period 3, or period 4+ with more than five minutes left
    - late: final five minutes of period 4, or any overtime period

    Example:
        >>> get_stage(4, 90)
        <Stage.LATE: 'late'>
    """
    if period <= 2:
        return Stage.EARLY

    if period == 3:
        return Stage.MID

    if period == 4 and clock_remaining > LATE_GAME_SECONDS:
        return Stage.MID

    return Stage.LATE


def is_competitive(
    score_diff: int, stage: Stage | str, profile: SportProfile = BASKETBALL
) -> bool:
    """
    Whether the absolute score difference is within the stage threshold (inclusive).

    Unknown stages are never competitive.
    """
    try:
        threshold = profile.competitive_thresholds[Stage(stage)]
    except (KeyError, ValueError):
        return False
    return abs(score_diff) <= threshold


def get_activity_level(
    home_score: int,
    away_score: int,
    period: int,
    clock_remaining: float,
    profile: SportProfile = BASKETBALL,
) -> ActivityLevel:
    """
    Bucket the scoring pace by comparing combined points to the expected-by-now total.

    Returns medium until at least half a period has elapsed.
    """
    total_points = home_score + away_score
    period_length = profile.period_seconds
    periods_elapsed = (period - 1) + (period_length - clock_remaining) / period_length

    if periods_elapsed < MIN_PERIODS_FOR_PACE:
        return ActivityLevel.MEDIUM

    expected_points = periods_elapsed * profile.pace_baseline
    pace_factor = total_points / expected_points

    if pace_factor > profile.pace_high:
        return ActivityLevel.HIGH

    if pace_factor < profile.pace_low:
        return ActivityLevel.LOW

    return ActivityLevel.MEDIUM


def calculate_tension_score(
    score_diff: int,
    stage: Stage | str,
    competitive: bool,
    profile: SportProfile = BASKETBALL,
) -> int:
    """
    Tension score in [0, 100]; higher means a more watchable game state.

    Example:
        >>> calculate_tension_score(2, Stage.LATE, True)
        100
    """
    tension = max(0.0, 100 - abs(score_diff) * profile.tension_decay)
    tension *= profile.stage_multipliers[Stage(stage)]

    if competitive:
        tension = min(100.0, tension * profile.competitive_bonus)

    # Half-up rounding; tension is never negative here
    return min(100, max(0, math.floor(tension + 0.5)))


def derive_signals(
    home_score: int,
    away_score: int,
    clock: GameClock,
    profile: SportProfile = BASKETBALL,
) -> GameSignals:
    """Run stage, competitiveness, pace and tension derivation for one score state."""
    score_diff = home_score - away_score
    stage = get_stage(clock.period, clock.clock_remaining)
    competitive = is_competitive(score_diff, stage, profile)
    return GameSignals(
        stage=stage,
        competitive=competitive,
        activity_level=get_activity_level(
            home_score, away_score, clock.period, clock.clock_remaining, profile
        ),
        tension_score=calculate_tension_score(score_diff, stage, competitive, profile),
    )


def clamp_game_clock(period: int, clock_remaining: float, profile: SportProfile) -> GameClock:
    """Coerce provider-reported period/clock into valid ranges before derivation."""
    period = max(1, int(period))
    clock = min(max(0, int(clock_remaining)), profile.period_seconds)
    return GameClock(period=period, clock_remaining=clock)


def estimate_game_clock(
    commence_time: datetime,
    now: datetime,
    profile: SportProfile,
    completed: bool = False,
) -> GameClock:
    """
    Estimate period and clock from wall-clock time since tip-off.

    The scores feed carries no game clock, so elapsed real time is spread evenly
    over the profile's regulation periods. Completed games, and games running past
    their expected duration, sit at the end of the final regulation period.
    """
    if completed:
        return GameClock(period=profile.periods, clock_remaining=0)

    elapsed = elapsed_seconds(commence_time, now)
    if elapsed <= 0:
        return GameClock(period=1, clock_remaining=profile.period_seconds)

    game_fraction = elapsed / (profile.expected_duration_minutes * 60)
    periods_elapsed = game_fraction * profile.periods
    if periods_elapsed >= profile.periods:
        return GameClock(period=profile.periods, clock_remaining=0)

    whole_periods = int(periods_elapsed)
    remaining_fraction = 1 - (periods_elapsed - whole_periods)
    return GameClock(
        period=whole_periods + 1,
        clock_remaining=round(profile.period_seconds * remaining_fraction),
    )


def accumulate_game_flow(
    previous_diff: int | None,
    previous_momentum_shifts: int,
    previous_lead_changes: int,
    score_diff: int,
    profile: SportProfile = BASKETBALL,
) -> tuple[int, int]:
    """
    Carry momentum-shift and lead-change counts forward from the previous snapshot.

    Best-effort only: snapshots are minutes apart, so swings and lead flips that
    happen between two observations are invisible. A lead change is counted when
    the leader differs from the previous observation (ties count as no leader); a
    momentum shift when the signed margin moved by at least profile.momentum_swing.

    Returns:
        (momentum_shifts, lead_changes)
    """
    if previous_diff is None:
        return 0, 0

    momentum_shifts = previous_momentum_shifts
    lead_changes = previous_lead_changes

    if previous_diff * score_diff < 0:
        lead_changes += 1

    if abs(score_diff - previous_diff) >= profile.momentum_swing:
        momentum_shifts += 1

    return momentum_shifts, lead_changes
