"""Unit tests for the spoiler-safe signal engine."""

from datetime import UTC, datetime, timedelta

import pytest
from watch_core.models import GameStateSnapshot
from watch_core.priority import Priority, derive_priority
from watch_core.signals import (
    GameClock,
    accumulate_game_flow,
    calculate_tension_score,
    clamp_game_clock,
    derive_signals,
    estimate_game_clock,
    get_activity_level,
    get_stage,
    is_competitive,
)
from watch_core.sports import BASKETBALL, FOOTBALL, ActivityLevel, Stage


class TestGetStage:
    """Stage classification from period and clock."""

    @pytest.mark.parametrize("period", [1, 2])
    def test_first_half_is_early(self, period):
        assert get_stage(period, 700) == Stage.EARLY
        assert get_stage(period, 0) == Stage.EARLY

    def test_third_period_is_mid(self):
        assert get_stage(3, 720) == Stage.MID
        assert get_stage(3, 10) == Stage.MID

    def test_fourth_period_with_time_left_is_mid(self):
        assert get_stage(4, 301) == Stage.MID

    @pytest.mark.parametrize("clock", [300, 299, 90, 0])
    def test_final_five_minutes_are_late(self, clock):
        """Period 4 with clock at or under 300 seconds is always late."""
        assert get_stage(4, clock) == Stage.LATE

    @pytest.mark.parametrize("clock", [300, 900])
    def test_overtime_is_late(self, clock):
        """Any period past regulation is late regardless of clock."""
        assert get_stage(5, clock) == Stage.LATE
        assert get_stage(7, clock) == Stage.LATE


class TestIsCompetitive:
    """Competitiveness thresholds are inclusive and sport specific."""

    @pytest.mark.parametrize(
        ("profile", "stage", "threshold"),
        [
            (BASKETBALL, Stage.EARLY, 12),
            (BASKETBALL, Stage.MID, 10),
            (BASKETBALL, Stage.LATE, 8),
            (FOOTBALL, Stage.EARLY, 14),
            (FOOTBALL, Stage.MID, 11),
            (FOOTBALL, Stage.LATE, 8),
        ],
    )
    def test_threshold_boundary(self, profile, stage, threshold):
        assert is_competitive(threshold, stage, profile) is True
        assert is_competitive(-threshold, stage, profile) is True
        assert is_competitive(threshold + 1, stage, profile) is False
        assert is_competitive(-(threshold + 1), stage, profile) is False

    def test_accepts_stage_strings(self):
        assert is_competitive(8, "late") is True

    def test_unknown_stage_is_not_competitive(self):
        assert is_competitive(0, "halftime") is False


class TestGetActivityLevel:
    """Scoring pace buckets."""

    def test_medium_before_half_a_period(self):
        """Less than half a period elapsed is always medium."""
        assert get_activity_level(30, 30, 1, 500) == ActivityLevel.MEDIUM

    def test_basketball_high_pace(self):
        # 1.5 periods elapsed, 82.5 expected, 100 scored
        assert get_activity_level(50, 50, 2, 360) == ActivityLevel.HIGH

    def test_basketball_low_pace(self):
        assert get_activity_level(30, 30, 2, 360) == ActivityLevel.LOW

    def test_basketball_normal_pace(self):
        assert get_activity_level(42, 40, 2, 360) == ActivityLevel.MEDIUM

    def test_football_uses_its_own_baseline(self):
        """35 points after two football periods is high; the same in basketball is low."""
        assert get_activity_level(21, 14, 3, 900, FOOTBALL) == ActivityLevel.HIGH
        assert get_activity_level(21, 14, 3, 720, BASKETBALL) == ActivityLevel.LOW


class TestCalculateTensionScore:
    """Tension scoring formula."""

    def test_close_late_game_is_clamped_to_100(self):
        """round(90 * 1.0 * 1.2) = 108 is clamped to 100."""
        assert calculate_tension_score(2, Stage.LATE, True) == 100

    def test_blowout_is_zero(self):
        assert calculate_tension_score(21, Stage.EARLY, False, FOOTBALL) == 0
        assert calculate_tension_score(40, Stage.LATE, False, BASKETBALL) == 0

    def test_rounds_half_up(self):
        """(100 - 2*7) * 0.75 = 64.5 rounds up to 65."""
        assert calculate_tension_score(2, Stage.MID, False, FOOTBALL) == 65

    def test_negative_diff_uses_magnitude(self):
        assert calculate_tension_score(-6, Stage.MID, True) == calculate_tension_score(
            6, Stage.MID, True
        )

    @pytest.mark.parametrize("profile", [BASKETBALL, FOOTBALL])
    @pytest.mark.parametrize("stage", list(Stage))
    @pytest.mark.parametrize("competitive", [True, False])
    def test_always_bounded_integer(self, profile, stage, competitive):
        for diff in range(-60, 61):
            score = calculate_tension_score(diff, stage, competitive, profile)
            assert isinstance(score, int)
            assert 0 <= score <= 100


class TestDeriveSignals:
    """End-to-end derivation from score and clock."""

    def test_close_basketball_finish(self):
        """98-96 with 90 seconds left in the 4th is late, competitive and maximal tension."""
        signals = derive_signals(98, 96, GameClock(period=4, clock_remaining=90), BASKETBALL)

        assert signals.stage == Stage.LATE
        assert signals.competitive is True
        assert signals.tension_score == 100

        snapshot = GameStateSnapshot(
            game_id=1,
            tension_score=signals.tension_score,
            momentum_shifts=0,
            lead_changes=0,
            close_finish=False,
        )
        assert derive_priority(snapshot) == Priority.HIGH

    def test_football_blowout(self):
        """31-10 in the 2nd quarter is early, not competitive and zero tension."""
        signals = derive_signals(31, 10, GameClock(period=2, clock_remaining=400), FOOTBALL)

        assert signals.stage == Stage.EARLY
        assert signals.competitive is False
        assert signals.tension_score == 0

        snapshot = GameStateSnapshot(
            game_id=1,
            tension_score=signals.tension_score,
            momentum_shifts=0,
            lead_changes=0,
            close_finish=False,
        )
        assert derive_priority(snapshot) == Priority.LOW


class TestGameClock:
    """Clock clamping and wall-clock estimation."""

    def test_clamp_bounds_period_and_clock(self):
        assert clamp_game_clock(0, -5, BASKETBALL) == GameClock(period=1, clock_remaining=0)
        assert clamp_game_clock(4, 5000, BASKETBALL) == GameClock(period=4, clock_remaining=720)

    def test_not_started(self):
        start = datetime(2026, 1, 15, 0, 0, tzinfo=UTC)
        clock = estimate_game_clock(start, start - timedelta(minutes=5), BASKETBALL)
        assert clock == GameClock(period=1, clock_remaining=720)

    def test_halfway_through(self):
        """Half of the 135 minute basketball window lands at the start of the 3rd."""
        start = datetime(2026, 1, 15, 0, 0, tzinfo=UTC)
        clock = estimate_game_clock(start, start + timedelta(minutes=67.5), BASKETBALL)
        assert clock == GameClock(period=3, clock_remaining=720)

    def test_past_expected_duration(self):
        start = datetime(2026, 1, 15, 0, 0, tzinfo=UTC)
        clock = estimate_game_clock(start, start + timedelta(hours=4), BASKETBALL)
        assert clock == GameClock(period=4, clock_remaining=0)

    def test_completed_games_sit_at_the_buzzer(self):
        start = datetime(2026, 1, 15, 0, 0, tzinfo=UTC)
        clock = estimate_game_clock(start, start + timedelta(minutes=10), FOOTBALL, completed=True)
        assert clock == GameClock(period=4, clock_remaining=0)


class TestAccumulateGameFlow:
    """Momentum shift and lead change carry-forward."""

    def test_first_observation_starts_at_zero(self):
        assert accumulate_game_flow(None, 0, 0, 12) == (0, 0)

    def test_lead_flip_counts_lead_change(self):
        assert accumulate_game_flow(3, 1, 1, -2) == (1, 2)

    def test_tie_is_not_a_lead_change(self):
        assert accumulate_game_flow(3, 0, 0, 0) == (0, 0)
        assert accumulate_game_flow(0, 0, 0, 4) == (0, 0)

    def test_large_swing_counts_momentum_shift(self):
        """A margin swing of at least momentum_swing points is a shift."""
        assert accumulate_game_flow(-2, 0, 0, 6, BASKETBALL) == (1, 1)
        assert accumulate_game_flow(-2, 0, 0, 5, BASKETBALL) == (0, 1)
        assert accumulate_game_flow(0, 2, 0, 7, FOOTBALL) == (3, 0)
