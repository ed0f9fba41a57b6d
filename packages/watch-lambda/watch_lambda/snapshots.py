"""Build game state snapshots from provider score events."""

from __future__ import annotations

from datetime import datetime

import structlog
from watch_core.api_models import ScoreEvent
from watch_core.models import GameStateSnapshot, GameStatus
from watch_core.signals import (
    GameClock,
    accumulate_game_flow,
    clamp_game_clock,
    derive_signals,
    estimate_game_clock,
)
from watch_core.sports import SportProfile
from watch_core.time import ensure_utc

logger = structlog.get_logger()


def compute_game_status(event: ScoreEvent, now: datetime) -> GameStatus:
    """
    Status implied by a score event.

    completed if the provider says so, else live once commence_time has passed,
    else upcoming.
    """
    if event.completed:
        return GameStatus.COMPLETED
    if ensure_utc(event.commence_time) <= ensure_utc(now):
        return GameStatus.LIVE
    return GameStatus.UPCOMING


class SnapshotBuilder:
    """Derive a GameStateSnapshot for one score observation using a sport profile."""

    def __init__(self, profile: SportProfile):
        self.profile = profile

    def game_clock(self, event: ScoreEvent, now: datetime) -> GameClock:
        """Provider-reported period/clock when present, otherwise estimated from wall time."""
        if event.period is not None and event.clock_seconds is not None:
            return clamp_game_clock(event.period, event.clock_seconds, self.profile)
        return estimate_game_clock(
            event.commence_time, now, self.profile, completed=event.completed
        )

    def build(
        self,
        game_id: int,
        event: ScoreEvent,
        previous: GameStateSnapshot | None,
        now: datetime,
    ) -> GameStateSnapshot | None:
        """
        Build the next snapshot for a game, or None when either score is missing.

        Momentum shifts and lead changes carry forward from previous.
        """
        home_score, away_score = event.parsed_scores()
        if home_score is None or away_score is None:
            logger.debug("snapshot_skipped_no_scores", event_id=event.id, game_id=game_id)
            return None

        clock = self.game_clock(event, now)
        signals = derive_signals(home_score, away_score, clock, self.profile)
        score_diff = home_score - away_score

        previous_diff = None
        previous_momentum = 0
        previous_leads = 0
        if (
            previous is not None
            and previous.home_score is not None
            and previous.away_score is not None
        ):
            previous_diff = previous.home_score - previous.away_score
            previous_momentum = previous.momentum_shifts
            previous_leads = previous.lead_changes

        momentum_shifts, lead_changes = accumulate_game_flow(
            previous_diff, previous_momentum, previous_leads, score_diff, self.profile
        )

        return GameStateSnapshot(
            game_id=game_id,
            captured_at=ensure_utc(now),
            tension_score=signals.tension_score,
            momentum_shifts=momentum_shifts,
            lead_changes=lead_changes,
            close_finish=event.completed and abs(score_diff) <= self.profile.close_finish_margin,
            is_final=event.completed,
            stage=signals.stage.value,
            competitive=signals.competitive,
            activity_level=signals.activity_level.value,
            home_score=home_score,
            away_score=away_score,
        )
