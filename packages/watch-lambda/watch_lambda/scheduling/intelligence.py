"""Activity-based gating of odds/scores fetches to conserve API quota."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

import structlog
from watch_core.config import SchedulerConfig, get_settings
from watch_core.database import get_session_maker
from watch_core.models import GameStatus, utc_now
from watch_core.time import ensure_utc

from watch_lambda.storage.readers import WatchReader

logger = structlog.get_logger()


@dataclass(slots=True, frozen=True)
class FetchDecision:
    """
    Decision about what to fetch this cycle (immutable).

    Attributes:
        fetch_odds: Whether to call the odds endpoint
        fetch_scores: Whether to call the scores endpoint
        reason: Human-readable explanation for decision
        live_games: Games flagged live
        overdue_games: Upcoming games whose start time has passed within the lookback
        starting_soon_games: Upcoming games starting within the look-ahead
    """

    fetch_odds: bool
    fetch_scores: bool
    reason: str
    live_games: int = 0
    overdue_games: int = 0
    starting_soon_games: int = 0

    @property
    def skip(self) -> bool:
        """True when nothing should be fetched this cycle."""
        return not (self.fetch_odds or self.fetch_scores)

    def to_dict(self) -> dict:
        return {
            "fetchOdds": self.fetch_odds,
            "fetchScores": self.fetch_scores,
            "reason": self.reason,
            "liveGames": self.live_games,
            "overdueGames": self.overdue_games,
            "startingSoonGames": self.starting_soon_games,
        }


class FetchScheduler:
    """
    Decides whether the current cycle should spend API quota.

    Uses database state only:
    - live games, or upcoming games that should already have started -> odds and scores
    - upcoming games starting soon -> odds and scores
    - otherwise odds only inside the periodic refresh slice, else skip
    """

    def __init__(self, config: SchedulerConfig | None = None, session_factory=None):
        """
        Initialize fetch scheduler.

        Args:
            config: Scheduler settings (defaults to get_settings().scheduler)
            session_factory: Optional session factory for testing
        """
        self.config = config or get_settings().scheduler
        self.session_factory = session_factory or get_session_maker()

    def in_refresh_slice(self, now: datetime) -> bool:
        """Whether now falls in the leading slice of the refresh window."""
        return now.minute % self.config.refresh_window_minutes < self.config.refresh_slice_minutes

    async def decide(self, now: datetime | None = None, force: bool = False) -> FetchDecision:
        """
        Determine what to fetch now.

        Args:
            now: Decision time (defaults to current UTC time)
            force: Fetch odds and scores regardless of activity
        """
        now = ensure_utc(now or utc_now())

        if force:
            return FetchDecision(fetch_odds=True, fetch_scores=True, reason="Forced run")

        async with self.session_factory() as session:
            reader = WatchReader(session)
            live = await reader.count_games_by_status(GameStatus.LIVE)
            overdue = await reader.count_upcoming_between(
                now - timedelta(hours=self.config.live_lookback_hours), now
            )
            starting_soon = await reader.count_upcoming_between(
                now, now + timedelta(hours=self.config.starting_soon_hours)
            )

        counts = {
            "live_games": live,
            "overdue_games": overdue,
            "starting_soon_games": starting_soon,
        }

        if live + overdue > 0:
            decision = FetchDecision(
                fetch_odds=True,
                fetch_scores=True,
                reason=f"{live + overdue} games live or due to be live",
                **counts,
            )
        elif starting_soon > 0:
            decision = FetchDecision(
                fetch_odds=True,
                fetch_scores=True,
                reason=f"{starting_soon} games starting within {self.config.starting_soon_hours:g}h",
                **counts,
            )
        elif self.in_refresh_slice(now):
            decision = FetchDecision(
                fetch_odds=True,
                fetch_scores=False,
                reason="No active games - periodic odds refresh",
                **counts,
            )
        else:
            decision = FetchDecision(
                fetch_odds=False,
                fetch_scores=False,
                reason="No active games - outside refresh slice",
                **counts,
            )

        logger.info(
            "fetch_decision",
            fetch_odds=decision.fetch_odds,
            fetch_scores=decision.fetch_scores,
            reason=decision.reason,
            **counts,
        )
        return decision
