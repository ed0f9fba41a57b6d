"""Shared service for ingesting odds and scores into the watchability tables."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime

import structlog
from watch_core.api_models import ScoreEvent
from watch_core.config import Settings, get_settings
from watch_core.database import get_session_maker
from watch_core.exceptions import UnsupportedSportError
from watch_core.models import Game, utc_now
from watch_core.sports import get_sport_profile, league_for_sport_key

from watch_lambda.data_fetcher import OddsAPIError, TheOddsAPIClient
from watch_lambda.normalizer import EventNormalizer, NormalizedExpectation
from watch_lambda.reconciler import EntityReconciler
from watch_lambda.snapshots import SnapshotBuilder, compute_game_status
from watch_lambda.storage.readers import WatchReader
from watch_lambda.storage.writers import WatchWriter

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class SportIngestionResult:
    """Outcome of one sport's ingestion cycle."""

    sport_key: str
    events_processed: int = 0
    expectations_written: int = 0
    games_created: int = 0
    teams_created: int = 0
    scores_updated: int = 0
    errors: list[str] = field(default_factory=list)
    quota_remaining: int | None = None

    @property
    def success(self) -> bool:
        """Return True when no errors were recorded."""
        return not self.errors

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys of the invocation response."""
        return {
            "sportKey": self.sport_key,
            "eventsProcessed": self.events_processed,
            "expectationsWritten": self.expectations_written,
            "gamesCreated": self.games_created,
            "teamsCreated": self.teams_created,
            "scoresUpdated": self.scores_updated,
            "errors": list(self.errors),
        }


@dataclass(slots=True)
class IngestionRunResult:
    """Aggregate result for a batch of sports."""

    sport_results: list[SportIngestionResult]
    duration_ms: int = 0

    @property
    def total_events(self) -> int:
        return sum(result.events_processed for result in self.sport_results)

    @property
    def total_written(self) -> int:
        return sum(result.expectations_written for result in self.sport_results)

    @property
    def total_games_created(self) -> int:
        return sum(result.games_created for result in self.sport_results)

    @property
    def total_teams_created(self) -> int:
        return sum(result.teams_created for result in self.sport_results)

    @property
    def total_scores_updated(self) -> int:
        return sum(result.scores_updated for result in self.sport_results)

    @property
    def total_errors(self) -> int:
        return sum(result.error_count for result in self.sport_results)

    def by_sport(self, sport_key: str) -> SportIngestionResult | None:
        """Find result for a specific sport if present."""
        for result in self.sport_results:
            if result.sport_key == sport_key:
                return result
        return None

    def summary(self) -> dict:
        return {
            "totalEvents": self.total_events,
            "totalWritten": self.total_written,
            "totalGamesCreated": self.total_games_created,
            "totalTeamsCreated": self.total_teams_created,
            "totalScoresUpdated": self.total_scores_updated,
            "totalErrors": self.total_errors,
            "durationMs": self.duration_ms,
        }

    def to_dict(self) -> dict:
        return {
            "success": True,
            "results": [result.to_dict() for result in self.sport_results],
            "summary": self.summary(),
        }


class WatchabilityIngestionService:
    """
    Fetch odds and scores for a sport and reconcile them into the database.

    Every event is written in its own session. A failure on one event is recorded
    in the sport's error list and the loop moves on; a failed fetch aborts only
    the current sport.
    """

    def __init__(
        self,
        client: TheOddsAPIClient,
        *,
        settings: Settings | None = None,
        session_factory=None,
        normalizer: EventNormalizer | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._settings = settings or get_settings()
        self._session_factory = session_factory or get_session_maker()
        self._normalizer = normalizer or EventNormalizer(
            required_markets=self._settings.ingestion.markets,
            preferred_bookmakers=self._settings.ingestion.preferred_bookmakers,
        )
        self._clock = clock

    async def ingest_sport(self, sport_key: str, *, fetch_scores: bool = True) -> SportIngestionResult:
        """Run one odds (and optionally scores) cycle for a sport."""
        result = SportIngestionResult(sport_key=sport_key)
        league = league_for_sport_key(sport_key)

        try:
            response = await self._client.get_odds(
                sport=sport_key,
                markets=self._settings.ingestion.markets,
            )
            result.quota_remaining = response.quota_remaining
            result.events_processed = len(response.events)

            for expectation in self._normalizer.normalize_events(response.events):
                await self._ingest_expectation(expectation, league, result)

            if fetch_scores:
                await self._ingest_scores(sport_key, result)

        except OddsAPIError as exc:
            logger.error("odds_fetch_failed", sport=sport_key, error=str(exc), status=exc.status_code)
            result.errors.append(f"API Error: {exc}")
        except Exception as exc:
            logger.error("sport_ingestion_failed", sport=sport_key, error=str(exc), exc_info=True)
            result.errors.append(f"Unexpected error: {exc}")

        logger.info(
            "sport_ingested",
            sport=sport_key,
            events_processed=result.events_processed,
            expectations_written=result.expectations_written,
            games_created=result.games_created,
            teams_created=result.teams_created,
            scores_updated=result.scores_updated,
            errors=result.error_count,
            quota_remaining=result.quota_remaining,
        )
        return result

    async def _ingest_expectation(
        self,
        expectation: NormalizedExpectation,
        league: str,
        result: SportIngestionResult,
    ) -> None:
        try:
            async with self._session_factory() as session:
                reconciler = EntityReconciler(session)

                home, created = await reconciler.find_or_create_team(expectation.home_team, league)
                home_id = home.id
                result.teams_created += int(created)

                away, created = await reconciler.find_or_create_team(expectation.away_team, league)
                away_id = away.id
                result.teams_created += int(created)

                game, created = await reconciler.find_or_create_game(
                    home_id, away_id, expectation.commence_time
                )
                game_id = game.id
                result.games_created += int(created)

                writer = WatchWriter(session)
                await writer.insert_expectation(
                    expectation,
                    game_id,
                    source=self._settings.ingestion.source,
                    captured_at=self._clock(),
                )
                await session.commit()

            result.expectations_written += 1

        except Exception as exc:
            logger.warning(
                "ingestion_event_failed",
                sport=result.sport_key,
                event_id=expectation.external_event_id,
                error=str(exc),
            )
            result.errors.append(f"Event {expectation.external_event_id}: {exc}")

    async def _ingest_scores(self, sport_key: str, result: SportIngestionResult) -> None:
        try:
            response = await self._client.get_scores(sport_key)
        except Exception as exc:
            logger.error("scores_fetch_failed", sport=sport_key, error=str(exc))
            result.errors.append(f"Scores fetch error: {exc}")
            return

        result.quota_remaining = response.quota_remaining

        try:
            builder = SnapshotBuilder(get_sport_profile(sport_key))
        except UnsupportedSportError:
            logger.warning("snapshots_disabled_no_profile", sport=sport_key)
            builder = None

        for event in response.events:
            try:
                if await self._process_score_event(event, builder):
                    result.scores_updated += 1
            except Exception as exc:
                logger.warning(
                    "score_event_failed",
                    sport=sport_key,
                    event_id=event.id,
                    error=str(exc),
                )
                result.errors.append(f"Event {event.id}: {exc}")

    async def _process_score_event(self, event: ScoreEvent, builder: SnapshotBuilder | None) -> bool:
        """
        Update status and append a snapshot for one score event.

        Returns:
            True when a snapshot was written
        """
        now = self._clock()

        async with self._session_factory() as session:
            reconciler = EntityReconciler(session)
            game = await reconciler.find_game(event.home_team, event.away_team, event.commence_time)

            if game is None and self._settings.ingestion.lax_matching:
                game_id = await reconciler.match_game_id(event.home_team, event.away_team)
                if game_id is not None:
                    game = await session.get(Game, game_id)
                    logger.info("score_event_lax_matched", event_id=event.id, game_id=game_id)

            if game is None:
                logger.debug(
                    "score_event_unmatched",
                    event_id=event.id,
                    home_team=event.home_team,
                    away_team=event.away_team,
                )
                return False

            writer = WatchWriter(session)
            if await writer.update_game_status(game, compute_game_status(event, now), now):
                await session.commit()

            if builder is None:
                return False

            reader = WatchReader(session)
            if await reader.get_final_snapshot(game.id) is not None:
                logger.debug("snapshot_skipped_final_exists", game_id=game.id)
                return False

            previous = await reader.get_latest_snapshot(game.id)
            snapshot = builder.build(game.id, event, previous, now)
            if snapshot is None:
                return False

            await writer.insert_snapshot(snapshot)
            await session.commit()
            return True

    async def ingest_sports(
        self,
        sports: Iterable[str],
        *,
        fetch_scores: bool = True,
    ) -> IngestionRunResult:
        """Ingest multiple sports sequentially, returning aggregated results."""
        start = time.monotonic()
        results = [
            await self.ingest_sport(sport, fetch_scores=fetch_scores) for sport in sports
        ]
        duration_ms = int((time.monotonic() - start) * 1000)

        run = IngestionRunResult(sport_results=results, duration_ms=duration_ms)
        logger.info("ingestion_complete", **run.summary())
        return run
