"""Database write operations for expectations, game status and snapshots."""

from __future__ import annotations

from datetime import UTC, datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from watch_core.models import Game, GameExpectation, GameStateSnapshot, GameStatus
from watch_core.time import ensure_utc

from watch_lambda.normalizer import NormalizedExpectation

logger = structlog.get_logger()


class WatchWriter:
    """Handles all write operations to the database. Callers own the commit."""

    def __init__(self, session: AsyncSession):
        """
        Initialize writer with database session.

        Args:
            session: Async database session
        """
        self.session = session

    async def insert_expectation(
        self,
        expectation: NormalizedExpectation,
        game_id: int | None,
        *,
        source: str,
        captured_at: datetime | None = None,
    ) -> GameExpectation:
        """
        Append an odds quote for a game.

        Example:
            record = await writer.insert_expectation(expectation, game.id, source="the-odds-api")
        """
        record = GameExpectation(
            game_id=game_id,
            sport_key=expectation.sport_key,
            external_event_id=expectation.external_event_id,
            commence_time=ensure_utc(expectation.commence_time),
            home_team=expectation.home_team,
            away_team=expectation.away_team,
            spread_home=expectation.spread_home,
            spread_away=expectation.spread_away,
            total_value=expectation.total_value,
            total_over_price=expectation.total_over_price,
            total_under_price=expectation.total_under_price,
            source=source,
            bookmaker=expectation.bookmaker,
            captured_at=ensure_utc(captured_at or datetime.now(UTC)),
        )
        self.session.add(record)

        logger.debug(
            "expectation_written",
            game_id=game_id,
            event_id=expectation.external_event_id,
            bookmaker=expectation.bookmaker,
        )
        return record

    async def update_game_status(
        self,
        game: Game,
        status: GameStatus,
        now: datetime | None = None,
    ) -> bool:
        """
        Move a game forward to status.

        Unchanged status is a no-op. A status that would move the game backwards
        (e.g. completed -> live) is ignored. completed_at is stamped only on the
        transition into completed.

        Returns:
            True when the game row was modified
        """
        current = GameStatus(game.status)
        if current == status:
            return False

        if status.rank < current.rank:
            logger.warning(
                "game_status_regression_ignored",
                game_id=game.id,
                current=current.value,
                reported=status.value,
            )
            return False

        game.status = status
        if status == GameStatus.COMPLETED:
            game.completed_at = ensure_utc(now or datetime.now(UTC))
        self.session.add(game)

        logger.info(
            "game_status_updated",
            game_id=game.id,
            previous=current.value,
            status=status.value,
        )
        return True

    async def insert_snapshot(self, snapshot: GameStateSnapshot) -> GameStateSnapshot:
        """Append a score/signal snapshot."""
        self.session.add(snapshot)

        logger.info(
            "snapshot_written",
            game_id=snapshot.game_id,
            tension_score=snapshot.tension_score,
            stage=snapshot.stage,
            is_final=snapshot.is_final,
        )
        return snapshot
