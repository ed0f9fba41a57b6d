"""Database read operations for games, snapshots and expectations."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from watch_core.models import Game, GameExpectation, GameStateSnapshot, GameStatus, Team
from watch_core.priority import (
    Priority,
    derive_priority,
    select_current_snapshot,
    select_latest_expectation,
)
from watch_core.time import ensure_utc

logger = structlog.get_logger(__name__)

_PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


@dataclass(slots=True)
class GameView:
    """Game with team names, current snapshot, latest odds and derived priority."""

    game: Game
    home_team: str
    away_team: str
    snapshot: GameStateSnapshot | None
    expectation: GameExpectation | None
    priority: Priority


class WatchReader:
    """Handles all read operations for the watchability tables."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_game(self, game_id: int) -> Game | None:
        return await self.session.get(Game, game_id)

    async def get_snapshots_for_game(self, game_id: int) -> list[GameStateSnapshot]:
        """All snapshots for a game, oldest first."""
        query = (
            select(GameStateSnapshot)
            .where(GameStateSnapshot.game_id == game_id)
            .order_by(GameStateSnapshot.captured_at, GameStateSnapshot.id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_latest_snapshot(self, game_id: int) -> GameStateSnapshot | None:
        """Most recently captured snapshot regardless of the final flag."""
        query = (
            select(GameStateSnapshot)
            .where(GameStateSnapshot.game_id == game_id)
            .order_by(GameStateSnapshot.captured_at.desc(), GameStateSnapshot.id.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_final_snapshot(self, game_id: int) -> GameStateSnapshot | None:
        """Earliest final snapshot for a game, if one was written."""
        query = (
            select(GameStateSnapshot)
            .where(GameStateSnapshot.game_id == game_id, GameStateSnapshot.is_final.is_(True))
            .order_by(GameStateSnapshot.captured_at, GameStateSnapshot.id)
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_current_snapshot(self, game_id: int) -> GameStateSnapshot | None:
        """
        Snapshot representing the game's current state.

        The final snapshot wins over recency; otherwise the latest one.
        """
        final = await self.get_final_snapshot(game_id)
        if final is not None:
            return final
        return await self.get_latest_snapshot(game_id)

    async def get_latest_expectation(self, game_id: int) -> GameExpectation | None:
        query = (
            select(GameExpectation)
            .where(GameExpectation.game_id == game_id)
            .order_by(GameExpectation.captured_at.desc(), GameExpectation.id.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def count_games_by_status(self, status: GameStatus) -> int:
        result = await self.session.execute(
            select(func.count(Game.id)).where(Game.status == status)
        )
        return result.scalar_one()

    async def count_upcoming_between(self, start: datetime, end: datetime) -> int:
        """Count upcoming games whose scheduled_time falls in [start, end]."""
        result = await self.session.execute(
            select(func.count(Game.id)).where(
                Game.status == GameStatus.UPCOMING,
                Game.scheduled_time >= ensure_utc(start),
                Game.scheduled_time <= ensure_utc(end),
            )
        )
        return result.scalar_one()

    async def list_games_with_priority(
        self,
        status: GameStatus | None = None,
        limit: int = 50,
        sort_by_priority: bool = True,
    ) -> list[GameView]:
        """
        Games joined with team names, their current snapshot, latest odds quote
        and the priority derived from that snapshot.

        Args:
            status: Only include games with this status
            limit: Maximum number of games (ordered by scheduled_time)
            sort_by_priority: Order high -> low priority, scheduled_time within a tier
        """
        home = aliased(Team)
        away = aliased(Team)
        query = (
            select(Game, home.name, away.name)
            .join(home, Game.home_team_id == home.id)
            .join(away, Game.away_team_id == away.id)
            .order_by(Game.scheduled_time, Game.id)
            .limit(limit)
        )
        if status is not None:
            query = query.where(Game.status == status)

        rows = (await self.session.execute(query)).all()
        if not rows:
            return []

        game_ids = [game.id for game, _, _ in rows]

        snapshots_by_game: dict[int, list[GameStateSnapshot]] = defaultdict(list)
        snapshot_result = await self.session.execute(
            select(GameStateSnapshot).where(GameStateSnapshot.game_id.in_(game_ids))
        )
        for snapshot in snapshot_result.scalars().all():
            snapshots_by_game[snapshot.game_id].append(snapshot)

        expectations_by_game: dict[int, list[GameExpectation]] = defaultdict(list)
        expectation_result = await self.session.execute(
            select(GameExpectation).where(GameExpectation.game_id.in_(game_ids))
        )
        for expectation in expectation_result.scalars().all():
            expectations_by_game[expectation.game_id].append(expectation)

        views = []
        for game, home_name, away_name in rows:
            snapshot = select_current_snapshot(snapshots_by_game.get(game.id, []))
            views.append(
                GameView(
                    game=game,
                    home_team=home_name,
                    away_team=away_name,
                    snapshot=snapshot,
                    expectation=select_latest_expectation(expectations_by_game.get(game.id, [])),
                    priority=derive_priority(snapshot),
                )
            )

        if sort_by_priority:
            views.sort(key=lambda view: _PRIORITY_ORDER[view.priority])

        logger.debug("games_listed", count=len(views), status=status.value if status else None)
        return views
