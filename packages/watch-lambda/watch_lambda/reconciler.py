"""Match provider events to internal team and game records."""

from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from watch_core.models import Game, GameStatus, Team
from watch_core.time import ensure_utc, window_around

logger = structlog.get_logger()

GAME_WINDOW_HOURS = 12


class EntityReconciler:
    """
    Find-or-create for teams and games.

    Teams are matched on exact name. Games are matched on the ordered
    (home, away) team pair with scheduled_time inside commence_time +/- 12 hours.
    Each insert is committed on its own.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_team_by_name(self, name: str) -> Team | None:
        result = await self.session.execute(select(Team).where(Team.name == name))
        return result.scalar_one_or_none()

    async def find_or_create_team(self, name: str, league: str) -> tuple[Team, bool]:
        """
        Return the team with this exact name, creating it on first sighting.

        A concurrent invocation may insert the same name between our lookup and
        insert; the unique constraint rejects the second insert and the winner's
        row is re-selected.

        Returns:
            Tuple of (team, created)
        """
        team = await self.get_team_by_name(name)
        if team is not None:
            return team, False

        team = Team(name=name, league=league)
        self.session.add(team)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info("team_create_conflict", team=name)
            existing = await self.get_team_by_name(name)
            if existing is None:
                raise
            return existing, False

        logger.info("team_created", team=name, league=league, team_id=team.id)
        return team, True

    async def _find_game_by_ids(
        self, home_team_id: int, away_team_id: int, commence_time: datetime
    ) -> Game | None:
        window_start, window_end = window_around(commence_time, GAME_WINDOW_HOURS)
        query = (
            select(Game)
            .where(
                Game.home_team_id == home_team_id,
                Game.away_team_id == away_team_id,
                Game.scheduled_time >= window_start,
                Game.scheduled_time <= window_end,
            )
            .order_by(Game.id)
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_or_create_game(
        self, home_team_id: int, away_team_id: int, commence_time: datetime
    ) -> tuple[Game, bool]:
        """
        Return the game for this team pair near commence_time, creating it if absent.

        Calling twice with the same arguments returns the same game and creates
        exactly one row.

        Returns:
            Tuple of (game, created)
        """
        game = await self._find_game_by_ids(home_team_id, away_team_id, commence_time)
        if game is not None:
            return game, False

        game = Game(
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            status=GameStatus.UPCOMING,
            scheduled_time=ensure_utc(commence_time),
        )
        self.session.add(game)
        await self.session.commit()

        logger.info(
            "game_created",
            game_id=game.id,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            scheduled_time=game.scheduled_time.isoformat(),
        )
        return game, True

    async def find_game(
        self, home_team: str, away_team: str, commence_time: datetime
    ) -> Game | None:
        """Exact team-name lookup plus time-window lookup; never creates anything."""
        home = await self.get_team_by_name(home_team)
        away = await self.get_team_by_name(away_team)
        if home is None or away is None:
            return None
        return await self._find_game_by_ids(home.id, away.id, commence_time)

    async def match_game_id(self, home_team: str, away_team: str) -> int | None:
        """
        Lax fallback matcher: case-insensitive substring containment on team names.

        Either name may contain the other. There is no time window, so a team
        pair that meets more than once can match the wrong game; only used when
        ingestion.lax_matching is enabled.
        """
        result = await self.session.execute(select(Team))
        teams = list(result.scalars().all())

        home = _match_team(teams, home_team)
        away = _match_team(teams, away_team)
        if home is None or away is None:
            return None

        result = await self.session.execute(
            select(Game.id)
            .where(Game.home_team_id == home.id, Game.away_team_id == away.id)
            .order_by(Game.id)
            .limit(1)
        )
        return result.scalar_one_or_none()


def _match_team(teams: list[Team], name: str) -> Team | None:
    needle = name.lower()
    for team in teams:
        candidate = team.name.lower()
        if needle in candidate or candidate in needle:
            return team
    return None
