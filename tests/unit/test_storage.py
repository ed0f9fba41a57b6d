"""Tests for WatchWriter and WatchReader."""

from datetime import UTC, datetime, timedelta

import pytest
from watch_core.models import Game, GameStateSnapshot, GameStatus, Team
from watch_core.priority import Priority
from watch_core.time import ensure_utc
from watch_lambda.normalizer import NormalizedExpectation
from watch_lambda.storage.readers import WatchReader
from watch_lambda.storage.writers import WatchWriter

TIP_OFF = datetime(2026, 1, 15, 0, 0, tzinfo=UTC)


async def _seed_game(session, home="Los Angeles Lakers", away="Boston Celtics", **game_fields):
    home_team = Team(name=home, league="NBA")
    away_team = Team(name=away, league="NBA")
    session.add_all([home_team, away_team])
    await session.commit()

    game_fields.setdefault("scheduled_time", TIP_OFF)
    game = Game(home_team_id=home_team.id, away_team_id=away_team.id, **game_fields)
    session.add(game)
    await session.commit()
    return game


def _snapshot(game_id, minutes, tension=50, final=False, close=False):
    return GameStateSnapshot(
        game_id=game_id,
        captured_at=TIP_OFF + timedelta(minutes=minutes),
        tension_score=tension,
        is_final=final,
        close_finish=close,
        home_score=50,
        away_score=48,
    )


class TestWatchWriter:
    """Status transitions and appends."""

    @pytest.mark.asyncio
    async def test_status_moves_forward(self, test_session):
        game = await _seed_game(test_session)
        writer = WatchWriter(test_session)

        assert await writer.update_game_status(game, GameStatus.LIVE) is True
        assert game.status == GameStatus.LIVE
        assert game.completed_at is None

    @pytest.mark.asyncio
    async def test_unchanged_status_is_noop(self, test_session):
        game = await _seed_game(test_session)

        assert await WatchWriter(test_session).update_game_status(game, GameStatus.UPCOMING) is False

    @pytest.mark.asyncio
    async def test_completed_stamps_completed_at(self, test_session):
        game = await _seed_game(test_session, status=GameStatus.LIVE)
        finished = TIP_OFF + timedelta(hours=2, minutes=30)

        await WatchWriter(test_session).update_game_status(game, GameStatus.COMPLETED, now=finished)
        await test_session.commit()

        stored = await WatchReader(test_session).get_game(game.id)
        assert stored.status == GameStatus.COMPLETED
        assert ensure_utc(stored.completed_at) == finished

    @pytest.mark.asyncio
    async def test_regression_is_ignored(self, test_session):
        """A completed game never goes back to live."""
        game = await _seed_game(test_session, status=GameStatus.COMPLETED)

        changed = await WatchWriter(test_session).update_game_status(game, GameStatus.LIVE)

        assert changed is False
        assert game.status == GameStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_insert_expectation(self, test_session):
        game = await _seed_game(test_session)
        expectation = NormalizedExpectation(
            external_event_id="evt_1",
            sport_key="basketball_nba",
            commence_time=TIP_OFF,
            home_team="Los Angeles Lakers",
            away_team="Boston Celtics",
            bookmaker="fanduel",
            spread_home=-3.5,
            spread_away=3.5,
        )

        await WatchWriter(test_session).insert_expectation(
            expectation, game.id, source="the-odds-api", captured_at=TIP_OFF
        )
        await test_session.commit()

        stored = await WatchReader(test_session).get_latest_expectation(game.id)
        assert stored.spread_home == -3.5
        assert stored.bookmaker == "fanduel"
        assert stored.source == "the-odds-api"
        assert stored.total_value is None


class TestWatchReader:
    """Current-state reads and counts."""

    @pytest.mark.asyncio
    async def test_current_snapshot_prefers_final(self, test_session):
        game = await _seed_game(test_session)
        test_session.add_all(
            [
                _snapshot(game.id, 0),
                _snapshot(game.id, 150, final=True, tension=90),
                _snapshot(game.id, 160),
            ]
        )
        await test_session.commit()
        reader = WatchReader(test_session)

        current = await reader.get_current_snapshot(game.id)
        latest = await reader.get_latest_snapshot(game.id)

        assert current.is_final is True
        assert current.tension_score == 90
        assert ensure_utc(latest.captured_at) == TIP_OFF + timedelta(minutes=160)

    @pytest.mark.asyncio
    async def test_current_snapshot_latest_without_final(self, test_session):
        game = await _seed_game(test_session)
        test_session.add_all([_snapshot(game.id, 10, tension=20), _snapshot(game.id, 0)])
        await test_session.commit()

        current = await WatchReader(test_session).get_current_snapshot(game.id)

        assert current.tension_score == 20

    @pytest.mark.asyncio
    async def test_no_snapshot(self, test_session):
        game = await _seed_game(test_session)
        reader = WatchReader(test_session)

        assert await reader.get_current_snapshot(game.id) is None
        assert await reader.get_snapshots_for_game(game.id) == []

    @pytest.mark.asyncio
    async def test_counts(self, test_session):
        await _seed_game(test_session, status=GameStatus.LIVE)
        await _seed_game(
            test_session,
            home="Miami Heat",
            away="Golden State Warriors",
            scheduled_time=TIP_OFF + timedelta(minutes=30),
        )
        reader = WatchReader(test_session)

        assert await reader.count_games_by_status(GameStatus.LIVE) == 1
        assert await reader.count_games_by_status(GameStatus.COMPLETED) == 0
        assert await reader.count_upcoming_between(TIP_OFF, TIP_OFF + timedelta(hours=1)) == 1
        assert await reader.count_upcoming_between(TIP_OFF - timedelta(hours=3), TIP_OFF) == 0

    @pytest.mark.asyncio
    async def test_list_games_with_priority(self, test_session):
        quiet = await _seed_game(test_session)
        tight = await _seed_game(
            test_session,
            home="Miami Heat",
            away="Golden State Warriors",
            scheduled_time=TIP_OFF + timedelta(hours=1),
        )
        pending = await _seed_game(
            test_session,
            home="Denver Nuggets",
            away="Phoenix Suns",
            scheduled_time=TIP_OFF + timedelta(hours=2),
        )
        test_session.add_all(
            [
                _snapshot(quiet.id, 10, tension=10),
                _snapshot(tight.id, 10, tension=40),
                _snapshot(tight.id, 20, tension=80),
            ]
        )
        await test_session.commit()

        views = await WatchReader(test_session).list_games_with_priority()

        assert [view.game.id for view in views] == [tight.id, pending.id, quiet.id]
        assert [view.priority for view in views] == [
            Priority.HIGH,
            Priority.MEDIUM,
            Priority.LOW,
        ]
        assert views[0].home_team == "Miami Heat"
        assert views[0].snapshot.tension_score == 80
        assert views[1].snapshot is None

    @pytest.mark.asyncio
    async def test_list_games_filters_by_status(self, test_session):
        await _seed_game(test_session, status=GameStatus.LIVE)
        await _seed_game(test_session, home="Miami Heat", away="Golden State Warriors")

        views = await WatchReader(test_session).list_games_with_priority(status=GameStatus.LIVE)

        assert len(views) == 1
        assert views[0].home_team == "Los Angeles Lakers"
