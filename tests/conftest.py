"""Pytest configuration and fixtures."""

import json
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

# Set required environment variables for testing BEFORE any imports of Settings
os.environ.setdefault("ODDS_API_KEY", "test_api_key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FILE", str(Path(tempfile.gettempdir()) / "watchability-tests.log"))

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _reset_settings():
    """Drop cached settings so environment overrides in one test never leak."""
    from watch_core.config import reset_settings_cache

    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def sample_odds_data():
    """Load sample odds response from fixture file."""
    with open(FIXTURES / "sample_odds_response.json") as f:
        return json.load(f)


@pytest.fixture
def sample_scores_data():
    """Load sample scores response from fixture file."""
    with open(FIXTURES / "sample_scores_response.json") as f:
        return json.load(f)


@pytest.fixture
async def test_engine(tmp_path):
    """
    File-backed SQLite engine with all tables created.

    NullPool keeps connections from outliving the event loop that opened them,
    so sync tests that call asyncio.run() can share the database.
    """
    import watch_core.models  # noqa: F401

    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def mock_session_factory(test_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_session(mock_session_factory):
    """Create test database session."""
    async with mock_session_factory() as session:
        yield session


@pytest.fixture
def mock_settings(tmp_path):
    """Settings built explicitly so tests never depend on the environment."""
    from watch_core.config import (
        APIConfig,
        DatabaseConfig,
        IngestionConfig,
        LoggingConfig,
        SchedulerConfig,
        Settings,
    )

    return Settings(
        api=APIConfig(key="test_api_key", base_url="https://api.test.com/v4"),
        database=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"),
        ingestion=IngestionConfig(
            sports=["basketball_nba"],
            markets=["spreads"],
            preferred_bookmakers=["fanduel", "draftkings", "betmgm", "caesars"],
        ),
        scheduler=SchedulerConfig(),
        logging=LoggingConfig(level="INFO", file=str(tmp_path / "logs" / "test.log")),
    )


@pytest.fixture
def odds_event_factory():
    """Factory for odds endpoint event dicts with a single spreads bookmaker."""

    def _create(
        event_id="evt_1",
        home_team="Los Angeles Lakers",
        away_team="Boston Celtics",
        commence_time=datetime(2026, 1, 15, 0, 0, tzinfo=UTC),
        sport_key="basketball_nba",
        bookmakers=None,
    ) -> dict:
        if bookmakers is None:
            bookmakers = [
                {
                    "key": "fanduel",
                    "title": "FanDuel",
                    "last_update": "2026-01-14T22:00:00Z",
                    "markets": [
                        {
                            "key": "spreads",
                            "outcomes": [
                                {"name": home_team, "price": 1.91, "point": -3.5},
                                {"name": away_team, "price": 1.91, "point": 3.5},
                            ],
                        }
                    ],
                }
            ]
        return {
            "id": event_id,
            "sport_key": sport_key,
            "sport_title": "NBA",
            "commence_time": commence_time.isoformat(),
            "home_team": home_team,
            "away_team": away_team,
            "bookmakers": bookmakers,
        }

    return _create


@pytest.fixture
def score_event_factory():
    """Factory for scores endpoint event dicts."""

    def _create(
        event_id="evt_1",
        home_team="Los Angeles Lakers",
        away_team="Boston Celtics",
        commence_time=datetime(2026, 1, 15, 0, 0, tzinfo=UTC),
        home_score="98",
        away_score="96",
        completed=False,
        sport_key="basketball_nba",
        **extra,
    ) -> dict:
        scores = None
        if home_score is not None or away_score is not None:
            scores = [
                {"name": home_team, "score": home_score},
                {"name": away_team, "score": away_score},
            ]
        return {
            "id": event_id,
            "sport_key": sport_key,
            "sport_title": "NBA",
            "commence_time": commence_time.isoformat(),
            "completed": completed,
            "home_team": home_team,
            "away_team": away_team,
            "scores": scores,
            "last_update": None,
            **extra,
        }

    return _create
