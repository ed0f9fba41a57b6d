"""
Core foundation layer for the watchability pipeline.

Provides models, database connection, configuration, sport profiles and the
spoiler-safe signal engine.
"""

from watch_core.api_models import (
    OddsEvent,
    OddsResponse,
    ScoreEvent,
    ScoresResponse,
    parse_scores_from_api_dict,
)
from watch_core.config import Settings, get_settings
from watch_core.database import get_engine, get_session
from watch_core.models import (
    Game,
    GameExpectation,
    GameStateSnapshot,
    GameStatus,
    Team,
)
from watch_core.priority import Priority, derive_priority, select_current_snapshot
from watch_core.signals import derive_signals
from watch_core.sports import SportProfile, get_sport_profile

__all__ = [
    # Models
    "Team",
    "Game",
    "GameStatus",
    "GameExpectation",
    "GameStateSnapshot",
    # Database
    "get_engine",
    "get_session",
    # Config
    "Settings",
    "get_settings",
    # API Models
    "OddsEvent",
    "ScoreEvent",
    "OddsResponse",
    "ScoresResponse",
    "parse_scores_from_api_dict",
    # Signals
    "SportProfile",
    "get_sport_profile",
    "derive_signals",
    "Priority",
    "derive_priority",
    "select_current_snapshot",
]
