"""SQLModel database schema definitions."""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class GameStatus(str, Enum):
    """Game lifecycle status. Transitions only move forward."""

    UPCOMING = "upcoming"
    LIVE = "live"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        """Position in the upcoming -> live -> completed progression."""
        return list(GameStatus).index(self)


class Team(SQLModel, table=True):
    """Canonical team, created on first sighting during reconciliation."""

    __tablename__ = "teams"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True, description="Provider team name")
    league: str = Field(description="League label, e.g. NBA")
    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=utc_now,
        description="Record creation time",
    )


class Game(SQLModel, table=True):
    """
    Game between two teams.

    Identity is the ordered (home, away) pair plus a +/-12 hour window around
    scheduled_time; there is no provider event id on this table.
    """

    __tablename__ = "games"

    id: int | None = Field(default=None, primary_key=True)
    home_team_id: int = Field(foreign_key="teams.id", index=True)
    away_team_id: int = Field(foreign_key="teams.id", index=True)
    status: GameStatus = Field(default=GameStatus.UPCOMING, index=True)
    scheduled_time: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True), index=True),
        default=None,
        description="Scheduled start time",
    )
    completed_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True)),
        default=None,
        description="Set on the transition into completed",
    )
    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=utc_now,
        description="Record creation time",
    )

    __table_args__ = (Index("ix_games_pair_time", "home_team_id", "away_team_id", "scheduled_time"),)


class GameExpectation(SQLModel, table=True):
    """Append-only odds quote (spread/total) for a game at a point in time."""

    __tablename__ = "game_expectations"

    id: int | None = Field(default=None, primary_key=True)
    game_id: int | None = Field(
        sa_column=Column(Integer, ForeignKey("games.id", ondelete="CASCADE"), index=True),
        default=None,
    )
    sport_key: str = Field(index=True)
    external_event_id: str = Field(index=True, description="Provider event id")
    commence_time: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    home_team: str
    away_team: str

    spread_home: float | None = Field(default=None)
    spread_away: float | None = Field(default=None)
    total_value: float | None = Field(default=None)
    total_over_price: float | None = Field(default=None)
    total_under_price: float | None = Field(default=None)

    source: str = Field(default="the-odds-api")
    bookmaker: str | None = Field(default=None)
    captured_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), index=True, nullable=False),
        default_factory=utc_now,
    )


class GameStateSnapshot(SQLModel, table=True):
    """
    Append-only score state and derived signals for a game.

    No priority label is stored; it is recomputed from these fields at read time.
    """

    __tablename__ = "game_state_snapshots"

    id: int | None = Field(default=None, primary_key=True)
    game_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("games.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    captured_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), index=True, nullable=False),
        default_factory=utc_now,
    )

    tension_score: int = Field(default=0, description="0-100")
    momentum_shifts: int = Field(default=0)
    lead_changes: int = Field(default=0)
    close_finish: bool = Field(default=False)
    is_final: bool = Field(default=False)

    stage: str | None = Field(default=None, description="early, mid, late")
    competitive: bool | None = Field(default=None)
    activity_level: str | None = Field(default=None, description="low, medium, high")
    home_score: int | None = Field(default=None)
    away_score: int | None = Field(default=None)

    __table_args__ = (Index("ix_snapshot_game_captured", "game_id", "captured_at"),)


class User(SQLModel, table=True):
    """Dashboard user (favorites owner)."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=utc_now,
    )


class UserTeam(SQLModel, table=True):
    """User favorite team link."""

    __tablename__ = "user_teams"

    user_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
        )
    )
    team_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True
        )
    )
    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=utc_now,
    )
