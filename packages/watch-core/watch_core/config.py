"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from watch_core.exceptions import ConfigurationError


class APIConfig(BaseSettings):
    """The Odds API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ODDS_API_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    key: str = Field(..., description="The Odds API key")
    base_url: str = Field(
        default="https://api.the-odds-api.com/v4", description="Base URL for The Odds API"
    )
    regions: list[str] = Field(default=["us"], description="Regions for odds data")
    odds_format: str = Field(default="decimal", description="Odds format requested")
    date_format: str = Field(default="iso", description="Date format requested")
    scores_days_from: int = Field(
        default=1, description="Days of completed games to include in score fetches"
    )
    timeout_seconds: int = Field(default=30, description="Per-request timeout")


class DatabaseConfig(BaseSettings):
    """Database connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    url: str = Field(..., description="PostgreSQL connection URL")
    pool_size: int = Field(default=5, description="Database connection pool size")


class IngestionConfig(BaseSettings):
    """Odds and scores ingestion parameters."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    sports: list[str] = Field(default=["basketball_nba"], description="Sports to ingest")
    # Spreads only by default: every extra market costs API credits per request
    markets: list[str] = Field(default=["spreads"], description="Required odds markets")
    preferred_bookmakers: list[str] = Field(
        default=["fanduel", "draftkings", "betmgm", "caesars"],
        description="Bookmakers tried first, in order, when normalizing an event",
    )
    source: str = Field(default="the-odds-api", description="Source label stored on expectations")
    lax_matching: bool = Field(
        default=False,
        description="Fall back to substring team matching when a score event has no exact match",
    )


class SchedulerConfig(BaseSettings):
    """Activity-based fetch gating configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULER_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    interval_minutes: int = Field(default=5, description="How often the ingestion job is triggered")
    refresh_window_minutes: int = Field(
        default=15, description="Length of the idle odds-refresh window"
    )
    refresh_slice_minutes: int = Field(
        default=5,
        description="Leading slice of each refresh window during which idle odds are fetched",
    )
    live_lookback_hours: float = Field(
        default=3.0, description="Upcoming games started this recently are treated as live"
    )
    starting_soon_hours: float = Field(
        default=1.0, description="Upcoming games starting within this horizon count as active"
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    level: str = Field(default="INFO", description="Logging level")
    file: str = Field(default="logs/watchability.log", description="Log file path")


class Settings(BaseSettings):
    """
    Composed application settings loaded from environment variables.

    Example usage:
        settings = get_settings()
        api_key = settings.api.key
        db_url = settings.database.url
        sports = settings.ingestion.sports
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    api: APIConfig = Field(default_factory=APIConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()  # type: ignore[call-arg]


def reset_settings_cache() -> None:
    """Clear cached settings; primarily for testing overrides."""
    get_settings.cache_clear()


def load_settings() -> Settings:
    """
    Return cached settings, translating validation failures into ConfigurationError.

    Raises:
        ConfigurationError: If required credentials or connection settings are missing
    """
    try:
        return get_settings()
    except ValidationError as e:
        fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in e.errors())
        raise ConfigurationError(f"{e.title} is missing or invalid: {fields}") from e
    except SettingsError as e:
        raise ConfigurationError(str(e)) from e
