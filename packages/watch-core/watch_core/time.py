"""Time utility helpers for consistent timezone handling."""

from datetime import UTC, datetime, timedelta


def ensure_utc(dt: datetime) -> datetime:
    """Return datetime guaranteed to be timezone-aware in UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_api_datetime(value: str) -> datetime:
    """Parse The Odds API datetime strings as UTC-aware datetimes."""
    value = value.strip()
    # Replace trailing Z with explicit UTC offset so fromisoformat works cross-version
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    return ensure_utc(dt)


def utc_isoformat(dt: datetime) -> str:
    """Serialize datetime as ISO 8601 string with trailing Z."""
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


def window_around(center: datetime, hours: float) -> tuple[datetime, datetime]:
    """Return the closed interval [center - hours, center + hours] in UTC."""
    center = ensure_utc(center)
    delta = timedelta(hours=hours)
    return center - delta, center + delta


def elapsed_seconds(start: datetime, now: datetime) -> float:
    """Seconds from start to now; negative when start is in the future."""
    return (ensure_utc(now) - ensure_utc(start)).total_seconds()
