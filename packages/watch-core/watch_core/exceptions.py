"""Exceptions shared across the watchability pipeline."""


class WatchabilityError(Exception):
    """Base exception for all pipeline errors."""


class ConfigurationError(WatchabilityError):
    """Required credentials or connection settings are missing or invalid."""


class UnsupportedSportError(WatchabilityError):
    """No sport profile is registered for the requested sport key."""
