"""Centralized job registry for the serverless handler and local scheduler."""

from collections.abc import Awaitable, Callable

# Lazy-loaded registry to avoid circular imports
_JOB_REGISTRY: dict[str, Callable[..., Awaitable[dict]]] | None = None


def get_job_registry() -> dict[str, Callable[..., Awaitable[dict]]]:
    """
    Get mapping of job names to job functions.

    Registry is lazy-loaded on first access to avoid importing job modules
    (and their settings) at handler import time.
    """
    global _JOB_REGISTRY

    if _JOB_REGISTRY is None:
        from watch_lambda.jobs import ingest_odds

        _JOB_REGISTRY = {
            "ingest-odds": ingest_odds.main,
        }

    return _JOB_REGISTRY


def get_job_function(job_name: str) -> Callable[..., Awaitable[dict]]:
    """
    Get job function by name.

    Raises:
        KeyError: If job name not found in registry
    """
    registry = get_job_registry()
    if job_name not in registry:
        available = ", ".join(sorted(registry.keys()))
        raise KeyError(f"Unknown job '{job_name}'. Available jobs: {available}")
    return registry[job_name]


def list_available_jobs() -> list[str]:
    """Sorted list of registered job names."""
    return sorted(get_job_registry().keys())
