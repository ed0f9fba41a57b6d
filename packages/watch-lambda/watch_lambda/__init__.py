"""
Serverless runtime code for the watchability pipeline.

Provides the Odds API client, normalization, reconciliation, storage, ingestion
and fetch scheduling.
"""

from watch_lambda.data_fetcher import OddsAPIError, TheOddsAPIClient
from watch_lambda.ingestion import (
    IngestionRunResult,
    SportIngestionResult,
    WatchabilityIngestionService,
)
from watch_lambda.normalizer import EventNormalizer, NormalizedExpectation
from watch_lambda.reconciler import EntityReconciler

__all__ = [
    # Data fetching
    "TheOddsAPIClient",
    "OddsAPIError",
    # Normalization and reconciliation
    "EventNormalizer",
    "NormalizedExpectation",
    "EntityReconciler",
    # Ingestion
    "WatchabilityIngestionService",
    "SportIngestionResult",
    "IngestionRunResult",
]
