"""
Ingest odds job - gated odds/scores ingestion for every configured sport.

This job:
1. Asks the fetch scheduler whether this cycle should spend API quota
2. Fetches odds (and scores when games are active) for each configured sport
3. Reconciles teams/games, appends expectations and score snapshots
4. Returns the invocation response body
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog
from watch_core.config import Settings, get_settings

from watch_lambda.data_fetcher import TheOddsAPIClient
from watch_lambda.ingestion import WatchabilityIngestionService
from watch_lambda.scheduling.intelligence import FetchScheduler

logger = structlog.get_logger()


async def main(
    force: bool = False,
    *,
    settings: Settings | None = None,
    session_factory=None,
    client_factory: Callable[[], TheOddsAPIClient] | None = None,
    sports: list[str] | None = None,
    include_scores: bool = True,
) -> dict:
    """
    Main job execution flow.

    Args:
        force: Bypass the activity gate and fetch odds and scores
        settings: Settings override (defaults to get_settings())
        session_factory: Session factory override for testing
        client_factory: API client factory override for testing
        sports: Sport keys to ingest (defaults to settings.ingestion.sports)
        include_scores: Allow the scores fetch when the gate asks for it

    Returns:
        Response body: {success, results, summary} or {success, skipped, reason, decision}
    """
    app_settings = settings or get_settings()
    sport_keys = sports or app_settings.ingestion.sports

    logger.info("ingest_odds_job_started", sports=sport_keys, force=force)

    scheduler = FetchScheduler(app_settings.scheduler, session_factory=session_factory)
    decision = await scheduler.decide(force=force)

    if decision.skip:
        logger.info("fetch_skipped", reason=decision.reason)
        return {
            "success": True,
            "skipped": True,
            "reason": decision.reason,
            "decision": decision.to_dict(),
        }

    make_client = client_factory or (lambda: TheOddsAPIClient(app_settings.api))

    async with make_client() as client:
        service = WatchabilityIngestionService(
            client,
            settings=app_settings,
            session_factory=session_factory,
        )
        run = await service.ingest_sports(
            sport_keys, fetch_scores=decision.fetch_scores and include_scores
        )

    logger.info(
        "ingest_odds_job_completed",
        total_events=run.total_events,
        total_errors=run.total_errors,
        duration_ms=run.duration_ms,
    )

    body = run.to_dict()
    body["decision"] = decision.to_dict()
    return body


if __name__ == "__main__":
    asyncio.run(main())
