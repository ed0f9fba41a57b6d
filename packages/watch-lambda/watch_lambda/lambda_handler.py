"""
Serverless handler for scheduled ingestion.

The trigger needs no body. An optional payload selects the job and bypasses the
activity gate:

{
    "job": "ingest-odds",
    "force": false
}

Environment variables required:
- ODDS_API_KEY: The Odds API key
- DATABASE_URL: PostgreSQL connection string
"""

import asyncio
import json

import structlog
from watch_core.config import load_settings
from watch_core.exceptions import ConfigurationError
from watch_core.logging_setup import configure_logging

# Structured JSON logging for the platform log collector; the logging section has
# no required fields, so this works before credentials are validated
configure_logging(json_output=True)

logger = structlog.get_logger()

DEFAULT_JOB = "ingest-odds"


def _response(status_code: int, body: dict) -> dict:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _parse_force(value) -> bool:
    """Accept JSON booleans and the usual string spellings; anything else is False."""
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return value is True


async def _run_job_async(job_name: str, force: bool) -> dict:
    """Run the job module's main function asynchronously."""
    from watch_lambda.scheduling.jobs import get_job_function

    job_fn = get_job_function(job_name)
    return await job_fn(force=force)


def lambda_handler(event, context):
    """
    Serverless entry point.

    Args:
        event: Trigger payload, may be empty
        context: Runtime context object (may be None outside the platform)

    Returns:
        dict: Response with statusCode, headers and JSON body
    """
    event = event or {}
    job_name = event.get("job") or DEFAULT_JOB
    force = _parse_force(event.get("force", False))
    request_id = getattr(context, "aws_request_id", None)

    logger.info("lambda_invoked", job=job_name, force=force, request_id=request_id)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error("lambda_configuration_error", error=str(e), request_id=request_id)
        return _response(500, {"error": "Configuration error", "message": str(e)})

    configure_logging(settings.logging, json_output=True)

    try:
        # asyncio.run() gives each invocation a clean event loop
        body = asyncio.run(_run_job_async(job_name, force))
    except Exception as e:
        logger.error(
            "lambda_failed",
            job=job_name,
            error=str(e),
            error_type=type(e).__name__,
            request_id=request_id,
            exc_info=True,
        )
        return _response(500, {"error": "Ingestion failed", "message": str(e)})

    logger.info("lambda_completed", job=job_name, request_id=request_id)
    return _response(200, body)
