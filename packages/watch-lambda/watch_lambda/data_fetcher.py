"""The Odds API client for fetching odds and scores data."""

from __future__ import annotations

import time

import aiohttp
import structlog
from pydantic import TypeAdapter, ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from watch_core.api_models import (
    ODDS_EVENTS_ADAPTER,
    SCORE_EVENTS_ADAPTER,
    OddsResponse,
    ScoresResponse,
)
from watch_core.config import APIConfig, get_settings
from watch_core.exceptions import WatchabilityError
from watch_core.models import utc_now

logger = structlog.get_logger()


class OddsAPIError(WatchabilityError):
    """Provider returned a non-2xx status or a body that failed schema validation."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        quota_remaining: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.quota_remaining = quota_remaining


class TheOddsAPIClient:
    """Client for interacting with The Odds API."""

    def __init__(self, config: APIConfig | None = None):
        """
        Initialize API client.

        Args:
            config: API settings (defaults to get_settings().api)
        """
        self._config = config or get_settings().api
        self.api_key = self._config.key
        self.base_url = self._config.base_url.rstrip("/")
        self.session: aiohttp.ClientSession | None = None
        self._quota_remaining: int | None = None

    async def __aenter__(self):
        """Async context manager entry."""
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self._config.timeout_seconds)
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session:
            await self.session.close()
            self.session = None

    @property
    def quota_remaining(self) -> int | None:
        """Get remaining API quota from last request."""
        return self._quota_remaining

    @retry(
        retry=retry_if_exception_type((aiohttp.ClientConnectionError, TimeoutError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _make_request(
        self, endpoint: str, params: dict | None = None
    ) -> tuple[dict | list, int]:
        """
        Make HTTP request with retry logic.

        Only connection failures and timeouts are retried; a response with an
        error status is raised immediately as OddsAPIError.

        Returns:
            Tuple of (response data, response time in ms)
        """
        if not self.session:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.timeout_seconds)
            )

        url = f"{self.base_url}/{endpoint}"
        params = dict(params or {})
        params["apiKey"] = self.api_key

        start_time = time.time()

        async with self.session.get(url, params=params) as response:
            # Track quota from headers
            remaining = response.headers.get("x-requests-remaining")
            if remaining is not None:
                try:
                    self._quota_remaining = int(float(remaining))
                except ValueError:
                    logger.warning("quota_header_unparseable", value=remaining)

            if response.status >= 400:
                message = await response.text()
                logger.error(
                    "api_request_failed",
                    endpoint=endpoint,
                    status=response.status,
                    message=message[:200],
                )
                raise OddsAPIError(
                    f"The Odds API returned {response.status} for {endpoint}",
                    status_code=response.status,
                    quota_remaining=self._quota_remaining,
                )

            try:
                data = await response.json(content_type=None)
            except ValueError as e:
                raise OddsAPIError(
                    f"Invalid JSON from {endpoint}: {e}",
                    status_code=response.status,
                    quota_remaining=self._quota_remaining,
                ) from e

            elapsed_ms = int((time.time() - start_time) * 1000)

            logger.info(
                "api_request_success",
                endpoint=endpoint,
                status=response.status,
                elapsed_ms=elapsed_ms,
                quota_remaining=self._quota_remaining,
            )

            return data, elapsed_ms

    def _validate(self, adapter: TypeAdapter, data, endpoint: str) -> list:
        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            logger.error(
                "api_response_invalid",
                endpoint=endpoint,
                error_count=e.error_count(),
            )
            raise OddsAPIError(
                f"Unexpected response shape from {endpoint}: {e.error_count()} validation errors",
                quota_remaining=self._quota_remaining,
            ) from e

    async def get_odds(
        self,
        sport: str,
        markets: list[str],
        regions: list[str] | None = None,
        odds_format: str | None = None,
    ) -> OddsResponse:
        """
        Fetch current odds for a sport.

        Args:
            sport: Sport key (e.g., 'basketball_nba')
            markets: Markets to request (e.g., ['spreads', 'totals'])
            regions: Regions (defaults to settings)
            odds_format: Odds format (defaults to settings)

        Raises:
            OddsAPIError: On an error status or a malformed body

        Example:
            async with TheOddsAPIClient() as client:
                response = await client.get_odds('basketball_nba', ['spreads'])
        """
        endpoint = f"sports/{sport}/odds"
        params = {
            "regions": ",".join(regions or self._config.regions),
            "markets": ",".join(markets),
            "oddsFormat": odds_format or self._config.odds_format,
            "dateFormat": self._config.date_format,
        }

        data, response_time = await self._make_request(endpoint, params=params)
        events = self._validate(ODDS_EVENTS_ADAPTER, data, endpoint)

        logger.info(
            "odds_fetched",
            sport=sport,
            events_count=len(events),
            response_time_ms=response_time,
            quota_remaining=self._quota_remaining,
        )

        return OddsResponse(
            events=events,
            response_time_ms=response_time,
            quota_remaining=self._quota_remaining,
            timestamp=utc_now(),
        )

    async def get_scores(self, sport: str, days_from: int | None = None) -> ScoresResponse:
        """
        Fetch live and recently completed scores.

        Args:
            sport: Sport key (e.g., 'basketball_nba')
            days_from: Days of completed games to include (defaults to settings)
        """
        endpoint = f"sports/{sport}/scores"
        params = {
            "daysFrom": days_from if days_from is not None else self._config.scores_days_from,
            "dateFormat": self._config.date_format,
        }

        data, response_time = await self._make_request(endpoint, params=params)
        events = self._validate(SCORE_EVENTS_ADAPTER, data, endpoint)

        logger.info(
            "scores_fetched",
            sport=sport,
            events_count=len(events),
            response_time_ms=response_time,
            quota_remaining=self._quota_remaining,
        )

        return ScoresResponse(
            events=events,
            response_time_ms=response_time,
            quota_remaining=self._quota_remaining,
            timestamp=utc_now(),
        )
