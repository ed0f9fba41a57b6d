"""Turn provider odds events into one normalized expectation record each."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

import structlog
from watch_core.api_models import Bookmaker, OddsEvent

logger = structlog.get_logger()

SPREADS = "spreads"
TOTALS = "totals"

DEFAULT_PREFERRED_BOOKMAKERS = ("fanduel", "draftkings", "betmgm", "caesars")


@dataclass(slots=True)
class NormalizedExpectation:
    """Spread/total quote extracted from one bookmaker for one event."""

    external_event_id: str
    sport_key: str
    commence_time: datetime
    home_team: str
    away_team: str
    bookmaker: str
    spread_home: float | None = None
    spread_away: float | None = None
    total_value: float | None = None
    total_over_price: float | None = None
    total_under_price: float | None = None


BookmakerStrategy = Callable[[OddsEvent], tuple[Bookmaker, set[str]] | None]


class EventNormalizer:
    """
    Select a bookmaker per event and extract the required markets from it.

    Bookmaker selection is an ordered list of strategies; the first one that
    returns a bookmaker wins:

    1. preferred bookmakers, in order, offering every required market
    2. first bookmaker offering every required market
    3. first bookmaker, taking whichever required markets it has
    """

    def __init__(
        self,
        required_markets: Sequence[str] = (SPREADS,),
        preferred_bookmakers: Sequence[str] = DEFAULT_PREFERRED_BOOKMAKERS,
    ) -> None:
        self.required_markets = tuple(required_markets)
        self.preferred_bookmakers = tuple(preferred_bookmakers)
        self._strategies: list[BookmakerStrategy] = [
            self._preferred_with_all_markets,
            self._any_with_all_markets,
            self._first_with_partial_markets,
        ]

    def _offers_all(self, bookmaker: Bookmaker) -> bool:
        return set(self.required_markets) <= bookmaker.market_keys()

    def _preferred_with_all_markets(self, event: OddsEvent) -> tuple[Bookmaker, set[str]] | None:
        by_key = {bookmaker.key: bookmaker for bookmaker in event.bookmakers}
        for key in self.preferred_bookmakers:
            bookmaker = by_key.get(key)
            if bookmaker is not None and self._offers_all(bookmaker):
                return bookmaker, set(self.required_markets)
        return None

    def _any_with_all_markets(self, event: OddsEvent) -> tuple[Bookmaker, set[str]] | None:
        for bookmaker in event.bookmakers:
            if self._offers_all(bookmaker):
                return bookmaker, set(self.required_markets)
        return None

    def _first_with_partial_markets(self, event: OddsEvent) -> tuple[Bookmaker, set[str]] | None:
        if not event.bookmakers:
            return None
        bookmaker = event.bookmakers[0]
        available = set(self.required_markets) & bookmaker.market_keys()
        if not available:
            return None
        return bookmaker, available

    def select_bookmaker(self, event: OddsEvent) -> tuple[Bookmaker, set[str]] | None:
        """Return the chosen bookmaker and the required markets to extract from it."""
        for strategy in self._strategies:
            selection = strategy(event)
            if selection is not None:
                return selection
        return None

    def normalize_event(self, event: OddsEvent) -> NormalizedExpectation | None:
        """
        Normalize one event, or return None when it has no usable market data.

        Returns:
            NormalizedExpectation, possibly with only some fields populated when the
            partial-markets strategy was used
        """
        selection = self.select_bookmaker(event)
        if selection is None:
            logger.debug(
                "event_dropped_no_markets",
                event_id=event.id,
                bookmakers=len(event.bookmakers),
            )
            return None

        bookmaker, markets = selection
        expectation = NormalizedExpectation(
            external_event_id=event.id,
            sport_key=event.sport_key,
            commence_time=event.commence_time,
            home_team=event.home_team,
            away_team=event.away_team,
            bookmaker=bookmaker.key,
        )

        if SPREADS in markets:
            self._extract_spreads(bookmaker, event.home_team, expectation)
        if TOTALS in markets:
            self._extract_totals(bookmaker, expectation)

        return expectation

    def normalize_events(self, events: Iterable[OddsEvent]) -> list[NormalizedExpectation]:
        """Normalize a batch, dropping events with no usable market data."""
        normalized = []
        for event in events:
            expectation = self.normalize_event(event)
            if expectation is not None:
                normalized.append(expectation)
        return normalized

    @staticmethod
    def _extract_spreads(
        bookmaker: Bookmaker, home_team: str, expectation: NormalizedExpectation
    ) -> None:
        market = bookmaker.market(SPREADS)
        if market is None:
            return

        for outcome in market.outcomes:
            if outcome.name == home_team:
                expectation.spread_home = outcome.point
            elif expectation.spread_away is None:
                expectation.spread_away = outcome.point

    @staticmethod
    def _extract_totals(bookmaker: Bookmaker, expectation: NormalizedExpectation) -> None:
        market = bookmaker.market(TOTALS)
        if market is None:
            return

        for outcome in market.outcomes:
            if outcome.name == "Over":
                expectation.total_over_price = outcome.price
                if outcome.point is not None:
                    expectation.total_value = outcome.point
            elif outcome.name == "Under":
                expectation.total_under_price = outcome.price
                if expectation.total_value is None:
                    expectation.total_value = outcome.point
