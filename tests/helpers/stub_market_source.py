from __future__ import annotations

from datetime import date
from decimal import Decimal

from domain.market import CurrentQuote
from services.market_sources import MarketData, MarketSource
from services.upstream_errors import UpstreamError


class StubMarketSource(MarketSource):
    """Returns a fixed quote (or raises) and records every call."""

    def __init__(
        self,
        *,
        price: Decimal = Decimal("60000"),
        change: Decimal = Decimal("-1.5"),
        market: MarketData | None = None,
    ) -> None:
        self.market = market or MarketData(quote=CurrentQuote(price=price, percent_change_24h=change))
        self.error: UpstreamError | None = None
        self.calls: list[tuple[date, date]] = []

    def fetch_market_data(self, start_date: date, today: date) -> MarketData:
        self.calls.append((start_date, today))
        if self.error is not None:
            raise self.error
        return self.market
