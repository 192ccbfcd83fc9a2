from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol

from domain.market import CurrentQuote, PricePoint, days_between

from .cryptocompare_client import Candle, CryptoCompareClient, candles_to_history
from .quote_gateway_client import QuoteGatewayClient
from .upstream_errors import PartialUpstreamFailure, PayloadShapeError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketData:
    quote: CurrentQuote
    open_price: Decimal | None = None
    history: tuple[PricePoint, ...] | None = None


class MarketSource(Protocol):
    def fetch_market_data(self, start_date: date, today: date) -> MarketData: ...


class GatewayMarketSource(MarketSource):
    """Current quote only; the caller has to synthesize history."""

    def __init__(self, client: QuoteGatewayClient) -> None:
        self.client = client

    def fetch_market_data(self, start_date: date, today: date) -> MarketData:
        return MarketData(quote=self.client.fetch_current_quote())


class CryptoCompareMarketSource(MarketSource):
    """Spot price, today's opening price and daily history fetched concurrently.

    The three requests are independent; the first failure aborts the whole fetch.
    """

    def __init__(self, client: CryptoCompareClient, *, executor: ThreadPoolExecutor | None = None) -> None:
        self.client = client
        self._executor = executor or ThreadPoolExecutor(max_workers=3, thread_name_prefix="cryptocompare")

    def fetch_market_data(self, start_date: date, today: date) -> MarketData:
        history_days = days_between(start_date, today)
        futures: dict[Future, str] = {
            self._executor.submit(self.client.get_spot_price): "current price",
            self._executor.submit(self.client.get_hourly_candles, limit=24): "opening price",
            self._executor.submit(self.client.get_daily_candles, limit=history_days): "daily history",
        }

        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in done:
            exc = future.exception()
            if exc is None:
                continue
            for other in pending:
                other.cancel()
            request = futures[future]
            logger.warning("CryptoCompare %s request failed: %s", request, exc)
            if not isinstance(exc, UpstreamError):
                raise exc
            raise PartialUpstreamFailure(
                f"CryptoCompare {request} request failed: {exc}",
                failed_request=request,
                cause_kind=exc.kind,
            ) from exc

        spot_future, hourly_future, daily_future = futures
        current_price: Decimal = spot_future.result()
        open_price = self._opening_price(hourly_future.result())
        history = candles_to_history(daily_future.result())

        if open_price:
            change_pct = (current_price - open_price) / open_price * Decimal("100")
        else:
            change_pct = Decimal("0")

        return MarketData(
            quote=CurrentQuote(price=current_price, percent_change_24h=change_pct),
            open_price=open_price,
            history=history,
        )

    @staticmethod
    def _opening_price(candles: list[Candle]) -> Decimal:
        if not candles:
            raise PayloadShapeError("CryptoCompare returned no hourly candles")
        first = min(candles, key=lambda candle: candle.timestamp)
        if first.open is None:
            raise PayloadShapeError("CryptoCompare hourly candle missing 'open'")
        return first.open


__all__ = [
    "CryptoCompareMarketSource",
    "GatewayMarketSource",
    "MarketData",
    "MarketSource",
]
