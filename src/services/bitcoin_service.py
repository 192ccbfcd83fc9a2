from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

from config import AppSettings
from domain.market import BitcoinSnapshot

from .cache import CacheKey, CacheSlot, TtlCache
from .cryptocompare_client import CryptoCompareClient
from .history_synthesis import HistorySynthesizer
from .market_sources import CryptoCompareMarketSource, GatewayMarketSource, MarketData, MarketSource
from .quote_gateway_client import QuoteGatewayClient
from .upstream_errors import ErrorKind, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ok:
    data: BitcoinSnapshot
    ok: bool = True


@dataclass(frozen=True)
class Failed:
    error: ErrorKind
    message: str
    ok: bool = False


FetchResult = Ok | Failed


@dataclass(frozen=True)
class _SnapshotEntry:
    start_date: date
    snapshot: BitcoinSnapshot


@dataclass(frozen=True)
class _MarketEntry:
    start_date: date
    market: MarketData

    def covers(self, start_date: date) -> bool:
        # Fetched history only reaches back to the start date it was requested for.
        return self.market.history is None or self.start_date <= start_date


PRICE_DATA: CacheSlot[_MarketEntry] = CacheSlot(CacheKey.PRICE_DATA)
BITCOIN_DATA: CacheSlot[_SnapshotEntry] = CacheSlot(CacheKey.BITCOIN_DATA)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BitcoinPriceService:
    """Cache-first aggregate of the current BTC price, its 24h move and a daily history.

    Failures never clear the cache: whatever is still within its TTL keeps serving reads.
    """

    def __init__(
        self,
        *,
        source: MarketSource,
        cache: TtlCache,
        synthesizer: HistorySynthesizer,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.source = source
        self.cache = cache
        self.synthesizer = synthesizer
        self._clock = clock

    def get_bitcoin_data(self, start_date: date) -> FetchResult:
        cached = self.cache.get(BITCOIN_DATA)
        if cached is not None and cached.start_date == start_date:
            logger.info("Using cached bitcoin data")
            return Ok(cached.snapshot)

        today = self._clock().date()
        if start_date > today:
            message = f"start_date {start_date.isoformat()} is after today {today.isoformat()}"
            logger.error("Rejecting bitcoin data request: %s", message)
            return Failed(error=ErrorKind.INVALID_START_DATE, message=message)

        logger.info("Fetching fresh bitcoin data")
        try:
            market = self._market_data(start_date, today)
        except UpstreamError as exc:
            logger.error("Error fetching bitcoin data (%s): %s", exc.kind, exc)
            return Failed(error=exc.kind, message=str(exc))

        snapshot = self._build_snapshot(market, start_date, today)
        self.cache.set(BITCOIN_DATA, _SnapshotEntry(start_date=start_date, snapshot=snapshot))
        return Ok(snapshot)

    def _market_data(self, start_date: date, today: date) -> MarketData:
        cached = self.cache.get(PRICE_DATA)
        if cached is not None and cached.covers(start_date):
            return cached.market
        market = self.source.fetch_market_data(start_date, today)
        self.cache.set(PRICE_DATA, _MarketEntry(start_date=start_date, market=market))
        return market

    def _build_snapshot(self, market: MarketData, start_date: date, today: date) -> BitcoinSnapshot:
        current_price = market.quote.price
        if market.open_price is not None:
            daily_change = current_price - market.open_price
        else:
            daily_change = current_price * market.quote.percent_change_24h / Decimal("100")

        if market.history is not None:
            history = tuple(point for point in market.history if point.date >= start_date)
            synthetic = False
        else:
            history = self.synthesizer.synthesize(start_date, current_price, today)
            synthetic = True

        return BitcoinSnapshot(
            current_price=current_price,
            daily_change_usd=daily_change,
            price_history=history,
            history_is_synthetic=synthetic,
        )


def build_market_source(settings: AppSettings) -> MarketSource:
    if settings.upstream == "cryptocompare":
        if not settings.cryptocompare_api_key:
            msg = "cryptocompare_api_key must be configured for the cryptocompare upstream"
            raise ValueError(msg)
        client = CryptoCompareClient(
            api_key=settings.cryptocompare_api_key,
            base_url=settings.cryptocompare_base_url,
            timeout=settings.request_timeout,
        )
        return CryptoCompareMarketSource(client)

    return GatewayMarketSource(
        QuoteGatewayClient(base_url=settings.quote_gateway_url, timeout=settings.request_timeout)
    )


def build_service(settings: AppSettings, *, rng: random.Random | None = None) -> BitcoinPriceService:
    return BitcoinPriceService(
        source=build_market_source(settings),
        cache=TtlCache(ttl=timedelta(seconds=settings.cache_ttl_seconds)),
        synthesizer=HistorySynthesizer(anchor_prices=settings.anchor_prices, rng=rng),
    )


__all__ = ["BitcoinPriceService", "Failed", "FetchResult", "Ok", "build_market_source", "build_service"]
