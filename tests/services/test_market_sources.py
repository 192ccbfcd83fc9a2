from __future__ import annotations

import threading
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import cast
from unittest.mock import Mock

import pytest

from domain.market import CurrentQuote, PricePoint
from services.cryptocompare_client import Candle, CryptoCompareClient
from services.market_sources import CryptoCompareMarketSource, GatewayMarketSource
from services.quote_gateway_client import QuoteGatewayClient
from services.upstream_errors import ErrorKind, PartialUpstreamFailure, TransportFailure


def _candle(day: int, *, open_: str | None = None, close: str = "0") -> Candle:
    return Candle(
        timestamp=datetime(2024, 8, day, tzinfo=timezone.utc),
        open=Decimal(open_) if open_ is not None else None,
        close=Decimal(close),
    )


class _StubCryptoCompareClient:
    def __init__(self, *, barrier: threading.Barrier | None = None) -> None:
        self.barrier = barrier
        self.daily_error: Exception | None = None
        self.daily_limits: list[int] = []

    def _rendezvous(self) -> None:
        if self.barrier is not None:
            self.barrier.wait()

    def get_spot_price(self) -> Decimal:
        self._rendezvous()
        return Decimal("60000")

    def get_hourly_candles(self, *, limit: int = 24) -> list[Candle]:
        self._rendezvous()
        return [_candle(11, open_="59900", close="60100"), _candle(10, open_="59000", close="59900")]

    def get_daily_candles(self, *, limit: int) -> list[Candle]:
        self.daily_limits.append(limit)
        self._rendezvous()
        if self.daily_error is not None:
            raise self.daily_error
        return [_candle(11, close="60000"), _candle(9, close="58000"), _candle(10, close="59000")]


def test_gateway_source_returns_quote_without_history() -> None:
    client = Mock(spec=QuoteGatewayClient)
    client.fetch_current_quote.return_value = CurrentQuote(price=Decimal("1"), percent_change_24h=Decimal("2"))
    source = GatewayMarketSource(client)

    market = source.fetch_market_data(date(2024, 1, 1), date(2024, 8, 11))

    assert market.quote.price == Decimal("1")
    assert market.open_price is None
    assert market.history is None


def test_cryptocompare_source_issues_requests_concurrently() -> None:
    # Each call blocks until all three are in flight; sequential calls would time out the barrier.
    stub = _StubCryptoCompareClient(barrier=threading.Barrier(3, timeout=5))
    source = CryptoCompareMarketSource(cast(CryptoCompareClient, stub))

    market = source.fetch_market_data(date(2024, 8, 9), date(2024, 8, 11))

    assert market.quote.price == Decimal("60000")
    assert market.open_price == Decimal("59000")
    assert market.history == (
        PricePoint(date=date(2024, 8, 9), price=Decimal("58000")),
        PricePoint(date=date(2024, 8, 10), price=Decimal("59000")),
        PricePoint(date=date(2024, 8, 11), price=Decimal("60000")),
    )
    assert stub.daily_limits == [2]


def test_cryptocompare_source_derives_percent_change_from_open() -> None:
    source = CryptoCompareMarketSource(cast(CryptoCompareClient, _StubCryptoCompareClient()))

    market = source.fetch_market_data(date(2024, 8, 9), date(2024, 8, 11))

    assert market.quote.percent_change_24h == (Decimal("1000") / Decimal("59000")) * Decimal("100")


def test_cryptocompare_source_fails_when_one_request_fails() -> None:
    stub = _StubCryptoCompareClient()
    stub.daily_error = TransportFailure("timeout")
    source = CryptoCompareMarketSource(cast(CryptoCompareClient, stub))

    with pytest.raises(PartialUpstreamFailure) as exc_info:
        source.fetch_market_data(date(2024, 8, 9), date(2024, 8, 11))

    error = exc_info.value
    assert error.kind is ErrorKind.PARTIAL_UPSTREAM_FAILURE
    assert error.failed_request == "daily history"
    assert error.cause_kind is ErrorKind.TRANSPORT_FAILURE
    assert error.__cause__ is stub.daily_error
