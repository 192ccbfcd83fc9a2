from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

import requests

from domain.market import PricePoint

from .http import JsonHttpClient, optional_decimal, require_decimal, require_mapping
from .upstream_errors import PayloadShapeError, UpstreamStatusError

SOURCE = "CryptoCompare"


@dataclass(frozen=True)
class Candle:
    timestamp: datetime
    open: Decimal | None
    close: Decimal


class CryptoCompareClient:
    """BTC/USD spot price plus hourly and daily candles from the CryptoCompare data API."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://min-api.cryptocompare.com/data",
        timeout: float = 10.0,
        session: requests.Session | None = None,
        base_symbol: str = "BTC",
        quote_symbol: str = "USD",
    ) -> None:
        if not api_key:
            msg = "api_key must be provided"
            raise ValueError(msg)

        self.base_symbol = base_symbol.upper()
        self.quote_symbol = quote_symbol.upper()
        self._http = JsonHttpClient(
            base_url=base_url,
            name=SOURCE,
            headers={"authorization": f"Apikey {api_key}"},
            timeout=timeout,
            session=session,
        )

    def get_spot_price(self) -> Decimal:
        payload = self._http.get("/price", params={"fsym": self.base_symbol, "tsyms": self.quote_symbol})
        self._raise_for_provider_error(payload)
        price = require_decimal(payload, self.quote_symbol, source=SOURCE)
        if price < 0:
            raise PayloadShapeError(f"{SOURCE} returned a negative price", payload=payload)
        return price

    def get_hourly_candles(self, *, limit: int = 24) -> list[Candle]:
        return self._get_candles("/v2/histohour", limit=limit)

    def get_daily_candles(self, *, limit: int) -> list[Candle]:
        return self._get_candles("/v2/histoday", limit=limit)

    def _get_candles(self, path: str, *, limit: int) -> list[Candle]:
        if limit <= 0:
            msg = "limit must be > 0"
            raise ValueError(msg)

        params = {"fsym": self.base_symbol, "tsym": self.quote_symbol, "limit": limit}
        payload = self._http.get(path, params=params)
        self._raise_for_provider_error(payload)
        data = require_mapping(payload, "Data", source=SOURCE)
        entries = data.get("Data")
        if not isinstance(entries, list):
            raise PayloadShapeError(f"{SOURCE} payload missing 'Data.Data' list", payload=payload)
        return [self._parse_candle(entry) for entry in entries]

    @staticmethod
    def _parse_candle(entry: Any) -> Candle:
        if not isinstance(entry, dict):
            raise PayloadShapeError(f"{SOURCE} candle is not an object", payload=entry)
        time_raw = entry.get("time")
        if time_raw is None or isinstance(time_raw, bool) or not isinstance(time_raw, (int, float)):
            raise PayloadShapeError(f"{SOURCE} candle missing numeric 'time'", payload=entry)

        close = require_decimal(entry, "close", source=SOURCE)
        if close < 0:
            raise PayloadShapeError(f"{SOURCE} candle has a negative close", payload=entry)

        return Candle(
            timestamp=datetime.fromtimestamp(int(time_raw), tz=timezone.utc),
            open=optional_decimal(entry, "open", source=SOURCE),
            close=close,
        )

    @staticmethod
    def _raise_for_provider_error(payload: dict[str, Any]) -> None:
        # Provider errors come back as HTTP 200 with Response == "Error".
        if payload.get("Response") == "Error":
            raise UpstreamStatusError(str(payload.get("Message") or f"{SOURCE} error"), payload=payload)


def candles_to_history(candles: Iterable[Candle]) -> tuple[PricePoint, ...]:
    """Daily closes keyed by UTC calendar date, sorted ascending."""
    points = [PricePoint(date=candle.timestamp.date(), price=candle.close) for candle in candles]
    return tuple(sorted(points, key=lambda point: point.date))


__all__ = ["Candle", "CryptoCompareClient", "candles_to_history"]
