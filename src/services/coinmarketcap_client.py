from __future__ import annotations

import logging

import requests

from domain.market import CurrentQuote

from .http import JsonHttpClient, require_decimal
from .upstream_errors import PayloadShapeError, UpstreamStatusError

logger = logging.getLogger(__name__)

SOURCE = "CoinMarketCap"


class CoinMarketCapClient:
    """Latest BTC quote from the CoinMarketCap pro API. Holds the provider credential."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://pro-api.coinmarketcap.com/v1",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            msg = "api_key must be provided"
            raise ValueError(msg)

        self._http = JsonHttpClient(
            base_url=base_url,
            name=SOURCE,
            headers={"X-CMC_PRO_API_KEY": api_key, "Accept": "application/json"},
            timeout=timeout,
            session=session,
        )

    def get_latest_quote(self, *, symbol: str = "BTC", convert: str = "USD") -> CurrentQuote:
        symbol = symbol.upper()
        convert = convert.upper()
        logger.info("Fetching %s/%s quote from %s", symbol, convert, SOURCE)
        payload = self._http.get("/cryptocurrency/quotes/latest", params={"symbol": symbol, "convert": convert})

        status = payload.get("status")
        if isinstance(status, dict) and status.get("error_code"):
            message = status.get("error_message") or "unknown error"
            raise UpstreamStatusError(f"{SOURCE} API error: {message}", payload=payload)

        try:
            quote = payload["data"][symbol]["quote"][convert]
        except (KeyError, TypeError) as exc:
            raise PayloadShapeError(f"Unexpected {SOURCE} response format", payload=payload) from exc
        if not isinstance(quote, dict):
            raise PayloadShapeError(f"Unexpected {SOURCE} response format", payload=payload)

        return CurrentQuote(
            price=require_decimal(quote, "price", source=SOURCE),
            percent_change_24h=require_decimal(quote, "percent_change_24h", source=SOURCE),
        )


__all__ = ["CoinMarketCapClient"]
