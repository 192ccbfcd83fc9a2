from __future__ import annotations

import requests

from domain.market import CurrentQuote

from .http import JsonHttpClient, require_decimal
from .upstream_errors import PayloadShapeError


class QuoteGatewayClient:
    """Client for the quote gateway's ``GET /api/crypto/price`` -> ``{price, change}``."""

    PRICE_PATH = "/api/crypto/price"

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._http = JsonHttpClient(base_url=base_url, name="Quote gateway", timeout=timeout, session=session)

    def fetch_current_quote(self) -> CurrentQuote:
        payload = self._http.get(self.PRICE_PATH)
        price = require_decimal(payload, "price", source="Quote gateway")
        change = require_decimal(payload, "change", source="Quote gateway")
        if price < 0:
            raise PayloadShapeError("Quote gateway returned a negative price", payload=payload)
        return CurrentQuote(price=price, percent_change_24h=change)


__all__ = ["QuoteGatewayClient"]
