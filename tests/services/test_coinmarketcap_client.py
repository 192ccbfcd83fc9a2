from __future__ import annotations

from decimal import Decimal
from typing import Any
from unittest.mock import Mock

import pytest

from services.coinmarketcap_client import CoinMarketCapClient
from services.upstream_errors import PayloadShapeError, UpstreamStatusError


def _mock_response(payload: Any) -> Mock:
    response = Mock()
    response.status_code = 200
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def _payload(price: Any = 60000.12, change: Any = -1.5) -> dict[str, Any]:
    return {
        "status": {"error_code": 0, "error_message": None},
        "data": {"BTC": {"quote": {"USD": {"price": price, "percent_change_24h": change}}}},
    }


def test_get_latest_quote_parses_nested_quote() -> None:
    session = Mock()
    session.request.return_value = _mock_response(_payload())
    client = CoinMarketCapClient(api_key="cmc-key", session=session)

    quote = client.get_latest_quote()

    assert quote.price == Decimal("60000.12")
    assert quote.percent_change_24h == Decimal("-1.5")
    args, kwargs = session.request.call_args
    assert args[1] == "https://pro-api.coinmarketcap.com/v1/cryptocurrency/quotes/latest"
    assert kwargs["params"] == {"symbol": "BTC", "convert": "USD"}
    assert kwargs["headers"]["X-CMC_PRO_API_KEY"] == "cmc-key"


def test_api_error_code_raises() -> None:
    session = Mock()
    session.request.return_value = _mock_response({"status": {"error_code": 1002, "error_message": "API key missing."}})
    client = CoinMarketCapClient(api_key="cmc-key", session=session)

    with pytest.raises(UpstreamStatusError, match="API key missing"):
        client.get_latest_quote()


@pytest.mark.parametrize(
    "payload",
    [
        {"status": {"error_code": 0}, "data": {}},
        {"status": {"error_code": 0}, "data": {"BTC": {"quote": None}}},
        _payload(price=None),
        _payload(change="n/a"),
    ],
)
def test_unexpected_format_raises(payload: dict[str, Any]) -> None:
    session = Mock()
    session.request.return_value = _mock_response(payload)
    client = CoinMarketCapClient(api_key="cmc-key", session=session)

    with pytest.raises(PayloadShapeError):
        client.get_latest_quote()
