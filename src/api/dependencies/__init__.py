from fastapi import Request

from services.coinmarketcap_client import CoinMarketCapClient


def get_quote_client(request: Request) -> CoinMarketCapClient:
    client: CoinMarketCapClient = request.app.state.quote_client
    return client
