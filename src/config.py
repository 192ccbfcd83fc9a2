from __future__ import annotations

from datetime import date
from decimal import Decimal
from functools import cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    upstream: Literal["gateway", "cryptocompare"] = "gateway"
    quote_gateway_url: str = "http://localhost:3001"
    cryptocompare_base_url: str = "https://min-api.cryptocompare.com/data"
    cryptocompare_api_key: str | None = None
    coinmarketcap_base_url: str = "https://pro-api.coinmarketcap.com/v1"
    coinmarketcap_api_key: str | None = None
    request_timeout: float = 10.0

    cache_ttl_seconds: int = Field(default=600, gt=0)
    poll_interval_seconds: float = Field(default=30.0, gt=0)

    amount_of_bitcoin: Decimal = Decimal("0")
    initial_investment: Decimal = Decimal("0")
    start_date: date = date(2023, 8, 11)
    # Leading anchors for synthesized history: reference price first, then coarse quarterly levels.
    anchor_prices: list[Decimal] = Field(default_factory=list)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@cache
def config() -> AppSettings:
    return AppSettings()
