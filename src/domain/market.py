from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class PricePoint:
    """One daily sample of the BTC/USD price."""

    date: date
    price: Decimal


@dataclass(frozen=True)
class CurrentQuote:
    price: Decimal
    percent_change_24h: Decimal


@dataclass(frozen=True)
class BitcoinSnapshot:
    """Current price, 24h move in USD and daily history, ascending by date.

    ``history_is_synthetic`` is set when the upstream had no history endpoint and
    the series was interpolated; such a series is an approximation only.
    """

    current_price: Decimal
    daily_change_usd: Decimal
    price_history: tuple[PricePoint, ...]
    history_is_synthetic: bool = False


def days_between(start_date: date, today: date) -> int:
    """Calendar days from ``start_date`` to ``today``, never below one."""
    return max(1, (today - start_date).days)


__all__ = ["BitcoinSnapshot", "CurrentQuote", "PricePoint", "days_between"]
