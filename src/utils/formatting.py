from __future__ import annotations

from decimal import Decimal


def format_usd(value: Decimal) -> str:
    cents = value.quantize(Decimal("0.01"))
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents):,.2f}"


def format_signed_usd(value: Decimal) -> str:
    formatted = format_usd(value)
    return formatted if value < 0 else f"+{formatted}"


def format_percent(value: Decimal | None) -> str:
    if value is None:
        return "n/a"
    rounded = value.quantize(Decimal("0.01"))
    # Avoid "-0.00%" for tiny negative values.
    if rounded == 0:
        rounded = abs(rounded)
    return f"{rounded:+.2f}%"
