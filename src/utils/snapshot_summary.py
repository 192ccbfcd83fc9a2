from __future__ import annotations

from domain.holding import Holding, value_holding
from domain.market import BitcoinSnapshot

from .formatting import format_percent, format_signed_usd, format_usd


def render_snapshot(snapshot: BitcoinSnapshot, holding: Holding, *, stale: bool = False) -> list[str]:
    valuation = value_holding(holding, snapshot)
    lines = [
        f"BTC price:       {format_usd(snapshot.current_price)}",
        f"24h change:      {format_signed_usd(snapshot.daily_change_usd)}",
        f"Holding value:   {format_usd(valuation.current_value)} ({holding.amount_btc} BTC)",
        f"Holding 24h:     {format_signed_usd(valuation.daily_change)}",
        f"Profit/loss:     {format_signed_usd(valuation.profit_loss)} ({format_percent(valuation.profit_loss_pct)})",
    ]

    history = snapshot.price_history
    if history:
        low = min(point.price for point in history)
        high = max(point.price for point in history)
        label = "History (synthetic approximation)" if snapshot.history_is_synthetic else "History"
        lines.append(
            f"{label}: {len(history)} days from {history[0].date.isoformat()}, "
            f"low {format_usd(low)}, high {format_usd(high)}"
        )
    else:
        lines.append("History: none available")

    if stale:
        lines.append("Latest refresh failed, showing previous data")
    return lines


def print_snapshot(snapshot: BitcoinSnapshot, holding: Holding, *, stale: bool = False) -> None:
    for line in render_snapshot(snapshot, holding, stale=stale):
        print(line)
