from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .market import BitcoinSnapshot


@dataclass(frozen=True)
class Holding:
    amount_btc: Decimal
    initial_investment: Decimal

    def __post_init__(self) -> None:
        if self.amount_btc < 0:
            msg = "amount_btc must be >= 0"
            raise ValueError(msg)
        if self.initial_investment < 0:
            msg = "initial_investment must be >= 0"
            raise ValueError(msg)


@dataclass(frozen=True)
class HoldingValuation:
    current_value: Decimal
    daily_change: Decimal
    profit_loss: Decimal
    profit_loss_pct: Decimal | None


def value_holding(holding: Holding, snapshot: BitcoinSnapshot) -> HoldingValuation:
    """Value ``holding`` at the snapshot price; percentage is None without an initial investment."""
    current_value = holding.amount_btc * snapshot.current_price
    profit_loss = current_value - holding.initial_investment
    profit_loss_pct: Decimal | None = None
    if holding.initial_investment > 0:
        profit_loss_pct = profit_loss / holding.initial_investment * Decimal("100")

    return HoldingValuation(
        current_value=current_value,
        daily_change=holding.amount_btc * snapshot.daily_change_usd,
        profit_loss=profit_loss,
        profit_loss_pct=profit_loss_pct,
    )


__all__ = ["Holding", "HoldingValuation", "value_holding"]
