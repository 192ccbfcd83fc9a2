from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Sequence

from domain.market import PricePoint, days_between


class HistorySynthesizer:
    """Builds a plausible daily BTC series when the upstream has no history endpoint.

    The series runs from ``start_date`` to today and ends at the live price. With anchor
    prices configured, each day's base price is linearly interpolated between anchors
    (the configured ones followed by the current price) and perturbed by up to
    ``noise`` of the base. Without anchors the series is flat at the current price.

    This is not real market data and must be presented as an approximation.
    """

    def __init__(
        self,
        *,
        anchor_prices: Sequence[Decimal] = (),
        noise: Decimal = Decimal("0.02"),
        rng: random.Random | None = None,
    ) -> None:
        if any(price < 0 for price in anchor_prices):
            msg = "anchor_prices must be >= 0"
            raise ValueError(msg)
        if not Decimal("0") <= noise < Decimal("1"):
            msg = "noise must be within [0, 1)"
            raise ValueError(msg)

        self.anchor_prices = tuple(anchor_prices)
        self.noise = noise
        self._rng = rng or random.Random()

    @property
    def is_flat(self) -> bool:
        return not self.anchor_prices

    def synthesize(self, start_date: date, current_price: Decimal, today: date) -> tuple[PricePoint, ...]:
        if start_date > today:
            msg = "start_date must not be after today"
            raise ValueError(msg)
        if current_price < 0:
            msg = "current_price must be >= 0"
            raise ValueError(msg)

        total_days = days_between(start_date, today)
        if self.is_flat:
            return tuple(PricePoint(date=start_date + timedelta(days=i), price=current_price) for i in range(total_days))

        anchors = (*self.anchor_prices, current_price)
        points: list[PricePoint] = []
        for i in range(total_days):
            day = start_date + timedelta(days=i)
            if i == total_days - 1:
                points.append(PricePoint(date=day, price=current_price))
                continue
            progress = Decimal(i) / Decimal(total_days - 1)
            base = self.base_price(anchors, progress)
            points.append(PricePoint(date=day, price=max(Decimal("0"), base + self._perturbation(base))))
        return tuple(points)

    @staticmethod
    def base_price(anchors: Sequence[Decimal], progress: Decimal) -> Decimal:
        """Linear interpolation across ``anchors`` at ``progress`` in [0, 1]."""
        if len(anchors) == 1:
            return anchors[0]
        position = progress * (len(anchors) - 1)
        segment = min(int(position), len(anchors) - 2)
        fraction = position - segment
        start, end = anchors[segment], anchors[segment + 1]
        return start + (end - start) * fraction

    def _perturbation(self, base: Decimal) -> Decimal:
        factor = Decimal(str(self._rng.uniform(-1.0, 1.0))) * self.noise
        return base * factor


__all__ = ["HistorySynthesizer"]
