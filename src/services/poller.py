from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Callable

from domain.market import BitcoinSnapshot

from .bitcoin_service import BitcoinPriceService, Failed
from .upstream_errors import ErrorKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollerState:
    """What the display layer knows.

    ``snapshot is None`` means nothing has loaded yet; a set ``last_error`` next to a
    snapshot means the latest refresh failed and the snapshot is the previous one.
    """

    snapshot: BitcoinSnapshot | None = None
    last_error: ErrorKind | None = None
    last_success_at: datetime | None = None

    @property
    def has_data(self) -> bool:
        return self.snapshot is not None

    @property
    def is_stale(self) -> bool:
        return self.snapshot is not None and self.last_error is not None


class PricePoller:
    """Periodically refreshes bitcoin data; overlapping refreshes are dropped, not queued."""

    def __init__(
        self,
        service: BitcoinPriceService,
        *,
        start_date: date,
        interval_seconds: float = 30.0,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        if interval_seconds <= 0:
            msg = "interval_seconds must be > 0"
            raise ValueError(msg)

        self.service = service
        self.start_date = start_date
        self.interval_seconds = interval_seconds
        self.state = PollerState()
        self._clock = clock
        self._in_flight = threading.Lock()

    def refresh(self) -> bool:
        """Run one fetch cycle. Returns False when skipped because another is in flight."""
        if not self._in_flight.acquire(blocking=False):
            logger.debug("Refresh already in flight, skipping tick")
            return False
        try:
            logger.info("Fetching bitcoin data at %s", self._clock().isoformat())
            result = self.service.get_bitcoin_data(self.start_date)
            if isinstance(result, Failed):
                self.state = replace(self.state, last_error=result.error)
            else:
                self.state = PollerState(snapshot=result.data, last_error=None, last_success_at=self._clock())
        finally:
            self._in_flight.release()
        return True

    def run(self, stop_event: threading.Event, on_update: Callable[[PollerState], None] | None = None) -> None:
        while not stop_event.is_set():
            if self.refresh() and on_update is not None:
                on_update(self.state)
            stop_event.wait(self.interval_seconds)


__all__ = ["PollerState", "PricePoller"]
