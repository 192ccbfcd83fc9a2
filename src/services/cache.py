from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


class CacheKey(StrEnum):
    PRICE_DATA = "priceData"
    BITCOIN_DATA = "bitcoinData"


@dataclass(frozen=True)
class CacheSlot(Generic[V]):
    """Typed handle for one cache key, so each slot has a known value type."""

    key: CacheKey


@dataclass(frozen=True)
class _CacheEntry(Generic[V]):
    value: V
    stored_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TtlCache:
    """In-memory cache with one fixed TTL; expired entries are evicted on read."""

    def __init__(self, *, ttl: timedelta, clock: Callable[[], datetime] = _utc_now) -> None:
        if ttl <= timedelta(0):
            msg = "ttl must be positive"
            raise ValueError(msg)

        self.ttl = ttl
        self._clock = clock
        self._entries: dict[CacheKey, _CacheEntry[Any]] = {}
        self._lock = threading.Lock()

    def get(self, slot: CacheSlot[V]) -> V | None:
        with self._lock:
            entry = self._entries.get(slot.key)
            if entry is None:
                return None
            if self._clock() - entry.stored_at > self.ttl:
                logger.debug("Cache expired for %s", slot.key)
                del self._entries[slot.key]
                return None
            logger.debug("Cache hit for %s", slot.key)
            value: V = entry.value
            return value

    def set(self, slot: CacheSlot[V], value: V) -> None:
        with self._lock:
            logger.debug("Setting cache for %s", slot.key)
            self._entries[slot.key] = _CacheEntry(value=value, stored_at=self._clock())

    def __contains__(self, key: CacheKey) -> bool:
        with self._lock:
            return key in self._entries


__all__ = ["CacheKey", "CacheSlot", "TtlCache"]
