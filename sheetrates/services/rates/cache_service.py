from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, Optional

from sheetrates.core.config import Settings, get_settings
from sheetrates.models.rates import RateTable
from .base import RateProvider, normalize_currency
from .providers import make_rate_provider

"""Rate cache and fetch client.

Purpose:
    Serve RateTables per base currency, hitting the provider at most once per
    base within the TTL (settings.rates_cache_ttl_seconds). Several sheet cells
    asking for conversions in quick succession then share one fetch.

Design:
    - RateCache is an explicitly owned object handed to the client, so tests
      and callers can share or isolate it.
    - Entries are replaced on refresh, never mutated; a stale entry is simply
      ignored until the next successful fetch overwrites it.
    - Each base has its own lock. The client holds it across check-and-fetch,
      so concurrent requests for the same base wait for a single fetch while
      other bases proceed in parallel.
    - Errors from the provider propagate unchanged; nothing is cached on
      failure.
"""

logger = logging.getLogger("sheetrates.rates")


@dataclass(frozen=True)
class CacheEntry:
    table: RateTable
    fetched_at: float
    base: str


class RateCache:
    """TTL-bound RateTable store keyed by base currency."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("cache ttl must be positive seconds")
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def lock_for(self, base: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(base)
            if lock is None:
                lock = self._locks[base] = threading.Lock()
            return lock

    def is_valid(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.fetched_at < self._ttl

    def get(self, base: str) -> Optional[RateTable]:
        """Return the cached table for ``base`` if it is still within the TTL."""
        with self._guard:
            entry = self._entries.get(base)
        if entry and self.is_valid(entry):
            return entry.table
        return None

    def put(self, base: str, table: RateTable) -> CacheEntry:
        entry = CacheEntry(table=table, fetched_at=self._clock(), base=base)
        with self._guard:
            self._entries[base] = entry
        return entry

    def invalidate(self, base: str) -> bool:
        with self._guard:
            return self._entries.pop(base, None) is not None

    def clear(self) -> int:
        with self._guard:
            count = len(self._entries)
            self._entries.clear()
            return count

    def snapshot(self) -> Dict[str, Dict[str, float | bool]]:
        """Age and validity per cached base, for diagnostics."""
        now = self._clock()
        with self._guard:
            entries = list(self._entries.values())
        return {
            e.base: {"age_seconds": round(now - e.fetched_at, 3), "valid": self.is_valid(e)}
            for e in entries
        }


class RateFetchClient:
    """getRates(base) with caching in front of a RateProvider."""

    def __init__(self, provider: RateProvider, cache: RateCache):
        self._provider = provider
        self._cache = cache

    @property
    def cache(self) -> RateCache:
        return self._cache

    @property
    def provider(self) -> RateProvider:
        return self._provider

    def get_rates(self, base_currency: str, *, force_refresh: bool = False) -> RateTable:
        base = normalize_currency(base_currency)
        with self._cache.lock_for(base):
            if not force_refresh:
                cached = self._cache.get(base)
                if cached is not None:
                    logger.debug("rate cache hit for %s", base)
                    return cached
            logger.debug("rate cache miss for %s; fetching via %s", base, self._provider.name)
            table = self._provider.fetch_rates(base)
            self._cache.put(base, table)
            logger.info("fetched %d rates for %s", len(table), base, extra={"base": base})
            return table

    def invalidate(self, base_currency: str) -> bool:
        return self._cache.invalidate(normalize_currency(base_currency))

    def clear(self) -> int:
        return self._cache.clear()

    def close(self) -> None:
        self._provider.close()


def build_rate_fetch_client(settings: Settings) -> RateFetchClient:
    provider = make_rate_provider(settings.rate_provider, settings)
    return RateFetchClient(provider, RateCache(settings.rates_cache_ttl_seconds))


# Singleton dependency helper used by FastAPI DI
@lru_cache
def get_rate_fetch_client() -> RateFetchClient:
    return build_rate_fetch_client(get_settings())
