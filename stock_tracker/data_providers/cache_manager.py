"""
Cache Manager

In-process quote cache with a time-to-live and a bounded entry count.
Eviction is by insertion order, not by recency of access.
"""
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Any, Callable
from loguru import logger

from stock_tracker.data_providers.adapters.base import QuoteResult


@dataclass
class CacheConfig:
    """Cache configuration."""
    ttl_seconds: float = 300.0      # Quotes: 5 minutes
    max_entries: int = 100


@dataclass
class CacheEntry:
    """One cached quote."""
    symbol: str
    result: QuoteResult
    fetched_at: float


class QuoteCache:
    """
    Symbol -> last fetched QuoteResult.

    Features:
    - Lazy expiry: stale entries are dropped when read
    - Oldest-inserted entry evicted once max_entries is exceeded
    - Statistics tracking
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or CacheConfig()
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "evictions": 0,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, symbol: str) -> bool:
        return symbol.strip().upper() in self._entries

    def get(self, symbol: str) -> Optional[QuoteResult]:
        """Get a cached result, None on miss or expiry."""
        key = symbol.strip().upper()
        entry = self._entries.get(key)

        if entry is None:
            self._stats["misses"] += 1
            return None

        if self._clock() - entry.fetched_at > self.config.ttl_seconds:
            del self._entries[key]
            self._stats["misses"] += 1
            logger.debug(f"Cache entry expired for {key}")
            return None

        self._stats["hits"] += 1
        return entry.result

    def put(self, symbol: str, result: QuoteResult) -> None:
        """Insert or overwrite a result; an overwrite counts as a fresh insertion."""
        key = symbol.strip().upper()

        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(symbol=key, result=result, fetched_at=self._clock())
        self._stats["sets"] += 1

        if len(self._entries) > self.config.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self._stats["evictions"] += 1
            logger.debug(f"Cache full, evicted oldest entry {evicted}")

    def clear(self) -> None:
        """Drop every entry."""
        count = len(self._entries)
        self._entries.clear()
        logger.info(f"Cleared {count} cache entries")

    # ==================== Cache Stats ====================

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total = self._stats["hits"] + self._stats["misses"]
        hit_rate = self._stats["hits"] / total if total > 0 else 0

        return {
            **self._stats,
            "size": len(self._entries),
            "max_entries": self.config.max_entries,
            "ttl_seconds": self.config.ttl_seconds,
            "entries": list(self._entries.keys()),
            "total_requests": total,
            "hit_rate": round(hit_rate * 100, 2),
        }

    def reset_stats(self) -> None:
        """Reset cache statistics."""
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "evictions": 0,
        }
