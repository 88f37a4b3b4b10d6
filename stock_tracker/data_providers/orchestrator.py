"""
Quote Fetch Orchestrator

Public entry point of the quote client. Ties cache lookup, quota
admission, the rate-limited request queue and the provider adapter
together, and layers sequential batch fetching with progress on top.
"""
import inspect
from dataclasses import dataclass
from typing import Optional, Any, Callable, AsyncIterator

from loguru import logger

from stock_tracker.config import Settings
from stock_tracker.data_providers.adapters.base import BaseAdapter, QuoteResult
from stock_tracker.data_providers.cache_manager import QuoteCache, CacheConfig
from stock_tracker.data_providers.data_normalizer import canonicalize_symbol, is_valid_symbol
from stock_tracker.data_providers.quota_tracker import QuotaTracker, QuotaStatus
from stock_tracker.data_providers.rate_limiter import RequestQueue, RateLimitConfig
from stock_tracker.utils.exceptions import SymbolValidationError


QUOTA_EXCEEDED_ERROR = "quota exceeded"
QUOTA_SKIPPED_ERROR = "skipped due to daily quota limit"


@dataclass
class QuoteClientConfig:
    """Core options of the quote client (durations in seconds)."""
    cache_ttl_seconds: float = 300.0
    max_cache_entries: int = 100
    daily_request_limit: int = 250
    min_dispatch_interval_seconds: float = 1.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "QuoteClientConfig":
        return cls(
            cache_ttl_seconds=settings.QUOTE_CACHE_TTL_SECONDS,
            max_cache_entries=settings.QUOTE_CACHE_MAX_ENTRIES,
            daily_request_limit=settings.DAILY_REQUEST_LIMIT,
            min_dispatch_interval_seconds=settings.MIN_DISPATCH_INTERVAL_SECONDS,
        )


@dataclass(frozen=True)
class BatchResult:
    """One entry of a batch: the symbol as given plus its outcome."""
    symbol: str
    result: QuoteResult

    @property
    def success(self) -> bool:
        return self.result.success

    @property
    def error(self) -> Optional[str]:
        return self.result.error

    def to_dict(self) -> dict[str, Any]:
        return {"symbol": self.symbol, **self.result.to_dict()}


@dataclass(frozen=True)
class BatchProgress:
    """Progress event emitted after each attempted symbol of a batch."""
    current: int
    total: int
    percentage: int
    item: BatchResult
    quota_used: int = 0
    quota_limit: int = 0

    @property
    def symbol(self) -> str:
        return self.item.symbol


ProgressCallback = Callable[[BatchProgress], Any]


class QuoteFetchClient:
    """
    Quota-aware, rate-limited, cached quote client.

    This is the main interface for fetching prices. It coordinates:
    - Cache lookups and writes
    - Daily quota admission
    - FIFO dispatch with minimum spacing
    - Batch fetching with progress events

    Neither fetch_price() nor batch_fetch() raises; callers branch on
    QuoteResult.success.

    Usage:
        client = QuoteFetchClient(adapter, quota_tracker)
        result = await client.fetch_price("AAPL")
        results = await client.batch_fetch(["AAPL", "MSFT"], on_progress=print)
    """

    def __init__(
        self,
        adapter: BaseAdapter,
        quota: QuotaTracker,
        config: Optional[QuoteClientConfig] = None,
        cache: Optional[QuoteCache] = None,
        queue: Optional[RequestQueue] = None,
    ):
        self.config = config or QuoteClientConfig()
        self.adapter = adapter
        self.quota = quota
        self.cache = cache or QuoteCache(CacheConfig(
            ttl_seconds=self.config.cache_ttl_seconds,
            max_entries=self.config.max_cache_entries,
        ))
        self.queue = queue or RequestQueue(
            dispatch=self._dispatch,
            config=RateLimitConfig(
                min_dispatch_interval=self.config.min_dispatch_interval_seconds,
            ),
        )
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the provider adapter."""
        if self._initialized:
            return
        await self.adapter.initialize()
        self._initialized = True
        logger.info(f"Quote client initialized with provider {self.adapter.name}")

    async def close(self) -> None:
        """Wait for queued requests, then release the adapter."""
        await self.queue.join()
        await self.adapter.close()
        self._initialized = False

    async def __aenter__(self) -> "QuoteFetchClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ==================== Quote Operations ====================

    @staticmethod
    def validate_symbol(symbol: Any) -> bool:
        """Check the 1-10 alphanumeric character rule."""
        return is_valid_symbol(symbol)

    async def fetch_price(self, symbol: str) -> QuoteResult:
        """
        Get the current price for a symbol.

        Cache hit returns immediately; an exhausted quota returns a failed
        result without queueing; otherwise the request waits its turn in
        the queue.
        """
        try:
            symbol = canonicalize_symbol(symbol)
        except SymbolValidationError as e:
            logger.warning(e.message)
            return QuoteResult.failure(e.message, source=self.adapter.name)

        cached = self.cache.get(symbol)
        if cached is not None:
            logger.debug(f"Cache hit for quote: {symbol}")
            return cached

        if not self.quota.can_admit():
            logger.warning(f"Quota exceeded, not fetching {symbol}")
            return QuoteResult.failure(QUOTA_EXCEEDED_ERROR, source=self.adapter.name)

        return await self.queue.enqueue(symbol)

    async def _dispatch(self, symbol: str) -> QuoteResult:
        """
        Admission chain for one dequeued symbol.

        An earlier item in the queue may have cached this symbol or used up
        the quota while this one waited, so both are checked again here.
        """
        cached = self.cache.get(symbol)
        if cached is not None:
            logger.debug(f"Cache filled while {symbol} was queued")
            return cached

        if not self.quota.can_admit():
            logger.warning(f"Quota exceeded while {symbol} was queued")
            return QuoteResult.failure(QUOTA_EXCEEDED_ERROR, source=self.adapter.name)

        self.quota.record_request()
        result = await self.adapter.fetch(symbol)

        if result.success:
            self.cache.put(symbol, result)
        return result

    # ==================== Batch Operations ====================

    async def iter_batch(self, symbols: list[str]) -> AsyncIterator[BatchProgress]:
        """
        Fetch symbols one at a time, yielding a progress event after each.

        Only the first ``remaining`` symbols (today's quota, read once up
        front) are attempted; the rest are not yielded.
        """
        symbols = list(symbols)
        admitted = symbols[:self.quota.remaining]
        total = len(admitted)

        for index, symbol in enumerate(admitted, start=1):
            result = await self.fetch_price(symbol)
            status = self.quota.status()
            yield BatchProgress(
                current=index,
                total=total,
                percentage=round(index / total * 100),
                item=BatchResult(symbol=symbol, result=result),
                quota_used=status.used,
                quota_limit=status.limit,
            )

    async def batch_fetch(
        self,
        symbols: list[str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> list[BatchResult]:
        """
        Fetch many symbols sequentially.

        Returns one BatchResult per input symbol, in input order. Symbols
        beyond today's remaining quota get a synthesized failure.

        Args:
            symbols: Ordered symbols
            on_progress: Optional callable (or coroutine function) receiving
                a BatchProgress after each attempted symbol
        """
        symbols = list(symbols)
        results: list[BatchResult] = []

        async for progress in self.iter_batch(symbols):
            results.append(progress.item)
            if on_progress is not None:
                await self._notify(on_progress, progress)

        attempted = len(results)
        for symbol in symbols[attempted:]:
            results.append(BatchResult(
                symbol=symbol,
                result=QuoteResult.failure(QUOTA_SKIPPED_ERROR, source=self.adapter.name),
            ))

        succeeded = sum(1 for r in results if r.success)
        skipped = len(symbols) - attempted
        logger.info(
            f"Batch finished: {succeeded}/{len(symbols)} succeeded, {skipped} skipped (quota)"
        )
        return results

    @staticmethod
    async def _notify(callback: ProgressCallback, progress: BatchProgress) -> None:
        try:
            outcome = callback(progress)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.error(f"Error in batch progress callback: {e}")

    # ==================== Status & Monitoring ====================

    def get_quota_status(self) -> QuotaStatus:
        return self.quota.status()

    def get_cache_stats(self) -> dict[str, Any]:
        return self.cache.get_stats()

    def clear_cache(self) -> None:
        self.cache.clear()

    def get_status(self) -> dict[str, Any]:
        """Get comprehensive status of the client."""
        return {
            "initialized": self._initialized,
            "provider": self.adapter.status.to_dict(),
            "quota": self.quota.get_stats(),
            "cache": self.cache.get_stats(),
            "queue": self.queue.get_stats(),
        }
