"""
Rate Limiter

Serializes quote requests into a single FIFO queue drained by one task,
with a fixed minimum delay between dispatches. At most one dispatch is in
flight at any time, which is what bounds the outbound request rate.
"""
import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Optional, Callable, Awaitable, Any
from loguru import logger

from stock_tracker.data_providers.adapters.base import QuoteResult


Dispatcher = Callable[[str], Awaitable[QuoteResult]]


@dataclass
class RateLimitConfig:
    """Configuration for request spacing."""
    min_dispatch_interval: float = 1.0  # seconds between dispatches


@dataclass
class QueueItem:
    """A queued request and the future its caller awaits."""
    symbol: str
    future: asyncio.Future


class RequestQueue:
    """
    FIFO request queue with a single drain loop.

    Idle -> Draining when an item is enqueued and no drain is running;
    Draining -> Idle once the queue is empty after a dispatch.

    Usage:
        queue = RequestQueue(dispatch=fetch_and_cache)
        result = await queue.enqueue("AAPL")
    """

    def __init__(
        self,
        dispatch: Dispatcher,
        config: Optional[RateLimitConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config or RateLimitConfig()
        self._dispatch = dispatch
        self._sleep = sleep
        self._queue: deque[QueueItem] = deque()
        self._draining = False
        self._drain_task: Optional[asyncio.Task] = None
        self._dispatched = 0
        self._failures = 0

    @property
    def pending(self) -> int:
        """Number of items waiting to be dispatched."""
        return len(self._queue)

    @property
    def is_draining(self) -> bool:
        return self._draining

    def enqueue(self, symbol: str) -> "asyncio.Future[QuoteResult]":
        """
        Append a request and start draining if idle.

        Returns:
            Future resolved with the item's QuoteResult; it never carries an exception
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        self._queue.append(QueueItem(symbol=symbol, future=future))
        logger.debug(f"Queued {symbol} ({len(self._queue)} pending)")

        if not self._draining:
            self._draining = True
            self._drain_task = loop.create_task(self._drain())

        return future

    async def join(self) -> None:
        """Wait until the current drain (if any) finishes."""
        if self._drain_task is not None:
            await asyncio.shield(self._drain_task)

    async def _drain(self) -> None:
        try:
            while self._queue:
                item = self._queue.popleft()
                result = await self._run_one(item.symbol)

                if not item.future.done():
                    item.future.set_result(result)

                # Spacing only matters if something is waiting behind us
                if self._queue:
                    await self._sleep(self.config.min_dispatch_interval)
        finally:
            self._draining = False

    async def _run_one(self, symbol: str) -> QuoteResult:
        self._dispatched += 1
        logger.debug(f"Dispatching {symbol}")
        try:
            return await self._dispatch(symbol)
        except Exception as e:
            self._failures += 1
            logger.error(f"Dispatch failed for {symbol}: {e}")
            return QuoteResult.failure(str(e) or "Failed to fetch stock data")

    def get_stats(self) -> dict[str, Any]:
        """Get queue statistics."""
        return {
            "pending": len(self._queue),
            "draining": self._draining,
            "dispatched": self._dispatched,
            "failures": self._failures,
            "min_dispatch_interval": self.config.min_dispatch_interval,
        }
