"""
Stock Tracker - Test Configuration
Shared fixtures and test configuration.
"""
import asyncio
import os
import sys
from datetime import date
from decimal import Decimal
from typing import Optional
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment
os.environ["APP_ENV"] = "testing"
os.environ["QUOTA_STORE"] = "memory"
os.environ["FINNHUB_API_KEY"] = "test-finnhub-key"

from stock_tracker.data_providers.adapters.base import (  # noqa: E402
    BaseAdapter,
    ProviderConfig,
    QuoteResult,
)
from stock_tracker.db.kv_store import InMemoryKeyValueStore  # noqa: E402


# =========================
# Time Fixtures
# =========================

class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeToday:
    """date.today() replacement."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def today() -> FakeToday:
    return FakeToday(date(2026, 10, 19))


# =========================
# Storage Fixtures
# =========================

@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


# =========================
# Provider Fixtures
# =========================

def make_quote(price: str = "150.25", change: str = "1.25", change_percent: str = "0.84") -> QuoteResult:
    return QuoteResult(
        success=True,
        source="fake",
        price=Decimal(price),
        change=Decimal(change),
        change_percent=Decimal(change_percent),
        currency="USD",
    )


class FakeAdapter(BaseAdapter):
    """Adapter that records calls instead of touching the network."""

    def __init__(self, results: Optional[dict[str, QuoteResult]] = None, delay: float = 0.0):
        super().__init__(ProviderConfig(name="fake", api_key="key"))
        self.results = results or {}
        self.delay = delay
        self.calls: list[str] = []
        self.errors: dict[str, Exception] = {}
        self.in_flight = 0
        self.max_in_flight = 0
        self.initialized = False
        self.closed = False

    async def initialize(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.closed = True

    async def fetch(self, symbol: str) -> QuoteResult:
        self.calls.append(symbol)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if symbol in self.errors:
                raise self.errors[symbol]
            return self.results.get(symbol, make_quote())
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def adapter_factory():
    """FakeAdapter class, for tests that need custom results or delays."""
    return FakeAdapter


@pytest.fixture
def quote_factory():
    return make_quote


@pytest.fixture
def sample_quote() -> QuoteResult:
    return make_quote()


@pytest.fixture
def finnhub_payload() -> dict:
    """Finnhub /quote response body."""
    return {
        "c": 178.723,
        "d": 2.345,
        "dp": 1.3296,
        "h": 179.5,
        "l": 176.1,
        "o": 176.5,
        "pc": 176.378,
        "t": 1760990400,
    }
