"""
Base Provider Adapter Interface

Defines the abstract interface that quote provider adapters must implement
and the normalized result shape every adapter returns.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Any
from loguru import logger


@dataclass
class ProviderConfig:
    """Configuration for a quote provider."""
    name: str
    api_key: Optional[str] = None
    base_url: str = ""

    # Timeouts
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class QuoteResult:
    """
    Normalized outcome of one price fetch.

    Callers branch on ``success``; failed results carry ``error`` and no
    price data.
    """
    success: bool
    source: str = ""
    price: Optional[Decimal] = None
    change: Optional[Decimal] = None
    change_percent: Optional[Decimal] = None
    currency: Optional[str] = None
    error: Optional[str] = None

    # Day range
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    day_open: Optional[Decimal] = None
    previous_close: Optional[Decimal] = None
    volume: Optional[int] = None
    timestamp: Optional[datetime] = None

    @classmethod
    def failure(cls, error: str, source: str = "") -> "QuoteResult":
        """Build a failed result."""
        return cls(success=False, source=source, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "price": _to_float(self.price),
            "change": _to_float(self.change),
            "change_percent": _to_float(self.change_percent),
            "currency": self.currency,
            "source": self.source,
            "error": self.error,
            "day_high": _to_float(self.day_high),
            "day_low": _to_float(self.day_low),
            "day_open": _to_float(self.day_open),
            "previous_close": _to_float(self.previous_close),
            "volume": self.volume,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


def _to_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


@dataclass
class ProviderStatus:
    """Status information for a provider."""
    name: str
    is_healthy: bool = True
    last_success: Optional[datetime] = None
    last_error: Optional[datetime] = None
    last_error_message: Optional[str] = None
    error_count: int = 0
    success_count: int = 0
    avg_latency_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "is_healthy": self.is_healthy,
            "last_success": self.last_success.isoformat() if self.last_success else None,
            "last_error": self.last_error.isoformat() if self.last_error else None,
            "last_error_message": self.last_error_message,
            "error_count": self.error_count,
            "success_count": self.success_count,
            "avg_latency_ms": round(self.avg_latency_ms, 2),
        }


class ProviderError(Exception):
    """Base exception for provider errors."""
    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"[{provider}] {message}")


class TransportError(ProviderError):
    """Network failure or non-2xx response."""
    def __init__(self, provider: str, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(provider, message)


class RateLimitError(TransportError):
    """Provider answered 429."""
    def __init__(self, provider: str, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        message = "Rate limit exceeded"
        if retry_after is not None:
            message += f". Retry after: {retry_after}s"
        super().__init__(provider, message, status=429)


class AuthenticationError(TransportError):
    """Provider rejected the access token."""
    def __init__(self, provider: str, message: str = "Authentication failed"):
        super().__init__(provider, message, status=401)


class DataNotAvailableError(ProviderError):
    """Well-formed response without usable price data."""
    def __init__(self, provider: str, symbol: str, reason: str = "no price data"):
        self.symbol = symbol
        super().__init__(provider, f"Data not available for {symbol} ({reason})")


class BaseAdapter(ABC):
    """
    Abstract base class for quote provider adapters.

    Each provider adapter must implement:
    - initialize(): Create sessions
    - close(): Release them
    - fetch(): One outbound request for one symbol, never raising
    """

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.name = config.name
        self._status = ProviderStatus(name=config.name)

    @property
    def status(self) -> ProviderStatus:
        """Get current provider status."""
        return self._status

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the adapter (create sessions)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources."""
        pass

    @abstractmethod
    async def fetch(self, symbol: str) -> QuoteResult:
        """
        Fetch the current price for a single symbol.

        Args:
            symbol: The ticker symbol (e.g., "AAPL")

        Returns:
            QuoteResult; failures are returned with success=False, never raised
        """
        pass

    # Helper methods
    def _record_success(self, latency_ms: float) -> None:
        """Record a successful request."""
        self._status.success_count += 1
        self._status.last_success = datetime.now(timezone.utc)

        # Update average latency (exponential moving average)
        alpha = 0.1
        self._status.avg_latency_ms = (
            alpha * latency_ms + (1 - alpha) * self._status.avg_latency_ms
        )

        # Reset error count on success
        self._status.error_count = 0
        self._status.is_healthy = True

    def _record_error(self, error: Exception) -> None:
        """Record a failed request."""
        self._status.error_count += 1
        self._status.last_error = datetime.now(timezone.utc)
        self._status.last_error_message = str(error)

        # Mark as unhealthy after too many consecutive errors
        if self._status.error_count >= 5:
            self._status.is_healthy = False
            logger.warning(f"Provider {self.name} marked as unhealthy after {self._status.error_count} errors")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name}, healthy={self._status.is_healthy})>"
