"""
Provider Adapters Package

Each adapter implements the BaseAdapter interface and returns QuoteResult.
"""
from stock_tracker.data_providers.adapters.base import (
    BaseAdapter,
    ProviderConfig,
    QuoteResult,
    ProviderStatus,
    ProviderError,
    TransportError,
    RateLimitError,
    AuthenticationError,
    DataNotAvailableError,
)
from stock_tracker.data_providers.adapters.finnhub import (
    FinnhubAdapter,
    FinnhubQuotePayload,
    create_finnhub_config,
)

__all__ = [
    # Base
    "BaseAdapter",
    "ProviderConfig",
    "QuoteResult",
    "ProviderStatus",
    "ProviderError",
    "TransportError",
    "RateLimitError",
    "AuthenticationError",
    "DataNotAvailableError",
    # Providers
    "FinnhubAdapter",
    "FinnhubQuotePayload",
    "create_finnhub_config",
]
