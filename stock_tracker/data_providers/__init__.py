"""
Data Providers Package

Quote client infrastructure: provider adapter, cache, daily quota,
rate-limited request queue and the orchestrator that ties them together.
"""
from stock_tracker.data_providers.cache_manager import QuoteCache, CacheConfig, CacheEntry
from stock_tracker.data_providers.quota_tracker import (
    QuotaTracker,
    QuotaConfig,
    QuotaState,
    QuotaStatus,
)
from stock_tracker.data_providers.rate_limiter import RequestQueue, RateLimitConfig
from stock_tracker.data_providers.orchestrator import (
    QuoteFetchClient,
    QuoteClientConfig,
    BatchResult,
    BatchProgress,
    QUOTA_EXCEEDED_ERROR,
    QUOTA_SKIPPED_ERROR,
)
from stock_tracker.data_providers.market_hours import (
    MarketHours,
    MarketStatus,
    US_MARKET_HOURS,
    SUPPORTED_MARKETS,
    get_market_status,
    get_next_market_open,
    is_market_open,
    us_market_holidays,
)
from stock_tracker.data_providers.provider_init import (
    create_quote_client,
    create_kv_store,
    create_adapter,
)

__all__ = [
    # Cache
    "QuoteCache",
    "CacheConfig",
    "CacheEntry",
    # Quota
    "QuotaTracker",
    "QuotaConfig",
    "QuotaState",
    "QuotaStatus",
    # Rate Limiter
    "RequestQueue",
    "RateLimitConfig",
    # Orchestrator
    "QuoteFetchClient",
    "QuoteClientConfig",
    "BatchResult",
    "BatchProgress",
    "QUOTA_EXCEEDED_ERROR",
    "QUOTA_SKIPPED_ERROR",
    # Market Hours
    "MarketHours",
    "MarketStatus",
    "US_MARKET_HOURS",
    "SUPPORTED_MARKETS",
    "get_market_status",
    "get_next_market_open",
    "is_market_open",
    "us_market_holidays",
    # Composition
    "create_quote_client",
    "create_kv_store",
    "create_adapter",
]
