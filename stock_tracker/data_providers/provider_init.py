"""
Provider Initialization Module

Builds the quote client from settings: picks the quota persistence
backend, creates the Finnhub adapter and wires them into a
QuoteFetchClient. There is no process-wide client instance; the host
application owns the one it creates here.
"""
from pathlib import Path
from typing import Optional
from loguru import logger

from stock_tracker.config import Settings, settings as default_settings
from stock_tracker.data_providers.adapters.base import BaseAdapter
from stock_tracker.data_providers.adapters.finnhub import FinnhubAdapter, create_finnhub_config
from stock_tracker.data_providers.orchestrator import QuoteFetchClient, QuoteClientConfig
from stock_tracker.data_providers.quota_tracker import QuotaTracker, QuotaConfig
from stock_tracker.db.kv_store import (
    KeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    RedisKeyValueStore,
)


def create_kv_store(settings: Optional[Settings] = None) -> KeyValueStore:
    """
    Create the key-value store selected by QUOTA_STORE.

    Args:
        settings: Settings (defaults to the environment-loaded ones)
    """
    settings = settings or default_settings

    if settings.QUOTA_STORE == "redis":
        return RedisKeyValueStore.from_url(settings.REDIS_URL)
    if settings.QUOTA_STORE == "file":
        return JsonFileKeyValueStore(Path(settings.QUOTA_STORE_PATH).expanduser())
    return InMemoryKeyValueStore()


def create_adapter(settings: Optional[Settings] = None) -> BaseAdapter:
    """Create the Finnhub adapter."""
    settings = settings or default_settings

    if not settings.FINNHUB_API_KEY:
        logger.warning("FINNHUB_API_KEY is not set; every quote request will fail")

    config = create_finnhub_config(
        settings.FINNHUB_API_KEY,
        base_url=settings.FINNHUB_BASE_URL,
        timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS,
    )
    return FinnhubAdapter(config)


def create_quote_client(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    adapter: Optional[BaseAdapter] = None,
) -> QuoteFetchClient:
    """
    Build a fully wired quote client.

    Args:
        settings: Settings (defaults to the environment-loaded ones)
        store: Key-value store override for the quota counter
        adapter: Provider adapter override

    Returns:
        QuoteFetchClient; call initialize() (or use ``async with``) before fetching
    """
    settings = settings or default_settings
    client_config = QuoteClientConfig.from_settings(settings)

    quota = QuotaTracker(
        QuotaConfig(
            daily_limit=client_config.daily_request_limit,
            key_prefix=settings.QUOTA_KEY_PREFIX,
        ),
        store=store if store is not None else create_kv_store(settings),
    )

    client = QuoteFetchClient(
        adapter=adapter or create_adapter(settings),
        quota=quota,
        config=client_config,
    )
    logger.info(
        f"Quote client ready: ttl={client_config.cache_ttl_seconds}s, "
        f"cache={client_config.max_cache_entries}, "
        f"limit={client_config.daily_request_limit}/day, "
        f"spacing={client_config.min_dispatch_interval_seconds}s, "
        f"store={settings.QUOTA_STORE}"
    )
    return client
