"""
Unit Tests - Provider Initialization
"""
from unittest.mock import patch

from stock_tracker.config import Settings
from stock_tracker.data_providers.adapters.finnhub import FinnhubAdapter
from stock_tracker.data_providers.provider_init import (
    create_kv_store,
    create_adapter,
    create_quote_client,
)
from stock_tracker.db.kv_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    RedisKeyValueStore,
)


class TestCreateKeyValueStore:

    def test_memory(self):
        store = create_kv_store(Settings(_env_file=None, QUOTA_STORE="memory"))
        assert isinstance(store, InMemoryKeyValueStore)

    def test_file(self, tmp_path):
        path = tmp_path / "state.json"
        store = create_kv_store(Settings(_env_file=None, QUOTA_STORE="file", QUOTA_STORE_PATH=str(path)))

        assert isinstance(store, JsonFileKeyValueStore)
        assert store.path == path

    def test_redis(self):
        settings = Settings(_env_file=None, QUOTA_STORE="redis", REDIS_URL="redis://cache:6379/2")
        with patch("stock_tracker.db.kv_store.redis.Redis.from_url") as from_url:
            store = create_kv_store(settings)

        assert isinstance(store, RedisKeyValueStore)
        from_url.assert_called_once_with("redis://cache:6379/2", encoding="utf-8", decode_responses=True)


class TestCreateAdapter:

    def test_finnhub_from_settings(self):
        settings = Settings(
            _env_file=None,
            FINNHUB_API_KEY="abc",
            FINNHUB_BASE_URL="http://localhost:9000/api/v1/",
            REQUEST_TIMEOUT_SECONDS=5,
        )
        adapter = create_adapter(settings)

        assert isinstance(adapter, FinnhubAdapter)
        assert adapter.config.api_key == "abc"
        assert adapter.config.base_url == "http://localhost:9000/api/v1"
        assert adapter.config.timeout_seconds == 5


class TestCreateQuoteClient:

    def test_wires_settings_through(self, memory_store, fake_adapter):
        settings = Settings(
            _env_file=None,
            QUOTE_CACHE_TTL_SECONDS=60,
            QUOTE_CACHE_MAX_ENTRIES=5,
            DAILY_REQUEST_LIMIT=7,
            MIN_DISPATCH_INTERVAL_SECONDS=0.25,
            QUOTA_KEY_PREFIX="demo",
        )
        client = create_quote_client(settings, store=memory_store, adapter=fake_adapter)

        assert client.adapter is fake_adapter
        assert client.cache.config.ttl_seconds == 60
        assert client.cache.config.max_entries == 5
        assert client.quota.limit == 7
        assert client.quota.count_key == "demo:quota:count"
        assert client.queue.config.min_dispatch_interval == 0.25

    def test_clients_are_independent(self, fake_adapter):
        settings = Settings(_env_file=None, QUOTA_STORE="memory")

        first = create_quote_client(settings, adapter=fake_adapter)
        second = create_quote_client(settings, adapter=fake_adapter)

        assert first is not second
        assert first.cache is not second.cache
