"""
Stock Tracker - Key-Value Stores

Small string key-value port used for the quota counter, with in-memory,
JSON file and Redis backends.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

import redis
from loguru import logger

from stock_tracker.utils.exceptions import StorageUnavailableError


@runtime_checkable
class KeyValueStore(Protocol):
    """get(key) -> str | None, set(key, value)."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Process-local store; state is lost on exit."""

    name = "memory"

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def __repr__(self) -> str:
        return f"<InMemoryKeyValueStore(keys={len(self._data)})>"


class JsonFileKeyValueStore:
    """
    Flat JSON object on disk.

    The file is re-read on every get so that edits made while the process
    runs are picked up; writes go through a temporary file and a rename.
    """

    name = "file"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageUnavailableError(self.name, f"Cannot read {self.path}: {e}")
        if not isinstance(data, dict):
            raise StorageUnavailableError(self.name, f"Unexpected content in {self.path}")
        return {str(k): str(v) for k, v in data.items()}

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = str(value)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        except OSError as e:
            raise StorageUnavailableError(self.name, f"Cannot write {self.path}: {e}")

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageUnavailableError(self.name, f"Cannot write {self.path}: {e}")

    def __repr__(self) -> str:
        return f"<JsonFileKeyValueStore(path={self.path})>"


class RedisKeyValueStore:
    """Redis-backed store (plain GET/SET, no expiry)."""

    name = "redis"

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisKeyValueStore":
        """Create a store from a redis:// URL."""
        client = redis.Redis.from_url(url, encoding="utf-8", decode_responses=True)
        logger.info(f"Redis key-value store: {url.split('@')[-1] if '@' in url else url}")
        return cls(client)

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(key)
        except redis.RedisError as e:
            raise StorageUnavailableError(self.name, f"GET {key} failed: {e}")
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(key, str(value))
        except redis.RedisError as e:
            raise StorageUnavailableError(self.name, f"SET {key} failed: {e}")

    def __repr__(self) -> str:
        return "<RedisKeyValueStore>"
