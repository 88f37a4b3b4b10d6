"""
Quota Tracker

Counts outbound provider requests made today against a fixed daily ceiling.
The count and the date it belongs to are persisted through a key-value store
and reset when the local calendar day changes.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional, Callable, Any
from loguru import logger

from stock_tracker.db.kv_store import KeyValueStore, InMemoryKeyValueStore
from stock_tracker.utils.exceptions import StorageUnavailableError


@dataclass
class QuotaConfig:
    """Quota configuration."""
    daily_limit: int = 250
    key_prefix: str = "stock_tracker"


@dataclass
class QuotaState:
    """Requests made on reset_date_key (ISO date)."""
    count: int
    reset_date_key: str


@dataclass(frozen=True)
class QuotaStatus:
    """Snapshot returned by QuotaTracker.status()."""
    used: int
    limit: int
    remaining: int
    can_admit: bool
    reset_date: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "used": self.used,
            "limit": self.limit,
            "remaining": self.remaining,
            "can_admit": self.can_admit,
            "reset_date": self.reset_date,
        }


class QuotaTracker:
    """
    Daily request quota with persisted state.

    Features:
    - Day rollover detected from the local wall-clock date on every call
    - Pessimistic accounting: record_request() runs before the network call
    - Storage failures degrade to in-memory tracking instead of raising
    """

    def __init__(
        self,
        config: Optional[QuotaConfig] = None,
        store: Optional[KeyValueStore] = None,
        today: Callable[[], date] = date.today,
    ):
        self.config = config or QuotaConfig()
        self._store = store if store is not None else InMemoryKeyValueStore()
        self._today = today
        self._degraded = False
        self._state = self._load()

    @property
    def count_key(self) -> str:
        return f"{self.config.key_prefix}:quota:count"

    @property
    def reset_date_key(self) -> str:
        return f"{self.config.key_prefix}:quota:reset_date"

    @property
    def limit(self) -> int:
        return self.config.daily_limit

    @property
    def is_degraded(self) -> bool:
        """True once persistence failed and the tracker runs in memory only."""
        return self._degraded

    # ==================== Public API ====================

    def can_admit(self) -> bool:
        """Check whether another request fits in today's quota."""
        self._check_reset()
        return self._state.count < self.config.daily_limit

    def record_request(self) -> None:
        """Count one outbound request against today's quota."""
        self._check_reset()
        self._state.count += 1
        self._persist()

        if self._state.count >= self.config.daily_limit:
            logger.warning(
                f"Daily quota exhausted: {self._state.count}/{self.config.daily_limit} requests used"
            )

    @property
    def remaining(self) -> int:
        self._check_reset()
        return max(0, self.config.daily_limit - self._state.count)

    def status(self) -> QuotaStatus:
        """Get used/limit/remaining for today."""
        self._check_reset()
        used = self._state.count
        limit = self.config.daily_limit
        return QuotaStatus(
            used=used,
            limit=limit,
            remaining=max(0, limit - used),
            can_admit=used < limit,
            reset_date=self._state.reset_date_key,
        )

    def reset(self) -> None:
        """Zero today's counter."""
        self._state = QuotaState(count=0, reset_date_key=self._today_key())
        self._persist()
        logger.info("Daily quota manually reset")

    # ==================== Internals ====================

    def _today_key(self) -> str:
        return self._today().isoformat()

    def _check_reset(self) -> None:
        """Reset the counter if the stored date is not today."""
        today = self._today_key()
        if self._state.reset_date_key != today:
            logger.info(
                f"Resetting daily quota (was {self._state.count} on {self._state.reset_date_key})"
            )
            self._state = QuotaState(count=0, reset_date_key=today)
            self._persist()

    def _load(self) -> QuotaState:
        today = self._today_key()
        fresh = QuotaState(count=0, reset_date_key=today)

        try:
            raw_count = self._store.get(self.count_key)
            raw_date = self._store.get(self.reset_date_key)
        except StorageUnavailableError as e:
            self._degrade(e)
            return fresh

        if raw_count is None or raw_date is None:
            return fresh

        try:
            count = int(raw_count)
        except ValueError:
            logger.warning(f"Ignoring corrupt quota count {raw_count!r}")
            return fresh
        if count < 0:
            logger.warning(f"Ignoring negative quota count {count}")
            return fresh

        return QuotaState(count=count, reset_date_key=raw_date)

    def _persist(self) -> None:
        if self._degraded:
            return
        try:
            self._store.set(self.count_key, str(self._state.count))
            self._store.set(self.reset_date_key, self._state.reset_date_key)
        except StorageUnavailableError as e:
            self._degrade(e)

    def _degrade(self, error: StorageUnavailableError) -> None:
        self._degraded = True
        logger.warning(
            f"Quota persistence unavailable, tracking in memory for this session: {error.message}"
        )

    def get_stats(self) -> dict[str, Any]:
        """Get quota statistics."""
        return {
            **self.status().to_dict(),
            "persistent": not self._degraded,
        }
