"""
Stock Tracker - Configuration Settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


QUOTA_STORE_BACKENDS = ("memory", "file", "redis")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # =========================
    # Application Settings
    # =========================
    APP_NAME: str = "Stock Tracker"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # =========================
    # Quote Provider
    # =========================
    FINNHUB_API_KEY: str = ""
    FINNHUB_BASE_URL: str = "https://finnhub.io/api/v1"
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # =========================
    # Quote Client
    # =========================
    QUOTE_CACHE_TTL_SECONDS: float = 300.0  # 5 minutes
    QUOTE_CACHE_MAX_ENTRIES: int = 100
    DAILY_REQUEST_LIMIT: int = 250
    MIN_DISPATCH_INTERVAL_SECONDS: float = 1.0

    @field_validator(
        "QUOTE_CACHE_TTL_SECONDS",
        "QUOTE_CACHE_MAX_ENTRIES",
        "DAILY_REQUEST_LIMIT",
        "REQUEST_TIMEOUT_SECONDS",
    )
    @classmethod
    def must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("MIN_DISPATCH_INTERVAL_SECONDS")
    @classmethod
    def must_not_be_negative(cls, v):
        if v < 0:
            raise ValueError("must not be negative")
        return v

    # =========================
    # Quota Persistence
    # =========================
    QUOTA_STORE: str = "file"
    QUOTA_STORE_PATH: str = ".stock_tracker/state.json"
    QUOTA_KEY_PREFIX: str = "stock_tracker"
    REDIS_URL: str = "redis://localhost:6379/0"

    @field_validator("QUOTA_STORE", mode="before")
    @classmethod
    def parse_quota_store(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
        if v not in QUOTA_STORE_BACKENDS:
            raise ValueError(
                f"QUOTA_STORE must be one of {', '.join(QUOTA_STORE_BACKENDS)}"
            )
        return v

    # =========================
    # Logging
    # =========================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""


# Create global settings instance
settings = Settings()
