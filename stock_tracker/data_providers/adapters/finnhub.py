"""
Finnhub Adapter

Provides access to the Finnhub quote endpoint for US stocks.

API Documentation: https://finnhub.io/docs/api/quote
"""
import asyncio
import json
import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional
import aiohttp
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from loguru import logger

from stock_tracker.data_providers.adapters.base import (
    BaseAdapter,
    ProviderConfig,
    QuoteResult,
    ProviderError,
    TransportError,
    RateLimitError,
    AuthenticationError,
    DataNotAvailableError,
)
from stock_tracker.data_providers.data_normalizer import (
    is_valid_symbol,
    to_decimal,
    quantize_price,
    compute_change,
)


FINNHUB_BASE_URL = "https://finnhub.io/api/v1"
FINNHUB_SOURCE = "finnhub"
DEFAULT_CURRENCY = "USD"


def create_finnhub_config(
    api_key: str,
    base_url: str = FINNHUB_BASE_URL,
    timeout_seconds: float = 30.0,
) -> ProviderConfig:
    """Create configuration for Finnhub adapter."""
    return ProviderConfig(
        name=FINNHUB_SOURCE,
        api_key=api_key,
        base_url=base_url.rstrip("/"),
        timeout_seconds=timeout_seconds,
    )


class FinnhubQuotePayload(BaseModel):
    """Body of GET /quote. Every field is optional on the wire."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    current_price: Optional[float] = Field(default=None, alias="c")
    change: Optional[float] = Field(default=None, alias="d")
    change_percent: Optional[float] = Field(default=None, alias="dp")
    high: Optional[float] = Field(default=None, alias="h")
    low: Optional[float] = Field(default=None, alias="l")
    open: Optional[float] = Field(default=None, alias="o")
    previous_close: Optional[float] = Field(default=None, alias="pc")
    timestamp: Optional[int] = Field(default=None, alias="t")
    volume: Optional[float] = Field(default=None, alias="v")

    def to_result(self, symbol: str) -> QuoteResult:
        """
        Classify the payload into a successful QuoteResult.

        Finnhub answers unknown symbols with 200 and zeroed fields, so a
        missing, zero or negative current price means there is no data.

        Raises:
            DataNotAvailableError: If there is no usable price
        """
        price = to_decimal(self.current_price)
        if price is None or price <= 0:
            raise DataNotAvailableError(FINNHUB_SOURCE, symbol, "no price data")

        previous_close = _positive(self.previous_close)
        change = to_decimal(self.change)
        change_percent = to_decimal(self.change_percent)
        if change is None or change_percent is None:
            computed_change, computed_percent = compute_change(price, previous_close)
            change = change if change is not None else computed_change
            change_percent = change_percent if change_percent is not None else computed_percent

        return QuoteResult(
            success=True,
            source=FINNHUB_SOURCE,
            price=quantize_price(price),
            change=quantize_price(change),
            change_percent=quantize_price(change_percent),
            currency=DEFAULT_CURRENCY,
            day_high=quantize_price(_positive(self.high)),
            day_low=quantize_price(_positive(self.low)),
            day_open=quantize_price(_positive(self.open)),
            previous_close=quantize_price(previous_close),
            volume=int(self.volume) if self.volume and math.isfinite(self.volume) else None,
            timestamp=_to_datetime(self.timestamp),
        )


def _to_datetime(epoch_seconds: Optional[int]) -> Optional[datetime]:
    """Quote time as UTC datetime; None when missing or out of range."""
    if not epoch_seconds:
        return None
    try:
        return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        logger.debug(f"Ignoring out of range quote timestamp {epoch_seconds}")
        return None


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Retry-After in seconds, from either delta-seconds or an HTTP date."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        seconds = (when - datetime.now(timezone.utc)).total_seconds()
    if not math.isfinite(seconds):
        return None
    return max(0.0, seconds)


def _positive(value: Optional[float]):
    result = to_decimal(value)
    if result is None or result <= 0:
        return None
    return result


class FinnhubAdapter(BaseAdapter):
    """
    Finnhub quote provider adapter.

    Usage:
        config = create_finnhub_config("your_api_key")
        adapter = FinnhubAdapter(config)
        await adapter.initialize()

        result = await adapter.fetch("AAPL")
        if result.success:
            print(result.price)
    """

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self._session: Optional[aiohttp.ClientSession] = None

    async def initialize(self) -> None:
        """Initialize HTTP session."""
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            logger.info("Finnhub adapter initialized")

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
            logger.info("Finnhub adapter closed")

    async def fetch(self, symbol: str) -> QuoteResult:
        """Get the latest quote for a symbol, converting every failure to a result."""
        if not is_valid_symbol(symbol):
            return QuoteResult.failure(
                f"Invalid stock symbol format: {symbol!r}", source=FINNHUB_SOURCE
            )
        symbol = symbol.strip().upper()

        if not self.config.api_key:
            return QuoteResult.failure("Missing Finnhub API key", source=FINNHUB_SOURCE)

        try:
            payload = await self._request_quote(symbol)
            result = payload.to_result(symbol)
        except DataNotAvailableError as e:
            logger.warning(f"No usable quote for {symbol}: {e.message}")
            return QuoteResult.failure(e.message, source=FINNHUB_SOURCE)
        except ProviderError as e:
            self._record_error(e)
            logger.warning(f"Finnhub request failed for {symbol}: {e.message}")
            return QuoteResult.failure(e.message, source=FINNHUB_SOURCE)

        return result

    async def _request_quote(self, symbol: str) -> FinnhubQuotePayload:
        """
        Issue exactly one GET /quote call.

        Raises:
            TransportError: Non-2xx status, connection failure or undecodable body
            DataNotAvailableError: Body does not match the quote schema
        """
        if self._session is None:
            await self.initialize()

        url = f"{self.config.base_url}/quote"
        params = {"symbol": symbol, "token": self.config.api_key}

        try:
            start_time = datetime.now()
            async with self._session.get(url, params=params) as response:
                latency_ms = (datetime.now() - start_time).total_seconds() * 1000

                if response.status == 401:
                    raise AuthenticationError(FINNHUB_SOURCE)
                elif response.status == 429:
                    raise RateLimitError(
                        FINNHUB_SOURCE,
                        retry_after=_parse_retry_after(response.headers.get("Retry-After")),
                    )
                elif not 200 <= response.status < 300:
                    raise TransportError(
                        FINNHUB_SOURCE,
                        f"HTTP {response.status}: {response.reason}",
                        status=response.status,
                    )

                data = await response.json(content_type=None)

        except aiohttp.ClientError as e:
            raise TransportError(FINNHUB_SOURCE, f"Connection error: {e}")
        except asyncio.TimeoutError:
            raise TransportError(FINNHUB_SOURCE, "Request timed out")
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TransportError(FINNHUB_SOURCE, f"Invalid JSON response: {e}")

        if not isinstance(data, dict):
            raise DataNotAvailableError(FINNHUB_SOURCE, symbol, "unexpected response body")

        try:
            payload = FinnhubQuotePayload.model_validate(data)
        except ValidationError:
            raise DataNotAvailableError(FINNHUB_SOURCE, symbol, "malformed quote fields")

        self._record_success(latency_ms)
        return payload
