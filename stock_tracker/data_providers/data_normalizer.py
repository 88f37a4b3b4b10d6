"""
Data Normalizer

Symbol canonicalization and price normalization shared by the cache,
the orchestrator and the provider adapters.
"""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from stock_tracker.utils.exceptions import SymbolValidationError


SYMBOL_PATTERN = re.compile(r"^[A-Za-z0-9]{1,10}$")
PRICE_PRECISION = Decimal("0.01")


def is_valid_symbol(symbol: Any) -> bool:
    """Check the 1-10 alphanumeric character rule."""
    if not symbol or not isinstance(symbol, str):
        return False
    return bool(SYMBOL_PATTERN.match(symbol.strip()))


def canonicalize_symbol(symbol: Any) -> str:
    """
    Return the canonical (stripped, uppercase) form of a symbol.

    Raises:
        SymbolValidationError: If the symbol is malformed
    """
    if not is_valid_symbol(symbol):
        raise SymbolValidationError(symbol)
    return symbol.strip().upper()


def to_decimal(value: Any) -> Optional[Decimal]:
    """Convert a raw numeric value to Decimal, None if it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def quantize_price(value: Optional[Decimal]) -> Optional[Decimal]:
    """Round to two decimal places, half up."""
    if value is None:
        return None
    return value.quantize(PRICE_PRECISION, rounding=ROUND_HALF_UP)


def compute_change(
    price: Decimal,
    previous_close: Optional[Decimal],
) -> tuple[Optional[Decimal], Optional[Decimal]]:
    """
    Absolute and percent change against the previous close.

    Returns (None, None) when there is no usable previous close.
    """
    if previous_close is None or previous_close <= 0:
        return None, None
    change = price - previous_close
    return change, change / previous_close * 100
