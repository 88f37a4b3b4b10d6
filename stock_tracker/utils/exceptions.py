"""
Stock Tracker - Custom Exceptions
Application-specific exceptions shared across the quote client
"""
from typing import Optional, Any, Dict


class StockTrackerException(Exception):
    """Base exception for Stock Tracker."""

    def __init__(
        self,
        message: str = "An error occurred",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


# =========================
# Validation Exceptions
# =========================

class ValidationError(StockTrackerException):
    """Input validation errors."""
    pass


class SymbolValidationError(ValidationError):
    """Symbol is not 1-10 alphanumeric characters."""

    def __init__(self, symbol: Any):
        super().__init__(
            message=f"Invalid stock symbol format: {symbol!r} (1-10 alphanumeric characters)",
            code="INVALID_SYMBOL",
            details={"symbol": symbol}
        )


# =========================
# Storage Exceptions
# =========================

class StorageError(StockTrackerException):
    """Persistence related errors."""
    pass


class StorageUnavailableError(StorageError):
    """The key-value backend could not be read or written."""

    def __init__(self, backend: str, message: str = "Storage unavailable"):
        super().__init__(
            message=f"[{backend}] {message}",
            code="STORAGE_UNAVAILABLE",
            details={"backend": backend}
        )
