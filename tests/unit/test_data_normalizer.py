"""
Unit Tests - Data Normalizer
"""
from decimal import Decimal
import pytest

from stock_tracker.data_providers.data_normalizer import (
    is_valid_symbol,
    canonicalize_symbol,
    to_decimal,
    quantize_price,
    compute_change,
)
from stock_tracker.utils.exceptions import SymbolValidationError


class TestSymbolValidation:

    @pytest.mark.parametrize("symbol", ["AAPL", "aapl", "A", "ABCDEFGHIJ", "BRK1", " msft "])
    def test_valid(self, symbol):
        assert is_valid_symbol(symbol) is True

    @pytest.mark.parametrize("symbol", ["", "ABCDEFGHIJK", "BRK.B", "AA PL", "A-B", None, 123])
    def test_invalid(self, symbol):
        assert is_valid_symbol(symbol) is False

    def test_canonicalize(self):
        assert canonicalize_symbol(" aapl ") == "AAPL"

    def test_canonicalize_rejects_malformed(self):
        with pytest.raises(SymbolValidationError) as exc_info:
            canonicalize_symbol("BRK.B")
        assert exc_info.value.code == "INVALID_SYMBOL"
        assert "Invalid stock symbol format" in exc_info.value.message


class TestNumbers:

    def test_to_decimal(self):
        assert to_decimal(1.5) == Decimal("1.5")
        assert to_decimal("2.25") == Decimal("2.25")
        assert to_decimal(3) == Decimal("3")

    @pytest.mark.parametrize("value", [None, True, "abc", float("nan"), float("inf")])
    def test_to_decimal_rejects(self, value):
        assert to_decimal(value) is None

    def test_quantize_half_up(self):
        assert quantize_price(Decimal("1.005")) == Decimal("1.01")
        assert quantize_price(Decimal("1.004")) == Decimal("1.00")
        assert quantize_price(None) is None

    def test_compute_change(self):
        change, percent = compute_change(Decimal("105"), Decimal("100"))
        assert change == Decimal("5")
        assert percent == Decimal("5")

    @pytest.mark.parametrize("previous_close", [None, Decimal("0"), Decimal("-1")])
    def test_compute_change_without_previous_close(self, previous_close):
        assert compute_change(Decimal("105"), previous_close) == (None, None)
