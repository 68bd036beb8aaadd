"""
Unit tests for amount and date normalizers.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from ekstre.parsers.bank.normalizers import parse_amount, parse_date


class TestParseAmount:
    """Tests for parse_amount."""

    def test_turkish_format(self):
        """Test dot thousands and comma decimals."""
        assert parse_amount("1.234,56") == Decimal("1234.56")
        assert parse_amount("5.000,00") == Decimal("5000")

    def test_us_format(self):
        """Test comma thousands and dot decimals."""
        assert parse_amount("1,234.56") == Decimal("1234.56")

    def test_comma_only_is_decimal(self):
        """Test a lone comma is the decimal separator."""
        assert parse_amount("150,75") == Decimal("150.75")
        assert parse_amount("-150,75") == Decimal("-150.75")

    def test_parentheses_negative(self):
        """Test accounting-style negative amounts."""
        assert parse_amount("(1.234,56)") == Decimal("-1234.56")
        assert parse_amount("(100)") == Decimal("-100")

    def test_currency_symbols_stripped(self):
        """Test currency symbols and text are ignored."""
        assert parse_amount("₺1.234,56 TL") == Decimal("1234.56")

    def test_numbers(self):
        """Test numeric cells pass through exactly."""
        assert parse_amount(5000) == Decimal("5000")
        assert parse_amount(-1067.98) == Decimal("-1067.98")
        assert parse_amount(Decimal("12.50")) == Decimal("12.50")

    def test_empty_and_unparseable(self):
        """Test empty or junk input yields zero."""
        assert parse_amount("") == Decimal("0")
        assert parse_amount(None) == Decimal("0")
        assert parse_amount("abc") == Decimal("0")
        assert parse_amount("-") == Decimal("0")
        assert parse_amount(float("nan")) == Decimal("0")

    def test_explicit_zero(self):
        """Test an explicit zero is a valid amount."""
        assert parse_amount("0,00") == Decimal("0")


class TestParseDate:
    """Tests for parse_date."""

    def test_turkish_dotted(self):
        """Test DD.MM.YYYY."""
        assert parse_date("19.08.2025") == date(2025, 8, 19)

    def test_slashed(self):
        """Test DD/MM/YYYY is day first."""
        assert parse_date("01/04/2024") == date(2024, 4, 1)

    def test_iso(self):
        """Test ISO strings via generic parsing."""
        assert parse_date("2023-01-15") == date(2023, 1, 15)

    def test_spreadsheet_serial(self):
        """Test spreadsheet serial numbers."""
        assert parse_date(25569) == date(1970, 1, 1)
        assert parse_date(44927) == date(2023, 1, 1)
        assert parse_date(44927.75) == date(2023, 1, 1)

    def test_datetime_cells(self):
        """Test decoded date cells."""
        assert parse_date(datetime(2023, 5, 1, 13, 30)) == date(2023, 5, 1)
        assert parse_date(date(2023, 5, 1)) == date(2023, 5, 1)

    def test_invalid(self):
        """Test unparseable input yields None."""
        assert parse_date("invalid") is None
        assert parse_date("") is None
        assert parse_date(None) is None
        assert parse_date(0) is None

    def test_invalid_calendar_date(self):
        """Test impossible dates yield None."""
        assert parse_date("31.02.2023") is None

    @pytest.mark.parametrize("value", ["today", "now", "Yesterday", "tomorrow", "20230115"])
    def test_relative_words_and_digit_runs_rejected(self, value):
        """Test clock-relative words and bare digit strings are not dates."""
        assert parse_date(value) is None

    @pytest.mark.parametrize("value", ["IBAN", "Maaş", "12"])
    def test_plain_text_is_not_a_date(self, value):
        """Test labels and short numbers are not dates."""
        assert parse_date(value) is None
