"""
Unit tests for the Enpara.com parser.
"""

import pytest
from datetime import date
from decimal import Decimal

from ekstre.parsers.bank.enpara import EnparaParser, can_parse, parse_enpara_date
from ekstre.parsers.bank.models import TransactionType, UNKNOWN_IBAN

TEST_IBAN = "TR710011100000000083926637"


@pytest.fixture
def parser():
    """Create Enpara parser instance."""
    return EnparaParser()


def data_row(when, kind, detail, amount, balance):
    """Enpara data row with values at the fixed offsets."""
    return [None, None, None, when, None, None, kind, None, None, detail, None, None, amount, None, balance]


class TestEnparaDetection:
    """Tests for file-name detection."""

    def test_can_parse(self):
        """Test Enpara and QNB file names are recognised."""
        assert can_parse("enpara_hesap.xlsx") is True
        assert can_parse("Enpara.com ekstre.xlsx") is True
        assert can_parse("qnb_statement.xls") is True
        assert can_parse("ziraat.xlsx") is False


class TestParseEnparaDate:
    """Tests for Enpara date formats."""

    def test_dotted(self):
        """Test DD.MM.YYYY."""
        assert parse_enpara_date("19.08.2025") == date(2025, 8, 19)

    def test_compact(self):
        """Test YYYYMMDD as text and as a number."""
        assert parse_enpara_date("20250819") == date(2025, 8, 19)
        assert parse_enpara_date(20250819) == date(2025, 8, 19)

    def test_fallback(self):
        """Test other formats use the generic parser."""
        assert parse_enpara_date("19/08/2025") == date(2025, 8, 19)
        assert parse_enpara_date(44927) == date(2023, 1, 1)

    def test_invalid(self):
        """Test invalid values."""
        assert parse_enpara_date(None) is None
        assert parse_enpara_date("") is None
        assert parse_enpara_date("32.01.2025") is None
        assert parse_enpara_date("abc") is None


class TestEnparaParse:
    """Tests for parsing full grids."""

    def test_parse(self, parser, enpara_grid):
        """Test fixed-offset rows become transactions."""
        result = parser.parse(enpara_grid)

        assert result.errors == []
        assert result.iban == TEST_IBAN
        assert len(result.transactions) == 2

        income, expense = result.transactions
        assert income.date == date(2025, 8, 19)
        assert income.description == "Gelen Transfer: desc"
        assert income.amount == Decimal("5025")
        assert income.balance == Decimal("31414.95")
        assert income.type is TransactionType.INCOME
        assert income.bank_type == "enpara"
        assert income.id == "obg7pt"

        assert expense.description == "Encard Harcaması: MARKET"
        assert expense.amount == Decimal("-1067.98")
        assert expense.type is TransactionType.EXPENSE

    def test_text_amounts(self, parser, enpara_grid):
        """Test amounts exported as Turkish-formatted text."""
        grid = enpara_grid[:3] + [data_row("20.08.2025", "Para Çekme", "ATM", "-1.250,50", "30.164,45")]

        txn = parser.parse(grid).transactions[0]

        assert txn.amount == Decimal("-1250.50")
        assert txn.balance == Decimal("30164.45")

    def test_incomplete_rows_skipped(self, parser, enpara_grid):
        """Test rows missing any fixed field are not parsed."""
        grid = enpara_grid[:3] + [
            data_row("20.08.2025", "Para Çekme", "ATM", "", "30.164,45"),
            data_row("20.08.2025", None, "ATM", -10, 100),
            [None, None, None, "20.08.2025", None, None, "Kısa"],
        ]

        result = parser.parse(grid)

        assert result.transactions == []
        assert result.errors == []

    def test_missing_iban(self, parser, enpara_grid):
        """Test a statement without IBAN yields no transactions."""
        grid = [row for i, row in enumerate(enpara_grid) if i != 1]

        result = parser.parse(grid)

        assert result.transactions == []
        assert result.iban == UNKNOWN_IBAN
        assert result.errors == [
            "Unable to extract IBAN from Enpara bank statement. IBAN is required for processing."
        ]

    def test_iban_outside_scan_window(self, parser, enpara_grid):
        """Test the IBAN must appear in the first 10 rows."""
        grid = [["-"]] * 10 + enpara_grid

        result = parser.parse(grid)

        assert result.iban == UNKNOWN_IBAN
        assert result.transactions == []

    def test_missing_header(self, parser, enpara_grid):
        """Test a statement without the composite header."""
        grid = enpara_grid[:2] + enpara_grid[3:]

        result = parser.parse(grid)

        assert result.transactions == []
        assert result.errors == [
            "Unable to find header row in Enpara bank statement. "
            "Expected columns: Tarih, Hareket tipi, Açıklama, İşlem Tutarı, Bakiye"
        ]
