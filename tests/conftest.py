"""
Shared pytest fixtures for ekstre tests.

Provides statement grids, in-memory workbooks, and transaction builders.
"""

import io
import pytest
import sys
from pathlib import Path
from datetime import date
from decimal import Decimal

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from openpyxl import Workbook

from ekstre.core.preferences import ParserPreferences
from ekstre.core.store import TransactionStore
from ekstre.parsers.bank.models import Transaction, TransactionType


TEST_IBAN = "TR710011100000000083926637"
TEST_IBAN_SPACED = "TR71 0011 1000 0000 0083 9266 37"


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Never pick up a developer's preferences.json."""
    monkeypatch.delenv("EKSTRE_CONFIG_DIR", raising=False)


@pytest.fixture
def preferences():
    """Default parser preferences."""
    return ParserPreferences()


@pytest.fixture
def ziraat_grid():
    """Ziraat statement with a signed amount column."""
    return [
        ["Tarih", "Açıklama", "Tutar", "Bakiye"],
        ["IBAN", TEST_IBAN_SPACED],
        ["01.01.2023", "Maaş", "5.000,00", "5.000,00"],
        ["02.01.2023", "Market", "-150,75", "4.849,25"],
    ]


@pytest.fixture
def ziraat_debit_credit_grid():
    """Ziraat statement with separate Borç/Alacak columns and no IBAN."""
    return [
        ["Ziraat Bankası Hesap Ekstresi"],
        ["Hesap No: 12345678"],
        [""],
        ["Tarih", "İşlem Açıklama", "Borç", "Alacak", "Bakiye"],
        ["01.01.2023", "Maaş Yatırımı", "", "5.000,00", "5.000,00"],
        ["02.01.2023", "Market Alışverişi", "150,75", "", "4.849,25"],
        ["03.01.2023", "ATM Para Çekme", "500,00", "", "4.349,25"],
        ["04.01.2023", "EFT Gelen", "", "1.200,00", "5.549,25"],
    ]


@pytest.fixture
def enpara_grid():
    """Enpara statement with merged-cell layout (values at fixed offsets)."""
    return [
        ["Hesap Hareketleri"],
        [None, "IBAN", None, None, None, None, None, None, TEST_IBAN_SPACED],
        [None, "Tarih", None, None, None, None, "Hareket tipi", None, None,
         "Açıklama", None, None, "İşlem Tutarı (TL)", None, "Bakiye (TL)"],
        [None, None, None, "19.08.2025", None, None, "Gelen Transfer", None, None,
         "desc", None, None, 5025, None, 31414.95],
        [None, None, None, "18.08.2025", None, None, "Encard Harcaması", None, None,
         "MARKET", None, None, -1067.98, None, 26389.95],
    ]


@pytest.fixture
def make_xlsx():
    """Build xlsx bytes from a list of rows."""
    def _make(rows, sheet_title="Sheet1"):
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_title
        for row in rows:
            ws.append(row)
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
    return _make


@pytest.fixture
def make_txn():
    """Build a Transaction with sensible defaults."""
    def _make(
        txn_id="t1",
        txn_date=date(2024, 4, 5),
        description="TXN",
        amount="100",
        balance="1000",
        txn_type=None,
        iban=TEST_IBAN,
        bank_type="ziraat",
    ):
        amount = Decimal(amount)
        return Transaction(
            id=txn_id,
            date=txn_date,
            description=description,
            amount=amount,
            balance=Decimal(balance),
            type=txn_type or TransactionType.from_amount(amount),
            raw_data=(txn_id,),
            iban=iban,
            bank_type=bank_type,
        )
    return _make


@pytest.fixture
def store():
    """In-memory transaction store."""
    store = TransactionStore()
    yield store
    store.close()
