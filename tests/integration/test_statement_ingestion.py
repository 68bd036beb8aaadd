"""
Integration tests: statement files through parsing, storage and grouping.
"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from ekstre.core.preferences import ParserPreferences
from ekstre.parsers.bank.dispatcher import StatementDispatcher
from ekstre.parsers.bank.ingester import find_statement_files, ingest_directory, ingest_files
from ekstre.parsers.bank.models import StatementFile
from ekstre.parsers.bank.organizer import organize_by_iban
from ekstre.parsers.bank.utils import calculate_balance_verification

pytestmark = pytest.mark.integration

TEST_IBAN = "TR710011100000000083926637"


@pytest.fixture
def dispatcher():
    return StatementDispatcher(preferences=ParserPreferences())


@pytest.fixture
def statement_dir(tmp_path, make_xlsx, ziraat_grid, enpara_grid):
    """Inbox with one statement per bank and a stray file."""
    (tmp_path / "ziraat_ocak.xlsx").write_bytes(make_xlsx(ziraat_grid))
    (tmp_path / "enpara_agustos.xlsx").write_bytes(make_xlsx(enpara_grid))
    (tmp_path / "notes.txt").write_text("ignore me", encoding="utf-8")
    return tmp_path


class TestIngestFiles:
    """Tests for ingest_files."""

    def test_two_banks(self, statement_dir, store, dispatcher):
        """Test both banks are imported into one store."""
        result = ingest_directory(statement_dir, store, dispatcher=dispatcher)

        assert result.success is True
        assert result.files_processed == 2
        assert result.files_succeeded == 2
        assert result.records_inserted == 4
        assert store.count() == 4
        assert [r.bank_type for r in result.results] == ["enpara", "ziraat"]

    def test_reimport_is_deduplicated(self, statement_dir, store, dispatcher):
        """Test importing the same statements twice adds nothing."""
        ingest_directory(statement_dir, store, dispatcher=dispatcher)

        result = ingest_directory(statement_dir, store, dispatcher=dispatcher)

        assert result.records_inserted == 0
        assert result.records_skipped == 4
        assert store.count() == 4

    def test_failure_does_not_undo_earlier_files(self, make_xlsx, ziraat_grid, store, dispatcher):
        """Test a failing file is reported while earlier files stay stored."""
        files = [
            StatementFile("ziraat_ocak.xlsx", make_xlsx(ziraat_grid)),
            StatementFile("bilinmeyen.xlsx", make_xlsx(ziraat_grid)),
            StatementFile("ziraat_bozuk.xlsx", b"broken"),
        ]

        result = ingest_files(files, store, dispatcher=dispatcher)

        assert result.success is False
        assert result.files_succeeded == 1
        assert result.files_failed == 2
        assert [f.error_type for f in result.failed_files] == [
            "BANK_NOT_DETECTED", "STATEMENT_PARSE_ERROR",
        ]
        assert store.count() == 2

    def test_explicit_bank_type_for_batch(self, make_xlsx, enpara_grid, store, dispatcher):
        """Test one bank type applied to every file."""
        files = [StatementFile("hesap.xlsx", make_xlsx(enpara_grid))]

        result = ingest_files(files, store, bank_type="enpara", dispatcher=dispatcher)

        assert result.files_succeeded == 1
        assert store.get_transactions()[0].bank_type == "enpara"

    def test_missing_file(self, tmp_path, store, dispatcher):
        """Test unreadable paths are reported as failed statements."""
        result = ingest_files([tmp_path / "ziraat_yok.xlsx"], store, dispatcher=dispatcher)

        failure = result.failed_files[0]
        assert failure.file_name == "ziraat_yok.xlsx"
        assert failure.error_type == "STATEMENT_PARSE_ERROR"
        assert failure.error_message.startswith("Error parsing ziraat bank statement: ")

    def test_failure_timestamp_is_utc(self, store, dispatcher):
        """Test failure timestamps carry the UTC offset."""
        result = ingest_files([StatementFile("bilinmeyen.xlsx", b"")], store, dispatcher=dispatcher)

        timestamp = datetime.fromisoformat(result.failed_files[0].timestamp)
        assert timestamp.utcoffset() == timedelta(0)

    def test_find_statement_files(self, statement_dir):
        """Test only spreadsheet files are picked up."""
        assert [p.name for p in find_statement_files(statement_dir)] == [
            "enpara_agustos.xlsx", "ziraat_ocak.xlsx",
        ]


class TestStoredAccounts:
    """Tests for reading imported data back per account."""

    def test_accounts_and_stats(self, statement_dir, store, dispatcher):
        """Test stored transactions group into accounts with stats."""
        ingest_directory(statement_dir, store, dispatcher=dispatcher)

        grouped = organize_by_iban(store.get_transactions())

        # Both sample statements share one IBAN but ids never collide
        assert list(grouped) == [TEST_IBAN]
        account = grouped[TEST_IBAN]
        assert account.stats.transaction_count == 4
        assert account.stats.date_range == (date(2023, 1, 1), date(2025, 8, 19))
        assert account.stats.total_income == Decimal("10025")

    def test_balance_progression(self, make_xlsx, ziraat_grid, dispatcher):
        """Test a parsed statement has a consistent running balance."""
        result = dispatcher.parse_file(StatementFile("ziraat.xlsx", make_xlsx(ziraat_grid)))

        verification = calculate_balance_verification(result.transactions)

        assert verification["verified"] is True
        assert verification["final_balance"] == Decimal("4849.25")
