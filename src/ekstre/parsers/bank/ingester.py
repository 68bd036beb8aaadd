"""Bank statement ingester."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ekstre.core.exceptions import EkstreError
from ekstre.core.store import TransactionStore
from ekstre.parsers.bank.dispatcher import StatementDispatcher
from ekstre.parsers.bank.models import ParseResult, StatementFile

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ['.xlsx', '.xlsm', '.xls', '.csv']


@dataclass
class FileProcessingError:
    """Details of a file processing failure."""
    file_name: str
    error_message: str
    error_type: str  # error code, e.g. 'UNSUPPORTED_BANK', 'STATEMENT_PARSE_ERROR'
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass
class IngestionResult:
    """Result of importing a batch of statement files."""
    success: bool = True
    files_processed: int = 0
    files_succeeded: int = 0
    files_failed: int = 0
    records_inserted: int = 0
    records_skipped: int = 0
    errors: List[str] = field(default_factory=list)
    results: List[ParseResult] = field(default_factory=list)
    failed_files: List[FileProcessingError] = field(default_factory=list)

    def add_failed_file(self, file_name: str, error_message: str, error_type: str = 'EXCEPTION'):
        """Record a failed file and mark the batch as failed."""
        self.failed_files.append(FileProcessingError(file_name, error_message, error_type))
        self.errors.append(f"{file_name}: {error_message}")
        self.files_failed += 1
        self.success = False


def find_statement_files(directory: Union[str, Path]) -> List[Path]:
    """Statement files directly inside a directory, sorted by name."""
    directory = Path(directory)
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )


def ingest_files(
    files: Iterable[Union[StatementFile, Path, str]],
    store: TransactionStore,
    bank_type: Optional[str] = None,
    dispatcher: Optional[StatementDispatcher] = None
) -> IngestionResult:
    """
    Parse and store statement files one after another.

    A failing file is recorded and skipped; files before it stay stored.

    Args:
        files: Uploaded files or paths
        store: Destination store
        bank_type: Bank type applied to every file (None/'auto' detects per file)
        dispatcher: Dispatcher to use (default registry when omitted)

    Returns:
        IngestionResult
    """
    dispatcher = dispatcher or StatementDispatcher()
    result = IngestionResult()

    for file in files:
        result.files_processed += 1
        name = file.name if isinstance(file, StatementFile) else Path(file).name

        try:
            parsed = dispatcher.parse_file(file, bank_type)
        except EkstreError as e:
            logger.error(f"Failed to import {name}: {e}")
            result.add_failed_file(name, str(e), e.code or 'EXCEPTION')
            continue

        stored = store.add_transactions(parsed.transactions, parsed.bank_type)
        result.records_inserted += stored.added
        result.records_skipped += stored.duplicates
        result.errors.extend(f"{name}: {error}" for error in stored.errors)
        result.results.append(parsed)
        result.files_succeeded += 1
        logger.info(
            f"Imported {name}: {stored.added} new, {stored.duplicates} duplicates"
        )

    return result


def ingest_directory(
    directory: Union[str, Path],
    store: TransactionStore,
    bank_type: Optional[str] = None,
    dispatcher: Optional[StatementDispatcher] = None
) -> IngestionResult:
    """Import every statement file found in a directory."""
    files = find_statement_files(directory)
    if not files:
        logger.warning(f"No statement files found in {directory}")
    return ingest_files(files, store, bank_type, dispatcher)
