"""
Core module - Foundation components for ekstre.

Provides:
- Exceptions: EkstreError hierarchy with machine-readable codes
- ParserPreferences: Data-driven parser configuration
- Workbook decoding: spreadsheet bytes to cell grids
- store: Deduplicating SQLite persistence (TransactionStore)
- Logging setup for host applications
"""

from ekstre.core.exceptions import (
    EkstreError,
    UnsupportedBankError,
    BankDetectionError,
    WorkbookReadError,
    StatementParseError,
    ValidationError,
)
from ekstre.core.preferences import ParserPreferences, DEFAULT_PREFERENCES
from ekstre.core.workbook import read_workbook, first_sheet
from ekstre.core.logging_setup import setup_logging

__all__ = [
    "EkstreError",
    "UnsupportedBankError",
    "BankDetectionError",
    "WorkbookReadError",
    "StatementParseError",
    "ValidationError",
    "ParserPreferences",
    "DEFAULT_PREFERENCES",
    "read_workbook",
    "first_sheet",
    "setup_logging",
]
