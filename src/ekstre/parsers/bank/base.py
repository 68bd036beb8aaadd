"""
Base class for bank statement parsers.

Provides the common parse template for different bank statement layouts:
IBAN discovery, header discovery, row iteration with per-row error
collection, and tagging of every emitted transaction.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from ekstre.core.preferences import ParserPreferences
from ekstre.parsers.bank.models import ParseResult, Transaction, UNKNOWN_IBAN
from ekstre.parsers.bank.normalizers import parse_amount, parse_date
from ekstre.parsers.bank.utils import (
    extract_iban,
    generate_row_id,
    is_valid_transaction_row,
)

logger = logging.getLogger(__name__)

Grid = Sequence[Sequence[Any]]


class BankStatementParser(ABC):
    """
    Abstract base class for bank statement parsers.

    Subclasses set BANK_TYPE and BANK_NAME and implement:
    - _find_header(): index of the row preceding the data rows
    - _is_candidate_row(): whether a row should be parsed at all
    - _parse_row(): build one Transaction (may raise; the row is then skipped)
    """

    BANK_TYPE: str = "unknown"  # Override in subclass
    BANK_NAME: str = ""  # Name used in error messages, e.g. "Ziraat"
    HEADER_ERROR: str = ""  # Override in subclass

    def __init__(self, preferences: Optional[ParserPreferences] = None):
        """
        Initialize parser.

        Args:
            preferences: Parser preferences (defaults when omitted)
        """
        self.preferences = preferences or ParserPreferences()

    @property
    def bank_type(self) -> str:
        return self.BANK_TYPE

    def parse(self, grid: Grid) -> ParseResult:
        """
        Parse the first sheet of a statement.

        Args:
            grid: Rows of cell values

        Returns:
            ParseResult with transactions, IBAN and collected errors
        """
        grid = list(grid or [])
        result = ParseResult(bank_type=self.bank_type)

        iban = self._extract_iban(grid)
        if not iban:
            result.add_error(
                f"Unable to extract IBAN from {self.BANK_NAME} bank statement. "
                "IBAN is required for processing."
            )
            result.iban = UNKNOWN_IBAN
            logger.warning(f"{self.bank_type}: no IBAN found")
            return result

        result.iban = iban
        logger.debug(f"{self.bank_type}: IBAN {iban}")

        header_row = self._find_header(grid)
        if header_row == -1:
            result.add_error(self.HEADER_ERROR)
            logger.warning(f"{self.bank_type}: no header row found")
            return result

        logger.debug(f"{self.bank_type}: header row at index {header_row}")
        context = self._prepare(list(grid[header_row] or []))

        for i in range(header_row + 1, len(grid)):
            row = list(grid[i] or [])
            if not self._is_candidate_row(row):
                continue
            try:
                txn = self._parse_row(row, iban, context)
            except Exception as e:
                result.add_error(f"Error parsing row {i + 1}: {e}")
                logger.warning(f"{self.bank_type}: skipped row {i + 1}: {e}")
                continue

            # Rows without a parseable date are not transactions
            if txn is not None and txn.date is not None:
                result.transactions.append(txn)

        logger.debug(f"{self.bank_type}: {len(result.transactions)} transactions parsed")
        return result

    def _extract_iban(self, grid: Grid) -> Optional[str]:
        """Locate the account IBAN. Override to add fallbacks."""
        return extract_iban(grid, self.preferences.iban_rows_for(self.bank_type))

    @abstractmethod
    def _find_header(self, grid: Grid) -> int:
        """Return the header row index, or -1."""

    def _prepare(self, header_row: List[Any]) -> Any:
        """Derive per-statement context (e.g. column roles) from the header row."""
        return None

    def _is_candidate_row(self, row: List[Any]) -> bool:
        return is_valid_transaction_row(row)

    @abstractmethod
    def _parse_row(self, row: List[Any], iban: str, context: Any) -> Optional[Transaction]:
        """Build a transaction from a data row."""

    # Shared primitives, exposed for subclasses and callers
    parse_date = staticmethod(parse_date)
    parse_amount = staticmethod(parse_amount)
    generate_row_id = staticmethod(generate_row_id)
    is_valid_transaction_row = staticmethod(is_valid_transaction_row)
