"""
Enpara.com statement parser.

Enpara exports merge cells heavily, so the header row is one composite
label row and the values sit at fixed column offsets:

    [_, _, _, Tarih, _, _, Hareket tipi, _, _, Açıklama, _, _, Tutar, _, Bakiye]
"""

import logging
import math
import re
from datetime import date
from typing import Any, List, Optional

from ekstre.parsers.bank.base import BankStatementParser, Grid
from ekstre.parsers.bank.models import Transaction, TransactionType
from ekstre.parsers.bank.normalizers import parse_date
from ekstre.parsers.bank.utils import cell_at, cell_to_text, fold_turkish

logger = logging.getLogger(__name__)

DISPLAY_NAME = "Enpara.com"
SHORT_NAME = "Enpara"

FILENAME_MARKERS = ['enpara', 'enparacom', 'enpara.com', 'qnb']

# Fixed column offsets of a data row
DATE_COL = 3
TYPE_COL = 6
DETAIL_COL = 9
AMOUNT_COL = 12
BALANCE_COL = 14
MIN_ROW_LENGTH = 10

DOTTED_DATE = re.compile(r'^(\d{2})\.(\d{2})\.(\d{4})$')
COMPACT_DATE = re.compile(r'^(\d{4})(\d{2})(\d{2})$')


def can_parse(filename: str) -> bool:
    """Check whether a file name looks like an Enpara export."""
    name = (filename or "").lower()
    return any(marker in name for marker in FILENAME_MARKERS)


def parse_enpara_date(value: Any) -> Optional[date]:
    """
    Parse an Enpara date cell.

    Accepts DD.MM.YYYY and YYYYMMDD (as text or as a plain number) before
    falling back to the generic date parser.
    """
    if not _present(value):
        return None

    date_str = cell_to_text(value).strip()

    match = DOTTED_DATE.match(date_str)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return _safe_date(year, month, day)

    match = COMPACT_DATE.match(date_str)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _safe_date(year, month, day)

    return parse_date(value)


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _present(value: Any) -> bool:
    """Truthiness of a cell: None, '', 0, NaN and False are absent."""
    if value is None or value is False or value == "":
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, (int, float)) and value == 0:
        return False
    return True


def _has_value(value: Any) -> bool:
    """Numbers always count; strings count when not blank."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and value.strip() != ""


class EnparaParser(BankStatementParser):
    """
    Parser for Enpara.com Excel statements.

    Expected Format:
    - 'IBAN' label row in the first 10 rows
    - Header row with Tarih, Hareket tipi, Açıklama, İşlem Tutarı, Bakiye
    - Data rows with values at fixed offsets 3, 6, 9, 12 and 14
    """

    BANK_TYPE = "enpara"
    BANK_NAME = "Enpara"
    HEADER_ERROR = (
        "Unable to find header row in Enpara bank statement. "
        "Expected columns: Tarih, Hareket tipi, Açıklama, İşlem Tutarı, Bakiye"
    )

    def _find_header(self, grid: Grid) -> int:
        """First row whose folded text names every Enpara column."""
        for i, row in enumerate(grid[:self.preferences.header_scan_rows]):
            if not row:
                continue
            text = fold_turkish(" ".join(cell_to_text(cell) for cell in row))
            if (
                'tarih' in text
                and 'hareket tipi' in text
                and 'aciklama' in text
                and ('islem tutari' in text or 'tutar' in text)
                and 'bakiye' in text
            ):
                return i
        return -1

    def _is_candidate_row(self, row: List[Any]) -> bool:
        if not row or len(row) < MIN_ROW_LENGTH:
            return False
        return (
            _present(cell_at(row, DATE_COL))
            and _present(cell_at(row, TYPE_COL))
            and _present(cell_at(row, DETAIL_COL))
            and _has_value(cell_at(row, AMOUNT_COL))
            and _has_value(cell_at(row, BALANCE_COL))
        )

    def _parse_row(self, row: List[Any], iban: str, context: Any) -> Transaction:
        parts = [
            cell_to_text(cell).strip()
            for cell in (cell_at(row, TYPE_COL), cell_at(row, DETAIL_COL))
            if _present(cell)
        ]
        amount = self.parse_amount(cell_at(row, AMOUNT_COL))

        return Transaction(
            id=self.generate_row_id(row),
            date=parse_enpara_date(cell_at(row, DATE_COL)),
            description=": ".join(parts),
            amount=amount,
            balance=self.parse_amount(cell_at(row, BALANCE_COL)),
            type=TransactionType.from_amount(amount),
            raw_data=tuple(row),
            iban=iban,
            bank_type=self.bank_type,
        )
