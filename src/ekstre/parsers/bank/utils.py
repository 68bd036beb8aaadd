"""
Utility functions for bank parsers.

Provides row and header heuristics, IBAN discovery, the transaction id hash,
and consolidation helpers shared by the bank-specific parsers.
"""

import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

from ekstre.parsers.bank.models import ParseResult, Transaction, TransactionType
from ekstre.parsers.bank.normalizers import EXCEL_EPOCH_OFFSET, UNIX_EPOCH

# Default header vocabulary (Turkish and English banking terms)
DEFAULT_HEADER_KEYWORDS = ['tarih', 'açıklama', 'tutar', 'date', 'description', 'amount']

HEADER_SCAN_ROWS = 15
MIN_HEADER_MATCHES = 3
ROW_ID_DELIMITER = "|"

TR_IBAN = re.compile(r'^TR\d{24}$')
IBAN_LABEL = re.compile(r'^IBAN\s*:?\s*$', re.IGNORECASE)
INLINE_IBAN = re.compile(r'IBAN\s*:\s*(TR\d{2}(?:\s*\d{4}){5}\s*\d{2})', re.IGNORECASE)
ACCOUNT_LABEL = re.compile(r'Hesap\s*No', re.IGNORECASE)
INLINE_ACCOUNT = re.compile(r'Hesap\s*No\s*:\s*(\d+)', re.IGNORECASE)
WHITESPACE = re.compile(r'\s')

_TURKISH_FOLD = str.maketrans({
    'İ': 'i', 'ı': 'i',
    'Ğ': 'g', 'ğ': 'g',
    'Ü': 'u', 'ü': 'u',
    'Ş': 's', 'ş': 's',
    'Ö': 'o', 'ö': 'o',
    'Ç': 'c', 'ç': 'c',
})


def is_blank(cell: Any) -> bool:
    """True for None, empty strings and NaN floats."""
    if cell is None:
        return True
    if isinstance(cell, str):
        return cell == ""
    if isinstance(cell, float):
        return math.isnan(cell)
    return False


def cell_at(row: Sequence[Any], index: int) -> Any:
    """Return row[index] or None when the row is shorter."""
    if row is None or index >= len(row):
        return None
    return row[index]


def lower_text(value: Any) -> str:
    """Lower-case a cell for keyword matching ('İ' lowers without a combining dot)."""
    if is_blank(value):
        return ""
    return str(value).strip().lower().replace('\u0307', '')


def fold_turkish(text: str) -> str:
    """Lower-case text and fold Turkish letters to ASCII (ı, İ -> i, ş -> s, ...)."""
    return text.translate(_TURKISH_FOLD).lower().replace('\u0307', '')


def is_valid_transaction_row(row: Optional[Sequence[Any]]) -> bool:
    """True iff the row has at least one cell that is not None or empty."""
    if not row:
        return False
    return any(cell is not None and cell != "" for cell in row)


def find_header_row(
    grid: Sequence[Sequence[Any]],
    keywords: Iterable[str] = DEFAULT_HEADER_KEYWORDS,
    max_rows: int = HEADER_SCAN_ROWS,
    min_matches: int = MIN_HEADER_MATCHES,
) -> int:
    """
    Locate the header row by keyword scoring.

    Only the first ``max_rows`` rows with at least three non-empty cells are
    considered. Each cell contributes one match per keyword it contains. A
    row wins if it reaches ``min_matches`` and strictly beats every earlier
    candidate, so ties go to the first row.

    Returns:
        Row index, or -1 if no row qualifies
    """
    keywords = [kw.lower() for kw in keywords]
    best_match = -1
    max_matches = 0

    for i, row in enumerate(grid[:max_rows]):
        if not row:
            continue
        cells = [lower_text(cell) for cell in row if not is_blank(cell)]
        if len(cells) < 3:
            continue

        matches = sum(1 for cell in cells for keyword in keywords if keyword in cell)

        if matches >= min_matches and matches > max_matches:
            max_matches = matches
            best_match = i

    return best_match


def cell_to_text(cell: Any) -> str:
    """
    Render a cell the way it is joined for id hashing.

    Empty cells render as '', integral floats without a fraction
    (5000.0 -> '5000') and booleans as 'true'/'false'. Date cells render
    as their spreadsheet serial (2023-01-01 -> '44927'), the value the
    sheet itself stores.
    """
    if cell is None:
        return ""
    if isinstance(cell, bool):
        return "true" if cell else "false"
    if isinstance(cell, (datetime, date)):
        return _number_text(date_to_serial(cell))
    if isinstance(cell, float):
        return _number_text(cell)
    return str(cell)


def date_to_serial(value: date) -> float:
    """Spreadsheet serial of a date or naive datetime (25569 == 1970-01-01)."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    elif value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return (value - UNIX_EPOCH).total_seconds() / 86400 + EXCEL_EPOCH_OFFSET


def _number_text(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(number)


def rolling_hash(text: str) -> int:
    """32-bit signed rolling hash (hash * 31 + code unit) over UTF-16 code units."""
    hash_value = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        hash_value = (hash_value * 31 + code_unit) & 0xFFFFFFFF
    if hash_value >= 0x80000000:
        hash_value -= 0x100000000
    return hash_value


def to_base36(number: int) -> str:
    """Render an integer in base 36 with a leading '-' for negatives."""
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    number = abs(number)
    out = []
    while number:
        number, rem = divmod(number, 36)
        out.append(digits[rem])
    return sign + "".join(reversed(out))


def generate_row_id(row: Sequence[Any]) -> str:
    """
    Deterministic transaction id for a raw row.

    Joins the cells with '|' and renders the 32-bit rolling hash in base 36.
    Ids already stored by earlier imports depend on this exact algorithm.
    """
    row_str = ROW_ID_DELIMITER.join(cell_to_text(cell) for cell in row)
    return to_base36(rolling_hash(row_str))


def _compact_iban(text: str) -> Optional[str]:
    cleaned = WHITESPACE.sub('', text)
    return cleaned if TR_IBAN.match(cleaned) else None


def extract_iban(grid: Sequence[Sequence[Any]], max_rows: int = 15) -> Optional[str]:
    """
    Find a Turkish IBAN in the first ``max_rows`` rows.

    Accepts an 'IBAN' label followed by the number in a later cell of the
    same row, an inline 'IBAN: TR..' cell, or a cell holding only the IBAN
    (spaced in groups of four or contiguous).

    Returns:
        The IBAN without spaces, or None
    """
    for row in grid[:max_rows]:
        if not row:
            continue
        for j, cell in enumerate(row):
            if is_blank(cell):
                continue
            cell_str = str(cell).strip()

            if IBAN_LABEL.match(cell_str):
                for candidate in row[j + 1:]:
                    if is_blank(candidate):
                        continue
                    iban = _compact_iban(str(candidate))
                    if iban:
                        return iban

            if 'IBAN' in cell_str.upper():
                match = INLINE_IBAN.search(cell_str)
                if match:
                    return WHITESPACE.sub('', match.group(1))

            iban = _compact_iban(cell_str)
            if iban:
                return iban

    return None


def extract_account_number(grid: Sequence[Sequence[Any]], max_rows: int = 15) -> Optional[str]:
    """
    Find a 'Hesap No' account number in the first ``max_rows`` rows.

    Returns:
        'Account: <number>', or None
    """
    for row in grid[:max_rows]:
        if not row:
            continue
        for j, cell in enumerate(row):
            if is_blank(cell):
                continue
            cell_str = cell_to_text(cell).strip()
            if not ACCOUNT_LABEL.search(cell_str):
                continue

            for candidate in row[j + 1:]:
                if is_blank(candidate):
                    continue
                candidate_str = cell_to_text(candidate).strip()
                if candidate_str.isdigit():
                    return f"Account: {candidate_str}"

            match = INLINE_ACCOUNT.search(cell_str)
            if match:
                return f"Account: {match.group(1)}"

    return None


def consolidate_transactions(results: List[ParseResult]) -> List[Transaction]:
    """
    Consolidate transactions from multiple parse results.

    - Merges transactions from all results
    - Removes duplicates by transaction id (first occurrence kept)
    - Sorts by date (oldest first, undated last)
    """
    seen = set()
    unique_transactions = []

    for result in results:
        for txn in result.transactions or []:
            if txn.id in seen:
                continue
            seen.add(txn.id)
            unique_transactions.append(txn)

    unique_transactions.sort(key=lambda t: (t.date is None, t.date or date.min))
    return unique_transactions


def validate_transactions(transactions: List[Transaction]) -> List[str]:
    """
    Validate transactions for common issues.

    Returns:
        List of warning messages
    """
    warnings = []

    for i, txn in enumerate(transactions):
        if not txn.date:
            warnings.append(f"Transaction {i+1}: Missing date")

        if not txn.description or txn.description.strip() == "":
            warnings.append(f"Transaction {i+1}: Empty description")

        if txn.amount == 0:
            warnings.append(f"Transaction {i+1}: Zero amount transaction ({txn.date})")
        elif TransactionType.from_amount(txn.amount) is not txn.type:
            warnings.append(
                f"Transaction {i+1}: Type {txn.type.value} does not match amount {txn.amount}"
            )

        if not txn.iban:
            warnings.append(f"Transaction {i+1}: Missing IBAN")

    return warnings


def calculate_balance_verification(
    transactions: List[Transaction],
    tolerance: Decimal = Decimal("0.01")
) -> dict:
    """
    Verify balance progression in transactions.

    Args:
        transactions: Transactions in statement order (oldest first)
        tolerance: Allowed absolute rounding difference

    Returns:
        Dictionary with verification results
    """
    errors = []
    running_balance = None

    for i, txn in enumerate(transactions):
        if running_balance is None:
            running_balance = txn.balance
            continue

        expected_balance = running_balance + txn.amount
        if abs(expected_balance - txn.balance) > tolerance:
            errors.append(
                f"Balance mismatch at transaction {i+1} ({txn.date}): "
                f"Expected {expected_balance}, Got {txn.balance}"
            )

        running_balance = txn.balance

    return {
        "verified": len(errors) == 0,
        "errors": errors,
        "final_balance": running_balance
    }
