"""
Ziraat Bankası statement parser.

Ziraat exports label every column, so columns are mapped to semantic roles
by keyword. Supports both signed-amount layouts (Tutar) and split
Borç/Alacak (debit/credit) layouts.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ekstre.parsers.bank.base import BankStatementParser, Grid
from ekstre.parsers.bank.models import Transaction, TransactionType
from ekstre.parsers.bank.utils import (
    cell_at,
    cell_to_text,
    extract_account_number,
    extract_iban,
    find_header_row,
    is_blank,
    lower_text,
)

logger = logging.getLogger(__name__)

DISPLAY_NAME = "Ziraat Bankası"
SHORT_NAME = "Ziraat"

FILENAME_MARKERS = ['ziraat', 'zb', 'ziraat bank']

HEADER_KEYWORDS = [
    'tarih', 'işlem tarihi', 'date',
    'açıklama', 'işlem açıklama', 'description', 'memo',
    'tutar', 'miktar', 'amount', 'işlem tutarı',
    'bakiye', 'balance',
    'borç', 'debit', 'gider',
    'alacak', 'credit', 'gelir',
    'fiş no', 'fiş',
]

# Column role -> header substrings. Roles are tried in this order and the
# first match wins, so a header is never mapped to two roles.
COLUMN_ROLES: Dict[str, List[str]] = {
    'date': ['tarih', 'işlem tarihi', 'date', 'tarih/saat'],
    'description': ['açıklama', 'işlem açıklama', 'description', 'memo', 'detay'],
    'amount': ['tutar', 'miktar', 'amount', 'işlem tutarı', 'işlem tutari'],
    'balance': ['bakiye', 'balance', 'kalan bakiye'],
    'debit': ['borç', 'debit', 'gider', 'çıkış', 'ödeme'],
    'credit': ['alacak', 'credit', 'gelir', 'giriş', 'para yatırma'],
}


def can_parse(filename: str) -> bool:
    """Check whether a file name looks like a Ziraat export."""
    name = (filename or "").lower()
    return any(marker in name for marker in FILENAME_MARKERS)


class ZiraatParser(BankStatementParser):
    """
    Parser for Ziraat Bankası Excel statements.

    Expected Format:
    - Account block with an IBAN (or 'Hesap No') in the first rows
    - Header row: Tarih | Açıklama | Tutar | Bakiye, optionally
      Borç | Alacak instead of a signed Tutar column
    - One transaction per row below the header
    """

    BANK_TYPE = "ziraat"
    BANK_NAME = "Ziraat"
    HEADER_ERROR = (
        "Unable to find header row in Ziraat bank statement. "
        "Expected columns: Tarih, Açıklama, Tutar"
    )

    @property
    def header_keywords(self) -> List[str]:
        keywords = list(HEADER_KEYWORDS)
        for role in COLUMN_ROLES:
            keywords.extend(self.preferences.keywords_for(role))
        return keywords

    @property
    def column_roles(self) -> Dict[str, List[str]]:
        return {
            role: words + self.preferences.keywords_for(role)
            for role, words in COLUMN_ROLES.items()
        }

    def _extract_iban(self, grid: Grid) -> Optional[str]:
        max_rows = self.preferences.iban_rows_for(self.bank_type)
        iban = extract_iban(grid, max_rows)
        if iban:
            return iban

        # Older exports only show the domestic account number
        account = extract_account_number(grid, max_rows)
        if account:
            logger.info(f"ziraat: no IBAN found, using {account}")
        return account

    def _find_header(self, grid: Grid) -> int:
        return find_header_row(
            grid,
            self.header_keywords,
            self.preferences.header_scan_rows,
            self.preferences.min_header_matches,
        )

    def _prepare(self, header_row: List[Any]) -> List[Optional[str]]:
        """Map every header cell to a column role (None when unrecognised)."""
        roles = [self._column_role(lower_text(cell)) for cell in header_row]
        logger.debug(f"ziraat: column roles {roles}")
        return roles

    def _column_role(self, header: str) -> Optional[str]:
        if not header:
            return None
        for role, keywords in self.column_roles.items():
            if any(keyword in header for keyword in keywords):
                # "Kalan Bakiye Tutarı" is a balance, not an amount
                if role == 'amount' and self._is_balance(header):
                    continue
                return role
        return None

    def _is_balance(self, header: str) -> bool:
        return any(keyword in header for keyword in self.column_roles['balance'])

    def _parse_row(self, row: List[Any], iban: str, roles: List[Optional[str]]) -> Transaction:
        txn_date = None
        description = ""
        amount = Decimal("0")
        balance = Decimal("0")
        explicit = []

        for i, role in enumerate(roles):
            value = cell_at(row, i)
            if role is None or is_blank(value):
                continue

            if role == 'date':
                txn_date = self.parse_date(value)
            elif role == 'description':
                description = cell_to_text(value).strip()
            elif role == 'amount':
                amount = self.parse_amount(value)
            elif role == 'balance':
                balance = self.parse_amount(value)
            else:
                explicit.append((role, self.parse_amount(value)))

        # Borç/Alacak columns decide both the type and the sign
        txn_type = TransactionType.UNKNOWN
        for role, value in explicit:
            if value <= 0:
                continue
            if role == 'debit':
                txn_type = TransactionType.EXPENSE
                amount = -abs(value)
            else:
                txn_type = TransactionType.INCOME
                amount = abs(value)

        if txn_type is TransactionType.UNKNOWN:
            txn_type = TransactionType.from_amount(amount)

        return Transaction(
            id=self.generate_row_id(row),
            date=txn_date,
            description=description,
            amount=amount,
            balance=balance,
            type=txn_type,
            raw_data=tuple(row),
            iban=iban,
            bank_type=self.bank_type,
        )
