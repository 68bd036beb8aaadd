"""
Bank transaction and statement data models.

Dataclasses for representing parsed bank statements.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

UNKNOWN_IBAN = "UNKNOWN"


class TransactionType(Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"
    UNKNOWN = "unknown"

    @classmethod
    def from_amount(cls, amount: Decimal) -> "TransactionType":
        """Infer the type from the sign of an amount."""
        if amount > 0:
            return cls.INCOME
        if amount < 0:
            return cls.EXPENSE
        return cls.UNKNOWN


@dataclass(frozen=True)
class Transaction:
    """
    Represents a single normalized bank transaction.

    Instances are created once by a parser (or by migration of a stored
    record) and never mutated afterwards; use dataclasses.replace to derive
    a tagged copy.
    """

    id: str
    date: Optional[date]
    description: str
    amount: Decimal
    balance: Decimal
    type: TransactionType
    raw_data: Tuple[Any, ...]
    iban: str
    bank_type: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "date": self.date.isoformat() if self.date else None,
            "description": self.description,
            "amount": str(self.amount),
            "balance": str(self.balance),
            "type": self.type.value,
            "rawData": [_raw_cell_to_json(cell) for cell in self.raw_data],
            "iban": self.iban,
            "bankType": self.bank_type,
            "uploadedAt": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }


def _raw_cell_to_json(cell: Any) -> Any:
    if isinstance(cell, (datetime, date)):
        return cell.isoformat()
    if isinstance(cell, Decimal):
        return str(cell)
    return cell


@dataclass
class ParseResult:
    """Result of parsing a bank statement."""

    bank_type: str
    transactions: List[Transaction] = field(default_factory=list)
    file_name: str = ""
    errors: List[str] = field(default_factory=list)
    iban: str = UNKNOWN_IBAN
    file_size: Optional[int] = None
    parsed_at: Optional[datetime] = None

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def transaction_count(self) -> int:
        """Get number of transactions parsed."""
        return len(self.transactions)

    @property
    def total_income(self) -> Decimal:
        """Sum of all inflows."""
        return sum((t.amount for t in self.transactions if t.amount > 0), Decimal("0"))

    @property
    def total_expense(self) -> Decimal:
        """Sum of all outflows as a positive number."""
        return sum((-t.amount for t in self.transactions if t.amount < 0), Decimal("0"))

    @property
    def statement_period(self) -> Tuple[Optional[date], Optional[date]]:
        """First and last transaction dates."""
        dates = [t.date for t in self.transactions if t.date]
        if not dates:
            return None, None
        return min(dates), max(dates)


@dataclass(frozen=True)
class StatementFile:
    """An uploaded statement: its name and raw bytes."""

    name: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path) -> "StatementFile":
        """Read a statement file from disk."""
        path = Path(path)
        return cls(name=path.name, content=path.read_bytes())
