"""
Validation and migration of transaction records.

Stored records are plain dictionaries in the shape produced by
Transaction.to_dict(). Records written by older versions may lack an IBAN;
they are migrated when an account number is available and discarded
otherwise.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from ekstre.parsers.bank.models import Transaction, TransactionType
from ekstre.parsers.bank.normalizers import parse_date
from ekstre.parsers.bank.utils import rolling_hash, to_base36

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ['id', 'date', 'description', 'amount', 'balance', 'type', 'rawData']
VALID_TYPES = {t.value for t in TransactionType}


@dataclass
class SchemaValidationResult:
    """Outcome of validating one record or a whole stored collection."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    # True when stored data is unusable and must be cleared
    requires_clear: bool = False


def validate_transaction(txn: Any) -> bool:
    """
    Structural check of a Transaction before it is trusted.

    Returns:
        True if id, date, description, amount, type and iban are well-formed
    """
    if not isinstance(txn, Transaction):
        return False
    return (
        isinstance(txn.id, str)
        and isinstance(txn.date, date)
        and isinstance(txn.description, str)
        and isinstance(txn.amount, Decimal)
        and txn.amount.is_finite()
        and isinstance(txn.type, TransactionType)
        and isinstance(txn.iban, str)
        and len(txn.iban) > 0
    )


def validate_transaction_schema(record: Dict[str, Any]) -> SchemaValidationResult:
    """Validate a stored transaction record."""
    result = SchemaValidationResult()

    if not isinstance(record, dict):
        return SchemaValidationResult(False, ["Transaction is not an object"], True)

    if 'iban' not in record:
        result.errors.append("Transaction missing required field: iban")
        result.requires_clear = True

    if record.get('iban') is None:
        result.errors.append("Transaction has null or undefined IBAN")
        result.requires_clear = True

    for name in REQUIRED_FIELDS:
        if name not in record:
            result.errors.append(f"Transaction missing required field: {name}")
            result.requires_clear = True

    iban = record.get('iban')
    if iban and not isinstance(iban, str):
        result.errors.append("Transaction IBAN must be a string")
        result.requires_clear = True

    txn_type = record.get('type')
    if txn_type and txn_type not in VALID_TYPES:
        result.errors.append(f"Invalid transaction type: {txn_type}")

    result.is_valid = not result.errors
    return result


def validate_stored_data(data: Any) -> SchemaValidationResult:
    """Validate every record of a stored collection."""
    if not isinstance(data, list):
        return SchemaValidationResult(False, ["Stored data is not an array"], True)

    result = SchemaValidationResult()
    for i, record in enumerate(data):
        validation = validate_transaction_schema(record)
        if not validation.is_valid:
            result.errors.append(f"Transaction at index {i}: {', '.join(validation.errors)}")
            if validation.requires_clear:
                result.requires_clear = True

    result.is_valid = not result.errors
    return result


def generate_transaction_id(record: Dict[str, Any]) -> str:
    """
    Fallback id for records stored without one.

    Hashes the JSON of date, description, amount and balance (absent keys
    omitted) and renders the absolute value in base 36.
    """
    payload = {
        key: _json_value(record[key])
        for key in ('date', 'description', 'amount', 'balance')
        if key in record
    }
    data = json.dumps(payload, ensure_ascii=False, separators=(',', ':'))
    return to_base36(abs(rolling_hash(data)))


def _json_value(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def migrate_transaction(record: Dict[str, Any]) -> Optional[Transaction]:
    """
    Rebuild a Transaction from a stored record.

    Returns:
        The migrated transaction, or None when the record has neither an
        IBAN nor an account number (such records must be discarded)
    """
    if not isinstance(record, dict):
        return None
    if not record.get('iban') and not record.get('accountNumber'):
        return None

    try:
        raw_type = record.get('type') or TransactionType.UNKNOWN.value
        return Transaction(
            id=record.get('id') or generate_transaction_id(record),
            date=parse_date(record['date']) if record.get('date') else None,
            description=record.get('description') or "",
            amount=_to_decimal(record.get('amount')),
            balance=_to_decimal(record.get('balance')),
            type=TransactionType(raw_type) if raw_type in VALID_TYPES else TransactionType.UNKNOWN,
            raw_data=tuple(record.get('rawData') or []),
            iban=record.get('iban') or f"Account: {record['accountNumber']}",
            bank_type=record.get('bankType'),
            uploaded_at=_to_datetime(record.get('uploadedAt')),
        )
    except (TypeError, ValueError) as e:
        logger.warning(f"Cannot migrate transaction {record.get('id')!r}: {e}")
        return None


def _to_decimal(value: Any) -> Decimal:
    """Numeric coercion; anything non-numeric becomes zero."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


def _to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None
