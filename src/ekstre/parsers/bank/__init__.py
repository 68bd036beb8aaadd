"""
Bank statement parsers for ekstre.

Supports:
- Ziraat Bankası (xlsx, xls, csv)
- Enpara.com (xlsx, xls, csv)
"""

from ekstre.parsers.bank.models import (
    Transaction,
    TransactionType,
    ParseResult,
    StatementFile,
    UNKNOWN_IBAN,
)
from ekstre.parsers.bank.base import BankStatementParser
from ekstre.parsers.bank.ziraat import ZiraatParser
from ekstre.parsers.bank.enpara import EnparaParser
from ekstre.parsers.bank.registry import (
    BankParserSpec,
    BankInfo,
    ParserRegistry,
    registry,
    get_bank_display_name,
    get_bank_short_name,
    get_bank_info,
    is_supported_bank_type,
    supported_bank_types,
)
from ekstre.parsers.bank.dispatcher import StatementDispatcher, parse_file
from ekstre.parsers.bank.utils import consolidate_transactions

__all__ = [
    "Transaction",
    "TransactionType",
    "ParseResult",
    "StatementFile",
    "UNKNOWN_IBAN",
    "BankStatementParser",
    "ZiraatParser",
    "EnparaParser",
    "BankParserSpec",
    "BankInfo",
    "ParserRegistry",
    "registry",
    "get_bank_display_name",
    "get_bank_short_name",
    "get_bank_info",
    "is_supported_bank_type",
    "supported_bank_types",
    "StatementDispatcher",
    "parse_file",
    "consolidate_transactions",
]
