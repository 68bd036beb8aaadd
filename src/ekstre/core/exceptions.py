"""
Custom exceptions for ekstre.

All ekstre-specific exceptions inherit from EkstreError for easy catching.
"""

from typing import List, Optional


class EkstreError(Exception):
    """Base exception for all ekstre errors."""

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code


class UnsupportedBankError(EkstreError):
    """Raised when an explicit bank type is not registered."""

    def __init__(self, bank_type: str, code: str = "UNSUPPORTED_BANK"):
        super().__init__(f"Unsupported bank type: {bank_type}", code)
        self.bank_type = bank_type


class BankDetectionError(EkstreError):
    """Raised when no registered parser recognises the file name."""

    def __init__(
        self,
        file_name: str = "",
        message: str = "Unable to detect bank type. Please select bank type manually.",
        code: str = "BANK_NOT_DETECTED"
    ):
        super().__init__(message, code)
        self.file_name = file_name


class WorkbookReadError(EkstreError):
    """Raised when spreadsheet bytes cannot be decoded into a grid."""

    def __init__(self, message: str, code: str = "WORKBOOK_READ_ERROR"):
        super().__init__(message, code)


class StatementParseError(EkstreError):
    """
    Raised when a statement cannot be imported.

    Wraps structural failures (missing IBAN or header), empty results and
    unexpected exceptions raised after a parser was selected.
    """

    def __init__(
        self,
        bank_type: str,
        reason: str,
        errors: Optional[List[str]] = None,
        code: str = "STATEMENT_PARSE_ERROR"
    ):
        super().__init__(f"Error parsing {bank_type} bank statement: {reason}", code)
        self.bank_type = bank_type
        self.reason = reason
        self.errors = list(errors or [])


class ValidationError(EkstreError):
    """Data validation errors."""

    def __init__(self, message: str, field: str = None, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code)
        self.field = field
