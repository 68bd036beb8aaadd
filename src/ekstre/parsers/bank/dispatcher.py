"""
Statement dispatcher.

Entry point for importing one uploaded statement: selects the bank parser
(explicitly or from the file name), decodes the spreadsheet, runs the parser
and turns structural problems into a single StatementParseError.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from ekstre.core.exceptions import StatementParseError
from ekstre.core.preferences import ParserPreferences
from ekstre.core.workbook import first_sheet, read_workbook
from ekstre.parsers.bank.models import ParseResult, StatementFile
from ekstre.parsers.bank.registry import BankInfo, ParserRegistry, registry as default_registry

logger = logging.getLogger(__name__)

NO_TRANSACTIONS = "No valid transactions found in the file"


class StatementDispatcher:
    """
    Parses statement files with the registered bank parsers.

    Example:
        dispatcher = StatementDispatcher()
        result = dispatcher.parse_file(Path("ziraat_ekstre.xlsx"))
        for txn in result.transactions:
            print(txn.date, txn.amount, txn.description)
    """

    def __init__(
        self,
        registry: Optional[ParserRegistry] = None,
        preferences: Optional[ParserPreferences] = None
    ):
        self.registry = registry or default_registry
        self.preferences = preferences or ParserPreferences.load()

    def supported_banks(self) -> List[BankInfo]:
        return self.registry.supported_banks()

    def parse_file(
        self,
        file: Union[StatementFile, Path, str],
        bank_type: Optional[str] = None
    ) -> ParseResult:
        """
        Parse one statement file.

        Args:
            file: Uploaded file, or a path to read it from
            bank_type: Registered bank type, or None/'auto' to detect it
                from the file name

        Returns:
            ParseResult stamped with file name, size and parse time

        Raises:
            UnsupportedBankError: Unknown explicit bank type
            BankDetectionError: No bank matches the file name
            StatementParseError: Anything that goes wrong once a parser is chosen
        """
        name = file.name if isinstance(file, StatementFile) else Path(file).name

        if bank_type is None:
            bank_type = self.preferences.default_bank_type

        parser = self.registry.resolve(name, bank_type, self.preferences)
        logger.info(f"Parsing {name} as {parser.bank_type}")

        try:
            if not isinstance(file, StatementFile):
                file = StatementFile.from_path(file)
            grid = first_sheet(read_workbook(file.content, file.name))
            result = parser.parse(grid)

            if result.errors:
                raise StatementParseError(parser.bank_type, "; ".join(result.errors), result.errors)

            if not result.transactions:
                raise StatementParseError(parser.bank_type, NO_TRANSACTIONS)
        except StatementParseError as e:
            logger.error(f"Failed to parse {name}: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to parse {name}: {e}")
            raise StatementParseError(parser.bank_type, str(e)) from e

        parsed_at = datetime.now(timezone.utc)
        transactions = [
            replace(txn, bank_type=parser.bank_type, uploaded_at=parsed_at)
            for txn in result.transactions
        ]

        logger.info(f"Parsed {len(transactions)} transactions from {file.name} ({result.iban})")
        return replace(
            result,
            transactions=transactions,
            file_name=file.name,
            file_size=file.size,
            parsed_at=parsed_at,
        )


def parse_file(
    file: Union[StatementFile, Path, str],
    bank_type: Optional[str] = None,
    preferences: Optional[ParserPreferences] = None
) -> ParseResult:
    """Parse one statement file with the default registry."""
    return StatementDispatcher(preferences=preferences).parse_file(file, bank_type)
