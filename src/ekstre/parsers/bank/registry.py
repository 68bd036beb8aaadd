"""
Registry of supported bank statement parsers.

Each bank is described by a BankParserSpec: a factory building a fresh
parser plus the file-name predicate and names used for detection and
display. Registration order is detection order.

Example:
    # Register a parser
    registry.register(BankParserSpec('akbank', 'Akbank', 'Akbank', AkbankParser, can_parse))

    # Get parser by bank type
    parser = registry.get_parser('ziraat')

    # Auto-detect parser from a file name
    parser = registry.detect_parser('ziraat_ekstre.xlsx')
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ekstre.core.exceptions import BankDetectionError, UnsupportedBankError
from ekstre.core.preferences import ParserPreferences
from ekstre.parsers.bank import enpara, ziraat
from ekstre.parsers.bank.base import BankStatementParser
from ekstre.parsers.bank.enpara import EnparaParser
from ekstre.parsers.bank.ziraat import ZiraatParser

logger = logging.getLogger(__name__)

AUTO_DETECT = "auto"


@dataclass(frozen=True)
class BankParserSpec:
    """Everything the dispatcher needs to know about one bank."""
    bank_type: str
    display_name: str
    short_name: str
    factory: Callable[..., BankStatementParser]
    can_parse: Optional[Callable[[str], bool]] = None

    def create(self, preferences: Optional[ParserPreferences] = None) -> BankStatementParser:
        """Build a fresh parser instance."""
        return self.factory(preferences)

    def info(self) -> "BankInfo":
        return BankInfo(self.bank_type, self.display_name, self.short_name, self.can_parse is not None)


@dataclass(frozen=True)
class BankInfo:
    """Public description of a supported bank."""
    bank_type: str
    display_name: str
    short_name: str
    can_auto_detect: bool = True


class ParserRegistry:
    """Ordered mapping from bank type to parser spec."""

    def __init__(self, specs: Optional[List[BankParserSpec]] = None):
        self._specs: Dict[str, BankParserSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: BankParserSpec) -> None:
        """
        Register a bank parser.

        Re-registering a bank type replaces the previous spec in place.
        """
        self._specs[spec.bank_type] = spec
        logger.debug(f"Registered parser: {spec.bank_type}")

    def get(self, bank_type: str) -> Optional[BankParserSpec]:
        return self._specs.get(bank_type)

    def __contains__(self, bank_type: str) -> bool:
        return bank_type in self._specs

    def __iter__(self):
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def get_parser(
        self,
        bank_type: str,
        preferences: Optional[ParserPreferences] = None
    ) -> BankStatementParser:
        """
        Get parser instance by bank type.

        Raises:
            UnsupportedBankError: If the bank type is not registered
        """
        spec = self._specs.get(bank_type)
        if spec is None:
            raise UnsupportedBankError(bank_type)
        return spec.create(preferences)

    def detect(self, filename: str) -> Optional[BankParserSpec]:
        """
        First registered spec whose predicate accepts the file name.

        Specs registered without a predicate are only reachable explicitly.
        """
        for spec in self._specs.values():
            if spec.can_parse is not None and spec.can_parse(filename):
                return spec
        return None

    def detect_parser(
        self,
        filename: str,
        preferences: Optional[ParserPreferences] = None
    ) -> BankStatementParser:
        """
        Auto-detect the parser for a file name.

        Raises:
            BankDetectionError: If no registered bank matches
        """
        spec = self.detect(filename)
        if spec is None:
            raise BankDetectionError(filename)
        logger.debug(f"Detected {spec.bank_type} for {filename}")
        return spec.create(preferences)

    def resolve(
        self,
        filename: str,
        bank_type: Optional[str] = None,
        preferences: Optional[ParserPreferences] = None
    ) -> BankStatementParser:
        """Explicit bank type when given (and not 'auto'), else detection."""
        if bank_type and bank_type != AUTO_DETECT:
            return self.get_parser(bank_type, preferences)
        return self.detect_parser(filename, preferences)

    def supported_banks(self) -> List[BankInfo]:
        return [spec.info() for spec in self._specs.values()]


ZIRAAT = BankParserSpec(
    bank_type=ZiraatParser.BANK_TYPE,
    display_name=ziraat.DISPLAY_NAME,
    short_name=ziraat.SHORT_NAME,
    factory=ZiraatParser,
    can_parse=ziraat.can_parse,
)

ENPARA = BankParserSpec(
    bank_type=EnparaParser.BANK_TYPE,
    display_name=enpara.DISPLAY_NAME,
    short_name=enpara.SHORT_NAME,
    factory=EnparaParser,
    can_parse=enpara.can_parse,
)


def default_registry() -> ParserRegistry:
    """A new registry holding the built-in banks (Ziraat first)."""
    return ParserRegistry([ZIRAAT, ENPARA])


# Shared registry used by the module-level helpers and the dispatcher
registry = default_registry()


def get_bank_display_name(bank_type: str) -> str:
    """Display name of a bank, or the bank type itself when unknown."""
    spec = registry.get(bank_type)
    return spec.display_name if spec else bank_type


def get_bank_short_name(bank_type: str) -> str:
    """Short name of a bank, or the bank type itself when unknown."""
    spec = registry.get(bank_type)
    return spec.short_name if spec else bank_type


def is_supported_bank_type(bank_type: str) -> bool:
    return bank_type in registry


def supported_bank_types() -> List[str]:
    return [spec.bank_type for spec in registry]


def get_bank_info(bank_type: str) -> Optional[BankInfo]:
    spec = registry.get(bank_type)
    if spec is None:
        return None
    return spec.info()
