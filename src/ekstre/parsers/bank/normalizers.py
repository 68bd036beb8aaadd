"""
Locale-aware cell normalizers.

Converts raw statement cells (numbers, Turkish or US formatted strings,
spreadsheet date serials) into Decimal amounts and calendar dates. Neither
function raises: parse_date returns None and parse_amount returns zero when
a value cannot be interpreted.
"""

import logging
import math
import re
import warnings
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import pandas as pd

logger = logging.getLogger(__name__)

# Spreadsheet serial of 1970-01-01
EXCEL_EPOCH_OFFSET = 25569
UNIX_EPOCH = datetime(1970, 1, 1)

TURKISH_DATE_PATTERN = re.compile(r'^(\d{1,2})[./\\](\d{1,2})[./\\](\d{4})$')
DATE_SEPARATORS = re.compile(r'[/\-.]')
LEADING_NUMBER = re.compile(r'^[-+]?(?:\d+\.?\d*|\.\d+)')
NON_NUMERIC = re.compile(r'[^\d,.\-]')
RELATIVE_DATE_WORDS = {"now", "today", "yesterday", "tomorrow"}


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date cell.

    Numbers are spreadsheet serials (25569 == 1970-01-01). Strings are tried
    as DD.MM.YYYY / DD/MM/YYYY first, then generic parsing, then a split on
    separators deciding between DD/MM/YYYY and YYYY-MM-DD by field width.

    Returns:
        A date, or None when the value cannot be interpreted
    """
    if value is None or value is pd.NaT or value == "" or value is False:
        return None

    try:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            if value == 0:
                return None
            return _serial_to_date(float(value))

        date_str = str(value).strip()
        if not date_str:
            return None

        match = TURKISH_DATE_PATTERN.match(date_str)
        if match:
            day, month, year = (int(part) for part in match.groups())
            return _safe_date(year, month, day)

        parsed = _generic_parse(date_str)
        if parsed is not None:
            return parsed

        parts = DATE_SEPARATORS.split(date_str)
        if len(parts) == 3 and all(part.isdigit() for part in parts):
            if len(parts[0]) <= 2 and len(parts[1]) <= 2 and len(parts[2]) == 4:
                return _safe_date(int(parts[2]), int(parts[1]), int(parts[0]))
            return _safe_date(int(parts[0]), int(parts[1]), int(parts[2]))
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Unparseable date {value!r}: {e}")

    return None


def _serial_to_date(serial: float) -> Optional[date]:
    if math.isnan(serial) or math.isinf(serial):
        return None
    return (UNIX_EPOCH + timedelta(days=serial - EXCEL_EPOCH_OFFSET)).date()


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _generic_parse(date_str: str) -> Optional[date]:
    """Generic date-string parsing via pandas; None when it fails."""
    # Bare integers are not dates here (pandas would read them as epoch offsets
    # or YYYYMMDD); relative words would resolve against the clock
    if date_str.lstrip("-").isdigit() or date_str.lower() in RELATIVE_DATE_WORDS:
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(date_str, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert("UTC")
    return parsed.date()


def parse_amount(value: Any) -> Decimal:
    """
    Parse an amount cell into a Decimal.

    Handles parenthesised negatives ``(123,45)``, Turkish ``1.234,56`` and
    US ``1,234.56`` separators. When only a comma is present it is taken as
    the decimal separator.

    Returns:
        The amount, or Decimal("0") for empty or unparseable input
    """
    if value is None or value == "" or value is False:
        return Decimal("0")

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return Decimal("0")
        return Decimal(str(value))
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")

    text = str(value)
    is_negative_parens = "(" in text and ")" in text

    cleaned = NON_NUMERIC.sub("", text)
    if not cleaned or cleaned == "-":
        return Decimal("0")

    if "." in cleaned and "," in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            # Turkish format: 1.234,56
            cleaned = cleaned.replace(".", "").replace(",", ".", 1)
        else:
            # US format: 1,234.56
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".", 1)

    match = LEADING_NUMBER.match(cleaned)
    if not match:
        return Decimal("0")

    try:
        amount = Decimal(match.group(0))
    except InvalidOperation:
        return Decimal("0")

    if is_negative_parens and amount > 0:
        amount = -amount

    return amount
