"""
Spreadsheet decoding.

Turns uploaded statement bytes into grids: one list of rows per sheet, each
row a list of cell values (None, str, int, float or datetime).
"""

import io
import logging
import math
import warnings
import zipfile
from datetime import date, datetime
from pathlib import Path
from typing import Any, List

import pandas as pd
from openpyxl import load_workbook

from ekstre.core.exceptions import WorkbookReadError

logger = logging.getLogger(__name__)

Grid = List[List[Any]]

OPENPYXL_EXTENSIONS = {".xlsx", ".xlsm"}


def read_workbook(content: bytes, filename: str) -> List[Grid]:
    """
    Decode spreadsheet bytes into a list of sheet grids.

    Args:
        content: Raw file bytes
        filename: Original file name (extension selects the reader)

    Returns:
        List of grids, first sheet first. Always contains at least one grid.

    Raises:
        WorkbookReadError: If the content cannot be decoded
    """
    ext = Path(filename).suffix.lower()

    try:
        if ext in OPENPYXL_EXTENSIONS:
            sheets = _read_openpyxl(content)
        elif ext == ".xls":
            sheets = _read_xls(content)
        elif ext == ".csv":
            sheets = [_read_csv(content)]
        elif zipfile.is_zipfile(io.BytesIO(content)):
            sheets = _read_openpyxl(content)
        else:
            sheets = [_read_csv(content)]
    except WorkbookReadError:
        raise
    except Exception as e:
        logger.warning(f"Failed to decode spreadsheet {filename}: {e}")
        raise WorkbookReadError(
            f"Unable to read spreadsheet contents from {filename}: {e}"
        ) from e

    if not sheets:
        sheets = [[]]

    logger.debug(f"Decoded {filename}: {len(sheets)} sheet(s), {len(sheets[0])} row(s) in first sheet")
    return sheets


def first_sheet(sheets: List[Grid]) -> Grid:
    """Return the first sheet grid (the only one parsers read)."""
    return sheets[0] if sheets else []


def _read_openpyxl(content: bytes) -> List[Grid]:
    """Read xlsx content with openpyxl, values only."""
    with warnings.catch_warnings():
        # Bank exports often carry styles openpyxl does not understand
        warnings.filterwarnings('ignore', category=UserWarning, module='openpyxl')
        wb = load_workbook(io.BytesIO(content), data_only=True)

    try:
        return [
            [_trim_row([normalize_cell(value) for value in row]) for row in ws.iter_rows(values_only=True)]
            for ws in wb.worksheets
        ]
    finally:
        wb.close()


def _read_xls(content: bytes) -> List[Grid]:
    """Read legacy xls content through pandas (xlrd engine)."""
    frames = pd.read_excel(io.BytesIO(content), header=None, sheet_name=None)
    return [_frame_to_grid(df) for df in frames.values()]


def _read_csv(content: bytes) -> Grid:
    """Read CSV content; every cell is kept as text."""
    text = _decode_bytes(content)
    if not text.strip():
        return []
    df = pd.read_csv(
        io.StringIO(text),
        header=None,
        dtype=str,
        keep_default_na=False,
        sep=_sniff_delimiter(text),
        engine="python",
    )
    return _frame_to_grid(df)


def _frame_to_grid(df: pd.DataFrame) -> Grid:
    return [_trim_row([normalize_cell(value) for value in row]) for row in df.itertuples(index=False, name=None)]


def _trim_row(row: List[Any]) -> List[Any]:
    """Drop trailing empty cells so rows end at their last value."""
    end = len(row)
    while end and row[end - 1] is None:
        end -= 1
    return row[:end]


def normalize_cell(value: Any) -> Any:
    """Normalise a decoded cell to None, str, int, float or datetime."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return None
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            return None
        return float(value)
    if isinstance(value, int):
        return value
    if hasattr(value, "item"):
        # numpy scalars
        return normalize_cell(value.item())
    if isinstance(value, str):
        return value if value.strip() else ""
    return str(value)


def _sniff_delimiter(text: str) -> str:
    """Pick the most frequent of the usual delimiters on the first line."""
    lines = text.splitlines()
    first_line = lines[0] if lines else ""
    best = max([";", "\t", ","], key=first_line.count)
    return best if first_line.count(best) else ","


def _decode_bytes(data: bytes) -> str:
    for encoding in ("utf-8-sig", "cp1254", "latin-1"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="ignore")
