"""
Shared utilities for workbook ingestion: header detection, cell coercion,
column renaming.
"""

import logging
import re
from datetime import date, datetime
from typing import Any

import pandas as pd

from ..config import PERIOD_FORMAT

logger = logging.getLogger(__name__)


def to_snake_case(name: str) -> str:
    """Convert a column header to snake_case.

    Handles spaces, parentheses, slashes, and CamelCase.
    """
    s = str(name).strip()
    s = s.replace("/", "_").replace("(", "").replace(")", "")
    s = s.replace("-", "_").replace(".", "_")
    # Collapse whitespace and special chars to underscores
    s = re.sub(r"[^a-zA-Z0-9]+", "_", s)
    # CamelCase to snake_case
    s = re.sub(r"([a-z])([A-Z])", r"\1_\2", s)
    s = s.lower().strip("_")
    s = re.sub(r"_+", "_", s)
    return s


def find_header_row(
    sheet,
    signature: set[str],
    max_rows: int = 20,
) -> int | None:
    """Scan an openpyxl sheet for the row containing signature headers.

    Returns the 1-based row index where at least two cells (after
    snake_case normalisation) match `signature`, or None if not found
    within `max_rows`.
    """
    for row_idx in range(1, max_rows + 1):
        matches = 0
        for cell in sheet[row_idx]:
            if cell.value is not None and to_snake_case(cell.value) in signature:
                matches += 1
        if matches >= 2:
            return row_idx
    return None


def safe_str(val: Any) -> str | None:
    """Coerce a cell to a stripped string; blanks become None.

    Whole-number floats (ids typed into Excel) lose their trailing '.0'.
    """
    if val is None:
        return None
    if isinstance(val, float) and val.is_integer():
        val = int(val)
    s = str(val).strip()
    return s or None


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values."""
    if val is None:
        return None
    if isinstance(val, str):
        # Skip formula strings and text labels
        val = val.strip()
        if val.startswith("=") or not val:
            return None
        # Handle percentage strings like "78%"
        if val.endswith("%"):
            try:
                return float(val[:-1])
            except ValueError:
                return None
        try:
            return float(val)
        except ValueError:
            return None
    try:
        return float(val)
    except (ValueError, TypeError):
        return None


def safe_bool(val: Any) -> bool:
    """Interpret yes/no style cells; anything unrecognised is False."""
    if isinstance(val, bool):
        return val
    if isinstance(val, (int, float)):
        return val == 1
    if isinstance(val, str):
        return val.strip().lower() in {"true", "yes", "y", "1", "x"}
    return False


def normalise_period(val: Any) -> str | None:
    """Convert a period cell to a 'YYYY-MM' key where possible.

    Date cells and Excel serial numbers (1899-12-30 epoch) are formatted
    as their month. Text is returned stripped and unvalidated, so
    malformed keys reach the fact table and are flagged there.
    """
    if val is None:
        return None
    if isinstance(val, (datetime, date, pd.Timestamp)):
        return pd.Timestamp(val).strftime(PERIOD_FORMAT)
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        try:
            ts = pd.Timestamp("1899-12-30") + pd.Timedelta(days=int(val))
        except (ValueError, OverflowError):
            logger.warning("Could not convert serial number %s to a period", val)
            return None
        return ts.strftime(PERIOD_FORMAT)
    return safe_str(val)
