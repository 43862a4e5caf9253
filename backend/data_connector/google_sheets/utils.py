"""
Google Sheets Connector - A1 notation and URL helpers
"""

import re
from typing import Optional, Tuple
from urllib.parse import quote

SHEETS_API_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"

_PLAIN_TITLE = re.compile(r"^[A-Za-z0-9_]+$")
_CELL_REFERENCE = re.compile(r"^\$?([A-Za-z]+)\$?(\d+)$")


def quote_sheet_title(title: str) -> str:
    """
    Quote a worksheet title for use in A1 notation

    Titles with spaces or punctuation must be wrapped in single quotes, and
    embedded quotes are doubled ("Bob's" -> 'Bob''s').
    """
    if _PLAIN_TITLE.match(title) and not _CELL_REFERENCE.match(title):
        return title
    return "'" + title.replace("'", "''") + "'"


def unquote_sheet_title(token: str) -> str:
    """Inverse of `quote_sheet_title`"""
    if len(token) >= 2 and token.startswith("'") and token.endswith("'"):
        return token[1:-1].replace("''", "'")
    return token


def split_range_notation(range_str: str) -> Tuple[Optional[str], str]:
    """
    Split an A1 range into its worksheet title and cell range

    Args:
        range_str: "'My tab'!A1:Z100" or "A1:Z100"

    Returns:
        (sheet_title or None, cell_range)
    """
    if "!" not in range_str:
        return None, range_str
    sheet_token, _, cell_range = range_str.rpartition("!")
    return unquote_sheet_title(sheet_token), cell_range


def convert_column_letter_to_index(letter: str) -> int:
    """
    Convert a column letter to a zero-based index (A=0, B=1, ..., Z=25, AA=26, ...)
    """
    result = 0
    for char in letter.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def convert_index_to_column_letter(index: int) -> str:
    """
    Convert a zero-based column index to its letter
    """
    if index < 0:
        raise ValueError(f"Column index must be >= 0, got {index}")

    result = ""
    index += 1  # 1-based for calculation

    while index > 0:
        index -= 1
        result = chr(index % 26 + ord("A")) + result
        index //= 26

    return result


def parse_cell_reference(reference: str) -> Tuple[int, int]:
    """
    Parse "B12" into zero-based (row_index, column_index)

    Raises:
        ValueError: not a single-cell reference
    """
    match = _CELL_REFERENCE.match(reference.strip())
    if not match:
        raise ValueError(f"Not a cell reference: {reference!r}")
    column, row = match.groups()
    row_number = int(row)
    if row_number < 1:
        raise ValueError(f"Row numbers start at 1: {reference!r}")
    return row_number - 1, convert_column_letter_to_index(column)


def build_a1_range(
    title: str,
    row_start: int,
    row_end: Optional[int],
    col_start: int,
    col_end: int,
) -> str:
    """
    Build an A1 range from zero-based, half-open coordinates

    `row_end=None` produces an open-ended range ("'t'!A3:D") that covers every
    row from `row_start` down.
    """
    if col_end <= col_start:
        raise ValueError("col_end must be greater than col_start")
    first = f"{convert_index_to_column_letter(col_start)}{row_start + 1}"
    last_column = convert_index_to_column_letter(col_end - 1)
    last = last_column if row_end is None else f"{last_column}{row_end}"
    return f"{quote_sheet_title(title)}!{first}:{last}"


def build_sheets_metadata_url(sheet_id: str, base_url: str = SHEETS_API_BASE_URL) -> str:
    return f"{base_url}/{sheet_id}"


def build_sheets_values_url(
    sheet_id: str,
    range_name: str,
    suffix: str = "",
    base_url: str = SHEETS_API_BASE_URL,
) -> str:
    """
    Build a `values` endpoint URL; the range is fully percent-encoded so that
    its colon cannot be confused with a `:append` style suffix
    """
    return f"{base_url}/{sheet_id}/values/{quote(range_name, safe='')}{suffix}"


def build_batch_update_url(sheet_id: str, base_url: str = SHEETS_API_BASE_URL) -> str:
    return f"{base_url}/{sheet_id}:batchUpdate"
