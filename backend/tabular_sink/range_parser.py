"""
Append acknowledgement -> written region

The store's structured coordinates are trusted first. Only when it reports
nothing but an A1 string ("'alice'!A3:B3") is that string parsed, and only
here.
"""

from typing import Optional, Tuple

from data_connector.google_sheets.utils import parse_cell_reference, split_range_notation
from export_shared.exceptions import AmbiguousAppendPosition
from export_shared.models.workbook import AppendResult

from .models import CellRegion, TableLocator

Bounds = Tuple[int, int, int, int]


def parse_updated_range(a1_range: Optional[str]) -> Optional[Tuple[Optional[str], Bounds]]:
    """
    Parse a bounded A1 range

    Returns:
        (sheet_title or None, (row_start, row_end, col_start, col_end)) with
        zero-based half-open bounds, or None when the string is missing or
        not a bounded cell range (e.g. whole columns "A:B")
    """
    if not a1_range or not isinstance(a1_range, str):
        return None

    title, cells = split_range_notation(a1_range.strip())
    first, _, last = cells.partition(":")
    try:
        top, left = parse_cell_reference(first)
        bottom, right = parse_cell_reference(last) if last else (top, left)
    except ValueError:
        return None

    row_start, row_end = min(top, bottom), max(top, bottom) + 1
    col_start, col_end = min(left, right), max(left, right) + 1
    return title, (row_start, row_end, col_start, col_end)


def resolve_appended_region(
    ack: AppendResult,
    locator: TableLocator,
    expected_rows: int,
    fallback: CellRegion,
) -> CellRegion:
    """
    Determine the region an append wrote

    Raises:
        AmbiguousAppendPosition: the acknowledgement is missing, malformed,
            names another table, or spans a different number of rows than
            were sent. The exception carries `fallback`.
    """
    grid = ack.updated_grid
    if grid is not None:
        if grid.sheet_id not in (None, locator.table_id):
            raise _ambiguous("acknowledgement refers to another table", ack, fallback)
        bounds = (grid.start_row_index, grid.end_row_index, grid.start_column_index, grid.end_column_index)
    else:
        parsed = parse_updated_range(ack.updated_range)
        if parsed is None:
            raise _ambiguous("acknowledgement has no usable range", ack, fallback)
        title, bounds = parsed
        if title is not None and title != locator.table_name:
            raise _ambiguous("acknowledgement refers to another table", ack, fallback)

    row_start, row_end, col_start, col_end = bounds
    if row_end - row_start != expected_rows:
        raise _ambiguous(
            f"acknowledgement spans {row_end - row_start} rows, expected {expected_rows}", ack, fallback
        )
    if ack.updated_rows is not None and ack.updated_rows != expected_rows:
        raise _ambiguous(f"store reports {ack.updated_rows} updated rows", ack, fallback)

    try:
        return CellRegion(locator.table_id, row_start, row_end, col_start, col_end)
    except ValueError:
        raise _ambiguous("acknowledgement range is empty", ack, fallback) from None


def _ambiguous(reason: str, ack: AppendResult, fallback: CellRegion) -> AmbiguousAppendPosition:
    return AmbiguousAppendPosition(
        f"Cannot determine appended row: {reason}",
        fallback_region=fallback,
        acknowledgement=ack.summary(),
    )
