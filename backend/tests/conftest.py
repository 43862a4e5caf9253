from __future__ import annotations

import asyncio
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from data_connector.google_sheets.utils import (
    build_a1_range,
    convert_column_letter_to_index,
    parse_cell_reference,
    split_range_notation,
)
from export_shared.exceptions import TableAlreadyExists
from export_shared.interfaces.tabular_store import TabularStore
from export_shared.models.workbook import AppendResult, SheetProperties

WORKBOOK_ID = "wb-test"


def pytest_configure() -> None:
    # Keep a developer's .env from leaking into settings-driven tests
    os.environ.setdefault("DOCKER_CONTAINER", "true")


def _bounds(cells: str) -> Tuple[int, Optional[int], int, int]:
    """(row_start, row_end or None for open-ended, col_start, col_end)"""
    first, _, last = cells.partition(":")
    row_start, col_start = parse_cell_reference(first)
    if not last:
        return row_start, row_start + 1, col_start, col_start + 1
    try:
        row_last, col_last = parse_cell_reference(last)
        return row_start, row_last + 1, col_start, col_last + 1
    except ValueError:
        return row_start, None, col_start, convert_column_letter_to_index(last) + 1


class _Tab:
    def __init__(self, sheet_id: int, title: str) -> None:
        self.sheet_id = sheet_id
        self.title = title
        self.cells: Dict[int, Dict[int, str]] = {}

    def row(self, index: int, width: int) -> List[str]:
        row = self.cells.get(index, {})
        return [row.get(c, "") for c in range(width)]

    def occupied_rows(self) -> List[int]:
        return sorted(r for r, cols in self.cells.items() if any(v != "" for v in cols.values()))


class InMemoryWorkbook(TabularStore):
    """
    Workbook double with the two guarantees the sink relies on: unique tab
    titles and atomic appends. Every call yields to the event loop first so
    concurrent submissions interleave.
    """

    def __init__(self) -> None:
        self.tabs: Dict[str, _Tab] = {}
        self.calls: List[Tuple[str, str]] = []
        self.format_batches: List[List[Dict[str, Any]]] = []
        self.failures: Dict[str, Exception] = {}
        self.ack_override: Optional[AppendResult] = None
        self.report_created_properties = True
        self.hide_from_listing: set = set()
        self._next_sheet_id = 100
        self._lock = asyncio.Lock()

    # -- helpers -----------------------------------------------------------

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def add_tab(self, title: str) -> _Tab:
        tab = _Tab(self._next_sheet_id, title)
        self._next_sheet_id += 1
        self.tabs[title] = tab
        return tab

    def rows(self, title: str, width: int) -> List[List[str]]:
        tab = self.tabs[title]
        occupied = tab.occupied_rows()
        if not occupied:
            return []
        return [tab.row(r, width) for r in range(occupied[-1] + 1)]

    async def _enter(self, operation: str, detail: str) -> None:
        await asyncio.sleep(0)
        self.calls.append((operation, detail))
        failure = self.failures.get(operation)
        if failure is not None:
            raise failure

    def _tab_for(self, a1_range: str) -> Tuple[_Tab, Tuple[int, Optional[int], int, int]]:
        title, cells = split_range_notation(a1_range)
        return self.tabs[title], _bounds(cells)

    # -- TabularStore ------------------------------------------------------

    async def list_tables(self, workbook_id: str) -> List[SheetProperties]:
        await self._enter("list_tables", workbook_id)
        return [
            SheetProperties(sheet_id=tab.sheet_id, title=tab.title, index=i)
            for i, tab in enumerate(self.tabs.values())
            if tab.title not in self.hide_from_listing
        ]

    async def create_table(self, workbook_id: str, title: str) -> Optional[SheetProperties]:
        await self._enter("create_table", title)
        async with self._lock:
            # Sheets compares titles case-insensitively when creating tabs
            if title.casefold() in {t.casefold() for t in self.tabs}:
                raise TableAlreadyExists(title)
            tab = self.add_tab(title)
        if not self.report_created_properties:
            return None
        return SheetProperties(sheet_id=tab.sheet_id, title=title)

    async def get_values(self, workbook_id: str, a1_range: str) -> List[List[Any]]:
        await self._enter("get_values", a1_range)
        tab, (row_start, row_end, col_start, col_end) = self._tab_for(a1_range)
        last = row_end if row_end is not None else (max(tab.occupied_rows(), default=row_start) + 1)
        values = []
        for r in range(row_start, last):
            row = [tab.cells.get(r, {}).get(c, "") for c in range(col_start, col_end)]
            while row and row[-1] == "":
                row.pop()
            values.append(row)
        while values and not values[-1]:
            values.pop()
        return values

    async def write_range(self, workbook_id: str, a1_range: str, values: Sequence[Sequence[Any]]) -> None:
        await self._enter("write_range", a1_range)
        tab, (row_start, _, col_start, _) = self._tab_for(a1_range)
        for dr, row in enumerate(values):
            for dc, value in enumerate(row):
                tab.cells.setdefault(row_start + dr, {})[col_start + dc] = str(value)

    async def append_to_range(
        self, workbook_id: str, a1_range: str, values: Sequence[Sequence[Any]]
    ) -> AppendResult:
        await self._enter("append_to_range", a1_range)
        async with self._lock:
            tab, (anchor_row, _, col_start, col_end) = self._tab_for(a1_range)
            below = [r for r in tab.occupied_rows() if r >= anchor_row]
            target = below[-1] + 1 if below else anchor_row
            for dr, row in enumerate(values):
                for dc, value in enumerate(row):
                    tab.cells.setdefault(target + dr, {})[col_start + dc] = str(value)

        if self.ack_override is not None:
            return self.ack_override
        return AppendResult(
            table_range=a1_range,
            updated_range=build_a1_range(tab.title, target, target + len(values), col_start, col_end),
            updated_rows=len(values),
            updated_columns=col_end - col_start,
        )

    async def batch_format(self, workbook_id: str, requests: Sequence[Dict[str, Any]]) -> None:
        await self._enter("batch_format", str(len(requests)))
        self.format_batches.append(list(requests))


@pytest.fixture
def workbook() -> InMemoryWorkbook:
    return InMemoryWorkbook()
