"""
Fixed geometry of a backing table

Row 0 is kept free for a title, row 1 holds the header, data starts at row 2.
"""

from dataclasses import dataclass

from data_connector.google_sheets.utils import build_a1_range

from .models import CellRegion, TableLocator


@dataclass(frozen=True)
class SheetLayout:
    header_row_index: int = 1
    body_prefill_rows: int = 998

    def __post_init__(self) -> None:
        if self.header_row_index < 0:
            raise ValueError("header_row_index must be >= 0")
        if self.body_prefill_rows < 1:
            raise ValueError("body_prefill_rows must be >= 1")

    @property
    def first_body_row_index(self) -> int:
        return self.header_row_index + 1

    def header_region(self, table_id: int, width: int) -> CellRegion:
        return CellRegion(table_id, self.header_row_index, self.header_row_index + 1, 0, width)

    def body_region(self, table_id: int, width: int) -> CellRegion:
        """Forward-looking area that receives default body formatting"""
        start = self.first_body_row_index
        return CellRegion(table_id, start, start + self.body_prefill_rows, 0, width)

    def first_body_row(self, table_id: int, width: int) -> CellRegion:
        """Region reported for an append whose position could not be determined"""
        start = self.first_body_row_index
        return CellRegion(table_id, start, start + 1, 0, width)

    def header_range(self, locator: TableLocator, width: int) -> str:
        row = self.header_row_index
        return build_a1_range(locator.table_name, row, row + 1, 0, width)

    def append_anchor(self, locator: TableLocator, width: int) -> str:
        """
        Range handed to the store's append primitive

        It starts at the header row so the store sees header + data as one
        table and appends below its last row.
        """
        return build_a1_range(locator.table_name, self.header_row_index, None, 0, width)
