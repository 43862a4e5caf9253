"""
Row Appender

Writes one record below the existing rows using the store's atomic append.
The client never counts rows itself: two concurrent submissions for the same
table each get their own row. Appends are not retried, since a retry after an
unknown outcome could write the record twice.
"""

import logging
from typing import Any, Sequence, Tuple

from export_shared.exceptions import AmbiguousAppendPosition
from export_shared.interfaces.tabular_store import TabularStore

from .layout import SheetLayout
from .models import CellRegion, TableLocator, stringify_cell
from .range_parser import resolve_appended_region

logger = logging.getLogger(__name__)


class RowAppender:
    def __init__(self, store: TabularStore, workbook_id: str, layout: SheetLayout):
        self._store = store
        self.workbook_id = workbook_id
        self.layout = layout

    async def append(self, locator: TableLocator, values: Sequence[Any]) -> CellRegion:
        """
        Append `values` as one row

        Raises:
            BackendUnavailable: the append call failed (nothing is known to be written)
            AmbiguousAppendPosition: the row was written but its position is unclear
        """
        if not values:
            raise ValueError("Cannot append an empty row")

        row = [stringify_cell(v) for v in values]
        anchor = self.layout.append_anchor(locator, len(row))
        ack = await self._store.append_to_range(self.workbook_id, anchor, [row])

        fallback = self.layout.first_body_row(locator.table_id, len(row))
        region = resolve_appended_region(ack, locator, expected_rows=1, fallback=fallback)
        logger.debug(f"Appended row {region.display_row} to '{locator.table_name}'")
        return region

    async def append_record(self, locator: TableLocator, values: Sequence[Any]) -> Tuple[CellRegion, bool]:
        """
        Append and always return a region

        Returns:
            (region, confirmed). `confirmed` is False when the acknowledgement
            was ambiguous and the first body row was substituted.
        """
        try:
            return await self.append(locator, values), True
        except AmbiguousAppendPosition as e:
            logger.warning(
                f"Row appended to '{locator.table_name}' but {e.message}; "
                f"using row {e.fallback_region.display_row} for styling"
            )
            return e.fallback_region, False
